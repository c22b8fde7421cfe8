"""
Data Models
Dataclasses for all entities. These are pure Python objects, no storage logic.

Wire format: dicts use the camelCase keys the dashboard has always stored
(contactUrl, artistName, releaseDate, ...). Optional fields left as None are
omitted from the dict.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


# =============================================================================
# ENUMS & LOOKUP TABLES
# =============================================================================

CONTACT_CATEGORIES = ('Blogger', 'Artist', 'Agency', 'Media', 'Label Artist', 'Platform Curator')
TRACK_STATUSES = ('Signed', 'In Progress', 'Released')
PLAN_STATUSES = ('Planning', 'Pitching', 'Finalizing', 'Released')
METRIC_TRENDS = ('up', 'down', 'neutral')

CATEGORY_LABELS = {
    'Blogger': 'Блогер',
    'Artist': 'Артист',
    'Agency': 'Агентство',
    'Media': 'СМИ',
    'Label Artist': 'Артист лейбла',
    'Platform Curator': 'Куратор',
}

TRACK_STATUS_LABELS = {
    'Signed': 'Подписан',
    'In Progress': 'В процессе',
    'Released': 'Выпущен',
}

PLAN_STATUS_LABELS = {
    'Planning': 'Планирование',
    'Pitching': 'Питчинг',
    'Finalizing': 'Завершение',
    'Released': 'Релиз',
}

GENRES = ('Pop', 'Techno', 'Hip-Hop', 'Indie', 'Rock')
LINK_ICONS = ('fa-link', 'fa-file-pdf', 'fa-folder-open', 'fa-brands fa-spotify', 'fa-brands fa-tiktok')
LINK_COLORS = ('bg-indigo-500', 'bg-emerald-500', 'bg-rose-500', 'bg-blue-500')

# Contact partitions — the three parallel lists a contact can live in
PARTITION_CONTACTS = 'contacts'
PARTITION_LABEL_ARTISTS = 'label_artists'
PARTITION_PLATFORM = 'platform_contacts'
PARTITIONS = (PARTITION_CONTACTS, PARTITION_LABEL_ARTISTS, PARTITION_PLATFORM)


def partition_for(category: str) -> str:
    """Name of the Store list that holds contacts of this category."""
    if category == 'Label Artist':
        return PARTITION_LABEL_ARTISTS
    if category == 'Platform Curator':
        return PARTITION_PLATFORM
    return PARTITION_CONTACTS


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


# =============================================================================
# SERIALISATION HELPERS
# =============================================================================

def _coerce(declared: Any, value: Any) -> Any:
    """Bring a stored value to its field's declared scalar type (str, Optional[str], bool)."""
    if declared is str:
        return '' if value is None else str(value)
    if declared == Optional[str]:
        return None if value is None else str(value)
    if declared is bool:
        return bool(value)
    return value


class _WireMixin:
    """to_dict / from_dict for flat dataclasses with a snake_case → camelCase map."""

    _WIRE_KEYS: Dict[str, str] = {}

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, list):
                value = [v.to_dict() if hasattr(v, 'to_dict') else v for v in value]
            data[self._WIRE_KEYS.get(f.name, f.name)] = value
        return data

    @classmethod
    def _kwargs_from_dict(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        kwargs = {}
        for f in fields(cls):
            key = cls._WIRE_KEYS.get(f.name, f.name)
            if key in data:
                kwargs[f.name] = _coerce(f.type, data[key])
            elif f.name in data:
                kwargs[f.name] = _coerce(f.type, data[f.name])
        return kwargs

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(**cls._kwargs_from_dict(data))


# =============================================================================
# ENTITIES
# =============================================================================

@dataclass
class Contact(_WireMixin):
    """PR contact: blogger, artist, agency, media, label artist or platform curator."""
    id: str = ''
    name: str = ''
    category: str = 'Blogger'
    platform: str = ''
    handle: str = ''
    reach: str = ''
    notes: str = ''
    contact_url: str = ''
    tags: List[str] = field(default_factory=list)
    pitching_url: Optional[str] = None

    _WIRE_KEYS = {'contact_url': 'contactUrl', 'pitching_url': 'pitchingUrl'}

    @property
    def partition(self) -> str:
        return partition_for(self.category)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Contact':
        kwargs = cls._kwargs_from_dict(data)
        tags = kwargs.get('tags')
        kwargs['tags'] = [str(t) for t in tags if t is not None] if isinstance(tags, list) else []
        return cls(**kwargs)


@dataclass
class Track(_WireMixin):
    """Catalogue entry for a single or album."""
    id: str = ''
    title: str = ''
    artist_name: str = ''
    status: str = 'In Progress'
    release_date: str = ''
    isrc: Optional[str] = None
    upc: Optional[str] = None
    genre: Optional[str] = None
    mood: Optional[str] = None
    asset_link: Optional[str] = None

    _WIRE_KEYS = {
        'artist_name': 'artistName',
        'release_date': 'releaseDate',
        'asset_link': 'assetLink',
    }


@dataclass
class PlanTask(_WireMixin):
    """One checklist item of a release plan."""
    id: str = ''
    label: str = ''
    completed: bool = False


@dataclass
class ReleasePlan(_WireMixin):
    """Release campaign with an ordered checklist."""
    id: str = ''
    title: str = ''
    artist: str = ''
    date: str = ''
    status: str = 'Planning'
    tasks: List[PlanTask] = field(default_factory=list)
    budget: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReleasePlan':
        kwargs = cls._kwargs_from_dict(data)
        tasks = kwargs.get('tasks')
        kwargs['tasks'] = [
            t if isinstance(t, PlanTask) else PlanTask.from_dict(t)
            for t in (tasks if isinstance(tasks, list) else [])
            if isinstance(t, (PlanTask, dict))
        ]
        return cls(**kwargs)


@dataclass
class QuickLink(_WireMixin):
    """Shortcut to an external resource (EPK, Drive folder, Notion page)."""
    id: str = ''
    title: str = ''
    url: str = ''
    icon: str = 'fa-link'
    color: str = 'bg-indigo-500'


@dataclass
class Metric(_WireMixin):
    """Vanity metric tile. Read-mostly."""
    id: str = ''
    label: str = ''
    value: str = ''
    trend: str = 'neutral'
    trend_value: str = ''
    icon: str = ''
    color: str = ''

    _WIRE_KEYS = {'trend_value': 'trendValue'}


# =============================================================================
# AGGREGATE
# =============================================================================

# Store attribute → (storage key, entity class)
STORE_KEYS = {
    'contacts': ('pr_contacts', Contact),
    'platform_contacts': ('pr_platform_contacts', Contact),
    'label_artists': ('pr_label_artists', Contact),
    'tracks': ('pr_tracks', Track),
    'release_plans': ('pr_release_plans', ReleasePlan),
    'links': ('pr_links', QuickLink),
    'metrics': ('pr_metrics', Metric),
}


def list_problems(attr: str, items: List[Any]) -> List[str]:
    """
    Records in one Store list that break the store rules: a contact outside
    the partition its category selects, or a category / status / trend
    outside its vocabulary. Empty when the list is clean.
    """
    problems = []
    for item in items:
        if attr in PARTITIONS:
            if item.category not in CONTACT_CATEGORIES:
                problems.append(f"contact '{item.id}' has unknown category '{item.category}'")
            elif partition_for(item.category) != attr:
                problems.append(
                    f"contact '{item.id}' ({item.category}) belongs in "
                    f"{partition_for(item.category)}, not {attr}"
                )
        elif attr == 'tracks' and item.status not in TRACK_STATUSES:
            problems.append(f"track '{item.id}' has unknown status '{item.status}'")
        elif attr == 'release_plans' and item.status not in PLAN_STATUSES:
            problems.append(f"release plan '{item.id}' has unknown status '{item.status}'")
        elif attr == 'metrics' and item.trend not in METRIC_TRENDS:
            problems.append(f"metric '{item.id}' has unknown trend '{item.trend}'")
    return problems


@dataclass
class Store:
    """The aggregate store — the single unit of persistence."""
    contacts: List[Contact] = field(default_factory=list)
    platform_contacts: List[Contact] = field(default_factory=list)
    label_artists: List[Contact] = field(default_factory=list)
    tracks: List[Track] = field(default_factory=list)
    release_plans: List[ReleasePlan] = field(default_factory=list)
    links: List[QuickLink] = field(default_factory=list)
    metrics: List[Metric] = field(default_factory=list)

    def partition(self, name: str) -> List[Contact]:
        if name not in PARTITIONS:
            raise ValueError(f"Unknown contact partition '{name}'. Choose from: {', '.join(PARTITIONS)}")
        return getattr(self, name)

    def all_contacts(self) -> List[Contact]:
        return self.contacts + self.label_artists + self.platform_contacts

    def problems(self) -> List[str]:
        return [p for attr in STORE_KEYS for p in list_problems(attr, getattr(self, attr))]

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            key: [item.to_dict() for item in getattr(self, attr)]
            for attr, (key, _) in STORE_KEYS.items()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Store':
        """Build a Store from a storage blob. Missing keys become empty lists."""
        kwargs = {}
        for attr, (key, entity) in STORE_KEYS.items():
            kwargs[attr] = [entity.from_dict(item) for item in (data.get(key) or [])]
        return cls(**kwargs)
