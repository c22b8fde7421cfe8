"""
Record Store - Core CRUD over the aggregate Store
Pure Python module with no AI dependency. Every call opens a store session,
mutates the in-memory Store and lets the session persist it.
Communicates via event bus only.

Contacts live in one of three partitions chosen by category:
  Label Artist     → store.label_artists
  Platform Curator → store.platform_contacts
  anything else    → store.contacts
"""

import logging
import random
import string
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from labelpr.db.storage import open_store
from labelpr.models import (
    CONTACT_CATEGORIES, PLAN_STATUSES, TRACK_STATUSES, PARTITIONS,
    Contact, Metric, PlanTask, QuickLink, ReleasePlan, Store, Track, partition_for,
)
from labelpr.bus.events import (
    bus,
    EVENT_CONTACT_CREATED, EVENT_CONTACT_UPDATED, EVENT_CONTACT_DELETED,
    EVENT_TRACK_CREATED, EVENT_TRACK_UPDATED, EVENT_TRACK_DELETED,
    EVENT_PLAN_CREATED, EVENT_PLAN_UPDATED, EVENT_PLAN_DELETED, EVENT_TASK_TOGGLED,
    EVENT_LINK_CREATED, EVENT_LINK_UPDATED, EVENT_LINK_DELETED,
)

logger = logging.getLogger(__name__)

RECORD_KINDS = ('contact', 'track', 'plan', 'link')

# Allowlists — field names never come from user input directly
_CONTACT_FIELDS = {
    'name', 'category', 'platform', 'handle', 'reach', 'notes', 'contact_url',
    'tags', 'pitching_url',
}
_TRACK_FIELDS = {
    'title', 'artist_name', 'status', 'release_date', 'isrc', 'upc', 'genre',
    'mood', 'asset_link',
}
_PLAN_FIELDS = {'title', 'artist', 'date', 'status', 'tasks', 'budget'}
_LINK_FIELDS = {'title', 'url', 'icon', 'color'}


def _today() -> str:
    return date.today().isoformat()


# Defaults for manual entry; callables are evaluated at creation time
CONTACT_DEFAULTS: Dict[str, Any] = {
    'name': 'Новый контакт',
    'category': 'Blogger',
    'platform': 'Instagram',
    'handle': '@',
    'reach': 'н/д',
    'contact_url': '',
    'notes': '',
}
TRACK_DEFAULTS: Dict[str, Any] = {
    'title': 'Без названия',
    'artist_name': 'Неизвестен',
    'status': 'In Progress',
    'release_date': _today,
    'genre': 'Pop',
    'isrc': 'В ожидании',
    'mood': 'N/A',
}
PLAN_DEFAULTS: Dict[str, Any] = {
    'title': 'Новый проект',
    'artist': 'Неизвестен',
    'date': _today,
    'status': 'Planning',
}
LINK_DEFAULTS: Dict[str, Any] = {
    'title': 'Ссылка',
    'url': 'https://',
    'icon': 'fa-link',
    'color': 'bg-indigo-500',
}
DEFAULT_TASK_LABELS = ('Мастеринг', 'Питчинг', 'Промо')


# =============================================================================
# HELPERS
# =============================================================================

def new_id(prefix: str) -> str:
    """Timestamp-derived identifier: <prefix>-<epoch ms>-<5 random chars>."""
    ms = int(time.time() * 1000)
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"{prefix}-{ms}-{suffix}"


def _validate_fields(fields: Dict[str, Any], allowed: set, entity: str) -> None:
    """Raise ValueError if any key in fields is not an allowed field name."""
    invalid = set(fields.keys()) - allowed
    if invalid:
        raise ValueError(f"Invalid {entity} fields: {invalid}")


def _check_choice(value: Any, choices: Tuple[str, ...], what: str) -> None:
    if value not in choices:
        raise ValueError(f"Unknown {what} '{value}'. Choose from: {', '.join(choices)}")


def _apply_defaults(fields: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing or empty values from defaults."""
    merged = dict(fields)
    for key, default in defaults.items():
        if merged.get(key) in (None, ''):
            merged[key] = default() if callable(default) else default
    return merged


def parse_tags(value: Any) -> List[str]:
    """Tags from a comma-separated string or a list; blanks dropped."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(t).strip() for t in value if str(t).strip()]


def build_tasks(raw: Optional[List[Any]]) -> List[PlanTask]:
    """
    Normalise a task list. Items may be PlanTask, dicts or plain labels.
    Tasks without an id are numbered by position, starting at 1.
    """
    tasks = []
    for i, item in enumerate(raw or [], start=1):
        if isinstance(item, PlanTask):
            tasks.append(item)
        elif isinstance(item, dict):
            tasks.append(PlanTask(
                id=str(item.get('id') or i),
                label=str(item.get('label') or 'Задача'),
                completed=bool(item.get('completed', False)),
            ))
        else:
            tasks.append(PlanTask(id=str(i), label=str(item), completed=False))
    return tasks


def default_tasks() -> List[PlanTask]:
    return build_tasks(list(DEFAULT_TASK_LABELS))


def _index_of(items: List[Any], record_id: str) -> Optional[int]:
    for i, item in enumerate(items):
        if item.id == record_id:
            return i
    return None


def _locate_contact(store: Store, contact_id: str) -> Optional[Tuple[str, int]]:
    """(partition name, index) of a contact across all partitions."""
    for name in PARTITIONS:
        index = _index_of(store.partition(name), contact_id)
        if index is not None:
            return name, index
    return None


def _clean_optional(fields: Dict[str, Any], keys: Tuple[str, ...]) -> None:
    """Empty strings on optional fields are stored as absent."""
    for key in keys:
        if key in fields and fields[key] == '':
            fields[key] = None


# =============================================================================
# CONTACT OPERATIONS
# =============================================================================

def create_contact(
    fields: Dict[str, Any],
    defaults: Optional[Dict[str, Any]] = None,
    id_prefix: str = 'c',
) -> Contact:
    """
    Create a contact at the head of the partition its category selects.
    Returns: the new Contact
    """
    _validate_fields(fields, _CONTACT_FIELDS, 'contact')
    merged = _apply_defaults(fields, CONTACT_DEFAULTS if defaults is None else defaults)
    _check_choice(merged.get('category'), CONTACT_CATEGORIES, 'contact category')
    merged['tags'] = parse_tags(merged.get('tags'))
    _clean_optional(merged, ('pitching_url',))

    contact = Contact(id=new_id(id_prefix), **merged)

    with open_store() as store:
        store.partition(contact.partition).insert(0, contact)

    logger.info(f"Created contact {contact.id}: {contact.name} → {contact.partition}")
    bus.emit(EVENT_CONTACT_CREATED, {'contact_id': contact.id, 'contact': contact})
    return contact


def get_contact(contact_id: str) -> Optional[Contact]:
    """Get contact by ID from any partition."""
    with open_store(readonly=True) as store:
        location = _locate_contact(store, contact_id)
        if location:
            name, index = location
            return store.partition(name)[index]
    logger.debug(f"get_contact: contact_id={contact_id} not found")
    return None


def update_contact(contact_id: str, updates: Dict[str, Any]) -> bool:
    """
    Update contact fields.
    A category change that crosses partitions moves the contact to the head
    of its new partition; otherwise its position is kept.
    Returns: True if updated, False if not found
    """
    if not updates:
        return False

    _validate_fields(updates, _CONTACT_FIELDS, 'contact')
    updates = dict(updates)
    if 'category' in updates:
        _check_choice(updates['category'], CONTACT_CATEGORIES, 'contact category')
    if 'tags' in updates:
        updates['tags'] = parse_tags(updates['tags'])
    _clean_optional(updates, ('pitching_url',))

    with open_store() as store:
        location = _locate_contact(store, contact_id)
        if location is None:
            logger.debug(f"update_contact: contact_id={contact_id} not found")
            return False

        old_partition, index = location
        contact = store.partition(old_partition)[index]
        for key, value in updates.items():
            setattr(contact, key, value)

        new_partition = contact.partition
        if new_partition != old_partition:
            del store.partition(old_partition)[index]
            store.partition(new_partition).insert(0, contact)
            logger.info(f"Moved contact {contact_id}: {old_partition} → {new_partition}")

    logger.info(f"Updated contact {contact_id}: {list(updates.keys())}")
    bus.emit(EVENT_CONTACT_UPDATED, {
        'contact_id': contact_id,
        'updates': updates,
        'partition': new_partition,
    })
    return True


def delete_contact(contact_id: str) -> bool:
    """
    Remove a contact from whichever partition holds it.
    Returns: True if deleted, False if not found
    """
    with open_store() as store:
        location = _locate_contact(store, contact_id)
        if location is None:
            logger.debug(f"delete_contact: contact_id={contact_id} not found")
            return False
        name, index = location
        del store.partition(name)[index]

    logger.info(f"Deleted contact {contact_id} from {name}")
    bus.emit(EVENT_CONTACT_DELETED, {'contact_id': contact_id, 'partition': name})
    return True


def search_contacts(
    partition: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Contact]:
    """
    Contacts matching a case-insensitive name substring and an optional category.
    partition=None searches all three partitions.
    """
    with open_store(readonly=True) as store:
        pool = store.all_contacts() if partition is None else list(store.partition(partition))

    needle = (search or '').lower()
    results = [
        c for c in pool
        if needle in c.name.lower() and (not category or c.category == category)
    ]
    logger.debug(f"search_contacts: {len(results)} results (partition={partition}, category={category})")
    return results


# =============================================================================
# TRACK OPERATIONS
# =============================================================================

def create_track(
    fields: Dict[str, Any],
    defaults: Optional[Dict[str, Any]] = None,
    id_prefix: str = 't',
) -> Track:
    """Create a track at the head of the catalogue. Returns: the new Track"""
    _validate_fields(fields, _TRACK_FIELDS, 'track')
    merged = _apply_defaults(fields, TRACK_DEFAULTS if defaults is None else defaults)
    _check_choice(merged.get('status'), TRACK_STATUSES, 'track status')
    _clean_optional(merged, ('isrc', 'upc', 'genre', 'mood', 'asset_link'))

    track = Track(id=new_id(id_prefix), **merged)

    with open_store() as store:
        store.tracks.insert(0, track)

    logger.info(f"Created track {track.id}: {track.title} ({track.artist_name})")
    bus.emit(EVENT_TRACK_CREATED, {'track_id': track.id, 'track': track})
    return track


def get_track(track_id: str) -> Optional[Track]:
    with open_store(readonly=True) as store:
        index = _index_of(store.tracks, track_id)
        return store.tracks[index] if index is not None else None


def update_track(track_id: str, updates: Dict[str, Any]) -> bool:
    """Update track fields in place. Returns: True if updated, False if not found"""
    if not updates:
        return False

    _validate_fields(updates, _TRACK_FIELDS, 'track')
    updates = dict(updates)
    if 'status' in updates:
        _check_choice(updates['status'], TRACK_STATUSES, 'track status')
    _clean_optional(updates, ('isrc', 'upc', 'genre', 'mood', 'asset_link'))

    if not _update_in_list('tracks', track_id, updates):
        return False

    logger.info(f"Updated track {track_id}: {list(updates.keys())}")
    bus.emit(EVENT_TRACK_UPDATED, {'track_id': track_id, 'updates': updates})
    return True


def delete_track(track_id: str) -> bool:
    if not _delete_from_list('tracks', track_id):
        return False
    logger.info(f"Deleted track {track_id}")
    bus.emit(EVENT_TRACK_DELETED, {'track_id': track_id})
    return True


def search_tracks(search: Optional[str] = None) -> List[Track]:
    """Tracks whose title or artist contains the search text."""
    with open_store(readonly=True) as store:
        tracks = list(store.tracks)
    needle = (search or '').lower()
    return [t for t in tracks if needle in t.title.lower() or needle in t.artist_name.lower()]


# =============================================================================
# RELEASE PLAN OPERATIONS
# =============================================================================

def create_plan(
    fields: Dict[str, Any],
    defaults: Optional[Dict[str, Any]] = None,
    id_prefix: str = 'rp',
) -> ReleasePlan:
    """
    Create a release plan at the head of the list.
    Without tasks it starts with the standard checklist (mastering, pitching, promo).
    """
    _validate_fields(fields, _PLAN_FIELDS, 'plan')
    merged = _apply_defaults(fields, PLAN_DEFAULTS if defaults is None else defaults)
    _check_choice(merged.get('status'), PLAN_STATUSES, 'plan status')
    merged['tasks'] = build_tasks(merged.get('tasks')) or default_tasks()
    _clean_optional(merged, ('budget',))

    plan = ReleasePlan(id=new_id(id_prefix), **merged)

    with open_store() as store:
        store.release_plans.insert(0, plan)

    logger.info(f"Created release plan {plan.id}: {plan.title} ({len(plan.tasks)} tasks)")
    bus.emit(EVENT_PLAN_CREATED, {'plan_id': plan.id, 'plan': plan})
    return plan


def get_plan(plan_id: str) -> Optional[ReleasePlan]:
    with open_store(readonly=True) as store:
        index = _index_of(store.release_plans, plan_id)
        return store.release_plans[index] if index is not None else None


def update_plan(plan_id: str, updates: Dict[str, Any]) -> bool:
    """Update plan fields in place. Returns: True if updated, False if not found"""
    if not updates:
        return False

    _validate_fields(updates, _PLAN_FIELDS, 'plan')
    updates = dict(updates)
    if 'status' in updates:
        _check_choice(updates['status'], PLAN_STATUSES, 'plan status')
    if 'tasks' in updates:
        updates['tasks'] = build_tasks(updates['tasks'])
    _clean_optional(updates, ('budget',))

    if not _update_in_list('release_plans', plan_id, updates):
        return False

    logger.info(f"Updated release plan {plan_id}: {list(updates.keys())}")
    bus.emit(EVENT_PLAN_UPDATED, {'plan_id': plan_id, 'updates': updates})
    return True


def delete_plan(plan_id: str) -> bool:
    if not _delete_from_list('release_plans', plan_id):
        return False
    logger.info(f"Deleted release plan {plan_id}")
    bus.emit(EVENT_PLAN_DELETED, {'plan_id': plan_id})
    return True


def search_plans(search: Optional[str] = None) -> List[ReleasePlan]:
    """Plans whose title contains the search text."""
    with open_store(readonly=True) as store:
        plans = list(store.release_plans)
    needle = (search or '').lower()
    return [p for p in plans if needle in p.title.lower()]


def toggle_task(plan_id: str, task_id: str) -> Optional[bool]:
    """
    Flip the completed flag of one checklist task; siblings are untouched.
    Returns: the new state, or None if the plan or task does not exist
    """
    with open_store() as store:
        index = _index_of(store.release_plans, plan_id)
        if index is None:
            logger.debug(f"toggle_task: plan_id={plan_id} not found")
            return None
        plan = store.release_plans[index]
        task_index = _index_of(plan.tasks, task_id)
        if task_index is None:
            logger.debug(f"toggle_task: task_id={task_id} not in plan {plan_id}")
            return None
        task = plan.tasks[task_index]
        task.completed = not task.completed

    logger.info(f"Toggled task {task_id} of plan {plan_id} → {task.completed}")
    bus.emit(EVENT_TASK_TOGGLED, {'plan_id': plan_id, 'task_id': task_id, 'completed': task.completed})
    return task.completed


def add_task(plan_id: str, label: str) -> Optional[PlanTask]:
    """Append an open task to a plan's checklist. Returns None if the plan is missing."""
    if not label or not label.strip():
        raise ValueError("Task label must not be empty")

    task = PlanTask(id=new_id('tsk'), label=label.strip(), completed=False)
    with open_store() as store:
        index = _index_of(store.release_plans, plan_id)
        if index is None:
            logger.debug(f"add_task: plan_id={plan_id} not found")
            return None
        store.release_plans[index].tasks.append(task)

    logger.info(f"Added task {task.id} to plan {plan_id}")
    bus.emit(EVENT_PLAN_UPDATED, {'plan_id': plan_id, 'updates': {'task_added': task.id}})
    return task


def plan_progress(plan: ReleasePlan) -> int:
    """Completed tasks as a whole percentage (0 for an empty checklist)."""
    if not plan.tasks:
        return 0
    done = sum(1 for t in plan.tasks if t.completed)
    return round(100 * done / len(plan.tasks))


# =============================================================================
# QUICK LINK & METRIC OPERATIONS
# =============================================================================

def create_link(
    fields: Dict[str, Any],
    defaults: Optional[Dict[str, Any]] = None,
    id_prefix: str = 'l',
) -> QuickLink:
    """Create a quick link at the head of the list."""
    _validate_fields(fields, _LINK_FIELDS, 'link')
    merged = _apply_defaults(fields, LINK_DEFAULTS if defaults is None else defaults)

    link = QuickLink(id=new_id(id_prefix), **merged)

    with open_store() as store:
        store.links.insert(0, link)

    logger.info(f"Created link {link.id}: {link.title}")
    bus.emit(EVENT_LINK_CREATED, {'link_id': link.id, 'link': link})
    return link


def get_link(link_id: str) -> Optional[QuickLink]:
    with open_store(readonly=True) as store:
        index = _index_of(store.links, link_id)
        return store.links[index] if index is not None else None


def update_link(link_id: str, updates: Dict[str, Any]) -> bool:
    if not updates:
        return False
    _validate_fields(updates, _LINK_FIELDS, 'link')
    if not _update_in_list('links', link_id, dict(updates)):
        return False
    logger.info(f"Updated link {link_id}: {list(updates.keys())}")
    bus.emit(EVENT_LINK_UPDATED, {'link_id': link_id, 'updates': updates})
    return True


def delete_link(link_id: str) -> bool:
    if not _delete_from_list('links', link_id):
        return False
    logger.info(f"Deleted link {link_id}")
    bus.emit(EVENT_LINK_DELETED, {'link_id': link_id})
    return True


def list_links() -> List[QuickLink]:
    with open_store(readonly=True) as store:
        return list(store.links)


def list_metrics() -> List[Metric]:
    with open_store(readonly=True) as store:
        return list(store.metrics)


def load_store() -> Store:
    """Snapshot of the whole persisted store."""
    with open_store(readonly=True) as store:
        return store


# =============================================================================
# SHARED LIST MUTATIONS
# =============================================================================

def _update_in_list(attr: str, record_id: str, updates: Dict[str, Any]) -> bool:
    with open_store() as store:
        items = getattr(store, attr)
        index = _index_of(items, record_id)
        if index is None:
            logger.debug(f"update: {attr} id={record_id} not found")
            return False
        for key, value in updates.items():
            setattr(items[index], key, value)
    return True


def _delete_from_list(attr: str, record_id: str) -> bool:
    with open_store() as store:
        items = getattr(store, attr)
        index = _index_of(items, record_id)
        if index is None:
            logger.debug(f"delete: {attr} id={record_id} not found")
            return False
        del items[index]
    return True


# =============================================================================
# GENERIC DISPATCH
# =============================================================================

_CREATORS: Dict[str, Callable[..., Any]] = {
    'contact': create_contact,
    'track': create_track,
    'plan': create_plan,
    'link': create_link,
}
_UPDATERS: Dict[str, Callable[[str, Dict[str, Any]], bool]] = {
    'contact': update_contact,
    'track': update_track,
    'plan': update_plan,
    'link': update_link,
}
_DELETERS: Dict[str, Callable[[str], bool]] = {
    'contact': delete_contact,
    'track': delete_track,
    'plan': delete_plan,
    'link': delete_link,
}


def _check_kind(kind: str) -> None:
    _check_choice(kind, RECORD_KINDS, 'record kind')


def create_record(kind: str, fields: Dict[str, Any]):
    """create(type, fields): assign id, apply defaults, insert at head."""
    _check_kind(kind)
    return _CREATORS[kind](fields)


def update_record(kind: str, record_id: str, fields: Dict[str, Any]) -> bool:
    _check_kind(kind)
    return _UPDATERS[kind](record_id, fields)


def delete_record(kind: str, record_id: str) -> bool:
    _check_kind(kind)
    return _DELETERS[kind](record_id)
