"""
Smart Import - free text in, structured records out.
The AI extracts contacts, tracks, release plans and quick links; every
extracted record then goes through the normal record-store create path, so
contacts land in the partition their category selects.
"""

import logging
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz

from labelpr.logging_config import log_call
from labelpr.engine.ai_client import call_ai_json
from labelpr.engine import records
from labelpr.models import CONTACT_CATEGORIES, partition_for
from labelpr.bus.events import bus, EVENT_IMPORT_COMPLETE

logger = logging.getLogger(__name__)

IMPORT_KEYS = ('contacts', 'tracks', 'releasePlans', 'quickLinks')

# Names this similar (0-100) within one partition count as the same contact
DUPLICATE_THRESHOLD = 90

IMPORT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "contacts": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "category": {"type": "STRING", "enum": list(CONTACT_CATEGORIES)},
                    "platform": {"type": "STRING"},
                    "handle": {"type": "STRING"},
                    "contactUrl": {"type": "STRING"},
                    "notes": {"type": "STRING"},
                    "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["name", "category"],
            },
        },
        "tracks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "artistName": {"type": "STRING"},
                    "genre": {"type": "STRING"},
                    "releaseDate": {"type": "STRING"},
                    "mood": {"type": "STRING"},
                },
                "required": ["title", "artistName"],
            },
        },
        "releasePlans": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "artist": {"type": "STRING"},
                    "date": {"type": "STRING"},
                    "tasks": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "label": {"type": "STRING"},
                                "completed": {"type": "BOOLEAN"},
                            },
                        },
                    },
                },
                "required": ["title"],
            },
        },
        "quickLinks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "url": {"type": "STRING"},
                    "icon": {"type": "STRING"},
                },
                "required": ["title", "url"],
            },
        },
    },
}

# Defaults for AI-extracted records; notes and platform mark them as imported
IMPORT_CONTACT_DEFAULTS = {
    'name': 'Без имени',
    'category': 'Blogger',
    'platform': 'Соцсеть',
    'handle': '@',
    'reach': 'н/д',
    'contact_url': '',
    'notes': 'Импорт ИИ',
}
IMPORT_TRACK_DEFAULTS = {
    'title': 'Без названия',
    'artist_name': 'Неизвестен',
    'status': 'In Progress',
    'release_date': '2025-01-01',
    'genre': 'Pop',
}
IMPORT_PLAN_DEFAULTS = {
    'title': 'Новый проект',
    'artist': 'Неизвестен',
    'date': records.PLAN_DEFAULTS['date'],
    'status': 'Planning',
}
IMPORT_LINK_DEFAULTS = {
    'title': 'Ссылка',
    'url': 'https://',
    'icon': 'fa-link',
    'color': 'bg-indigo-500',
}


def empty_result() -> Dict[str, List[Dict[str, Any]]]:
    return {key: [] for key in IMPORT_KEYS}


def build_import_prompt(text: str) -> str:
    return f"""Проанализируй текст и извлеки структурированные данные для музыкального лейбла.
ОСОБОЕ ВНИМАНИЕ:
- Разделяй артистов лейбла (Label Artist) от внешних контактов.
- Извлекай задачи для планов релизов.
- Извлекай ссылки на ресурсы (EPK, Drive, Notion).

Текст: "{text}\""""


# =============================================================================
# EXTRACTION
# =============================================================================

@log_call
def extract_records(text: str, model: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Ask the AI for structured records found in free text.
    Returns the four lists; any AI or parse failure gives four empty lists.
    """
    try:
        data = call_ai_json(build_import_prompt(text), IMPORT_SCHEMA, model=model)
    except (ValueError, RuntimeError) as e:
        logger.error(f"Smart import extraction failed: {e}")
        return empty_result()

    if not isinstance(data, dict):
        logger.error(f"Smart import reply is not an object: {type(data).__name__}")
        return empty_result()

    result = empty_result()
    for key in IMPORT_KEYS:
        items = data.get(key) or []
        if isinstance(items, list):
            result[key] = [item for item in items if isinstance(item, dict)]
    logger.info(
        "Smart import extracted " + ", ".join(f"{len(result[k])} {k}" for k in IMPORT_KEYS)
    )
    return result


# =============================================================================
# MERGE INTO STORE
# =============================================================================

def find_duplicate_contact(name: str, category: str) -> Optional[str]:
    """ID of an existing contact in the same partition with a near-identical name."""
    partition = partition_for(category)
    for contact in records.search_contacts(partition=partition):
        if fuzz.ratio(contact.name.lower(), name.lower()) >= DUPLICATE_THRESHOLD:
            return contact.id
    return None


def _text(value: Any) -> Optional[str]:
    """AI string field as str; None stays None so the import default applies."""
    return None if value is None else str(value)


def _contact_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'name': _text(item.get('name')),
        'category': _text(item.get('category')),
        'platform': _text(item.get('platform')),
        'handle': _text(item.get('handle')),
        'contact_url': _text(item.get('contactUrl')),
        'notes': _text(item.get('notes')),
        'tags': item.get('tags') if isinstance(item.get('tags'), (list, str)) else [],
    }


def _track_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'title': _text(item.get('title')),
        'artist_name': _text(item.get('artistName')),
        'release_date': _text(item.get('releaseDate')),
        'genre': _text(item.get('genre')),
        'mood': _text(item.get('mood')),
    }


def _plan_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    raw_tasks = item.get('tasks') if isinstance(item.get('tasks'), list) else []
    tasks = [t for t in raw_tasks if isinstance(t, dict) and t.get('label')]
    return {
        'title': _text(item.get('title')),
        'artist': _text(item.get('artist')),
        'date': _text(item.get('date')),
        'tasks': tasks,
    }


def _link_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'title': _text(item.get('title')),
        'url': _text(item.get('url')),
        'icon': _text(item.get('icon')),
    }


@log_call
def apply_import(data: Dict[str, List[Dict[str, Any]]], skip_duplicates: bool = False) -> Dict[str, int]:
    """
    Append extracted records to the store via the normal create path.
    A record the store rejects (unknown category, bad field) is logged and skipped.

    Returns: counts per kind plus 'skipped' and 'total'
    """
    counts = {'contacts': 0, 'tracks': 0, 'plans': 0, 'links': 0, 'skipped': 0}

    for item in data.get('contacts') or []:
        fields = _contact_fields(item)
        if fields['category'] not in CONTACT_CATEGORIES:
            fields['category'] = None  # falls back to the import default
        if skip_duplicates and fields['name']:
            existing = find_duplicate_contact(fields['name'], fields['category'] or 'Blogger')
            if existing:
                logger.debug(f"Skipping duplicate contact: {fields['name']} (ID: {existing})")
                counts['skipped'] += 1
                continue
        try:
            records.create_contact(fields, defaults=IMPORT_CONTACT_DEFAULTS, id_prefix='ai-c')
            counts['contacts'] += 1
        except ValueError as e:
            logger.warning(f"Skipping imported contact {item!r}: {e}")
            counts['skipped'] += 1

    for kind, key, build, create, defaults, prefix in (
        ('tracks', 'tracks', _track_fields, records.create_track, IMPORT_TRACK_DEFAULTS, 'ai-t'),
        ('plans', 'releasePlans', _plan_fields, records.create_plan, IMPORT_PLAN_DEFAULTS, 'ai-rp'),
        ('links', 'quickLinks', _link_fields, records.create_link, IMPORT_LINK_DEFAULTS, 'ai-l'),
    ):
        for item in data.get(key) or []:
            try:
                create(build(item), defaults=defaults, id_prefix=prefix)
                counts[kind] += 1
            except ValueError as e:
                logger.warning(f"Skipping imported {kind[:-1]} {item!r}: {e}")
                counts['skipped'] += 1

    counts['total'] = counts['contacts'] + counts['tracks'] + counts['plans'] + counts['links']
    logger.info(f"Smart import applied: {counts}")
    bus.emit(EVENT_IMPORT_COMPLETE, {'counts': counts})
    return counts


@log_call
def smart_import(text: str, model: Optional[str] = None, skip_duplicates: bool = False) -> Dict[str, int]:
    """
    Extract records from free text and append them to the store.
    Blank text imports nothing and makes no AI call.
    """
    if not text or not text.strip():
        return {'contacts': 0, 'tracks': 0, 'plans': 0, 'links': 0, 'skipped': 0, 'total': 0}
    return apply_import(extract_records(text, model=model), skip_duplicates=skip_duplicates)
