"""
Whole-store export and restore as a JSON file.
The file holds exactly the storage blob (see Store.to_dict), so an export
followed by a restore reproduces the store unchanged.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Union

from labelpr.logging_config import log_call
from labelpr.db.storage import open_store
from labelpr.models import STORE_KEYS, Store
from labelpr.bus.events import bus, EVENT_STORE_EXPORTED, EVENT_STORE_RESTORED

logger = logging.getLogger(__name__)


def store_counts(store: Store) -> Dict[str, int]:
    return {attr: len(getattr(store, attr)) for attr in STORE_KEYS}


@log_call
def export_store(path: Union[str, Path]) -> Dict[str, int]:
    """Write the persisted store to path. Returns record counts per list."""
    path = Path(path)
    with open_store(readonly=True) as store:
        blob = store.to_dict()
        counts = store_counts(store)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(blob, ensure_ascii=False, indent=2), encoding='utf-8')
    logger.info(f"Exported store to {path}: {counts}")
    bus.emit(EVENT_STORE_EXPORTED, {'path': str(path), 'counts': counts})
    return counts


def read_export(path: Union[str, Path]) -> Store:
    """
    Parse an export file into a Store.
    Raises ValueError for unreadable JSON, a blob of the wrong shape, or
    records that break the store rules (see list_problems).
    """
    path = Path(path)
    try:
        blob = json.loads(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise ValueError(f"Cannot read export file {path}: {e}")
    except ValueError as e:
        raise ValueError(f"Export file {path} is not valid JSON: {e}")

    if not isinstance(blob, dict):
        raise ValueError(f"Export file {path} must hold a JSON object")

    unknown = set(blob) - {key for key, _ in STORE_KEYS.values()}
    if unknown:
        raise ValueError(f"Export file {path} has unknown keys: {sorted(unknown)}")

    for key, _ in STORE_KEYS.values():
        items = blob.get(key, [])
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise ValueError(f"Export file {path}: '{key}' must be a list of objects")

    try:
        restored = Store.from_dict(blob)
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Export file {path} has malformed records: {e}")

    problems = restored.problems()
    if problems:
        raise ValueError(f"Export file {path} has {len(problems)} invalid records: {'; '.join(problems[:3])}")
    return restored


@log_call
def import_store(path: Union[str, Path]) -> Dict[str, int]:
    """Replace the persisted store with the contents of an export file."""
    restored = read_export(path)
    with open_store() as store:
        for attr in STORE_KEYS:
            setattr(store, attr, getattr(restored, attr))

    counts = store_counts(restored)
    logger.info(f"Restored store from {path}: {counts}")
    bus.emit(EVENT_STORE_RESTORED, {'path': str(path), 'counts': counts})
    return counts
