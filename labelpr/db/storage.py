"""
Store Persistence
Loads and saves the aggregate Store with a context manager pattern.

Two backends hold the same JSON shape (see Store.to_dict):
  - LocalStorage    : one JSON file on disk
  - FirebaseStorage : a Realtime Database document, via its REST API

Read failures never stop the app: they fall back to the bundled sample data.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from labelpr.config import config
from labelpr.db.seed import seed_list, seed_store
from labelpr.models import STORE_KEYS, Store, list_problems

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


class StorageError(Exception):
    """Raised when the store cannot be written."""


def store_from_blob(blob: Dict[str, Any]) -> Store:
    """
    Build a Store from a storage blob, key by key.
    A missing or malformed key, or one whose records break the store rules
    (see list_problems), falls back to the sample data for that key only.
    """
    store = Store()
    for attr, (key, entity) in STORE_KEYS.items():
        raw = blob.get(key)
        if raw is None:
            logger.debug(f"store key '{key}' missing, using sample data")
            setattr(store, attr, seed_list(attr))
            continue
        if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
            logger.warning(f"store key '{key}' is not a list of objects, using sample data")
            setattr(store, attr, seed_list(attr))
            continue
        try:
            items = [entity.from_dict(item) for item in raw]
        except (TypeError, AttributeError) as e:
            logger.warning(f"store key '{key}' is malformed ({e}), using sample data")
            setattr(store, attr, seed_list(attr))
            continue
        problems = list_problems(attr, items)
        if problems:
            logger.warning(f"store key '{key}' breaks the store rules ({problems[0]}), using sample data")
            setattr(store, attr, seed_list(attr))
            continue
        setattr(store, attr, items)
    return store


# =============================================================================
# LOCAL FILE BACKEND
# =============================================================================

class LocalStorage:
    """JSON file backend — the desktop analogue of browser local storage."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Store:
        if not self.path.exists():
            logger.info(f"No store file at {self.path}, starting from sample data")
            return seed_store()
        try:
            blob = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read store file {self.path}: {e}. Using sample data")
            return seed_store()
        if not isinstance(blob, dict):
            logger.warning(f"Store file {self.path} does not hold an object. Using sample data")
            return seed_store()
        logger.debug(f"Loaded store from {self.path}")
        return store_from_blob(blob)

    def save(self, store: Store) -> None:
        """Write the store atomically (temp file in the same dir, then replace)."""
        payload = json.dumps(store.to_dict(), ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.store-', suffix='.json')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f"Could not write store file {self.path}: {e}")
            raise StorageError(f"Failed to save store to {self.path}: {e}")
        logger.debug(f"Saved store to {self.path}")


# =============================================================================
# FIREBASE BACKEND
# =============================================================================

class FirebaseStorage:
    """
    Firebase Realtime Database backend.
    GET/PUT on {db_url}/{doc_path}.json — last writer wins, no merge.
    """

    def __init__(self, db_url: str, doc_path: str, auth_token: str = '', timeout: float = 30.0):
        self.url = f"{db_url.rstrip('/')}/{doc_path.strip('/')}.json"
        self.auth_token = auth_token
        self.timeout = timeout

    def _params(self) -> Dict[str, str]:
        return {'auth': self.auth_token} if self.auth_token else {}

    def load(self) -> Store:
        try:
            response = requests.get(self.url, params=self._params(), timeout=self.timeout)
            response.raise_for_status()
            blob = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Firebase read failed: {e}. Using sample data")
            return seed_store()
        except ValueError as e:
            logger.warning(f"Firebase returned invalid JSON: {e}. Using sample data")
            return seed_store()

        if not isinstance(blob, dict):
            logger.info("Firebase document is empty, starting from sample data")
            return seed_store()
        logger.debug(f"Loaded store from {self.url}")
        return store_from_blob(blob)

    def save(self, store: Store) -> None:
        try:
            response = requests.put(
                self.url, params=self._params(), json=store.to_dict(), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Firebase write failed: {e}")
            raise StorageError(f"Failed to save store to Firebase: {e}")
        logger.debug(f"Saved store to {self.url}")


# =============================================================================
# FACTORY & SESSION
# =============================================================================

def get_storage():
    """Backend selected by STORAGE_BACKEND."""
    if config.STORAGE_BACKEND == 'firebase':
        return FirebaseStorage(
            config.FIREBASE_DB_URL,
            config.FIREBASE_DOC_PATH,
            auth_token=config.FIREBASE_AUTH_TOKEN,
        )
    path = Path(config.STORE_PATH)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return LocalStorage(path)


@contextmanager
def open_store(storage: Optional[Any] = None, readonly: bool = False):
    """
    Context manager for a store session.
    Loads the store, yields it, saves on success. Nothing is saved if the
    block raises, or when the session is readonly.

    Usage:
        with open_store() as store:
            store.tracks.insert(0, track)
    """
    storage = storage or get_storage()
    store = storage.load()
    try:
        yield store
    except Exception as e:
        logger.error(f"Store session discarded due to error: {e}")
        raise
    if not readonly:
        storage.save(store)
