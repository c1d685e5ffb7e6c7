# rct_connect/db/__init__.py
import threading
from typing import Optional

from .. import settings
from .store import COLLECTIONS, JsonStore

_store: Optional[JsonStore] = None
_lock = threading.Lock()


def get_store() -> JsonStore:
    """FastAPI dependency: the process-wide store, loaded on first use."""
    global _store
    if _store is None:
        with _lock:
            if _store is None:
                _store = JsonStore(settings.DATABASE_PATH).load()
    return _store


__all__ = ["COLLECTIONS", "JsonStore", "get_store"]
