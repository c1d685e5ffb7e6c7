# rct_connect/db/store.py
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# --- Collections (one source of truth) ---
COLLECTIONS = (
    "users",
    "events",
    "event_participants",
    "posts",
    "post_likes",
    "comments",
    "stories",
    "story_views",
    "courses",
    "ratings",
    "notifications",
    "conversations",
    "conversation_participants",
    "messages",
    "user_settings",
)


def default_data() -> Dict[str, List[dict]]:
    return {name: [] for name in COLLECTIONS}


class JsonStore:
    """
    Whole dataset in memory, persisted as a single JSON document.

    - ``data`` is the live mutable handle; callers mutate lists in place.
    - ``write()`` rewrites the complete file (temp file + os.replace), so a
      reader never sees a half-written document.
    - No transactions: two requests doing read-modify-write on the same
      collection can interleave and the last write wins.
    """

    def __init__(self, path: str):
        self.path = path
        self.data: Dict[str, List[dict]] = default_data()
        self._write_lock = threading.Lock()

    def load(self) -> "JsonStore":
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        if os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = fh.read()
            loaded = json.loads(raw) if raw.strip() else {}
            data = default_data()
            for name, rows in loaded.items():
                data[name] = rows
            self.data = data
            logger.info("Loaded %s (%d collections)", self.path, len(self.data))
        else:
            self.data = default_data()
            self.write()
            logger.info("Created empty database at %s", self.path)
        return self

    def collection(self, name: str) -> List[dict]:
        if name not in self.data:
            raise KeyError(f"Unknown collection: {name}")
        return self.data[name]

    def replace(self, name: str, rows: List[dict]) -> None:
        self.collection(name)
        self.data[name] = rows

    def write(self) -> None:
        payload = json.dumps(self.data, ensure_ascii=False, indent=2)
        directory = os.path.dirname(os.path.abspath(self.path))
        with self._write_lock:
            fd, tmp_path = tempfile.mkstemp(prefix=".rct-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def write_quietly(self) -> bool:
        """Fire-and-forget persist: disk errors are logged, never raised."""
        try:
            self.write()
            return True
        except OSError:
            logger.exception("Database write failed for %s", self.path)
            return False


def snapshot(store: JsonStore) -> Dict[str, Any]:
    return {name: len(rows) for name, rows in store.data.items()}
