from __future__ import annotations

import json
import logging
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dataquery.schemas import QueryHistoryEntry


logger = logging.getLogger(__name__)

STORAGE_KEY = "dataquery-ai-history"

_id_lock = threading.Lock()
_last_id = 0


def _next_entry_id(now: datetime) -> str:
    global _last_id
    millis = int(now.timestamp() * 1000)
    with _id_lock:
        # two entries in the same millisecond still get distinct ids
        _last_id = max(millis, _last_id + 1)
        return str(_last_id)


def new_entry(text: str, now: datetime | None = None) -> QueryHistoryEntry:
    stamp = now or datetime.now().astimezone()
    return QueryHistoryEntry(id=_next_entry_id(stamp), text=text, timestamp=stamp)


class QueryHistoryStore:
    """Query history kept as one serialized list under a single key.

    The backing file is a JSON object used as a key-value blob store, so
    every append is a full read, prepend and full write.
    """

    def __init__(self, path: str | Path, key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_blobs(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"History file {self.path} does not hold a JSON object")
        return data

    def _write_blobs(self, blobs: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{time.time_ns()}.tmp")
        try:
            tmp_path.write_text(json.dumps(blobs, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def _stored_entries(self) -> list[QueryHistoryEntry]:
        stored = self._read_blobs().get(self.key)
        if not stored:
            return []
        items = json.loads(stored) if isinstance(stored, str) else stored
        if not isinstance(items, list):
            raise ValueError("Stored query history is not a list")
        return [QueryHistoryEntry.model_validate(item) for item in items]

    def get_queries(self) -> list[QueryHistoryEntry]:
        try:
            return self._stored_entries()
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Error parsing stored queries: %s", exc)
            return []

    def save_query(self, entry: QueryHistoryEntry) -> bool:
        try:
            queries = self._stored_entries()
        except (OSError, ValueError, ValidationError) as exc:
            logger.error("Error parsing stored queries, starting a new history: %s", exc)
            queries = []

        queries.insert(0, entry)
        try:
            blobs = self._read_blobs()
        except (OSError, ValueError):
            blobs = {}
        blobs[self.key] = json.dumps([q.model_dump(mode="json") for q in queries], ensure_ascii=False)

        try:
            self._write_blobs(blobs)
        except OSError as exc:
            logger.error("Failed to save query: %s", exc)
            return False
        return True

    def clear_queries(self) -> bool:
        try:
            blobs = self._read_blobs()
            blobs.pop(self.key, None)
            self._write_blobs(blobs)
        except (OSError, ValueError) as exc:
            logger.error("Failed to clear queries: %s", exc)
            return False
        return True
