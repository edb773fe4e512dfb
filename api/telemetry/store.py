"""
Durable append log for broker messages.

The whole history lives in memory and is mirrored to one JSON document on
disk. Every mutation rewrites the full document before it returns, so after a
successful `append()` or `clear()` the file matches memory.

File format (kept compatible with existing `mqtt_log.json` files):

    [
      {"topic": "stm32/demo", "message": "{\"level\":42}", "time": "2024-05-01T10:00:00.000Z"},
      ...
    ]
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """
    Current UTC time as ISO-8601 with milliseconds and a `Z` suffix.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEntry:
    topic: str
    payload: str
    received_at: str

    @classmethod
    def received(cls, topic: str, payload: str) -> LogEntry:
        return cls(topic=topic, payload=payload, received_at=utc_timestamp())

    def to_dict(self) -> dict[str, str]:
        return {"topic": self.topic, "message": self.payload, "time": self.received_at}

    @classmethod
    def from_dict(cls, data: Any) -> LogEntry:
        if not isinstance(data, dict):
            raise ValueError(f"Log entry must be an object, got {type(data).__name__}.")
        topic = data.get("topic")
        payload = data.get("message")
        received_at = data.get("time")
        if not isinstance(topic, str) or not isinstance(payload, str) or not isinstance(received_at, str):
            raise ValueError("Log entry requires string 'topic', 'message' and 'time'.")
        return cls(topic=topic, payload=payload, received_at=received_at)


class LogStore:
    """
    Ordered, file-backed list of `LogEntry`.

    One lock guards the list and the file together. The MQTT network thread
    appends while request threads read and clear.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def hydrate(self) -> int:
        """
        Replace the in-memory history with the file contents.

        A missing, unreadable or malformed file leaves the history empty.
        Returns the number of entries loaded.
        """
        with self._lock:
            self._entries = []
            if not self._path.exists():
                logger.info("mqtt_log_missing path=%s starting_empty=true", self._path)
                return 0

            try:
                raw = self._path.read_text(encoding="utf-8")
                data = json.loads(raw)
                if not isinstance(data, list):
                    raise ValueError(f"Expected a JSON array, got {type(data).__name__}.")
                entries = [LogEntry.from_dict(item) for item in data]
            except (OSError, ValueError, RecursionError) as exc:
                logger.warning("mqtt_log_unreadable path=%s error=%s starting_empty=true", self._path, exc)
                return 0

            self._entries = entries
            logger.info("mqtt_log_loaded path=%s entries=%s", self._path, len(entries))
            return len(entries)

    def append(self, entry: LogEntry) -> bool:
        """
        Add `entry` to the end of the history and persist.

        The in-memory append is kept even when the write fails; the next
        successful write brings the file back in line.
        """
        with self._lock:
            self._entries.append(entry)
            return self._persist_locked()

    def read_all(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> bool:
        """
        Drop every entry and persist the empty history.

        Returns False when memory was cleared but the file could not be
        rewritten.
        """
        with self._lock:
            self._entries = []
            return self._persist_locked()

    def _persist_locked(self) -> bool:
        document = json.dumps([entry.to_dict() for entry in self._entries], indent=2)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(document, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError:
            logger.exception("mqtt_log_write_failed path=%s entries=%s", self._path, len(self._entries))
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            return False
        return True
