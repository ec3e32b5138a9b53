"""
Local durable storage.

A tiny key/value persistence interface with an in-memory implementation for
tests and a JSON file implementation for real use, plus LocalStorage which
knows the keys the logger keeps on the device.
"""
from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from .const import (
    STORAGE_KEY_CACHED_BUILDINGS,
    STORAGE_KEY_CACHED_LOGS,
    STORAGE_KEY_INSTALL_PROMPT_SEEN,
    STORAGE_KEY_QUEUE,
    STORAGE_KEY_USER_ID,
)
from .models import Building, VisitRecord

_LOGGER = logging.getLogger(__name__)


class KeyValueStore:
    """Persistence interface: JSON-serializable values under string keys."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Volatile store, values are deep-copied through JSON like a real store would."""

    def __init__(self, initial: dict | None = None) -> None:
        self._data: dict[str, str] = {k: json.dumps(v) for k, v in (initial or {}).items()}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return json.loads(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON file.

    Every write replaces the file atomically so an interrupted write never
    leaves a truncated queue behind.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path).expanduser()
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            _LOGGER.error("Local storage file %s is corrupt, starting empty: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            _LOGGER.error("Local storage file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()


class LocalStorage:
    """Typed access to the keys the logger keeps on the device."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # Pending submissions, kept as raw JSON entries in insertion order
    def load_queue(self) -> list[dict]:
        entries = self.store.get(STORAGE_KEY_QUEUE, [])
        return entries if isinstance(entries, list) else []

    def save_queue(self, entries: list[dict]) -> None:
        self.store.set(STORAGE_KEY_QUEUE, entries)

    # Cached snapshot used while the remote store is unreachable
    def save_snapshot(self, buildings: list[Building], logs: list[VisitRecord]) -> None:
        self.store.set(STORAGE_KEY_CACHED_BUILDINGS, [b.to_json() for b in buildings])
        self.store.set(STORAGE_KEY_CACHED_LOGS, [r.to_json() for r in logs])

    def load_snapshot(self) -> tuple[list[Building], list[VisitRecord]] | None:
        buildings = self.store.get(STORAGE_KEY_CACHED_BUILDINGS)
        if not buildings:
            return None
        logs = self.store.get(STORAGE_KEY_CACHED_LOGS) or []
        return (
            [Building.from_json(b) for b in buildings],
            [VisitRecord.from_json(r) for r in logs],
        )

    @property
    def install_prompt_seen(self) -> bool:
        return bool(self.store.get(STORAGE_KEY_INSTALL_PROMPT_SEEN, False))

    def mark_install_prompt_seen(self) -> None:
        self.store.set(STORAGE_KEY_INSTALL_PROMPT_SEEN, True)

    def user_id(self) -> str:
        """Stable anonymous identifier for this device, created on first use."""
        value = self.store.get(STORAGE_KEY_USER_ID)
        if not value:
            value = str(uuid.uuid4())
            self.store.set(STORAGE_KEY_USER_ID, value)
        return value
