"""String key/value stores with browser-storage semantics.

``MemoryStore`` lives as long as the tab that owns it. ``JsonFileStore`` keeps
its contents in one JSON document on disk so every tab of the profile, and
every process pointing at the same file, sees the same values.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Protocol, runtime_checkable

from pairs.persistence.channel import StorageChannel

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStore:
    """Volatile store; contents vanish with the object."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


class JsonFileStore:
    """File-backed store re-read on every access.

    Reads always hit the file so a read-modify-write works against the value
    current at the time of writing. Writes go through a temporary file and an
    atomic replace. ``poll`` reports keys changed by other writers and
    publishes them on the channel, if one is attached.
    """

    def __init__(self, path: Path | str, *, channel: StorageChannel | None = None) -> None:
        self._path = Path(path)
        self.channel = channel
        try:
            self._seen: Dict[str, str] = self._read()
        except OSError as exc:
            logger.warning("store file %s not readable yet: %s", self._path, exc)
            self._seen = {}

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"store values must be str, got {type(value).__name__}")
        data = self._read()
        data[key] = value
        self._write(data)
        self._seen[key] = value

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
        self._seen.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._read()))

    def poll(self) -> List[str]:
        """Return keys whose value changed since the last poll or own write."""
        current = self._read()
        changed = sorted(
            key for key in set(current) | set(self._seen)
            if current.get(key) != self._seen.get(key)
        )
        self._seen = current
        if self.channel is not None:
            for key in changed:
                self.channel.publish(key, origin=self)
        return changed

    def _read(self) -> Dict[str, str]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        except ValueError:
            # Covers malformed JSON and bytes that are not UTF-8.
            logger.warning("ignoring unreadable store file %s", self._path)
            return {}
        if not isinstance(payload, dict):
            logger.warning("ignoring store file %s without a JSON object", self._path)
            return {}
        return {str(key): value for key, value in payload.items() if isinstance(value, str)}

    def _write(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.{os.getpid()}.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, ensure_ascii=False)
        tmp_path.replace(self._path)
