"""Persisted key-value storage for session state.

The credential store and session lifecycle only need ``get``, ``set`` and
``remove`` on string values. Storage failures are logged and treated as
absence; they never surface to callers.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .telemetry import get_logger


@runtime_checkable
class KeyValueStorage(Protocol):
    """Protocol for persisted key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value."""
        ...

    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""
        ...


class MemoryStorage:
    """In-memory storage for tests and short-lived processes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        """Keys currently stored."""
        return list(self._data)


class FileStorage:
    """JSON-file backed storage, written through on every change.

    The file holds a single flat JSON object. Writes go to a temporary file
    in the same directory and are moved into place so a crash never leaves
    a half-written document behind.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._logger = get_logger().bind(storage_path=str(self.path))
        self._data = self._read()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            self._logger.warning("Storage unreadable, starting empty", error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except ValueError as e:
            self._logger.warning("Storage corrupted, starting empty", error=str(e))
            return {}

        if not isinstance(data, dict):
            self._logger.warning("Storage corrupted, starting empty", error="not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh)
            os.replace(tmp_name, self.path)
        except OSError as e:
            self._logger.warning("Storage write failed", error=str(e))


def create_storage(path: Path | None) -> KeyValueStorage:
    """Build file storage when a path is configured, memory storage otherwise."""
    if path is None:
        return MemoryStorage()
    return FileStorage(path)
