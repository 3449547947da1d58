"""Local persisted key/value store.

Client components keep small pieces of state across process restarts: picker
verification counts and the last time the working-hours alert was shown.
Values are JSON-encoded under a string key. Each key is owned by exactly one
component.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class LocalStore(ABC):
    """Abstract key/value store holding JSON-serializable values."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for ``key`` or ``default`` when absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Encode and persist ``value`` under ``key``."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""
        ...


class MemoryStore(LocalStore):
    """In-process store. Values are kept encoded so callers never share mutable state."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(LocalStore):
    """File-backed store: one JSON document holding every key.

    Writes go to a temporary sibling file that is then renamed over the
    target, so a crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Local store is corrupt, starting empty", path=str(self.path))
            return {}

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
