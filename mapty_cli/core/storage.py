"""Key-value string storage backed by one JSON file per scope."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Synchronous string storage keyed by name."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> bool: ...


class JsonFileStorage:
    """Persist string values under keys in a single JSON object file.

    Every write replaces the whole file through a temporary file and
    ``os.replace``, so readers never see a partial document.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: root is not an object", self.path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".mapty-", suffix=".json", dir=str(self.path.parent))
        tmp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_path, self.path)
        finally:
            tmp_path.unlink(missing_ok=True)

    def read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
        logger.debug("Wrote %d bytes to %s[%s]", len(value), self.path, key)

    def remove(self, key: str) -> bool:
        """Delete ``key``; return whether it was present."""
        data = self._load()
        if key not in data:
            return False
        del data[key]
        self._dump(data)
        return True


class MemoryStorage:
    """In-process storage, handy for previews and tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value

    def remove(self, key: str) -> bool:
        return self.data.pop(key, None) is not None
