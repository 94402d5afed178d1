"""
Durable key-value storage for the application state documents.

Each logical key (``users``, ``cart``, ...) maps to one JSON document.
Reads never fail for a missing key; they return the supplied default.
Writes report failure by returning ``False`` and are not retried.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> bool: ...

    def remove(self, key: str) -> bool: ...


class JsonFileStore:
    """One ``<key>.json`` file per document inside ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            # Corrupted document: fall back to the default but leave the file for inspection.
            logger.warning("Could not read %s: %s", path, exc)
            return default

    def save(self, key: str, value: Any) -> bool:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            payload = json.dumps(value, indent=2, sort_keys=True)
            self.root.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Could not save %s: %s", path, exc)
            return False
        return True

    def remove(self, key: str) -> bool:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            logger.error("Could not remove %s: %s", key, exc)
            return False
        return True


class MemoryKeyValueStore:
    """Dict-backed store. Values are serialised on save so callers cannot alias them."""

    def __init__(self) -> None:
        self.documents: dict[str, str] = {}

    def load(self, key: str, default: Any = None) -> Any:
        raw = self.documents.get(key)
        if raw is None:
            return copy.deepcopy(default)
        return json.loads(raw)

    def save(self, key: str, value: Any) -> bool:
        try:
            self.documents[key] = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.error("Could not save %s: %s", key, exc)
            return False
        return True

    def remove(self, key: str) -> bool:
        self.documents.pop(key, None)
        return True
