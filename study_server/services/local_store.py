"""
Device-local key/value stores for the reading timer.

Nothing here is shared between devices; losing it only loses the elapsed time
of the case being read.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


class MemoryLocalStore:
    """Local store held in a dict (tests, single process)."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return dict(value) if value is not None else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = dict(value)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileLocalStore:
    """One JSON file per key under a directory."""

    def __init__(self, directory: Union[Path, str]):
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _file(self, key: str) -> Path:
        return self._dir / f"{_UNSAFE.sub('_', key)}.json"

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._file(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else None

    def save(self, key: str, value: Dict[str, Any]) -> None:
        with open(self._file(key), "w", encoding="utf-8") as f:
            json.dump(value, f)

    def clear(self, key: str) -> None:
        self._file(key).unlink(missing_ok=True)
