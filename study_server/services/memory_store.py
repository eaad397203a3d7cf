"""
In-memory document store with optimistic transactions.

Used for local runs and tests (DATA_SOURCE=memory) and, with a path, as a
JSON-file-backed store (DATA_SOURCE=json). Every document carries a version;
a transaction records the versions it read and commits only if none of them
changed, otherwise it is re-run (like Firestore's transaction retry).
"""

import copy
import json
import logging
import random
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from reading_engine.errors import TransactionConflictError
from reading_engine.store import Mutator, atomic_update

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 20


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


class _MemoryTransaction:
    """Buffered writes plus the versions of everything read."""

    def __init__(self, store: "MemoryDocumentStore"):
        self._store = store
        self.reads: Dict[str, int] = {}
        self.writes: Dict[str, Dict[str, Any]] = {}

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        if self.writes:
            raise RuntimeError("Transaction reads must come before writes")
        doc, version = self._store._read_versioned(path)
        self.reads[path] = version
        return doc

    def set(self, path: str, data: Dict[str, Any]) -> None:
        self.writes[path] = copy.deepcopy(data)


class MemoryDocumentStore:
    """Document store kept in memory, optionally mirrored to a JSON file."""

    def __init__(
        self,
        path: Optional[Union[Path, str]] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._lock = threading.RLock()
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._versions: Dict[str, int] = {}
        self._max_attempts = max_attempts
        self._path = Path(path) if path else None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("[store] could not read %s: %s; starting empty", self._path, e)
            return
        for doc_path, doc in (data.get("documents") or {}).items():
            self._docs[doc_path] = doc
            self._versions[doc_path] = 1

    def _save(self) -> None:
        if self._path is None:
            return
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump({"documents": self._docs}, f, indent=2, ensure_ascii=False)
        tmp.replace(self._path)

    def _read_versioned(self, path: str):
        with self._lock:
            doc = self._docs.get(path)
            return (copy.deepcopy(doc) if doc is not None else None), self._versions.get(path, 0)

    def _write(self, path: str, data: Optional[Dict[str, Any]]) -> None:
        if data is None:
            self._docs.pop(path, None)
        else:
            self._docs[path] = copy.deepcopy(data)
        self._versions[path] = self._versions.get(path, 0) + 1

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        return self._read_versioned(path)[0]

    def put(self, path: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._write(path, data)
            self._save()

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        with self._lock:
            out = []
            for doc_path in sorted(self._docs):
                if _parent(doc_path) != collection:
                    continue
                doc = self._docs[doc_path]
                if all(doc.get(k) == v for k, v in equals.items()):
                    out.append(copy.deepcopy(doc))
            return out

    def list_collection(self, collection: str) -> List[Dict[str, Any]]:
        return self.query(collection)

    def delete_many(self, paths: Iterable[str]) -> None:
        with self._lock:
            for path in paths:
                if path in self._docs:
                    self._write(path, None)
            self._save()

    def run_transaction(self, fn: Callable[[_MemoryTransaction], T]) -> T:
        for attempt in range(1, self._max_attempts + 1):
            txn = _MemoryTransaction(self)
            result = fn(txn)
            with self._lock:
                if all(self._versions.get(p, 0) == v for p, v in txn.reads.items()):
                    for path, data in txn.writes.items():
                        self._write(path, data)
                    if txn.writes:
                        self._save()
                    return result
            logger.debug("[store] transaction conflict, attempt %d/%d", attempt, self._max_attempts)
            time.sleep(random.uniform(0, 0.001 * attempt))
        raise TransactionConflictError(self._max_attempts)

    def atomic_update(self, path: str, mutator: Mutator) -> Any:
        return atomic_update(self, path, mutator)

    def clear(self) -> None:
        """Drop every document (test helper and local reset)."""
        with self._lock:
            for path in list(self._docs):
                self._write(path, None)
            self._save()
