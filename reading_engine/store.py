"""
Storage abstractions consumed by the engine.

DocumentStore is the shared, authoritative store (sessions, results, facilities,
readers, cases). LocalStore is device-local scratch space used only by the
reading timer. CasePoolProvider supplies the ordered case ids.
Implementations live in study_server.services (in-memory/JSON, Firestore).
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple, TypeVar

T = TypeVar("T")

# mutator(current_document_or_None) -> (new_document_or_None, return_value)
# Returning None as the new document leaves the stored document unchanged.
Mutator = Callable[[Optional[Dict[str, Any]]], Tuple[Optional[Dict[str, Any]], T]]

SESSIONS = "sessions"
RESULTS = "results"
FACILITIES = "facilities"
READERS = "readers"
CASES = "cases"


def doc_path(*parts: str) -> str:
    """Join path segments: doc_path("sessions", sid, "results", cid)."""
    for p in parts:
        if not p or "/" in p:
            raise ValueError(f"Invalid path segment: {p!r}")
    return "/".join(parts)


def session_path(session_id: str) -> str:
    return doc_path(SESSIONS, session_id)


def results_collection(session_id: str) -> str:
    return doc_path(SESSIONS, session_id, RESULTS)


def result_path(session_id: str, case_id: str) -> str:
    return doc_path(SESSIONS, session_id, RESULTS, case_id)


def facility_path(facility_id: str) -> str:
    return doc_path(FACILITIES, facility_id)


def reader_path(email: str) -> str:
    return doc_path(READERS, email.strip().lower())


class Transaction(Protocol):
    """Reads and buffered writes inside one atomic unit. All reads come before writes."""

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        ...

    def set(self, path: str, data: Dict[str, Any]) -> None:
        ...


class DocumentStore(Protocol):
    """Protocol for the shared document store. Implement for memory/JSON or Firestore."""

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Return the document at path, or None."""
        ...

    def put(self, path: str, data: Dict[str, Any]) -> None:
        """Create or overwrite the document at path."""
        ...

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        """Return documents of a collection whose fields equal the given values."""
        ...

    def list_collection(self, collection: str) -> List[Dict[str, Any]]:
        """Return all documents of a collection, ordered by document id."""
        ...

    def delete_many(self, paths: Iterable[str]) -> None:
        """Best-effort batch delete. Missing documents are ignored."""
        ...

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """
        Run fn atomically. fn may be invoked more than once when a concurrent
        writer touched a document it read; it must not have side effects outside
        the transaction. Raises TransactionConflictError when retries run out.
        """
        ...

    def atomic_update(self, path: str, mutator: Mutator) -> Any:
        """Read-modify-write one document with retry on conflict."""
        ...


def atomic_update(store: DocumentStore, path: str, mutator: Mutator) -> Any:
    """Single-document read-modify-write expressed as a transaction."""

    def _apply(txn: Transaction):
        new_doc, result = mutator(txn.get(path))
        if new_doc is not None:
            txn.set(path, new_doc)
        return result

    return store.run_transaction(_apply)


class LocalStore(Protocol):
    """Device-local key/value storage. Not synchronised, not authoritative."""

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def save(self, key: str, value: Dict[str, Any]) -> None:
        ...

    def clear(self, key: str) -> None:
        ...


class CasePoolProvider(Protocol):
    """Supplies the ordered case ids of the study (populated out of band)."""

    def get_case_ids(self) -> List[str]:
        ...
