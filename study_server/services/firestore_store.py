"""
Firestore document store (DATA_SOURCE=firebase).

Document paths map 1:1 onto Firestore paths (sessions/{id}/results/{case_id}).
Transactions use firestore.transactional, which re-runs the function when a
document it read changed before commit.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from reading_engine.errors import StoreError, StudyError, TransactionConflictError
from reading_engine.store import Mutator, atomic_update

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Firestore limit on writes per batch
BATCH_SIZE = 500
DEFAULT_MAX_ATTEMPTS = 5

# Prefix of the ValueError the client raises once every attempt hit a conflict
EXCEEDED_ATTEMPTS_PREFIX = "Failed to commit transaction in"


def _attempts_exhausted(exc: ValueError) -> bool:
    return str(exc).startswith(EXCEEDED_ATTEMPTS_PREFIX)


class _FirestoreTransaction:
    """Path-based view of a google.cloud.firestore Transaction."""

    def __init__(self, db: Any, transaction: Any):
        self._db = db
        self._transaction = transaction

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        snap = self._db.document(path).get(transaction=self._transaction)
        return snap.to_dict() if snap.exists else None

    def set(self, path: str, data: Dict[str, Any]) -> None:
        self._transaction.set(self._db.document(path), data)


class FirestoreDocumentStore:
    """Document store backed by Cloud Firestore through firebase-admin."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        try:
            import firebase_admin
            from firebase_admin import credentials, firestore
            from google.api_core import exceptions as api_exceptions
        except ImportError:
            raise ImportError(
                "firebase-admin is required for FirestoreDocumentStore. pip install firebase-admin"
            )
        if not firebase_admin._apps:
            if credentials_path:
                cred = credentials.Certificate(str(Path(credentials_path).resolve()))
                opts = {"projectId": project_id} if project_id else None
                firebase_admin.initialize_app(cred, opts)
            else:
                firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
        self._firestore = firestore
        self._db = firestore.client()
        self._max_attempts = max_attempts
        self._api_errors = (api_exceptions.GoogleAPIError,)

    @contextmanager
    def _store_errors(self, action: str):
        try:
            yield
        except self._api_errors as e:
            logger.warning("[store] firestore %s failed: %s", action, e)
            raise StoreError(f"Firestore {action} failed: {e}") from e

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        with self._store_errors("get"):
            snap = self._db.document(path).get()
        return snap.to_dict() if snap.exists else None

    def put(self, path: str, data: Dict[str, Any]) -> None:
        with self._store_errors("set"):
            self._db.document(path).set(data)

    def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        from google.cloud.firestore_v1.base_query import FieldFilter

        q = self._db.collection(collection)
        for field, value in equals.items():
            q = q.where(filter=FieldFilter(field, "==", value))
        with self._store_errors("query"):
            docs = sorted(q.stream(), key=lambda d: d.id)
        return [d.to_dict() for d in docs]

    def list_collection(self, collection: str) -> List[Dict[str, Any]]:
        return self.query(collection)

    def delete_many(self, paths: Iterable[str]) -> None:
        paths = list(paths)
        with self._store_errors("batch delete"):
            for start in range(0, len(paths), BATCH_SIZE):
                batch = self._db.batch()
                for path in paths[start:start + BATCH_SIZE]:
                    batch.delete(self._db.document(path))
                batch.commit()

    def run_transaction(self, fn: Callable[[_FirestoreTransaction], T]) -> T:
        db = self._db

        @self._firestore.transactional
        def _run(transaction):
            return fn(_FirestoreTransaction(db, transaction))

        try:
            with self._store_errors("transaction"):
                return _run(db.transaction(max_attempts=self._max_attempts))
        except ValueError as e:
            if isinstance(e, StudyError) or not _attempts_exhausted(e):
                raise
            logger.warning("[store] firestore transaction gave up: %s", e)
            raise TransactionConflictError(self._max_attempts) from e

    def atomic_update(self, path: str, mutator: Mutator) -> Any:
        return atomic_update(self, path, mutator)
