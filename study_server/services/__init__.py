"""Store backends and providers behind the engine's protocols."""

from .case_pool import StaticCasePoolProvider, StoreCasePoolProvider
from .firestore_store import FirestoreDocumentStore
from .local_store import JsonFileLocalStore, MemoryLocalStore
from .memory_store import MemoryDocumentStore

__all__ = [
    "FirestoreDocumentStore",
    "JsonFileLocalStore",
    "MemoryDocumentStore",
    "MemoryLocalStore",
    "StaticCasePoolProvider",
    "StoreCasePoolProvider",
]
