"""Application state: document store, case pool, registry, and study flow."""

import logging
from pathlib import Path
from typing import Optional

from reading_engine.allocator import ReaderIdAllocator
from reading_engine.errors import ConfigurationError
from reading_engine.flow import StudyFlow
from reading_engine.readers import ReaderRegistry
from reading_engine.store import CasePoolProvider, DocumentStore
from reading_engine.utils.clock import Clock, utc_now

from .config import ServerConfig, get_config
from .services import FirestoreDocumentStore, MemoryDocumentStore, StoreCasePoolProvider

logger = logging.getLogger(__name__)


def create_document_store(config: ServerConfig) -> DocumentStore:
    """Build the document store for DATA_SOURCE (memory, json or firebase)."""
    if config.data_source == "firebase":
        cred_path = config.firebase_credentials_path
        if cred_path and not Path(cred_path).is_file():
            raise ConfigurationError(f"Firebase credentials file not found: {cred_path}")
        logger.info("[startup] Document store: Firestore (project=%s)", config.firebase_project_id or "from credentials")
        return FirestoreDocumentStore(
            project_id=config.firebase_project_id,
            credentials_path=cred_path,
        )
    if config.data_source == "json":
        logger.info("[startup] Document store: JSON file %s", config.store_json_path)
        return MemoryDocumentStore(path=config.store_json_path)
    logger.info("[startup] Document store: in-memory (data is lost on restart)")
    return MemoryDocumentStore()


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServerConfig,
        store: Optional[DocumentStore] = None,
        case_pool: Optional[CasePoolProvider] = None,
        clock: Clock = utc_now,
    ):
        self.config = config
        self.study_config = config.study_config()
        self.store = store if store is not None else create_document_store(config)
        self.cases = StoreCasePoolProvider(self.store)
        self.case_pool = case_pool if case_pool is not None else self.cases
        self.allocator = ReaderIdAllocator(self.store)
        self.registry = ReaderRegistry(self.store, self.allocator, clock=clock)
        self.flow = StudyFlow(self.store, self.case_pool, self.study_config, clock=clock)

    @property
    def super_admin_emails(self):
        return self.config.super_admin_emails


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState(get_config())
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (tests, or None to rebuild from config on next use)."""
    global _state
    _state = state
