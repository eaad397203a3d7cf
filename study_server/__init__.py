"""
Reading Study Server

Usage: uvicorn study_server:app --reload --port 8000
"""

from .app import app
from .config import ServerConfig, get_config, reload_config
from .services import (
    FirestoreDocumentStore,
    JsonFileLocalStore,
    MemoryDocumentStore,
    MemoryLocalStore,
    StaticCasePoolProvider,
    StoreCasePoolProvider,
)
from .state import AppState, get_state, set_state

__all__ = [
    "app",
    "AppState",
    "ServerConfig",
    "get_config",
    "get_state",
    "reload_config",
    "set_state",
    "FirestoreDocumentStore",
    "JsonFileLocalStore",
    "MemoryDocumentStore",
    "MemoryLocalStore",
    "StaticCasePoolProvider",
    "StoreCasePoolProvider",
]
