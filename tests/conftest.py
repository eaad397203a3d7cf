"""Shared fixtures: controllable clocks, an in-memory store, a registered reader, and an API client."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from helpers import case_ids
from reading_engine.flow import StudyFlow
from reading_engine.models.catalog import ExperienceLevel
from reading_engine.models.config import StudyConfig
from reading_engine.readers import ReaderRegistry
from study_server.app import app
from study_server.config import ServerConfig
from study_server.state import AppState, set_state
from study_server.services import MemoryDocumentStore, MemoryLocalStore, StaticCasePoolProvider

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class ManualClock:
    """Datetime clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class ManualMillis:
    """Millisecond clock for the reading timer."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def millis():
    return ManualMillis()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def local_store():
    return MemoryLocalStore()


@pytest.fixture
def registry(store, clock):
    return ReaderRegistry(store, clock=clock)


@pytest.fixture
def facility(registry):
    return registry.create_facility("Osaka University Hospital", "osaka", "OSK", admins=["Admin@Osaka.example"])


@pytest.fixture
def profile(registry, facility):
    profile, _ = registry.register("reader1@osaka.example", facility.facility_id, reader_level=ExperienceLevel.SPECIALIST)
    return profile


@pytest.fixture
def study_config():
    return StudyConfig(block_size=3, washout_days=14)


@pytest.fixture
def case_pool():
    return StaticCasePoolProvider(case_ids(7))


@pytest.fixture
def flow(store, case_pool, study_config, clock):
    return StudyFlow(store, case_pool, study_config, clock=clock)


@pytest.fixture
def app_state(store, case_pool, clock):
    state = AppState(
        ServerConfig(block_size=3, washout_days=14, super_admin_emails=("chief@study.example",)),
        store=store,
        case_pool=case_pool,
        clock=clock,
    )
    set_state(state)
    yield state
    set_state(None)


@pytest.fixture
def client(app_state):
    return TestClient(app)
