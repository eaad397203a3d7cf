"""
Reading Session Engine for a multi-reader imaging study.

Single entry point for the engine package:
- models/: Session, ReadingResult, Facility, ReaderProfile, StudyConfig
- utils/: 32-bit string hash and seeded permutation
- timer: ReadingTimer (net reading time, pause/resume, reload recovery)
- allocator: ReaderIdAllocator (facility-scoped reader ids)
- lifecycle: SessionLifecycle (progress record state machine)
- flow: StudyFlow (condition gates, start/resume, block breaks)
- desk: ReadingDesk (client reading loop)
- readers: ReaderRegistry (facilities, registration, soft delete)
"""

from .allocator import ReaderIdAllocator, format_reader_id
from .desk import ReadingDesk
from .flow import (
    ConditionState,
    ConditionStatus,
    GateDecision,
    LockReason,
    SessionEntry,
    StudyFlow,
    SubmitKind,
    SubmitOutcome,
)
from .lifecycle import RecordOutcome, SessionLifecycle
from .models import DEFAULT_CONFIG, StudyConfig, TaskType
from .readers import ReaderRegistry
from .timer import ReadingTimer, TimerColor, TimerPhase
from .utils import derive_seed, hash_code, seeded_shuffle

__all__ = [
    "ConditionState",
    "ConditionStatus",
    "DEFAULT_CONFIG",
    "GateDecision",
    "LockReason",
    "ReaderIdAllocator",
    "ReaderRegistry",
    "ReadingDesk",
    "ReadingTimer",
    "RecordOutcome",
    "SessionEntry",
    "SessionLifecycle",
    "StudyConfig",
    "StudyFlow",
    "SubmitKind",
    "SubmitOutcome",
    "TaskType",
    "TimerColor",
    "TimerPhase",
    "derive_seed",
    "format_reader_id",
    "hash_code",
    "seeded_shuffle",
]
