"""Data models for the reading engine."""

from .catalog import (
    AIReference,
    DIAGNOSIS_LABELS,
    DiagnosisClass,
    EXPERIENCE_LEVEL_LABELS,
    ExperienceLevel,
    TASK_TYPE_LABELS,
    TaskType,
    UNCLEAR_AI_DIAGNOSIS,
    task_label,
)
from .config import DEFAULT_CONFIG, StudyConfig, resolve_config
from .reader import AllocatedReaderId, Facility, ReaderProfile, UserRole
from .result import ReadingForm, ReadingResult, ReadingSubmission
from .session import (
    BlockState,
    BlockStatus,
    Session,
    SessionPosition,
    SessionStatus,
    block_statuses,
    derive_position,
)
from .timer import TimerState

__all__ = [
    "AIReference",
    "AllocatedReaderId",
    "BlockState",
    "BlockStatus",
    "DEFAULT_CONFIG",
    "DIAGNOSIS_LABELS",
    "DiagnosisClass",
    "EXPERIENCE_LEVEL_LABELS",
    "ExperienceLevel",
    "Facility",
    "ReaderProfile",
    "ReadingForm",
    "ReadingResult",
    "ReadingSubmission",
    "Session",
    "SessionPosition",
    "SessionStatus",
    "StudyConfig",
    "TASK_TYPE_LABELS",
    "TaskType",
    "TimerState",
    "UNCLEAR_AI_DIAGNOSIS",
    "UserRole",
    "block_statuses",
    "derive_position",
    "resolve_config",
    "task_label",
]
