"""
Session model: one reader's run through one condition, plus derived position.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..errors import InvariantViolationError
from .catalog import ExperienceLevel, TaskType


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Session(BaseModel):
    """A reader's progress record for one condition. Case order is fixed at creation."""

    session_id: str
    reader_id: str
    facility: str
    reader_level: ExperienceLevel
    task_type: TaskType
    shuffle_seed: int
    case_order: List[str]
    started_at: datetime
    completed_at: Optional[datetime] = None
    is_practice: bool = False
    total_cases: int = Field(ge=0)
    completed_cases: int = Field(default=0, ge=0)
    status: SessionStatus = SessionStatus.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def check_invariants(self) -> None:
        """Raise InvariantViolationError if the record is internally inconsistent."""
        if self.completed_cases > self.total_cases:
            raise InvariantViolationError(
                f"session {self.session_id}: completed_cases={self.completed_cases} "
                f"exceeds total_cases={self.total_cases}"
            )
        if len(self.case_order) != self.total_cases:
            raise InvariantViolationError(
                f"session {self.session_id}: case_order has {len(self.case_order)} entries, "
                f"total_cases={self.total_cases}"
            )
        if len(set(self.case_order)) != len(self.case_order):
            raise InvariantViolationError(f"session {self.session_id}: duplicate case ids in case_order")
        if self.is_completed != (self.completed_at is not None):
            raise InvariantViolationError(
                f"session {self.session_id}: status={self.status.value} "
                f"but completed_at={self.completed_at!r}"
            )

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "Session":
        return cls.model_validate(data)


class BlockState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class BlockStatus(BaseModel):
    """Progress of one fixed-size block of a session (1-based number)."""

    number: int
    start: int
    end: int
    state: BlockState

    @property
    def label(self) -> str:
        return f"Block {self.number}"

    @property
    def range_label(self) -> str:
        return f"{self.start + 1}-{self.end}"


class SessionPosition(BaseModel):
    """Where a reader is within a session. Always derived from completed_cases."""

    next_index: int
    next_case_id: Optional[str] = None
    completed_cases: int
    total_cases: int
    current_block: int
    total_blocks: int
    progress_percent: float
    finished: bool


def derive_position(session: Session, block_size: int) -> SessionPosition:
    """Reconstruct the reader's position from the stored completion count."""
    index = session.completed_cases
    total = session.total_cases
    finished = index >= total
    return SessionPosition(
        next_index=index,
        next_case_id=None if finished else session.case_order[index],
        completed_cases=index,
        total_cases=total,
        current_block=min(index, max(total - 1, 0)) // block_size + 1,
        total_blocks=math.ceil(total / block_size) if total else 0,
        progress_percent=(index / total) * 100 if total else 0.0,
        finished=finished,
    )


def block_statuses(completed_cases: int, total_cases: int, block_size: int) -> List[BlockStatus]:
    """Per-block status: completed if all its cases are done, in progress if any are."""
    out = []
    for number, start in enumerate(range(0, total_cases, block_size), start=1):
        end = min(start + block_size, total_cases)
        if completed_cases >= end:
            state = BlockState.COMPLETED
        elif completed_cases > start:
            state = BlockState.IN_PROGRESS
        else:
            state = BlockState.NOT_STARTED
        out.append(BlockStatus(number=number, start=start, end=end, state=state))
    return out
