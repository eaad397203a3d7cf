"""
Study flow: which condition a reader may start, start/resume, submission
outcomes, and rest breaks between blocks.

Gates are evaluated against the clock on every call, so a washout ends on its
own without any background job.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel

from .errors import ConditionLockedError, ConfigurationError, EmptyCasePoolError, SessionClosedError
from .lifecycle import SessionLifecycle
from .models.catalog import TASK_TYPE_LABELS, TaskType
from .models.config import StudyConfig, resolve_config
from .models.reader import ReaderProfile
from .models.result import ReadingSubmission
from .models.session import BlockStatus, Session, SessionPosition, block_statuses
from .store import CasePoolProvider, DocumentStore
from .utils.clock import Clock, ensure_aware, utc_now

logger = logging.getLogger(__name__)


class ConditionState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class LockReason(str, Enum):
    PREVIOUS_INCOMPLETE = "previous_incomplete"
    WASHOUT = "washout"


class GateDecision(BaseModel):
    allowed: bool
    reason: Optional[LockReason] = None
    unlock_at: Optional[datetime] = None
    message: Optional[str] = None


class ConditionStatus(BaseModel):
    """One row of a reader's task overview."""

    condition: TaskType
    label_en: str
    label_ja: str
    state: ConditionState
    session_id: Optional[str] = None
    completed_cases: int = 0
    total_cases: int = 0
    completed_at: Optional[datetime] = None
    gate: GateDecision
    blocks: List[BlockStatus] = []


class SessionEntry(BaseModel):
    session: Session
    position: SessionPosition
    resumed: bool


class SubmitKind(str, Enum):
    NEXT = "next"
    BLOCK_BREAK = "block_break"
    COMPLETED = "completed"


class SubmitOutcome(BaseModel):
    kind: SubmitKind
    session: Session
    position: SessionPosition
    newly_recorded: bool
    # Block just finished, when kind is block_break
    completed_block: Optional[int] = None


class StudyFlow:
    """Ties the lifecycle, the case pool, and the sequencing rules together."""

    def __init__(
        self,
        store: DocumentStore,
        case_pool: CasePoolProvider,
        config: Optional[StudyConfig] = None,
        clock: Clock = utc_now,
    ):
        self.config = resolve_config(config)
        self._case_pool = case_pool
        self._clock = clock
        self.lifecycle = SessionLifecycle(store, self.config, clock)

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _order_index(self, condition: TaskType) -> int:
        try:
            return self.config.condition_order.index(condition)
        except ValueError:
            raise ConfigurationError(f"Condition {condition.value!r} is not part of this study")

    def check_gate(
        self,
        sessions: Dict[TaskType, Session],
        condition: TaskType,
        now: Optional[datetime] = None,
    ) -> GateDecision:
        """Condition k opens once k-1 is completed and its washout has elapsed."""
        condition = TaskType(condition)
        k = self._order_index(condition)
        if k == 0:
            return GateDecision(allowed=True)
        previous = self.config.condition_order[k - 1]
        prev_session = sessions.get(previous)
        if prev_session is None or not prev_session.is_completed:
            return GateDecision(
                allowed=False,
                reason=LockReason.PREVIOUS_INCOMPLETE,
                message=f"{TASK_TYPE_LABELS[previous]['ja']}完了待ち",
            )
        now = now or self._clock()
        unlock_at = ensure_aware(prev_session.completed_at) + timedelta(days=self.config.washout_days)
        if now < unlock_at:
            return GateDecision(
                allowed=False,
                reason=LockReason.WASHOUT,
                unlock_at=unlock_at,
                message=f"{unlock_at.month}/{unlock_at.day}以降開始可",
            )
        return GateDecision(allowed=True)

    def overview(self, reader_id: str) -> List[ConditionStatus]:
        """Status of every condition for one reader, in attempt order."""
        sessions = self.lifecycle.by_condition(reader_id)
        now = self._clock()
        rows = []
        for condition in self.config.condition_order:
            session = sessions.get(condition)
            if session is None:
                state = ConditionState.NOT_STARTED
            elif session.is_completed:
                state = ConditionState.COMPLETED
            else:
                state = ConditionState.IN_PROGRESS
            completed = session.completed_cases if session else 0
            total = session.total_cases if session else 0
            rows.append(
                ConditionStatus(
                    condition=condition,
                    label_en=TASK_TYPE_LABELS[condition]["en"],
                    label_ja=TASK_TYPE_LABELS[condition]["ja"],
                    state=state,
                    session_id=session.session_id if session else None,
                    completed_cases=completed,
                    total_cases=total,
                    completed_at=session.completed_at if session else None,
                    gate=self.check_gate(sessions, condition, now),
                    blocks=block_statuses(completed, total, self.config.block_size),
                )
            )
        return rows

    # ------------------------------------------------------------------
    # Start / resume
    # ------------------------------------------------------------------

    def start_or_resume(self, profile: ReaderProfile, condition: TaskType) -> SessionEntry:
        """
        Resume the reader's in-progress session for this condition, or start a
        new one when the gate allows it. Starting computes and stores the case
        order immediately.
        """
        condition = TaskType(condition)
        sessions = self.lifecycle.by_condition(profile.reader_id)
        existing = sessions.get(condition)
        if existing is not None:
            if existing.is_completed:
                raise SessionClosedError(
                    f"Condition {condition.value!r} is already completed for {profile.reader_id}"
                )
            logger.info("[flow] resume %s at case %d", existing.session_id, existing.completed_cases)
            return SessionEntry(session=existing, position=self.lifecycle.position(existing), resumed=True)

        gate = self.check_gate(sessions, condition)
        if not gate.allowed:
            raise ConditionLockedError(condition.value, gate.reason.value, gate.unlock_at)

        case_ids = self._case_pool.get_case_ids()
        if not case_ids:
            logger.error("[flow] case pool is empty; refusing to start %s for %s", condition.value, profile.reader_id)
            raise EmptyCasePoolError()
        session = self.lifecycle.create(profile, condition, case_ids)
        return SessionEntry(session=session, position=self.lifecycle.position(session), resumed=False)

    def entry(self, session_id: str) -> SessionEntry:
        """Re-enter an existing session by id (e.g. after a reload)."""
        session = self.lifecycle.get(session_id)
        return SessionEntry(session=session, position=self.lifecycle.position(session), resumed=True)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, session_id: str, submission: ReadingSubmission) -> SubmitOutcome:
        """Record one case and decide what the reader sees next."""
        recorded = self.lifecycle.record_result(session_id, submission)
        session = recorded.session
        position = self.lifecycle.position(session)
        if position.finished:
            kind = SubmitKind.COMPLETED
            completed_block = None
        else:
            # Break after the last case of a block; a retried submission of
            # that same case shows the break again.
            order_number = session.case_order.index(submission.case_id) + 1
            at_boundary = (
                order_number == session.completed_cases
                and order_number % self.config.block_size == 0
            )
            kind = SubmitKind.BLOCK_BREAK if at_boundary else SubmitKind.NEXT
            completed_block = order_number // self.config.block_size if at_boundary else None
        return SubmitOutcome(
            kind=kind,
            session=session,
            position=position,
            newly_recorded=recorded.newly_recorded,
            completed_block=completed_block,
        )
