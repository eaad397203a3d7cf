"""
Session lifecycle: absent -> in_progress -> completed, per (reader, condition).

The stored completed_cases counter is the only record of progress. The next
case is always case_order[completed_cases]; no separate pointer is stored.
Every mutation of a session goes through a store transaction.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from .errors import (
    ConfigurationError,
    EmptyCasePoolError,
    InvalidResultError,
    InvariantViolationError,
    SessionClosedError,
    SessionNotFoundError,
)
from .models.catalog import TaskType
from .models.config import StudyConfig, resolve_config
from .models.reader import ReaderProfile
from .models.result import ReadingResult, ReadingSubmission
from .models.session import Session, SessionPosition, SessionStatus, derive_position
from .store import SESSIONS, DocumentStore, Transaction, result_path, results_collection, session_path
from .utils.clock import Clock, utc_now
from .utils.hashing import derive_seed
from .utils.permutation import seeded_shuffle

logger = logging.getLogger(__name__)


class RecordOutcome(BaseModel):
    session: Session
    # False when a result for this case already existed (counter untouched)
    newly_recorded: bool
    # True when this submission completed the session
    finalized: bool


def check_transition(before: Session, after: Session) -> None:
    """Raise InvariantViolationError for any forbidden change between two versions."""
    after.check_invariants()
    if after.completed_cases < before.completed_cases:
        raise InvariantViolationError(
            f"session {before.session_id}: completed_cases went back "
            f"from {before.completed_cases} to {after.completed_cases}"
        )
    if before.is_completed:
        if after.status != SessionStatus.COMPLETED:
            raise InvariantViolationError(f"session {before.session_id}: completed -> {after.status.value}")
        if after.case_order != before.case_order or after.total_cases != before.total_cases:
            raise InvariantViolationError(f"session {before.session_id}: completed session was modified")


class SessionLifecycle:
    """Creates sessions, records results, and finalizes sessions."""

    def __init__(
        self,
        store: DocumentStore,
        config: Optional[StudyConfig] = None,
        clock: Clock = utc_now,
    ):
        self._store = store
        self.config = resolve_config(config)
        self._clock = clock

    # ------------------------------------------------------------------
    # absent -> in_progress
    # ------------------------------------------------------------------

    def create(self, profile: ReaderProfile, condition: TaskType, case_pool: Sequence[str]) -> Session:
        """
        Create a session with its case order materialized now. The order is never
        recomputed, so later changes to the pool do not affect this session.
        """
        condition = TaskType(condition)
        if not case_pool:
            raise EmptyCasePoolError()
        if len(set(case_pool)) != len(case_pool):
            raise ConfigurationError("Case pool contains duplicate case ids")
        if profile.reader_level is None:
            raise ConfigurationError(f"Reader {profile.reader_id} has no experience level set")

        seed = derive_seed(profile.reader_id, condition)
        case_order = seeded_shuffle(case_pool, seed)
        session = Session(
            session_id=str(uuid.uuid4()),
            reader_id=profile.reader_id,
            facility=profile.facility_name,
            reader_level=profile.reader_level,
            task_type=condition,
            shuffle_seed=seed,
            case_order=case_order,
            started_at=self._clock(),
            total_cases=len(case_order),
        )
        session.check_invariants()
        self._store.put(session_path(session.session_id), session.to_document())
        logger.info(
            "[session] created %s reader=%s condition=%s cases=%d seed=%d",
            session.session_id, session.reader_id, condition.value, session.total_cases, seed,
        )
        return session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, session_id: str) -> Session:
        data = self._store.get(session_path(session_id))
        if data is None:
            raise SessionNotFoundError(session_id)
        session = Session.from_document(data)
        session.check_invariants()
        return session

    def sessions_for_reader(self, reader_id: str) -> List[Session]:
        sessions = [Session.from_document(d) for d in self._store.query(SESSIONS, reader_id=reader_id)]
        return sorted(sessions, key=lambda s: s.started_at)

    def by_condition(self, reader_id: str) -> Dict[TaskType, Session]:
        """Most relevant session per condition: completed before in-progress."""
        out: Dict[TaskType, Session] = {}
        for session in self.sessions_for_reader(reader_id):
            current = out.get(session.task_type)
            if current is None or (session.is_completed and not current.is_completed):
                out[session.task_type] = session
        return out

    def find(self, reader_id: str, condition: TaskType) -> Optional[Session]:
        return self.by_condition(reader_id).get(TaskType(condition))

    def position(self, session: Session) -> SessionPosition:
        return derive_position(session, self.config.block_size)

    def list_results(self, session_id: str) -> List[ReadingResult]:
        docs = self._store.list_collection(results_collection(session_id))
        results = [ReadingResult.model_validate(d) for d in docs]
        return sorted(results, key=lambda r: r.case_order)

    # ------------------------------------------------------------------
    # in_progress -> in_progress / completed
    # ------------------------------------------------------------------

    def _advance(self, session: Session, now: datetime) -> Session:
        count = session.completed_cases + 1
        if count > session.total_cases:
            raise InvariantViolationError(
                f"session {session.session_id}: increment would exceed total_cases={session.total_cases}"
            )
        updates: Dict = {"completed_cases": count}
        if count == session.total_cases:
            updates["status"] = SessionStatus.COMPLETED
            updates["completed_at"] = now
        advanced = session.model_copy(update=updates)
        check_transition(session, advanced)
        return advanced

    def record_result(self, session_id: str, submission: ReadingSubmission) -> RecordOutcome:
        """
        Store the result for one case and count it once.

        The result document is keyed by case id, so a retried submission
        overwrites instead of duplicating, and the counter only moves when no
        result existed for that case. A completed session accepts no new cases.
        """
        spath = session_path(session_id)
        rpath = result_path(session_id, submission.case_id)
        now = self._clock()

        def _record(txn: Transaction) -> RecordOutcome:
            data = txn.get(spath)
            if data is None:
                raise SessionNotFoundError(session_id)
            session = Session.from_document(data)
            session.check_invariants()
            if submission.case_id not in session.case_order:
                raise InvalidResultError(
                    f"Case {submission.case_id} is not part of session {session_id}"
                )
            already_recorded = txn.get(rpath) is not None
            if session.is_completed:
                if already_recorded:
                    return RecordOutcome(session=session, newly_recorded=False, finalized=False)
                raise SessionClosedError(f"Session {session_id} is already completed")
            missing = submission.missing_fields(session.task_type)
            if missing:
                raise InvalidResultError("; ".join(missing), errors=missing)

            result = ReadingResult(
                session_id=session.session_id,
                reader_id=session.reader_id,
                facility=session.facility,
                reader_level=session.reader_level,
                task_type=session.task_type,
                case_id=submission.case_id,
                case_order=session.case_order.index(submission.case_id) + 1,
                diagnosis=submission.diagnosis,
                diagnosis_other=submission.diagnosis_other,
                ai_diagnosis=submission.ai_diagnosis,
                confidence=submission.confidence,
                ai_reference=submission.ai_reference if session.task_type.shows_ai else None,
                gradcam_helpful=submission.gradcam_helpful if session.task_type.shows_gradcam else None,
                reading_time_ms=submission.reading_time_ms,
                pause_count=submission.pause_count,
                pause_total_ms=submission.pause_total_ms,
                timestamp=now,
            )
            txn.set(rpath, result.to_document())
            if already_recorded:
                return RecordOutcome(session=session, newly_recorded=False, finalized=False)

            advanced = self._advance(session, now)
            txn.set(spath, advanced.to_document())
            return RecordOutcome(session=advanced, newly_recorded=True, finalized=advanced.is_completed)

        outcome = self._store.run_transaction(_record)
        if outcome.finalized:
            logger.info("[session] completed %s at %s", session_id, outcome.session.completed_at)
        elif not outcome.newly_recorded:
            logger.info("[session] %s: case %s re-submitted, count unchanged", session_id, submission.case_id)
        return outcome
