"""
Reading desk: the per-case loop a reader's client runs.

Opens the case at the stored position, times it, validates the form, submits,
and moves on (or stops for a block break / completion). The timer key is
"<session_id>_<case index>", so a reload of the same case resumes its timer.
"""

import logging
from typing import Optional

from .errors import InvalidResultError, StudyError
from .flow import SessionEntry, StudyFlow, SubmitKind, SubmitOutcome
from .models.result import ReadingForm, ReadingSubmission
from .models.session import Session, SessionPosition
from .timer import ReadingTimer

logger = logging.getLogger(__name__)


class ReadingDesk:
    """Drives one session case by case on the reader's device."""

    def __init__(self, flow: StudyFlow, timer: ReadingTimer):
        self._flow = flow
        self.timer = timer
        self._session: Optional[Session] = None
        self._position: Optional[SessionPosition] = None
        self.on_break = False

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def position(self) -> Optional[SessionPosition]:
        return self._position

    @property
    def current_case_id(self) -> Optional[str]:
        return self._position.next_case_id if self._position else None

    def timer_key(self) -> str:
        if self._session is None or self._position is None:
            raise StudyError("No session is open")
        return f"{self._session.session_id}_{self._position.next_index}"

    def open(self, entry: SessionEntry) -> None:
        """Show the next unread case and start (or resume) its timer."""
        self._session = entry.session
        self._position = entry.position
        self.on_break = False
        if not entry.position.finished:
            self.timer.start(self.timer_key())

    def pause(self) -> None:
        self.timer.pause()

    def resume(self) -> None:
        self.timer.resume()

    def submit(self, form: ReadingForm) -> SubmitOutcome:
        """
        Submit the form for the current case. On a store failure the exception
        propagates and nothing here changes: the timer keeps running with its
        saved state, so the form can be submitted again (or the page closed and
        reopened) and the reading time is then measured afresh.
        """
        if self._session is None or self._position is None or self._position.finished:
            raise StudyError("No open case to submit")
        missing = form.missing_fields(self._session.task_type)
        if missing:
            raise InvalidResultError("; ".join(missing), errors=missing)

        # Measured without stopping; the timer is only stopped once the result is stored
        reading_ms = self.timer.elapsed_ms()
        submission = ReadingSubmission(
            **form.model_dump(),
            case_id=self._position.next_case_id,
            reading_time_ms=reading_ms,
            pause_count=self.timer.pause_count,
            pause_total_ms=self.timer.total_paused_ms,
        )
        outcome = self._flow.submit(self._session.session_id, submission)

        self._session = outcome.session
        self._position = outcome.position
        self.timer.stop()
        self.timer.reset()
        if outcome.kind == SubmitKind.NEXT:
            self.timer.start(self.timer_key())
        elif outcome.kind == SubmitKind.BLOCK_BREAK:
            self.on_break = True
            logger.info("[desk] block %s done, break before case %d", outcome.completed_block, outcome.position.next_index + 1)
        return outcome

    def continue_after_break(self) -> None:
        if not self.on_break:
            raise StudyError("Not on a break")
        self.on_break = False
        self.timer.start(self.timer_key())

    def close(self) -> None:
        """Page-unload hook: keep the running timer's progress for the next load."""
        self.timer.persist()
