"""
Exceptions raised by the reading engine.

The engine raises; the HTTP layer (study_server.routes) maps these onto
status codes. Each error aborts only the operation that raised it.
"""

from datetime import datetime
from typing import List, Optional


class StudyError(Exception):
    """Base class for all reading-engine errors."""


class ConfigurationError(StudyError):
    """The study is not set up for this action (needs administrator intervention)."""


class EmptyCasePoolError(ConfigurationError):
    def __init__(self, message: str = "No cases are registered. Contact the study administrator."):
        super().__init__(message)


class FacilityNotFoundError(ConfigurationError):
    def __init__(self, facility_id: str):
        super().__init__(f"Facility not found: {facility_id}")
        self.facility_id = facility_id


class InvariantViolationError(StudyError):
    """Stored data broke an invariant. Never repaired silently."""


class NotFoundError(StudyError):
    pass


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class ReaderNotFoundError(NotFoundError):
    def __init__(self, email: str):
        super().__init__(f"Reader not found: {email}")
        self.email = email


class ConditionLockedError(StudyError):
    """The condition cannot be started yet (ordering or washout gate)."""

    def __init__(self, condition: str, reason: str, unlock_at: Optional[datetime] = None):
        detail = f"Condition {condition!r} is locked ({reason})"
        if unlock_at is not None:
            detail += f"; available from {unlock_at.isoformat()}"
        super().__init__(detail)
        self.condition = condition
        self.reason = reason
        self.unlock_at = unlock_at


class SessionClosedError(StudyError):
    """The session is completed and accepts no new cases."""


class InvalidResultError(StudyError, ValueError):
    """A submitted reading result is incomplete or does not belong to the session."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class DuplicateError(StudyError):
    """A document that must be unique already exists."""


class ReaderDisabledError(StudyError):
    """The reader was soft-deleted; the account cannot read or re-register."""


class TimerStateError(StudyError):
    """Timer operation not valid in the current timer phase."""


class StoreError(StudyError):
    """A document store operation failed; the caller may retry."""


class TransactionConflictError(StoreError):
    def __init__(self, attempts: int):
        super().__init__(f"Transaction aborted after {attempts} conflicting attempts")
        self.attempts = attempts
