"""
Reading sessions: start or resume a condition, read back the position, and
submit per-case results.
"""

from fastapi import APIRouter

from reading_engine.flow import SessionEntry, SubmitOutcome
from reading_engine.models.result import ReadingSubmission

from ..models import ResultListResponse, StartSessionRequest
from ..state import get_state

router = APIRouter()


@router.post("/start", response_model=SessionEntry)
def start_session(request: StartSessionRequest):
    """
    Resume the reader's in-progress session for the condition, or start a new
    one if the previous condition is done and its washout has passed.
    """
    state = get_state()
    profile = state.registry.get_profile(request.email)
    return state.flow.start_or_resume(profile, request.condition)


@router.get("/{session_id}", response_model=SessionEntry)
def get_session(session_id: str):
    """Session and the position derived from its completed count (next case, block, progress)."""
    return get_state().flow.entry(session_id)


@router.post("/{session_id}/results", response_model=SubmitOutcome)
def submit_result(session_id: str, submission: ReadingSubmission):
    """
    Record the result for one case. Re-submitting a case overwrites its result
    without counting it twice.
    """
    return get_state().flow.submit(session_id, submission)


@router.get("/{session_id}/results", response_model=ResultListResponse)
def list_results(session_id: str):
    state = get_state()
    # 404 for unknown sessions rather than an empty list
    state.flow.lifecycle.get(session_id)
    return ResultListResponse(session_id=session_id, results=state.flow.lifecycle.list_results(session_id))
