"""
Readers: registration, profile, experience level, soft delete, role, and the
per-condition task overview.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from reading_engine.errors import FacilityNotFoundError
from reading_engine.models.reader import ReaderProfile

from ..models import (
    DeleteReaderResponse,
    ReaderListResponse,
    RegisterReaderRequest,
    RegisterReaderResponse,
    RoleResponse,
    TaskOverviewResponse,
    UpdateLevelRequest,
)
from ..state import get_state

router = APIRouter()


@router.post("/register", response_model=RegisterReaderResponse)
def register_reader(request: RegisterReaderRequest):
    """
    Register an email at a facility and issue its reader id (e.g. OSK_001).
    An already registered email gets its existing profile back (created=False).
    """
    state = get_state()
    try:
        profile, created = state.registry.register(
            request.email,
            request.facility_id,
            reader_level=request.reader_level,
            display_name=request.display_name,
        )
    except FacilityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RegisterReaderResponse(profile=profile, created=created)


@router.get("", response_model=ReaderListResponse)
def list_readers(facility_id: Optional[str] = Query(None, description="Restrict to one facility")):
    return ReaderListResponse(readers=get_state().registry.list_readers(facility_id))


# ---------------------------------------------------------------------------
# Per-reader paths
# ---------------------------------------------------------------------------


@router.get("/{email}", response_model=ReaderProfile)
def get_reader(email: str):
    return get_state().registry.get_profile(email)


@router.patch("/{email}/level", response_model=ReaderProfile)
def update_reader_level(email: str, request: UpdateLevelRequest):
    return get_state().registry.update_level(email, request.reader_level)


@router.delete("/{email}", response_model=DeleteReaderResponse)
def delete_reader(email: str):
    """Soft delete: disable the account, free its reader number, purge its sessions and results."""
    purged = get_state().registry.soft_delete(email)
    return DeleteReaderResponse(email=email.strip().lower(), purged_documents=purged)


@router.get("/{email}/tasks", response_model=TaskOverviewResponse)
def get_reader_tasks(email: str):
    """Status, gate, and block progress of every condition for this reader."""
    state = get_state()
    profile = state.registry.get_profile(email)
    return TaskOverviewResponse(
        reader_id=profile.reader_id,
        conditions=state.flow.overview(profile.reader_id),
    )


@router.get("/{email}/role", response_model=RoleResponse)
def get_reader_role(email: str):
    state = get_state()
    role, facilities = state.registry.resolve_role(email, state.super_admin_emails)
    return RoleResponse(email=email.strip().lower(), role=role, facilities=facilities)
