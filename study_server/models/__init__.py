"""Pydantic request/response models for the API."""

from .facilities import CreateFacilityRequest, FacilityListResponse
from .readers import (
    DeleteReaderResponse,
    ReaderListResponse,
    RegisterReaderRequest,
    RegisterReaderResponse,
    RoleResponse,
    TaskOverviewResponse,
    UpdateLevelRequest,
)
from .sessions import CaseListResponse, ResultListResponse, StartSessionRequest

__all__ = [
    "CaseListResponse",
    "CreateFacilityRequest",
    "DeleteReaderResponse",
    "FacilityListResponse",
    "ReaderListResponse",
    "RegisterReaderRequest",
    "RegisterReaderResponse",
    "ResultListResponse",
    "RoleResponse",
    "StartSessionRequest",
    "TaskOverviewResponse",
    "UpdateLevelRequest",
]
