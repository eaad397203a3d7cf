"""Reader registration, profile, role and task overview models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from reading_engine.flow import ConditionStatus
from reading_engine.models.catalog import ExperienceLevel
from reading_engine.models.reader import Facility, ReaderProfile, UserRole


class RegisterReaderRequest(BaseModel):
    email: str = Field(min_length=3)
    facility_id: str
    reader_level: Optional[ExperienceLevel] = None
    display_name: Optional[str] = None


class RegisterReaderResponse(BaseModel):
    profile: ReaderProfile
    created: bool  # False when the email was already registered


class UpdateLevelRequest(BaseModel):
    reader_level: ExperienceLevel


class ReaderListResponse(BaseModel):
    readers: List[ReaderProfile]


class DeleteReaderResponse(BaseModel):
    status: str = "ok"
    email: str
    purged_documents: int


class RoleResponse(BaseModel):
    email: str
    role: UserRole
    facilities: List[Facility] = []


class TaskOverviewResponse(BaseModel):
    reader_id: str
    conditions: List[ConditionStatus]
