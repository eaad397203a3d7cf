"""Facility, reader profile, and allocated identifier models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .catalog import ExperienceLevel


class Facility(BaseModel):
    """A participating facility. Also holds the reader-number allocation record."""

    facility_id: str
    name: str
    slug: str
    prefix: str
    next_reader_number: int = Field(default=1, ge=1)
    recycled_numbers: List[int] = Field(default_factory=list)
    admins: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("admins")
    @classmethod
    def lower_admins(cls, v: List[str]) -> List[str]:
        return [a.strip().lower() for a in v if a and a.strip()]

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class AllocatedReaderId(BaseModel):
    reader_id: str
    reader_number: int


class ReaderProfile(BaseModel):
    """A registered reader. Document id is the lower-cased email."""

    email: str
    reader_id: str
    reader_number: int
    facility_id: str
    facility_name: str
    reader_level: Optional[ExperienceLevel] = None
    display_name: Optional[str] = None
    disabled: bool = False
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    FACILITY_ADMIN = "facility_admin"
    READER = "reader"
