"""Facility request/response models."""

from typing import List, Optional

from pydantic import BaseModel, Field

from reading_engine.models.reader import Facility


class CreateFacilityRequest(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    # Reader id prefix, e.g. "OSK" -> OSK_001
    prefix: str = Field(min_length=1)
    admins: List[str] = []
    facility_id: Optional[str] = None


class FacilityListResponse(BaseModel):
    facilities: List[Facility]
