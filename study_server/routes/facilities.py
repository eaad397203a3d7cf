"""Facilities: create, list, and look up by id or slug."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from reading_engine.errors import FacilityNotFoundError
from reading_engine.models.reader import Facility

from ..models import CreateFacilityRequest, FacilityListResponse
from ..state import get_state

router = APIRouter()


@router.post("", response_model=Facility, status_code=201)
def create_facility(request: CreateFacilityRequest):
    state = get_state()
    try:
        return state.registry.create_facility(
            name=request.name,
            slug=request.slug,
            prefix=request.prefix,
            admins=request.admins,
            facility_id=request.facility_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=FacilityListResponse)
def list_facilities(admin_email: Optional[str] = Query(None, description="Only facilities this email administers")):
    state = get_state()
    if admin_email and admin_email.strip():
        return FacilityListResponse(facilities=state.registry.facilities_for_admin(admin_email))
    return FacilityListResponse(facilities=state.registry.list_facilities())


# Literal path before /{facility_id}
@router.get("/by-slug/{slug}", response_model=Facility)
def get_facility_by_slug(slug: str):
    facility = get_state().registry.get_facility_by_slug(slug)
    if facility is None:
        raise HTTPException(status_code=404, detail=f"No facility with slug {slug!r}")
    return facility


@router.get("/{facility_id}", response_model=Facility)
def get_facility(facility_id: str):
    try:
        return get_state().registry.get_facility(facility_id)
    except FacilityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
