"""Case pool listing."""

from fastapi import APIRouter

from ..models import CaseListResponse
from ..state import get_state

router = APIRouter()


@router.get("", response_model=CaseListResponse)
def list_cases():
    case_ids = get_state().case_pool.get_case_ids()
    return CaseListResponse(case_ids=case_ids, total=len(case_ids))
