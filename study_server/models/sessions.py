"""Session-related Pydantic models."""

from typing import List

from pydantic import BaseModel

from reading_engine.models.catalog import TaskType
from reading_engine.models.result import ReadingResult


class StartSessionRequest(BaseModel):
    email: str
    condition: TaskType


class ResultListResponse(BaseModel):
    session_id: str
    results: List[ReadingResult]


class CaseListResponse(BaseModel):
    case_ids: List[str]
    total: int
