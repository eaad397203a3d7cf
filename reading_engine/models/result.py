"""
Reading result models: the per-case form, the submission, and the stored record.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .catalog import AIReference, DiagnosisClass, ExperienceLevel, TaskType, UNCLEAR_AI_DIAGNOSIS

_AI_DIAGNOSIS_VALUES = {d.value for d in DiagnosisClass} | {UNCLEAR_AI_DIAGNOSIS}


def _check_ai_diagnosis(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in _AI_DIAGNOSIS_VALUES:
        raise ValueError(f"Unknown AI diagnosis: {value!r}")
    return value


class ReadingForm(BaseModel):
    """Answers entered for one case. Which fields are required depends on the condition."""

    diagnosis: Optional[DiagnosisClass] = None
    diagnosis_other: Optional[str] = None
    ai_diagnosis: Optional[str] = None
    confidence: Optional[int] = Field(default=None, ge=1, le=5)
    ai_reference: Optional[AIReference] = None
    gradcam_helpful: Optional[int] = Field(default=None, ge=1, le=5)

    @field_validator("ai_diagnosis")
    @classmethod
    def known_ai_diagnosis(cls, v: Optional[str]) -> Optional[str]:
        return _check_ai_diagnosis(v)

    def missing_fields(self, task_type: TaskType) -> List[str]:
        """Return validation messages (JA / EN) for unanswered required items."""
        task_type = TaskType(task_type)
        errors = []
        if self.diagnosis is None:
            errors.append("診断名が未選択です / Diagnosis not selected")
        if self.confidence is None:
            errors.append("確信度が未選択です / Confidence not selected")
        if task_type.shows_ai and self.ai_reference is None:
            errors.append("AI参考度が未選択です / AI reference not selected")
        if task_type.shows_gradcam and self.gradcam_helpful is None:
            errors.append("Grad-CAM有用性が未選択です / Grad-CAM helpfulness not selected")
        return errors


class ReadingSubmission(ReadingForm):
    """A completed form for one case, with the timing measured on the reader's device."""

    case_id: str
    reading_time_ms: int = Field(ge=0)
    pause_count: int = Field(default=0, ge=0)
    pause_total_ms: int = Field(default=0, ge=0)


class ReadingResult(BaseModel):
    """Stored record for one (session, case) pair. Keyed by case_id within the session."""

    session_id: str
    reader_id: str
    facility: str
    reader_level: ExperienceLevel
    task_type: TaskType
    case_id: str
    case_order: int
    diagnosis: DiagnosisClass
    diagnosis_other: Optional[str] = None
    ai_diagnosis: Optional[str] = None
    confidence: int = Field(ge=1, le=5)
    ai_reference: Optional[AIReference] = None
    gradcam_helpful: Optional[int] = Field(default=None, ge=1, le=5)
    reading_time_ms: int = Field(ge=0)
    pause_count: int = 0
    pause_total_ms: int = 0
    timestamp: datetime

    @field_validator("ai_diagnosis")
    @classmethod
    def known_ai_diagnosis(cls, v: Optional[str]) -> Optional[str]:
        return _check_ai_diagnosis(v)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
