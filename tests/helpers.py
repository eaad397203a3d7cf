"""Builders shared by the test modules."""

from reading_engine.models.catalog import AIReference, DiagnosisClass, TaskType
from reading_engine.models.result import ReadingForm, ReadingSubmission


def case_ids(n: int):
    return [f"CASE-{i:04d}" for i in range(1, n + 1)]


def complete_form(task_type: TaskType) -> ReadingForm:
    """A form with every field the condition requires."""
    task_type = TaskType(task_type)
    return ReadingForm(
        diagnosis=DiagnosisClass.INFECTION,
        ai_diagnosis="infection" if task_type.shows_ai else None,
        confidence=4,
        ai_reference=AIReference.FOLLOWED if task_type.shows_ai else None,
        gradcam_helpful=3 if task_type.shows_gradcam else None,
    )


def submission_for(case_id: str, task_type: TaskType, reading_time_ms: int = 5000) -> ReadingSubmission:
    return ReadingSubmission(
        **complete_form(task_type).model_dump(),
        case_id=case_id,
        reading_time_ms=reading_time_ms,
    )
