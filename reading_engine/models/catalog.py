"""
Fixed vocabularies of the study: conditions, reader levels, diagnoses.

Each enum member carries an English and a Japanese label for display.
"""

from enum import Enum
from typing import Dict


class TaskType(str, Enum):
    """Experimental condition (one arm of the study)."""

    UNAIDED = "unaided"
    AI_ONLY = "ai_only"
    AI_GRADCAM = "ai_gradcam"

    @property
    def shows_ai(self) -> bool:
        return self in (TaskType.AI_ONLY, TaskType.AI_GRADCAM)

    @property
    def shows_gradcam(self) -> bool:
        return self is TaskType.AI_GRADCAM


class ExperienceLevel(str, Enum):
    SPECIALIST = "specialist"
    GENERAL = "general"
    RESIDENT = "resident"


class DiagnosisClass(str, Enum):
    NORMAL = "normal"
    INFECTION = "infection"
    NON_INFECTION = "non-infection"
    SCAR = "scar"
    TUMOR = "tumor"
    DEPOSIT = "deposit"
    APAC = "APAC"
    LENS_OPACITY = "lens opacity"
    BULLOUS = "bullous"


class AIReference(str, Enum):
    """How the reader used the AI suggestion."""

    FOLLOWED = "followed"
    CHANGED = "changed"
    INDEPENDENT = "independent"


TASK_TYPE_LABELS: Dict[TaskType, Dict[str, str]] = {
    TaskType.UNAIDED: {"en": "Unaided", "ja": "AI支援なし"},
    TaskType.AI_ONLY: {"en": "AI only", "ja": "AI分類結果のみ"},
    TaskType.AI_GRADCAM: {"en": "AI + Grad-CAM", "ja": "AI + Grad-CAM"},
}

EXPERIENCE_LEVEL_LABELS: Dict[ExperienceLevel, Dict[str, str]] = {
    ExperienceLevel.SPECIALIST: {"en": "Corneal Specialist", "ja": "角膜専門医"},
    ExperienceLevel.GENERAL: {"en": "General Ophthalmologist", "ja": "一般眼科医"},
    ExperienceLevel.RESIDENT: {"en": "Resident", "ja": "後期研修医"},
}

DIAGNOSIS_LABELS: Dict[DiagnosisClass, Dict[str, str]] = {
    DiagnosisClass.NORMAL: {"en": "Normal", "ja": "正常"},
    DiagnosisClass.INFECTION: {"en": "Infection", "ja": "感染"},
    DiagnosisClass.NON_INFECTION: {"en": "Non-infection", "ja": "非感染"},
    DiagnosisClass.SCAR: {"en": "Scar", "ja": "瘢痕"},
    DiagnosisClass.TUMOR: {"en": "Tumor", "ja": "腫瘍"},
    DiagnosisClass.DEPOSIT: {"en": "Deposit", "ja": "沈着物"},
    DiagnosisClass.APAC: {"en": "APAC", "ja": "急性緑内障発作"},
    DiagnosisClass.LENS_OPACITY: {"en": "Lens Opacity", "ja": "水晶体混濁"},
    DiagnosisClass.BULLOUS: {"en": "Bullous", "ja": "水疱性"},
}

# AI output the reader could not classify
UNCLEAR_AI_DIAGNOSIS = "unclear"


def task_label(task_type: TaskType, lang: str = "en") -> str:
    return TASK_TYPE_LABELS[TaskType(task_type)][lang]
