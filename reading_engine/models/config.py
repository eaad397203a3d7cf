"""
Study configuration: condition order, washout, block size, and timer bands.

StudyConfig defaults are defined here. The server may pass a dict
(e.g. values read from the environment); from_dict() merges it with these defaults.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator

from .catalog import TaskType


class StudyConfig(BaseModel):
    """Configuration for the reading study flow."""

    # -------------------------------------------------------------------------
    # Condition sequencing
    # -------------------------------------------------------------------------

    # Conditions must be attempted in this order. Condition k unlocks only
    # after condition k-1 is completed.
    condition_order: List[TaskType] = [
        TaskType.UNAIDED,
        TaskType.AI_ONLY,
        TaskType.AI_GRADCAM,
    ]

    # Cooldown between completing one condition and unlocking the next.
    washout_days: int = 14

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    # Cases per block. A rest break is offered after each full block.
    block_size: int = 50

    # -------------------------------------------------------------------------
    # Timer display bands (advisory only, never stored)
    # -------------------------------------------------------------------------

    timer_warning_seconds: int = 30
    timer_alert_seconds: int = 60

    @field_validator("condition_order")
    @classmethod
    def conditions_unique(cls, v: List[TaskType]) -> List[TaskType]:
        if not v:
            raise ValueError("condition_order cannot be empty")
        if len(set(v)) != len(v):
            raise ValueError("condition_order contains duplicates")
        return v

    @field_validator("block_size")
    @classmethod
    def block_size_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("block_size must be >= 1")
        return v

    @field_validator("washout_days")
    @classmethod
    def washout_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("washout_days must be >= 0")
        return v

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "StudyConfig":
        """Create config from a dictionary, ignoring unknown keys."""
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in config_dict.items() if k in allowed and v is not None}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = StudyConfig()


def resolve_config(config: Optional[StudyConfig]) -> StudyConfig:
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
