"""Device-local timer snapshot (never written to the shared store)."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class TimerState(BaseModel):
    """Persisted reading-timer state for the case currently on screen."""

    # Elapsed ms carried over from previous browsing sessions
    accumulated_ms: float = Field(default=0, ge=0)
    # Wall-clock ms when the current browsing session started counting
    resumed_at: float = 0
    # Paused ms within the current browsing session
    paused_ms: float = Field(default=0, ge=0)
    pause_count: int = Field(default=0, ge=0)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
