"""
Reading timer: net reading time for the case on screen, with pause/resume and
recovery across reloads.

Phases: idle -> running -> {paused <-> running} -> stopped.

State needed to resume after a reload is written to a device-local LocalStore
(never the shared store). Net time excludes every paused interval. A reload
restarts counting from the persisted accumulation, so the gap between unload
and reload is not counted.
"""

import logging
from enum import Enum
from typing import Optional

from .errors import TimerStateError
from .models.timer import TimerState
from .store import LocalStore
from .utils.clock import MillisClock, wall_clock_ms

logger = logging.getLogger(__name__)

KEY_PREFIX = "reading_timer_"


class TimerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TimerColor(str, Enum):
    """Advisory display band. Has no effect on stored data."""

    NORMAL = "normal"
    WARNING = "warning"
    ALERT = "alert"


class ReadingTimer:
    """Measures net reading time for one case at a time."""

    def __init__(
        self,
        local_store: Optional[LocalStore] = None,
        clock: MillisClock = wall_clock_ms,
        warning_seconds: int = 30,
        alert_seconds: int = 60,
    ):
        self._local = local_store
        self._clock = clock
        self._warning_seconds = warning_seconds
        self._alert_seconds = alert_seconds
        self._phase = TimerPhase.IDLE
        self._persist_key: Optional[str] = None
        self._accumulated_ms = 0.0
        self._resumed_at: Optional[float] = None
        self._pause_started_at: Optional[float] = None
        self._paused_ms = 0.0
        self._pause_count = 0
        self._stopped_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Local persistence (best effort)
    # ------------------------------------------------------------------

    def _load(self, key: str) -> Optional[TimerState]:
        if self._local is None:
            return None
        try:
            data = self._local.load(KEY_PREFIX + key)
            return TimerState.model_validate(data) if data else None
        except Exception as e:
            logger.warning("[timer] could not restore state for %s: %s", key, e)
            return None

    def _save(self, state: TimerState) -> None:
        if self._local is None or not self._persist_key:
            return
        try:
            self._local.save(KEY_PREFIX + self._persist_key, state.to_dict())
        except Exception as e:
            logger.warning("[timer] could not persist state for %s: %s", self._persist_key, e)

    def _clear(self) -> None:
        if self._local is None or not self._persist_key:
            return
        try:
            self._local.clear(KEY_PREFIX + self._persist_key)
        except Exception as e:
            logger.warning("[timer] could not clear state for %s: %s", self._persist_key, e)

    def _snapshot(self, now: float) -> TimerState:
        return TimerState(
            accumulated_ms=self._accumulated_ms + self._session_ms(now),
            resumed_at=now,
            paused_ms=self._paused_ms,
            pause_count=self._pause_count,
        )

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def _session_ms(self, now: float) -> float:
        """Net ms counted in the current browsing session."""
        if self._resumed_at is None:
            return 0.0
        paused = self._paused_ms
        if self._pause_started_at is not None:
            paused += now - self._pause_started_at
        return max(0.0, now - self._resumed_at - paused)

    def start(self, persist_key: Optional[str] = None) -> None:
        """
        Start counting. With a persist_key, a previously saved state for that key
        is resumed (accumulated time and pause count carry over); otherwise the
        timer starts at zero.
        """
        now = self._clock()
        self._pause_started_at = None
        self._paused_ms = 0.0
        self._stopped_at = None
        self._resumed_at = now
        self._persist_key = persist_key or None
        saved = self._load(persist_key) if persist_key else None
        if saved is not None:
            self._accumulated_ms = saved.accumulated_ms
            self._pause_count = saved.pause_count
            logger.info("[timer] resumed %s at %.0f ms", persist_key, saved.accumulated_ms)
        else:
            self._accumulated_ms = 0.0
            self._pause_count = 0
        self._phase = TimerPhase.RUNNING
        if persist_key:
            self._save(self._snapshot(now))

    def pause(self) -> None:
        if self._phase != TimerPhase.RUNNING:
            raise TimerStateError(f"cannot pause a timer that is {self._phase.value}")
        now = self._clock()
        self._pause_started_at = now
        self._pause_count += 1
        self._phase = TimerPhase.PAUSED
        # Saved right away so closing the page while paused keeps the time read so far
        self._save(self._snapshot(now))

    def resume(self) -> None:
        if self._phase != TimerPhase.PAUSED or self._pause_started_at is None:
            raise TimerStateError(f"cannot resume a timer that is {self._phase.value}")
        self._paused_ms += self._clock() - self._pause_started_at
        self._pause_started_at = None
        self._phase = TimerPhase.RUNNING

    def stop(self) -> int:
        """
        Stop and return net elapsed ms (carried accumulation plus time since the
        last start, minus paused time). Clears persisted state.

        Calling stop() again recomputes against the current instant, which is how
        a retried submission measures its (slightly longer) reading time.
        """
        now = self._clock()
        if self._resumed_at is None:
            self._phase = TimerPhase.STOPPED
            return int(round(self._accumulated_ms))
        if self._pause_started_at is not None:
            self._paused_ms += now - self._pause_started_at
            self._pause_started_at = None
        total = self._accumulated_ms + self._session_ms(now)
        self._stopped_at = now
        self._phase = TimerPhase.STOPPED
        self._clear()
        self._persist_key = None
        return int(round(total))

    def reset(self) -> None:
        """Zero all counters and drop persisted state (moving to a new case)."""
        self._clear()
        self._persist_key = None
        self._phase = TimerPhase.IDLE
        self._accumulated_ms = 0.0
        self._resumed_at = None
        self._pause_started_at = None
        self._paused_ms = 0.0
        self._pause_count = 0
        self._stopped_at = None

    def persist(self) -> None:
        """Unload hook: snapshot the running timer so the next load can resume."""
        if self._phase == TimerPhase.RUNNING and self._persist_key:
            self._save(self._snapshot(self._clock()))

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def phase(self) -> TimerPhase:
        return self._phase

    @property
    def paused(self) -> bool:
        return self._phase == TimerPhase.PAUSED

    @property
    def persist_key(self) -> Optional[str]:
        return self._persist_key

    @property
    def pause_count(self) -> int:
        return self._pause_count

    @property
    def total_paused_ms(self) -> int:
        paused = self._paused_ms
        if self._pause_started_at is not None:
            paused += self._clock() - self._pause_started_at
        return int(round(paused))

    def elapsed_ms(self) -> int:
        if self._phase == TimerPhase.IDLE:
            return 0
        now = self._stopped_at if self._phase == TimerPhase.STOPPED else self._clock()
        return int(round(self._accumulated_ms + self._session_ms(now)))

    def display(self) -> str:
        """Elapsed time as MM:SS."""
        seconds = self.elapsed_ms() // 1000
        return f"{seconds // 60:02d}:{seconds % 60:02d}"

    def color(self) -> TimerColor:
        seconds = self.elapsed_ms() // 1000
        if seconds >= self._alert_seconds:
            return TimerColor.ALERT
        if seconds >= self._warning_seconds:
            return TimerColor.WARNING
        return TimerColor.NORMAL
