"""
Reading Timer Tests

Net time excludes paused intervals, survives a reload through the local
store, and persists only on the reader's device.

Run:
----
    pytest tests/test_timer.py -v
"""

import pytest

from reading_engine.errors import TimerStateError
from reading_engine.timer import KEY_PREFIX, ReadingTimer, TimerColor, TimerPhase


class FailingLocalStore:
    """Local store whose every call fails (e.g. storage quota exceeded)."""

    def load(self, key):
        raise OSError("storage unavailable")

    def save(self, key, value):
        raise OSError("storage unavailable")

    def clear(self, key):
        raise OSError("storage unavailable")


@pytest.fixture
def timer(local_store, millis):
    return ReadingTimer(local_store, clock=millis)


class TestCounting:
    def test_starts_idle(self, timer):
        assert timer.phase == TimerPhase.IDLE
        assert timer.elapsed_ms() == 0
        assert timer.display() == "00:00"

    def test_net_time_excludes_pauses(self, timer, millis):
        timer.start()
        millis.advance(4000)
        timer.pause()
        millis.advance(10_000)
        timer.resume()
        millis.advance(3000)
        assert timer.stop() == 7000
        assert timer.pause_count == 1
        assert timer.total_paused_ms == 10_000
        assert timer.phase == TimerPhase.STOPPED

    def test_stop_while_paused_excludes_ongoing_pause(self, timer, millis):
        timer.start()
        millis.advance(2000)
        timer.pause()
        millis.advance(5000)
        assert timer.stop() == 2000
        assert timer.total_paused_ms == 5000

    def test_elapsed_frozen_after_stop(self, timer, millis):
        timer.start()
        millis.advance(1500)
        timer.stop()
        millis.advance(60_000)
        assert timer.elapsed_ms() == 1500

    def test_second_stop_recomputes_against_now(self, timer, millis):
        timer.start()
        millis.advance(1000)
        assert timer.stop() == 1000
        millis.advance(250)
        assert timer.stop() == 1250

    def test_reset_zeroes_everything(self, timer, millis):
        timer.start()
        millis.advance(1000)
        timer.pause()
        timer.reset()
        assert timer.phase == TimerPhase.IDLE
        assert timer.elapsed_ms() == 0
        assert timer.pause_count == 0
        assert timer.total_paused_ms == 0


class TestPhaseRules:
    def test_pause_requires_running(self, timer):
        with pytest.raises(TimerStateError):
            timer.pause()

    def test_double_pause_rejected(self, timer):
        timer.start()
        timer.pause()
        with pytest.raises(TimerStateError):
            timer.pause()

    def test_resume_requires_paused(self, timer):
        timer.start()
        with pytest.raises(TimerStateError):
            timer.resume()

    def test_start_always_ends_running(self, timer):
        timer.start()
        timer.pause()
        timer.start()
        assert timer.phase == TimerPhase.RUNNING
        assert not timer.paused


class TestPersistence:
    def test_start_with_key_saves_snapshot(self, timer, local_store):
        timer.start("s1_0")
        saved = local_store.load(KEY_PREFIX + "s1_0")
        assert saved is not None
        assert saved["accumulated_ms"] == 0
        assert saved["pause_count"] == 0

    def test_reload_resumes_accumulated_time(self, local_store, millis):
        first = ReadingTimer(local_store, clock=millis)
        first.start("s1_4")
        millis.advance(8000)
        first.persist()

        # Time spent with the page closed is not counted
        millis.advance(120_000)
        second = ReadingTimer(local_store, clock=millis)
        second.start("s1_4")
        millis.advance(2000)
        assert second.stop() == 10_000

    def test_pause_persists_immediately_and_carries_count(self, local_store, millis):
        first = ReadingTimer(local_store, clock=millis)
        first.start("s1_2")
        millis.advance(3000)
        first.pause()
        millis.advance(50_000)

        second = ReadingTimer(local_store, clock=millis)
        second.start("s1_2")
        assert second.pause_count == 1
        assert second.total_paused_ms == 0
        millis.advance(1000)
        assert second.stop() == 4000

    def test_stop_clears_persisted_state(self, timer, local_store, millis):
        timer.start("s1_1")
        millis.advance(500)
        timer.stop()
        assert local_store.load(KEY_PREFIX + "s1_1") is None

    def test_reset_clears_persisted_state(self, timer, local_store):
        timer.start("s1_1")
        timer.reset()
        assert local_store.keys() == []

    def test_different_keys_do_not_share_state(self, local_store, millis):
        first = ReadingTimer(local_store, clock=millis)
        first.start("s1_0")
        millis.advance(9000)
        first.persist()

        other = ReadingTimer(local_store, clock=millis)
        other.start("s1_1")
        millis.advance(1000)
        assert other.stop() == 1000

    def test_persist_does_nothing_when_not_running(self, timer, local_store, millis):
        timer.start("s1_3")
        millis.advance(1000)
        timer.stop()
        timer.persist()
        assert local_store.load(KEY_PREFIX + "s1_3") is None

    def test_store_failures_are_swallowed(self, millis):
        timer = ReadingTimer(FailingLocalStore(), clock=millis)
        timer.start("s1_0")
        millis.advance(1000)
        timer.pause()
        timer.resume()
        timer.persist()
        assert timer.stop() == 1000

    def test_corrupt_snapshot_starts_from_zero(self, local_store, millis):
        local_store.save(KEY_PREFIX + "s1_0", {"accumulated_ms": -5, "pause_count": "many"})
        timer = ReadingTimer(local_store, clock=millis)
        timer.start("s1_0")
        millis.advance(700)
        assert timer.stop() == 700


class TestDisplay:
    def test_display_minutes_seconds(self, timer, millis):
        timer.start()
        millis.advance(125_400)
        assert timer.display() == "02:05"

    @pytest.mark.parametrize(
        "elapsed,color",
        [
            (29_999, TimerColor.NORMAL),
            (30_000, TimerColor.WARNING),
            (59_999, TimerColor.WARNING),
            (60_000, TimerColor.ALERT),
        ],
    )
    def test_color_bands(self, timer, millis, elapsed, color):
        timer.start()
        millis.advance(elapsed)
        assert timer.color() == color
