"""
Study Flow Tests

Condition gates (order and washout), start/resume, block breaks, and the
per-reader task overview.

Run:
----
    pytest tests/test_flow.py -v
"""

from datetime import timedelta

import pytest

from helpers import submission_for
from reading_engine.errors import ConditionLockedError, EmptyCasePoolError, SessionClosedError
from reading_engine.flow import ConditionState, LockReason, StudyFlow, SubmitKind
from reading_engine.models.catalog import TaskType
from reading_engine.models.config import StudyConfig
from reading_engine.models.session import BlockState
from study_server.services import StaticCasePoolProvider


def finish(flow, profile, condition):
    """Start a condition and read every case."""
    entry = flow.start_or_resume(profile, condition)
    outcome = None
    for case_id in entry.session.case_order:
        outcome = flow.submit(entry.session.session_id, submission_for(case_id, condition))
    return outcome


class TestGates:
    def test_first_condition_open(self, flow, profile):
        gate = flow.check_gate({}, TaskType.UNAIDED)
        assert gate.allowed

    def test_second_condition_waits_for_first(self, flow, profile):
        gate = flow.check_gate({}, TaskType.AI_ONLY)
        assert not gate.allowed
        assert gate.reason == LockReason.PREVIOUS_INCOMPLETE
        with pytest.raises(ConditionLockedError) as exc:
            flow.start_or_resume(profile, TaskType.AI_ONLY)
        assert exc.value.reason == "previous_incomplete"

    def test_in_progress_previous_still_locks(self, flow, profile):
        flow.start_or_resume(profile, TaskType.UNAIDED)
        with pytest.raises(ConditionLockedError):
            flow.start_or_resume(profile, TaskType.AI_ONLY)

    def test_washout_boundary(self, flow, profile, clock):
        finish(flow, profile, TaskType.UNAIDED)
        completed_at = clock()

        clock.now = completed_at + timedelta(days=14) - timedelta(seconds=1)
        with pytest.raises(ConditionLockedError) as exc:
            flow.start_or_resume(profile, TaskType.AI_ONLY)
        assert exc.value.reason == "washout"
        assert exc.value.unlock_at == completed_at + timedelta(days=14)

        clock.now = completed_at + timedelta(days=14)
        entry = flow.start_or_resume(profile, TaskType.AI_ONLY)
        assert not entry.resumed
        assert entry.session.task_type == TaskType.AI_ONLY

    def test_washout_message(self, flow, profile, clock):
        finish(flow, profile, TaskType.UNAIDED)
        gate = flow.check_gate(flow.lifecycle.by_condition(profile.reader_id), TaskType.AI_ONLY)
        # Completed 2026-03-02 -> opens 2026-03-16
        assert gate.message == "3/16以降開始可"

    def test_third_condition_needs_second(self, flow, profile, clock):
        finish(flow, profile, TaskType.UNAIDED)
        clock.advance(days=30)
        with pytest.raises(ConditionLockedError) as exc:
            flow.start_or_resume(profile, TaskType.AI_GRADCAM)
        assert exc.value.reason == "previous_incomplete"

    def test_zero_washout(self, store, case_pool, clock, profile):
        flow = StudyFlow(store, case_pool, StudyConfig(washout_days=0, block_size=3), clock=clock)
        finish(flow, profile, TaskType.UNAIDED)
        assert flow.start_or_resume(profile, TaskType.AI_ONLY).session.task_type == TaskType.AI_ONLY


class TestStartOrResume:
    def test_start_then_resume_same_session(self, flow, profile):
        first = flow.start_or_resume(profile, TaskType.UNAIDED)
        flow.submit(first.session.session_id, submission_for(first.position.next_case_id, TaskType.UNAIDED))
        again = flow.start_or_resume(profile, TaskType.UNAIDED)
        assert again.resumed
        assert again.session.session_id == first.session.session_id
        assert again.position.next_index == 1
        assert again.position.next_case_id == first.session.case_order[1]

    def test_completed_condition_cannot_restart(self, flow, profile):
        finish(flow, profile, TaskType.UNAIDED)
        with pytest.raises(SessionClosedError):
            flow.start_or_resume(profile, TaskType.UNAIDED)

    def test_empty_pool(self, store, profile, clock):
        flow = StudyFlow(store, StaticCasePoolProvider([]), clock=clock)
        with pytest.raises(EmptyCasePoolError):
            flow.start_or_resume(profile, TaskType.UNAIDED)
        assert flow.lifecycle.sessions_for_reader(profile.reader_id) == []

    def test_pool_change_does_not_affect_started_session(self, store, profile, clock, study_config):
        pool = StaticCasePoolProvider(["C1", "C2", "C3"])
        flow = StudyFlow(store, pool, study_config, clock=clock)
        started = flow.start_or_resume(profile, TaskType.UNAIDED)
        pool._case_ids.append("C4")
        assert flow.start_or_resume(profile, TaskType.UNAIDED).session.case_order == started.session.case_order

    def test_entry_by_id(self, flow, profile):
        started = flow.start_or_resume(profile, TaskType.UNAIDED)
        entry = flow.entry(started.session.session_id)
        assert entry.session == started.session
        assert entry.position.next_index == 0


class TestBlocks:
    def test_break_after_each_full_block(self, flow, profile):
        entry = flow.start_or_resume(profile, TaskType.UNAIDED)
        kinds = []
        for case_id in entry.session.case_order:
            kinds.append(flow.submit(entry.session.session_id, submission_for(case_id, TaskType.UNAIDED)).kind)
        # 7 cases, block size 3: breaks after cases 3 and 6, completion at 7
        assert kinds == [
            SubmitKind.NEXT, SubmitKind.NEXT, SubmitKind.BLOCK_BREAK,
            SubmitKind.NEXT, SubmitKind.NEXT, SubmitKind.BLOCK_BREAK,
            SubmitKind.COMPLETED,
        ]

    def test_break_reports_finished_block(self, flow, profile):
        entry = flow.start_or_resume(profile, TaskType.UNAIDED)
        order = entry.session.case_order
        outcome = None
        for case_id in order[:3]:
            outcome = flow.submit(entry.session.session_id, submission_for(case_id, TaskType.UNAIDED))
        assert outcome.completed_block == 1
        assert outcome.position.current_block == 2

    def test_retried_block_end_shows_break_again(self, flow, profile):
        entry = flow.start_or_resume(profile, TaskType.UNAIDED)
        order = entry.session.case_order
        for case_id in order[:3]:
            flow.submit(entry.session.session_id, submission_for(case_id, TaskType.UNAIDED))
        retry = flow.submit(entry.session.session_id, submission_for(order[2], TaskType.UNAIDED))
        assert retry.kind == SubmitKind.BLOCK_BREAK
        assert not retry.newly_recorded
        assert retry.session.completed_cases == 3

    def test_no_break_when_block_size_exceeds_total(self, store, profile, clock):
        flow = StudyFlow(store, StaticCasePoolProvider(["C1", "C2"]), StudyConfig(block_size=50), clock=clock)
        outcome = finish(flow, profile, TaskType.UNAIDED)
        assert outcome.kind == SubmitKind.COMPLETED


class TestOverview:
    def test_fresh_reader(self, flow, profile):
        rows = flow.overview(profile.reader_id)
        assert [r.condition for r in rows] == [TaskType.UNAIDED, TaskType.AI_ONLY, TaskType.AI_GRADCAM]
        assert all(r.state == ConditionState.NOT_STARTED for r in rows)
        assert rows[0].gate.allowed
        assert not rows[1].gate.allowed
        assert rows[1].gate.message == "AI支援なし完了待ち"

    def test_progress_and_blocks(self, flow, profile):
        entry = flow.start_or_resume(profile, TaskType.UNAIDED)
        for case_id in entry.session.case_order[:4]:
            flow.submit(entry.session.session_id, submission_for(case_id, TaskType.UNAIDED))
        row = flow.overview(profile.reader_id)[0]
        assert row.state == ConditionState.IN_PROGRESS
        assert row.completed_cases == 4
        assert row.total_cases == 7
        assert [b.state for b in row.blocks] == [BlockState.COMPLETED, BlockState.IN_PROGRESS, BlockState.NOT_STARTED]
        assert [b.range_label for b in row.blocks] == ["1-3", "4-6", "7-7"]

    def test_completed_condition_shows_washout(self, flow, profile, clock):
        finish(flow, profile, TaskType.UNAIDED)
        rows = flow.overview(profile.reader_id)
        assert rows[0].state == ConditionState.COMPLETED
        assert rows[0].completed_at == clock()
        assert rows[1].gate.reason == LockReason.WASHOUT
        clock.advance(days=14)
        assert flow.overview(profile.reader_id)[1].gate.allowed
