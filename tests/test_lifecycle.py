"""
Session Lifecycle Tests

Creation materializes the seeded case order; results are recorded once per
case; the counter never exceeds the total; completion is final.

Run:
----
    pytest tests/test_lifecycle.py -v
"""

import pytest

from helpers import case_ids, submission_for
from reading_engine.errors import (
    ConfigurationError,
    EmptyCasePoolError,
    InvalidResultError,
    InvariantViolationError,
    SessionClosedError,
    SessionNotFoundError,
)
from reading_engine.lifecycle import SessionLifecycle, check_transition
from reading_engine.models.catalog import TaskType
from reading_engine.models.reader import ReaderProfile
from reading_engine.models.result import ReadingSubmission
from reading_engine.models.session import SessionStatus
from reading_engine.store import session_path


@pytest.fixture
def lifecycle(store, study_config, clock):
    return SessionLifecycle(store, study_config, clock=clock)


def osk_profile(**overrides) -> ReaderProfile:
    data = dict(
        email="reader1@osaka.example",
        reader_id="OSK_001",
        reader_number=1,
        facility_id="osaka",
        facility_name="Osaka University Hospital",
        reader_level="specialist",
    )
    data.update(overrides)
    return ReaderProfile(**data)


class TestCreate:
    def test_case_order_is_seeded_and_stored(self, lifecycle, store):
        session = lifecycle.create(osk_profile(), TaskType.AI_ONLY, case_ids(10))
        assert session.shuffle_seed == 454374397
        assert session.case_order == [
            "CASE-0007", "CASE-0004", "CASE-0009", "CASE-0010", "CASE-0002",
            "CASE-0005", "CASE-0001", "CASE-0003", "CASE-0006", "CASE-0008",
        ]
        assert session.total_cases == 10
        assert session.completed_cases == 0
        assert session.status == SessionStatus.IN_PROGRESS
        assert store.get(session_path(session.session_id))["case_order"] == session.case_order

    def test_same_reader_and_condition_same_order(self, lifecycle):
        first = lifecycle.create(osk_profile(), TaskType.UNAIDED, case_ids(30))
        second = lifecycle.create(osk_profile(), TaskType.UNAIDED, case_ids(30))
        assert first.session_id != second.session_id
        assert first.case_order == second.case_order

    def test_stored_order_is_not_recomputed(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2", "C3"])
        assert lifecycle.get(session.session_id).case_order == ["C3", "C2", "C1"]

    def test_empty_pool(self, lifecycle):
        with pytest.raises(EmptyCasePoolError):
            lifecycle.create(osk_profile(), TaskType.UNAIDED, [])

    def test_duplicate_case_ids(self, lifecycle):
        with pytest.raises(ConfigurationError):
            lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C1"])

    def test_reader_without_level(self, lifecycle):
        with pytest.raises(ConfigurationError):
            lifecycle.create(osk_profile(reader_level=None), TaskType.UNAIDED, ["C1"])


class TestRecordResult:
    def test_records_and_advances(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2", "C3"])
        outcome = lifecycle.record_result(session.session_id, submission_for("C3", TaskType.UNAIDED))
        assert outcome.newly_recorded
        assert not outcome.finalized
        assert outcome.session.completed_cases == 1
        assert lifecycle.position(outcome.session).next_case_id == "C2"

    def test_result_document_fields(self, lifecycle, clock):
        session = lifecycle.create(osk_profile(), TaskType.AI_GRADCAM, ["C1", "C2"])
        first_case = session.case_order[0]
        lifecycle.record_result(session.session_id, submission_for(first_case, TaskType.AI_GRADCAM, 4321))
        [result] = lifecycle.list_results(session.session_id)
        assert result.case_id == first_case
        assert result.case_order == 1
        assert result.reader_id == "OSK_001"
        assert result.task_type == TaskType.AI_GRADCAM
        assert result.reading_time_ms == 4321
        assert result.gradcam_helpful == 3
        assert result.timestamp == clock()

    def test_resubmission_overwrites_without_counting(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2", "C3"])
        lifecycle.record_result(session.session_id, submission_for("C3", TaskType.UNAIDED, 1000))
        again = lifecycle.record_result(session.session_id, submission_for("C3", TaskType.UNAIDED, 1800))
        assert not again.newly_recorded
        assert again.session.completed_cases == 1
        results = lifecycle.list_results(session.session_id)
        assert len(results) == 1
        assert results[0].reading_time_ms == 1800

    def test_unknown_case_rejected(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2"])
        with pytest.raises(InvalidResultError):
            lifecycle.record_result(session.session_id, submission_for("C9", TaskType.UNAIDED))

    def test_incomplete_form_rejected(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.AI_ONLY, ["C1", "C2"])
        submission = ReadingSubmission(case_id="C1", diagnosis="normal", confidence=2, reading_time_ms=10)
        with pytest.raises(InvalidResultError) as exc:
            lifecycle.record_result(session.session_id, submission)
        assert exc.value.errors == ["AI参考度が未選択です / AI reference not selected"]
        assert lifecycle.get(session.session_id).completed_cases == 0

    def test_unknown_session(self, lifecycle):
        with pytest.raises(SessionNotFoundError):
            lifecycle.record_result("missing", submission_for("C1", TaskType.UNAIDED))

    def test_full_run_completes_session(self, lifecycle, clock):
        # Reader OSK_001, unaided, pool C1..C3 -> order C3, C2, C1
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2", "C3"])
        assert session.case_order == ["C3", "C2", "C1"]
        outcomes = []
        for case_id in session.case_order:
            clock.advance(minutes=1)
            outcomes.append(lifecycle.record_result(session.session_id, submission_for(case_id, TaskType.UNAIDED)))
        final = outcomes[-1]
        assert [o.session.completed_cases for o in outcomes] == [1, 2, 3]
        assert final.finalized
        assert final.session.status == SessionStatus.COMPLETED
        assert final.session.completed_at == clock()
        assert lifecycle.position(final.session).finished
        assert [r.case_id for r in lifecycle.list_results(session.session_id)] == ["C3", "C2", "C1"]

    def test_completed_session_rejects_new_case_but_tolerates_retry(self, lifecycle, store):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2"])
        for case_id in session.case_order:
            lifecycle.record_result(session.session_id, submission_for(case_id, TaskType.UNAIDED))

        retry = lifecycle.record_result(session.session_id, submission_for(session.case_order[-1], TaskType.UNAIDED))
        assert not retry.newly_recorded
        assert retry.session.completed_cases == 2

        # A case that was never recorded cannot reopen the session
        store.delete_many([f"sessions/{session.session_id}/results/{session.case_order[0]}"])
        with pytest.raises(SessionClosedError):
            lifecycle.record_result(session.session_id, submission_for(session.case_order[0], TaskType.UNAIDED))


class TestInvariants:
    def test_corrupt_counter_detected_on_read(self, lifecycle, store):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2"])
        path = session_path(session.session_id)
        store.put(path, dict(store.get(path), completed_cases=5))
        with pytest.raises(InvariantViolationError):
            lifecycle.get(session.session_id)

    def test_completed_without_timestamp_detected(self, lifecycle, store):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1"])
        path = session_path(session.session_id)
        store.put(path, dict(store.get(path), status="completed"))
        with pytest.raises(InvariantViolationError):
            lifecycle.get(session.session_id)

    def test_counter_cannot_go_back(self, lifecycle):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1", "C2"])
        advanced = session.model_copy(update={"completed_cases": 1})
        with pytest.raises(InvariantViolationError):
            check_transition(advanced, session)

    def test_completed_cannot_reopen(self, lifecycle, clock):
        session = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1"])
        done = session.model_copy(
            update={"completed_cases": 1, "status": SessionStatus.COMPLETED, "completed_at": clock()}
        )
        reopened = done.model_copy(update={"status": SessionStatus.IN_PROGRESS, "completed_at": None})
        with pytest.raises(InvariantViolationError):
            check_transition(done, reopened)


class TestQueries:
    def test_by_condition_prefers_completed(self, lifecycle):
        done = lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1"])
        lifecycle.record_result(done.session_id, submission_for("C1", TaskType.UNAIDED))
        lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1"])
        found = lifecycle.find("OSK_001", TaskType.UNAIDED)
        assert found.session_id == done.session_id
        assert found.is_completed

    def test_sessions_for_other_reader_not_returned(self, lifecycle):
        lifecycle.create(osk_profile(), TaskType.UNAIDED, ["C1"])
        assert lifecycle.sessions_for_reader("OSK_002") == []
        assert lifecycle.find("OSK_002", TaskType.UNAIDED) is None
