"""Tests for reconciliation of a day's inconsistencies."""

import pytest
from datetime import datetime, timezone

from ponto.engine.corrections import approve_correction, propose_correction
from ponto.engine.errors import InconsistencyAlreadyResolved
from ponto.engine.reconcile import detect_all, reconcile, resolve_inconsistency
from ponto.models.correction import CorrectionDraft
from ponto.models.employer import WorkPolicy
from ponto.models.inconsistency import InconsistencyKind, ResolutionKind, Severity
from ponto.models.punch_event import PunchKind


NOW = datetime(2024, 3, 18, 21, 0, tzinfo=timezone.utc)


def _at(hour, minute=0):
    return datetime(2024, 3, 18, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def mistyped_day(punch):
    """Break end typed as 11:00 instead of 13:00."""
    return [
        punch(PunchKind.CLOCK_IN, _at(8), "in"),
        punch(PunchKind.BREAK_START, _at(12), "bs"),
        punch(PunchKind.BREAK_END, _at(11), "be"),
        punch(PunchKind.CLOCK_OUT, _at(17), "out"),
    ]


class TestReconcile:
    """Test merging detected and stored inconsistencies."""

    def test_detects_sequence_problems(self, make_record, mistyped_day):
        record = reconcile(make_record(mistyped_day), now=NOW)
        assert sorted(i.id for i in record.inconsistencies) == ["seq-be", "seq-out"]

    def test_idempotent(self, make_record, mistyped_day):
        once = reconcile(make_record(mistyped_day), now=NOW)
        twice = reconcile(once, now=NOW)
        assert twice.inconsistencies == once.inconsistencies

    def test_record_not_mutated(self, make_record, mistyped_day):
        record = make_record(mistyped_day)
        reconcile(record, now=NOW)
        assert record.inconsistencies == []

    def test_approved_correction_clears_inconsistencies(self, make_record, mistyped_day, manager_id, employee_id):
        record = reconcile(make_record(mistyped_day), now=NOW)
        draft = CorrectionDraft(
            original_event_id="be",
            proposed_timestamp=_at(13),
            justification="Typed the wrong hour on the tablet",
            requested_by_id=manager_id,
            requested_by_name="Carlos Lima",
        )
        correction = propose_correction(draft, record.find_event("be"), now=NOW).correction
        approved = approve_correction(correction, employee_id, now=NOW)

        record = reconcile(record.model_copy(update={"corrections": [approved]}), now=NOW)

        assert record.inconsistencies == []

    def test_resolved_inconsistencies_are_kept(self, make_record, mistyped_day, manager_id):
        record = reconcile(make_record(mistyped_day), now=NOW)
        resolved = resolve_inconsistency(
            record.find_inconsistency("seq-be"), ResolutionKind.JUSTIFICATION_ACCEPTED, manager_id, "ok", now=NOW
        )
        record = record.model_copy(update={"inconsistencies": [resolved, record.find_inconsistency("seq-out")]})
        # Drop the offending events: nothing is detected any more
        record = record.model_copy(update={"events": [e for e in record.events if e.id in ("in", "out")]})

        reconciled = reconcile(record, now=NOW)

        assert [i.id for i in reconciled.inconsistencies] == ["seq-be"]
        assert reconciled.inconsistencies[0].resolved is True

    def test_stored_resolution_survives_redetection(self, make_record, mistyped_day, manager_id):
        record = reconcile(make_record(mistyped_day), now=NOW)
        resolved = resolve_inconsistency(record.find_inconsistency("seq-be"), ResolutionKind.IGNORED, manager_id, now=NOW)
        record = record.model_copy(update={
            "inconsistencies": [resolved if i.id == "seq-be" else i for i in record.inconsistencies],
        })
        again = reconcile(record, now=NOW)
        assert again.find_inconsistency("seq-be").resolved is True

    def test_malformed_events_are_reported(self, make_record, full_day_events):
        record = make_record(full_day_events, malformed_events=[{"id": "bad", "timestamp": "??"}])
        reconciled = reconcile(record, now=NOW)
        assert [i.kind for i in reconciled.inconsistencies] == [InconsistencyKind.MALFORMED_RECORD]


class TestOutOfShift:
    """Test shift-bound detection through detect_all."""

    def test_without_policy_nothing_is_flagged(self, punch):
        events = [punch(PunchKind.CLOCK_IN, _at(5), "in"), punch(PunchKind.CLOCK_OUT, _at(9), "out")]
        assert detect_all(events, now=NOW) == []

    def test_punch_outside_tolerance_is_flagged(self, punch, sample_employer):
        policy = WorkPolicy.for_employee(sample_employer)
        events = [
            punch(PunchKind.CLOCK_IN, _at(7, 30), "early"),
            punch(PunchKind.CLOCK_OUT, _at(17, 5), "out"),
        ]
        result = detect_all(events, policy=policy, now=NOW)
        assert [i.id for i in result] == ["shift-early"]
        assert result[0].severity == Severity.LOW
        assert result[0].description == "Clock-in at 07:30 is outside the shift 08:00-17:00"

    def test_punch_within_tolerance_is_accepted(self, punch, sample_employer):
        policy = WorkPolicy.for_employee(sample_employer)
        events = [punch(PunchKind.CLOCK_IN, _at(7, 52), "in"), punch(PunchKind.CLOCK_OUT, _at(17, 10), "out")]
        assert detect_all(events, policy=policy, now=NOW) == []

    def test_night_shift_wraps_midnight(self, punch):
        policy = WorkPolicy(shift_start=datetime(2024, 1, 1, 22).time(), shift_end=datetime(2024, 1, 1, 6).time(), timezone="UTC")
        events = [punch(PunchKind.CLOCK_IN, _at(22), "in"), punch(PunchKind.CLOCK_OUT, _at(23, 30), "out")]
        assert detect_all(events, policy=policy, now=NOW) == []


class TestResolveInconsistency:
    """Test one-time resolution."""

    def test_resolve_sets_resolution(self, make_record, mistyped_day, manager_id):
        inconsistency = reconcile(make_record(mistyped_day), now=NOW).find_inconsistency("seq-be")

        resolved = resolve_inconsistency(inconsistency, ResolutionKind.CORRECTION_APPLIED, manager_id, "fixed", now=NOW)

        assert resolved.resolved is True
        assert resolved.resolution.kind == ResolutionKind.CORRECTION_APPLIED
        assert resolved.resolution.resolved_by_id == manager_id
        assert resolved.is_blocking is False
        assert inconsistency.resolved is False

    def test_second_resolution_fails(self, make_record, mistyped_day, manager_id):
        inconsistency = reconcile(make_record(mistyped_day), now=NOW).find_inconsistency("seq-be")
        resolved = resolve_inconsistency(inconsistency, ResolutionKind.IGNORED, manager_id, now=NOW)
        with pytest.raises(InconsistencyAlreadyResolved):
            resolve_inconsistency(resolved, ResolutionKind.IGNORED, manager_id, now=NOW)
