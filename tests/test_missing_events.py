"""Tests for missing-event detection."""

from datetime import datetime, timezone

from ponto.engine.missing import detect_missing
from ponto.models.inconsistency import InconsistencyKind, Severity
from ponto.models.punch_event import PunchKind


NOW = datetime(2024, 3, 18, 21, 0, tzinfo=timezone.utc)


def _at(hour, minute=0):
    return datetime(2024, 3, 18, hour, minute, tzinfo=timezone.utc)


class TestDetectMissing:
    """Test the three missing-event rules."""

    def test_complete_day_has_nothing_missing(self, full_day_events):
        assert detect_missing(full_day_events, now=NOW) == []

    def test_empty_day_has_nothing_missing(self):
        assert detect_missing([], now=NOW) == []

    def test_break_start_only(self, punch):
        """A lone break start reports a missing break end."""
        break_start = punch(PunchKind.BREAK_START, _at(12), "bs")

        result = detect_missing([break_start], now=NOW)

        assert len(result) == 1
        assert result[0].kind == InconsistencyKind.MISSING_EVENT
        assert result[0].severity == Severity.HIGH
        assert result[0].involved_event_ids == ["bs"]
        assert result[0].description == "Break started but never ended"

    def test_clock_in_without_clock_out(self, punch):
        result = detect_missing([punch(PunchKind.CLOCK_IN, _at(8), "in")], now=NOW)
        assert [i.id for i in result] == ["missing-clock-out-in"]

    def test_clock_out_without_clock_in(self, punch):
        result = detect_missing([punch(PunchKind.CLOCK_OUT, _at(17), "out")], now=NOW)
        assert [i.id for i in result] == ["missing-clock-in-out"]
        assert result[0].description == "Clock-out recorded without a matching clock-in"

    def test_rules_are_independent(self, punch):
        events = [punch(PunchKind.CLOCK_IN, _at(8), "in"), punch(PunchKind.BREAK_START, _at(12), "bs")]
        result = detect_missing(events, now=NOW)
        assert [i.id for i in result] == ["missing-clock-out-in", "missing-break-end-bs"]

    def test_references_first_anchor_by_timestamp(self, punch):
        later = punch(PunchKind.CLOCK_IN, _at(13), "later")
        earlier = punch(PunchKind.CLOCK_IN, _at(8), "earlier")
        result = detect_missing([later, earlier], now=NOW)
        assert len(result) == 1
        assert result[0].involved_event_ids == ["earlier"]

    def test_ignores_unparseable_items(self, punch):
        events = [punch(PunchKind.CLOCK_IN, _at(8), "in"), {"id": "bad", "kind": "clock_out", "timestamp": "?"}]
        result = detect_missing(events, now=NOW)
        assert [i.id for i in result] == ["missing-clock-out-in"]

    def test_idempotent(self, punch):
        events = [punch(PunchKind.CLOCK_IN, _at(8), "in"), punch(PunchKind.BREAK_START, _at(12), "bs")]
        assert detect_missing(events, now=NOW) == detect_missing(events, now=NOW)

    def test_repeated_calls_report_the_same_inconsistencies(self, punch):
        events = [punch(PunchKind.CLOCK_OUT, _at(17), "out")]

        first, second = detect_missing(events), detect_missing(events)

        assert [(i.id, i.involved_event_ids) for i in first] == [(i.id, i.involved_event_ids) for i in second]
        assert [i.id for i in first] == ["missing-clock-in-out"]
