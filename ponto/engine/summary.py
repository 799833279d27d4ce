"""Daily hour summary for ponto.

Hours come from the effective (corrected), integrity-verified events of a day,
leaving out every event referenced by an unresolved High/Critical
inconsistency. A day without its required anchor punches counts zero worked
hours.
"""

import logging
from datetime import datetime
from typing import List, Optional, Set, Tuple

from ponto.engine.corrections import applied_correction_ids, effective_events
from ponto.engine.errors import RecordNotFoundError
from ponto.engine.events import event_instant, sort_events
from ponto.engine.integrity import find_untrusted
from ponto.engine.reconcile import reconcile
from ponto.engine.sequence import kind_label
from ponto.models.constants import HOURS_PRECISION
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import WorkPolicy
from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity
from ponto.models.punch_event import PunchEvent, PunchKind
from ponto.models.summary import CalculationParameters, DailySummary
from ponto.timeutils import utcnow

logger = logging.getLogger(__name__)


def _first(events: List[PunchEvent], kind: PunchKind) -> Optional[PunchEvent]:
    for event in events:
        if event.kind == kind:
            return event
    return None


def _hours_between(start: PunchEvent, end: PunchEvent) -> float:
    return (event_instant(end) - event_instant(start)).total_seconds() / 3600.0


def _work_spans(events: List[PunchEvent]) -> List[Tuple[PunchEvent, PunchEvent]]:
    """Pair each clock-in with the next clock-out, in timestamp order."""
    spans: List[Tuple[PunchEvent, PunchEvent]] = []
    opened: Optional[PunchEvent] = None
    for event in events:
        if event.kind == PunchKind.CLOCK_IN and opened is None:
            opened = event
        elif event.kind == PunchKind.CLOCK_OUT and opened is not None:
            spans.append((opened, event))
            opened = None
    return spans


def _break_hours_within(events: List[PunchEvent], clock_in: PunchEvent, clock_out: PunchEvent) -> Optional[float]:
    """Total break hours inside one work span, or None when no break closes inside it."""
    start, end = event_instant(clock_in), event_instant(clock_out)
    total: Optional[float] = None
    opened: Optional[PunchEvent] = None
    for event in events:
        instant = event_instant(event)
        if instant < start or instant > end:
            continue
        if event.kind == PunchKind.BREAK_START and opened is None:
            opened = event
        elif event.kind == PunchKind.BREAK_END and opened is not None:
            total = (total or 0.0) + _hours_between(opened, event)
            opened = None
    return total


def compute_worked_hours(events: List[PunchEvent], lunch_control: bool = False) -> float:
    """Sum of (out - in) over every clock-in/clock-out pair.

    With lunch control the breaks taken inside a pair are subtracted from it,
    and a day with no complete break inside any pair counts 0. A clock-out
    with no open clock-in before it is ignored, so out-of-order punches give 0.
    """
    ordered = sort_events(events)
    worked = 0.0
    breaks_found = False
    for clock_in, clock_out in _work_spans(ordered):
        span = _hours_between(clock_in, clock_out)
        if lunch_control:
            lunch = _break_hours_within(ordered, clock_in, clock_out)
            if lunch is not None:
                breaks_found = True
                span -= lunch
        worked += max(0.0, span)
    if lunch_control and not breaks_found:
        return 0.0
    return worked


def _expected_hours(record: DailyRecord, policy: WorkPolicy, expected_hours: Optional[float]) -> float:
    if expected_hours is not None:
        return max(0.0, expected_hours)
    if record.day_off or record.closed:
        return 0.0
    return policy.daily_hours


def _missing_anchor_inconsistency(
    record: DailyRecord,
    missing: List[PunchKind],
    present: List[PunchEvent],
    now: datetime,
) -> Inconsistency:
    names = ", ".join(kind_label(kind) for kind in missing)
    return Inconsistency(
        id=f"missing-anchors-{record.employee_id}-{record.date.isoformat()}",
        kind=InconsistencyKind.MISSING_EVENT,
        description=f"Required punches missing: {names}",
        involved_event_ids=[event.id for event in present],
        detected_at=now,
        severity=Severity.HIGH,
    )


def summarize(
    record: DailyRecord,
    policy: Optional[WorkPolicy] = None,
    expected_hours: Optional[float] = None,
    now: Optional[datetime] = None,
) -> DailySummary:
    """Summarize one employee/day.

    Args:
        record: The day to summarize
        policy: Work policy (lunch control, daily hours, overtime); defaults apply if None
        expected_hours: Override for the expected hours (e.g. holidays in a month view)
        now: Detection timestamp for any inconsistency produced

    Returns:
        DailySummary; worked hours are 0 when required anchors are missing or blocked

    Raises:
        RecordNotFoundError: If no record is given
    """
    if record is None:
        raise RecordNotFoundError("Cannot summarize a day without a daily record")

    policy = policy or WorkPolicy()
    now = now or utcnow()

    events = effective_events(record)
    untrusted = set(find_untrusted(events))
    if untrusted:
        logger.warning(f"Excluding untrusted events from summary of {record.employee_id} {record.date}: {sorted(untrusted)}")

    inconsistencies = list(reconcile(record, policy=policy, now=now).inconsistencies)
    blocked: Set[str] = set()
    for inconsistency in inconsistencies:
        if inconsistency.is_blocking:
            blocked.update(inconsistency.involved_event_ids)

    trusted = sort_events(e for e in events if e.id not in untrusted)
    considered = [e for e in trusted if e.id not in blocked]

    required = [PunchKind.CLOCK_IN, PunchKind.CLOCK_OUT]
    if policy.lunch_control:
        required += [PunchKind.BREAK_START, PunchKind.BREAK_END]
    absent = [kind for kind in required if _first(trusted, kind) is None]

    expected = _expected_hours(record, policy, expected_hours)

    worked = 0.0
    if absent:
        has_missing = any(i.kind == InconsistencyKind.MISSING_EVENT for i in inconsistencies)
        if not has_missing and (trusted or expected > 0):
            present = [e for e in trusted if e.kind in required]
            inconsistencies.append(_missing_anchor_inconsistency(record, absent, present, now))
    else:
        worked = compute_worked_hours(considered, policy.lunch_control)

    worked = round(worked, HOURS_PRECISION)
    expected = round(expected, HOURS_PRECISION)
    overtime = round(max(0.0, worked - expected), HOURS_PRECISION) if policy.allows_overtime else 0.0
    shortfall = round(max(0.0, expected - worked), HOURS_PRECISION)

    return DailySummary(
        date=record.date,
        employee_id=record.employee_id,
        worked_hours=worked,
        expected_hours=expected,
        overtime_hours=overtime,
        shortfall_hours=shortfall,
        balance_hours=round(worked - expected, HOURS_PRECISION),
        inconsistencies=inconsistencies,
        considered_event_ids=[e.id for e in considered],
        applied_correction_ids=applied_correction_ids(record),
        untrusted_event_ids=sorted(untrusted),
        parameters=CalculationParameters(
            daily_hours=policy.daily_hours,
            lunch_control=policy.lunch_control,
            entry_tolerance_minutes=policy.entry_tolerance_minutes,
            shift_start=policy.shift_start,
            shift_end=policy.shift_end,
        ),
    )
