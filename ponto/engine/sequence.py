"""Punch sequence validation for ponto.

Checks that a day's punches follow a legal order (clock-in, breaks, clock-out)
and flags near-identical repeated punches. Order is always derived from the
timestamps, never from storage order.
"""

from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional

from ponto.engine.events import EventLike, event_instant, parse_events, sort_events
from ponto.models.constants import DUPLICATE_WINDOW_SECONDS
from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity
from ponto.models.punch_event import PunchEvent, PunchKind
from ponto.timeutils import utcnow


# Allowed predecessor kinds per punch kind. None stands for "first of the day".
ALLOWED_PREDECESSORS: Dict[str, FrozenSet[Optional[str]]] = {
    PunchKind.CLOCK_IN.value: frozenset({PunchKind.CLOCK_OUT.value, None}),
    PunchKind.BREAK_START.value: frozenset({PunchKind.CLOCK_IN.value, PunchKind.BREAK_END.value}),
    PunchKind.BREAK_END.value: frozenset({PunchKind.BREAK_START.value}),
    PunchKind.CLOCK_OUT.value: frozenset({PunchKind.CLOCK_IN.value, PunchKind.BREAK_END.value}),
}

KIND_LABELS = {
    PunchKind.CLOCK_IN.value: "clock-in",
    PunchKind.BREAK_START.value: "break start",
    PunchKind.BREAK_END.value: "break end",
    PunchKind.CLOCK_OUT.value: "clock-out",
}


def kind_label(kind) -> str:
    value = getattr(kind, "value", kind)
    return KIND_LABELS.get(value, str(value))


def is_allowed_after(kind, previous_kind) -> bool:
    """Whether `kind` may directly follow `previous_kind` (None = first of day)."""
    value = getattr(kind, "value", kind)
    previous = getattr(previous_kind, "value", previous_kind)
    return previous in ALLOWED_PREDECESSORS.get(value, frozenset())


def validate(events: Iterable[EventLike], now: Optional[datetime] = None) -> List[Inconsistency]:
    """Validate the ordering of a day's punches.

    For every event after the first (in timestamp order):
    - its predecessor must be an allowed kind, else an invalid_sequence (High)
      referencing [previous, current];
    - a predecessor of the same kind less than 60 seconds earlier yields a
      duplicate (Medium) referencing [previous, current].

    Unparseable items are excluded from ordering and reported as
    malformed_record. The input is not mutated and nothing is raised for
    data-quality problems.

    Args:
        events: PunchEvent instances or raw event documents for one day
        now: Detection timestamp (defaults to now, UTC); pass it to get equal
            results across calls, ids are stable either way

    Returns:
        Inconsistencies in detection order
    """
    now = now or utcnow()
    parsed, inconsistencies = parse_events(events, now)
    ordered = sort_events(parsed)

    for previous, current in zip(ordered, ordered[1:]):
        if not is_allowed_after(current.kind, previous.kind):
            inconsistencies.append(Inconsistency(
                id=f"seq-{current.id}",
                kind=InconsistencyKind.INVALID_SEQUENCE,
                description=f"{kind_label(current.kind).capitalize()} cannot follow {kind_label(previous.kind)}",
                involved_event_ids=[previous.id, current.id],
                detected_at=now,
                severity=Severity.HIGH,
            ))

        if current.kind == previous.kind and _seconds_between(previous, current) < DUPLICATE_WINDOW_SECONDS:
            inconsistencies.append(Inconsistency(
                id=f"dup-{current.id}",
                kind=InconsistencyKind.DUPLICATE,
                description=(
                    f"{kind_label(current.kind).capitalize()} punched twice "
                    f"within {DUPLICATE_WINDOW_SECONDS} seconds"
                ),
                involved_event_ids=[previous.id, current.id],
                detected_at=now,
                severity=Severity.MEDIUM,
            ))

    return inconsistencies


def _seconds_between(earlier: PunchEvent, later: PunchEvent) -> float:
    return abs((event_instant(later) - event_instant(earlier)).total_seconds())
