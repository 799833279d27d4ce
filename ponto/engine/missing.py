"""Missing-event detection for ponto.

Flags incomplete daily sequences. Each rule reports at most once per day and
references the first anchor event (by timestamp) of its kind.

A shift that starts before midnight and ends after it shows up as a clock-out
without clock-in on the second day. That case is reported like any other.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from ponto.engine.events import EventLike, parse_events, sort_events
from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity
from ponto.models.punch_event import PunchEvent, PunchKind
from ponto.timeutils import utcnow


# (anchor kind, required counterpart, id prefix, description)
MISSING_RULES = (
    (PunchKind.CLOCK_IN, PunchKind.CLOCK_OUT, "missing-clock-out", "Clock-in recorded but no clock-out found"),
    (PunchKind.BREAK_START, PunchKind.BREAK_END, "missing-break-end", "Break started but never ended"),
    (PunchKind.CLOCK_OUT, PunchKind.CLOCK_IN, "missing-clock-in", "Clock-out recorded without a matching clock-in"),
)


def _first_of_kind(events: List[PunchEvent], kind: PunchKind) -> Optional[PunchEvent]:
    for event in events:
        if event.kind == kind:
            return event
    return None


def detect_missing(events: Iterable[EventLike], now: Optional[datetime] = None) -> List[Inconsistency]:
    """Detect incomplete daily sequences.

    Rules (independent, all evaluated):
    - clock-in present and clock-out absent
    - break start present and break end absent
    - clock-out present and clock-in absent

    Unparseable items are ignored here; the sequence validator reports them.

    Args:
        events: PunchEvent instances or raw event documents for one day
        now: Detection timestamp (defaults to now, UTC); pass it to get equal
            results across calls, ids are stable either way

    Returns:
        missing_event inconsistencies (High), in rule order
    """
    now = now or utcnow()
    parsed, _ = parse_events(events, now)
    ordered = sort_events(parsed)

    inconsistencies: List[Inconsistency] = []
    for anchor_kind, counterpart_kind, prefix, description in MISSING_RULES:
        anchor = _first_of_kind(ordered, anchor_kind)
        if anchor is None or _first_of_kind(ordered, counterpart_kind) is not None:
            continue
        inconsistencies.append(Inconsistency(
            id=f"{prefix}-{anchor.id}",
            kind=InconsistencyKind.MISSING_EVENT,
            description=description,
            involved_event_ids=[anchor.id],
            detected_at=now,
            severity=Severity.HIGH,
        ))
    return inconsistencies
