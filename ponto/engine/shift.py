"""Out-of-shift detection for ponto."""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ponto.engine.events import EventLike, event_instant, parse_events, sort_events
from ponto.engine.sequence import kind_label
from ponto.models.employer import WorkPolicy
from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity
from ponto.timeutils import get_tz, utcnow


def detect_out_of_shift(
    events: Iterable[EventLike],
    policy: WorkPolicy,
    now: Optional[datetime] = None,
) -> List[Inconsistency]:
    """Flag punches outside the shift bounds widened by the entry tolerance.

    Local times are taken in the policy timezone. Nothing is flagged when the
    policy has no shift bounds.
    """
    if policy.shift_start is None or policy.shift_end is None:
        return []

    now = now or utcnow()
    tz = get_tz(policy.timezone)
    tolerance = timedelta(minutes=policy.entry_tolerance_minutes)
    parsed, _ = parse_events(events, now)

    inconsistencies: List[Inconsistency] = []
    for event in sort_events(parsed):
        local = event_instant(event).astimezone(tz)
        earliest = datetime.combine(local.date(), policy.shift_start, tzinfo=tz) - tolerance
        latest = datetime.combine(local.date(), policy.shift_end, tzinfo=tz) + tolerance
        if policy.shift_end <= policy.shift_start:
            # Night shift: the window wraps around midnight
            inside = local >= earliest or local <= latest
        else:
            inside = earliest <= local <= latest
        if inside:
            continue
        inconsistencies.append(Inconsistency(
            id=f"shift-{event.id}",
            kind=InconsistencyKind.OUT_OF_SHIFT,
            description=(
                f"{kind_label(event.kind).capitalize()} at {local.strftime('%H:%M')} is outside the "
                f"shift {policy.shift_start.strftime('%H:%M')}-{policy.shift_end.strftime('%H:%M')}"
            ),
            involved_event_ids=[event.id],
            detected_at=now,
            severity=Severity.LOW,
        ))
    return inconsistencies
