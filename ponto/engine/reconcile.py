"""Reconciliation of a day's inconsistencies.

Runs every detector over the effective events of a record and merges the
result with what is stored: resolved inconsistencies are kept for audit,
unresolved ones that are no longer detected are dropped, new ones are added.
Running it twice on an unchanged record gives the same record.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from ponto.engine.corrections import effective_events
from ponto.engine.errors import InconsistencyAlreadyResolved
from ponto.engine.events import EventLike
from ponto.engine.missing import detect_missing
from ponto.engine.sequence import validate
from ponto.engine.shift import detect_out_of_shift
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import WorkPolicy
from ponto.models.inconsistency import Inconsistency, Resolution, ResolutionKind
from ponto.timeutils import utcnow

logger = logging.getLogger(__name__)


def detect_all(
    events: Iterable[EventLike],
    policy: Optional[WorkPolicy] = None,
    now: Optional[datetime] = None,
) -> List[Inconsistency]:
    """Sequence, missing-event and (with a policy) out-of-shift detection."""
    now = now or utcnow()
    items = list(events)
    found = validate(items, now=now) + detect_missing(items, now=now)
    if policy is not None:
        found += detect_out_of_shift(items, policy, now=now)
    return found


def reconcile(
    record: DailyRecord,
    policy: Optional[WorkPolicy] = None,
    now: Optional[datetime] = None,
) -> DailyRecord:
    """Return a copy of the record with its inconsistencies brought up to date."""
    items: List[EventLike] = list(effective_events(record)) + list(record.malformed_events)
    fresh = detect_all(items, policy=policy, now=now)

    stored = {inconsistency.id: inconsistency for inconsistency in record.inconsistencies}
    merged: List[Inconsistency] = []
    seen = set()
    for inconsistency in fresh:
        if inconsistency.id in seen:
            continue
        seen.add(inconsistency.id)
        merged.append(stored.get(inconsistency.id, inconsistency))

    for inconsistency in record.inconsistencies:
        if inconsistency.id not in seen and inconsistency.resolved:
            seen.add(inconsistency.id)
            merged.append(inconsistency)

    dropped = [i.id for i in record.inconsistencies if i.id not in seen]
    if dropped:
        logger.debug(f"Dropped {len(dropped)} inconsistencies no longer detected for {record.employee_id} {record.date}")

    return record.model_copy(update={"inconsistencies": merged})


def resolve_inconsistency(
    inconsistency: Inconsistency,
    kind: ResolutionKind,
    resolved_by_id: str,
    details: str = "",
    now: Optional[datetime] = None,
) -> Inconsistency:
    """Mark an inconsistency resolved.

    Raises:
        InconsistencyAlreadyResolved: If it was resolved before
    """
    if inconsistency.resolved:
        raise InconsistencyAlreadyResolved(f"Inconsistency {inconsistency.id} is already resolved")
    resolution = Resolution(
        kind=kind,
        resolved_at=now or utcnow(),
        resolved_by_id=resolved_by_id,
        details=details,
    )
    return inconsistency.model_copy(update={"resolved": True, "resolution": resolution})
