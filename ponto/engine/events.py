"""Event parsing and ordering shared by the detectors.

Detectors accept stored items that may not be valid events (for instance raw
documents whose timestamp cannot be parsed). Such items are split off and
reported as malformed records instead of aborting the whole validation.
"""

import hashlib
import json
import logging
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity
from ponto.models.punch_event import PunchEvent
from ponto.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

EventLike = Union[PunchEvent, Mapping[str, Any]]


def event_instant(event: PunchEvent) -> datetime:
    """Timestamp normalized to aware UTC (raises if the timestamp is unusable)."""
    if not isinstance(event.timestamp, datetime):
        raise TypeError(f"timestamp is {type(event.timestamp).__name__}, not datetime")
    return as_utc(event.timestamp)


def sort_events(events: Iterable[PunchEvent]) -> List[PunchEvent]:
    """Sort by timestamp, ties broken by event id."""
    return sorted(events, key=lambda e: (event_instant(e), e.id))


def _fingerprint(item: Any) -> str:
    try:
        raw = json.dumps(item, sort_keys=True, default=str)
    except (TypeError, ValueError):
        raw = repr(item)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:12]


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, Mapping):
        value = item.get("id")
    else:
        value = getattr(item, "id", None)
    return value if isinstance(value, str) and value else None


def malformed_inconsistency(item: Any, reason: str, now: Optional[datetime] = None) -> Inconsistency:
    item_id = _item_id(item)
    if item_id:
        inconsistency_id = f"malformed-{item_id}"
        involved = [item_id]
    else:
        inconsistency_id = f"malformed-{_fingerprint(item)}"
        involved = []
    return Inconsistency(
        id=inconsistency_id,
        kind=InconsistencyKind.MALFORMED_RECORD,
        description=f"Punch record could not be read: {reason}",
        involved_event_ids=involved,
        detected_at=now or utcnow(),
        severity=Severity.CRITICAL,
    )


def parse_events(
    items: Iterable[EventLike],
    now: Optional[datetime] = None,
) -> Tuple[List[PunchEvent], List[Inconsistency]]:
    """Split items into usable events and malformed-record inconsistencies.

    Args:
        items: PunchEvent instances or raw event documents
        now: Detection timestamp for the inconsistencies

    Returns:
        (events, inconsistencies); input order is preserved in both lists
    """
    events: List[PunchEvent] = []
    malformed: List[Inconsistency] = []
    for item in items:
        try:
            event = item if isinstance(item, PunchEvent) else PunchEvent.model_validate(item)
            event_instant(event)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in e.errors())
            logger.warning(f"Malformed punch record {_item_id(item) or '?'}: invalid {fields}")
            malformed.append(malformed_inconsistency(item, f"invalid {fields}", now))
            continue
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Malformed punch record {_item_id(item) or '?'}: {type(e).__name__}: {str(e)}")
            malformed.append(malformed_inconsistency(item, str(e) or type(e).__name__, now))
            continue
        events.append(event)
    return events, malformed
