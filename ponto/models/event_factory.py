"""Punch event creation factory for ponto.

This module centralizes event creation so that every event leaves capture
with version 1 and a freshly computed integrity tag.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from ponto.engine.integrity import tag_fields
from ponto.models.constants import INITIAL_EVENT_VERSION
from ponto.models.punch_event import PunchEvent, PunchKind, Location
from ponto.timeutils import utcnow


def create_punch_event(
    employee_id: str,
    kind: PunchKind,
    timestamp: Optional[datetime] = None,
    device_id: Optional[str] = None,
    location: Optional[Location] = None,
    photo_ref: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    event_id: Optional[str] = None,
) -> PunchEvent:
    """Create a tagged punch event.

    Args:
        employee_id: Employee who punched
        kind: Punch kind
        timestamp: Device clock reading (defaults to now, UTC)
        device_id: Capturing device
        location: Coordinates from the geolocation provider
        photo_ref: Reference to the identification photo
        metadata: Opaque capture metadata
        event_id: Explicit identifier (generated if None)

    Returns:
        PunchEvent with version 1 and its integrity tag
    """
    event_id = event_id or str(uuid.uuid4())
    timestamp = timestamp or utcnow()
    kind = PunchKind(kind)

    integrity_tag = tag_fields({
        "id": event_id,
        "kind": kind,
        "timestamp": timestamp,
        "employee_id": employee_id,
        "version": INITIAL_EVENT_VERSION,
    })

    return PunchEvent(
        id=event_id,
        kind=kind,
        timestamp=timestamp,
        employee_id=employee_id,
        device_id=device_id,
        location=location,
        photo_ref=photo_ref,
        metadata=metadata or {},
        integrity_tag=integrity_tag,
        version=INITIAL_EVENT_VERSION,
    )
