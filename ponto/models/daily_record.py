"""DailyRecord data model for ponto."""

import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ponto.models.punch_event import PunchEvent
from ponto.models.correction import Correction
from ponto.models.inconsistency import Inconsistency
from ponto.models.audit_event import AuditEvent


class DailyRecord(BaseModel):
    """Aggregate of one employee's calendar day.

    The order of `events` is storage order only; every ordering decision is
    made on `timestamp`.
    """

    date: datetime.date = Field(..., description="Calendar day (employer timezone)")
    employee_id: str = Field(..., description="Employee who owns this day")
    events: List[PunchEvent] = Field(default_factory=list, description="Original punch events")
    corrections: List[Correction] = Field(default_factory=list, description="Corrections proposed for this day")
    inconsistencies: List[Inconsistency] = Field(default_factory=list, description="Detected inconsistencies")
    locked: bool = Field(False, description="When true only corrections may change the day")
    malformed_events: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Stored event documents that could not be parsed (kept for audit)",
    )
    day_off: bool = Field(False, description="Authorized day off for this employee")
    closed: bool = Field(False, description="Establishment closed on this day")
    audit_trail: List[AuditEvent] = Field(default_factory=list, description="Trust-critical actions on this day")

    def find_event(self, event_id: str) -> Optional[PunchEvent]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def find_correction(self, correction_id: str) -> Optional[Correction]:
        for correction in self.corrections:
            if correction.id == correction_id:
                return correction
        return None

    def find_inconsistency(self, inconsistency_id: str) -> Optional[Inconsistency]:
        for inconsistency in self.inconsistencies:
            if inconsistency.id == inconsistency_id:
                return inconsistency
        return None
