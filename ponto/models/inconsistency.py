"""Inconsistency data model for ponto."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class InconsistencyKind(str, Enum):
    """Inconsistency kind enumeration."""
    MISSING_EVENT = "missing_event"
    INVALID_SEQUENCE = "invalid_sequence"
    OVERLAP = "overlap"
    DUPLICATE = "duplicate"
    OUT_OF_SHIFT = "out_of_shift"
    MALFORMED_RECORD = "malformed_record"


class Severity(str, Enum):
    """Severity enumeration (ascending)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


BLOCKING_SEVERITIES = (Severity.HIGH, Severity.CRITICAL)


class ResolutionKind(str, Enum):
    """How an inconsistency was resolved."""
    CORRECTION_APPLIED = "correction_applied"
    JUSTIFICATION_ACCEPTED = "justification_accepted"
    IGNORED = "ignored"


class Resolution(BaseModel):
    """Explicit resolution of an inconsistency."""

    kind: ResolutionKind = Field(..., description="Resolution kind")
    resolved_at: datetime = Field(..., description="When it was resolved")
    resolved_by_id: str = Field(..., description="Who resolved it")
    details: str = Field("", description="Free-text details")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class Inconsistency(BaseModel):
    """A detected anomaly in a day's punch set.

    Not an error: it is a first-class condition that needs explicit resolution
    and never blocks the recording of new events.
    """

    id: str = Field(..., description="Deterministic identifier (detector prefix + anchor event id)")
    kind: InconsistencyKind = Field(..., description="Inconsistency kind")
    description: str = Field(..., description="Human-readable description, shown verbatim")
    involved_event_ids: List[str] = Field(default_factory=list, description="Involved events, in relevance order")
    detected_at: datetime = Field(..., description="Detection timestamp")
    severity: Severity = Field(..., description="Severity")
    resolved: bool = Field(False, description="Whether it was explicitly resolved")
    resolution: Optional[Resolution] = Field(None, description="Resolution details")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def is_blocking(self) -> bool:
        """Unresolved High/Critical inconsistencies keep their events out of the hour count."""
        return not self.resolved and self.severity in BLOCKING_SEVERITIES
