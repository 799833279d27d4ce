"""AuditEvent data model for ponto."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Audit event type enumeration."""
    PUNCH_RECORDED = "punch_recorded"
    DAY_VALIDATED = "day_validated"
    CORRECTION_PROPOSED = "correction_proposed"
    CORRECTION_APPROVED = "correction_approved"
    CORRECTION_REJECTED = "correction_rejected"
    CORRECTION_CANCELLED = "correction_cancelled"
    INCONSISTENCY_RESOLVED = "inconsistency_resolved"
    DAY_LOCKED = "day_locked"
    DAY_STATUS_CHANGED = "day_status_changed"


class AuditEvent(BaseModel):
    """Audit event captures trust-critical behavior on a daily record."""

    id: str = Field(..., description="Unique audit event identifier")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Event timestamp")
    event_type: AuditEventType = Field(..., description="Type of audit event")
    entity_id: str = Field(..., description="ID of the entity this event relates to")
    actor_id: Optional[str] = Field(None, description="Who performed the action")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional event details")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
