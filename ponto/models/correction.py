"""Correction data models for ponto."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class CorrectionStatus(str, Enum):
    """Correction status enumeration."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class CorrectionDraft(BaseModel):
    """Caller-supplied fields of a correction proposal.

    Requester fields are optional here so that the workflow can report every
    missing piece at once instead of failing on parse.
    """

    original_event_id: str = Field(..., description="Event the correction targets")
    proposed_timestamp: datetime = Field(..., description="Timestamp the event should have")
    justification: str = Field("", description="Free-text reason for the change")
    requested_by_id: Optional[str] = Field(None, description="Who asks for the change")
    requested_by_name: Optional[str] = Field(None, description="Display name of the requester")
    approver_id: Optional[str] = Field(None, description="Designated approver (required for self-corrections)")
    approver_name: Optional[str] = Field(None, description="Display name of the designated approver")
    evidence: List[str] = Field(default_factory=list, description="Attachment references")


class Correction(BaseModel):
    """A proposed amendment to an existing event's timestamp."""

    id: str = Field(..., description="Unique correction identifier (UUID v4)")
    original_event_id: str = Field(..., description="Event the correction targets (reference only)")
    proposed_timestamp: datetime = Field(..., description="Timestamp the event should have")
    justification: str = Field(..., description="Free-text reason for the change")
    requested_by_id: str = Field(..., description="Who asked for the change")
    requested_by_name: str = Field(..., description="Display name of the requester")
    requested_at: datetime = Field(..., description="When the correction was proposed")
    approver_id: Optional[str] = Field(None, description="Designated approver")
    approver_name: Optional[str] = Field(None, description="Display name of the designated approver")
    status: CorrectionStatus = Field(CorrectionStatus.PENDING, description="Workflow status")
    integrity_tag: str = Field(..., description="Integrity tag over the immutable fields")
    evidence: List[str] = Field(default_factory=list, description="Attachment references")
    resolved_at: Optional[datetime] = Field(None, description="When the correction left pending")
    resolved_by_id: Optional[str] = Field(None, description="Who approved, rejected or cancelled")
    resolution_note: Optional[str] = Field(None, description="Reason given with the transition")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def is_pending(self) -> bool:
        return self.status == CorrectionStatus.PENDING
