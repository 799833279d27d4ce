"""Request/response models for the ponto HTTP API."""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ponto.models.correction import Correction
from ponto.models.inconsistency import ResolutionKind
from ponto.models.punch_event import Location, PunchKind


class PunchRequest(BaseModel):
    """Request model for recording a punch."""
    kind: PunchKind = Field(..., description="Punch kind")
    timestamp: Optional[datetime] = Field(None, description="Device timestamp (server time if omitted)")
    device_id: Optional[str] = None
    location: Optional[Location] = None
    photo_ref: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    reference_time: Optional[datetime] = Field(None, description="Trusted time to check the device clock against")


class ActorRequest(BaseModel):
    """Request model for actions that only need the acting user."""
    actor_id: Optional[str] = Field(None, description="Who performs the action")


class DecisionRequest(BaseModel):
    """Request model for approving, rejecting or cancelling a correction."""
    actor_id: str = Field(..., description="Who decides")
    actor_name: Optional[str] = None
    note: Optional[str] = Field(None, description="Reason given with the decision")


class ResolveRequest(BaseModel):
    """Request model for resolving an inconsistency."""
    kind: ResolutionKind
    resolved_by_id: str
    details: str = ""


class DayStatusRequest(BaseModel):
    """Request model for marking a day off or a closed establishment."""
    day_off: Optional[bool] = None
    closed: Optional[bool] = None
    actor_id: Optional[str] = Field(None, description="Who changes the day status")


class CorrectionResponse(BaseModel):
    """Response for a correction proposal."""
    correction: Correction
