"""PunchEvent data model for ponto."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ponto.models.constants import INITIAL_EVENT_VERSION


class PunchKind(str, Enum):
    """Punch kind enumeration."""
    CLOCK_IN = "clock_in"
    BREAK_START = "break_start"
    BREAK_END = "break_end"
    CLOCK_OUT = "clock_out"


class Location(BaseModel):
    """Coordinates handed over by the geolocation provider."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    precision: Optional[float] = Field(None, ge=0.0, description="Reported accuracy in meters")


class PunchEvent(BaseModel):
    """One observed punch at a point in time.

    Events are never mutated in place. A correction produces a new state of the
    same event with a higher version and a recomputed integrity tag.
    """

    id: str = Field(..., description="Unique event identifier (UUID v4)")
    kind: PunchKind = Field(..., description="Punch kind")
    timestamp: datetime = Field(..., description="When the punch happened")
    employee_id: str = Field(..., description="Employee who owns this event")
    device_id: Optional[str] = Field(None, description="Capturing device")
    location: Optional[Location] = Field(None, description="Where the punch happened")
    photo_ref: Optional[str] = Field(None, description="Reference to the identification photo")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque capture metadata")
    integrity_tag: str = Field(..., description="Integrity tag over the immutable identity fields")
    version: int = Field(INITIAL_EVENT_VERSION, ge=1, description="Incremented whenever the tag is recomputed")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
