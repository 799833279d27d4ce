"""Checks on the values handed over by the capture capabilities.

The caller supplies the device readings and the reference time; nothing here
queries a device or the network.
"""

import math
from datetime import datetime
from typing import List, Optional

from ponto.models.constants import EARTH_RADIUS_METERS, MAX_CLOCK_SKEW_MINUTES
from ponto.models.employer import AllowedLocation
from ponto.models.punch_event import Location
from ponto.timeutils import as_utc


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance (haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def check_clock_skew(
    device_time: datetime,
    reference_time: datetime,
    max_minutes: float = MAX_CLOCK_SKEW_MINUTES,
) -> Optional[str]:
    """Message if the device clock is off by more than `max_minutes`."""
    skew = abs((as_utc(device_time) - as_utc(reference_time)).total_seconds()) / 60.0
    if skew > max_minutes:
        return f"Device clock differs from the reference by {round(skew)} minutes; adjust the device time"
    return None


def check_location(location: Optional[Location], allowed: Optional[AllowedLocation]) -> Optional[str]:
    """Message if the punch is outside the allowed perimeter.

    No perimeter configured means every location is accepted; a configured
    perimeter with no location reading is refused.
    """
    if allowed is None:
        return None
    if location is None:
        return "Location is required to punch"
    distance = distance_meters(allowed.latitude, allowed.longitude, location.latitude, location.longitude)
    if distance > allowed.radius_meters:
        return f"Outside the allowed perimeter: {round(distance)}m away (max {round(allowed.radius_meters)}m)"
    return None


def check_capture(
    device_time: datetime,
    reference_time: Optional[datetime],
    location: Optional[Location],
    allowed: Optional[AllowedLocation],
) -> List[str]:
    """All capture problems at once (empty when the punch can be recorded)."""
    messages: List[str] = []
    if reference_time is not None:
        skew = check_clock_skew(device_time, reference_time)
        if skew:
            messages.append(skew)
    perimeter = check_location(location, allowed)
    if perimeter:
        messages.append(perimeter)
    return messages
