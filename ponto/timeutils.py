"""Timezone helpers shared by the engine and the service layer."""

import os
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TZ = os.getenv("TIMEZONE", "America/Sao_Paulo")


def get_tz(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or DEFAULT_TZ)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
