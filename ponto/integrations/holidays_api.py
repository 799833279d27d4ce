"""BrasilAPI holidays integration for ponto."""

import logging
import os
from datetime import date
from typing import List

import requests
from dotenv import load_dotenv

from ponto.engine.holidays import national_holidays
from ponto.models.summary import Holiday

load_dotenv()

logger = logging.getLogger(__name__)

HOLIDAYS_API_URL = os.getenv("HOLIDAYS_API_URL", "https://brasilapi.com.br/api/feriados/v1/{year}")
HOLIDAYS_API_TIMEOUT_SEC = float(os.getenv("HOLIDAYS_API_TIMEOUT_SEC", "10"))


def parse_holidays(payload: list, year: int) -> List[Holiday]:
    """Normalize the API payload ([{"date": "YYYY-MM-DD", "name": ..., "type": ...}]).

    Raises:
        ValueError: If the payload has an unexpected shape
    """
    if not isinstance(payload, list):
        raise ValueError("holidays payload is not a list")
    holidays: List[Holiday] = []
    for item in payload:
        if not isinstance(item, dict):
            raise ValueError("holiday entry is not an object")
        day = date.fromisoformat(str(item["date"])[:10])
        if day.year != year:
            continue
        holidays.append(Holiday(date=day, name=str(item.get("name") or ""), scope=str(item.get("type") or "national")))
    return sorted(holidays, key=lambda h: h.date)


def fetch_holidays(year: int) -> List[Holiday]:
    """Fetch national holidays of a year, falling back to the local calendar.

    Args:
        year: Calendar year

    Returns:
        Holidays sorted by date
    """
    url = HOLIDAYS_API_URL.format(year=year)
    try:
        response = requests.get(url, timeout=HOLIDAYS_API_TIMEOUT_SEC)
        response.raise_for_status()
        holidays = parse_holidays(response.json(), year)
        logger.debug(f"Fetched {len(holidays)} holidays for {year}")
        return holidays
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning(f"Holidays API unavailable for {year}, using local calendar: {type(e).__name__}: {str(e)}")
        return national_holidays(year)
