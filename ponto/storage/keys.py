"""Storage keys for ponto documents."""

from datetime import date
from typing import Dict


def storage_keys(uid: str) -> Dict[str, str]:
    """Document keys of an employer account.

    Raises:
        ValueError: If uid is empty
    """
    if not uid or not uid.strip():
        raise ValueError("Invalid uid")
    uid = uid.strip()
    return {
        "employer": f"employer_{uid}",
        "employees": f"employees_{uid}",
        "days": f"days_{uid}",
        "holidays": f"holidays_{uid}",
    }


def day_key(employer_id: str, employee_id: str, day: date) -> str:
    """Key of one employee/day record."""
    if not employee_id:
        raise ValueError("Invalid employee id")
    return f"{storage_keys(employer_id)['days']}/{employee_id}/{day.isoformat()}"


def holidays_key(employer_id: str, year: int) -> str:
    """Key of an employer's custom holidays for a year."""
    return f"{storage_keys(employer_id)['holidays']}/{year}"
