"""Summary models for ponto."""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ponto.models.inconsistency import Inconsistency


class CalculationParameters(BaseModel):
    """Parameters a summary was computed with."""

    daily_hours: float
    lunch_control: bool
    entry_tolerance_minutes: int
    shift_start: Optional[datetime.time] = None
    shift_end: Optional[datetime.time] = None


class DailySummary(BaseModel):
    """Derived hours for one employee/day. Never persisted."""

    date: datetime.date = Field(..., description="Calendar day")
    employee_id: str = Field(..., description="Employee")
    worked_hours: float = Field(0.0, ge=0.0, description="Hours worked")
    expected_hours: float = Field(0.0, ge=0.0, description="Hours expected")
    overtime_hours: float = Field(0.0, ge=0.0, description="Hours beyond the expected (when allowed)")
    shortfall_hours: float = Field(0.0, ge=0.0, description="Hours missing to reach the expected")
    balance_hours: float = Field(0.0, description="worked - expected")
    inconsistencies: List[Inconsistency] = Field(default_factory=list, description="Inconsistencies considered")
    considered_event_ids: List[str] = Field(default_factory=list, description="Events used in the computation")
    applied_correction_ids: List[str] = Field(default_factory=list, description="Approved corrections reflected")
    untrusted_event_ids: List[str] = Field(default_factory=list, description="Events that failed integrity verification")
    parameters: CalculationParameters


class Holiday(BaseModel):
    """A holiday on the calendar."""

    date: datetime.date
    name: str
    scope: str = Field("national", description="national, state or municipal")


class MonthlySummary(BaseModel):
    """Month totals for one employee."""

    employee_id: str
    year: int
    month: int = Field(..., ge=1, le=12)
    expected_hours: float = 0.0
    worked_hours: float = 0.0
    overtime_hours: float = 0.0
    shortfall_hours: float = 0.0
    balance_hours: float = 0.0
    absences: int = Field(0, description="Work days without any punch")
    days_off: int = Field(0, description="Authorized days off")
    work_days: int = Field(0, description="Days on which hours were expected")
    holidays: List[Holiday] = Field(default_factory=list)
    days: List[DailySummary] = Field(default_factory=list)
