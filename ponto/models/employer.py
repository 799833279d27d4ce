"""Employer, roster and work policy models for ponto."""

import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ponto.models.constants import (
    DEFAULT_DAILY_HOURS,
    DEFAULT_WEEK_DAYS,
    DEFAULT_SHIFT_START,
    DEFAULT_SHIFT_END,
    DEFAULT_ENTRY_TOLERANCE_MINUTES,
)
from ponto.timeutils import DEFAULT_TZ


class AllowedLocation(BaseModel):
    """Perimeter inside which punches are accepted."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    radius_meters: float = Field(..., gt=0.0, description="Accepted distance from the point")


class Employer(BaseModel):
    """Company parameters configured by the administrator."""

    id: str = Field(..., description="Employer identifier (admin account uid)")
    name: str = Field(..., description="Company name")
    cnpj: Optional[str] = Field(None, description="Company registration number")
    lunch_control: bool = Field(False, description="Whether break start/end punches are required")
    shift_start: datetime.time = Field(datetime.time.fromisoformat(DEFAULT_SHIFT_START), description="Shift start")
    shift_end: datetime.time = Field(datetime.time.fromisoformat(DEFAULT_SHIFT_END), description="Shift end")
    lunch_suggested_start: Optional[datetime.time] = Field(None, description="Suggested break start")
    lunch_suggested_end: Optional[datetime.time] = Field(None, description="Suggested break end")
    default_daily_hours: float = Field(DEFAULT_DAILY_HOURS, gt=0.0, le=24.0, description="Default expected hours per day")
    entry_tolerance_minutes: int = Field(DEFAULT_ENTRY_TOLERANCE_MINUTES, ge=0, description="Tolerance around the shift bounds")
    timezone: str = Field(DEFAULT_TZ, description="IANA timezone of the establishment")
    allowed_location: Optional[AllowedLocation] = Field(None, description="Accepted punch perimeter")


class Employee(BaseModel):
    """An employee on the employer's roster."""

    id: str = Field(..., description="Employee identifier")
    name: str = Field(..., description="Display name")
    daily_hours: Optional[float] = Field(None, gt=0.0, le=24.0, description="Expected hours per day (employer default if unset)")
    week_days: int = Field(DEFAULT_WEEK_DAYS, ge=1, le=7, description="Work days per week")
    allows_overtime: bool = Field(True, description="Whether hours beyond the expected count as overtime")
    admission: Optional[datetime.date] = Field(None, description="Admission date")
    active: bool = Field(True, description="Whether the employee may punch")


class WorkPolicy(BaseModel):
    """Parameters the daily summary and the shift detector work with."""

    lunch_control: bool = False
    daily_hours: float = DEFAULT_DAILY_HOURS
    allows_overtime: bool = True
    shift_start: Optional[datetime.time] = None
    shift_end: Optional[datetime.time] = None
    entry_tolerance_minutes: int = DEFAULT_ENTRY_TOLERANCE_MINUTES
    timezone: str = DEFAULT_TZ

    @classmethod
    def for_employee(cls, employer: Employer, employee: Optional[Employee] = None) -> "WorkPolicy":
        daily_hours = employer.default_daily_hours
        allows_overtime = True
        if employee is not None:
            if employee.daily_hours is not None:
                daily_hours = employee.daily_hours
            allows_overtime = employee.allows_overtime
        return cls(
            lunch_control=employer.lunch_control,
            daily_hours=daily_hours,
            allows_overtime=allows_overtime,
            shift_start=employer.shift_start,
            shift_end=employer.shift_end,
            entry_tolerance_minutes=employer.entry_tolerance_minutes,
            timezone=employer.timezone,
        )


class Roster(BaseModel):
    """Employees of one employer."""

    employer_id: str
    employees: List[Employee] = Field(default_factory=list)

    def find(self, employee_id: str) -> Optional[Employee]:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None
