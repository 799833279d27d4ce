"""Monthly summary for ponto.

Walks every day of a month for one employee, summarizing recorded days and
counting expected hours only on work days.
"""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ponto.engine.summary import summarize
from ponto.models.constants import HOURS_PRECISION
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import Employee, Employer, WorkPolicy
from ponto.models.summary import Holiday, MonthlySummary

logger = logging.getLogger(__name__)


def days_of_month(year: int, month: int) -> List[date]:
    _, last_day = calendar.monthrange(year, month)
    first = date(year, month, 1)
    return [first + timedelta(days=offset) for offset in range(last_day)]


def is_business_day(day: date) -> bool:
    """Monday to Friday."""
    return day.weekday() < 5


def is_work_day(
    day: date,
    employee: Employee,
    holiday_dates: Iterable[date],
    record: Optional[DailyRecord],
    today: date,
) -> bool:
    """Whether hours are expected from the employee on this day."""
    if not is_business_day(day) or day in set(holiday_dates):
        return False
    if employee.admission and day < employee.admission:
        return False
    if day > today:
        return False
    if record is not None and (record.day_off or record.closed):
        return False
    return True


def summarize_month(
    records: Iterable[DailyRecord],
    employee: Employee,
    employer: Employer,
    year: int,
    month: int,
    holidays: Iterable[Holiday] = (),
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> MonthlySummary:
    """Summarize one employee's month.

    Args:
        records: Daily records of the employee (other months are ignored)
        employee: The employee
        employer: Employer parameters (lunch control, defaults)
        year: Year
        month: Month (1-12)
        holidays: Holidays to treat as non-work days
        today: Days after this one expect no hours (defaults to today)
        now: Detection timestamp passed to the daily summaries

    Returns:
        MonthlySummary with per-day summaries for recorded or work days
    """
    today = today or date.today()
    policy = WorkPolicy.for_employee(employer, employee)
    by_day: Dict[date, DailyRecord] = {
        r.date: r for r in records if r.employee_id == employee.id and r.date.year == year and r.date.month == month
    }
    month_holidays = [h for h in holidays if h.date.year == year and h.date.month == month]
    holiday_dates = {h.date for h in month_holidays}

    result = MonthlySummary(employee_id=employee.id, year=year, month=month, holidays=month_holidays)
    for day in days_of_month(year, month):
        record = by_day.get(day)
        if record is not None and record.day_off:
            result.days_off += 1

        work_day = is_work_day(day, employee, holiday_dates, record, today)
        if work_day:
            result.work_days += 1
            if record is None or not record.events:
                result.absences += 1

        if record is None:
            if work_day:
                result.expected_hours += policy.daily_hours
                result.shortfall_hours += policy.daily_hours
            continue

        daily = summarize(record, policy=policy, expected_hours=policy.daily_hours if work_day else 0.0, now=now)
        result.days.append(daily)
        result.expected_hours += daily.expected_hours
        result.worked_hours += daily.worked_hours
        result.overtime_hours += daily.overtime_hours
        result.shortfall_hours += daily.shortfall_hours

    result.expected_hours = round(result.expected_hours, HOURS_PRECISION)
    result.worked_hours = round(result.worked_hours, HOURS_PRECISION)
    result.overtime_hours = round(result.overtime_hours, HOURS_PRECISION)
    result.shortfall_hours = round(result.shortfall_hours, HOURS_PRECISION)
    result.balance_hours = round(result.worked_hours - result.expected_hours, HOURS_PRECISION)
    logger.debug(
        f"Month {year}-{month:02d} for {employee.id}: worked {result.worked_hours}h "
        f"of {result.expected_hours}h expected, {result.absences} absences"
    )
    return result
