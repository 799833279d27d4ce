"""Data models for ponto."""

from ponto.models.punch_event import PunchEvent, PunchKind, Location
from ponto.models.correction import Correction, CorrectionDraft, CorrectionStatus
from ponto.models.inconsistency import Inconsistency, InconsistencyKind, Severity, Resolution, ResolutionKind
from ponto.models.daily_record import DailyRecord
from ponto.models.audit_event import AuditEvent, AuditEventType
from ponto.models.employer import Employer, Employee, AllowedLocation, WorkPolicy, Roster
from ponto.models.summary import DailySummary, MonthlySummary, Holiday, CalculationParameters

__all__ = [
    "PunchEvent",
    "PunchKind",
    "Location",
    "Correction",
    "CorrectionDraft",
    "CorrectionStatus",
    "Inconsistency",
    "InconsistencyKind",
    "Severity",
    "Resolution",
    "ResolutionKind",
    "DailyRecord",
    "AuditEvent",
    "AuditEventType",
    "Employer",
    "Employee",
    "AllowedLocation",
    "WorkPolicy",
    "Roster",
    "DailySummary",
    "MonthlySummary",
    "Holiday",
    "CalculationParameters",
]
