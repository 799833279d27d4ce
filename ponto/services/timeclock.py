"""Time-clock service for ponto.

Wires the repositories to the engine. Every operation that changes a daily
record appends an AuditEvent to it before the record is saved.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ponto.engine import corrections as workflow
from ponto.engine.capture_checks import check_capture
from ponto.engine.errors import (
    CaptureRejected,
    InconsistencyNotFound,
    RecordLockedError,
    RecordNotFoundError,
)
from ponto.engine.integrity import ensure_trusted
from ponto.engine.monthly import summarize_month
from ponto.engine.reconcile import reconcile, resolve_inconsistency
from ponto.engine.summary import summarize
from ponto.integrations.holidays_api import fetch_holidays
from ponto.models.audit_event import AuditEvent, AuditEventType
from ponto.models.correction import Correction, CorrectionDraft
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import Employee, Employer, Roster, WorkPolicy
from ponto.models.event_factory import create_punch_event
from ponto.models.inconsistency import ResolutionKind
from ponto.models.punch_event import Location, PunchKind
from ponto.models.summary import DailySummary, Holiday, MonthlySummary
from ponto.storage.employer_repository import EmployerRepository
from ponto.storage.record_repository import DailyRecordRepository
from ponto.timeutils import as_utc, get_tz, utcnow

logger = logging.getLogger(__name__)


class TimeClockService:
    """Operations on employee/day records of one storage backend."""

    def __init__(
        self,
        records: DailyRecordRepository,
        employers: EmployerRepository,
        holiday_source: Callable[[int], List[Holiday]] = fetch_holidays,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.records = records
        self.employers = employers
        self.holiday_source = holiday_source
        self.clock = clock

    # Helpers

    def _audit(
        self,
        record: DailyRecord,
        event_type: AuditEventType,
        entity_id: str,
        actor_id: Optional[str],
        now: datetime,
        details: Optional[Dict[str, Any]] = None,
    ) -> DailyRecord:
        audit_event = AuditEvent(
            id=str(uuid.uuid4()),
            timestamp=now,
            event_type=event_type,
            entity_id=entity_id,
            actor_id=actor_id,
            details=details or {},
        )
        return record.model_copy(update={"audit_trail": list(record.audit_trail) + [audit_event]})

    def _employee(self, employer_id: str, employee_id: str) -> Optional[Employee]:
        return self.employers.get_roster(employer_id).find(employee_id)

    def policy_for(self, employer_id: str, employee_id: str) -> WorkPolicy:
        """Work policy of an employee (defaults when the employer is not configured)."""
        employer = self.employers.get_employer(employer_id)
        if employer is None:
            return WorkPolicy()
        return WorkPolicy.for_employee(employer, self._employee(employer_id, employee_id))

    def _require_record(self, employer_id: str, employee_id: str, day: date) -> DailyRecord:
        record = self.records.get(employer_id, employee_id, day)
        if record is None:
            raise RecordNotFoundError(f"No record for employee {employee_id} on {day.isoformat()}")
        return record

    def _require_correction(self, record: DailyRecord, correction_id: str) -> Correction:
        correction = record.find_correction(correction_id)
        if correction is None:
            raise RecordNotFoundError(f"Correction {correction_id} not found")
        return correction

    def _replace_correction(self, record: DailyRecord, correction: Correction) -> DailyRecord:
        corrections = [correction if c.id == correction.id else c for c in record.corrections]
        return record.model_copy(update={"corrections": corrections})

    # Punches and days

    def record_punch(
        self,
        employer_id: str,
        employee_id: str,
        kind: PunchKind,
        timestamp: Optional[datetime] = None,
        device_id: Optional[str] = None,
        location: Optional[Location] = None,
        photo_ref: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        reference_time: Optional[datetime] = None,
    ) -> DailyRecord:
        """Append a punch to the employee's day.

        Args:
            employer_id: Employer account
            employee_id: Employee who punched
            kind: Punch kind
            timestamp: Device timestamp (defaults to the service clock)
            device_id: Capturing device
            location: Device coordinates
            photo_ref: Identification photo reference
            metadata: Opaque capture metadata
            reference_time: Trusted time to check the device clock against

        Returns:
            The saved record, reconciled

        Raises:
            CaptureRejected: If the capture checks fail or the employee is inactive
            RecordLockedError: If the day is locked
            IntegrityFailure: If stored events of the day fail verification
        """
        now = self.clock()
        timestamp = timestamp or now
        employer = self.employers.get_employer(employer_id)
        employee = self._employee(employer_id, employee_id)

        if employee is not None and not employee.active:
            raise CaptureRejected([f"Employee {employee_id} is inactive"])
        if employer is not None:
            messages = check_capture(timestamp, reference_time, location, employer.allowed_location)
            if messages:
                raise CaptureRejected(messages)

        tz = get_tz(employer.timezone if employer else None)
        day = as_utc(timestamp).astimezone(tz).date()
        record = self.records.get_or_create(employer_id, employee_id, day)
        if record.locked:
            raise RecordLockedError(f"Day {day.isoformat()} of employee {employee_id} is locked")
        ensure_trusted(record.events)

        event = create_punch_event(
            employee_id=employee_id,
            kind=kind,
            timestamp=timestamp,
            device_id=device_id,
            location=location,
            photo_ref=photo_ref,
            metadata=metadata,
        )
        record = record.model_copy(update={"events": list(record.events) + [event]})
        record = self._audit(record, AuditEventType.PUNCH_RECORDED, event.id, employee_id, now, {"kind": event.kind})
        policy = WorkPolicy.for_employee(employer, employee) if employer else None
        record = reconcile(record, policy=policy, now=now)
        logger.debug(f"Recorded {event.kind} for {employee_id} on {day.isoformat()}")
        return self.records.save(employer_id, record)

    def get_day(self, employer_id: str, employee_id: str, day: date) -> DailyRecord:
        """Stored record of an employee/day.

        Raises:
            RecordNotFoundError: If nothing was recorded for the day
        """
        return self._require_record(employer_id, employee_id, day)

    def validate_day(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        actor_id: Optional[str] = None,
    ) -> DailyRecord:
        """Re-run detection over a day and store the result."""
        now = self.clock()
        record = self._require_record(employer_id, employee_id, day)
        record = reconcile(record, policy=self.policy_for(employer_id, employee_id), now=now)
        open_count = sum(1 for i in record.inconsistencies if not i.resolved)
        record = self._audit(
            record, AuditEventType.DAY_VALIDATED, f"{employee_id}/{day.isoformat()}", actor_id, now,
            {"open_inconsistencies": open_count},
        )
        return self.records.save(employer_id, record)

    def lock_day(self, employer_id: str, employee_id: str, day: date, actor_id: str) -> DailyRecord:
        """Lock a day; only corrections may change it afterwards."""
        record = self._require_record(employer_id, employee_id, day)
        if record.locked:
            return record
        now = self.clock()
        record = record.model_copy(update={"locked": True})
        record = self._audit(record, AuditEventType.DAY_LOCKED, f"{employee_id}/{day.isoformat()}", actor_id, now)
        logger.debug(f"Locked {employee_id} {day.isoformat()}")
        return self.records.save(employer_id, record)

    def set_day_status(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        day_off: Optional[bool] = None,
        closed: Optional[bool] = None,
        actor_id: Optional[str] = None,
    ) -> DailyRecord:
        """Mark a day as an authorized day off or the establishment as closed."""
        record = self.records.get_or_create(employer_id, employee_id, day)
        update: Dict[str, Any] = {}
        if day_off is not None:
            update["day_off"] = day_off
        if closed is not None:
            update["closed"] = closed
        previous = {"day_off": record.day_off, "closed": record.closed}
        record = record.model_copy(update=update)
        now = self.clock()
        record = self._audit(
            record,
            AuditEventType.DAY_STATUS_CHANGED,
            f"{employee_id}/{day.isoformat()}",
            actor_id,
            now,
            {"previous": previous, "current": {"day_off": record.day_off, "closed": record.closed}},
        )
        return self.records.save(employer_id, record)

    # Corrections

    def propose_correction(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        draft: CorrectionDraft,
    ) -> workflow.CorrectionResult:
        """Submit a correction; a failed validation gate changes nothing.

        Raises:
            RecordNotFoundError: If the day or the targeted event does not exist
        """
        now = self.clock()
        record = self._require_record(employer_id, employee_id, day)
        event = record.find_event(draft.original_event_id)
        if event is None:
            raise RecordNotFoundError(f"Event {draft.original_event_id} not found")

        result = workflow.propose_correction(draft, event, record.corrections, now=now)
        if not result.ok:
            return result

        correction = result.correction
        record = record.model_copy(update={"corrections": list(record.corrections) + [correction]})
        record = self._audit(
            record, AuditEventType.CORRECTION_PROPOSED, correction.id, correction.requested_by_id, now,
            {"original_event_id": event.id, "proposed_timestamp": correction.proposed_timestamp.isoformat()},
        )
        self.records.save(employer_id, record)
        return result

    def _decide(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        correction_id: str,
        event_type: AuditEventType,
        transition: Callable[[Correction, datetime], Correction],
        actor_id: str,
    ) -> DailyRecord:
        now = self.clock()
        record = self._require_record(employer_id, employee_id, day)
        decided = transition(self._require_correction(record, correction_id), now)
        record = self._replace_correction(record, decided)
        record = self._audit(
            record, event_type, decided.id, actor_id, now,
            {"status": decided.status, "note": decided.resolution_note},
        )
        record = reconcile(record, policy=self.policy_for(employer_id, employee_id), now=now)
        return self.records.save(employer_id, record)

    def approve_correction(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        correction_id: str,
        approver_id: str,
        approver_name: Optional[str] = None,
        note: Optional[str] = None,
    ) -> DailyRecord:
        """Approve a pending correction; the day is reconciled over the corrected events."""
        return self._decide(
            employer_id, employee_id, day, correction_id, AuditEventType.CORRECTION_APPROVED,
            lambda c, now: workflow.approve_correction(c, approver_id, approver_name, note, now=now),
            approver_id,
        )

    def reject_correction(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        correction_id: str,
        approver_id: str,
        approver_name: Optional[str] = None,
        note: Optional[str] = None,
    ) -> DailyRecord:
        return self._decide(
            employer_id, employee_id, day, correction_id, AuditEventType.CORRECTION_REJECTED,
            lambda c, now: workflow.reject_correction(c, approver_id, approver_name, note, now=now),
            approver_id,
        )

    def cancel_correction(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        correction_id: str,
        actor_id: str,
        note: Optional[str] = None,
    ) -> DailyRecord:
        return self._decide(
            employer_id, employee_id, day, correction_id, AuditEventType.CORRECTION_CANCELLED,
            lambda c, now: workflow.cancel_correction(c, actor_id, note, now=now),
            actor_id,
        )

    def resolve_inconsistency(
        self,
        employer_id: str,
        employee_id: str,
        day: date,
        inconsistency_id: str,
        kind: ResolutionKind,
        resolved_by_id: str,
        details: str = "",
    ) -> DailyRecord:
        """Resolve an inconsistency once.

        Raises:
            InconsistencyNotFound: If the day has no such inconsistency
            InconsistencyAlreadyResolved: If it was resolved before
        """
        now = self.clock()
        record = self._require_record(employer_id, employee_id, day)
        inconsistency = record.find_inconsistency(inconsistency_id)
        if inconsistency is None:
            raise InconsistencyNotFound(f"Inconsistency {inconsistency_id} not found")
        resolved = resolve_inconsistency(inconsistency, ResolutionKind(kind), resolved_by_id, details, now=now)
        inconsistencies = [resolved if i.id == resolved.id else i for i in record.inconsistencies]
        record = record.model_copy(update={"inconsistencies": inconsistencies})
        record = self._audit(
            record, AuditEventType.INCONSISTENCY_RESOLVED, resolved.id, resolved_by_id, now,
            {"resolution": ResolutionKind(kind).value, "details": details},
        )
        return self.records.save(employer_id, record)

    # Summaries

    def summarize_day(self, employer_id: str, employee_id: str, day: date) -> DailySummary:
        """Daily summary of a stored day.

        Raises:
            RecordNotFoundError: If nothing was recorded for the day
        """
        record = self.records.get(employer_id, employee_id, day)
        return summarize(record, policy=self.policy_for(employer_id, employee_id), now=self.clock())

    def holidays_for(self, employer_id: str, year: int) -> List[Holiday]:
        """National holidays plus the employer's custom ones, sorted by date."""
        holidays = list(self.holiday_source(year)) + self.employers.get_custom_holidays(employer_id, year)
        return sorted(holidays, key=lambda h: h.date)

    def summarize_month(
        self,
        employer_id: str,
        employee_id: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> MonthlySummary:
        """Monthly summary of an employee on the roster.

        Raises:
            RecordNotFoundError: If the employer or the employee is not configured
        """
        employer = self.employers.get_employer(employer_id)
        if employer is None:
            raise RecordNotFoundError(f"Employer {employer_id} is not configured")
        employee = self._employee(employer_id, employee_id)
        if employee is None:
            raise RecordNotFoundError(f"Employee {employee_id} is not on the roster")
        now = self.clock()
        today = today or as_utc(now).astimezone(get_tz(employer.timezone)).date()
        records = self.records.list_month(employer_id, employee_id, year, month)
        return summarize_month(
            records, employee, employer, year, month,
            holidays=self.holidays_for(employer_id, year), today=today, now=now,
        )

    # Configuration

    def save_employer(self, employer: Employer) -> Employer:
        return self.employers.save_employer(employer)

    def save_employees(self, employer_id: str, employees: Iterable[Employee]) -> Roster:
        """Replace the roster of an employer."""
        return self.employers.save_roster(Roster(employer_id=employer_id, employees=list(employees)))

    def save_custom_holidays(self, employer_id: str, year: int, holidays: Iterable[Holiday]) -> List[Holiday]:
        return self.employers.save_custom_holidays(employer_id, year, list(holidays))
