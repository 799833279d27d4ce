"""Repository for employee/day punch records."""

import calendar
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ponto.models.daily_record import DailyRecord
from ponto.models.punch_event import PunchEvent
from ponto.storage.keys import day_key
from ponto.storage.mirror import MirroredStore

logger = logging.getLogger(__name__)


class DailyRecordRepository:
    """Load and store DailyRecord documents.

    Event documents are parsed one by one: an event that cannot be read is
    moved to `malformed_events` instead of failing the whole day.
    """

    def __init__(self, store: MirroredStore):
        self.store = store

    def _from_document(self, document: Dict[str, Any]) -> DailyRecord:
        data = dict(document)
        events: List[PunchEvent] = []
        malformed: List[Dict[str, Any]] = list(data.get("malformed_events") or [])
        for raw in data.get("events") or []:
            try:
                events.append(PunchEvent.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Stored punch event could not be parsed ({e.error_count()} errors); kept as malformed")
                malformed.append(raw if isinstance(raw, dict) else {"value": repr(raw)})
        data["events"] = events
        data["malformed_events"] = malformed
        return DailyRecord.model_validate(data)

    def get(self, employer_id: str, employee_id: str, day: date) -> Optional[DailyRecord]:
        """Get the record of an employee/day, or None if nothing was stored."""
        key = day_key(employer_id, employee_id, day)
        document = self.store.get(key)
        if document is None:
            return None
        try:
            return self._from_document(document)
        except ValidationError as e:
            logger.error(f"Failed to parse daily record {key}: {type(e).__name__}: {str(e)}")
            raise

    def get_or_create(self, employer_id: str, employee_id: str, day: date) -> DailyRecord:
        record = self.get(employer_id, employee_id, day)
        if record is None:
            record = DailyRecord(date=day, employee_id=employee_id)
        return record

    def save(self, employer_id: str, record: DailyRecord) -> DailyRecord:
        """Create or replace a daily record."""
        key = day_key(employer_id, record.employee_id, record.date)
        try:
            self.store.put(key, record.model_dump(mode="json"))
            logger.debug(f"Saved daily record {key} ({len(record.events)} events)")
            return record
        except Exception as e:
            logger.error(f"Failed to save daily record {key}: {type(e).__name__}: {str(e)}")
            raise

    def list_month(self, employer_id: str, employee_id: str, year: int, month: int) -> List[DailyRecord]:
        """Stored records of an employee for a month, in date order."""
        _, last_day = calendar.monthrange(year, month)
        records: List[DailyRecord] = []
        for day_number in range(1, last_day + 1):
            record = self.get(employer_id, employee_id, date(year, month, day_number))
            if record is not None:
                records.append(record)
        return records
