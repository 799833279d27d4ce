"""Repository for employer configuration, roster and custom holidays."""

import logging
from typing import List, Optional

from ponto.models.employer import Employer, Roster
from ponto.models.summary import Holiday
from ponto.storage.keys import holidays_key, storage_keys
from ponto.storage.mirror import MirroredStore

logger = logging.getLogger(__name__)


class EmployerRepository:
    """Employer documents stored under the account keys."""

    def __init__(self, store: MirroredStore):
        self.store = store

    def get_employer(self, employer_id: str) -> Optional[Employer]:
        document = self.store.get(storage_keys(employer_id)["employer"])
        return Employer.model_validate(document) if document is not None else None

    def save_employer(self, employer: Employer) -> Employer:
        key = storage_keys(employer.id)["employer"]
        try:
            self.store.put(key, employer.model_dump(mode="json"))
            logger.debug(f"Saved employer {employer.id}")
            return employer
        except Exception as e:
            logger.error(f"Failed to save employer {employer.id}: {type(e).__name__}: {str(e)}")
            raise

    def get_roster(self, employer_id: str) -> Roster:
        """Employees of an employer (empty roster if none stored)."""
        document = self.store.get(storage_keys(employer_id)["employees"])
        if document is None:
            return Roster(employer_id=employer_id)
        return Roster.model_validate({**document, "employer_id": employer_id})

    def save_roster(self, roster: Roster) -> Roster:
        key = storage_keys(roster.employer_id)["employees"]
        try:
            self.store.put(key, roster.model_dump(mode="json"))
            logger.debug(f"Saved roster of {roster.employer_id} ({len(roster.employees)} employees)")
            return roster
        except Exception as e:
            logger.error(f"Failed to save roster of {roster.employer_id}: {type(e).__name__}: {str(e)}")
            raise

    def get_custom_holidays(self, employer_id: str, year: int) -> List[Holiday]:
        document = self.store.get(holidays_key(employer_id, year))
        if document is None:
            return []
        return [Holiday.model_validate(item) for item in document.get("holidays", [])]

    def save_custom_holidays(self, employer_id: str, year: int, holidays: List[Holiday]) -> List[Holiday]:
        key = holidays_key(employer_id, year)
        try:
            self.store.put(key, {"holidays": [h.model_dump(mode="json") for h in holidays]})
            logger.debug(f"Saved {len(holidays)} custom holidays for {employer_id}/{year}")
            return holidays
        except Exception as e:
            logger.error(f"Failed to save custom holidays {key}: {type(e).__name__}: {str(e)}")
            raise
