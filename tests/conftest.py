"""Pytest fixtures and configuration for ponto tests."""

import pytest
from datetime import date, datetime, time, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from ponto.database.database import Base
from ponto.database.document_store import SqlDocumentStore
from ponto.models.correction import CorrectionDraft
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import Employee, Employer
from ponto.models.event_factory import create_punch_event
from ponto.models.punch_event import PunchKind
from ponto.engine.holidays import national_holidays
from ponto.services.timeclock import TimeClockService
from ponto.storage.employer_repository import EmployerRepository
from ponto.storage.local import FileKeyValueStore
from ponto.storage.mirror import MirroredStore
from ponto.storage.record_repository import DailyRecordRepository


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed "now" so detection timestamps are reproducible
FIXED_NOW = datetime(2024, 3, 20, 21, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, second: int = 0, day: date = date(2024, 3, 18)) -> datetime:
    """UTC instant on the test day."""
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from ponto.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache_store(tmp_path):
    """Local key-value cache in a temporary directory."""
    return FileKeyValueStore(str(tmp_path / "cache"))


@pytest.fixture
def mirrored_store(db_session: Session, cache_store):
    return MirroredStore(SqlDocumentStore(db_session), cache_store)


@pytest.fixture
def record_repository(mirrored_store):
    return DailyRecordRepository(mirrored_store)


@pytest.fixture
def employer_repository(mirrored_store):
    return EmployerRepository(mirrored_store)


@pytest.fixture
def service(record_repository, employer_repository):
    """TimeClockService with a fixed clock and the local holiday calendar."""
    return TimeClockService(
        record_repository,
        employer_repository,
        holiday_source=national_holidays,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def employer_id():
    return "admin-uid-1"


@pytest.fixture
def employee_id():
    return "emp-1"


@pytest.fixture
def manager_id():
    return "manager-1"


@pytest.fixture
def test_day():
    """A Monday."""
    return date(2024, 3, 18)


@pytest.fixture
def sample_employer_base(employer_id):
    """Base employer data that can be overridden with {**base, ...}."""
    return {
        "id": employer_id,
        "name": "Padaria Central",
        "cnpj": "12.345.678/0001-90",
        "lunch_control": False,
        "shift_start": time(8, 0),
        "shift_end": time(17, 0),
        "default_daily_hours": 8.0,
        "entry_tolerance_minutes": 10,
        "timezone": "UTC",
    }


@pytest.fixture
def sample_employer(sample_employer_base):
    return Employer(**sample_employer_base)


@pytest.fixture
def sample_employee(employee_id):
    return Employee(id=employee_id, name="Maria Souza", admission=date(2023, 1, 2))


@pytest.fixture
def punch(employee_id):
    """Factory for tagged punch events of the test employee."""
    def _punch(kind: PunchKind, timestamp: datetime, event_id=None):
        return create_punch_event(employee_id, kind, timestamp=timestamp, event_id=event_id)
    return _punch


@pytest.fixture
def full_day_events(punch):
    """Clock-in 08:00, break 12:00-13:00, clock-out 17:00."""
    return [
        punch(PunchKind.CLOCK_IN, at(8), "e-in"),
        punch(PunchKind.BREAK_START, at(12), "e-bs"),
        punch(PunchKind.BREAK_END, at(13), "e-be"),
        punch(PunchKind.CLOCK_OUT, at(17), "e-out"),
    ]


@pytest.fixture
def make_record(employee_id, test_day):
    def _make(events=None, **overrides):
        return DailyRecord(**{"date": test_day, "employee_id": employee_id, "events": events or [], **overrides})
    return _make


@pytest.fixture
def draft_base(manager_id):
    """Base correction draft data: a manager corrects an employee's clock-in."""
    return {
        "original_event_id": "e-in",
        "proposed_timestamp": at(7, 45),
        "justification": "Forgot to punch on arrival, confirmed by the supervisor",
        "requested_by_id": manager_id,
        "requested_by_name": "Carlos Lima",
    }


@pytest.fixture
def sample_draft(draft_base):
    return CorrectionDraft(**draft_base)


@pytest.fixture
def test_client(service):
    """Create a FastAPI test client with the service dependency overridden."""
    from ponto.api.app import app, get_service

    def override_get_service():
        return service

    app.dependency_overrides[get_service] = override_get_service

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
