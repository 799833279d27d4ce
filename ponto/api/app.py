"""FastAPI web application for ponto."""

from datetime import date
from typing import List

from fastapi import Depends, FastAPI, HTTPException, status
from sqlalchemy.orm import Session

from ponto.api.request_models import (
    ActorRequest,
    CorrectionResponse,
    DayStatusRequest,
    DecisionRequest,
    PunchRequest,
    ResolveRequest,
)
from ponto.database.database import get_db
from ponto.database.document_store import SqlDocumentStore
from ponto.engine.errors import (
    CaptureRejected,
    CorrectionTransitionError,
    InconsistencyAlreadyResolved,
    IntegrityFailure,
    PontoError,
    RecordLockedError,
    RecordNotFoundError,
)
from ponto.models.correction import CorrectionDraft
from ponto.models.daily_record import DailyRecord
from ponto.models.employer import Employee, Employer, Roster
from ponto.models.summary import DailySummary, Holiday, MonthlySummary
from ponto.services.timeclock import TimeClockService
from ponto.storage.base import StoreUnavailable
from ponto.storage.employer_repository import EmployerRepository
from ponto.storage.local import FileKeyValueStore
from ponto.storage.mirror import MirroredStore
from ponto.storage.record_repository import DailyRecordRepository

# Initialize FastAPI app
app = FastAPI(
    title="ponto API",
    description="Punch validation, correction audit and hour summaries for a time clock",
    version="0.1.0"
)


def get_service(db: Session = Depends(get_db)) -> TimeClockService:
    """Build the service over the database-backed store mirrored to the local cache."""
    store = MirroredStore(SqlDocumentStore(db), FileKeyValueStore())
    return TimeClockService(DailyRecordRepository(store), EmployerRepository(store))


def _http_error(e: Exception) -> HTTPException:
    """Map service errors to HTTP errors."""
    if isinstance(e, (RecordNotFoundError, LookupError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, IntegrityFailure):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "event_ids": e.event_ids},
        )
    if isinstance(e, (RecordLockedError, CorrectionTransitionError, InconsistencyAlreadyResolved)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, CaptureRejected):
        return HTTPException(status_code=422, detail={"errors": e.messages})
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Storage unavailable: {str(e)}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Employer configuration

@app.put("/employers/{employer_id}", response_model=Employer)
def save_employer(employer_id: str, employer: Employer, service: TimeClockService = Depends(get_service)):
    """Create or replace the employer parameters."""
    try:
        return service.save_employer(employer.model_copy(update={"id": employer_id}))
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.get("/employers/{employer_id}", response_model=Employer)
def get_employer(employer_id: str, service: TimeClockService = Depends(get_service)):
    try:
        employer = service.employers.get_employer(employer_id)
    except StoreUnavailable as e:
        raise _http_error(e) from e
    if employer is None:
        raise HTTPException(status_code=404, detail=f"Employer {employer_id} not found")
    return employer


@app.put("/employers/{employer_id}/employees", response_model=Roster)
def save_employees(employer_id: str, employees: List[Employee], service: TimeClockService = Depends(get_service)):
    """Replace the roster."""
    try:
        return service.save_employees(employer_id, employees)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.get("/employers/{employer_id}/employees", response_model=Roster)
def get_employees(employer_id: str, service: TimeClockService = Depends(get_service)):
    try:
        return service.employers.get_roster(employer_id)
    except StoreUnavailable as e:
        raise _http_error(e) from e


@app.put("/employers/{employer_id}/holidays/{year}", response_model=List[Holiday])
def save_custom_holidays(
    employer_id: str,
    year: int,
    holidays: List[Holiday],
    service: TimeClockService = Depends(get_service),
):
    """Replace the employer's custom holidays for a year."""
    try:
        return service.save_custom_holidays(employer_id, year, holidays)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.get("/employers/{employer_id}/holidays/{year}", response_model=List[Holiday])
def get_holidays(employer_id: str, year: int, service: TimeClockService = Depends(get_service)):
    """National plus custom holidays of a year."""
    try:
        return service.holidays_for(employer_id, year)
    except StoreUnavailable as e:
        raise _http_error(e) from e


# Punches and days

@app.post(
    "/employers/{employer_id}/employees/{employee_id}/punches",
    response_model=DailyRecord,
    status_code=status.HTTP_201_CREATED,
)
def record_punch(
    employer_id: str,
    employee_id: str,
    request: PunchRequest,
    service: TimeClockService = Depends(get_service),
):
    """Record a punch and return the reconciled day."""
    try:
        return service.record_punch(
            employer_id,
            employee_id,
            request.kind,
            timestamp=request.timestamp,
            device_id=request.device_id,
            location=request.location,
            photo_ref=request.photo_ref,
            metadata=request.metadata,
            reference_time=request.reference_time,
        )
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.get("/employers/{employer_id}/employees/{employee_id}/days/{day}", response_model=DailyRecord)
def get_day(employer_id: str, employee_id: str, day: date, service: TimeClockService = Depends(get_service)):
    try:
        return service.get_day(employer_id, employee_id, day)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.post("/employers/{employer_id}/employees/{employee_id}/days/{day}/validate", response_model=DailyRecord)
def validate_day(
    employer_id: str,
    employee_id: str,
    day: date,
    request: ActorRequest,
    service: TimeClockService = Depends(get_service),
):
    """Re-run detection over a day."""
    try:
        return service.validate_day(employer_id, employee_id, day, actor_id=request.actor_id)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.post("/employers/{employer_id}/employees/{employee_id}/days/{day}/lock", response_model=DailyRecord)
def lock_day(
    employer_id: str,
    employee_id: str,
    day: date,
    request: ActorRequest,
    service: TimeClockService = Depends(get_service),
):
    try:
        return service.lock_day(employer_id, employee_id, day, actor_id=request.actor_id)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.put("/employers/{employer_id}/employees/{employee_id}/days/{day}/status", response_model=DailyRecord)
def set_day_status(
    employer_id: str,
    employee_id: str,
    day: date,
    request: DayStatusRequest,
    service: TimeClockService = Depends(get_service),
):
    """Mark a day off or a closed establishment."""
    try:
        return service.set_day_status(
            employer_id, employee_id, day, day_off=request.day_off, closed=request.closed, actor_id=request.actor_id
        )
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


# Corrections

@app.post(
    "/employers/{employer_id}/employees/{employee_id}/days/{day}/corrections",
    response_model=CorrectionResponse,
    status_code=status.HTTP_201_CREATED,
)
def propose_correction(
    employer_id: str,
    employee_id: str,
    day: date,
    draft: CorrectionDraft,
    service: TimeClockService = Depends(get_service),
):
    """Propose a correction; a failed validation gate returns every error at once."""
    try:
        result = service.propose_correction(employer_id, employee_id, day, draft)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e
    if not result.ok:
        raise HTTPException(status_code=422, detail={"errors": result.errors})
    return CorrectionResponse(correction=result.correction)


@app.post(
    "/employers/{employer_id}/employees/{employee_id}/days/{day}/corrections/{correction_id}/approve",
    response_model=DailyRecord,
)
def approve_correction(
    employer_id: str,
    employee_id: str,
    day: date,
    correction_id: str,
    request: DecisionRequest,
    service: TimeClockService = Depends(get_service),
):
    try:
        return service.approve_correction(
            employer_id, employee_id, day, correction_id, request.actor_id, request.actor_name, request.note
        )
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.post(
    "/employers/{employer_id}/employees/{employee_id}/days/{day}/corrections/{correction_id}/reject",
    response_model=DailyRecord,
)
def reject_correction(
    employer_id: str,
    employee_id: str,
    day: date,
    correction_id: str,
    request: DecisionRequest,
    service: TimeClockService = Depends(get_service),
):
    try:
        return service.reject_correction(
            employer_id, employee_id, day, correction_id, request.actor_id, request.actor_name, request.note
        )
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.post(
    "/employers/{employer_id}/employees/{employee_id}/days/{day}/corrections/{correction_id}/cancel",
    response_model=DailyRecord,
)
def cancel_correction(
    employer_id: str,
    employee_id: str,
    day: date,
    correction_id: str,
    request: DecisionRequest,
    service: TimeClockService = Depends(get_service),
):
    try:
        return service.cancel_correction(employer_id, employee_id, day, correction_id, request.actor_id, request.note)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.post(
    "/employers/{employer_id}/employees/{employee_id}/days/{day}/inconsistencies/{inconsistency_id}/resolve",
    response_model=DailyRecord,
)
def resolve_inconsistency(
    employer_id: str,
    employee_id: str,
    day: date,
    inconsistency_id: str,
    request: ResolveRequest,
    service: TimeClockService = Depends(get_service),
):
    try:
        return service.resolve_inconsistency(
            employer_id, employee_id, day, inconsistency_id, request.kind, request.resolved_by_id, request.details
        )
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


# Summaries

@app.get("/employers/{employer_id}/employees/{employee_id}/days/{day}/summary", response_model=DailySummary)
def summarize_day(employer_id: str, employee_id: str, day: date, service: TimeClockService = Depends(get_service)):
    try:
        return service.summarize_day(employer_id, employee_id, day)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e


@app.get(
    "/employers/{employer_id}/employees/{employee_id}/months/{year}/{month}/summary",
    response_model=MonthlySummary,
)
def summarize_month(
    employer_id: str,
    employee_id: str,
    year: int,
    month: int,
    service: TimeClockService = Depends(get_service),
):
    if month < 1 or month > 12:
        raise HTTPException(status_code=422, detail="month must be between 1 and 12")
    try:
        return service.summarize_month(employer_id, employee_id, year, month)
    except (PontoError, StoreUnavailable) as e:
        raise _http_error(e) from e
