"""Correction workflow for ponto.

A correction proposes a new timestamp for an existing event. Proposals pass a
validation gate that collects every unmet precondition. Accepted proposals
start Pending and move once to Approved, Rejected or Cancelled. Applying an
Approved correction yields a new state of the event (next version, new tag);
the original event is kept for audit.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ponto.engine.errors import CorrectionTransitionError, IntegrityFailure
from ponto.engine.integrity import tag_event, tag_fields, verify_correction, verify_event
from ponto.models.constants import MIN_JUSTIFICATION_LENGTH
from ponto.models.correction import Correction, CorrectionDraft, CorrectionStatus
from ponto.models.daily_record import DailyRecord
from ponto.models.punch_event import PunchEvent
from ponto.timeutils import as_utc, utcnow

logger = logging.getLogger(__name__)

ERROR_JUSTIFICATION_TOO_SHORT = (
    f"justification too short (at least {MIN_JUSTIFICATION_LENGTH} characters)"
)
ERROR_REQUESTER_NOT_IDENTIFIED = "requester not identified"
ERROR_SELF_CORRECTION_REQUIRES_APPROVER = "self-correction requires approver"
ERROR_APPROVER_IS_REQUESTER = "approver must differ from requester"
ERROR_WRONG_EVENT = "correction does not target this event"
ERROR_PENDING_EXISTS = "a pending correction already exists for this event"
ERROR_UNTRUSTED_EVENT = "original event failed integrity verification"


class CorrectionResult:
    """Result of a correction proposal."""

    def __init__(self, correction: Optional[Correction] = None, errors: Optional[List[str]] = None):
        self.correction = correction
        self.errors: List[str] = errors or []

    @property
    def ok(self) -> bool:
        return self.correction is not None and not self.errors


def validate_draft(
    draft: CorrectionDraft,
    original_event: PunchEvent,
    existing_corrections: Iterable[Correction] = (),
) -> List[str]:
    """Collect every unmet precondition of a proposal (never short-circuits)."""
    errors: List[str] = []

    if len((draft.justification or "").strip()) < MIN_JUSTIFICATION_LENGTH:
        errors.append(ERROR_JUSTIFICATION_TOO_SHORT)

    if not draft.requested_by_id or not draft.requested_by_name:
        errors.append(ERROR_REQUESTER_NOT_IDENTIFIED)

    if draft.requested_by_id and draft.requested_by_id == original_event.employee_id and not draft.approver_id:
        errors.append(ERROR_SELF_CORRECTION_REQUIRES_APPROVER)

    if draft.approver_id and draft.approver_id == draft.requested_by_id:
        errors.append(ERROR_APPROVER_IS_REQUESTER)

    if draft.original_event_id != original_event.id:
        errors.append(ERROR_WRONG_EVENT)

    if any(c.original_event_id == original_event.id and c.is_pending for c in existing_corrections):
        errors.append(ERROR_PENDING_EXISTS)

    if not verify_event(original_event):
        errors.append(ERROR_UNTRUSTED_EVENT)

    return errors


def propose_correction(
    draft: CorrectionDraft,
    original_event: PunchEvent,
    existing_corrections: Iterable[Correction] = (),
    now: Optional[datetime] = None,
) -> CorrectionResult:
    """Run the validation gate and build a Pending correction.

    Args:
        draft: Caller-supplied correction fields
        original_event: Event the correction targets (not modified)
        existing_corrections: Corrections already stored for the day
        now: Proposal timestamp (defaults to now, UTC)

    Returns:
        CorrectionResult with either the new correction or all validation errors
    """
    errors = validate_draft(draft, original_event, list(existing_corrections))
    if errors:
        logger.debug(f"Correction for event {original_event.id} rejected: {errors}")
        return CorrectionResult(errors=errors)

    correction_id = str(uuid.uuid4())
    requested_at = now or utcnow()
    justification = draft.justification.strip()

    integrity_tag = tag_fields({
        "id": correction_id,
        "original_event_id": original_event.id,
        "proposed_timestamp": draft.proposed_timestamp,
        "justification": justification,
        "requested_by_id": draft.requested_by_id,
        "requested_by_name": draft.requested_by_name,
        "requested_at": requested_at,
    })

    correction = Correction(
        id=correction_id,
        original_event_id=original_event.id,
        proposed_timestamp=draft.proposed_timestamp,
        justification=justification,
        requested_by_id=draft.requested_by_id,
        requested_by_name=draft.requested_by_name,
        requested_at=requested_at,
        approver_id=draft.approver_id,
        approver_name=draft.approver_name,
        status=CorrectionStatus.PENDING,
        integrity_tag=integrity_tag,
        evidence=list(draft.evidence),
    )
    logger.debug(f"Proposed correction {correction.id} for event {original_event.id}")
    return CorrectionResult(correction=correction)


def _require_pending(correction: Correction) -> None:
    if not correction.is_pending:
        raise CorrectionTransitionError(
            f"Correction {correction.id} is {correction.status}; only pending corrections can change"
        )


def _check_decider(correction: Correction, actor_id: str) -> None:
    if not actor_id:
        raise CorrectionTransitionError("Approver must be identified")
    if actor_id == correction.requested_by_id:
        raise CorrectionTransitionError("The requester cannot decide on their own correction")
    if correction.approver_id and actor_id != correction.approver_id:
        raise CorrectionTransitionError(
            f"Only the designated approver {correction.approver_id} can decide on correction {correction.id}"
        )


def _decide(
    correction: Correction,
    status: CorrectionStatus,
    actor_id: str,
    actor_name: Optional[str],
    note: Optional[str],
    now: Optional[datetime],
) -> Correction:
    _require_pending(correction)
    _check_decider(correction, actor_id)
    return correction.model_copy(update={
        "status": status.value,
        "approver_id": actor_id,
        "approver_name": actor_name or correction.approver_name,
        "resolved_at": now or utcnow(),
        "resolved_by_id": actor_id,
        "resolution_note": note,
    })


def approve_correction(
    correction: Correction,
    approver_id: str,
    approver_name: Optional[str] = None,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Correction:
    """Pending -> Approved.

    Raises:
        CorrectionTransitionError: If the correction is not pending or the actor may not approve it
    """
    return _decide(correction, CorrectionStatus.APPROVED, approver_id, approver_name, note, now)


def reject_correction(
    correction: Correction,
    approver_id: str,
    approver_name: Optional[str] = None,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Correction:
    """Pending -> Rejected (same actor rules as approval)."""
    return _decide(correction, CorrectionStatus.REJECTED, approver_id, approver_name, note, now)


def cancel_correction(
    correction: Correction,
    actor_id: str,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Correction:
    """Pending -> Cancelled, by the requester only."""
    _require_pending(correction)
    if actor_id != correction.requested_by_id:
        raise CorrectionTransitionError("Only the requester can cancel a correction")
    return correction.model_copy(update={
        "status": CorrectionStatus.CANCELLED.value,
        "resolved_at": now or utcnow(),
        "resolved_by_id": actor_id,
        "resolution_note": note,
    })


def apply_correction(correction: Correction, event: PunchEvent) -> PunchEvent:
    """Build the corrected state of an event.

    Raises:
        CorrectionTransitionError: If the correction is not approved or targets another event
        IntegrityFailure: If the correction or the event fails verification
    """
    if correction.status != CorrectionStatus.APPROVED:
        raise CorrectionTransitionError(f"Correction {correction.id} is {correction.status}, not approved")
    if correction.original_event_id != event.id:
        raise CorrectionTransitionError(f"Correction {correction.id} does not target event {event.id}")
    if not verify_correction(correction):
        raise IntegrityFailure([correction.id], f"Correction {correction.id} failed integrity verification")
    if not verify_event(event):
        raise IntegrityFailure([event.id])

    corrected = event.model_copy(update={
        "timestamp": correction.proposed_timestamp,
        "version": event.version + 1,
        "metadata": {
            **event.metadata,
            "correction_id": correction.id,
            "previous_timestamp": event.timestamp.isoformat(),
        },
    })
    return corrected.model_copy(update={"integrity_tag": tag_event(corrected)})


def approved_in_order(corrections: Iterable[Correction]) -> List[Correction]:
    """Approved corrections in the order they were decided."""
    approved = [c for c in corrections if c.status == CorrectionStatus.APPROVED]
    return sorted(approved, key=lambda c: (as_utc(c.resolved_at or c.requested_at), c.id))


def _apply_approved(record: DailyRecord) -> Tuple[List[PunchEvent], List[str]]:
    current = {event.id: event for event in record.events}
    applied: List[str] = []
    for correction in approved_in_order(record.corrections):
        event = current.get(correction.original_event_id)
        if event is None:
            logger.warning(f"Correction {correction.id} targets unknown event {correction.original_event_id}")
            continue
        try:
            current[event.id] = apply_correction(correction, event)
        except IntegrityFailure as e:
            logger.warning(f"Skipping correction {correction.id}: {str(e)}")
            continue
        applied.append(correction.id)
    return [current[event.id] for event in record.events], applied


def effective_events(record: DailyRecord) -> List[PunchEvent]:
    """Logical view of a day with every approved correction applied.

    Corrections or events that fail verification are skipped, so an untrusted
    event keeps its original (unverifiable) state.
    """
    events, _ = _apply_approved(record)
    return events


def applied_correction_ids(record: DailyRecord) -> List[str]:
    """IDs of approved corrections reflected in effective_events(), in application order."""
    _, applied = _apply_approved(record)
    return applied
