"""Integrity tags for punch events and corrections.

A tag is an HMAC-SHA256 over a canonical JSON encoding of the immutable
identity fields. It is deterministic and changes whenever any covered field
changes. Verification fails closed: anything that prevents recomputing the tag
counts as a mismatch.
"""

import hashlib
import hmac
import json
import logging
import os
from datetime import datetime
from typing import Any, Iterable, List, Mapping

from dotenv import load_dotenv

from ponto.engine.errors import IntegrityFailure
from ponto.models.correction import Correction
from ponto.models.punch_event import PunchEvent
from ponto.timeutils import as_utc

load_dotenv()

logger = logging.getLogger(__name__)

EVENT_TAG_FIELDS = ("id", "kind", "timestamp", "employee_id", "version")
CORRECTION_TAG_FIELDS = (
    "id",
    "original_event_id",
    "proposed_timestamp",
    "justification",
    "requested_by_id",
    "requested_by_name",
    "requested_at",
)


def _key_bytes() -> bytes:
    # Prefer a dedicated secret, then a dev-only constant.
    key = os.getenv("PONTO_INTEGRITY_KEY") or "dev-integrity-key-change-me"
    return key.encode("utf-8")


def _canonical_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if hasattr(value, "value"):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise TypeError(f"Unsupported tag field type: {type(value).__name__}")


def tag_fields(fields: Mapping[str, Any]) -> str:
    """Compute the tag of a mapping of identity fields.

    Raises:
        TypeError: If a field value cannot be encoded canonically
    """
    canonical = {name: _canonical_value(value) for name, value in fields.items()}
    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hmac.new(_key_bytes(), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def event_tag_fields(event: PunchEvent) -> dict:
    return {name: getattr(event, name) for name in EVENT_TAG_FIELDS}


def correction_tag_fields(correction: Correction) -> dict:
    return {name: getattr(correction, name) for name in CORRECTION_TAG_FIELDS}


def tag_event(event: PunchEvent) -> str:
    return tag_fields(event_tag_fields(event))


def tag_correction(correction: Correction) -> str:
    return tag_fields(correction_tag_fields(correction))


def _verify(compute, obj) -> bool:
    try:
        expected = compute(obj)
        actual = obj.integrity_tag
        if not isinstance(actual, str):
            return False
        return hmac.compare_digest(expected, actual)
    except Exception as e:
        # Fail closed
        logger.debug(f"Integrity verification failed for {getattr(obj, 'id', '?')}: {type(e).__name__}: {str(e)}")
        return False


def verify_event(event: PunchEvent) -> bool:
    """Return True only if the event's tag matches its identity fields."""
    return _verify(tag_event, event)


def verify_correction(correction: Correction) -> bool:
    """Return True only if the correction's tag matches its immutable fields."""
    return _verify(tag_correction, correction)


def find_untrusted(events: Iterable[PunchEvent]) -> List[str]:
    """IDs of events whose tag does not verify, in input order."""
    return [getattr(event, "id", "?") for event in events if not verify_event(event)]


def ensure_trusted(events: Iterable[PunchEvent]) -> None:
    """Raise IntegrityFailure if any event fails verification."""
    untrusted = find_untrusted(events)
    if untrusted:
        logger.warning(f"Integrity verification failed for events: {untrusted}")
        raise IntegrityFailure(untrusted)
