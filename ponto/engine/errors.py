"""Exception types raised by the ponto engine and service layer.

Data-quality problems are never raised: they come back as Inconsistency values
or as the error list of a CorrectionResult. The exceptions below are for
integrity failures and contract violations the caller has to handle.
"""

from typing import List, Optional


class PontoError(Exception):
    """Base class for ponto errors."""


class IntegrityFailure(PontoError):
    """One or more events failed integrity verification."""

    def __init__(self, event_ids: List[str], message: Optional[str] = None):
        self.event_ids = list(event_ids)
        super().__init__(message or f"Untrusted events: {', '.join(self.event_ids)}")


class CorrectionTransitionError(PontoError):
    """Illegal correction state transition or actor."""


class RecordLockedError(PontoError):
    """A locked day does not accept direct event changes."""


class RecordNotFoundError(PontoError, LookupError):
    """No daily record exists for the requested employee/day."""


class InconsistencyNotFound(PontoError, LookupError):
    """The referenced inconsistency is unknown or already resolved."""


class InconsistencyAlreadyResolved(PontoError):
    """Resolution is a one-time action."""


class CaptureRejected(PontoError):
    """A punch failed the capture checks (clock skew, perimeter, inactive employee)."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
