"""Punch validation and correction engine for ponto."""

from ponto.engine.integrity import tag_fields, tag_event, tag_correction, verify_event, verify_correction, find_untrusted, ensure_trusted
from ponto.engine.sequence import validate
from ponto.engine.missing import detect_missing
from ponto.engine.shift import detect_out_of_shift
from ponto.engine.corrections import (
    CorrectionResult,
    propose_correction,
    approve_correction,
    reject_correction,
    cancel_correction,
    apply_correction,
    effective_events,
)
from ponto.engine.reconcile import detect_all, reconcile, resolve_inconsistency
from ponto.engine.summary import summarize
from ponto.engine.monthly import summarize_month
from ponto.engine.holidays import national_holidays, easter_sunday

__all__ = [
    "tag_fields",
    "tag_event",
    "tag_correction",
    "verify_event",
    "verify_correction",
    "find_untrusted",
    "ensure_trusted",
    "validate",
    "detect_missing",
    "detect_out_of_shift",
    "CorrectionResult",
    "propose_correction",
    "approve_correction",
    "reject_correction",
    "cancel_correction",
    "apply_correction",
    "effective_events",
    "detect_all",
    "reconcile",
    "resolve_inconsistency",
    "summarize",
    "summarize_month",
    "national_holidays",
    "easter_sunday",
]
