"""Canonical contracts for the run ledger."""

from runledger.contracts.enums import TERMINAL_STATUSES, RunStatus, StepName, StepStatus
from runledger.contracts.errors import (
    LedgerError,
    RunNotFound,
    StoreUnavailable,
    TerminalTransitionConflict,
    ValidationFailed,
)
from runledger.contracts.models import (
    Evidence,
    OfferSignedEvent,
    RunRecord,
    RunView,
    StepRecord,
    SubmitResult,
    parse_event,
)
from runledger.contracts.payloads import (
    AbsentPayload,
    RawTextPayload,
    StepPayload,
    StructuredPayload,
    decode_payload,
)

__all__ = [
    "AbsentPayload",
    "decode_payload",
    "Evidence",
    "LedgerError",
    "OfferSignedEvent",
    "parse_event",
    "RawTextPayload",
    "RunNotFound",
    "RunRecord",
    "RunStatus",
    "RunView",
    "StepName",
    "StepPayload",
    "StepRecord",
    "StepStatus",
    "StoreUnavailable",
    "StructuredPayload",
    "SubmitResult",
    "TERMINAL_STATUSES",
    "TerminalTransitionConflict",
    "ValidationFailed",
]
