"""Run ledger core: lifecycle controller, step recorder and run views."""

from runledger.ledger.audit import AuditEntry, AuditSink, InMemoryAuditSink, JsonLogAuditSink
from runledger.ledger.controller import RunLifecycleController
from runledger.ledger.memory import InMemoryRunStore, InMemoryStepStore
from runledger.ledger.recorder import StepRecorder
from runledger.ledger.service import Ledger, build_ledger
from runledger.ledger.stores import RunStore, StepStore
from runledger.ledger.views import RunViewAssembler, derive_evidence

__all__ = [
    "AuditEntry",
    "AuditSink",
    "build_ledger",
    "derive_evidence",
    "InMemoryAuditSink",
    "InMemoryRunStore",
    "InMemoryStepStore",
    "JsonLogAuditSink",
    "Ledger",
    "RunLifecycleController",
    "RunStore",
    "RunViewAssembler",
    "StepRecorder",
    "StepStore",
]
