"""Audit trail for ledger transitions."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Protocol
from uuid import UUID

from pydantic import BaseModel, Field

AUDIT_LOGGER_NAME = "runledger.audit"

RUN_CREATED = "run_created"
RUN_DEDUPED = "run_deduped"
RUN_FINISHED = "run_finished"
RUN_FINISH_IGNORED = "run_finish_ignored"
STEP_RECORDED = "step_recorded"


class AuditEntry(BaseModel):
    """Single audit entry."""

    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: str
    run_id: UUID
    event_id: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


class AuditSink(Protocol):
    """Protocol for recording audit entries."""

    def record(self, entry: AuditEntry) -> None:
        """Record an audit entry."""
        ...


class InMemoryAuditSink:
    """Sink that keeps entries in a list."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def record(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    def actions(self, run_id: UUID | None = None) -> list[str]:
        """Return recorded actions in order, optionally for one run."""
        return [e.action for e in self.entries if run_id is None or e.run_id == run_id]


class JsonLogAuditSink:
    """Sink that writes one JSON line per entry to logger runledger.audit."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record(self, entry: AuditEntry) -> None:
        payload = {
            "occurred_at": entry.occurred_at.isoformat(),
            "action": entry.action,
            "run_id": str(entry.run_id),
            "event_id": entry.event_id,
            "detail": entry.detail,
        }
        self._logger.info(json.dumps(payload, default=str))
