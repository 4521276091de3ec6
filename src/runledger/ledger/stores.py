"""Store protocols for runs and steps.

The run store owns the one-run-per-event_id invariant. Its conditional insert
returns a value instead of signalling a conflict through an exception, so a
duplicate event can never be confused with an unrelated store failure.
"""

from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from runledger.contracts.enums import RunStatus, StepStatus
from runledger.contracts.models import RunRecord, StepRecord
from runledger.contracts.payloads import AbsentPayload, RawTextPayload, StructuredPayload

Payload = AbsentPayload | StructuredPayload | RawTextPayload


@dataclass(frozen=True)
class Created:
    """The run was inserted."""

    run: RunRecord


@dataclass(frozen=True)
class AlreadyExists:
    """A run for the same event_id was already stored."""

    run: RunRecord


InsertOutcome = Created | AlreadyExists


@dataclass(frozen=True)
class Finished:
    """The run moved from RUNNING to a terminal status."""

    run: RunRecord


@dataclass(frozen=True)
class AlreadyFinished:
    """The run was already terminal; nothing was written."""

    run: RunRecord


FinishOutcome = Finished | AlreadyFinished


class RunStore(Protocol):
    """Protocol for the run record store."""

    async def get_by_event_id(self, event_id: str) -> RunRecord | None:
        """Return the run created for event_id, if any."""
        ...

    async def get(self, run_id: UUID) -> RunRecord | None:
        """Return the run with run_id, if any."""
        ...

    async def insert_if_absent(self, run: RunRecord) -> InsertOutcome:
        """Insert run unless one already exists for its event_id.

        Raises:
            StoreUnavailable: on any failure other than the event_id conflict
        """
        ...

    async def finish(
        self,
        run_id: UUID,
        status: RunStatus,
        summary: str | None,
        anomalies: Any,
    ) -> FinishOutcome | None:
        """Apply a terminal status if the run is still RUNNING.

        Returns None when no run has run_id.
        """
        ...


class StepStore(Protocol):
    """Protocol for the append-only step record store."""

    async def append(
        self,
        run_id: UUID,
        step: str,
        status: StepStatus,
        reason: str | None,
        input: Payload,
        output: Payload,
    ) -> StepRecord:
        """Append a step; the store assigns id and created_at."""
        ...

    async def list_for_run(self, run_id: UUID) -> list[StepRecord]:
        """Return steps for run_id ordered by (created_at, id)."""
        ...
