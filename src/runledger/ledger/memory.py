"""In-memory stores.

Useful for tests or when no database is configured. Data is not persisted
across process restarts.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from runledger.contracts.enums import RunStatus, StepStatus
from runledger.contracts.models import RunRecord, StepRecord
from runledger.ledger.stores import (
    AlreadyExists,
    AlreadyFinished,
    Created,
    Finished,
    FinishOutcome,
    InsertOutcome,
    Payload,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRunStore:
    """Run store keyed by run_id with a unique index on event_id."""

    def __init__(self) -> None:
        self._runs: dict[UUID, RunRecord] = {}
        self._by_event: dict[str, UUID] = {}
        self._lock = asyncio.Lock()

    @property
    def runs(self) -> list[RunRecord]:
        return [run.model_copy(deep=True) for run in self._runs.values()]

    @staticmethod
    def _copy(run: RunRecord | None) -> RunRecord | None:
        return run.model_copy(deep=True) if run is not None else None

    def count_for_event(self, event_id: str) -> int:
        return sum(1 for run in self._runs.values() if run.event_id == event_id)

    async def get_by_event_id(self, event_id: str) -> RunRecord | None:
        run_id = self._by_event.get(event_id)
        return self._copy(self._runs.get(run_id)) if run_id is not None else None

    async def get(self, run_id: UUID) -> RunRecord | None:
        return self._copy(self._runs.get(run_id))

    async def insert_if_absent(self, run: RunRecord) -> InsertOutcome:
        async with self._lock:
            existing_id = self._by_event.get(run.event_id)
            if existing_id is not None:
                return AlreadyExists(self._copy(self._runs[existing_id]))
            stored = run.model_copy(deep=True)
            self._runs[stored.run_id] = stored
            self._by_event[stored.event_id] = stored.run_id
            return Created(self._copy(stored))

    async def finish(
        self,
        run_id: UUID,
        status: RunStatus,
        summary: str | None,
        anomalies: Any,
    ) -> FinishOutcome | None:
        async with self._lock:
            current = self._runs.get(run_id)
            if current is None:
                return None
            if current.status.is_terminal:
                return AlreadyFinished(self._copy(current))
            updated = current.model_copy(
                update={
                    "status": status,
                    "summary": summary,
                    "anomalies": anomalies,
                    "finished_at": _now(),
                }
            )
            self._runs[run_id] = self._copy(updated)
            return Finished(updated)


class InMemoryStepStore:
    """Append-only step store with a monotonic id."""

    def __init__(self, clock: Any = None) -> None:
        self._steps: list[StepRecord] = []
        self._next_id = 0
        self._clock = clock or _now
        self._lock = asyncio.Lock()

    async def append(
        self,
        run_id: UUID,
        step: str,
        status: StepStatus,
        reason: str | None,
        input: Payload,
        output: Payload,
    ) -> StepRecord:
        async with self._lock:
            self._next_id += 1
            record = StepRecord(
                id=self._next_id,
                run_id=run_id,
                step=step,
                status=status,
                reason=reason,
                input=input,
                output=output,
                created_at=self._clock(),
            )
            self._steps.append(record.model_copy(deep=True))
            return record

    async def list_for_run(self, run_id: UUID) -> list[StepRecord]:
        steps = [s for s in self._steps if s.run_id == run_id]
        return [s.model_copy(deep=True) for s in sorted(steps, key=lambda s: (s.created_at, s.id))]
