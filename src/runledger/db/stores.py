"""Postgres-backed stores: one session and one statement per operation."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from runledger.contracts.enums import RunStatus, StepStatus
from runledger.contracts.errors import StoreUnavailable, ValidationFailed
from runledger.contracts.models import RunRecord, StepRecord
from runledger.db.repos import RunRepo, StepRepo
from runledger.db.session import db_session
from runledger.ledger.stores import (
    AlreadyExists,
    AlreadyFinished,
    Created,
    Finished,
    FinishOutcome,
    InsertOutcome,
    Payload,
)

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(error: IntegrityError) -> str | None:
    """SQLSTATE of the driver error (asyncpg exposes sqlstate, psycopg2 pgcode)."""
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


class _SqlStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession] | None:
        return self._session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with db_session(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store failure during {operation}: {e}")
            raise StoreUnavailable(f"Store failure during {operation}") from e


class SqlRunStore(_SqlStore):
    """Run store over the runs table."""

    async def get_by_event_id(self, event_id: str) -> RunRecord | None:
        async with self._session("get_by_event_id") as session:
            return await RunRepo(session).get_by_event_id(event_id)

    async def get(self, run_id: UUID) -> RunRecord | None:
        async with self._session("get") as session:
            return await RunRepo(session).get_by_id(run_id)

    async def insert_if_absent(self, run: RunRecord) -> InsertOutcome:
        async with self._session("insert_if_absent") as session:
            repo = RunRepo(session)
            inserted = await repo.insert_if_absent(run)
            await session.commit()
            if inserted is not None:
                return Created(inserted)
            existing = await repo.get_by_event_id(run.event_id)
        if existing is None:
            raise StoreUnavailable(f"event_id {run.event_id} conflicted but no run was found")
        return AlreadyExists(existing)

    async def finish(
        self,
        run_id: UUID,
        status: RunStatus,
        summary: str | None,
        anomalies: Any,
    ) -> FinishOutcome | None:
        async with self._session("finish") as session:
            repo = RunRepo(session)
            updated = await repo.finish_if_running(run_id, status, summary, anomalies)
            await session.commit()
            if updated is not None:
                return Finished(updated)
            current = await repo.get_by_id(run_id)
        if current is None:
            return None
        return AlreadyFinished(current)


class SqlStepStore(_SqlStore):
    """Step store over the run_steps table."""

    async def append(
        self,
        run_id: UUID,
        step: str,
        status: StepStatus,
        reason: str | None,
        input: Payload,
        output: Payload,
    ) -> StepRecord:
        async with self._session("append") as session:
            try:
                record = await StepRepo(session).insert_step(
                    run_id, step, status, reason, input, output
                )
            except IntegrityError as e:
                if _sqlstate(e) != FOREIGN_KEY_VIOLATION:
                    raise
                # run_steps.run_id references runs; an orphan step is the caller's error
                raise ValidationFailed("run_id", f"no run {run_id}") from e
            await session.commit()
            return record

    async def list_for_run(self, run_id: UUID) -> list[StepRecord]:
        async with self._session("list_for_run") as session:
            return await StepRepo(session).list_by_run(run_id)
