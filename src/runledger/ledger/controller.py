"""Run lifecycle: idempotent creation, forwarding and terminal transitions."""

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from runledger.contracts.enums import RunStatus
from runledger.contracts.errors import (
    RunNotFound,
    StoreUnavailable,
    TerminalTransitionConflict,
    ValidationFailed,
)
from runledger.contracts.models import RunRecord, SubmitResult, parse_event
from runledger.ledger.audit import (
    RUN_CREATED,
    RUN_DEDUPED,
    RUN_FINISH_IGNORED,
    RUN_FINISHED,
    AuditEntry,
    AuditSink,
    JsonLogAuditSink,
)
from runledger.ledger.stores import AlreadyExists, AlreadyFinished, RunStore
from runledger.orchestration.client import EngineReply, OrchestrationClient

logger = logging.getLogger(__name__)

ENGINE_NOT_CONFIGURED_SUMMARY = "Run created. Orchestration engine not configured."


def coerce_summary(summary: Any) -> str | None:
    """Summaries are stored as text; structured ones are JSON-encoded."""
    if summary is None or isinstance(summary, str):
        return summary
    return json.dumps(summary, default=str)


def resolve_engine_outcome(reply: EngineReply) -> tuple[RunStatus, str | None, Any]:
    """Map an engine reply to (status, summary, anomalies).

    A missing status means SUCCESS when the engine answered at the transport
    level and FAILED otherwise. A status that is not terminal is a failure.
    """
    body = reply.body
    summary = coerce_summary(body.get("summary"))
    anomalies = body.get("anomalies")

    raw_status = body.get("status")
    if raw_status is None:
        status = RunStatus.SUCCESS if reply.transport_ok else RunStatus.FAILED
        return status, summary, anomalies

    try:
        status = RunStatus(str(raw_status).upper())
    except ValueError:
        status = None
    if status is None or not status.is_terminal:
        logger.warning(f"Orchestration engine reported unusable status {raw_status!r}")
        if summary is None:
            summary = f"Orchestration engine reported unusable status {raw_status!r}"
        return RunStatus.FAILED, summary, anomalies

    return status, summary, anomalies


def _parse_run_id(value: Any) -> UUID:
    if value is None or value == "":
        raise ValidationFailed("run_id")
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ValidationFailed("run_id", "not a UUID") from e


def _parse_terminal_status(value: Any) -> RunStatus:
    if value is None or value == "":
        raise ValidationFailed("status")
    try:
        status = RunStatus(str(value).upper())
    except ValueError as e:
        raise ValidationFailed("status", f"unknown run status {value!r}") from e
    if not status.is_terminal:
        raise ValidationFailed("status", f"{status.value} is not a terminal status")
    return status


class RunLifecycleController:
    """Creates runs at most once per event_id and drives them to a terminal status."""

    def __init__(
        self,
        runs: RunStore,
        engine: OrchestrationClient | None = None,
        internal_api_key: str | None = None,
        audit: AuditSink | None = None,
    ) -> None:
        self.runs = runs
        self.engine = engine
        self.internal_api_key = internal_api_key
        self.audit = audit or JsonLogAuditSink()

    async def submit(self, payload: Any) -> SubmitResult:
        """Create a run for the event, or return the existing one.

        Raises:
            ValidationFailed: naming the first missing field; nothing is stored
            StoreUnavailable: the store failed; retrying is safe
        """
        event = parse_event(payload)

        existing = await self.runs.get_by_event_id(event.event_id)
        if existing is not None:
            return self._deduped(existing)

        run_id = uuid4()
        run = RunRecord(
            run_id=run_id,
            event_id=event.event_id,
            status=RunStatus.RUNNING,
            input={**payload, "run_id": str(run_id)},
        )
        outcome = await self.runs.insert_if_absent(run)
        if isinstance(outcome, AlreadyExists):
            logger.info(f"Lost creation race for event {event.event_id}; using run {outcome.run.run_id}")
            return self._deduped(outcome.run)

        run = outcome.run
        self.audit.record(AuditEntry(action=RUN_CREATED, run_id=run.run_id, event_id=run.event_id))
        logger.info(f"Created run {run.run_id} for event {run.event_id}")

        if self.engine is None:
            logger.warning(f"No orchestration engine configured; run {run.run_id} stays RUNNING")
            return SubmitResult(
                run_id=run.run_id,
                status=RunStatus.RUNNING,
                summary=ENGINE_NOT_CONFIGURED_SUMMARY,
            )

        reply = await self._forward(self.engine, payload, run.run_id)
        status, summary, anomalies = resolve_engine_outcome(reply)

        finished = await self.runs.finish(run.run_id, status, summary, anomalies)
        if finished is None:
            raise StoreUnavailable(f"Run {run.run_id} disappeared before it could be finished")
        if isinstance(finished, AlreadyFinished):
            self.audit.record(
                AuditEntry(
                    action=RUN_FINISH_IGNORED,
                    run_id=run.run_id,
                    event_id=run.event_id,
                    detail={"requested": status.value, "current": finished.run.status.value},
                )
            )
            logger.info(
                f"Run {run.run_id} was finished out of band as {finished.run.status.value}; "
                f"keeping it over {status.value}"
            )
            return SubmitResult.from_run(finished.run)

        self.audit.record(
            AuditEntry(
                action=RUN_FINISHED,
                run_id=run.run_id,
                event_id=run.event_id,
                detail={"status": status.value, "transport_ok": reply.transport_ok},
            )
        )
        return SubmitResult.from_run(finished.run)

    async def apply_terminal_status(
        self,
        run_id: Any,
        status: Any,
        summary: str | None = None,
        anomalies: Any = None,
    ) -> RunRecord:
        """Finish a run reported complete out of band.

        The first terminal transition wins. Repeating it with the same values
        is acknowledged; different values are refused.

        Raises:
            ValidationFailed: run_id or status missing, or status not terminal
            RunNotFound: no such run
            TerminalTransitionConflict: the run already finished differently
        """
        parsed_run_id = _parse_run_id(run_id)
        parsed_status = _parse_terminal_status(status)
        summary = coerce_summary(summary)

        finished = await self.runs.finish(parsed_run_id, parsed_status, summary, anomalies)
        if finished is None:
            raise RunNotFound(parsed_run_id)

        if isinstance(finished, AlreadyFinished):
            current = finished.run
            same = (
                current.status is parsed_status
                and current.summary == summary
                and current.anomalies == anomalies
            )
            if not same:
                self.audit.record(
                    AuditEntry(
                        action=RUN_FINISH_IGNORED,
                        run_id=current.run_id,
                        event_id=current.event_id,
                        detail={"requested": parsed_status.value, "current": current.status.value},
                    )
                )
                raise TerminalTransitionConflict(
                    current.run_id, current.status.value, parsed_status.value
                )
            return current

        self.audit.record(
            AuditEntry(
                action=RUN_FINISHED,
                run_id=finished.run.run_id,
                event_id=finished.run.event_id,
                detail={"status": parsed_status.value, "out_of_band": True},
            )
        )
        logger.info(f"Run {parsed_run_id} finished out of band as {parsed_status.value}")
        return finished.run

    def _deduped(self, run: RunRecord) -> SubmitResult:
        self.audit.record(AuditEntry(action=RUN_DEDUPED, run_id=run.run_id, event_id=run.event_id))
        logger.info(f"Event {run.event_id} already has run {run.run_id} ({run.status.value})")
        return SubmitResult.from_run(run, deduped=True)

    async def _forward(
        self, engine: OrchestrationClient, payload: dict[str, Any], run_id: UUID
    ) -> EngineReply:
        body = {
            **payload,
            "run_id": str(run_id),
            "internal_api_key": self.internal_api_key,
            "occurred_at": payload.get("occurred_at") or datetime.now(timezone.utc).isoformat(),
        }
        try:
            return await engine.forward(body)
        except Exception:
            logger.exception(f"Forwarding run {run_id} to the orchestration engine failed")
            return EngineReply(transport_ok=False)
