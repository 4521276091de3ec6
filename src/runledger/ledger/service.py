"""Wiring of the ledger components from explicit configuration."""

import logging
from dataclasses import dataclass

from runledger.ledger.audit import AuditSink, JsonLogAuditSink
from runledger.ledger.controller import RunLifecycleController
from runledger.ledger.recorder import StepRecorder
from runledger.ledger.stores import RunStore, StepStore
from runledger.ledger.views import RunViewAssembler
from runledger.orchestration.client import HttpOrchestrationClient, OrchestrationClient
from runledger.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Ledger:
    """The ledger's operations, sharing one pair of stores."""

    controller: RunLifecycleController
    recorder: StepRecorder
    views: RunViewAssembler


def build_ledger(
    settings: Settings,
    runs: RunStore | None = None,
    steps: StepStore | None = None,
    engine: OrchestrationClient | None = None,
    audit: AuditSink | None = None,
) -> Ledger:
    """Build a ledger.

    Stores default to Postgres and the engine to the configured webhook.
    Tests pass in-memory stores and a simulated engine instead.
    """
    if runs is None or steps is None:
        from runledger.db.session import create_session_factory
        from runledger.db.stores import SqlRunStore, SqlStepStore

        session_factory = create_session_factory(settings)
        runs = runs or SqlRunStore(session_factory)
        steps = steps or SqlStepStore(session_factory)

    if engine is None and settings.orchestrator_webhook_url:
        engine = HttpOrchestrationClient(
            settings.orchestrator_webhook_url,
            timeout=settings.orchestrator_timeout(),
        )
    if engine is None:
        logger.warning("orchestrator_webhook_url is not set; runs will stay RUNNING until finished")

    audit = audit or JsonLogAuditSink()
    return Ledger(
        controller=RunLifecycleController(
            runs,
            engine=engine,
            internal_api_key=settings.internal_api_key,
            audit=audit,
        ),
        recorder=StepRecorder(steps, audit=audit),
        views=RunViewAssembler(runs, steps),
    )
