#!/usr/bin/env python3
"""Demo runner for the onboarding ledger.

Submits the three demo scenarios (standard, unknown role, IT failure) plus a
duplicate, using the simulated orchestration engine, and prints each run view.

Usage:
    uv run python scripts/demo_run.py            # in-memory stores
    uv run python scripts/demo_run.py --postgres # Postgres (database migrated)
"""

import asyncio
import json
import logging
import sys
from uuid import uuid4

from runledger.ledger import (
    InMemoryAuditSink,
    InMemoryRunStore,
    InMemoryStepStore,
    StepRecorder,
    build_ledger,
)
from runledger.orchestration import SimulatedOrchestrationEngine
from runledger.settings import get_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def demo_event(scenario: dict[str, bool], event_id: str | None = None) -> dict:
    return {
        "event_id": event_id or f"evt_{uuid4().hex[:12]}",
        "candidate": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada.lovelace@example.com"},
        "job": {"title": "Backend Engineer", "department": "Engineering", "level": "Senior"},
        "employment": {"country": "FR", "contract_type": "CDI", "start_date": "2026-11-02"},
        "manager": {"email": "grace.hopper@example.com"},
        "scenario": scenario,
    }


async def main(use_postgres: bool) -> None:
    settings = get_settings()
    if use_postgres:
        from runledger.db.session import create_session_factory
        from runledger.db.stores import SqlRunStore, SqlStepStore

        session_factory = create_session_factory(settings)
        runs, steps = SqlRunStore(session_factory), SqlStepStore(session_factory)
    else:
        runs, steps = InMemoryRunStore(), InMemoryStepStore()

    audit = InMemoryAuditSink()
    engine = SimulatedOrchestrationEngine(StepRecorder(steps, audit=audit))
    ledger = build_ledger(settings, runs=runs, steps=steps, engine=engine, audit=audit)

    scenarios = [
        {"standard": True},
        {"unknown_role": True},
        {"simulate_it_failure": True},
    ]
    for scenario in scenarios:
        result = await ledger.controller.submit(demo_event(scenario))
        view = await ledger.views.get(result.run_id)
        logger.info(f"Scenario {scenario}: {result.status.value} - {result.summary}")
        print(json.dumps(view.model_dump(mode="json"), indent=2))

    event = demo_event({"standard": True}, event_id="evt_duplicate_demo")
    first = await ledger.controller.submit(event)
    second = await ledger.controller.submit(event)
    logger.info(f"Duplicate submission: first={first.run_id} second={second.run_id} deduped={second.deduped}")

    logger.info(f"Audit actions: {audit.actions()}")


if __name__ == "__main__":
    asyncio.run(main(use_postgres="--postgres" in sys.argv[1:]))
