"""Pytest configuration and fixtures."""

import random
import socket
from urllib.parse import urlparse

import pytest

from runledger.db.session import reset_session_factory
from runledger.ledger import (
    InMemoryAuditSink,
    InMemoryRunStore,
    InMemoryStepStore,
    StepRecorder,
    build_ledger,
)
from runledger.orchestration import SimulatedOrchestrationEngine
from runledger.settings import Settings

INTERNAL_KEY = "test-internal-key"


@pytest.fixture(autouse=True)
def reset_db_state():
    """Reset database engine/session state before each test.

    This prevents event loop conflicts when running multiple async tests.
    """
    reset_session_factory()
    yield
    reset_session_factory()


@pytest.fixture(autouse=True)
def seed_random():
    """Seed random for deterministic tests."""
    random.seed(42)
    yield


@pytest.fixture
def settings():
    """Settings with an internal key and no webhook."""
    return Settings(internal_api_key=INTERNAL_KEY, orchestrator_webhook_url=None)


@pytest.fixture
def run_store():
    return InMemoryRunStore()


@pytest.fixture
def step_store():
    return InMemoryStepStore()


@pytest.fixture
def audit():
    return InMemoryAuditSink()


@pytest.fixture
def recorder(step_store, audit):
    return StepRecorder(step_store, audit=audit)


@pytest.fixture
def engine(recorder):
    """Simulated engine that reports its outcome in the synchronous reply."""
    return SimulatedOrchestrationEngine(recorder)


@pytest.fixture
def ledger(settings, run_store, step_store, engine, audit):
    """In-memory ledger wired to the simulated engine."""
    return build_ledger(settings, runs=run_store, steps=step_store, engine=engine, audit=audit)


def make_event(event_id: str = "evt_1", **scenario: bool) -> dict:
    """Build a complete offer-signed event."""
    return {
        "event_id": event_id,
        "occurred_at": "2026-10-01T09:00:00Z",
        "candidate": {"first_name": "Ada", "last_name": "Lovelace", "email": "Ada.Lovelace@example.com"},
        "job": {"title": "Backend Engineer", "department": "Engineering", "level": "Senior"},
        "employment": {"country": "FR", "contract_type": "CDI", "start_date": "2026-11-02"},
        "manager": {"email": "grace.hopper@example.com"},
        "scenario": scenario or {"standard": True},
    }


def postgres_available() -> bool:
    """Whether the configured Postgres accepts TCP connections."""
    url = urlparse(Settings().database_url)
    try:
        with socket.create_connection((url.hostname or "localhost", url.port or 5432), timeout=0.5):
            return True
    except OSError:
        return False


requires_postgres = pytest.mark.skipif(
    not postgres_available(), reason="Postgres is not reachable"
)


@pytest.fixture
async def async_client(ledger, settings):
    """Async client against the app, wired to the in-memory ledger."""
    import httpx

    from runledger.api.deps import set_ledger
    from runledger.main import app
    from runledger.settings import get_settings

    set_ledger(ledger)
    app.dependency_overrides[get_settings] = lambda: settings
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
    set_ledger(None)
