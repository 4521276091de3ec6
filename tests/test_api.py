"""Tests for the HTTP routes."""

from uuid import uuid4

import httpx
import pytest

from conftest import INTERNAL_KEY, make_event
from runledger.api.deps import set_ledger
from runledger.contracts import StoreUnavailable
from runledger.ledger import InMemoryRunStore, build_ledger
from runledger.main import app
from runledger.settings import Settings, get_settings

HEADERS = {"X-Internal-Key": INTERNAL_KEY}


class UnavailableRunStore(InMemoryRunStore):
    async def get_by_event_id(self, event_id):
        raise StoreUnavailable("database is down")

    async def get(self, run_id):
        raise StoreUnavailable("database is down")


async def submit(client, **kwargs) -> dict:
    response = await client.post("/api/demo/offersigned", json=make_event(**kwargs))
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_offersigned_creates_run(async_client):
    data = await submit(async_client)

    assert data["status"] == "SUCCESS"
    assert data["deduped"] is False
    assert data["summary"].startswith("Onboarding completed")


@pytest.mark.asyncio
async def test_offersigned_duplicate_returns_existing_run(async_client):
    first = await submit(async_client)
    second = await submit(async_client)

    assert second["run_id"] == first["run_id"]
    assert second["deduped"] is True


@pytest.mark.asyncio
async def test_offersigned_missing_field(async_client, run_store):
    payload = make_event()
    del payload["job"]["title"]

    response = await async_client.post("/api/demo/offersigned", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Missing job.title"
    assert run_store.runs == []


@pytest.mark.asyncio
async def test_offersigned_non_object_body(async_client):
    response = await async_client.post("/api/demo/offersigned", json=["evt_1"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_store_failure_is_500(settings, step_store, engine, audit):
    ledger = build_ledger(
        settings, runs=UnavailableRunStore(), steps=step_store, engine=engine, audit=audit
    )
    set_ledger(ledger)
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            submitted = await client.post("/api/demo/offersigned", json=make_event())
            fetched = await client.get(f"/api/runs/{uuid4()}")
    finally:
        set_ledger(None)

    assert submitted.status_code == 500
    assert fetched.status_code == 500


@pytest.mark.asyncio
async def test_get_run_returns_view(async_client):
    created = await submit(async_client)

    response = await async_client.get(f"/api/runs/{created['run_id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["run"]["run_id"] == created["run_id"]
    assert data["run"]["status"] == "SUCCESS"
    assert data["run"]["input"]["run_id"] == created["run_id"]
    assert len(data["steps"]) == 6
    assert data["evidence"]["accounts"]["account"]["username"] == "ada.lovelace"
    assert data["outcomes"] == {"accounts": True, "hardware": True, "access": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("run_id", [str(uuid4()), "not-a-uuid"])
async def test_get_run_not_found(async_client, run_id):
    response = await async_client.get(f"/api/runs/{run_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [{}, {"X-Internal-Key": "wrong"}])
async def test_internal_routes_require_key(async_client, headers):
    body = {"run_id": str(uuid4()), "step": "DECISION", "status": "SUCCESS"}

    response = await async_client.post("/api/internal/log-step", json=body, headers=headers)
    assert response.status_code == 401

    response = await async_client.post("/api/internal/finish-run", json=body, headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_internal_routes_reject_all_when_key_unset(ledger):
    set_ledger(ledger)
    app.dependency_overrides[get_settings] = lambda: Settings(internal_api_key=None)
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.post(
                "/api/internal/log-step",
                json={"run_id": str(uuid4()), "step": "DECISION", "status": "SUCCESS"},
                headers={"X-Internal-Key": ""},
            )
    finally:
        app.dependency_overrides.clear()
        set_ledger(None)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_log_step(async_client):
    created = await submit(async_client)

    response = await async_client.post(
        "/api/internal/log-step",
        json={
            "run_id": created["run_id"],
            "step": "NOTIFY_MANAGER",
            "status": "SKIPPED",
            "reason": "manager email bounced",
            "output": "550 mailbox unavailable",
        },
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert isinstance(data["step_id"], int)

    view = (await async_client.get(f"/api/runs/{created['run_id']}")).json()
    assert view["steps"][-1]["step"] == "NOTIFY_MANAGER"
    assert view["steps"][-1]["output"] == {"_raw": "550 mailbox unavailable"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, detail",
    [
        ({"step": "DECISION", "status": "SUCCESS"}, "Missing run_id"),
        ({"run_id": "6f1c1d3e-3b8a-4d2e-9b1a-2f0c8a7e5d41", "status": "SUCCESS"}, "Missing step"),
        ({"run_id": "6f1c1d3e-3b8a-4d2e-9b1a-2f0c8a7e5d41", "step": "DECISION"}, "Missing status"),
    ],
)
async def test_log_step_missing_field(async_client, body, detail):
    response = await async_client.post("/api/internal/log-step", json=body, headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_log_step_non_object_body(async_client):
    response = await async_client.post("/api/internal/log-step", json="step", headers=HEADERS)
    assert response.status_code == 400


@pytest.fixture
def unfinished_ledger(settings, run_store, step_store, audit):
    """Ledger without an engine, so submitted runs stay RUNNING."""
    return build_ledger(settings, runs=run_store, steps=step_store, engine=None, audit=audit)


@pytest.fixture
async def unfinished_client(unfinished_ledger, settings):
    set_ledger(unfinished_ledger)
    app.dependency_overrides[get_settings] = lambda: settings
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
    set_ledger(None)


@pytest.mark.asyncio
async def test_finish_run_lifecycle(unfinished_client):
    created = await submit(unfinished_client)
    assert created["status"] == "RUNNING"
    body = {"run_id": created["run_id"], "status": "PARTIAL", "summary": "hardware pending"}

    response = await unfinished_client.post("/api/internal/finish-run", json=body, headers=HEADERS)
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    response = await unfinished_client.post("/api/internal/finish-run", json=body, headers=HEADERS)
    assert response.status_code == 200

    conflicting = {**body, "status": "SUCCESS"}
    response = await unfinished_client.post("/api/internal/finish-run", json=conflicting, headers=HEADERS)
    assert response.status_code == 409

    view = (await unfinished_client.get(f"/api/runs/{created['run_id']}")).json()
    assert view["run"]["status"] == "PARTIAL"
    assert view["run"]["summary"] == "hardware pending"
    assert view["run"]["finished_at"] is not None


@pytest.mark.asyncio
async def test_finish_run_unknown_run(async_client):
    response = await async_client.post(
        "/api/internal/finish-run",
        json={"run_id": str(uuid4()), "status": "SUCCESS"},
        headers=HEADERS,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_finish_run_missing_status(async_client):
    response = await async_client.post(
        "/api/internal/finish-run",
        json={"run_id": str(uuid4())},
        headers=HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing status"


@pytest.mark.asyncio
async def test_mock_provision_accounts(async_client):
    response = await async_client.post(
        "/api/mock/provision-accounts",
        json={"run_id": "r1", "email": "ada@example.com"},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["account"]["username"] == "ada"


@pytest.mark.asyncio
async def test_mock_provision_hardware_failure_is_503(async_client):
    response = await async_client.post(
        "/api/mock/provision-hardware",
        json={"run_id": "r1", "country": "FR", "scenario": {"simulate_it_failure": True}},
        headers=HEADERS,
    )
    assert response.status_code == 503
    assert response.json() == {"status": "FAILED", "reason": "Hardware vendor API timeout"}


@pytest.mark.asyncio
async def test_mock_provision_access(async_client):
    response = await async_client.post(
        "/api/mock/provision-access",
        json={"run_id": "r1", "department": "People"},
        headers=HEADERS,
    )
    assert response.status_code == 200
    assert "Payroll" in response.json()["accesses"]


@pytest.mark.asyncio
async def test_mock_missing_input_is_400(async_client):
    response = await async_client.post(
        "/api/mock/provision-hardware", json={"run_id": "r1"}, headers=HEADERS
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing country"


@pytest.mark.asyncio
async def test_mock_requires_key(async_client):
    response = await async_client.post(
        "/api/mock/provision-access", json={"run_id": "r1", "department": "People"}
    )
    assert response.status_code == 401
