"""Tests for the HTTP orchestration client."""

import json

import httpx
import pytest

from runledger.orchestration import HttpOrchestrationClient

WEBHOOK = "http://engine.test/webhook/onboarding"


def client_for(handler) -> HttpOrchestrationClient:
    return HttpOrchestrationClient(WEBHOOK, timeout=5.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_forward_posts_body_and_decodes_reply():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "SUCCESS", "summary": "done"})

    reply = await client_for(handler).forward({"run_id": "r1", "event_id": "evt_1"})

    assert seen["url"] == WEBHOOK
    assert seen["body"] == {"run_id": "r1", "event_id": "evt_1"}
    assert reply.transport_ok is True
    assert reply.body == {"status": "SUCCESS", "summary": "done"}


@pytest.mark.asyncio
async def test_forward_error_status_is_not_transport_ok():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "Error in workflow"})

    reply = await client_for(handler).forward({})

    assert reply.transport_ok is False
    assert reply.body == {"message": "Error in workflow"}


@pytest.mark.asyncio
async def test_forward_non_json_body_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="Workflow was started")

    reply = await client_for(handler).forward({})

    assert reply.transport_ok is True
    assert reply.body == {}


@pytest.mark.asyncio
async def test_forward_non_object_json_is_empty():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"status": "SUCCESS"}])

    reply = await client_for(handler).forward({})

    assert reply.body == {}


@pytest.mark.asyncio
async def test_forward_unreachable_engine():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    reply = await client_for(handler).forward({})

    assert reply.transport_ok is False
    assert reply.body == {}


@pytest.mark.asyncio
async def test_forward_timeout_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    reply = await client_for(handler).forward({})

    assert reply.transport_ok is False
