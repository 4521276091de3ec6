"""Boundary to the external orchestration engine."""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass
class EngineReply:
    """What came back from forwarding an event.

    transport_ok is True when the engine answered with a 2xx status. body is
    the decoded JSON object, or empty when the engine was unreachable or the
    body was not a JSON object.
    """

    transport_ok: bool
    body: dict[str, Any] = field(default_factory=dict)


class OrchestrationClient(Protocol):
    """Protocol for forwarding an event to the orchestration engine."""

    async def forward(self, body: dict[str, Any]) -> EngineReply:
        """Forward an event and wait for the synchronous response."""
        ...


class HttpOrchestrationClient:
    """Calls the engine's synchronous webhook over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def forward(self, body: dict[str, Any]) -> EngineReply:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"Orchestration engine unreachable at {self.url}: {e!r}")
            return EngineReply(transport_ok=False)

        transport_ok = response.is_success
        try:
            decoded = response.json()
        except ValueError:
            logger.warning(
                f"Orchestration engine returned a non-JSON body (HTTP {response.status_code})"
            )
            decoded = {}

        if not isinstance(decoded, dict):
            logger.warning(
                f"Orchestration engine returned {type(decoded).__name__}, expected an object"
            )
            decoded = {}

        return EngineReply(transport_ok=transport_ok, body=decoded)
