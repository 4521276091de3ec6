"""Orchestration engine boundary and simulated engine."""

from runledger.orchestration.client import EngineReply, HttpOrchestrationClient, OrchestrationClient
from runledger.orchestration.simulator import SimulatedOrchestrationEngine

__all__ = [
    "EngineReply",
    "HttpOrchestrationClient",
    "OrchestrationClient",
    "SimulatedOrchestrationEngine",
]
