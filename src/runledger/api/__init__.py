"""API routers."""

from runledger.api.demo import router as demo_router
from runledger.api.internal import router as internal_router
from runledger.api.mock import router as mock_router
from runledger.api.runs import router as runs_router

__all__ = ["demo_router", "internal_router", "mock_router", "runs_router"]
