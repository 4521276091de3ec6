"""Routes for trusted internal callers: step logging and out-of-band completion."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from runledger.api.deps import get_ledger, require_internal_key
from runledger.contracts.errors import (
    RunNotFound,
    StoreUnavailable,
    TerminalTransitionConflict,
    ValidationFailed,
)
from runledger.ledger.service import Ledger

router = APIRouter(
    prefix="/internal",
    tags=["internal"],
    dependencies=[Depends(require_internal_key)],
)


def _body(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid body: expected a JSON object",
        )
    return payload


@router.post("/log-step")
async def log_step(
    payload: Any = Body(default=None),
    ledger: Ledger = Depends(get_ledger),
) -> dict[str, Any]:
    """Append a step reported by a provisioning action."""
    body = _body(payload)
    try:
        record = await ledger.recorder.record(
            run_id=body.get("run_id"),
            step=body.get("step"),
            status=body.get("status"),
            reason=body.get("reason"),
            input=body.get("input"),
            output=body.get("output"),
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {"ok": True, "step_id": record.id}


@router.post("/finish-run")
async def finish_run(
    payload: Any = Body(default=None),
    ledger: Ledger = Depends(get_ledger),
) -> dict[str, Any]:
    """Apply a terminal status reported out of band."""
    body = _body(payload)
    try:
        await ledger.controller.apply_terminal_status(
            run_id=body.get("run_id"),
            status=body.get("status"),
            summary=body.get("summary"),
            anomalies=body.get("anomalies"),
        )
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RunNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except TerminalTransitionConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {"ok": True}
