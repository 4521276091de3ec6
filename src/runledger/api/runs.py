"""Run read route."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from runledger.api.deps import get_ledger
from runledger.contracts.errors import RunNotFound, StoreUnavailable
from runledger.ledger.service import Ledger

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("/{run_id}")
async def get_run(run_id: str, ledger: Ledger = Depends(get_ledger)) -> dict[str, Any]:
    """Return a run with its steps in audit order."""
    try:
        view = await ledger.views.get(run_id)
    except RunNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return view.model_dump(mode="json")
