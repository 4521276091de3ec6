"""Event submission route."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from runledger.api.deps import get_ledger
from runledger.contracts.errors import StoreUnavailable, ValidationFailed
from runledger.contracts.models import SubmitResult
from runledger.ledger.service import Ledger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demo", tags=["runs"])


@router.post("/offersigned", response_model=SubmitResult)
async def offer_signed(
    payload: Any = Body(default=None),
    ledger: Ledger = Depends(get_ledger),
) -> SubmitResult:
    """Create or dedupe a run for an offer-signed event."""
    try:
        return await ledger.controller.submit(payload)
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
