"""Mock provisioning action routes called by the orchestration engine."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from runledger.api.deps import require_internal_key
from runledger.contracts.errors import ValidationFailed
from runledger.provisioning import (
    HardwareVendorError,
    provision_access,
    provision_accounts,
    provision_hardware,
)

router = APIRouter(
    prefix="/mock",
    tags=["mock"],
    dependencies=[Depends(require_internal_key)],
)


def _body(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


@router.post("/provision-accounts")
async def mock_provision_accounts(payload: Any = Body(default=None)) -> dict[str, Any]:
    body = _body(payload)
    try:
        return provision_accounts(body.get("run_id"), body.get("email"))
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/provision-hardware")
async def mock_provision_hardware(payload: Any = Body(default=None)) -> Any:
    body = _body(payload)
    try:
        scenario = body.get("scenario")
        if not isinstance(scenario, dict):
            scenario = None
        return provision_hardware(body.get("run_id"), body.get("country"), scenario)
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except HardwareVendorError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "FAILED", "reason": e.reason},
        )


@router.post("/provision-access")
async def mock_provision_access(payload: Any = Body(default=None)) -> dict[str, Any]:
    body = _body(payload)
    try:
        return provision_access(body.get("run_id"), body.get("department"))
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
