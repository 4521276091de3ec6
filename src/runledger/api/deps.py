"""Shared FastAPI dependencies."""

import hmac

from fastapi import Depends, Header, HTTPException, status

from runledger.ledger.service import Ledger, build_ledger
from runledger.settings import Settings, get_settings

_ledger: Ledger | None = None


def get_ledger() -> Ledger:
    """Get the ledger (singleton built from settings)."""
    global _ledger
    if _ledger is None:
        _ledger = build_ledger(get_settings())
    return _ledger


def set_ledger(ledger: Ledger | None) -> None:
    """Set the ledger (for testing)."""
    global _ledger
    _ledger = ledger


def require_internal_key(
    x_internal_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject callers that do not present the shared internal key."""
    expected = settings.internal_api_key
    if not expected or not x_internal_key or not hmac.compare_digest(x_internal_key, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
