"""Deterministic mock provisioning actions."""

import random
from typing import Any

from runledger.contracts.errors import ValidationFailed

HARDWARE_BUNDLES: dict[str, str] = {
    "FR": "MacBook Pro + YubiKey",
    "BE": "MacBook Air + YubiKey",
    "ES": "MacBook Air",
    "CA": "MacBook Pro",
}
DEFAULT_HARDWARE_BUNDLE = "Standard Laptop Bundle"

BASE_ACCESSES: list[str] = ["Email", "Calendar", "SSO"]
DEPARTMENT_ACCESSES: dict[str, list[str]] = {
    "Engineering": ["GitHub", "CI", "Cloud Console"],
    "People": ["HRIS", "Payroll"],
    "Sales": ["CRM", "Dialer"],
}

HARDWARE_VENDOR_TIMEOUT = "Hardware vendor API timeout"


class HardwareVendorError(Exception):
    """The hardware vendor did not accept the order."""

    def __init__(self, reason: str = HARDWARE_VENDOR_TIMEOUT) -> None:
        self.reason = reason
        super().__init__(reason)


def _require(**fields: Any) -> None:
    for name, value in fields.items():
        if not value:
            raise ValidationFailed(name)


def _action_id(prefix: str) -> str:
    return f"{prefix}_{random.getrandbits(48):012x}"


def hardware_bundle(country: str) -> str:
    return HARDWARE_BUNDLES.get(country, DEFAULT_HARDWARE_BUNDLE)


def access_policy(department: str) -> list[str]:
    return BASE_ACCESSES + DEPARTMENT_ACCESSES.get(department, [])


def provision_accounts(run_id: Any, email: Any) -> dict[str, Any]:
    """Create a work account named after the email's local part."""
    _require(run_id=run_id, email=email)
    email = str(email)
    username = email.split("@")[0].lower()
    return {
        "status": "SUCCESS",
        "account": {"username": username, "email": email},
        "action_id": _action_id("acct"),
    }


def provision_hardware(run_id: Any, country: Any, scenario: dict[str, Any] | None = None) -> dict[str, Any]:
    """Order the hardware bundle for the employee's country.

    Raises:
        HardwareVendorError: when the scenario asks for an IT failure
    """
    _require(run_id=run_id, country=country)
    if scenario and scenario.get("simulate_it_failure"):
        raise HardwareVendorError()
    return {
        "status": "SUCCESS",
        "bundle": hardware_bundle(str(country)),
        "ticket_id": _action_id("hw"),
    }


def provision_access(run_id: Any, department: Any) -> dict[str, Any]:
    """Grant the access set of the employee's department."""
    _require(run_id=run_id, department=department)
    return {
        "status": "SUCCESS",
        "accesses": access_policy(str(department)),
    }
