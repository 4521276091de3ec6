"""Mock provisioning actions called by the onboarding workflow."""

from runledger.provisioning.responders import (
    HardwareVendorError,
    access_policy,
    hardware_bundle,
    provision_access,
    provision_accounts,
    provision_hardware,
)

__all__ = [
    "access_policy",
    "hardware_bundle",
    "HardwareVendorError",
    "provision_access",
    "provision_accounts",
    "provision_hardware",
]
