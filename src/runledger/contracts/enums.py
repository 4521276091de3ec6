"""Canonical enum definitions for runs and steps."""

from enum import Enum


class RunStatus(str, Enum):
    """Lifecycle status of a run. RUNNING is the only non-terminal status."""

    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"
    FLAGGED = "FLAGGED"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


TERMINAL_STATUSES: frozenset[RunStatus] = frozenset(s for s in RunStatus if s.is_terminal)


class StepStatus(str, Enum):
    """Outcome of a single recorded step. Steps are terminal once written."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class StepName(str, Enum):
    """Well-known step names emitted by the onboarding workflow."""

    RECEIVE_EVENT = "RECEIVE_EVENT"
    DECISION = "DECISION"
    PROVISION_ACCOUNTS = "PROVISION_ACCOUNTS"
    PROVISION_HARDWARE = "PROVISION_HARDWARE"
    PROVISION_ACCESS = "PROVISION_ACCESS"
    FINISH_RUN = "FINISH_RUN"
