"""Error taxonomy for the run ledger."""

from uuid import UUID


class LedgerError(Exception):
    """Base class for ledger errors."""


class ValidationFailed(LedgerError):
    """A required field is missing or malformed. Never retried, never persisted."""

    def __init__(self, field: str, problem: str | None = None) -> None:
        self.field = field
        self.problem = problem
        if problem:
            message = f"Invalid {field}: {problem}"
        else:
            message = f"Missing {field}"
        super().__init__(message)


class RunNotFound(LedgerError):
    """No run exists for the given run_id."""

    def __init__(self, run_id: UUID | str) -> None:
        self.run_id = run_id
        super().__init__(f"Run {run_id} not found")


class TerminalTransitionConflict(LedgerError):
    """A terminal run was asked to move to a different terminal outcome."""

    def __init__(self, run_id: UUID, current: str, requested: str) -> None:
        self.run_id = run_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Run {run_id} already finished as {current}; refusing transition to {requested}"
        )


class StoreUnavailable(LedgerError):
    """The persistent store failed for a reason other than a dedup conflict."""
