"""Pydantic v2 models for events, runs and steps."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_serializer, model_validator

from runledger.contracts.enums import RunStatus, StepStatus
from runledger.contracts.errors import ValidationFailed
from runledger.contracts.payloads import ABSENT, StepPayload, to_wire


class BaseContractModel(BaseModel):
    """Base model for all contracts with common fields."""

    model_config = {"extra": "forbid", "frozen": False}


class EventPart(BaseModel):
    """Nested event section; unknown keys are kept because the payload is stored verbatim."""

    model_config = {"extra": "allow"}


class Candidate(EventPart):
    first_name: str
    last_name: str
    email: str


class Job(EventPart):
    title: str
    department: str
    level: str | None = None


class Employment(EventPart):
    country: str
    contract_type: str
    start_date: str


class Manager(EventPart):
    email: str


class Scenario(EventPart):
    """Switches understood by the simulated workflow."""

    standard: bool = False
    unknown_role: bool = False
    simulate_it_failure: bool = False
    duplicate_event_id: bool = False


class OfferSignedEvent(EventPart):
    """Offer-signature notification that triggers an onboarding run."""

    event_id: str
    occurred_at: str | None = None
    candidate: Candidate
    job: Job
    employment: Employment
    manager: Manager | None = None
    scenario: Scenario | None = None


# Checked in this order; the first missing one is reported.
REQUIRED_EVENT_FIELDS: tuple[tuple[str, ...], ...] = (
    ("event_id",),
    ("candidate", "email"),
    ("candidate", "first_name"),
    ("candidate", "last_name"),
    ("job", "title"),
    ("job", "department"),
    ("employment", "country"),
    ("employment", "contract_type"),
    ("employment", "start_date"),
)


def _lookup(payload: dict[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = payload
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def parse_event(payload: Any) -> OfferSignedEvent:
    """Validate an inbound event, failing fast on the first problem.

    Raises:
        ValidationFailed: naming the first missing or malformed field
    """
    if not isinstance(payload, dict):
        raise ValidationFailed("event", "expected a JSON object")

    for path in REQUIRED_EVENT_FIELDS:
        value = _lookup(payload, path)
        if value is None or value == "":
            raise ValidationFailed(".".join(path))

    try:
        return OfferSignedEvent.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "event"
        raise ValidationFailed(field, first["msg"]) from exc


class RunRecord(BaseContractModel):
    """One tracked attempt to process a single event."""

    run_id: UUID
    event_id: str
    status: RunStatus = RunStatus.RUNNING
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    input: dict[str, Any] = Field(default_factory=dict)
    summary: str | None = None
    anomalies: Any = None

    @model_validator(mode="after")
    def check_finished_at(self) -> "RunRecord":
        """finished_at is set exactly when the status is terminal."""
        if self.status is RunStatus.RUNNING and self.finished_at is not None:
            raise ValueError("finished_at must be null while RUNNING")
        if self.status.is_terminal and self.finished_at is None:
            raise ValueError(f"finished_at is required for terminal status {self.status.value}")
        return self


class StepRecord(BaseContractModel):
    """One recorded outcome of a provisioning action."""

    id: int
    run_id: UUID
    step: str
    status: StepStatus
    reason: str | None = None
    input: StepPayload = ABSENT
    output: StepPayload = ABSENT
    created_at: datetime

    @field_serializer("input", "output")
    def serialize_payload(self, payload: Any) -> Any:
        return to_wire(payload)


class SubmitResult(BaseContractModel):
    """Response of create-or-dedupe."""

    run_id: UUID
    status: RunStatus
    summary: str | None = None
    anomalies: Any = None
    deduped: bool = False

    @classmethod
    def from_run(cls, run: RunRecord, deduped: bool = False) -> "SubmitResult":
        return cls(
            run_id=run.run_id,
            status=run.status,
            summary=run.summary,
            anomalies=run.anomalies,
            deduped=deduped,
        )


class Evidence(BaseContractModel):
    """Outputs of the provisioning steps shown to a reviewer."""

    accounts: Any = None
    hardware: Any = None
    access: Any = None


class RunView(BaseContractModel):
    """A run joined with its ordered steps."""

    run: RunRecord
    steps: list[StepRecord] = Field(default_factory=list)
    evidence: Evidence = Field(default_factory=Evidence)
    outcomes: dict[str, bool] = Field(default_factory=dict)
