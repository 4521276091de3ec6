"""Step recorder: validates and appends step outcomes."""

import logging
from typing import Any
from uuid import UUID

from runledger.contracts.enums import StepStatus
from runledger.contracts.errors import ValidationFailed
from runledger.contracts.models import StepRecord
from runledger.contracts.payloads import decode_payload
from runledger.ledger.audit import STEP_RECORDED, AuditEntry, AuditSink, JsonLogAuditSink
from runledger.ledger.stores import StepStore

logger = logging.getLogger(__name__)


class StepRecorder:
    """Appends steps reported by provisioning actions.

    Never reads or writes the owning run, and does not check that it exists.
    """

    def __init__(self, steps: StepStore, audit: AuditSink | None = None) -> None:
        self.steps = steps
        self.audit = audit or JsonLogAuditSink()

    async def record(
        self,
        run_id: Any,
        step: Any,
        status: Any,
        reason: str | None = None,
        input: Any = None,
        output: Any = None,
    ) -> StepRecord:
        """Validate and append one step.

        Raises:
            ValidationFailed: run_id, step or status missing or malformed
        """
        if run_id is None or run_id == "":
            raise ValidationFailed("run_id")
        if not step:
            raise ValidationFailed("step")
        if status is None or status == "":
            raise ValidationFailed("status")

        try:
            parsed_run_id = run_id if isinstance(run_id, UUID) else UUID(str(run_id))
        except ValueError as e:
            raise ValidationFailed("run_id", "not a UUID") from e
        if not isinstance(step, str):
            raise ValidationFailed("step", "expected a string")
        try:
            parsed_status = StepStatus(status)
        except ValueError as e:
            raise ValidationFailed("status", f"unknown step status {status!r}") from e
        if reason is not None and not isinstance(reason, str):
            reason = str(reason)

        if parsed_status is not StepStatus.SUCCESS and not reason:
            logger.warning(f"Step {step} for run {parsed_run_id} is {parsed_status.value} without a reason")

        record = await self.steps.append(
            run_id=parsed_run_id,
            step=step,
            status=parsed_status,
            reason=reason,
            input=decode_payload(input),
            output=decode_payload(output),
        )
        self.audit.record(
            AuditEntry(
                action=STEP_RECORDED,
                run_id=parsed_run_id,
                detail={"step": step, "status": parsed_status.value, "step_id": record.id},
            )
        )
        return record
