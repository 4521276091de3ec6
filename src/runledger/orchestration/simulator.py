"""In-process stand-in for the orchestration engine.

Runs the onboarding workflow against the mock provisioning actions, recording
each step through the StepRecorder exactly as the real engine's actions do
over HTTP.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from runledger.contracts.enums import RunStatus, StepName, StepStatus
from runledger.ledger.recorder import StepRecorder
from runledger.orchestration.client import EngineReply
from runledger.provisioning import (
    HardwareVendorError,
    access_policy,
    hardware_bundle,
    provision_access,
    provision_accounts,
    provision_hardware,
)

logger = logging.getLogger(__name__)

Finisher = Callable[..., Awaitable[Any]]


class SimulatedOrchestrationEngine:
    """Sequences RECEIVE_EVENT, DECISION, the provisioning steps and FINISH_RUN.

    With a finisher, the outcome is reported out of band through it and the
    synchronous reply carries no status.
    """

    def __init__(self, recorder: StepRecorder, finisher: Finisher | None = None) -> None:
        self.recorder = recorder
        self.finisher = finisher
        self.calls: list[dict[str, Any]] = []

    async def forward(self, body: dict[str, Any]) -> EngineReply:
        self.calls.append(body)
        run_id = body["run_id"]
        status, summary, anomalies = await self._run_workflow(run_id, body)

        await self.recorder.record(
            run_id,
            StepName.FINISH_RUN.value,
            StepStatus.SUCCESS.value,
            output={"status": status.value},
        )

        if self.finisher is not None:
            await self.finisher(run_id, status.value, summary, anomalies)
            return EngineReply(transport_ok=True, body={})

        return EngineReply(
            transport_ok=True,
            body={"status": status.value, "summary": summary, "anomalies": anomalies},
        )

    async def _run_workflow(
        self, run_id: str, body: dict[str, Any]
    ) -> tuple[RunStatus, str, list[dict[str, Any]] | None]:
        candidate = body["candidate"]
        job = body["job"]
        employment = body["employment"]
        scenario = body.get("scenario") or {}
        full_name = f"{candidate['first_name']} {candidate['last_name']}"

        await self.recorder.record(
            run_id,
            StepName.RECEIVE_EVENT.value,
            StepStatus.SUCCESS.value,
            input={"event_id": body["event_id"], "occurred_at": body.get("occurred_at")},
            output={"candidate": candidate["email"]},
        )

        if scenario.get("unknown_role"):
            reason = (
                f"Role '{job['title']}' in department '{job['department']}' "
                "is not in the role catalog"
            )
            await self.recorder.record(
                run_id,
                StepName.DECISION.value,
                StepStatus.FAILED.value,
                reason=reason,
                input={"title": job["title"], "department": job["department"]},
                output={"decision": RunStatus.FLAGGED.value},
            )
            summary = (
                f"Ambiguous role '{job['title']}' ({job['department']}) for {full_name}: "
                "human review required before provisioning"
            )
            anomalies = [
                {"type": "unknown_role", "role": job["title"], "department": job["department"]}
            ]
            return RunStatus.FLAGGED, summary, anomalies

        await self.recorder.record(
            run_id,
            StepName.DECISION.value,
            StepStatus.SUCCESS.value,
            input={
                "title": job["title"],
                "department": job["department"],
                "country": employment["country"],
            },
            output={
                "hardware_bundle": hardware_bundle(employment["country"]),
                "accesses": access_policy(job["department"]),
            },
        )

        failures: list[dict[str, Any]] = []

        accounts = provision_accounts(run_id, candidate["email"])
        await self.recorder.record(
            run_id,
            StepName.PROVISION_ACCOUNTS.value,
            StepStatus.SUCCESS.value,
            input={"email": candidate["email"]},
            output=accounts,
        )

        try:
            hardware = provision_hardware(run_id, employment["country"], scenario)
        except HardwareVendorError as e:
            logger.info(f"Hardware provisioning failed for run {run_id}: {e.reason}")
            failures.append({"type": "step_failed", "step": StepName.PROVISION_HARDWARE.value, "reason": e.reason})
            await self.recorder.record(
                run_id,
                StepName.PROVISION_HARDWARE.value,
                StepStatus.FAILED.value,
                reason=e.reason,
                input={"country": employment["country"]},
                output={"status": StepStatus.FAILED.value, "reason": e.reason},
            )
        else:
            await self.recorder.record(
                run_id,
                StepName.PROVISION_HARDWARE.value,
                StepStatus.SUCCESS.value,
                input={"country": employment["country"]},
                output=hardware,
            )

        access = provision_access(run_id, job["department"])
        await self.recorder.record(
            run_id,
            StepName.PROVISION_ACCESS.value,
            StepStatus.SUCCESS.value,
            input={"department": job["department"]},
            output=access,
        )

        if not failures:
            return (
                RunStatus.SUCCESS,
                f"Onboarding completed for {full_name}: account, hardware and access provisioned",
                None,
            )
        failed_steps = ", ".join(f["step"] for f in failures)
        return (
            RunStatus.PARTIAL,
            f"Onboarding partially completed for {full_name}; failed: {failed_steps}",
            failures,
        )
