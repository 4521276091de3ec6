"""Run view assembly and evidence derivation.

Every view of a run is built from the pair (run, ordered steps) returned by
RunViewAssembler.get.
"""

from uuid import UUID

from runledger.contracts.enums import StepName, StepStatus
from runledger.contracts.errors import RunNotFound
from runledger.contracts.models import Evidence, RunView, StepRecord
from runledger.contracts.payloads import to_wire
from runledger.ledger.stores import RunStore, StepStore

EVIDENCE_STEPS: dict[str, StepName] = {
    "accounts": StepName.PROVISION_ACCOUNTS,
    "hardware": StepName.PROVISION_HARDWARE,
    "access": StepName.PROVISION_ACCESS,
}


def latest_step(steps: list[StepRecord], name: StepName | str) -> StepRecord | None:
    """Return the most recent step named name (case-insensitive), steps being in audit order."""
    wanted = (name.value if isinstance(name, StepName) else name).upper()
    for step in reversed(steps):
        if step.step.upper() == wanted:
            return step
    return None


def derive_evidence(steps: list[StepRecord]) -> Evidence:
    """Extract the outputs of the provisioning steps, verbatim.

    A step that never ran yields absent evidence.
    """
    found: dict[str, object] = {}
    for key, name in EVIDENCE_STEPS.items():
        step = latest_step(steps, name)
        found[key] = to_wire(step.output) if step is not None else None
    return Evidence(**found)


def step_outcomes(steps: list[StepRecord]) -> dict[str, bool]:
    """Whether the latest account, hardware and access steps succeeded."""
    outcomes: dict[str, bool] = {}
    for key, name in EVIDENCE_STEPS.items():
        step = latest_step(steps, name)
        outcomes[key] = step is not None and step.status is StepStatus.SUCCESS
    return outcomes


class RunViewAssembler:
    """Joins a run with its steps."""

    def __init__(self, runs: RunStore, steps: StepStore) -> None:
        self.runs = runs
        self.steps = steps

    async def get(self, run_id: UUID | str) -> RunView:
        """Fetch a run and its steps in audit order.

        Raises:
            RunNotFound: no such run, including a run_id that is not a UUID
        """
        try:
            parsed = run_id if isinstance(run_id, UUID) else UUID(str(run_id))
        except ValueError as e:
            raise RunNotFound(run_id) from e

        run = await self.runs.get(parsed)
        if run is None:
            raise RunNotFound(parsed)

        steps = await self.steps.list_for_run(parsed)
        return RunView(
            run=run,
            steps=steps,
            evidence=derive_evidence(steps),
            outcomes=step_outcomes(steps),
        )
