"""Step repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import text

from runledger.contracts.enums import StepStatus
from runledger.contracts.models import StepRecord
from runledger.contracts.payloads import (
    AbsentPayload,
    RawTextPayload,
    StructuredPayload,
    from_storage,
    to_wire,
)
from runledger.db.repos.base import BaseRepo

STEP_COLUMNS = "id, run_id, step, status, reason, input, output, created_at"


class StepRepo(BaseRepo):
    """Repository for run_steps table."""

    def _to_record(self, row: Any) -> StepRecord:
        return StepRecord(
            id=row["id"],
            run_id=row["run_id"],
            step=row["step"],
            status=StepStatus(row["status"]),
            reason=row["reason"],
            input=from_storage(self.load_json(row["input"])),
            output=from_storage(self.load_json(row["output"])),
            created_at=row["created_at"],
        )

    async def insert_step(
        self,
        run_id: UUID,
        step: str,
        status: StepStatus,
        reason: str | None,
        input: AbsentPayload | StructuredPayload | RawTextPayload,
        output: AbsentPayload | StructuredPayload | RawTextPayload,
    ) -> StepRecord:
        """Insert a step; id and created_at come from the database."""
        result = await self.session.execute(
            text(f"""
                INSERT INTO run_steps (run_id, step, status, reason, input, output)
                VALUES (:run_id, :step, :status, :reason, :input, :output)
                RETURNING {STEP_COLUMNS}
            """),
            {
                "run_id": run_id,
                "step": step,
                "status": status.value,
                "reason": reason,
                "input": self.dump_json(to_wire(input)),
                "output": self.dump_json(to_wire(output)),
            },
        )
        return self._to_record(result.mappings().one())

    async def list_by_run(self, run_id: UUID) -> list[StepRecord]:
        """List steps for a run in audit order."""
        result = await self.session.execute(
            text(f"""
                SELECT {STEP_COLUMNS}
                FROM run_steps
                WHERE run_id = :run_id
                ORDER BY created_at ASC, id ASC
            """),
            {"run_id": run_id},
        )
        return [self._to_record(row) for row in result.mappings().fetchall()]
