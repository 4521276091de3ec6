"""Run repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import text

from runledger.contracts.enums import RunStatus
from runledger.contracts.models import RunRecord
from runledger.db.repos.base import BaseRepo

RUN_COLUMNS = """
    run_id, event_id, status, started_at, finished_at, input, summary, anomalies
"""


class RunRepo(BaseRepo):
    """Repository for runs table."""

    def _to_record(self, row: Any) -> RunRecord:
        return RunRecord(
            run_id=row["run_id"],
            event_id=row["event_id"],
            status=RunStatus(row["status"]),
            started_at=row["started_at"],
            finished_at=row["finished_at"],
            input=self.load_json(row["input"]) or {},
            summary=row["summary"],
            anomalies=self.load_json(row["anomalies"]),
        )

    async def insert_if_absent(self, run: RunRecord) -> RunRecord | None:
        """Insert a run unless its event_id is taken.

        Returns:
            The inserted run, or None when the event_id already exists. Any
            other constraint violation raises.
        """
        result = await self.session.execute(
            text(f"""
                INSERT INTO runs (run_id, event_id, status, started_at, finished_at,
                                  input, summary, anomalies)
                VALUES (:run_id, :event_id, :status, :started_at, NULL,
                        :input, NULL, NULL)
                ON CONFLICT (event_id) DO NOTHING
                RETURNING {RUN_COLUMNS}
            """),
            {
                "run_id": run.run_id,
                "event_id": run.event_id,
                "status": run.status.value,
                "started_at": run.started_at,
                "input": self.dump_json(run.input),
            },
        )
        row = result.mappings().fetchone()
        return self._to_record(row) if row else None

    async def get_by_event_id(self, event_id: str) -> RunRecord | None:
        """Get run by event_id."""
        result = await self.session.execute(
            text(f"""
                SELECT {RUN_COLUMNS}
                FROM runs
                WHERE event_id = :event_id
            """),
            {"event_id": event_id},
        )
        row = result.mappings().fetchone()
        return self._to_record(row) if row else None

    async def get_by_id(self, run_id: UUID) -> RunRecord | None:
        """Get run by run_id."""
        result = await self.session.execute(
            text(f"""
                SELECT {RUN_COLUMNS}
                FROM runs
                WHERE run_id = :run_id
            """),
            {"run_id": run_id},
        )
        row = result.mappings().fetchone()
        return self._to_record(row) if row else None

    async def finish_if_running(
        self,
        run_id: UUID,
        status: RunStatus,
        summary: str | None,
        anomalies: Any,
    ) -> RunRecord | None:
        """Move a RUNNING run to a terminal status.

        Returns:
            The updated run, or None when the run is missing or already terminal.
        """
        result = await self.session.execute(
            text(f"""
                UPDATE runs
                SET status = :status,
                    summary = :summary,
                    anomalies = :anomalies,
                    finished_at = :now
                WHERE run_id = :run_id AND status = 'RUNNING'
                RETURNING {RUN_COLUMNS}
            """),
            {
                "run_id": run_id,
                "status": status.value,
                "summary": summary,
                "anomalies": self.dump_json(anomalies),
                "now": self.now(),
            },
        )
        row = result.mappings().fetchone()
        return self._to_record(row) if row else None
