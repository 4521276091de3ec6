"""Runs and run_steps tables for the onboarding ledger.

Revision ID: 001_onboarding_ledger
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_onboarding_ledger"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RUN_STATUSES = "('RUNNING', 'SUCCESS', 'PARTIAL', 'FAILED', 'FLAGGED')"
STEP_STATUSES = "('SUCCESS', 'FAILED', 'SKIPPED')"


def upgrade() -> None:
    # A) runs: one row per event_id
    op.create_table(
        "runs",
        sa.Column("run_id", sa.UUID(), primary_key=True),
        sa.Column("event_id", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="RUNNING"),
        sa.Column("started_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("finished_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("input", sa.JSON(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("anomalies", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(f"status IN {RUN_STATUSES}", name="ck_runs_status"),
        sa.CheckConstraint(
            "(status = 'RUNNING') = (finished_at IS NULL)",
            name="ck_runs_finished_at",
        ),
    )
    op.create_unique_constraint("uq_runs_event_id", "runs", ["event_id"])
    op.create_index("ix_runs_status", "runs", ["status"])

    # B) run_steps: append-only audit trail
    op.create_table(
        "run_steps",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), primary_key=True),
        sa.Column("run_id", sa.UUID(), sa.ForeignKey("runs.run_id"), nullable=False),
        sa.Column("step", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("input", sa.JSON(), nullable=True),
        sa.Column("output", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("clock_timestamp()"),
        ),
        sa.CheckConstraint(f"status IN {STEP_STATUSES}", name="ck_run_steps_status"),
    )
    op.create_index("ix_run_steps_run_order", "run_steps", ["run_id", "created_at", "id"])


def downgrade() -> None:
    op.drop_table("run_steps")
    op.drop_table("runs")
