"""Base repository with ledger invariants."""

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepo:
    """Base repository class for the ledger tables.

    Invariants:
    - Repositories never issue DELETE statements; runs and steps are kept forever
    - run_steps rows are insert-only; runs rows are updated at most once, by the
      RUNNING -> terminal transition guarded in the WHERE clause
    - Every statement touches a single row; there are no multi-row transactions

    Design decisions:
    - run_id is generated app-side with uuid4(); step ids and step created_at
      are assigned by the database so the audit order comes from one clock
    - JSON columns are written as serialized text and decoded on read, since
      asyncpg returns json values as str
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def now() -> datetime:
        """Get current UTC timestamp."""
        return datetime.now(timezone.utc)

    @staticmethod
    def dump_json(value: Any) -> str | None:
        """Serialize a value for a JSON column; None stays SQL NULL."""
        if value is None:
            return None
        return json.dumps(value, default=str)

    @staticmethod
    def load_json(value: Any) -> Any:
        """Decode a JSON column value returned by the driver."""
        if isinstance(value, str):
            return json.loads(value)
        return value
