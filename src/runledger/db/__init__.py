"""Database access layer."""

from runledger.db.engine import get_async_engine
from runledger.db.session import db_session, get_session_factory
from runledger.db.stores import SqlRunStore, SqlStepStore

__all__ = ["get_async_engine", "db_session", "get_session_factory", "SqlRunStore", "SqlStepStore"]
