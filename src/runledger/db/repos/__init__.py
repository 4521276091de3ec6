"""Repository classes for database access."""

from runledger.db.repos.base import BaseRepo
from runledger.db.repos.run import RunRepo
from runledger.db.repos.step import StepRepo

__all__ = [
    "BaseRepo",
    "RunRepo",
    "StepRepo",
]
