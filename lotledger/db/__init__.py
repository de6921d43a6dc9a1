"""Database layer for lotledger."""

from lotledger.db.repository import LedgerRepository
from lotledger.db.schema import create_schema

__all__ = ["LedgerRepository", "create_schema"]
