"""Persistence collaborator interface and its SQLAlchemy implementation."""

from finance_tracker.store.interface import LedgerStore
from finance_tracker.store.sqlalchemy_store import SqlAlchemyStore

__all__ = ["LedgerStore", "SqlAlchemyStore"]
