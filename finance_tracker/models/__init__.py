"""
Database models package.

All models are imported here so that Base.metadata knows
every table when the schema is created.
"""

from finance_tracker.models.base import Base
from finance_tracker.models.enums import TransactionType
from finance_tracker.models.account import Account
from finance_tracker.models.transaction import Transaction

__all__ = [
    "Base",
    "TransactionType",
    "Account",
    "Transaction",
]
