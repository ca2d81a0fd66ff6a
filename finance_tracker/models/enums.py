"""
Shared enumerations.

Values are the lower-case strings used by the persisted row
shape, so enum members compare equal to the raw column values.
"""

import enum


class TransactionType(str, enum.Enum):
    """Kind of a ledger row. TRANSFER is a request type only."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
