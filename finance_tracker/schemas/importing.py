"""
Pydantic schemas for the import pipeline.
"""

import enum
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from finance_tracker.models.enums import TransactionType
from finance_tracker.schemas.account import AccountRecord
from finance_tracker.schemas.transaction import TransactionRecord


class TransactionDraft(BaseModel):
    """
    A normalized row before account resolution.

    account_name is a side channel for the AccountResolver. It is
    never copied into account_id by the normalizer.
    """
    row_number: int
    description: str
    amount: Decimal = Field(gt=0)
    type: TransactionType
    date: datetime | None = None
    account_id: str | None = None
    account_name: str | None = None


class RowRejection(BaseModel):
    """A data row that could not become a draft."""
    row_number: int
    reason: str


class ImportStatus(str, enum.Enum):
    IMPORTED = "imported"
    NO_VALID_ROWS = "no_valid_rows"


class ImportResult(BaseModel):
    """
    Outcome of one import run.

    A reduced batch is still a success. NO_VALID_ROWS means the
    table was readable but nothing in it could be imported.
    """
    status: ImportStatus
    mode: str
    total_rows: int
    transactions: list[TransactionRecord] = Field(default_factory=list)
    created_accounts: list[AccountRecord] = Field(default_factory=list)
    blank_rows: int = 0
    rejected_rows: list[RowRejection] = Field(default_factory=list)
    missing_account: int = 0

    @property
    def accepted(self) -> int:
        return len(self.transactions)

    @property
    def dropped(self) -> int:
        return self.blank_rows + len(self.rejected_rows) + self.missing_account
