"""
Pydantic schemas for transactions.

TransactionCreate is the persisted row shape. Its field names
(account_id, to_account_id, amount, type, date, description) are
what the persistence collaborator stores, so they must not change.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from finance_tracker.models.enums import TransactionType


class TransactionCreate(BaseModel):
    """
    One ledger row ready for insertion.

    id is normally assigned by the store. Transfer pairs supply
    their own ids so the two rows stay correlated.
    """
    account_id: str = Field(min_length=1)
    description: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0)
    type: TransactionType
    date: datetime | None = None
    to_account_id: str | None = None
    id: str | None = None
    transfer_group_id: str | None = None

    @field_validator("type")
    @classmethod
    def transfer_is_never_stored(cls, v: TransactionType) -> TransactionType:
        if v == TransactionType.TRANSFER:
            raise ValueError(
                "a transfer is stored as an expense/income pair, "
                "never as a single transfer row"
            )
        return v


class TransactionRecord(BaseModel):
    id: str
    account_id: str
    description: str
    amount: Decimal
    type: TransactionType
    date: datetime | None = None
    to_account_id: str | None = None
    transfer_group_id: str | None = None

    model_config = {"from_attributes": True}


class TransferRequest(BaseModel):
    """
    A user-initiated move of money between two accounts.

    Distinct accounts are checked by TransactionService before a
    request reaches the ledger.
    """
    account_id: str = Field(min_length=1)
    to_account_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    description: str | None = Field(default=None, max_length=120)
    date: datetime | None = None
