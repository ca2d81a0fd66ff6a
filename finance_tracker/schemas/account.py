"""
Pydantic schemas for accounts.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    """Fields the persistence collaborator needs to insert an account."""
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(min_length=1, max_length=32)
    opening_balance: Decimal = Field(default=Decimal("0"), decimal_places=2)


class AccountUpdate(BaseModel):
    """Full replacement of the editable account fields."""
    name: str = Field(min_length=1, max_length=100)
    color: str = Field(min_length=1, max_length=32)
    opening_balance: Decimal = Field(decimal_places=2)


class AccountRecord(BaseModel):
    id: str
    name: str
    color: str
    opening_balance: Decimal

    model_config = {"from_attributes": True}
