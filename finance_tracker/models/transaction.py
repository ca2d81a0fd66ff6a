"""
Transaction model.

Every row is a signed delta against exactly one account: income
adds, expense subtracts. A transfer is stored as two rows (an
expense on the source, an income on the destination) that share
a transfer_group_id. No foreign key links the two rows of a pair.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Integer, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from finance_tracker.models.account import new_id
from finance_tracker.models.base import Base
from finance_tracker.models.enums import TransactionType


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(
        String(80), primary_key=True, default=new_id
    )
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
    )
    date: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    to_account_id: Mapped[str | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True
    )
    transfer_group_id: Mapped[str | None] = mapped_column(
        String(80), nullable=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.type.value} "
            f"{self.amount} on {self.account_id}>"
        )
