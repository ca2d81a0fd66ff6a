"""
Transaction service — manual entries, transfers and reports.

Each manual entry:
1. Validates the form input (description, amount, type, accounts)
2. For a transfer, builds the expense/income pair through LedgerService
3. Inserts the row(s) through the store in a single call

Validation failures raise InvalidInputError and nothing is
written. Store failures propagate as PersistenceError.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

import structlog

from finance_tracker.errors import InvalidInputError
from finance_tracker.models.enums import TransactionType
from finance_tracker.money import validate_amount_input
from finance_tracker.schemas.account import AccountRecord
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionRecord,
    TransferRequest,
)
from finance_tracker.services.ledger_service import (
    ExpenseBreakdown,
    LedgerService,
    LedgerSummary,
)
from finance_tracker.store.interface import LedgerStore

logger = structlog.get_logger(__name__)


class TransactionService:

    def __init__(self, store: LedgerStore, ledger_service: LedgerService | None = None):
        self.store = store
        self.ledger_service = ledger_service or LedgerService()

    def _accounts_by_id(self) -> dict[str, AccountRecord]:
        return {a.id: a for a in self.store.fetch_accounts()}

    def _validate_account(
        self, accounts: dict[str, AccountRecord], account_id: str | None, label: str
    ) -> AccountRecord:
        if not account_id:
            raise InvalidInputError(f"Please select {label}.")
        account = accounts.get(account_id)
        if not account:
            raise InvalidInputError(f"Account {account_id} not found")
        return account

    def add_transaction(
        self,
        account_id: str | None,
        description: str,
        amount: Any,
        type: TransactionType | str,
        date: datetime | None = None,
        to_account_id: str | None = None,
    ) -> list[TransactionRecord]:
        """
        Record an income, expense or transfer entered by the user.

        Returns the stored rows: one for income/expense, two for
        a transfer.
        """
        description = (description or "").strip()
        if not description:
            raise InvalidInputError("Description is required")

        checked = validate_amount_input(amount)
        if not checked.is_valid:
            raise InvalidInputError(checked.error)

        try:
            txn_type = TransactionType(str(getattr(type, "value", type)).strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown transaction type {type!r}")

        if txn_type == TransactionType.TRANSFER:
            if not account_id:
                raise InvalidInputError("Please select an account.")
            if not to_account_id:
                raise InvalidInputError(
                    "Please select a destination account for the transfer."
                )
            # "Transfer" alone adds nothing to "Transfer to <name>"
            note = description[:120] if description.lower() != "transfer" else None
            return self.add_transfer(TransferRequest(
                account_id=account_id,
                to_account_id=to_account_id,
                amount=checked.value,
                description=note,
                date=date,
            ))

        accounts = self._accounts_by_id()
        account = self._validate_account(accounts, account_id, "an account")

        stored = self.store.insert_transactions([TransactionCreate(
            account_id=account.id,
            description=description[:255],
            amount=checked.value,
            type=txn_type,
            date=date,
        )])
        logger.info(
            "transaction_added",
            account_id=account.id,
            type=txn_type.value,
        )
        return stored

    def add_transfer(self, request: TransferRequest) -> list[TransactionRecord]:
        """
        Move money between two accounts.

        Both rows go to the store in one insert, so either the whole
        pair is stored or neither row is.

        Raises InvalidInputError when an account is missing or
        unknown, or when source and destination are the same.
        """
        accounts = self._accounts_by_id()
        source = self._validate_account(accounts, request.account_id, "an account")
        if not request.to_account_id:
            raise InvalidInputError(
                "Please select a destination account for the transfer."
            )
        if request.account_id == request.to_account_id:
            raise InvalidInputError(
                "From and To accounts cannot be the same for a transfer."
            )
        destination = self._validate_account(
            accounts, request.to_account_id, "a destination account"
        )

        pair = self.ledger_service.build_transfer_pair(
            request, from_name=source.name, to_name=destination.name
        )
        stored = self.store.insert_transactions(list(pair))
        logger.info(
            "transfer_added",
            transfer_group_id=pair[0].transfer_group_id,
            source=source.id,
            destination=destination.id,
        )
        return stored

    def list_transactions(
        self, account_ids: Iterable[str] | None = None
    ) -> list[TransactionRecord]:
        transactions = self.store.fetch_transactions()
        if account_ids is None:
            return transactions
        wanted = set(account_ids)
        return [t for t in transactions if t.account_id in wanted]

    # --- Reports ---

    def balances(self) -> dict[str, Decimal]:
        """Current balance of every account."""
        return self.ledger_service.balances(
            self.store.fetch_accounts(), self.store.fetch_transactions()
        )

    def summary(self, account_ids: Iterable[str] | None = None) -> LedgerSummary:
        return self.ledger_service.summarize(
            self.store.fetch_accounts(),
            self.store.fetch_transactions(),
            account_ids=account_ids,
        )

    def expense_breakdown(
        self, days: int = 30, now: datetime | None = None
    ) -> ExpenseBreakdown:
        """Expense structure over the last `days` days."""
        since = (now or datetime.now()) - timedelta(days=days)
        return self.ledger_service.expense_breakdown(
            self.store.fetch_transactions(), since=since
        )
