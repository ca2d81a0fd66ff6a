"""
SQLAlchemy implementation of the persistence collaborator.

The store takes a database session and a user id as constructor
arguments. Every query is filtered by that user id; the core
never reasons about other users.

Unlike the services, the store owns its commits: each public
write is one database transaction, and a failure rolls the
session back before PersistenceError is raised.
"""

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_tracker.errors import NotFoundError, PersistenceError
from finance_tracker.models.account import Account
from finance_tracker.models.transaction import Transaction
from finance_tracker.schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountUpdate,
)
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionRecord,
)
from finance_tracker.store.interface import LedgerStore

logger = structlog.get_logger(__name__)


class SqlAlchemyStore(LedgerStore):

    def __init__(self, db: Session, user_id: str):
        if not user_id:
            raise ValueError("user_id is required")
        self.db = db
        self.user_id = user_id

    def _next_position(self, model) -> int:
        current = self.db.execute(
            select(func.coalesce(func.max(model.position), 0)).where(
                model.user_id == self.user_id
            )
        ).scalar()
        return int(current) + 1

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "store_write_failed",
                operation=operation,
                user_id=self.user_id,
                exc_info=True,
            )
            raise PersistenceError(f"Failed to {operation}: {e}") from e

    def _load_account(self, account_id: str) -> Account:
        account = self.db.execute(
            select(Account).where(
                Account.id == account_id,
                Account.user_id == self.user_id,
            )
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def fetch_accounts(self) -> list[AccountRecord]:
        try:
            accounts = self.db.execute(
                select(Account)
                .where(Account.user_id == self.user_id)
                .order_by(Account.position)
            ).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch accounts: {e}") from e
        return [AccountRecord.model_validate(a) for a in accounts]

    def get_account(self, account_id: str) -> AccountRecord:
        try:
            account = self._load_account(account_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch account: {e}") from e
        return AccountRecord.model_validate(account)

    def insert_account(self, account: AccountCreate) -> AccountRecord:
        try:
            row = Account(
                user_id=self.user_id,
                name=account.name,
                color=account.color,
                opening_balance=account.opening_balance,
                position=self._next_position(Account),
            )
            self.db.add(row)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to insert account: {e}") from e

        self._commit("insert account")
        logger.info("account_inserted", account_id=row.id, name=row.name)
        return AccountRecord.model_validate(row)

    def update_account(
        self, account_id: str, changes: AccountUpdate
    ) -> AccountRecord:
        try:
            row = self._load_account(account_id)
            row.name = changes.name
            row.color = changes.color
            row.opening_balance = changes.opening_balance
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to update account: {e}") from e

        self._commit("update account")
        return AccountRecord.model_validate(row)

    def fetch_transactions(self) -> list[TransactionRecord]:
        try:
            rows = self.db.execute(
                select(Transaction)
                .where(Transaction.user_id == self.user_id)
                .order_by(Transaction.position)
            ).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to fetch transactions: {e}") from e
        return [TransactionRecord.model_validate(t) for t in rows]

    def insert_transactions(
        self, transactions: list[TransactionCreate]
    ) -> list[TransactionRecord]:
        """
        Insert the whole batch in one database transaction.

        Ids supplied by the caller (transfer pairs) are kept;
        the rest get a fresh UUID.
        """
        if not transactions:
            return []

        try:
            position = self._next_position(Transaction)
            rows = []
            for offset, txn in enumerate(transactions):
                row = Transaction(
                    user_id=self.user_id,
                    account_id=txn.account_id,
                    description=txn.description,
                    amount=txn.amount,
                    type=txn.type,
                    date=txn.date,
                    to_account_id=txn.to_account_id,
                    transfer_group_id=txn.transfer_group_id,
                    position=position + offset,
                )
                if txn.id:
                    row.id = txn.id
                self.db.add(row)
                rows.append(row)
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "transaction_batch_failed",
                size=len(transactions),
                user_id=self.user_id,
                exc_info=True,
            )
            raise PersistenceError(f"Failed to insert transactions: {e}") from e

        self._commit("insert transactions")
        logger.info("transactions_inserted", count=len(rows))
        return [TransactionRecord.model_validate(r) for r in rows]
