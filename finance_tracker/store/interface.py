"""
Abstract persistence interface.

The hosted data store is an external collaborator. The core only
talks to it through this interface, so services and the import
pipeline can be handed any implementation: the SQLAlchemy store
in production, or a wrapped one in tests.

Every operation is scoped to one user. Implementations raise
PersistenceError when the backend fails; the core does not retry.
"""

from abc import ABC, abstractmethod

from finance_tracker.schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountUpdate,
)
from finance_tracker.schemas.transaction import (
    TransactionCreate,
    TransactionRecord,
)


class LedgerStore(ABC):
    """Accounts and transactions for a single user scope."""

    @abstractmethod
    def fetch_accounts(self) -> list[AccountRecord]:
        """Return all accounts, oldest first."""

    @abstractmethod
    def get_account(self, account_id: str) -> AccountRecord:
        """
        Return one account.

        Raises:
            NotFoundError: If the account is not in this user scope
        """

    @abstractmethod
    def insert_account(self, account: AccountCreate) -> AccountRecord:
        """Insert an account and return it with its assigned id."""

    @abstractmethod
    def update_account(
        self, account_id: str, changes: AccountUpdate
    ) -> AccountRecord:
        """
        Replace an account's name, color and opening balance.

        Raises:
            NotFoundError: If the account is not in this user scope
        """

    @abstractmethod
    def fetch_transactions(self) -> list[TransactionRecord]:
        """Return all transactions, in insertion order."""

    @abstractmethod
    def insert_transactions(
        self, transactions: list[TransactionCreate]
    ) -> list[TransactionRecord]:
        """
        Insert a batch of rows as one unit.

        Either every row is stored or none is. A transfer pair is
        always written through a single call.
        """
