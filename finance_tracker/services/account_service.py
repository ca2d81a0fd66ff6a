"""
Account service — the user's account list and selection.

This service keeps an in-memory copy of the user's accounts in
front of the store. Creation and editing are validated here
(blank names, opening-balance text) before anything reaches the
store. Edits are applied to the local list first and rolled back
to the captured snapshot if the store rejects them.
"""

from collections.abc import Iterable

import structlog

from finance_tracker.config import get_settings
from finance_tracker.errors import InvalidInputError, PersistenceError
from finance_tracker.importing.resolver import (
    ACCOUNT_COLOR_PALETTE,
    account_name_key,
    choose_default_account,
)
from finance_tracker.money import validate_opening_balance_input
from finance_tracker.schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountUpdate,
)
from finance_tracker.store.interface import LedgerStore

logger = structlog.get_logger(__name__)


class AccountService:

    def __init__(self, store: LedgerStore, default_color: str | None = None):
        self.store = store
        self.default_color = default_color or get_settings().DEFAULT_ACCOUNT_COLOR
        self.accounts: list[AccountRecord] = []
        self.selected_account_ids: list[str] = []

    def refresh(self) -> list[AccountRecord]:
        """Reload accounts from the store, keeping still-valid selections."""
        self.accounts = self.store.fetch_accounts()
        known = {a.id for a in self.accounts}
        self.selected_account_ids = [
            i for i in self.selected_account_ids if i in known
        ]
        return self.accounts

    def get_account(self, account_id: str) -> AccountRecord:
        for account in self.accounts:
            if account.id == account_id:
                return account
        raise InvalidInputError(f"Account {account_id} not found")

    def _check_name_free(self, name: str, ignore_id: str | None = None) -> None:
        key = account_name_key(name)
        for account in self.accounts:
            if account.id != ignore_id and account_name_key(account.name) == key:
                raise InvalidInputError(
                    f"An account named '{account.name}' already exists"
                )

    def create_account(
        self,
        name: str,
        opening_balance: str = "0",
        color: str | None = None,
    ) -> AccountRecord:
        """
        Create an account from form input and select it.

        Raises InvalidInputError for a blank or duplicate name and
        for opening-balance text the validator rejects.
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Account name is required")

        balance = validate_opening_balance_input(str(opening_balance))
        if not balance.is_valid:
            raise InvalidInputError(balance.error)

        self._check_name_free(name)

        if not color:
            color = ACCOUNT_COLOR_PALETTE[len(self.accounts) % len(ACCOUNT_COLOR_PALETTE)]

        account = self.store.insert_account(AccountCreate(
            name=name,
            color=color,
            opening_balance=balance.value,
        ))
        self.accounts.append(account)
        self.selected_account_ids.append(account.id)
        logger.info("account_created", account_id=account.id, name=account.name)
        return account

    def update_account(
        self,
        account_id: str,
        name: str,
        opening_balance: str,
        color: str | None = None,
    ) -> AccountRecord:
        """
        Edit an account's name, color and opening balance.

        Without a color the account keeps its current one.

        The change is applied to the local list before the store
        call. If the store fails, the list is restored from the
        snapshot taken before the change and the error propagates.
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Name cannot be empty")

        balance = validate_opening_balance_input(str(opening_balance))
        if not balance.is_valid:
            raise InvalidInputError(balance.error or "Invalid opening balance")

        current = self.get_account(account_id)
        self._check_name_free(name, ignore_id=account_id)

        changes = AccountUpdate(
            name=name,
            color=color or current.color or self.default_color,
            opening_balance=balance.value,
        )

        snapshot = list(self.accounts)
        index = self.accounts.index(current)
        self.accounts[index] = AccountRecord(id=account_id, **changes.model_dump())

        try:
            saved = self.store.update_account(account_id, changes)
        except PersistenceError:
            self.accounts = snapshot
            logger.warning("account_update_rolled_back", account_id=account_id)
            raise

        self.accounts[index] = saved
        logger.info("account_updated", account_id=account_id)
        return saved

    # --- Selection ---

    def select_accounts(self, account_ids: Iterable[str]) -> list[AccountRecord]:
        account_ids = list(dict.fromkeys(account_ids))
        for account_id in account_ids:
            self.get_account(account_id)
        self.selected_account_ids = account_ids
        return self.selected_accounts

    def select_all(self) -> list[AccountRecord]:
        return self.select_accounts(a.id for a in self.accounts)

    @property
    def selected_accounts(self) -> list[AccountRecord]:
        selected = set(self.selected_account_ids)
        return [a for a in self.accounts if a.id in selected]

    def default_import_account(self) -> AccountRecord | None:
        """Account that receives imported rows naming no account."""
        return choose_default_account(self.accounts, self.selected_account_ids)
