"""
Account resolver — free-text account names to account ids.

Names are matched case-insensitively with surrounding and
repeated whitespace ignored. Unknown names become new accounts
(opening balance 0, next palette color) and are registered in
the lookup immediately, so one import never creates the same
account twice.

Creations happen one at a time through the store and each
returns before the next draft is looked at, so no draft is ever
finalized with the id of an account that does not exist yet.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from finance_tracker.schemas.account import AccountCreate, AccountRecord
from finance_tracker.schemas.importing import TransactionDraft
from finance_tracker.schemas.transaction import TransactionCreate
from finance_tracker.store.interface import LedgerStore

logger = structlog.get_logger(__name__)

ACCOUNT_COLOR_PALETTE = (
    "#10b981",
    "#ef4444",
    "#f59e0b",
    "#3b82f6",
    "#8b5cf6",
)


def account_name_key(name: str) -> str:
    """Dedup key: "  Cash " and "cash" are the same account."""
    return " ".join(name.split()).casefold()


def choose_default_account(
    accounts: Sequence[AccountRecord],
    selected_account_ids: Iterable[str] = (),
) -> AccountRecord | None:
    """
    Fallback account for rows that name no account.

    The selected account when exactly one is selected, otherwise
    the first known account, otherwise None.
    """
    selected_ids = list(dict.fromkeys(selected_account_ids))
    if len(selected_ids) == 1:
        for account in accounts:
            if account.id == selected_ids[0]:
                return account
    return accounts[0] if accounts else None


@dataclass
class ResolutionResult:
    transactions: list[TransactionCreate] = field(default_factory=list)
    unresolved: list[TransactionDraft] = field(default_factory=list)
    created_accounts: list[AccountRecord] = field(default_factory=list)


class AccountResolver:

    def __init__(
        self,
        store: LedgerStore,
        accounts: Sequence[AccountRecord],
        selected_account_ids: Iterable[str] = (),
        palette: Sequence[str] = ACCOUNT_COLOR_PALETTE,
    ):
        self.store = store
        self.palette = tuple(palette)
        self.default_account = choose_default_account(accounts, selected_account_ids)
        self._ids_by_name: dict[str, str] = {}
        for account in accounts:
            self._ids_by_name.setdefault(account_name_key(account.name), account.id)
        self._color_index = len(accounts)

    def _next_color(self) -> str:
        color = self.palette[self._color_index % len(self.palette)]
        self._color_index += 1
        return color

    def _create_account(self, name: str) -> AccountRecord:
        account = self.store.insert_account(AccountCreate(
            name=name,
            color=self._next_color(),
            opening_balance=Decimal("0"),
        ))
        self._ids_by_name[account_name_key(name)] = account.id
        logger.info("import_account_created", account_id=account.id, name=name)
        return account

    def resolve_one(
        self, draft: TransactionDraft, created: list[AccountRecord]
    ) -> str | None:
        if draft.account_id:
            return draft.account_id

        name = " ".join((draft.account_name or "").split())
        if name:
            account_id = self._ids_by_name.get(account_name_key(name))
            if account_id is None:
                account = self._create_account(name)
                created.append(account)
                account_id = account.id
            return account_id

        if self.default_account is not None:
            return self.default_account.id
        return None

    def resolve(self, drafts: Iterable[TransactionDraft]) -> ResolutionResult:
        """
        Turn drafts into insertable rows.

        Drafts with no account name and no default account end up in
        `unresolved`. Store failures during account creation propagate
        as PersistenceError; accounts created before the failure stay.
        """
        result = ResolutionResult()
        for draft in drafts:
            account_id = self.resolve_one(draft, result.created_accounts)
            if not account_id:
                result.unresolved.append(draft)
                continue
            result.transactions.append(TransactionCreate(
                account_id=account_id,
                description=draft.description,
                amount=draft.amount,
                type=draft.type,
                date=draft.date,
            ))
        return result
