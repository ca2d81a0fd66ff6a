"""
Ledger service — balances, transfer pairs and reports.

This service enforces the fundamental rules:
1. Every stored row is a signed delta against exactly one account
   (income adds, expense subtracts)
2. A transfer is never a single row; it becomes an expense on the
   source and an income on the destination
3. Balances are never stored. They are always derived from the
   opening balance plus the rows

Everything here is a pure function of its inputs. User-facing
validation happens earlier, in the form services and the import
pipeline; a broken precondition here is a programming error and
raises ContractViolation.
"""

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

import structlog

from finance_tracker.errors import ContractViolation
from finance_tracker.models.enums import TransactionType
from finance_tracker.schemas.transaction import TransactionCreate, TransferRequest

logger = structlog.get_logger(__name__)

# The income half of a transfer pair is "<base id>-to".
TRANSFER_SUFFIX = "-to"

PERCENT = Decimal("0.1")


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ContractViolation(message)


def _signed_amount(txn) -> Decimal:
    _require(
        txn.type != TransactionType.TRANSFER,
        f"transaction {getattr(txn, 'id', None)} has type transfer; "
        "transfers must be stored as an expense/income pair",
    )
    _require(
        txn.amount > 0,
        f"transaction {getattr(txn, 'id', None)} has non-positive amount {txn.amount}",
    )
    if txn.type == TransactionType.INCOME:
        return txn.amount
    return -txn.amount


def compute_balances(accounts: Iterable, transactions: Iterable) -> dict[str, Decimal]:
    """
    Running balance for every account.

    balance(A) = opening_balance(A)
                 + sum(income on A) - sum(expense on A)

    The fold is a plain sum, so the result does not depend on the
    order of the transactions. Rows that reference an account not
    in `accounts` are ignored.
    """
    balances = {a.id: Decimal(a.opening_balance or 0) for a in accounts}
    for txn in transactions:
        delta = _signed_amount(txn)
        if txn.account_id in balances:
            balances[txn.account_id] += delta
    return balances


def transfer_partner_id(transaction_id: str) -> str:
    """
    Id of the other half of a transfer pair.

    transfer_partner_id("abc") -> "abc-to"
    transfer_partner_id("abc-to") -> "abc"
    """
    if transaction_id.endswith(TRANSFER_SUFFIX):
        return transaction_id[: -len(TRANSFER_SUFFIX)]
    return f"{transaction_id}{TRANSFER_SUFFIX}"


@dataclass(frozen=True)
class LedgerSummary:
    """Totals over a set of accounts."""
    income: Decimal
    expenses: Decimal
    opening_balance: Decimal

    @property
    def flow(self) -> Decimal:
        return self.income - self.expenses

    @property
    def net_balance(self) -> Decimal:
        return self.opening_balance + self.income - self.expenses


@dataclass(frozen=True)
class ExpenseCategory:
    name: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class ExpenseBreakdown:
    total: Decimal
    categories: list[ExpenseCategory] = field(default_factory=list)


class LedgerService:
    """
    Pure ledger computations.

    id_factory produces the base id of a transfer pair. Tests pass
    a deterministic one; the default is a random UUID.
    """

    def __init__(self, id_factory: Callable[[], str] | None = None):
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def balances(self, accounts: Iterable, transactions: Iterable) -> dict[str, Decimal]:
        return compute_balances(accounts, transactions)

    def balance_for(self, account, transactions: Iterable) -> Decimal:
        """Balance of a single account."""
        return compute_balances([account], transactions)[account.id]

    def build_transfer_pair(
        self,
        request: TransferRequest,
        from_name: str | None = None,
        to_name: str | None = None,
        base_id: str | None = None,
    ) -> tuple[TransactionCreate, TransactionCreate]:
        """
        Decompose a transfer into the two rows that are stored.

        Accounting:
            EXPENSE on the source account       id = <base>
            INCOME  on the destination account  id = <base>-to

        Both rows carry the same amount, date, to_account_id and
        transfer_group_id (= <base>), so either row finds its
        partner without a side table.
        """
        _require(
            request.account_id != request.to_account_id,
            "transfer source and destination must differ",
        )
        _require(request.amount > 0, "transfer amount must be positive")

        note = f": {request.description.strip()}" if (request.description or "").strip() else ""
        base = base_id or self.id_factory()
        _require(
            not base.endswith(TRANSFER_SUFFIX),
            f"transfer base id must not end with {TRANSFER_SUFFIX!r}",
        )

        expense = TransactionCreate(
            id=base,
            account_id=request.account_id,
            description=f"Transfer to {to_name or 'account'}{note}",
            amount=request.amount,
            type=TransactionType.EXPENSE,
            date=request.date,
            to_account_id=request.to_account_id,
            transfer_group_id=base,
        )
        income = TransactionCreate(
            id=transfer_partner_id(base),
            account_id=request.to_account_id,
            description=f"Transfer from {from_name or 'account'}{note}",
            amount=request.amount,
            type=TransactionType.INCOME,
            date=request.date,
            to_account_id=request.to_account_id,
            transfer_group_id=base,
        )
        logger.debug(
            "transfer_pair_built",
            transfer_group_id=base,
            source=request.account_id,
            destination=request.to_account_id,
        )
        return expense, income

    def summarize(
        self,
        accounts: Iterable,
        transactions: Iterable,
        account_ids: Iterable[str] | None = None,
    ) -> LedgerSummary:
        """
        Income, expense and opening-balance totals.

        With account_ids, only those accounts and their rows count;
        otherwise every account does.
        """
        accounts = list(accounts)
        wanted = set(account_ids) if account_ids is not None else {a.id for a in accounts}

        income = Decimal("0")
        expenses = Decimal("0")
        for txn in transactions:
            if txn.account_id not in wanted:
                continue
            delta = _signed_amount(txn)
            if delta > 0:
                income += delta
            else:
                expenses -= delta

        opening = sum(
            (Decimal(a.opening_balance or 0) for a in accounts if a.id in wanted),
            Decimal("0"),
        )
        return LedgerSummary(income=income, expenses=expenses, opening_balance=opening)

    def expense_breakdown(
        self,
        transactions: Iterable,
        since: datetime | None = None,
    ) -> ExpenseBreakdown:
        """
        Expenses grouped by the first word of their description.

        With `since`, only dated expenses on or after it count.
        Categories keep the order in which they first appear.
        """
        totals: dict[str, Decimal] = {}
        for txn in transactions:
            if txn.type != TransactionType.EXPENSE:
                continue
            if since is not None and (txn.date is None or txn.date < since):
                continue
            words = txn.description.split()
            name = words[0] if words else "Other"
            totals[name] = totals.get(name, Decimal("0")) + txn.amount

        total = sum(totals.values(), Decimal("0"))
        categories = [
            ExpenseCategory(
                name=name,
                amount=amount,
                percentage=(amount / total * 100).quantize(PERCENT),
            )
            for name, amount in totals.items()
        ]
        return ExpenseBreakdown(total=total, categories=categories)
