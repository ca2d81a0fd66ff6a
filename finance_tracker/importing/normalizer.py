"""
Row normalizer — one raw imported row to one TransactionDraft.

A row has three possible outcomes:
- blank: no description and an empty amount cell; skipped without
  comment
- rejected: something mandatory is missing or unreadable (amount,
  type), or the amount is zero or out of range; counted with a reason
- a draft: description, absolute amount, type, optional date and
  an optional free-text account name for the resolver

No outcome raises. One bad row never stops the batch.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog
from dateutil import parser as date_parser

from finance_tracker.importing.schema import FieldAccessor
from finance_tracker.models.enums import TransactionType
from finance_tracker.money import is_within_range, parse_amount, to_money
from finance_tracker.schemas.importing import RowRejection, TransactionDraft

logger = structlog.get_logger(__name__)

DEFAULT_DESCRIPTION = "Transaction"

# Column widths of the persisted rows.
MAX_DESCRIPTION_LENGTH = 255
MAX_ACCOUNT_NAME_LENGTH = 100

TYPE_ALIASES = {
    "income": TransactionType.INCOME,
    "expense": TransactionType.EXPENSE,
    "expenses": TransactionType.EXPENSE,
}

# Common bank export format, read as local wall-clock time.
LOCAL_TIMESTAMP = re.compile(r"(\d{4}-\d{2}-\d{2})\s(\d{2}:\d{2}:\d{2})")

_WHITESPACE = re.compile(r"\s+")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_type(raw_type: Any, amount: Decimal | None) -> TransactionType | None:
    """
    Resolve income/expense from an explicit type or the amount sign.

    The explicit value is lower-cased with all whitespace removed.
    Anything unrecognized falls back to the sign: zero and positive
    amounts are income, negative amounts are expense. Returns None
    only when there is no usable type and no amount.
    """
    key = _WHITESPACE.sub("", _text(raw_type).lower())
    if key in TYPE_ALIASES:
        return TYPE_ALIASES[key]
    if amount is not None:
        return TransactionType.INCOME if amount >= 0 else TransactionType.EXPENSE
    return None


def parse_date(value: Any) -> datetime | None:
    """
    Parse an imported date cell.

    Native datetimes (spreadsheet cells) pass through. Strings in
    "YYYY-MM-DD HH:MM:SS" form are local time. Anything else goes
    to dateutil; timezone-aware results are converted to local
    time so every stored date is naive local time. Unparseable
    values give None and the row is kept without a date.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        match = LOCAL_TIMESTAMP.fullmatch(text)
        if match:
            try:
                return datetime.fromisoformat(f"{match.group(1)}T{match.group(2)}")
            except ValueError:
                pass
        try:
            parsed = date_parser.parse(text)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _account_name(value: Any) -> str | None:
    name = " ".join(_text(value).split())[:MAX_ACCOUNT_NAME_LENGTH].strip()
    return name or None


def normalize_row(
    row: Mapping[str, Any],
    accessor: FieldAccessor,
    row_number: int,
) -> TransactionDraft | RowRejection | None:
    """
    Normalize one row under the accessor's schema mode.

    Returns a draft, a RowRejection, or None for a blank row.
    """
    raw_amount = accessor.get(row, "amount")
    amount = parse_amount(raw_amount)
    description = _text(accessor.get(row, "description"))

    if not description and not _text(raw_amount):
        return None

    if amount is None:
        return RowRejection(
            row_number=row_number,
            reason=f"unparseable amount {_text(raw_amount)!r}"
            if _text(raw_amount)
            else "missing amount",
        )

    if not is_within_range(amount):
        return RowRejection(row_number=row_number, reason="amount out of range")

    txn_type = normalize_type(accessor.get(row, "type"), amount)
    if txn_type is None:
        return RowRejection(row_number=row_number, reason="undeterminable type")

    amount = to_money(amount)
    if amount == 0:
        return RowRejection(row_number=row_number, reason="zero amount")

    return TransactionDraft(
        row_number=row_number,
        description=(description or DEFAULT_DESCRIPTION)[:MAX_DESCRIPTION_LENGTH],
        amount=abs(amount),
        type=txn_type,
        date=parse_date(accessor.get(row, "date")),
        account_name=_account_name(accessor.get(row, "account")),
    )


@dataclass
class NormalizationResult:
    drafts: list[TransactionDraft] = field(default_factory=list)
    rejected: list[RowRejection] = field(default_factory=list)
    blank_rows: int = 0


def normalize_rows(
    rows: Iterable[Mapping[str, Any] | None],
    accessor: FieldAccessor,
) -> NormalizationResult:
    """
    Normalize every row. Row numbers are 1-based data rows
    (the header is not counted).
    """
    result = NormalizationResult()
    for row_number, row in enumerate(rows, start=1):
        if not row:
            result.blank_rows += 1
            continue

        outcome = normalize_row(row, accessor, row_number)
        if outcome is None:
            result.blank_rows += 1
        elif isinstance(outcome, RowRejection):
            logger.debug(
                "import_row_rejected",
                row_number=row_number,
                reason=outcome.reason,
            )
            result.rejected.append(outcome)
        else:
            result.drafts.append(outcome)
    return result
