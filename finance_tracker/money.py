"""
Money and amount utilities.

All amounts are decimal.Decimal. Floats never reach the ledger:
numbers coming from spreadsheets are converted through str() so
that 12.5 becomes Decimal("12.5"), not its binary approximation.

Two kinds of input are handled here:
- form input typed by a user (opening balance, transaction amount),
  validated strictly and reported back as an AmountValidation
- imported cell values, parsed leniently by parse_amount, which
  returns None instead of raising because an unparseable cell is
  an expected per-row condition
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENTS = Decimal("0.01")

# Largest magnitude a Numeric(19, 2) column holds.
MAX_AMOUNT = Decimal("99999999999999999.99")

# Optional leading minus, then an integer or a decimal with 1-2
# fractional digits. "12.", "1e3" and "12.345" are all rejected.
OPENING_BALANCE_PATTERN = re.compile(r"-?(?:\d+|\d*\.\d{1,2})")

# Thousands separators and any whitespace, including the
# non-breaking spaces some bank exports use.
_AMOUNT_NOISE = re.compile(r"[,\s]")
_CURRENCY_SYMBOLS = "$€£₹¥"


@dataclass(frozen=True)
class AmountValidation:
    """Outcome of validating user-entered amount text."""
    is_valid: bool
    error: str | None = None
    value: Decimal | None = None


def is_within_range(number: Decimal) -> bool:
    """True for finite amounts the ledger columns can store."""
    return number.is_finite() and abs(number) <= MAX_AMOUNT


def to_money(value: Decimal | int | float | str) -> Decimal:
    """
    Round to exactly two decimal places, half away from zero.

    Raises InvalidOperation when the value is not a finite
    amount within MAX_AMOUNT.
    """
    if isinstance(value, float):
        value = str(value)
    number = Decimal(value)
    if not is_within_range(number):
        raise InvalidOperation(f"amount {value!r} is out of range")
    return number.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_opening_balance_input(raw: str) -> AmountValidation:
    """
    Validate opening-balance text from the account forms.

    Both account creation and account editing go through this
    function so they reject exactly the same inputs.

    Examples:
        validate_opening_balance_input("-5") -> valid, Decimal("-5.00")
        validate_opening_balance_input("12.345") -> invalid
        validate_opening_balance_input("  ") -> "Opening balance is required"
    """
    trimmed = (raw or "").strip()

    if not trimmed:
        return AmountValidation(
            is_valid=False, error="Opening balance is required"
        )

    if not OPENING_BALANCE_PATTERN.fullmatch(trimmed):
        return AmountValidation(
            is_valid=False, error="Use a valid number with up to 2 decimals"
        )

    if not is_within_range(Decimal(trimmed)):
        return AmountValidation(
            is_valid=False, error="Amount is out of range"
        )

    value = to_money(trimmed)

    return AmountValidation(is_valid=True, value=value)


def format_opening_balance_for_display(value: Any) -> Any:
    """
    Render a number, or numeric string, with exactly two decimals.

    Non-numeric input is returned unchanged so the caller can
    always render something.
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float, Decimal)):
        number = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    else:
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return value

    if not is_within_range(number):
        return value

    return format(to_money(number), "f")


def parse_amount(value: Any) -> Decimal | None:
    """
    Parse an imported amount cell.

    Strips thousands separators, whitespace and a leading currency
    symbol. Returns None for missing, blank, non-numeric or
    non-finite values. The sign is preserved.

    Examples:
        parse_amount("1,234.50") -> Decimal("1234.50")
        parse_amount(" -12.5 ") -> Decimal("-12.5")
        parse_amount("$45.99") -> Decimal("45.99")
        parse_amount("n/a") -> None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        cleaned = _AMOUNT_NOISE.sub("", str(value))
        negative = cleaned.startswith("-")
        if negative:
            cleaned = cleaned[1:]
        cleaned = cleaned.lstrip(_CURRENCY_SYMBOLS)
        if not cleaned:
            return None
        try:
            number = Decimal(cleaned)
        except InvalidOperation:
            return None
        if negative:
            number = -number

    if not number.is_finite():
        return None
    return number


def validate_amount_input(raw: Any) -> AmountValidation:
    """
    Validate a transaction amount entered in a form.

    Accepts text or a number. The amount must be strictly positive;
    direction is carried by the transaction type, never by the sign.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return AmountValidation(is_valid=False, error="Amount is required")

    amount = parse_amount(raw)
    if amount is None:
        return AmountValidation(is_valid=False, error="Enter a valid amount")

    if not is_within_range(amount):
        return AmountValidation(is_valid=False, error="Amount is out of range")

    amount = to_money(amount)
    if amount <= 0:
        return AmountValidation(
            is_valid=False, error="Amount must be greater than zero"
        )

    return AmountValidation(is_valid=True, value=amount)
