"""
Tests for the row normalizer.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from finance_tracker.importing.normalizer import (
    DEFAULT_DESCRIPTION,
    normalize_row,
    normalize_rows,
    normalize_type,
    parse_date,
)
from finance_tracker.importing.schema import FieldAccessor
from finance_tracker.models.enums import TransactionType
from finance_tracker.schemas.importing import RowRejection, TransactionDraft


REPORT_HEADERS = ["account", "category", "currency", "amount", "type", "note", "date"]


def report_accessor():
    return FieldAccessor.for_headers(REPORT_HEADERS)


def generic_accessor(*extra):
    return FieldAccessor.for_headers(["description", "amount", *extra])


class TestNormalizeReportRow:

    def test_report_row_normalizes(self):
        row = {
            "account": "Wallet",
            "category": "Food",
            "currency": "USD",
            "amount": "-12.50",
            "type": "",
            "note": "Lunch",
            "date": "2024-03-01 12:30:00",
        }

        draft = normalize_row(row, report_accessor(), row_number=1)

        assert isinstance(draft, TransactionDraft)
        assert draft.description == "Lunch"
        assert draft.amount == Decimal("12.50")
        assert draft.type == TransactionType.EXPENSE
        assert draft.date == datetime(2024, 3, 1, 12, 30)
        assert draft.date.tzinfo is None
        assert draft.account_name == "Wallet"
        assert draft.account_id is None

    def test_explicit_type_beats_sign(self):
        row = {"note": "Refund", "amount": "-20", "type": "Income", "account": "Card"}
        draft = normalize_row(row, report_accessor(), row_number=1)

        assert draft.type == TransactionType.INCOME
        assert draft.amount == Decimal("20.00")

    def test_expenses_plural_with_spaces(self):
        row = {"note": "Rent", "amount": "900", "type": " Expen ses ", "account": "Bank"}
        draft = normalize_row(row, report_accessor(), row_number=1)

        assert draft.type == TransactionType.EXPENSE

    def test_account_name_whitespace_collapsed(self):
        row = {"note": "Bus", "amount": "-2", "account": "  Travel   Card "}
        draft = normalize_row(row, report_accessor(), row_number=1)

        assert draft.account_name == "Travel Card"


class TestNormalizeGenericRow:

    def test_description_defaults(self):
        row = {"description": "", "amount": "15"}
        draft = normalize_row(row, generic_accessor(), row_number=2)

        assert draft.description == DEFAULT_DESCRIPTION
        assert draft.type == TransactionType.INCOME

    def test_long_description_truncated(self):
        row = {"description": "x" * 300, "amount": "-1"}
        draft = normalize_row(row, generic_accessor(), row_number=1)

        assert len(draft.description) == 255

    def test_generic_ignores_note_column(self):
        accessor = generic_accessor("note")
        row = {"description": "Groceries", "amount": "-40", "note": "ignored"}

        assert normalize_row(row, accessor, row_number=1).description == "Groceries"

    def test_no_account_column_gives_no_account_name(self):
        row = {"description": "Salary", "amount": "2500"}
        assert normalize_row(row, generic_accessor(), row_number=1).account_name is None


class TestRowOutcomes:

    def test_blank_row_is_none(self):
        row = {"description": "  ", "amount": ""}
        assert normalize_row(row, generic_accessor(), row_number=1) is None

    def test_unparseable_amount_rejected(self):
        row = {"description": "Coffee", "amount": "abc"}
        outcome = normalize_row(row, generic_accessor(), row_number=4)

        assert isinstance(outcome, RowRejection)
        assert outcome.row_number == 4
        assert "abc" in outcome.reason

    def test_missing_amount_rejected(self):
        row = {"description": "Coffee", "amount": None}
        outcome = normalize_row(row, generic_accessor(), row_number=1)

        assert outcome.reason == "missing amount"

    @pytest.mark.parametrize("amount", ["0", "0.00", "0.004", "-0.001"])
    def test_zero_amount_rejected(self, amount):
        row = {"description": "Nothing", "amount": amount}
        outcome = normalize_row(row, generic_accessor(), row_number=1)

        assert isinstance(outcome, RowRejection)
        assert outcome.reason == "zero amount"

    @pytest.mark.parametrize("amount", ["1e30", "9" * 29, "-100000000000000000", 1e30])
    def test_out_of_range_amount_rejected(self, amount):
        row = {"description": "Huge", "amount": amount}
        outcome = normalize_row(row, generic_accessor(), row_number=2)

        assert isinstance(outcome, RowRejection)
        assert outcome.reason == "amount out of range"

    def test_garbage_amount_without_description_is_rejected(self):
        row = {"description": "", "amount": "abc"}
        outcome = normalize_row(row, generic_accessor(), row_number=3)

        assert isinstance(outcome, RowRejection)
        assert outcome.reason == "unparseable amount 'abc'"

    def test_amount_rounded_to_cents(self):
        row = {"description": "Fuel", "amount": "-45.678"}
        assert normalize_row(row, generic_accessor(), row_number=1).amount == Decimal("45.68")

    def test_numeric_cell_amount(self):
        row = {"description": "Fuel", "amount": -12.5}
        draft = normalize_row(row, generic_accessor(), row_number=1)

        assert draft.amount == Decimal("12.50")
        assert draft.type == TransactionType.EXPENSE


class TestNormalizeType:

    @pytest.mark.parametrize("raw,expected", [
        ("income", TransactionType.INCOME),
        ("INCOME", TransactionType.INCOME),
        ("expense", TransactionType.EXPENSE),
        ("Expenses", TransactionType.EXPENSE),
    ])
    def test_aliases(self, raw, expected):
        assert normalize_type(raw, Decimal("-1")) == expected

    def test_unknown_falls_back_to_sign(self):
        assert normalize_type("transfer", Decimal("-3")) == TransactionType.EXPENSE
        assert normalize_type(None, Decimal("3")) == TransactionType.INCOME
        assert normalize_type("", Decimal("0")) == TransactionType.INCOME

    def test_nothing_to_go_on(self):
        assert normalize_type("", None) is None


class TestParseDate:

    def test_local_timestamp(self):
        assert parse_date("2024-03-01 12:30:00") == datetime(2024, 3, 1, 12, 30)

    def test_iso_date(self):
        assert parse_date("2024-03-01") == datetime(2024, 3, 1)

    def test_native_values(self):
        assert parse_date(datetime(2024, 1, 2, 3, 4)) == datetime(2024, 1, 2, 3, 4)
        assert parse_date(date(2024, 1, 2)) == datetime(2024, 1, 2)

    def test_aware_value_becomes_local_naive(self):
        aware = datetime(2024, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        parsed = parse_date(aware)

        assert parsed.tzinfo is None
        assert parsed == aware.astimezone().replace(tzinfo=None)

    @pytest.mark.parametrize("value", [None, "", "   ", "garbage", 45000])
    def test_unparseable_is_none(self, value):
        assert parse_date(value) is None


class TestNormalizeRows:

    def test_counts_each_outcome(self):
        rows = [
            {"description": "Coffee", "amount": "-3"},
            {"description": "", "amount": ""},
            None,
            {"description": "Broken", "amount": "??"},
            {"description": "Salary", "amount": "1000"},
        ]

        result = normalize_rows(rows, generic_accessor())

        assert [d.description for d in result.drafts] == ["Coffee", "Salary"]
        assert [d.row_number for d in result.drafts] == [1, 5]
        assert result.blank_rows == 2
        assert [r.row_number for r in result.rejected] == [4]
