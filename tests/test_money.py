"""
Tests for money and amount utilities.
"""

from decimal import Decimal, InvalidOperation

import pytest

from finance_tracker.money import (
    MAX_AMOUNT,
    format_opening_balance_for_display,
    is_within_range,
    parse_amount,
    to_money,
    validate_amount_input,
    validate_opening_balance_input,
)


class TestValidateOpeningBalanceInput:

    def test_negative_integer_is_valid(self):
        result = validate_opening_balance_input("-5")
        assert result.is_valid is True
        assert result.value == Decimal("-5")
        assert result.error is None

    def test_three_decimals_rejected(self):
        result = validate_opening_balance_input("12.345")
        assert result.is_valid is False
        assert result.error == "Use a valid number with up to 2 decimals"

    @pytest.mark.parametrize("raw", ["", "   ", "\t"])
    def test_blank_is_required(self, raw):
        result = validate_opening_balance_input(raw)
        assert result.is_valid is False
        assert result.error == "Opening balance is required"

    @pytest.mark.parametrize("raw", ["abc", "12.", "1e3", "--5", "+5", "1,000", "$5"])
    def test_malformed_rejected(self, raw):
        assert validate_opening_balance_input(raw).is_valid is False

    @pytest.mark.parametrize("raw,expected", [
        ("0", Decimal("0.00")),
        ("100", Decimal("100.00")),
        ("12.5", Decimal("12.50")),
        (".75", Decimal("0.75")),
        ("-.5", Decimal("-0.50")),
        ("  42.10  ", Decimal("42.10")),
    ])
    def test_valid_values_rounded_to_cents(self, raw, expected):
        result = validate_opening_balance_input(raw)
        assert result.is_valid is True
        assert result.value == expected
        assert result.value.as_tuple().exponent == -2


class TestFormatOpeningBalanceForDisplay:

    def test_formats_numbers(self):
        assert format_opening_balance_for_display(5) == "5.00"
        assert format_opening_balance_for_display(Decimal("-12.5")) == "-12.50"
        assert format_opening_balance_for_display(0.1) == "0.10"

    def test_formats_numeric_strings(self):
        assert format_opening_balance_for_display("7.1") == "7.10"

    def test_rounds_half_away_from_zero(self):
        assert format_opening_balance_for_display(Decimal("2.345")) == "2.35"
        assert format_opening_balance_for_display(Decimal("-2.345")) == "-2.35"

    def test_non_numeric_passes_through(self):
        assert format_opening_balance_for_display("n/a") == "n/a"
        assert format_opening_balance_for_display(None) is None

    @pytest.mark.parametrize("value", [
        0, 5, -5, 12.5, 1234567.891, Decimal("-0.004"), "99.999", "-3",
    ])
    def test_round_trip_through_validator(self, value):
        """Anything the display formatter produces, the validator accepts."""
        text = format_opening_balance_for_display(value)
        result = validate_opening_balance_input(text)

        assert result.is_valid is True
        assert result.value == Decimal(text)
        assert result.value == to_money(value)


class TestParseAmount:

    def test_strips_thousands_separators_and_whitespace(self):
        assert parse_amount(" 1,234.50 ") == Decimal("1234.50")

    def test_keeps_sign(self):
        assert parse_amount("-12.50") == Decimal("-12.50")

    def test_strips_currency_symbol(self):
        assert parse_amount("$45.99") == Decimal("45.99")
        assert parse_amount("-€3") == Decimal("-3")

    def test_numbers_pass_through(self):
        assert parse_amount(12) == Decimal("12")
        assert parse_amount(12.5) == Decimal("12.5")

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "NaN", "inf", True, float("nan")])
    def test_unparseable_returns_none(self, value):
        assert parse_amount(value) is None


class TestValidateAmountInput:

    def test_positive_amount_valid(self):
        result = validate_amount_input("19.999")
        assert result.is_valid is True
        assert result.value == Decimal("20.00")

    def test_required(self):
        assert validate_amount_input("").error == "Amount is required"

    def test_non_numeric(self):
        assert validate_amount_input("ten").error == "Enter a valid amount"

    @pytest.mark.parametrize("raw", ["0", "-5", "0.001"])
    def test_non_positive_rejected(self, raw):
        result = validate_amount_input(raw)
        assert result.is_valid is False
        assert result.error == "Amount must be greater than zero"


class TestAmountRange:

    def test_bounds(self):
        assert is_within_range(MAX_AMOUNT) is True
        assert is_within_range(-MAX_AMOUNT) is True
        assert is_within_range(MAX_AMOUNT + Decimal("0.01")) is False
        assert is_within_range(Decimal("1e30")) is False

    @pytest.mark.parametrize("value", ["1e30", Decimal("1e30"), "9" * 29, 1e30])
    def test_to_money_rejects_huge_values(self, value):
        with pytest.raises(InvalidOperation):
            to_money(value)

    def test_largest_amount_still_rounds(self):
        assert to_money("99999999999999999.985") == MAX_AMOUNT

    @pytest.mark.parametrize("raw", ["1e30", "9" * 29, 1e30, "100000000000000000"])
    def test_amount_input_out_of_range(self, raw):
        result = validate_amount_input(raw)
        assert result.is_valid is False
        assert result.error == "Amount is out of range"

    def test_opening_balance_out_of_range(self):
        result = validate_opening_balance_input("-" + "9" * 29)
        assert result.is_valid is False
        assert result.error == "Amount is out of range"

    @pytest.mark.parametrize("value", [1e30, "1e30", Decimal("9" * 29)])
    def test_display_passes_huge_values_through(self, value):
        assert format_opening_balance_for_display(value) == value

    def test_parse_amount_keeps_huge_values(self):
        assert parse_amount("1e30") == Decimal("1e30")
