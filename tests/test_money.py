"""Tests for money helpers"""
from decimal import Decimal

from storefront.services.money import (
    compare,
    divide,
    format_money,
    percent,
    round_money,
    to_decimal,
    to_float,
)


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_and_garbage_are_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")

    def test_passthrough(self):
        value = Decimal("1.25")
        assert to_decimal(value) is value


class TestArithmetic:
    def test_round_half_up(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money(2.344) == Decimal("2.34")

    def test_divide_by_zero(self):
        assert divide(10, 0) == Decimal("0")

    def test_percent(self):
        assert percent(200, 15) == Decimal("30")

    def test_compare(self):
        assert compare(8, 10) == -1
        assert compare("10.00", 10) == 0
        assert compare(10.01, 10) == 1

    def test_to_float(self):
        assert to_float(Decimal("8.00")) == 8.0


class TestFormatMoney:
    def test_rupees(self):
        assert format_money(1234.5) == "₹1,234.50"

    def test_other_currency(self):
        assert format_money(3, currency="USD") == "$3.00"

    def test_unknown_currency_code(self):
        assert format_money(3, currency="JPY") == "JPY 3.00"
