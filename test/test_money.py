from decimal import Decimal

import pytest

from invoiceai.utils.money import currency_symbol, format_money, round_money, to_decimal


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("2.005"), Decimal("2.01")),
        (Decimal("2.004"), Decimal("2.00")),
        (Decimal("-1.005"), Decimal("-1.01")),
    ],
)
def test_round_money_half_up(value, expected):
    """Test half-up rounding"""
    assert round_money(value) == expected


def test_to_decimal_avoids_float_noise():
    """Test float conversion"""
    assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")


def test_format_money():
    """Test money formatting"""
    assert format_money(Decimal("600")) == "600.00"
    assert format_money(None) == "0.00"


def test_currency_symbol():
    """Test currency symbols"""
    assert currency_symbol("GBP") == "£"
    assert currency_symbol("CHF") == "CHF"
