"""
Monetary helpers.

All invoice amounts are Decimal with two places; floats coming from the
language model are converted through ``str`` so that binary representation
noise (0.1 + 0.2) never reaches a stored amount.
"""

from decimal import ROUND_HALF_UP, Decimal

MONEY_DECIMAL_PLACES = 2
# Largest value a Numeric(10,2) column holds
MAX_AMOUNT = Decimal("99999999.99")
DEFAULT_ROUNDING = ROUND_HALF_UP

CURRENCY_SYMBOLS = {
    "GBP": "£",
    "EUR": "€",
    "USD": "$",
}


def to_decimal(value: int | float | str | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal, decimal_places: int = MONEY_DECIMAL_PLACES) -> Decimal:
    """Quantize a value to ``decimal_places`` using half-up rounding."""
    quantize_str = "0." + "0" * decimal_places
    return value.quantize(Decimal(quantize_str), rounding=DEFAULT_ROUNDING)


def format_money(value: Decimal | None) -> str:
    """Render an amount as a two-place string, e.g. ``Decimal("600") -> "600.00"``."""
    if value is None:
        return "0.00"
    return str(round_money(to_decimal(value)))


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, currency)
