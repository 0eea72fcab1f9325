"""Decimal helpers shared by every calculator.

Values stay unrounded inside a computation and are quantized only when a
function hands its result back.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
FOUR_PLACES = Decimal("0.0001")
WHOLE_DOLLARS = Decimal("1")
ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """Convert an input value to Decimal.

    Floats go through str() so 0.07 becomes Decimal("0.07"), not its binary expansion.
    Raises InvalidOperation / TypeError for values that are not numbers.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        return Decimal(value)
    raise TypeError(f"Expected a number, got {type(value).__name__}")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    return value.quantize(FOUR_PLACES, ROUND_HALF_UP)


def round_dollars(value: Decimal) -> Decimal:
    return value.quantize(WHOLE_DOLLARS, ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    """$1,234.56 (negative as -$1,234.56)."""
    try:
        amount = round_money(value)
    except InvalidOperation:
        return str(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_percentage(rate: Decimal) -> str:
    return f"{rate * 100:.2f}%"
