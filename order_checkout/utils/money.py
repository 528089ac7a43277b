"""Fixed-point money arithmetic.

Every operation quantizes its result to two decimal places with
ROUND_HALF_UP, so chained calculators accumulate rounding exactly the way
sequential string-decimal arithmetic does. Never aggregate in float.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
DEFAULT_SCALE = 2


def _exponent(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def to_decimal(value: Number) -> Decimal:
    """Convert a money-ish value to Decimal; non-numeric input becomes 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return ZERO
    if isinstance(value, float):
        # str() keeps the shortest repr and avoids binary expansion noise
        value = str(value)
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO


def quantize(value: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    return to_decimal(value).quantize(_exponent(scale), rounding=ROUND_HALF_UP)


def add(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    return quantize(to_decimal(left) + to_decimal(right), scale)


def subtract(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    return quantize(to_decimal(left) - to_decimal(right), scale)


def multiply(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    return quantize(to_decimal(left) * to_decimal(right), scale)


def divide(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    divisor = to_decimal(right)
    if divisor == 0:
        raise ValueError('Divisor cannot be zero')
    return quantize(to_decimal(left) / divisor, scale)


def compare(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> int:
    """Return -1, 0 or 1, comparing both sides at the given scale."""
    a = quantize(left, scale)
    b = quantize(right, scale)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def equals(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> bool:
    return compare(left, right, scale) == 0


def greater_than(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> bool:
    return compare(left, right, scale) == 1


def less_than(left: Number, right: Number, scale: int = DEFAULT_SCALE) -> bool:
    return compare(left, right, scale) == -1


def money_sum(amounts: Iterable[Number], scale: int = DEFAULT_SCALE) -> Decimal:
    """Sum step by step, rounding after each addition."""
    total = quantize(ZERO, scale)
    for amount in amounts:
        total = add(total, amount, scale)
    return total


def percentage(amount: Number, percent: Number, scale: int = DEFAULT_SCALE) -> Decimal:
    """Return percent% of amount (percentage(200, 15) == 30.00)."""
    rate = divide(percent, 100, scale + 2)
    return multiply(amount, rate, scale)


def clamp_non_negative(value: Number) -> Decimal:
    amount = quantize(value)
    return amount if amount > ZERO else ZERO


def to_cents(amount: Number) -> int:
    return int(multiply(amount, 100, 0))


def from_cents(cents: int) -> Decimal:
    return divide(cents, 100)


def format_money(amount: Number, decimals: int = 2, thousands_separator: str = ',') -> str:
    value = quantize(amount, decimals)
    formatted = f"{value:,.{decimals}f}"
    if thousands_separator != ',':
        formatted = formatted.replace(',', thousands_separator)
    return formatted


def resolve_unit_price(sku) -> Decimal:
    """
    Read the unit price of a catalog reference.

    Tries ``market_price`` then ``display_price``; a reference with neither
    accessor (or a None price) prices at zero instead of raising.
    """
    if sku is None:
        return ZERO
    for attr in ('market_price', 'display_price'):
        if hasattr(sku, attr):
            raw = getattr(sku, attr)
            if callable(raw):
                raw = raw()
            if raw is None:
                return ZERO
            return quantize(raw)
    return ZERO
