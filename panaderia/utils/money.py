"""
Money unit: conversion between display amounts and integer minor units.

Every total, subtotal, discount and change value in the engine is an ``int``
of cents produced by ``to_cents``. Decimals only appear at the edges
(input parsing and display).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Union

from panaderia.exceptions import InvalidAmountError

CENT = Decimal('0.01')
CENTS_PER_UNIT = 100

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """
    Parse a numeric value into a finite Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal('0.1') and not its
    binary expansion.

    Raises:
        InvalidAmountError: if the value is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(value)

    if isinstance(value, Decimal):
        decimal_value = value
    else:
        try:
            decimal_value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidAmountError(value)

    if not decimal_value.is_finite():
        raise InvalidAmountError(value)
    return decimal_value


def round_to_int(value: Decimal) -> int:
    """Round half-to-even to the nearest integer."""
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_EVEN))


def to_cents(amount: Number) -> int:
    """Convert a display amount (e.g. 25.50) into integer cents (2550)."""
    return round_to_int(to_decimal(amount) * CENTS_PER_UNIT)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back into a display amount with 2 decimals."""
    if isinstance(cents, bool) or not isinstance(cents, int):
        raise InvalidAmountError(cents)
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(CENT)
