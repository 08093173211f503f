"""
Unit tests for the money unit (integer cents).
"""

import pytest
from decimal import Decimal

from panaderia.exceptions import InvalidAmountError
from panaderia.utils.money import from_cents, round_to_int, to_cents, to_decimal


class TestToCents:
    """Tests for display amount -> cents."""

    def test_string_amount(self):
        assert to_cents('25.00') == 2500
        assert to_cents('0.05') == 5

    def test_float_goes_through_str(self):
        # 0.1 + 0.2 style drift must not leak into cents
        assert to_cents(0.1) == 10
        assert to_cents(19.99) == 1999

    def test_int_and_decimal(self):
        assert to_cents(75) == 7500
        assert to_cents(Decimal('36.62')) == 3662

    def test_rounds_half_to_even(self):
        assert to_cents(Decimal('0.125')) == 12
        assert to_cents(Decimal('0.135')) == 14

    @pytest.mark.parametrize('value', [float('nan'), float('inf'), 'Infinity', 'abc', '', None, True])
    def test_rejects_non_finite_or_malformed(self, value):
        with pytest.raises(InvalidAmountError):
            to_cents(value)


class TestFromCents:
    """Tests for cents -> display amount."""

    def test_two_decimals(self):
        assert from_cents(2550) == Decimal('25.50')
        assert str(from_cents(7500)) == '75.00'

    def test_negative(self):
        assert from_cents(-5) == Decimal('-0.05')

    def test_rejects_non_integer(self):
        with pytest.raises(InvalidAmountError):
            from_cents(1.5)
        with pytest.raises(InvalidAmountError):
            from_cents(False)


def test_repeated_additions_do_not_drift():
    total = sum(to_cents('0.10') for _ in range(1000))
    assert total == 10000
    assert from_cents(total) == Decimal('100.00')


def test_round_to_int_half_even():
    assert round_to_int(Decimal('2.5')) == 2
    assert round_to_int(Decimal('3.5')) == 4
    assert round_to_int(Decimal('-0.5')) == 0


def test_to_decimal_keeps_precision():
    assert to_decimal('36.6245') == Decimal('36.6245')
