"""
Unit tests for the pricing resolver.
"""

import pytest

from panaderia.exceptions import MissingPriceError, ProductNotFoundError
from panaderia.services.pricing_service import resolve_unit_price_cents, unit_price_cents_for


def test_sale_price_wins(session, make_product):
    product = make_product(sale_price='25.00', unit_cost='12.00')
    assert resolve_unit_price_cents(session, product.id) == 2500


def test_unit_cost_is_the_fallback(session, make_product):
    product = make_product(sale_price=None, unit_cost='12.40')
    assert resolve_unit_price_cents(session, product.id) == 1240


def test_missing_price(session, make_product):
    product = make_product(name='Rosquilla', sale_price=None, unit_cost=None)

    with pytest.raises(MissingPriceError) as exc_info:
        unit_price_cents_for(product)
    assert 'Rosquilla' in exc_info.value.message


def test_unknown_product(session):
    with pytest.raises(ProductNotFoundError) as exc_info:
        resolve_unit_price_cents(session, 9999)
    assert exc_info.value.status_code == 404
