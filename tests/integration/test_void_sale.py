"""
Integration tests for voiding a sale (stock reversal).
"""

import json
import pytest
from datetime import datetime

from panaderia.exceptions import CorruptRecordError, SaleNotFoundError
from panaderia.models import Sale, SaleKind, SaleLine, SalePayment, SaleStatus
from panaderia.records import CartLine, PaymentLine
from panaderia.services.sale_delete_service import void_sale
from panaderia.services.sales_service import settle_sale


def test_settle_then_void_restores_stock(session, make_product, policy, stock_of):
    bread = make_product(name='Pan', qty=10, sale_price='25.00')
    cake = make_product(name='Pastel', qty=4, sale_price='100.00')

    result = settle_sale(session, [CartLine(bread.id, 3), CartLine(cake.id, 2)],
                         [PaymentLine('NIO', '275')], 'cajero-1', policy=policy)
    assert stock_of(bread.id) == 7
    assert stock_of(cake.id) == 2

    voided = void_sale(session, result.sale.id)

    assert voided.id == result.sale.id
    assert voided.total_cents == 27500
    assert stock_of(bread.id) == 10
    assert stock_of(cake.id) == 4


def test_void_removes_sale_and_children(session, product, policy):
    result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '25')],
                         'cajero-1', policy=policy)

    void_sale(session, result.sale.id)

    assert session.get(Sale, result.sale.id) is None
    assert session.query(SaleLine).count() == 0
    assert session.query(SalePayment).count() == 0


def test_void_unknown_sale(session):
    with pytest.raises(SaleNotFoundError) as exc_info:
        void_sale(session, 777)
    assert exc_info.value.status_code == 404


def test_void_twice_fails(session, product, policy, stock_of):
    result = settle_sale(session, [CartLine(product.id, 2)], [PaymentLine('NIO', '50')],
                         'cajero-1', policy=policy)
    void_sale(session, result.sale.id)

    with pytest.raises(SaleNotFoundError):
        void_sale(session, result.sale.id)
    assert stock_of(product.id) == 10


def test_void_legacy_sale_uses_json_items(session, make_product, stock_of):
    product = make_product(qty=5, sale_price='10.00')
    sale = Sale(
        created_at=datetime(2023, 12, 24, 9, 30),
        total_cents=2000,
        discount_cents=0,
        status=SaleStatus.COMPLETE,
        kind=SaleKind.DIRECT,
        legacy_items=json.dumps([{'productoId': product.id, 'cantidad': 2, 'precioUnitario': 10}]),
    )
    session.add(sale)
    session.commit()

    void_sale(session, sale.id)

    assert stock_of(product.id) == 7


def _legacy_sale(session, legacy_items):
    sale = Sale(
        created_at=datetime(2023, 12, 24, 9, 30),
        total_cents=2000,
        discount_cents=0,
        status=SaleStatus.COMPLETE,
        kind=SaleKind.DIRECT,
        legacy_items=legacy_items,
    )
    session.add(sale)
    session.commit()
    return sale.id


def test_void_refuses_legacy_items_without_price(session, make_product, stock_of):
    product = make_product(qty=5, sale_price='10.00')
    sale_id = _legacy_sale(session, json.dumps([{'productoId': product.id, 'cantidad': 2}]))

    with pytest.raises(CorruptRecordError):
        void_sale(session, sale_id)

    assert session.get(Sale, sale_id) is not None
    assert stock_of(product.id) == 5


@pytest.mark.parametrize('legacy_items', ['[{"productoId": ', '[]', '{"productoId": 1}'])
def test_void_refuses_unparseable_legacy_items(session, legacy_items):
    sale_id = _legacy_sale(session, legacy_items)

    with pytest.raises(CorruptRecordError):
        void_sale(session, sale_id)

    assert session.get(Sale, sale_id) is not None
