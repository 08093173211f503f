"""
Integration tests for historical queries over sales and orders.
"""

import json
import pytest
from datetime import date, datetime

from panaderia.exceptions import BusinessLogicError, OrderNotFoundError, SaleNotFoundError
from panaderia.models import Order, OrderStatus, Sale, SaleKind, SaleLine, SaleStatus
from panaderia.services.history_service import get_order, get_sale, list_orders, list_sales


def _add_sale(session, product, created_at, qty=1):
    sale = Sale(created_at=created_at, total_cents=2500 * qty, discount_cents=0,
                user_id='cajero-1', status=SaleStatus.COMPLETE, kind=SaleKind.DIRECT)
    sale.lines.append(SaleLine(product_id=product.id, qty=qty, unit_price_cents=2500,
                               subtotal_cents=2500 * qty))
    session.add(sale)
    session.commit()
    return sale.id


def _add_order(session, created_at, status=OrderStatus.PENDING):
    order = Order(customer_name='Ana', delivery_date=date(2024, 6, 1), estimated_total_cents=1000,
                  status=status.value, created_at=created_at)
    session.add(order)
    session.commit()
    return order.id


class TestListSales:

    def test_inclusive_day_bounds(self, session, product):
        first = _add_sale(session, product, datetime(2024, 3, 1, 0, 0))
        last = _add_sale(session, product, datetime(2024, 3, 2, 23, 59, 59))
        _add_sale(session, product, datetime(2024, 3, 3, 0, 0, 1))
        _add_sale(session, product, datetime(2024, 2, 29, 23, 59))

        sales = list_sales(session, '2024-03-01', '2024-03-02')

        assert [sale.id for sale in sales] == [last, first]

    def test_date_objects_and_open_ranges(self, session, product):
        old = _add_sale(session, product, datetime(2023, 1, 1, 12, 0))
        new = _add_sale(session, product, datetime(2024, 1, 1, 12, 0))

        assert [sale.id for sale in list_sales(session, date_from=date(2023, 6, 1))] == [new]
        assert [sale.id for sale in list_sales(session, date_to=date(2023, 6, 1))] == [old]
        assert len(list_sales(session)) == 2

    def test_from_after_to_is_rejected(self, session):
        with pytest.raises(BusinessLogicError):
            list_sales(session, '2024-03-05', '2024-03-01')

    def test_unparseable_date(self, session):
        with pytest.raises(BusinessLogicError):
            list_sales(session, 'ayer')

    def test_list_reconstructs_items(self, session, product):
        _add_sale(session, product, datetime(2024, 3, 1, 9, 0), qty=3)

        [sale] = list_sales(session)

        assert sale.items[0].qty == 3
        assert sale.total_cents == sale.gross_cents == 7500

    def test_legacy_sale_with_bad_blob_still_listed(self, session):
        sale = Sale(created_at=datetime(2024, 3, 1, 9, 0), total_cents=100, discount_cents=0,
                    status=SaleStatus.COMPLETE, kind=SaleKind.DIRECT,
                    legacy_items='[{"productoId": ', legacy_payments=json.dumps([{'moneda': 'NIO', 'cantidad': 1}]))
        session.add(sale)
        session.commit()

        [record] = list_sales(session)

        assert record.items == ()
        assert record.payments[0].amount_cents == 100


class TestGetSale:

    def test_found(self, session, product):
        sale_id = _add_sale(session, product, datetime(2024, 3, 1, 9, 0))
        assert get_sale(session, sale_id).id == sale_id

    def test_not_found(self, session):
        with pytest.raises(SaleNotFoundError):
            get_sale(session, 31337)


class TestOrders:

    def test_range_and_status_filter(self, session):
        pending = _add_order(session, datetime(2024, 3, 1, 8, 0))
        cancelled = _add_order(session, datetime(2024, 3, 1, 9, 0), OrderStatus.CANCELLED)
        _add_order(session, datetime(2024, 4, 1, 9, 0))

        in_march = list_orders(session, '2024-03-01', '2024-03-31')
        assert [order.id for order in in_march] == [cancelled, pending]

        only_pending = list_orders(session, '2024-03-01', '2024-03-31', status='pending')
        assert [order.id for order in only_pending] == [pending]

    def test_invalid_status_filter(self, session):
        with pytest.raises(BusinessLogicError):
            list_orders(session, status='LOST')

    def test_get_order(self, session):
        order_id = _add_order(session, datetime(2024, 3, 1, 8, 0))
        assert get_order(session, order_id).customer_name == 'Ana'

        with pytest.raises(OrderNotFoundError):
            get_order(session, order_id + 100)
