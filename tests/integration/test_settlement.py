"""
Integration tests for sale settlement: pricing, payments, stock and atomicity.
"""

import pytest
from decimal import Decimal

from panaderia.exceptions import (
    BusinessLogicError, InsufficientPaymentError, InsufficientStockError, InvalidCurrencyError,
    InvalidDiscountError, InvalidExchangeRateError, InvalidPaymentAmountError, MissingPriceError,
    ProductNotFoundError
)
from panaderia.models import Product, Sale, SaleKind, SalePayment
from panaderia.records import CartLine, PaymentLine
from panaderia.services.sales_service import settle_sale
from panaderia.services.settings_service import set_default_exchange_rate


def _sale_count(session):
    return session.query(Sale).count()


class TestSettlementScenarios:

    def test_exact_payment(self, session, product, policy, stock_of):
        result = settle_sale(session, [CartLine(product.id, 3)], [PaymentLine('NIO', '75.00')],
                             'cajero-1', policy=policy)

        assert result.sale.total_cents == 7500
        assert result.change_cents == 0
        assert result.change == Decimal('0.00')
        assert stock_of(product.id) == 7

    def test_overpayment_returns_change(self, session, product, policy, stock_of):
        result = settle_sale(session, [{'product_id': product.id, 'qty': 3}],
                             [{'currency': 'NIO', 'amount': '100.00'}], 'cajero-1', policy=policy)

        assert result.sale.total_cents == 7500
        assert result.change_cents == 2500
        assert result.change == Decimal('25.00')

    def test_insufficient_stock_writes_nothing(self, session, make_product, policy, stock_of):
        product = make_product(qty=2, sale_price='25.00')

        with pytest.raises(InsufficientStockError):
            settle_sale(session, [CartLine(product.id, 3)], [PaymentLine('NIO', '75.00')],
                        'cajero-1', policy=policy)

        assert stock_of(product.id) == 2
        assert _sale_count(session) == 0


class TestSettlementRecord:

    def test_persists_lines_payments_and_snapshot(self, session, make_product, policy):
        bread = make_product(name='Pan', qty=10, sale_price='25.00')
        cake = make_product(name='Pastel', qty=5, sale_price='120.50')

        result = settle_sale(
            session,
            [CartLine(bread.id, 2), CartLine(cake.id, 1)],
            [PaymentLine('NIO', '100.00'), PaymentLine('USD', '2', rate='36.62')],
            'cajero-1',
            policy=policy
        )

        sale = result.sale
        assert sale.gross_cents == 17050
        assert sale.total_cents == 17050
        assert sale.kind == 'DIRECT'
        assert sale.status == 'COMPLETE'
        assert sale.user_id == 'cajero-1'
        assert [(item.product_id, item.qty, item.unit_price_cents) for item in sale.items] == [
            (bread.id, 2, 2500), (cake.id, 1, 12050)
        ]
        assert [payment.converted_cents for payment in sale.payments] == [10000, 7324]
        assert result.change_cents == 10000 + 7324 - 17050

        # Later price changes do not touch the stored snapshot
        session.get(Product, bread.id).sale_price = Decimal('30.00')
        session.commit()
        stored = session.get(Sale, sale.id)
        assert stored.lines[0].unit_price_cents == 2500

    def test_payment_rows_keep_currency_and_rate(self, session, product, policy):
        result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('USD', '1', rate='36.62')],
                             'cajero-1', policy=policy)

        payment = session.query(SalePayment).filter(SalePayment.sale_id == result.sale.id).one()
        assert payment.currency == 'USD'
        assert payment.amount_cents == 100
        assert payment.rate == Decimal('36.62')
        assert payment.converted_cents == 3662

    def test_uses_stored_exchange_rate_over_config(self, session, product, policy):
        set_default_exchange_rate(session, '40')

        result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('USD', '1')],
                             'cajero-1', policy=policy)

        assert result.sale.payments[0].rate == Decimal('40')
        assert result.change_cents == 4000 - 2500

    def test_config_rate_when_store_has_none(self, session, product, policy):
        result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('USD', '1')],
                             'cajero-1', policy=policy)

        assert result.sale.payments[0].converted_cents == 3650

    def test_duplicate_cart_lines_are_merged(self, session, make_product, policy, stock_of):
        product = make_product(qty=3, sale_price='10.00')

        with pytest.raises(InsufficientStockError):
            settle_sale(session, [CartLine(product.id, 2), CartLine(product.id, 2)],
                        [PaymentLine('NIO', '40')], 'cajero-1', policy=policy)

        result = settle_sale(session, [CartLine(product.id, 1), CartLine(product.id, 2)],
                             [PaymentLine('NIO', '30')], 'cajero-1', policy=policy)
        assert len(result.sale.items) == 1
        assert result.sale.items[0].qty == 3
        assert stock_of(product.id) == 0


class TestDiscount:

    def test_discount_reduces_total(self, session, product, policy):
        result = settle_sale(session, [CartLine(product.id, 3)], [PaymentLine('NIO', '70.00')],
                             'cajero-1', discount_cents=500, policy=policy)

        assert result.sale.discount_cents == 500
        assert result.sale.total_cents == 7000
        assert result.sale.total_cents == result.sale.gross_cents - result.sale.discount_cents

    def test_discount_is_clamped_to_gross(self, session, product, policy):
        result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '1')],
                             'cajero-1', discount_cents=999999, policy=policy)

        assert result.sale.discount_cents == 2500
        assert result.sale.total_cents == 0
        assert result.change_cents == 100

    @pytest.mark.parametrize('discount', [-1, 1.5, '100', True])
    def test_invalid_discount(self, session, product, policy, discount, stock_of):
        with pytest.raises(InvalidDiscountError):
            settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '25')],
                        'cajero-1', discount_cents=discount, policy=policy)
        assert stock_of(product.id) == 10


class TestSettlementFailures:

    def test_insufficient_payment_rolls_back(self, session, product, policy, stock_of):
        with pytest.raises(InsufficientPaymentError) as exc_info:
            settle_sale(session, [CartLine(product.id, 3)],
                        [PaymentLine('NIO', '50'), PaymentLine('USD', '0.5', rate='36.62')],
                        'cajero-1', policy=policy)

        assert exc_info.value.paid_cents == 5000 + 1831
        assert exc_info.value.required_cents == 7500
        assert stock_of(product.id) == 10
        assert _sale_count(session) == 0

    def test_failure_on_second_line_leaves_first_untouched(self, session, make_product, policy, stock_of):
        available = make_product(name='Pan', qty=10, sale_price='10.00')
        scarce = make_product(name='Torta', qty=1, sale_price='10.00')

        with pytest.raises(InsufficientStockError):
            settle_sale(session, [CartLine(available.id, 5), CartLine(scarce.id, 2)],
                        [PaymentLine('NIO', '100')], 'cajero-1', policy=policy)

        assert stock_of(available.id) == 10
        assert stock_of(scarce.id) == 1

    def test_invalid_rate_rolls_back(self, session, product, policy, stock_of):
        with pytest.raises(InvalidExchangeRateError):
            settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('USD', '10', rate='0')],
                        'cajero-1', policy=policy)
        assert stock_of(product.id) == 10
        assert _sale_count(session) == 0

    def test_foreign_payment_below_one_cent_rolls_back(self, session, product, policy, stock_of):
        with pytest.raises(InvalidPaymentAmountError):
            settle_sale(session, [CartLine(product.id, 1)],
                        [PaymentLine('NIO', '25.00'), PaymentLine('USD', '0.01', rate='0.5')],
                        'cajero-1', policy=policy)
        assert stock_of(product.id) == 10
        assert _sale_count(session) == 0

    def test_unknown_currency(self, session, product, policy):
        with pytest.raises(InvalidCurrencyError):
            settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('EUR', '10', rate='1')],
                        'cajero-1', policy=policy)

    def test_missing_price(self, session, make_product, policy):
        product = make_product(sale_price=None, unit_cost=None)
        with pytest.raises(MissingPriceError):
            settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '10')],
                        'cajero-1', policy=policy)

    def test_unknown_product(self, session, policy):
        with pytest.raises(ProductNotFoundError):
            settle_sale(session, [CartLine(12345, 1)], [PaymentLine('NIO', '10')],
                        'cajero-1', policy=policy)

    def test_empty_cart(self, session, policy):
        with pytest.raises(BusinessLogicError):
            settle_sale(session, [], [PaymentLine('NIO', '10')], 'cajero-1', policy=policy)

    def test_requires_payment_and_user(self, session, product, policy):
        with pytest.raises(BusinessLogicError):
            settle_sale(session, [CartLine(product.id, 1)], [], 'cajero-1', policy=policy)
        with pytest.raises(BusinessLogicError):
            settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '25')], '  ', policy=policy)


def test_sale_kind_is_direct(session, product, policy):
    result = settle_sale(session, [CartLine(product.id, 1)], [PaymentLine('NIO', '25')],
                         'cajero-1', policy=policy)
    assert session.get(Sale, result.sale.id).kind == SaleKind.DIRECT
