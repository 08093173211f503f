"""
Advance order (encargo) lifecycle.

PENDING -> FULFILLED | CANCELLED. Both targets are terminal. Orders
price-lock their items at creation and only touch stock when finalized,
through the same settlement used for direct sales.
"""
import logging
from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from panaderia.exceptions import (
    InvalidOrderError, InvalidPaymentAmountError, OrderNotFoundError, OrderNotPendingError,
    PanaderiaError
)
from panaderia.models import Order, OrderDeposit, OrderLine, OrderStatus, SaleKind
from panaderia.records import (
    CartLine, DepositRecord, FinalizationResult, OrderItem, OrderRecord, PaymentLine, SettlementResult,
    deposit_from_row, order_from_row, sale_from_row
)
from panaderia.services.currency_service import DEFAULT_POLICY, CurrencyPolicy
from panaderia.services.pricing_service import resolve_unit_price_cents
from panaderia.services.sales_service import (
    CartInput, PaymentInput, normalize_cart, normalize_payments, settle_in_transaction
)
from panaderia.utils.money import from_cents, to_cents

logger = logging.getLogger(__name__)


def parse_delivery_date(value) -> date:
    """Accept a date, a datetime or an ISO string (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            pass
    raise InvalidOrderError(f'Fecha de entrega inválida: {value!r}')


def get_order_for_update(session: Session, order_id: int) -> Order:
    order = session.query(Order).filter(
        Order.id == order_id
    ).with_for_update().populate_existing().first()

    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def _ensure_pending(order: Order) -> None:
    if not order.is_pending:
        raise OrderNotPendingError(order.id, order.status)


def create_order(
    session: Session,
    customer_name: str,
    delivery_date,
    items: Iterable[CartInput]
) -> OrderRecord:
    """
    Create a PENDING order with price-locked items.

    Each item's unit price is quoted now and stored on the order line;
    no stock is reserved or moved.

    Raises:
        InvalidOrderError: empty customer name, bad delivery date or no items
        InvalidQuantityError, ProductNotFoundError, MissingPriceError
    """
    name = (customer_name or '').strip()
    if not name:
        raise InvalidOrderError('El nombre del cliente es requerido')
    delivery = parse_delivery_date(delivery_date)

    cart_lines = normalize_cart(items)
    if not cart_lines:
        raise InvalidOrderError('El encargo debe incluir al menos un producto')

    try:
        order = Order(
            customer_name=name,
            delivery_date=delivery,
            status=OrderStatus.PENDING.value,
            created_at=datetime.now()
        )

        quoted = [
            OrderItem(line.product_id, line.qty, resolve_unit_price_cents(session, line.product_id))
            for line in cart_lines
        ]
        for item in quoted:
            order.lines.append(OrderLine(
                product_id=item.product_id,
                qty=item.qty,
                estimated_unit_price_cents=item.estimated_unit_price_cents
            ))

        order.estimated_total_cents = sum(item.estimated_subtotal_cents for item in quoted)
        session.add(order)
        session.flush()

        record = order_from_row(order)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Encargo #{record.id} creado para {record.customer_name}: "
        f"estimado={record.estimated_total_cents} entrega={record.delivery_date}"
    )
    return record


def register_deposit(session: Session, order_id: int, amount, method: Optional[str] = None) -> DepositRecord:
    """
    Append a deposit (abono) to a PENDING order.

    ``amount`` is a display amount in the base currency.
    """
    amount_cents = to_cents(amount)
    if amount_cents <= 0:
        raise InvalidPaymentAmountError(DEFAULT_POLICY.base_currency, amount)

    try:
        order = get_order_for_update(session, order_id)
        _ensure_pending(order)

        deposit = OrderDeposit(
            amount_cents=amount_cents,
            created_at=datetime.now(),
            method=(method or '').strip() or None
        )
        order.deposits.append(deposit)
        session.flush()

        record = deposit_from_row(deposit)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Abono de {amount_cents} centavos registrado en encargo #{order_id}")
    return record


def finalize_order(
    session: Session,
    order_id: int,
    user_id: str,
    payments: Optional[Iterable[PaymentInput]] = None,
    discount_cents: int = 0,
    policy: CurrencyPolicy = DEFAULT_POLICY
) -> FinalizationResult:
    """
    Turn a PENDING order into a sale.

    Deposits become base-currency payment lines, ``payments`` are added on
    top, and the order's locked quantities are settled at current prices.
    The order is marked FULFILLED and linked to the sale in the same
    transaction as the settlement.

    Raises:
        OrderNotFoundError, OrderNotPendingError, plus every settlement error
    """
    extra_payments = normalize_payments(payments)

    try:
        order = get_order_for_update(session, order_id)
        _ensure_pending(order)

        cart_lines = normalize_cart(
            CartLine(product_id=line.product_id, qty=line.qty) for line in order.lines
        )
        deposit_payments = [
            PaymentLine(currency=policy.base_currency, amount=from_cents(deposit.amount_cents))
            for deposit in order.deposits
        ]

        sale, change_cents = settle_in_transaction(
            session, cart_lines, deposit_payments + extra_payments,
            str(user_id).strip() if user_id else None,
            discount_cents=discount_cents, kind=SaleKind.FROM_ORDER, policy=policy
        )

        order.status = OrderStatus.FULFILLED.value
        order.sale = sale
        session.flush()

        result = FinalizationResult(
            order=order_from_row(order),
            settlement=SettlementResult(sale=sale_from_row(sale), change_cents=change_cents)
        )
        session.commit()
    except PanaderiaError as e:
        session.rollback()
        logger.warning(f"Finalización de encargo #{order_id} rechazada: {e.message}")
        raise
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Encargo #{order_id} entregado: venta #{result.settlement.sale.id} "
        f"total={result.settlement.sale.total_cents} cambio={result.settlement.change_cents}"
    )
    return result


def cancel_order(session: Session, order_id: int) -> OrderRecord:
    """Cancel a PENDING order. Stock is untouched and deposits are kept as is."""
    try:
        order = get_order_for_update(session, order_id)
        _ensure_pending(order)

        order.status = OrderStatus.CANCELLED.value
        session.flush()

        record = order_from_row(order)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Encargo #{order_id} cancelado")
    return record
