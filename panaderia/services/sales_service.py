"""
Sales service with transactional settlement logic.
Turns a cart plus multi-currency payments into a committed sale.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from panaderia.exceptions import (
    BusinessLogicError, InsufficientPaymentError, InvalidDiscountError, PanaderiaError
)
from panaderia.models import Sale, SaleKind, SaleLine, SalePayment, SaleStatus
from panaderia.records import CartLine, PaymentLine, SettlementResult, sale_from_row
from panaderia.services.currency_service import DEFAULT_POLICY, CurrencyPolicy, convert_payment
from panaderia.services.inventory_service import (
    decrement_product_stock, ensure_available, get_product_for_update, validate_quantity
)
from panaderia.services.pricing_service import unit_price_cents_for
from panaderia.services.settings_service import get_default_exchange_rate

logger = logging.getLogger(__name__)

CartInput = Union[CartLine, Dict[str, Any], Tuple[int, int]]
PaymentInput = Union[PaymentLine, Dict[str, Any]]


def settle_sale(
    session: Session,
    cart: Iterable[CartInput],
    payments: Iterable[PaymentInput],
    user_id: str,
    discount_cents: int = 0,
    policy: CurrencyPolicy = DEFAULT_POLICY
) -> SettlementResult:
    """
    Settle a direct sale with full transactional processing.

    Steps:
    1. Validate and price every cart line against current stock
    2. Clamp the discount to the gross total
    3. Convert payments to base-currency cents and check sufficiency
    4. Decrement stock
    5. Persist sale, line items and payment lines
    6. Commit (any failure rolls everything back)

    Returns:
        SettlementResult with the persisted sale and the change owed.

    Raises:
        ProductNotFoundError, MissingPriceError, InsufficientStockError,
        InvalidQuantityError, InvalidDiscountError, InvalidCurrencyError,
        InvalidAmountError, InvalidPaymentAmountError,
        InvalidExchangeRateError, InsufficientPaymentError
    """
    cart_lines = normalize_cart(cart)
    payment_lines = normalize_payments(payments)

    if not payment_lines:
        raise BusinessLogicError('Debe registrar al menos un pago')
    if not user_id or not str(user_id).strip():
        raise BusinessLogicError('Usuario autenticado requerido para registrar la venta')

    try:
        sale, change_cents = settle_in_transaction(
            session, cart_lines, payment_lines, str(user_id).strip(),
            discount_cents=discount_cents, policy=policy
        )
        result = SettlementResult(sale=sale_from_row(sale), change_cents=change_cents)
        session.commit()
    except PanaderiaError as e:
        session.rollback()
        logger.warning(f"Venta rechazada: {e.message}")
        raise
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Venta #{result.sale.id} registrada: total={result.sale.total_cents} "
        f"cambio={result.change_cents} usuario={result.sale.user_id}"
    )
    return result


def settle_in_transaction(
    session: Session,
    cart_lines: List[CartLine],
    payment_lines: List[PaymentLine],
    user_id: Optional[str],
    discount_cents: int = 0,
    kind: SaleKind = SaleKind.DIRECT,
    policy: CurrencyPolicy = DEFAULT_POLICY
) -> Tuple[Sale, int]:
    """
    Core settlement. Flushes but never commits: the caller owns the
    transaction (direct sale or order finalization).

    Returns:
        (sale row, change in cents)
    """
    if not cart_lines:
        raise BusinessLogicError('Debe incluir al menos un producto en la venta')
    discount_cents = validate_discount(discount_cents)

    # 1. Load, check stock and price every line
    priced_lines = []
    for line in cart_lines:
        product = get_product_for_update(session, line.product_id)
        ensure_available(product, line.qty)
        unit_price_cents = unit_price_cents_for(product)
        priced_lines.append({
            'product_id': product.id,
            'qty': line.qty,
            'unit_price_cents': unit_price_cents,
            'subtotal_cents': unit_price_cents * line.qty
        })

    # 2. Totals
    gross_cents = sum(line['subtotal_cents'] for line in priced_lines)
    applied_discount = min(discount_cents, gross_cents)
    net_cents = gross_cents - applied_discount

    # 3. Payments
    default_rate = get_default_exchange_rate(session, policy.fallback_rate)
    converted = [convert_payment(payment, default_rate, policy) for payment in payment_lines]
    paid_cents = sum(payment.converted_cents for payment in converted)

    if paid_cents < net_cents:
        raise InsufficientPaymentError(paid_cents, net_cents)

    # 4. Stock
    for line in priced_lines:
        decrement_product_stock(session, line['product_id'], line['qty'])

    # 5. Persist
    sale = Sale(
        created_at=datetime.now(),
        total_cents=net_cents,
        discount_cents=applied_discount,
        user_id=user_id,
        status=SaleStatus.COMPLETE,
        kind=kind
    )
    for line in priced_lines:
        sale.lines.append(SaleLine(**line))
    for payment in converted:
        sale.payments.append(SalePayment(
            currency=payment.currency,
            amount_cents=payment.amount_cents,
            rate=payment.rate,
            converted_cents=payment.converted_cents
        ))

    session.add(sale)
    session.flush()

    return sale, paid_cents - net_cents


# =====================================================
# INPUT NORMALIZATION
# =====================================================

def normalize_cart(cart: Iterable[CartInput]) -> List[CartLine]:
    """
    Validate cart lines and merge duplicates of the same product.
    Order of first appearance is kept.
    """
    merged: Dict[int, int] = {}
    for raw in cart or []:
        if isinstance(raw, CartLine):
            product_id, qty = raw.product_id, raw.qty
        elif isinstance(raw, dict):
            product_id, qty = raw.get('product_id'), raw.get('qty')
        elif isinstance(raw, (tuple, list)) and len(raw) == 2:
            product_id, qty = raw
        else:
            raise BusinessLogicError(f'Línea de venta con formato inválido: {raw!r}')

        validate_quantity(qty)
        if isinstance(product_id, bool) or not isinstance(product_id, int):
            raise BusinessLogicError('Cada línea debe indicar un producto válido')
        merged[product_id] = merged.get(product_id, 0) + qty

    return [CartLine(product_id=pid, qty=qty) for pid, qty in merged.items()]


def normalize_payments(payments: Iterable[PaymentInput]) -> List[PaymentLine]:
    normalized = []
    for payment in payments or []:
        if isinstance(payment, PaymentLine):
            normalized.append(payment)
        elif isinstance(payment, dict):
            normalized.append(PaymentLine.from_dict(payment))
        else:
            raise BusinessLogicError(f'Pago con formato inválido: {payment!r}')
    return normalized


def validate_discount(discount_cents) -> int:
    if discount_cents is None:
        return 0
    if isinstance(discount_cents, bool) or not isinstance(discount_cents, int) or discount_cents < 0:
        raise InvalidDiscountError(discount_cents)
    return discount_cents
