"""
One-off normalization of sales written before line items and payments had
their own tables. Each sale is migrated in its own transaction.
"""
import logging
from typing import Dict

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from panaderia.exceptions import PanaderiaError
from panaderia.models import Sale, SaleLine, SalePayment
from panaderia.records import legacy_item_from_dict, legacy_payment_from_dict, parse_legacy_array
from panaderia.utils.money import round_to_int

logger = logging.getLogger(__name__)


def _legacy_candidates(session: Session):
    return session.query(Sale.id).filter(
        or_(Sale.legacy_items.isnot(None), Sale.legacy_payments.isnot(None)),
        ~Sale.lines.any(),
        ~Sale.payments.any()
    ).order_by(Sale.id).all()


def _normalize_sale(session: Session, sale: Sale, base_currency: str) -> None:
    items = [legacy_item_from_dict(entry) for entry in parse_legacy_array(sale.legacy_items)]
    payments = [legacy_payment_from_dict(entry) for entry in parse_legacy_array(sale.legacy_payments)]
    if not items:
        raise ValueError('sin items')

    for item in items:
        sale.lines.append(SaleLine(
            product_id=item.product_id,
            qty=item.qty,
            unit_price_cents=item.unit_price_cents,
            subtotal_cents=item.subtotal_cents
        ))

    for payment in payments:
        if payment.currency == base_currency:
            rate, converted_cents = None, payment.amount_cents
        else:
            if payment.rate is None or payment.rate <= 0:
                raise ValueError(f'pago en {payment.currency} sin tasa válida')
            rate, converted_cents = payment.rate, round_to_int(payment.amount_cents * payment.rate)
            if converted_cents <= 0:
                raise ValueError(f'pago en {payment.currency} vale menos de un centavo')
        sale.payments.append(SalePayment(
            currency=payment.currency,
            amount_cents=payment.amount_cents,
            rate=rate,
            converted_cents=converted_cents
        ))

    session.flush()


def normalize_legacy_sales(session: Session, base_currency: str = 'NIO') -> Dict[str, int]:
    """
    Write normalized line/payment rows for every sale that only has the
    legacy JSON blobs. Malformed sales, and sales the database refuses
    (e.g. an item pointing at a product that no longer exists), are
    logged and skipped.

    Returns:
        {'normalized': n, 'skipped': m}
    """
    normalized = skipped = 0

    for (sale_id,) in _legacy_candidates(session):
        try:
            sale = session.get(Sale, sale_id, with_for_update=True)
            _normalize_sale(session, sale, base_currency)
            session.commit()
            normalized += 1
        except (ValueError, PanaderiaError, SQLAlchemyError) as e:
            session.rollback()
            skipped += 1
            logger.error(f"Venta legacy #{sale_id} omitida: {e}")

    logger.info(f"Normalización legacy: {normalized} ventas migradas, {skipped} omitidas")
    return {'normalized': normalized, 'skipped': skipped}
