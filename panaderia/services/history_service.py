"""
Read-only queries over settled sales and advance orders.
"""
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from panaderia.exceptions import BusinessLogicError, OrderNotFoundError, SaleNotFoundError
from panaderia.models import Order, OrderStatus, Sale
from panaderia.records import OrderRecord, SaleRecord, order_from_row, sale_from_row


def _parse_bound(value, end_of_day: bool) -> Optional[datetime]:
    """
    Turn a range bound into a datetime. Plain dates (or ISO date strings)
    cover the whole day, so both bounds are inclusive.
    """
    if value is None or value == '':
        return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise BusinessLogicError(f'Fecha inválida: {value!r}')
        if len(value.strip()) > 10:
            return parsed
        value = parsed.date()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    raise BusinessLogicError(f'Fecha inválida: {value!r}')


def resolve_range(date_from=None, date_to=None) -> Tuple[Optional[datetime], Optional[datetime]]:
    start = _parse_bound(date_from, end_of_day=False)
    end = _parse_bound(date_to, end_of_day=True)
    if start is not None and end is not None and start > end:
        raise BusinessLogicError('La fecha inicial no puede ser posterior a la fecha final')
    return start, end


def list_sales(session: Session, date_from=None, date_to=None) -> List[SaleRecord]:
    """Sales created inside [date_from, date_to], newest first."""
    start, end = resolve_range(date_from, date_to)

    query = session.query(Sale).options(
        selectinload(Sale.lines),
        selectinload(Sale.payments),
        selectinload(Sale.origin_order)
    )
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at <= end)

    return [sale_from_row(sale) for sale in query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()]


def get_sale(session: Session, sale_id: int) -> SaleRecord:
    sale = session.get(Sale, sale_id)
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return sale_from_row(sale)


def list_orders(session: Session, date_from=None, date_to=None, status=None) -> List[OrderRecord]:
    """
    Orders created inside [date_from, date_to], newest first, optionally
    restricted to one status.
    """
    start, end = resolve_range(date_from, date_to)

    query = session.query(Order).options(
        selectinload(Order.lines),
        selectinload(Order.deposits)
    )
    if start is not None:
        query = query.filter(Order.created_at >= start)
    if end is not None:
        query = query.filter(Order.created_at <= end)
    if status:
        try:
            status = OrderStatus(str(status).strip().upper())
        except ValueError:
            raise BusinessLogicError(f'Estado de encargo inválido: {status!r}')
        query = query.filter(Order.status == status.value)

    return [order_from_row(order) for order in query.order_by(Order.created_at.desc(), Order.id.desc()).all()]


def get_order(session: Session, order_id: int) -> OrderRecord:
    order = session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order_from_row(order)
