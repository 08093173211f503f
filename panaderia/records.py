"""
Immutable records handed out by the engine.

ORM rows never leave the service layer; every read goes through one
``*_from_row`` mapping function per entity. Mapping is strict: a row
that does not fit its record raises ``CorruptRecordError``. The only
lenient path is the legacy JSON blob on old sales, which degrades to an
empty collection.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from panaderia.exceptions import CorruptRecordError, PanaderiaError
from panaderia.models import (
    Order, OrderDeposit, OrderLine, OrderStatus, RawMaterial, Sale, SaleKind,
    SaleLine, SalePayment, SaleStatus, Waste
)
from panaderia.utils.money import from_cents, to_cents

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    """One requested product and quantity, before pricing."""

    product_id: int
    qty: int


@dataclass(frozen=True)
class PaymentLine:
    """A payment as tendered: amount in the currency's own units."""

    currency: str
    amount: Decimal
    rate: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaymentLine':
        return cls(
            currency=str(data.get('currency') or '').strip().upper(),
            amount=data.get('amount'),
            rate=data.get('rate'),
        )


@dataclass(frozen=True)
class SaleItem:
    product_id: int
    qty: int
    unit_price_cents: int

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'qty': self.qty,
            'unit_price': str(from_cents(self.unit_price_cents)),
            'unit_price_cents': self.unit_price_cents,
            'subtotal_cents': self.subtotal_cents,
        }


@dataclass(frozen=True)
class SalePaymentRecord:
    """A persisted payment. ``converted_cents`` is None only for legacy rows."""

    currency: str
    amount_cents: int
    rate: Optional[Decimal]
    converted_cents: Optional[int]

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currency': self.currency,
            'amount': str(self.amount),
            'rate': str(self.rate) if self.rate is not None else None,
            'converted_cents': self.converted_cents,
        }


@dataclass(frozen=True)
class SaleRecord:
    id: int
    total_cents: int
    discount_cents: int
    items: Tuple[SaleItem, ...]
    payments: Tuple[SalePaymentRecord, ...]
    created_at: datetime
    user_id: Optional[str]
    status: str
    kind: str
    order_id: Optional[int] = None

    @property
    def total(self) -> Decimal:
        return from_cents(self.total_cents)

    @property
    def gross_cents(self) -> int:
        return sum(item.subtotal_cents for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'total': str(self.total),
            'total_cents': self.total_cents,
            'discount_cents': self.discount_cents,
            'items': [item.to_dict() for item in self.items],
            'payments': [payment.to_dict() for payment in self.payments],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'user_id': self.user_id,
            'status': self.status,
            'kind': self.kind,
            'order_id': self.order_id,
        }


@dataclass(frozen=True)
class SettlementResult:
    """A committed sale plus the change owed to the customer."""

    sale: SaleRecord
    change_cents: int

    @property
    def change(self) -> Decimal:
        return from_cents(self.change_cents)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sale': self.sale.to_dict(),
            'change': str(self.change),
            'change_cents': self.change_cents,
        }


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    qty: int
    estimated_unit_price_cents: int

    @property
    def estimated_subtotal_cents(self) -> int:
        return self.estimated_unit_price_cents * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'qty': self.qty,
            'estimated_unit_price_cents': self.estimated_unit_price_cents,
            'estimated_subtotal_cents': self.estimated_subtotal_cents,
        }


@dataclass(frozen=True)
class DepositRecord:
    id: int
    amount_cents: int
    created_at: datetime
    method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': str(from_cents(self.amount_cents)),
            'amount_cents': self.amount_cents,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'method': self.method,
        }


@dataclass(frozen=True)
class OrderRecord:
    id: int
    customer_name: str
    delivery_date: date
    estimated_total_cents: int
    status: str
    created_at: datetime
    items: Tuple[OrderItem, ...]
    deposits: Tuple[DepositRecord, ...] = field(default_factory=tuple)
    sale_id: Optional[int] = None

    @property
    def deposited_cents(self) -> int:
        return sum(deposit.amount_cents for deposit in self.deposits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'customer_name': self.customer_name,
            'delivery_date': self.delivery_date.isoformat(),
            'estimated_total': str(from_cents(self.estimated_total_cents)),
            'estimated_total_cents': self.estimated_total_cents,
            'deposited_cents': self.deposited_cents,
            'status': self.status,
            'sale_id': self.sale_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'items': [item.to_dict() for item in self.items],
            'deposits': [deposit.to_dict() for deposit in self.deposits],
        }


@dataclass(frozen=True)
class FinalizationResult:
    """A fulfilled order together with the settlement it produced."""

    order: OrderRecord
    settlement: SettlementResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'order': self.order.to_dict(),
            **self.settlement.to_dict(),
        }


@dataclass(frozen=True)
class RawMaterialRecord:
    id: int
    name: str
    unit: str
    stock: Decimal
    average_cost: Decimal


@dataclass(frozen=True)
class ConsumedMaterial:
    raw_material_id: int
    qty: Decimal
    unit_cost_cents: int
    total_cost_cents: int


@dataclass(frozen=True)
class ProductionLot:
    """Outcome of a production lot. Not persisted."""

    product_id: int
    qty: int
    ingredients_cost_cents: int
    labor_cost_cents: int
    unit_cost_cents: int
    consumed: Tuple[ConsumedMaterial, ...]
    produced_at: datetime

    @property
    def total_cost_cents(self) -> int:
        return self.ingredients_cost_cents + self.labor_cost_cents


@dataclass(frozen=True)
class WasteRecord:
    """Units discarded from stock, with the reason given."""

    id: int
    product_id: int
    qty: int
    created_at: datetime
    reason: Optional[str] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'qty': self.qty,
            'reason': self.reason,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


# =====================================================
# ROW MAPPING
# =====================================================

def _require_int(value, entity: str, entity_id, column: str, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise CorruptRecordError(entity, entity_id, f'{column}={value!r}')
    return value


def sale_item_from_row(line: SaleLine) -> SaleItem:
    return SaleItem(
        product_id=_require_int(line.product_id, 'sale_line', line.id, 'product_id', 1),
        qty=_require_int(line.qty, 'sale_line', line.id, 'qty', 1),
        unit_price_cents=_require_int(line.unit_price_cents, 'sale_line', line.id, 'unit_price_cents'),
    )


def sale_payment_from_row(payment: SalePayment) -> SalePaymentRecord:
    if not payment.currency:
        raise CorruptRecordError('sale_payment', payment.id, 'currency vacía')
    return SalePaymentRecord(
        currency=payment.currency,
        amount_cents=_require_int(payment.amount_cents, 'sale_payment', payment.id, 'amount_cents', 1),
        rate=Decimal(payment.rate) if payment.rate is not None else None,
        converted_cents=_require_int(payment.converted_cents, 'sale_payment', payment.id, 'converted_cents', 1),
    )


def sale_from_row(sale: Sale) -> SaleRecord:
    """Map a Sale row; normalized children win over the legacy JSON blobs."""
    if not isinstance(sale.status, SaleStatus) or not isinstance(sale.kind, SaleKind):
        raise CorruptRecordError('sale', sale.id, f'status={sale.status!r} kind={sale.kind!r}')

    if sale.lines:
        items = tuple(sale_item_from_row(line) for line in sale.lines)
    else:
        items = tuple(_legacy_items(sale))

    if sale.payments:
        payments = tuple(sale_payment_from_row(payment) for payment in sale.payments)
    else:
        payments = tuple(_legacy_payments(sale))

    return SaleRecord(
        id=sale.id,
        total_cents=_require_int(sale.total_cents, 'sale', sale.id, 'total_cents'),
        discount_cents=_require_int(sale.discount_cents, 'sale', sale.id, 'discount_cents'),
        items=items,
        payments=payments,
        created_at=sale.created_at,
        user_id=sale.user_id,
        status=sale.status.value,
        kind=sale.kind.value,
        order_id=sale.origin_order.id if sale.origin_order is not None else None,
    )


def raw_material_from_row(raw_material: RawMaterial) -> RawMaterialRecord:
    if raw_material.stock is None or raw_material.stock < 0:
        raise CorruptRecordError('raw_material', raw_material.id, f'stock={raw_material.stock!r}')
    return RawMaterialRecord(
        id=raw_material.id,
        name=raw_material.name,
        unit=raw_material.unit,
        stock=Decimal(raw_material.stock),
        average_cost=Decimal(raw_material.average_cost),
    )


def waste_from_row(waste: Waste) -> WasteRecord:
    return WasteRecord(
        id=waste.id,
        product_id=_require_int(waste.product_id, 'waste', waste.id, 'product_id', 1),
        qty=_require_int(waste.qty, 'waste', waste.id, 'qty', 1),
        created_at=waste.created_at,
        reason=waste.reason,
        user_id=waste.user_id,
    )


def order_item_from_row(line: OrderLine) -> OrderItem:
    return OrderItem(
        product_id=_require_int(line.product_id, 'order_line', line.id, 'product_id', 1),
        qty=_require_int(line.qty, 'order_line', line.id, 'qty', 1),
        estimated_unit_price_cents=_require_int(
            line.estimated_unit_price_cents, 'order_line', line.id, 'estimated_unit_price_cents'
        ),
    )


def deposit_from_row(deposit: OrderDeposit) -> DepositRecord:
    return DepositRecord(
        id=deposit.id,
        amount_cents=_require_int(deposit.amount_cents, 'order_deposit', deposit.id, 'amount_cents', 1),
        created_at=deposit.created_at,
        method=deposit.method,
    )


def order_from_row(order: Order) -> OrderRecord:
    try:
        status = OrderStatus(order.status)
    except ValueError:
        raise CorruptRecordError('customer_order', order.id, f'status={order.status!r}')
    if not order.customer_name or order.delivery_date is None:
        raise CorruptRecordError('customer_order', order.id, 'cliente o fecha de entrega vacíos')

    return OrderRecord(
        id=order.id,
        customer_name=order.customer_name,
        delivery_date=order.delivery_date,
        estimated_total_cents=_require_int(
            order.estimated_total_cents, 'customer_order', order.id, 'estimated_total_cents'
        ),
        status=status.value,
        created_at=order.created_at,
        items=tuple(order_item_from_row(line) for line in order.lines),
        deposits=tuple(deposit_from_row(deposit) for deposit in order.deposits),
        sale_id=order.sale_id,
    )


# =====================================================
# LEGACY JSON FALLBACK
# =====================================================

def parse_legacy_array(raw: Optional[str]) -> List[Dict[str, Any]]:
    """Parse a legacy JSON column into a list of dicts. Raises ValueError on bad shape."""
    if raw is None or not raw.strip():
        return []
    parsed = json.loads(raw)
    if not isinstance(parsed, list) or not all(isinstance(entry, dict) for entry in parsed):
        raise ValueError('no es un arreglo de objetos')
    return parsed


def legacy_item_from_dict(entry: Dict[str, Any]) -> SaleItem:
    product_id = entry.get('productoId', entry.get('product_id'))
    qty = entry.get('cantidad', entry.get('qty'))
    price = entry.get('precioUnitario', entry.get('unit_price'))
    if product_id in (None, ''):
        raise ValueError('item sin productoId')
    if isinstance(product_id, str) and not product_id.strip().isdigit():
        # ids del sistema anterior, p. ej. PROD-<uuid>
        raise ValueError(f'productoId no numérico {product_id!r}: id de texto sin equivalente en product.id')
    if isinstance(product_id, bool) or not isinstance(product_id, (int, str)):
        raise ValueError(f'productoId con tipo inválido {product_id!r}')
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise ValueError(f'item {product_id} con cantidad inválida')
    return SaleItem(product_id=int(product_id), qty=qty, unit_price_cents=to_cents(price))


def legacy_payment_from_dict(entry: Dict[str, Any]) -> SalePaymentRecord:
    currency = str(entry.get('moneda', entry.get('currency')) or '').strip().upper()
    if not currency:
        raise ValueError('pago sin moneda')
    amount_cents = to_cents(entry.get('cantidad', entry.get('amount')))
    if amount_cents <= 0:
        raise ValueError(f'pago en {currency} inválido')
    rate = entry.get('tasa', entry.get('rate'))
    return SalePaymentRecord(
        currency=currency,
        amount_cents=amount_cents,
        rate=Decimal(str(rate)) if rate is not None else None,
        converted_cents=None,
    )


def _legacy_items(sale: Sale) -> List[SaleItem]:
    try:
        return [legacy_item_from_dict(entry) for entry in parse_legacy_array(sale.legacy_items)]
    except (ValueError, PanaderiaError) as e:
        logger.warning(f"Venta #{sale.id}: items legacy ilegibles ({e})")
        return []


def _legacy_payments(sale: Sale) -> List[SalePaymentRecord]:
    try:
        return [legacy_payment_from_dict(entry) for entry in parse_legacy_array(sale.legacy_payments)]
    except (ValueError, PanaderiaError) as e:
        logger.warning(f"Venta #{sale.id}: pagos legacy ilegibles ({e})")
        return []
