"""
Inventory ledger for products and raw materials.

Ledger functions never commit: they run inside the caller's transaction.
``register_raw_material_purchase`` is the only standalone operation here.
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from panaderia.exceptions import (
    BusinessLogicError, InsufficientStockError, InvalidQuantityError,
    ProductNotFoundError, RawMaterialNotFoundError
)
from panaderia.models import Product, RawMaterial
from panaderia.records import RawMaterialRecord, raw_material_from_row
from panaderia.utils.money import from_cents, round_to_int, to_cents, to_decimal

logger = logging.getLogger(__name__)


def validate_quantity(qty) -> int:
    """Product quantities are positive integers (units)."""
    if isinstance(qty, bool) or not isinstance(qty, int) or qty <= 0:
        raise InvalidQuantityError(qty)
    return qty


def _validate_measure(qty) -> Decimal:
    """Raw-material quantities may be fractional (kg, l) but must be > 0."""
    value = to_decimal(qty)
    if value <= 0:
        raise InvalidQuantityError(qty)
    return value


def _weighted_average_cents(old_qty, old_cost_cents: int, added_qty, added_total_cents: int) -> int:
    new_qty = Decimal(old_qty) + Decimal(added_qty)
    total = Decimal(old_qty) * old_cost_cents + added_total_cents
    return round_to_int(total / new_qty)


# =====================================================
# PRODUCTS
# =====================================================

def get_product_for_update(session: Session, product_id: int) -> Product:
    """Read a product row (locked) fresh from the database."""
    product = session.query(Product).filter(
        Product.id == product_id
    ).with_for_update().populate_existing().first()

    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def ensure_available(product: Product, qty: int) -> None:
    if product.available_qty < qty:
        raise InsufficientStockError(product.name, qty, product.available_qty)


def decrement_product_stock(session: Session, product_id: int, qty: int) -> int:
    """
    Take ``qty`` units out of a product. Returns the new available quantity.

    The update is guarded on ``available_qty >= qty`` so it can never leave
    the row negative, even if the row changed since it was read.
    """
    validate_quantity(qty)
    updated = session.query(Product).filter(
        Product.id == product_id,
        Product.available_qty >= qty
    ).update(
        {Product.available_qty: Product.available_qty - qty},
        synchronize_session=False
    )

    product = get_product_for_update(session, product_id)
    if updated == 0:
        raise InsufficientStockError(product.name, qty, product.available_qty)
    return product.available_qty


def increment_product_stock(session: Session, product_id: int, qty: int) -> int:
    """Put ``qty`` units back into a product. Returns the new available quantity."""
    validate_quantity(qty)
    product = get_product_for_update(session, product_id)
    product.available_qty = product.available_qty + qty
    session.flush()
    return product.available_qty


def receive_product_stock(session: Session, product_id: int, qty: int, unit_cost_cents: int) -> Product:
    """Add produced/purchased units and re-weight the product's unit cost."""
    validate_quantity(qty)
    product = get_product_for_update(session, product_id)

    if product.unit_cost is None or product.available_qty == 0:
        new_cost_cents = unit_cost_cents
    else:
        new_cost_cents = _weighted_average_cents(
            product.available_qty, to_cents(product.unit_cost), qty, unit_cost_cents * qty
        )

    product.available_qty = product.available_qty + qty
    product.unit_cost = from_cents(new_cost_cents)
    session.flush()
    return product


# =====================================================
# RAW MATERIALS
# =====================================================

def get_raw_material_for_update(session: Session, raw_material_id: int) -> RawMaterial:
    raw_material = session.query(RawMaterial).filter(
        RawMaterial.id == raw_material_id
    ).with_for_update().populate_existing().first()

    if raw_material is None:
        raise RawMaterialNotFoundError(raw_material_id)
    return raw_material


def consume_raw_material(session: Session, raw_material_id: int, qty) -> RawMaterial:
    """Take ``qty`` out of a raw material's stock."""
    amount = _validate_measure(qty)
    raw_material = get_raw_material_for_update(session, raw_material_id)

    if raw_material.stock < amount:
        raise InsufficientStockError(raw_material.name, amount, raw_material.stock)

    raw_material.stock = raw_material.stock - amount
    session.flush()
    return raw_material


def receive_raw_material(session: Session, raw_material_id: int, qty, total_cost) -> RawMaterial:
    """
    Add purchased stock and re-weight the average cost:
    ``new_avg = round((stock * avg + total_cost) / (stock + qty))``.
    """
    amount = _validate_measure(qty)
    total_cost_cents = to_cents(total_cost)
    if total_cost_cents < 0:
        raise BusinessLogicError('El costo total de la compra no puede ser negativo')

    raw_material = get_raw_material_for_update(session, raw_material_id)
    new_avg_cents = _weighted_average_cents(
        raw_material.stock, to_cents(raw_material.average_cost), amount, total_cost_cents
    )

    raw_material.stock = raw_material.stock + amount
    raw_material.average_cost = from_cents(new_avg_cents)
    session.flush()
    return raw_material


def register_raw_material_purchase(session: Session, raw_material_id: int, qty, total_cost) -> RawMaterialRecord:
    """Record a raw-material purchase in its own transaction."""
    try:
        raw_material = receive_raw_material(session, raw_material_id, qty, total_cost)
        record = raw_material_from_row(raw_material)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Compra de insumo #{raw_material_id}: {qty} {record.unit}, "
        f"costo promedio {record.average_cost}"
    )
    return record
