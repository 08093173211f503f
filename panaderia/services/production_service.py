"""Production lots: raw materials in, finished product units out."""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Tuple, Union

from sqlalchemy.orm import Session

from panaderia.exceptions import BusinessLogicError
from panaderia.records import ConsumedMaterial, ProductionLot
from panaderia.services.inventory_service import (
    consume_raw_material, receive_product_stock, validate_quantity
)
from panaderia.utils.money import round_to_int, to_cents, to_decimal

logger = logging.getLogger(__name__)

IngredientInput = Union[Dict[str, Any], Tuple[int, Any]]


def record_production_lot(
    session: Session,
    product_id: int,
    qty: int,
    ingredients: Iterable[IngredientInput],
    labor_cost=0
) -> ProductionLot:
    """
    Produce ``qty`` units of a product from raw materials.

    Lot cost = sum(consumed qty x average cost) + labor cost.
    Unit cost = lot cost / qty, folded into the product's weighted-average
    unit cost as the units are received.

    Raises:
        InvalidQuantityError, RawMaterialNotFoundError, InsufficientStockError,
        ProductNotFoundError, BusinessLogicError (no ingredients or negative labor)
    """
    validate_quantity(qty)
    labor_cost_cents = to_cents(labor_cost)
    if labor_cost_cents < 0:
        raise BusinessLogicError('El costo de mano de obra no puede ser negativo')

    ingredients = list(ingredients or [])
    if not ingredients:
        raise BusinessLogicError('Cada lote debe incluir al menos un insumo consumido')

    try:
        consumed = []
        for entry in ingredients:
            if isinstance(entry, dict):
                raw_material_id, amount = entry.get('raw_material_id'), entry.get('qty')
            else:
                raw_material_id, amount = entry

            raw_material = consume_raw_material(session, raw_material_id, amount)
            amount = to_decimal(amount)
            unit_cost_cents = to_cents(raw_material.average_cost)
            consumed.append(ConsumedMaterial(
                raw_material_id=raw_material.id,
                qty=amount,
                unit_cost_cents=unit_cost_cents,
                total_cost_cents=round_to_int(amount * unit_cost_cents)
            ))

        ingredients_cost_cents = sum(item.total_cost_cents for item in consumed)
        unit_cost_cents = round_to_int(
            to_decimal(ingredients_cost_cents + labor_cost_cents) / qty
        )
        receive_product_stock(session, product_id, qty, unit_cost_cents)

        lot = ProductionLot(
            product_id=product_id,
            qty=qty,
            ingredients_cost_cents=ingredients_cost_cents,
            labor_cost_cents=labor_cost_cents,
            unit_cost_cents=unit_cost_cents,
            consumed=tuple(consumed),
            produced_at=datetime.now()
        )
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Lote de producción: {qty} unidades de producto #{product_id}, "
        f"costo unitario={unit_cost_cents}"
    )
    return lot
