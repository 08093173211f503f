"""Waste registration: finished units discarded without a sale."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from panaderia.models import Waste
from panaderia.records import WasteRecord, waste_from_row
from panaderia.services.inventory_service import decrement_product_stock, validate_quantity

logger = logging.getLogger(__name__)


def register_waste(
    session: Session,
    product_id: int,
    qty: int,
    reason: Optional[str] = None,
    user_id: Optional[str] = None
) -> WasteRecord:
    """
    Take ``qty`` units of a product out of stock and record why.

    Steps:
    1. Validate the quantity
    2. Decrement stock (same guarded update used by sales)
    3. Persist the waste entry with its reason and date
    4. Commit (any failure rolls everything back)

    Raises:
        InvalidQuantityError, ProductNotFoundError, InsufficientStockError
    """
    validate_quantity(qty)

    try:
        remaining = decrement_product_stock(session, product_id, qty)

        waste = Waste(
            product_id=product_id,
            qty=qty,
            reason=(reason or '').strip() or None,
            user_id=user_id,
            created_at=datetime.now()
        )
        session.add(waste)
        session.flush()

        record = waste_from_row(waste)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Descarte #{record.id}: {qty} unidades de producto #{product_id} "
        f"(motivo={record.reason!r}, quedan {remaining})"
    )
    return record
