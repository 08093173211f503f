"""Service for voiding sales with stock reversal."""
import logging

from sqlalchemy.orm import Session

from panaderia.exceptions import CorruptRecordError, PanaderiaError, SaleNotFoundError
from panaderia.models import Sale
from panaderia.records import SaleRecord, legacy_item_from_dict, parse_legacy_array, sale_from_row
from panaderia.services.inventory_service import increment_product_stock

logger = logging.getLogger(__name__)


def _ensure_legacy_items_readable(sale: Sale) -> None:
    """
    A legacy sale only knows what it sold through its JSON blob. If the blob
    is there but cannot be read, voiding would delete the sale without
    putting any stock back.
    """
    if sale.lines or not (sale.legacy_items or '').strip():
        return
    try:
        items = [legacy_item_from_dict(entry) for entry in parse_legacy_array(sale.legacy_items)]
    except (ValueError, PanaderiaError) as e:
        raise CorruptRecordError('sale', sale.id, f'legacy_items ilegible ({e})')
    if not items:
        raise CorruptRecordError('sale', sale.id, 'legacy_items sin productos')


def void_sale(session: Session, sale_id: int) -> SaleRecord:
    """
    Void a sale and put its stock back.

    Steps:
    1. Lock the sale row
    2. Map it to a record (legacy sales fall back to their JSON items)
    3. Add every line's quantity back to its product
    4. Unlink the originating order, if any (the order stays FULFILLED)
    5. Delete the sale with its lines and payments
    6. Commit

    Returns:
        The record of the sale as it was before deletion.

    Raises:
        SaleNotFoundError: If the sale does not exist
        CorruptRecordError: If a legacy sale's items cannot be read
    """
    try:
        sale = session.query(Sale).filter(
            Sale.id == sale_id
        ).with_for_update().first()

        if sale is None:
            raise SaleNotFoundError(sale_id)

        _ensure_legacy_items_readable(sale)
        record = sale_from_row(sale)

        for item in record.items:
            increment_product_stock(session, item.product_id, item.qty)

        if sale.origin_order is not None:
            sale.origin_order.sale = None

        session.delete(sale)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(
        f"Venta #{sale_id} anulada: {len(record.items)} líneas devueltas a inventario"
    )
    return record
