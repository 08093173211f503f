"""Pricing resolver: the unit price a product is sold at, in cents."""
from sqlalchemy.orm import Session

from panaderia.exceptions import MissingPriceError, ProductNotFoundError
from panaderia.models import Product
from panaderia.utils.money import to_cents


def unit_price_cents_for(product: Product) -> int:
    """
    Quote an already-loaded product: sale price, else unit cost.

    The returned cents are the snapshot persisted on sale/order lines.
    """
    price = product.sale_price if product.sale_price is not None else product.unit_cost
    if price is None:
        raise MissingPriceError(product.name)
    return to_cents(price)


def resolve_unit_price_cents(session: Session, product_id: int) -> int:
    """Load a product and quote its unit price in cents."""
    product = session.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return unit_price_cents_for(product)
