"""OrderLine model for advance order items."""
from sqlalchemy import Column, BigInteger, Integer, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class OrderLine(Base):
    """
    Order Line (item de encargo).

    Stores the estimated unit price captured when the order was created,
    decoupled from the live product price.
    """

    __tablename__ = 'order_line'

    id = Column(IdType, primary_key=True, autoincrement=True)
    order_id = Column(IdType, ForeignKey('customer_order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(IdType, ForeignKey('product.id'), nullable=False)
    qty = Column(Integer, nullable=False)
    estimated_unit_price_cents = Column(BigInteger, nullable=False)

    # Relationships
    order = relationship('Order', back_populates='lines')
    product = relationship('Product', foreign_keys=[product_id])

    def __repr__(self):
        return f"<OrderLine(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, qty={self.qty})>"
