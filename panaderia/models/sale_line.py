"""Sale Line model."""
from sqlalchemy import Column, BigInteger, Integer, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class SaleLine(Base):
    """Sale Line (detalle de venta). Unit price is a snapshot taken at settlement."""

    __tablename__ = 'sale_line'

    id = Column(IdType, primary_key=True, autoincrement=True)
    sale_id = Column(IdType, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(IdType, ForeignKey('product.id'), nullable=False, index=True)
    qty = Column(Integer, nullable=False)
    unit_price_cents = Column(BigInteger, nullable=False)
    subtotal_cents = Column(BigInteger, nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='lines')
    product = relationship('Product')

    def __repr__(self):
        return f"<SaleLine(id={self.id}, product_id={self.product_id}, qty={self.qty})>"
