"""Product model."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class Product(Base):
    """Finished good sold at the counter."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('available_qty >= 0', name='ck_product_available_qty_non_negative'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    available_qty = Column(Integer, nullable=False, default=0)
    unit_cost = Column(Numeric(10, 2), nullable=True)  # Costo unitario (promedio ponderado)
    sale_price = Column(Numeric(10, 2), nullable=True)
    category_id = Column(IdType, ForeignKey('category.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    category = relationship('Category', foreign_keys=[category_id])

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', available_qty={self.available_qty})>"
