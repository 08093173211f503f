"""Waste model (descarte)."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class Waste(Base):
    """Units taken out of stock without a sale (spoiled, burnt, expired). Append-only."""

    __tablename__ = 'waste'

    id = Column(IdType, primary_key=True, autoincrement=True)
    product_id = Column(IdType, ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    qty = Column(Integer, nullable=False)
    reason = Column(String(255), nullable=True)
    user_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now)

    # Relationships
    product = relationship('Product', foreign_keys=[product_id])

    def __repr__(self):
        return f"<Waste(id={self.id}, product_id={self.product_id}, qty={self.qty})>"
