"""OrderDeposit model (abono)."""
from datetime import datetime
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class OrderDeposit(Base):
    """Deposit against an advance order. Append-only, amounts in base-currency cents."""

    __tablename__ = 'order_deposit'

    id = Column(IdType, primary_key=True, autoincrement=True)
    order_id = Column(IdType, ForeignKey('customer_order.id', ondelete='CASCADE'), nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now)
    method = Column(String(30), nullable=True)

    # Relationships
    order = relationship('Order', back_populates='deposits')

    def __repr__(self):
        return f"<OrderDeposit(id={self.id}, order_id={self.order_id}, amount_cents={self.amount_cents})>"
