"""Advance order (encargo) model."""
import enum
from datetime import datetime
from sqlalchemy import Column, BigInteger, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class OrderStatus(str, enum.Enum):
    """Order status. PENDING is the only non-terminal state."""
    PENDING = 'PENDING'
    FULFILLED = 'FULFILLED'
    CANCELLED = 'CANCELLED'


class Order(Base):
    """
    Advance order (Encargo).

    Items are price-locked at creation; ``estimated_total_cents`` never
    changes afterwards. Once fulfilled, ``sale_id`` points at the sale
    produced by finalization.
    """

    __tablename__ = 'customer_order'

    id = Column(IdType, primary_key=True, autoincrement=True)
    customer_name = Column(String(255), nullable=False)
    delivery_date = Column(Date, nullable=False)
    estimated_total_cents = Column(BigInteger, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    sale_id = Column(IdType, ForeignKey('sale.id'), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now, index=True)

    # Relationships
    lines = relationship('OrderLine', back_populates='order', cascade='all, delete-orphan',
                         order_by='OrderLine.id')
    deposits = relationship('OrderDeposit', back_populates='order', cascade='all, delete-orphan',
                            order_by='OrderDeposit.id')
    sale = relationship('Sale', back_populates='origin_order', foreign_keys=[sale_id])

    @property
    def is_pending(self):
        return self.status == OrderStatus.PENDING.value

    def __repr__(self):
        return f"<Order(id={self.id}, customer='{self.customer_name}', status='{self.status}')>"
