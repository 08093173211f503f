"""Sale model."""
import enum
from datetime import datetime
from sqlalchemy import Column, BigInteger, String, Text, DateTime, Enum
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class SaleStatus(enum.Enum):
    """Sale status enum."""
    COMPLETE = "COMPLETE"


class SaleKind(enum.Enum):
    """How the sale was originated."""
    DIRECT = "DIRECT"
    FROM_ORDER = "FROM_ORDER"


class Sale(Base):
    """
    Sale (venta confirmada).

    Money columns are integer cents in the base currency. ``legacy_items`` and
    ``legacy_payments`` hold the JSON blobs written before line items and
    payments were normalized; they are read only as a fallback.
    """

    __tablename__ = 'sale'

    id = Column(IdType, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.now, index=True)
    total_cents = Column(BigInteger, nullable=False)
    discount_cents = Column(BigInteger, nullable=False, default=0)
    user_id = Column(String(64), nullable=True)
    status = Column(Enum(SaleStatus, name='sale_status'), nullable=False, default=SaleStatus.COMPLETE)
    kind = Column(Enum(SaleKind, name='sale_kind'), nullable=False, default=SaleKind.DIRECT)

    legacy_items = Column(Text, nullable=True)
    legacy_payments = Column(Text, nullable=True)

    # Relationships
    lines = relationship('SaleLine', back_populates='sale', cascade='all, delete-orphan',
                         order_by='SaleLine.id')
    payments = relationship('SalePayment', back_populates='sale', cascade='all, delete-orphan',
                            order_by='SalePayment.id')
    origin_order = relationship('Order', back_populates='sale', uselist=False)

    def __repr__(self):
        return f"<Sale(id={self.id}, total_cents={self.total_cents}, kind={self.kind.value})>"
