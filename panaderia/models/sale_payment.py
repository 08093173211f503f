"""Sale Payment model for multi-currency payments."""
from sqlalchemy import Column, BigInteger, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from panaderia.database import Base, IdType


class SalePayment(Base):
    """
    Sale Payment - Individual payment line for a sale.

    ``amount_cents`` is expressed in the payment's own currency;
    ``converted_cents`` is the same payment in the base currency.
    ``rate`` is NULL for base-currency payments.
    """

    __tablename__ = 'sale_payment'

    id = Column(IdType, primary_key=True, autoincrement=True)
    sale_id = Column(IdType, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)

    currency = Column(String(3), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    rate = Column(Numeric(12, 4), nullable=True)
    converted_cents = Column(BigInteger, nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='payments')

    def __repr__(self):
        return f"<SalePayment(id={self.id}, sale_id={self.sale_id}, currency={self.currency}, amount_cents={self.amount_cents})>"
