"""Raw material (insumo) model."""
from sqlalchemy import Column, String, Numeric, CheckConstraint
from panaderia.database import Base, IdType


class RawMaterial(Base):
    """
    Raw material (insumo) consumed by production.

    ``average_cost`` is the weighted-average cost per ``unit`` and is
    re-weighted on every purchase.
    """

    __tablename__ = 'raw_material'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_raw_material_stock_non_negative'),
    )

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    unit = Column(String(16), nullable=False)
    stock = Column(Numeric(12, 3), nullable=False, default=0)
    average_cost = Column(Numeric(10, 2), nullable=False, default=0)

    def __repr__(self):
        return f"<RawMaterial(id={self.id}, name='{self.name}', stock={self.stock} {self.unit})>"
