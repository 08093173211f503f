"""Category model."""
from sqlalchemy import Column, String
from panaderia.database import Base, IdType


class Category(Base):
    """Product category (produccion propia, reventa...)."""

    __tablename__ = 'category'

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
