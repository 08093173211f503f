"""Key/value system settings stored in the database."""
from sqlalchemy import Column, String
from panaderia.database import Base


class SystemSetting(Base):
    """System setting (e.g. the default exchange rate)."""

    __tablename__ = 'system_setting'

    key = Column(String(64), primary_key=True)
    value = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<SystemSetting(key='{self.key}', value='{self.value}')>"
