"""System settings stored in the database (default exchange rate)."""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from panaderia.exceptions import InvalidExchangeRateError, PanaderiaError
from panaderia.models import SystemSetting
from panaderia.utils.money import to_decimal

logger = logging.getLogger(__name__)

EXCHANGE_RATE_KEY = 'exchange_rate'


def _valid_rate(value) -> Optional[Decimal]:
    """Return the value as a positive Decimal, or None if unusable."""
    if value is None:
        return None
    try:
        rate = to_decimal(value)
    except PanaderiaError:
        return None
    return rate if rate > 0 else None


def get_default_exchange_rate(session: Session, fallback=None) -> Decimal:
    """
    Resolve the default exchange rate.

    Priority: rate stored in ``system_setting`` > configured ``fallback`` > 1.
    """
    setting = session.get(SystemSetting, EXCHANGE_RATE_KEY)
    stored = _valid_rate(setting.value) if setting else None
    if stored is not None:
        return stored

    configured = _valid_rate(fallback)
    if configured is not None:
        return configured

    return Decimal('1')


def set_default_exchange_rate(session: Session, rate) -> Decimal:
    """Store a new default exchange rate (must be > 0)."""
    value = to_decimal(rate)
    if value <= 0:
        raise InvalidExchangeRateError(rate)

    try:
        setting = session.get(SystemSetting, EXCHANGE_RATE_KEY, with_for_update=True)
        if setting is None:
            session.add(SystemSetting(key=EXCHANGE_RATE_KEY, value=str(value)))
        else:
            setting.value = str(value)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Tasa de cambio actualizada a {value}")
    return value


def seed_default_exchange_rate(session: Session, rate) -> bool:
    """Insert the configured rate only if the store has none. Returns True if inserted."""
    value = _valid_rate(rate)
    if value is None:
        return False

    try:
        if session.get(SystemSetting, EXCHANGE_RATE_KEY) is not None:
            session.rollback()
            return False
        session.add(SystemSetting(key=EXCHANGE_RATE_KEY, value=str(value)))
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info(f"Tasa de cambio inicial registrada: {value}")
    return True
