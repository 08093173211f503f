"""
Integration tests for the stored default exchange rate.
"""

import pytest
from decimal import Decimal

from panaderia.exceptions import InvalidExchangeRateError
from panaderia.models import SystemSetting
from panaderia.services.settings_service import (
    EXCHANGE_RATE_KEY, get_default_exchange_rate, seed_default_exchange_rate, set_default_exchange_rate
)


def test_priority_store_then_config_then_one(session):
    assert get_default_exchange_rate(session) == Decimal('1')
    assert get_default_exchange_rate(session, Decimal('36.62')) == Decimal('36.62')

    set_default_exchange_rate(session, '37.25')

    assert get_default_exchange_rate(session, Decimal('36.62')) == Decimal('37.25')


def test_unusable_stored_value_falls_back(session):
    session.add(SystemSetting(key=EXCHANGE_RATE_KEY, value='no-es-numero'))
    session.commit()

    assert get_default_exchange_rate(session, '36.62') == Decimal('36.62')


@pytest.mark.parametrize('rate', ['0', '-3'])
def test_set_rejects_non_positive(session, rate):
    with pytest.raises(InvalidExchangeRateError):
        set_default_exchange_rate(session, rate)
    assert session.get(SystemSetting, EXCHANGE_RATE_KEY) is None


def test_seed_only_when_missing(session):
    assert seed_default_exchange_rate(session, Decimal('36.62')) is True
    assert seed_default_exchange_rate(session, Decimal('40')) is False
    assert get_default_exchange_rate(session) == Decimal('36.62')


def test_seed_ignores_invalid_rate(session):
    assert seed_default_exchange_rate(session, None) is False
    assert session.get(SystemSetting, EXCHANGE_RATE_KEY) is None
