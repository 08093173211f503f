"""
Currency conversion for payment lines.

Only two currencies exist: the base currency, in which every total is
kept, and one foreign currency converted with an exchange rate.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from panaderia.exceptions import (
    InvalidCurrencyError, InvalidExchangeRateError, InvalidPaymentAmountError
)
from panaderia.records import PaymentLine
from panaderia.utils.money import round_to_int, to_cents, to_decimal


@dataclass(frozen=True)
class CurrencyPolicy:
    """Currency codes plus the configured fallback exchange rate."""

    base_currency: str = 'NIO'
    foreign_currency: str = 'USD'
    fallback_rate: Optional[Decimal] = None

    @classmethod
    def from_config(cls, config) -> 'CurrencyPolicy':
        """Build the policy from a Flask config mapping."""
        fallback = config.get('DEFAULT_EXCHANGE_RATE')
        return cls(
            base_currency=config.get('BASE_CURRENCY', 'NIO'),
            foreign_currency=config.get('FOREIGN_CURRENCY', 'USD'),
            fallback_rate=to_decimal(fallback) if fallback is not None else None,
        )

    @property
    def accepted(self):
        return (self.base_currency, self.foreign_currency)


DEFAULT_POLICY = CurrencyPolicy()


@dataclass(frozen=True)
class ConvertedPayment:
    """A validated payment line with its base-currency value resolved."""

    currency: str
    amount_cents: int
    rate: Optional[Decimal]
    converted_cents: int


def convert_payment(payment: PaymentLine, default_rate, policy: CurrencyPolicy = DEFAULT_POLICY) -> ConvertedPayment:
    """
    Validate a payment line and resolve its value in base-currency cents.

    Base currency: converted value is the amount in cents.
    Foreign currency: ``round(amount * rate * 100)`` (half-to-even), using the
    payment's own rate when given, else ``default_rate``.

    Raises:
        InvalidCurrencyError: currency is neither base nor foreign.
        InvalidAmountError: amount is not a finite number.
        InvalidPaymentAmountError: amount <= 0, or a foreign amount worth
            less than one base-currency cent.
        InvalidExchangeRateError: resolved rate <= 0.
    """
    currency = (payment.currency or '').strip().upper()
    if currency not in policy.accepted:
        raise InvalidCurrencyError(payment.currency, policy.accepted)

    amount = to_decimal(payment.amount)
    amount_cents = to_cents(amount)
    if amount <= 0 or amount_cents <= 0:
        raise InvalidPaymentAmountError(currency, payment.amount)

    if currency == policy.base_currency:
        return ConvertedPayment(currency, amount_cents, None, amount_cents)

    raw_rate = payment.rate if payment.rate is not None else default_rate
    if raw_rate is None:
        raise InvalidExchangeRateError(raw_rate)
    rate = to_decimal(raw_rate)
    if rate <= 0:
        raise InvalidExchangeRateError(rate)

    converted_cents = round_to_int(amount * rate * 100)
    if converted_cents <= 0:
        raise InvalidPaymentAmountError(currency, payment.amount)
    return ConvertedPayment(currency, amount_cents, rate, converted_cents)


def convert_to_base_cents(payment: PaymentLine, default_rate, policy: CurrencyPolicy = DEFAULT_POLICY) -> int:
    """Shortcut returning only the base-currency cents of a payment."""
    return convert_payment(payment, default_rate, policy).converted_cents
