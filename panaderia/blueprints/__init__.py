"""JSON blueprints. Routes only translate HTTP to service calls."""
from flask import current_app, request

from panaderia.exceptions import BusinessLogicError
from panaderia.services.currency_service import CurrencyPolicy


def currency_policy() -> CurrencyPolicy:
    return CurrencyPolicy.from_config(current_app.config)


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BusinessLogicError('Se esperaba un cuerpo JSON')
    return payload
