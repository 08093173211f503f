"""Settings blueprint: default exchange rate."""
from flask import Blueprint, jsonify

from panaderia.blueprints import currency_policy, json_body
from panaderia.database import get_session
from panaderia.middleware import require_login, require_role
from panaderia.services.settings_service import get_default_exchange_rate, set_default_exchange_rate

settings_bp = Blueprint('settings', __name__, url_prefix='/api/config')


def _config_payload(rate):
    policy = currency_policy()
    return {
        'base_currency': policy.base_currency,
        'foreign_currency': policy.foreign_currency,
        'exchange_rate': str(rate),
    }


@settings_bp.route('', methods=['GET'])
@require_login
def show():
    rate = get_default_exchange_rate(get_session(), currency_policy().fallback_rate)
    return jsonify(_config_payload(rate))


@settings_bp.route('', methods=['PUT'])
@require_role('ADMIN')
def update():
    payload = json_body()
    rate = set_default_exchange_rate(get_session(), payload.get('exchange_rate'))
    return jsonify(_config_payload(rate))
