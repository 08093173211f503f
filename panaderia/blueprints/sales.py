"""Sales blueprint: settlement, history and void."""
from flask import Blueprint, g, jsonify, request

from panaderia.blueprints import currency_policy, json_body
from panaderia.database import get_session
from panaderia.middleware import require_login, require_role
from panaderia.services.history_service import get_sale, list_sales
from panaderia.services.sale_delete_service import void_sale
from panaderia.services.sales_service import settle_sale

sales_bp = Blueprint('sales', __name__, url_prefix='/api/sales')


@sales_bp.route('', methods=['POST'])
@require_login
def create_sale():
    """
    Settle a sale.

    Body: {"items": [{"product_id", "qty"}], "payments": [{"currency", "amount", "rate"?}],
           "discount_cents"?: int}
    """
    payload = json_body()
    result = settle_sale(
        get_session(),
        payload.get('items') or [],
        payload.get('payments') or [],
        g.user_id,
        discount_cents=payload.get('discount_cents', 0),
        policy=currency_policy()
    )
    return jsonify(result.to_dict()), 201


@sales_bp.route('', methods=['GET'])
@require_login
def index():
    sales = list_sales(get_session(), request.args.get('from'), request.args.get('to'))
    return jsonify({'sales': [sale.to_dict() for sale in sales]})


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_login
def detail(sale_id: int):
    return jsonify(get_sale(get_session(), sale_id).to_dict())


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
@require_role('ADMIN')
def void(sale_id: int):
    record = void_sale(get_session(), sale_id)
    return jsonify({'status': 'ok', 'voided': record.to_dict()})
