"""Orders blueprint: advance order (encargo) lifecycle."""
from flask import Blueprint, g, jsonify, request

from panaderia.blueprints import currency_policy, json_body
from panaderia.database import get_session
from panaderia.middleware import require_login
from panaderia.services import order_service
from panaderia.services.history_service import get_order, list_orders

orders_bp = Blueprint('orders', __name__, url_prefix='/api/orders')


@orders_bp.route('', methods=['POST'])
@require_login
def create():
    payload = json_body()
    record = order_service.create_order(
        get_session(),
        payload.get('customer_name'),
        payload.get('delivery_date'),
        payload.get('items') or []
    )
    return jsonify(record.to_dict()), 201


@orders_bp.route('', methods=['GET'])
@require_login
def index():
    orders = list_orders(
        get_session(),
        request.args.get('from'),
        request.args.get('to'),
        status=request.args.get('status')
    )
    return jsonify({'orders': [order.to_dict() for order in orders]})


@orders_bp.route('/<int:order_id>', methods=['GET'])
@require_login
def detail(order_id: int):
    return jsonify(get_order(get_session(), order_id).to_dict())


@orders_bp.route('/<int:order_id>/deposits', methods=['POST'])
@require_login
def add_deposit(order_id: int):
    payload = json_body()
    deposit = order_service.register_deposit(
        get_session(), order_id, payload.get('amount'), payload.get('method')
    )
    return jsonify(deposit.to_dict()), 201


@orders_bp.route('/<int:order_id>/finalize', methods=['POST'])
@require_login
def finalize(order_id: int):
    payload = request.get_json(silent=True) or {}
    result = order_service.finalize_order(
        get_session(),
        order_id,
        g.user_id,
        payments=payload.get('payments') or [],
        discount_cents=payload.get('discount_cents', 0),
        policy=currency_policy()
    )
    return jsonify(result.to_dict())


@orders_bp.route('/<int:order_id>/cancel', methods=['POST'])
@require_login
def cancel(order_id: int):
    return jsonify(order_service.cancel_order(get_session(), order_id).to_dict())
