"""Waste blueprint: register discarded units."""
from flask import Blueprint, g, jsonify

from panaderia.blueprints import json_body
from panaderia.database import get_session
from panaderia.middleware import require_login
from panaderia.services.waste_service import register_waste

waste_bp = Blueprint('waste', __name__, url_prefix='/api/waste')


@waste_bp.route('', methods=['POST'])
@require_login
def create_waste():
    """Body: {"product_id": int, "qty": int, "reason"?: str}"""
    payload = json_body()
    record = register_waste(
        get_session(),
        payload.get('product_id'),
        payload.get('qty'),
        reason=payload.get('reason'),
        user_id=g.user_id
    )
    return jsonify(record.to_dict()), 201
