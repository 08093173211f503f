"""Middleware for caller identity."""
from functools import wraps

from flask import g, jsonify, request

USER_ID_HEADER = 'X-User-Id'
USER_ROLE_HEADER = 'X-User-Role'

ROLE_HIERARCHY = {'ADMIN': 2, 'CAJERO': 1}


def load_caller():
    """
    Load the caller resolved by the upstream auth layer into g.

    Sets g.user_id and g.user_role (None when the headers are absent).
    """
    user_id = (request.headers.get(USER_ID_HEADER) or '').strip()
    role = (request.headers.get(USER_ROLE_HEADER) or '').strip().upper()

    g.user_id = user_id or None
    g.user_role = role or None


def require_login(f):
    """Decorator: reject requests without a resolved caller (401)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user_id') is None:
            return jsonify({'status': 'error', 'message': 'Autenticación requerida'}), 401
        return f(*args, **kwargs)
    return decorated_function


def require_role(min_role='CAJERO'):
    """
    Decorator: require a minimum role.

    Roles hierarchy: ADMIN > CAJERO
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.get('user_id') is None:
                return jsonify({'status': 'error', 'message': 'Autenticación requerida'}), 401

            user_role_level = ROLE_HIERARCHY.get(g.get('user_role'), 0)
            required_level = ROLE_HIERARCHY.get(min_role, 0)

            if user_role_level < required_level:
                return jsonify({
                    'status': 'error',
                    'message': 'No tienes permisos para realizar esta acción'
                }), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
