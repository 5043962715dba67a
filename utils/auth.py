import hmac
from functools import wraps
from flask import current_app, request, jsonify


def _request_token():
    token = request.headers.get("x-admin-token")
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


def require_admin_token(f):
    """Decorator guarding admin endpoints with the shared ADMIN_TOKEN"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("ADMIN_TOKEN")
        if not expected:
            return jsonify({
                'success': False,
                'error': 'Admin access is not configured'
            }), 503

        token = _request_token()
        if not token or not hmac.compare_digest(token, expected):
            return jsonify({
                'success': False,
                'error': 'Invalid admin token'
            }), 401

        return f(*args, **kwargs)
    return decorated_function
