import time
from datetime import datetime, timezone
from flask import Blueprint, jsonify

misc_bp = Blueprint("misc", __name__)

STARTED_AT = time.monotonic()


@misc_bp.route('/health', methods=['GET'])
def health():
    """Liveness probe for the uptime monitor"""
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': round(time.monotonic() - STARTED_AT, 3)
    }), 200
