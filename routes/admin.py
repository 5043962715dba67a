from flask import Blueprint, jsonify
from extensions.services import get_repository, get_sweeper
from utils.auth import require_admin_token

admin_bp = Blueprint("admin", __name__)


# Admin endpoints, including closed rides
@admin_bp.route('/api/admin/rides', methods=['GET'])
@require_admin_token
def get_all_rides():
    return jsonify({'success': True, 'rides': get_repository().list_all_rides()}), 200


@admin_bp.route('/api/admin/bookings', methods=['GET'])
@require_admin_token
def get_all_bookings():
    return jsonify({'success': True, 'bookings': get_repository().list_all_bookings()}), 200


@admin_bp.route('/api/admin/stats', methods=['GET'])
@require_admin_token
def get_stats():
    return jsonify({'success': True, **get_repository().stats()}), 200


@admin_bp.route('/api/admin/cleanup', methods=['POST'])
@require_admin_token
def cleanup_expired_rides():
    """Run the expiry sweep now; also the target of the scheduled Celery task"""
    deleted = get_sweeper().sweep()
    return jsonify({'success': True, 'deletedCount': deleted}), 200
