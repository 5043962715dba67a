from flask import Blueprint, jsonify, request
from extensions.services import get_notifier, get_repository
from utils.errors import NotFoundError, ValidationError

rides_bp = Blueprint("rides", __name__)


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# Ride endpoints
@rides_bp.route('/api/rides', methods=['GET'])
def get_rides():
    # passengers only see rides that still have a free seat
    rides = [ride for ride in get_repository().list_active_rides() if ride['available_seats'] > 0]
    return jsonify({'success': True, 'rides': rides}), 200


@rides_bp.route('/api/rides/driver/<int:telegram_id>', methods=['GET'])
def get_driver_rides(telegram_id):
    rides = get_repository().list_rides_by_driver(telegram_id)
    return jsonify({'success': True, 'rides': rides}), 200


@rides_bp.route('/api/rides/<int:ride_id>', methods=['GET'])
def get_ride(ride_id):
    ride = get_repository().get_ride_by_id(ride_id)
    if not ride:
        raise NotFoundError("Ride not found", ride_id=ride_id)
    return jsonify({'success': True, 'ride': ride}), 200


@rides_bp.route('/api/rides', methods=['POST'])
def create_ride():
    ride_id = get_repository().create_ride(get_json_body())
    return jsonify({'success': True, 'rideId': ride_id}), 201


@rides_bp.route('/api/rides/<int:ride_id>', methods=['DELETE'])
def delete_ride(ride_id):
    repository = get_repository()
    ride = repository.get_ride_by_id(ride_id)
    if not ride:
        raise NotFoundError("Ride not found", ride_id=ride_id)

    result = repository.delete_ride(ride_id)
    notified = 0
    if result['passengers']:
        notified = get_notifier().notify_ride_closed(ride, result['passengers'])

    return jsonify({
        'success': True,
        'affected': result['affected'],
        'passengersNotified': notified
    }), 200
