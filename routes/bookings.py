from flask import Blueprint, jsonify
from extensions.services import get_notifier, get_repository
from routes.rides import get_json_body
from services.ride_repository import parse_id
from utils.errors import NotFoundError

bookings_bp = Blueprint("bookings", __name__)


# Booking endpoints
@bookings_bp.route('/api/bookings', methods=['POST'])
def create_booking():
    data = get_json_body()
    repository = get_repository()
    booking_id = repository.create_booking(data)

    # clients announce the booking through /api/notify unless they ask for it here
    if data.get('notify_driver') is True:
        booking = repository.get_booking_by_id(booking_id)
        ride = repository.get_ride_by_id(booking['ride_id'])
        if ride:
            get_notifier().notify_driver_of_booking(ride, booking['passenger_name'], booking['passenger_username'])

    return jsonify({'success': True, 'bookingId': booking_id}), 201


@bookings_bp.route('/api/bookings/ride/<int:ride_id>', methods=['GET'])
def get_ride_bookings(ride_id):
    bookings = get_repository().list_bookings_by_ride(ride_id)
    return jsonify({'success': True, 'bookings': bookings}), 200


@bookings_bp.route('/api/bookings/user/<int:telegram_id>', methods=['GET'])
def get_user_bookings(telegram_id):
    bookings = get_repository().list_bookings_by_user(telegram_id)
    return jsonify({'success': True, 'bookings': bookings}), 200


@bookings_bp.route('/api/bookings/<int:booking_id>', methods=['DELETE'])
def delete_booking(booking_id):
    result = get_repository().delete_booking(booking_id)
    return jsonify({'success': True, 'affected': result['affected']}), 200


@bookings_bp.route('/api/notify', methods=['POST'])
def notify_driver():
    """Resend the new-booking message to a ride's driver"""
    data = get_json_body()
    ride_id = parse_id(data.get('ride_id'), 'ride_id')
    ride = get_repository().get_ride_by_id(ride_id)
    if not ride:
        raise NotFoundError("Ride not found", ride_id=ride_id)

    # the message always goes to the ride's own driver
    sent = get_notifier().notify_driver_of_booking(ride, data.get('passenger_name') or '', data.get('passenger_username'))
    return jsonify({'success': sent}), 200 if sent else 502
