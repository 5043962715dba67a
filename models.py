"""
In-memory ride and booking records.

Both classes follow the same shape as the SQLAlchemy models in db.py: a
keyword constructor and a ``serialize()`` that produces the JSON stored in
the dataset document and returned by the API.
"""
import datetime

BOOKING_STATUS_PENDING = "pending"

# descriptive ride fields stored and returned as-is
RIDE_OPTIONAL_FIELDS = (
    "driver_name",
    "departure_date",
    "price",
    "car_info",
    "car_number",
    "telegram_username",
    "car_photo",
    "description",
    "location_lat",
    "location_lon",
)


def utcnow_iso():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class Ride:
    def __init__(self, **kwargs):
        self.id = kwargs.get("id")
        self.driver_telegram_id = kwargs.get("driver_telegram_id")
        self.route = kwargs.get("route")
        self.departure_time = kwargs.get("departure_time")
        self.total_seats = kwargs.get("total_seats")
        self.created_at = kwargs.get("created_at") or utcnow_iso()
        self.is_active = kwargs.get("is_active", True)
        for field in RIDE_OPTIONAL_FIELDS:
            setattr(self, field, kwargs.get(field))

    @classmethod
    def from_document(cls, data):
        total_seats = data.get("total_seats")
        if total_seats is None:
            # older documents only carried the two running counters
            total_seats = (data.get("available_seats") or 0) + (data.get("bookings_count") or 0)
        return cls(**{**data, "total_seats": int(total_seats), "is_active": bool(data.get("is_active", True))})

    def serialize(self, bookings_count=0):
        """
        Seat counters are derived from the live bookings on the ride rather
        than stored, so callers pass the current booking count in.
        """
        data = {
            "id": self.id,
            "driver_telegram_id": self.driver_telegram_id,
            "route": self.route,
            "departure_time": self.departure_time,
            "total_seats": self.total_seats,
            "available_seats": max(self.total_seats - bookings_count, 0),
            "bookings_count": bookings_count,
            "created_at": self.created_at,
            "is_active": self.is_active,
        }
        for field in RIDE_OPTIONAL_FIELDS:
            data[field] = getattr(self, field)
        return data


class Booking:
    def __init__(self, **kwargs):
        self.id = kwargs.get("id")
        self.ride_id = kwargs.get("ride_id")
        self.passenger_telegram_id = kwargs.get("passenger_telegram_id")
        self.passenger_name = kwargs.get("passenger_name")
        self.passenger_username = kwargs.get("passenger_username")
        self.created_at = kwargs.get("created_at") or utcnow_iso()
        self.status = kwargs.get("status", BOOKING_STATUS_PENDING)

    @classmethod
    def from_document(cls, data):
        return cls(**data)

    def passenger(self):
        return {
            "telegram_id": self.passenger_telegram_id,
            "name": self.passenger_name,
            "username": self.passenger_username,
        }

    def serialize(self):
        return {
            "id": self.id,
            "ride_id": self.ride_id,
            "passenger_telegram_id": self.passenger_telegram_id,
            "passenger_name": self.passenger_name,
            "passenger_username": self.passenger_username,
            "created_at": self.created_at,
            "status": self.status,
        }
