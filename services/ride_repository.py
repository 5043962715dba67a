"""
Ride and booking repository.

The repository owns the canonical in-memory rides and bookings. The dataset
is read from the document store once at startup and the whole document is
written back after every mutation. All access goes through one re-entrant
lock, so a reader sees the dataset either before or after a mutation and two
bookings can't both take the last seat.

Seat counters are never stored on the ride: ``bookings_count`` is the number
of live bookings on it and ``available_seats`` is ``total_seats`` minus that.
A ride that fills up stays active; hiding full rides from passengers is up
to the caller.
"""
import logging
import threading

from models import Booking, Ride, RIDE_OPTIONAL_FIELDS
from services.storage import empty_dataset
from utils.errors import CapacityError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

RIDE_REQUIRED_FIELDS = ("driver_telegram_id", "route", "departure_time")
BOOKING_REQUIRED_FIELDS = ("ride_id", "passenger_telegram_id", "passenger_name")


def _missing(data, fields):
    missing = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def parse_id(value, name):
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"Invalid {name}", field=name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}", field=name)


def _parse_seats(data):
    seats = data.get("available_seats", data.get("seats"))
    if seats is None:
        raise ValidationError("Missing required fields", required=["available_seats"])
    if isinstance(seats, bool) or (isinstance(seats, float) and not seats.is_integer()):
        raise ValidationError("Seat count must be a whole number", field="available_seats")
    try:
        seats = int(seats)
    except (TypeError, ValueError):
        raise ValidationError("Seat count must be a whole number", field="available_seats")
    if seats <= 0:
        raise ValidationError("Seat count must be positive", field="available_seats")
    return seats


def _optional(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_numeric(data, field):
    value = data.get(field)
    if value is None or value == "":
        return
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)


def _ride_display_fields(ride):
    """Ride fields shown next to a passenger's booking; blanks when the ride is gone."""
    if ride is None:
        return {
            "ride_route": "", "ride_date": "", "ride_time": "", "ride_price": 0,
            "driver_name": "", "driver_telegram_id": None, "driver_username": "",
            "car_info": "", "car_number": "", "description": "",
            "location_lat": None, "location_lon": None,
        }
    return {
        "ride_route": ride.route or "",
        "ride_date": ride.departure_date or "",
        "ride_time": ride.departure_time or "",
        "ride_price": ride.price or 0,
        "driver_name": ride.driver_name or "",
        "driver_telegram_id": ride.driver_telegram_id,
        "driver_username": ride.telegram_username or "",
        "car_info": ride.car_info or "",
        "car_number": ride.car_number or "",
        "description": ride.description or "",
        "location_lat": ride.location_lat,
        "location_lon": ride.location_lon,
    }


class RideRepository:
    def __init__(self, store, load_failure="reset"):
        self._store = store
        self._load_failure = load_failure
        self._lock = threading.RLock()
        self._rides = {}
        self._bookings = {}
        self._next_ride_id = 1
        self._next_booking_id = 1

    # -- document handling -------------------------------------------------

    def load(self):
        """Replace the in-memory dataset with the store's document."""
        with self._lock:
            try:
                self._apply_document(self._store.load())
            except PersistenceError:
                if self._load_failure == "fail":
                    raise
                logger.exception("Error loading dataset, starting with an empty one")
                self._apply_document(empty_dataset())
            logger.info("Dataset loaded: %d rides, %d bookings", len(self._rides), len(self._bookings))

    def _apply_document(self, document):
        try:
            rides = {r.id: r for r in (Ride.from_document(d) for d in document.get("rides", []))}
            bookings = {b.id: b for b in (Booking.from_document(d) for d in document.get("bookings", []))}
            next_ride_id = max(int(document.get("next_ride_id") or 1), max(rides, default=0) + 1)
            next_booking_id = max(int(document.get("next_booking_id") or 1), max(bookings, default=0) + 1)
        except (AttributeError, TypeError, ValueError) as e:
            raise PersistenceError(f"Malformed dataset document: {e}") from e

        self._rides = rides
        self._bookings = bookings
        self._next_ride_id = next_ride_id
        self._next_booking_id = next_booking_id

    def _to_document(self):
        return {
            "rides": [self._serialize_ride(r) for r in self._rides.values()],
            "bookings": [b.serialize() for b in self._bookings.values()],
            "next_ride_id": self._next_ride_id,
            "next_booking_id": self._next_booking_id,
        }

    def _commit(self, snapshot):
        try:
            self._store.save(self._to_document())
        except PersistenceError:
            logger.exception("Error saving dataset, rolling back")
            self._apply_document(snapshot)
            raise

    # -- helpers -------------------------------------------------------------

    def _bookings_for(self, ride_id):
        return [b for b in self._bookings.values() if b.ride_id == ride_id]

    def _serialize_ride(self, ride):
        return ride.serialize(bookings_count=len(self._bookings_for(ride.id)))

    def _available_seats(self, ride):
        return ride.total_seats - len(self._bookings_for(ride.id))

    def _close_ride(self, ride):
        """Soft-delete the ride and drop its bookings, returning who was booked."""
        bookings = self._bookings_for(ride.id)
        ride.is_active = False
        for booking in bookings:
            del self._bookings[booking.id]
        return [b.passenger() for b in bookings]

    # -- rides -------------------------------------------------------------

    def list_active_rides(self):
        with self._lock:
            return [self._serialize_ride(r) for r in self._rides.values() if r.is_active]

    def list_all_rides(self):
        with self._lock:
            return [self._serialize_ride(r) for r in self._rides.values()]

    def list_rides_by_driver(self, driver_telegram_id):
        with self._lock:
            return [
                self._serialize_ride(r) for r in self._rides.values()
                if r.is_active and r.driver_telegram_id == driver_telegram_id
            ]

    def get_ride_by_id(self, ride_id):
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None or not ride.is_active:
                return None
            return self._serialize_ride(ride)

    def create_ride(self, data):
        missing = _missing(data, RIDE_REQUIRED_FIELDS)
        if missing:
            raise ValidationError("Missing required fields", required=list(RIDE_REQUIRED_FIELDS), missing=missing)
        driver_telegram_id = parse_id(data["driver_telegram_id"], "driver_telegram_id")
        seats = _parse_seats(data)
        for field in ("price", "location_lat", "location_lon"):
            _check_numeric(data, field)

        with self._lock:
            snapshot = self._to_document()
            ride = Ride(
                id=self._next_ride_id,
                driver_telegram_id=driver_telegram_id,
                route=data["route"],
                departure_time=data["departure_time"],
                total_seats=seats,
                **{field: _optional(data.get(field)) for field in RIDE_OPTIONAL_FIELDS},
            )
            self._rides[ride.id] = ride
            self._next_ride_id += 1
            self._commit(snapshot)

        logger.info("Ride %s created by driver %s (%d seats)", ride.id, ride.driver_telegram_id, seats)
        return ride.id

    def delete_ride(self, ride_id):
        """
        Close a ride and cancel all of its bookings.

        Returns ``{"affected": 0|1, "passengers": [...]}``; the passengers are
        the ones who held bookings, so the caller can tell them. Closing a
        ride that is already inactive or unknown changes nothing.
        """
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None or not ride.is_active:
                return {"affected": 0, "passengers": []}

            snapshot = self._to_document()
            passengers = self._close_ride(ride)
            self._commit(snapshot)

        logger.info("Ride %s closed, %d bookings cancelled", ride_id, len(passengers))
        return {"affected": 1, "passengers": passengers}

    def expire_rides(self, is_expired):
        """
        Close every active ride matching ``is_expired(ride_dict)``.

        The document is saved once, and only if something changed. Returns a
        list of ``{"ride": ..., "passengers": [...]}`` for the closed rides.
        """
        with self._lock:
            expired = [r for r in self._rides.values() if r.is_active and is_expired(self._serialize_ride(r))]
            if not expired:
                return []

            snapshot = self._to_document()
            swept = []
            for ride in expired:
                passengers = self._close_ride(ride)
                swept.append({"ride": self._serialize_ride(ride), "passengers": passengers})
            self._commit(snapshot)
            return swept

    # -- bookings ------------------------------------------------------------

    def get_booking_by_id(self, booking_id):
        with self._lock:
            booking = self._bookings.get(booking_id)
            return booking.serialize() if booking else None

    def list_all_bookings(self):
        with self._lock:
            return [b.serialize() for b in self._bookings.values()]

    def list_bookings_by_ride(self, ride_id):
        with self._lock:
            return [b.serialize() for b in self._bookings_for(ride_id)]

    def list_bookings_by_user(self, passenger_telegram_id):
        """Passenger's bookings, each joined with the display fields of its ride."""
        with self._lock:
            return [
                {**b.serialize(), **_ride_display_fields(self._rides.get(b.ride_id))}
                for b in self._bookings.values()
                if b.passenger_telegram_id == passenger_telegram_id
            ]

    def create_booking(self, data):
        missing = _missing(data, BOOKING_REQUIRED_FIELDS)
        if missing:
            raise ValidationError("Missing required fields", required=list(BOOKING_REQUIRED_FIELDS), missing=missing)
        ride_id = parse_id(data["ride_id"], "ride_id")
        passenger_telegram_id = parse_id(data["passenger_telegram_id"], "passenger_telegram_id")

        with self._lock:
            # the caller may have checked the ride already, but it can close in between
            ride = self._rides.get(ride_id)
            if ride is None or not ride.is_active:
                raise NotFoundError("Ride not found", ride_id=ride_id)
            if self._available_seats(ride) <= 0:
                raise CapacityError("No seats available", ride_id=ride_id)

            snapshot = self._to_document()
            booking = Booking(
                id=self._next_booking_id,
                ride_id=ride_id,
                passenger_telegram_id=passenger_telegram_id,
                passenger_name=data["passenger_name"],
                passenger_username=_optional(data.get("passenger_username")),
            )
            self._bookings[booking.id] = booking
            self._next_booking_id += 1
            self._commit(snapshot)

        logger.info("Booking %s created on ride %s for passenger %s", booking.id, ride_id, booking.passenger_telegram_id)
        return booking.id

    def delete_booking(self, booking_id):
        """Cancel a booking, freeing its seat. Returns ``{"affected": 0|1}``."""
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                return {"affected": 0}

            snapshot = self._to_document()
            del self._bookings[booking_id]
            self._commit(snapshot)

        logger.info("Booking %s on ride %s cancelled", booking_id, booking.ride_id)
        return {"affected": 1}

    def stats(self):
        with self._lock:
            return {
                "rides": len(self._rides),
                "active_rides": sum(1 for r in self._rides.values() if r.is_active),
                "bookings": len(self._bookings),
            }
