"""
Expiry sweep for rides whose departure has passed.

A ride expires ``grace_minutes`` after its departure date and time. Rides
without a parseable date and time never expire. Expired rides are closed
the same way a driver closes them: deactivated, with their bookings removed.
"""
import logging
import threading
from datetime import datetime, timedelta

import pytz

from utils.helper import departure_datetime

logger = logging.getLogger(__name__)

GRACE_MINUTES = 20


class ExpirySweeper:
    def __init__(self, repository, grace_minutes=GRACE_MINUTES, timezone="UTC", notifier=None):
        self.repository = repository
        self.grace = timedelta(minutes=grace_minutes)
        self.timezone = timezone
        self.notifier = notifier
        self._in_flight = threading.Lock()

    def expires_at(self, ride):
        departure = departure_datetime(ride.get("departure_date"), ride.get("departure_time"), self.timezone)
        if departure is None:
            return None
        return departure + self.grace

    def is_expired(self, ride, now):
        expiry = self.expires_at(ride)
        return expiry is not None and now > expiry

    def sweep(self, now=None):
        """Close expired rides and return how many were closed."""
        if not self._in_flight.acquire(blocking=False):
            logger.info("Sweep already running, skipping")
            return 0
        try:
            now = now or datetime.now(pytz.utc)
            if now.tzinfo is None:
                now = pytz.utc.localize(now)
            swept = self.repository.expire_rides(lambda ride: self.is_expired(ride, now))
        finally:
            self._in_flight.release()

        if swept:
            logger.info("Expired %d rides: %s", len(swept), [s["ride"]["id"] for s in swept])
            if self.notifier is not None:
                for item in swept:
                    self.notifier.notify_ride_expired(item["ride"], item["passengers"])
        return len(swept)
