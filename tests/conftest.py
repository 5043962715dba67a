import pytest

from app import create_app
from config import TestingConfig
from services.notifier import NullNotifier
from services.ride_repository import RideRepository
from services.storage import MemoryStore
from utils.errors import PersistenceError


class FlakyStore(MemoryStore):
    """MemoryStore whose saves can be switched to fail"""

    def __init__(self, dataset=None):
        super().__init__(dataset)
        self.fail_saves = False

    def save(self, dataset):
        if self.fail_saves:
            raise PersistenceError("disk full")
        super().save(dataset)


def ride_data(**overrides):
    data = {
        "driver_telegram_id": 111,
        "driver_name": "Alice",
        "route": "nvk-guk",
        "departure_date": "2026-10-17",
        "departure_time": "10:00",
        "available_seats": 3,
        "price": 150,
        "telegram_username": "alice_drives",
        "car_info": "White Kia Rio",
    }
    data.update(overrides)
    return data


def booking_data(ride_id, passenger_id=222, **overrides):
    data = {
        "ride_id": ride_id,
        "passenger_telegram_id": passenger_id,
        "passenger_name": f"Passenger {passenger_id}",
        "passenger_username": f"p{passenger_id}",
    }
    data.update(overrides)
    return data


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def repository(store):
    repo = RideRepository(store)
    repo.load()
    return repo


@pytest.fixture
def notifier():
    return NullNotifier()


@pytest.fixture
def app(store, notifier):
    return create_app(TestingConfig, store=store, notifier=notifier)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"x-admin-token": TestingConfig.ADMIN_TOKEN}
