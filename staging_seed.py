import datetime
import random
from config import StagingConfig
from services.storage import build_store
from services.ride_repository import RideRepository

NUM_RIDES = 6
MAX_BOOKINGS_PER_RIDE = 3

testDrivers = {
    1: {"driver_telegram_id": 100001, "driver_name": "Alice", "telegram_username": "alice_drives",
        "car_info": "White Kia Rio", "car_number": "A123BC"},
    2: {"driver_telegram_id": 100002, "driver_name": "Boris", "telegram_username": "boris_nvk",
        "car_info": "Grey Skoda Octavia", "car_number": "K777MM"},
    3: {"driver_telegram_id": 100003, "driver_name": "Carmen", "telegram_username": None,
        "car_info": "Blue Hyundai Solaris", "car_number": "O555OO"},
}

testPassengers = [
    {"passenger_telegram_id": 200001, "passenger_name": "Dmitry", "passenger_username": "dima"},
    {"passenger_telegram_id": 200002, "passenger_name": "Elena", "passenger_username": None},
    {"passenger_telegram_id": 200003, "passenger_name": "Farid", "passenger_username": "farid_k"},
    {"passenger_telegram_id": 200004, "passenger_name": "Galina", "passenger_username": "galya"},
]

ROUTES = ["nvk-guk", "guk-nvk"]


def seed_dataset(repository, seed=None, today=None):
    """Fill an empty repository with demo rides and bookings; returns the new ride ids"""
    rng = random.Random(seed)
    today = today or datetime.date.today()

    ride_ids = []
    for i in range(NUM_RIDES):
        driver = testDrivers[i % len(testDrivers) + 1]
        departure = today + datetime.timedelta(days=i // 2)
        ride_id = repository.create_ride({
            **driver,
            "route": ROUTES[i % len(ROUTES)],
            "departure_date": departure.isoformat(),
            "departure_time": f"{8 + i:02d}:30",
            "available_seats": rng.randint(2, 4),
            "price": rng.choice([100, 150, 200]),
            "description": "Leaving from the main entrance",
        })
        ride_ids.append(ride_id)

        for passenger in rng.sample(testPassengers, rng.randint(0, MAX_BOOKINGS_PER_RIDE)):
            ride = repository.get_ride_by_id(ride_id)
            if ride["available_seats"] <= 0:
                break
            repository.create_booking({**passenger, "ride_id": ride_id})
    return ride_ids


if __name__ == "__main__":
    config = {k: getattr(StagingConfig, k) for k in dir(StagingConfig) if k.isupper()}
    if config["STORE_BACKEND"] == "sql":
        raise SystemExit("Seed the sql backend through setup_db.py --import instead")

    repository = RideRepository(build_store(config))
    repository.load()
    print("Seeding rides...")
    ids = seed_dataset(repository)
    stats = repository.stats()
    print(f"✅ Seed complete: {len(ids)} rides added, {stats['bookings']} bookings in total.")
