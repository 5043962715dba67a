import datetime

from staging_seed import NUM_RIDES, seed_dataset


def test_seed_fills_repository_consistently(repository):
    ride_ids = seed_dataset(repository, seed=7, today=datetime.date(2026, 10, 17))

    assert len(ride_ids) == NUM_RIDES
    assert len(repository.list_active_rides()) == NUM_RIDES
    for ride in repository.list_all_rides():
        assert ride["available_seats"] + ride["bookings_count"] == ride["total_seats"]
        assert ride["available_seats"] >= 0
