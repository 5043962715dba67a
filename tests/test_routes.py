import pytest

from app import create_app
from config import TestingConfig
from conftest import booking_data, ride_data


def post_ride(client, **overrides):
    response = client.post("/api/rides", json=ride_data(**overrides))
    assert response.status_code == 201
    return response.get_json()["rideId"]


def post_booking(client, ride_id, passenger_id=222, **overrides):
    return client.post("/api/bookings", json=booking_data(ride_id, passenger_id, **overrides))


def test_health(client):
    body = client.get("/health").get_json()
    assert body["status"] == "ok"
    assert body["uptime"] >= 0
    assert body["timestamp"]


class TestRides:
    def test_create_and_fetch(self, client):
        ride_id = post_ride(client)
        body = client.get(f"/api/rides/{ride_id}").get_json()
        assert body["success"] is True
        assert body["ride"]["available_seats"] == 3

    def test_create_with_missing_fields(self, client):
        response = client.post("/api/rides", json={"route": "nvk-guk"})
        assert response.status_code == 400
        body = response.get_json()
        assert body["success"] is False
        assert "driver_telegram_id" in body["details"]["missing"]

    def test_create_with_non_json_body(self, client):
        response = client.post("/api/rides", data="not json", content_type="text/plain")
        assert response.status_code == 400

    def test_unknown_ride_is_404(self, client):
        response = client.get("/api/rides/99")
        assert response.status_code == 404
        assert response.get_json() == {"success": False, "error": "Ride not found", "details": {"ride_id": 99}}

    def test_passenger_list_hides_full_rides(self, client):
        full = post_ride(client, available_seats=1)
        open_ride = post_ride(client)
        post_booking(client, full)

        rides = client.get("/api/rides").get_json()["rides"]
        assert [r["id"] for r in rides] == [open_ride]

        driver_rides = client.get("/api/rides/driver/111").get_json()["rides"]
        assert [r["id"] for r in driver_rides] == [full, open_ride]

    def test_driver_id_sent_as_string_lists_under_driver(self, client):
        ride_id = post_ride(client, driver_telegram_id="111")
        driver_rides = client.get("/api/rides/driver/111").get_json()["rides"]
        assert [r["id"] for r in driver_rides] == [ride_id]
        assert driver_rides[0]["driver_telegram_id"] == 111

    def test_delete_notifies_passengers(self, client, notifier):
        ride_id = post_ride(client)
        post_booking(client, ride_id, 201)
        post_booking(client, ride_id, 202)
        notifier.sent.clear()

        response = client.delete(f"/api/rides/{ride_id}")
        assert response.status_code == 200
        assert response.get_json()["passengersNotified"] == 2
        assert [m["chat_id"] for m in notifier.sent] == [201, 202]
        assert "Ride cancelled" in notifier.sent[0]["text"]

        assert client.get(f"/api/bookings/ride/{ride_id}").get_json()["bookings"] == []
        assert client.delete(f"/api/rides/{ride_id}").status_code == 404


class TestBookings:
    def test_booking_notifies_driver_on_request(self, client, notifier):
        ride_id = post_ride(client)
        response = post_booking(client, ride_id, passenger_username="dima", notify_driver=True)

        assert response.status_code == 201
        assert response.get_json() == {"success": True, "bookingId": 1}
        assert notifier.sent[-1]["chat_id"] == 111
        assert "@dima" in notifier.sent[-1]["text"]
        assert "NVK → GUK" in notifier.sent[-1]["text"]

    def test_booking_does_not_notify_by_default(self, client, notifier):
        ride_id = post_ride(client)
        post_booking(client, ride_id)
        assert notifier.sent == []

    def test_booking_then_notify_sends_one_message(self, client, notifier):
        ride_id = post_ride(client)
        assert post_booking(client, ride_id, passenger_username="dima").status_code == 201
        response = client.post("/api/notify", json={
            "ride_id": ride_id, "passenger_name": "Passenger 222", "passenger_username": "dima",
        })

        assert response.status_code == 200
        to_driver = [m for m in notifier.sent if m["chat_id"] == 111]
        assert len(to_driver) == 1
        assert "@dima" in to_driver[0]["text"]
        assert to_driver[0]["parse_mode"] is None

    def test_booking_unknown_ride(self, client):
        response = post_booking(client, 42)
        assert response.status_code == 404

    def test_booking_full_ride(self, client):
        ride_id = post_ride(client, available_seats=1)
        post_booking(client, ride_id, 201)
        response = post_booking(client, ride_id, 202)

        assert response.status_code == 400
        assert response.get_json()["error"] == "No seats available"

    def test_list_and_cancel(self, client):
        ride_id = post_ride(client)
        booking_id = post_booking(client, ride_id, 201).get_json()["bookingId"]

        by_ride = client.get(f"/api/bookings/ride/{ride_id}").get_json()["bookings"]
        assert [b["id"] for b in by_ride] == [booking_id]

        by_user = client.get("/api/bookings/user/201").get_json()["bookings"]
        assert by_user[0]["ride_route"] == "nvk-guk"
        assert by_user[0]["driver_name"] == "Alice"

        assert client.delete(f"/api/bookings/{booking_id}").get_json() == {"success": True, "affected": 1}
        assert client.delete(f"/api/bookings/{booking_id}").get_json() == {"success": True, "affected": 0}
        assert client.get(f"/api/rides/{ride_id}").get_json()["ride"]["available_seats"] == 3

    def test_notify_endpoint(self, client, notifier):
        ride_id = post_ride(client)
        response = client.post("/api/notify", json={
            "ride_id": ride_id, "passenger_name": "Elena", "driver_telegram_id": 555,
        })
        assert response.status_code == 200
        assert notifier.sent[-1]["chat_id"] == 111

    def test_notify_unknown_ride(self, client):
        assert client.post("/api/notify", json={"ride_id": 9, "passenger_name": "x"}).status_code == 404

    def test_save_failure_is_500(self, client, store):
        ride_id = post_ride(client)
        store.fail_saves = True
        response = post_booking(client, ride_id)
        assert response.status_code == 500
        assert response.get_json()["success"] is False


class TestAdmin:
    def test_requires_token(self, client):
        assert client.get("/api/admin/rides").status_code == 401
        assert client.get("/api/admin/rides", headers={"x-admin-token": "wrong"}).status_code == 401

    def test_bearer_token_is_accepted(self, client):
        headers = {"Authorization": f"Bearer {TestingConfig.ADMIN_TOKEN}"}
        assert client.get("/api/admin/stats", headers=headers).status_code == 200

    def test_lists_include_closed_rides(self, client, admin_headers):
        closed = post_ride(client)
        post_ride(client)
        post_booking(client, closed)
        client.delete(f"/api/rides/{closed}")

        rides = client.get("/api/admin/rides", headers=admin_headers).get_json()["rides"]
        assert [r["is_active"] for r in rides] == [False, True]
        assert client.get("/api/admin/bookings", headers=admin_headers).get_json()["bookings"] == []

        stats = client.get("/api/admin/stats", headers=admin_headers).get_json()
        assert stats["rides"] == 2
        assert stats["active_rides"] == 1

    def test_cleanup_sweeps_expired(self, client, admin_headers):
        post_ride(client, departure_date="2020-01-01", departure_time="08:00")
        post_ride(client, departure_date="2099-01-01", departure_time="08:00")

        body = client.post("/api/admin/cleanup", headers=admin_headers).get_json()
        assert body == {"success": True, "deletedCount": 1}
        assert client.post("/api/admin/cleanup", headers=admin_headers).get_json()["deletedCount"] == 0

    def test_unconfigured_token_disables_admin(self, store, notifier):
        class NoAdminConfig(TestingConfig):
            ADMIN_TOKEN = None

        client = create_app(NoAdminConfig, store=store, notifier=notifier).test_client()
        assert client.get("/api/admin/rides", headers={"x-admin-token": ""}).status_code == 503


@pytest.mark.parametrize("path", ["/api/unknown", "/api/rides/abc"])
def test_unknown_paths_return_json_404(client, path):
    response = client.get(path)
    assert response.status_code == 404
    assert response.get_json()["success"] is False
