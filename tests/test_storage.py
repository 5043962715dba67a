import json

import pytest
from flask import Flask

from conftest import booking_data, ride_data
from db import DatasetDocument, db
from services.ride_repository import RideRepository
from services.storage import (
    JsonFileStore,
    MemoryStore,
    SqlDocumentStore,
    build_store,
    empty_dataset,
)
from utils.errors import PersistenceError


class TestJsonFileStore:
    def test_missing_file_loads_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "database.json").load() == empty_dataset()

    def test_save_writes_whole_document(self, tmp_path):
        path = tmp_path / "database.json"
        store = JsonFileStore(path)
        store.save({"rides": [{"id": 1, "route": "НВК → ГУК"}], "bookings": []})

        assert json.loads(path.read_text(encoding="utf-8"))["rides"][0]["route"] == "НВК → ГУК"
        assert [p.name for p in tmp_path.iterdir()] == ["database.json"]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileStore(path).load()

    def test_unwritable_location_raises(self, tmp_path):
        with pytest.raises(PersistenceError):
            JsonFileStore(tmp_path / "missing" / "database.json").save(empty_dataset())

    def test_repository_survives_restart(self, tmp_path):
        path = tmp_path / "database.json"
        repository = RideRepository(JsonFileStore(path))
        repository.load()
        ride_id = repository.create_ride(ride_data())
        booking_id = repository.create_booking(booking_data(ride_id))
        repository.delete_booking(booking_id)

        reopened = RideRepository(JsonFileStore(path))
        reopened.load()
        assert reopened.get_ride_by_id(ride_id)["available_seats"] == 3
        assert reopened.create_booking(booking_data(ride_id)) == booking_id + 1

    def test_corrupt_file_resets_repository(self, tmp_path):
        path = tmp_path / "database.json"
        path.write_text("{not json", encoding="utf-8")
        repository = RideRepository(JsonFileStore(path))
        repository.load()
        assert repository.list_all_rides() == []


@pytest.fixture
def sql_app():
    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
    db.init_app(app)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


class TestSqlDocumentStore:
    def test_empty_table_loads_empty(self, sql_app):
        assert SqlDocumentStore(db).load() == empty_dataset()

    def test_save_inserts_then_updates_one_row(self, sql_app):
        store = SqlDocumentStore(db, key="rides-test")
        store.save({"rides": [], "bookings": [], "next_ride_id": 1, "next_booking_id": 1})
        store.save({"rides": [{"id": 1}], "bookings": [], "next_ride_id": 2, "next_booking_id": 1})

        assert DatasetDocument.query.count() == 1
        assert store.load()["next_ride_id"] == 2

    def test_keys_are_separate_documents(self, sql_app):
        SqlDocumentStore(db, key="a").save({"rides": [{"id": 1}], "bookings": []})
        assert SqlDocumentStore(db, key="b").load() == empty_dataset()

    def test_repository_on_sql_store(self, sql_app):
        repository = RideRepository(SqlDocumentStore(db))
        repository.load()
        ride_id = repository.create_ride(ride_data())
        repository.create_booking(booking_data(ride_id))

        reopened = RideRepository(SqlDocumentStore(db))
        reopened.load()
        assert reopened.get_ride_by_id(ride_id)["bookings_count"] == 1

    def test_missing_table_raises(self):
        app = Flask(__name__)
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
        db.init_app(app)
        with app.app_context():
            with pytest.raises(PersistenceError):
                SqlDocumentStore(db).load()


def test_memory_store_hands_out_copies():
    store = MemoryStore()
    store.save({"rides": [{"id": 1}], "bookings": []})
    store.load()["rides"].clear()
    assert store.load()["rides"] == [{"id": 1}]
    assert store.saves == 1


@pytest.mark.parametrize("backend,expected", [
    ("memory", MemoryStore),
    ("file", JsonFileStore),
    ("sql", SqlDocumentStore),
])
def test_build_store(backend, expected):
    assert isinstance(build_store({"STORE_BACKEND": backend}, db=db), expected)


def test_build_store_rejects_unknown_backend():
    with pytest.raises(ValueError):
        build_store({"STORE_BACKEND": "mongo"})
