from flask import current_app

from db import db
from services.notifier import build_notifier
from services.ride_repository import RideRepository
from services.storage import build_store
from services.sweeper import ExpirySweeper


def init_services(app, store=None, notifier=None):
    """Build the repository, sweeper and notifier and attach them to the app"""
    db.init_app(app)

    with app.app_context():
        if app.config.get("STORE_BACKEND") == "sql":
            db.create_all()
        if store is None:
            store = build_store(app.config, db=db)
        repository = RideRepository(store, load_failure=app.config.get("STORE_LOAD_FAILURE", "reset"))
        repository.load()

    notifier = notifier or build_notifier(app.config)
    sweeper = ExpirySweeper(
        repository,
        grace_minutes=app.config.get("EXPIRY_GRACE_MINUTES", 20),
        timezone=app.config.get("RIDES_TIMEZONE", "UTC"),
        notifier=notifier,
    )

    app.extensions["ride_repository"] = repository
    app.extensions["expiry_sweeper"] = sweeper
    app.extensions["notifier"] = notifier
    return repository


def get_repository():
    return current_app.extensions["ride_repository"]


def get_sweeper():
    return current_app.extensions["expiry_sweeper"]


def get_notifier():
    return current_app.extensions["notifier"]
