#!/usr/bin/env python3
"""
Database setup script for the sql document store.

Creates the dataset_document table and, with ``--import PATH``, copies an
existing JSON dataset file into it.
"""
import argparse
from app import create_app
from db import db
from services.storage import JsonFileStore, SqlDocumentStore


def setup_database(app, import_path=None):
    """Initialize the database and create tables"""
    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print("✅ Database tables created successfully!")

        store = SqlDocumentStore(db, key=app.config["STORE_DOCUMENT_KEY"])
        if import_path:
            dataset = JsonFileStore(import_path).load()
            store.save(dataset)
            print(f"📥 Imported {len(dataset.get('rides', []))} rides and "
                  f"{len(dataset.get('bookings', []))} bookings from {import_path}")

        dataset = store.load()
        print(f"📊 Current dataset stats:")
        print(f"   Rides: {len(dataset.get('rides', []))}")
        print(f"   Bookings: {len(dataset.get('bookings', []))}")
        return dataset


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--import", dest="import_path", help="JSON dataset file to copy into the database")
    args = parser.parse_args()
    setup_database(create_app(), import_path=args.import_path)
