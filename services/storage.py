"""
Document stores for the rides dataset.

Every store loads and saves the entire dataset as one JSON-compatible dict.
Failures are raised as PersistenceError so the repository can decide whether
to reset, roll back or surface them.
"""
import copy
import datetime
import json
import logging
import os
import tempfile

from sqlalchemy.exc import SQLAlchemyError

from db import DatasetDocument
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)


def empty_dataset():
    return {"rides": [], "bookings": [], "next_ride_id": 1, "next_booking_id": 1}


class DocumentStore:
    def load(self):
        raise NotImplementedError

    def save(self, dataset):
        raise NotImplementedError


class MemoryStore(DocumentStore):
    def __init__(self, dataset=None):
        self.dataset = copy.deepcopy(dataset) if dataset is not None else None
        self.saves = 0

    def load(self):
        if self.dataset is None:
            return empty_dataset()
        return copy.deepcopy(self.dataset)

    def save(self, dataset):
        self.dataset = copy.deepcopy(dataset)
        self.saves += 1


class JsonFileStore(DocumentStore):
    def __init__(self, path):
        self.path = os.path.abspath(path)

    def load(self):
        if not os.path.exists(self.path):
            logger.info("No dataset at %s, starting empty", self.path)
            return empty_dataset()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to load dataset from {self.path}: {e}") from e

    def save(self, dataset):
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".dataset-", suffix=".json", dir=os.path.dirname(self.path))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dataset, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Failed to save dataset to {self.path}: {e}") from e


class SqlDocumentStore(DocumentStore):
    """Keeps the dataset in a single DatasetDocument row. Needs an app context."""

    def __init__(self, db, key="rideshare"):
        self.db = db
        self.key = key

    def _row(self):
        return DatasetDocument.query.filter_by(key=self.key).first()

    def load(self):
        try:
            row = self._row()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"Failed to load dataset '{self.key}': {e}") from e
        if row is None:
            return empty_dataset()
        return copy.deepcopy(row.data)

    def save(self, dataset):
        try:
            row = self._row()
            if row is None:
                row = DatasetDocument(key=self.key, data=copy.deepcopy(dataset))
                self.db.session.add(row)
            else:
                # JSON columns don't track in-place mutation, so assign a fresh object
                row.data = copy.deepcopy(dataset)
                row.updated_at = datetime.datetime.utcnow()
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceError(f"Failed to save dataset '{self.key}': {e}") from e


def build_store(config, db=None):
    backend = config.get("STORE_BACKEND", "file")
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        if db is None:
            raise ValueError("The sql store backend needs a SQLAlchemy instance")
        return SqlDocumentStore(db, key=config.get("STORE_DOCUMENT_KEY", "rideshare"))
    if backend == "file":
        return JsonFileStore(config.get("DATABASE_PATH", "database.json"))
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")
