from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import DateTime
import datetime

db = SQLAlchemy()


# the whole rides/bookings dataset lives in one JSON row per key
class DatasetDocument(db.Model):
    __tablename__ = "dataset_document"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    key = db.Column(db.String, nullable=False, unique=True)
    data = db.Column(db.JSON, nullable=False, default=dict)
    updated_at = db.Column(DateTime, nullable=False, default=datetime.datetime.utcnow)

    def __init__(self, **kwargs):
        self.key = kwargs.get("key")
        self.data = kwargs.get("data", {})
        self.updated_at = kwargs.get("updated_at", datetime.datetime.utcnow())

    def serialize(self):
        return {
            "id": self.id,
            "key": self.key,
            "data": self.data,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None
        }
