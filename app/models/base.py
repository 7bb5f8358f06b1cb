import uuid
from datetime import datetime, timezone

from app.extensions import db


def utcnow():
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return str(uuid.uuid4())


def to_iso(value):
    """Serialize a stored (naive UTC) datetime as an ISO-8601 instant."""
    if value is None:
        return None
    return value.isoformat(timespec='milliseconds') + 'Z'


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)
