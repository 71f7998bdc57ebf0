from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utc_now():
    # Naive UTC, the form the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_timestamp(value):
    # Millisecond precision with a trailing Z, e.g. 2024-06-01T12:30:00.123Z
    if value is None:
        return None
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"


# --- Import Models ---
from .Song import Song
from .Rating import Rating
