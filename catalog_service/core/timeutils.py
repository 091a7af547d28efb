"""Time helpers.

Timestamps are stored and compared as naive UTC datetimes so that values read
back from SQLite (which drops tzinfo) compare cleanly with freshly stamped ones.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
