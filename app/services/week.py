"""
Week key: every timestamp maps to the Monday 00:00 (local, naive) of the
ISO week that contains it. Entries and weekly totals are grouped by this key.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)


def to_local_naive(value: datetime) -> datetime:
    """Aware datetimes are shifted to the server's local zone; naive ones are kept."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of an ISO string / date / datetime to a naive
    local datetime. Returns None when the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_local_naive(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def week_start(value: Any, now: Optional[datetime] = None) -> datetime:
    """
    Return the Monday 00:00:00 of the week containing `value`.

    An unparseable value is logged and replaced by `now` (the current
    instant when not given), so the result is never None.
    """
    moment = parse_datetime(value)
    if moment is None:
        logger.warning("Unparseable date %r; using current time for week start", value)
        moment = to_local_naive(now) if now is not None else datetime.now()
    monday = moment.date() - timedelta(days=moment.weekday())
    return datetime.combine(monday, time.min)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [00:00, next 00:00) range covering one calendar day."""
    if isinstance(day, datetime):
        day = to_local_naive(day).date()
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
