"""
Aggregation service - read-only views over entries and their activity.

list_entries(db, week_start, day, user_id, owner_id) -> list[EntryWithSummary]
    Entries newest first (by `date`). Each carries an activity_summary
    {reaction, comment, reply, reactions: {<kind>: n}}; when `user_id` (the
    viewer) is given, also the number of that viewer's unread notifications
    on the entry.

weekly_summary(db, week_start) -> WeeklySummary
    Sum of `count` per user for one Monday-aligned week. Users without
    entries that week are absent from `totals`; read a missing key as 0.

`week_start` and `day` filters take a date, a datetime or ISO text (a full
timestamp such as "2024-01-07T21:00:00.000Z" included). Text that is not
an ISO date raises InvalidFieldError.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import InvalidFieldError
from app.models.entry import Entry
from app.models.entry_activity import ActivityType, EntryActivity, ReactionKind
from app.models.notification import Notification
from app.services import tags as tag_codec
from app.services.week import day_bounds, parse_datetime, week_start as to_week_start


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class EntryWithSummary:
    entry: Entry
    tags: list[str]
    activity_summary: dict[str, Any]
    unread_activity_count: Optional[int] = None


@dataclass
class WeeklySummary:
    week_start: datetime
    totals: dict[str, int]
    entry_count: int


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


def _empty_summary() -> dict[str, Any]:
    summary: dict[str, Any] = {t.value: 0 for t in ActivityType}
    summary["reactions"] = {k.value: 0 for k in ReactionKind}
    return summary


def _parse_filter(field: str, value: Any) -> Optional[datetime]:
    if value is None:
        return None
    moment = parse_datetime(value)
    if moment is None:
        raise InvalidFieldError(field, f"{field} {value!r} is not a valid ISO date")
    return moment


# ---------------------------------------------------------------------------
# Group-by helpers
# ---------------------------------------------------------------------------

def _activity_counts(db: Session, entry_ids: list[str]) -> dict[str, dict[str, Any]]:
    """(entry_id, type) and (entry_id, reaction_kind) counts, one summary per entry."""
    summaries = {eid: _empty_summary() for eid in entry_ids}
    if not entry_ids:
        return summaries

    by_type = (
        db.query(EntryActivity.entry_id, EntryActivity.type, func.count(EntryActivity.id))
        .filter(EntryActivity.entry_id.in_(entry_ids))
        .group_by(EntryActivity.entry_id, EntryActivity.type)
        .all()
    )
    for entry_id, activity_type, n in by_type:
        summaries[entry_id][_ev(activity_type)] = n

    by_kind = (
        db.query(
            EntryActivity.entry_id, EntryActivity.reaction_kind, func.count(EntryActivity.id)
        )
        .filter(
            EntryActivity.entry_id.in_(entry_ids),
            EntryActivity.type == ActivityType.reaction,
            EntryActivity.reaction_kind.is_not(None),
        )
        .group_by(EntryActivity.entry_id, EntryActivity.reaction_kind)
        .all()
    )
    for entry_id, kind, n in by_kind:
        summaries[entry_id]["reactions"][_ev(kind)] = n
    return summaries


def _unread_counts(db: Session, entry_ids: list[str], user_id: str) -> dict[str, int]:
    if not entry_ids:
        return {}
    rows = (
        db.query(Notification.entry_id, func.count(Notification.id))
        .filter(
            Notification.entry_id.in_(entry_ids),
            Notification.user_id == user_id,
            Notification.is_read == False,  # noqa: E712
        )
        .group_by(Notification.entry_id)
        .all()
    )
    return {entry_id: n for entry_id, n in rows}


# ---------------------------------------------------------------------------
# Public - list entries
# ---------------------------------------------------------------------------

def list_entries(
    db: Session,
    week_start: Any = None,
    day: Any = None,
    user_id: Optional[str] = None,
    owner_id: Optional[str] = None,
) -> list[EntryWithSummary]:
    week = _parse_filter("week_start", week_start)
    on_day = _parse_filter("date", day)

    q = db.query(Entry)
    if week is not None:
        q = q.filter(Entry.week_start == to_week_start(week))
    if on_day is not None:
        start, end = day_bounds(on_day.date())
        q = q.filter(Entry.date >= start, Entry.date < end)
    if owner_id is not None:
        q = q.filter(Entry.user_id == owner_id)
    entries: list[Entry] = q.order_by(Entry.date.desc(), Entry.created_at.desc()).all()

    ids = [e.id for e in entries]
    summaries = _activity_counts(db, ids)
    unread = _unread_counts(db, ids, user_id) if user_id is not None else None

    return [
        EntryWithSummary(
            entry=e,
            tags=tag_codec.decode(e.tags),
            activity_summary=summaries[e.id],
            unread_activity_count=unread.get(e.id, 0) if unread is not None else None,
        )
        for e in entries
    ]


# ---------------------------------------------------------------------------
# Public - weekly totals
# ---------------------------------------------------------------------------

def weekly_summary(db: Session, week_start: Any = None) -> WeeklySummary:
    """Totals for the week containing `week_start` (default: the current week)."""
    moment = _parse_filter("week_start", week_start)
    week = to_week_start(moment if moment is not None else datetime.now())
    rows = (
        db.query(Entry.user_id, func.sum(Entry.count), func.count(Entry.id))
        .filter(Entry.week_start == week)
        .group_by(Entry.user_id)
        .all()
    )
    totals = {user_id: int(total) for user_id, total, _ in rows}
    entry_count = sum(n for _, _, n in rows)
    return WeeklySummary(week_start=week, totals=totals, entry_count=entry_count)
