"""
Unit tests for the aggregation service.

Each test uses its own far-future week and throwaway users so totals are
not affected by rows other tests leave in the shared session database.
"""
from datetime import date, datetime, timedelta

import pytest

from app.core.errors import InvalidFieldError

from app.services.activity import mark_read, record_activity
from app.services.aggregation import list_entries, weekly_summary
from app.services.entries import create_entry
from app.services.week import week_start


def _monday(anchor: str) -> datetime:
    return week_start(anchor)


def _day(monday: datetime, offset: int, hour: int = 12) -> str:
    return (monday + timedelta(days=offset, hours=hour)).isoformat()


class TestWeeklySummary:
    def test_totals_per_user(self, db, make_user):
        monday = _monday("2090-01-04")
        u1, u2 = make_user(), make_user()
        create_entry(db, u1.id, _day(monday, 0), 3)   # Mon
        create_entry(db, u1.id, _day(monday, 2), 2)   # Wed
        create_entry(db, u2.id, _day(monday, 1), 5)   # Tue

        result = weekly_summary(db, monday.date())
        assert result.week_start == monday
        assert result.totals == {u1.id: 5, u2.id: 5}
        assert result.entry_count == 3

    def test_users_without_entries_are_omitted(self, db, make_user):
        monday = _monday("2090-02-08")
        active, idle = make_user(), make_user()
        create_entry(db, active.id, _day(monday, 4), 7)
        result = weekly_summary(db, monday.date())
        assert idle.id not in result.totals
        assert result.totals.get(idle.id, 0) == 0

    def test_any_day_of_week_selects_that_week(self, db, make_user):
        monday = _monday("2090-03-08")
        user = make_user()
        create_entry(db, user.id, _day(monday, 6, hour=23), 4)   # Sunday night
        by_monday = weekly_summary(db, monday.date())
        by_thursday = weekly_summary(db, (monday + timedelta(days=3)).date())
        assert by_monday.totals == by_thursday.totals == {user.id: 4}

    def test_next_week_is_separate(self, db, make_user):
        monday = _monday("2090-04-05")
        user = make_user()
        create_entry(db, user.id, _day(monday, 6), 1)
        create_entry(db, user.id, _day(monday, 7), 10)   # following Monday
        assert weekly_summary(db, monday.date()).totals == {user.id: 1}

    def test_empty_week(self, db):
        result = weekly_summary(db, date(2090, 5, 1))
        assert result.totals == {}
        assert result.entry_count == 0

    def test_full_timestamp_selects_its_week(self, db, make_user):
        monday = _monday("2090-12-06")
        user = make_user()
        create_entry(db, user.id, _day(monday, 3), 6)
        stamp = f"{(monday + timedelta(days=1)).date().isoformat()}T21:00:00.000"
        result = weekly_summary(db, stamp)
        assert result.week_start == monday
        assert result.totals == {user.id: 6}

    def test_garbage_week_rejected(self, db):
        with pytest.raises(InvalidFieldError):
            weekly_summary(db, "soon")

    def test_defaults_to_current_week(self, db):
        result = weekly_summary(db)
        assert result.week_start == week_start(datetime.now())


class TestListEntries:
    def test_sorted_newest_first(self, db, make_user):
        monday = _monday("2090-06-07")
        user = make_user()
        create_entry(db, user.id, _day(monday, 0), 1)
        create_entry(db, user.id, _day(monday, 3), 1)
        create_entry(db, user.id, _day(monday, 1), 1)

        items = list_entries(db, week_start=monday.date())
        dates = [item.entry.date for item in items]
        assert dates == sorted(dates, reverse=True)
        assert len(items) == 3

    def test_date_filter_matches_whole_day(self, db, make_user):
        monday = _monday("2090-07-05")
        user = make_user()
        wanted_day = (monday + timedelta(days=2)).date()
        create_entry(db, user.id, datetime.combine(wanted_day, datetime.min.time()).isoformat(), 1)
        create_entry(db, user.id, f"{wanted_day.isoformat()}T23:59:59.999000", 2)
        create_entry(db, user.id, _day(monday, 3, hour=0), 3)   # next midnight

        items = list_entries(db, day=wanted_day)
        assert sorted(item.entry.count for item in items) == [1, 2]

    def test_owner_filter(self, db, make_user):
        monday = _monday("2090-08-09")
        a, b = make_user(), make_user()
        create_entry(db, a.id, _day(monday, 0), 1)
        create_entry(db, b.id, _day(monday, 0), 1)
        items = list_entries(db, week_start=monday.date(), owner_id=a.id)
        assert [item.entry.user_id for item in items] == [a.id]

    def test_activity_summary_counts_by_type(self, db, make_user):
        monday = _monday("2090-09-06")
        owner, friend = make_user(), make_user()
        entry = create_entry(db, owner.id, _day(monday, 0), 1, tags=["x", "y"])
        quiet = create_entry(db, owner.id, _day(monday, 1), 1)
        comment = record_activity(db, entry.id, friend.id, "comment", content="c")
        record_activity(db, entry.id, friend.id, "reaction", reaction_kind="love")
        record_activity(db, entry.id, owner.id, "reaction", reaction_kind="smile")
        record_activity(db, entry.id, owner.id, "reaction", reaction_kind="love")
        record_activity(db, entry.id, owner.id, "reply", content="r", parent_id=comment.activity.id)

        items = {item.entry.id: item for item in list_entries(db, week_start=monday.date())}
        summary = items[entry.id].activity_summary
        assert {k: summary[k] for k in ("reaction", "comment", "reply")} == {
            "reaction": 3, "comment": 1, "reply": 1,
        }
        assert summary["reactions"] == {
            "thumbs_up": 0, "love": 2, "smile": 1, "cry": 0, "side_eye": 0, "kind": 0,
        }
        assert items[entry.id].tags == ["x", "y"]

        empty = items[quiet.id].activity_summary
        assert empty["reaction"] == empty["comment"] == empty["reply"] == 0
        assert set(empty["reactions"]) == {"thumbs_up", "love", "smile", "cry", "side_eye", "kind"}
        assert sum(empty["reactions"].values()) == 0

    def test_week_filter_accepts_full_timestamp(self, db, make_user):
        monday = _monday("2090-11-08")
        user = make_user()
        created = create_entry(db, user.id, _day(monday, 2), 1)
        stamp = f"{(monday + timedelta(days=2)).date().isoformat()}T15:30:00.000"
        items = list_entries(db, week_start=stamp, owner_id=user.id)
        assert [item.entry.id for item in items] == [created.id]

    def test_date_filter_accepts_full_timestamp(self, db, make_user):
        monday = _monday("2090-11-15")
        user = make_user()
        created = create_entry(db, user.id, _day(monday, 1, hour=9), 1)
        create_entry(db, user.id, _day(monday, 2, hour=9), 1)
        stamp = f"{(monday + timedelta(days=1)).date().isoformat()}T18:45:00"
        items = list_entries(db, day=stamp, owner_id=user.id)
        assert [item.entry.id for item in items] == [created.id]

    @pytest.mark.parametrize("field", ["week_start", "day"])
    def test_garbage_filter_rejected(self, db, field):
        with pytest.raises(InvalidFieldError) as exc:
            list_entries(db, **{field: "next tuesday"})
        assert exc.value.details["errors"][0]["field"] == ("date" if field == "day" else field)

    def test_unread_count_only_with_viewer(self, db, make_user):
        monday = _monday("2090-10-04")
        owner, friend = make_user(), make_user()
        entry = create_entry(db, owner.id, _day(monday, 0), 1)
        record_activity(db, entry.id, friend.id, "comment", content="1")
        record_activity(db, entry.id, friend.id, "comment", content="2")

        anonymous = list_entries(db, week_start=monday.date())
        assert anonymous[0].unread_activity_count is None

        as_owner = list_entries(db, week_start=monday.date(), user_id=owner.id)
        assert as_owner[0].unread_activity_count == 2

        as_friend = list_entries(db, week_start=monday.date(), user_id=friend.id)
        assert as_friend[0].unread_activity_count == 0

        mark_read(db, entry.id, owner.id)
        as_owner = list_entries(db, week_start=monday.date(), user_id=owner.id)
        assert as_owner[0].unread_activity_count == 0
