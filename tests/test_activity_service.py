"""
Unit tests for activity recording and notification fan-out.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import InvalidFieldError, NotFoundError
from app.models.entry_activity import EntryActivity
from app.models.notification import Notification
from app.services.activity import (
    list_activities,
    mark_read,
    record_activity,
    unread_count,
)
from app.services.entries import create_entry


@pytest.fixture()
def pair(db, make_user):
    """An entry owner, a friend, and one entry owned by the owner."""
    owner, friend = make_user("Owner"), make_user("Friend")
    entry = create_entry(db, owner.id, "2024-01-08", 3)
    return owner, friend, entry


def _notifications_for(db, activity_id: str) -> int:
    return db.query(Notification).filter(Notification.activity_id == activity_id).count()


class TestFanOut:
    def test_self_activity_creates_no_notification(self, db, pair):
        owner, _, entry = pair
        result = record_activity(db, entry.id, owner.id, "comment", content="my own note")
        assert result.notification is None
        assert _notifications_for(db, result.activity.id) == 0

    def test_foreign_activity_creates_exactly_one(self, db, pair):
        owner, friend, entry = pair
        result = record_activity(db, entry.id, friend.id, "reaction", reaction_kind="love")
        assert result.notification is not None
        assert result.notification.user_id == owner.id
        assert result.notification.actor_id == friend.id
        assert result.notification.is_read is False
        assert _notifications_for(db, result.activity.id) == 1

    def test_notification_copies_activity_type(self, db, pair):
        _, friend, entry = pair
        result = record_activity(db, entry.id, friend.id, "comment", content="wow")
        assert result.notification.type.value == "comment"
        assert result.notification.entry_id == entry.id


class TestValidation:
    def test_unknown_entry(self, db, pair):
        _, friend, _ = pair
        with pytest.raises(NotFoundError):
            record_activity(db, "missing", friend.id, "comment", content="hi")

    def test_unknown_actor(self, db, pair):
        _, _, entry = pair
        with pytest.raises(NotFoundError):
            record_activity(db, entry.id, "ghost", "comment", content="hi")

    def test_unknown_type(self, db, pair):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "poke")

    def test_reaction_needs_kind(self, db, pair):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "reaction")

    def test_comment_rejects_reaction_kind(self, db, pair):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "comment", content="x", reaction_kind="love")

    @pytest.mark.parametrize("content", [None, "", "   "])
    def test_comment_needs_content(self, db, pair, content):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "comment", content=content)

    def test_reply_needs_parent(self, db, pair):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "reply", content="re")

    def test_reply_parent_must_be_comment_on_same_entry(self, db, pair):
        owner, friend, entry = pair
        other_entry = create_entry(db, owner.id, "2024-01-09", 1)
        foreign = record_activity(db, other_entry.id, friend.id, "comment", content="elsewhere")
        with pytest.raises(NotFoundError):
            record_activity(
                db, entry.id, owner.id, "reply", content="re", parent_id=foreign.activity.id
            )

    def test_reply_to_reaction_rejected(self, db, pair):
        owner, friend, entry = pair
        reaction = record_activity(db, entry.id, friend.id, "reaction", reaction_kind="smile")
        with pytest.raises(NotFoundError):
            record_activity(
                db, entry.id, owner.id, "reply", content="re", parent_id=reaction.activity.id
            )

    def test_rejected_activity_is_not_persisted(self, db, pair):
        _, friend, entry = pair
        with pytest.raises(InvalidFieldError):
            record_activity(db, entry.id, friend.id, "reaction")
        assert db.query(EntryActivity).filter(EntryActivity.entry_id == entry.id).count() == 0


class TestListActivities:
    def test_creation_order_and_split(self, db, pair):
        owner, friend, entry = pair
        first = record_activity(db, entry.id, friend.id, "comment", content="first")
        record_activity(db, entry.id, friend.id, "reaction", reaction_kind="thumbs_up")
        reply = record_activity(
            db, entry.id, owner.id, "reply", content="second", parent_id=first.activity.id
        )
        record_activity(db, entry.id, owner.id, "reaction", reaction_kind="kind")

        result = list_activities(db, entry.id)
        assert [a.content for a in result.comments] == ["first", "second"]
        assert result.comments[1].parent_id == first.activity.id
        assert result.comments[1].id == reply.activity.id
        assert [a.reaction_kind.value for a in result.reactions] == ["thumbs_up", "kind"]

    def test_seq_increases_per_entry(self, db, pair):
        _, friend, entry = pair
        a = record_activity(db, entry.id, friend.id, "comment", content="a").activity
        b = record_activity(db, entry.id, friend.id, "comment", content="b").activity
        assert b.seq == a.seq + 1

    def test_unknown_entry(self, db):
        with pytest.raises(NotFoundError):
            list_activities(db, "missing")


class TestUnreadAndMarkRead:
    def test_unread_counts_and_mark_read(self, db, make_user):
        owner, friend, bystander = make_user(), make_user(), make_user()
        e1 = create_entry(db, owner.id, "2024-01-08", 1)
        e2 = create_entry(db, owner.id, "2024-01-09", 1)
        record_activity(db, e1.id, friend.id, "comment", content="one")
        record_activity(db, e1.id, friend.id, "reaction", reaction_kind="love")
        record_activity(db, e2.id, friend.id, "comment", content="two")
        record_activity(db, e1.id, owner.id, "comment", content="self")

        assert unread_count(db, owner.id) == 3
        assert unread_count(db, friend.id) == 0

        assert mark_read(db, e1.id, bystander.id) == 0
        assert unread_count(db, owner.id) == 3

        assert mark_read(db, e1.id, owner.id) == 2
        assert unread_count(db, owner.id) == 1

        assert mark_read(db, e2.id, owner.id) == 1
        assert unread_count(db, owner.id) == 0

    def test_mark_read_is_idempotent(self, db, pair):
        owner, friend, entry = pair
        record_activity(db, entry.id, friend.id, "comment", content="ping")
        assert mark_read(db, entry.id, owner.id) == 1
        assert mark_read(db, entry.id, owner.id) == 0
        assert unread_count(db, owner.id) == 0

    def test_failed_commit_leaves_notifications_unread(self, db, pair, monkeypatch):
        owner, friend, entry = pair
        record_activity(db, entry.id, friend.id, "comment", content="hey")
        before = unread_count(db, owner.id)

        def broken_commit():
            raise SQLAlchemyError("database went away")

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(SQLAlchemyError):
            mark_read(db, entry.id, owner.id)
        assert unread_count(db, owner.id) == before
