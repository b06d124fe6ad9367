"""
Unit tests for the user directory service.
"""
import uuid

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.models.user import User
from app.services.users import UserRecord, list_users, upsert_users


def _record(user_id: str, name: str = "Tester", track: str = "observer") -> UserRecord:
    return UserRecord(id=user_id, name=name, love_name=f"{name} love", track=track)


def _new_id() -> str:
    return f"u-{uuid.uuid4().hex[:12]}"


class TestUpsert:
    def test_inserts_new_ids(self, db):
        user_id = _new_id()
        [user] = upsert_users(db, [_record(user_id, name="Fresh")])
        assert user.id == user_id
        assert db.get(User, user_id).name == "Fresh"

    def test_overwrites_existing(self, db):
        user_id = _new_id()
        upsert_users(db, [_record(user_id, name="Old", track="males")])
        [user] = upsert_users(db, [_record(user_id, name="New", track="females")])
        assert user.name == "New"
        assert user.track == "females"

    def test_duplicate_ids_in_one_batch_keep_last(self, db):
        user_id = _new_id()
        users = upsert_users(db, [_record(user_id, name="First"), _record(user_id, name="Second")])
        assert len(users) == 2
        assert db.get(User, user_id).name == "Second"

    def test_failed_commit_rolls_back(self, db, monkeypatch):
        user_id = _new_id()

        def broken_commit():
            raise SQLAlchemyError("database went away")

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(SQLAlchemyError):
            upsert_users(db, [_record(user_id)])
        assert db.get(User, user_id) is None


def test_list_users_sorted_by_name(db):
    names = [u.name for u in list_users(db)]
    assert names == sorted(names)
    assert {"Tekta", "Yihun", "Yeabsra"} <= set(names)
