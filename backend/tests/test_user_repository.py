"""
Numeris - User & activity repositories
Run: cd backend && pytest tests/test_user_repository.py -v
"""

import pytest
from pymongo.errors import PyMongoError

from errors import NotFoundError, PersistenceError
from models.activity import CREATE_INVOICE, INVOICE_ACTIONS, Activity
from models.auth import UserCreate, new_user
from repositories.base import ACTIVITIES, USERS
from tests.fakes import OWNER_ID, FakeCursor, run_async, update_result, user_payload


def make_user():
    return new_user(UserCreate(**user_payload()), "$2b$04$hash")


class TestAddUser:
    def test_inserts_new_user(self, user_repo, fake_db):
        user = make_user()

        stored = run_async(user_repo.add_user(user, user.email))

        assert stored.id == user.id
        doc = fake_db[USERS].insert_one.await_args.args[0]
        assert doc["_id"] == user.id
        assert doc["email"] == "ada@example.com"
        assert doc["invoices"] == []
        assert doc["profession"] == "engineer"
        assert "token" not in doc

    def test_existing_email_returns_stored_user(self, user_repo, fake_db):
        existing = make_user()
        fake_db[USERS].find_one.return_value = existing.to_document()

        stored = run_async(user_repo.add_user(make_user(), existing.email))

        assert stored.id == existing.id
        fake_db[USERS].insert_one.assert_not_awaited()

    def test_storage_failure(self, user_repo, fake_db):
        fake_db[USERS].insert_one.side_effect = PyMongoError("connection reset")
        with pytest.raises(PersistenceError):
            run_async(user_repo.add_user(make_user(), "ada@example.com"))


class TestLookups:
    def test_verify_login(self, user_repo, fake_db):
        user = make_user()
        fake_db[USERS].find_one.return_value = user.to_document()

        found = run_async(user_repo.verify_login(user.email))

        assert found.password == "$2b$04$hash"
        query, projection = fake_db[USERS].find_one.await_args.args
        assert query == {"email": user.email}
        assert projection == {"invoices": 0}

    def test_verify_login_unknown(self, user_repo):
        with pytest.raises(NotFoundError):
            run_async(user_repo.verify_login("nobody@example.com"))

    def test_find_by_id_hides_password(self, user_repo, fake_db):
        fake_db[USERS].find_one.return_value = make_user().to_document()
        run_async(user_repo.find_by_id(OWNER_ID))
        projection = fake_db[USERS].find_one.await_args.args[1]
        assert projection == {"password": 0, "invoices": 0}

    def test_save_token(self, user_repo, fake_db):
        run_async(user_repo.save_token(OWNER_ID, "jwt"))
        query, update = fake_db[USERS].update_one.await_args.args
        assert query == {"_id": OWNER_ID}
        assert update["$set"]["token"] == "jwt"

    def test_save_token_unknown_user(self, user_repo, fake_db):
        fake_db[USERS].update_one.return_value = update_result(matched=0)
        with pytest.raises(NotFoundError):
            run_async(user_repo.save_token(OWNER_ID, "jwt"))

    def test_update_password_unknown_account(self, user_repo, fake_db):
        fake_db[USERS].update_one.return_value = update_result(matched=0)
        with pytest.raises(NotFoundError, match="this account does not exist"):
            run_async(user_repo.update_password("nobody@example.com", "hash"))


class TestActivityRepository:
    def test_save(self, activity_repo, fake_db):
        run_async(activity_repo.save(Activity(user_id=OWNER_ID, action=CREATE_INVOICE)))
        doc = fake_db[ACTIVITIES].insert_one.await_args.args[0]
        assert doc["user_id"] == OWNER_ID
        assert doc["action"] == CREATE_INVOICE

    def test_invoice_activities_newest_first(self, activity_repo, fake_db):
        cursor = FakeCursor([
            {"user_id": OWNER_ID, "action": CREATE_INVOICE, "metadata": {"invoice_id": "INV-1"}},
        ])
        fake_db[ACTIVITIES].find.return_value = cursor

        logs = run_async(activity_repo.invoice_activities(OWNER_ID, 5))

        assert [a.action for a in logs] == [CREATE_INVOICE]
        query = fake_db[ACTIVITIES].find.call_args.args[0]
        assert query == {"user_id": OWNER_ID, "action": {"$in": INVOICE_ACTIONS}}
        assert cursor.sort_args == ("timestamp", -1)
        assert cursor.limit_value == 5
