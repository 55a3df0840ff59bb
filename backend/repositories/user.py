"""
Numeris - User Repository
"""

import logging

from config import now_iso
from errors import NotFoundError
from models.auth import User
from .base import MongoRepository

logger = logging.getLogger("user_repository")


class UserRepository(MongoRepository):

    async def add_user(self, user: User, email: str) -> User:
        """
        Insert `user` unless someone already registered `email`; in that case
        the stored user is returned instead. Callers detect the duplicate by
        comparing ids. Check-then-insert, no unique index.
        """
        existing = await self.run("find user", self.users.find_one({"email": email}))
        if existing:
            logger.info(f"User with email {email} already exists")
            return User.model_validate(existing)

        await self.run("insert user", self.users.insert_one(user.to_document()))
        logger.info(f"Inserted a new user document: {user.id}")
        return user

    async def verify_login(self, email: str) -> User:
        """Stored record (with password hash) for `email`."""
        doc = await self.run("find user", self.users.find_one({"email": email}, {"invoices": 0}))
        if not doc:
            logger.warning(f"User not found: {email}")
            raise NotFoundError("user not found")
        return User.model_validate(doc)

    async def find_by_id(self, user_id: str) -> User:
        doc = await self.run(
            "find user",
            self.users.find_one({"_id": user_id}, {"password": 0, "invoices": 0}),
        )
        if not doc:
            raise NotFoundError("user not found")
        return User.model_validate(doc)

    async def save_token(self, user_id: str, token: str) -> None:
        result = await self.run(
            "save token",
            self.users.update_one({"_id": user_id}, {"$set": {"token": token, "updated_at": now_iso()}}),
        )
        if result.matched_count == 0:
            logger.error(f"User not found while saving token: {user_id}")
            raise NotFoundError("user not found")

    async def update_password(self, email: str, password_hash: str) -> None:
        result = await self.run(
            "update password",
            self.users.update_one(
                {"email": email},
                {"$set": {"password": password_hash, "updated_at": now_iso()}},
            ),
        )
        if result.matched_count == 0:
            raise NotFoundError("cannot reset user password! this account does not exist")
