"""
Numeris - Repository base

Shared by every repository:
- one deadline for every database call (settings.db_timeout_seconds)
- storage errors surfaced as PersistenceError, domain errors untouched
- transaction(): the unit of work for writes spanning two collections
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Awaitable

from pymongo.errors import PyMongoError

from errors import AppError, PersistenceError

# Collections
USERS = "user"
INVOICES = "invoice"
ACTIVITIES = "activity"


class MongoRepository:
    def __init__(self, client, db_name: str, timeout_seconds: float = 10.0):
        self.client = client
        self.db = client[db_name]
        self.timeout = timeout_seconds

    @property
    def users(self):
        return self.db[USERS]

    @property
    def invoices(self):
        return self.db[INVOICES]

    @property
    def activities(self):
        return self.db[ACTIVITIES]

    async def run(self, operation: str, coro: Awaitable[Any]) -> Any:
        """Await `coro` under the configured deadline."""
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except AppError:
            raise
        except asyncio.TimeoutError:
            raise PersistenceError(f"{operation} timed out after {self.timeout}s")
        except PyMongoError as e:
            raise PersistenceError(f"{operation} failed: {e}")

    @asynccontextmanager
    async def transaction(self):
        """
        Yield a session with an open transaction.
        Commits on clean exit, aborts on any exception (the exception is
        re-raised afterwards).
        """
        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session
