"""
Numeris - Activity Repository (collection `activity`)
"""

from typing import List

from models.activity import INVOICE_ACTIONS, Activity
from .base import MongoRepository

DEFAULT_ACTIVITY_LIMIT = 10


class ActivityRepository(MongoRepository):

    async def save(self, activity: Activity) -> None:
        await self.run("save activity", self.activities.insert_one(activity.model_dump()))

    async def invoice_activities(self, user_id: str, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[Activity]:
        """Latest invoice-related activities of `user_id`, newest first."""
        query = {"user_id": user_id, "action": {"$in": INVOICE_ACTIONS}}
        cursor = self.activities.find(query, {"_id": 0}).sort("timestamp", -1).limit(limit)
        docs = await self.run("find activities", cursor.to_list(length=limit))
        return [Activity.model_validate(d) for d in docs]
