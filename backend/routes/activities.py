"""
Numeris - Activity Routes
"""

from fastapi import APIRouter, Depends, Query

from dependencies import get_activity_repository
from repositories.activity import DEFAULT_ACTIVITY_LIMIT
from routes.auth import get_owner_id

router = APIRouter(prefix="/invoice", tags=["Activity"])


@router.get("/{userID}/activities")
async def invoice_activities(
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=1, le=100),
    owner_id: str = Depends(get_owner_id),
    activities=Depends(get_activity_repository),
):
    """Recent invoice activities of the caller, newest first."""
    logs = await activities.invoice_activities(owner_id, limit)
    return {"activities": [a.model_dump(mode="json") for a in logs], "count": len(logs), "limit": limit}
