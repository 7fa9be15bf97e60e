"""
Analytics Routes

GET /analytics - Platform-wide row counts
"""

from fastapi import APIRouter, Depends

from tpo_portal.core.auth import get_current_user
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import AnalyticsResponse
from tpo_portal.services import dashboard_service

router = APIRouter(tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    return await dashboard_service.platform_counts(store)
