"""
Notification Routes

GET /notifications - Caller's notifications (?is_read=true|false)
PUT /notifications - Update one of the caller's notifications
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tpo_portal.core.auth import get_current_user
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import NotificationResponse, NotificationUpdate
from tpo_portal.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
def get_notifications(
    is_read: Optional[bool] = Query(None),
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    """Newest first."""
    return notification_service.list_notifications(store, user["id"], is_read)


@router.put("", response_model=NotificationResponse)
def update_notification(
    body: NotificationUpdate,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    """Only the owner's row can match; anything else is a 404."""
    return notification_service.update_notification(store, user["id"], body.id, body.updates())
