"""
Notification Service

Notifications belong to one user. Reads and updates always carry the
owner in the WHERE clause, so another user's row is never touched.
"""

import logging
from typing import Any, Dict, List, Optional

from tpo_portal.core.errors import InvalidArgument, NotFound
from tpo_portal.db.store import Store, new_id, utcnow

logger = logging.getLogger(__name__)

# Columns a user may change on their own notifications
UPDATABLE_FIELDS = ("is_read",)

NOTIFICATION_COLUMNS = "id, user_id, title, message, type, is_read, created_at"


def create_notification(store: Store, user_id: str, title: str, message: str, type: str = "info") -> str:
    notification_id = new_id()
    store.execute(
        """
        INSERT INTO notifications (id, user_id, title, message, type, is_read, created_at)
        VALUES (:id, :user_id, :title, :message, :type, :is_read, :created_at)
        """,
        {"id": notification_id, "user_id": user_id, "title": title, "message": message,
         "type": type, "is_read": False, "created_at": utcnow()}
    )
    return notification_id


def list_notifications(store: Store, user_id: str, is_read: Optional[bool] = None) -> List[Dict[str, Any]]:
    sql = f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE user_id = :uid"
    params: Dict[str, Any] = {"uid": user_id}

    if is_read is not None:
        sql += " AND is_read = :is_read"
        params["is_read"] = is_read

    sql += " ORDER BY created_at DESC"
    return store.fetch_all(sql, params)


def update_notification(store: Store, user_id: str, notification_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update the caller's own notification and return the row.

    Raises NotFound when no row matches both id and owner.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidArgument(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    if not fields:
        raise InvalidArgument("No fields to update")

    assignments = ", ".join(f"{name} = :{name}" for name in fields)
    params = dict(fields, id=notification_id, uid=user_id)

    updated = store.execute(
        f"UPDATE notifications SET {assignments} WHERE id = :id AND user_id = :uid", params
    )
    if updated == 0:
        raise NotFound("Notification not found")

    return store.fetch_one(
        f"SELECT {NOTIFICATION_COLUMNS} FROM notifications WHERE id = :id AND user_id = :uid",
        {"id": notification_id, "uid": user_id}
    )
