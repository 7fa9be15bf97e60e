"""
User Routes

GET /users - List profiles, optionally by role
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tpo_portal.core.auth import get_current_user
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import ProfileResponse, UserRole

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[ProfileResponse])
def list_users(
    role: Optional[UserRole] = Query(None),
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store)
):
    sql = "SELECT id, full_name, email, role, created_at FROM profiles"
    params = {}

    if role:
        sql += " WHERE role = :role"
        params["role"] = role.value

    sql += " ORDER BY created_at DESC"
    return store.fetch_all(sql, params)
