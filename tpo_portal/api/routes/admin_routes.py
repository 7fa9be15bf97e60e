"""
Admin Routes

GET /admin/audit - Audit trail with filters and paging
GET /admin/faculty-ranges - All faculty roll-number ranges
POST /admin/faculty-ranges - Assign a range to a faculty member
DELETE /admin/faculty-ranges/{range_id} - Remove a range
POST /admin/setup - Create the first admin account
GET /admin/approvals - Company and faculty accounts awaiting a decision
GET /admin/approvals/history - Decided accounts, newest first
POST /admin/approve-company - Approve or reject a company account
POST /admin/approve-faculty - Approve or reject a faculty account
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from tpo_portal.core.auth import get_current_admin, hash_password
from tpo_portal.core.config import Settings, get_request_settings
from tpo_portal.core.errors import InvalidArgument, StoreError
from tpo_portal.db.store import Store, get_store, new_id, utcnow
from tpo_portal.schemas.schemas import (
    AccountDecision, AccountEnvelope, AccountListResponse, AccountStatus, AdminSetupRequest,
    ApprovalHistoryResponse, AuditListResponse, MessageResponse, RangeCreate, RangeResponse, UserRole
)
from tpo_portal.services import account_approval_service, audit_service, faculty_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/audit", response_model=AuditListResponse)
def get_audit_events(
    target_table: Optional[str] = Query(None),
    target_id: Optional[str] = Query(None),
    target_role: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(audit_service.DEFAULT_LIMIT),
    admin: dict = Depends(get_current_admin),
    settings: Settings = Depends(get_request_settings),
    store: Store = Depends(get_store)
):
    """Newest first. Out-of-range page/limit fall back to 1/50; limit is capped."""
    if page < 1:
        page = 1
    if limit < 1:
        limit = audit_service.DEFAULT_LIMIT
    limit = min(settings.audit_max_limit, limit)
    offset = (page - 1) * limit

    logger.info(
        "Audit request table=%s id=%s role=%s page=%d limit=%d",
        target_table, target_id, target_role, page, limit
    )
    events = audit_service.list_events(
        store, target_table=target_table, target_id=target_id, target_role=target_role,
        limit=limit, offset=offset
    )
    return {"events": events}


@router.get("/faculty-ranges", response_model=List[RangeResponse])
def get_ranges(admin: dict = Depends(get_current_admin), store: Store = Depends(get_store)):
    return faculty_service.list_faculty_ranges(store)


@router.post("/faculty-ranges", response_model=RangeResponse, status_code=201)
def add_range(body: RangeCreate, admin: dict = Depends(get_current_admin), store: Store = Depends(get_store)):
    created = faculty_service.add_range(store, body.faculty_id, body.start_roll_number, body.end_roll_number)
    audit_service.record(
        store, action="faculty_range_added", target_table="faculty_student_ranges",
        target_id=created["id"], target_role="faculty", actor_id=admin["id"], actor_role=admin["role"],
        details={"faculty_id": body.faculty_id, "start_roll_number": body.start_roll_number,
                 "end_roll_number": body.end_roll_number}
    )
    return created


@router.delete("/faculty-ranges/{range_id}", response_model=MessageResponse)
def delete_range(range_id: str, admin: dict = Depends(get_current_admin), store: Store = Depends(get_store)):
    faculty_service.delete_range(store, range_id)
    audit_service.record(
        store, action="faculty_range_deleted", target_table="faculty_student_ranges",
        target_id=range_id, target_role="faculty", actor_id=admin["id"], actor_role=admin["role"]
    )
    return MessageResponse(message="Range deleted successfully")


# ============================================================
# ACCOUNT APPROVALS
# ============================================================

@router.post("/setup", response_model=MessageResponse, status_code=201)
def setup_admin(body: AdminSetupRequest, store: Store = Depends(get_store)):
    """Create the first admin. Refused once any admin account exists."""
    admin_id = new_id()
    try:
        with store.session() as db:
            existing = db.execute(
                text("SELECT id FROM profiles WHERE role = :role LIMIT 1"), {"role": UserRole.admin.value}
            ).first()
            if existing:
                raise InvalidArgument("Admin user already exists")

            db.execute(
                text("""
                    INSERT INTO profiles (id, full_name, email, role, password_hash, approval_status, created_at)
                    VALUES (:id, :full_name, :email, :role, :password_hash, :status, :created_at)
                """),
                {
                    "id": admin_id, "full_name": body.full_name, "email": body.email,
                    "role": UserRole.admin.value, "password_hash": hash_password(body.password),
                    "status": AccountStatus.approved.value, "created_at": utcnow()
                }
            )
    except IntegrityError as exc:
        raise StoreError("Email already registered", status_code=400) from exc

    audit_service.record(
        store, action="admin_setup", target_table="profiles", target_id=admin_id,
        target_role="admin", actor_id=admin_id, actor_role="admin"
    )
    logger.info("Admin account %s created", admin_id)
    return MessageResponse(message="Admin user created successfully")


@router.get("/approvals", response_model=AccountListResponse)
def get_pending_accounts(
    role: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
    store: Store = Depends(get_store)
):
    return {"accounts": account_approval_service.list_pending(store, role)}


@router.get("/approvals/history", response_model=ApprovalHistoryResponse)
def get_approval_history(
    role: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(account_approval_service.DEFAULT_LIMIT),
    admin: dict = Depends(get_current_admin),
    settings: Settings = Depends(get_request_settings),
    store: Store = Depends(get_store)
):
    if page < 1:
        page = 1
    if limit < 1:
        limit = account_approval_service.DEFAULT_LIMIT
    limit = min(settings.audit_max_limit, limit)
    approvals = account_approval_service.approval_history(
        store, role=role, limit=limit, offset=(page - 1) * limit
    )
    return {"approvals": approvals}


@router.post("/approve-company", response_model=AccountEnvelope)
def approve_company(body: AccountDecision, admin: dict = Depends(get_current_admin), store: Store = Depends(get_store)):
    account = account_approval_service.approve_company(
        store, body.profile_id, body.status, admin["id"], admin["role"], body.notes
    )
    return {"account": account}


@router.post("/approve-faculty", response_model=AccountEnvelope)
def approve_faculty(body: AccountDecision, admin: dict = Depends(get_current_admin), store: Store = Depends(get_store)):
    account = account_approval_service.approve_faculty(
        store, body.profile_id, body.status, admin["id"], admin["role"], body.notes
    )
    return {"account": account}
