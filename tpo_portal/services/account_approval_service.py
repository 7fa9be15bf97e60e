"""
Account Approval Service

Admins approve or reject company and faculty accounts. The decision is
kept on the profile (approval_status, approved_by, approved_at); for a
company the companies.is_approved flag is written in the same
transaction. Repeating the current decision writes nothing. The audit
event and the account holder's notification follow the commit and
never fail the decision.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import text

from tpo_portal.core.errors import InvalidArgument, NotFound
from tpo_portal.db.store import Store, utcnow
from tpo_portal.schemas.schemas import AccountStatus
from tpo_portal.services import audit_service, notification_service

logger = logging.getLogger(__name__)

ACCOUNT_ROLES = ("company", "faculty")
DECISIONS = (AccountStatus.approved.value, AccountStatus.rejected.value)
DEFAULT_LIMIT = 50

PROFILE_COLUMNS = "id, full_name, email, role, approval_status, approved_by, approved_at, created_at"

WELCOME = {
    "company": "Your company account has been approved. You can now post jobs and manage applications.",
    "faculty": "Your faculty account has been approved. You can now access the TPO portal.",
}


def _check_role(role: Optional[str]) -> None:
    if role is not None and role not in ACCOUNT_ROLES:
        raise InvalidArgument("role must be company or faculty")


def decide(
    store: Store,
    profile_id: str,
    role: str,
    decision: str,
    approver_id: str,
    approver_role: Optional[str] = "admin",
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Set the approval status of a company or faculty profile.

    Raises InvalidArgument for an unknown decision and NotFound if no
    profile with that id and role exists.
    """
    _check_role(role)
    if decision not in DECISIONS:
        raise InvalidArgument("Invalid status")

    label = role.capitalize()
    with store.session() as db:
        before = db.execute(
            text(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = :id AND role = :role"),
            {"id": profile_id, "role": role}
        ).mappings().first()
        if before is None:
            raise NotFound(f"{label} profile not found")
        before = dict(before)
        if before["approval_status"] == decision:
            return before

        db.execute(
            text("""
                UPDATE profiles
                SET approval_status = :status, approved_by = :approved_by, approved_at = :approved_at
                WHERE id = :id
            """),
            {"id": profile_id, "status": decision, "approved_by": approver_id, "approved_at": utcnow()}
        )
        if role == "company":
            db.execute(
                text("UPDATE companies SET is_approved = :flag WHERE user_id = :id"),
                {"id": profile_id, "flag": decision == AccountStatus.approved.value}
            )

        account = dict(db.execute(
            text(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = :id"), {"id": profile_id}
        ).mappings().one())

    logger.info("%s %s marked %s by %s", label, profile_id, decision, approver_id)

    audit_service.record(
        store,
        action=f"{role}_approval",
        target_table="profiles",
        target_id=profile_id,
        target_role=role,
        actor_id=approver_id,
        actor_role=approver_role,
        details={
            "decision": decision,
            "notes": notes,
            "old": {"approval_status": before["approval_status"], "approved_by": before["approved_by"]},
            "new": {"approval_status": account["approval_status"], "approved_by": account["approved_by"]},
        },
    )
    _notify_account(store, profile_id, role, decision, notes)

    return account


def approve_company(store: Store, profile_id: str, decision: str, approver_id: str,
                    approver_role: Optional[str] = "admin", notes: Optional[str] = None) -> Dict[str, Any]:
    return decide(store, profile_id, "company", decision, approver_id, approver_role, notes)


def approve_faculty(store: Store, profile_id: str, decision: str, approver_id: str,
                    approver_role: Optional[str] = "admin", notes: Optional[str] = None) -> Dict[str, Any]:
    return decide(store, profile_id, "faculty", decision, approver_id, approver_role, notes)


def _notify_account(store: Store, profile_id: str, role: str, decision: str, notes: Optional[str]) -> None:
    if decision == AccountStatus.approved.value:
        title, message, kind = "Account Approved", WELCOME[role], "success"
    else:
        title = "Account Rejected"
        message = f"Your {role} account has been rejected. {notes or 'Please contact admin for more details.'}"
        kind = "error"
    try:
        notification_service.create_notification(store, profile_id, title, message, kind)
    except Exception:
        logger.exception("Failed to notify %s %s about approval decision", role, profile_id)


def list_pending(store: Store, role: Optional[str] = None) -> List[Dict[str, Any]]:
    """Company and faculty accounts still awaiting a decision, oldest first."""
    _check_role(role)
    sql = f"""
        SELECT {PROFILE_COLUMNS} FROM profiles
        WHERE approval_status = 'pending' AND role IN ('company', 'faculty')
    """
    params: Dict[str, Any] = {}
    if role:
        sql += " AND role = :role"
        params["role"] = role
    sql += " ORDER BY created_at, id"
    return store.fetch_all(sql, params)


def approval_history(
    store: Store,
    role: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    """
    Decided accounts, most recent decision first.

    ``approved_by`` is replaced by the approver's {id, full_name, email};
    an approver whose profile is gone is reported as {id} only.
    """
    _check_role(role)
    if not limit or limit < 1:
        limit = DEFAULT_LIMIT
    if not offset or offset < 0:
        offset = 0

    sql = """
        SELECT id, email, full_name, role, approval_status, approved_at, approved_by
        FROM profiles
        WHERE approved_at IS NOT NULL AND role IN ('company', 'faculty')
    """
    params: Dict[str, Any] = {"limit": limit, "offset": offset}
    if role:
        sql += " AND role = :role"
        params["role"] = role
    sql += " ORDER BY approved_at DESC, id LIMIT :limit OFFSET :offset"

    rows = store.fetch_all(sql, params)

    approver_ids = sorted({r["approved_by"] for r in rows if r["approved_by"]})
    approvers: Dict[str, Dict[str, Any]] = {}
    if approver_ids:
        placeholders = ", ".join(f":p{i}" for i in range(len(approver_ids)))
        found = store.fetch_all(
            f"SELECT id, full_name, email FROM profiles WHERE id IN ({placeholders})",
            {f"p{i}": pid for i, pid in enumerate(approver_ids)}
        )
        approvers = {a["id"]: a for a in found}

    return [
        {
            "id": r["id"],
            "email": r["email"],
            "full_name": r["full_name"],
            "role": r["role"],
            "status": r["approval_status"],
            "approved_at": r["approved_at"],
            "approved_by": approvers.get(r["approved_by"], {"id": r["approved_by"]}) if r["approved_by"] else None,
        }
        for r in rows
    ]
