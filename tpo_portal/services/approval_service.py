"""
Student Approval Service

States: Pending -> Approved | Rejected, and Approved <-> Rejected.
Repeating the current decision is a no-op: nothing is written.
status and is_approved are written by the same UPDATE so they never
disagree. The audit event and the student notification are written
after the update commits; their failures are logged, not raised.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import text

from tpo_portal.core.errors import InvalidArgument, NotFound
from tpo_portal.db.store import Store, utcnow
from tpo_portal.schemas.schemas import ApprovalStatus
from tpo_portal.services import audit_service, notification_service
from tpo_portal.services.faculty_service import STUDENT_COLUMNS

logger = logging.getLogger(__name__)

APPROVED = ApprovalStatus.approved.value
REJECTED = ApprovalStatus.rejected.value
DECISIONS = (APPROVED, REJECTED)


def validate_decision(decision: str) -> None:
    if decision not in DECISIONS:
        raise InvalidArgument("Invalid status")


def approve(
    store: Store,
    student_id: str,
    decision: str,
    approver_id: str,
    approver_role: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Record an approval decision for a student and return the updated row.

    Raises InvalidArgument for a decision other than Approved/Rejected
    (nothing is touched) and NotFound if the student does not exist.
    If the student already holds ``decision`` the row is returned as is.
    """
    validate_decision(decision)

    with store.session() as db:
        before = db.execute(
            text(f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id"), {"id": student_id}
        ).mappings().first()
        if before is None:
            raise NotFound("Student not found")
        before = dict(before)
        if before["status"] == decision:
            return before

        result = db.execute(
            text("""
                UPDATE students
                SET status = :status, is_approved = :is_approved,
                    approved_by = :approved_by, approved_at = :approved_at
                WHERE id = :id
            """),
            {
                "id": student_id,
                "status": decision,
                "is_approved": decision == APPROVED,
                "approved_by": approver_id,
                "approved_at": utcnow(),
            }
        )
        if result.rowcount == 0:
            raise NotFound("Student not found")

        student = dict(db.execute(
            text(f"SELECT {STUDENT_COLUMNS} FROM students WHERE id = :id"), {"id": student_id}
        ).mappings().one())

    logger.info("Student %s marked %s by %s", student_id, decision, approver_id)

    audit_service.record(
        store,
        action="student_approval",
        target_table="students",
        target_id=student_id,
        target_role="student",
        actor_id=approver_id,
        actor_role=approver_role,
        details={
            "decision": decision,
            "old": {
                "status": before["status"],
                "is_approved": bool(before["is_approved"]),
                "approved_by": before["approved_by"],
            },
            "new": {
                "status": student["status"],
                "is_approved": bool(student["is_approved"]),
                "approved_by": student["approved_by"],
            },
        },
    )
    _notify_student(store, before["user_id"], decision)

    return student


def _notify_student(store: Store, user_id: Optional[str], decision: str) -> None:
    if not user_id:
        return
    if decision == APPROVED:
        title, message, kind = (
            "Profile Approved",
            "Your student profile has been approved. You can now apply for jobs.",
            "success",
        )
    else:
        title, message, kind = (
            "Profile Rejected",
            "Your student profile has been rejected. Please update your profile and resubmit.",
            "error",
        )
    try:
        notification_service.create_notification(store, user_id, title, message, kind)
    except Exception:
        logger.exception("Failed to notify user %s about approval decision", user_id)
