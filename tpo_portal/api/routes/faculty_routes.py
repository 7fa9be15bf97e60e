"""
Faculty Routes

GET /faculty/student - Students in the caller's roll-number ranges
GET /faculty/approvals - Pending students in the caller's ranges
GET /faculty/dashboard - Approval counts over the caller's students
PUT /faculty/approvals/{student_id} - Approve or reject a student
"""

from fastapi import APIRouter, Depends

from tpo_portal.core.auth import get_current_faculty, require_roles
from tpo_portal.core.errors import NotFound
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import (
    ApprovalDecision, FacultySummaryResponse, StudentEnvelope, StudentListResponse
)
from tpo_portal.services import approval_service, dashboard_service, faculty_service

router = APIRouter(prefix="/faculty", tags=["Faculty"])


@router.get("/student", response_model=StudentListResponse)
def get_students(faculty: dict = Depends(get_current_faculty), store: Store = Depends(get_store)):
    """All students whose roll number falls in one of the caller's ranges."""
    students = faculty_service.resolve_students(store, faculty["id"])
    return {"students": students}


@router.get("/approvals", response_model=StudentListResponse)
def get_pending_approvals(faculty: dict = Depends(get_current_faculty), store: Store = Depends(get_store)):
    students = faculty_service.resolve_students(store, faculty["id"], pending_only=True)
    return {"students": students}


@router.get("/dashboard", response_model=FacultySummaryResponse)
def get_dashboard(faculty: dict = Depends(get_current_faculty), store: Store = Depends(get_store)):
    return dashboard_service.faculty_summary(store, faculty["id"])


@router.put("/approvals/{student_id}", response_model=StudentEnvelope)
def decide_approval(
    student_id: str,
    body: ApprovalDecision,
    user: dict = Depends(require_roles("faculty", "admin")),
    store: Store = Depends(get_store)
):
    """
    Set a student's approval status to Approved or Rejected.

    Faculty may only decide on students inside their own ranges; admins
    may decide on any student.
    """
    approval_service.validate_decision(body.status)

    if user["role"] == "faculty" and not faculty_service.faculty_covers_student(store, user["id"], student_id):
        raise NotFound("Student not found")

    student = approval_service.approve(store, student_id, body.status, user["id"], user["role"])
    return {"student": student}
