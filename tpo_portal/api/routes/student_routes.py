"""
Student Routes

GET /students/applications/{application_id} - Application with applicant, job and company
GET /students/offers - Caller's offer letters
PATCH /students/offers/{offer_id} - Accept or reject an offer
"""

from typing import Optional

from fastapi import APIRouter, Depends

from tpo_portal.core.auth import get_current_student, get_optional_user
from tpo_portal.core.config import Settings, get_request_settings
from tpo_portal.core.errors import InvalidArgument, NotFound, Unauthorized
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import (
    ApplicationDetailResponse, OfferEnvelope, OfferListResponse, OfferUpdate
)
from tpo_portal.services import offer_service

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/applications/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: str,
    user: Optional[dict] = Depends(get_optional_user),
    settings: Settings = Depends(get_request_settings),
    store: Store = Depends(get_store)
):
    """
    Application by id, with nested applicant profile, job and company.

    A session is required unless ``public_application_lookup`` is enabled.
    Students may only read their own applications.
    """
    if not application_id.strip():
        raise InvalidArgument("Application ID is required")

    if user is None and not settings.public_application_lookup:
        raise Unauthorized()

    r = store.fetch_one("""
        SELECT a.id, a.job_id, a.student_id, a.applicant_id, a.status, a.created_at,
               p.id AS profile_id, p.full_name, p.email,
               j.title, j.job_type, j.location, j.salary_min, j.salary_max, j.application_deadline,
               c.company_name, c.industry
        FROM applications a
        LEFT JOIN profiles p ON a.applicant_id = p.id
        LEFT JOIN jobs j ON a.job_id = j.id
        LEFT JOIN companies c ON j.company_id = c.id
        WHERE a.id = :id
    """, {"id": application_id})

    if not r:
        raise NotFound("Application not found")
    if user is not None and user["role"] == "student" and r["applicant_id"] != user["id"]:
        raise NotFound("Application not found")

    application = {
        "id": r["id"],
        "job_id": r["job_id"],
        "student_id": r["student_id"],
        "applicant_id": r["applicant_id"],
        "status": r["status"],
        "created_at": r["created_at"],
        "profiles": {"id": r["profile_id"], "full_name": r["full_name"], "email": r["email"]}
        if r["profile_id"] else None,
        "jobs": {
            "id": r["job_id"],
            "title": r["title"],
            "job_type": r["job_type"],
            "location": r["location"],
            "salary_min": float(r["salary_min"]) if r["salary_min"] is not None else None,
            "salary_max": float(r["salary_max"]) if r["salary_max"] is not None else None,
            "application_deadline": r["application_deadline"],
            "companies": {"company_name": r["company_name"], "industry": r["industry"]},
        },
    }
    return {"application": application}


@router.get("/offers", response_model=OfferListResponse)
def get_offers(student: dict = Depends(get_current_student), store: Store = Depends(get_store)):
    return {"offers": offer_service.list_offers(store, student["id"])}


@router.patch("/offers/{offer_id}", response_model=OfferEnvelope)
def respond_to_offer(
    offer_id: str,
    body: OfferUpdate,
    student: dict = Depends(get_current_student),
    store: Store = Depends(get_store)
):
    offer = offer_service.respond_to_offer(store, student["id"], offer_id, body.offer_status.value)
    return {"offer": offer}
