"""
Offer Service - students respond to their offer letters.
"""

import logging
from typing import Any, Dict, List

from tpo_portal.core.errors import NotFound
from tpo_portal.db.store import Store, utcnow

logger = logging.getLogger(__name__)

OFFER_SELECT = """
    SELECT o.id, o.application_id, o.student_id, o.offer_status, o.salary, o.joining_date,
           o.student_response_at, o.created_at, j.title AS job_title, c.company_name
    FROM offer_letters o
    LEFT JOIN applications a ON o.application_id = a.id
    LEFT JOIN jobs j ON a.job_id = j.id
    LEFT JOIN companies c ON j.company_id = c.id
"""


def get_student_id(store: Store, user_id: str) -> str:
    row = store.fetch_one("SELECT id FROM students WHERE user_id = :uid", {"uid": user_id})
    if not row:
        raise NotFound("Student profile not found")
    return row["id"]


def list_offers(store: Store, user_id: str) -> List[Dict[str, Any]]:
    student_id = get_student_id(store, user_id)
    return store.fetch_all(
        OFFER_SELECT + " WHERE o.student_id = :sid ORDER BY o.created_at DESC",
        {"sid": student_id}
    )


def respond_to_offer(store: Store, user_id: str, offer_id: str, offer_status: str) -> Dict[str, Any]:
    """
    Set the caller's response on one of their offers.

    offer_status and student_response_at are written by one UPDATE whose
    predicate includes the caller's student id.
    """
    student_id = get_student_id(store, user_id)

    updated = store.execute(
        """
        UPDATE offer_letters SET offer_status = :status, student_response_at = :responded_at
        WHERE id = :id AND student_id = :sid
        """,
        {"status": offer_status, "responded_at": utcnow(), "id": offer_id, "sid": student_id}
    )
    if updated == 0:
        raise NotFound("Offer not found")

    logger.info("Offer %s set to %s by student %s", offer_id, offer_status, student_id)
    return store.fetch_one(OFFER_SELECT + " WHERE o.id = :id", {"id": offer_id})
