"""
Faculty Scoping Service

A faculty member sees (and may approve) the students whose roll number
falls inside any of the roll-number ranges assigned to them. Ranges are
inclusive on both ends and compared as the stored strings. Ranges may
overlap; a student is returned once.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tpo_portal.core.errors import InternalError, InvalidArgument, NotFound
from tpo_portal.db.store import Store, new_id, utcnow

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = """
    id, user_id, roll_number, full_name, email, department, cgpa,
    status, is_approved, approved_by, approved_at, created_at
"""


def get_faculty_for_user(store: Store, user_id: str) -> Dict[str, Any]:
    """The faculty row linked to a profile. Raises NotFound if there is none."""
    faculty = store.fetch_one(
        "SELECT id, user_id, department FROM faculty WHERE user_id = :uid",
        {"uid": user_id}
    )
    if not faculty:
        raise NotFound("Faculty not found")
    return faculty


def get_ranges(store: Store, faculty_id: str) -> List[Dict[str, Any]]:
    return store.fetch_all(
        """
        SELECT id, start_roll_number, end_roll_number FROM faculty_student_ranges
        WHERE faculty_id = :fid ORDER BY start_roll_number
        """,
        {"fid": faculty_id}
    )


def resolve_students(store: Store, user_id: str, pending_only: bool = False) -> List[Dict[str, Any]]:
    """
    Students in scope for the faculty linked to ``user_id``.

    Results from every range are merged by student id and sorted by roll
    number. Any store failure aborts the whole lookup with InternalError.
    """
    faculty = get_faculty_for_user(store, user_id)

    try:
        ranges = get_ranges(store, faculty["id"])
        if not ranges:
            return []

        sql = f"""
            SELECT {STUDENT_COLUMNS} FROM students
            WHERE roll_number >= :start AND roll_number <= :end
        """
        if pending_only:
            sql += " AND status = 'Pending'"

        merged: Dict[str, Dict[str, Any]] = {}
        for r in ranges:
            rows = store.fetch_all(sql, {
                "start": str(r["start_roll_number"]),
                "end": str(r["end_roll_number"]),
            })
            for row in rows:
                merged.setdefault(row["id"], row)
    except SQLAlchemyError as exc:
        logger.exception("Student scope lookup failed for faculty %s", faculty["id"])
        raise InternalError("Failed to load students") from exc

    return sorted(merged.values(), key=lambda s: (s["roll_number"], s["id"]))


def faculty_covers_student(store: Store, user_id: str, student_id: str) -> bool:
    """True if the student's roll number lies in one of the faculty's ranges."""
    faculty = get_faculty_for_user(store, user_id)
    row = store.fetch_one(
        """
        SELECT s.id FROM students s
        JOIN faculty_student_ranges r
          ON s.roll_number >= r.start_roll_number AND s.roll_number <= r.end_roll_number
        WHERE s.id = :sid AND r.faculty_id = :fid
        """,
        {"sid": student_id, "fid": faculty["id"]}
    )
    return row is not None


# ============================================================
# RANGE MANAGEMENT (admin)
# ============================================================

def list_faculty_ranges(store: Store) -> List[Dict[str, Any]]:
    return store.fetch_all("""
        SELECT r.id, r.faculty_id, r.start_roll_number, r.end_roll_number,
               p.full_name AS faculty_name, f.department
        FROM faculty_student_ranges r
        JOIN faculty f ON r.faculty_id = f.id
        LEFT JOIN profiles p ON f.user_id = p.id
        ORDER BY r.start_roll_number
    """)


def add_range(store: Store, faculty_id: str, start_roll_number: str, end_roll_number: str) -> Dict[str, Any]:
    if start_roll_number > end_roll_number:
        raise InvalidArgument("start_roll_number must not be greater than end_roll_number")

    with store.session() as db:
        exists = db.execute(
            text("SELECT id FROM faculty WHERE id = :fid"), {"fid": faculty_id}
        ).first()
        if not exists:
            raise NotFound("Faculty not found")

        range_id = new_id()
        db.execute(
            text("""
                INSERT INTO faculty_student_ranges (id, faculty_id, start_roll_number, end_roll_number, created_at)
                VALUES (:id, :fid, :start, :end, :created_at)
            """),
            {"id": range_id, "fid": faculty_id, "start": start_roll_number,
             "end": end_roll_number, "created_at": utcnow()}
        )

    logger.info("Range %s..%s assigned to faculty %s", start_roll_number, end_roll_number, faculty_id)
    return {
        "id": range_id,
        "faculty_id": faculty_id,
        "start_roll_number": start_roll_number,
        "end_roll_number": end_roll_number,
    }


def delete_range(store: Store, range_id: str) -> None:
    deleted = store.execute("DELETE FROM faculty_student_ranges WHERE id = :id", {"id": range_id})
    if deleted == 0:
        raise NotFound("Range not found")
