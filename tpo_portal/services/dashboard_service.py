"""
Dashboard Aggregators

Each aggregate fires its independent sub-queries together on the
threadpool and waits for all of them. Two failure policies:

- count cards (analytics, company stats): a failed sub-query is logged
  and reported as 0, the rest of the card still renders
- required lookups (company dashboard): any failure or missing row
  fails the whole aggregate
"""

import asyncio
import logging
from typing import Any, Dict, List

from starlette.concurrency import run_in_threadpool

from tpo_portal.core.errors import NotFound
from tpo_portal.db.store import Store
from tpo_portal.services import faculty_service

logger = logging.getLogger(__name__)

PLATFORM_TABLES = {
    "total_profiles": "profiles",
    "total_students": "students",
    "total_companies": "companies",
    "total_jobs": "jobs",
    "total_applications": "applications",
}


def _or_default(name: str, result: Any, default: Any) -> Any:
    if isinstance(result, BaseException):
        logger.warning("Dashboard sub-query %s failed, using %r: %s", name, default, result)
        return default
    return result


async def platform_counts(store: Store) -> Dict[str, int]:
    """Row counts for the analytics card. Failed counts read as 0."""
    names = list(PLATFORM_TABLES)
    results = await asyncio.gather(
        *(run_in_threadpool(store.count, PLATFORM_TABLES[name]) for name in names),
        return_exceptions=True,
    )
    counts = {name: _or_default(name, result, 0) for name, result in zip(names, results)}
    logger.debug("Analytics fetched: %s", counts)
    return counts


async def company_dashboard(store: Store, user_id: str) -> Dict[str, Any]:
    """Profile and company for the caller. Both must exist."""
    profile, company = await asyncio.gather(
        run_in_threadpool(
            store.fetch_one,
            "SELECT id, full_name, email, role, created_at FROM profiles WHERE id = :id",
            {"id": user_id},
        ),
        run_in_threadpool(
            store.fetch_one,
            """
            SELECT id, user_id, company_name, industry, website, is_approved, created_at
            FROM companies WHERE user_id = :uid
            """,
            {"uid": user_id},
        ),
    )
    if not profile:
        raise NotFound("Profile not found")
    if not company:
        raise NotFound("Company not found")
    return {"profile": profile, "company": company}


async def company_stats(store: Store, company_id: str) -> Dict[str, Any]:
    """Drive/application/offer counts plus the three most recent drives."""
    drives, applications, offers, recent = await asyncio.gather(
        run_in_threadpool(
            _scalar, store,
            "SELECT COUNT(*) AS n FROM jobs WHERE company_id = :cid AND is_active = :active",
            {"cid": company_id, "active": True},
        ),
        run_in_threadpool(
            _scalar, store,
            """
            SELECT COUNT(*) AS n FROM applications a JOIN jobs j ON a.job_id = j.id
            WHERE j.company_id = :cid
            """,
            {"cid": company_id},
        ),
        run_in_threadpool(
            _scalar, store,
            """
            SELECT COUNT(*) AS n FROM offer_letters o
            JOIN applications a ON o.application_id = a.id
            JOIN jobs j ON a.job_id = j.id
            WHERE j.company_id = :cid
            """,
            {"cid": company_id},
        ),
        run_in_threadpool(_recent_drives, store, company_id),
        return_exceptions=True,
    )
    return {
        "drives": _or_default("drives", drives, 0),
        "applications": _or_default("applications", applications, 0),
        "offers": _or_default("offers", offers, 0),
        "recent_drives": _or_default("recent_drives", recent, []),
    }


def _scalar(store: Store, sql: str, params: dict) -> int:
    row = store.fetch_one(sql, params)
    return int(row["n"]) if row else 0


def _recent_drives(store: Store, company_id: str, limit: int = 3) -> List[Dict[str, Any]]:
    rows = store.fetch_all(
        """
        SELECT j.id, j.title, j.application_deadline, j.is_active,
               (SELECT COUNT(*) FROM applications a WHERE a.job_id = j.id) AS applications
        FROM jobs j WHERE j.company_id = :cid
        ORDER BY j.created_at DESC LIMIT :limit
        """,
        {"cid": company_id, "limit": limit}
    )
    return [
        {
            "id": r["id"],
            "title": r["title"],
            "applications": int(r["applications"] or 0),
            "deadline": r["application_deadline"],
            "status": "Active" if r["is_active"] else "Closed",
        }
        for r in rows
    ]


def faculty_summary(store: Store, user_id: str) -> Dict[str, int]:
    students = faculty_service.resolve_students(store, user_id)
    summary = {"total_students": len(students), "pending": 0, "approved": 0, "rejected": 0}
    for s in students:
        key = (s["status"] or "Pending").lower()
        if key in summary:
            summary[key] += 1
    return summary
