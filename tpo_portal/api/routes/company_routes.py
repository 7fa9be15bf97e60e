"""
Company Routes

GET /companies/dashboard - Caller's profile and company
GET /companies/stats - Drive, application and offer counts
"""

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from tpo_portal.core.auth import get_current_company
from tpo_portal.core.errors import NotFound
from tpo_portal.db.store import Store, get_store
from tpo_portal.schemas.schemas import CompanyDashboardResponse, CompanyStatsResponse
from tpo_portal.services import dashboard_service

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/dashboard", response_model=CompanyDashboardResponse)
async def get_dashboard(company: dict = Depends(get_current_company), store: Store = Depends(get_store)):
    """Profile and company for the caller; 404 if either is missing."""
    return await dashboard_service.company_dashboard(store, company["id"])


@router.get("/stats", response_model=CompanyStatsResponse)
async def get_stats(company: dict = Depends(get_current_company), store: Store = Depends(get_store)):
    """Hiring counts for the caller's company."""
    row = await run_in_threadpool(
        store.fetch_one, "SELECT id FROM companies WHERE user_id = :uid", {"uid": company["id"]}
    )
    if not row:
        raise NotFound("Company not found")
    return await dashboard_service.company_stats(store, row["id"])
