import asyncio

import pytest
from sqlalchemy.exc import SQLAlchemyError

from tpo_portal.core.errors import NotFound
from tpo_portal.services import dashboard_service


def test_platform_counts(store, seed):
    cid, _ = seed.company()
    jid = seed.job(cid)
    sid = seed.student("105")
    seed.application(jid, student_id=sid)

    counts = asyncio.run(dashboard_service.platform_counts(store))

    assert counts == {
        "total_profiles": 1,
        "total_students": 1,
        "total_companies": 1,
        "total_jobs": 1,
        "total_applications": 1,
    }


def test_platform_counts_failed_card_reads_zero(store, seed, monkeypatch):
    seed.student("105")
    original = store.count

    def flaky_count(table):
        if table == "jobs":
            raise SQLAlchemyError("timeout")
        return original(table)

    monkeypatch.setattr(store, "count", flaky_count)

    counts = asyncio.run(dashboard_service.platform_counts(store))

    assert counts["total_jobs"] == 0
    assert counts["total_students"] == 1


def test_company_dashboard_returns_profile_and_company(store, seed):
    cid, uid = seed.company(name="Globex")

    result = asyncio.run(dashboard_service.company_dashboard(store, uid))

    assert result["profile"]["id"] == uid
    assert result["company"]["id"] == cid
    assert result["company"]["company_name"] == "Globex"


def test_company_dashboard_requires_company(store, seed):
    uid = seed.profile("company")

    with pytest.raises(NotFound):
        asyncio.run(dashboard_service.company_dashboard(store, uid))


def test_company_dashboard_fails_whole_aggregate_on_error(store, seed, monkeypatch):
    _, uid = seed.company()

    def broken(sql, params=None):
        raise SQLAlchemyError("down")

    monkeypatch.setattr(store, "fetch_one", broken)

    with pytest.raises(SQLAlchemyError):
        asyncio.run(dashboard_service.company_dashboard(store, uid))


def test_company_stats(store, seed):
    cid, _ = seed.company()
    old = seed.job(cid, title="Old drive", created_at="2026-01-01T00:00:00+00:00")
    seed.job(cid, title="Closed drive", is_active=False, created_at="2026-02-01T00:00:00+00:00")
    new = seed.job(cid, title="New drive", created_at="2026-03-01T00:00:00+00:00")
    latest = seed.job(cid, title="Latest drive", created_at="2026-04-01T00:00:00+00:00")
    sid = seed.student("105")
    app_id = seed.application(new, student_id=sid)
    seed.application(new, student_id=sid)
    seed.application(old, student_id=sid)
    seed.offer(sid, application_id=app_id)

    stats = asyncio.run(dashboard_service.company_stats(store, cid))

    assert stats["drives"] == 3
    assert stats["applications"] == 3
    assert stats["offers"] == 1
    assert [d["title"] for d in stats["recent_drives"]] == ["Latest drive", "New drive", "Closed drive"]
    assert stats["recent_drives"][0]["id"] == latest
    assert stats["recent_drives"][1]["applications"] == 2
    assert stats["recent_drives"][2]["status"] == "Closed"


def test_faculty_summary(store, seed):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "199")
    seed.student("101")
    seed.student("102", status="Approved")
    seed.student("103", status="Approved")
    seed.student("104", status="Rejected")

    assert dashboard_service.faculty_summary(store, uid) == {
        "total_students": 4, "pending": 1, "approved": 2, "rejected": 1
    }
