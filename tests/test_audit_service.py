import json
import logging

from tpo_portal.core.config import Settings
from tpo_portal.db.store import create_store
from tpo_portal.services import audit_service


def _schemaless_store(tmp_path):
    return create_store(Settings(database_url=f"sqlite:///{tmp_path / 'empty.db'}"))


def test_record_never_raises_when_write_fails(tmp_path, caplog):
    broken = _schemaless_store(tmp_path)

    with caplog.at_level(logging.ERROR, logger="tpo_portal"):
        result = audit_service.record(
            broken, action="student_approval", target_table="students", target_id="S1"
        )

    assert result is None
    assert "Failed to insert audit event" in caplog.text


def test_record_stores_optional_fields_as_null(store):
    audit_service.record(store, action="register", target_table="profiles")

    row = store.fetch_one("SELECT actor_id, target_id, details, created_at FROM audit_events")
    assert row["actor_id"] is None
    assert row["target_id"] is None
    assert row["details"] is None
    assert row["created_at"]


def test_list_filters_by_target_and_pages_newest_first(store, seed):
    e1 = seed.audit_event("S1", "2026-01-01T10:00:00+00:00")
    e2 = seed.audit_event("S1", "2026-01-02T10:00:00+00:00")
    e3 = seed.audit_event("S1", "2026-01-03T10:00:00+00:00")
    seed.audit_event("S2", "2026-01-04T10:00:00+00:00")

    everything = audit_service.list_events(store, target_table="students", target_id="S1")
    assert [e["id"] for e in everything] == [e3, e2, e1]

    page = audit_service.list_events(store, target_table="students", target_id="S1", limit=2, offset=1)
    assert [e["id"] for e in page] == [e2, e1]

    assert audit_service.list_events(store, target_id="S1", limit=2, offset=3) == []


def test_list_combines_filters_with_and(store, seed):
    wanted = seed.audit_event("S1", "2026-01-01T10:00:00+00:00", target_role="student")
    seed.audit_event("S1", "2026-01-02T10:00:00+00:00", target_role="faculty")
    seed.audit_event("S1", "2026-01-03T10:00:00+00:00", target_table="companies")

    events = audit_service.list_events(
        store, target_table="students", target_id="S1", target_role="student"
    )

    assert [e["id"] for e in events] == [wanted]


def test_list_attaches_actor_summary(store, seed):
    actor = seed.profile("faculty", full_name="Dr. Iyer", email="iyer@example.edu")
    seed.audit_event("S1", "2026-01-01T10:00:00+00:00", actor_id=actor)
    seed.audit_event("S1", "2026-01-02T10:00:00+00:00", actor_id=None)

    with_actor, without_actor = reversed(audit_service.list_events(store, target_id="S1"))

    assert with_actor["actor"] == {"id": actor, "full_name": "Dr. Iyer", "email": "iyer@example.edu"}
    assert without_actor["actor"] is None


def test_list_decodes_details_and_enriches_approvers(store, seed):
    approver = seed.profile("admin", full_name="Admin One")
    details = json.dumps({"decision": "Approved", "new": {"approved_by": approver}, "old": {"approved_by": None}})
    seed.audit_event("S1", "2026-01-01T10:00:00+00:00", details=details)

    event = audit_service.list_events(store, target_id="S1")[0]

    assert event["details"]["decision"] == "Approved"
    assert event["details"]["new"]["approved_by_profile"]["full_name"] == "Admin One"
    assert "approved_by_profile" not in event["details"]["old"]


def test_list_bad_limit_falls_back_to_default(store, seed):
    for day in range(1, 4):
        seed.audit_event("S1", f"2026-01-0{day}T10:00:00+00:00")

    assert len(audit_service.list_events(store, limit=0, offset=-5)) == 3


def test_list_returns_empty_on_query_failure(tmp_path, caplog):
    broken = _schemaless_store(tmp_path)

    with caplog.at_level(logging.ERROR, logger="tpo_portal"):
        assert audit_service.list_events(broken, target_table="students") == []

    assert "Failed to fetch audit events" in caplog.text


def test_same_timestamp_events_come_back_in_reverse_insert_order(store, seed):
    at = "2026-01-01T10:00:00+00:00"
    ids = [seed.audit_event("S1", at) for _ in range(4)]

    events = audit_service.list_events(store, target_id="S1")

    assert [e["id"] for e in events] == list(reversed(ids))
