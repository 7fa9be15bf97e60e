import pytest
from sqlalchemy.exc import SQLAlchemyError

from tpo_portal.core.errors import InternalError, InvalidArgument, NotFound
from tpo_portal.services import faculty_service


def test_overlapping_ranges_return_each_student_once(store, seed):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "110")
    seed.range(fid, "105", "120")
    ids = {seed.student(r) for r in ("101", "105", "108", "115")}
    seed.student("121")

    students = faculty_service.resolve_students(store, uid)

    assert [s["roll_number"] for s in students] == ["101", "105", "108", "115"]
    assert {s["id"] for s in students} == ids


def test_range_bounds_are_inclusive(store, seed):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "110")
    for roll in ("099", "100", "110", "111"):
        seed.student(roll)

    rolls = [s["roll_number"] for s in faculty_service.resolve_students(store, uid)]

    assert rolls == ["100", "110"]


def test_no_ranges_means_no_students(store, seed):
    _, uid = seed.faculty()
    seed.student("105")

    assert faculty_service.resolve_students(store, uid) == []


def test_unknown_faculty_is_not_found(store, seed):
    uid = seed.profile("faculty")

    with pytest.raises(NotFound):
        faculty_service.resolve_students(store, uid)


def test_pending_only_filters_decided_students(store, seed):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "199")
    seed.student("101")
    seed.student("102", status="Approved")
    seed.student("103", status="Rejected")

    pending = faculty_service.resolve_students(store, uid, pending_only=True)

    assert [s["roll_number"] for s in pending] == ["101"]


def test_query_failure_aborts_without_partial_results(store, seed, monkeypatch):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "110")
    seed.range(fid, "200", "210")
    seed.student("105")
    seed.student("205")

    original = store.fetch_all
    calls = {"students": 0}

    def flaky(sql, params=None):
        if "FROM students" in sql:
            calls["students"] += 1
            if calls["students"] == 2:
                raise SQLAlchemyError("connection reset")
        return original(sql, params)

    monkeypatch.setattr(store, "fetch_all", flaky)

    with pytest.raises(InternalError):
        faculty_service.resolve_students(store, uid)


def test_faculty_covers_student(store, seed):
    fid, uid = seed.faculty()
    seed.range(fid, "100", "110")
    inside = seed.student("105")
    outside = seed.student("111")

    assert faculty_service.faculty_covers_student(store, uid, inside)
    assert not faculty_service.faculty_covers_student(store, uid, outside)


def test_other_faculty_ranges_do_not_leak(store, seed):
    fid_a, uid_a = seed.faculty()
    fid_b, _ = seed.faculty()
    seed.range(fid_a, "100", "110")
    seed.range(fid_b, "200", "210")
    seed.student("105")
    seed.student("205")

    rolls = [s["roll_number"] for s in faculty_service.resolve_students(store, uid_a)]

    assert rolls == ["105"]


def test_add_range_rejects_inverted_bounds(store, seed):
    fid, _ = seed.faculty()

    with pytest.raises(InvalidArgument):
        faculty_service.add_range(store, fid, "120", "100")


def test_add_range_requires_existing_faculty(store):
    with pytest.raises(NotFound):
        faculty_service.add_range(store, "missing", "100", "110")


def test_add_list_and_delete_range(store, seed):
    fid, _ = seed.faculty()

    created = faculty_service.add_range(store, fid, "100", "110")
    ranges = faculty_service.list_faculty_ranges(store)

    assert [(r["id"], r["faculty_name"]) for r in ranges] == [(created["id"], "Dr. Faculty")]

    faculty_service.delete_range(store, created["id"])
    assert faculty_service.list_faculty_ranges(store) == []

    with pytest.raises(NotFound):
        faculty_service.delete_range(store, created["id"])
