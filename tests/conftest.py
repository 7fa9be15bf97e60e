import pytest
from fastapi.testclient import TestClient

from tpo_portal.core.auth import create_access_token
from tpo_portal.core.config import Settings
from tpo_portal.db.store import create_store, new_id, utcnow
from tpo_portal.main import create_app


class Seeder:
    """Inserts fixture rows straight through the store."""

    def __init__(self, store):
        self.store = store
        self._counter = 0

    def _email(self, prefix):
        self._counter += 1
        return f"{prefix}{self._counter}@example.edu"

    def profile(self, role="student", full_name="Test User", email=None, approval_status="pending"):
        pid = new_id()
        self.store.execute(
            """
            INSERT INTO profiles (id, full_name, email, role, password_hash, approval_status, created_at)
            VALUES (:id, :full_name, :email, :role, NULL, :approval_status, :created_at)
            """,
            {"id": pid, "full_name": full_name, "email": email or self._email(role),
             "role": role, "approval_status": approval_status, "created_at": utcnow()}
        )
        return pid

    def student(self, roll_number, user_id=None, status="Pending"):
        sid = new_id()
        self.store.execute(
            """
            INSERT INTO students (id, user_id, roll_number, full_name, status, is_approved, created_at)
            VALUES (:id, :user_id, :roll, :name, :status, :is_approved, :created_at)
            """,
            {"id": sid, "user_id": user_id, "roll": roll_number, "name": f"Student {roll_number}",
             "status": status, "is_approved": status == "Approved", "created_at": utcnow()}
        )
        return sid

    def faculty(self, user_id=None, department="CSE"):
        user_id = user_id or self.profile("faculty", "Dr. Faculty")
        fid = new_id()
        self.store.execute(
            "INSERT INTO faculty (id, user_id, department, created_at) VALUES (:id, :uid, :dept, :at)",
            {"id": fid, "uid": user_id, "dept": department, "at": utcnow()}
        )
        return fid, user_id

    def range(self, faculty_id, start, end):
        rid = new_id()
        self.store.execute(
            """
            INSERT INTO faculty_student_ranges (id, faculty_id, start_roll_number, end_roll_number, created_at)
            VALUES (:id, :fid, :start, :end, :at)
            """,
            {"id": rid, "fid": faculty_id, "start": start, "end": end, "at": utcnow()}
        )
        return rid

    def company(self, user_id=None, name="Acme Corp"):
        user_id = user_id or self.profile("company", "Acme HR")
        cid = new_id()
        self.store.execute(
            """
            INSERT INTO companies (id, user_id, company_name, industry, is_approved, created_at)
            VALUES (:id, :uid, :name, 'Software', :approved, :at)
            """,
            {"id": cid, "uid": user_id, "name": name, "approved": True, "at": utcnow()}
        )
        return cid, user_id

    def job(self, company_id, title="Backend Engineer", is_active=True, created_at=None):
        jid = new_id()
        self.store.execute(
            """
            INSERT INTO jobs (id, company_id, title, job_type, location, salary_min, salary_max,
                is_active, created_at)
            VALUES (:id, :cid, :title, 'full-time', 'Pune', 600000, 900000, :active, :at)
            """,
            {"id": jid, "cid": company_id, "title": title, "active": is_active,
             "at": created_at or utcnow()}
        )
        return jid

    def application(self, job_id, student_id=None, applicant_id=None, status="applied"):
        aid = new_id()
        self.store.execute(
            """
            INSERT INTO applications (id, job_id, student_id, applicant_id, status, created_at)
            VALUES (:id, :jid, :sid, :pid, :status, :at)
            """,
            {"id": aid, "jid": job_id, "sid": student_id, "pid": applicant_id,
             "status": status, "at": utcnow()}
        )
        return aid

    def offer(self, student_id, application_id=None, status="pending"):
        oid = new_id()
        self.store.execute(
            """
            INSERT INTO offer_letters (id, application_id, student_id, offer_status, salary, created_at)
            VALUES (:id, :aid, :sid, :status, 750000, :at)
            """,
            {"id": oid, "aid": application_id, "sid": student_id, "status": status, "at": utcnow()}
        )
        return oid

    def notification(self, user_id, title="Drive announced", is_read=False):
        nid = new_id()
        self.store.execute(
            """
            INSERT INTO notifications (id, user_id, title, message, type, is_read, created_at)
            VALUES (:id, :uid, :title, 'details', 'info', :is_read, :at)
            """,
            {"id": nid, "uid": user_id, "title": title, "is_read": is_read, "at": utcnow()}
        )
        return nid

    def audit_event(self, target_id, created_at, actor_id=None, target_table="students",
                    target_role="student", action="student_approval", details=None):
        eid = new_id()
        self.store.execute(
            """
            INSERT INTO audit_events (id, actor_id, actor_role, action, target_table, target_id,
                target_role, details, created_at)
            VALUES (:id, :actor, 'faculty', :action, :tt, :tid, :tr, :details, :at)
            """,
            {"id": eid, "actor": actor_id, "action": action, "tt": target_table,
             "tid": target_id, "tr": target_role, "details": details, "at": created_at}
        )
        return eid


@pytest.fixture
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{tmp_path / 'tpo.db'}", log_level="DEBUG")


@pytest.fixture
def store(settings):
    store = create_store(settings)
    store.init_schema()
    yield store
    store.dispose()


@pytest.fixture
def seed(store):
    return Seeder(store)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def auth_headers(profile_id, role):
    token = create_access_token({"sub": profile_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
