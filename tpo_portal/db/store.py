"""
Relational store access.

The store is built once by the application factory and hung off
``app.state``; routes receive it through the ``get_store`` dependency.
All queries are raw SQL through SQLAlchemy ``text()``.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from importlib import resources
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tpo_portal.core.config import Settings

logger = logging.getLogger(__name__)

# Tables that may be counted by name; guards the f-string in Store.count
COUNTABLE_TABLES = (
    "profiles", "students", "companies", "faculty", "faculty_student_ranges",
    "jobs", "applications", "offer_letters", "notifications", "audit_events",
)

# Auto-increment primary key per dialect, substituted into schema.sql
AUTOINCREMENT_PK = {
    "sqlite": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "postgresql": "BIGSERIAL PRIMARY KEY",
}


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> str:
    """Current UTC time as an ISO-8601 string (the stored timestamp format)."""
    return datetime.now(timezone.utc).isoformat()


class Store:
    """Thin wrapper over an engine and its session factory."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def session(self):
        """
        Context manager for database sessions.
        Usage:
            with store.session() as db:
                db.execute(text("SELECT * FROM profiles"))
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def fetch_all(self, sql: str, params: dict = None) -> List[Dict[str, Any]]:
        """Execute raw SQL and return results as list of dicts."""
        with self.session() as db:
            result = db.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]

    def fetch_one(self, sql: str, params: dict = None) -> Optional[Dict[str, Any]]:
        with self.session() as db:
            row = db.execute(text(sql), params or {}).mappings().first()
            return dict(row) if row is not None else None

    def execute(self, sql: str, params: dict = None) -> int:
        """Execute a write statement and return the affected row count."""
        with self.session() as db:
            result = db.execute(text(sql), params or {})
            return result.rowcount

    def count(self, table: str) -> int:
        if table not in COUNTABLE_TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self.session() as db:
            return db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()

    def init_schema(self) -> None:
        """Create all tables from the bundled schema.sql."""
        ddl = resources.files("tpo_portal.db").joinpath("schema.sql").read_text(encoding="utf-8")
        dialect = self.engine.dialect.name
        if dialect not in AUTOINCREMENT_PK:
            raise ValueError(f"Unsupported database dialect: {dialect}")
        ddl = ddl.replace("AUTOINCREMENT_PK", AUTOINCREMENT_PK[dialect])
        statements = [s.strip() for s in ddl.split(";") if s.strip()]
        with self.session() as db:
            for stmt in statements:
                db.execute(text(stmt))
        logger.info("Schema initialized (%d statements)", len(statements))

    def ping(self) -> bool:
        """Returns True if the store is reachable, False otherwise."""
        try:
            with self.session() as db:
                return db.execute(text("SELECT 1")).scalar_one() == 1
        except Exception:
            logger.exception("Store connection failed")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def create_store(settings: Settings) -> Store:
    """Build a store for the configured database URL."""
    kwargs: Dict[str, Any] = {"echo": settings.db_echo}
    if settings.is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # pool_size: connections kept ready; max_overflow: extra under load
        kwargs["pool_size"] = settings.db_pool_size
        kwargs["max_overflow"] = settings.db_max_overflow
        kwargs["pool_pre_ping"] = True
    return Store(create_engine(settings.database_url, **kwargs))


def get_store(request: Request) -> Store:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/users")
        def list_users(store: Store = Depends(get_store)):
            ...
    """
    return request.app.state.store
