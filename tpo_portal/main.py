"""
TPO Portal - Main Application

FastAPI backend with:
- Relational store via SQLAlchemy (PostgreSQL in production)
- JWT authentication
- Faculty range scoping, student approvals and an audit trail

Run: uvicorn tpo_portal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from tpo_portal.api.routes import api_router
from tpo_portal.core.config import Settings, get_settings
from tpo_portal.core.errors import PortalError
from tpo_portal.core.log_config import configure_logging
from tpo_portal.db.store import Store, create_store

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: HTTPException):
    return _error(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return _error(400, message)


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("%s %s store failure", request.method, request.url.path, exc_info=exc)
    return _error(500, GENERIC_ERROR)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("%s %s unhandled error", request.method, request.url.path, exc_info=exc)
    return _error(500, GENERIC_ERROR)


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """Build the application. Tests pass their own settings and store."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.init_schema_on_startup:
            app.state.store.init_schema()
        yield
        app.state.store.dispose()

    app = FastAPI(
        title="TPO Portal",
        description="""
        Training & Placement Office backend.

        ## Features
        - **Authentication**: JWT-based auth for students, companies, faculty and admins
        - **Faculty**: Roll-number range scoping and student approvals
        - **Companies**: Dashboard and hiring stats
        - **Students**: Applications and offer responses
        - **Admin**: Audit trail and faculty range management
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store or create_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    def health_check(request: Request):
        """Store connectivity."""
        connected = request.app.state.store.ping()
        return {"status": "healthy" if connected else "degraded",
                "database": "connected" if connected else "disconnected"}

    return app


app = create_app()
