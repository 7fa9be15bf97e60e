"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (every token carries a ``jti`` so logout can revoke it)
- FastAPI dependencies for protected routes
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext

from tpo_portal.core.config import get_settings
from tpo_portal.core.errors import Forbidden, Unauthorized
from tpo_portal.db.store import Store, get_store

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing credentials are reported as our own 401
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def _resolve_user(store: Store, token: str) -> dict:
    payload = decode_token(token)
    if not payload:
        raise Unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid or expired token")

    jti = payload.get("jti")
    if jti and store.fetch_one("SELECT jti FROM revoked_tokens WHERE jti = :jti", {"jti": jti}):
        raise Unauthorized("Session has been logged out")

    user = store.fetch_one(
        "SELECT id, full_name, email, role FROM profiles WHERE id = :id",
        {"id": user_id}
    )
    if not user:
        raise Unauthorized("Invalid or expired token")

    user["jti"] = jti
    user["exp"] = payload.get("exp")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: Store = Depends(get_store),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise Unauthorized()
    return _resolve_user(store, credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: Store = Depends(get_store),
) -> Optional[dict]:
    """Like get_current_user, but None when no credentials were sent."""
    if credentials is None:
        return None
    return _resolve_user(store, credentials.credentials)


def require_roles(*roles: str):
    """Dependency factory - require one of the given profile roles."""

    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] not in roles:
            raise Forbidden(f"Only {' or '.join(roles)} accounts can access this resource")
        return user

    return dependency


get_current_student = require_roles("student")
get_current_company = require_roles("company")
get_current_faculty = require_roles("faculty")
get_current_admin = require_roles("admin")
