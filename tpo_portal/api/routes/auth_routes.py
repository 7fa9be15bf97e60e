"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
POST /auth/logout - Revoke the current token
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from tpo_portal.core.auth import hash_password, verify_password, create_access_token, get_current_user
from tpo_portal.core.errors import InvalidArgument, StoreError, Unauthorized
from tpo_portal.db.store import Store, get_store, new_id, utcnow
from tpo_portal.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, ProfileResponse, MessageResponse, RegistrationRole
)
from tpo_portal.services import audit_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(request: RegisterRequest, store: Store = Depends(get_store)):
    """
    Register a new user account.

    Student accounts start in the Pending approval state.
    """
    profile_id = new_id()
    now = utcnow()

    try:
        _insert_account(store, request, profile_id, now)
    except IntegrityError as exc:
        raise StoreError("Email already registered", status_code=400) from exc

    audit_service.record(
        store, action="register", target_table="profiles", target_id=profile_id,
        target_role=request.role.value, actor_id=profile_id, actor_role=request.role.value
    )
    logger.info("Registered %s account %s", request.role.value, profile_id)
    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


def _insert_account(store: Store, request: RegisterRequest, profile_id: str, now: str) -> None:
    with store.session() as db:
        result = db.execute(
            text("SELECT id FROM profiles WHERE email = :email"),
            {"email": request.email}
        )
        if result.fetchone():
            raise InvalidArgument("Email already registered")

        db.execute(
            text("""
                INSERT INTO profiles (id, full_name, email, role, password_hash, created_at)
                VALUES (:id, :full_name, :email, :role, :password_hash, :created_at)
            """),
            {
                "id": profile_id,
                "full_name": request.full_name,
                "email": request.email,
                "role": request.role.value,
                "password_hash": hash_password(request.password),
                "created_at": now
            }
        )

        if request.role == RegistrationRole.student:
            db.execute(
                text("""
                    INSERT INTO students (id, user_id, roll_number, full_name, email, department,
                        status, is_approved, created_at)
                    VALUES (:id, :user_id, :roll_number, :full_name, :email, :department,
                        'Pending', :is_approved, :created_at)
                """),
                {
                    "id": new_id(), "user_id": profile_id, "roll_number": request.roll_number,
                    "full_name": request.full_name, "email": request.email,
                    "department": request.department, "is_approved": False, "created_at": now
                }
            )
        elif request.role == RegistrationRole.company:
            db.execute(
                text("""
                    INSERT INTO companies (id, user_id, company_name, is_approved, created_at)
                    VALUES (:id, :user_id, :company_name, :is_approved, :created_at)
                """),
                {"id": new_id(), "user_id": profile_id, "company_name": request.company_name,
                 "is_approved": False, "created_at": now}
            )
        elif request.role == RegistrationRole.faculty:
            db.execute(
                text("""
                    INSERT INTO faculty (id, user_id, department, created_at)
                    VALUES (:id, :user_id, :department, :created_at)
                """),
                {"id": new_id(), "user_id": profile_id, "department": request.department,
                 "created_at": now}
            )


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, store: Store = Depends(get_store)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = store.fetch_one(
        "SELECT id, password_hash, role FROM profiles WHERE email = :email",
        {"email": request.email}
    )

    if not user or not user["password_hash"]:
        raise Unauthorized("Invalid email or password")

    if not verify_password(request.password, user["password_hash"]):
        raise Unauthorized("Invalid email or password")

    token = create_access_token(data={"sub": user["id"], "role": user["role"]})

    return TokenResponse(access_token=token, user_id=user["id"], role=user["role"])


@router.get("/me", response_model=ProfileResponse)
def get_me(user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """Get current authenticated user's info."""
    row = store.fetch_one(
        "SELECT id, full_name, email, role, created_at FROM profiles WHERE id = :id",
        {"id": user["id"]}
    )
    return ProfileResponse(**row)


@router.post("/logout", response_model=MessageResponse)
def logout(user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """Revoke the bearer token used for this request."""
    if not user.get("jti"):
        raise InvalidArgument("Logout failed")

    store.execute(
        "INSERT INTO revoked_tokens (jti, user_id, revoked_at) VALUES (:jti, :uid, :at)",
        {"jti": user["jti"], "uid": user["id"], "at": utcnow()}
    )
    return MessageResponse(message="Logged out successfully")
