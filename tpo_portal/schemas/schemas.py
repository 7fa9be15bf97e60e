"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional, List, Any, Dict
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    company = "company"
    faculty = "faculty"
    admin = "admin"


class RegistrationRole(str, Enum):
    """Roles open to self-registration. Admins come from /admin/setup."""
    student = "student"
    company = "company"
    faculty = "faculty"


class ApprovalStatus(str, Enum):
    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"


class AccountStatus(str, Enum):
    """Company and faculty account approval."""
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class OfferStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=200)
    role: RegistrationRole
    roll_number: Optional[str] = Field(None, min_length=1, max_length=50)
    department: Optional[str] = None
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == RegistrationRole.student and not self.roll_number:
            raise ValueError("roll_number is required for student accounts")
        if self.role == RegistrationRole.company and not self.company_name:
            raise ValueError("company_name is required for company accounts")
        return self

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str

class ProfileResponse(BaseModel):
    id: str
    full_name: str
    email: str
    role: str
    created_at: Optional[str] = None


# ============================================================
# STUDENT / APPROVAL SCHEMAS
# ============================================================

class StudentResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    roll_number: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    cgpa: Optional[float] = None
    status: str
    is_approved: bool
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    created_at: Optional[str] = None

class StudentListResponse(BaseModel):
    students: List[StudentResponse]

class StudentEnvelope(BaseModel):
    student: StudentResponse

class ApprovalDecision(BaseModel):
    # Plain str so an unknown value reaches the state machine and is
    # rejected there with the same error as any other caller
    status: str

class FacultySummaryResponse(BaseModel):
    total_students: int
    pending: int
    approved: int
    rejected: int


# ============================================================
# FACULTY RANGE SCHEMAS
# ============================================================

class RangeCreate(BaseModel):
    faculty_id: str
    start_roll_number: str = Field(..., min_length=1, max_length=50)
    end_roll_number: str = Field(..., min_length=1, max_length=50)

class RangeResponse(BaseModel):
    id: str
    faculty_id: str
    start_roll_number: str
    end_roll_number: str
    faculty_name: Optional[str] = None
    department: Optional[str] = None


# ============================================================
# COMPANY / DASHBOARD SCHEMAS
# ============================================================

class CompanyResponse(BaseModel):
    id: str
    user_id: str
    company_name: str
    industry: Optional[str] = None
    website: Optional[str] = None
    is_approved: bool = False
    created_at: Optional[str] = None

class CompanyDashboardResponse(BaseModel):
    profile: ProfileResponse
    company: CompanyResponse

class RecentDrive(BaseModel):
    id: str
    title: str
    applications: int
    deadline: Optional[str] = None
    status: str

class CompanyStatsResponse(BaseModel):
    drives: int
    applications: int
    offers: int
    recent_drives: List[RecentDrive] = []

class AnalyticsResponse(BaseModel):
    total_profiles: int
    total_students: int
    total_companies: int
    total_jobs: int
    total_applications: int


# ============================================================
# APPLICATION / OFFER SCHEMAS
# ============================================================

class ApplicationDetailResponse(BaseModel):
    application: Dict[str, Any]

class OfferResponse(BaseModel):
    id: str
    application_id: Optional[str] = None
    student_id: str
    offer_status: str
    salary: Optional[float] = None
    joining_date: Optional[str] = None
    student_response_at: Optional[str] = None
    created_at: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None

class OfferEnvelope(BaseModel):
    offer: OfferResponse

class OfferListResponse(BaseModel):
    offers: List[OfferResponse]

class OfferUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    offer_status: OfferStatus


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: Optional[str] = None
    type: str
    is_read: bool
    created_at: Optional[str] = None

class NotificationUpdate(BaseModel):
    """Only the fields listed here may be changed by the owning user."""
    model_config = ConfigDict(extra="forbid")

    id: str
    is_read: Optional[bool] = None

    def updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"id"}, exclude_none=True)


# ============================================================
# AUDIT SCHEMAS
# ============================================================

class ActorSummary(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None

class AuditEventResponse(BaseModel):
    id: str
    actor_id: Optional[str] = None
    actor_role: Optional[str] = None
    action: str
    target_table: str
    target_id: Optional[str] = None
    target_role: Optional[str] = None
    details: Optional[Any] = None
    created_at: str
    actor: Optional[ActorSummary] = None

class AuditListResponse(BaseModel):
    events: List[AuditEventResponse]


# ============================================================
# ACCOUNT APPROVAL SCHEMAS
# ============================================================

class AdminSetupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=200)

class AccountDecision(BaseModel):
    model_config = ConfigDict(extra="forbid")

    profile_id: str
    status: str
    notes: Optional[str] = Field(None, max_length=1000)

class AccountResponse(BaseModel):
    id: str
    full_name: str
    email: str
    role: str
    approval_status: str
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    created_at: Optional[str] = None

class AccountEnvelope(BaseModel):
    account: AccountResponse

class AccountListResponse(BaseModel):
    accounts: List[AccountResponse]

class ApprovalHistoryItem(BaseModel):
    id: str
    email: str
    full_name: str
    role: str
    status: str
    approved_at: str
    approved_by: Optional[ActorSummary] = None

class ApprovalHistoryResponse(BaseModel):
    approvals: List[ApprovalHistoryItem]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
