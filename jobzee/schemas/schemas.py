"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Stored documents are returned as serialized dicts; these models describe
what the API accepts plus the few fixed-shape responses.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from jobzee.services.mongo_service import naive_utc


# ============================================================
# ENUMS
# ============================================================

class ExperienceBand(str, Enum):
    fresher = "fresher"
    experienced = "experienced"


class CompanySize(str, Enum):
    xs = "1-10"
    s = "11-50"
    m = "51-200"
    l = "201-500"
    xl = "501-1000"
    xxl = "1000+"


class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"
    freelance = "freelance"


class ExperienceLevel(str, Enum):
    entry = "entry"
    mid = "mid"
    senior = "senior"
    executive = "executive"


class RemoteType(str, Enum):
    remote = "remote"
    hybrid = "hybrid"
    onsite = "onsite"


class JobStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    active = "active"
    expired = "expired"
    filled = "filled"


class ApplicationStatus(str, Enum):
    applied = "applied"
    under_review = "under-review"
    shortlisted = "shortlisted"
    interview_scheduled = "interview-scheduled"
    interviewed = "interviewed"
    rejected = "rejected"
    hired = "hired"
    withdrawn = "withdrawn"


class ReportReason(str, Enum):
    spam = "spam"
    scam = "scam"
    duplicate = "duplicate"
    misleading = "misleading"
    other = "other"


class InternshipLocationType(str, Enum):
    on_site = "on-site"
    remote = "remote"
    hybrid = "hybrid"


class InterviewLocationType(str, Enum):
    online = "online"
    in_person = "in_person"
    phone = "phone"
    other = "other"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    rescheduled = "rescheduled"
    cancelled = "cancelled"
    completed = "completed"
    no_show = "no_show"


class PlanPeriod(str, Enum):
    monthly = "monthly"
    yearly = "yearly"
    forever = "forever"


class ReviewStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# ============================================================
# SHARED
# ============================================================

class SalaryRange(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: str = "INR"


class Address(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MessageResponse(BaseModel):
    message: str
    success: bool = True


# ============================================================
# JOB SEEKER AUTH & PROFILE
# ============================================================

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class OnboardingRequest(BaseModel):
    skip: bool = False
    experience_level: Optional[ExperienceBand] = None
    preferred_fields: Optional[List[str]] = None
    expected_salary: Optional[SalaryRange] = None
    remote_preference: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[List[str]] = None
    education: Optional[str] = None
    years_of_experience: Optional[float] = Field(None, ge=0, le=60)
    current_role: Optional[str] = None
    preferred_job_types: Optional[List[JobType]] = None
    notice_period: Optional[str] = None
    willing_to_relocate: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = None
    skills: Optional[List[str]] = None
    education: Optional[str] = None
    experience_level: Optional[ExperienceBand] = None
    years_of_experience: Optional[float] = Field(None, ge=0, le=60)
    current_role: Optional[str] = None
    preferred_fields: Optional[List[str]] = None
    preferred_job_types: Optional[List[JobType]] = None
    expected_salary: Optional[SalaryRange] = None
    remote_preference: Optional[str] = None
    notice_period: Optional[str] = None
    willing_to_relocate: Optional[bool] = None
    resume: Optional[str] = None


class JobReportRequest(BaseModel):
    reason: ReportReason
    details: Optional[str] = Field(None, max_length=1000)


# ============================================================
# EMPLOYER SCHEMAS
# ============================================================

class EmployerRegisterRequest(BaseModel):
    company_name: str = Field(..., min_length=2, max_length=200)
    company_email: EmailStr
    password: str = Field(..., min_length=6)
    contact_person_name: str = Field(..., min_length=2, max_length=100)
    company_phone: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[CompanySize] = None

    @field_validator("company_email", mode="before")
    @classmethod
    def company_email_required(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Company email is required")
        return str(v).strip().lower()


class EmployerLoginRequest(BaseModel):
    company_email: EmailStr
    password: str


class EmployerProfileUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)
    company_phone: Optional[str] = None
    contact_person_name: Optional[str] = Field(None, min_length=2, max_length=100)
    industry: Optional[str] = None
    company_size: Optional[CompanySize] = None
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    headquarters: Optional[Address] = None
    website: Optional[str] = None
    company_description: Optional[str] = Field(None, max_length=5000)
    company_logo: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class ProfileViewRequest(BaseModel):
    employer_id: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10)
    location: str
    job_type: JobType = JobType.full_time
    experience_level: ExperienceLevel = ExperienceLevel.entry
    salary: Optional[SalaryRange] = None
    requirements: List[str] = []
    benefits: List[str] = []
    skills: List[str] = []
    category: Optional[str] = None
    remote: RemoteType = RemoteType.onsite
    expires_at: Optional[datetime] = None


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary: Optional[SalaryRange] = None
    requirements: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    category: Optional[str] = None
    remote: Optional[RemoteType] = None
    expires_at: Optional[datetime] = None
    status: Optional[JobStatus] = None


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_id: str
    resume_link: str = Field(..., min_length=1)
    cover_letter: Optional[str] = Field(None, max_length=5000)
    skills: List[str] = []
    experience: Optional[str] = None
    education: Optional[str] = None
    expected_salary: Optional[float] = Field(None, ge=0)
    availability: Optional[str] = None
    notice_period: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None


class ApplicationMessage(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


# ============================================================
# INTERNSHIP SCHEMAS
# ============================================================

class Stipend(BaseModel):
    amount: float = Field(0, ge=0)
    currency: str = "INR"
    period: str = "month"


class Eligibility(BaseModel):
    education: List[str] = []
    year_of_study: Optional[str] = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)


class InternshipCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10)
    location: str
    location_type: InternshipLocationType = InternshipLocationType.on_site
    duration: int = Field(..., ge=1, le=12)
    stipend: Optional[Stipend] = None
    is_unpaid: bool = False
    start_date: datetime
    application_deadline: datetime
    skills: List[str] = []
    eligibility: Optional[Eligibility] = None
    perks: List[str] = []
    number_of_positions: int = Field(1, ge=1)

    @field_validator("start_date", "application_deadline")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        return naive_utc(value)

    @model_validator(mode="after")
    def deadline_before_start(self):
        if self.application_deadline > self.start_date:
            raise ValueError("Application deadline must be on or before the start date")
        if self.is_unpaid:
            self.stipend = None
        return self


class InternshipUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = None
    location_type: Optional[InternshipLocationType] = None
    duration: Optional[int] = Field(None, ge=1, le=12)
    stipend: Optional[Stipend] = None
    is_unpaid: Optional[bool] = None
    start_date: Optional[datetime] = None
    application_deadline: Optional[datetime] = None
    skills: Optional[List[str]] = None
    eligibility: Optional[Eligibility] = None
    perks: Optional[List[str]] = None
    number_of_positions: Optional[int] = Field(None, ge=1)


class InternshipStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def employer_statuses(cls, v):
        if v not in ("active", "closed"):
            raise ValueError("Status must be 'active' or 'closed'")
        return v


class InternshipApplicationCreate(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume_link: Optional[str] = None
    skills: List[str] = []
    education: Optional[str] = None
    availability: Optional[str] = None


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class InterviewSchedule(BaseModel):
    round: int = Field(1, ge=1)
    scheduled_at: datetime
    timezone: str = "Asia/Kolkata"
    duration: int = Field(30, ge=5, le=480)
    location_type: InterviewLocationType = InterviewLocationType.online
    location_details: Optional[str] = None
    note: Optional[str] = None
    interviewers: List[str] = []


class InterviewCreate(InterviewSchedule):
    application_id: str


class InterviewStatusUpdate(BaseModel):
    status: InterviewStatus
    result: Optional[str] = None


class InterviewResponse(BaseModel):
    response: str
    note: Optional[str] = None


# ============================================================
# PRICING / PAYMENT SCHEMAS
# ============================================================

class PlanPrice(BaseModel):
    amount: float = Field(..., ge=0)
    currency: str = "INR"
    period: PlanPeriod = PlanPeriod.monthly


class PricingPlanCreate(BaseModel):
    plan_id: str = Field(..., min_length=2, max_length=50)
    name: str
    description: Optional[str] = None
    price: PlanPrice
    job_posting_limit: Optional[int] = Field(None, ge=0)
    featured_jobs_limit: int = Field(0, ge=0)
    features: List[str] = []
    is_active: bool = True
    sort_order: int = 0


class PricingPlanUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[PlanPrice] = None
    job_posting_limit: Optional[int] = Field(None, ge=0)
    featured_jobs_limit: Optional[int] = Field(None, ge=0)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CreateOrderRequest(BaseModel):
    plan_id: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    plan_id: Optional[str] = None


# ============================================================
# MENTOR SCHEMAS
# ============================================================

class MentorRegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=5)
    password: str = Field(..., min_length=6)
    country: Optional[str] = None
    city: Optional[str] = None
    photo: Optional[str] = None


class MentorProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    photo: Optional[str] = None


class MentorStatusUpdate(BaseModel):
    status: ReviewStatus


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class UserStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v not in ("active", "suspended"):
            raise ValueError("Status must be 'active' or 'suspended'")
        return v


class EmployerStatusUpdate(BaseModel):
    is_active: bool


class EmployerVerificationUpdate(BaseModel):
    status: str
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v not in ("verified", "rejected"):
            raise ValueError("Status must be 'verified' or 'rejected'")
        return v


class JobStatusUpdate(BaseModel):
    status: JobStatus
    admin_notes: Optional[str] = None


class AdminInternshipStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v):
        if v not in ("pending", "active", "closed", "rejected"):
            raise ValueError("Invalid internship status")
        return v


# ============================================================
# PREDICTION SCHEMAS
# ============================================================

class SalaryForJobRequest(BaseModel):
    title: Optional[str] = None
    skills: List[str] = []
    location: Optional[str] = None
    experience_required: Optional[str] = None
    education: Optional[str] = None
    category: Optional[str] = None
    job_type: Optional[str] = None


class JobSuccessRequest(BaseModel):
    job_id: Optional[str] = None


class InternshipSuccessRequest(BaseModel):
    internship_id: Optional[str] = None


class ScreeningPreviewRequest(BaseModel):
    type: str = Field("job", pattern="^(job|internship)$")
    job_id: Optional[str] = None
    internship_id: Optional[str] = None


class LocationSuggestion(BaseModel):
    place_name: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

