"""
Job Seeker Authentication & Profile Routes

POST /auth/register - Register new job seeker
POST /auth/login - Login and get JWT token
PUT /auth/onboarding/{user_id} - Save onboarding answers
GET /auth/profile - Get own profile
PUT /auth/profile - Update own profile
POST /auth/jobs/{job_id}/report - Report a job posting
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pymongo.errors import DuplicateKeyError

from jobzee.core.auth import create_access_token, get_current_user, hash_password, verify_password
from jobzee.core.errors import ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import (
    JobReportRequest, LoginRequest, MessageResponse, OnboardingRequest, ProfileUpdate, RegisterRequest
)
from jobzee.services.mongo_service import drop_none, parse_object_id, serialize_doc, utcnow

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Reports needed before a job is flagged for admin review
REPORT_FLAG_THRESHOLD = 3


@router.post("/register", status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new job seeker account.

    Returns a token so the frontend can go straight to onboarding.
    """
    users = get_collection("users")
    email = request.email.lower()
    if users.find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    now = utcnow()
    user = {
        "name": request.name.strip(),
        "email": email,
        "phone": request.phone,
        "password_hash": hash_password(request.password),
        "role": "user",
        "is_active": True,
        "status": "active",
        "skills": [],
        "saved_jobs": [],
        "is_onboarded": False,
        "onboarding_skipped": False,
        "resume": None,
        "profile_photo": None,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = users.insert_one(user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already registered")
    user["_id"] = result.inserted_id

    return {
        "message": "Registration successful",
        "access_token": create_access_token(result.inserted_id, "user"),
        "token_type": "bearer",
        "user": serialize_doc(user),
    }


@router.post("/login")
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    users = get_collection("users")
    user = users.find_one({"email": request.email.lower()})

    if not user or not verify_password(request.password, user.get("password_hash")):
        logger.warning(f"Failed job seeker login for {request.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("is_active", True) or user.get("status") == "suspended":
        raise HTTPException(status_code=403, detail="Account suspended or deactivated")

    users.update_one({"_id": user["_id"]}, {"$set": {"last_login_at": utcnow()}})

    return {
        "access_token": create_access_token(user["_id"], "user"),
        "token_type": "bearer",
        "user": serialize_doc(user),
    }


@router.put("/onboarding/{user_id}")
async def complete_onboarding(user_id: str, data: OnboardingRequest, user: dict = Depends(get_current_user)):
    """
    Save onboarding answers.

    Only fields that were actually sent are merged into the profile;
    `skip=true` marks onboarding as skipped.
    """
    target_id = parse_object_id(user_id, "User")
    if target_id != user["_id"]:
        raise HTTPException(status_code=403, detail="You can only update your own onboarding")

    updates = drop_none(data.model_dump(mode="json", exclude={"skip"}))
    updates.update({"is_onboarded": True, "updated_at": utcnow()})
    if data.skip:
        updates["onboarding_skipped"] = True

    users = get_collection("users")
    result = users.update_one({"_id": target_id}, {"$set": updates})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")

    return {"message": "Onboarding saved", "user": serialize_doc(users.find_one({"_id": target_id}))}


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user)):
    """Get current job seeker's profile."""
    return {"user": serialize_doc(user)}


@router.put("/profile")
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Partial profile update; at least one field must be sent."""
    updates = drop_none(data.model_dump(mode="json"))
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    updates["updated_at"] = utcnow()

    users = get_collection("users")
    users.update_one({"_id": user["_id"]}, {"$set": updates})
    return {"message": "Profile updated", "user": serialize_doc(users.find_one({"_id": user["_id"]}))}


@router.post("/jobs/{job_id}/report", response_model=MessageResponse)
async def report_job(job_id: str, data: JobReportRequest, user: dict = Depends(get_current_user)):
    """
    Report a job posting. One report per user per job; the job is flagged
    for admin review once enough reports accumulate.
    """
    jobs = get_collection("jobs")
    oid = parse_object_id(job_id, "Job")
    job = jobs.find_one({"_id": oid})
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    if any(r.get("user_id") == user["_id"] for r in job.get("reports", [])):
        raise ConflictError("You have already reported this job", error_type="already_reported")

    report = {"user_id": user["_id"], "reason": data.reason.value, "details": data.details, "created_at": utcnow()}
    jobs.update_one({"_id": oid}, {"$push": {"reports": report}, "$inc": {"report_count": 1}})

    updated = jobs.find_one({"_id": oid}, {"report_count": 1})
    if updated.get("report_count", 0) >= REPORT_FLAG_THRESHOLD:
        jobs.update_one({"_id": oid}, {"$set": {"is_flagged": True}})
        logger.warning(f"Job {job_id} flagged after {updated['report_count']} reports")

    return MessageResponse(message="Job reported. Thank you for helping keep the platform safe.")
