"""
Employer Routes

POST /employers/register - Register company account
POST /employers/login - Login and get JWT token
GET /employers/profile - Get own company profile
PUT /employers/profile - Update company profile
GET /employers/dashboard/stats - Dashboard counters and plan status
PUT /employers/change-password - Change password
PUT /employers/deactivate - Deactivate own account
POST /employers/activity/profile-view - Count a public profile view
POST /employers/jobs - Post a job (verified employers, plan limits apply)
GET /employers/jobs - List own jobs
GET /employers/jobs/{job_id} - Get own job
PUT /employers/jobs/{job_id} - Update own job
DELETE /employers/jobs/{job_id} - Delete own job
"""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pymongo.errors import DuplicateKeyError

from jobzee.core.auth import (
    create_access_token, get_current_employer, hash_password, require_verified_employer, verify_password
)
from jobzee.core.errors import ForbiddenError
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import (
    ChangePasswordRequest, EmployerLoginRequest, EmployerProfileUpdate, EmployerRegisterRequest,
    JobCreate, JobUpdate, MessageResponse, ProfileViewRequest
)
from jobzee.services.employer_service import (
    FREE_PLAN, can_post_more_jobs, company_age, has_active_subscription,
    new_employer_defaults, remaining_job_posts
)
from jobzee.services.job_service import get_owned_job, visible_jobs_filter
from jobzee.services.mongo_service import (
    drop_none, naive_utc, paginate, parse_object_id, serialize_doc, serialize_docs, utcnow
)

router = APIRouter(prefix="/employers", tags=["Employers"])

JOB_LIFETIME_DAYS = 30


# ============================================================
# ACCOUNT
# ============================================================

@router.post("/register", status_code=201)
async def register(request: EmployerRegisterRequest):
    """
    Register a company. New employers start on the free plan (one live job)
    and must be verified by an admin before posting.
    """
    employers = get_collection("employers")
    if employers.find_one({"company_email": request.company_email}):
        raise HTTPException(status_code=400, detail="An employer with this email already exists")

    now = utcnow()
    employer = {
        "company_name": request.company_name.strip(),
        "company_email": request.company_email,
        "company_phone": request.company_phone,
        "password_hash": hash_password(request.password),
        "contact_person_name": request.contact_person_name.strip(),
        "industry": request.industry,
        "company_size": request.company_size.value if request.company_size else None,
        "headquarters": {},
        "company_logo": None,
        **new_employer_defaults(now),
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = employers.insert_one(employer)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="An employer with this email already exists")
    employer["_id"] = result.inserted_id
    logger.info(f"Employer registered: {request.company_email}")

    return {
        "message": "Employer registered successfully",
        "access_token": create_access_token(result.inserted_id, "employer"),
        "token_type": "bearer",
        "employer": serialize_doc(employer),
    }


@router.post("/login")
async def login(request: EmployerLoginRequest):
    """Login with company email and password."""
    employers = get_collection("employers")
    employer = employers.find_one({"company_email": request.company_email.lower()})

    if not employer or not verify_password(request.password, employer.get("password_hash")):
        logger.warning(f"Failed employer login for {request.company_email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not employer.get("is_active", True):
        raise HTTPException(status_code=403, detail="Employer account deactivated")

    now = utcnow()
    employers.update_one({"_id": employer["_id"]}, {"$set": {"last_login_at": now}})
    employer["last_login_at"] = now

    return {
        "access_token": create_access_token(employer["_id"], "employer"),
        "token_type": "bearer",
        "employer": serialize_doc(employer),
    }


@router.get("/profile")
async def get_profile(employer: dict = Depends(get_current_employer)):
    """Get current employer's company profile."""
    profile = serialize_doc(employer)
    profile["company_age"] = company_age(employer)
    return {"employer": profile}


@router.put("/profile")
async def update_profile(data: EmployerProfileUpdate, employer: dict = Depends(get_current_employer)):
    """Partial company profile update."""
    updates = drop_none(data.model_dump(mode="json"))
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    updates["updated_at"] = utcnow()

    employers = get_collection("employers")
    employers.update_one({"_id": employer["_id"]}, {"$set": updates})
    return {"message": "Profile updated", "employer": serialize_doc(employers.find_one({"_id": employer["_id"]}))}


@router.get("/dashboard/stats")
async def dashboard_stats(employer: dict = Depends(get_current_employer)):
    """Counters and plan status for the employer dashboard."""
    now = utcnow()
    jobs = get_collection("jobs")
    owner = {"employer_id": employer["_id"]}

    return {
        "total_job_posts": employer.get("total_job_posts", 0),
        "job_postings_used": employer.get("job_postings_used", 0),
        "job_posting_limit": employer.get("job_posting_limit", 1),
        "remaining_job_posts": remaining_job_posts(employer),
        "total_applications_received": employer.get("total_applications_received", 0),
        "profile_views": employer.get("profile_views", 0),
        "subscription_plan": employer.get("subscription_plan", FREE_PLAN),
        "subscription_end": employer.get("subscription_end"),
        "verification_status": employer.get("verification_status", "pending"),
        "is_verified": employer.get("is_verified", False),
        "has_active_subscription": has_active_subscription(employer, now),
        "can_post_more_jobs": can_post_more_jobs(employer),
        "company_age": company_age(employer, now),
        "active_jobs": jobs.count_documents({**owner, "status": {"$in": ["active", "approved"]}}),
        "pending_jobs": jobs.count_documents({**owner, "status": "pending"}),
        "total_internships": get_collection("internships").count_documents(owner),
        "upcoming_interviews": get_collection("interviews").count_documents({
            **owner, "scheduled_at": {"$gte": now}, "status": {"$in": ["scheduled", "rescheduled"]}
        }),
        "unread_notifications": get_collection("employer_notifications").count_documents(
            {**owner, "is_read": False}
        ),
    }


@router.put("/change-password", response_model=MessageResponse)
async def change_password(data: ChangePasswordRequest, employer: dict = Depends(get_current_employer)):
    if not verify_password(data.current_password, employer.get("password_hash")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    get_collection("employers").update_one(
        {"_id": employer["_id"]},
        {"$set": {"password_hash": hash_password(data.new_password), "updated_at": utcnow()}},
    )
    return MessageResponse(message="Password changed successfully")


@router.put("/deactivate", response_model=MessageResponse)
async def deactivate(employer: dict = Depends(get_current_employer)):
    get_collection("employers").update_one(
        {"_id": employer["_id"]}, {"$set": {"is_active": False, "updated_at": utcnow()}}
    )
    logger.info(f"Employer {employer['_id']} deactivated their account")
    return MessageResponse(message="Account deactivated")


@router.post("/activity/profile-view", response_model=MessageResponse)
async def record_profile_view(data: ProfileViewRequest):
    """Public - count a view of a company profile."""
    result = get_collection("employers").update_one(
        {"_id": parse_object_id(data.employer_id, "Employer")}, {"$inc": {"profile_views": 1}}
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Employer not found")
    return MessageResponse(message="Profile view recorded")


# ============================================================
# JOBS
# ============================================================

@router.post("/jobs", status_code=201)
async def create_job(job: JobCreate, employer: dict = Depends(require_verified_employer)):
    """
    Post a job.

    Free plan: one live job at a time, created as `pending` until an admin
    approves it. Paid plans: subscription must be active and the posting
    limit not reached; the job goes live immediately.
    """
    jobs = get_collection("jobs")
    employers = get_collection("employers")
    now = utcnow()
    plan = employer.get("subscription_plan", FREE_PLAN)

    if plan == FREE_PLAN:
        # awaiting review, or published and not yet expired
        live = jobs.count_documents({
            "employer_id": employer["_id"],
            "$or": [{"status": "pending"}, visible_jobs_filter(now)],
        })
        if live >= 1:
            raise ForbiddenError(
                "Free plan allows one live job. Upgrade your plan to post more.",
                error_type="job_posting_limit_reached",
                extra={"subscription_plan": plan},
            )
        status = "pending"
    else:
        if not has_active_subscription(employer, now):
            raise ForbiddenError("Your subscription has expired", error_type="subscription_expired",
                                 extra={"subscription_plan": plan})
        if not can_post_more_jobs(employer):
            raise ForbiddenError(
                "Job posting limit reached for your plan",
                error_type="job_posting_limit_reached",
                extra={"job_posting_limit": employer.get("job_posting_limit"),
                       "job_postings_used": employer.get("job_postings_used", 0)},
            )
        status = "active"

    doc = job.model_dump(mode="json")
    doc.update({
        "employer_id": employer["_id"],
        "company": employer.get("company_name"),
        "expires_at": naive_utc(job.expires_at) or now + timedelta(days=JOB_LIFETIME_DAYS),
        "status": status,
        "approved_at": now if status == "active" else None,
        "admin_notes": None,
        "views": 0,
        "reports": [],
        "report_count": 0,
        "is_flagged": False,
        "created_at": now,
        "updated_at": now,
    })
    result = jobs.insert_one(doc)
    doc["_id"] = result.inserted_id

    counters = {"total_job_posts": 1}
    if status == "active":
        counters["job_postings_used"] = 1
    employers.update_one({"_id": employer["_id"]}, {"$inc": counters})

    logger.info(f"Employer {employer['_id']} posted job {result.inserted_id} ({status})")
    message = "Job posted successfully" if status == "active" else "Job submitted for admin approval"
    return {"message": message, "job": serialize_doc(doc)}


@router.get("/jobs")
async def list_own_jobs(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    employer: dict = Depends(get_current_employer),
):
    """Employer's own jobs, newest first, with application counts."""
    query = {"employer_id": employer["_id"]}
    if status:
        query["status"] = status
    docs, pagination = paginate(get_collection("jobs"), query, page, limit, sort=[("created_at", -1)])

    applications = get_collection("applications")
    jobs = serialize_docs(docs, exclude=("reports",))
    for job, raw in zip(jobs, docs):
        job["applications_count"] = applications.count_documents({"job_id": raw["_id"]})
    return {"jobs": jobs, "pagination": pagination}


@router.get("/jobs/{job_id}")
async def get_own_job(job_id: str, employer: dict = Depends(get_current_employer)):
    job = get_owned_job(job_id, employer)
    return {"job": serialize_doc(job)}


@router.put("/jobs/{job_id}")
async def update_own_job(job_id: str, data: JobUpdate, employer: dict = Depends(require_verified_employer)):
    """Update an own job. Employers may only close (filled/expired) or re-list already approved jobs."""
    job = get_owned_job(job_id, employer)
    updates = drop_none(data.model_dump(mode="json"))
    if data.expires_at:
        updates["expires_at"] = naive_utc(data.expires_at)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    new_status = updates.get("status")
    if new_status in ("approved", "rejected", "pending"):
        raise HTTPException(status_code=403, detail="Only admins can change the review status of a job")
    if new_status == "active" and job.get("status") == "pending":
        raise HTTPException(status_code=403, detail="Job is awaiting admin approval")

    updates["updated_at"] = utcnow()
    jobs = get_collection("jobs")
    jobs.update_one({"_id": job["_id"]}, {"$set": updates})
    return {"message": "Job updated", "job": serialize_doc(jobs.find_one({"_id": job["_id"]}))}


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
async def delete_own_job(job_id: str, employer: dict = Depends(get_current_employer)):
    """Delete an own job together with its applications."""
    job = get_owned_job(job_id, employer)
    get_collection("jobs").delete_one({"_id": job["_id"]})
    removed = get_collection("applications").delete_many({"job_id": job["_id"]}).deleted_count
    logger.info(f"Job {job_id} deleted by employer {employer['_id']} ({removed} applications removed)")
    return MessageResponse(message="Job deleted")
