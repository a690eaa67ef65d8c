"""
Admin Routes

POST /admin/login - Admin login
GET /admin/dashboard - Platform statistics

GET /admin/users - Job seekers (search, status, pagination)
PATCH /admin/users/{user_id}/status - Suspend / reactivate

GET /admin/employers - Employers (search, verification status, pagination)
PATCH /admin/employers/{employer_id}/status - Activate / deactivate
PATCH /admin/employers/{employer_id}/verification - Verify / reject

GET /admin/jobs - Jobs (status, flagged)
PATCH /admin/jobs/{job_id}/status - Approve / reject / change status

GET /admin/internships - Internships (status)
PATCH /admin/internships/{internship_id}/status

GET /admin/payments - All payments (status, pagination)
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from jobzee.core.auth import create_access_token, get_current_admin, verify_password
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import (
    AdminInternshipStatusUpdate, EmployerStatusUpdate, EmployerVerificationUpdate, JobStatusUpdate, LoginRequest,
    UserStatusUpdate
)
from jobzee.services.employer_service import FREE_PLAN
from jobzee.services.mongo_service import find_or_404, paginate, serialize_doc, serialize_docs, utcnow
from jobzee.services.notification_service import notify_employer, notify_user

router = APIRouter(prefix="/admin", tags=["Admin"])

# Job statuses that put a job in front of job seekers
PUBLISHED_JOB_STATUSES = ("approved", "active")


def _ci(text: str) -> dict:
    return {"$regex": re.escape(text.strip()), "$options": "i"}


@router.post("/login")
async def login(request: LoginRequest):
    admins = get_collection("admins")
    admin = admins.find_one({"email": request.email.lower()})
    if not admin or not verify_password(request.password, admin.get("password_hash")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not admin.get("is_active", True):
        raise HTTPException(status_code=401, detail="Admin account is deactivated")

    admins.update_one({"_id": admin["_id"]}, {"$set": {"last_login_at": utcnow()}})
    logger.info(f"Admin login: {admin['email']}")
    return {
        "access_token": create_access_token(admin["_id"], "admin"),
        "token_type": "bearer",
        "admin": serialize_doc(admin),
    }


@router.get("/dashboard")
async def dashboard(admin: dict = Depends(get_current_admin)):
    jobs = get_collection("jobs")
    employers = get_collection("employers")

    jobs_by_status = {row["_id"]: row["count"] for row in jobs.aggregate([
        {"$group": {"_id": "$status", "count": {"$sum": 1}}}
    ])}
    revenue = sum(
        p.get("amount") or 0 for p in get_collection("payments").find({"status": "success"}, {"amount": 1})
    )
    recent_users = get_collection("users").find({}, {"name": 1, "email": 1, "created_at": 1}) \
        .sort("created_at", -1).limit(5)
    recent_jobs = jobs.find({}, {"title": 1, "company": 1, "status": 1, "created_at": 1}) \
        .sort("created_at", -1).limit(5)

    return {
        "stats": {
            "total_users": get_collection("users").count_documents({}),
            "total_employers": employers.count_documents({}),
            "total_mentors": get_collection("mentors").count_documents({}),
            "pending_mentors": get_collection("mentors").count_documents({"status": "pending"}),
            "total_jobs": jobs.count_documents({}),
            "active_jobs": jobs_by_status.get("active", 0),
            "pending_jobs": jobs_by_status.get("pending", 0),
            "rejected_jobs": jobs_by_status.get("rejected", 0),
            "jobs_by_status": jobs_by_status,
            "flagged_jobs": jobs.count_documents({"is_flagged": True}),
            "total_internships": get_collection("internships").count_documents({}),
            "total_applications": get_collection("applications").count_documents({}),
            "pending_verifications": employers.count_documents({"verification_status": "pending"}),
            "total_revenue": revenue,
        },
        "recent_activity": {"users": serialize_docs(recent_users), "jobs": serialize_docs(recent_jobs)},
    }


# ============================================================
# USERS
# ============================================================

@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
):
    query = {}
    if search and search.strip():
        query["$or"] = [{"name": _ci(search)}, {"email": _ci(search)}]
    if status:
        query["status"] = status
    docs, pagination = paginate(get_collection("users"), query, page, limit, sort=[("created_at", -1)])
    return {"users": serialize_docs(docs, exclude=("saved_jobs",)), "pagination": pagination}


@router.patch("/users/{user_id}/status")
async def update_user_status(user_id: str, data: UserStatusUpdate, admin: dict = Depends(get_current_admin)):
    users = get_collection("users")
    user = find_or_404(users, user_id, "User")
    now = utcnow()
    updates = {"status": data.status, "is_active": data.status == "active", "updated_at": now}
    if data.status == "suspended":
        updates.update({"suspended_at": now, "suspension_reason": data.reason})
    else:
        updates.update({"suspended_at": None, "suspension_reason": None})
    users.update_one({"_id": user["_id"]}, {"$set": updates})

    notify_user(user["_id"], "system", f"Account {data.status}",
                data.reason or f"Your account is now {data.status}", priority="high")
    logger.info(f"Admin {admin['_id']} set user {user_id} to {data.status}")
    return {"message": f"User {data.status}", "user": serialize_doc(users.find_one({"_id": user["_id"]}))}


# ============================================================
# EMPLOYERS
# ============================================================

@router.get("/employers")
async def list_employers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    verification_status: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
):
    query = {}
    if search and search.strip():
        query["$or"] = [{"company_name": _ci(search)}, {"company_email": _ci(search)}]
    if verification_status:
        query["verification_status"] = verification_status
    docs, pagination = paginate(get_collection("employers"), query, page, limit, sort=[("created_at", -1)])
    return {"employers": serialize_docs(docs), "pagination": pagination}


@router.patch("/employers/{employer_id}/status")
async def update_employer_status(employer_id: str, data: EmployerStatusUpdate,
                                 admin: dict = Depends(get_current_admin)):
    employers = get_collection("employers")
    employer = find_or_404(employers, employer_id, "Employer")
    employers.update_one({"_id": employer["_id"]}, {"$set": {"is_active": data.is_active, "updated_at": utcnow()}})
    state = "activated" if data.is_active else "deactivated"
    return {"message": f"Employer {state}", "is_active": data.is_active}


@router.patch("/employers/{employer_id}/verification")
async def update_employer_verification(employer_id: str, data: EmployerVerificationUpdate,
                                       admin: dict = Depends(get_current_admin)):
    employers = get_collection("employers")
    employer = find_or_404(employers, employer_id, "Employer")
    verified = data.status == "verified"
    updates = {
        "is_verified": verified,
        "verification_status": data.status,
        "verified_at": utcnow() if verified else None,
        "updated_at": utcnow(),
    }
    if data.notes is not None:
        updates["verification_notes"] = data.notes.strip()
    employers.update_one({"_id": employer["_id"]}, {"$set": updates})

    if verified:
        title, message = "Company verified", "Your company is verified. You can now post jobs."
    else:
        title = "Verification rejected"
        message = f"Your verification was rejected. {data.notes}" if data.notes else "Your verification was rejected."
    notify_employer(employer["_id"], "verification", title, message,
                    data={"verification_status": data.status}, priority="high")
    logger.info(f"Admin {admin['_id']} set employer {employer_id} verification to {data.status}")
    return {
        "message": "Employer verification updated",
        "employer": {"id": employer_id, "is_verified": verified, "verification_status": data.status,
                     "verification_notes": updates.get("verification_notes", employer.get("verification_notes"))},
    }


# ============================================================
# JOBS
# ============================================================

@router.get("/jobs")
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    flagged: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
):
    query = {}
    if status:
        query["status"] = status
    if flagged is not None:
        query["is_flagged"] = flagged
    if search and search.strip():
        query["$or"] = [{"title": _ci(search)}, {"company": _ci(search)}]
    docs, pagination = paginate(get_collection("jobs"), query, page, limit, sort=[("created_at", -1)])
    return {"jobs": serialize_docs(docs), "pagination": pagination}


@router.patch("/jobs/{job_id}/status")
async def update_job_status(job_id: str, data: JobStatusUpdate, admin: dict = Depends(get_current_admin)):
    """
    Moderate a job. Publishing a job that was never live on a free plan
    counts it against the employer's posting allowance.
    """
    jobs = get_collection("jobs")
    job = find_or_404(jobs, job_id, "Job")
    status = data.status.value
    now = utcnow()

    updates = {"status": status, "reviewed_by": admin["_id"], "updated_at": now}
    if status in PUBLISHED_JOB_STATUSES:
        updates["approved_at"] = now
    if data.admin_notes:
        updates["admin_notes"] = data.admin_notes
    jobs.update_one({"_id": job["_id"]}, {"$set": updates})

    employer_id = job.get("employer_id")
    if employer_id and status in PUBLISHED_JOB_STATUSES and job.get("status") not in PUBLISHED_JOB_STATUSES:
        employer = get_collection("employers").find_one({"_id": employer_id}, {"subscription_plan": 1})
        if employer and employer.get("subscription_plan", FREE_PLAN) == FREE_PLAN:
            get_collection("employers").update_one({"_id": employer_id}, {"$inc": {"job_postings_used": 1}})

    if employer_id:
        titles = {"approved": "Job post approved", "active": "Job post is live", "rejected": "Job post rejected"}
        if status == "rejected" and data.admin_notes:
            message = f"{job.get('title')} was rejected. Reason: {data.admin_notes}"
        else:
            message = f"{job.get('title')} status updated to {status}"
        notify_employer(employer_id, "job_status", titles.get(status, f"Job status updated to {status}"), message,
                        data={"job_id": job_id, "status": status})

    logger.info(f"Admin {admin['_id']} set job {job_id} to {status}")
    return {"message": f"Job {status} successfully", "job": serialize_doc(jobs.find_one({"_id": job["_id"]}))}


# ============================================================
# INTERNSHIPS
# ============================================================

@router.get("/internships")
async def list_internships(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
):
    query = {"status": status} if status else {}
    docs, pagination = paginate(get_collection("internships"), query, page, limit, sort=[("created_at", -1)])
    return {"internships": serialize_docs(docs), "pagination": pagination}


@router.patch("/internships/{internship_id}/status")
async def update_internship_status(internship_id: str, data: AdminInternshipStatusUpdate,
                                   admin: dict = Depends(get_current_admin)):
    internships = get_collection("internships")
    internship = find_or_404(internships, internship_id, "Internship")
    internships.update_one({"_id": internship["_id"]}, {"$set": {"status": data.status, "updated_at": utcnow()}})
    if internship.get("employer_id"):
        notify_employer(internship["employer_id"], "job_status", f"Internship {data.status}",
                        f"{internship.get('title')} status updated to {data.status}",
                        data={"internship_id": internship_id, "status": data.status})
    return {"message": f"Internship {data.status}", "status": data.status}


# ============================================================
# PAYMENTS
# ============================================================

@router.get("/payments")
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None),
    admin: dict = Depends(get_current_admin),
):
    query = {"status": status} if status else {}
    docs, pagination = paginate(get_collection("payments"), query, page, limit, sort=[("initiated_at", -1)])
    return {"payments": serialize_docs(docs, exclude=("razorpay_signature",)), "pagination": pagination}
