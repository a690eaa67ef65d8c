"""
Job Service - visibility rules and application creation shared by the
jobs, applications and employer routers.
"""

from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException
from loguru import logger
from pymongo.errors import DuplicateKeyError

from jobzee.core.errors import ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.services.mongo_service import parse_object_id, utcnow
from jobzee.services.notification_service import notify_employer, notify_user

VISIBLE_JOB_STATUSES = ["active", "approved"]

# Never returned by public job endpoints
JOB_PRIVATE_FIELDS = ("reports", "admin_notes")

FINAL_APPLICATION_STATUSES = {"hired", "rejected", "withdrawn"}


def visible_jobs_filter(now: Optional[datetime] = None) -> dict:
    """A job is visible when approved/active and not yet expired."""
    return {"status": {"$in": VISIBLE_JOB_STATUSES}, "expires_at": {"$gt": now or utcnow()}}


def get_visible_job(job_id: str) -> dict:
    query = visible_jobs_filter()
    query["_id"] = parse_object_id(job_id, "Job")
    job = get_collection("jobs").find_one(query)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def get_owned_job(job_id: str, employer: dict) -> dict:
    """Job owned by `employer` (403 when it belongs to someone else)."""
    job = get_collection("jobs").find_one({"_id": parse_object_id(job_id, "Job")})
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this job")
    return job


def find_application(user_id: ObjectId, job_id: ObjectId) -> Optional[dict]:
    return get_collection("applications").find_one({"user_id": user_id, "job_id": job_id})


def create_job_application(user: dict, job: dict, fields: dict) -> dict:
    """
    Insert an application for `job` by `user` and fan out notifications.

    Args:
        fields: resume_link, cover_letter, skills, experience, education,
                expected_salary, availability, notice_period

    Raises:
        ConflictError (409) when the user already applied
    """
    if find_application(user["_id"], job["_id"]):
        raise ConflictError("You have already applied to this job", error_type="already_applied")

    now = utcnow()
    application = {
        "user_id": user["_id"],
        "job_id": job["_id"],
        "employer_id": job.get("employer_id"),
        "applicant_name": user.get("name"),
        "applicant_email": user.get("email"),
        "applicant_phone": user.get("phone"),
        "job_title": job.get("title"),
        "company_name": job.get("company"),
        **fields,
        "status": "applied",
        "interview_ids": [],
        "messages": [],
        "employer_notes": None,
        "applied_at": now,
        "last_status_update": now,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = get_collection("applications").insert_one(application)
    except DuplicateKeyError:
        raise ConflictError("You have already applied to this job", error_type="already_applied")
    application["_id"] = result.inserted_id

    if job.get("employer_id"):
        get_collection("employers").update_one(
            {"_id": job["employer_id"]}, {"$inc": {"total_applications_received": 1}}
        )
        notify_employer(
            job["employer_id"], "application", "New application received",
            f"{user.get('name', 'A candidate')} applied for {job.get('title')}",
            data={"job_id": str(job["_id"]), "application_id": str(result.inserted_id)},
        )
    notify_user(
        user["_id"], "application_status", "Application submitted",
        f"Your application for {job.get('title')} at {job.get('company')} was submitted",
        data={"job_id": str(job["_id"]), "application_id": str(result.inserted_id)},
        priority="low",
    )
    logger.info(f"User {user['_id']} applied to job {job['_id']}")
    return application
