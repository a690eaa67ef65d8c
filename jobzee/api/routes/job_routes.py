"""
Job Routes

GET /jobs - List visible jobs with filters and pagination
GET /jobs/stats/overview - Platform job statistics
GET /jobs/saved/my-jobs - Job seeker's saved jobs
GET /jobs/{job_id} - Get job details (counts a view)
POST /jobs/{job_id}/quick-apply - Apply with the stored profile and resume
GET /jobs/{job_id}/application-status - Has the job seeker applied?
POST /jobs/{job_id}/save - Save a job
DELETE /jobs/{job_id}/save - Remove a saved job
GET /jobs/{job_id}/saved-status - Is the job saved?
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobzee.core.auth import get_current_user
from jobzee.core.errors import AppError, ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.services.job_service import (
    JOB_PRIVATE_FIELDS, create_job_application, find_application, get_visible_job, visible_jobs_filter
)
from jobzee.services.mongo_service import paginate, parse_object_id, serialize_doc, serialize_docs, utcnow

router = APIRouter(prefix="/jobs", tags=["Jobs"])

SORT_OPTIONS = {
    "-created_at": [("created_at", -1)],
    "created_at": [("created_at", 1)],
    "-views": [("views", -1)],
    "salary": [("salary.max", -1)],
}

EMPLOYER_SUMMARY_FIELDS = {
    "company_name": 1, "company_logo": 1, "industry": 1, "company_size": 1, "website": 1,
    "headquarters": 1, "is_verified": 1, "company_description": 1,
}


def _ci(text: str) -> dict:
    return {"$regex": re.escape(text.strip()), "$options": "i"}


@router.get("")
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search title, description, company and skills"),
    location: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    category: Optional[str] = Query(None, description="Alias for job_type"),
    experience_level: Optional[str] = Query(None),
    remote: Optional[str] = Query(None),
    skills: Optional[str] = Query(None, description="Comma-separated; all must match"),
    sort: str = Query("-created_at"),
):
    """List visible jobs with filters and pagination."""
    query = visible_jobs_filter()

    if search and search.strip():
        pattern = _ci(search)
        query["$or"] = [{"title": pattern}, {"description": pattern}, {"company": pattern}, {"skills": pattern}]
    if location and location.strip():
        query["location"] = _ci(location)
    if job_type or category:
        query["job_type"] = job_type or category
    if experience_level:
        query["experience_level"] = experience_level
    if remote:
        query["remote"] = remote
    if skills:
        wanted = [s.strip() for s in skills.split(",") if s.strip()]
        if wanted:
            query["$and"] = [
                {"skills": {"$regex": f"^{re.escape(s)}$", "$options": "i"}} for s in wanted
            ]

    docs, pagination = paginate(
        get_collection("jobs"), query, page, limit, sort=SORT_OPTIONS.get(sort, SORT_OPTIONS["-created_at"])
    )
    return {"jobs": serialize_docs(docs, exclude=JOB_PRIVATE_FIELDS), "pagination": pagination}


@router.get("/stats/overview")
async def job_stats():
    """Totals, breakdown by job type, top locations and latest postings."""
    jobs = get_collection("jobs")
    visible = visible_jobs_filter()

    by_type = list(jobs.aggregate([
        {"$match": visible},
        {"$group": {"_id": "$job_type", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
    ]))
    top_locations = list(jobs.aggregate([
        {"$match": visible},
        {"$group": {"_id": "$location", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": 10},
    ]))
    recent = jobs.find(visible, {"title": 1, "company": 1, "location": 1, "job_type": 1, "created_at": 1}) \
        .sort("created_at", -1).limit(5)

    return {
        "total_jobs": jobs.count_documents({}),
        "active_jobs": jobs.count_documents(visible),
        "jobs_by_type": [{"job_type": row["_id"], "count": row["count"]} for row in by_type],
        "top_locations": [{"location": row["_id"], "count": row["count"]} for row in top_locations],
        "recent_jobs": serialize_docs(recent),
    }


@router.get("/saved/my-jobs")
async def my_saved_jobs(user: dict = Depends(get_current_user)):
    """Saved jobs, most recently saved first. Deleted jobs are skipped."""
    saved = sorted(user.get("saved_jobs", []), key=lambda s: s.get("saved_at") or utcnow(), reverse=True)
    ids = [s["job_id"] for s in saved]
    jobs = {j["_id"]: j for j in get_collection("jobs").find({"_id": {"$in": ids}})}

    result = []
    for entry in saved:
        job = jobs.get(entry["job_id"])
        if job is None:
            continue
        item = serialize_doc(job, exclude=JOB_PRIVATE_FIELDS)
        item["saved_at"] = entry.get("saved_at")
        result.append(item)
    return {"jobs": result, "count": len(result)}


@router.get("/{job_id}")
async def get_job(job_id: str):
    """Job details with an employer summary. Each call counts a view."""
    job = get_visible_job(job_id)
    jobs = get_collection("jobs")
    jobs.update_one({"_id": job["_id"]}, {"$inc": {"views": 1}})
    job["views"] = job.get("views", 0) + 1

    data = serialize_doc(job, exclude=JOB_PRIVATE_FIELDS)
    employer = None
    if job.get("employer_id"):
        employer = get_collection("employers").find_one({"_id": job["employer_id"]}, EMPLOYER_SUMMARY_FIELDS)
    data["employer"] = serialize_doc(employer)
    return {"job": data}


@router.post("/{job_id}/quick-apply", status_code=201)
async def quick_apply(job_id: str, user: dict = Depends(get_current_user)):
    """
    One-click application using the job seeker's stored profile.

    Requires a resume on the profile.
    """
    job = get_visible_job(job_id)
    if find_application(user["_id"], job["_id"]):
        raise ConflictError("You have already applied to this job", error_type="already_applied")

    if not user.get("resume"):
        raise AppError(
            "Upload a resume to your profile before using Quick Apply",
            error_type="requires_resume",
            status_code=400,
        )

    application = create_job_application(user, job, {
        "resume_link": user["resume"],
        "cover_letter": None,
        "skills": user.get("skills", []),
        "experience": user.get("experience_level"),
        "years_of_experience": user.get("years_of_experience"),
        "education": user.get("education"),
        "expected_salary": (user.get("expected_salary") or {}).get("max"),
        "notice_period": user.get("notice_period"),
        "quick_apply": True,
    })
    return {"message": "Application submitted", "application": serialize_doc(application)}


@router.get("/{job_id}/application-status")
async def application_status(job_id: str, user: dict = Depends(get_current_user)):
    application = find_application(user["_id"], parse_object_id(job_id, "Job"))
    if not application:
        return {"has_applied": False, "status": None, "applied_at": None}
    return {
        "has_applied": True,
        "status": application.get("status"),
        "applied_at": application.get("applied_at"),
        "application_id": str(application["_id"]),
    }


@router.post("/{job_id}/save", status_code=201)
async def save_job(job_id: str, user: dict = Depends(get_current_user)):
    oid = parse_object_id(job_id, "Job")
    if not get_collection("jobs").find_one({"_id": oid}, {"_id": 1}):
        raise HTTPException(status_code=404, detail="Job not found")
    if any(s.get("job_id") == oid for s in user.get("saved_jobs", [])):
        raise ConflictError("Job already saved", error_type="already_saved")

    get_collection("users").update_one(
        {"_id": user["_id"]}, {"$push": {"saved_jobs": {"job_id": oid, "saved_at": utcnow()}}}
    )
    return {"message": "Job saved", "is_saved": True}


@router.delete("/{job_id}/save")
async def unsave_job(job_id: str, user: dict = Depends(get_current_user)):
    oid = parse_object_id(job_id, "Job")
    if not any(s.get("job_id") == oid for s in user.get("saved_jobs", [])):
        raise HTTPException(status_code=404, detail="Job is not in your saved list")
    get_collection("users").update_one({"_id": user["_id"]}, {"$pull": {"saved_jobs": {"job_id": oid}}})
    return {"message": "Job removed from saved list", "is_saved": False}


@router.get("/{job_id}/saved-status")
async def saved_status(job_id: str, user: dict = Depends(get_current_user)):
    oid = parse_object_id(job_id, "Job")
    return {"is_saved": any(s.get("job_id") == oid for s in user.get("saved_jobs", []))}
