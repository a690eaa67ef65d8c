"""
Recommendation Routes

GET /recommendations/jobs/personalized - Jobs for the job seeker (history or profile based)
GET /recommendations/jobs/{job_id}/similar - Nearest visible jobs
GET /recommendations/internships/personalized - Open internships for the job seeker
GET /recommendations/internships/{internship_id}/similar - Nearest open internships
"""

from fastapi import APIRouter, Depends, Query

from jobzee.core.auth import get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.services.job_service import JOB_PRIVATE_FIELDS, visible_jobs_filter
from jobzee.services.mongo_service import find_or_404, serialize_docs, utcnow
from jobzee.services.recommendation_service import (
    DEFAULT_K, build_user_profile, personalized, profile_from_user, similar_items
)

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


def _open_internships() -> list:
    return list(get_collection("internships").find({"status": "active", "application_deadline": {"$gte": utcnow()}}))


@router.get("/jobs/personalized")
async def personalized_jobs(
    k: int = Query(DEFAULT_K, ge=1, le=20),
    user: dict = Depends(get_current_user),
):
    """
    Build a profile from the jobs the user applied to (or from the user's own
    profile when there are none) and rank visible jobs against it.
    Jobs already applied to are never recommended.
    """
    applied_ids = {a["job_id"] for a in get_collection("applications").find({"user_id": user["_id"]}, {"job_id": 1})}
    jobs = list(get_collection("jobs").find(visible_jobs_filter()))

    applied_jobs = list(get_collection("jobs").find({"_id": {"$in": list(applied_ids)}})) if applied_ids else []
    if applied_jobs:
        profile, source = build_user_profile(applied_jobs), "applications"
    else:
        profile, source = profile_from_user(user), "profile"

    recommended = personalized(profile, jobs, applied_ids, k=k)
    return {
        "recommendations": serialize_docs(recommended, exclude=JOB_PRIVATE_FIELDS),
        "count": len(recommended),
        "based_on": source,
        "algorithm": "KNN (weighted distance)",
    }


@router.get("/jobs/{job_id}/similar")
async def similar_jobs(job_id: str, k: int = Query(DEFAULT_K, ge=1, le=20)):
    target = find_or_404(get_collection("jobs"), job_id, "Job")
    candidates = list(get_collection("jobs").find(visible_jobs_filter()))
    similar = similar_items(target, candidates, k=k)
    return {
        "job_id": job_id,
        "similar_jobs": serialize_docs(similar, exclude=JOB_PRIVATE_FIELDS),
        "count": len(similar),
        "algorithm": "KNN (weighted distance)",
    }


@router.get("/internships/{internship_id}/similar")
async def similar_internships(internship_id: str, k: int = Query(DEFAULT_K, ge=1, le=20)):
    target = find_or_404(get_collection("internships"), internship_id, "Internship")
    similar = similar_items(target, _open_internships(), kind="internship", k=k)
    return {
        "internship_id": internship_id,
        "similar_internships": serialize_docs(similar),
        "count": len(similar),
        "algorithm": "KNN (weighted distance)",
    }


@router.get("/internships/personalized")
async def personalized_internships(
    k: int = Query(DEFAULT_K, ge=1, le=20),
    user: dict = Depends(get_current_user),
):
    """Same as personalized jobs, over open internships and internship applications."""
    applied_ids = {
        a["internship_id"]
        for a in get_collection("internship_applications").find({"user_id": user["_id"]}, {"internship_id": 1})
    }
    applied = list(get_collection("internships").find({"_id": {"$in": list(applied_ids)}})) if applied_ids else []
    if applied:
        profile, source = build_user_profile(applied, kind="internship"), "applications"
    else:
        profile, source = profile_from_user(user, kind="internship"), "profile"

    recommended = personalized(profile, _open_internships(), applied_ids, kind="internship", k=k)
    return {
        "recommendations": serialize_docs(recommended),
        "count": len(recommended),
        "based_on": source,
        "algorithm": "KNN (weighted distance)",
    }
