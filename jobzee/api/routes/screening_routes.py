"""
Candidate Screening Routes

GET /screening/job/{job_id}/candidates - Rank applicants of an own job
GET /screening/internship/{internship_id}/candidates - Rank applicants of an own internship
POST /screening/single-candidate - Screen the signed-in job seeker against one posting
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import ScreeningPreviewRequest
from jobzee.services.job_service import get_owned_job
from jobzee.services.mongo_service import find_or_404
from jobzee.services.screening_service import classify, screen_candidates

router = APIRouter(prefix="/screening", tags=["Screening"])

PROFILE_FIELDS = {"name": 1, "email": 1, "title": 1, "current_role": 1, "location": 1, "bio": 1, "skills": 1,
                  "education": 1, "experience_level": 1, "years_of_experience": 1}


def _candidates(applications: List[dict]) -> List[dict]:
    """Applicant profile fields overlaid with what was submitted on the application."""
    user_ids = [a["user_id"] for a in applications]
    users = {u["_id"]: u for u in get_collection("users").find({"_id": {"$in": user_ids}}, PROFILE_FIELDS)}

    candidates = []
    for application in applications:
        user = users.get(application["user_id"], {})
        candidates.append({
            "application_id": str(application["_id"]),
            "user_id": str(application["user_id"]),
            "name": application.get("applicant_name") or user.get("name"),
            "email": application.get("applicant_email") or user.get("email"),
            "status": application.get("status"),
            "applied_at": application.get("applied_at"),
            "resume_link": application.get("resume_link"),
            "title": user.get("current_role") or user.get("title"),
            "location": user.get("location"),
            "bio": user.get("bio"),
            "skills": application.get("skills") or user.get("skills") or [],
            "education": application.get("education") or user.get("education"),
            "experience": application.get("experience") or user.get("experience_level"),
            "years_of_experience": application.get("years_of_experience", user.get("years_of_experience")),
        })
    return candidates


def _result(posting: dict, applications: List[dict], kind: str) -> dict:
    screened = screen_candidates(_candidates(applications), posting, kind)
    key = "job" if kind == "job" else "internship"
    screened[key] = {"id": str(posting["_id"]), "title": posting.get("title")}
    return screened


@router.get("/job/{job_id}/candidates")
async def screen_job_candidates(job_id: str, employer: dict = Depends(get_current_employer)):
    job = get_owned_job(job_id, employer)
    applications = list(get_collection("applications").find(
        {"job_id": job["_id"], "status": {"$ne": "withdrawn"}}
    ))
    return _result(job, applications, "job")


@router.get("/internship/{internship_id}/candidates")
async def screen_internship_candidates(internship_id: str, employer: dict = Depends(get_current_employer)):
    internship = find_or_404(get_collection("internships"), internship_id, "Internship")
    if internship.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this internship")
    applications = list(get_collection("internship_applications").find(
        {"internship_id": internship["_id"], "status": {"$ne": "withdrawn"}}
    ))
    return _result(internship, applications, "internship")


@router.post("/single-candidate")
async def screen_single_candidate(data: ScreeningPreviewRequest, user: dict = Depends(get_current_user)):
    """How the job seeker's own profile would score on a posting's screening."""
    if data.type == "job":
        posting_id, collection, entity = data.job_id, "jobs", "Job"
    else:
        posting_id, collection, entity = data.internship_id, "internships", "Internship"
    if not posting_id:
        raise HTTPException(status_code=400, detail=f"{entity} ID is required")
    posting = find_or_404(get_collection(collection), posting_id, entity)

    candidate = {
        "name": user.get("name"),
        "title": user.get("current_role") or user.get("title"),
        "location": user.get("location"),
        "bio": user.get("bio"),
        "skills": user.get("skills") or [],
        "education": user.get("education"),
        "experience": user.get("experience_level"),
        "years_of_experience": user.get("years_of_experience"),
    }
    return {
        "screening": classify(candidate, posting, data.type),
        data.type: {"id": posting_id, "title": posting.get("title")},
    }
