"""
Prediction Routes

POST /predictions/salary/for-job - Recommended salary for a job being drafted (employer)
GET /predictions/salary/job/{job_id} - Prediction for a posted job vs its salary (employer)
GET /predictions/salary/my-profile - Market value of the job seeker's profile
POST /predictions/job-success - Hiring likelihood for a job (job seeker)
POST /predictions/internship-success - Hiring likelihood for an internship (job seeker)
GET /predictions/job-success/{job_id} - Same, with the id in the path
GET /predictions/internship-success/{internship_id} - Same, with the id in the path
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import InternshipSuccessRequest, JobSuccessRequest, SalaryForJobRequest
from jobzee.services.job_service import get_owned_job
from jobzee.services.mongo_service import find_or_404
from jobzee.services.salary_service import SalaryService, compare_posted_salary, get_salary_service
from jobzee.services.success_prediction import predict_success, profile_from_user

router = APIRouter(prefix="/predictions", tags=["Predictions"])


def _job_features(job: dict, employer: dict) -> dict:
    return {
        "title": job.get("title"),
        "skills": job.get("skills") or [],
        "location": job.get("location"),
        "experience": job.get("experience_level"),
        "education": job.get("education"),
        "category": job.get("category"),
        "industry": employer.get("industry"),
        "job_type": job.get("job_type"),
        "company_size": employer.get("company_size"),
    }


@router.post("/salary/for-job")
async def salary_for_job(
    data: SalaryForJobRequest,
    employer: dict = Depends(get_current_employer),
    salaries: SalaryService = Depends(get_salary_service),
):
    if not data.title or not data.title.strip() or not data.skills:
        raise HTTPException(status_code=400, detail="Job title and at least one skill are required")

    features = {
        "title": data.title.strip(),
        "skills": data.skills,
        "location": data.location or (employer.get("headquarters") or {}).get("city"),
        "experience": data.experience_required,
        "education": data.education,
        "category": data.category,
        "industry": employer.get("industry"),
        "job_type": data.job_type,
        "company_size": employer.get("company_size"),
    }
    return {"prediction": await salaries.predict(features), "input": features}


@router.get("/salary/job/{job_id}")
async def salary_for_posted_job(
    job_id: str,
    employer: dict = Depends(get_current_employer),
    salaries: SalaryService = Depends(get_salary_service),
):
    job = get_owned_job(job_id, employer)
    prediction = await salaries.predict(_job_features(job, employer))
    return {
        "job": {"id": job_id, "title": job.get("title"), "salary": job.get("salary")},
        "prediction": prediction,
        "comparison": compare_posted_salary(job.get("salary"), prediction["predicted"]["average"]),
    }


@router.get("/salary/my-profile")
async def salary_for_profile(
    user: dict = Depends(get_current_user),
    salaries: SalaryService = Depends(get_salary_service),
):
    """Estimate from the stored profile; works with partial profiles at lower confidence."""
    features = {
        "title": user.get("current_role") or user.get("title"),
        "skills": user.get("skills") or [],
        "location": user.get("location"),
        "experience": user.get("experience_level"),
        "years_of_experience": user.get("years_of_experience"),
        "education": user.get("education"),
        "category": (user.get("preferred_fields") or [None])[0],
        "job_type": (user.get("preferred_job_types") or [None])[0],
    }
    return {"prediction": await salaries.predict(features), "expected_salary": user.get("expected_salary")}


def _success(user: dict, collection: str, posting_id: Optional[str], kind: str) -> dict:
    entity = "Job" if kind == "job" else "Internship"
    if not posting_id:
        raise HTTPException(status_code=400, detail=f"{entity} ID is required")
    posting = find_or_404(get_collection(collection), posting_id, entity)
    return {
        "prediction": predict_success(profile_from_user(user), posting, kind),
        kind: {"id": posting_id, "title": posting.get("title")},
    }


@router.post("/job-success")
async def job_success(data: JobSuccessRequest, user: dict = Depends(get_current_user)):
    return _success(user, "jobs", data.job_id, "job")


@router.post("/internship-success")
async def internship_success(data: InternshipSuccessRequest, user: dict = Depends(get_current_user)):
    return _success(user, "internships", data.internship_id, "internship")


@router.get("/job-success/{job_id}")
async def job_success_by_id(job_id: str, user: dict = Depends(get_current_user)):
    return _success(user, "jobs", job_id, "job")


@router.get("/internship-success/{internship_id}")
async def internship_success_by_id(internship_id: str, user: dict = Depends(get_current_user)):
    return _success(user, "internships", internship_id, "internship")
