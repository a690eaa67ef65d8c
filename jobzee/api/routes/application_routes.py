"""
Application Routes

POST /applications/apply - Apply to a job with the full form
GET /applications/my-applications - Job seeker's applications
GET /applications/job/{job_id} - Applications for an own job (employer)
GET /applications/job/{job_id}/stats - Per-status counts for an own job (employer)
GET /applications/{application_id} - Application details (applicant, owner or admin)
PUT /applications/{application_id}/withdraw - Withdraw (applicant)
PUT /applications/{application_id}/status - Change status (owning employer)
POST /applications/{application_id}/message - Add a message (applicant or owning employer)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobzee.core.auth import get_current_account, get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import (
    ApplicationCreate, ApplicationMessage, ApplicationStatus, ApplicationStatusUpdate
)
from jobzee.services.job_service import (
    FINAL_APPLICATION_STATUSES, create_job_application, get_owned_job, get_visible_job
)
from jobzee.services.mongo_service import find_or_404, serialize_doc, serialize_docs, utcnow
from jobzee.services.notification_service import notify_employer, notify_user

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/apply", status_code=201)
async def apply(data: ApplicationCreate, user: dict = Depends(get_current_user)):
    """Apply to a visible job. One application per job."""
    job = get_visible_job(data.job_id)
    fields = data.model_dump(exclude={"job_id"})
    application = create_job_application(user, job, fields)
    return {"message": "Application submitted successfully", "application": serialize_doc(application)}


@router.get("/my-applications")
async def my_applications(
    status: Optional[str] = Query(None),
    user: dict = Depends(get_current_user),
):
    query = {"user_id": user["_id"]}
    if status:
        query["status"] = status
    docs = list(get_collection("applications").find(query).sort("applied_at", -1))
    return {"applications": serialize_docs(docs), "count": len(docs)}


@router.get("/job/{job_id}")
async def job_applications(
    job_id: str,
    status: Optional[str] = Query(None),
    employer: dict = Depends(get_current_employer),
):
    """All applications for an own job, newest first."""
    job = get_owned_job(job_id, employer)
    query = {"job_id": job["_id"]}
    if status:
        query["status"] = status
    docs = list(get_collection("applications").find(query).sort("applied_at", -1))
    return {"job": {"id": str(job["_id"]), "title": job.get("title")},
            "applications": serialize_docs(docs), "count": len(docs)}


@router.get("/job/{job_id}/stats")
async def job_application_stats(job_id: str, employer: dict = Depends(get_current_employer)):
    job = get_owned_job(job_id, employer)
    rows = get_collection("applications").aggregate([
        {"$match": {"job_id": job["_id"]}},
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
    ])
    counts = {s.value: 0 for s in ApplicationStatus}
    for row in rows:
        counts[row["_id"]] = row["count"]
    return {"stats": counts, "total": sum(counts.values())}


@router.get("/{application_id}")
async def get_application(application_id: str, actor: dict = Depends(get_current_account)):
    """Visible to the applicant, the employer who owns the job, or an admin."""
    application = find_or_404(get_collection("applications"), application_id, "Application")

    allowed = (
        (actor["role"] == "user" and application["user_id"] == actor["_id"])
        or (actor["role"] == "employer" and application.get("employer_id") == actor["_id"])
        or actor["role"] == "admin"
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Not authorized to view this application")
    return {"application": serialize_doc(application)}


@router.put("/{application_id}/withdraw")
async def withdraw(application_id: str, user: dict = Depends(get_current_user)):
    applications = get_collection("applications")
    application = find_or_404(applications, application_id, "Application")
    if application["user_id"] != user["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to withdraw this application")
    if application.get("status") in FINAL_APPLICATION_STATUSES:
        raise HTTPException(status_code=400, detail=f"Cannot withdraw an application that is {application['status']}")

    now = utcnow()
    applications.update_one(
        {"_id": application["_id"]},
        {"$set": {"status": "withdrawn", "last_status_update": now, "updated_at": now}},
    )
    if application.get("employer_id"):
        notify_employer(
            application["employer_id"], "application", "Application withdrawn",
            f"{application.get('applicant_name')} withdrew from {application.get('job_title')}",
            data={"application_id": application_id},
            priority="low",
        )
    return {"message": "Application withdrawn"}


@router.put("/{application_id}/status")
async def update_status(application_id: str, data: ApplicationStatusUpdate,
                        employer: dict = Depends(get_current_employer)):
    """Owning employer moves an application through the pipeline; the applicant is notified."""
    applications = get_collection("applications")
    application = find_or_404(applications, application_id, "Application")
    if application.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this application")

    now = utcnow()
    updates = {"status": data.status.value, "last_status_update": now, "updated_at": now}
    if data.notes is not None:
        updates["employer_notes"] = data.notes
    applications.update_one({"_id": application["_id"]}, {"$set": updates})

    notify_user(
        application["user_id"], "application_status", "Application status updated",
        f"Your application for {application.get('job_title')} is now {data.status.value.replace('-', ' ')}",
        data={"application_id": application_id, "status": data.status.value},
        priority="high" if data.status.value in ("hired", "interview-scheduled") else "medium",
    )
    return {"message": "Application status updated",
            "application": serialize_doc(applications.find_one({"_id": application["_id"]}))}


@router.post("/{application_id}/message", status_code=201)
async def add_message(application_id: str, data: ApplicationMessage, actor: dict = Depends(get_current_account)):
    applications = get_collection("applications")
    application = find_or_404(applications, application_id, "Application")

    if actor["role"] == "user" and application["user_id"] == actor["_id"]:
        sender = "applicant"
    elif actor["role"] == "employer" and application.get("employer_id") == actor["_id"]:
        sender = "employer"
    else:
        raise HTTPException(status_code=403, detail="Not authorized to message on this application")

    message = {"sender": sender, "message": data.message, "timestamp": utcnow()}
    applications.update_one({"_id": application["_id"]}, {"$push": {"messages": message}})

    if sender == "applicant" and application.get("employer_id"):
        notify_employer(application["employer_id"], "application", "New message from applicant",
                        data.message[:120], data={"application_id": application_id})
    elif sender == "employer":
        notify_user(application["user_id"], "application_status", "New message from employer",
                    data.message[:120], data={"application_id": application_id})
    return {"message": "Message added", "entry": message}
