"""
Internship Routes

GET /internships - List open internships (public)
GET /internships/categories - Popular skills with counts (public)
GET /internships/employer - Own internships (employer)
GET /internships/applications/my - Job seeker's internship applications
PUT /internships/applications/{application_id}/status - Update an application (owning employer)
POST /internships - Create internship (employer)
GET /internships/{internship_id} - Internship details (counts a view)
PUT /internships/{internship_id} - Update own internship
PATCH /internships/{internship_id}/status - Open/close own internship
DELETE /internships/{internship_id} - Delete own internship and its applications
POST /internships/{internship_id}/apply - Apply (job seeker)
GET /internships/{internship_id}/application-status - Has the job seeker applied?
GET /internships/{internship_id}/applications - Applications for own internship
"""

import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pymongo.errors import DuplicateKeyError

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.core.errors import ConflictError
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import (
    ApplicationStatusUpdate, InternshipApplicationCreate, InternshipCreate, InternshipStatusUpdate,
    InternshipUpdate
)
from jobzee.services.mongo_service import (
    drop_none, find_or_404, naive_utc, paginate, parse_object_id, serialize_doc, serialize_docs, utcnow
)
from jobzee.services.notification_service import notify_employer, notify_user

router = APIRouter(prefix="/internships", tags=["Internships"])


def _open_filter() -> dict:
    return {"status": "active", "application_deadline": {"$gte": utcnow()}}


def _owned(internship_id: str, employer: dict) -> dict:
    internship = find_or_404(get_collection("internships"), internship_id, "Internship")
    if internship.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to manage this internship")
    return internship


@router.get("")
async def list_internships(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    location_type: Optional[str] = Query(None),
    skills: Optional[str] = Query(None, description="Comma-separated; any may match"),
    min_stipend: Optional[float] = Query(None, ge=0),
    duration: Optional[int] = Query(None, ge=1, le=12),
):
    query = _open_filter()
    if search and search.strip():
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}, {"company": pattern}, {"skills": pattern}]
    if location and location.strip():
        query["location"] = {"$regex": re.escape(location.strip()), "$options": "i"}
    if location_type:
        query["location_type"] = location_type
    if skills:
        wanted = [s.strip() for s in skills.split(",") if s.strip()]
        if wanted:
            query["skills"] = {"$in": wanted}
    if min_stipend is not None:
        query["stipend.amount"] = {"$gte": min_stipend}
    if duration:
        query["duration"] = duration

    docs, pagination = paginate(get_collection("internships"), query, page, limit, sort=[("created_at", -1)])
    return {"internships": serialize_docs(docs), "pagination": pagination}


@router.get("/categories")
async def categories():
    """Top 20 skills across open internships."""
    rows = get_collection("internships").aggregate([
        {"$match": _open_filter()},
        {"$unwind": "$skills"},
        {"$group": {"_id": "$skills", "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": 20},
    ])
    return {"categories": [{"name": r["_id"], "count": r["count"]} for r in rows]}


@router.get("/employer")
async def my_internships(employer: dict = Depends(get_current_employer)):
    docs = list(get_collection("internships").find({"employer_id": employer["_id"]}).sort("created_at", -1))
    return {"internships": serialize_docs(docs), "count": len(docs)}


@router.get("/applications/my")
async def my_internship_applications(user: dict = Depends(get_current_user)):
    docs = list(get_collection("internship_applications").find({"user_id": user["_id"]}).sort("applied_at", -1))
    return {"applications": serialize_docs(docs), "count": len(docs)}


@router.put("/applications/{application_id}/status")
async def update_application_status(application_id: str, data: ApplicationStatusUpdate,
                                    employer: dict = Depends(get_current_employer)):
    applications = get_collection("internship_applications")
    application = find_or_404(applications, application_id, "Application")
    if application.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this application")

    now = utcnow()
    updates = {"status": data.status.value, "last_status_update": now, "updated_at": now}
    if data.notes is not None:
        updates["employer_notes"] = data.notes
    applications.update_one({"_id": application["_id"]}, {"$set": updates})

    notify_user(
        application["user_id"], "application_status", "Internship application updated",
        f"Your application for {application.get('internship_title')} is now {data.status.value.replace('-', ' ')}",
        data={"internship_application_id": application_id, "status": data.status.value},
    )
    return {"message": "Application status updated",
            "application": serialize_doc(applications.find_one({"_id": application["_id"]}))}


@router.post("", status_code=201)
async def create_internship(data: InternshipCreate, employer: dict = Depends(get_current_employer)):
    """Verified employers publish immediately; others wait for admin review."""
    now = utcnow()
    doc = data.model_dump(mode="json")
    doc.update({
        "start_date": naive_utc(data.start_date),
        "application_deadline": naive_utc(data.application_deadline),
        "employer_id": employer["_id"],
        "company": employer.get("company_name"),
        "status": "active" if employer.get("is_verified") else "pending",
        "views": 0,
        "applications_count": 0,
        "created_at": now,
        "updated_at": now,
    })
    result = get_collection("internships").insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info(f"Employer {employer['_id']} created internship {result.inserted_id}")
    return {"message": "Internship created", "internship": serialize_doc(doc)}


@router.get("/{internship_id}")
async def get_internship(internship_id: str):
    internships = get_collection("internships")
    internship = find_or_404(internships, internship_id, "Internship")
    internships.update_one({"_id": internship["_id"]}, {"$inc": {"views": 1}})
    internship["views"] = internship.get("views", 0) + 1
    return {"internship": serialize_doc(internship)}


@router.put("/{internship_id}")
async def update_internship(internship_id: str, data: InternshipUpdate,
                            employer: dict = Depends(get_current_employer)):
    internship = _owned(internship_id, employer)
    updates = drop_none(data.model_dump(mode="json"))
    for key in ("start_date", "application_deadline"):
        if getattr(data, key) is not None:
            updates[key] = naive_utc(getattr(data, key))
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    start = updates.get("start_date", internship.get("start_date"))
    deadline = updates.get("application_deadline", internship.get("application_deadline"))
    if start and deadline and deadline > start:
        raise HTTPException(status_code=422, detail="Application deadline must be on or before the start date")
    if updates.get("is_unpaid"):
        updates["stipend"] = None

    updates["updated_at"] = utcnow()
    internships = get_collection("internships")
    internships.update_one({"_id": internship["_id"]}, {"$set": updates})
    return {"message": "Internship updated", "internship": serialize_doc(internships.find_one({"_id": internship["_id"]}))}


@router.patch("/{internship_id}/status")
async def set_internship_status(internship_id: str, data: InternshipStatusUpdate,
                                employer: dict = Depends(get_current_employer)):
    internship = _owned(internship_id, employer)
    if internship.get("status") in ("pending", "rejected") and data.status == "active":
        raise HTTPException(status_code=403, detail="Internship is awaiting admin approval")
    get_collection("internships").update_one(
        {"_id": internship["_id"]}, {"$set": {"status": data.status, "updated_at": utcnow()}}
    )
    return {"message": f"Internship {data.status}", "status": data.status}


@router.delete("/{internship_id}")
async def delete_internship(internship_id: str, employer: dict = Depends(get_current_employer)):
    internship = _owned(internship_id, employer)
    get_collection("internships").delete_one({"_id": internship["_id"]})
    removed = get_collection("internship_applications").delete_many({"internship_id": internship["_id"]}).deleted_count
    return {"message": "Internship deleted", "applications_removed": removed}


@router.post("/{internship_id}/apply", status_code=201)
async def apply(internship_id: str, data: InternshipApplicationCreate, user: dict = Depends(get_current_user)):
    internship = find_or_404(get_collection("internships"), internship_id, "Internship")
    if internship.get("status") != "active":
        raise HTTPException(status_code=400, detail="This internship is not accepting applications")
    deadline = internship.get("application_deadline")
    if deadline and deadline < utcnow():
        raise HTTPException(status_code=400, detail="The application deadline has passed")

    applications = get_collection("internship_applications")
    if applications.find_one({"user_id": user["_id"], "internship_id": internship["_id"]}):
        raise ConflictError("You have already applied to this internship", error_type="already_applied")

    now = utcnow()
    application = {
        "user_id": user["_id"],
        "internship_id": internship["_id"],
        "employer_id": internship.get("employer_id"),
        "applicant_name": user.get("name"),
        "applicant_email": user.get("email"),
        "internship_title": internship.get("title"),
        "company_name": internship.get("company"),
        "cover_letter": data.cover_letter,
        "resume_link": data.resume_link or user.get("resume"),
        "skills": data.skills or user.get("skills", []),
        "education": data.education or user.get("education"),
        "availability": data.availability,
        "status": "applied",
        "applied_at": now,
        "last_status_update": now,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = applications.insert_one(application)
    except DuplicateKeyError:
        raise ConflictError("You have already applied to this internship", error_type="already_applied")
    application["_id"] = result.inserted_id

    get_collection("internships").update_one({"_id": internship["_id"]}, {"$inc": {"applications_count": 1}})
    if internship.get("employer_id"):
        notify_employer(
            internship["employer_id"], "application", "New internship application",
            f"{user.get('name', 'A candidate')} applied for {internship.get('title')}",
            data={"internship_id": internship_id, "application_id": str(result.inserted_id)},
        )
    return {"message": "Application submitted", "application": serialize_doc(application)}


@router.get("/{internship_id}/application-status")
async def application_status(internship_id: str, user: dict = Depends(get_current_user)):
    application = get_collection("internship_applications").find_one(
        {"user_id": user["_id"], "internship_id": parse_object_id(internship_id, "Internship")}
    )
    if not application:
        return {"has_applied": False, "status": None, "applied_at": None}
    return {"has_applied": True, "status": application["status"], "applied_at": application.get("applied_at")}


@router.get("/{internship_id}/applications")
async def internship_applications(internship_id: str, employer: dict = Depends(get_current_employer)):
    internship = _owned(internship_id, employer)
    docs = list(get_collection("internship_applications").find({"internship_id": internship["_id"]})
                .sort("applied_at", -1))
    return {"applications": serialize_docs(docs), "count": len(docs)}
