"""
Interview Routes

POST /interviews - Schedule an interview for an application (employer)
POST /interviews/applications/{application_id}/schedule - Same, id in the path
GET /interviews/employer - Interviews scheduled by the employer
PATCH /interviews/{interview_id}/status - Update status/result (employer)
GET /interviews/my - Candidate's interviews
PATCH /interviews/{interview_id}/respond - Candidate accepts or declines
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import InterviewCreate, InterviewResponse, InterviewSchedule, InterviewStatusUpdate
from jobzee.services.mongo_service import find_or_404, naive_utc, serialize_doc, serialize_docs, utcnow
from jobzee.services.notification_service import notify_employer, notify_user

router = APIRouter(prefix="/interviews", tags=["Interviews"])

CANDIDATE_RESPONSES = ("accepted", "declined")


def _schedule(application_id: str, data: InterviewSchedule, employer: dict) -> dict:
    applications = get_collection("applications")
    application = find_or_404(applications, application_id, "Application")
    if application.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to schedule interviews for this application")

    now = utcnow()
    interview = data.model_dump(mode="json", exclude={"application_id"})
    interview.update({
        "scheduled_at": naive_utc(data.scheduled_at),
        "job_id": application["job_id"],
        "application_id": application["_id"],
        "employer_id": employer["_id"],
        "candidate_id": application["user_id"],
        "candidate_response": {"status": "pending", "note": None, "responded_at": None},
        "status": "scheduled",
        "result": None,
        "created_at": now,
        "updated_at": now,
    })
    result = get_collection("interviews").insert_one(interview)
    interview["_id"] = result.inserted_id

    applications.update_one(
        {"_id": application["_id"]},
        {
            "$push": {"interview_ids": result.inserted_id},
            "$set": {"status": "interview-scheduled", "last_status_update": now, "updated_at": now},
        },
    )
    notify_user(
        application["user_id"], "interview_reminder", "Interview scheduled",
        f"Round {data.round} for {application.get('job_title')} on "
        f"{interview['scheduled_at']:%d %b %Y %H:%M} ({data.timezone})",
        data={"interview_id": str(result.inserted_id), "application_id": application_id},
        priority="high",
    )
    logger.info(f"Employer {employer['_id']} scheduled interview {result.inserted_id}")
    return interview


@router.post("", status_code=201)
async def create_interview(data: InterviewCreate, employer: dict = Depends(get_current_employer)):
    interview = _schedule(data.application_id, data, employer)
    return {"message": "Interview scheduled", "interview": serialize_doc(interview)}


@router.post("/applications/{application_id}/schedule", status_code=201)
async def schedule_for_application(application_id: str, data: InterviewSchedule,
                                   employer: dict = Depends(get_current_employer)):
    interview = _schedule(application_id, data, employer)
    return {"message": "Interview scheduled", "interview": serialize_doc(interview)}


@router.get("/employer")
async def employer_interviews(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    employer: dict = Depends(get_current_employer),
):
    interviews = get_collection("interviews")
    query = {"employer_id": employer["_id"]}
    docs = list(interviews.find(query).sort("scheduled_at", -1).skip(offset).limit(limit))
    return {"interviews": serialize_docs(docs), "total": interviews.count_documents(query),
            "limit": limit, "offset": offset}


@router.patch("/{interview_id}/status")
async def update_interview_status(interview_id: str, data: InterviewStatusUpdate,
                                  employer: dict = Depends(get_current_employer)):
    interviews = get_collection("interviews")
    interview = find_or_404(interviews, interview_id, "Interview")
    if interview.get("employer_id") != employer["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this interview")

    updates = {"status": data.status.value, "updated_at": utcnow()}
    if data.result is not None:
        updates["result"] = data.result
    interviews.update_one({"_id": interview["_id"]}, {"$set": updates})

    if data.status.value == "completed":
        get_collection("applications").update_one(
            {"_id": interview["application_id"], "status": "interview-scheduled"},
            {"$set": {"status": "interviewed", "last_status_update": utcnow()}},
        )
    return {"message": "Interview updated", "interview": serialize_doc(interviews.find_one({"_id": interview["_id"]}))}


@router.get("/my")
async def my_interviews(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
):
    """Candidate's interviews, newest first, with job title and company."""
    interviews = get_collection("interviews")
    query = {"candidate_id": user["_id"]}
    docs = list(interviews.find(query).sort("scheduled_at", -1).skip(offset).limit(limit))

    job_ids = list({d["job_id"] for d in docs if d.get("job_id")})
    jobs = {j["_id"]: j for j in get_collection("jobs").find({"_id": {"$in": job_ids}}, {"title": 1, "company": 1})}

    result = []
    for doc in docs:
        item = serialize_doc(doc)
        job = jobs.get(doc.get("job_id")) or {}
        item["job_title"] = job.get("title")
        item["company"] = job.get("company")
        result.append(item)
    return {"interviews": result, "total": interviews.count_documents(query), "limit": limit, "offset": offset}


@router.patch("/{interview_id}/respond")
async def respond(interview_id: str, data: InterviewResponse, user: dict = Depends(get_current_user)):
    if data.response not in CANDIDATE_RESPONSES:
        raise HTTPException(status_code=400, detail="Response must be 'accepted' or 'declined'")

    interviews = get_collection("interviews")
    interview = find_or_404(interviews, interview_id, "Interview")
    if interview.get("candidate_id") != user["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to respond to this interview")

    candidate_response = {"status": data.response, "note": data.note, "responded_at": utcnow()}
    interviews.update_one(
        {"_id": interview["_id"]},
        {"$set": {"candidate_response": candidate_response, "updated_at": utcnow()}},
    )
    notify_employer(
        interview["employer_id"], "application", f"Interview {data.response}",
        f"{user.get('name', 'The candidate')} {data.response} the round {interview.get('round', 1)} interview",
        data={"interview_id": interview_id, "response": data.response},
        priority="high" if data.response == "declined" else "medium",
    )
    return {"message": f"Interview {data.response}", "candidate_response": candidate_response}
