"""
Mentor Routes

POST /mentors/register - Register (pending admin approval)
POST /mentors/login - Login once approved
GET /mentors/profile - Own profile
PUT /mentors/profile - Update own profile
GET /mentors/all - All mentors (admin)
PUT /mentors/{mentor_id}/status - Approve/reject (admin)
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pymongo.errors import DuplicateKeyError

from jobzee.core.auth import (
    create_access_token, get_current_admin, get_current_mentor, hash_password, verify_password
)
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import LoginRequest, MentorProfileUpdate, MentorRegisterRequest, MentorStatusUpdate
from jobzee.services.mongo_service import drop_none, find_or_404, serialize_doc, serialize_docs, utcnow

router = APIRouter(prefix="/mentors", tags=["Mentors"])


@router.post("/register", status_code=201)
async def register(request: MentorRegisterRequest):
    mentors = get_collection("mentors")
    email = request.email.lower()
    if mentors.find_one({"email": email}):
        raise HTTPException(status_code=400, detail="Mentor already exists with this email")

    now = utcnow()
    mentor = {
        "name": request.name.strip(),
        "email": email,
        "phone": request.phone,
        "password_hash": hash_password(request.password),
        "photo": request.photo,
        "country": request.country,
        "city": request.city,
        "role": "mentor",
        "status": "pending",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = mentors.insert_one(mentor)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Mentor already exists with this email")

    logger.info(f"Mentor registered: {email} (pending approval)")
    return {
        "message": "Mentor registered successfully. Please wait for admin approval.",
        "mentor_id": str(result.inserted_id),
        "status": "pending",
    }


@router.post("/login")
async def login(request: LoginRequest):
    mentors = get_collection("mentors")
    mentor = mentors.find_one({"email": request.email.lower()})
    if not mentor or not verify_password(request.password, mentor.get("password_hash")):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if mentor.get("status") != "approved":
        raise HTTPException(status_code=403, detail="Your account is not approved yet. Please contact admin.")
    if not mentor.get("is_active", True):
        raise HTTPException(status_code=403, detail="Mentor account deactivated")

    mentors.update_one({"_id": mentor["_id"]}, {"$set": {"last_login_at": utcnow()}})
    return {
        "message": "Login successful",
        "access_token": create_access_token(mentor["_id"], "mentor"),
        "token_type": "bearer",
        "mentor": serialize_doc(mentor),
    }


@router.get("/profile")
async def get_profile(mentor: dict = Depends(get_current_mentor)):
    return {"mentor": serialize_doc(mentor)}


@router.put("/profile")
async def update_profile(data: MentorProfileUpdate, mentor: dict = Depends(get_current_mentor)):
    updates = drop_none(data.model_dump())
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    updates["updated_at"] = utcnow()

    mentors = get_collection("mentors")
    mentors.update_one({"_id": mentor["_id"]}, {"$set": updates})
    return {"message": "Profile updated", "mentor": serialize_doc(mentors.find_one({"_id": mentor["_id"]}))}


# ============================================================
# ADMIN
# ============================================================

@router.get("/all")
async def all_mentors(status: Optional[str] = Query(None), admin: dict = Depends(get_current_admin)):
    query = {"status": status} if status else {}
    docs = list(get_collection("mentors").find(query).sort("created_at", -1))
    return {"mentors": serialize_docs(docs), "count": len(docs)}


@router.put("/{mentor_id}/status")
async def update_mentor_status(mentor_id: str, data: MentorStatusUpdate, admin: dict = Depends(get_current_admin)):
    mentors = get_collection("mentors")
    mentor = find_or_404(mentors, mentor_id, "Mentor")
    mentors.update_one({"_id": mentor["_id"]}, {"$set": {"status": data.status.value, "updated_at": utcnow()}})
    logger.info(f"Admin {admin['_id']} set mentor {mentor_id} to {data.status.value}")
    return {"message": f"Mentor status updated to {data.status.value}",
            "mentor": serialize_doc(mentors.find_one({"_id": mentor["_id"]}))}
