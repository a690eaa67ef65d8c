"""
Notification Routes

Job seeker (/notifications):
GET /notifications - Paginated notifications with unread count
GET /notifications/latest - Five newest plus unread count
PUT /notifications/mark-all-read - Mark everything read
PUT /notifications/{notification_id}/read - Mark one read

Employer (/employer-notifications):
GET /employer-notifications - Paginated notifications with unread count
GET /employer-notifications/unread-count
PUT /employer-notifications/mark-all-read
PUT /employer-notifications/{notification_id}/read
DELETE /employer-notifications/{notification_id}
"""

from fastapi import APIRouter, Depends, Query

from jobzee.core.auth import get_current_employer, get_current_user
from jobzee.db.mongodb import get_collection
from jobzee.schemas.schemas import MessageResponse
from jobzee.services.mongo_service import find_or_404, paginate, serialize_docs, utcnow

router = APIRouter(prefix="/notifications", tags=["Notifications"])
employer_router = APIRouter(prefix="/employer-notifications", tags=["Employer Notifications"])


# ============================================================
# JOB SEEKER
# ============================================================

@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    user: dict = Depends(get_current_user),
):
    notifications = get_collection("user_notifications")
    query = {"user_id": user["_id"]}
    if unread_only:
        query["read"] = False
    docs, pagination = paginate(notifications, query, page, limit, sort=[("created_at", -1)])
    return {
        "notifications": serialize_docs(docs),
        "pagination": pagination,
        "unread_count": notifications.count_documents({"user_id": user["_id"], "read": False}),
    }


@router.get("/latest")
async def latest_notifications(user: dict = Depends(get_current_user)):
    """Five newest notifications for the header dropdown."""
    notifications = get_collection("user_notifications")
    docs = notifications.find({"user_id": user["_id"]}).sort("created_at", -1).limit(5)
    return {
        "notifications": serialize_docs(docs),
        "unread_count": notifications.count_documents({"user_id": user["_id"], "read": False}),
    }


@router.put("/mark-all-read")
async def mark_all_read(user: dict = Depends(get_current_user)):
    result = get_collection("user_notifications").update_many(
        {"user_id": user["_id"], "read": False}, {"$set": {"read": True, "read_at": utcnow()}}
    )
    return {"message": "All notifications marked as read", "updated": result.modified_count}


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(notification_id: str, user: dict = Depends(get_current_user)):
    notifications = get_collection("user_notifications")
    notification = find_or_404(notifications, notification_id, "Notification", {"user_id": user["_id"]})
    if not notification.get("read"):
        notifications.update_one({"_id": notification["_id"]}, {"$set": {"read": True, "read_at": utcnow()}})
    return MessageResponse(message="Notification marked as read")


# ============================================================
# EMPLOYER
# ============================================================

@employer_router.get("")
async def list_employer_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False),
    employer: dict = Depends(get_current_employer),
):
    notifications = get_collection("employer_notifications")
    query = {"employer_id": employer["_id"]}
    if unread_only:
        query["is_read"] = False
    docs, pagination = paginate(notifications, query, page, limit, sort=[("created_at", -1)])
    return {
        "notifications": serialize_docs(docs),
        "pagination": pagination,
        "unread_count": notifications.count_documents({"employer_id": employer["_id"], "is_read": False}),
    }


@employer_router.get("/unread-count")
async def employer_unread_count(employer: dict = Depends(get_current_employer)):
    count = get_collection("employer_notifications").count_documents(
        {"employer_id": employer["_id"], "is_read": False}
    )
    return {"unread_count": count}


@employer_router.put("/mark-all-read")
async def employer_mark_all_read(employer: dict = Depends(get_current_employer)):
    result = get_collection("employer_notifications").update_many(
        {"employer_id": employer["_id"], "is_read": False}, {"$set": {"is_read": True, "read_at": utcnow()}}
    )
    return {"message": "All notifications marked as read", "updated": result.modified_count}


@employer_router.put("/{notification_id}/read", response_model=MessageResponse)
async def employer_mark_read(notification_id: str, employer: dict = Depends(get_current_employer)):
    notifications = get_collection("employer_notifications")
    notification = find_or_404(notifications, notification_id, "Notification", {"employer_id": employer["_id"]})
    notifications.update_one({"_id": notification["_id"]}, {"$set": {"is_read": True, "read_at": utcnow()}})
    return MessageResponse(message="Notification marked as read")


@employer_router.delete("/{notification_id}", response_model=MessageResponse)
async def employer_delete_notification(notification_id: str, employer: dict = Depends(get_current_employer)):
    notifications = get_collection("employer_notifications")
    notification = find_or_404(notifications, notification_id, "Notification", {"employer_id": employer["_id"]})
    notifications.delete_one({"_id": notification["_id"]})
    return MessageResponse(message="Notification deleted")
