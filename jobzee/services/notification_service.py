"""
Notification Service

Writes in-app notifications for job seekers (`user_notifications`) and
employers (`employer_notifications`). Callers never wait on or fail
because of a notification: errors are logged and swallowed here.
"""

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from loguru import logger
from pymongo.errors import PyMongoError

from jobzee.db.mongodb import get_collection
from jobzee.services.mongo_service import utcnow

USER_TYPES = {"job_match", "application_status", "interview_reminder", "job_alert", "profile_view", "system"}
EMPLOYER_TYPES = {"application", "job_status", "payment_received", "verification", "system_announcement"}


def _as_object_id(value) -> ObjectId:
    return value if isinstance(value, ObjectId) else ObjectId(str(value))


def notify_user(user_id, type: str, title: str, message: str,
                data: Optional[dict] = None, priority: str = "medium") -> Optional[str]:
    """Create a job-seeker notification. Returns the new id, or None on failure."""
    if type not in USER_TYPES:
        type = "system"
    try:
        result = get_collection("user_notifications").insert_one({
            "user_id": _as_object_id(user_id),
            "type": type,
            "title": title,
            "message": message,
            "data": data or {},
            "read": False,
            "read_at": None,
            "priority": priority,
            "created_at": utcnow(),
        })
        return str(result.inserted_id)
    except (PyMongoError, InvalidId, TypeError) as e:
        logger.warning(f"Failed to notify user {user_id}: {e}")
        return None


def notify_employer(employer_id, type: str, title: str, message: str,
                    data: Optional[dict] = None, priority: str = "medium") -> Optional[str]:
    """Create an employer notification. Returns the new id, or None on failure."""
    if type not in EMPLOYER_TYPES:
        type = "system_announcement"
    try:
        result = get_collection("employer_notifications").insert_one({
            "employer_id": _as_object_id(employer_id),
            "type": type,
            "title": title,
            "message": message,
            "data": data or {},
            "is_read": False,
            "read_at": None,
            "priority": priority,
            "created_at": utcnow(),
        })
        return str(result.inserted_id)
    except (PyMongoError, InvalidId, TypeError) as e:
        logger.warning(f"Failed to notify employer {employer_id}: {e}")
        return None
