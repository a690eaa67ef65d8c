"""
MongoDB Connection Utility

MongoDB is the only store. Every entity of the job board (users, employers,
jobs, applications, interviews, payments...) is one collection.
"""
from typing import Optional

from loguru import logger
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument, TEXT
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from jobzee.core.config import get_settings

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def set_mongo_client(client: MongoClient) -> None:
    """Swap the process-wide client (used by the CLI and by tests)."""
    global _client, _db
    _client = client
    _db = None


def get_collection(name: str) -> Collection:
    """Get a specific collection by its key in COLLECTIONS."""
    db = get_mongo_db()
    return db[COLLECTIONS.get(name, name)]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "employers": "employers",
    "mentors": "mentors",
    "admins": "admins",
    "jobs": "jobs",
    "internships": "internships",
    "applications": "applications",
    "internship_applications": "internship_applications",
    "interviews": "interviews",
    "user_notifications": "user_notifications",
    "employer_notifications": "employer_notifications",
    "pricing_plans": "pricing_plans",
    "payments": "payments",
    "subscriptions": "subscriptions",
    "invoices": "invoices",
    "counters": "counters",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance and uniqueness.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["mentors"]].create_index("email", unique=True)
    db[COLLECTIONS["admins"]].create_index("email", unique=True)
    _create_employer_indexes(db[COLLECTIONS["employers"]])

    jobs = db[COLLECTIONS["jobs"]]
    jobs.create_index([("title", TEXT), ("description", TEXT), ("company", TEXT), ("skills", TEXT)])
    jobs.create_index([("status", ASCENDING), ("expires_at", ASCENDING)])
    jobs.create_index([("status", ASCENDING), ("is_flagged", ASCENDING), ("report_count", DESCENDING)])
    jobs.create_index("employer_id")

    db[COLLECTIONS["internships"]].create_index([("status", ASCENDING), ("application_deadline", ASCENDING)])
    db[COLLECTIONS["internships"]].create_index("employer_id")

    # One application per (user, posting)
    db[COLLECTIONS["applications"]].create_index([("user_id", ASCENDING), ("job_id", ASCENDING)], unique=True)
    db[COLLECTIONS["applications"]].create_index([("job_id", ASCENDING), ("status", ASCENDING)])
    db[COLLECTIONS["internship_applications"]].create_index(
        [("user_id", ASCENDING), ("internship_id", ASCENDING)], unique=True
    )

    db[COLLECTIONS["interviews"]].create_index([("candidate_id", ASCENDING), ("scheduled_at", DESCENDING)])
    db[COLLECTIONS["interviews"]].create_index([("employer_id", ASCENDING), ("scheduled_at", DESCENDING)])

    db[COLLECTIONS["user_notifications"]].create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    db[COLLECTIONS["user_notifications"]].create_index([("user_id", ASCENDING), ("read", ASCENDING)])
    db[COLLECTIONS["employer_notifications"]].create_index([("employer_id", ASCENDING), ("created_at", DESCENDING)])

    db[COLLECTIONS["pricing_plans"]].create_index("plan_id", unique=True)
    db[COLLECTIONS["payments"]].create_index("razorpay_order_id", unique=True)
    db[COLLECTIONS["payments"]].create_index([("employer_id", ASCENDING), ("initiated_at", DESCENDING)])
    db[COLLECTIONS["invoices"]].create_index("invoice_number", unique=True)

    logger.info("MongoDB indexes created successfully")


def _create_employer_indexes(employers: Collection) -> None:
    employers.create_index("company_email", unique=True)
    employers.create_index([
        ("company_name", TEXT),
        ("industry", TEXT),
        ("headquarters.city", TEXT),
    ])


def fix_employer_indexes(db: Optional[Database] = None) -> dict:
    """
    Repair the employers collection indexes.

    Older deployments indexed `email` uniquely; employer documents carry
    `company_email` instead, so every insert collided on email=null.
    Steps: drop the legacy `email_1` index, delete employer documents without
    a company email, drop every index and recreate the correct ones.

    Returns a report dict for the CLI.
    """
    db = db if db is not None else get_mongo_db()
    employers = db[COLLECTIONS["employers"]]

    before = list(employers.index_information().keys())
    logger.info(f"Current employer indexes: {before}")

    dropped_legacy = False
    if "email_1" in before:
        employers.drop_index("email_1")
        dropped_legacy = True
        logger.info("Removed legacy email_1 index")

    deleted = employers.delete_many({"company_email": None}).deleted_count
    if deleted:
        logger.warning(f"Deleted {deleted} employer documents without a company email")

    employers.drop_indexes()
    _create_employer_indexes(employers)

    after = list(employers.index_information().keys())
    logger.info(f"New employer indexes: {after}")

    return {
        "indexes_before": before,
        "indexes_after": after,
        "dropped_legacy_index": dropped_legacy,
        "deleted_documents": deleted,
    }


def next_sequence(name: str) -> int:
    """Atomically increment and return a named counter."""
    doc = get_collection("counters").find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return doc["seq"]
