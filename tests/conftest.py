"""
Shared fixtures.

Settings are read once at import time, so the environment is prepared before
anything from `jobzee` is imported. MongoDB is replaced by mongomock.
"""

import os

os.environ.setdefault("MONGODB_DB", "jobzee_test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("GST_RATE", "18")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import timedelta  # noqa: E402

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from jobzee.core.auth import create_access_token, hash_password  # noqa: E402
from jobzee.db.mongodb import get_mongo_db, set_mongo_client  # noqa: E402
from jobzee.main import app  # noqa: E402
from jobzee.services.employer_service import new_employer_defaults  # noqa: E402
from jobzee.services.mongo_service import utcnow  # noqa: E402

PASSWORD = "secret123"
_PASSWORD_HASH = hash_password(PASSWORD)


def auth_header(doc_id, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(doc_id, role)}"}


@pytest.fixture(autouse=True)
def db():
    set_mongo_client(mongomock.MongoClient())
    yield get_mongo_db()
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        now = utcnow()
        user = {
            "name": f"Seeker {counter['n']}",
            "email": f"seeker{counter['n']}@example.com",
            "password_hash": _PASSWORD_HASH,
            "role": "user",
            "is_active": True,
            "status": "active",
            "skills": [],
            "saved_jobs": [],
            "is_onboarded": False,
            "resume": None,
            "created_at": now,
            "updated_at": now,
        }
        user.update(fields)
        user["_id"] = db.users.insert_one(user).inserted_id
        return user, auth_header(user["_id"], "user")

    return _make


@pytest.fixture
def make_employer(db):
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        now = utcnow()
        employer = {
            "company_name": f"Company {counter['n']}",
            "company_email": f"hr{counter['n']}@company.example.com",
            "password_hash": _PASSWORD_HASH,
            "contact_person_name": "Hiring Manager",
            "industry": "Technology",
            "headquarters": {"city": "Bangalore"},
            **new_employer_defaults(now),
            "created_at": now,
            "updated_at": now,
        }
        employer.update(fields)
        employer["_id"] = db.employers.insert_one(employer).inserted_id
        return employer, auth_header(employer["_id"], "employer")

    return _make


@pytest.fixture
def make_job(db):
    def _make(employer: dict, **fields):
        now = utcnow()
        job = {
            "title": "Backend Developer",
            "description": "Build and run our APIs",
            "company": employer.get("company_name"),
            "employer_id": employer["_id"],
            "location": "Bangalore",
            "job_type": "full-time",
            "experience_level": "mid",
            "salary": {"min": 1000000, "max": 1400000, "currency": "INR"},
            "skills": ["Python", "MongoDB", "FastAPI"],
            "category": "engineering",
            "remote": "onsite",
            "status": "active",
            "expires_at": now + timedelta(days=30),
            "views": 0,
            "reports": [],
            "report_count": 0,
            "is_flagged": False,
            "created_at": now,
            "updated_at": now,
        }
        job.update(fields)
        job["_id"] = db.jobs.insert_one(job).inserted_id
        return job

    return _make


@pytest.fixture
def make_admin(db):
    def _make():
        admin = {"name": "Admin", "email": "admin@example.com", "password_hash": _PASSWORD_HASH, "is_active": True}
        admin["_id"] = db.admins.insert_one(admin).inserted_id
        return admin, auth_header(admin["_id"], "admin")

    return _make
