"""
Pricing plans: lookup and the default catalogue.
"""

from typing import List, Optional

from loguru import logger

from jobzee.db.mongodb import get_collection
from jobzee.services.mongo_service import utcnow

DEFAULT_PLANS: List[dict] = [
    {
        "plan_id": "free",
        "name": "Free",
        "description": "Try the platform with a single job posting",
        "price": {"amount": 0, "currency": "INR", "period": "forever"},
        "job_posting_limit": 1,
        "featured_jobs_limit": 0,
        "features": ["1 job posting", "Basic applicant tracking", "Email support"],
        "is_active": True,
        "sort_order": 1,
    },
    {
        "plan_id": "basic",
        "name": "Basic",
        "description": "For small teams hiring regularly",
        "price": {"amount": 2499, "currency": "INR", "period": "monthly"},
        "job_posting_limit": 5,
        "featured_jobs_limit": 1,
        "features": ["5 job postings", "1 featured job", "Candidate screening", "Email support"],
        "is_active": True,
        "sort_order": 2,
    },
    {
        "plan_id": "premium",
        "name": "Premium",
        "description": "For growing companies",
        "price": {"amount": 4999, "currency": "INR", "period": "monthly"},
        "job_posting_limit": 20,
        "featured_jobs_limit": 5,
        "features": ["20 job postings", "5 featured jobs", "Candidate screening",
                     "Salary insights", "Priority support"],
        "is_active": True,
        "sort_order": 3,
    },
    {
        "plan_id": "enterprise",
        "name": "Enterprise",
        "description": "Unlimited hiring at scale",
        "price": {"amount": 9999, "currency": "INR", "period": "monthly"},
        "job_posting_limit": None,
        "featured_jobs_limit": 20,
        "features": ["Unlimited job postings", "20 featured jobs", "Candidate screening",
                     "Salary insights", "Dedicated account manager"],
        "is_active": True,
        "sort_order": 4,
    },
]


def get_plan(plan_id: str, active_only: bool = True) -> Optional[dict]:
    query = {"plan_id": plan_id}
    if active_only:
        query["is_active"] = True
    return get_collection("pricing_plans").find_one(query)


def seed_default_plans() -> int:
    """Upsert the default catalogue. Returns how many plans were newly inserted."""
    plans = get_collection("pricing_plans")
    inserted = 0
    now = utcnow()
    for plan in DEFAULT_PLANS:
        result = plans.update_one(
            {"plan_id": plan["plan_id"]},
            {"$set": {**plan, "updated_at": now}, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )
        if result.upserted_id is not None:
            inserted += 1
    logger.info(f"Seeded pricing plans ({inserted} new, {len(DEFAULT_PLANS) - inserted} updated)")
    return inserted
