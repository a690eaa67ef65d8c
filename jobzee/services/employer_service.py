"""
Employer plan rules.

job_posting_limit = None means unlimited. Free plans never expire; paid plans
are active until subscription_end.
"""

from datetime import datetime
from typing import Optional

from jobzee.services.mongo_service import utcnow

FREE_PLAN = "free"


def has_active_subscription(employer: dict, now: Optional[datetime] = None) -> bool:
    if employer.get("subscription_plan", FREE_PLAN) == FREE_PLAN:
        return True
    end = employer.get("subscription_end")
    if end is None:
        # paid plan bought with a "forever" period
        return employer.get("subscription_start") is not None
    return end >= (now or utcnow())


def can_post_more_jobs(employer: dict) -> bool:
    limit = employer.get("job_posting_limit", 1)
    if limit is None:
        return True
    return employer.get("job_postings_used", 0) < limit


def remaining_job_posts(employer: dict) -> Optional[int]:
    limit = employer.get("job_posting_limit", 1)
    if limit is None:
        return None
    return max(0, limit - employer.get("job_postings_used", 0))


def company_age(employer: dict, now: Optional[datetime] = None) -> Optional[int]:
    """Years since founding, or None when founded_year is unknown."""
    founded = employer.get("founded_year")
    if not founded:
        return None
    return (now or utcnow()).year - int(founded)


def subscription_end_for(period: str, start: datetime) -> Optional[datetime]:
    """monthly -> +1 month, yearly -> +1 year, forever/one-time -> no end."""
    if period == "monthly":
        month = start.month + 1
        year = start.year + (month - 1) // 12
        month = (month - 1) % 12 + 1
        return _replace_clamped(start, year, month)
    if period == "yearly":
        return _replace_clamped(start, start.year + 1, start.month)
    return None


def _replace_clamped(dt: datetime, year: int, month: int) -> datetime:
    # Jan 31 + 1 month -> last day of February
    day = dt.day
    while day > 28:
        try:
            return dt.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1
    return dt.replace(year=year, month=month, day=day)


def new_employer_defaults(now: datetime) -> dict:
    return {
        "is_verified": False,
        "verification_status": "pending",
        "subscription_plan": FREE_PLAN,
        "subscription_start": now,
        "subscription_end": None,
        "job_posting_limit": 1,
        "job_postings_used": 0,
        "featured_jobs_limit": 0,
        "profile_views": 0,
        "total_job_posts": 0,
        "total_applications_received": 0,
        "is_active": True,
        "last_login_at": None,
    }


def plan_update(plan: dict, now: datetime) -> dict:
    """$set payload applied to an employer after a successful plan purchase."""
    period = (plan.get("price") or {}).get("period", "monthly")
    return {
        "subscription_plan": plan["plan_id"],
        "subscription_start": now,
        "subscription_end": subscription_end_for(period, now),
        "job_posting_limit": plan.get("job_posting_limit"),
        "featured_jobs_limit": plan.get("featured_jobs_limit", 0),
        "updated_at": now,
    }

