"""
KNN Recommendation Service

PURPOSE:
Rank jobs/internships by closeness to a target posting ("similar jobs") or
to a job seeker's profile ("personalized").

HOW IT WORKS:
1. Extract comparable features from each posting (salary or stipend,
   skills, location, city tier, category, remote type, experience, job type)
2. Build a per-component mismatch vector in [0, 1] for each candidate
3. distance = mismatch . WEIGHTS ; similarity = 1 / (1 + distance)
4. Sort by distance, keep k

Personalized results keep only similarity >= MIN_SIMILARITY, backfill by
skill overlap, and finally fall back to popular postings.
"""

from collections import Counter
from typing import List, Optional

import numpy as np

from jobzee.services.salary_service import city_tier

MIN_SIMILARITY = 0.35
DEFAULT_K = 5

COMPONENTS = ["salary", "skills", "location", "city_tier", "category", "remote", "experience", "job_type"]
WEIGHTS = np.array([0.15, 0.45, 0.12, 0.06, 0.08, 0.05, 0.07, 0.02])

# internships only: months apart / 12
DURATION_WEIGHT = 0.1


def jaccard(a: List[str], b: List[str]) -> float:
    if not a or not b:
        return 0.0
    s1 = {s.lower() for s in a}
    s2 = {s.lower() for s in b}
    return len(s1 & s2) / len(s1 | s2)


def _experience_bucket(level: str) -> str:
    lvl = (level or "").lower()
    if "entry" in lvl or "fresher" in lvl:
        return "entry"
    for name in ("mid", "senior", "executive"):
        if name in lvl:
            return name
    return lvl


def _remote_kind(value: Optional[str]) -> str:
    return (value or "onsite").lower().replace("-", "")


def extract_features(item: dict, kind: str = "job") -> dict:
    features = {
        "location": item.get("location") or "",
        "category": item.get("category") or "",
        "skills": item.get("skills") or [],
        "remote": _remote_kind(item.get("remote") or item.get("location_type")),
        "experience": _experience_bucket(item.get("experience_level") or "entry"),
        "job_type": (item.get("job_type") or "").lower(),
    }
    features["city_tier"] = city_tier(features["location"])
    if kind == "job":
        salary = item.get("salary") or {}
        features["salary"] = ((salary.get("min") or 0) + (salary.get("max") or 0)) / 2
    else:
        features["salary"] = (item.get("stipend") or {}).get("amount") or 0
        features["duration"] = item.get("duration") or 3
    return features


def mismatch_vector(f1: dict, f2: dict) -> np.ndarray:
    """Per-component disagreement, ordered as COMPONENTS."""
    salary_gap = abs(f1["salary"] - f2["salary"]) / max(f1["salary"], f2["salary"], 1)
    return np.array([
        salary_gap,
        1 - jaccard(f1["skills"], f2["skills"]),
        float(f1["location"].lower() != f2["location"].lower()),
        float(f1["city_tier"] != f2["city_tier"]),
        float(f1["category"].lower() != f2["category"].lower()),
        float(f1["remote"] != f2["remote"]),
        float(f1["experience"] != f2["experience"]),
        float(f1["job_type"] != f2["job_type"]),
    ])


def distance(f1: dict, f2: dict, kind: str = "job") -> float:
    d = float(mismatch_vector(f1, f2) @ WEIGHTS)
    if kind == "internship":
        d += abs(f1.get("duration", 3) - f2.get("duration", 3)) / 12 * DURATION_WEIGHT
    return d


def similar_items(target: dict, items: List[dict], kind: str = "job", k: int = DEFAULT_K) -> List[dict]:
    """k nearest postings to `target` (the target itself excluded)."""
    target_features = extract_features(target, kind)
    scored = []
    for item in items:
        if item["_id"] == target["_id"]:
            continue
        d = distance(target_features, extract_features(item, kind), kind)
        scored.append((d, item))

    scored.sort(key=lambda pair: pair[0])
    return [
        dict(item, similarity_score=round(1 / (1 + d) * 100))
        for d, item in scored[:k]
    ]


def build_user_profile(applied_items: List[dict], kind: str = "job") -> dict:
    """Aggregate the postings a user applied to into one pseudo-posting."""
    skills, locations, categories, remotes = [], Counter(), Counter(), Counter()
    salaries, durations = [], []

    for item in applied_items:
        skills.extend(item.get("skills") or [])
        if item.get("location"):
            locations[item["location"]] += 1
        if item.get("category"):
            categories[item["category"]] += 1
        remotes[_remote_kind(item.get("remote") or item.get("location_type"))] += 1
        if kind == "job":
            salary = item.get("salary") or {}
            avg = ((salary.get("min") or 0) + (salary.get("max") or 0)) / 2
            if avg > 0:
                salaries.append(avg)
        else:
            amount = (item.get("stipend") or {}).get("amount") or 0
            if amount > 0:
                salaries.append(amount)
            if item.get("duration"):
                durations.append(item["duration"])

    location = locations.most_common(1)[0][0] if locations else ""
    profile = {
        "skills": list(dict.fromkeys(skills)),
        "location": location,
        "city_tier": city_tier(location),
        "category": categories.most_common(1)[0][0] if categories else "",
        "remote": remotes.most_common(1)[0][0] if remotes else "onsite",
        "salary": float(np.mean(salaries)) if salaries else 0.0,
        "experience": "entry",
        "job_type": "",
    }
    if kind == "internship":
        profile["duration"] = float(np.mean(durations)) if durations else 3
    return profile


def profile_from_user(user: dict, kind: str = "job") -> dict:
    """Profile built from a job seeker's own fields when there is no history."""
    location = user.get("location") or ""
    expected = user.get("expected_salary") or {}
    salary_values = [v for v in (expected.get("min"), expected.get("max")) if v]
    years = user.get("years_of_experience")
    experience = "entry"
    if user.get("experience_level") == "experienced" and years is not None:
        experience = "entry" if years < 3 else "mid" if years < 6 else "senior" if years < 10 else "executive"
    job_types = user.get("preferred_job_types") or []
    profile = {
        "skills": user.get("skills") or [],
        "location": location,
        "city_tier": city_tier(location),
        "category": (user.get("preferred_fields") or [""])[0],
        "remote": _remote_kind(user.get("remote_preference")),
        "salary": float(np.mean(salary_values)) if salary_values else 0.0,
        "experience": experience,
        "job_type": job_types[0] if job_types and kind == "job" else "",
    }
    if kind == "internship":
        profile["duration"] = 3
    return profile


def personalized(profile: dict, items: List[dict], exclude_ids: set, kind: str = "job",
                 k: int = DEFAULT_K) -> List[dict]:
    candidates = [item for item in items if item["_id"] not in exclude_ids]

    scored = []
    for item in candidates:
        features = extract_features(item, kind)
        d = distance(profile, features, kind)
        scored.append({
            "item": item,
            "similarity": 1 / (1 + d),
            "overlap": jaccard(profile["skills"], features["skills"]),
            "tier": features["city_tier"],
        })

    kept = [s for s in scored if s["similarity"] >= MIN_SIMILARITY]

    if len(kept) < min(3, k):
        backfill = sorted((s for s in scored if s["overlap"] > 0), key=lambda s: -s["overlap"])[:k]
        merged = {id(s["item"]): s for s in kept + backfill}
        kept = list(merged.values())

    if not kept:
        fallback = []
        for s in scored:
            bonus = 0.1 if s["tier"] == profile["city_tier"] else 0.0
            score = s["overlap"] + bonus + (s["item"].get("views") or 0) / 100000
            fallback.append((score, s["item"]))
        fallback.sort(key=lambda pair: -pair[0])
        return [dict(item, recommendation_score=round(min(1.0, score) * 100)) for score, item in fallback[:k]]

    kept.sort(key=lambda s: (-s["similarity"], -s["overlap"]))
    return [dict(s["item"], recommendation_score=round(s["similarity"] * 100)) for s in kept[:k]]
