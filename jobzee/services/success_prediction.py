"""
Application Success Prediction

Estimates how likely a job seeker is to be hired for a job or internship.

Factor scores (0-100):
    skills, experience, education, location, salary

    probability = round(factors . WEIGHTS)

Categories follow fixed probability cut-offs; anything at or above 40 is
worth applying to.
"""

from typing import List, Optional

import numpy as np

from jobzee.services.screening_service import as_list, education_level, parse_years

FACTORS = ["skills", "experience", "education", "location", "salary"]
WEIGHTS = np.array([0.40, 0.25, 0.15, 0.10, 0.10])

CATEGORIES = [
    (85, "excellent", "high", "Highly recommended - You're an excellent match!"),
    (70, "good", "high", "Good match - Strong chance of success!"),
    (55, "moderate", "medium", "Moderate match - Worth applying!"),
    (40, "low", "medium", "Below average match - Consider improving skills"),
    (0, "poor", "low", "Low match - Focus on better-suited opportunities"),
]


def skills_match(user_skills: List[str], required: List[str]) -> int:
    if not required:
        return 100
    if not user_skills:
        return 0
    have = {s.lower() for s in user_skills}
    matched = [s for s in required if s.lower() in have]
    return round(len(matched) / len(required) * 100)


def experience_match(user_experience, required_experience) -> int:
    if not required_experience:
        return 100
    user_years = parse_years(user_experience) or 0.0
    required_years = parse_years(required_experience) or 0.0
    if user_years >= required_years:
        return 100
    if user_years == 0:
        return 0
    return round(user_years / required_years * 100)


def education_match(user_education, required_education) -> int:
    required = as_list(required_education)
    if not required:
        return 100
    user = as_list(user_education)
    if not user:
        return 50
    user_level = education_level(user)
    required_level = education_level(required)
    if user_level >= required_level:
        return 100
    if user_level == 0:
        return 30
    return round(user_level / required_level * 80)


def location_match(user_location: Optional[str], posting_location: Optional[str], remote_type: Optional[str]) -> int:
    if remote_type in ("remote", "hybrid"):
        return 100
    if not user_location or not posting_location:
        return 50
    user, posting = user_location.lower(), posting_location.lower()
    if user == posting:
        return 100
    if user in posting or posting in user:
        return 90
    return 30


def salary_match(expected: Optional[dict], offered: Optional[dict], kind: str = "job") -> int:
    if not expected or not offered:
        return 100
    user_min = expected.get("min") or 0

    if kind == "internship":
        amount = offered.get("amount") or 0
        if amount >= user_min * 0.8:
            return 100
        if amount >= user_min * 0.6:
            return 70
        return 40

    offered_min = offered.get("min") or 0
    offered_max = offered.get("max") or offered_min
    if offered_max >= user_min:
        return 100
    if offered_min >= user_min * 0.8:
        return 80
    return 50


def profile_from_user(user: dict) -> dict:
    """Prediction inputs from a stored job seeker; years of experience win over the level label."""
    experience = user.get("years_of_experience")
    if experience is None:
        experience = user.get("experience_level")
    return {
        "skills": user.get("skills") or [],
        "experience": experience,
        "education": user.get("education"),
        "location": user.get("location"),
        "expected_salary": user.get("expected_salary"),
    }


def factor_scores(profile: dict, posting: dict, kind: str = "job") -> dict:
    if kind == "job":
        required_exp = posting.get("experience_level")
        required_edu = posting.get("education")
        remote_type = posting.get("remote")
        offered = posting.get("salary")
    else:
        eligibility = posting.get("eligibility") or {}
        required_exp = None
        required_edu = eligibility.get("education")
        remote_type = posting.get("location_type")
        offered = posting.get("stipend")

    return {
        "skills": skills_match(profile.get("skills") or [], posting.get("skills") or []),
        "experience": experience_match(profile.get("experience"), required_exp),
        "education": education_match(profile.get("education"), required_edu),
        "location": location_match(profile.get("location"), posting.get("location"), remote_type),
        "salary": salary_match(profile.get("expected_salary"), offered, kind),
    }


def _feedback(profile: dict, posting: dict, factors: dict) -> List[dict]:
    feedback = []
    if factors["skills"] < 60:
        have = {s.lower() for s in profile.get("skills") or []}
        missing = [s for s in posting.get("skills") or [] if s.lower() not in have]
        feedback.append({"area": "Skills", "status": "needs_improvement",
                         "message": f"Consider learning: {', '.join(missing[:3])}", "score": factors["skills"]})
    elif factors["skills"] >= 80:
        feedback.append({"area": "Skills", "status": "strong",
                         "message": "Your skills are a great match!", "score": factors["skills"]})

    if factors["experience"] < 60:
        feedback.append({"area": "Experience", "status": "needs_improvement",
                         "message": "Consider gaining more experience in this field",
                         "score": factors["experience"]})
    elif factors["experience"] >= 80:
        feedback.append({"area": "Experience", "status": "strong",
                         "message": "Your experience level is perfect!", "score": factors["experience"]})

    if factors["education"] < 60:
        feedback.append({"area": "Education", "status": "warning",
                         "message": "Educational requirements may not be fully met",
                         "score": factors["education"]})
    return feedback


def predict_success(profile: dict, posting: dict, kind: str = "job") -> dict:
    factors = factor_scores(profile, posting, kind)
    probability = int(round(float(np.array([factors[f] for f in FACTORS]) @ WEIGHTS)))

    for threshold, category, confidence, recommendation in CATEGORIES:
        if probability >= threshold:
            break

    return {
        "success_probability": probability,
        "category": category,
        "recommendation": recommendation,
        "confidence": confidence,
        "factors": factors,
        "strengths": [f for f in FACTORS if factors[f] >= 80],
        "improvements": [f for f in FACTORS if factors[f] < 60],
        "should_apply": probability >= 40,
        "feedback": _feedback(profile, posting, factors),
    }
