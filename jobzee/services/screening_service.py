"""
Candidate Screening Service

Scores each applicant against a posting and ranks them.

Feature scores (all in [0, 1]):
    skills, experience, education, title, location, profile completeness

Decision:
    linear = features . WEIGHTS
    rbf    = exp(-gamma * ||features - 1||^2)     (gamma = 1.5)
    score  = sigmoid(8 * (0.7 * linear + 0.3 * rbf - 0.5))
"""

import re
from typing import Iterable, List, Optional, Union

import numpy as np

FEATURES = ["skills", "experience", "education", "title", "location", "history"]
WEIGHTS = np.array([0.35, 0.20, 0.15, 0.15, 0.08, 0.07])
RBF_GAMMA = 1.5

EXPERIENCE_YEARS = {
    "fresher": 0, "entry": 0, "0-1": 0.5, "1-2": 1.5, "2-3": 2.5, "3-5": 4, "5-7": 6, "7-10": 8.5,
    "10+": 12, "senior": 8, "mid": 4, "executive": 10,
    "1st year": 0, "2nd year": 1, "3rd year": 2, "4th year": 3, "final year": 3.5, "recent graduate": 0.5,
}

EDUCATION_LEVELS = {
    "high school": 1, "12th": 1, "diploma": 2,
    "bachelor": 3, "graduation": 3, "btech": 3, "b.tech": 3, "be": 3, "bsc": 3, "bca": 3,
    "master": 4, "post-graduation": 4, "mtech": 4, "msc": 4, "mca": 4, "mba": 4,
    "phd": 5, "doctorate": 5,
}

ROLE_SYNONYMS = {
    "developer": ["developer", "engineer", "programmer", "coder"],
    "designer": ["designer", "ui/ux", "ux", "ui", "graphic designer", "visual designer"],
    "analyst": ["analyst", "data analyst", "business analyst", "systems analyst"],
    "manager": ["manager", "lead", "head", "supervisor", "coordinator"],
    "architect": ["architect", "principal engineer", "technical lead"],
    "scientist": ["scientist", "researcher", "data scientist"],
    "consultant": ["consultant", "advisor", "specialist"],
    "administrator": ["administrator", "admin", "system admin", "sysadmin"],
    "qa": ["qa", "quality assurance", "tester", "test engineer"],
    "devops": ["devops", "infrastructure", "site reliability", "sre"],
    "frontend": ["frontend", "front-end", "front end", "ui developer"],
    "backend": ["backend", "back-end", "back end", "server-side"],
    "fullstack": ["fullstack", "full-stack", "full stack"],
}

RELATED_ROLES = [
    {"developer", "engineer", "architect"},
    {"designer", "frontend"},
    {"analyst", "scientist"},
    {"devops", "administrator"},
    {"qa", "developer"},
]

SENIORITY_KEYWORDS = {
    "entry": ["junior", "jr", "associate", "entry", "trainee", "intern"],
    "mid": ["mid", "intermediate", "mid-level"],
    "senior": ["senior", "sr", "expert"],
    "lead": ["lead", "principal", "staff", "chief", "head", "director", "vp"],
}
SENIORITY_ORDER = ["entry", "mid", "senior", "lead"]

TECH_KEYWORDS = ["react", "angular", "vue", "node", "python", "java", "javascript", "mobile", "android", "ios",
                 "web", "cloud", "aws", "azure", "ml", "ai", "blockchain", "security", "network"]

CLASSES = [
    (85, "excellent", "high", "Strongly recommended - Schedule interview immediately"),
    (70, "good", "high", "Recommended - Good candidate worth interviewing"),
    (55, "average", "medium", "Consider - Review profile carefully before decision"),
    (40, "below-average", "medium", "Weak candidate - Consider only if few applicants"),
    (0, "poor", "low", "Not recommended - Skills and experience gap too large"),
]


# ============================================================
# FEATURE SCORES
# ============================================================

def skills_score(candidate_skills: List[str], required: List[str]) -> float:
    if not required:
        return 1.0
    if not candidate_skills:
        return 0.0
    have = [s.lower().strip() for s in candidate_skills]
    need = [s.lower().strip() for s in required]

    exact = [s for s in need if s in have]
    partial = [s for s in need if s not in exact and any(h in s or s in h for h in have)]

    basic = len(exact) / len(need) + 0.5 * len(partial) / len(need)
    extra_bonus = max(0.0, min(0.15, (len(candidate_skills) - len(required)) * 0.015))
    missing_penalty = (len(need) - len(exact) - len(partial)) * 0.05
    return float(np.clip(basic + extra_bonus - missing_penalty, 0.0, 1.0))


def parse_years(value: Union[str, float, int, None]) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).lower().strip()
    if text in EXPERIENCE_YEARS:
        return EXPERIENCE_YEARS[text]
    match = re.search(r"\d+(\.\d+)?", text)
    return float(match.group()) if match else 0.0


def experience_score(candidate_exp, required_exp) -> float:
    if not required_exp:
        return 1.0
    user_years = parse_years(candidate_exp)
    if user_years is None:
        return 0.0
    required_years = parse_years(required_exp) or 0.0

    if user_years == required_years:
        return 1.0
    if required_years < user_years <= required_years * 1.2:
        return 0.98
    if required_years < user_years <= required_years * 1.5:
        return 0.95
    if user_years > required_years * 2:
        return 0.75
    if user_years > required_years * 1.5:
        return 0.85

    ratio = user_years / (required_years or 1)
    for threshold, score in ((0.8, 0.90), (0.7, 0.80), (0.6, 0.65), (0.5, 0.50), (0.3, 0.35)):
        if ratio >= threshold:
            return score
    return max(0.15, ratio * 0.5)


def education_level(entries: Iterable) -> int:
    level = 0
    for entry in entries:
        text = (entry.get("degree", "") if isinstance(entry, dict) else str(entry or "")).lower()
        words = set(re.split(r"[^a-z.]+", text))
        for key, rank in EDUCATION_LEVELS.items():
            if (key in words) if len(key) <= 3 else (key in text):
                level = max(level, rank)
    return level


def as_list(value) -> list:
    if not value:
        return []
    return value if isinstance(value, list) else [value]


def education_score(candidate_edu, required_edu) -> float:
    required = as_list(required_edu)
    if not required:
        return 1.0
    if any(isinstance(e, str) and "any" in e.lower() for e in required):
        return 1.0
    candidate = as_list(candidate_edu)
    if not candidate:
        return 0.5
    user_level = education_level(candidate)
    required_level = education_level(required)
    if user_level >= required_level:
        return 1.0
    if user_level == 0:
        return 0.4
    return max(0.5, user_level / required_level)


def levenshtein_similarity(a: str, b: str) -> float:
    if not a and not b:
        return 1.0
    dist = np.zeros((len(a) + 1, len(b) + 1), dtype=int)
    dist[:, 0] = np.arange(len(a) + 1)
    dist[0, :] = np.arange(len(b) + 1)
    for i in range(1, len(a) + 1):
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            dist[i, j] = min(dist[i - 1, j] + 1, dist[i, j - 1] + 1, dist[i - 1, j - 1] + cost)
    return 1 - dist[len(a), len(b)] / max(len(a), len(b))


def _role_type(title: str) -> Optional[str]:
    found = None
    for role, synonyms in ROLE_SYNONYMS.items():
        if any(s in title for s in synonyms):
            found = role
    return found


def _seniority(title: str) -> str:
    found = "mid"
    for level, keywords in SENIORITY_KEYWORDS.items():
        if any(k in title for k in keywords):
            found = level
    return found


def title_score(candidate_title: str, job_title: str) -> float:
    if not candidate_title or not job_title:
        return 0.7
    user = candidate_title.lower().strip()
    job = job_title.lower().strip()
    if user == job:
        return 1.0

    score = 0.4
    user_role, job_role = _role_type(user), _role_type(job)
    if user_role and job_role:
        if user_role == job_role:
            score += 0.40
        elif any(user_role in group and job_role in group for group in RELATED_ROLES):
            score += 0.25
        else:
            score += 0.05
    else:
        score += 0.20

    ui, ji = SENIORITY_ORDER.index(_seniority(user)), SENIORITY_ORDER.index(_seniority(job))
    score += {0: 0.30, 1: 0.20, 2: 0.10}.get(abs(ui - ji), 0.05)
    if abs(ui - ji) > 1:
        score -= 0.10

    job_tech = [t for t in TECH_KEYWORDS if t in job]
    if job_tech:
        common = [t for t in job_tech if t in user]
        score += len(common) / len(job_tech) * 0.20
    else:
        score += 0.10

    score += levenshtein_similarity(user, job) * 0.10
    return float(np.clip(score, 0.0, 1.0))


def location_score(candidate_location: Optional[str], job_location: Optional[str], remote_type: Optional[str]) -> float:
    if remote_type in ("remote", "hybrid"):
        return 1.0
    if not candidate_location or not job_location:
        return 0.7
    user, job = candidate_location.lower(), job_location.lower()
    if user == job:
        return 1.0
    if user in job or job in user:
        return 0.9
    return 0.4


def completeness_score(candidate: dict) -> float:
    score = 0.7
    if candidate.get("skills"):
        score += 0.1
    if candidate.get("education"):
        score += 0.1
    if candidate.get("bio"):
        score += 0.1
    return min(1.0, score)


# ============================================================
# DECISION
# ============================================================

def extract_features(candidate: dict, posting: dict, kind: str = "job") -> np.ndarray:
    """
    Args:
        candidate: merged application + profile fields
            (skills, experience, years_of_experience, education, title, location, bio)
        posting: job or internship document
    """
    if kind == "job":
        required_exp = posting.get("experience_level")
        required_edu = posting.get("education")
        remote_type = posting.get("remote")
    else:
        eligibility = posting.get("eligibility") or {}
        required_exp = eligibility.get("year_of_study")
        required_edu = eligibility.get("education")
        remote_type = posting.get("location_type")

    experience = candidate.get("years_of_experience")
    if experience is None:
        experience = candidate.get("experience")

    return np.array([
        skills_score(candidate.get("skills") or [], posting.get("skills") or []),
        experience_score(experience, required_exp),
        education_score(candidate.get("education"), required_edu),
        title_score(candidate.get("title") or "", posting.get("title") or ""),
        location_score(candidate.get("location"), posting.get("location"), remote_type),
        completeness_score(candidate),
    ])


def decision(features: np.ndarray) -> float:
    linear = float(features @ WEIGHTS)
    rbf = float(np.exp(-RBF_GAMMA * np.sum((features - 1.0) ** 2)))
    combined = 0.7 * linear + 0.3 * rbf
    return float(1 / (1 + np.exp(-8 * (combined - 0.5))))


def classify(candidate: dict, posting: dict, kind: str = "job") -> dict:
    features = extract_features(candidate, posting, kind)
    raw = decision(features)
    score = round(raw * 100)

    for threshold, label, confidence, recommendation in CLASSES:
        if score >= threshold:
            break

    named = dict(zip(FEATURES, features.tolist()))
    strengths, gaps = [], []
    for key, good, weak in (
        ("skills", "Strong skill match", "Missing key skills"),
        ("experience", "Relevant experience", "Limited experience"),
        ("education", "Educational qualifications met", "Education requirements not fully met"),
        ("title", "Professional title matches well", "Title mismatch with job requirements"),
    ):
        if named[key] >= 0.8:
            strengths.append(good)
        elif named[key] < 0.6:
            gaps.append(weak)
    if named["location"] >= 0.8:
        strengths.append("Location compatible")

    return {
        "score": score,
        "raw_score": raw,
        "classification": label,
        "confidence": confidence,
        "features": {k: round(v * 100) for k, v in named.items()},
        "strengths": strengths,
        "gaps": gaps,
        "recommendation": recommendation,
        "algorithm": "Weighted linear + RBF kernel",
    }


def screen_candidates(candidates: List[dict], posting: dict, kind: str = "job") -> dict:
    """Classify every candidate, rank by score (1 = best) and summarize."""
    screened = [dict(c, screening=classify(c, posting, kind)) for c in candidates]
    screened.sort(key=lambda c: -c["screening"]["score"])
    for rank, candidate in enumerate(screened, start=1):
        candidate["screening"]["rank"] = rank

    counts = {label: 0 for _, label, _, _ in CLASSES}
    for c in screened:
        counts[c["screening"]["classification"]] += 1
    scores = [c["screening"]["score"] for c in screened]

    return {
        "candidates": screened,
        "stats": {
            "total": len(screened),
            "excellent": counts["excellent"],
            "good": counts["good"],
            "average": counts["average"],
            "below_average": counts["below-average"],
            "poor": counts["poor"],
            "average_score": round(float(np.mean(scores))) if scores else 0,
        },
    }
