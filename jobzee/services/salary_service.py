"""
Salary Prediction Service

PURPOSE:
Estimate an annual salary (INR) for a job being drafted or for a job
seeker's profile.

HOW IT WORKS:
1. Encode skills / experience / education / city tier / category as a
   fixed feature vector
2. Fit a ridge-regularised least-squares model on log(salary) over the
   bundled market samples (jobzee/data/salary_training.json)
3. Apply real-world multipliers (role, experience, city tier, industry,
   job type, company size, hot skills)
4. Clamp to the market band for (city tier, experience level)

When SALARY_PREDICTION_URL is configured the external service is asked
first and this model is only the fallback.
"""

import json
from importlib import resources
from typing import List, Optional

import httpx
import numpy as np
from loguru import logger

from jobzee.core.config import get_settings

settings = get_settings()

MIN_SALARY = 200000
MAX_SALARY = 5000000

EXPERIENCE_LEVELS = ["fresher", "entry", "mid", "senior", "executive"]
EDUCATION_LEVELS = ["bachelor", "master", "phd"]
CITY_TIERS = ["tier1", "tier2", "tier3", "remote"]

TIER1_CITIES = ["bangalore", "bengaluru", "mumbai", "delhi", "new delhi", "hyderabad", "pune", "chennai",
                "gurgaon", "noida"]
TIER2_CITIES = ["ahmedabad", "kolkata", "kochi", "cochin", "trivandrum", "thiruvananthapuram", "coimbatore",
                "indore", "jaipur", "lucknow", "bhubaneshwar", "bhubaneswar", "surat", "vadodara",
                "visakhapatnam"]

HOT_SKILLS = ["react", "node", "python", "aws", "kubernetes", "ml", "ai", "golang", "kafka"]

ROLE_MULTIPLIERS = [
    (["data scientist", "machine learning", "ml"], 1.30),
    (["devops", "site reliability", "sre", "kubernetes"], 1.20),
    (["backend", "server", "java", "spring", "node"], 1.12),
    (["full stack", "full-stack"], 1.12),
    (["frontend", "react", "angular", "vue"], 1.00),
    (["mobile", "android", "ios", "flutter", "react native"], 1.10),
    (["product manager"], 1.40),
    (["qa", "test", "testing", "automation"], 0.92),
    (["hr", "human resources"], 0.75),
    (["designer", "ui", "ux"], 0.95),
    (["sales"], 0.90),
]

# (city tier, experience) -> [min, max] INR per year
MARKET_BANDS = {
    "tier1": {"entry": (300000, 700000), "mid": (800000, 1500000), "senior": (1800000, 3500000),
              "executive": (3000000, 6000000)},
    "tier2": {"entry": (250000, 600000), "mid": (700000, 1300000), "senior": (1500000, 2800000),
              "executive": (2500000, 5000000)},
    "tier3": {"entry": (200000, 500000), "mid": (600000, 1100000), "senior": (1200000, 2200000),
              "executive": (2000000, 4000000)},
    "remote": {"entry": (250000, 600000), "mid": (700000, 1300000), "senior": (1500000, 2800000),
               "executive": (2500000, 5000000)},
}

MARKET_BASE_BY_EXPERIENCE = {"entry": 600000, "mid": 1200000, "senior": 2000000, "executive": 2800000}


# ============================================================
# REAL-WORLD FACTORS
# ============================================================

def city_tier(location: str = "") -> str:
    loc = (location or "").lower()
    if any(c in loc for c in TIER1_CITIES):
        return "tier1"
    if any(c in loc for c in TIER2_CITIES):
        return "tier2"
    if "remote" in loc:
        return "remote"
    return "tier3"


def normalize_experience(value: Optional[str], years: Optional[float] = None) -> str:
    """Map free-form experience (`fresher`, `3-6 years`, `Senior`...) onto the band ladder."""
    e = (value or "").lower()
    if "fresher" in e:
        return "fresher"
    for level in ("executive", "senior", "mid", "entry"):
        if level in e:
            return level
    if "lead" in e:
        return "executive"
    if years is not None:
        if years < 3:
            return "entry"
        if years < 6:
            return "mid"
        if years < 10:
            return "senior"
        return "executive"
    return "entry"


def role_multiplier(title: str = "") -> float:
    t = (title or "").lower()
    for keys, m in ROLE_MULTIPLIERS:
        if any(k in t for k in keys):
            return m
    return 1.0


def experience_multiplier(level: str) -> float:
    return {"fresher": 0.65, "entry": 0.80, "mid": 1.05, "senior": 1.30, "executive": 1.60}.get(level, 1.0)


def tier_multiplier(tier: str) -> float:
    return {"tier1": 1.15, "tier2": 1.05, "remote": 1.07}.get(tier, 1.0)


def industry_multiplier(industry: str = "") -> float:
    i = (industry or "").lower()
    if not i:
        return 1.0
    if "bank" in i or "fin" in i:
        return 1.15
    if "it" in i or "tech" in i:
        return 1.00
    if "health" in i:
        return 0.98
    if "retail" in i:
        return 0.92
    if "consult" in i:
        return 1.05
    return 1.0


def job_type_multiplier(job_type: str = "") -> float:
    t = (job_type or "").lower()
    if "contract" in t:
        return 1.20
    if "intern" in t:
        return 0.35
    if "part" in t:
        return 0.60
    if "freelance" in t:
        return 1.10
    return 1.0


def company_size_multiplier(size: Optional[str]) -> float:
    if not size:
        return 1.0
    return {"1-10": 0.95, "11-50": 1.00, "51-200": 1.05, "201-500": 1.08, "501-1000": 1.12}.get(size, 1.15)


def hot_skills_multiplier(skills: List[str]) -> float:
    count = sum(1 for s in skills or [] if s.lower() in HOT_SKILLS)
    return 1.0 + min(0.05, count * 0.01)


def market_band(tier: str, level: str) -> tuple:
    bands = MARKET_BANDS.get(tier, MARKET_BANDS["tier2"])
    return bands.get(level, bands["entry"])


def _pct(multiplier: float) -> str:
    return f"{round((multiplier - 1) * 100)}%"


# ============================================================
# LEAST-SQUARES MODEL
# ============================================================

class SalaryPredictor:
    """
    Linear model over one-hot features, fitted once on the bundled samples.
    """

    def __init__(self, samples: Optional[List[dict]] = None, ridge: float = 0.5):
        self.samples = samples if samples is not None else load_training_data()
        self.skill_vocab = sorted({s.lower() for row in self.samples for s in row.get("skills", [])})
        self.categories = sorted({row["category"] for row in self.samples if row.get("category")})
        self.ridge = ridge
        self.weights = self._fit()

    @property
    def n_features(self) -> int:
        return 1 + len(self.skill_vocab) + len(EXPERIENCE_LEVELS) + len(EDUCATION_LEVELS) + \
            len(CITY_TIERS) + len(self.categories)

    def features(self, skills: List[str], experience: str, education: str, location: str,
                 category: Optional[str]) -> np.ndarray:
        x = np.zeros(self.n_features)
        x[0] = 1.0  # intercept
        idx = 1

        wanted = {s.lower().strip() for s in skills or []}
        for i, skill in enumerate(self.skill_vocab):
            if skill in wanted:
                x[idx + i] = 1.0
        idx += len(self.skill_vocab)

        level = normalize_experience(experience)
        x[idx + EXPERIENCE_LEVELS.index(level)] = 1.0
        idx += len(EXPERIENCE_LEVELS)

        edu = (education or "").lower()
        if "phd" in edu or "doctor" in edu:
            x[idx + 2] = 1.0
        elif "master" in edu or "mba" in edu or "mtech" in edu:
            x[idx + 1] = 1.0
        elif edu:
            x[idx] = 1.0
        idx += len(EDUCATION_LEVELS)

        x[idx + CITY_TIERS.index(city_tier(location))] = 1.0
        idx += len(CITY_TIERS)

        if category and category.lower() in self.categories:
            x[idx + self.categories.index(category.lower())] = 1.0
        return x

    def _fit(self) -> np.ndarray:
        X = np.array([
            self.features(r.get("skills", []), r.get("experience"), r.get("education"), r.get("location"),
                          r.get("category"))
            for r in self.samples
        ])
        y = np.log(np.array([r["salary"] for r in self.samples], dtype=float))

        # ridge via augmented least squares; intercept left unpenalised
        penalty = np.sqrt(self.ridge) * np.eye(X.shape[1])
        penalty[0, 0] = 0.0
        X_aug = np.vstack([X, penalty])
        y_aug = np.concatenate([y, np.zeros(X.shape[1])])
        weights, *_ = np.linalg.lstsq(X_aug, y_aug, rcond=None)
        return weights

    def model_estimate(self, skills, experience, education, location, category) -> float:
        x = self.features(skills, experience, education, location, category)
        return float(np.exp(x @ self.weights))

    def predict(self, data: dict) -> dict:
        """
        Args:
            data: title, skills, location, experience (level or free text),
                  education, category/industry, job_type, company_size

        Returns:
            {predicted{min,max,average,currency}, confidence, breakdown,
             market_insights, market_comparison, algorithm}
        """
        skills = data.get("skills") or []
        level = normalize_experience(data.get("experience"), data.get("years_of_experience"))
        tier = city_tier(data.get("location") or "")
        industry = data.get("industry") or data.get("category") or ""

        estimate = self.model_estimate(skills, level, data.get("education"), data.get("location"),
                                       data.get("category"))
        estimate = min(MAX_SALARY, max(MIN_SALARY, estimate))

        factors = [
            ("Role/Title", role_multiplier(data.get("title"))),
            ("Experience Level", experience_multiplier(level)),
            ("City Tier", tier_multiplier(tier)),
            ("Industry", industry_multiplier(industry)),
            ("Employment Type", job_type_multiplier(data.get("job_type"))),
            ("Company Size", company_size_multiplier(data.get("company_size"))),
            ("Hot Skills", hot_skills_multiplier(skills)),
        ]
        adjustment = float(np.prod([m for _, m in factors]))

        adjusted = min(MAX_SALARY, max(MIN_SALARY, estimate * adjustment))
        band_level = "entry" if level == "fresher" else level
        band_min, band_max = market_band(tier, band_level)
        adjusted = min(band_max, max(band_min, adjusted))
        average = round(adjusted)

        filled = sum(1 for v in (data.get("title"), skills, data.get("location"), data.get("experience"),
                                 data.get("education"), industry, data.get("job_type")) if v)
        confidence = round(min(95, 55 + filled / 7 * 40))

        range_pct = 0.10 if level in ("entry", "fresher") else 0.12
        breakdown = [{"factor": name, "impact": _pct(m)} for name, m in factors]
        breakdown.append({
            "factor": "Market band clamp",
            "impact": f"{round((average - estimate * adjustment) / max(1.0, estimate * adjustment) * 100)}% adjustment",
        })

        return {
            "predicted": {
                "min": round(adjusted * (1 - range_pct)),
                "max": round(adjusted * (1 + range_pct)),
                "average": average,
                "currency": "INR",
            },
            "confidence": confidence,
            "breakdown": breakdown,
            "market_insights": market_insights(data, level),
            "market_comparison": market_comparison(average, data, band_level, tier),
            "band": {"min": band_min, "max": band_max, "tier": tier, "experience": band_level},
            "algorithm": "Least squares + real-world factors + market bands",
        }


def market_insights(data: dict, level: str) -> List[dict]:
    insights = []
    location_bonus = {"bangalore": 1.15, "mumbai": 1.10, "delhi": 1.08, "hyderabad": 1.05, "pune": 1.03,
                      "remote": 1.12}
    location = (data.get("location") or "").lower()
    for loc, m in location_bonus.items():
        if loc in location:
            diff = round((m - 1) * 100)
            insights.append({"factor": "Location", "impact": f"+{diff}%",
                             "message": f"{loc.capitalize()} offers {diff}% higher salaries"})
            break

    if any(s.lower() in HOT_SKILLS for s in data.get("skills") or []):
        insights.append({"factor": "Skills", "impact": "+10%",
                         "message": "High-demand skills increase market value"})

    if level in ("senior", "executive"):
        insights.append({"factor": "Experience", "impact": "+25%",
                         "message": "Senior positions command premium salaries"})
    return insights


def market_comparison(predicted: int, data: dict, level: str, tier: str) -> dict:
    base = MARKET_BASE_BY_EXPERIENCE.get(level, 800000)
    market_avg = round(base * role_multiplier(data.get("title")) * tier_multiplier(tier) *
                       industry_multiplier(data.get("industry") or data.get("category") or ""))
    diff = predicted - market_avg
    pct = round(diff / max(1, market_avg) * 100)
    if pct > 10:
        status, message = "above", f"{pct}% above market average"
    elif pct < -10:
        status, message = "below", f"{abs(pct)}% below market average"
    else:
        status, message = "at", "In line with market average"
    return {"market_average": market_avg, "prediction": predicted, "difference": diff,
            "percent_difference": pct, "status": status, "message": message}


def compare_posted_salary(posted: Optional[dict], predicted_average: int) -> dict:
    """competitive within +-10% of the predicted average, else above/below."""
    posted = posted or {}
    values = [v for v in (posted.get("min"), posted.get("max")) if v]
    if not values:
        return {"status": "unknown", "posted_average": None, "difference_percent": None,
                "message": "No salary posted for this job"}
    posted_avg = sum(values) / len(values)
    diff_pct = round((posted_avg - predicted_average) / max(1, predicted_average) * 100)
    if diff_pct > 10:
        status, message = "above", f"Posted salary is {diff_pct}% above the predicted market rate"
    elif diff_pct < -10:
        status, message = "below", f"Posted salary is {abs(diff_pct)}% below the predicted market rate"
    else:
        status, message = "competitive", "Posted salary is competitive"
    return {"status": status, "posted_average": round(posted_avg), "difference_percent": diff_pct,
            "message": message}


def load_training_data() -> List[dict]:
    raw = resources.files("jobzee").joinpath("data/salary_training.json").read_text(encoding="utf-8")
    return json.loads(raw)


# ============================================================
# ENTRY POINT
# ============================================================

class SalaryService:
    """External service first (when configured), local model as fallback."""

    def __init__(self, predictor: Optional[SalaryPredictor] = None, remote_url: Optional[str] = None,
                 timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._predictor = predictor
        self.remote_url = remote_url
        self.timeout = timeout
        self.transport = transport

    @property
    def predictor(self) -> SalaryPredictor:
        if self._predictor is None:
            self._predictor = SalaryPredictor()
            logger.info(f"Salary model fitted on {len(self._predictor.samples)} samples")
        return self._predictor

    async def _predict_remote(self, data: dict) -> Optional[dict]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.remote_url, json=data)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Salary service unavailable, using local model: {e}")
            return None
        if not isinstance(body, dict) or "predicted" not in body:
            logger.warning("Salary service returned an unexpected payload, using local model")
            return None
        body.setdefault("algorithm", "external")
        return body

    async def predict(self, data: dict) -> dict:
        if self.remote_url:
            result = await self._predict_remote(data)
            if result is not None:
                return result
        return self.predictor.predict(data)


# Singleton instance
_salary_service: Optional[SalaryService] = None


def get_salary_service() -> SalaryService:
    """Get or create salary service (singleton pattern)"""
    global _salary_service
    if _salary_service is None:
        _salary_service = SalaryService(remote_url=settings.salary_prediction_url,
                                        timeout=settings.http_timeout_seconds)
    return _salary_service
