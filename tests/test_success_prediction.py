"""
Hiring-likelihood prediction for job seekers.
"""

from bson import ObjectId

from jobzee.services.mongo_service import utcnow
from jobzee.services.success_prediction import (
    education_match, experience_match, location_match, predict_success, salary_match, skills_match
)

POSTING = {
    "title": "Backend Developer",
    "skills": ["Python", "MongoDB", "FastAPI"],
    "experience_level": "mid",
    "location": "Bangalore",
    "remote": "onsite",
}


def test_skills_match_is_exact_and_case_insensitive():
    assert skills_match(["python"], ["Python", "Go"]) == 50
    assert skills_match(["react native"], ["React"]) == 0
    assert skills_match([], ["Python"]) == 0
    assert skills_match(["Python"], []) == 100


def test_experience_match():
    assert experience_match(4, "mid") == 100
    assert experience_match(2, "mid") == 50
    assert experience_match("fresher", "senior") == 0
    assert experience_match(None, "mid") == 0
    assert experience_match(1, None) == 100


def test_education_match():
    assert education_match("MBA", ["Bachelor"]) == 100
    assert education_match("Diploma", ["Master"]) == 40
    assert education_match(None, ["Bachelor"]) == 50
    assert education_match("Unknown course", ["Bachelor"]) == 30
    assert education_match("12th", None) == 100


def test_location_match():
    assert location_match("Pune", "Mumbai", "remote") == 100
    assert location_match("Mumbai", "mumbai", "onsite") == 100
    assert location_match("Navi Mumbai", "Mumbai", "onsite") == 90
    assert location_match(None, "Mumbai", "onsite") == 50
    assert location_match("Pune", "Mumbai", "onsite") == 30


def test_salary_match():
    assert salary_match({"min": 1000000}, {"min": 900000, "max": 1200000}) == 100
    assert salary_match({"min": 1000000}, {"min": 800000, "max": 900000}) == 80
    assert salary_match({"min": 1000000}, {"min": 300000, "max": 400000}) == 50
    assert salary_match({"min": 10000}, {"amount": 7000}, "internship") == 70
    assert salary_match({"min": 10000}, {"amount": 3000}, "internship") == 40
    assert salary_match(None, {"min": 1}) == 100


def test_matching_profile_is_excellent():
    profile = {"skills": ["python", "mongodb", "fastapi"], "experience": 4, "location": "Bangalore"}

    result = predict_success(profile, POSTING)

    assert result["success_probability"] == 100
    assert result["category"] == "excellent"
    assert result["confidence"] == "high"
    assert result["should_apply"] is True
    assert result["improvements"] == []
    assert [f["area"] for f in result["feedback"]] == ["Skills", "Experience"]


def test_mismatched_profile_is_poor():
    profile = {"skills": [], "experience": 0, "location": "Kolkata"}

    result = predict_success(profile, POSTING)

    assert result["success_probability"] == 28
    assert result["category"] == "poor"
    assert result["should_apply"] is False
    assert result["improvements"] == ["skills", "experience", "location"]
    assert result["feedback"][0]["message"] == "Consider learning: Python, MongoDB, FastAPI"


class TestEndpoints:

    def test_job_success(self, client, make_employer, make_job, make_user):
        employer, _ = make_employer(is_verified=True)
        job = make_job(employer)
        _, headers = make_user(skills=["Python", "MongoDB"], years_of_experience=2, location="Bangalore",
                               expected_salary={"min": 1200000, "max": 1500000})

        response = client.post("/api/predictions/job-success", headers=headers, json={"job_id": str(job["_id"])})

        assert response.status_code == 200
        body = response.json()
        prediction = body["prediction"]
        assert body["job"]["id"] == str(job["_id"])
        assert prediction["factors"] == {"skills": 67, "experience": 50, "education": 100, "location": 100,
                                         "salary": 100}
        assert prediction["success_probability"] == 74
        assert prediction["category"] == "good"
        assert prediction["improvements"] == ["experience"]

    def test_job_id_is_required(self, client, make_user):
        _, headers = make_user()

        response = client.post("/api/predictions/job-success", headers=headers, json={})

        assert response.status_code == 400

    def test_unknown_job(self, client, make_user):
        _, headers = make_user()

        response = client.get(f"/api/predictions/job-success/{ObjectId()}", headers=headers)

        assert response.status_code == 404

    def test_employers_cannot_ask(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        job = make_job(employer)

        response = client.get(f"/api/predictions/job-success/{job['_id']}", headers=headers)

        assert response.status_code == 403

    def test_internship_success_uses_stipend_and_eligibility(self, client, db, make_employer, make_user):
        employer, _ = make_employer(is_verified=True)
        internship_id = db.internships.insert_one({
            "employer_id": employer["_id"], "title": "Python Intern", "status": "active",
            "application_deadline": utcnow(), "location": "Pune", "location_type": "remote",
            "skills": ["Python"], "stipend": {"amount": 5000}, "eligibility": {"education": ["Bachelor"]},
        }).inserted_id
        _, headers = make_user(skills=["python"], education="B.Tech", expected_salary={"min": 10000})

        by_path = client.get(f"/api/predictions/internship-success/{internship_id}", headers=headers).json()
        by_body = client.post("/api/predictions/internship-success", headers=headers,
                              json={"internship_id": str(internship_id)}).json()

        assert by_path["prediction"] == by_body["prediction"]
        assert by_path["internship"]["title"] == "Python Intern"
        assert by_path["prediction"]["factors"]["salary"] == 40
        assert by_path["prediction"]["success_probability"] == 94
        assert by_path["prediction"]["improvements"] == ["salary"]
