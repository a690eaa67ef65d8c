"""
Candidate screening scores, ranking and the employer endpoints.
"""

import pytest

from jobzee.services.screening_service import (
    classify, education_score, experience_score, levenshtein_similarity, screen_candidates, skills_score
)

POSTING = {
    "title": "Backend Developer",
    "skills": ["Python", "MongoDB", "FastAPI"],
    "experience_level": "mid",
    "location": "Bangalore",
    "remote": "onsite",
}

STRONG = {
    "name": "Strong",
    "title": "Backend Developer",
    "skills": ["python", "mongodb", "fastapi"],
    "years_of_experience": 4,
    "education": "B.Tech Computer Science",
    "location": "Bangalore",
    "bio": "Five years of building APIs",
}

WEAK = {
    "name": "Weak",
    "title": "Accountant",
    "skills": [],
    "years_of_experience": 0,
    "location": "Kolkata",
}


def test_skills_score_partial_matches_count_half():
    assert skills_score(["python"], ["python", "go"]) == pytest.approx(0.45)
    assert skills_score(["react native"], ["react"]) == pytest.approx(0.5)
    assert skills_score([], ["python"]) == 0.0
    assert skills_score(["anything"], []) == 1.0


def test_experience_score():
    assert experience_score(4, "mid") == 1.0
    assert experience_score(20, "mid") == 0.75
    assert experience_score(None, "mid") == 0.0
    assert experience_score(1, None) == 1.0


def test_education_score():
    assert education_score("MBA", ["bachelor"]) == 1.0
    assert education_score("Diploma", ["Master"]) == 0.5
    assert education_score(None, ["bachelor"]) == 0.5
    assert education_score("12th", ["Any graduate"]) == 1.0


def test_levenshtein_similarity():
    assert levenshtein_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
    assert levenshtein_similarity("", "") == 1.0


def test_strong_candidate_is_excellent():
    result = classify(STRONG, POSTING)

    assert result["classification"] == "excellent"
    assert result["confidence"] == "high"
    assert result["features"]["skills"] == 100
    assert "Strong skill match" in result["strengths"]


def test_weak_candidate_is_poor():
    result = classify(WEAK, POSTING)

    assert result["classification"] == "poor"
    assert "Missing key skills" in result["gaps"]


def test_screen_candidates_ranks_and_counts():
    result = screen_candidates([WEAK, STRONG], POSTING)

    assert [c["name"] for c in result["candidates"]] == ["Strong", "Weak"]
    assert [c["screening"]["rank"] for c in result["candidates"]] == [1, 2]
    stats = result["stats"]
    assert stats["total"] == 2
    assert stats["excellent"] == 1
    assert stats["poor"] == 1


def test_internship_uses_eligibility():
    internship = {"title": "Python Intern", "skills": ["Python"], "location_type": "remote",
                  "eligibility": {"education": ["Any"], "year_of_study": "3rd year"}}
    student = {"title": "Student", "skills": ["Python"], "experience": "3rd year", "education": "BSc"}

    result = classify(student, internship, kind="internship")

    assert result["features"]["location"] == 100
    assert result["features"]["education"] == 100
    assert result["features"]["experience"] == 100


class TestEndpoints:

    def test_no_applications(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        job = make_job(employer)

        response = client.get(f"/api/screening/job/{job['_id']}/candidates", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["candidates"] == []
        assert body["stats"]["total"] == 0
        assert body["stats"]["average_score"] == 0
        assert body["job"]["title"] == job["title"]

    def test_ranks_applicants_and_skips_withdrawn(self, client, db, make_employer, make_job, make_user):
        employer, headers = make_employer(is_verified=True)
        job = make_job(employer)
        strong, _ = make_user(**{k: v for k, v in STRONG.items() if k != "name"})
        weak, _ = make_user(title="Accountant", location="Kolkata")
        gone, _ = make_user()
        for user, status in ((weak, "applied"), (strong, "applied"), (gone, "withdrawn")):
            db.applications.insert_one({"user_id": user["_id"], "job_id": job["_id"],
                                        "employer_id": employer["_id"], "status": status})

        body = client.get(f"/api/screening/job/{job['_id']}/candidates", headers=headers).json()

        assert body["stats"]["total"] == 2
        assert body["candidates"][0]["user_id"] == str(strong["_id"])

    def test_other_employers_job(self, client, make_employer, make_job):
        owner, _ = make_employer(is_verified=True)
        _, headers = make_employer(is_verified=True)
        job = make_job(owner)

        response = client.get(f"/api/screening/job/{job['_id']}/candidates", headers=headers)

        assert response.status_code == 403


class TestSingleCandidate:

    def test_job_seeker_screens_own_profile(self, client, make_employer, make_job, make_user):
        employer, _ = make_employer(is_verified=True)
        job = make_job(employer)
        _, headers = make_user(current_role="Backend Developer", skills=["python", "mongodb", "fastapi"],
                               years_of_experience=4, education="B.Tech Computer Science",
                               location="Bangalore", bio="Five years of building APIs")

        response = client.post("/api/screening/single-candidate", headers=headers,
                               json={"type": "job", "job_id": str(job["_id"])})

        assert response.status_code == 200
        body = response.json()
        assert body["screening"]["classification"] == "excellent"
        assert body["job"]["id"] == str(job["_id"])

    def test_posting_id_must_match_type(self, client, make_employer, make_job, make_user):
        employer, _ = make_employer(is_verified=True)
        job = make_job(employer)
        _, headers = make_user()

        response = client.post("/api/screening/single-candidate", headers=headers,
                               json={"type": "internship", "job_id": str(job["_id"])})

        assert response.status_code == 400

    def test_unknown_type(self, client, make_user):
        _, headers = make_user()

        response = client.post("/api/screening/single-candidate", headers=headers, json={"type": "contract"})

        assert response.status_code == 422

    def test_unknown_posting(self, client, make_user):
        _, headers = make_user()

        response = client.post("/api/screening/single-candidate", headers=headers,
                               json={"job_id": "5f0c1a2b3c4d5e6f7a8b9c0d"})

        assert response.status_code == 404
