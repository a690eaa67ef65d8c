"""
Job seeker authentication, onboarding, profile and job reports.
"""

from bson import ObjectId


def test_register_returns_token_and_hides_password(client, db):
    response = client.post("/api/auth/register", json={
        "name": "Asha Rao", "email": "Asha@Example.com", "password": "secret123"
    })

    assert response.status_code == 201
    body = response.json()
    assert body["access_token"]
    assert body["user"]["email"] == "asha@example.com"
    assert "password_hash" not in body["user"]
    assert db.users.count_documents({"email": "asha@example.com"}) == 1


def test_register_duplicate_email_is_rejected(client):
    payload = {"name": "Asha Rao", "email": "asha@example.com", "password": "secret123"}
    client.post("/api/auth/register", json=payload)

    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 400


def test_register_short_password_fails_validation(client):
    response = client.post("/api/auth/register", json={
        "name": "Asha Rao", "email": "asha@example.com", "password": "123"
    })
    assert response.status_code == 422


def test_login_wrong_password(client, make_user):
    user, _ = make_user()
    response = client.post("/api/auth/login", json={"email": user["email"], "password": "wrong-password"})
    assert response.status_code == 401


def test_login_suspended_account(client, make_user):
    user, _ = make_user(status="suspended")
    response = client.post("/api/auth/login", json={"email": user["email"], "password": "secret123"})
    assert response.status_code == 403


def test_login_success(client, make_user):
    user, _ = make_user()
    response = client.post("/api/auth/login", json={"email": user["email"], "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_profile_requires_token(client):
    response = client.get("/api/auth/profile")
    assert response.status_code in (401, 403)


def test_profile_rejects_garbage_token(client):
    response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_employer_token_cannot_use_job_seeker_routes(client, make_employer):
    _, headers = make_employer()
    response = client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 403


class TestOnboarding:

    def test_merges_only_provided_fields(self, client, db, make_user):
        user, headers = make_user(location="Pune", skills=["Excel"], education="B.Com")

        response = client.put(f"/api/auth/onboarding/{user['_id']}", headers=headers, json={
            "experience_level": "experienced",
            "skills": ["Python", "SQL"],
            "years_of_experience": 4,
        })

        assert response.status_code == 200
        stored = db.users.find_one({"_id": user["_id"]})
        assert stored["is_onboarded"] is True
        assert stored["skills"] == ["Python", "SQL"]
        assert stored["experience_level"] == "experienced"
        # untouched fields survive
        assert stored["location"] == "Pune"
        assert stored["education"] == "B.Com"

    def test_skip_marks_skipped(self, client, db, make_user):
        user, headers = make_user()

        response = client.put(f"/api/auth/onboarding/{user['_id']}", headers=headers, json={"skip": True})

        assert response.status_code == 200
        stored = db.users.find_one({"_id": user["_id"]})
        assert stored["is_onboarded"] is True
        assert stored["onboarding_skipped"] is True

    def test_cannot_onboard_someone_else(self, client, make_user):
        _, headers = make_user()
        other, _ = make_user()

        response = client.put(f"/api/auth/onboarding/{other['_id']}", headers=headers, json={"skills": ["Go"]})

        assert response.status_code == 403


def test_empty_profile_update_is_rejected(client, make_user):
    _, headers = make_user()
    response = client.put("/api/auth/profile", headers=headers, json={})
    assert response.status_code == 400


def test_profile_update(client, make_user):
    _, headers = make_user()
    response = client.put("/api/auth/profile", headers=headers, json={"title": "Data Analyst", "location": "Delhi"})

    assert response.status_code == 200
    assert response.json()["user"]["title"] == "Data Analyst"


class TestJobReports:

    def test_second_report_by_same_user_conflicts(self, client, make_user, make_employer, make_job):
        employer, _ = make_employer(is_verified=True)
        job = make_job(employer)
        _, headers = make_user()

        first = client.post(f"/api/auth/jobs/{job['_id']}/report", headers=headers, json={"reason": "spam"})
        second = client.post(f"/api/auth/jobs/{job['_id']}/report", headers=headers, json={"reason": "scam"})

        assert first.status_code == 200
        assert second.status_code == 409
        assert second.json()["error_type"] == "already_reported"

    def test_job_flagged_after_three_reports(self, client, db, make_user, make_employer, make_job):
        employer, _ = make_employer(is_verified=True)
        job = make_job(employer)

        for _ in range(3):
            _, headers = make_user()
            client.post(f"/api/auth/jobs/{job['_id']}/report", headers=headers, json={"reason": "misleading"})

        stored = db.jobs.find_one({"_id": job["_id"]})
        assert stored["report_count"] == 3
        assert stored["is_flagged"] is True

    def test_unknown_job(self, client, make_user):
        _, headers = make_user()
        response = client.post(f"/api/auth/jobs/{ObjectId()}/report", headers=headers, json={"reason": "spam"})
        assert response.status_code == 404
