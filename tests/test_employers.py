"""
Employer registration, verification gate and plan-based job posting limits.
"""

from datetime import timedelta

from jobzee.services.mongo_service import utcnow

JOB_PAYLOAD = {
    "title": "Data Engineer",
    "description": "Design and operate our data pipelines",
    "location": "Hyderabad",
    "skills": ["Python", "Spark"],
    "experience_level": "mid",
}


class TestRegistration:

    def test_new_employer_starts_unverified_on_free_plan(self, client, db):
        response = client.post("/api/employers/register", json={
            "company_name": "Acme Corp",
            "company_email": "HR@Acme.example.com",
            "password": "secret123",
            "contact_person_name": "Ravi Kumar",
        })

        assert response.status_code == 201
        employer = response.json()["employer"]
        assert employer["company_email"] == "hr@acme.example.com"
        assert employer["is_verified"] is False
        assert employer["verification_status"] == "pending"
        assert employer["subscription_plan"] == "free"
        assert employer["job_posting_limit"] == 1
        assert "password_hash" not in employer

    def test_blank_company_email_is_rejected(self, client, db):
        response = client.post("/api/employers/register", json={
            "company_name": "Acme Corp",
            "company_email": "   ",
            "password": "secret123",
            "contact_person_name": "Ravi Kumar",
        })

        assert response.status_code == 422
        assert db.employers.count_documents({}) == 0

    def test_duplicate_company_email(self, client, make_employer):
        employer, _ = make_employer()

        response = client.post("/api/employers/register", json={
            "company_name": "Acme Again",
            "company_email": employer["company_email"],
            "password": "secret123",
            "contact_person_name": "Ravi Kumar",
        })

        assert response.status_code == 400

    def test_login_returns_employer_token(self, client, make_employer):
        employer, _ = make_employer()

        response = client.post("/api/employers/login", json={
            "company_email": employer["company_email"], "password": "secret123"
        })

        assert response.status_code == 200
        assert response.json()["employer"]["id"] == str(employer["_id"])


class TestJobPosting:

    def test_unverified_employer_cannot_post(self, client, make_employer):
        _, headers = make_employer()

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 403
        body = response.json()
        assert body["error_type"] == "verification_required"
        assert body["verification_status"] == "pending"

    def test_free_plan_allows_a_single_live_job(self, client, db, make_employer):
        employer, headers = make_employer(is_verified=True, verification_status="verified")

        first = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)
        second = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert first.status_code == 201
        assert first.json()["job"]["status"] == "pending"
        assert second.status_code == 403
        assert second.json()["error_type"] == "job_posting_limit_reached"
        stored = db.employers.find_one({"_id": employer["_id"]})
        assert stored["total_job_posts"] == 1
        assert stored["job_postings_used"] == 0

    def test_free_plan_can_post_again_once_previous_job_is_closed(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        make_job(employer, status="filled")

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 201

    def test_expired_free_plan_job_frees_the_slot(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        make_job(employer, status="active", expires_at=utcnow() - timedelta(days=1))

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 201

    def test_pending_free_plan_job_still_blocks(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        make_job(employer, status="pending", expires_at=utcnow() - timedelta(days=1))

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 403

    def test_paid_plan_job_goes_live_and_counts(self, client, db, make_employer):
        now = utcnow()
        employer, headers = make_employer(
            is_verified=True,
            subscription_plan="basic",
            subscription_start=now,
            subscription_end=now + timedelta(days=30),
            job_posting_limit=5,
            job_postings_used=2,
        )

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 201
        job = response.json()["job"]
        assert job["status"] == "active"
        assert job["employer_id"] == str(employer["_id"])
        assert db.employers.find_one({"_id": employer["_id"]})["job_postings_used"] == 3

    def test_paid_plan_limit_reached(self, client, make_employer):
        now = utcnow()
        _, headers = make_employer(
            is_verified=True,
            subscription_plan="basic",
            subscription_end=now + timedelta(days=30),
            job_posting_limit=5,
            job_postings_used=5,
        )

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 403
        assert response.json()["error_type"] == "job_posting_limit_reached"

    def test_expired_subscription(self, client, make_employer):
        now = utcnow()
        _, headers = make_employer(
            is_verified=True,
            subscription_plan="premium",
            subscription_end=now - timedelta(days=1),
            job_posting_limit=20,
        )

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 403
        assert response.json()["error_type"] == "subscription_expired"

    def test_unlimited_plan(self, client, make_employer):
        now = utcnow()
        _, headers = make_employer(
            is_verified=True,
            subscription_plan="enterprise",
            subscription_end=now + timedelta(days=30),
            job_posting_limit=None,
            job_postings_used=250,
        )

        response = client.post("/api/employers/jobs", headers=headers, json=JOB_PAYLOAD)

        assert response.status_code == 201


class TestOwnJobs:

    def test_other_employer_cannot_edit(self, client, make_employer, make_job):
        owner, _ = make_employer(is_verified=True)
        _, other_headers = make_employer(is_verified=True)
        job = make_job(owner)

        response = client.put(f"/api/employers/jobs/{job['_id']}", headers=other_headers, json={"title": "Hacked"})

        assert response.status_code == 403

    def test_employer_cannot_approve_own_job(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True)
        job = make_job(employer, status="pending")

        response = client.put(f"/api/employers/jobs/{job['_id']}", headers=headers, json={"status": "approved"})

        assert response.status_code == 403

    def test_delete_removes_applications(self, client, db, make_employer, make_job, make_user):
        employer, headers = make_employer(is_verified=True)
        job = make_job(employer)
        user, _ = make_user()
        db.applications.insert_one({"user_id": user["_id"], "job_id": job["_id"], "status": "applied"})

        response = client.delete(f"/api/employers/jobs/{job['_id']}", headers=headers)

        assert response.status_code == 200
        assert db.jobs.count_documents({}) == 0
        assert db.applications.count_documents({}) == 0

    def test_dashboard_stats(self, client, make_employer, make_job):
        employer, headers = make_employer(is_verified=True, founded_year=2015)
        make_job(employer)
        make_job(employer, status="pending")

        response = client.get("/api/employers/dashboard/stats", headers=headers)

        assert response.status_code == 200
        stats = response.json()
        assert stats["active_jobs"] == 1
        assert stats["pending_jobs"] == 1
        assert stats["remaining_job_posts"] == 1
        assert stats["company_age"] == utcnow().year - 2015


def test_profile_view_counter(client, db, make_employer):
    employer, _ = make_employer()

    response = client.post("/api/employers/activity/profile-view", json={"employer_id": str(employer["_id"])})

    assert response.status_code == 200
    assert db.employers.find_one({"_id": employer["_id"]})["profile_views"] == 1
