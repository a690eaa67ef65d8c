"""
Full-form applications, withdrawal rules and the employer status pipeline.
"""

import pytest


@pytest.fixture
def posting(make_employer, make_job):
    employer, employer_headers = make_employer(is_verified=True)
    job = make_job(employer)
    return employer, employer_headers, job


def _apply(client, headers, job):
    return client.post("/api/applications/apply", headers=headers, json={
        "job_id": str(job["_id"]),
        "resume_link": "https://files.example.com/cv.pdf",
        "cover_letter": "I would love to join.",
        "skills": ["Python", "MongoDB"],
        "expected_salary": 1200000,
    })


def test_apply_and_list_my_applications(client, posting, make_user):
    _, _, job = posting
    _, headers = make_user()

    response = _apply(client, headers, job)
    mine = client.get("/api/applications/my-applications", headers=headers).json()

    assert response.status_code == 201
    assert response.json()["application"]["job_title"] == job["title"]
    assert mine["count"] == 1


def test_apply_requires_resume_link(client, posting, make_user):
    _, _, job = posting
    _, headers = make_user()

    response = client.post("/api/applications/apply", headers=headers, json={"job_id": str(job["_id"])})

    assert response.status_code == 422


def test_duplicate_application_conflicts(client, posting, make_user):
    _, _, job = posting
    _, headers = make_user()
    _apply(client, headers, job)

    response = _apply(client, headers, job)

    assert response.status_code == 409


class TestWithdraw:

    def test_applicant_can_withdraw(self, client, db, posting, make_user):
        employer, _, job = posting
        _, headers = make_user()
        application_id = _apply(client, headers, job).json()["application"]["id"]

        response = client.put(f"/api/applications/{application_id}/withdraw", headers=headers)

        assert response.status_code == 200
        assert db.applications.find_one()["status"] == "withdrawn"
        assert db.employer_notifications.count_documents({"employer_id": employer["_id"]}) == 2

    def test_cannot_withdraw_after_final_decision(self, client, db, posting, make_user):
        _, _, job = posting
        _, headers = make_user()
        application_id = _apply(client, headers, job).json()["application"]["id"]
        db.applications.update_one({}, {"$set": {"status": "hired"}})

        response = client.put(f"/api/applications/{application_id}/withdraw", headers=headers)

        assert response.status_code == 400

    def test_other_user_cannot_withdraw(self, client, posting, make_user):
        _, _, job = posting
        _, owner_headers = make_user()
        _, other_headers = make_user()
        application_id = _apply(client, owner_headers, job).json()["application"]["id"]

        response = client.put(f"/api/applications/{application_id}/withdraw", headers=other_headers)

        assert response.status_code == 403


class TestEmployerPipeline:

    def test_status_change_notifies_applicant(self, client, db, posting, make_user):
        _, employer_headers, job = posting
        user, headers = make_user()
        application_id = _apply(client, headers, job).json()["application"]["id"]

        response = client.put(f"/api/applications/{application_id}/status", headers=employer_headers,
                              json={"status": "shortlisted", "notes": "Strong backend profile"})

        assert response.status_code == 200
        application = response.json()["application"]
        assert application["status"] == "shortlisted"
        assert application["employer_notes"] == "Strong backend profile"
        latest = db.user_notifications.find_one({"user_id": user["_id"]}, sort=[("created_at", -1), ("_id", -1)])
        assert latest["data"]["status"] == "shortlisted"

    def test_unknown_status_is_rejected(self, client, posting, make_user):
        _, employer_headers, job = posting
        _, headers = make_user()
        application_id = _apply(client, headers, job).json()["application"]["id"]

        response = client.put(f"/api/applications/{application_id}/status", headers=employer_headers,
                              json={"status": "promoted"})

        assert response.status_code == 422

    def test_other_employer_cannot_change_status(self, client, posting, make_user, make_employer):
        _, _, job = posting
        _, headers = make_user()
        _, stranger_headers = make_employer(is_verified=True)
        application_id = _apply(client, headers, job).json()["application"]["id"]

        response = client.put(f"/api/applications/{application_id}/status", headers=stranger_headers,
                              json={"status": "rejected"})

        assert response.status_code == 403

    def test_stats_cover_every_status(self, client, posting, make_user):
        _, employer_headers, job = posting
        for _ in range(2):
            _, headers = make_user()
            _apply(client, headers, job)

        body = client.get(f"/api/applications/job/{job['_id']}/stats", headers=employer_headers).json()

        assert body["total"] == 2
        assert body["stats"]["applied"] == 2
        assert body["stats"]["hired"] == 0

    def test_messages_between_applicant_and_employer(self, client, db, posting, make_user):
        _, employer_headers, job = posting
        _, headers = make_user()
        application_id = _apply(client, headers, job).json()["application"]["id"]

        client.post(f"/api/applications/{application_id}/message", headers=headers, json={"message": "Hi!"})
        client.post(f"/api/applications/{application_id}/message", headers=employer_headers,
                    json={"message": "Thanks for applying"})

        messages = db.applications.find_one()["messages"]
        assert [m["sender"] for m in messages] == ["applicant", "employer"]


def test_application_visible_to_admin(client, posting, make_user, make_admin):
    _, _, job = posting
    _, headers = make_user()
    _, admin_headers = make_admin()
    application_id = _apply(client, headers, job).json()["application"]["id"]

    response = client.get(f"/api/applications/{application_id}", headers=admin_headers)

    assert response.status_code == 200


def test_suspended_applicant_loses_access(client, db, posting, make_user):
    _, _, job = posting
    user, headers = make_user()
    application_id = _apply(client, headers, job).json()["application"]["id"]
    db.users.update_one({"_id": user["_id"]}, {"$set": {"status": "suspended"}})

    message = client.post(f"/api/applications/{application_id}/message", headers=headers, json={"message": "Hi!"})
    details = client.get(f"/api/applications/{application_id}", headers=headers)

    assert message.status_code == 403
    assert details.status_code == 403
    assert db.applications.find_one()["messages"] == []


def test_deactivated_employer_cannot_read_application(client, db, posting, make_user):
    employer, employer_headers, job = posting
    _, headers = make_user()
    application_id = _apply(client, headers, job).json()["application"]["id"]
    db.employers.update_one({"_id": employer["_id"]}, {"$set": {"is_active": False}})

    assert client.get(f"/api/applications/{application_id}", headers=employer_headers).status_code == 403


def test_deleted_admin_token_is_rejected(client, db, posting, make_user, make_admin):
    _, _, job = posting
    _, headers = make_user()
    admin, admin_headers = make_admin()
    application_id = _apply(client, headers, job).json()["application"]["id"]
    db.admins.delete_one({"_id": admin["_id"]})

    assert client.get(f"/api/applications/{application_id}", headers=admin_headers).status_code == 401
