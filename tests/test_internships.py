"""
Internship postings and applications.
"""

from datetime import datetime, timedelta

import pytest

from jobzee.services.mongo_service import utcnow


def _payload(**fields):
    now = utcnow()
    payload = {
        "title": "Python Intern",
        "description": "Help build internal tooling in Python",
        "location": "Pune",
        "location_type": "hybrid",
        "duration": 3,
        "stipend": {"amount": 15000},
        "start_date": (now + timedelta(days=30)).isoformat(),
        "application_deadline": (now + timedelta(days=14)).isoformat(),
        "skills": ["Python", "Git"],
    }
    payload.update(fields)
    return payload


@pytest.fixture
def open_internship(client, make_employer):
    employer, headers = make_employer(is_verified=True)
    internship = client.post("/api/internships", headers=headers, json=_payload()).json()["internship"]
    return employer, headers, internship


class TestCreate:

    def test_verified_employer_publishes_immediately(self, open_internship):
        _, _, internship = open_internship
        assert internship["status"] == "active"
        assert internship["applications_count"] == 0

    def test_unverified_employer_waits_for_review(self, client, make_employer):
        _, headers = make_employer()

        response = client.post("/api/internships", headers=headers, json=_payload())

        assert response.status_code == 201
        assert response.json()["internship"]["status"] == "pending"

    def test_deadline_after_start_is_rejected(self, client, make_employer):
        _, headers = make_employer(is_verified=True)
        now = utcnow()

        response = client.post("/api/internships", headers=headers, json=_payload(
            start_date=(now + timedelta(days=5)).isoformat(),
            application_deadline=(now + timedelta(days=10)).isoformat(),
        ))

        assert response.status_code == 422

    def test_mixed_timezone_dates_are_compared_in_utc(self, client, db, make_employer):
        _, headers = make_employer(is_verified=True)

        accepted = client.post("/api/internships", headers=headers, json=_payload(
            start_date="2030-06-01T00:00:00Z",
            application_deadline="2030-05-01T00:00:00",
        ))
        # 06:00 IST is 00:30 UTC, half an hour after the start
        rejected = client.post("/api/internships", headers=headers, json=_payload(
            start_date="2030-06-01T00:00:00",
            application_deadline="2030-06-01T06:00:00+05:30",
        ))

        assert accepted.status_code == 201
        assert rejected.status_code == 422
        stored = db.internships.find_one()
        assert stored["start_date"] == datetime(2030, 6, 1)
        assert stored["application_deadline"] == datetime(2030, 5, 1)

    def test_unpaid_internship_drops_stipend(self, client, make_employer):
        _, headers = make_employer(is_verified=True)

        response = client.post("/api/internships", headers=headers, json=_payload(is_unpaid=True))

        assert response.json()["internship"]["stipend"] is None

    def test_pending_internship_cannot_be_opened_by_employer(self, client, make_employer):
        _, headers = make_employer()
        internship = client.post("/api/internships", headers=headers, json=_payload()).json()["internship"]

        response = client.patch(f"/api/internships/{internship['id']}/status", headers=headers,
                                json={"status": "active"})

        assert response.status_code == 403


def test_listing_shows_only_open_internships(client, open_internship, make_employer):
    _, headers = make_employer()
    client.post("/api/internships", headers=headers, json=_payload(title="Pending Intern"))

    body = client.get("/api/internships").json()

    assert [i["title"] for i in body["internships"]] == ["Python Intern"]


def test_categories_count_skills(client, open_internship):
    body = client.get("/api/internships/categories").json()
    assert {"name": "Python", "count": 1} in body["categories"]


def test_update_rejects_deadline_after_existing_start(client, open_internship):
    _, headers, internship = open_internship

    response = client.put(f"/api/internships/{internship['id']}", headers=headers, json={
        "application_deadline": (utcnow() + timedelta(days=60)).isoformat()
    })

    assert response.status_code == 422


class TestApply:

    def test_apply_then_duplicate(self, client, db, open_internship, make_user):
        employer, _, internship = open_internship
        _, headers = make_user(resume="https://files.example.com/cv.pdf", skills=["Python"])

        first = client.post(f"/api/internships/{internship['id']}/apply", headers=headers, json={})
        second = client.post(f"/api/internships/{internship['id']}/apply", headers=headers, json={})

        assert first.status_code == 201
        assert first.json()["application"]["resume_link"] == "https://files.example.com/cv.pdf"
        assert second.status_code == 409
        assert db.internships.find_one()["applications_count"] == 1
        assert db.employer_notifications.count_documents({"employer_id": employer["_id"]}) == 1

    def test_closed_internship(self, client, db, open_internship, make_user):
        _, _, internship = open_internship
        db.internships.update_one({}, {"$set": {"status": "closed"}})
        _, headers = make_user()

        response = client.post(f"/api/internships/{internship['id']}/apply", headers=headers, json={})

        assert response.status_code == 400

    def test_deadline_passed(self, client, db, open_internship, make_user):
        _, _, internship = open_internship
        db.internships.update_one({}, {"$set": {"application_deadline": utcnow() - timedelta(days=1)}})
        _, headers = make_user()

        response = client.post(f"/api/internships/{internship['id']}/apply", headers=headers, json={})

        assert response.status_code == 400

    def test_employer_reviews_applications(self, client, db, open_internship, make_user):
        _, employer_headers, internship = open_internship
        user, headers = make_user()
        application = client.post(f"/api/internships/{internship['id']}/apply", headers=headers,
                                  json={"cover_letter": "Keen to learn"}).json()["application"]

        listing = client.get(f"/api/internships/{internship['id']}/applications", headers=employer_headers).json()
        updated = client.put(f"/api/internships/applications/{application['id']}/status",
                             headers=employer_headers, json={"status": "shortlisted"})

        assert listing["count"] == 1
        assert updated.json()["application"]["status"] == "shortlisted"
        assert db.user_notifications.find_one({"user_id": user["_id"]})["data"]["status"] == "shortlisted"


def test_delete_removes_applications(client, db, open_internship, make_user):
    _, employer_headers, internship = open_internship
    _, headers = make_user()
    client.post(f"/api/internships/{internship['id']}/apply", headers=headers, json={})

    response = client.delete(f"/api/internships/{internship['id']}", headers=employer_headers)

    assert response.json()["applications_removed"] == 1
    assert db.internships.count_documents({}) == 0
