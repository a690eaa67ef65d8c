"""
Interview scheduling by employers and candidate responses.
"""

from datetime import datetime

import pytest
from bson import ObjectId

SCHEDULE = {
    "round": 1,
    "scheduled_at": "2030-03-14T09:30:00Z",
    "duration": 45,
    "location_type": "online",
    "location_details": "https://meet.example.com/abc",
}


@pytest.fixture
def application(db, make_employer, make_job, make_user):
    employer, employer_headers = make_employer(is_verified=True)
    job = make_job(employer)
    user, user_headers = make_user()
    application_id = db.applications.insert_one({
        "user_id": user["_id"],
        "job_id": job["_id"],
        "employer_id": employer["_id"],
        "job_title": job["title"],
        "status": "shortlisted",
        "interview_ids": [],
    }).inserted_id
    return {
        "id": application_id,
        "employer": employer,
        "employer_headers": employer_headers,
        "user": user,
        "user_headers": user_headers,
        "job": job,
    }


def _schedule(client, application):
    return client.post("/api/interviews", headers=application["employer_headers"],
                       json={**SCHEDULE, "application_id": str(application["id"])})


def test_schedule_updates_application_and_notifies(client, db, application):
    response = _schedule(client, application)

    assert response.status_code == 201
    interview = response.json()["interview"]
    assert interview["status"] == "scheduled"
    assert interview["candidate_response"]["status"] == "pending"

    stored_application = db.applications.find_one({"_id": application["id"]})
    assert stored_application["status"] == "interview-scheduled"
    assert stored_application["interview_ids"] == [ObjectId(interview["id"])]

    stored_interview = db.interviews.find_one({"_id": ObjectId(interview["id"])})
    # stored as naive UTC
    assert stored_interview["scheduled_at"] == datetime(2030, 3, 14, 9, 30)

    notification = db.user_notifications.find_one({"user_id": application["user"]["_id"]})
    assert notification["type"] == "interview_reminder"


def test_schedule_with_id_in_path(client, application):
    response = client.post(f"/api/interviews/applications/{application['id']}/schedule",
                           headers=application["employer_headers"], json=SCHEDULE)
    assert response.status_code == 201


def test_only_owning_employer_can_schedule(client, application, make_employer):
    _, headers = make_employer(is_verified=True)

    response = client.post("/api/interviews", headers=headers,
                           json={**SCHEDULE, "application_id": str(application["id"])})

    assert response.status_code == 403


def test_candidate_lists_interviews_with_job_details(client, application):
    _schedule(client, application)

    body = client.get("/api/interviews/my", headers=application["user_headers"]).json()

    assert body["total"] == 1
    assert body["interviews"][0]["job_title"] == application["job"]["title"]


def test_completed_interview_moves_application_on(client, db, application):
    interview_id = _schedule(client, application).json()["interview"]["id"]

    response = client.patch(f"/api/interviews/{interview_id}/status", headers=application["employer_headers"],
                            json={"status": "completed", "result": "passed"})

    assert response.status_code == 200
    assert db.applications.find_one({"_id": application["id"]})["status"] == "interviewed"


class TestRespond:

    def test_accept_notifies_employer(self, client, db, application):
        interview_id = _schedule(client, application).json()["interview"]["id"]

        response = client.patch(f"/api/interviews/{interview_id}/respond", headers=application["user_headers"],
                                json={"response": "accepted", "note": "See you then"})

        assert response.status_code == 200
        assert response.json()["candidate_response"]["status"] == "accepted"
        stored = db.interviews.find_one({"_id": ObjectId(interview_id)})
        assert stored["candidate_response"]["note"] == "See you then"
        notification = db.employer_notifications.find_one({"employer_id": application["employer"]["_id"]})
        assert notification["data"]["response"] == "accepted"

    def test_invalid_response(self, client, application):
        interview_id = _schedule(client, application).json()["interview"]["id"]

        response = client.patch(f"/api/interviews/{interview_id}/respond", headers=application["user_headers"],
                                json={"response": "maybe"})

        assert response.status_code == 400

    def test_other_candidate_is_forbidden(self, client, application, make_user):
        interview_id = _schedule(client, application).json()["interview"]["id"]
        _, other_headers = make_user()

        response = client.patch(f"/api/interviews/{interview_id}/respond", headers=other_headers,
                                json={"response": "declined"})

        assert response.status_code == 403

    def test_unknown_interview(self, client, application):
        response = client.patch(f"/api/interviews/{ObjectId()}/respond", headers=application["user_headers"],
                                json={"response": "accepted"})
        assert response.status_code == 404
