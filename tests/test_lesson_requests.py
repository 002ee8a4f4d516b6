"""
Tests for the lesson request approval workflow
"""

from conftest import future_iso, past_iso


def make_request(client, headers, lesson_id, days=3, message="Focus on meetings"):
    return client.post(
        "/api/lesson-requests",
        json={
            "lessonId": lesson_id,
            "requestedDate": future_iso(days),
            "requestedTime": "18:00",
            "message": message,
        },
        headers=headers,
    )


class TestCreateRequest:

    def test_creates_pending_request(self, client, student, lesson):
        response = make_request(client, student["headers"], lesson["id"])

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["message"] == "Focus on meetings"
        assert body["lesson"]["title"] == "Business English Grammar"
        assert body["user"]["id"] == student["user"]["id"]
        assert body["teacherResponse"] is None

    def test_unknown_lesson(self, client, student):
        response = make_request(client, student["headers"], "missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Lesson not found"

    def test_past_date(self, client, student, lesson):
        response = client.post(
            "/api/lesson-requests",
            json={"lessonId": lesson["id"], "requestedDate": past_iso(), "requestedTime": "18:00"},
            headers=student["headers"],
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot book past dates"

    def test_message_defaults_to_empty(self, client, student, lesson):
        response = client.post(
            "/api/lesson-requests",
            json={"lessonId": lesson["id"], "requestedDate": future_iso(), "requestedTime": "18:00"},
            headers=student["headers"],
        )
        assert response.json()["message"] == ""

    def test_requires_auth(self, client, lesson):
        response = client.post(
            "/api/lesson-requests",
            json={"lessonId": lesson["id"], "requestedDate": future_iso(), "requestedTime": "18:00"},
        )
        assert response.status_code == 401


class TestListRequests:

    def test_my_requests_are_scoped(self, client, student, other_student, lesson):
        mine = make_request(client, student["headers"], lesson["id"]).json()
        make_request(client, other_student["headers"], lesson["id"])

        response = client.get("/api/lesson-requests/my-requests", headers=student["headers"])

        assert [r["id"] for r in response.json()] == [mine["id"]]

    def test_pending_ordered_by_requested_date(self, client, student, admin, lesson):
        later = make_request(client, student["headers"], lesson["id"], days=9).json()
        sooner = make_request(client, student["headers"], lesson["id"], days=2).json()
        done = make_request(client, student["headers"], lesson["id"], days=1).json()
        client.put(f"/api/lesson-requests/{done['id']}/reject", headers=admin["headers"])

        response = client.get("/api/lesson-requests/pending", headers=admin["headers"])

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [sooner["id"], later["id"]]

    def test_pending_admin_only(self, client, student):
        response = client.get("/api/lesson-requests/pending", headers=student["headers"])
        assert response.status_code == 403

    def test_all_with_status_filter(self, client, student, admin, lesson):
        approved = make_request(client, student["headers"], lesson["id"]).json()
        make_request(client, student["headers"], lesson["id"])
        client.put(f"/api/lesson-requests/{approved['id']}/approve", headers=admin["headers"])

        everything = client.get("/api/lesson-requests", headers=admin["headers"]).json()
        filtered = client.get(
            "/api/lesson-requests", params={"status": "approved"}, headers=admin["headers"]
        ).json()

        assert len(everything) == 2
        assert [r["id"] for r in filtered] == [approved["id"]]

    def test_unknown_status_filter(self, client, admin):
        response = client.get(
            "/api/lesson-requests", params={"status": "lost"}, headers=admin["headers"]
        )
        assert response.status_code == 400

    def test_all_admin_only(self, client, student):
        response = client.get("/api/lesson-requests", headers=student["headers"])
        assert response.status_code == 403


class TestGetRequest:

    def test_owner_and_admin_can_read(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()

        for headers in (student["headers"], admin["headers"]):
            response = client.get(f"/api/lesson-requests/{created['id']}", headers=headers)
            assert response.status_code == 200
            assert response.json()["id"] == created["id"]

    def test_other_student_forbidden(self, client, student, other_student, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        response = client.get(f"/api/lesson-requests/{created['id']}", headers=other_student["headers"])
        assert response.status_code == 403

    def test_missing(self, client, student):
        response = client.get("/api/lesson-requests/missing", headers=student["headers"])
        assert response.status_code == 404
        assert response.json()["message"] == "Request not found"


class TestTransitions:

    def test_approve_with_teacher_response(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()

        response = client.put(
            f"/api/lesson-requests/{created['id']}/approve",
            json={"teacherResponse": "See you on Zoom"},
            headers=admin["headers"],
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Request approved"
        assert response.json()["request"]["status"] == "approved"
        assert response.json()["request"]["teacherResponse"] == "See you on Zoom"

    def test_approve_without_body(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        response = client.put(f"/api/lesson-requests/{created['id']}/approve", headers=admin["headers"])
        assert response.status_code == 200
        assert response.json()["request"]["teacherResponse"] is None

    def test_approve_twice(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        client.put(f"/api/lesson-requests/{created['id']}/approve", headers=admin["headers"])

        response = client.put(f"/api/lesson-requests/{created['id']}/approve", headers=admin["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Request is not pending"

    def test_reject_after_approve(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        client.put(f"/api/lesson-requests/{created['id']}/approve", headers=admin["headers"])

        response = client.put(f"/api/lesson-requests/{created['id']}/reject", headers=admin["headers"])

        assert response.status_code == 400
        detail = client.get(f"/api/lesson-requests/{created['id']}", headers=admin["headers"]).json()
        assert detail["status"] == "approved"

    def test_reject(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        response = client.put(
            f"/api/lesson-requests/{created['id']}/reject",
            json={"teacherResponse": "Fully booked that week"},
            headers=admin["headers"],
        )
        assert response.json()["message"] == "Request rejected"
        assert response.json()["request"]["status"] == "rejected"

    def test_student_cannot_approve(self, client, student, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        response = client.put(f"/api/lesson-requests/{created['id']}/approve", headers=student["headers"])
        assert response.status_code == 403

    def test_approve_missing(self, client, admin):
        response = client.put("/api/lesson-requests/missing/approve", headers=admin["headers"])
        assert response.status_code == 404


class TestCancelRequest:

    def test_owner_cancels(self, client, student, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()

        response = client.put(f"/api/lesson-requests/{created['id']}/cancel", headers=student["headers"])

        assert response.status_code == 200
        assert response.json()["message"] == "Request cancelled"
        assert response.json()["request"]["status"] == "cancelled"

    def test_cancel_twice(self, client, student, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        client.put(f"/api/lesson-requests/{created['id']}/cancel", headers=student["headers"])

        response = client.put(f"/api/lesson-requests/{created['id']}/cancel", headers=student["headers"])

        assert response.status_code == 400
        assert response.json()["message"] == "Can only cancel pending requests"

    def test_non_owner_forbidden(self, client, student, other_student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()

        for headers in (other_student["headers"], admin["headers"]):
            response = client.put(f"/api/lesson-requests/{created['id']}/cancel", headers=headers)
            assert response.status_code == 403

    def test_cancel_after_approval(self, client, student, admin, lesson):
        created = make_request(client, student["headers"], lesson["id"]).json()
        client.put(f"/api/lesson-requests/{created['id']}/approve", headers=admin["headers"])

        response = client.put(f"/api/lesson-requests/{created['id']}/cancel", headers=student["headers"])

        assert response.status_code == 400
