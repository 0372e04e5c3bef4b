"""
API tests for class rosters and enrolment
"""
import pytest

from models.account import Role
from services.schemas import ControllerProfile

from conftest import STUDENT_PAYLOAD

CLASS_PAYLOAD = {
    "name": "Physics 10A",
    "description": "Mechanics and motion for grade ten",
    "subject": "Physics",
    "grade": "10",
    "schedule": {"day": "Monday", "startTime": "09:00", "endTime": "10:30", "room": "Lab 2"},
    "maxStudents": 2,
}


@pytest.fixture()
def physics(client, controller_headers):
    resp = client.post("/classes", json=CLASS_PAYLOAD, headers=controller_headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def _register(client, controller_headers, name, email):
    resp = client.post("/register", json=dict(STUDENT_PAYLOAD, name=name, email=email), headers=controller_headers)
    return resp.get_json()["student"]


class TestClasses:

    def test_create_defaults_teacher_to_creator(self, physics, controller):
        assert physics["teacher"]["id"] == controller.account.id
        assert physics["schedule"]["room"] == "Lab 2"
        assert physics["availableSpots"] == 2
        assert physics["isActive"] is True

    def test_create_with_named_teacher(self, client, services, controller_headers):
        other = services.issuer.issue(Role.CONTROLLER, ControllerProfile(name="Ms Rao", email="rao@example.com"))
        resp = client.post("/classes", json=dict(CLASS_PAYLOAD, teacher=other.account.id), headers=controller_headers)
        assert resp.get_json()["data"]["teacher"]["name"] == "Ms Rao"

        missing = client.post("/classes", json=dict(CLASS_PAYLOAD, teacher=999), headers=controller_headers)
        assert missing.status_code == 404

    def test_validation(self, client, controller_headers):
        bad = dict(CLASS_PAYLOAD, name="", maxStudents=0,
                   schedule={"day": "Funday", "startTime": "25:00", "endTime": "10:00", "room": ""})
        resp = client.post("/classes", json=bad, headers=controller_headers)
        assert resp.status_code == 400
        assert set(resp.get_json()["details"]) == {
            "name", "maxStudents", "schedule.day", "schedule.startTime", "schedule.room",
        }

    def test_students_cannot_create(self, client, student_headers):
        assert client.post("/classes", json=CLASS_PAYLOAD, headers=student_headers).status_code == 403

    def test_update_and_delete(self, client, controller_headers, physics):
        resp = client.put(f"/classes/{physics['id']}", json={"grade": "11", "isActive": False},
                          headers=controller_headers)
        data = resp.get_json()["data"]
        assert (data["grade"], data["isActive"]) == ("11", False)
        assert data["name"] == "Physics 10A"

        assert client.delete(f"/classes/{physics['id']}", headers=controller_headers).status_code == 200
        assert client.get(f"/classes/{physics['id']}", headers=controller_headers).status_code == 404
        assert client.delete(f"/classes/{physics['id']}", headers=controller_headers).status_code == 404

    def test_list_filters(self, client, controller_headers, student_headers, physics):
        client.post("/classes", json=dict(CLASS_PAYLOAD, name="Art 9", subject="Art", grade="9"),
                    headers=controller_headers)

        everything = client.get("/classes", headers=student_headers).get_json()
        assert everything["pagination"]["total"] == 2
        art = client.get("/classes?subject=Art", headers=student_headers).get_json()
        assert [c["name"] for c in art["data"]] == ["Art 9"]
        assert client.get("/classes?grade=10", headers=student_headers).get_json()["pagination"]["total"] == 1

    def test_requires_session(self, client):
        assert client.get("/classes").status_code == 401


class TestEnrolment:

    def test_enroll_and_unenroll(self, client, controller_headers, student_headers, registered, physics):
        resp = client.post(f"/classes/{physics['id']}/students", json={"studentId": registered["id"]},
                           headers=controller_headers)
        assert resp.status_code == 200
        assert [s["id"] for s in resp.get_json()["data"]["students"]] == [registered["id"]]

        mine = client.get(f"/classes?student={registered['id']}", headers=student_headers).get_json()
        assert [c["id"] for c in mine["data"]] == [physics["id"]]

        resp = client.delete(f"/classes/{physics['id']}/students/{registered['id']}", headers=controller_headers)
        assert resp.get_json()["data"]["students"] == []
        again = client.delete(f"/classes/{physics['id']}/students/{registered['id']}", headers=controller_headers)
        assert again.status_code == 404

    def test_double_enrolment_conflicts(self, client, controller_headers, registered, physics):
        url = f"/classes/{physics['id']}/students"
        client.post(url, json={"studentId": registered["id"]}, headers=controller_headers)
        resp = client.post(url, json={"studentId": registered["id"]}, headers=controller_headers)
        assert resp.status_code == 409
        assert resp.get_json()["retryable"] is False

    def test_full_class(self, client, controller_headers, registered, physics):
        url = f"/classes/{physics['id']}/students"
        second = _register(client, controller_headers, "Sara Ali", "sara@example.com")
        third = _register(client, controller_headers, "Omar Khan", "omar@example.com")
        for student in (registered, second):
            assert client.post(url, json={"studentId": student["id"]}, headers=controller_headers).status_code == 200

        resp = client.post(url, json={"studentId": third["id"]}, headers=controller_headers)
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "Class is full"

        shrink = client.put(f"/classes/{physics['id']}", json={"maxStudents": 1}, headers=controller_headers)
        assert shrink.status_code == 409

    def test_enrol_validation(self, client, controller_headers, physics):
        url = f"/classes/{physics['id']}/students"
        assert client.post(url, json={"studentId": "abc"}, headers=controller_headers).status_code == 400
        assert client.post(url, json={"studentId": 999}, headers=controller_headers).status_code == 404

    def test_students_see_only_own_enrolments(self, client, controller_headers, student_headers, physics):
        other = _register(client, controller_headers, "Sara Ali", "sara@example.com")
        assert client.get(f"/classes?student={other['id']}", headers=student_headers).status_code == 403
