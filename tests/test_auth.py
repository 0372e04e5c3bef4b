"""
API tests for login, QR login, profile and password reset
"""
import json

import pytest

from models.account import Role


class TestRegistrationScenario:

    def test_register_then_login(self, client, services, registered):
        assert registered["username"].startswith("ahmedhassan")
        assert registered["username"][len("ahmedhassan"):].isdigit()
        assert registered["password"]
        assert registered["qrToken"]
        assert registered["email"] == "ahmed@example.com"

        stored = services.store.students.get(registered["id"])
        assert stored.password_hash != registered["password"]

        resp = client.post("/login", json={
            "username": registered["username"],
            "password": registered["password"],
            "role": "student",
        })
        body = resp.get_json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["user"]["username"] == registered["username"]
        assert "password" not in body["user"]
        assert services.tokens.validate(body["token"]).role is Role.STUDENT


class TestLogin:

    def test_login_by_email(self, client, registered):
        resp = client.post("/login", json={
            "email": "ahmed@example.com", "password": registered["password"], "role": "student",
        })
        assert resp.status_code == 200

    def test_login_records_last_login(self, client, services, registered):
        client.post("/login", json={
            "username": registered["username"], "password": registered["password"], "role": "student",
        })
        assert services.store.students.get(registered["id"]).last_login is not None

    def test_wrong_password_is_generic(self, client, registered):
        resp = client.post("/login", json={
            "username": registered["username"], "password": "wrong", "role": "student",
        })
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "error": "Invalid credentials"}

    def test_unknown_user_is_same_error(self, client, registered):
        resp = client.post("/login", json={"username": "nobody", "password": "x", "role": "student"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_inactive_account_is_same_error(self, client, services, registered):
        student = services.store.students.get(registered["id"])
        student.is_active = False
        services.store.students.save(student)

        resp = client.post("/login", json={
            "username": registered["username"], "password": registered["password"], "role": "student",
        })
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_login_is_scoped_to_role(self, client, registered):
        resp = client.post("/login", json={
            "username": registered["username"], "password": registered["password"], "role": "controller",
        })
        assert resp.status_code == 401

    def test_controller_login_with_primary_alias(self, client, services, controller):
        resp = client.post("/login", json={"username": "pcadmin", "password": "controller-pass", "role": "primary"})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == "controller"
        assert services.tokens.validate(resp.get_json()["token"]).role is Role.CONTROLLER

    def test_unknown_role_is_validation_error(self, client):
        resp = client.post("/login", json={"username": "a", "password": "b", "role": "teacher"})
        assert resp.status_code == 400
        assert "role" in resp.get_json()["details"]

    def test_non_json_body(self, client):
        resp = client.post("/login", data="username=a", content_type="application/x-www-form-urlencoded")
        assert resp.status_code == 400

    @pytest.mark.parametrize("field, value", [
        ("password", 12345678),
        ("username", 42),
        ("email", ["a@example.com"]),
        ("role", 1),
    ])
    def test_non_string_fields_are_validation_errors(self, client, registered, field, value):
        payload = {"username": registered["username"], "password": registered["password"], "role": "student"}
        payload[field] = value
        resp = client.post("/login", json=payload)
        assert resp.status_code == 400
        assert field in resp.get_json()["details"]


class TestQrLogin:

    def test_qr_token_login(self, client, registered):
        resp = client.post("/login-qr", json={"qrToken": registered["qrToken"], "role": "student"})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["username"] == registered["username"]

    def test_scanned_json_payload_login(self, client, registered):
        scanned = json.dumps({"type": "login", "username": registered["username"],
                              "role": "student", "qrToken": registered["qrToken"]})
        resp = client.post("/login-qr", json={"qrToken": scanned, "role": "student"})
        assert resp.status_code == 200

    def test_payload_without_token_does_not_fall_back_to_username(self, client, registered):
        scanned = json.dumps({"type": "login", "username": registered["username"], "role": "student"})
        resp = client.post("/login-qr", json={"qrToken": scanned, "role": "student"})
        assert resp.status_code == 401

    def test_unknown_qr_token(self, client, registered):
        resp = client.post("/login-qr", json={"qrToken": "not-a-token", "role": "student"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Invalid credentials"

    def test_qr_token_scoped_to_role(self, client, registered):
        resp = client.post("/login-qr", json={"qrToken": registered["qrToken"], "role": "controller"})
        assert resp.status_code == 401

    def test_numeric_qr_token_is_validation_error(self, client, registered):
        resp = client.post("/login-qr", json={"qrToken": 42, "role": "student"})
        assert resp.status_code == 400
        assert resp.get_json()["details"] == {"qrToken": "Must be a string."}


class TestMe:

    def test_me_requires_token(self, client):
        resp = client.get("/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Access token required"

    def test_me_rejects_garbage_token(self, client):
        resp = client.get("/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_me_returns_fresh_profile(self, client, student_headers):
        resp = client.get("/me", headers=student_headers)
        user = resp.get_json()["user"]
        assert resp.status_code == 200
        assert user["email"] == "ahmed@example.com"
        assert user["class"] == "10"
        assert user["parentName"] == "Ali"
        assert user["qrCodeImage"].startswith("data:image/png;base64,")

    def test_me_for_deactivated_account(self, client, services, registered, student_headers):
        student = services.store.students.get(registered["id"])
        student.is_active = False
        services.store.students.save(student)
        assert client.get("/me", headers=student_headers).status_code == 401

    def test_update_profile(self, client, student_headers):
        resp = client.put("/me", headers=student_headers, json={
            "bio": "Loves chess",
            "skills": ["Chess", " Math "],
            "place": "Town",
        })
        user = resp.get_json()["user"]
        assert resp.status_code == 200
        assert user["bio"] == "Loves chess"
        assert user["skills"] == ["Chess", "Math"]
        assert user["place"] == "Town"

    @pytest.mark.parametrize("place", ["", "   ", None])
    def test_update_cannot_blank_place(self, client, student_headers, place):
        resp = client.put("/me", headers=student_headers, json={"place": place})
        assert resp.status_code == 400
        assert "place" in resp.get_json()["details"]
        assert client.get("/me", headers=student_headers).get_json()["user"]["place"] == "City"

    def test_update_rejects_protected_fields(self, client, student_headers):
        resp = client.put("/me", headers=student_headers, json={"email": "evil@example.com", "role": "controller"})
        details = resp.get_json()["details"]
        assert resp.status_code == 400
        assert set(details) == {"email", "role"}

    def test_controller_updates_name(self, client, controller_headers):
        resp = client.put("/me", headers=controller_headers, json={"name": "Head Office"})
        assert resp.get_json()["user"]["name"] == "Head Office"


class TestPasswordReset:

    def test_forgot_is_generic_for_unknown_email(self, client):
        resp = client.post("/forgot", json={"email": "nobody@example.com", "role": "student"})
        assert resp.status_code == 200
        assert resp.get_json()["success"] is True

    def test_reset_flow(self, client, services, registered):
        student = services.store.students.get(registered["id"])
        token = services.tokens.issue_reset(student)

        resp = client.post(f"/reset/{token}", json={"password": "brand-new-pass"})
        assert resp.status_code == 200

        login = client.post("/login", json={
            "username": registered["username"], "password": "brand-new-pass", "role": "student",
        })
        assert login.status_code == 200
        # single use: the hash changed so the link is dead
        again = client.post(f"/reset/{token}", json={"password": "another-pass"})
        assert again.status_code == 401

    def test_reset_rejects_short_password(self, client, services, registered):
        token = services.tokens.issue_reset(services.store.students.get(registered["id"]))
        resp = client.post(f"/reset/{token}", json={"password": "short"})
        assert resp.status_code == 400

    def test_reset_refused_after_deactivation(self, client, services, registered):
        student = services.store.students.get(registered["id"])
        token = services.tokens.issue_reset(student)
        student.is_active = False
        services.store.students.save(student)

        resp = client.post(f"/reset/{token}", json={"password": "brand-new-pass"})
        assert resp.status_code == 401

    def test_forgot_rejects_numeric_email(self, client):
        resp = client.post("/forgot", json={"email": 5, "role": "student"})
        assert resp.status_code == 400

    def test_reset_rejects_bad_token(self, client):
        resp = client.post("/reset/not-a-token", json={"password": "long-enough-pass"})
        assert resp.status_code == 401


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
