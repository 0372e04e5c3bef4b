"""
School portal - test configuration and fixtures
"""
import pytest

from app import create_app
from config import TestConfig
from models.account import Role
from services.schemas import ControllerProfile

STUDENT_PAYLOAD = {
    "name": "Ahmed Hassan",
    "email": "ahmed@example.com",
    "class": "10",
    "division": "A",
    "parentName": "Ali",
    "place": "City",
}


@pytest.fixture()
def app(tmp_path):
    """A fresh app with its own SQLite file; the app context stays pushed for the test."""
    app = create_app(
        {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}"},
        config_object=TestConfig,
    )
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def services(app):
    return app.extensions["school"]


@pytest.fixture()
def controller(services):
    profile = ControllerProfile(name="Primary Controller", email="pc@example.com",
                                username="pcadmin", password="controller-pass")
    return services.issuer.issue(Role.CONTROLLER, profile)


@pytest.fixture()
def controller_headers(services, controller):
    return {"Authorization": f"Bearer {services.tokens.issue(controller.account)}"}


@pytest.fixture()
def registered(client, controller_headers):
    """Registers the sample student over HTTP and returns the `student` block."""
    resp = client.post("/register", json=STUDENT_PAYLOAD, headers=controller_headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["student"]


@pytest.fixture()
def student_headers(client, registered):
    resp = client.post("/login", json={
        "username": registered["username"],
        "password": registered["password"],
        "role": "student",
    })
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}
