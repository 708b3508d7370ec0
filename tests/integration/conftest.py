"""
Fixtures for API tests: a fresh schema per test, a temporary file store,
a recording mail sender and factories for schools, users and opportunities.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from eduopps.core.auth import create_access_token, hash_password
from eduopps.db.database import engine
from eduopps.db.schema import metadata
from eduopps.db.seed import init_db
from eduopps.main import app
from eduopps.services import email_service, opportunity_service, school_service, user_service
from eduopps.services.file_storage import LocalFileStorage, reset_file_storage

PASSWORD = "correct-horse-42"


@pytest.fixture(autouse=True)
def database():
    metadata.drop_all(bind=engine)
    init_db(seed=True)
    yield
    metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def file_storage(tmp_path):
    storage = LocalFileStorage(str(tmp_path / "uploads"))
    reset_file_storage(storage)
    yield storage
    reset_file_storage(None)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Every e-mail the app tries to send, in order."""
    sent = []

    def fake_send(to_email, subject, html_body):
        sent.append({"to": to_email, "subject": subject, "html": html_body})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send)
    return sent


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_school():
    def _make(name="Royal Academy"):
        return school_service.create_school({"name": name, "description": f"{name} description"})
    return _make


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(role="student", school=None, **overrides):
        counter["n"] += 1
        n = counter["n"]
        role_row = user_service.get_role_by_name(role)
        data = {
            "email": f"{role}{n}@royal.edu",
            "username": f"{role}{n}",
            "first_name": role.capitalize(),
            "last_name": f"User{n}",
            "role_id": role_row["id"],
            "school_id": school["id"] if school else None,
        }
        data.update(overrides)
        return user_service.create_user(data, hash_password(PASSWORD))
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": str(user["id"]), "role": user["role"]})
        return {"Authorization": f"Bearer {token}"}
    return _headers


def opportunity_data(**overrides):
    now = datetime.utcnow()
    data = {
        "title": "Software Internship",
        "organization": "Acme Corp",
        "description": "Summer internship building web tools",
        "start_date": now + timedelta(days=30),
        "end_date": now + timedelta(days=60),
        "application_deadline": now + timedelta(days=20),
        "location": "London",
        "is_virtual": False,
        "opportunity_type": "internship",
        "industry": "technology",
        "age_group": ["16-18"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_opportunity():
    def _make(creator, **overrides):
        return opportunity_service.create_opportunity(opportunity_data(**overrides), creator)
    return _make


@pytest.fixture
def school(make_school):
    return make_school()


@pytest.fixture
def other_school(make_school):
    return make_school("Kings College")


@pytest.fixture
def student(make_user, school):
    return make_user("student", school)


@pytest.fixture
def teacher(make_user, school):
    return make_user("teacher", school)


@pytest.fixture
def admin(make_user, school):
    return make_user("admin", school)


@pytest.fixture
def superadmin(make_user):
    return make_user("superadmin")
