# File: tests/conftest.py

"""
Shared fixtures. Each test gets its own application bound to a fresh SQLite
file and upload directory under ``tmp_path``.
"""

import os
import tempfile

# Environment for the module-level ``tazasu.main.app`` created at import time.
_IMPORT_DIR = tempfile.mkdtemp(prefix="tazasu-tests-")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_IMPORT_DIR, "uploads"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_IMPORT_DIR}/import.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from tazasu.core.config import Settings
from tazasu.core.security import hash_password
from tazasu.main import create_application
from tazasu.models.user import ROLE_ADMIN
from tazasu.services import user_service

PASSWORD = "secret1"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        rate_limit_max=10_000,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_application(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app, client):
    session = app.state.db.session()
    try:
        yield session
    finally:
        session.close()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return bearer


@pytest.fixture
def register(client):
    def _register(name="Alice", email="alice@example.com", password=PASSWORD, **extra):
        data = {"name": name, "email": email, "password": password, **extra}
        return client.post("/api/auth/register", data=data)

    return _register


@pytest.fixture
def user_token(register) -> str:
    resp = register()
    assert resp.status_code == 201, resp.text
    return resp.json()["token"]


@pytest.fixture
def user_headers(user_token) -> dict:
    return bearer(user_token)


@pytest.fixture
def other_headers(register) -> dict:
    resp = register(name="Bob", email="bob@example.com")
    assert resp.status_code == 201, resp.text
    return bearer(resp.json()["token"])


@pytest.fixture
def admin_headers(client, db, settings) -> dict:
    user_service.create_user(
        db,
        name="Admin",
        email="admin@example.com",
        password_hash=hash_password("admin123", settings),
        role=ROLE_ADMIN,
    )
    resp = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "admin123"}
    )
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["token"])


@pytest.fixture
def submit_complaint(client):
    def _submit(headers, lat="43.0", lng="76.0", files=None, **fields):
        data = {
            "name": "Aigul",
            "description": "Cloudy water with a smell",
            "location_lat": lat,
            "location_lng": lng,
            **fields,
        }
        return client.post("/api/complaints/", data=data, files=files, headers=headers)

    return _submit
