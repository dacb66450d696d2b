# File: tests/test_auth.py

import threading
import time
from datetime import timedelta

from tazasu.core.security import create_access_token, hash_password
from tazasu.services import auth_service


def test_register_returns_token_and_user(register):
    resp = register(phone="+7 777 000 0000")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    user = body["user"]
    assert user["email"] == "alice@example.com"
    assert user["role"] == "user"
    assert user["phone"] == "+7 777 000 0000"
    assert "password" not in user and "password_hash" not in user


def test_register_cannot_self_assign_admin(register):
    resp = register(role="admin")
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "user"


def test_duplicate_email_in_any_case_conflicts(register):
    first = register(email="a@x.com")
    second = register(name="Other", email="A@X.COM")
    statuses = sorted([first.status_code, second.status_code])
    assert statuses == [201, 400]
    assert second.json()["code"] == "DUPLICATE_EMAIL"


def test_register_validation_errors(register):
    assert register(name="").status_code == 400
    short = register(password="12345")
    assert short.status_code == 400
    assert "at least 6" in short.json()["detail"]
    bad_email = register(email="not-an-email")
    assert bad_email.status_code == 400
    assert bad_email.json()["detail"] == "Invalid email format"


def test_register_with_avatar_stores_file(client):
    resp = client.post(
        "/api/auth/register",
        data={"name": "Alice", "email": "alice@example.com", "password": "secret1"},
        files={"avatar": ("me.png", b"\x89PNG fake", "image/png")},
    )
    assert resp.status_code == 201, resp.text
    avatar_url = resp.json()["user"]["avatar_url"]
    assert avatar_url.startswith("/uploads/avatars/avatar-")
    assert avatar_url.endswith(".png")

    served = client.get(avatar_url)
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake"


def test_login_returns_same_user(client, register):
    registered = register(email="a@x.com").json()["user"]
    resp = client.post("/api/auth/login", json={"email": "A@x.com", "password": "secret1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["id"] == registered["id"]
    assert body["token"]


def test_login_rejects_bad_credentials(client, register):
    register()
    wrong = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "nope123"}
    )
    assert wrong.status_code == 401
    unknown = client.post(
        "/api/auth/login", json={"email": "ghost@example.com", "password": "secret1"}
    )
    assert unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"]


def test_login_missing_fields_is_400(client):
    resp = client.post("/api/auth/login", json={"email": "alice@example.com"})
    assert resp.status_code == 400


def test_me_returns_current_user(client, user_headers):
    resp = client.get("/api/auth/me", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "alice@example.com"


def test_me_without_token_is_401(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["code"] == "MISSING_TOKEN"


def test_malformed_and_expired_tokens_are_403_with_distinct_reasons(
    client, settings, register, auth
):
    user = register().json()["user"]

    bad = client.get("/api/auth/me", headers=auth("not.a.jwt"))
    assert bad.status_code == 403
    assert bad.json()["detail"] == "Invalid token"

    expired_token = create_access_token(
        user["id"], user["email"], user["role"], settings, expires_delta=timedelta(seconds=-5)
    )
    expired = client.get("/api/auth/me", headers=auth(expired_token))
    assert expired.status_code == 403
    assert expired.json()["detail"] == "Token expired"


def test_token_signed_with_other_secret_is_rejected(client, settings, register, auth):
    user = register().json()["user"]
    forged = create_access_token(
        user["id"], user["email"], "admin", settings.model_copy(update={"jwt_secret": "other"})
    )
    resp = client.get("/api/auth/me", headers=auth(forged))
    assert resp.status_code == 403


def test_token_for_missing_user_is_401(client, settings, auth):
    token = create_access_token(9999, "ghost@example.com", "user", settings)
    resp = client.get("/api/auth/me", headers=auth(token))
    assert resp.status_code == 401
    assert resp.json()["code"] == "USER_NOT_FOUND"


def test_update_profile(client, user_headers):
    resp = client.put(
        "/api/auth/profile",
        data={"name": "Alice Smith", "phone": "+7 700 111 2233"},
        headers=user_headers,
    )
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["name"] == "Alice Smith"
    assert user["phone"] == "+7 700 111 2233"
    assert user["role"] == "user"


def test_update_profile_ignores_role_and_requires_fields(client, user_headers):
    resp = client.put("/api/auth/profile", data={"role": "admin"}, headers=user_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "NO_FIELDS_PROVIDED"

    me = client.get("/api/auth/me", headers=user_headers).json()["user"]
    assert me["role"] == "user"


def test_update_profile_avatar(client, user_headers):
    resp = client.put(
        "/api/auth/profile",
        files={"avatar": ("face.jpg", b"jpegbytes", "image/jpeg")},
        headers=user_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["avatar_url"].startswith("/uploads/avatars/")


def test_change_password_flow(client, user_headers):
    wrong = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong12", "newPassword": "newsecret"},
        headers=user_headers,
    )
    assert wrong.status_code == 400

    weak = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "secret1", "newPassword": "123"},
        headers=user_headers,
    )
    assert weak.status_code == 400

    ok = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "secret1", "newPassword": "newsecret"},
        headers=user_headers,
    )
    assert ok.status_code == 200
    assert ok.json()["success"] is True

    old_login = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "secret1"}
    )
    assert old_login.status_code == 401
    new_login = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "newsecret"}
    )
    assert new_login.status_code == 200


def test_registration_does_not_block_other_requests(client, register, monkeypatch):
    def slow_hash(password, settings=None):
        time.sleep(1)
        return hash_password(password, settings)

    monkeypatch.setattr(auth_service, "hash_password", slow_hash)

    result = {}
    worker = threading.Thread(target=lambda: result.update(resp=register()))
    worker.start()
    time.sleep(0.05)

    start = time.perf_counter()
    assert client.get("/api/health").status_code == 200
    elapsed = time.perf_counter() - start

    worker.join()
    assert result["resp"].status_code == 201
    assert elapsed < 0.5


def test_change_password_payload_accepts_aliases_and_field_names():
    from tazasu.schemas.user import ChangePasswordRequest

    by_alias = ChangePasswordRequest.model_validate(
        {"currentPassword": "secret1", "newPassword": "newsecret"}
    )
    by_name = ChangePasswordRequest(current_password="secret1", new_password="newsecret")
    assert by_alias == by_name
