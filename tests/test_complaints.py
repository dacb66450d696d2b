# File: tests/test_complaints.py

import pytest


def test_end_to_end_scenario(client, submit_complaint, admin_headers, auth):
    reg = client.post(
        "/api/auth/register", data={"name": "Alice", "email": "a@x.com", "password": "secret1"}
    )
    assert reg.status_code == 201
    token = reg.json()["token"]

    login = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == reg.json()["user"]["id"]

    created = submit_complaint(auth(token), lat="43.0", lng="76.0")
    assert created.status_code == 201
    complaint_id = created.json()["complaint"]["id"]

    detail = client.get(f"/api/complaints/{complaint_id}").json()["complaint"]
    assert detail["status"] == "pending"

    patched = client.patch(
        f"/api/admin/complaints/{complaint_id}/status",
        json={"status": "resolved"},
        headers=admin_headers,
    )
    assert patched.status_code == 200
    assert patched.json()["complaint"]["status"] == "resolved"

    resolved = client.get("/api/complaints/public", params={"status": "resolved"}).json()
    assert complaint_id in [c["id"] for c in resolved["complaints"]]
    pending = client.get("/api/complaints/public", params={"status": "pending"}).json()
    assert complaint_id not in [c["id"] for c in pending["complaints"]]


def test_create_returns_id_and_timestamp(submit_complaint, user_headers):
    resp = submit_complaint(user_headers, location_address="Almaty, Abay 150")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert set(body["complaint"]) == {"id", "created_at"}


def test_create_requires_auth(submit_complaint):
    assert submit_complaint({}).status_code == 401


@pytest.mark.parametrize(
    "fields",
    [
        {"name": ""},
        {"description": "   "},
        {"lat": ""},
        {"lat": "abc"},
        {"lng": "nan"},
        {"lat": "10.0"},
        {"lng": "120.5"},
    ],
)
def test_create_rejects_bad_input(submit_complaint, user_headers, fields):
    resp = submit_complaint(user_headers, **fields)
    assert resp.status_code == 400


def test_create_with_photo(client, submit_complaint, user_headers):
    resp = submit_complaint(
        user_headers, files={"photo": ("leak.jpg", b"jpeg-data", "image/jpeg")}
    )
    assert resp.status_code == 201
    complaint_id = resp.json()["complaint"]["id"]
    photo_url = client.get(f"/api/complaints/{complaint_id}").json()["complaint"]["photo_url"]
    assert photo_url.startswith("/uploads/complaints/complaint-")
    assert client.get(photo_url).content == b"jpeg-data"


def test_create_with_unsupported_photo_type(submit_complaint, user_headers):
    resp = submit_complaint(
        user_headers, files={"photo": ("leak.bmp", b"BM...", "image/bmp")}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "UNSUPPORTED_TYPE"


def test_public_list_filters_orders_and_counts(
    client, submit_complaint, user_headers, admin_headers
):
    ids = [submit_complaint(user_headers, name=f"c{i}").json()["complaint"]["id"] for i in range(5)]
    for complaint_id in ids[:3]:
        client.patch(
            f"/api/admin/complaints/{complaint_id}/status",
            json={"status": "resolved"},
            headers=admin_headers,
        )

    resp = client.get("/api/complaints/public", params={"status": "resolved", "limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert [c["status"] for c in body["complaints"]] == ["resolved", "resolved"]
    assert [c["id"] for c in body["complaints"]] == [ids[2], ids[1]]
    assert body["pagination"] == {"limit": 2, "offset": 0, "total": 3}
    assert body["stats"] == {"total": 5, "pending": 2, "in_progress": 0, "resolved": 3}
    assert body["complaints"][0]["user_name"] == "Alice"

    second_page = client.get(
        "/api/complaints/public", params={"status": "resolved", "limit": 2, "offset": 2}
    ).json()
    assert [c["id"] for c in second_page["complaints"]] == [ids[0]]
    assert second_page["pagination"]["total"] == 3


def test_public_list_ignores_unknown_status(client, submit_complaint, user_headers):
    submit_complaint(user_headers)
    submit_complaint(user_headers)
    body = client.get("/api/complaints/public", params={"status": "bogus"}).json()
    assert len(body["complaints"]) == 2
    assert body["pagination"]["total"] == 2


def test_my_list_only_contains_own(client, submit_complaint, user_headers, other_headers):
    submit_complaint(user_headers, name="mine")
    submit_complaint(other_headers, name="theirs")

    body = client.get("/api/complaints/my", headers=user_headers).json()
    assert [c["name"] for c in body["complaints"]] == ["mine"]
    assert body["stats"]["total"] == 1
    assert body["pagination"] == {"limit": 50, "offset": 0, "total": 1}


def test_get_complaint_joins_owner(client, submit_complaint, user_headers):
    complaint_id = submit_complaint(user_headers).json()["complaint"]["id"]
    resp = client.get(f"/api/complaints/{complaint_id}")
    assert resp.status_code == 200
    complaint = resp.json()["complaint"]
    assert complaint["user_name"] == "Alice"
    assert complaint["user_email"] == "alice@example.com"
    assert complaint["location_lat"] == pytest.approx(43.0)


def test_get_missing_complaint_is_404(client):
    assert client.get("/api/complaints/999").status_code == 404


def test_get_non_numeric_id_is_400(client):
    assert client.get("/api/complaints/abc").status_code == 400


def test_update_requires_some_field(client, submit_complaint, user_headers):
    complaint_id = submit_complaint(user_headers).json()["complaint"]["id"]
    resp = client.put(f"/api/complaints/{complaint_id}", data={"name": "  "}, headers=user_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "NO_FIELDS_PROVIDED"


def test_update_address_and_keeps_status(client, submit_complaint, user_headers):
    complaint_id = submit_complaint(user_headers, location_address="Old street").json()[
        "complaint"
    ]["id"]
    resp = client.put(
        f"/api/complaints/{complaint_id}",
        data={"location_address": "New street", "status": "resolved"},
        headers=user_headers,
    )
    assert resp.status_code == 200
    complaint = resp.json()["complaint"]
    assert complaint["location_address"] == "New street"
    assert complaint["status"] == "pending"


def test_owner_delete_removes_record_and_photo(client, app, submit_complaint, user_headers):
    created = submit_complaint(
        user_headers, files={"photo": ("leak.png", b"png-data", "image/png")}
    )
    complaint_id = created.json()["complaint"]["id"]
    photo_url = client.get(f"/api/complaints/{complaint_id}").json()["complaint"]["photo_url"]
    photo_path = app.state.uploads.path_for(photo_url)
    assert photo_path.is_file()

    resp = client.delete(f"/api/complaints/{complaint_id}", headers=user_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/complaints/{complaint_id}").status_code == 404
    assert not photo_path.exists()
