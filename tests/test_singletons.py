from datetime import timedelta

import database
import main


def test_about_defaults_when_never_written(client):
    r = client.get("/api/about")
    assert r.status_code == 200
    assert r.json()["data"] == {"content": "", "image": ""}


def test_about_put_replaces_the_single_document(client, auth_headers, mock_db, monkeypatch):
    payload = {"content": "<p>Our history</p>", "image": "/about.jpg"}
    first = client.put("/api/about", json=payload, headers=auth_headers).json()["data"]

    later = database.utcnow() + timedelta(minutes=5)
    monkeypatch.setattr(main, "utcnow", lambda: later)
    second = client.put("/api/about", json=payload, headers=auth_headers).json()["data"]

    assert mock_db["about"].count_documents({}) == 1
    assert first["_id"] == second["_id"]
    assert second["updatedAt"] != first["updatedAt"]
    strip = lambda doc: {k: v for k, v in doc.items() if k != "updatedAt"}
    assert strip(first) == strip(second)


def test_about_put_drops_fields_not_sent(client, auth_headers):
    client.put("/api/about", json={"content": "<p>a</p>", "image": "/a.jpg"}, headers=auth_headers)
    data = client.put("/api/about", json={"content": "<p>b</p>"}, headers=auth_headers).json()["data"]
    assert data["content"] == "<p>b</p>"
    assert data["image"] == ""
    assert client.get("/api/about").json()["data"]["content"] == "<p>b</p>"


def test_about_requires_content_and_a_token(client, auth_headers):
    r = client.put("/api/about", json={"image": "/a.jpg"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "content is required"
    assert client.put("/api/about", json={"content": "x"}).status_code == 401


def test_settings_empty_until_written(client):
    body = client.get("/api/settings").json()
    assert body["success"] is True
    assert body["data"] == {}


def test_settings_put_merges(client, auth_headers, mock_db, admin_user):
    client.put("/api/settings", json={"siteName": "Greenfield", "contactEmail": "info@gf.edu"}, headers=auth_headers)
    r = client.put(
        "/api/settings",
        json={"maintenanceMode": True, "seoSettings": {"metaTitle": "Greenfield School"}},
        headers=auth_headers,
    )
    assert r.status_code == 200
    data = client.get("/api/settings").json()["data"]
    assert data["siteName"] == "Greenfield"
    assert data["contactEmail"] == "info@gf.edu"
    assert data["maintenanceMode"] is True
    assert data["seoSettings"]["metaTitle"] == "Greenfield School"
    assert data["type"] == "site"
    assert data["updatedBy"] == admin_user["id"]
    assert mock_db["settings"].count_documents({}) == 1


def test_settings_require_a_token(client):
    r = client.put("/api/settings", json={"siteName": "x"})
    assert r.status_code == 401
