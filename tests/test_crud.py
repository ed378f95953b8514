from datetime import timedelta

import database

BANNER = {"image": "/img/a.jpg", "heading": "Welcome", "subheading": "Hello", "order": 1}
EVENT = {"title": "Science Fair", "description": "Projects on show", "date": "2024-03-15"}


def create(client, path, payload, headers):
    r = client.post(f"/api/{path}", json=payload, headers=headers)
    assert r.status_code == 201, r.json()
    return r.json()["data"]


def test_create_event_applies_defaults(client, auth_headers, admin_user):
    r = client.post("/api/events", json=EVENT, headers=auth_headers)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Event created successfully"
    event = body["data"]
    assert event["_id"]
    assert event["isActive"] is True
    assert event["isFeatured"] is False
    assert event["date"].startswith("2024-03-15T00:00:00")
    assert event["createdBy"] == admin_user["id"]
    assert event["createdAt"] and event["updatedAt"]


def test_created_item_is_listed_and_deleted_item_is_not(client, auth_headers):
    banner = create(client, "banners", BANNER, auth_headers)

    listed = client.get("/api/banners").json()["data"]
    assert [b["_id"] for b in listed] == [banner["_id"]]

    r = client.delete(f"/api/banners/{banner['_id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Banner deleted successfully"}
    assert client.get("/api/banners").json()["data"] == []


def test_update_merges_fields_and_advances_updated_at(client, auth_headers, admin_user, monkeypatch):
    member = create(client, "team", {"name": "Ann", "designation": "Teacher", "photo": "/a.png", "order": 1}, auth_headers)
    assert member["socialLinks"] == {}

    later = database.utcnow().replace(microsecond=0) + timedelta(hours=1)
    monkeypatch.setattr(database, "utcnow", lambda: later)
    r = client.put(
        f"/api/team/{member['_id']}",
        json={"designation": "Principal", "socialLinks": {"linkedin": "https://linkedin.com/in/ann"}},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Team member updated successfully"

    fetched = client.get(f"/api/team/{member['_id']}").json()["data"]
    assert fetched["designation"] == "Principal"
    assert fetched["name"] == "Ann"
    assert fetched["socialLinks"] == {"linkedin": "https://linkedin.com/in/ann"}
    assert fetched["updatedBy"] == admin_user["id"]
    assert fetched["updatedAt"] > member["updatedAt"]


def test_first_missing_field_is_reported_in_declaration_order(client, auth_headers):
    r = client.post("/api/banners", json={}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "image is required"}

    r = client.post("/api/banners", json={"image": "/a.jpg", "subheading": "x"}, headers=auth_headers)
    assert r.json()["error"] == "heading is required"

    r = client.post("/api/banners", json={**BANNER, "heading": ""}, headers=auth_headers)
    assert r.json()["error"] == "heading is required"


def test_non_json_body_is_a_validation_error(client, auth_headers):
    r = client.post("/api/gallery", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_mutations_require_a_token(client, auth_headers):
    banner = create(client, "banners", BANNER, auth_headers)

    assert client.post("/api/banners", json=BANNER).status_code == 401
    assert client.put(f"/api/banners/{banner['_id']}", json={"heading": "x"}).status_code == 401

    r = client.delete(f"/api/banners/{banner['_id']}")
    assert r.status_code == 401
    assert r.json()["success"] is False
    assert client.get(f"/api/banners/{banner['_id']}").json()["data"]["heading"] == "Welcome"


def test_malformed_and_unknown_ids(client, auth_headers):
    r = client.put("/api/banners/not-an-id", json={"heading": "x"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid banner ID"

    missing = "0123456789abcdef01234567"
    r = client.put(f"/api/banners/{missing}", json={"heading": "x"}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Banner not found"

    assert client.delete(f"/api/banners/{missing}", headers=auth_headers).status_code == 404
    assert client.get(f"/api/gallery/{missing}").status_code == 404
    assert client.get("/api/testimonials/zzz").json()["error"] == "Invalid testimonial ID"


def test_banners_are_sorted_by_order(client, auth_headers):
    for order in (3, 1, 2):
        create(client, "banners", {**BANNER, "order": order, "heading": f"B{order}"}, auth_headers)
    headings = [b["heading"] for b in client.get("/api/banners").json()["data"]]
    assert headings == ["B1", "B2", "B3"]


def test_is_active_filter(client, auth_headers):
    create(client, "banners", {**BANNER, "heading": "On"}, auth_headers)
    create(client, "banners", {**BANNER, "heading": "Off", "isActive": False}, auth_headers)

    active = client.get("/api/banners", params={"isActive": "true"}).json()["data"]
    inactive = client.get("/api/banners", params={"isActive": "false"}).json()["data"]
    assert [b["heading"] for b in active] == ["On"]
    assert [b["heading"] for b in inactive] == ["Off"]

    r = client.get("/api/banners", params={"isActive": "maybe"})
    assert r.status_code == 400
    assert r.json()["error"] == "isActive must be true or false"


def test_event_search_is_case_insensitive_and_literal(client, auth_headers):
    create(client, "events", EVENT, auth_headers)
    create(client, "events", {"title": "Sports Day", "description": "Races", "date": "2024-03-22", "location": "Field (north)"}, auth_headers)

    found = client.get("/api/events", params={"search": "science"}).json()["data"]
    assert [e["title"] for e in found] == ["Science Fair"]

    found = client.get("/api/events", params={"search": "(north)"}).json()["data"]
    assert [e["title"] for e in found] == ["Sports Day"]


def test_events_are_listed_newest_first(client, auth_headers):
    create(client, "events", {**EVENT, "title": "Old", "date": "2023-01-01"}, auth_headers)
    create(client, "events", {**EVENT, "title": "New", "date": "2024-06-01T10:00:00Z"}, auth_headers)
    titles = [e["title"] for e in client.get("/api/events").json()["data"]]
    assert titles == ["New", "Old"]


def test_testimonial_rating_defaults_and_bounds(client, auth_headers):
    testimonial = create(client, "testimonials", {"name": "Emily", "quote": "Great school"}, auth_headers)
    assert testimonial["rating"] == 5
    assert testimonial["isFeatured"] is False

    r = client.post("/api/testimonials", json={"name": "Bob", "quote": "Meh", "rating": 9}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"].startswith("rating:")


def test_gallery_defaults_and_category_filter(client, auth_headers):
    item = create(client, "gallery", {"url": "/g/1.jpg", "alt": "Lab", "category": "facilities"}, auth_headers)
    assert item["order"] == 1
    assert item["title"] == ""
    create(client, "gallery", {"url": "/g/2.jpg", "alt": "Gate", "category": "campus"}, auth_headers)

    body = client.get("/api/gallery", params={"category": "campus"}).json()
    assert [g["alt"] for g in body["data"]] == ["Gate"]
    assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}


def test_unknown_fields_are_not_stored(client, auth_headers):
    banner = create(client, "banners", {**BANNER, "_id": "hijack", "isAdmin": True}, auth_headers)
    assert banner["_id"] != "hijack"
    assert "isAdmin" not in banner


def test_update_can_clear_optional_fields(client, auth_headers):
    event = create(client, "events", {**EVENT, "location": "Hall", "endDate": "2024-03-16"}, auth_headers)

    r = client.put(f"/api/events/{event['_id']}", json={"location": None, "endDate": None}, headers=auth_headers)
    assert r.status_code == 200

    fetched = client.get(f"/api/events/{event['_id']}").json()["data"]
    assert fetched["location"] is None
    assert fetched["endDate"] is None
    assert fetched["title"] == "Science Fair"


def test_update_rejects_null_for_required_fields(client, auth_headers):
    banner = create(client, "banners", BANNER, auth_headers)

    r = client.put(f"/api/banners/{banner['_id']}", json={"heading": None}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"].startswith("heading:")
    assert client.get(f"/api/banners/{banner['_id']}").json()["data"]["heading"] == "Welcome"

    r = client.put(f"/api/banners/{banner['_id']}", json={"buttonLabel": None}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["buttonLabel"] is None
