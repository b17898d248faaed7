from app.models.tag import compute_popularity


def test_admin_tags_are_approved(client, admin, auth_headers):
    r = client.post(
        "/api/v1/tags/",
        json={"name": "Fine Line", "category": "style", "is_featured": True},
        headers=auth_headers(admin),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "fine-line"
    assert body["is_approved"] is True
    assert body["display_name"] == "Fine Line"

    listed = client.get("/api/v1/tags/", params={"category": "style"}).json()
    assert [t["slug"] for t in listed] == ["fine-line"]


def test_user_proposals_wait_for_approval(client, make_user, admin, auth_headers):
    user = make_user()
    r = client.post("/api/v1/tags/", json={"name": "Kawaii"}, headers=auth_headers(user))
    assert r.status_code == 201
    assert r.json()["is_approved"] is False

    assert client.get("/api/v1/tags/").json() == []
    assert client.get("/api/v1/tags/kawaii").status_code == 404

    # Only admins moderate
    assert client.post("/api/v1/tags/kawaii/approve", headers=auth_headers(user)).status_code == 403
    r = client.post("/api/v1/tags/kawaii/approve", headers=auth_headers(admin))
    assert r.json()["is_approved"] is True
    assert client.get("/api/v1/tags/kawaii").status_code == 200


def test_child_tag_level(client, admin, auth_headers):
    parent = client.post("/api/v1/tags/", json={"name": "Animals"}, headers=auth_headers(admin)).json()
    r = client.post(
        "/api/v1/tags/",
        json={"name": "Wolf", "parent_tag_id": parent["id"]},
        headers=auth_headers(admin),
    )
    body = r.json()
    assert body["level"] == 1
    assert body["is_hierarchical"] is True

    r = client.post("/api/v1/tags/", json={"name": "Orphan", "parent_tag_id": 999}, headers=auth_headers(admin))
    assert r.status_code == 422


def test_translations(client, admin, auth_headers):
    client.post("/api/v1/tags/", json={"name": "Rose"}, headers=auth_headers(admin))
    r = client.put(
        "/api/v1/tags/rose/translations",
        json={"locale": "en", "name": "Rose", "description": "Flower"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["translations"] == {"en": {"name": "Rose", "description": "Flower"}}

    r = client.put(
        "/api/v1/tags/rose/translations",
        json={"locale": "ENGLISH", "name": "Rose"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 422


def test_search_and_unknown(client, admin, auth_headers):
    for name in ("Dragon", "Dotwork"):
        client.post("/api/v1/tags/", json={"name": name}, headers=auth_headers(admin))
    assert [t["slug"] for t in client.get("/api/v1/tags/", params={"q": "drag"}).json()] == ["dragon"]

    r = client.get("/api/v1/tags/phoenix")
    assert r.status_code == 404
    assert r.json()["code"] == "E_TAG_NOT_FOUND"


def test_popularity_formula():
    assert compute_popularity(0, False, False) == 0
    assert compute_popularity(9, False, False) == 4.61
    assert compute_popularity(9, True, True) == 8.11
    assert compute_popularity(100000, True, True) == 10.0
