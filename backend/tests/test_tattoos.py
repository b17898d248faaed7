import pytest

from app import models
from app.models.tattoo import compute_engagement


@pytest.fixture
def owner(make_artist, auth_headers):
    user, artist = make_artist()
    return artist, auth_headers(user)


def test_create_starts_as_draft(client, owner):
    _, headers = owner
    r = client.post("/api/v1/tattoos/", json={"title": "Koi Sleeve", "style": "japanese"}, headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "koi-sleeve"
    assert body["style"] == "japanese"
    assert body["status"] == "draft"
    assert body["is_published"] is False


def test_draft_visible_to_owner_only(client, owner, make_tattoo, Session):
    artist, headers = owner
    draft = make_tattoo(artist.id, title="Secret Sketch", published=False)

    assert client.get("/api/v1/tattoos/secret-sketch").status_code == 404
    r = client.get("/api/v1/tattoos/secret-sketch", headers=headers)
    assert r.status_code == 200

    db = Session()
    assert db.get(models.Tattoo, draft.id).view_count == 0
    db.close()


def test_owner_views_are_not_counted(client, owner, make_tattoo):
    artist, headers = owner
    make_tattoo(artist.id, title="Rose")
    client.get("/api/v1/tattoos/rose", headers=headers)
    r = client.get("/api/v1/tattoos/rose")
    assert r.json()["view_count"] == 1


def test_engagement_score(client, owner, make_tattoo):
    artist, _ = owner
    tattoo = make_tattoo(artist.id, title="Rose")

    client.get("/api/v1/tattoos/rose")
    client.post(f"/api/v1/tattoos/{tattoo.id}/like")
    client.post(f"/api/v1/tattoos/{tattoo.id}/like")
    r = client.post(f"/api/v1/tattoos/{tattoo.id}/share")
    body = r.json()
    assert (body["view_count"], body["like_count"], body["share_count"]) == (1, 2, 1)
    assert body["engagement_score"] == pytest.approx(2.1)
    assert body["is_high_engagement"] is False


def test_engagement_is_capped():
    assert compute_engagement(100000, 0, 0) == 999.99
    assert compute_engagement(10, 4, 3) == 6.0


def test_cannot_like_a_draft(client, owner, make_tattoo):
    artist, _ = owner
    draft = make_tattoo(artist.id, title="Draft", published=False)
    assert client.post(f"/api/v1/tattoos/{draft.id}/like").status_code == 404


def test_lifecycle_transitions(client, owner, Session):
    artist, headers = owner
    tattoo_id = client.post("/api/v1/tattoos/", json={"title": "Dagger"}, headers=headers).json()["id"]

    r = client.post(f"/api/v1/tattoos/{tattoo_id}/submit", headers=headers)
    assert r.json()["status"] == "pending_review"

    r = client.post(f"/api/v1/tattoos/{tattoo_id}/publish", headers=headers)
    assert r.json()["status"] == "published"
    assert r.json()["published_at"] is not None

    db = Session()
    assert db.get(models.Artist, artist.id).total_tattoos == 1
    db.close()

    r = client.post(f"/api/v1/tattoos/{tattoo_id}/archive", headers=headers)
    assert r.json()["status"] == "archived"

    r = client.post(f"/api/v1/tattoos/{tattoo_id}/publish", headers=headers)
    assert r.status_code == 400
    assert r.json()["detail"]["field_errors"] == {"status": "archived"}


def test_publish_refreshes_cached_artist_list(client, owner):
    _, headers = owner
    listed = client.get("/api/v1/artists/").json()
    assert listed["data"][0]["total_tattoos"] == 0

    tattoo_id = client.post("/api/v1/tattoos/", json={"title": "Dagger"}, headers=headers).json()["id"]
    client.post(f"/api/v1/tattoos/{tattoo_id}/submit", headers=headers)
    client.post(f"/api/v1/tattoos/{tattoo_id}/publish", headers=headers)

    listed = client.get("/api/v1/artists/").json()
    assert listed["data"][0]["total_tattoos"] == 1

    client.post(f"/api/v1/tattoos/{tattoo_id}/archive", headers=headers)
    assert client.get("/api/v1/artists/").json()["data"][0]["total_tattoos"] == 0


def test_update_rejects_null_title(client, owner):
    _, headers = owner
    tattoo_id = client.post("/api/v1/tattoos/", json={"title": "Dagger"}, headers=headers).json()["id"]

    for field in ("title", "allows_inquiries", "price_currency"):
        r = client.put(f"/api/v1/tattoos/{tattoo_id}", json={field: None}, headers=headers)
        assert r.status_code == 422, field

    r = client.put(f"/api/v1/tattoos/{tattoo_id}", json={"description": None}, headers=headers)
    assert r.status_code == 200
    assert r.json()["title"] == "Dagger"


def test_unknown_action_404(client, owner):
    _, headers = owner
    tattoo_id = client.post("/api/v1/tattoos/", json={"title": "Dagger"}, headers=headers).json()["id"]
    r = client.post(f"/api/v1/tattoos/{tattoo_id}/explode", headers=headers)
    assert r.status_code == 404


def test_other_artist_cannot_edit(client, owner, make_artist, auth_headers):
    _, headers = owner
    tattoo_id = client.post("/api/v1/tattoos/", json={"title": "Dagger"}, headers=headers).json()["id"]
    intruder, _ = make_artist("Hugo Irezumi")
    r = client.put(f"/api/v1/tattoos/{tattoo_id}", json={"title": "Mine now"}, headers=auth_headers(intruder))
    assert r.status_code == 403


def test_attach_tags(client, owner, make_tattoo, Session):
    artist, headers = owner
    tattoo = make_tattoo(artist.id, title="Rose")
    db = Session()
    db.add_all([models.Tag(name="Floral", slug="floral"), models.Tag(name="Rose", slug="rose")])
    db.commit()
    db.close()

    r = client.post(
        f"/api/v1/tattoos/{tattoo.id}/tags",
        json={"slugs": ["floral", "Rose"], "primary": "rose"},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["tags"] == ["rose", "floral"]

    db = Session()
    assert db.query(models.Tag).filter_by(slug="rose").one().usage_count == 1
    db.close()

    # Attaching again does not count usage twice
    client.post(f"/api/v1/tattoos/{tattoo.id}/tags", json={"slugs": ["rose"]}, headers=headers)
    db = Session()
    assert db.query(models.Tag).filter_by(slug="rose").one().usage_count == 1
    db.close()


def test_attach_unknown_tag_422(client, owner, make_tattoo):
    artist, headers = owner
    tattoo = make_tattoo(artist.id, title="Rose")
    r = client.post(f"/api/v1/tattoos/{tattoo.id}/tags", json={"slugs": ["unicorn"]}, headers=headers)
    assert r.status_code == 422
    assert r.json()["detail"]["field_errors"] == {"unicorn": "not_found"}


def test_list_published_filters_and_sorts(client, owner, make_tattoo, Session):
    artist, _ = owner
    make_tattoo(artist.id, title="Koi", style="japanese", view_count=5, engagement_score=0.5)
    make_tattoo(artist.id, title="Skull", style="realistic", like_count=10, engagement_score=5)
    make_tattoo(artist.id, title="Draft", published=False)

    body = client.get("/api/v1/tattoos/").json()
    assert body["meta"]["total"] == 2

    popular = client.get("/api/v1/tattoos/", params={"sort": "popular"}).json()
    assert [t["title"] for t in popular["data"]] == ["Skull", "Koi"]

    japanese = client.get("/api/v1/tattoos/", params={"style": "japanese"}).json()
    assert [t["title"] for t in japanese["data"]] == ["Koi"]

    assert client.get("/api/v1/tattoos/", params={"sort": "hot"}).status_code == 422
