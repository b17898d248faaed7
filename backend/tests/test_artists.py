from app import models
from app.models.user import UserRole
from app.utils import redis_cache


def artist_user(client, make_user, auth_headers, email="ink@test.com"):
    user = make_user(email=email, role=UserRole.ARTIST)
    return user, auth_headers(user)


def test_create_and_read_own_profile(client, make_user, auth_headers, make_city):
    paris = make_city("Paris")
    _, headers = artist_user(client, make_user, auth_headers)

    r = client.post(
        "/api/v1/artists/me",
        json={
            "stage_name": "Zoé Encre",
            "art_styles": ["Fine_Line", "floral", "fine_line"],
            "instagram_handle": "@zoe.encre",
            "city_id": paris.id,
            "min_price": 80,
            "max_price": 300,
        },
        headers=headers,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "zoe-encre"
    assert body["art_styles"] == ["fine_line", "floral"]
    assert body["instagram_handle"] == "zoe.encre"
    assert body["verification_status"] == "unverified"
    assert body["price_range"] == "80,00 € - 300,00 €"

    r = client.get("/api/v1/artists/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["stage_name"] == "Zoé Encre"


def test_profile_requires_artist_role(client, make_user, auth_headers):
    user = make_user()
    r = client.post("/api/v1/artists/me", json={"stage_name": "Nope"}, headers=auth_headers(user))
    assert r.status_code == 403


def test_second_profile_conflicts(client, make_user, auth_headers):
    _, headers = artist_user(client, make_user, auth_headers)
    assert client.post("/api/v1/artists/me", json={"stage_name": "One"}, headers=headers).status_code == 201
    r = client.post("/api/v1/artists/me", json={"stage_name": "Two"}, headers=headers)
    assert r.status_code == 409


def test_price_order_validated(client, make_user, auth_headers):
    _, headers = artist_user(client, make_user, auth_headers)
    r = client.post(
        "/api/v1/artists/me",
        json={"stage_name": "Pricey", "min_price": 500, "max_price": 100},
        headers=headers,
    )
    assert r.status_code == 422


def test_single_price_bound_checked_against_stored(client, make_user, auth_headers):
    _, headers = artist_user(client, make_user, auth_headers)
    client.post(
        "/api/v1/artists/me",
        json={"stage_name": "Pricey", "min_price": 100, "max_price": 500},
        headers=headers,
    )

    r = client.put("/api/v1/artists/me", json={"min_price": 900}, headers=headers)
    assert r.status_code == 422
    assert r.json()["detail"]["field_errors"] == {"min_price": "greater_than_max_price"}

    r = client.put("/api/v1/artists/me", json={"min_price": 900, "max_price": None}, headers=headers)
    assert r.status_code == 200
    assert r.json()["min_price"] == 900


def test_update_rejects_null_required_fields(client, make_user, auth_headers):
    _, headers = artist_user(client, make_user, auth_headers)
    client.post("/api/v1/artists/me", json={"stage_name": "Lea Ink"}, headers=headers)

    for field in ("stage_name", "currency", "is_accepting_new_clients"):
        r = client.put("/api/v1/artists/me", json={field: None}, headers=headers)
        assert r.status_code == 422, field
        assert r.json()["detail"][0]["loc"][-1] == field

    assert client.get("/api/v1/artists/me", headers=headers).json()["stage_name"] == "Lea Ink"


def test_public_profile_counts_views(client, make_artist, Session):
    _, artist = make_artist()
    assert client.get("/api/v1/artists/lea-ink").status_code == 200
    assert client.get("/api/v1/artists/lea-ink").status_code == 200
    db = Session()
    assert db.get(models.Artist, artist.id).profile_views == 2
    db.close()


def test_unknown_artist_404(client):
    r = client.get("/api/v1/artists/ghost")
    assert r.status_code == 404
    assert r.json()["code"] == "E_ARTIST_NOT_FOUND"


def test_list_filters(client, make_artist, make_city):
    paris = make_city("Paris")
    make_artist("Lea Ink", art_styles=["fine_line"], city_id=paris.id, min_price=80, max_price=300)
    make_artist("Hugo Irezumi", art_styles=["japanese"], min_price=200, max_price=1200)
    make_artist("Nina Realism", art_styles=["realistic"], min_price=150)

    def slugs(**params):
        return [a["slug"] for a in client.get("/api/v1/artists/", params=params).json()["data"]]

    assert slugs(city_id=paris.id) == ["lea-ink"]
    assert slugs(style="JAPANESE") == ["hugo-irezumi"]
    assert slugs(q="nina") == ["nina-realism"]
    assert set(slugs(min_price=250)) == {"lea-ink", "hugo-irezumi"}
    assert set(slugs(max_price=100)) == {"lea-ink"}
    assert slugs(sort="price_asc") == ["lea-ink", "nina-realism", "hugo-irezumi"]


def test_list_rejects_unknown_sort(client):
    r = client.get("/api/v1/artists/", params={"sort": "random"})
    assert r.status_code == 422
    assert "sort" in r.json()["detail"]["field_errors"]


def test_list_is_cached_and_invalidated(client, make_artist, fake_redis, make_user, auth_headers):
    make_artist("Lea Ink")
    first = client.get("/api/v1/artists/").json()
    assert first["meta"]["total"] == 1
    assert list(fake_redis.scan_iter(f"{redis_cache.ARTIST_LIST_KEY_PREFIX}:*"))

    # A new profile clears the cached pages
    _, headers = artist_user(client, make_user, auth_headers, email="new@test.com")
    client.post("/api/v1/artists/me", json={"stage_name": "Newcomer"}, headers=headers)
    assert not list(fake_redis.scan_iter(f"{redis_cache.ARTIST_LIST_KEY_PREFIX}:*"))
    assert client.get("/api/v1/artists/").json()["meta"]["total"] == 2


def test_join_leave_and_primary_salon(client, make_user, auth_headers, Session):
    db = Session()
    salon_a = models.Salon(name="Salon A", slug="salon-a")
    salon_b = models.Salon(name="Salon B", slug="salon-b")
    db.add_all([salon_a, salon_b])
    db.commit()
    db.close()

    _, headers = artist_user(client, make_user, auth_headers)
    client.post("/api/v1/artists/me", json={"stage_name": "Lea Ink"}, headers=headers)

    r = client.post(
        "/api/v1/artists/me/salons",
        json={"salon_id": salon_a.id, "relationship_type": "primary", "commission_rate": 40},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["primary_salon_id"] == salon_a.id
    assert body["salons"][0]["salon_slug"] == "salon-a"
    assert body["salons"][0]["commission_rate"] == 40

    client.post("/api/v1/artists/me/salons", json={"salon_id": salon_b.id}, headers=headers)
    r = client.put("/api/v1/artists/me/primary-salon", json={"salon_id": salon_b.id}, headers=headers)
    body = r.json()
    assert body["primary_salon_id"] == salon_b.id
    kinds = {s["salon_slug"]: s["relationship_type"] for s in body["salons"]}
    assert kinds == {"salon-a": "guest", "salon-b": "primary"}

    r = client.delete(f"/api/v1/artists/me/salons/{salon_b.id}", headers=headers)
    body = r.json()
    assert body["primary_salon_id"] is None
    assert [s["salon_slug"] for s in body["salons"]] == ["salon-a"]

    r = client.delete(f"/api/v1/artists/me/salons/{salon_b.id}", headers=headers)
    assert r.status_code == 404


def test_rejoining_primary_salon_as_guest_clears_primary(client, make_user, auth_headers, Session):
    db = Session()
    salon = models.Salon(name="Salon A", slug="salon-a")
    db.add(salon)
    db.commit()
    db.close()

    _, headers = artist_user(client, make_user, auth_headers)
    client.post("/api/v1/artists/me", json={"stage_name": "Lea Ink"}, headers=headers)
    client.post(
        "/api/v1/artists/me/salons",
        json={"salon_id": salon.id, "relationship_type": "primary"},
        headers=headers,
    )

    r = client.post(
        "/api/v1/artists/me/salons",
        json={"salon_id": salon.id, "relationship_type": "guest"},
        headers=headers,
    )
    body = r.json()
    assert body["primary_salon_id"] is None
    assert [(s["salon_slug"], s["relationship_type"]) for s in body["salons"]] == [("salon-a", "guest")]


def test_admin_verifies_artist(client, make_artist, admin, auth_headers):
    _, artist = make_artist()
    r = client.patch(
        f"/api/v1/artists/{artist.id}/verification",
        json={"status": "verified"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["is_verified"] is True

    listed = client.get("/api/v1/artists/", params={"verification_status": "verified"}).json()
    assert [a["slug"] for a in listed["data"]] == ["lea-ink"]


def test_artist_tattoos_only_published(client, make_artist, make_tattoo):
    _, artist = make_artist()
    make_tattoo(artist.id, title="Rose")
    make_tattoo(artist.id, title="Draft Piece", published=False)
    r = client.get("/api/v1/artists/lea-ink/tattoos")
    assert [t["title"] for t in r.json()] == ["Rose"]
