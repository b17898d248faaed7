def seed_cities(make_city):
    paris = make_city(
        "Paris", postal_code="75000", latitude=48.8566, longitude=2.3522,
        population=2133111, department_name="Paris", is_featured=True, priority=10,
    )
    lyon = make_city("Lyon", postal_code="69000", latitude=45.764, longitude=4.8357, is_featured=True, priority=8)
    versailles = make_city("Versailles", postal_code="78000", latitude=48.8049, longitude=2.1204)
    make_city("Ghost Town", slug="ghost-town", is_active=False)
    return paris, lyon, versailles


def test_list_active_cities_by_priority(client, make_city):
    seed_cities(make_city)
    r = client.get("/api/v1/cities/")
    assert r.status_code == 200
    names = [c["name"] for c in r.json()]
    assert names == ["Paris", "Lyon", "Versailles"]


def test_city_display_fields(client, make_city):
    seed_cities(make_city)
    paris = client.get("/api/v1/cities/").json()[0]
    assert paris["display_name"] == "Paris (75000)"
    assert paris["formatted_population"] == "2\u202f133\u202f111"


def test_featured_and_search(client, make_city):
    seed_cities(make_city)
    featured = client.get("/api/v1/cities/", params={"featured": True}).json()
    assert {c["slug"] for c in featured} == {"paris", "lyon"}

    hits = client.get("/api/v1/cities/", params={"q": "vers"}).json()
    assert [c["slug"] for c in hits] == ["versailles"]


def test_find_by_postal_code(client, make_city):
    seed_cities(make_city)
    hits = client.get("/api/v1/cities/", params={"postal_code": "69000"}).json()
    assert [c["slug"] for c in hits] == ["lyon"]


def test_nearby_sorted_by_distance(client, make_city):
    seed_cities(make_city)
    r = client.get("/api/v1/cities/nearby", params={"lat": 48.85, "lng": 2.35, "radius_km": 50})
    assert r.status_code == 200
    hits = r.json()
    assert [c["slug"] for c in hits] == ["paris", "versailles"]
    assert hits[0]["distance_km"] < hits[1]["distance_km"]


def test_nearby_rejects_bad_coordinates(client):
    r = client.get("/api/v1/cities/nearby", params={"lat": 123, "lng": 2})
    assert r.status_code == 422


def test_city_detail_counts(client, make_city, make_user, make_artist):
    paris, _, _ = seed_cities(make_city)
    make_user(email="local@test.com", city_id=paris.id)
    make_artist("Lea Ink", city_id=paris.id)

    r = client.get("/api/v1/cities/paris")
    assert r.status_code == 200
    body = r.json()
    assert body["users_count"] == 1
    assert body["artists_count"] == 1


def test_inactive_or_unknown_city_is_404(client, make_city):
    seed_cities(make_city)
    for slug in ("ghost-town", "atlantis"):
        r = client.get(f"/api/v1/cities/{slug}")
        assert r.status_code == 404
        assert r.json()["code"] == "E_CITY_NOT_FOUND"
