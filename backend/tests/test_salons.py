from datetime import datetime

from app import models


def create_salon(client, admin, auth_headers, **fields):
    payload = {"name": "Encre Noire", "address": "12 rue Oberkampf", "postal_code": "75011", **fields}
    return client.post("/api/v1/salons/", json=payload, headers=auth_headers(admin))


def test_admin_creates_salon_with_slug(client, admin, auth_headers):
    r = create_salon(client, admin, auth_headers, price_range_min=80, price_range_max=400)
    assert r.status_code == 201
    body = r.json()
    assert body["slug"] == "encre-noire"
    assert body["full_address"] == "12 rue Oberkampf, 75011"
    assert body["verification_status"] == "unverified"
    assert body["is_verified"] is False
    assert body["artists"] == []
    assert body["price_range"].startswith("80 €")


def test_duplicate_names_get_suffixed_slugs(client, admin, auth_headers):
    create_salon(client, admin, auth_headers)
    r = create_salon(client, admin, auth_headers)
    assert r.json()["slug"] == "encre-noire-2"


def test_non_admin_cannot_create(client, make_user, auth_headers):
    user = make_user()
    r = create_salon(client, user, auth_headers)
    assert r.status_code == 403


def test_list_filters_and_pagination(client, admin, auth_headers, make_city):
    paris = make_city("Paris")
    lyon = make_city("Lyon")
    create_salon(client, admin, auth_headers, name="Encre Noire", city_id=paris.id, is_featured=True)
    create_salon(client, admin, auth_headers, name="Atelier Saint-Jean", city_id=lyon.id)
    create_salon(client, admin, auth_headers, name="Black Rose", city_id=paris.id)

    r = client.get("/api/v1/salons/", params={"city_id": paris.id})
    body = r.json()
    assert body["meta"]["total"] == 2
    # Featured first
    assert body["data"][0]["name"] == "Encre Noire"

    r = client.get("/api/v1/salons/", params={"limit": 2, "page": 2})
    body = r.json()
    assert body["meta"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2, "has_more": False}
    assert len(body["data"]) == 1

    r = client.get("/api/v1/salons/", params={"q": "rose"})
    assert [s["name"] for s in r.json()["data"]] == ["Black Rose"]


def test_verification_flow(client, admin, auth_headers):
    salon_id = create_salon(client, admin, auth_headers).json()["id"]
    r = client.patch(
        f"/api/v1/salons/{salon_id}/verification",
        json={"status": "verified", "notes": "Checked SIRET"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["is_verified"] is True
    assert body["verified_at"] is not None

    verified = client.get("/api/v1/salons/", params={"verified": True}).json()
    assert verified["meta"]["total"] == 1

    r = client.patch(
        f"/api/v1/salons/{salon_id}/verification",
        json={"status": "contacted"},
        headers=auth_headers(admin),
    )
    assert r.json()["verified_at"] is None


def test_update_renames_slug(client, admin, auth_headers):
    salon_id = create_salon(client, admin, auth_headers).json()["id"]
    r = client.put(
        f"/api/v1/salons/{salon_id}",
        json={"name": "Encre Blanche"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["slug"] == "encre-blanche"
    assert client.get("/api/v1/salons/encre-blanche").status_code == 200


def test_update_rejects_null_required_fields(client, admin, auth_headers):
    salon_id = create_salon(client, admin, auth_headers).json()["id"]
    for field in ("name", "is_active", "priority"):
        r = client.put(f"/api/v1/salons/{salon_id}", json={field: None}, headers=auth_headers(admin))
        assert r.status_code == 422, field
    assert client.get("/api/v1/salons/encre-noire").json()["name"] == "Encre Noire"


def test_admin_links_and_unlinks_artist(client, admin, auth_headers, make_artist):
    salon_id = create_salon(client, admin, auth_headers).json()["id"]
    _, artist = make_artist()

    r = client.post(
        f"/api/v1/salons/{salon_id}/artists",
        json={"artist_id": artist.id, "relationship_type": "primary"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["total_artists"] == 1
    assert body["artists"] == [
        {"id": artist.id, "stage_name": "Lea Ink", "slug": "lea-ink", "relationship_type": "primary"}
    ]

    r = client.delete(f"/api/v1/salons/{salon_id}/artists/{artist.id}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["artists"] == []
    assert r.json()["total_artists"] == 0


def test_nearby_salons(client, admin, auth_headers):
    create_salon(client, admin, auth_headers, name="Near", latitude=48.8649, longitude=2.3740)
    create_salon(client, admin, auth_headers, name="Far", latitude=45.7621, longitude=4.8272)
    r = client.get("/api/v1/salons/nearby", params={"lat": 48.86, "lng": 2.37, "radius_km": 5})
    assert [s["name"] for s in r.json()] == ["Near"]


def test_unknown_salon_404(client):
    r = client.get("/api/v1/salons/nowhere")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Salon not found", "code": "E_SALON_NOT_FOUND"}


def test_opening_hours():
    salon = models.Salon(
        name="Night Ink",
        opening_hours={
            "monday": {"open": "10:00", "close": "19:00"},
            "friday": {"open": "20:00", "close": "02:00"},
            "sunday": {"closed": True},
        },
    )
    assert salon.is_open_at(datetime(2024, 1, 1, 12, 0))  # Monday
    assert not salon.is_open_at(datetime(2024, 1, 1, 19, 0))
    assert salon.is_open_at(datetime(2024, 1, 5, 23, 30))  # Friday night
    assert not salon.is_open_at(datetime(2024, 1, 7, 12, 0))  # Sunday closed
