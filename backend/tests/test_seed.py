from app import models
from app.services.seed import seed


def test_seed_is_idempotent(Session):
    db = Session()
    first = seed(db)
    assert first == {"cities": 4, "tags": 7, "salons": 2, "artists": 3, "tattoos_created": 3}

    second = seed(db)
    assert second["tattoos_created"] == 0
    assert db.query(models.Artist).count() == 3
    assert db.query(models.User).count() == 3
    assert db.query(models.Tattoo).count() == 3
    db.close()


def test_seeded_catalog_is_browsable(Session, client):
    db = Session()
    seed(db)
    db.close()

    artists = client.get("/api/v1/artists/", params={"featured": True}).json()
    assert {a["slug"] for a in artists["data"]} == {"lea-ink", "hugo-irezumi"}

    lea = client.get("/api/v1/artists/lea-ink").json()
    assert lea["total_tattoos"] == 1
    assert lea["salons"][0]["salon_slug"] == "encre-noire"
    assert lea["salons"][0]["relationship_type"] == "primary"

    tattoos = client.get("/api/v1/tattoos/", params={"tag": "floral"}).json()
    assert [t["title"] for t in tattoos["data"]] == ["Peony forearm piece"]
    assert tattoos["data"][0]["tags"][0] == "fine-line"
