import html
import json
import re

from app import models

INERTIA = {"X-Inertia": "true"}


def test_home_page_object(client, make_artist, make_tattoo, make_city, Session):
    make_city("Paris", is_featured=True)
    _, artist = make_artist()
    make_tattoo(artist.id)
    db = Session()
    db.get(models.Artist, artist.id).is_featured = True
    db.commit()
    db.close()

    r = client.get("/", headers=INERTIA)
    assert r.status_code == 200
    assert r.headers["X-Inertia"] == "true"
    page = r.json()
    assert page["component"] == "home"
    assert page["url"] == "/"
    assert page["version"]
    props = page["props"]
    assert [a["slug"] for a in props["featured_artists"]] == ["lea-ink"]
    assert [c["slug"] for c in props["featured_cities"]] == ["paris"]
    assert len(props["latest_tattoos"]) == 1
    assert props["user"] is None


def test_html_shell_embeds_page(client):
    r = client.get("/pages/contact")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    match = re.search(r'data-page="([^"]*)"', r.text)
    page = json.loads(html.unescape(match.group(1)))
    assert page["component"] == "contact"
    assert page["url"] == "/pages/contact"


def test_listing_pages(client, make_artist):
    make_artist()
    page = client.get("/pages/artists", headers=INERTIA).json()
    assert page["component"] == "artists/index"
    assert page["props"]["meta"]["total"] == 1

    page = client.get("/pages/tattoos", headers=INERTIA).json()
    assert page["component"] == "tattoos/index"
    assert page["props"]["tattoos"] == []


def test_user_prop_when_signed_in(client, make_user, auth_headers):
    user = make_user()
    page = client.get("/pages/login", headers={**INERTIA, **auth_headers(user)}).json()
    assert page["component"] == "auth/login"
    assert page["props"]["user"] == {"id": user.id, "email": "client@test.com", "role": "client"}


def test_unknown_page(client):
    r = client.get("/pages/admin", headers=INERTIA)
    assert r.status_code == 404
    assert r.json()["message"] == "Page not found"
