from app.api import auth
from app.core.config import settings
from app.models.user import User


def register(client, email="new@test.com", password="Secret123", **extra):
    payload = {"email": email, "password": password, "full_name": "New Person", **extra}
    return client.post("/auth/register", json=payload)


def login(client, email="new@test.com", password="Secret123"):
    return client.post("/auth/login", data={"username": email, "password": password})


def test_register_and_login(client):
    r = register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["email"] == "new@test.com"
    assert body["role"] == "client"
    assert body["display_name"] == "New Person"
    assert "password" not in body

    r = login(client)
    assert r.status_code == 200
    data = r.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["user"]["email"] == "new@test.com"
    assert "access_token" in r.cookies


def test_register_artist_role(client):
    r = register(client, email="ink@test.com", role="artist")
    assert r.status_code == 201
    assert r.json()["role"] == "artist"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    r = register(client, email="NEW@test.com")
    assert r.status_code == 409


def test_register_weak_password(client):
    r = register(client, password="alllowercase")
    assert r.status_code == 422


def test_register_throttled_per_ip(client, monkeypatch):
    monkeypatch.setattr(settings, "REGISTER_RATE_LIMIT", 2)
    assert register(client, email="a@test.com").status_code == 201
    assert register(client, email="b@test.com").status_code == 201
    r = register(client, email="c@test.com")
    assert r.status_code == 429
    assert "Retry-After" in r.headers


def test_login_wrong_password(client):
    register(client)
    r = login(client, password="Wrong1234")
    assert r.status_code == 401


def test_login_lockout(client, monkeypatch):
    register(client)
    monkeypatch.setattr(settings, "MAX_LOGIN_ATTEMPTS", 2)

    assert login(client, password="Bad12345").status_code == 401
    assert login(client, password="Bad12345").status_code == 401
    # Locked out even with the right password
    assert login(client).status_code == 429


def test_login_deactivated(client, Session):
    register(client)
    db = Session()
    user = db.query(User).filter(User.email == "new@test.com").one()
    user.is_active = False
    db.commit()
    db.close()
    assert login(client).status_code == 403


def test_me_with_bearer_and_cookie(client):
    register(client)
    token = login(client).json()["access_token"]

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == "new@test.com"

    # TestClient keeps the cookie set at login
    r = client.get("/auth/me")
    assert r.status_code == 200


def test_me_requires_token(client):
    r = client.get("/auth/me")
    assert r.status_code == 401


def test_refresh_rotates_token(client):
    register(client)
    first = login(client).json()["refresh_token"]

    r = client.post("/auth/refresh", json={"token": first})
    assert r.status_code == 200
    second = r.json()["refresh_token"]
    assert second != first

    # The previous token is no longer accepted
    r = client.post("/auth/refresh", json={"token": first})
    assert r.status_code == 401


def test_refresh_rejects_access_token(client):
    register(client)
    access = login(client).json()["access_token"]
    r = client.post("/auth/refresh", json={"token": access})
    assert r.status_code == 400


def test_logout_clears_refresh(client, Session):
    register(client)
    tokens = login(client).json()
    r = client.post("/auth/logout", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200

    db = Session()
    user = db.query(User).filter(User.email == "new@test.com").one()
    assert user.refresh_token_hash is None
    db.close()

    r = client.post("/auth/refresh", json={"token": tokens["refresh_token"]})
    assert r.status_code == 401


def test_access_token_has_type():
    token = auth.create_access_token({"sub": "x@test.com"})
    assert auth.decode_token(token)["typ"] == "access"
