import os
import tempfile
from pathlib import Path

# Settings are read at import time; pin test values before importing the app.
os.environ.setdefault("PYTEST_RUN", "1")
os.environ.setdefault("REDIS_URL", "disabled")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SKIP_DB_BOOTSTRAP", "1")
os.environ.setdefault("ADMIN_EMAILS", "admin@blottr.dev")
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="blottr-uploads-"))
os.environ.setdefault("ENV_FILE", str(Path(__file__).resolve().parent / ".env.test"))

import fakeredis  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models, schemas  # noqa: E402
from app.api import auth as auth_module  # noqa: E402
from app.api.auth import create_access_token  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.crud import crud_artist  # noqa: E402
from app.database import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import BaseModel  # noqa: E402
from app.models.tattoo import TattooStatus  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.services.monitoring_service import monitoring_service  # noqa: E402
from app.services.query_cache import query_cache  # noqa: E402
from app.utils import email as email_module  # noqa: E402
from app.utils import redis_cache  # noqa: E402
from app.utils.auth import get_password_hash  # noqa: E402

PASSWORD = "Secret123"
ADMIN_EMAIL = "admin@blottr.dev"


def setup_app():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    BaseModel.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)

    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    return Session


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Fresh in-memory Redis for every test; the global rate limit is off."""
    fake = fakeredis.FakeStrictRedis(decode_responses=True)
    fake.flushall()
    monkeypatch.setattr(redis_cache, "get_redis_client", lambda: fake)
    monkeypatch.setattr(auth_module, "get_redis_client", lambda: fake)
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    return fake


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""
    outbox = []

    async def fake_send(msg):
        outbox.append(msg)

    monkeypatch.setattr(email_module, "_send_async", fake_send)
    return outbox


@pytest.fixture(autouse=True)
def reset_process_state():
    query_cache.clear()
    monitoring_service.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def Session():
    return setup_app()


@pytest.fixture
def client(Session):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}

    return _headers


@pytest.fixture
def make_user(Session):
    def _make(email="client@test.com", role=UserRole.CLIENT, full_name="Test User", **attrs):
        db = Session()
        user = models.User(
            email=email,
            password=get_password_hash(PASSWORD),
            full_name=full_name,
            role=role,
            **attrs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        db.close()
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(email=ADMIN_EMAIL, full_name="Admin")


@pytest.fixture
def make_city(Session):
    def _make(name="Paris", slug=None, **attrs):
        db = Session()
        city = models.City(name=name, slug=slug or name.lower(), **attrs)
        db.add(city)
        db.commit()
        db.refresh(city)
        db.close()
        return city

    return _make


@pytest.fixture
def make_artist(Session, make_user):
    def _make(stage_name="Lea Ink", email=None, **attrs):
        user = make_user(email=email or f"{stage_name.lower().replace(' ', '.')}@test.com", role=UserRole.ARTIST)
        db = Session()
        artist = crud_artist.artist.create(
            db, schemas.ArtistCreate(stage_name=stage_name, **attrs), user_id=user.id
        )
        db.close()
        return user, artist

    return _make


@pytest.fixture
def make_tattoo(Session):
    def _make(artist_id, title="Rose on forearm", published=True, **attrs):
        db = Session()
        tattoo = models.Tattoo(
            artist_id=artist_id,
            title=title,
            slug=title.lower().replace(" ", "-"),
            **attrs,
        )
        if published:
            tattoo.publish()
        else:
            tattoo.status = TattooStatus.DRAFT
        db.add(tattoo)
        db.commit()
        db.refresh(tattoo)
        db.close()
        return tattoo

    return _make

