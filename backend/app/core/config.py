from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, model_validator
from typing import Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Blottr API"

    # JWT configuration (provide a fallback for local development)
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Use an absolute path so running the app from the repo root or backend/
    # always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'blottr.db'}"

    # Redis connection URL for caching, lockouts and rate limits.
    # Empty, "none" or "disabled" switches to a no-op client.
    REDIS_URL: str = "redis://localhost:6379/0"

    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:3333"]
    CORS_ALLOW_ALL: bool = False

    FRONTEND_URL: str = "http://localhost:3333"

    # Optional cookie domain to scope auth cookies across subdomains,
    # e.g. ".blottr.fr"
    COOKIE_DOMAIN: str = ""

    # Login lockout
    MAX_LOGIN_ATTEMPTS: int = 5
    LOGIN_ATTEMPT_WINDOW: int = 300  # seconds

    # Registration throttle per client IP
    REGISTER_RATE_LIMIT: int = 5
    REGISTER_RATE_WINDOW: int = 900  # seconds

    # Global per-IP, per-route request limit
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW: int = 900  # seconds

    # Peers whose X-Forwarded-For is believed (comma separated IPs or CIDRs, "*" for any)
    TRUSTED_PROXIES: str = "127.0.0.1"

    # SMTP email settings
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "no-reply@blottr.fr"

    # Admin allowlist: explicit emails and/or whole domains (comma separated)
    ADMIN_EMAILS: str = ""
    ADMIN_DOMAINS: str = ""

    # Contact inquiry reference images
    UPLOADS_DIR: str = str(BASE_DIR / "uploads")
    MAX_REFERENCE_IMAGES: int = 5
    MAX_REFERENCE_IMAGE_BYTES: int = 5 * 1024 * 1024

    LOG_LEVEL: str = "INFO"

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("ADMIN_EMAILS", "ADMIN_DOMAINS", "FRONTEND_URL", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def allow_all_if_requested(cls, values: "Settings") -> "Settings":
        if values.CORS_ALLOW_ALL:
            values.CORS_ORIGINS = ["*"]
        return values

    @property
    def admin_emails(self) -> set[str]:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}

    @property
    def admin_domains(self) -> set[str]:
        return {
            d.strip().lower().lstrip("@")
            for d in self.ADMIN_DOMAINS.split(",")
            if d.strip()
        }

    model_config = SettingsConfigDict(extra="ignore", case_sensitive=True)


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()


def _dedupe(seq: list[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for item in seq:
        key = item.strip().rstrip("/")
        if not key or key in seen:
            continue
        seen.add(key)
        ordered.append(key)
    return ordered


def _collect_frontend_origins() -> list[str]:
    origins: list[str] = []
    origins.extend(settings.CORS_ORIGINS or [])
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)
    return _dedupe(origins)


FRONTEND_ORIGINS = _collect_frontend_origins()
