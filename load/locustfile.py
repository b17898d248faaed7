"""
Locust load script for the Blottr public catalog and contact form.

Simulates a visitor browsing the marketplace:
- List artists with a mix of filters and sorts (/api/v1/artists/)
- Open an artist profile and their published tattoos
- Browse the tattoo gallery and cities
- Occasionally send a contact inquiry to an artist

A second user class logs in as an admin and polls the inquiry dashboard.

Configure with env vars or Locust UI:
- HOST: pass via `--host http://localhost:8000` (defaults to it)
- BLOTTR_ADMIN: `email:password` for the dashboard user (the email must be in ADMIN_EMAILS)
- BLOTTR_SEND_INQUIRIES=0 disables the contact form task

Run:
  locust -f load/locustfile.py --host http://localhost:8000
"""

from __future__ import annotations

import logging
import os
import random
import time
from typing import Dict, List, Optional

from locust import HttpUser, between, events, task


# --- Config -------------------------------------------------------------------

DEFAULT_HOST = "http://localhost:8000"
STYLES = ["minimalist", "japanese", "realistic", "dotwork", "traditional", "linework"]
SORTS = ["featured", "rating", "newest", "price_asc", "price_desc"]
SEND_INQUIRIES = os.getenv("BLOTTR_SEND_INQUIRIES", "1").strip().lower() in {"1", "true", "yes"}
ADMIN_CREDENTIALS = os.getenv("BLOTTR_ADMIN", "admin@blottr.dev:Blottr2024!")


# --- Helpers ------------------------------------------------------------------

def _auth_header(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def _safe_json(resp) -> Dict:
    try:
        return resp.json()
    except ValueError:
        return {}


def _inquiry_payload(artist_id: int) -> Dict:
    n = random.randint(1, 10_000)
    return {
        "artist_id": artist_id,
        "full_name": "Load Tester",
        "email": f"load+{n}@blottr.dev",
        "subject": "Small fine line piece",
        "message": "Hello, I would like a small fine line rose on my wrist.",
        "project_type": random.choice(["quote", "appointment", "question"]),
        "budget": "150€",
    }


# --- Visitor ------------------------------------------------------------------

class VisitorUser(HttpUser):
    host = DEFAULT_HOST
    wait_time = between(1, 3)
    weight = 10

    artists: List[Dict] = []

    @task(8)
    def list_artists(self):
        params = {"sort": random.choice(SORTS), "page": 1, "limit": 12}
        if random.random() < 0.5:
            params["style"] = random.choice(STYLES)
        r = self.client.get("/api/v1/artists/", params=params, name="/artists")
        if r.status_code == 200:
            data = _safe_json(r).get("data") or []
            if data:
                self.artists = data

    @task(4)
    def artist_profile(self):
        if not self.artists:
            return
        slug = random.choice(self.artists)["slug"]
        self.client.get(f"/api/v1/artists/{slug}", name="/artists/[slug]")
        self.client.get(f"/api/v1/artists/{slug}/tattoos", name="/artists/[slug]/tattoos")

    @task(5)
    def tattoo_gallery(self):
        sort = "popular" if random.random() < 0.3 else "recent"
        self.client.get("/api/v1/tattoos/", params={"sort": sort, "limit": 24}, name="/tattoos")

    @task(2)
    def cities(self):
        self.client.get("/api/v1/cities/", name="/cities")

    @task(1)
    def send_inquiry(self):
        if not SEND_INQUIRIES or not self.artists:
            return
        artist_id = random.choice(self.artists)["id"]
        with self.client.post(
            "/api/v1/contact-inquiries/",
            json=_inquiry_payload(artist_id),
            name="/contact-inquiries",
            catch_response=True,
        ) as resp:
            # Rate limiting is expected under load
            if resp.status_code == 429:
                resp.success()


# --- Admin dashboard ----------------------------------------------------------

class AdminUser(HttpUser):
    """Polls the inquiry dashboard the way the back office does."""

    host = DEFAULT_HOST
    wait_time = between(5, 10)
    weight = 1
    token: Optional[str] = None
    login_cooldown_until: float = 0.0

    def on_start(self):
        self._login()

    def _login(self) -> None:
        email, _, password = ADMIN_CREDENTIALS.partition(":")
        r = self.client.post(
            "/auth/login", data={"username": email, "password": password}, name="/auth/login"
        )
        if r.status_code != 200:
            self.token = None
            retry_after = r.headers.get("Retry-After", "")
            wait = float(retry_after) if retry_after.isdigit() else 30.0
            self.login_cooldown_until = time.time() + wait
            return
        self.token = _safe_json(r).get("access_token")

    def _ensure_auth(self) -> bool:
        if self.token:
            return True
        if time.time() < self.login_cooldown_until:
            return False
        self._login()
        return bool(self.token)

    @task(3)
    def dashboard(self):
        if not self._ensure_auth():
            return
        r = self.client.get(
            "/api/v1/contact-inquiries/dashboard",
            headers=_auth_header(self.token),
            name="/contact-inquiries/dashboard",
        )
        if r.status_code == 401:
            self.token = None

    @task(1)
    def unread(self):
        if not self._ensure_auth():
            return
        self.client.get(
            "/api/v1/contact-inquiries/unread",
            headers=_auth_header(self.token),
            name="/contact-inquiries/unread",
        )


# --- Optional event hooks -----------------------------------------------------

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    logging.getLogger("locust").info("Starting Blottr load test against %s", environment.host)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    logging.getLogger("locust").info("Test finished")
