import logging

import pytest
from fastapi import HTTPException

from app import crud
from app.services.monitoring_service import monitoring_service
from app.utils.errors import ArtistNotFound, DomainError, error_response

ORIGIN = "http://localhost:3000"


def test_error_response_logs(caplog):
    caplog.set_level(logging.ERROR, logger="app.utils.errors")
    with pytest.raises(HTTPException) as info:
        raise error_response("Invalid", {"field": "bad"})
    assert info.value.status_code == 422
    assert info.value.detail == {"message": "Invalid", "field_errors": {"field": "bad"}}
    assert any(
        "Invalid" in r.getMessage() and "'field': 'bad'" in r.getMessage()
        for r in caplog.records
    )


def test_domain_error_payload():
    assert ArtistNotFound().to_payload() == {
        "success": False,
        "message": "Artist not found",
        "code": "E_ARTIST_NOT_FOUND",
    }
    assert DomainError("Custom").to_payload()["message"] == "Custom"


def test_validation_errors_list_locations(client):
    r = client.post("/api/v1/contact-inquiries/", json={"email": "a@b.fr"})
    assert r.status_code == 422
    missing = {err["loc"][-1] for err in r.json()["detail"]}
    assert {"full_name", "subject", "message"} <= missing


def test_domain_error_keeps_cors_headers(client):
    r = client.get("/api/v1/artists/ghost", headers={"Origin": ORIGIN})
    assert r.status_code == 404
    assert r.headers.get("access-control-allow-origin") == ORIGIN


def test_unexpected_error_is_500_and_recorded(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(crud.artist, "find_by_slug", boom)
    r = client.get("/api/v1/artists/lea-ink", headers={"Origin": ORIGIN})
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error"}
    assert r.headers.get("access-control-allow-origin") == ORIGIN
    assert monitoring_service.error_counts() == {"RuntimeError": 1}


def test_openapi_lists_routes(client):
    spec = client.get("/openapi.json")
    assert spec.status_code == 200
    paths = spec.json()["paths"]
    assert "/auth/login" in paths
    assert "/api/v1/contact-inquiries/" in paths
    assert "/api/v1/artists/{slug}" in paths
    assert "/pages/{page}" not in paths
