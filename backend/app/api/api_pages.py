# app/api/api_pages.py
"""Inertia-style page objects for the web client.

With an ``X-Inertia`` header the page object is returned as JSON; plain
browser requests get a minimal HTML shell with the object embedded in
``data-page``.
"""

import html
import os
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, ORJSONResponse
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.user import User
from ..schemas.artist import ArtistSummary
from ..schemas.city import CityResponse
from ..schemas.common import build_meta
from ..schemas.tattoo import TattooResponse
from ..utils.errors import NotFoundError
from ..utils.json import dumps
from .dependencies import get_optional_user

router = APIRouter(tags=["pages"])

ASSET_VERSION = os.getenv("INERTIA_VERSION", "1")

PropsBuilder = Callable[[Session], Dict[str, Any]]


def _home_props(db: Session) -> Dict[str, Any]:
    return {
        "featured_artists": [
            ArtistSummary.model_validate(a).model_dump(mode="json") for a in crud.artist.find_featured(db)
        ],
        "featured_cities": [
            CityResponse.model_validate(c).model_dump(mode="json") for c in crud.city.featured(db, limit=8)
        ],
        "latest_tattoos": [
            TattooResponse.model_validate(t).model_dump(mode="json") for t in crud.tattoo.latest(db, limit=12)
        ],
    }


def _artists_props(db: Session) -> Dict[str, Any]:
    items, total = crud.artist.list_artists(db, page=1, limit=20)
    return {
        "artists": [ArtistSummary.model_validate(a).model_dump(mode="json") for a in items],
        "meta": build_meta(total, 1, 20).model_dump(),
    }


def _tattoos_props(db: Session) -> Dict[str, Any]:
    items, total = crud.tattoo.list_published(db, page=1, limit=24)
    return {
        "tattoos": [TattooResponse.model_validate(t).model_dump(mode="json") for t in items],
        "meta": build_meta(total, 1, 24).model_dump(),
    }


PAGES: Dict[str, tuple[str, Optional[PropsBuilder]]] = {
    "home": ("home", _home_props),
    "artists": ("artists/index", _artists_props),
    "tattoos": ("tattoos/index", _tattoos_props),
    "login": ("auth/login", None),
    "register": ("auth/register", None),
    "contact": ("contact", None),
}


def _user_prop(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "email": user.email, "role": user.role.value}


def _render(request: Request, db: Session, user: Optional[User], page: str):
    if page not in PAGES:
        raise NotFoundError("Page not found")
    component, builder = PAGES[page]
    props = builder(db) if builder else {}
    props["user"] = _user_prop(user)
    page_object = {
        "component": component,
        "props": props,
        "url": request.url.path,
        "version": ASSET_VERSION,
    }
    if request.headers.get("x-inertia"):
        return ORJSONResponse(page_object, headers={"X-Inertia": "true", "Vary": "X-Inertia"})
    body = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>Blottr</title></head>"
        f"<body><div id=\"app\" data-page=\"{html.escape(dumps(page_object))}\"></div></body></html>"
    )
    return HTMLResponse(body)


@router.get("/", include_in_schema=False)
def home_page(
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    return _render(request, db, user, "home")


@router.get("/pages/{page}", include_in_schema=False)
def page(
    page: str,
    request: Request,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    return _render(request, db, user, page)
