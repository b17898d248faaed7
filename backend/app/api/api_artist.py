# app/api/api_artist.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud
from ..crud.crud_artist import ARTIST_SORTS
from ..database import get_db
from ..models.artist import Artist
from ..models.user import User
from ..models.verification_status import VerificationStatus
from ..schemas.artist import (
    ArtistCreate,
    ArtistResponse,
    ArtistSalonCreate,
    ArtistSalonResponse,
    ArtistSummary,
    ArtistUpdate,
    PrimarySalonUpdate,
)
from ..schemas.common import Page, build_meta
from ..schemas.contact_inquiry import ContactInquiryResponse, InquiryFilters
from ..schemas.salon import VerificationUpdate
from ..schemas.tattoo import TattooResponse
from ..models.contact_inquiry import InquiryStatus
from ..utils import error_response
from ..utils.errors import ArtistNotFound, SalonNotFound
from ..utils.redis_cache import cache_artist_list, get_cached_artist_list
from .dependencies import get_current_admin, get_current_artist, get_current_artist_profile

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Artists"])


def artist_response(artist: Artist) -> ArtistResponse:
    data = ArtistResponse.model_validate(artist)
    data.salons = [
        ArtistSalonResponse(
            salon_id=link.salon_id,
            salon_name=link.salon.name,
            salon_slug=link.salon.slug,
            relationship_type=link.relationship_type,
            is_active=link.is_active,
            commission_rate=link.commission_rate,
            hourly_rate=link.hourly_rate,
            started_working_at=link.started_working_at,
            ended_working_at=link.ended_working_at,
        )
        for link in artist.salon_links
        if link.is_active
    ]
    return data


@router.get("/", response_model=Page[ArtistSummary])
def list_artists(
    city_id: Optional[int] = None,
    style: Optional[str] = Query(default=None, max_length=50),
    verification_status: Optional[VerificationStatus] = None,
    featured: Optional[bool] = None,
    accepting_new_clients: Optional[bool] = None,
    q: Optional[str] = Query(default=None, min_length=1, max_length=100),
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    sort: str = Query(default="featured"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    if sort not in ARTIST_SORTS:
        raise error_response(
            "Unsupported sort order.",
            {"sort": f"must be one of {', '.join(ARTIST_SORTS)}"},
        )
    filters = {
        "city_id": city_id,
        "style": style.strip().lower() if style else None,
        "verification_status": verification_status.value if verification_status else None,
        "featured": featured,
        "accepting_new_clients": accepting_new_clients,
        "q": q.strip().lower() if q else None,
        "min_price": min_price,
        "max_price": max_price,
        "sort": sort,
    }
    cached = get_cached_artist_list(page, limit=limit, filters=filters)
    if cached is not None:
        return cached

    items, total = crud.artist.list_artists(
        db,
        city_id=city_id,
        style=style,
        verification_status=verification_status,
        featured=featured,
        accepting_new_clients=accepting_new_clients,
        q=q,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        page=page,
        limit=limit,
    )
    payload = {
        "data": [ArtistSummary.model_validate(a).model_dump(mode="json") for a in items],
        "meta": build_meta(total, page, limit).model_dump(),
    }
    cache_artist_list(payload, page, limit=limit, filters=filters)
    return payload


# ─── own profile (declared before /{slug}) ────────────────────────────────


@router.get("/me", response_model=ArtistResponse)
def read_my_profile(artist: Artist = Depends(get_current_artist_profile)):
    return artist_response(artist)


@router.post("/me", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
def create_my_profile(
    artist_in: ArtistCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_artist),
):
    if crud.artist.get_by_user_id(db, current_user.id):
        raise error_response(
            "An artist profile already exists for this account.",
            {"user_id": "duplicate"},
            status.HTTP_409_CONFLICT,
        )
    artist = crud.artist.create(db, artist_in, user_id=current_user.id)
    return artist_response(artist)


@router.put("/me", response_model=ArtistResponse)
def update_my_profile(
    artist_in: ArtistUpdate,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    # One bound may be sent alone; compare it with the stored one
    sent = artist_in.model_fields_set
    min_price = artist_in.min_price if "min_price" in sent else artist.min_price
    max_price = artist_in.max_price if "max_price" in sent else artist.max_price
    if min_price is not None and max_price is not None and min_price > max_price:
        raise error_response(
            "min_price must not exceed max_price",
            {"min_price": "greater_than_max_price"},
        )
    return artist_response(crud.artist.update(db, artist, artist_in))


@router.post("/me/salons", response_model=ArtistResponse)
def join_salon(
    body: ArtistSalonCreate,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    salon = crud.salon.get(db, body.salon_id)
    if salon is None or not salon.is_active:
        raise SalonNotFound()
    attrs = body.model_dump(exclude={"salon_id", "relationship_type"}, exclude_unset=True)
    crud.artist.add_to_salon(db, artist, salon, body.relationship_type, **attrs)
    db.refresh(artist)
    return artist_response(artist)


@router.delete("/me/salons/{salon_id}", response_model=ArtistResponse)
def leave_salon(
    salon_id: int,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    salon = crud.salon.get(db, salon_id)
    if salon is None:
        raise SalonNotFound()
    if not crud.artist.remove_from_salon(db, artist, salon):
        raise error_response(
            "You are not working at this salon.",
            {"salon_id": "not_linked"},
            status.HTTP_404_NOT_FOUND,
        )
    db.refresh(artist)
    return artist_response(artist)


@router.put("/me/primary-salon", response_model=ArtistResponse)
def set_primary_salon(
    body: PrimarySalonUpdate,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    salon = crud.salon.get(db, body.salon_id)
    if salon is None or not salon.is_active:
        raise SalonNotFound()
    crud.artist.set_primary_salon(db, artist, salon)
    db.refresh(artist)
    return artist_response(artist)


@router.get("/me/inquiries", response_model=Page[ContactInquiryResponse])
def my_inquiries(
    status_filter: Optional[List[InquiryStatus]] = Query(default=None, alias="status"),
    is_read: Optional[bool] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    filters = InquiryFilters(artist_id=artist.id, status=status_filter, is_read=is_read)
    return crud.contact_inquiry.find_paginated(db, filters, page=page, limit=limit)


# ─── public profile ───────────────────────────────────────────────────────


@router.get("/{slug}", response_model=ArtistResponse)
def read_artist(slug: str, db: Session = Depends(get_db)):
    artist = crud.artist.find_by_slug(db, slug)
    if artist is None:
        raise ArtistNotFound()
    crud.artist.record_profile_view(db, artist)
    return artist_response(artist)


@router.get("/{slug}/tattoos", response_model=List[TattooResponse])
def read_artist_tattoos(
    slug: str,
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    artist = crud.artist.find_by_slug(db, slug)
    if artist is None:
        raise ArtistNotFound()
    return crud.tattoo.by_artist(db, artist.id, limit=limit)


@router.patch("/{artist_id}/verification", response_model=ArtistResponse)
def update_artist_verification(
    artist_id: int,
    body: VerificationUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    artist = crud.artist.get(db, artist_id)
    if artist is None:
        raise ArtistNotFound()
    artist = crud.artist.set_verification(db, artist, body.status, verified_by=admin.id, notes=body.notes)
    logger.info("Artist %s verification set to %s by %s", artist.id, body.status.value, admin.id)
    return artist_response(artist)
