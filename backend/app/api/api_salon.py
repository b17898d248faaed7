# app/api/api_salon.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.salon import Salon
from ..models.user import User
from ..schemas.common import Page, build_meta
from ..schemas.salon import (
    SalonArtist,
    SalonArtistLink,
    SalonCreate,
    SalonDetail,
    SalonNearby,
    SalonResponse,
    SalonUpdate,
    VerificationUpdate,
)
from ..utils.errors import ArtistNotFound, SalonNotFound
from .dependencies import get_current_admin

router = APIRouter(tags=["Salons"])


def _detail(db: Session, salon: Salon) -> SalonDetail:
    detail = SalonDetail.model_validate(salon)
    detail.artists = [
        SalonArtist(
            id=link.artist.id,
            stage_name=link.artist.stage_name,
            slug=link.artist.slug,
            relationship_type=link.relationship_type,
        )
        for link in crud.salon.active_artist_links(db, salon)
    ]
    return detail


def _get_salon(db: Session, salon_id: int) -> Salon:
    salon = crud.salon.get(db, salon_id)
    if salon is None:
        raise SalonNotFound()
    return salon


@router.get("/", response_model=Page[SalonResponse])
def list_salons(
    city_id: Optional[int] = None,
    verified: Optional[bool] = None,
    featured: Optional[bool] = None,
    q: Optional[str] = Query(default=None, min_length=1, max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = crud.salon.list_salons(
        db, city_id=city_id, verified=verified, featured=featured, q=q, page=page, limit=limit
    )
    return {"data": items, "meta": build_meta(total, page, limit)}


@router.get("/nearby", response_model=List[SalonNearby])
def nearby_salons(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=10, gt=0, le=200),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    hits = crud.salon.find_nearby(db, lat, lng, radius_km=radius_km, limit=limit)
    return [
        SalonNearby(**SalonResponse.model_validate(salon).model_dump(), distance_km=distance)
        for salon, distance in hits
    ]


@router.get("/{slug}", response_model=SalonDetail)
def read_salon(slug: str, db: Session = Depends(get_db)):
    salon = crud.salon.find_by_slug(db, slug)
    if salon is None:
        raise SalonNotFound()
    return _detail(db, salon)


@router.post("/", response_model=SalonDetail, status_code=status.HTTP_201_CREATED)
def create_salon(
    salon_in: SalonCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return _detail(db, crud.salon.create(db, salon_in))


@router.put("/{salon_id}", response_model=SalonDetail)
def update_salon(
    salon_id: int,
    salon_in: SalonUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    salon = crud.salon.update(db, _get_salon(db, salon_id), salon_in)
    return _detail(db, salon)


@router.patch("/{salon_id}/verification", response_model=SalonDetail)
def update_salon_verification(
    salon_id: int,
    body: VerificationUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    salon = crud.salon.set_verification(
        db, _get_salon(db, salon_id), body.status, verified_by=admin.id, notes=body.notes
    )
    return _detail(db, salon)


@router.post("/{salon_id}/artists", response_model=SalonDetail)
def add_salon_artist(
    salon_id: int,
    body: SalonArtistLink,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    salon = _get_salon(db, salon_id)
    artist = crud.artist.get(db, body.artist_id)
    if artist is None:
        raise ArtistNotFound()
    crud.artist.add_to_salon(db, artist, salon, body.relationship_type)
    db.refresh(salon)
    return _detail(db, salon)


@router.delete("/{salon_id}/artists/{artist_id}", response_model=SalonDetail)
def remove_salon_artist(
    salon_id: int,
    artist_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    salon = _get_salon(db, salon_id)
    artist = crud.artist.get(db, artist_id)
    if artist is None:
        raise ArtistNotFound()
    crud.artist.remove_from_salon(db, artist, salon)
    db.refresh(salon)
    return _detail(db, salon)
