# app/api/api_city.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..schemas.city import CityDetail, CityNearby, CityResponse
from ..utils.errors import CityNotFound

router = APIRouter(tags=["Cities"])


@router.get("/", response_model=List[CityResponse])
def list_cities(
    featured: bool = False,
    q: Optional[str] = Query(default=None, min_length=1, max_length=100),
    postal_code: Optional[str] = Query(default=None, max_length=10),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    if postal_code:
        return crud.city.find_by_postal_code(db, postal_code)
    if q:
        return crud.city.search(db, q, limit=limit)
    if featured:
        return crud.city.featured(db, limit=limit)
    return crud.city.list_active(db, skip=skip, limit=limit)


@router.get("/nearby", response_model=List[CityNearby])
def nearby_cities(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=50, gt=0, le=500),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    hits = crud.city.find_nearby(db, lat, lng, radius_km=radius_km, limit=limit)
    return [
        CityNearby(**CityResponse.model_validate(city).model_dump(), distance_km=distance)
        for city, distance in hits
    ]


@router.get("/{slug}", response_model=CityDetail)
def read_city(slug: str, db: Session = Depends(get_db)):
    city = crud.city.find_by_slug(db, slug)
    if city is None:
        raise CityNotFound()
    detail = CityDetail.model_validate(city)
    detail.users_count = crud.city.users_count(db, city)
    detail.artists_count = crud.city.artists_count(db, city)
    return detail
