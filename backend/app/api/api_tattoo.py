# app/api/api_tattoo.py

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud
from ..crud.crud_tattoo import TATTOO_SORTS
from ..database import get_db
from ..models.artist import Artist
from ..models.tattoo import BodyPlacement, ColorType, SizeCategory, Tattoo, TattooStyle
from ..models.user import User
from ..schemas.common import Page, build_meta
from ..schemas.tattoo import TattooCreate, TattooResponse, TattooTagsAttach, TattooUpdate
from ..utils import error_response
from ..utils.errors import TattooNotFound
from .dependencies import get_current_artist_profile, get_optional_user

router = APIRouter(tags=["Tattoos"])


@router.get("/", response_model=Page[TattooResponse])
def list_tattoos(
    artist_id: Optional[int] = None,
    style: Optional[TattooStyle] = None,
    body_placement: Optional[BodyPlacement] = None,
    size_category: Optional[SizeCategory] = None,
    color_type: Optional[ColorType] = None,
    tag: Optional[str] = Query(default=None, max_length=120),
    featured: Optional[bool] = None,
    sort: str = Query(default="recent"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Published tattoos only."""
    if sort not in TATTOO_SORTS:
        raise error_response("Unsupported sort order.", {"sort": f"must be one of {', '.join(TATTOO_SORTS)}"})
    items, total = crud.tattoo.list_published(
        db,
        artist_id=artist_id,
        style=style,
        body_placement=body_placement,
        size_category=size_category,
        color_type=color_type,
        tag=tag,
        featured=featured,
        sort=sort,
        page=page,
        limit=limit,
    )
    return {"data": items, "meta": build_meta(total, page, limit)}


@router.get("/{slug}", response_model=TattooResponse)
def read_tattoo(
    slug: str,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    tattoo = crud.tattoo.get_by_slug(db, slug)
    if tattoo is None:
        raise TattooNotFound()
    profile = viewer.artist_profile if viewer is not None else None
    is_owner = profile is not None and profile.id == tattoo.artist_id
    if not tattoo.is_published:
        # Drafts stay visible to their owner only
        if not is_owner:
            raise TattooNotFound()
        return tattoo
    if not is_owner:
        crud.tattoo.record_engagement(db, tattoo, "view")
    return tattoo


def _owned_tattoo(db: Session, tattoo_id: int, artist: Artist) -> Tattoo:
    tattoo = crud.tattoo.get(db, tattoo_id)
    if tattoo is None:
        raise TattooNotFound()
    if tattoo.artist_id != artist.id:
        raise error_response(
            "You can only manage your own tattoos.",
            {"tattoo_id": "forbidden"},
            status.HTTP_403_FORBIDDEN,
        )
    return tattoo


@router.post("/", response_model=TattooResponse, status_code=status.HTTP_201_CREATED)
def create_tattoo(
    tattoo_in: TattooCreate,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    return crud.tattoo.create(db, tattoo_in, artist_id=artist.id)


@router.put("/{tattoo_id}", response_model=TattooResponse)
def update_tattoo(
    tattoo_id: int,
    tattoo_in: TattooUpdate,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    return crud.tattoo.update(db, _owned_tattoo(db, tattoo_id, artist), tattoo_in)


def _published_tattoo(db: Session, tattoo_id: int) -> Tattoo:
    tattoo = crud.tattoo.get(db, tattoo_id)
    if tattoo is None or not tattoo.is_published:
        raise TattooNotFound()
    return tattoo


@router.post("/{tattoo_id}/like", response_model=TattooResponse)
def like_tattoo(tattoo_id: int, db: Session = Depends(get_db)):
    return crud.tattoo.record_engagement(db, _published_tattoo(db, tattoo_id), "like")


@router.post("/{tattoo_id}/share", response_model=TattooResponse)
def share_tattoo(tattoo_id: int, db: Session = Depends(get_db)):
    return crud.tattoo.record_engagement(db, _published_tattoo(db, tattoo_id), "share")


@router.post("/{tattoo_id}/tags", response_model=TattooResponse)
def attach_tags(
    tattoo_id: int,
    body: TattooTagsAttach,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    tattoo = _owned_tattoo(db, tattoo_id, artist)
    wanted = {s.strip().lower() for s in body.slugs if s.strip()}
    primary = body.primary.strip().lower() if body.primary else None
    tags = crud.tag.get_many_by_slugs(db, sorted(wanted))
    missing = wanted - {t.slug for t in tags}
    if missing:
        raise error_response(
            "Unknown tags.",
            {slug: "not_found" for slug in sorted(missing)},
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    for tag in tags:
        crud.tag.attach_to_tattoo(db, tag, tattoo, is_primary=(tag.slug == primary), commit=False)
    db.commit()
    db.refresh(tattoo)
    return tattoo


@router.post("/{tattoo_id}/{action}", response_model=TattooResponse)
def change_tattoo_status(
    tattoo_id: int,
    action: str,
    db: Session = Depends(get_db),
    artist: Artist = Depends(get_current_artist_profile),
):
    if action not in ("submit", "publish", "unpublish", "archive"):
        raise error_response("Unknown action.", {"action": "invalid"}, status.HTTP_404_NOT_FOUND)
    tattoo = _owned_tattoo(db, tattoo_id, artist)
    try:
        return crud.tattoo.transition(db, tattoo, action)
    except ValueError as exc:
        raise error_response(str(exc), {"status": tattoo.status.value}, status.HTTP_400_BAD_REQUEST)
