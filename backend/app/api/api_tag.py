# app/api/api_tag.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..models.tag import TagCategory
from ..models.user import User
from ..schemas.tag import TagCreate, TagResponse, TranslationUpdate
from ..utils import error_response
from ..utils.errors import TagNotFound
from .dependencies import get_current_active_user, get_current_admin, is_admin

router = APIRouter(tags=["Tags"])


@router.get("/", response_model=List[TagResponse])
def list_tags(
    category: Optional[TagCategory] = None,
    featured: Optional[bool] = None,
    popular: bool = False,
    trending: bool = False,
    q: Optional[str] = Query(default=None, min_length=1, max_length=100),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Approved tags only."""
    return crud.tag.list_tags(
        db,
        category=category,
        featured=featured,
        popular=popular,
        trending=trending,
        q=q,
        limit=limit,
    )


@router.get("/{slug}", response_model=TagResponse)
def read_tag(slug: str, db: Session = Depends(get_db)):
    tag = crud.tag.get_by_slug(db, slug)
    if tag is None:
        raise TagNotFound()
    return tag


@router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(
    tag_in: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    # Tags proposed by non-admins wait for moderation
    needs_review = not is_admin(current_user)
    try:
        return crud.tag.create(db, tag_in, created_by=current_user.id, requires_approval=needs_review)
    except ValueError as exc:
        raise error_response(str(exc), {"parent_tag_id": "not_found"}, status.HTTP_422_UNPROCESSABLE_ENTITY)


def _get_any_tag(db: Session, slug: str):
    tag = crud.tag.get_by_slug(db, slug, approved_only=False)
    if tag is None:
        raise TagNotFound()
    return tag


@router.post("/{slug}/approve", response_model=TagResponse)
def approve_tag(
    slug: str,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return crud.tag.approve(db, _get_any_tag(db, slug), approved_by=admin.id)


@router.put("/{slug}/translations", response_model=TagResponse)
def upsert_translation(
    slug: str,
    body: TranslationUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return crud.tag.set_translation(db, _get_any_tag(db, slug), body.locale, body.name, body.description)
