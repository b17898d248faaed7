import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..models.tattoo import TattooStatus
from ..utils.redis_cache import invalidate_artist_list_cache
from ..utils.slug import unique_slug_for
from .crud_artist import artist as crud_artist

logger = logging.getLogger(__name__)

TATTOO_SORTS = ("recent", "popular")


class CRUDTattoo:
    def get(self, db: Session, tattoo_id: int) -> Optional[models.Tattoo]:
        return db.query(models.Tattoo).filter(models.Tattoo.id == tattoo_id).first()

    def get_by_slug(self, db: Session, slug: str) -> Optional[models.Tattoo]:
        return (
            db.query(models.Tattoo)
            .options(selectinload(models.Tattoo.tag_links).selectinload(models.TattooTag.tag))
            .filter(models.Tattoo.slug == slug)
            .first()
        )

    def _published(self, db: Session):
        return (
            db.query(models.Tattoo)
            .options(selectinload(models.Tattoo.tag_links).selectinload(models.TattooTag.tag))
            .filter(
                models.Tattoo.status == TattooStatus.PUBLISHED,
                models.Tattoo.published_at.isnot(None),
            )
        )

    def list_published(
        self,
        db: Session,
        *,
        artist_id: Optional[int] = None,
        style: Optional[models.TattooStyle] = None,
        body_placement: Optional[models.BodyPlacement] = None,
        size_category: Optional[models.SizeCategory] = None,
        color_type: Optional[models.ColorType] = None,
        tag: Optional[str] = None,
        featured: Optional[bool] = None,
        sort: str = "recent",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[models.Tattoo], int]:
        query = self._published(db)
        if artist_id is not None:
            query = query.filter(models.Tattoo.artist_id == artist_id)
        if style is not None:
            query = query.filter(models.Tattoo.style == style)
        if body_placement is not None:
            query = query.filter(models.Tattoo.body_placement == body_placement)
        if size_category is not None:
            query = query.filter(models.Tattoo.size_category == size_category)
        if color_type is not None:
            query = query.filter(models.Tattoo.color_type == color_type)
        if featured is not None:
            query = query.filter(models.Tattoo.is_featured.is_(featured))
        if tag:
            query = (
                query.join(models.TattooTag, models.TattooTag.tattoo_id == models.Tattoo.id)
                .join(models.Tag, models.Tag.id == models.TattooTag.tag_id)
                .filter(models.Tag.slug == tag, models.TattooTag.is_approved.is_(True))
            )

        total = query.count()
        if sort == "popular":
            ordering = (models.Tattoo.engagement_score.desc(), models.Tattoo.published_at.desc())
        else:
            ordering = (models.Tattoo.published_at.desc(), models.Tattoo.id.desc())
        items = query.order_by(*ordering).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def latest(self, db: Session, limit: int = 12) -> List[models.Tattoo]:
        return self._published(db).order_by(models.Tattoo.published_at.desc()).limit(limit).all()

    def by_artist(self, db: Session, artist_id: int, limit: int = 50) -> List[models.Tattoo]:
        return (
            self._published(db)
            .filter(models.Tattoo.artist_id == artist_id)
            .order_by(models.Tattoo.display_order, models.Tattoo.published_at.desc())
            .limit(limit)
            .all()
        )

    def create(self, db: Session, tattoo_in: schemas.TattooCreate, artist_id: int) -> models.Tattoo:
        data = tattoo_in.model_dump(exclude_unset=True)
        data["slug"] = unique_slug_for(db, models.Tattoo, tattoo_in.title, fallback="tattoo")
        db_tattoo = models.Tattoo(**data, artist_id=artist_id)
        db.add(db_tattoo)
        db.commit()
        db.refresh(db_tattoo)
        return db_tattoo

    def update(self, db: Session, db_tattoo: models.Tattoo, tattoo_in: schemas.TattooUpdate) -> models.Tattoo:
        data = tattoo_in.model_dump(exclude_unset=True)
        if data.get("title") and data["title"] != db_tattoo.title:
            data["slug"] = unique_slug_for(
                db, models.Tattoo, data["title"], exclude_id=db_tattoo.id, fallback="tattoo"
            )
        for key, value in data.items():
            setattr(db_tattoo, key, value)
        db.commit()
        db.refresh(db_tattoo)
        return db_tattoo

    def transition(self, db: Session, db_tattoo: models.Tattoo, action: str) -> models.Tattoo:
        """Apply a lifecycle action (submit, publish, unpublish, archive).

        Raises ``ValueError`` for transitions the model refuses.
        """
        handlers = {
            "submit": db_tattoo.submit_for_review,
            "publish": db_tattoo.publish,
            "unpublish": db_tattoo.unpublish,
            "archive": db_tattoo.archive,
        }
        if action not in handlers:
            raise ValueError(f"Unknown action {action}")
        handlers[action]()
        db_artist = crud_artist.get(db, db_tattoo.artist_id)
        count_changed = False
        if db_artist is not None and action != "submit":
            previous = db_artist.total_tattoos
            count_changed = crud_artist.refresh_tattoo_count(db, db_artist) != previous
            db_artist.touch_activity()
        db.commit()
        db.refresh(db_tattoo)
        if count_changed:
            invalidate_artist_list_cache()
        return db_tattoo

    def record_engagement(self, db: Session, db_tattoo: models.Tattoo, kind: str) -> models.Tattoo:
        if kind == "view":
            db_tattoo.increment_view()
        elif kind == "like":
            db_tattoo.increment_like()
        elif kind == "share":
            db_tattoo.increment_share()
        else:
            raise ValueError(f"Unknown engagement {kind}")
        db.commit()
        db.refresh(db_tattoo)
        return db_tattoo


tattoo = CRUDTattoo()
