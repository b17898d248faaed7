import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..models.artist import SalonRelationship
from ..models.verification_status import VerificationStatus
from ..utils.redis_cache import invalidate_artist_list_cache
from ..utils.slug import unique_slug_for
from .crud_salon import salon as crud_salon

logger = logging.getLogger(__name__)

ARTIST_SORTS = ("featured", "rating", "newest", "price_asc", "price_desc")


class CRUDArtist:
    def get(self, db: Session, artist_id: int) -> Optional[models.Artist]:
        return db.query(models.Artist).filter(models.Artist.id == artist_id).first()

    def get_by_user_id(self, db: Session, user_id: int) -> Optional[models.Artist]:
        return db.query(models.Artist).filter(models.Artist.user_id == user_id).first()

    def find_by_slug(self, db: Session, slug: str) -> Optional[models.Artist]:
        return (
            db.query(models.Artist)
            .options(selectinload(models.Artist.salon_links).selectinload(models.ArtistSalon.salon))
            .filter(models.Artist.slug == slug, models.Artist.is_active.is_(True))
            .first()
        )

    def _active(self, db: Session):
        return db.query(models.Artist).filter(models.Artist.is_active.is_(True))

    @staticmethod
    def _style_clause(style: str):
        # art_styles is a JSON list; match the quoted element in its text form
        return cast(models.Artist.art_styles, String).ilike(f'%"{style.strip().lower()}"%')

    @staticmethod
    def _search_clause(term: str):
        like = f"%{term.strip()}%"
        return or_(
            models.Artist.stage_name.ilike(like),
            models.Artist.bio.ilike(like),
            models.Artist.specialty.ilike(like),
        )

    def list_artists(
        self,
        db: Session,
        *,
        city_id: Optional[int] = None,
        style: Optional[str] = None,
        verification_status: Optional[VerificationStatus] = None,
        featured: Optional[bool] = None,
        accepting_new_clients: Optional[bool] = None,
        q: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort: str = "featured",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[models.Artist], int]:
        query = self._active(db)
        if city_id is not None:
            query = query.filter(models.Artist.city_id == city_id)
        if style:
            query = query.filter(self._style_clause(style))
        if verification_status is not None:
            query = query.filter(models.Artist.verification_status == verification_status)
        if featured is not None:
            query = query.filter(models.Artist.is_featured.is_(featured))
        if accepting_new_clients is not None:
            query = query.filter(models.Artist.is_accepting_new_clients.is_(accepting_new_clients))
        if q:
            query = query.filter(self._search_clause(q))
        # Price filters keep artists whose range overlaps the requested one
        if min_price is not None:
            query = query.filter(
                func.coalesce(models.Artist.max_price, models.Artist.min_price) >= min_price
            )
        if max_price is not None:
            query = query.filter(models.Artist.min_price <= max_price)

        total = query.count()
        items = query.order_by(*self._ordering(sort)).offset((page - 1) * limit).limit(limit).all()
        return items, total

    @staticmethod
    def _ordering(sort: str):
        if sort == "rating":
            return (models.Artist.average_rating.desc(), models.Artist.total_reviews.desc())
        if sort == "newest":
            return (models.Artist.created_at.desc(), models.Artist.id.desc())
        if sort == "price_asc":
            return (models.Artist.min_price.is_(None), models.Artist.min_price.asc())
        if sort == "price_desc":
            return (models.Artist.min_price.is_(None), models.Artist.min_price.desc())
        return (
            models.Artist.is_featured.desc(),
            models.Artist.priority.desc(),
            models.Artist.average_rating.desc(),
        )

    def find_in_city(self, db: Session, city_id: int, limit: int = 50) -> List[models.Artist]:
        return (
            self._active(db)
            .filter(models.Artist.city_id == city_id)
            .order_by(models.Artist.is_featured.desc(), models.Artist.priority.desc())
            .limit(limit)
            .all()
        )

    def find_by_style(self, db: Session, style: str, limit: int = 50) -> List[models.Artist]:
        return (
            self._active(db)
            .filter(self._style_clause(style))
            .order_by(models.Artist.average_rating.desc())
            .limit(limit)
            .all()
        )

    def find_featured(self, db: Session, limit: int = 8) -> List[models.Artist]:
        return (
            self._active(db)
            .filter(models.Artist.is_featured.is_(True))
            .order_by(models.Artist.priority.desc(), models.Artist.average_rating.desc())
            .limit(limit)
            .all()
        )

    def search(self, db: Session, term: str, limit: int = 20) -> List[models.Artist]:
        return (
            self._active(db)
            .filter(self._search_clause(term))
            .order_by(models.Artist.stage_name)
            .limit(limit)
            .all()
        )

    # ─── writes ───────────────────────────────────────────────────────────

    def create(self, db: Session, artist_in: schemas.ArtistCreate, user_id: int) -> models.Artist:
        data = artist_in.model_dump(exclude_unset=True)
        data["slug"] = unique_slug_for(db, models.Artist, artist_in.stage_name, fallback="artist")
        db_artist = models.Artist(**data, user_id=user_id)
        db_artist.touch_activity()
        db.add(db_artist)
        db.commit()
        db.refresh(db_artist)
        invalidate_artist_list_cache()
        logger.info("Created artist profile %s for user %s", db_artist.slug, user_id)
        return db_artist

    def update(self, db: Session, db_artist: models.Artist, artist_in: schemas.ArtistUpdate) -> models.Artist:
        data = artist_in.model_dump(exclude_unset=True)
        if data.get("stage_name") and data["stage_name"] != db_artist.stage_name:
            data["slug"] = unique_slug_for(
                db, models.Artist, data["stage_name"], exclude_id=db_artist.id, fallback="artist"
            )
        for key, value in data.items():
            setattr(db_artist, key, value)
        db_artist.touch_activity()
        db.commit()
        db.refresh(db_artist)
        invalidate_artist_list_cache()
        return db_artist

    def set_verification(
        self,
        db: Session,
        db_artist: models.Artist,
        status: VerificationStatus,
        verified_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> models.Artist:
        db_artist.update_verification_status(status, verified_by, notes)
        db.commit()
        db.refresh(db_artist)
        invalidate_artist_list_cache()
        return db_artist

    def record_profile_view(self, db: Session, db_artist: models.Artist) -> None:
        db_artist.increment_profile_views()
        db.commit()

    def refresh_tattoo_count(self, db: Session, db_artist: models.Artist) -> int:
        db.flush()
        count = (
            db.query(func.count(models.Tattoo.id))
            .filter(
                models.Tattoo.artist_id == db_artist.id,
                models.Tattoo.status == models.TattooStatus.PUBLISHED,
            )
            .scalar()
            or 0
        )
        db_artist.total_tattoos = count
        return count

    # ─── salon links ──────────────────────────────────────────────────────

    def get_salon_link(self, db: Session, db_artist: models.Artist, salon_id: int) -> Optional[models.ArtistSalon]:
        return (
            db.query(models.ArtistSalon)
            .filter(
                models.ArtistSalon.artist_id == db_artist.id,
                models.ArtistSalon.salon_id == salon_id,
            )
            .first()
        )

    def _demote_other_primaries(self, db: Session, db_artist: models.Artist, keep_salon_id: int) -> None:
        others = (
            db.query(models.ArtistSalon)
            .filter(
                models.ArtistSalon.artist_id == db_artist.id,
                models.ArtistSalon.salon_id != keep_salon_id,
                models.ArtistSalon.relationship_type == SalonRelationship.PRIMARY,
            )
            .all()
        )
        for link in others:
            link.relationship_type = SalonRelationship.GUEST

    def add_to_salon(
        self,
        db: Session,
        db_artist: models.Artist,
        db_salon: models.Salon,
        relationship_type: SalonRelationship = SalonRelationship.GUEST,
        **attrs,
    ) -> models.ArtistSalon:
        """Create or reactivate the artist/salon link."""
        link = self.get_salon_link(db, db_artist, db_salon.id)
        if link is None:
            link = models.ArtistSalon(artist_id=db_artist.id, salon_id=db_salon.id)
            db.add(link)
        link.relationship_type = relationship_type
        link.is_active = True
        link.ended_working_at = None
        if link.started_working_at is None and "started_working_at" not in attrs:
            link.started_working_at = date.today()
        for key, value in attrs.items():
            setattr(link, key, value)

        if relationship_type == SalonRelationship.PRIMARY:
            self._demote_other_primaries(db, db_artist, db_salon.id)
            db_artist.primary_salon_id = db_salon.id
        elif db_artist.primary_salon_id == db_salon.id:
            db_artist.primary_salon_id = None

        crud_salon.update_artist_count(db, db_salon)
        db_salon.touch_activity()
        db.commit()
        db.refresh(link)
        invalidate_artist_list_cache()
        return link

    def set_primary_salon(self, db: Session, db_artist: models.Artist, db_salon: models.Salon) -> models.ArtistSalon:
        link = self.get_salon_link(db, db_artist, db_salon.id)
        if link is None or not link.is_active:
            return self.add_to_salon(db, db_artist, db_salon, SalonRelationship.PRIMARY)
        self._demote_other_primaries(db, db_artist, db_salon.id)
        link.relationship_type = SalonRelationship.PRIMARY
        db_artist.primary_salon_id = db_salon.id
        db.commit()
        db.refresh(link)
        invalidate_artist_list_cache()
        return link

    def remove_from_salon(self, db: Session, db_artist: models.Artist, db_salon: models.Salon) -> bool:
        link = self.get_salon_link(db, db_artist, db_salon.id)
        if link is None or not link.is_active:
            return False
        link.is_active = False
        link.ended_working_at = date.today()
        if db_artist.primary_salon_id == db_salon.id:
            db_artist.primary_salon_id = None
        crud_salon.update_artist_count(db, db_salon)
        db.commit()
        invalidate_artist_list_cache()
        return True


artist = CRUDArtist()
