import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..models.verification_status import VerificationStatus
from ..utils.geo import bounding_box
from ..utils.slug import unique_slug_for

logger = logging.getLogger(__name__)


class CRUDSalon:
    def get(self, db: Session, salon_id: int) -> Optional[models.Salon]:
        return db.query(models.Salon).filter(models.Salon.id == salon_id).first()

    def find_by_slug(self, db: Session, slug: str) -> Optional[models.Salon]:
        return (
            db.query(models.Salon)
            .filter(models.Salon.slug == slug, models.Salon.is_active.is_(True))
            .first()
        )

    def _active(self, db: Session):
        return db.query(models.Salon).filter(models.Salon.is_active.is_(True))

    def list_salons(
        self,
        db: Session,
        *,
        city_id: Optional[int] = None,
        verified: Optional[bool] = None,
        featured: Optional[bool] = None,
        q: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[models.Salon], int]:
        query = self._active(db)
        if city_id is not None:
            query = query.filter(models.Salon.city_id == city_id)
        if verified is True:
            query = query.filter(models.Salon.verification_status == VerificationStatus.VERIFIED)
        elif verified is False:
            query = query.filter(models.Salon.verification_status != VerificationStatus.VERIFIED)
        if featured is not None:
            query = query.filter(models.Salon.is_featured.is_(featured))
        if q:
            query = query.filter(self._search_clause(q))
        total = query.count()
        items = (
            query.order_by(
                models.Salon.is_featured.desc(),
                models.Salon.priority.desc(),
                models.Salon.name,
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def _search_clause(term: str):
        like = f"%{term.strip()}%"
        return or_(
            models.Salon.name.ilike(like),
            models.Salon.description.ilike(like),
            models.Salon.address.ilike(like),
        )

    def find_in_city(self, db: Session, city_id: int) -> List[models.Salon]:
        return (
            self._active(db)
            .filter(models.Salon.city_id == city_id)
            .order_by(models.Salon.is_featured.desc(), models.Salon.priority.desc(), models.Salon.name)
            .all()
        )

    def find_verified(self, db: Session) -> List[models.Salon]:
        return (
            self._active(db)
            .filter(models.Salon.verification_status == VerificationStatus.VERIFIED)
            .order_by(models.Salon.name)
            .all()
        )

    def find_featured(self, db: Session, limit: int = 10) -> List[models.Salon]:
        return (
            self._active(db)
            .filter(models.Salon.is_featured.is_(True))
            .order_by(models.Salon.priority.desc(), models.Salon.average_rating.desc())
            .limit(limit)
            .all()
        )

    def search(self, db: Session, term: str, limit: int = 20) -> List[models.Salon]:
        return self._active(db).filter(self._search_clause(term)).order_by(models.Salon.name).limit(limit).all()

    def find_nearby(
        self, db: Session, lat: float, lng: float, radius_km: float = 10, limit: int = 20
    ) -> List[Tuple[models.Salon, float]]:
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
        candidates = (
            self._active(db)
            .filter(models.Salon.latitude.between(min_lat, max_lat))
            .filter(models.Salon.longitude.between(min_lng, max_lng))
            .all()
        )
        hits = []
        for salon in candidates:
            distance = salon.distance_to_km(lat, lng)
            if distance is not None and distance <= radius_km:
                hits.append((salon, distance))
        hits.sort(key=lambda pair: pair[1])
        return hits[:limit]

    def active_artist_links(self, db: Session, salon: models.Salon) -> List[models.ArtistSalon]:
        return (
            db.query(models.ArtistSalon)
            .join(models.Artist, models.Artist.id == models.ArtistSalon.artist_id)
            .filter(
                models.ArtistSalon.salon_id == salon.id,
                models.ArtistSalon.is_active.is_(True),
                models.Artist.is_active.is_(True),
            )
            .order_by(models.Artist.stage_name)
            .all()
        )

    def create(self, db: Session, salon_in: schemas.SalonCreate) -> models.Salon:
        data = salon_in.model_dump(exclude_unset=True)
        data["slug"] = unique_slug_for(db, models.Salon, salon_in.name, fallback="salon")
        db_salon = models.Salon(**data)
        db.add(db_salon)
        db.commit()
        db.refresh(db_salon)
        logger.info("Created salon %s (%s)", db_salon.id, db_salon.slug)
        return db_salon

    def update(self, db: Session, db_salon: models.Salon, salon_in: schemas.SalonUpdate) -> models.Salon:
        data = salon_in.model_dump(exclude_unset=True)
        if data.get("name") and data["name"] != db_salon.name:
            data["slug"] = unique_slug_for(
                db, models.Salon, data["name"], exclude_id=db_salon.id, fallback="salon"
            )
        for key, value in data.items():
            setattr(db_salon, key, value)
        db_salon.touch_activity()
        db.commit()
        db.refresh(db_salon)
        return db_salon

    def set_verification(
        self,
        db: Session,
        db_salon: models.Salon,
        status: VerificationStatus,
        verified_by: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> models.Salon:
        db_salon.update_verification_status(status, verified_by, notes)
        db.commit()
        db.refresh(db_salon)
        return db_salon

    def update_artist_count(self, db: Session, db_salon: models.Salon) -> int:
        """Recount active artist links; the caller commits."""
        db.flush()
        count = (
            db.query(func.count(models.ArtistSalon.id))
            .filter(
                models.ArtistSalon.salon_id == db_salon.id,
                models.ArtistSalon.is_active.is_(True),
            )
            .scalar()
            or 0
        )
        db_salon.total_artists = count
        return count


salon = CRUDSalon()
