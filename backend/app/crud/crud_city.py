from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .. import models
from ..utils.geo import bounding_box


class CRUDCity:
    def get(self, db: Session, city_id: int) -> Optional[models.City]:
        return db.query(models.City).filter(models.City.id == city_id).first()

    def find_by_slug(self, db: Session, slug: str) -> Optional[models.City]:
        return (
            db.query(models.City)
            .filter(models.City.slug == slug, models.City.is_active.is_(True))
            .first()
        )

    def find_by_postal_code(self, db: Session, postal_code: str) -> List[models.City]:
        return (
            db.query(models.City)
            .filter(models.City.postal_code == postal_code.strip(), models.City.is_active.is_(True))
            .order_by(models.City.name)
            .all()
        )

    def featured(self, db: Session, limit: int = 12) -> List[models.City]:
        return (
            db.query(models.City)
            .filter(models.City.is_active.is_(True), models.City.is_featured.is_(True))
            .order_by(models.City.priority.desc(), models.City.name)
            .limit(limit)
            .all()
        )

    def search(self, db: Session, term: str, limit: int = 20) -> List[models.City]:
        like = f"%{term.strip()}%"
        return (
            db.query(models.City)
            .filter(models.City.is_active.is_(True))
            .filter(
                or_(
                    models.City.name.ilike(like),
                    models.City.postal_code.ilike(like),
                    models.City.department_name.ilike(like),
                )
            )
            .order_by(models.City.priority.desc(), models.City.name)
            .limit(limit)
            .all()
        )

    def list_active(self, db: Session, skip: int = 0, limit: int = 50) -> List[models.City]:
        return (
            db.query(models.City)
            .filter(models.City.is_active.is_(True))
            .order_by(models.City.priority.desc(), models.City.name)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def find_nearby(
        self, db: Session, lat: float, lng: float, radius_km: float = 50, limit: int = 20
    ) -> List[Tuple[models.City, float]]:
        """Active cities within ``radius_km``, nearest first, with their distance."""
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
        candidates = (
            db.query(models.City)
            .filter(models.City.is_active.is_(True))
            .filter(models.City.latitude.between(min_lat, max_lat))
            .filter(models.City.longitude.between(min_lng, max_lng))
            .all()
        )
        hits = []
        for city in candidates:
            distance = city.distance_to_km(lat, lng)
            if distance is not None and distance <= radius_km:
                hits.append((city, distance))
        hits.sort(key=lambda pair: pair[1])
        return hits[:limit]

    def users_count(self, db: Session, city: models.City) -> int:
        return db.query(func.count(models.User.id)).filter(models.User.city_id == city.id).scalar() or 0

    def artists_count(self, db: Session, city: models.City) -> int:
        return (
            db.query(func.count(models.Artist.id))
            .filter(models.Artist.city_id == city.id, models.Artist.is_active.is_(True))
            .scalar()
            or 0
        )


city = CRUDCity()
