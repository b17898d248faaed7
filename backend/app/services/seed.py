"""Demo catalog for local development.

    python -m app.services.seed

Rows are looked up by slug (or email for users) first, so running the
seed twice leaves the database unchanged.
"""

import logging
import os
from typing import Dict, Optional

from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..core.observability import setup_logging
from ..database import Base, engine, get_db_session
from ..models.artist import ExperienceLevel, SalonRelationship
from ..models.tag import TagCategory
from ..models.tattoo import BodyPlacement, ColorType, SizeCategory, TattooStyle
from ..models.user import UserRole
from ..models.verification_status import VerificationStatus

logger = logging.getLogger(__name__)

DEMO_PASSWORD = os.getenv("SEED_PASSWORD", "Blottr2024!")

CITIES = [
    {"name": "Paris", "slug": "paris", "postal_code": "75000", "latitude": 48.8566, "longitude": 2.3522,
     "population": 2133111, "department_code": "75", "department_name": "Paris",
     "region_name": "Île-de-France", "is_featured": True, "priority": 10},
    {"name": "Lyon", "slug": "lyon", "postal_code": "69000", "latitude": 45.764, "longitude": 4.8357,
     "population": 522250, "department_code": "69", "department_name": "Rhône",
     "region_name": "Auvergne-Rhône-Alpes", "is_featured": True, "priority": 8},
    {"name": "Marseille", "slug": "marseille", "postal_code": "13000", "latitude": 43.2965, "longitude": 5.3698,
     "population": 873076, "department_code": "13", "department_name": "Bouches-du-Rhône",
     "region_name": "Provence-Alpes-Côte d'Azur", "is_featured": True, "priority": 7},
    {"name": "Bordeaux", "slug": "bordeaux", "postal_code": "33000", "latitude": 44.8378, "longitude": -0.5792,
     "population": 261804, "department_code": "33", "department_name": "Gironde",
     "region_name": "Nouvelle-Aquitaine", "priority": 5},
]

TAGS = [
    {"name": "Traditional", "slug": "traditional", "category": TagCategory.STYLE, "is_featured": True},
    {"name": "Realism", "slug": "realism", "category": TagCategory.STYLE, "is_featured": True},
    {"name": "Fine Line", "slug": "fine-line", "category": TagCategory.TECHNIQUE, "is_featured": True},
    {"name": "Japanese", "slug": "japanese", "category": TagCategory.STYLE},
    {"name": "Floral", "slug": "floral", "category": TagCategory.SUBJECT},
    {"name": "Animals", "slug": "animals", "category": TagCategory.SUBJECT},
    {"name": "Forearm", "slug": "forearm", "category": TagCategory.BODY_PART},
]

SALONS = [
    {"name": "Encre Noire", "city": "paris", "address": "12 rue Oberkampf", "postal_code": "75011",
     "latitude": 48.8649, "longitude": 2.3740, "is_featured": True},
    {"name": "Atelier Saint-Jean", "city": "lyon", "address": "4 rue Saint-Jean", "postal_code": "69005",
     "latitude": 45.7621, "longitude": 4.8272},
]

ARTISTS = [
    {"email": "lea@blottr.dev", "full_name": "Léa Martin", "stage_name": "Lea Ink", "city": "paris",
     "salon": "encre-noire", "art_styles": ["fine_line", "floral"], "min_price": 80, "max_price": 400,
     "experience_level": ExperienceLevel.ADVANCED, "years_experience": 7, "featured": True},
    {"email": "hugo@blottr.dev", "full_name": "Hugo Bernard", "stage_name": "Hugo Irezumi", "city": "lyon",
     "salon": "atelier-saint-jean", "art_styles": ["japanese", "traditional"], "min_price": 150,
     "max_price": 1200, "experience_level": ExperienceLevel.EXPERT, "years_experience": 15, "featured": True},
    {"email": "nina@blottr.dev", "full_name": "Nina Roux", "stage_name": "Nina Realism", "city": "paris",
     "salon": None, "art_styles": ["realistic", "portrait"], "min_price": 200, "max_price": 900,
     "experience_level": ExperienceLevel.INTERMEDIATE, "years_experience": 4, "featured": False},
]

TATTOOS = [
    {"artist": "lea-ink", "title": "Peony forearm piece", "style": TattooStyle.MINIMALIST,
     "body_placement": BodyPlacement.FOREARM, "size_category": SizeCategory.MEDIUM,
     "color_type": ColorType.BLACK_AND_GREY, "tags": ["fine-line", "floral", "forearm"]},
    {"artist": "hugo-irezumi", "title": "Koi and waves sleeve", "style": TattooStyle.JAPANESE,
     "body_placement": BodyPlacement.ARM, "size_category": SizeCategory.FULL_PIECE,
     "color_type": ColorType.COLOR, "tags": ["japanese", "animals"]},
    {"artist": "nina-realism", "title": "Wolf portrait", "style": TattooStyle.REALISTIC,
     "body_placement": BodyPlacement.THIGH, "size_category": SizeCategory.LARGE,
     "color_type": ColorType.BLACK_AND_GREY, "tags": ["realism", "animals"]},
]


def _seed_cities(db: Session) -> Dict[str, models.City]:
    cities = {}
    for data in CITIES:
        city = db.query(models.City).filter(models.City.slug == data["slug"]).first()
        if city is None:
            city = models.City(**data)
            db.add(city)
        cities[data["slug"]] = city
    db.commit()
    return cities


def _seed_tags(db: Session) -> Dict[str, models.Tag]:
    tags = {}
    for data in TAGS:
        tag = crud.tag.get_by_slug(db, data["slug"], approved_only=False)
        if tag is None:
            tag = models.Tag(**data, is_approved=True)
            db.add(tag)
        tags[data["slug"]] = tag
    db.commit()
    return tags


def _seed_salons(db: Session, cities: Dict[str, models.City]) -> Dict[str, models.Salon]:
    salons = {}
    for data in SALONS:
        data = dict(data)
        city = cities[data.pop("city")]
        salon = db.query(models.Salon).filter(models.Salon.name == data["name"]).first()
        if salon is None:
            salon = crud.salon.create(db, schemas.SalonCreate(**data, city_id=city.id))
            salon.mark_as_verified(notes="Demo data")
            db.commit()
        salons[salon.slug] = salon
    return salons


def _seed_artist(
    db: Session,
    data: dict,
    cities: Dict[str, models.City],
    salons: Dict[str, models.Salon],
) -> models.Artist:
    user = crud.user.get_user_by_email(db, data["email"])
    if user is None:
        user = crud.user.create_user(
            db,
            schemas.UserCreate(
                email=data["email"],
                full_name=data["full_name"],
                password=DEMO_PASSWORD,
                role=UserRole.ARTIST,
            ),
        )
    artist = crud.artist.get_by_user_id(db, user.id)
    if artist is not None:
        return artist
    city = cities[data["city"]]
    artist = crud.artist.create(
        db,
        schemas.ArtistCreate(
            stage_name=data["stage_name"],
            short_bio=f"{data['stage_name']} tattoos in {city.name}.",
            art_styles=data["art_styles"],
            city_id=city.id,
            min_price=data["min_price"],
            max_price=data["max_price"],
            experience_level=data["experience_level"],
            years_experience=data["years_experience"],
        ),
        user_id=user.id,
    )
    artist.is_featured = data["featured"]
    crud.artist.set_verification(db, artist, VerificationStatus.VERIFIED, notes="Demo data")
    salon_slug: Optional[str] = data["salon"]
    if salon_slug:
        crud.artist.add_to_salon(db, artist, salons[salon_slug], SalonRelationship.PRIMARY)
    return artist


def _seed_tattoos(db: Session, artists: Dict[str, models.Artist], tags: Dict[str, models.Tag]) -> int:
    created = 0
    for data in TATTOOS:
        data = dict(data)
        artist = artists[data.pop("artist")]
        tag_slugs = data.pop("tags")
        exists = (
            db.query(models.Tattoo)
            .filter(models.Tattoo.artist_id == artist.id, models.Tattoo.title == data["title"])
            .first()
        )
        if exists is not None:
            continue
        tattoo = crud.tattoo.create(db, schemas.TattooCreate(**data), artist_id=artist.id)
        for position, slug in enumerate(tag_slugs):
            crud.tag.attach_to_tattoo(db, tags[slug], tattoo, is_primary=position == 0, commit=False)
        db.commit()
        crud.tattoo.transition(db, tattoo, "publish")
        created += 1
    return created


def seed(db: Session) -> Dict[str, int]:
    cities = _seed_cities(db)
    tags = _seed_tags(db)
    salons = _seed_salons(db, cities)
    artists = {}
    for data in ARTISTS:
        artist = _seed_artist(db, data, cities, salons)
        artists[artist.slug] = artist
    tattoos = _seed_tattoos(db, artists, tags)
    summary = {
        "cities": len(cities),
        "tags": len(tags),
        "salons": len(salons),
        "artists": len(artists),
        "tattoos_created": tattoos,
    }
    logger.info("Seed complete", extra=summary)
    return summary


def main() -> None:
    setup_logging()
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        seed(db)


if __name__ == "__main__":
    main()
