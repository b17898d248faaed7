from typing import Optional, Tuple

from sqlalchemy import Boolean, Column, Float, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel
from ..utils.formatting import group_thousands
from ..utils.geo import haversine_km


class City(BaseModel):
    __tablename__ = "cities"

    id               = Column(Integer, primary_key=True, index=True)
    name             = Column(String(100), nullable=False)
    slug             = Column(String(120), unique=True, index=True, nullable=False)
    postal_code      = Column(String(10), nullable=True, index=True)
    insee_code       = Column(String(10), nullable=True, unique=True)
    latitude         = Column(Float, nullable=True)
    longitude        = Column(Float, nullable=True)
    population       = Column(Integer, nullable=True)
    area_km2         = Column(Float, nullable=True)
    department_code  = Column(String(3), nullable=True)
    department_name  = Column(String(100), nullable=True)
    region_code      = Column(String(3), nullable=True)
    region_name      = Column(String(100), nullable=True)
    description      = Column(Text, nullable=True)
    meta_title       = Column(String(255), nullable=True)
    meta_description = Column(Text, nullable=True)
    is_active        = Column(Boolean, default=True, nullable=False)
    is_featured      = Column(Boolean, default=False, nullable=False)
    priority         = Column(Integer, default=0, nullable=False)

    users   = relationship("User", back_populates="city")
    artists = relationship("Artist", back_populates="city")
    salons  = relationship("Salon", back_populates="city")

    @property
    def display_name(self) -> str:
        if self.postal_code:
            return f"{self.name} ({self.postal_code})"
        return self.name

    @property
    def formatted_population(self) -> Optional[str]:
        if self.population is None:
            return None
        return group_thousands(self.population)

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    def distance_to_km(self, lat: float, lng: float) -> Optional[float]:
        if self.coordinates is None:
            return None
        return round(haversine_km(self.latitude, self.longitude, lat, lng), 2)
