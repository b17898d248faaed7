from typing import Optional

from pydantic import BaseModel


class CityResponse(BaseModel):
    id: int
    name: str
    slug: str
    display_name: str
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    population: Optional[int] = None
    formatted_population: Optional[str] = None
    department_name: Optional[str] = None
    region_name: Optional[str] = None
    is_featured: bool = False

    model_config = {"from_attributes": True}


class CityDetail(CityResponse):
    description: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    area_km2: Optional[float] = None
    users_count: int = 0
    artists_count: int = 0


class CityNearby(CityResponse):
    distance_km: float
