from .user import User, UserRole
from .city import City
from .salon import Salon
from .verification_status import VerificationStatus
from .artist import Artist, ArtistSalon, ExperienceLevel, SalonRelationship
from .tattoo import (
    Tattoo,
    TattooStatus,
    TattooStyle,
    BodyPlacement,
    SizeCategory,
    ColorType,
)
from .tag import Tag, TattooTag, TagCategory, TagAssignment
from .contact_inquiry import ContactInquiry, InquiryStatus, ProjectType, InquirySource

__all__ = [
    "User",
    "UserRole",
    "City",
    "Salon",
    "VerificationStatus",
    "Artist",
    "ArtistSalon",
    "ExperienceLevel",
    "SalonRelationship",
    "Tattoo",
    "TattooStatus",
    "TattooStyle",
    "BodyPlacement",
    "SizeCategory",
    "ColorType",
    "Tag",
    "TattooTag",
    "TagCategory",
    "TagAssignment",
    "ContactInquiry",
    "InquiryStatus",
    "ProjectType",
    "InquirySource",
]
