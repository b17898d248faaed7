from .common import PaginationMeta, Page, build_meta
from .user import UserBase, UserCreate, UserUpdate, UserResponse, TokenData, RefreshRequest
from .city import CityResponse, CityDetail, CityNearby
from .salon import (
    SalonBase,
    SalonCreate,
    SalonUpdate,
    SalonResponse,
    SalonArtist,
    SalonDetail,
    SalonNearby,
    VerificationUpdate,
    SalonArtistLink,
)
from .artist import (
    ArtistBase,
    ArtistCreate,
    ArtistUpdate,
    ArtistSummary,
    ArtistSalonResponse,
    ArtistResponse,
    ArtistSalonCreate,
    PrimarySalonUpdate,
)
from .tattoo import TattooBase, TattooCreate, TattooUpdate, TattooResponse, TattooTagsAttach
from .tag import TagCreate, TagResponse, TranslationUpdate
from .contact_inquiry import (
    ContactInquiryCreate,
    QuickInquiryCreate,
    InquiryStatusUpdate,
    InquiryReply,
    BatchIds,
    BatchStatusUpdate,
    InquiryFilters,
    ContactInquirySummary,
    ContactInquiryResponse,
)
