from typing import Dict
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


class DomainError(Exception):
    """Base for errors raised below the router layer and mapped to JSON."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "E_DOMAIN_ERROR"
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"success": False, "message": self.message, "code": self.code}


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "E_NOT_FOUND"
    default_message = "Resource not found"


class ContactInquiryNotFound(NotFoundError):
    code = "E_CONTACT_INQUIRY_NOT_FOUND"
    default_message = "Contact inquiry not found"


class ArtistNotFound(NotFoundError):
    code = "E_ARTIST_NOT_FOUND"
    default_message = "Artist not found"


class SalonNotFound(NotFoundError):
    code = "E_SALON_NOT_FOUND"
    default_message = "Salon not found"


class TattooNotFound(NotFoundError):
    code = "E_TATTOO_NOT_FOUND"
    default_message = "Tattoo not found"


class CityNotFound(NotFoundError):
    code = "E_CITY_NOT_FOUND"
    default_message = "City not found"


class TagNotFound(NotFoundError):
    code = "E_TAG_NOT_FOUND"
    default_message = "Tag not found"


class ReferenceImageError(DomainError):
    code = "E_FILE_UPLOAD_ERROR"
    default_message = "Reference image upload failed"


class EmailDeliveryError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "E_EMAIL_DELIVERY_ERROR"
    default_message = "Email delivery failed"


class InquiryTargetError(DomainError):
    code = "E_INVALID_INQUIRY_TARGET"
    default_message = "Artist not found"
