# app/api/api_contact_inquiry.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from .. import crud
from ..database import get_db
from ..middleware.rate_limit import client_ip
from ..models.contact_inquiry import ContactInquiry, InquirySource, InquiryStatus, ProjectType
from ..models.user import User
from ..schemas.common import Page
from ..schemas.contact_inquiry import (
    BatchIds,
    BatchStatusUpdate,
    ContactInquiryCreate,
    ContactInquiryResponse,
    ContactInquirySummary,
    InquiryFilters,
    InquiryReply,
    InquiryStatusUpdate,
    QuickInquiryCreate,
)
from ..services.notifications import notify_artist_of_inquiry
from ..services.query_cache import inquiry_query_service
from ..services.reference_images import store_reference_images
from ..utils import error_response, metrics, send_email
from ..utils.errors import ContactInquiryNotFound, InquiryTargetError, ReferenceImageError
from .dependencies import get_current_active_user, get_current_admin, is_admin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contact inquiries"])

QUICK_SUBJECT = "Quick request"
SENT_MESSAGE = "Your request has been sent. The artist will get back to you shortly."


def _store(db: Session, request: Request, data: Dict[str, Any]) -> Dict[str, Any]:
    artist = None
    if data.get("artist_id"):
        artist = crud.artist.get(db, data["artist_id"])
        if artist is None:
            raise InquiryTargetError("Artist not found")
    if data.get("tattoo_id") and crud.tattoo.get(db, data["tattoo_id"]) is None:
        raise InquiryTargetError("Tattoo not found")

    metadata = {"referer": request.headers["referer"]} if request.headers.get("referer") else None
    inquiry = crud.contact_inquiry.create(
        db,
        data,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        metadata=metadata,
    )
    notify_artist_of_inquiry(artist, inquiry)
    metrics.incr("inquiry_created", tags={"source": inquiry.source.value})
    return {"success": True, "message": SENT_MESSAGE, "inquiry_id": inquiry.id}


def _managed_inquiry(db: Session, inquiry_id: str, user: User) -> ContactInquiry:
    """Load an inquiry the caller may manage: admins, or the addressed artist."""
    inquiry = crud.contact_inquiry.get(db, inquiry_id)
    if inquiry is None:
        raise ContactInquiryNotFound()
    if is_admin(user):
        return inquiry
    profile = user.artist_profile
    if profile is not None and inquiry.artist_id == profile.id:
        return inquiry
    raise error_response(
        "You cannot manage this inquiry.",
        {"inquiry_id": "forbidden"},
        status.HTTP_403_FORBIDDEN,
    )


# ─── public intake ────────────────────────────────────────────────────────


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_inquiry(body: ContactInquiryCreate, request: Request, db: Session = Depends(get_db)):
    data = body.model_dump()
    data["source"] = InquirySource.WEBSITE
    return _store(db, request, data)


@router.post("/quick", status_code=status.HTTP_201_CREATED)
def create_quick_inquiry(body: QuickInquiryCreate, request: Request, db: Session = Depends(get_db)):
    data = {
        "full_name": body.name,
        "email": body.email,
        "subject": QUICK_SUBJECT,
        "message": body.message,
        "project_type": ProjectType.QUESTION,
        "source": InquirySource.QUICK_FORM,
        "artist_id": body.artist_id,
        "tattoo_id": body.tattoo_id,
    }
    return _store(db, request, data)


# ─── admin views (declared before /{inquiry_id}) ──────────────────────────


@router.get("/", response_model=Page[ContactInquiryResponse])
def list_inquiries(
    status_filter: Optional[List[InquiryStatus]] = Query(default=None, alias="status"),
    project_type: Optional[List[ProjectType]] = Query(default=None),
    artist_id: Optional[int] = None,
    is_read: Optional[bool] = None,
    is_starred: Optional[bool] = None,
    priority_min: Optional[int] = Query(default=None, ge=1, le=10),
    priority_max: Optional[int] = Query(default=None, ge=1, le=10),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    filters = InquiryFilters(
        status=status_filter,
        project_type=project_type,
        artist_id=artist_id,
        is_read=is_read,
        is_starred=is_starred,
        priority_min=priority_min,
        priority_max=priority_max,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    return crud.contact_inquiry.find_paginated(db, filters, page=page, limit=limit)


@router.get("/urgent", response_model=List[ContactInquiryResponse])
def urgent_inquiries(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return crud.contact_inquiry.find_urgent(db)


@router.get("/unread", response_model=List[ContactInquiryResponse])
def unread_inquiries(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return crud.contact_inquiry.find_unread(db, limit=limit)


@router.get("/dashboard")
def inquiry_dashboard(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return {
        "summary": crud.contact_inquiry.dashboard_summary(db),
        "recent_unread": [
            ContactInquiryResponse.model_validate(i).model_dump(mode="json")
            for i in crud.contact_inquiry.find_recent_unread(db)
        ],
        "urgent": crud.contact_inquiry.find_urgent(db),
    }


@router.get("/analytics")
def inquiry_analytics(
    days: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return crud.contact_inquiry.get_analytics(db, days=days)


@router.get("/search", response_model=List[ContactInquiryResponse])
def search_inquiries(
    q: str = Query(min_length=2, max_length=200),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return crud.contact_inquiry.search(db, q, limit=limit)


@router.post("/maintenance/optimize")
def optimize_inquiry_queries(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    return inquiry_query_service.optimize(db)


@router.post("/batch/status")
def batch_update_status(
    body: BatchStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    updated = crud.contact_inquiry.batch_update_status(db, body.ids, body.status)
    return {"success": True, "updated": updated}


@router.post("/batch/read")
def batch_mark_as_read(
    body: BatchIds,
    db: Session = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    updated = crud.contact_inquiry.batch_mark_as_read(db, body.ids)
    return {"success": True, "updated": updated}


# ─── single inquiry ───────────────────────────────────────────────────────


@router.get("/{inquiry_id}")
def read_inquiry(inquiry_id: str, db: Session = Depends(get_db)):
    inquiry = crud.contact_inquiry.get(db, inquiry_id)
    if inquiry is None:
        raise ContactInquiryNotFound()
    summary = ContactInquirySummary.model_validate(inquiry).model_dump(mode="json")
    return {"success": True, "data": summary}


@router.post("/{inquiry_id}/reference-images")
def upload_reference_images(
    inquiry_id: str,
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
):
    inquiry = crud.contact_inquiry.get(db, inquiry_id)
    if inquiry is None:
        raise ContactInquiryNotFound()
    if not inquiry.is_pending:
        raise ReferenceImageError("Images can only be added to pending inquiries")
    paths = store_reference_images(inquiry.id, inquiry.reference_images or [], files)
    inquiry = crud.contact_inquiry.add_reference_images(db, inquiry, paths)
    return {"success": True, "reference_images": inquiry.reference_images}


@router.patch("/{inquiry_id}/status", response_model=ContactInquiryResponse)
def update_inquiry_status(
    inquiry_id: str,
    body: InquiryStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    inquiry = _managed_inquiry(db, inquiry_id, current_user)
    return crud.contact_inquiry.set_status(db, inquiry, body.status, priority=body.priority)


@router.post("/{inquiry_id}/read", response_model=ContactInquiryResponse)
def mark_inquiry_read(
    inquiry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return crud.contact_inquiry.mark_as_read(db, _managed_inquiry(db, inquiry_id, current_user))


@router.post("/{inquiry_id}/star", response_model=ContactInquiryResponse)
def toggle_inquiry_star(
    inquiry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    return crud.contact_inquiry.toggle_starred(db, _managed_inquiry(db, inquiry_id, current_user))


@router.post("/{inquiry_id}/reply", response_model=ContactInquiryResponse)
def reply_to_inquiry(
    inquiry_id: str,
    body: InquiryReply,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    inquiry = _managed_inquiry(db, inquiry_id, current_user)
    sender = inquiry.artist.stage_name if inquiry.artist is not None else "Blottr"
    send_email(
        inquiry.email,
        f"Re: {inquiry.subject}",
        f"{body.message}\n\n{sender}",
        reply_to=current_user.email,
    )
    logger.info("Inquiry %s replied by user %s", inquiry.id, current_user.id)
    return crud.contact_inquiry.record_reply(db, inquiry)


@router.delete("/{inquiry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inquiry(
    inquiry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    crud.contact_inquiry.delete(db, _managed_inquiry(db, inquiry_id, current_user))
