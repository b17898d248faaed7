"""Repository for contact inquiries.

List-style reads go through the process-wide :mod:`query cache
<app.services.query_cache>` and return JSON-ready dictionaries; single-row
reads and writes work on ORM instances. Every write clears the cache.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..models.contact_inquiry import (
    URGENT_PRIORITY,
    ContactInquiry,
    InquiryStatus,
    ProjectType,
)
from ..models.base import utcnow
from ..services.query_cache import (
    ANALYTICS_TTL,
    INQUIRY_PAGE_TTL,
    URGENT_TTL,
    invalidate_query_cache,
    query_cache,
)

logger = logging.getLogger(__name__)

URGENT_LIMIT = 20


def serialize(inquiry: ContactInquiry) -> Dict[str, Any]:
    return schemas.ContactInquiryResponse.model_validate(inquiry).model_dump(mode="json")


def _urgent_clause():
    return or_(
        ContactInquiry.priority >= URGENT_PRIORITY,
        ContactInquiry.project_type == ProjectType.APPOINTMENT,
    )


class CRUDContactInquiry:
    # ─── filtering ────────────────────────────────────────────────────────

    def _filtered(self, db: Session, filters: Optional[schemas.InquiryFilters]):
        query = db.query(ContactInquiry)
        if filters is None:
            return query
        if filters.status:
            query = query.filter(ContactInquiry.status.in_(filters.status))
        if filters.project_type:
            query = query.filter(ContactInquiry.project_type.in_(filters.project_type))
        if filters.artist_id is not None:
            query = query.filter(ContactInquiry.artist_id == filters.artist_id)
        if filters.is_read is not None:
            query = query.filter(ContactInquiry.is_read.is_(filters.is_read))
        if filters.is_starred is not None:
            query = query.filter(ContactInquiry.is_starred.is_(filters.is_starred))
        if filters.priority_min is not None:
            query = query.filter(ContactInquiry.priority >= filters.priority_min)
        if filters.priority_max is not None:
            query = query.filter(ContactInquiry.priority <= filters.priority_max)
        if filters.date_from is not None:
            query = query.filter(ContactInquiry.created_at >= filters.date_from)
        if filters.date_to is not None:
            query = query.filter(ContactInquiry.created_at <= filters.date_to)
        if filters.search:
            like = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    ContactInquiry.subject.ilike(like),
                    ContactInquiry.message.ilike(like),
                    ContactInquiry.full_name.ilike(like),
                    ContactInquiry.email.ilike(like),
                )
            )
        return query

    @staticmethod
    def _triage_order(filters: Optional[schemas.InquiryFilters]) -> bool:
        """Unread pending work is listed by urgency, oldest first."""
        if filters is None or filters.is_read is not False:
            return False
        return not filters.status or InquiryStatus.PENDING in filters.status

    def count(self, db: Session, filters: Optional[schemas.InquiryFilters] = None) -> int:
        return self._filtered(db, filters).count()

    # ─── cached reads ─────────────────────────────────────────────────────

    def find_paginated(
        self,
        db: Session,
        filters: Optional[schemas.InquiryFilters] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        options = {
            "filters": filters.model_dump(mode="json", exclude_none=True) if filters else {},
            "page": page,
            "limit": limit,
        }
        key = query_cache.make_key("inquiries", options)
        cached = query_cache.get(key)
        if cached is not None:
            return cached

        query = self._filtered(db, filters)
        total = query.count()
        if self._triage_order(filters):
            query = query.order_by(ContactInquiry.priority.desc(), ContactInquiry.created_at.asc())
        else:
            query = query.order_by(ContactInquiry.created_at.desc())
        rows = query.offset((page - 1) * limit).limit(limit).all()

        total_pages = math.ceil(total / limit) if limit else 0
        result = {
            "data": [serialize(row) for row in rows],
            "meta": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_more": (page - 1) * limit + len(rows) < total,
            },
        }
        query_cache.set(key, result, INQUIRY_PAGE_TTL)
        return result

    def find_urgent(self, db: Session) -> List[Dict[str, Any]]:
        key = query_cache.make_key("urgent-inquiries")
        cached = query_cache.get(key)
        if cached is not None:
            return cached
        rows = (
            db.query(ContactInquiry)
            .filter(ContactInquiry.status == InquiryStatus.PENDING, _urgent_clause())
            .order_by(ContactInquiry.priority.desc(), ContactInquiry.created_at.asc())
            .limit(URGENT_LIMIT)
            .all()
        )
        result = [serialize(row) for row in rows]
        query_cache.set(key, result, URGENT_TTL)
        return result

    def get_analytics(self, db: Session, days: int = 30) -> Dict[str, Any]:
        key = query_cache.make_key("analytics", {"days": days})
        cached = query_cache.get(key)
        if cached is not None:
            return cached

        since = utcnow() - timedelta(days=days)
        day = func.date(ContactInquiry.created_at)
        columns = [
            day.label("day"),
            func.count(ContactInquiry.id).label("total"),
            func.avg(ContactInquiry.priority).label("avg_priority"),
        ]
        for status in InquiryStatus:
            columns.append(
                func.sum(case((ContactInquiry.status == status, 1), else_=0)).label(status.value)
            )
        rows = (
            db.query(*columns)
            .filter(ContactInquiry.created_at >= since)
            .group_by(day)
            .order_by(day.desc())
            .all()
        )
        daily = []
        for row in rows:
            entry = {
                "day": str(row.day),
                "total": int(row.total or 0),
                "avg_priority": round(float(row.avg_priority or 0), 2),
            }
            for status in InquiryStatus:
                entry[status.value] = int(getattr(row, status.value) or 0)
            daily.append(entry)

        replied = (
            db.query(ContactInquiry.created_at, ContactInquiry.first_replied_at)
            .filter(ContactInquiry.created_at >= since, ContactInquiry.first_replied_at.isnot(None))
            .all()
        )
        hours = [(r.first_replied_at - r.created_at).total_seconds() / 3600 for r in replied]
        result = {
            "days": days,
            "daily": daily,
            "total": sum(d["total"] for d in daily),
            "avg_response_hours": round(sum(hours) / len(hours), 2) if hours else None,
        }
        query_cache.set(key, result, ANALYTICS_TTL)
        return result

    # ─── uncached reads ───────────────────────────────────────────────────

    def get(self, db: Session, inquiry_id: str) -> Optional[ContactInquiry]:
        return db.query(ContactInquiry).filter(ContactInquiry.id == inquiry_id).first()

    def find_recent_unread(self, db: Session, limit: int = 10) -> List[ContactInquiry]:
        return (
            db.query(ContactInquiry)
            .filter(
                ContactInquiry.is_read.is_(False),
                ContactInquiry.status.in_([InquiryStatus.PENDING, InquiryStatus.IN_PROGRESS]),
            )
            .order_by(ContactInquiry.created_at.desc())
            .limit(limit)
            .all()
        )

    def find_by_artist(
        self,
        db: Session,
        artist_id: int,
        limit: int = 50,
        statuses: Optional[Sequence[InquiryStatus]] = None,
    ) -> List[ContactInquiry]:
        query = db.query(ContactInquiry).filter(ContactInquiry.artist_id == artist_id)
        if statuses:
            query = query.filter(ContactInquiry.status.in_(statuses))
        return query.order_by(ContactInquiry.created_at.desc()).limit(limit).all()

    def find_pending(self, db: Session, limit: int = 50) -> List[ContactInquiry]:
        return (
            db.query(ContactInquiry)
            .filter(ContactInquiry.status == InquiryStatus.PENDING)
            .order_by(ContactInquiry.priority.desc(), ContactInquiry.created_at.asc())
            .limit(limit)
            .all()
        )

    def find_unread(self, db: Session, limit: int = 50) -> List[ContactInquiry]:
        return (
            db.query(ContactInquiry)
            .filter(ContactInquiry.is_read.is_(False), ContactInquiry.status != InquiryStatus.SPAM)
            .order_by(ContactInquiry.created_at.desc())
            .limit(limit)
            .all()
        )

    def search(self, db: Session, term: str, limit: int = 20) -> List[ContactInquiry]:
        filters = schemas.InquiryFilters(search=term)
        return (
            self._filtered(db, filters)
            .order_by(ContactInquiry.created_at.desc())
            .limit(limit)
            .all()
        )

    def count_stale_pending(self, db: Session, older_than: timedelta = timedelta(hours=24)) -> int:
        return (
            db.query(func.count(ContactInquiry.id))
            .filter(
                ContactInquiry.status == InquiryStatus.PENDING,
                ContactInquiry.created_at < utcnow() - older_than,
            )
            .scalar()
            or 0
        )

    def dashboard_summary(self, db: Session) -> Dict[str, int]:
        start_of_day = datetime.combine(utcnow().date(), datetime.min.time())
        return {
            "total": self.count(db),
            "pending": self.count(db, schemas.InquiryFilters(status=[InquiryStatus.PENDING])),
            "unread": self.count(db, schemas.InquiryFilters(is_read=False)),
            "urgent": (
                db.query(func.count(ContactInquiry.id))
                .filter(and_(ContactInquiry.status == InquiryStatus.PENDING, _urgent_clause()))
                .scalar()
                or 0
            ),
            "today": self.count(db, schemas.InquiryFilters(date_from=start_of_day)),
        }

    # ─── writes ───────────────────────────────────────────────────────────

    def create(
        self,
        db: Session,
        data: Dict[str, Any],
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ContactInquiry:
        inquiry = ContactInquiry(**data, ip_address=ip_address, user_agent=user_agent, extra_metadata=metadata)
        inquiry.apply_default_priority()
        db.add(inquiry)
        db.commit()
        db.refresh(inquiry)
        invalidate_query_cache()
        logger.info(
            "Stored contact inquiry %s (type=%s, artist=%s, priority=%s)",
            inquiry.id,
            inquiry.project_type.value,
            inquiry.artist_id,
            inquiry.priority,
        )
        return inquiry

    def update(self, db: Session, inquiry: ContactInquiry, data: Dict[str, Any]) -> ContactInquiry:
        for key, value in data.items():
            setattr(inquiry, key, value)
        db.commit()
        db.refresh(inquiry)
        invalidate_query_cache()
        return inquiry

    def delete(self, db: Session, inquiry: ContactInquiry) -> None:
        db.delete(inquiry)
        db.commit()
        invalidate_query_cache()

    def set_status(
        self,
        db: Session,
        inquiry: ContactInquiry,
        status: InquiryStatus,
        priority: Optional[int] = None,
    ) -> ContactInquiry:
        inquiry.update_status(status)
        if priority is not None:
            inquiry.set_priority(priority)
        return self._save(db, inquiry)

    def mark_as_read(self, db: Session, inquiry: ContactInquiry) -> ContactInquiry:
        inquiry.mark_as_read()
        return self._save(db, inquiry)

    def toggle_starred(self, db: Session, inquiry: ContactInquiry) -> ContactInquiry:
        inquiry.toggle_starred()
        return self._save(db, inquiry)

    def record_reply(self, db: Session, inquiry: ContactInquiry) -> ContactInquiry:
        inquiry.record_reply()
        inquiry.mark_as_read()
        return self._save(db, inquiry)

    def add_reference_images(self, db: Session, inquiry: ContactInquiry, paths: List[str]) -> ContactInquiry:
        # New list so the JSON column is flagged dirty
        inquiry.reference_images = list(inquiry.reference_images or []) + paths
        return self._save(db, inquiry)

    def batch_update_status(self, db: Session, ids: Sequence[str], status: InquiryStatus) -> int:
        changed = (
            db.query(ContactInquiry)
            .filter(ContactInquiry.id.in_(list(ids)))
            .update({"status": status, "updated_at": utcnow()}, synchronize_session=False)
        )
        db.commit()
        invalidate_query_cache()
        logger.info("Batch status %s applied to %d inquiries", status.value, changed)
        return changed

    def batch_mark_as_read(self, db: Session, ids: Sequence[str]) -> int:
        changed = (
            db.query(ContactInquiry)
            .filter(ContactInquiry.id.in_(list(ids)), ContactInquiry.is_read.is_(False))
            .update({"is_read": True, "updated_at": utcnow()}, synchronize_session=False)
        )
        db.commit()
        invalidate_query_cache()
        return changed

    def _save(self, db: Session, inquiry: ContactInquiry) -> ContactInquiry:
        db.commit()
        db.refresh(inquiry)
        invalidate_query_cache()
        return inquiry


contact_inquiry = CRUDContactInquiry()
