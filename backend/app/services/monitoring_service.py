"""Request metrics, error counters and the aggregated health check.

Metrics live in memory (last ``MAX_METRICS`` requests) and feed
``get_health_check``. Errors are also mirrored to StatsD through
:mod:`app.utils.metrics`.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Deque, Dict, List, Optional

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.base import utcnow
from ..models.contact_inquiry import ContactInquiry, InquiryStatus
from ..utils import metrics

logger = logging.getLogger(__name__)

MAX_METRICS = 1000
SLOW_DB_MS = 1000
SLOW_REQUEST_MS = 2000
AVG_RESPONSE_WARN_MS = 1500
SLOW_RATE_WARN = 0.10
ERROR_RATE_FAIL = 0.10
ERROR_RATE_WARN = 0.05
STALE_PENDING_WARN = 10
PERFORMANCE_WINDOW = timedelta(minutes=5)

SENSITIVE_KEYS = {"password", "token", "access_token", "refresh_token", "authorization", "cookie", "secret"}
REDACTED = "[redacted]"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def redact(value: Any) -> Any:
    """Return ``value`` with sensitive mapping keys masked, recursively."""
    if isinstance(value, dict):
        return {
            k: (REDACTED if str(k).lower() in SENSITIVE_KEYS else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value


@dataclass
class ApiMetric:
    endpoint: str
    method: str
    response_time_ms: float
    status_code: int
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: datetime = field(default_factory=_now)


def _check(status: str, message: str, **extra: Any) -> Dict[str, Any]:
    result = {"status": status, "message": message}
    result.update({k: v for k, v in extra.items() if v is not None})
    return result


class MonitoringService:
    def __init__(self, max_metrics: int = MAX_METRICS) -> None:
        self._metrics: Deque[ApiMetric] = deque(maxlen=max_metrics)
        self._errors: Counter = Counter()
        # Request sequence number at the time of each error, to window the error rate
        self._error_seqs: Deque[int] = deque(maxlen=max_metrics)
        self._request_total = 0
        self._lock = threading.Lock()
        self.started_at = time.monotonic()

    # ─── recording ────────────────────────────────────────────────────────

    def record_api_metric(
        self,
        endpoint: str,
        method: str,
        response_time_ms: float,
        status_code: int,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> None:
        metric = ApiMetric(endpoint, method, response_time_ms, status_code, user_agent, ip_address)
        with self._lock:
            self._metrics.append(metric)
            self._request_total += 1

    def record_error(self, code: str) -> None:
        with self._lock:
            self._errors[code] += 1
            self._error_seqs.append(self._request_total)
        metrics.incr("errors", tags={"code": code})

    def log_error(self, exc: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
        code = getattr(exc, "code", None)
        if not isinstance(code, str):
            code = type(exc).__name__
        logger.error(
            "Application error",
            exc_info=exc,
            extra={"error": str(exc), "error_code": code, "context": redact(context or {})},
        )
        self.record_error(code)

    def log_warning(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        logger.warning(message, extra={"context": redact(context or {})})

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        logger.info(message, extra={"context": redact(context or {})})

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()
            self._errors.clear()
            self._error_seqs.clear()
            self._request_total = 0

    # ─── snapshots ────────────────────────────────────────────────────────

    def _recent(self) -> List[ApiMetric]:
        cutoff = _now() - PERFORMANCE_WINDOW
        with self._lock:
            return [m for m in self._metrics if m.timestamp >= cutoff]

    def _error_totals(self) -> tuple[int, int]:
        """Errors recorded since the oldest buffered request, and the buffer size."""
        with self._lock:
            requests = len(self._metrics)
            evicted = self._request_total - requests
            errors = sum(1 for seq in self._error_seqs if not evicted or seq > evicted)
        return min(errors, requests), requests

    def error_counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._errors)

    # ─── checks ───────────────────────────────────────────────────────────

    def check_database(self, db: Session) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Health check database failure: %s", exc)
            return _check("fail", "Database connection failed", details=str(exc))
        duration = round((time.perf_counter() - start) * 1000, 2)
        if duration > SLOW_DB_MS:
            return _check("warn", "Database response time is slow", duration_ms=duration)
        return _check("pass", "Database connection healthy", duration_ms=duration)

    def check_contact_inquiries(self, db: Session) -> Dict[str, Any]:
        day_ago = utcnow() - timedelta(hours=24)
        try:
            recent = (
                db.query(func.count(ContactInquiry.id))
                .filter(ContactInquiry.created_at >= day_ago)
                .scalar()
                or 0
            )
            stale = (
                db.query(func.count(ContactInquiry.id))
                .filter(
                    ContactInquiry.status == InquiryStatus.PENDING,
                    ContactInquiry.created_at < day_ago,
                )
                .scalar()
                or 0
            )
        except SQLAlchemyError as exc:
            return _check("fail", "Failed to check contact inquiry status", details=str(exc))
        details = {"total_recent": recent, "old_pending": stale}
        if stale > STALE_PENDING_WARN:
            return _check("warn", f"{stale} inquiries pending for over 24 hours", details=details)
        return _check("pass", "Contact inquiry system operating normally", details=details)

    def check_api_performance(self) -> Dict[str, Any]:
        recent = self._recent()
        if not recent:
            return _check("pass", "No recent API activity to analyze")
        avg = sum(m.response_time_ms for m in recent) / len(recent)
        slow_rate = sum(1 for m in recent if m.response_time_ms > SLOW_REQUEST_MS) / len(recent)
        details = {"avg_response_time_ms": round(avg), "slow_request_rate": round(slow_rate, 3)}
        if avg > AVG_RESPONSE_WARN_MS:
            return _check("warn", f"Average API response time is {round(avg)}ms", details=details)
        if slow_rate > SLOW_RATE_WARN:
            return _check("warn", f"{round(slow_rate * 100)}% of requests are slow (>2s)", details=details)
        return _check("pass", f"API performance is good (avg: {round(avg)}ms)", details=details)

    def check_error_rate(self) -> Dict[str, Any]:
        errors, requests = self._error_totals()
        if requests == 0:
            return _check("pass", "No recent requests to analyze")
        rate = errors / requests
        details = {"error_rate": round(rate, 4), "total_errors": errors, "total_requests": requests}
        if rate > ERROR_RATE_FAIL:
            return _check("fail", f"High error rate: {round(rate * 100)}%", details=details)
        if rate > ERROR_RATE_WARN:
            return _check("warn", f"Elevated error rate: {round(rate * 100)}%", details=details)
        return _check("pass", f"Error rate is healthy: {round(rate * 100)}%", details=details)

    def system_metrics(self, db: Session) -> Dict[str, Any]:
        try:
            total = db.query(func.count(ContactInquiry.id)).scalar() or 0
            pending = (
                db.query(func.count(ContactInquiry.id))
                .filter(ContactInquiry.status == InquiryStatus.PENDING)
                .scalar()
                or 0
            )
        except SQLAlchemyError:
            total = pending = None
        recent = self._recent()
        avg = sum(m.response_time_ms for m in recent) / len(recent) if recent else 0
        errors, requests = self._error_totals()
        return {
            "total_inquiries": total,
            "pending_inquiries": pending,
            "average_response_time_ms": round(avg),
            "error_rate": round(errors / requests, 2) if requests else 0,
        }

    def get_health_check(self, db: Session) -> Dict[str, Any]:
        checks = {
            "database": self.check_database(db),
            "contact_inquiries": self.check_contact_inquiries(db),
            "api_performance": self.check_api_performance(),
            "error_rate": self.check_error_rate(),
        }
        statuses = {c["status"] for c in checks.values()}
        if "fail" in statuses:
            overall = "unhealthy"
        elif "warn" in statuses:
            overall = "degraded"
        else:
            overall = "healthy"
        return {
            "status": overall,
            "timestamp": _now().isoformat(),
            "uptime_seconds": round(time.monotonic() - self.started_at, 1),
            "checks": checks,
            "metrics": self.system_metrics(db),
        }


monitoring_service = MonitoringService()
