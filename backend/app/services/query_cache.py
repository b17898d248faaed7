"""In-process memoization for the expensive contact inquiry queries.

Entries hold JSON-ready payloads (never ORM instances) with a per-entry TTL.
The store is bounded: once ``max_size`` is exceeded the oldest inserted key
is dropped. All inquiry writes call :func:`invalidate_query_cache`.
"""

from __future__ import annotations

import base64
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

import orjson
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


logger = logging.getLogger(__name__)

INQUIRY_PAGE_TTL = 300
URGENT_TTL = 60
ANALYTICS_TTL = 3600


class QueryCache:
    def __init__(self, max_size: int = 1000, clock=time.monotonic) -> None:
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float, int]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(prefix: str, options: Optional[Dict[str, Any]] = None) -> str:
        raw = orjson.dumps(
            options or {},
            option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
            default=_key_default,
        )
        return f"{prefix}:{base64.b64encode(raw).decode('ascii')}"

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            value, stored_at, ttl = entry
            if self._clock() - stored_at > ttl:
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            # Re-setting a key keeps its original insertion slot
            self._entries[key] = (value, self._clock(), ttl)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def clean_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, stored_at, ttl) in self._entries.items() if now - stored_at > ttl]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
            }


def _key_default(o: Any):
    # Enums, dates and decimals in filter dicts
    value = getattr(o, "value", None)
    if value is not None:
        return value
    if hasattr(o, "isoformat"):
        return o.isoformat()
    return str(o)


query_cache = QueryCache()


def invalidate_query_cache() -> None:
    query_cache.clear()


class InquiryQueryService:
    """Maintenance hooks for the inquiry query path."""

    def __init__(self, cache: QueryCache = query_cache) -> None:
        self.cache = cache

    def optimize(self, db: Session) -> Dict[str, Any]:
        actions = []
        evicted = self.cache.clean_expired()
        actions.append(f"Query cache cleaned ({evicted} expired)")

        dialect = db.get_bind().dialect.name
        if dialect in ("sqlite", "postgresql"):
            try:
                db.execute(text("ANALYZE contact_inquiries"))
                db.commit()
                actions.append("Table statistics updated")
            except SQLAlchemyError as exc:
                db.rollback()
                logger.warning("ANALYZE failed on %s: %s", dialect, exc)
                actions.append("Table statistics update failed")
        return {"dialect": dialect, "actions": actions, "cache": self.cache.stats()}


inquiry_query_service = InquiryQueryService()
