import logging
import random
from typing import Any, Optional, Tuple

import orjson
import redis
import os

from app.core.config import settings
from .json import dumps

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


class _NullRedis:
    """No-op Redis client used when Redis is disabled or unavailable.

    Methods mirror the minimal surface used in this codebase so callers can
    proceed without needing try/except around get_redis_client().
    """

    def get(self, key: str):
        return None

    def setex(self, key: str, expire: int, value: str):
        return None

    def incr(self, key: str, amount: int = 1):
        return 0

    def expire(self, key: str, seconds: int):
        return False

    def ttl(self, key: str):
        return -2

    def scan_iter(self, pattern: str):
        return iter(())

    def delete(self, *keys: str):
        return 0

    def close(self):
        return None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        url = (settings.REDIS_URL or "").strip()
        if not url or url.lower() in {"none", "disabled", "false", "0"}:
            _redis_client = _NullRedis()  # type: ignore[assignment]
            return _redis_client
        try:
            # Conservative socket timeouts so a slow Redis does not stall
            # login and rate-limit checks.
            conn_to = float(os.getenv("REDIS_CONNECT_TIMEOUT", "0.5"))
            read_to = float(os.getenv("REDIS_SOCKET_TIMEOUT", "0.5"))
            _redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=conn_to,
                socket_timeout=read_to,
            )
        except (ValueError, redis.exceptions.RedisError) as exc:
            logger.warning("Redis client creation failed, caching disabled: %s", exc)
            _redis_client = _NullRedis()  # type: ignore[assignment]
    return _redis_client


ARTIST_LIST_KEY_PREFIX = "artists:list"


def _apply_jitter(expire: int) -> int:
    """Return a TTL with a small random jitter to prevent cache stampedes."""
    return expire + random.randint(0, max(1, expire // 10))


def _make_key(page: int, limit: int, filters: Optional[dict]) -> str:
    """Return a Redis key for the given list parameters.

    ``None`` filters are dropped and the rest sorted so that equivalent
    queries share an entry.
    """
    parts = []
    for name in sorted((filters or {}).keys()):
        value = filters[name]
        if value is None or value == "":
            continue
        parts.append(f"{name}={value}")
    return f"{ARTIST_LIST_KEY_PREFIX}:{page}:{limit}:{'&'.join(parts)}"


def get_cached_artist_list(page: int = 1, *, limit: int = 20, filters: Optional[dict] = None) -> Any | None:
    """Retrieve a cached artist page payload for the given parameters if available."""
    client = get_redis_client()
    key = _make_key(page, limit, filters)
    try:
        data = client.get(key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable: %s", exc)
        return None
    if not data:
        return None
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        logger.warning("Could not decode artist list cache for key %s: %s", key, exc)
        return None


def cache_artist_list(
    data: Any,
    page: int = 1,
    *,
    limit: int = 20,
    filters: Optional[dict] = None,
    expire: int = 60,
) -> None:
    """Cache the artist page payload for the given parameter combination."""
    client = get_redis_client()
    key = _make_key(page, limit, filters)
    try:
        client.setex(key, _apply_jitter(expire), dumps(data))
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not cache artist list: %s", exc)


def invalidate_artist_list_cache() -> None:
    """Remove all cached artist list entries."""
    client = get_redis_client()
    try:
        for key in client.scan_iter(f"{ARTIST_LIST_KEY_PREFIX}:*"):
            client.delete(key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not clear artist list cache: %s", exc)


def hit_counter(key: str, window: int) -> Tuple[int, int]:
    """Increment a fixed-window counter and return ``(count, seconds_left)``.

    The window starts on the first hit. Returns ``(0, window)`` when Redis is
    unreachable so callers fail open.
    """
    client = get_redis_client()
    try:
        count = int(client.incr(key) or 0)
        if count == 1:
            client.expire(key, window)
        ttl = int(client.ttl(key) or 0)
        if ttl < 0:
            # Lost expiry (e.g. key created by an older process)
            client.expire(key, window)
            ttl = window
        return count, ttl
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable for counter %s: %s", key, exc)
        return 0, window


def close_redis_client() -> None:
    """Close the global Redis client if it exists."""
    global _redis_client
    if _redis_client is not None:
        try:
            _redis_client.close()
        except redis.exceptions.RedisError as exc:  # pragma: no cover - best effort
            logger.warning("Error closing Redis client: %s", exc)
        finally:
            _redis_client = None
