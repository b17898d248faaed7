import redis
from fastapi.testclient import TestClient

from app.main import app
from app.utils import redis_cache

REAL_GET_CLIENT = redis_cache.get_redis_client


def test_cache_artist_list_roundtrip(fake_redis):
    payload = {"data": [{"id": 1, "slug": "lea-ink"}], "meta": {"total": 1}}
    redis_cache.cache_artist_list(payload, page=1, filters={"sort": "featured"}, expire=10)
    assert redis_cache.get_cached_artist_list(page=1, filters={"sort": "featured"}) == payload
    # Jittered TTL stays close to the requested one
    key = next(fake_redis.scan_iter("artists:list:*"))
    assert 10 <= fake_redis.ttl(key) <= 11


def test_cache_key_ignores_empty_filters_and_order():
    a = redis_cache._make_key(2, 15, {"style": "japanese", "city_id": 3, "q": None, "featured": ""})
    b = redis_cache._make_key(2, 15, {"city_id": 3, "style": "japanese"})
    assert a == b == "artists:list:2:15:city_id=3&style=japanese"


def test_cache_is_page_specific():
    redis_cache.cache_artist_list({"data": []}, page=2, limit=15, filters={"style": "dotwork"})
    assert redis_cache.get_cached_artist_list(page=2, limit=15, filters={"style": "dotwork"}) == {"data": []}
    assert redis_cache.get_cached_artist_list(page=1, limit=15, filters={"style": "dotwork"}) is None


def test_invalidate_artist_list_cache(fake_redis):
    redis_cache.cache_artist_list({"data": [1]}, page=1)
    redis_cache.cache_artist_list({"data": [2]}, page=2)
    fake_redis.set("unrelated", "keep")
    redis_cache.invalidate_artist_list_cache()
    assert redis_cache.get_cached_artist_list(page=1) is None
    assert redis_cache.get_cached_artist_list(page=2) is None
    assert fake_redis.get("unrelated") == "keep"


def test_corrupt_entry_is_a_miss(fake_redis):
    fake_redis.set(redis_cache._make_key(1, 20, None), "{not json")
    assert redis_cache.get_cached_artist_list(page=1) is None


class DownRedis:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise redis.exceptions.ConnectionError("down")

        return fail


def test_redis_outage_fails_open(monkeypatch, client, make_artist):
    monkeypatch.setattr(redis_cache, "get_redis_client", lambda: DownRedis())
    make_artist()
    r = client.get("/api/v1/artists/")
    assert r.status_code == 200
    assert r.json()["meta"]["total"] == 1
    assert redis_cache.hit_counter("ratelimit:x:/", 60) == (0, 60)


def test_hit_counter_window():
    assert redis_cache.hit_counter("k", 30) == (1, 30)
    count, ttl = redis_cache.hit_counter("k", 30)
    assert count == 2
    assert 0 < ttl <= 30


def test_null_redis_when_disabled(monkeypatch):
    monkeypatch.setattr(redis_cache, "_redis_client", None)
    monkeypatch.setattr(redis_cache.settings, "REDIS_URL", "disabled")
    client = REAL_GET_CLIENT()
    assert isinstance(client, redis_cache._NullRedis)
    assert client.get("anything") is None
    assert redis_cache._redis_client is client


class DummyRedis:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


def test_close_redis_client(monkeypatch):
    dummy = DummyRedis()
    monkeypatch.setattr(redis_cache, "_redis_client", dummy)
    redis_cache.close_redis_client()
    assert dummy.closed
    assert redis_cache._redis_client is None


def test_shutdown_event_closes_client(monkeypatch):
    dummy = DummyRedis()
    monkeypatch.setattr(redis_cache, "_redis_client", dummy)

    with TestClient(app):
        pass

    assert dummy.closed
    assert redis_cache._redis_client is None
