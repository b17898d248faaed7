from datetime import datetime

from app.models.contact_inquiry import InquiryStatus
from app.services.query_cache import InquiryQueryService, QueryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_make_key_is_order_independent():
    a = QueryCache.make_key("inquiries", {"page": 1, "filters": {"status": ["pending"], "is_read": False}})
    b = QueryCache.make_key("inquiries", {"filters": {"is_read": False, "status": ["pending"]}, "page": 1})
    assert a == b
    assert a.startswith("inquiries:")
    assert QueryCache.make_key("inquiries", {"page": 2}) != QueryCache.make_key("inquiries", {"page": 1})


def test_make_key_handles_enums_and_dates():
    key = QueryCache.make_key("x", {"status": InquiryStatus.PENDING, "since": datetime(2024, 5, 1)})
    assert key == QueryCache.make_key("x", {"status": "pending", "since": "2024-05-01T00:00:00"})


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = QueryCache(clock=clock)
    cache.set("k", {"v": 1}, ttl=60)
    assert cache.get("k") == {"v": 1}

    clock.now += 61
    assert cache.get("k") is None
    assert cache.stats() == {"size": 0, "max_size": 1000, "hits": 1, "misses": 1}


def test_clean_expired():
    clock = FakeClock()
    cache = QueryCache(clock=clock)
    cache.set("short", 1, ttl=10)
    cache.set("long", 2, ttl=100)
    clock.now += 50
    assert cache.clean_expired() == 1
    assert cache.get("long") == 2
    assert len(cache) == 1


def test_oldest_entry_evicted_over_max_size():
    cache = QueryCache(max_size=2)
    cache.set("a", 1, ttl=60)
    cache.set("b", 2, ttl=60)
    cache.set("c", 3, ttl=60)
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_optimize_reports_actions(Session):
    clock = FakeClock()
    cache = QueryCache(clock=clock)
    cache.set("stale", 1, ttl=1)
    clock.now += 5

    db = Session()
    report = InquiryQueryService(cache).optimize(db)
    db.close()

    assert report["dialect"] == "sqlite"
    assert report["actions"] == ["Query cache cleaned (1 expired)", "Table statistics updated"]
    assert report["cache"]["size"] == 0
