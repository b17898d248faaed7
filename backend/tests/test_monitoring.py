from datetime import timedelta

from app import models
from app.models.base import utcnow
from app.services.monitoring_service import MonitoringService, monitoring_service, redact
from app.utils.errors import EmailDeliveryError


def test_redact_masks_secrets():
    data = {"email": "a@b.c", "password": "x", "nested": {"Authorization": "Bearer t"}, "items": [{"token": "y"}]}
    assert redact(data) == {
        "email": "a@b.c",
        "password": "[redacted]",
        "nested": {"Authorization": "[redacted]"},
        "items": [{"token": "[redacted]"}],
    }


def test_log_error_counts_by_code():
    service = MonitoringService()
    service.log_error(EmailDeliveryError(), {"password": "hunter2"})
    service.log_error(ValueError("bad"))
    service.log_error(ValueError("worse"))
    assert service.error_counts() == {"E_EMAIL_DELIVERY_ERROR": 1, "ValueError": 2}

    service.reset()
    assert service.error_counts() == {}


def test_error_rate_thresholds():
    service = MonitoringService()
    assert service.check_error_rate()["status"] == "pass"

    for _ in range(100):
        service.record_api_metric("/api/v1/artists/", "GET", 20, 200)
    for _ in range(6):
        service.record_error("E_X")
    assert service.check_error_rate()["status"] == "warn"

    for _ in range(5):
        service.record_error("E_X")
    check = service.check_error_rate()
    assert check["status"] == "fail"
    assert check["details"]["total_errors"] == 11


def test_error_rate_recovers_once_errors_leave_the_window():
    service = MonitoringService(max_metrics=10)
    for _ in range(10):
        service.record_api_metric("/x", "GET", 10, 500)
    for _ in range(20):
        service.record_error("E_BOOM")
    check = service.check_error_rate()
    assert check["status"] == "fail"
    assert check["details"]["error_rate"] == 1.0

    for _ in range(10):
        service.record_api_metric("/x", "GET", 10, 200)
    check = service.check_error_rate()
    assert check["status"] == "pass"
    assert check["details"]["total_errors"] == 0
    assert service.error_counts() == {"E_BOOM": 20}


def test_api_performance_warns_on_slow_average():
    service = MonitoringService()
    assert service.check_api_performance()["message"] == "No recent API activity to analyze"
    service.record_api_metric("/slow", "GET", 3000, 200)
    check = service.check_api_performance()
    assert check["status"] == "warn"
    assert check["details"]["avg_response_time_ms"] == 3000


def test_metrics_buffer_is_bounded():
    service = MonitoringService(max_metrics=3)
    for i in range(5):
        service.record_api_metric(f"/p{i}", "GET", 10, 200)
    assert len(service._recent()) == 3


def test_stale_pending_inquiries_warn(Session):
    db = Session()
    old = utcnow() - timedelta(days=2)
    for i in range(11):
        db.add(
            models.ContactInquiry(
                full_name="Old", email=f"old{i}@test.com", subject="Old request", message="Still waiting here",
                created_at=old,
            )
        )
    db.commit()

    check = MonitoringService().check_contact_inquiries(db)
    db.close()
    assert check["status"] == "warn"
    assert check["details"] == {"total_recent": 0, "old_pending": 11}


def test_health_endpoint_healthy(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-store"
    body = r.json()
    assert body["status"] == "healthy"
    assert set(body["checks"]) == {"database", "contact_inquiries", "api_performance", "error_rate"}
    assert body["metrics"]["total_inquiries"] == 0


def test_health_endpoint_degraded(client):
    monitoring_service.record_api_metric("/slow", "GET", 5000, 200)
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["status"] == "degraded"


def test_health_endpoint_unhealthy(client):
    for _ in range(10):
        monitoring_service.record_api_metric("/x", "GET", 10, 500)
    monitoring_service.record_error("E_BOOM")
    monitoring_service.record_error("E_BOOM")
    r = client.get("/api/v1/health")
    assert r.status_code == 503
    assert r.json()["checks"]["error_rate"]["status"] == "fail"


def test_requests_are_recorded(client):
    client.get("/api/v1/tags/")
    assert any(m.endpoint == "/api/v1/tags/" for m in monitoring_service._recent())


def test_liveness_probe(client):
    body = client.get("/healthz").json()
    assert body["status"] == "ok"
    assert body["kind"] == "live"
