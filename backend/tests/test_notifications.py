import logging

import aiosmtplib

from app import models
from app.models.contact_inquiry import InquiryStatus, ProjectType
from app.services.monitoring_service import monitoring_service
from app.services.notifications import notify_artist_of_inquiry
from app.utils import email as email_module
from app.utils.status_logger import register_status_listeners


def new_inquiry(**attrs):
    data = dict(
        id="inq-1",
        full_name="Camille Martin",
        email="camille@example.com",
        subject="Koi on the calf",
        message="Hi! Could you do a koi on my calf?",
        project_type=ProjectType.QUOTE,
    )
    data.update(attrs)
    return models.ContactInquiry(**data)


def artist_with_email(email="lea@test.com"):
    user = models.User(email=email, full_name="Léa")
    return models.Artist(id=1, stage_name="Lea Ink", user=user)


def test_notify_sends_email(sent_emails):
    inquiry = new_inquiry(placement="calf")
    assert notify_artist_of_inquiry(artist_with_email(), inquiry) is True
    msg = sent_emails[0]
    assert msg["To"] == "lea@test.com"
    assert msg["Reply-To"] == "camille@example.com"
    body = msg.get_content()
    assert "Hello Lea Ink," in body
    assert "Placement: calf" in body
    assert "/inbox/inq-1" in body


def test_notify_skips_missing_artist_or_email(sent_emails):
    assert notify_artist_of_inquiry(None, new_inquiry()) is False
    assert notify_artist_of_inquiry(artist_with_email(email=""), new_inquiry()) is False
    assert sent_emails == []


def test_notify_delivery_failure_is_recorded(monkeypatch):
    async def broken(msg):
        raise aiosmtplib.SMTPException("relay down")

    monkeypatch.setattr(email_module, "_send_async", broken)
    assert notify_artist_of_inquiry(artist_with_email(), new_inquiry()) is False
    assert monitoring_service.error_counts() == {"E_EMAIL_DELIVERY_ERROR": 1}


def test_status_changes_are_logged(caplog, Session):
    register_status_listeners()
    register_status_listeners()  # second call is a no-op

    db = Session()
    inquiry = new_inquiry(id="inq-log")
    db.add(inquiry)
    db.commit()

    with caplog.at_level(logging.INFO, logger="app.utils.status_logger"):
        inquiry.update_status(InquiryStatus.REPLIED)
        inquiry.update_status(InquiryStatus.REPLIED)
    db.close()

    lines = [r.getMessage() for r in caplog.records if r.name == "app.utils.status_logger"]
    assert lines == ["ContactInquiry id=inq-log status changed from pending to replied"]
