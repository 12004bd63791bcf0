import asyncio
import hashlib
import hmac
import json
from datetime import datetime, timedelta

import pytest

from conftest import FakeAIService, auth_headers
from postflow.application.services.email_parser import EmailParserService
from postflow.application.services.outreach_import import (
    OutreachImportService, is_ip_allowed, normalize_payload, retry_delay, verify_signature,
)
from postflow.application.services.shadow_publishers import ShadowPublisherService, calculate_review_priority
from postflow.core.config import settings
from postflow.infrastructure.orm.outreach_model import EmailReviewQueueModel, PublisherAutomationLogModel
from postflow.infrastructure.orm.user_model import UserModel
from postflow.infrastructure.orm.website_model import (
    PublisherModel, PublisherOfferingModel, PublisherOfferingRelationshipModel, WebsiteModel,
)

ALLOWED_IP = {"x-forwarded-for": "52.70.186.10"}

PAYLOAD = {
    "event": "email_received",
    "webhook_id": "wh_1",
    "campaign": {"id": "c1", "name": "Tech blogs", "type": "outreach"},
    "email": {
        "message_id": "m1",
        "from": {"email": "Editor@TechBlog.com", "name": "Ana"},
        "subject": "Re: Guest Post Opportunity",
        "received_at": "2024-05-01T10:00:00Z",
        "content": {"text": "Guest posts are $150, link insertions $90."},
    },
    "original_outreach": {"recipient_website": "techblog.com"},
}

CONFIDENT = FakeAIService(
    basic={"name": "Ana Lopez", "company": "TechBlog Media", "websites": ["techblog.com"]},
    pricing={"guest_post_price": 150, "link_insertion_price": 90},
    requirements={"accepts_dofollow": True},
)


def _parsed(confidence, domain="techblog.com", email="editor@techblog.com", **sender):
    return {
        "sender": {"email": email, "name": "Ana Lopez", "company": "TechBlog Media", "confidence": 0.9, **sender},
        "websites": [{"domain": domain, "confidence": 0.9}],
        "offerings": [{
            "type": "guest_post", "base_price": 150.0, "currency": "USD", "turnaround_days": None,
            "requirements": {"accepts_dofollow": True, "prohibited_topics": ["casino"]}, "confidence": 0.9,
        }],
        "overall_confidence": confidence,
        "missing_fields": [],
    }


@pytest.fixture
def service(db):
    return OutreachImportService(db)


@pytest.fixture
def log(service):
    return service.create_processing_log(normalize_payload(PAYLOAD))


# webhook checks

def test_verify_signature():
    body = b'{"a": 1}'
    digest = hmac.new(b"secret", body, hashlib.sha256).hexdigest()
    assert verify_signature(body, f"sha256={digest}", "secret")
    assert verify_signature(body, digest.upper(), "secret")
    assert not verify_signature(body, "sha256=deadbeef", "secret")
    assert not verify_signature(body, "sha256=d\u00e9adbeef", "secret")
    # unsigned deliveries and unconfigured secrets are let through
    assert verify_signature(body, None, "secret")
    assert verify_signature(body, "sha256=deadbeef", None)


def test_ip_allow_list(monkeypatch):
    assert is_ip_allowed("52.70.186.10")
    assert is_ip_allowed("18.210.1.1, 10.0.0.1")
    assert not is_ip_allowed("8.8.8.8")
    assert not is_ip_allowed("testclient")

    monkeypatch.setattr(settings, "MANYREACH_BYPASS_IP_CHECK", True)
    assert is_ip_allowed("8.8.8.8")


def test_retry_delay_backs_off():
    assert [retry_delay(n) for n in (1, 2, 3, 8)] == [1, 2, 4, 60]


def test_review_priority():
    assert calculate_review_priority(0.95, []) == 50
    assert calculate_review_priority(0.6, ["website"]) == 70
    assert calculate_review_priority(0.1, ["a", "b", "c", "d", "e"]) == 100


def test_normalize_native_manyreach_event():
    payload = normalize_payload({
        "eventId": "prospect_replied",
        "campaignid": 42,
        "message": "Our rate is $200",
        "prospect": {"email": "owner@site.org", "firstname": "Sam", "lastname": "Lee", "domain": "site.org"},
    })
    assert payload["email"]["from"] == {"email": "owner@site.org", "name": "Sam Lee"}
    assert payload["campaign"]["id"] == "42"
    assert payload["original_outreach"]["recipient_website"] == "site.org"


def test_normalize_rejects_incomplete_payload():
    with pytest.raises(ValueError):
        normalize_payload({"email": {"from": {"email": "a@b.com"}, "content": {}}})


def test_webhook_queues_processing(client, queued_emails, service):
    response = client.post("/api/v1/outreach/webhooks/manyreach", json=PAYLOAD, headers=ALLOWED_IP)
    assert response.status_code == 200
    data = response.json()
    assert data["webhook_id"] == "wh_1"
    assert queued_emails == [data["processing_id"]]

    logs, total = service.list_logs()
    assert total == 1
    assert logs[0].email_from == "editor@techblog.com"
    assert logs[0].received_at == datetime(2024, 5, 1, 10, 0)


def test_webhook_rejects_unknown_ip(client, queued_emails):
    response = client.post("/api/v1/outreach/webhooks/manyreach", json=PAYLOAD)
    assert response.status_code == 403
    assert queued_emails == []


def test_webhook_checks_signature(client, monkeypatch):
    monkeypatch.setattr(settings, "MANYREACH_WEBHOOK_SECRET", "shh")
    body = json.dumps(PAYLOAD).encode()
    good = hmac.new(b"shh", body, hashlib.sha256).hexdigest()

    bad = client.post(
        "/api/v1/outreach/webhooks/manyreach", content=body,
        headers={**ALLOWED_IP, "x-manyreach-signature": "sha256=00", "content-type": "application/json"},
    )
    assert bad.status_code == 401

    ok = client.post(
        "/api/v1/outreach/webhooks/manyreach", content=body,
        headers={**ALLOWED_IP, "x-manyreach-signature": f"sha256={good}", "content-type": "application/json"},
    )
    assert ok.status_code == 200


def test_webhook_rejects_bad_payload(client):
    assert client.post("/api/v1/outreach/webhooks/manyreach", content=b"not json", headers=ALLOWED_IP).status_code == 400
    assert client.post("/api/v1/outreach/webhooks/manyreach", json={"email": {}}, headers=ALLOWED_IP).status_code == 400


# processing

def test_process_email_creates_shadow_publisher(service, log, db):
    result = asyncio.run(service.process_email(log.id, EmailParserService(CONFIDENT)))
    assert result == {"status": "parsed", "retry_in": None}

    db.refresh(log)
    assert log.confidence_score == pytest.approx(0.825, abs=0.01)
    publisher = db.get(PublisherModel, log.publisher_id)
    assert publisher.account_status == "shadow"
    assert publisher.invitation_token

    # 0.825 lands in the medium band: queued with an auto-approval deadline
    review = db.query(EmailReviewQueueModel).one()
    assert review.reason == "medium_confidence"
    assert review.auto_approve_at is not None


def test_low_confidence_goes_to_review(service, db):
    payload = {**PAYLOAD, "original_outreach": {}, "email": {**PAYLOAD["email"], "from": {"email": "someone@gmail.com"}}}
    log = service.create_processing_log(normalize_payload(payload))
    result = asyncio.run(service.process_email(log.id, EmailParserService(FakeAIService())))
    assert result["status"] == "parsed"

    review = db.query(EmailReviewQueueModel).one()
    assert review.queue_type == "low_confidence"
    assert review.publisher_id is None
    assert db.query(PublisherModel).count() == 0


class CrashingParser:
    async def parse_email(self, request):
        raise RuntimeError("parser crashed")


def test_failed_processing_retries_then_gives_up(service, log, db):
    failing = CrashingParser()

    first = asyncio.run(service.process_email(log.id, failing, attempt=1))
    assert first == {"status": "retrying", "retry_in": 1}

    last = asyncio.run(service.process_email(log.id, failing, attempt=3))
    assert last == {"status": "failed", "retry_in": None}

    db.refresh(log)
    assert log.retry_count == 3
    assert log.error_message.startswith("Failed after 3 attempts")
    assert db.query(EmailReviewQueueModel).one().queue_type == "processing_failed"
    error = db.query(PublisherAutomationLogModel).one()
    assert (error.action, error.action_status) == ("error", "failed")
    assert error.new_data == {"error": "parser crashed"}


def test_unparseable_reply_goes_to_review(service, log, db):
    result = asyncio.run(service.process_email(log.id, EmailParserService(FakeAIService(fail=True))))
    assert result == {"status": "parsed", "retry_in": None}

    db.refresh(log)
    assert log.confidence_score == pytest.approx(0.1)
    assert db.query(EmailReviewQueueModel).one().queue_type == "low_confidence"


# shadow publishers

def test_high_confidence_publisher_is_activated(db, log):
    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.95))

    assert publisher.account_status == "active"
    offering = db.query(PublisherOfferingModel).one()
    assert offering.base_price == 15000
    assert offering.turnaround_days == 7
    assert offering.is_active
    assert offering.attributes["restrictions"] == {"niches": ["casino"]}
    assert db.query(WebsiteModel).one().domain == "techblog.com"
    assert db.query(EmailReviewQueueModel).count() == 0


@pytest.mark.parametrize("confidence,reason", [
    (0.75, "medium_confidence"),
    (0.55, "low_confidence"),
    (0.3, "very_low_confidence"),
])
def test_shadow_publisher_review_bands(db, log, confidence, reason):
    ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(confidence))
    db.commit()
    review = db.query(EmailReviewQueueModel).one()
    assert review.reason == reason
    assert (review.auto_approve_at is not None) == (reason == "medium_confidence")


def test_reply_from_existing_publisher_updates_it(db, log, publisher_user):
    existing = PublisherModel(
        user_id=publisher_user.id, email="editor@techblog.com", contact_name="A.", account_status="active",
    )
    db.add(existing)
    db.commit()

    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.6))

    assert publisher.id == existing.id
    assert publisher.contact_name == "Ana Lopez"
    assert db.query(PublisherModel).count() == 1
    relation = db.query(PublisherOfferingRelationshipModel).filter(
        PublisherOfferingRelationshipModel.offering_id.isnot(None)
    ).one()
    assert relation.verification_status == "verified"


def test_existing_website_owner_is_matched(db, log):
    owner = PublisherModel(email="sales@techblog.com", contact_name="Sales", account_status="active")
    website = WebsiteModel(domain="techblog.com", source="manual")
    db.add_all([owner, website])
    db.flush()
    db.add(PublisherOfferingRelationshipModel(publisher_id=owner.id, website_id=website.id))
    db.commit()

    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.6))
    assert publisher.id == owner.id


def _two_site_reply(sister_price):
    parsed = _parsed(0.95)
    parsed["websites"].append({"domain": "sister.net", "confidence": 0.9})
    parsed["offerings"].append({
        "type": "guest_post", "base_price": sister_price, "currency": "USD",
        "website_specific": "https://sister.net", "confidence": 0.9,
    })
    return parsed


def _site_price(db, domain):
    return db.query(PublisherOfferingModel.base_price).join(
        PublisherOfferingRelationshipModel,
        PublisherOfferingRelationshipModel.offering_id == PublisherOfferingModel.id,
    ).join(
        WebsiteModel, WebsiteModel.id == PublisherOfferingRelationshipModel.website_id,
    ).filter(WebsiteModel.domain == domain).scalar()


def test_per_website_prices_get_separate_offerings(db, log):
    service = ShadowPublisherService(db)
    service.process_publisher_from_email(log.id, _two_site_reply(80.0))
    db.commit()

    prices = sorted(price for (price,) in db.query(PublisherOfferingModel.base_price))
    assert prices == [8000, 15000]
    assert _site_price(db, "techblog.com") == 15000
    assert _site_price(db, "sister.net") == 8000

    # a later quote for one site leaves the other site's offering alone
    service.process_publisher_from_email(log.id, _two_site_reply(90.0))
    db.commit()
    assert db.query(PublisherOfferingModel).count() == 2
    assert _site_price(db, "techblog.com") == 15000
    assert _site_price(db, "sister.net") == 9000


# review queue

def test_approving_review_activates_shadow_publisher(client, staff, service, log, db):
    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.75))
    review = db.query(EmailReviewQueueModel).one()

    queue = client.get("/api/v1/outreach/review-queue", headers=auth_headers(staff)).json()
    assert [item["id"] for item in queue["items"]] == [str(review.id)]

    response = client.post(
        f"/api/v1/outreach/review-queue/{review.id}/approve", json={"notes": "ok"}, headers=auth_headers(staff)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    db.refresh(publisher)
    assert publisher.account_status == "active"
    again = client.post(f"/api/v1/outreach/review-queue/{review.id}/approve", json={}, headers=auth_headers(staff))
    assert again.status_code == 400


def test_review_queue_is_staff_only(client, account):
    assert client.get("/api/v1/outreach/review-queue", headers=auth_headers(account)).status_code == 403


def test_auto_approve_due_reviews(service, log, db):
    ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.75))
    review = db.query(EmailReviewQueueModel).one()
    assert service.auto_approve_due_reviews() == 0

    review.auto_approve_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()
    assert service.auto_approve_due_reviews() == 1
    db.refresh(review)
    assert review.status == "approved"
    assert review.reviewed_by is None


# claiming

def test_claim_shadow_publisher(client, log, db):
    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.55))
    token = publisher.invitation_token

    info = client.get(f"/api/v1/outreach/claim/{token}")
    assert info.status_code == 200
    assert info.json()["email"] == "editor@techblog.com"

    response = client.post(f"/api/v1/outreach/claim/{token}", json={"password": "publisherpass"})
    assert response.status_code == 200
    user = db.query(UserModel).filter(UserModel.email == "editor@techblog.com").one()
    assert user.user_type == "publisher"

    db.refresh(publisher)
    assert publisher.account_status == "active"
    assert publisher.user_id == user.id
    assert client.get(f"/api/v1/outreach/claim/{token}").status_code == 400


def test_claim_rejects_short_password(client, log, db):
    publisher = ShadowPublisherService(db).process_publisher_from_email(log.id, _parsed(0.55))
    response = client.post(f"/api/v1/outreach/claim/{publisher.invitation_token}", json={"password": "short"})
    assert response.status_code == 400
