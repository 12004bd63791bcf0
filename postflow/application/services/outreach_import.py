"""Inbound outreach replies: webhook checks, processing log and review queue"""

import hashlib
import hmac
import ipaddress
import logging
import time
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from ...core.config import settings
from ...domain.enums import EmailLogStatus, PublisherAccountStatus, ReviewQueueType, ReviewStatus
from ...infrastructure.orm.outreach_model import (
    EmailProcessingLogModel, EmailReviewQueueModel, WebhookSecurityLogModel,
)
from ...infrastructure.orm.website_model import PublisherModel
from .email_parser import EmailParseRequest, EmailParserService
from .shadow_publishers import ShadowPublisherService

logger = logging.getLogger(__name__)

RETRY_BASE_SECONDS = 1
RETRY_MAX_SECONDS = 60


def verify_signature(raw_body: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """Check a ``sha256=<hex>`` HMAC header; absent signature or secret is accepted."""
    if not signature:
        return True
    if not secret:
        logger.warning("MANYREACH_WEBHOOK_SECRET not configured, skipping signature validation")
        return True
    expected = hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()
    received = signature[len("sha256="):] if signature.startswith("sha256=") else signature
    return hmac.compare_digest(expected.encode(), received.strip().lower().encode("utf-8"))


def is_ip_allowed(ip: Optional[str]) -> bool:
    if settings.ENVIRONMENT == "development" or settings.MANYREACH_BYPASS_IP_CHECK:
        return True
    try:
        address = ipaddress.ip_address((ip or "").split(",")[0].strip())
    except ValueError:
        logger.error("Invalid webhook source IP: %s", ip)
        return False
    for cidr in settings.MANYREACH_ALLOWED_IP_RANGES:
        if address in ipaddress.ip_network(cidr, strict=False):
            return True
    logger.warning("Webhook IP %s not in allowed ranges", ip)
    return False


def normalize_payload(payload: dict) -> dict:
    """Return the canonical ``email_received`` shape.

    ManyReach's native ``prospect_replied`` event is transformed; anything
    else must already carry the sender address and text content.
    """
    if payload.get("eventId") == "prospect_replied":
        prospect = payload.get("prospect") or {}
        message = payload.get("message") or ""
        now = datetime.utcnow().isoformat()
        return {
            "event": "email_received",
            "webhook_id": str(uuid4()),
            "timestamp": now,
            "campaign": {"id": str(payload.get("campaignid") or "unknown"), "name": "ManyReach Campaign",
                         "type": "outreach"},
            "email": {
                "message_id": str(uuid4()),
                "from": {
                    "email": prospect.get("email") or "unknown@email.com",
                    "name": f"{prospect.get('firstname') or ''} {prospect.get('lastname') or ''}".strip(),
                },
                "to": {"email": payload.get("sender_email") or "outreach@company.com", "name": "Outreach Team"},
                "subject": "Re: Guest Post Opportunity",
                "received_at": now,
                "content": {"text": message, "html": f"<p>{message}</p>"},
            },
            "original_outreach": {
                "sent_at": now,
                "subject": "Guest Post Opportunity",
                "recipient_website": prospect.get("www") or prospect.get("domain") or "",
            },
            "metadata": {"is_auto_reply": False},
        }

    email = payload.get("email") or {}
    if not (email.get("from") or {}).get("email") or not (email.get("content") or {}).get("text"):
        raise ValueError("Missing required email fields")
    return payload


def _parse_received_at(value: Optional[str]) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
        except ValueError:
            logger.debug("Unparseable received_at %r", value)
    return datetime.utcnow()


def retry_delay(attempt: int) -> int:
    return min(RETRY_BASE_SECONDS * 2 ** (attempt - 1), RETRY_MAX_SECONDS)


class OutreachImportService:

    def __init__(self, db: Session):
        self.db = db
        self.publishers = ShadowPublisherService(db)

    # webhook

    def check_webhook(self, raw_body: bytes, signature: Optional[str], ip_address: Optional[str],
                      webhook_id: Optional[str] = None) -> Tuple[bool, bool]:
        """Validate a delivery and record the attempt. Returns (signature_ok, ip_ok)."""
        signature_valid = verify_signature(raw_body, signature, settings.MANYREACH_WEBHOOK_SECRET)
        ip_allowed = is_ip_allowed(ip_address)
        reason = None
        if not signature_valid:
            reason = "Invalid signature"
        elif not ip_allowed:
            reason = "IP not allowed"
        self.db.add(WebhookSecurityLogModel(
            webhook_id=webhook_id,
            source="manyreach",
            ip_address=ip_address,
            signature_valid=signature_valid,
            ip_allowed=ip_allowed,
            allowed=signature_valid and ip_allowed,
            rejection_reason=reason,
        ))
        self.db.commit()
        return signature_valid, ip_allowed

    def create_processing_log(self, payload: dict) -> EmailProcessingLogModel:
        campaign = payload.get("campaign") or {}
        email = payload["email"]
        metadata = payload.get("metadata") or {}
        log = EmailProcessingLogModel(
            webhook_id=payload.get("webhook_id"),
            campaign_id=campaign.get("id"),
            campaign_name=campaign.get("name"),
            campaign_type=campaign.get("type") or "outreach",
            email_from=email["from"]["email"].lower(),
            email_to=(email.get("to") or {}).get("email"),
            email_subject=email.get("subject"),
            email_message_id=email.get("message_id"),
            received_at=_parse_received_at(email.get("received_at")),
            raw_content=email["content"]["text"],
            html_content=email["content"].get("html"),
            thread_id=metadata.get("thread_id"),
            reply_count=metadata.get("reply_count") or 0,
            original_outreach=payload.get("original_outreach"),
            status=EmailLogStatus.PENDING.value,
        )
        self.db.add(log)
        self.db.commit()
        logger.info("Queued outreach reply %s from %s", log.id, log.email_from)
        return log

    # processing

    def get_log(self, log_id: UUID) -> EmailProcessingLogModel:
        log = self.db.get(EmailProcessingLogModel, log_id)
        if not log:
            raise LookupError("Email processing log not found")
        return log

    async def process_email(self, log_id: UUID, parser: EmailParserService, attempt: int = 1) -> dict:
        """Parse a stored reply and run it through the publisher pipeline.

        Returns ``{"status": ..., "retry_in": seconds}``; callers schedule the
        next attempt when the status is ``retrying``.
        """
        log = self.get_log(log_id)
        started = time.monotonic()
        log.status = EmailLogStatus.PROCESSING.value
        self.db.commit()

        try:
            outreach = log.original_outreach or {}
            parsed = await parser.parse_email(EmailParseRequest(
                sender=log.email_from,
                subject=log.email_subject or "",
                content=log.raw_content,
                html_content=log.html_content,
                campaign_type=log.campaign_type or "outreach",
                original_website=outreach.get("recipient_website") or None,
            ))
            log.parsed_data = parsed
            log.confidence_score = round(parsed["overall_confidence"], 2)
            log.status = EmailLogStatus.PARSED.value
            log.error_message = None
            log.processed_at = datetime.utcnow()
            log.processing_duration_ms = int((time.monotonic() - started) * 1000)
            self.db.flush()

            if parsed["overall_confidence"] >= settings.SHADOW_MIN_PROCESSING_CONFIDENCE:
                publisher = self.publishers.process_publisher_from_email(
                    log.id, parsed, log.campaign_type or "outreach"
                )
                log.publisher_id = publisher.id
            else:
                self.publishers.add_to_review_queue(log.id, parsed, ReviewQueueType.LOW_CONFIDENCE, "low_confidence")
            self.db.commit()
            return {"status": log.status, "retry_in": None}
        except Exception as e:
            logger.exception("Processing outreach reply %s failed (attempt %s)", log_id, attempt)
            self.db.rollback()
            return self._record_failure(log_id, e, attempt, started)

    def _record_failure(self, log_id: UUID, error: Exception, attempt: int, started: float) -> dict:
        log = self.get_log(log_id)
        log.retry_count = attempt
        if attempt < settings.EMAIL_PROCESSING_MAX_RETRIES:
            delay = retry_delay(attempt)
            log.status = EmailLogStatus.RETRYING.value
            log.error_message = f"Retry attempt {attempt + 1} after error: {error}"
            self.db.commit()
            return {"status": log.status, "retry_in": delay}

        log.status = EmailLogStatus.FAILED.value
        log.error_message = f"Failed after {attempt} attempts: {error}"
        log.processed_at = datetime.utcnow()
        log.processing_duration_ms = int((time.monotonic() - started) * 1000)
        self.publishers.add_to_review_queue(
            log.id,
            {
                "sender": {"email": log.email_from, "confidence": 0},
                "websites": [],
                "offerings": [],
                "overall_confidence": 0,
                "missing_fields": ["all"],
                "errors": [f"Processing failed: {error}"],
            },
            ReviewQueueType.PROCESSING_FAILED,
            "processing_failed",
        )
        self.publishers.log_error(log.id, str(error))
        self.db.commit()
        return {"status": log.status, "retry_in": None}

    def list_logs(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> Tuple[List[EmailProcessingLogModel], int]:
        query = self.db.query(EmailProcessingLogModel)
        if status:
            query = query.filter(EmailProcessingLogModel.status == status)
        total = query.count()
        logs = query.order_by(EmailProcessingLogModel.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return logs, total

    # review queue

    def review_queue(self, status: Optional[str] = ReviewStatus.PENDING.value, page: int = 1,
                     limit: int = 20) -> Tuple[List[EmailReviewQueueModel], int]:
        query = self.db.query(EmailReviewQueueModel)
        if status:
            query = query.filter(EmailReviewQueueModel.status == status)
        total = query.count()
        items = query.order_by(
            EmailReviewQueueModel.priority.desc(), EmailReviewQueueModel.created_at
        ).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def _pending_review(self, review_id: UUID) -> EmailReviewQueueModel:
        review = self.db.get(EmailReviewQueueModel, review_id)
        if not review:
            raise LookupError("Review item not found")
        if review.status != ReviewStatus.PENDING.value:
            raise ValueError(f"Review item already {review.status}")
        return review

    def approve_review(self, review_id: UUID, reviewer_id: Optional[UUID], notes: Optional[str] = None) -> EmailReviewQueueModel:
        review = self._pending_review(review_id)
        if review.publisher_id:
            publisher = self.db.get(PublisherModel, review.publisher_id)
            if publisher and publisher.account_status == PublisherAccountStatus.SHADOW.value:
                self.publishers.activate_publisher(publisher, review.log_id, action="review_approved")
        review.status = ReviewStatus.APPROVED.value
        review.reviewed_by = reviewer_id
        review.reviewed_at = datetime.utcnow()
        review.review_notes = notes
        self.db.commit()
        logger.info("Review %s approved by %s", review.id, reviewer_id or "auto-approval")
        return review

    def reject_review(self, review_id: UUID, reviewer_id: UUID, notes: Optional[str] = None) -> EmailReviewQueueModel:
        review = self._pending_review(review_id)
        review.status = ReviewStatus.REJECTED.value
        review.reviewed_by = reviewer_id
        review.reviewed_at = datetime.utcnow()
        review.review_notes = notes
        self.db.commit()
        return review

    def auto_approve_due_reviews(self) -> int:
        due = self.db.query(EmailReviewQueueModel).filter(
            EmailReviewQueueModel.status == ReviewStatus.PENDING.value,
            EmailReviewQueueModel.auto_approve_at.isnot(None),
            EmailReviewQueueModel.auto_approve_at <= datetime.utcnow(),
        ).all()
        for review in due:
            self.approve_review(review.id, None, notes="Auto-approved after review window")
        return len(due)
