"""Outreach reply import: ManyReach webhook, processing logs, review queue and publisher claims"""

import json
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from ...api.dependencies import require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.outreach_dtos import (
    ClaimInfoDTO, ClaimPublisherDTO, ClaimResponseDTO, EmailLogDTO, EmailLogListResponse,
    ReviewDecisionDTO, ReviewItemDTO, ReviewQueueResponse, WebhookAcceptedResponse,
)
from ...application.services.outreach_import import OutreachImportService, normalize_payload
from ...application.services.shadow_publishers import ShadowPublisherService
from ...core.config import settings
from ...db.database import get_db
from ...domain.entities.user import User
from ...domain.enums import EmailLogStatus
from ...tasks import process_inbound_email

logger = logging.getLogger(__name__)

router = APIRouter()


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/webhooks/manyreach", response_model=WebhookAcceptedResponse)
async def manyreach_webhook(request: Request, db: Session = Depends(get_db)):
    """Receive an outreach reply; parsing happens in the background"""
    raw_body = await request.body()
    try:
        payload = json.loads(raw_body or b"null")
    except ValueError:
        payload = None

    service = OutreachImportService(db)
    webhook_id = payload.get("webhook_id") if isinstance(payload, dict) else None
    signature_ok, ip_ok = service.check_webhook(
        raw_body,
        request.headers.get("x-manyreach-signature"),
        _client_ip(request),
        webhook_id,
    )
    if not signature_ok:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")
    if not ip_ok:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Source IP not allowed")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    try:
        log = service.create_processing_log(normalize_payload(payload))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    process_inbound_email.delay(str(log.id))
    return WebhookAcceptedResponse(webhook_id=log.webhook_id, processing_id=log.id)


@router.get("/webhooks/manyreach")
async def manyreach_webhook_health():
    return {
        "status": "ok",
        "service": "manyreach-webhook",
        "timestamp": datetime.utcnow().isoformat(),
        "signature_required": bool(settings.MANYREACH_WEBHOOK_SECRET),
    }


@router.get("/logs", response_model=EmailLogListResponse)
async def list_logs(
    status_filter: Optional[EmailLogStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    logs, total = OutreachImportService(db).list_logs(
        status_filter.value if status_filter else None, page, limit
    )
    return EmailLogListResponse(logs=logs, total=total, page=page, limit=limit)


@router.get("/logs/{log_id}", response_model=EmailLogDTO)
async def get_log(
    log_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return OutreachImportService(db).get_log(log_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/logs/{log_id}/reprocess", response_model=EmailLogDTO)
async def reprocess_log(
    log_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Queue a failed reply for another processing run"""
    try:
        log = OutreachImportService(db).get_log(log_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    if log.status != EmailLogStatus.FAILED.value:
        raise HTTPException(status_code=400, detail="Only failed emails can be reprocessed")
    log.status = EmailLogStatus.PENDING.value
    log.retry_count = 0
    db.commit()
    process_inbound_email.delay(str(log.id))
    return log


@router.get("/review-queue", response_model=ReviewQueueResponse)
async def review_queue(
    status_filter: Optional[str] = Query("pending", alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    items, total = OutreachImportService(db).review_queue(status_filter or None, page, limit)
    return ReviewQueueResponse(items=items, total=total, page=page, limit=limit)


@router.post("/review-queue/{review_id}/approve", response_model=ReviewItemDTO)
async def approve_review(
    review_id: UUID,
    request: ReviewDecisionDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Approve a queued reply; a shadow publisher behind it becomes active"""
    try:
        return OutreachImportService(db).approve_review(review_id, staff.id.value, request.notes)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Approving review %s failed", review_id)
        raise internal_error()


@router.post("/review-queue/{review_id}/reject", response_model=ReviewItemDTO)
async def reject_review(
    review_id: UUID,
    request: ReviewDecisionDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return OutreachImportService(db).reject_review(review_id, staff.id.value, request.notes)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/claim/{token}", response_model=ClaimInfoDTO)
async def claim_info(token: str, db: Session = Depends(get_db)):
    """Details shown on the publisher's claim page"""
    try:
        publisher = ShadowPublisherService(db).get_by_invitation(token)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ClaimInfoDTO(
        publisher_id=publisher.id,
        email=publisher.email,
        contact_name=publisher.contact_name,
        company_name=publisher.company_name,
        expires_at=publisher.invitation_expires_at,
    )


@router.post("/claim/{token}", response_model=ClaimResponseDTO)
async def claim_publisher(token: str, request: ClaimPublisherDTO, db: Session = Depends(get_db)):
    try:
        return ShadowPublisherService(db).claim(token, request.password, request.first_name, request.last_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Claiming publisher failed")
        raise internal_error()
