import asyncio
import logging
from uuid import UUID

from .celery_app import celery_app
from .db.database import session_scope
from .application.services.credits_wallet import CreditsWalletService
from .application.services.derived_pricing import DerivedPricingService
from .application.services.email_parser import EmailParserService
from .application.services.outreach_import import OutreachImportService
from .application.services.publisher_orders import PublisherOrderService
from .domain.enums import EmailLogStatus
from .infrastructure.external_services.ai_service import AIService
from .infrastructure.external_services.email_service import EmailService

logger = logging.getLogger(__name__)


async def _process_email(log_id: UUID, attempt: int) -> dict:
    ai_service = AIService()
    try:
        with session_scope() as db:
            return await OutreachImportService(db).process_email(log_id, EmailParserService(ai_service), attempt)
    finally:
        await ai_service.aclose()


@celery_app.task(bind=True, max_retries=None)
def process_inbound_email(self, log_id: str):
    """Parse an outreach reply; failed attempts are rescheduled with backoff."""
    attempt = self.request.retries + 1
    result = asyncio.run(_process_email(UUID(log_id), attempt))
    if result["status"] == EmailLogStatus.RETRYING.value:
        logger.info("Retrying email %s in %ss", log_id, result["retry_in"])
        raise self.retry(countdown=result["retry_in"])
    return result


@celery_app.task
def deliver_pending_notifications(limit: int = 100):
    with session_scope() as db:
        result = asyncio.run(PublisherOrderService(db).deliver_pending_notifications(EmailService(), limit))
    logger.info("Publisher notifications delivered: %s", result)
    return result


@celery_app.task
def refresh_derived_prices():
    with session_scope() as db:
        return DerivedPricingService(db).update_all()


@celery_app.task
def expire_credits():
    with session_scope() as db:
        result = CreditsWalletService(db).expire_credits()
    logger.info("Credit expiry run: %s", result)
    return result


@celery_app.task
def auto_approve_reviews():
    with session_scope() as db:
        approved = OutreachImportService(db).auto_approve_due_reviews()
    if approved:
        logger.info("Auto-approved %s review items", approved)
    return {"approved": approved}
