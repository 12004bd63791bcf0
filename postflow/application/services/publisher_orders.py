"""Connect order line items to publishers: assignment, fees, earnings, notifications"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from ...core.config import settings
from ...domain.enums import (
    CommissionScope, EarningStatus, EarningType, LineItemStatus, NotificationStatus,
    NotificationType, PublisherStatus, VerificationStatus, ACTIVE_PUBLISHER_STATUSES,
)
from ...infrastructure.external_services.email_service import EmailService
from ...infrastructure.orm.bulk_analysis_model import BulkAnalysisDomainModel
from ...infrastructure.orm.earning_model import PublisherEarningModel, PublisherNotificationModel
from ...infrastructure.orm.line_item_model import LineItemModel
from ...infrastructure.orm.website_model import (
    CommissionConfigurationModel, PublisherModel, PublisherOfferingModel,
    PublisherOfferingRelationshipModel, WebsiteModel,
)

logger = logging.getLogger(__name__)

NOTIFICATION_SUBJECTS = {
    NotificationType.NEW_ORDER: 'New Guest Post Order Available',
    NotificationType.ORDER_APPROVED: 'Order Completed - Earnings Added',
    NotificationType.ORDER_CANCELLED: 'Order Cancelled',
    NotificationType.PAYMENT_SENT: 'Payment Sent to Your Account',
}


def notification_subject(notification_type: NotificationType) -> str:
    return NOTIFICATION_SUBJECTS.get(notification_type, 'Order Update')


def notification_message(notification_type: NotificationType, **context) -> str:
    base_url = settings.FRONTEND_URL
    if notification_type == NotificationType.NEW_ORDER:
        return (
            "<p>You have a new guest post order available for review.</p>"
            "<p>Please log in to your dashboard to accept or decline this order.</p>"
            f'<p><a href="{base_url}/publisher/orders">View Order</a></p>'
        )
    if notification_type == NotificationType.ORDER_APPROVED:
        return (
            "<p>Great news! Your order has been completed and approved.</p>"
            f"<p>Earnings of ${context.get('earnings', 0) / 100:.2f} have been added to your account.</p>"
            f'<p><a href="{base_url}/publisher/earnings">View Earnings</a></p>'
        )
    if notification_type == NotificationType.ORDER_CANCELLED:
        return (
            "<p>An order has been cancelled.</p>"
            "<p>If you have any questions, please contact our support team.</p>"
        )
    if notification_type == NotificationType.PAYMENT_SENT:
        return (
            f"<p>Payment of ${context.get('amount', 0) / 100:.2f} has been sent to your account.</p>"
            f"<p>Reference: {context.get('reference', '')}</p>"
            f'<p><a href="{base_url}/publisher/payments">View Payment Details</a></p>'
        )
    return "<p>Your order has been updated.</p>"


@dataclass
class PublisherMatch:
    publisher_id: Optional[UUID] = None
    offering_id: Optional[UUID] = None
    website_id: Optional[UUID] = None
    publisher_price: Optional[int] = None


class PublisherOrderService:

    def __init__(self, db: Session):
        self.db = db

    def find_publisher_for_domain(self, domain: str) -> PublisherMatch:
        """Best active relationship: verified first, then priority rank, then oldest."""
        website = self.db.query(WebsiteModel).filter(WebsiteModel.domain == domain).first()
        if not website:
            return PublisherMatch()

        verified_first = case(
            (PublisherOfferingRelationshipModel.verification_status == VerificationStatus.VERIFIED.value, 0),
            else_=1,
        )
        relationships = self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.website_id == website.id,
            PublisherOfferingRelationshipModel.is_active.is_(True),
        ).order_by(
            verified_first,
            PublisherOfferingRelationshipModel.priority_rank,
            PublisherOfferingRelationshipModel.created_at,
        ).all()

        for relationship in relationships:
            if relationship.offering_id is None:
                continue
            offering = self.db.get(PublisherOfferingModel, relationship.offering_id)
            if offering is None:
                continue
            return PublisherMatch(
                publisher_id=relationship.publisher_id,
                offering_id=offering.id,
                website_id=website.id,
                publisher_price=offering.base_price,
            )
        return PublisherMatch(website_id=website.id)

    def calculate_platform_fee(self, publisher_id: UUID, amount: int) -> dict:
        config = self.db.query(CommissionConfigurationModel).filter(
            CommissionConfigurationModel.scope_type == CommissionScope.PUBLISHER.value,
            CommissionConfigurationModel.scope_id == publisher_id,
            CommissionConfigurationModel.is_active.is_(True),
        ).order_by(CommissionConfigurationModel.created_at).first()
        if not config:
            config = self.db.query(CommissionConfigurationModel).filter(
                CommissionConfigurationModel.scope_type == CommissionScope.GLOBAL.value,
                CommissionConfigurationModel.is_active.is_(True),
            ).order_by(CommissionConfigurationModel.created_at).first()

        percent = config.commission_percent if config else settings.DEFAULT_COMMISSION_PERCENT
        return {"platform_fee": int(round(amount * percent / 100)), "commission_percent": percent}

    def assign_domain(self, line_item_id: UUID, domain_id: UUID, user_id: UUID) -> LineItemModel:
        line_item = self._line_item(line_item_id)
        domain = self.db.get(BulkAnalysisDomainModel, domain_id)
        if not domain:
            raise LookupError("Domain not found")
        if line_item.status == LineItemStatus.CANCELLED.value:
            raise ValueError("Cannot assign a domain to a cancelled line item")

        match = self.find_publisher_for_domain(domain.domain)
        platform_fee = None
        if match.publisher_id and match.publisher_price:
            platform_fee = self.calculate_platform_fee(match.publisher_id, match.publisher_price)["platform_fee"]

        now = datetime.utcnow()
        line_item.assigned_domain_id = domain.id
        line_item.assigned_domain = domain.domain
        line_item.website_id = match.website_id
        line_item.publisher_id = match.publisher_id
        line_item.publisher_offering_id = match.offering_id
        line_item.publisher_price = match.publisher_price
        line_item.platform_fee = platform_fee
        line_item.publisher_status = PublisherStatus.PENDING.value if match.publisher_id else None
        line_item.status = LineItemStatus.ASSIGNED.value
        line_item.assigned_at = now
        line_item.assigned_by = user_id
        line_item.version += 1

        if match.publisher_id:
            self.create_notification(match.publisher_id, line_item.id, NotificationType.NEW_ORDER)
        self.db.commit()
        logger.info("Assigned %s to line item %s (publisher %s)", domain.domain, line_item.id, match.publisher_id)
        return line_item

    def create_earnings_for_completed_line_item(self, line_item_id: UUID) -> PublisherEarningModel:
        """Idempotent: a line item earns at most one order_completion record."""
        line_item = self._line_item(line_item_id)
        if not line_item.publisher_id or not line_item.publisher_price:
            raise ValueError("No publisher assigned to this order")

        existing = self.db.query(PublisherEarningModel).filter(
            PublisherEarningModel.order_line_item_id == line_item.id,
            PublisherEarningModel.earning_type == EarningType.ORDER_COMPLETION.value,
        ).first()
        if existing:
            return existing

        fee = self.calculate_platform_fee(line_item.publisher_id, line_item.publisher_price)
        earning = PublisherEarningModel(
            publisher_id=line_item.publisher_id,
            order_line_item_id=line_item.id,
            order_id=line_item.order_id,
            earning_type=EarningType.ORDER_COMPLETION.value,
            gross_amount=line_item.publisher_price,
            platform_fee_amount=fee["platform_fee"],
            net_amount=line_item.publisher_price - fee["platform_fee"],
            status=EarningStatus.PENDING.value,
            description=f"Earnings for completed order #{line_item.order_id}",
        )
        self.db.add(earning)

        now = datetime.utcnow()
        line_item.publisher_status = PublisherStatus.COMPLETED.value
        line_item.status = LineItemStatus.COMPLETED.value
        line_item.delivered_at = line_item.delivered_at or now
        line_item.version += 1
        self.db.flush()

        self.create_notification(line_item.publisher_id, line_item.id, NotificationType.ORDER_APPROVED,
                                 earnings=earning.net_amount)
        self.db.commit()
        return earning

    def create_notification(self, publisher_id: UUID, line_item_id: Optional[UUID],
                            notification_type: NotificationType, **context) -> Optional[PublisherNotificationModel]:
        publisher = self.db.get(PublisherModel, publisher_id)
        if not publisher:
            logger.error("Publisher %s not found for notification", publisher_id)
            return None
        notification = PublisherNotificationModel(
            publisher_id=publisher_id,
            order_line_item_id=line_item_id,
            notification_type=notification_type.value,
            email_to=publisher.email,
            subject=notification_subject(notification_type),
            message=notification_message(notification_type, **context),
            status=NotificationStatus.PENDING.value,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    async def deliver_pending_notifications(self, email_service: EmailService, limit: int = 100) -> dict:
        pending = self.db.query(PublisherNotificationModel).filter(
            PublisherNotificationModel.status == NotificationStatus.PENDING.value
        ).order_by(PublisherNotificationModel.created_at).limit(limit).all()

        sent = failed = 0
        for notification in pending:
            ok = await email_service.send_email(notification.email_to, notification.subject, notification.message)
            if ok:
                notification.status = NotificationStatus.SENT.value
                notification.sent_at = datetime.utcnow()
                sent += 1
                if notification.notification_type == NotificationType.NEW_ORDER.value:
                    self._mark_notified(notification.order_line_item_id)
            else:
                notification.status = NotificationStatus.FAILED.value
                notification.error_message = "Email send failed"
                failed += 1
        self.db.commit()
        return {"sent": sent, "failed": failed}

    def _mark_notified(self, line_item_id: Optional[UUID]) -> None:
        line_item = self.db.get(LineItemModel, line_item_id) if line_item_id else None
        if line_item and line_item.publisher_status == PublisherStatus.PENDING.value:
            line_item.publisher_status = PublisherStatus.NOTIFIED.value
            line_item.publisher_notified_at = datetime.utcnow()

    # Publisher portal

    def line_items_for_publisher(self, publisher_id: UUID, publisher_status: Optional[str] = None) -> List[LineItemModel]:
        query = self.db.query(LineItemModel).filter(LineItemModel.publisher_id == publisher_id)
        if publisher_status:
            query = query.filter(LineItemModel.publisher_status == publisher_status)
        return query.order_by(LineItemModel.assigned_at.desc()).all()

    def respond(self, publisher_id: UUID, line_item_id: UUID, action: str,
                published_url: Optional[str] = None) -> LineItemModel:
        """Publisher accepts, declines, starts or submits an assigned line item."""
        line_item = self._line_item(line_item_id)
        if line_item.publisher_id != publisher_id:
            raise PermissionError("This order is not assigned to you")

        current = line_item.publisher_status
        now = datetime.utcnow()
        open_states = (PublisherStatus.PENDING.value, PublisherStatus.NOTIFIED.value)

        if action == "accept" and current in open_states:
            line_item.publisher_status = PublisherStatus.ACCEPTED.value
            line_item.publisher_accepted_at = now
        elif action == "decline" and current in open_states:
            line_item.publisher_status = PublisherStatus.DECLINED.value
        elif action == "start" and current == PublisherStatus.ACCEPTED.value:
            line_item.publisher_status = PublisherStatus.IN_PROGRESS.value
            line_item.status = LineItemStatus.IN_PROGRESS.value
        elif action == "submit" and current in (PublisherStatus.ACCEPTED.value, PublisherStatus.IN_PROGRESS.value):
            if not published_url:
                raise ValueError("published_url is required to submit")
            line_item.publisher_status = PublisherStatus.SUBMITTED.value
            line_item.publisher_submitted_at = now
            line_item.published_url = published_url
            line_item.status = LineItemStatus.DELIVERED.value
            line_item.delivered_at = now
        else:
            raise ValueError(f"Cannot {action} an order in publisher status '{current}'")

        line_item.version += 1
        self.db.commit()
        return line_item

    def pending_earnings(self, publisher_id: UUID) -> int:
        total = self.db.query(func.coalesce(func.sum(PublisherEarningModel.net_amount), 0)).filter(
            PublisherEarningModel.publisher_id == publisher_id,
            PublisherEarningModel.status.in_([EarningStatus.PENDING.value, EarningStatus.CONFIRMED.value]),
            PublisherEarningModel.payment_batch_id.is_(None),
        ).scalar()
        return int(total or 0)

    def earnings(self, publisher_id: UUID) -> List[PublisherEarningModel]:
        return self.db.query(PublisherEarningModel).filter(
            PublisherEarningModel.publisher_id == publisher_id
        ).order_by(PublisherEarningModel.created_at.desc()).all()

    def stats(self, publisher_id: UUID) -> dict:
        items = self.db.query(LineItemModel.publisher_status).filter(
            LineItemModel.publisher_id == publisher_id
        ).all()
        active = {s.value for s in ACTIVE_PUBLISHER_STATUSES}
        earnings = self.earnings(publisher_id)
        return {
            "total_orders": len(items),
            "pending_orders": sum(1 for (status,) in items if status in active),
            "completed_orders": sum(1 for (status,) in items if status == PublisherStatus.COMPLETED.value),
            "total_earnings": sum(e.net_amount for e in earnings),
            "pending_earnings": sum(
                e.net_amount for e in earnings
                if e.status in (EarningStatus.PENDING.value, EarningStatus.CONFIRMED.value)
            ),
            "paid_earnings": sum(e.net_amount for e in earnings if e.status == EarningStatus.PAID.value),
        }

    def _line_item(self, line_item_id: UUID) -> LineItemModel:
        line_item = self.db.get(LineItemModel, line_item_id)
        if not line_item:
            raise LookupError("Line item not found")
        return line_item
