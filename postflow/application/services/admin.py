"""Admin dashboard counters"""

from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...domain.enums import LineItemStatus, PublisherAccountStatus, REVENUE_ORDER_STATUSES, ReviewStatus
from ...infrastructure.orm.line_item_model import LineItemModel
from ...infrastructure.orm.order_model import OrderModel
from ...infrastructure.orm.outreach_model import EmailProcessingLogModel, EmailReviewQueueModel
from ...infrastructure.orm.user_model import UserModel
from ...infrastructure.orm.website_model import PublisherModel, WebsiteModel


class AdminService:

    def __init__(self, db: Session):
        self.db = db

    def _grouped(self, column) -> dict:
        return {value: count for value, count in self.db.query(column, func.count()).group_by(column).all()}

    def dashboard(self) -> dict:
        since = datetime.utcnow() - timedelta(hours=24)
        revenue = self.db.query(func.coalesce(func.sum(OrderModel.total_retail), 0)).filter(
            OrderModel.status.in_([s.value for s in REVENUE_ORDER_STATUSES])
        ).scalar()
        publishers = self._grouped(PublisherModel.account_status)
        shadow = publishers.get(PublisherAccountStatus.SHADOW.value, 0) + publishers.get(
            PublisherAccountStatus.UNCLAIMED.value, 0
        )

        return {
            "users": {
                "total": self.db.query(UserModel).count(),
                "by_type": self._grouped(UserModel.user_type),
                "new_24h": self.db.query(UserModel).filter(UserModel.created_at >= since).count(),
            },
            "orders": {
                "total": self.db.query(OrderModel).count(),
                "by_status": self._grouped(OrderModel.status),
                "new_24h": self.db.query(OrderModel).filter(OrderModel.created_at >= since).count(),
                "revenue": int(revenue or 0),
            },
            "line_items": {
                "total": self.db.query(LineItemModel).filter(
                    LineItemModel.status != LineItemStatus.CANCELLED.value
                ).count(),
                "by_status": self._grouped(LineItemModel.status),
            },
            "websites": self.db.query(WebsiteModel).count(),
            "publishers": {
                "total": sum(publishers.values()),
                "shadow": shadow,
                "active": publishers.get(PublisherAccountStatus.ACTIVE.value, 0),
            },
            "review_queue_pending": self.db.query(EmailReviewQueueModel).filter(
                EmailReviewQueueModel.status == ReviewStatus.PENDING.value
            ).count(),
            "emails_by_status": self._grouped(EmailProcessingLogModel.status),
        }
