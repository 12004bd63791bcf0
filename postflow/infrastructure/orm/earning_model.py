"""Publisher earnings and notification ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Uuid

from ...db.models import Base
from ...domain.enums import EarningStatus, NotificationStatus


class PublisherEarningModel(Base):
    __tablename__ = 'publisher_earnings'

    id = Column(Uuid, primary_key=True, default=uuid4)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=False, index=True)
    order_line_item_id = Column(Uuid, ForeignKey('order_line_items.id'), nullable=True, index=True)
    order_id = Column(Uuid, ForeignKey('orders.id'), nullable=True)
    earning_type = Column(String(30), nullable=False)
    gross_amount = Column(Integer, nullable=False)
    platform_fee_amount = Column(Integer, default=0, nullable=False)
    net_amount = Column(Integer, nullable=False)
    currency = Column(String(3), default='USD', nullable=False)
    status = Column(String(20), default=EarningStatus.PENDING.value, nullable=False, index=True)
    payment_batch_id = Column(Uuid, nullable=True)
    description = Column(Text, nullable=True)
    confirmed_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class PublisherNotificationModel(Base):
    __tablename__ = 'publisher_order_notifications'

    id = Column(Uuid, primary_key=True, default=uuid4)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=False, index=True)
    order_line_item_id = Column(Uuid, ForeignKey('order_line_items.id'), nullable=True)
    notification_type = Column(String(30), nullable=False)
    email_to = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), default=NotificationStatus.PENDING.value, nullable=False, index=True)
    sent_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
