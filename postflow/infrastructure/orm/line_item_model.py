"""Order line item ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, ForeignKey, JSON, Uuid,
)

from ...db.models import Base
from ...domain.enums import LineItemStatus


class LineItemModel(Base):
    __tablename__ = 'order_line_items'

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    client_id = Column(Uuid, ForeignKey('clients.id'), nullable=False, index=True)
    added_by = Column(Uuid, nullable=True)
    status = Column(String(30), default=LineItemStatus.DRAFT.value, nullable=False, index=True)

    target_page_id = Column(Uuid, nullable=True)
    target_page_url = Column(String, nullable=True)
    anchor_text = Column(String, nullable=True)

    assigned_domain_id = Column(Uuid, nullable=True)
    assigned_domain = Column(String, nullable=True)
    assigned_at = Column(DateTime, nullable=True)
    assigned_by = Column(Uuid, nullable=True)

    # Prices in cents
    estimated_price = Column(Integer, nullable=True)
    wholesale_price = Column(Integer, nullable=True)
    approved_price = Column(Integer, nullable=True)
    service_fee = Column(Integer, default=0, nullable=False)

    client_review_status = Column(String(20), nullable=True)
    client_reviewed_at = Column(DateTime, nullable=True)
    client_review_notes = Column(Text, nullable=True)

    display_order = Column(Integer, default=0, nullable=False)
    version = Column(Integer, default=1, nullable=False)
    meta = Column('metadata', JSON, default=dict)

    cancelled_at = Column(DateTime, nullable=True)
    cancelled_by = Column(Uuid, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    workflow_id = Column(Uuid, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    # Publisher fulfillment
    website_id = Column(Uuid, ForeignKey('websites.id'), nullable=True)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=True, index=True)
    publisher_offering_id = Column(Uuid, ForeignKey('publisher_offerings.id'), nullable=True)
    publisher_price = Column(Integer, nullable=True)
    platform_fee = Column(Integer, nullable=True)
    publisher_status = Column(String(20), nullable=True, index=True)
    publisher_notified_at = Column(DateTime, nullable=True)
    publisher_accepted_at = Column(DateTime, nullable=True)
    publisher_submitted_at = Column(DateTime, nullable=True)
    published_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class LineItemChangeModel(Base):
    __tablename__ = 'line_item_changes'

    id = Column(Uuid, primary_key=True, default=uuid4)
    line_item_id = Column(Uuid, ForeignKey('order_line_items.id', ondelete='CASCADE'), nullable=False, index=True)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    change_type = Column(String(30), nullable=False)
    previous_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    changed_by = Column(Uuid, nullable=True)
    change_reason = Column(Text, nullable=True)
    batch_id = Column(Uuid, nullable=True, index=True)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)
