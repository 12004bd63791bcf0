"""Order ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Text, DateTime, ForeignKey, JSON, Uuid,
)

from ...db.models import Base
from ...domain.enums import OrderStatus, WorkflowStatus


class OrderModel(Base):
    __tablename__ = 'orders'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('users.id'), nullable=True, index=True)
    created_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    status = Column(String(30), default=OrderStatus.DRAFT.value, nullable=False, index=True)

    includes_client_review = Column(Boolean, default=False, nullable=False)
    rush_delivery = Column(Boolean, default=False, nullable=False)
    client_review_fee = Column(Integer, default=0, nullable=False)
    rush_fee = Column(Integer, default=0, nullable=False)

    # Totals in cents
    subtotal = Column(Integer, default=0, nullable=False)
    discount_percent = Column(Float, default=0, nullable=False)
    discount_amount = Column(Integer, default=0, nullable=False)
    total_retail = Column(Integer, default=0, nullable=False)
    total_wholesale = Column(Integer, default=0, nullable=False)
    profit = Column(Integer, default=0, nullable=False)
    credits_applied = Column(Integer, default=0, nullable=False)

    notes = Column(Text, nullable=True)
    stripe_session_id = Column(String, nullable=True, index=True)
    payment_reference = Column(String, nullable=True)

    approved_at = Column(DateTime, nullable=True)
    invoiced_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OrderStatusHistoryModel(Base):
    __tablename__ = 'order_status_history'

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    old_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    changed_by = Column(Uuid, nullable=True)
    notes = Column(Text, nullable=True)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class OrderShareTokenModel(Base):
    __tablename__ = 'order_share_tokens'

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    permissions = Column(JSON, default=list)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Uuid, nullable=True)
    used_at = Column(DateTime, nullable=True)
    used_by_ip = Column(String, nullable=True)
    use_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class PricingRuleModel(Base):
    """Quantity discount; client_id NULL means the rule applies globally"""
    __tablename__ = 'pricing_rules'

    id = Column(Uuid, primary_key=True, default=uuid4)
    client_id = Column(Uuid, ForeignKey('clients.id', ondelete='CASCADE'), nullable=True, index=True)
    name = Column(String, nullable=False)
    min_quantity = Column(Integer, nullable=False)
    max_quantity = Column(Integer, nullable=True)
    discount_percent = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class WorkflowModel(Base):
    __tablename__ = 'workflows'

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    line_item_id = Column(Uuid, ForeignKey('order_line_items.id'), nullable=True, index=True)
    client_id = Column(Uuid, ForeignKey('clients.id'), nullable=True)
    title = Column(String, nullable=False)
    status = Column(String(20), default=WorkflowStatus.ACTIVE.value, nullable=False)
    content = Column(JSON, default=dict)
    created_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
