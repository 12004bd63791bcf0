"""Outreach email processing ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Text, DateTime, ForeignKey, JSON, Uuid,
)

from ...db.models import Base
from ...domain.enums import EmailLogStatus, ReviewStatus


class EmailProcessingLogModel(Base):
    __tablename__ = 'email_processing_logs'

    id = Column(Uuid, primary_key=True, default=uuid4)
    webhook_id = Column(String, nullable=True, index=True)
    campaign_id = Column(String, nullable=True)
    campaign_name = Column(String, nullable=True)
    campaign_type = Column(String(20), default='outreach', nullable=True)
    email_from = Column(String, nullable=False, index=True)
    email_to = Column(String, nullable=True)
    email_subject = Column(String, nullable=True)
    email_message_id = Column(String, nullable=True)
    received_at = Column(DateTime, nullable=True)
    raw_content = Column(Text, nullable=False)
    html_content = Column(Text, nullable=True)
    thread_id = Column(String, nullable=True)
    reply_count = Column(Integer, default=0, nullable=False)
    original_outreach = Column(JSON, nullable=True)

    status = Column(String(20), default=EmailLogStatus.PENDING.value, nullable=False, index=True)
    parsed_data = Column(JSON, nullable=True)
    confidence_score = Column(Float, nullable=True)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=True)
    processing_duration_ms = Column(Integer, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class EmailReviewQueueModel(Base):
    __tablename__ = 'email_review_queue'

    id = Column(Uuid, primary_key=True, default=uuid4)
    log_id = Column(Uuid, ForeignKey('email_processing_logs.id', ondelete='CASCADE'), nullable=False, index=True)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=True)
    queue_type = Column(String(30), nullable=False)
    priority = Column(Integer, default=50, nullable=False)
    status = Column(String(20), default=ReviewStatus.PENDING.value, nullable=False, index=True)
    reason = Column(Text, nullable=True)
    suggested_actions = Column(JSON, nullable=True)
    missing_fields = Column(JSON, default=list)
    auto_approve_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Uuid, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class PublisherAutomationLogModel(Base):
    __tablename__ = 'publisher_automation_logs'

    id = Column(Uuid, primary_key=True, default=uuid4)
    email_log_id = Column(Uuid, ForeignKey('email_processing_logs.id', ondelete='SET NULL'), nullable=True)
    publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=True, index=True)
    action = Column(String(40), nullable=False)
    action_status = Column(String(20), default='success', nullable=False)
    previous_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    fields_updated = Column(JSON, default=list)
    confidence = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class WebhookSecurityLogModel(Base):
    __tablename__ = 'webhook_security_logs'

    id = Column(Uuid, primary_key=True, default=uuid4)
    webhook_id = Column(String, nullable=True)
    source = Column(String(30), nullable=False)
    ip_address = Column(String, nullable=True)
    signature_valid = Column(Boolean, nullable=True)
    ip_allowed = Column(Boolean, nullable=False)
    allowed = Column(Boolean, nullable=False)
    rejection_reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
