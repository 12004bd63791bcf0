"""Bulk analysis domain ORM Model"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Boolean, Text, DateTime, ForeignKey, JSON, Uuid, UniqueConstraint,
)

from ...db.models import Base
from ...domain.enums import QualificationStatus


class BulkAnalysisDomainModel(Base):
    __tablename__ = 'bulk_analysis_domains'
    __table_args__ = (
        UniqueConstraint('client_id', 'domain', name='uq_bulk_analysis_client_domain'),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    client_id = Column(Uuid, ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, index=True)
    project_id = Column(Uuid, nullable=True, index=True)
    domain = Column(String, nullable=False)
    target_page_ids = Column(JSON, default=list)
    keyword_count = Column(Integer, default=0, nullable=False)

    qualification_status = Column(String(30), default=QualificationStatus.PENDING.value, nullable=False, index=True)
    checked_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    checked_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    selected_target_page_id = Column(Uuid, nullable=True)

    ai_qualification_reasoning = Column(Text, nullable=True)
    was_manually_qualified = Column(Boolean, default=False, nullable=False)
    manually_qualified_by = Column(Uuid, nullable=True)
    manually_qualified_at = Column(DateTime, nullable=True)
    was_human_verified = Column(Boolean, default=False, nullable=False)
    human_verified_by = Column(Uuid, nullable=True)
    human_verified_at = Column(DateTime, nullable=True)

    has_workflow = Column(Boolean, default=False, nullable=False)
    workflow_id = Column(Uuid, nullable=True)

    created_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
