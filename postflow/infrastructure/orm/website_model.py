"""Website, publisher and offering ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, Text, DateTime, ForeignKey, JSON, Uuid,
)
from sqlalchemy.orm import relationship

from ...db.models import Base
from ...domain.enums import (
    PublisherAccountStatus, PricingStrategy, VerificationStatus, CommissionScope,
)


class WebsiteModel(Base):
    __tablename__ = 'websites'

    id = Column(Uuid, primary_key=True, default=uuid4)
    domain = Column(String, unique=True, index=True, nullable=False)
    domain_rating = Column(Integer, nullable=True)
    total_traffic = Column(Integer, nullable=True)
    niche = Column(String, nullable=True)
    categories = Column(JSON, default=list)
    source = Column(String(30), default='manual', nullable=False)

    # Current (legacy) guest post price and the offering-derived one, in cents
    guest_post_cost = Column(Integer, nullable=True)
    derived_guest_post_cost = Column(Integer, nullable=True)
    price_calculation_method = Column(String(30), nullable=True)
    price_calculated_at = Column(DateTime, nullable=True)
    pricing_strategy = Column(String(20), default=PricingStrategy.MIN_PRICE.value, nullable=False)
    custom_offering_id = Column(Uuid, ForeignKey('publisher_offerings.id'), nullable=True)
    price_override_offering_id = Column(Uuid, ForeignKey('publisher_offerings.id'), nullable=True)
    selected_offering_id = Column(Uuid, ForeignKey('publisher_offerings.id'), nullable=True)
    selected_publisher_id = Column(Uuid, ForeignKey('publishers.id'), nullable=True)
    selected_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PublisherModel(Base):
    __tablename__ = 'publishers'

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey('users.id'), nullable=True, unique=True)
    email = Column(String, index=True, nullable=False)
    contact_name = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    account_status = Column(String(20), default=PublisherAccountStatus.ACTIVE.value, nullable=False, index=True)
    source = Column(String(30), default='signup', nullable=False)
    confidence_score = Column(Float, nullable=True)
    invitation_token = Column(String, nullable=True, unique=True)
    invitation_expires_at = Column(DateTime, nullable=True)
    claimed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    offerings = relationship('PublisherOfferingModel', back_populates='publisher')


class PublisherOfferingModel(Base):
    __tablename__ = 'publisher_offerings'

    id = Column(Uuid, primary_key=True, default=uuid4)
    publisher_id = Column(Uuid, ForeignKey('publishers.id', ondelete='CASCADE'), nullable=False, index=True)
    offering_type = Column(String(30), nullable=False)
    offering_name = Column(String, nullable=True)
    base_price = Column(Integer, nullable=True)  # cents
    currency = Column(String(3), default='USD', nullable=False)
    turnaround_days = Column(Integer, nullable=True)
    current_availability = Column(String(20), default='available', nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    attributes = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    publisher = relationship('PublisherModel', back_populates='offerings')


class PublisherOfferingRelationshipModel(Base):
    __tablename__ = 'publisher_offering_relationships'

    id = Column(Uuid, primary_key=True, default=uuid4)
    publisher_id = Column(Uuid, ForeignKey('publishers.id', ondelete='CASCADE'), nullable=False, index=True)
    website_id = Column(Uuid, ForeignKey('websites.id', ondelete='CASCADE'), nullable=False, index=True)
    offering_id = Column(Uuid, ForeignKey('publisher_offerings.id', ondelete='SET NULL'), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    verification_status = Column(String(20), default=VerificationStatus.PENDING.value, nullable=False)
    priority_rank = Column(Integer, default=100, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CommissionConfigurationModel(Base):
    __tablename__ = 'commission_configurations'

    id = Column(Uuid, primary_key=True, default=uuid4)
    scope_type = Column(String(20), default=CommissionScope.GLOBAL.value, nullable=False)
    scope_id = Column(Uuid, nullable=True)
    commission_percent = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
