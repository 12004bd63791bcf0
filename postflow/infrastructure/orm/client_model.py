"""Client and target page ORM Models"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from ...db.models import Base


class ClientModel(Base):
    __tablename__ = 'clients'

    id = Column(Uuid, primary_key=True, default=uuid4)
    account_id = Column(Uuid, ForeignKey('users.id'), nullable=True, index=True)
    name = Column(String, nullable=False)
    website = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    created_by = Column(Uuid, ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    target_pages = relationship(
        'TargetPageModel', back_populates='client', cascade='all, delete-orphan',
        order_by='TargetPageModel.created_at',
    )


class TargetPageModel(Base):
    __tablename__ = 'target_pages'

    id = Column(Uuid, primary_key=True, default=uuid4)
    client_id = Column(Uuid, ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, index=True)
    url = Column(String, nullable=False)
    keywords = Column(Text, nullable=True)  # comma separated
    description = Column(Text, nullable=True)
    status = Column(String(20), default='active', nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    client = relationship('ClientModel', back_populates='target_pages')

    @property
    def keyword_list(self):
        return [k.strip() for k in (self.keywords or '').split(',') if k.strip()]
