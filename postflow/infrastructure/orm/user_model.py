"""User ORM Model"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Uuid

from ...db.models import Base
from ...domain.enums import UserStatus, UserRole, UserType, ImpersonationStatus


class UserModel(Base):
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    user_type = Column(String(20), default=UserType.ACCOUNT.value, nullable=False, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    status = Column(String(30), default=UserStatus.PENDING_VERIFICATION.value, nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String, nullable=True, index=True)

    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires_at = Column(DateTime, nullable=True)
    password_reset_used = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)


class ImpersonationLogModel(Base):
    __tablename__ = 'impersonation_logs'

    id = Column(Uuid, primary_key=True, default=uuid4)
    admin_user_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    target_user_id = Column(Uuid, ForeignKey('users.id'), nullable=False, index=True)
    target_user_type = Column(String(20), nullable=False)
    reason = Column(String, nullable=False)
    status = Column(String(20), default=ImpersonationStatus.ACTIVE.value, nullable=False, index=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    ended_at = Column(DateTime, nullable=True)
