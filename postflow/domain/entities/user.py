"""User aggregate shared by the account, publisher and internal portals"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, List

from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId
from ..enums import UserStatus, UserRole, UserType
from ..events.user_events import UserReactivated, UserSuspended


def _new_token() -> str:
    return secrets.token_urlsafe(32)


@dataclass
class User:
    id: UserId
    email: Email
    hashed_password: str
    user_type: UserType = UserType.ACCOUNT
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None
    status: UserStatus = UserStatus.PENDING_VERIFICATION
    role: UserRole = UserRole.USER
    email_verified: bool = False
    email_verification_token: Optional[str] = None

    password_reset_token: Optional[str] = None
    password_reset_expires_at: Optional[datetime] = None
    password_reset_used: bool = False

    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    _events: List = field(default_factory=list, init=False)

    @classmethod
    def create(
        cls,
        email: Email,
        password: str,
        user_type: UserType = UserType.ACCOUNT,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        company_name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> 'User':
        """New sign-up awaiting email verification; ``password`` is already hashed."""
        now = datetime.utcnow()
        return cls(
            id=UserId.generate(),
            email=email,
            hashed_password=password,
            user_type=user_type,
            first_name=first_name,
            last_name=last_name,
            company_name=company_name,
            role=role,
            email_verification_token=_new_token(),
            created_at=now,
            updated_at=now,
        )

    def _touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def verify_email(self) -> None:
        if self.email_verified:
            raise ValueError("Email already verified")
        self.email_verified = True
        self.email_verification_token = None
        # A suspended user stays suspended after verifying
        if self.status == UserStatus.PENDING_VERIFICATION:
            self.status = UserStatus.ACTIVE
        self._touch()

    def generate_password_reset_token(self, expires_in_hours: int = 1) -> str:
        self.password_reset_token = _new_token()
        self.password_reset_expires_at = datetime.utcnow() + timedelta(hours=expires_in_hours)
        self.password_reset_used = False
        self._touch()
        return self.password_reset_token

    def is_password_reset_token_valid(self, token: str) -> bool:
        return (
            bool(self.password_reset_token)
            and self.password_reset_token == token
            and not self.password_reset_used
            and self.password_reset_expires_at is not None
            and datetime.utcnow() <= self.password_reset_expires_at
        )

    def reset_password(self, token: str, hashed_password: str) -> None:
        """Tokens are single use."""
        if not self.is_password_reset_token_valid(token):
            raise ValueError("Invalid or expired reset token")
        self.hashed_password = hashed_password
        self.password_reset_used = True
        self._touch()

    def suspend(self, reason: str) -> None:
        if self.status == UserStatus.SUSPENDED:
            raise ValueError("User is already suspended")
        self.status = UserStatus.SUSPENDED
        self._touch()
        self._events.append(UserSuspended(user_id=self.id, reason=reason, suspended_at=self.updated_at))

    def reactivate(self) -> None:
        if self.status != UserStatus.SUSPENDED:
            raise ValueError("Only suspended users can be reactivated")
        self.status = UserStatus.ACTIVE if self.email_verified else UserStatus.PENDING_VERIFICATION
        self._touch()
        self._events.append(UserReactivated(user_id=self.id, reactivated_at=self.updated_at))

    def record_login(self) -> None:
        self.last_login = datetime.utcnow()

    @property
    def full_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or str(self.email)

    @property
    def is_internal(self) -> bool:
        return self.user_type == UserType.INTERNAL

    @property
    def is_account(self) -> bool:
        return self.user_type == UserType.ACCOUNT

    @property
    def is_publisher(self) -> bool:
        return self.user_type == UserType.PUBLISHER

    @property
    def is_admin(self) -> bool:
        return self.is_internal and self.role == UserRole.ADMIN

    @property
    def is_suspended(self) -> bool:
        return self.status == UserStatus.SUSPENDED

    def get_events(self) -> List:
        """Pending domain events; the list is cleared."""
        events, self._events = self._events, []
        return events
