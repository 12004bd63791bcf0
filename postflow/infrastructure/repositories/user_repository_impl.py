"""User repository implementation"""

from datetime import datetime
from typing import Optional, List

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from ...domain.repositories.user_repository import IUserRepository
from ...domain.entities.user import User
from ...domain.value_objects.email import Email
from ...domain.value_objects.entity_ids import UserId
from ...domain.enums import ImpersonationStatus, UserStatus, UserRole, UserType
from ..orm.user_model import ImpersonationLogModel, UserModel

# Columns copied one-to-one between UserModel and User
PLAIN_FIELDS = (
    "hashed_password", "first_name", "last_name", "company_name", "email_verified",
    "email_verification_token", "password_reset_token", "password_reset_expires_at",
    "password_reset_used", "updated_at", "last_login",
)


class UserRepositoryImpl(IUserRepository):

    def __init__(self, session: Session):
        self.session = session

    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        return self._to_entity(self.session.get(UserModel, user_id.value))

    async def get_by_email(self, email: Email) -> Optional[User]:
        return self._to_entity(self._by_email(email).first())

    async def get_by_reset_token(self, token: str) -> Optional[User]:
        model = self.session.query(UserModel).filter(
            UserModel.password_reset_token == token,
            UserModel.password_reset_used.is_(False),
            UserModel.password_reset_expires_at > datetime.utcnow()
        ).first()
        return self._to_entity(model)

    async def get_by_verification_token(self, token: str) -> Optional[User]:
        model = self.session.query(UserModel).filter(UserModel.email_verification_token == token).first()
        return self._to_entity(model)

    async def exists_by_email(self, email: Email) -> bool:
        return self._by_email(email).count() > 0

    async def add(self, user: User) -> User:
        model = UserModel(id=user.id.value, created_at=user.created_at)
        self._copy_to_model(model, user)
        self.session.add(model)
        self.session.flush()
        return user

    async def update(self, user: User) -> User:
        model = self.session.get(UserModel, user.id.value)
        if model is None:
            raise LookupError("User not found")
        self._copy_to_model(model, user)
        self.session.flush()
        return user

    async def get_paginated(self, page: int, limit: int, user_type: Optional[UserType] = None,
                            search: Optional[str] = None) -> List[User]:
        models = self._filtered(user_type, search).order_by(UserModel.created_at.desc()) \
            .offset((page - 1) * limit).limit(limit).all()
        return [self._to_entity(model) for model in models]

    async def count(self, user_type: Optional[UserType] = None, search: Optional[str] = None) -> int:
        return self._filtered(user_type, search).count()

    async def end_impersonations_of(self, user_id: UserId) -> int:
        sessions = self.session.query(ImpersonationLogModel).filter(
            ImpersonationLogModel.target_user_id == user_id.value,
            ImpersonationLogModel.status == ImpersonationStatus.ACTIVE.value,
        ).all()
        now = datetime.utcnow()
        for log in sessions:
            log.status = ImpersonationStatus.ENDED.value
            log.ended_at = now
        self.session.flush()
        return len(sessions)

    def _by_email(self, email: Email) -> Query:
        return self.session.query(UserModel).filter(UserModel.email == str(email))

    def _filtered(self, user_type: Optional[UserType], search: Optional[str]) -> Query:
        query = self.session.query(UserModel)
        if user_type:
            query = query.filter(UserModel.user_type == user_type.value)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                UserModel.email.ilike(pattern),
                UserModel.company_name.ilike(pattern),
                UserModel.first_name.ilike(pattern),
                UserModel.last_name.ilike(pattern),
            ))
        return query

    @staticmethod
    def _copy_to_model(model: UserModel, user: User) -> None:
        model.email = str(user.email)
        model.user_type = user.user_type.value
        model.status = user.status.value
        model.role = user.role.value
        for name in PLAIN_FIELDS:
            setattr(model, name, getattr(user, name))

    @staticmethod
    def _to_entity(model: Optional[UserModel]) -> Optional[User]:
        if model is None:
            return None
        return User(
            id=UserId(model.id),
            email=Email(model.email),
            user_type=UserType(model.user_type),
            status=UserStatus(model.status),
            role=UserRole(model.role),
            created_at=model.created_at,
            **{name: getattr(model, name) for name in PLAIN_FIELDS},
        )
