"""User repository interface"""

from abc import ABC, abstractmethod
from typing import Optional, List

from ..entities.user import User
from ..value_objects.email import Email
from ..value_objects.entity_ids import UserId
from ..enums import UserType


class IUserRepository(ABC):
    """Persistence for the User aggregate across all three portals"""

    @abstractmethod
    async def get_by_id(self, user_id: UserId) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: Email) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_reset_token(self, token: str) -> Optional[User]:
        """Only unused and unexpired tokens match"""

    @abstractmethod
    async def get_by_verification_token(self, token: str) -> Optional[User]:
        pass

    @abstractmethod
    async def exists_by_email(self, email: Email) -> bool:
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass

    @abstractmethod
    async def get_paginated(self, page: int, limit: int, user_type: Optional[UserType] = None,
                            search: Optional[str] = None) -> List[User]:
        pass

    @abstractmethod
    async def count(self, user_type: Optional[UserType] = None, search: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def end_impersonations_of(self, user_id: UserId) -> int:
        """Close every active impersonation session targeting the user; returns how many"""
