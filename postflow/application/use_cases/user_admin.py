"""User profile and administration use cases"""

import logging
from typing import Optional
from uuid import UUID

from ...domain.entities.user import User
from ...domain.enums import UserType
from ...domain.events.user_events import UserSuspended
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ...application.dtos.user_dtos import UpdateProfileDto, UserDto, UserListResponse

logger = logging.getLogger(__name__)


class UserAdminUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def list_users(self, page: int = 1, limit: int = 50, user_type: Optional[UserType] = None,
                         search: Optional[str] = None) -> UserListResponse:
        async with self.unit_of_work:
            users = await self.unit_of_work.users.get_paginated(page, limit, user_type, search)
            total = await self.unit_of_work.users.count(user_type, search)
            return UserListResponse(
                users=[UserDto.from_entity(user) for user in users],
                total=total,
                page=page,
                limit=limit,
            )

    async def get_user(self, user_id: UUID) -> UserDto:
        async with self.unit_of_work:
            return UserDto.from_entity(await self._get(user_id))

    async def update_profile(self, user: User, request: UpdateProfileDto) -> UserDto:
        async with self.unit_of_work:
            current = await self._get(user.id.value)
            for name, value in request.model_dump(exclude_unset=True).items():
                setattr(current, name, value)
            await self.unit_of_work.users.update(current)
            await self.unit_of_work.commit()
            return UserDto.from_entity(current)

    async def suspend(self, user_id: UUID, reason: str, admin: User) -> UserDto:
        """Suspend a user; staff sessions impersonating them are ended too."""
        if user_id == admin.id.value:
            raise ValueError("You cannot suspend your own account")
        async with self.unit_of_work:
            user = await self._get(user_id)
            user.suspend(reason)
            await self.unit_of_work.users.update(user)
            await self._handle_events(user)
            await self.unit_of_work.commit()
            logger.warning("User %s suspended by %s: %s", user.email, admin.email, reason)
            return UserDto.from_entity(user)

    async def reactivate(self, user_id: UUID, admin: User) -> UserDto:
        async with self.unit_of_work:
            user = await self._get(user_id)
            user.reactivate()
            await self.unit_of_work.users.update(user)
            await self._handle_events(user)
            await self.unit_of_work.commit()
            logger.info("User %s reactivated by %s", user.email, admin.email)
            return UserDto.from_entity(user)

    async def _handle_events(self, user: User) -> None:
        for event in user.get_events():
            if isinstance(event, UserSuspended):
                ended = await self.unit_of_work.users.end_impersonations_of(event.user_id)
                if ended:
                    logger.info("Ended %s impersonation sessions of suspended user %s", ended, user.email)
            else:
                logger.debug("User event %s", event)

    async def _get(self, user_id: UUID) -> User:
        user = await self.unit_of_work.users.get_by_id(UserId(user_id))
        if not user:
            raise LookupError("User not found")
        return user
