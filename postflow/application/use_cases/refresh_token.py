"""Exchange a refresh token for a new access token"""

from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ...application.dtos.user_dtos import RefreshTokenDto, AccessTokenDto
from ...core.security import verify_refresh_token, create_access_token


class RefreshTokenUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: RefreshTokenDto) -> AccessTokenDto:
        payload = verify_refresh_token(request.refresh_token)
        if not payload or not payload.get("sub"):
            raise ValueError("Invalid refresh token")

        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_id(UserId.parse(payload["sub"]))
            if not user or user.is_suspended:
                raise ValueError("Invalid refresh token")
            return AccessTokenDto(access_token=create_access_token(str(user.id.value), user.user_type.value))
