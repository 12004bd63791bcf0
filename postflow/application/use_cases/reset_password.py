"""Reset password use case"""

from ...core.security import get_password_hash
from ..dtos.user_dtos import ForgotPasswordResponse, ResetPasswordDto
from ...domain.repositories.unit_of_work import IUnitOfWork


class ResetPasswordUseCase:
    """Use case for resetting password with token"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: ResetPasswordDto) -> ForgotPasswordResponse:
        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_reset_token(request.token)
            if not user:
                raise ValueError("Invalid or expired reset token")

            # Validates expiry and single use
            user.reset_password(request.token, get_password_hash(request.new_password))

            await self.unit_of_work.users.update(user)
            await self.unit_of_work.commit()
            return ForgotPasswordResponse(message="Password has been successfully reset.")
