"""Email verification use case"""

import logging

from ...domain.repositories.unit_of_work import IUnitOfWork
from ...application.dtos.user_dtos import VerifyEmailDto

logger = logging.getLogger(__name__)


class EmailVerificationUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: VerifyEmailDto) -> bool:
        """Verify user email with token"""
        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_verification_token(request.token)
            if not user:
                raise ValueError("Invalid verification token")

            # Raises when the address is already verified
            user.verify_email()

            await self.unit_of_work.users.update(user)
            await self.unit_of_work.commit()
            logger.info("Email verified for user %s", user.email)
            return True
