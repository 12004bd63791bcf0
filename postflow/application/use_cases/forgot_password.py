"""Forgot password use case"""

import logging

from ..dtos.user_dtos import ForgotPasswordDto, ForgotPasswordResponse
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.email import Email
from ...infrastructure.external_services.email_service import EmailService

logger = logging.getLogger(__name__)

RESET_MESSAGE = "If an account with that email exists, a password reset link has been sent."


class ForgotPasswordUseCase:
    """Always reports success so the endpoint does not reveal which emails exist"""

    def __init__(self, unit_of_work: IUnitOfWork, email_service: EmailService):
        self.unit_of_work = unit_of_work
        self.email_service = email_service

    async def execute(self, request: ForgotPasswordDto) -> ForgotPasswordResponse:
        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_email(Email(request.email))
            if not user or user.is_suspended:
                return ForgotPasswordResponse(message=RESET_MESSAGE)

            reset_token = user.generate_password_reset_token(expires_in_hours=1)
            await self.unit_of_work.users.update(user)
            await self.unit_of_work.commit()

        sent = await self.email_service.send_password_reset_email(
            to_email=str(user.email),
            reset_token=reset_token
        )
        if not sent:
            logger.warning("Password reset email to %s was not sent", user.email)
        return ForgotPasswordResponse(message=RESET_MESSAGE)
