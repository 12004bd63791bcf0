"""Register user use case"""

import logging

from ...domain.entities.user import User
from ...domain.enums import UserType
from ...domain.value_objects.email import Email
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.email_service import EmailService
from ...application.dtos.user_dtos import CreateUserDto, UserResponse, UserDto, TokenDto
from ...core.security import get_password_hash, create_access_token, create_refresh_token

logger = logging.getLogger(__name__)


class RegisterUserUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, email_service: EmailService):
        self.unit_of_work = unit_of_work
        self.email_service = email_service

    async def execute(self, request: CreateUserDto) -> UserResponse:
        user_type = UserType(request.user_type)
        if user_type == UserType.INTERNAL:
            raise ValueError("Internal users cannot self-register")

        async with self.unit_of_work:
            email = Email(request.email)

            if await self.unit_of_work.users.exists_by_email(email):
                raise ValueError("User with this email already exists")

            user = User.create(
                email=email,
                password=get_password_hash(request.password),
                user_type=user_type,
                first_name=request.first_name,
                last_name=request.last_name,
                company_name=request.company_name,
            )

            user = await self.unit_of_work.users.add(user)
            await self.unit_of_work.commit()

        # Registration stands even when the verification email cannot be sent
        sent = await self.email_service.send_verification_email(
            to_email=user.email.value,
            verification_token=user.email_verification_token
        )
        if not sent:
            logger.warning("Verification email to %s was not sent", user.email)

        subject = str(user.id.value)
        return UserResponse(
            user=UserDto.from_entity(user),
            tokens=TokenDto(
                access_token=create_access_token(subject, user.user_type.value),
                refresh_token=create_refresh_token(subject, user.user_type.value),
            )
        )
