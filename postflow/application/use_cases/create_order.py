"""Create order use case"""

import logging

from ...core.config import settings
from ...domain.entities.order import Order
from ...domain.entities.user import User
from ...domain.enums import UserType
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import UserId
from ...application.dtos.order_dtos import OrderCreateDTO, OrderResponseDTO
from .update_order_status import record_order_events

logger = logging.getLogger(__name__)


class CreateOrderUseCase:
    """Use case for creating a draft order"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: OrderCreateDTO, user: User) -> OrderResponseDTO:
        if user.user_type == UserType.PUBLISHER:
            raise PermissionError("Publishers cannot create orders")

        async with self.unit_of_work:
            if user.is_internal:
                account_id = None
                if request.account_id:
                    account = await self.unit_of_work.users.get_by_id(UserId(request.account_id))
                    if not account or account.user_type != UserType.ACCOUNT:
                        raise ValueError("Account not found")
                    account_id = account.id
            else:
                account_id = user.id

            order = Order.create(
                account_id=account_id,
                created_by=user.id,
                includes_client_review=request.includes_client_review,
                rush_delivery=request.rush_delivery,
                client_review_fee=settings.CLIENT_REVIEW_FEE_CENTS,
                rush_fee=settings.RUSH_FEE_CENTS,
                notes=request.notes,
            )

            order = await self.unit_of_work.orders.add(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()

            logger.info("Order %s created by %s", order.id, user.email)
            return OrderResponseDTO.from_entity(order, internal=user.is_internal)
