"""Order status transitions"""

import logging
from uuid import UUID

from ...domain.entities.order import Order
from ...domain.entities.user import User
from ...domain.enums import OrderStatus
from ...domain.events.order_events import OrderStatusChanged
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...application.dtos.order_dtos import OrderStatusUpdateDTO, OrderResponseDTO
from .get_orders import load_order

logger = logging.getLogger(__name__)

# Transitions an account user may request on their own order
ACCOUNT_TARGET_STATUSES = frozenset({
    OrderStatus.PENDING_CONFIRMATION,
    OrderStatus.CLIENT_APPROVED,
    OrderStatus.CANCELLED,
})


async def record_order_events(unit_of_work: IUnitOfWork, order: Order) -> None:
    """Persist the status history for the order's pending domain events"""
    for event in order.get_events():
        if isinstance(event, OrderStatusChanged):
            await unit_of_work.orders.record_status_change(event)


class UpdateOrderStatusUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, order_id: UUID, request: OrderStatusUpdateDTO, user: User) -> OrderResponseDTO:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)

            if not user.is_internal and request.status not in ACCOUNT_TARGET_STATUSES:
                raise PermissionError(f"You cannot move an order to '{request.status.value}'")

            order.change_status(request.status, changed_by=user.id, notes=request.notes)

            await self.unit_of_work.orders.update(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()

            logger.info("Order %s moved to %s by %s", order.id, order.status.value, user.email)
            counts = await self.unit_of_work.orders.count_line_items([order.id])
            return OrderResponseDTO.from_entity(
                order, line_item_count=counts.get(order.id.value, 0), internal=user.is_internal
            )
