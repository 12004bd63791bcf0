"""Order read use cases"""

from typing import List, Optional
from uuid import UUID

from ...domain.entities.order import Order
from ...domain.entities.user import User
from ...domain.enums import OrderStatus, UserType
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import OrderId, UserId
from ...application.dtos.order_dtos import OrderListResponse, OrderResponseDTO, StatusHistoryDTO


async def load_order(unit_of_work: IUnitOfWork, order_id: UUID, user: User) -> Order:
    """Fetch an order the user may act on: staff see all, accounts their own"""
    if user.user_type == UserType.PUBLISHER:
        raise PermissionError("Publishers cannot access orders")
    order = await unit_of_work.orders.get_by_id(OrderId(order_id))
    if not order:
        raise LookupError("Order not found")
    if not user.is_internal and not order.is_owned_by(user.id):
        raise PermissionError("You do not have access to this order")
    return order


class GetOrdersUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def list(self, user: User, status: Optional[OrderStatus] = None,
                   account_id: Optional[UUID] = None, page: int = 1, limit: int = 20) -> OrderListResponse:
        if user.user_type == UserType.PUBLISHER:
            raise PermissionError("Publishers cannot access orders")

        async with self.unit_of_work:
            if not user.is_internal:
                owner = user.id
            else:
                owner = UserId(account_id) if account_id else None

            orders, total = await self.unit_of_work.orders.list(
                status=status, account_id=owner, page=page, limit=limit
            )
            counts = await self.unit_of_work.orders.count_line_items([order.id for order in orders])
            return OrderListResponse(
                orders=[
                    OrderResponseDTO.from_entity(
                        order, line_item_count=counts.get(order.id.value, 0), internal=user.is_internal
                    )
                    for order in orders
                ],
                total=total,
                page=page,
                limit=limit,
            )

    async def get(self, order_id: UUID, user: User) -> OrderResponseDTO:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            counts = await self.unit_of_work.orders.count_line_items([order.id])
            return OrderResponseDTO.from_entity(
                order, line_item_count=counts.get(order.id.value, 0), internal=user.is_internal
            )

    async def history(self, order_id: UUID, user: User) -> List[StatusHistoryDTO]:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            rows = await self.unit_of_work.orders.get_status_history(order.id)
            return [StatusHistoryDTO(**row) for row in rows]
