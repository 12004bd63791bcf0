"""Start fulfillment of a paid order"""

import logging
from uuid import UUID

from ...domain.entities.user import User
from ...domain.enums import LineItemStatus, OrderStatus
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import OrderId
from ...application.dtos.order_dtos import FulfillmentResponseDTO
from .update_order_status import record_order_events

logger = logging.getLogger(__name__)


class StartFulfillmentUseCase:
    """Create one workflow per active line item and move the order to in_progress"""

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, order_id: UUID, user: User) -> FulfillmentResponseDTO:
        if not user.is_internal:
            raise PermissionError("Only internal users can start fulfillment")

        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(order_id))
            if not order:
                raise LookupError("Order not found")
            if order.status != OrderStatus.PAID:
                raise ValueError(f"Order must be paid to start fulfillment (status: '{order.status.value}')")

            workflow_ids = []
            for item in await self.unit_of_work.line_items.get_by_order(order.id):
                if item.is_cancelled or item.workflow_id:
                    continue
                title = f"Guest post for {item.target_page_url or 'client'}"
                if item.assigned_domain:
                    title += f" on {item.assigned_domain}"
                expected_version = item.version
                item.workflow_id = await self.unit_of_work.line_items.create_workflow(item, title, user.id)
                item.status = LineItemStatus.WORKFLOW_CREATED
                item.version += 1
                await self.unit_of_work.line_items.update(item, expected_version)
                workflow_ids.append(item.workflow_id)

            order.change_status(OrderStatus.IN_PROGRESS, changed_by=user.id, notes="Fulfillment started")
            await self.unit_of_work.orders.update(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()

            logger.info("Started fulfillment for order %s with %d workflows", order.id, len(workflow_ids))
            return FulfillmentResponseDTO(
                order_id=order.id.value,
                status=order.status.value,
                workflows_created=len(workflow_ids),
                workflow_ids=workflow_ids,
            )
