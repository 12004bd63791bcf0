"""Viewing and approving an order through a share link"""

import logging
from typing import Optional

from ...domain.enums import OrderStatus, SharePermission
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import OrderId
from ...application.dtos.line_item_dtos import LineItemResponseDTO
from ...application.dtos.order_dtos import OrderResponseDTO, SharedOrderResponseDTO
from ..services.share_tokens import ShareTokenService
from .update_order_status import record_order_events

logger = logging.getLogger(__name__)


class SharedOrderUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, share_tokens: ShareTokenService):
        self.unit_of_work = unit_of_work
        self.share_tokens = share_tokens

    async def view(self, token: str, ip: Optional[str] = None) -> SharedOrderResponseDTO:
        share = self.share_tokens.validate(token, ip)
        async with self.unit_of_work:
            return await self._response(share)

    async def approve(self, token: str, ip: Optional[str] = None, notes: Optional[str] = None) -> SharedOrderResponseDTO:
        share = self.share_tokens.validate(token, ip)
        if not ShareTokenService.allows(share, SharePermission.APPROVE):
            raise PermissionError("This share link does not allow approval")

        async with self.unit_of_work:
            order = await self.unit_of_work.orders.get_by_id(OrderId(share.order_id))
            if not order:
                raise LookupError("Order not found")
            order.change_status(OrderStatus.CLIENT_APPROVED, notes=notes or "Approved via share link")
            await self.unit_of_work.orders.update(order)
            await record_order_events(self.unit_of_work, order)
            await self.unit_of_work.commit()
            logger.info("Order %s approved through share link", order.id)
            return await self._response(share)

    async def _response(self, share) -> SharedOrderResponseDTO:
        order = await self.unit_of_work.orders.get_by_id(OrderId(share.order_id))
        if not order:
            raise LookupError("Order not found")
        items = [item for item in await self.unit_of_work.line_items.get_by_order(order.id) if not item.is_cancelled]
        return SharedOrderResponseDTO(
            order=OrderResponseDTO.from_entity(order, line_item_count=len(items), internal=False),
            line_items=[LineItemResponseDTO.from_entity(item, internal=False).model_dump(mode="json") for item in items],
            permissions=list(share.permissions or []),
        )
