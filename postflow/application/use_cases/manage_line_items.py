"""Line item use cases: list, batch add, bulk update and cancel"""

import logging
from collections import Counter
from typing import List, Optional
from uuid import UUID, uuid4

from ...core.config import settings
from ...domain.entities.line_item import ConcurrentUpdateError, LineItem
from ...domain.entities.order import Order
from ...domain.entities.user import User
from ...domain.enums import LineItemChangeType, LineItemStatus
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...domain.value_objects.entity_ids import LineItemId
from ...application.dtos.line_item_dtos import (
    AddLineItemsDTO,
    BulkUpdateLineItemsDTO,
    CancelLineItemDTO,
    LineItemBatchResponse,
    LineItemListResponse,
    LineItemResponseDTO,
    LineItemSummaryDTO,
)
from ...application.dtos.order_dtos import OrderResponseDTO
from ..services.clients import ClientService
from .get_orders import load_order

logger = logging.getLogger(__name__)

DELIVERED_STATUSES = (LineItemStatus.DELIVERED, LineItemStatus.COMPLETED)
PENDING_STATUSES = (LineItemStatus.DRAFT, LineItemStatus.PENDING_SELECTION)


def check_can_edit(order: Order, user: User) -> None:
    if user.is_internal:
        return
    error = order.account_edit_error()
    if error:
        raise PermissionError(error)


def summarize(items: List[LineItem]) -> LineItemSummaryDTO:
    active = [item for item in items if not item.is_cancelled]
    return LineItemSummaryDTO(
        total=len(items),
        by_status=dict(Counter(item.status.value for item in items)),
        by_client=dict(Counter(str(item.client_id) for item in items)),
        total_value=sum(item.retail_price for item in active),
        delivered_count=sum(1 for item in items if item.status in DELIVERED_STATUSES),
        pending_count=sum(1 for item in items if item.status in PENDING_STATUSES),
    )


async def refresh_order_totals(unit_of_work: IUnitOfWork, order: Order) -> None:
    """Recompute totals; a client-specific discount applies when every active item shares a client"""
    items = await unit_of_work.line_items.get_by_order(order.id)
    active = [item for item in items if not item.is_cancelled]
    clients = {item.client_id for item in active}
    client_id = next(iter(clients)) if len(clients) == 1 else None
    discount = await unit_of_work.orders.find_discount_percent(client_id, len(active))
    order.recalculate_totals(items, discount)
    await unit_of_work.orders.update(order)


class ManageLineItemsUseCase:

    def __init__(self, unit_of_work: IUnitOfWork, client_service: ClientService):
        self.unit_of_work = unit_of_work
        self.client_service = client_service

    async def list(self, order_id: UUID, user: User, status: Optional[str] = None,
                   client_id: Optional[UUID] = None) -> LineItemListResponse:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            items = await self.unit_of_work.line_items.get_by_order(order.id, status=status, client_id=client_id)
            changes = await self.unit_of_work.line_items.recent_changes([item.id for item in items])
            return LineItemListResponse(
                line_items=[
                    LineItemResponseDTO.from_entity(item, changes.get(item.id.value), internal=user.is_internal)
                    for item in items
                ],
                summary=summarize(items),
            )

    async def add(self, order_id: UUID, request: AddLineItemsDTO, user: User) -> LineItemBatchResponse:
        """Add a batch of items in one transaction; one bad item fails the batch"""
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            check_can_edit(order, user)

            batch_id = uuid4()
            display_order = await self.unit_of_work.line_items.max_display_order(order.id)
            created = []
            for entry in request.items:
                if not entry.client_id:
                    raise ValueError("client_id is required for each line item")
                client = self.client_service.get(entry.client_id, user)

                target_page_url = entry.target_page_url
                if entry.target_page_id and not target_page_url:
                    page = next((p for p in client.target_pages if p.id == entry.target_page_id), None)
                    if not page:
                        raise ValueError("Target page does not belong to the client")
                    target_page_url = page.url

                display_order += 1
                item = LineItem.create(
                    order_id=order.id,
                    client_id=client.id,
                    added_by=user.id,
                    display_order=display_order,
                    service_fee=settings.SERVICE_FEE_CENTS,
                    target_page_id=entry.target_page_id,
                    target_page_url=target_page_url,
                    anchor_text=entry.anchor_text,
                    assigned_domain_id=entry.assigned_domain_id,
                    assigned_domain=entry.assigned_domain,
                    estimated_price=entry.estimated_price,
                    wholesale_price=entry.wholesale_price,
                    metadata=entry.metadata,
                )
                await self.unit_of_work.line_items.add(item)
                await self.unit_of_work.line_items.record_change(
                    item, LineItemChangeType.CREATED.value, user.id,
                    previous_value=None,
                    new_value={"client_id": str(item.client_id), "target_page_url": item.target_page_url,
                               "estimated_price": item.estimated_price},
                    batch_id=batch_id, reason=request.reason,
                )
                created.append(item)

            await refresh_order_totals(self.unit_of_work, order)
            await self.unit_of_work.commit()

            logger.info("Added %d line items to order %s (batch %s)", len(created), order.id, batch_id)
            return LineItemBatchResponse(
                batch_id=batch_id,
                line_items=[LineItemResponseDTO.from_entity(item, internal=user.is_internal) for item in created],
                order=OrderResponseDTO.from_entity(order, internal=user.is_internal).model_dump(mode="json"),
            )

    async def bulk_update(self, order_id: UUID, request: BulkUpdateLineItemsDTO, user: User) -> LineItemBatchResponse:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            check_can_edit(order, user)

            batch_id = uuid4()
            updated, skipped = [], []
            for update in request.updates:
                item = await self.unit_of_work.line_items.get_by_id(LineItemId(update.id))
                if not item or item.order_id != order.id:
                    skipped.append(update.id)
                    continue
                if update.version is not None and update.version != item.version:
                    raise ConcurrentUpdateError(update.id)

                changes = update.changes()
                if "client_id" in changes and changes["client_id"] is not None:
                    self.client_service.get(changes["client_id"], user)

                expected_version = item.version
                previous, new = item.apply_update(changes, user.id)
                if not new:
                    continue

                await self.unit_of_work.line_items.update(item, expected_version)
                change_type = LineItemChangeType.STATUS_CHANGED if "status" in new else LineItemChangeType.MODIFIED
                await self.unit_of_work.line_items.record_change(
                    item, change_type.value, user.id, previous, new, batch_id=batch_id, reason=request.reason
                )
                updated.append(item)

            if updated:
                await refresh_order_totals(self.unit_of_work, order)
            await self.unit_of_work.commit()

            return LineItemBatchResponse(
                batch_id=batch_id,
                line_items=[LineItemResponseDTO.from_entity(item, internal=user.is_internal) for item in updated],
                skipped=skipped,
                order=OrderResponseDTO.from_entity(order, internal=user.is_internal).model_dump(mode="json"),
            )

    async def cancel(self, order_id: UUID, line_item_id: UUID, request: CancelLineItemDTO,
                     user: User) -> LineItemResponseDTO:
        async with self.unit_of_work:
            order = await load_order(self.unit_of_work, order_id, user)
            check_can_edit(order, user)

            item = await self.unit_of_work.line_items.get_by_id(LineItemId(line_item_id))
            if not item or item.order_id != order.id:
                raise LookupError("Line item not found")

            expected_version = item.version
            previous_status = item.status.value
            item.cancel(user.id, request.reason)
            await self.unit_of_work.line_items.update(item, expected_version)
            await self.unit_of_work.line_items.record_change(
                item, LineItemChangeType.CANCELLED.value, user.id,
                {"status": previous_status}, {"status": item.status.value}, reason=request.reason,
            )
            await refresh_order_totals(self.unit_of_work, order)
            await self.unit_of_work.commit()
            return LineItemResponseDTO.from_entity(item, internal=user.is_internal)
