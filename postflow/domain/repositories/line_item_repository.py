"""Line item repository interface"""

from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID

from ..entities.line_item import LineItem
from ..value_objects.entity_ids import LineItemId, OrderId, UserId


class ILineItemRepository(ABC):

    @abstractmethod
    async def get_by_id(self, line_item_id: LineItemId) -> Optional[LineItem]:
        pass

    @abstractmethod
    async def get_by_order(self, order_id: OrderId, status: Optional[str] = None,
                           client_id: Optional[UUID] = None) -> List[LineItem]:
        pass

    @abstractmethod
    async def max_display_order(self, order_id: OrderId) -> int:
        pass

    @abstractmethod
    async def add(self, line_item: LineItem) -> LineItem:
        pass

    @abstractmethod
    async def update(self, line_item: LineItem, expected_version: int) -> LineItem:
        """Persist changes, raising ConcurrentUpdateError on a version mismatch"""
        pass

    @abstractmethod
    async def record_change(self, line_item: LineItem, change_type: str, changed_by: Optional[UserId],
                            previous_value: Optional[dict], new_value: Optional[dict],
                            batch_id: Optional[UUID] = None, reason: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def recent_changes(self, line_item_ids: List[LineItemId], per_item: int = 5) -> dict:
        pass

    @abstractmethod
    async def create_workflow(self, line_item: LineItem, title: str, created_by: Optional[UserId]) -> UUID:
        """Create the fulfillment workflow for a line item and return its id"""
        pass
