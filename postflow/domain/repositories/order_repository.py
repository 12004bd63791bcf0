"""Order repository interface"""

from abc import ABC, abstractmethod
from typing import Optional, List, Tuple
from uuid import UUID

from ..entities.order import Order
from ..enums import OrderStatus
from ..events.order_events import OrderStatusChanged
from ..value_objects.entity_ids import OrderId, UserId


class IOrderRepository(ABC):

    @abstractmethod
    async def get_by_id(self, order_id: OrderId) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_stripe_session_id(self, session_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def list(self, status: Optional[OrderStatus] = None, account_id: Optional[UserId] = None,
                   page: int = 1, limit: int = 20) -> Tuple[List[Order], int]:
        pass

    @abstractmethod
    async def add(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def update(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def record_status_change(self, event: OrderStatusChanged) -> None:
        pass

    @abstractmethod
    async def get_status_history(self, order_id: OrderId) -> List[dict]:
        pass

    @abstractmethod
    async def find_discount_percent(self, client_id: Optional[UUID], quantity: int) -> float:
        pass

    @abstractmethod
    async def count_line_items(self, order_ids: List[OrderId]) -> dict:
        pass
