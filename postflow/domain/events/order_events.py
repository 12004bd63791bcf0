"""Order domain events"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..value_objects.entity_ids import OrderId, UserId
from ..enums import OrderStatus


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    old_status: Optional[OrderStatus]
    new_status: OrderStatus
    changed_by: Optional[UserId]
    changed_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class OrderPaid:
    order_id: OrderId
    account_id: UserId
    amount_cents: int
    payment_reference: Optional[str]
