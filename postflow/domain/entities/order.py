"""Order entity with business logic"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Iterable

from ..value_objects.money import Money
from ..value_objects.entity_ids import OrderId, UserId
from ..enums import (
    OrderStatus,
    ACCOUNT_EDITABLE_ORDER_STATUSES,
    PAYMENT_LOCKED_ORDER_STATUSES,
)
from ..events.order_events import OrderStatusChanged, OrderPaid


ALLOWED_TRANSITIONS = {
    OrderStatus.DRAFT: {
        OrderStatus.PENDING_CONFIRMATION, OrderStatus.CONFIRMED, OrderStatus.CANCELLED,
    },
    OrderStatus.PENDING_CONFIRMATION: {
        OrderStatus.DRAFT, OrderStatus.CONFIRMED, OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.SITES_READY, OrderStatus.CANCELLED,
    },
    OrderStatus.SITES_READY: {
        OrderStatus.CLIENT_REVIEWING, OrderStatus.CLIENT_APPROVED, OrderStatus.CANCELLED,
    },
    OrderStatus.CLIENT_REVIEWING: {
        OrderStatus.SITES_READY, OrderStatus.CLIENT_APPROVED, OrderStatus.CANCELLED,
    },
    OrderStatus.CLIENT_APPROVED: {
        OrderStatus.INVOICED, OrderStatus.PAYMENT_PENDING, OrderStatus.PAID, OrderStatus.CANCELLED,
    },
    OrderStatus.INVOICED: {
        OrderStatus.PAYMENT_PENDING, OrderStatus.PAID, OrderStatus.CANCELLED,
    },
    OrderStatus.PAYMENT_PENDING: {
        OrderStatus.PAYMENT_PROCESSING, OrderStatus.PAID, OrderStatus.INVOICED, OrderStatus.CANCELLED,
    },
    OrderStatus.PAYMENT_PROCESSING: {
        OrderStatus.PAID, OrderStatus.PAYMENT_PENDING,
    },
    OrderStatus.PAID: {
        OrderStatus.IN_PROGRESS, OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED,
    },
    OrderStatus.IN_PROGRESS: {
        OrderStatus.COMPLETED, OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED,
    },
    OrderStatus.COMPLETED: {
        OrderStatus.REFUNDED, OrderStatus.PARTIALLY_REFUNDED,
    },
    OrderStatus.PARTIALLY_REFUNDED: {
        OrderStatus.REFUNDED,
    },
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}

# Milestone timestamp set the first time an order reaches the status
_MILESTONES = {
    OrderStatus.CLIENT_APPROVED: "approved_at",
    OrderStatus.INVOICED: "invoiced_at",
    OrderStatus.PAID: "paid_at",
    OrderStatus.COMPLETED: "completed_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


@dataclass
class Order:
    id: OrderId
    account_id: Optional[UserId]
    created_by: Optional[UserId] = None
    status: OrderStatus = OrderStatus.DRAFT

    includes_client_review: bool = False
    rush_delivery: bool = False
    client_review_fee: int = 0
    rush_fee: int = 0

    # Totals, in cents
    subtotal: int = 0
    discount_percent: float = 0.0
    discount_amount: int = 0
    total_retail: int = 0
    total_wholesale: int = 0
    profit: int = 0
    credits_applied: int = 0

    notes: Optional[str] = None
    stripe_session_id: Optional[str] = None
    payment_reference: Optional[str] = None

    approved_at: Optional[datetime] = None
    invoiced_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    # Domain events
    _events: List = field(default_factory=list, init=False)

    @classmethod
    def create(
        cls,
        account_id: Optional[UserId],
        created_by: Optional[UserId],
        includes_client_review: bool = False,
        rush_delivery: bool = False,
        client_review_fee: int = 0,
        rush_fee: int = 0,
        notes: Optional[str] = None,
    ) -> 'Order':
        order = cls(
            id=OrderId.generate(),
            account_id=account_id,
            created_by=created_by,
            status=OrderStatus.DRAFT,
            includes_client_review=includes_client_review,
            rush_delivery=rush_delivery,
            client_review_fee=client_review_fee if includes_client_review else 0,
            rush_fee=rush_fee if rush_delivery else 0,
            notes=notes,
        )
        order.total_retail = order.client_review_fee + order.rush_fee
        order.profit = order.total_retail
        order._events.append(OrderStatusChanged(
            order_id=order.id,
            old_status=None,
            new_status=OrderStatus.DRAFT,
            changed_by=created_by,
            changed_at=order.created_at,
            notes="Order created",
        ))
        return order

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())

    def change_status(self, new_status: OrderStatus, changed_by: Optional[UserId] = None,
                      notes: Optional[str] = None) -> None:
        """Business logic: move the order through its lifecycle"""
        if new_status == self.status:
            raise ValueError(f"Order is already in status: {self.status.value}")
        if not self.can_transition_to(new_status):
            raise ValueError(
                f"Cannot change order status from '{self.status.value}' to '{new_status.value}'"
            )

        now = datetime.utcnow()
        old_status = self.status
        self.status = new_status
        milestone = _MILESTONES.get(new_status)
        if milestone and getattr(self, milestone) is None:
            setattr(self, milestone, now)
        self.updated_at = now

        self._events.append(OrderStatusChanged(
            order_id=self.id,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
            changed_at=now,
            notes=notes,
        ))

    def mark_as_paid(self, payment_reference: Optional[str], changed_by: Optional[UserId] = None) -> None:
        """Business logic: mark order as paid"""
        self.change_status(OrderStatus.PAID, changed_by, notes="Payment received")
        self.payment_reference = payment_reference
        self._events.append(OrderPaid(
            order_id=self.id,
            account_id=self.account_id,
            amount_cents=self.amount_due,
            payment_reference=payment_reference,
        ))

    def recalculate_totals(self, line_items: Iterable, discount_percent: float) -> None:
        """Recompute totals from the order's active line items.

        Retail per item is the approved price when locked, otherwise the
        estimate. The quantity discount applies to the subtotal only; fees
        are added on top.
        """
        active = [item for item in line_items if not item.is_cancelled]
        subtotal = Money(sum(item.retail_price for item in active))
        wholesale = Money(sum(item.wholesale_price or 0 for item in active))
        discount = subtotal.percentage(discount_percent)
        fees = Money(self.client_review_fee) + Money(self.rush_fee)

        self.subtotal = subtotal.cents
        self.discount_percent = discount_percent
        self.discount_amount = discount.cents
        self.total_retail = (subtotal - discount + fees).cents
        self.total_wholesale = wholesale.cents
        self.profit = self.total_retail - self.total_wholesale
        self.updated_at = datetime.utcnow()

    def apply_credits(self, amount: int) -> None:
        if amount <= 0:
            raise ValueError("Credit amount must be positive")
        if amount > self.amount_due:
            raise ValueError("Credits exceed the amount due")
        self.credits_applied += amount
        self.updated_at = datetime.utcnow()

    @property
    def amount_due(self) -> int:
        return max(self.total_retail - self.credits_applied, 0)

    def account_edit_error(self) -> Optional[str]:
        """Reason an account user may not edit line items, or None."""
        if self.status in ACCOUNT_EDITABLE_ORDER_STATUSES:
            return None
        if self.status in PAYMENT_LOCKED_ORDER_STATUSES:
            return (
                "Cannot add line items once payment process begins. "
                f"Current status: '{self.status.value}'. Please contact support for assistance."
            )
        return f"Cannot add line items in status: '{self.status.value}'"

    def is_owned_by(self, user_id: UserId) -> bool:
        return self.account_id is not None and self.account_id == user_id

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None and self.status in (
            OrderStatus.PAID, OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED
        )

    def get_events(self) -> List:
        """Get and clear domain events"""
        events = self._events.copy()
        self._events.clear()
        return events
