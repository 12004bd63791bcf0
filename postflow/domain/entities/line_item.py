"""Order line item entity"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from ..value_objects.entity_ids import LineItemId, OrderId, UserId
from ..enums import LineItemStatus, ClientReviewStatus, InclusionStatus


class ConcurrentUpdateError(Exception):
    """Raised when a line item was modified since the caller last read it."""

    def __init__(self, line_item_id):
        super().__init__(f"Concurrent update detected for line item {line_item_id}")
        self.line_item_id = line_item_id


def _jsonable(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value


@dataclass
class LineItem:
    id: LineItemId
    order_id: OrderId
    client_id: UUID
    added_by: Optional[UserId] = None
    status: LineItemStatus = LineItemStatus.DRAFT

    target_page_id: Optional[UUID] = None
    target_page_url: Optional[str] = None
    anchor_text: Optional[str] = None

    assigned_domain_id: Optional[UUID] = None
    assigned_domain: Optional[str] = None
    assigned_at: Optional[datetime] = None
    assigned_by: Optional[UserId] = None

    # Prices, in cents
    estimated_price: Optional[int] = None
    wholesale_price: Optional[int] = None
    approved_price: Optional[int] = None
    service_fee: int = 0

    client_review_status: Optional[ClientReviewStatus] = None
    client_reviewed_at: Optional[datetime] = None
    client_review_notes: Optional[str] = None

    display_order: int = 0
    version: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)

    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UserId] = None
    cancellation_reason: Optional[str] = None

    workflow_id: Optional[UUID] = None
    publisher_id: Optional[UUID] = None
    publisher_status: Optional[str] = None
    delivered_at: Optional[datetime] = None

    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def create(
        cls,
        order_id: OrderId,
        client_id: UUID,
        added_by: Optional[UserId],
        display_order: int,
        service_fee: int,
        target_page_id: Optional[UUID] = None,
        target_page_url: Optional[str] = None,
        anchor_text: Optional[str] = None,
        assigned_domain_id: Optional[UUID] = None,
        assigned_domain: Optional[str] = None,
        estimated_price: Optional[int] = None,
        wholesale_price: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> 'LineItem':
        metadata = dict(metadata or {})
        metadata.setdefault("inclusion_status", InclusionStatus.INCLUDED.value)
        if not assigned_domain:
            assigned_domain = metadata.get("assigned_domain")
        if wholesale_price is None and estimated_price is not None:
            wholesale_price = max(estimated_price - service_fee, 0)

        now = datetime.utcnow()
        return cls(
            id=LineItemId.generate(),
            order_id=order_id,
            client_id=client_id,
            added_by=added_by,
            status=LineItemStatus.DRAFT,
            target_page_id=target_page_id,
            target_page_url=target_page_url,
            anchor_text=anchor_text,
            assigned_domain_id=assigned_domain_id,
            assigned_domain=assigned_domain,
            assigned_at=now if assigned_domain_id else None,
            assigned_by=added_by if assigned_domain_id else None,
            estimated_price=estimated_price,
            wholesale_price=wholesale_price,
            service_fee=service_fee,
            display_order=display_order,
            version=1,
            metadata=metadata,
            created_at=now,
            updated_at=now,
        )

    def apply_update(self, changes: Dict[str, Any], changed_by: Optional[UserId]) -> Tuple[Dict, Dict]:
        """Apply a partial update and return ``(previous, new)`` for changed fields.

        The version is bumped only when something actually changed.
        """
        previous: Dict[str, Any] = {}
        new: Dict[str, Any] = {}
        now = datetime.utcnow()

        def track(name: str, value: Any) -> None:
            current = getattr(self, name)
            if current == value:
                return
            previous.setdefault(name, _jsonable(current))
            new[name] = _jsonable(value)
            setattr(self, name, value)

        for name in ("status", "client_id", "target_page_url", "anchor_text"):
            if name in changes and changes[name] is not None:
                track(name, changes[name])

        if "assigned_domain_id" in changes and changes["assigned_domain_id"] != self.assigned_domain_id:
            track("assigned_domain_id", changes["assigned_domain_id"])
            if changes.get("assigned_domain"):
                track("assigned_domain", changes["assigned_domain"])
            self.assigned_at = now
            self.assigned_by = changed_by
            if self.status == LineItemStatus.DRAFT:
                track("status", LineItemStatus.PENDING_SELECTION)

        if changes.get("client_review_status") and changes["client_review_status"] != self.client_review_status:
            track("client_review_status", changes["client_review_status"])
            self.client_reviewed_at = now
            if changes.get("client_review_notes") is not None:
                track("client_review_notes", changes["client_review_notes"])
            if self.client_review_status == ClientReviewStatus.APPROVED and self.approved_price is None:
                locked = changes.get("approved_price")
                track("approved_price", locked if locked is not None else self.estimated_price)

        for name in ("estimated_price", "wholesale_price", "approved_price"):
            if name in changes and changes[name] is not None:
                track(name, changes[name])

        if changes.get("metadata"):
            merged = {**self.metadata, **changes["metadata"]}
            track("metadata", merged)

        if new:
            self.version += 1
            self.updated_at = now
        return previous, new

    def cancel(self, cancelled_by: Optional[UserId], reason: Optional[str]) -> None:
        if self.is_cancelled:
            raise ValueError(f"Line item {self.id.value} is already cancelled")
        now = datetime.utcnow()
        self.status = LineItemStatus.CANCELLED
        self.cancelled_at = now
        self.cancelled_by = cancelled_by
        self.cancellation_reason = reason
        self.version += 1
        self.updated_at = now

    @property
    def is_cancelled(self) -> bool:
        return self.status == LineItemStatus.CANCELLED

    @property
    def retail_price(self) -> int:
        if self.approved_price is not None:
            return self.approved_price
        return self.estimated_price or 0
