"""Order DTOs for API requests and responses"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from ...domain.enums import OrderStatus, SharePermission


class OrderCreateDTO(BaseModel):
    """Request DTO for creating an order"""
    account_id: Optional[UUID] = None
    includes_client_review: bool = False
    rush_delivery: bool = False
    notes: Optional[str] = None


class OrderStatusUpdateDTO(BaseModel):
    status: OrderStatus
    notes: Optional[str] = None


class OrderResponseDTO(BaseModel):
    """Response DTO for order data"""
    id: UUID
    account_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    status: str
    includes_client_review: bool
    rush_delivery: bool
    client_review_fee: int
    rush_fee: int
    subtotal: int
    discount_percent: float
    discount_amount: int
    total_retail: int
    total_wholesale: Optional[int] = None
    profit: Optional[int] = None
    credits_applied: int
    amount_due: int
    notes: Optional[str] = None
    line_item_count: int = 0
    approved_at: Optional[datetime] = None
    invoiced_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order, line_item_count: int = 0, internal: bool = True):
        """Convert domain entity to DTO; wholesale and profit are staff-only"""
        return cls(
            id=order.id.value,
            account_id=order.account_id.value if order.account_id else None,
            created_by=order.created_by.value if order.created_by else None,
            status=order.status.value,
            includes_client_review=order.includes_client_review,
            rush_delivery=order.rush_delivery,
            client_review_fee=order.client_review_fee,
            rush_fee=order.rush_fee,
            subtotal=order.subtotal,
            discount_percent=order.discount_percent,
            discount_amount=order.discount_amount,
            total_retail=order.total_retail,
            total_wholesale=order.total_wholesale if internal else None,
            profit=order.profit if internal else None,
            credits_applied=order.credits_applied,
            amount_due=order.amount_due,
            notes=order.notes,
            line_item_count=line_item_count,
            approved_at=order.approved_at,
            invoiced_at=order.invoiced_at,
            paid_at=order.paid_at,
            completed_at=order.completed_at,
            cancelled_at=order.cancelled_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    orders: List[OrderResponseDTO]
    total: int
    page: int
    limit: int


class StatusHistoryDTO(BaseModel):
    old_status: Optional[str] = None
    new_status: str
    changed_by: Optional[UUID] = None
    notes: Optional[str] = None
    changed_at: datetime


class ShareTokenCreateDTO(BaseModel):
    expires_in_days: Optional[int] = Field(default=None, ge=1, le=90)
    permissions: List[SharePermission] = Field(default_factory=lambda: [SharePermission.VIEW])


class ShareTokenResponseDTO(BaseModel):
    id: UUID
    token: str
    share_url: str
    permissions: List[str]
    expires_at: datetime


class SharedOrderResponseDTO(BaseModel):
    order: OrderResponseDTO
    line_items: list
    permissions: List[str]


class CheckoutResponseDTO(BaseModel):
    order_id: UUID
    status: str
    checkout_url: Optional[str] = None
    session_id: Optional[str] = None
    amount_due: int


class FulfillmentResponseDTO(BaseModel):
    order_id: UUID
    status: str
    workflows_created: int
    workflow_ids: List[UUID]
