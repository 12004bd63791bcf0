"""Publisher fulfillment DTOs"""

from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime
from uuid import UUID


class AssignDomainDTO(BaseModel):
    bulk_domain_id: UUID


class PublisherResponseDTO(BaseModel):
    action: Literal["accept", "decline", "start", "submit"]
    published_url: Optional[str] = None


class PublisherLineItemDTO(BaseModel):
    id: UUID
    order_id: UUID
    status: str
    assigned_domain: Optional[str] = None
    target_page_url: Optional[str] = None
    anchor_text: Optional[str] = None
    publisher_price: Optional[int] = None
    platform_fee: Optional[int] = None
    publisher_status: Optional[str] = None
    publisher_notified_at: Optional[datetime] = None
    publisher_accepted_at: Optional[datetime] = None
    publisher_submitted_at: Optional[datetime] = None
    published_url: Optional[str] = None
    assigned_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EarningDTO(BaseModel):
    id: UUID
    order_line_item_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    earning_type: str
    gross_amount: int
    platform_fee_amount: int
    net_amount: int
    currency: str
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class PublisherStatsDTO(BaseModel):
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_earnings: int
    pending_earnings: int
    paid_earnings: int
