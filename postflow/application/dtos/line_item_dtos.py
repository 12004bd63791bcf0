"""Line item DTOs"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from ...domain.enums import ClientReviewStatus, LineItemStatus


class LineItemCreateDTO(BaseModel):
    client_id: Optional[UUID] = None
    target_page_id: Optional[UUID] = None
    target_page_url: Optional[str] = None
    anchor_text: Optional[str] = None
    assigned_domain_id: Optional[UUID] = None
    assigned_domain: Optional[str] = None
    estimated_price: Optional[int] = Field(default=None, ge=0)
    wholesale_price: Optional[int] = Field(default=None, ge=0)
    metadata: Optional[Dict[str, Any]] = None


class AddLineItemsDTO(BaseModel):
    items: List[LineItemCreateDTO] = Field(..., min_length=1)
    reason: Optional[str] = None


class LineItemUpdateDTO(BaseModel):
    id: UUID
    version: Optional[int] = None
    status: Optional[LineItemStatus] = None
    client_id: Optional[UUID] = None
    target_page_url: Optional[str] = None
    anchor_text: Optional[str] = None
    assigned_domain_id: Optional[UUID] = None
    assigned_domain: Optional[str] = None
    estimated_price: Optional[int] = Field(default=None, ge=0)
    wholesale_price: Optional[int] = Field(default=None, ge=0)
    approved_price: Optional[int] = Field(default=None, ge=0)
    client_review_status: Optional[ClientReviewStatus] = None
    client_review_notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        data.pop("id", None)
        data.pop("version", None)
        return data


class BulkUpdateLineItemsDTO(BaseModel):
    updates: List[LineItemUpdateDTO] = Field(..., min_length=1)
    reason: Optional[str] = None


class CancelLineItemDTO(BaseModel):
    reason: Optional[str] = None


class LineItemResponseDTO(BaseModel):
    id: UUID
    order_id: UUID
    client_id: UUID
    status: str
    target_page_id: Optional[UUID] = None
    target_page_url: Optional[str] = None
    anchor_text: Optional[str] = None
    assigned_domain_id: Optional[UUID] = None
    assigned_domain: Optional[str] = None
    estimated_price: Optional[int] = None
    wholesale_price: Optional[int] = None
    approved_price: Optional[int] = None
    service_fee: int
    client_review_status: Optional[str] = None
    client_review_notes: Optional[str] = None
    display_order: int
    version: int
    metadata: Dict[str, Any]
    publisher_status: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    recent_changes: List[dict] = []

    @classmethod
    def from_entity(cls, item, recent_changes: Optional[List[dict]] = None, internal: bool = True):
        return cls(
            id=item.id.value,
            order_id=item.order_id.value,
            client_id=item.client_id,
            status=item.status.value,
            target_page_id=item.target_page_id,
            target_page_url=item.target_page_url,
            anchor_text=item.anchor_text,
            assigned_domain_id=item.assigned_domain_id,
            assigned_domain=item.assigned_domain,
            estimated_price=item.estimated_price,
            wholesale_price=item.wholesale_price if internal else None,
            approved_price=item.approved_price,
            service_fee=item.service_fee,
            client_review_status=item.client_review_status.value if item.client_review_status else None,
            client_review_notes=item.client_review_notes,
            display_order=item.display_order,
            version=item.version,
            metadata=item.metadata,
            publisher_status=item.publisher_status,
            cancelled_at=item.cancelled_at,
            cancellation_reason=item.cancellation_reason,
            created_at=item.created_at,
            updated_at=item.updated_at,
            recent_changes=recent_changes or [],
        )


class LineItemSummaryDTO(BaseModel):
    total: int
    by_status: Dict[str, int]
    by_client: Dict[str, int]
    total_value: int
    delivered_count: int
    pending_count: int


class LineItemListResponse(BaseModel):
    line_items: List[LineItemResponseDTO]
    summary: LineItemSummaryDTO


class LineItemBatchResponse(BaseModel):
    batch_id: UUID
    line_items: List[LineItemResponseDTO]
    skipped: List[UUID] = []
    order: Optional[dict] = None
