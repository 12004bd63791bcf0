"""Outreach import DTOs"""

from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID


class WebhookAcceptedResponse(BaseModel):
    success: bool = True
    message: str = "Webhook received and queued for processing"
    webhook_id: Optional[str] = None
    processing_id: UUID


class EmailLogDTO(BaseModel):
    id: UUID
    webhook_id: Optional[str] = None
    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    email_from: str
    email_subject: Optional[str] = None
    status: str
    confidence_score: Optional[float] = None
    parsed_data: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    retry_count: int
    publisher_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EmailLogListResponse(BaseModel):
    logs: List[EmailLogDTO]
    total: int
    page: int
    limit: int


class ReviewItemDTO(BaseModel):
    id: UUID
    log_id: UUID
    publisher_id: Optional[UUID] = None
    queue_type: str
    priority: int
    status: str
    reason: Optional[str] = None
    missing_fields: Optional[List[str]] = None
    suggested_actions: Optional[Dict[str, Any]] = None
    auto_approve_at: Optional[datetime] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReviewQueueResponse(BaseModel):
    items: List[ReviewItemDTO]
    total: int
    page: int
    limit: int


class ReviewDecisionDTO(BaseModel):
    notes: Optional[str] = None


class ClaimPublisherDTO(BaseModel):
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ClaimInfoDTO(BaseModel):
    publisher_id: UUID
    email: str
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
    expires_at: Optional[datetime] = None


class ClaimResponseDTO(BaseModel):
    publisher_id: UUID
    user_id: UUID
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
