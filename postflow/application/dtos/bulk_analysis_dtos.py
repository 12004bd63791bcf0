"""Bulk analysis DTOs"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from ...domain.enums import QualificationStatus


class BulkDomainsCreateDTO(BaseModel):
    domains: List[str] = Field(..., min_length=1)
    target_page_ids: List[UUID] = []
    manual_keywords: Optional[str] = None
    project_id: Optional[UUID] = None


class QualificationUpdateDTO(BaseModel):
    status: QualificationStatus
    notes: Optional[str] = None
    is_manual: bool = True
    selected_target_page_id: Optional[UUID] = None


class ExistingDomainsDTO(BaseModel):
    domains: List[str]


class BulkDomainDTO(BaseModel):
    id: UUID
    client_id: UUID
    project_id: Optional[UUID] = None
    domain: str
    target_page_ids: List[str] = []
    keyword_count: int
    qualification_status: str
    checked_by: Optional[UUID] = None
    checked_at: Optional[datetime] = None
    notes: Optional[str] = None
    selected_target_page_id: Optional[UUID] = None
    ai_qualification_reasoning: Optional[str] = None
    was_manually_qualified: bool
    was_human_verified: bool
    has_workflow: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BulkDomainSearchResponse(BaseModel):
    domains: List[BulkDomainDTO]
    total: int
    page: int
    page_size: int
