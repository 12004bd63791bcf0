"""Website, publisher and offering DTOs"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from ...domain.enums import OfferingType, PricingStrategy, VerificationStatus


class WebsiteCreateDTO(BaseModel):
    domain: str = Field(..., min_length=1)
    domain_rating: Optional[int] = None
    total_traffic: Optional[int] = None
    niche: Optional[str] = None
    categories: Optional[List[str]] = None
    guest_post_cost: Optional[int] = Field(default=None, ge=0)


class WebsiteUpdateDTO(BaseModel):
    domain_rating: Optional[int] = None
    total_traffic: Optional[int] = None
    niche: Optional[str] = None
    categories: Optional[List[str]] = None
    guest_post_cost: Optional[int] = Field(default=None, ge=0)
    pricing_strategy: Optional[PricingStrategy] = None
    custom_offering_id: Optional[UUID] = None
    price_override_offering_id: Optional[UUID] = None


class WebsiteDTO(BaseModel):
    id: UUID
    domain: str
    domain_rating: Optional[int] = None
    total_traffic: Optional[int] = None
    niche: Optional[str] = None
    categories: Optional[List[str]] = None
    source: str
    guest_post_cost: Optional[int] = None
    derived_guest_post_cost: Optional[int] = None
    price_calculation_method: Optional[str] = None
    price_calculated_at: Optional[datetime] = None
    pricing_strategy: str
    selected_offering_id: Optional[UUID] = None
    selected_publisher_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class WebsiteListResponse(BaseModel):
    websites: List[WebsiteDTO]
    total: int
    page: int
    limit: int


class PublisherDTO(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    email: str
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    account_status: str
    source: str
    confidence_score: Optional[float] = None
    claimed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PublisherListResponse(BaseModel):
    publishers: List[PublisherDTO]
    total: int
    page: int
    limit: int


class PublisherProfileUpdateDTO(BaseModel):
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None


class PublisherAdminUpdateDTO(PublisherProfileUpdateDTO):
    account_status: Optional[str] = None


class OfferingCreateDTO(BaseModel):
    offering_type: OfferingType
    base_price: Optional[int] = Field(default=None, ge=0)
    offering_name: Optional[str] = None
    currency: Optional[str] = None
    turnaround_days: Optional[int] = Field(default=None, ge=1)
    current_availability: Optional[str] = None
    is_active: Optional[bool] = None
    attributes: Optional[Dict[str, Any]] = None
    website_id: Optional[UUID] = None


class OfferingUpdateDTO(BaseModel):
    base_price: Optional[int] = Field(default=None, ge=0)
    offering_name: Optional[str] = None
    currency: Optional[str] = None
    turnaround_days: Optional[int] = Field(default=None, ge=1)
    current_availability: Optional[str] = None
    is_active: Optional[bool] = None
    attributes: Optional[Dict[str, Any]] = None


class OfferingDTO(BaseModel):
    id: UUID
    publisher_id: UUID
    offering_type: str
    offering_name: Optional[str] = None
    base_price: Optional[int] = None
    currency: str
    turnaround_days: Optional[int] = None
    current_availability: str
    is_active: bool
    attributes: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PublisherWebsiteCreateDTO(BaseModel):
    domain: str = Field(..., min_length=1)
    offering_id: Optional[UUID] = None


class RelationshipUpdateDTO(BaseModel):
    verification_status: Optional[VerificationStatus] = None
    priority_rank: Optional[int] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class RelationshipDTO(BaseModel):
    id: UUID
    publisher_id: UUID
    website_id: UUID
    offering_id: Optional[UUID] = None
    is_active: bool
    verification_status: str
    priority_rank: int
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PublisherWebsiteDTO(BaseModel):
    relationship: RelationshipDTO
    website: WebsiteDTO


class PricingComparisonDTO(BaseModel):
    website_id: UUID
    domain: str
    current_price: Optional[int] = None
    derived_price: Optional[int] = None
    status: str
    difference: Optional[int] = None
    percent_difference: Optional[float] = None
    method: Optional[str] = None
