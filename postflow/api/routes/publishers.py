"""Publisher routes: the publisher portal (``/me``) and staff management"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_publisher, require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.publisher_order_dtos import (
    AssignDomainDTO, EarningDTO, PublisherLineItemDTO, PublisherResponseDTO, PublisherStatsDTO,
)
from ...application.dtos.website_dtos import (
    OfferingCreateDTO, OfferingDTO, OfferingUpdateDTO, PublisherAdminUpdateDTO, PublisherDTO,
    PublisherListResponse, PublisherProfileUpdateDTO, PublisherWebsiteCreateDTO, PublisherWebsiteDTO,
    RelationshipDTO, RelationshipUpdateDTO,
)
from ...application.services.publisher_orders import PublisherOrderService
from ...application.services.websites import PublisherService
from ...db.database import get_db
from ...domain.entities.user import User
from ...infrastructure.orm.website_model import PublisherModel

logger = logging.getLogger(__name__)

router = APIRouter()


# Publisher portal

@router.get("/me", response_model=PublisherDTO)
async def my_profile(publisher: PublisherModel = Depends(get_current_publisher)):
    return publisher


@router.put("/me", response_model=PublisherDTO)
async def update_my_profile(
    request: PublisherProfileUpdateDTO,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherService(db).update_profile(publisher.id, **request.model_dump(exclude_unset=True))


@router.get("/me/offerings", response_model=List[OfferingDTO])
async def my_offerings(
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherService(db).list_offerings(publisher.id)


@router.post("/me/offerings", response_model=OfferingDTO, status_code=status.HTTP_201_CREATED)
async def create_my_offering(
    request: OfferingCreateDTO,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).create_offering(publisher.id, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/me/offerings/{offering_id}", response_model=OfferingDTO)
async def update_my_offering(
    offering_id: UUID,
    request: OfferingUpdateDTO,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).update_offering(publisher.id, offering_id, **request.model_dump(exclude_unset=True))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/me/offerings/{offering_id}", response_model=OfferingDTO)
async def deactivate_my_offering(
    offering_id: UUID,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).deactivate_offering(publisher.id, offering_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/me/websites", response_model=List[PublisherWebsiteDTO])
async def my_websites(
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherService(db).list_websites(publisher.id)


@router.post("/me/websites", response_model=RelationshipDTO, status_code=status.HTTP_201_CREATED)
async def add_my_website(
    request: PublisherWebsiteCreateDTO,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).add_website(publisher.id, request.domain, request.offering_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/me/websites/{relationship_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_my_website(
    relationship_id: UUID,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    try:
        PublisherService(db).remove_website(publisher.id, relationship_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/me/orders", response_model=List[PublisherLineItemDTO])
async def my_orders(
    publisher_status: Optional[str] = None,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherOrderService(db).line_items_for_publisher(publisher.id, publisher_status)


@router.post("/me/orders/{line_item_id}/respond", response_model=PublisherLineItemDTO)
async def respond_to_order(
    line_item_id: UUID,
    request: PublisherResponseDTO,
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    """Accept, decline, start or submit an assigned order"""
    try:
        return PublisherOrderService(db).respond(publisher.id, line_item_id, request.action, request.published_url)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/me/earnings", response_model=List[EarningDTO])
async def my_earnings(
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherOrderService(db).earnings(publisher.id)


@router.get("/me/stats", response_model=PublisherStatsDTO)
async def my_stats(
    publisher: PublisherModel = Depends(get_current_publisher),
    db: Session = Depends(get_db)
):
    return PublisherOrderService(db).stats(publisher.id)


# Staff

@router.get("/", response_model=PublisherListResponse)
async def list_publishers(
    account_status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        publishers, total = PublisherService(db).list(account_status, search, page, limit)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return PublisherListResponse(publishers=publishers, total=total, page=page, limit=limit)


@router.get("/{publisher_id}", response_model=PublisherDTO)
async def get_publisher(
    publisher_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).get(publisher_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/{publisher_id}", response_model=PublisherDTO)
async def update_publisher(
    publisher_id: UUID,
    request: PublisherAdminUpdateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).update_profile(publisher_id, **request.model_dump(exclude_unset=True))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/{publisher_id}/offerings", response_model=List[OfferingDTO])
async def publisher_offerings(
    publisher_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return PublisherService(db).list_offerings(publisher_id)


@router.post("/{publisher_id}/offerings", response_model=OfferingDTO, status_code=status.HTTP_201_CREATED)
async def create_publisher_offering(
    publisher_id: UUID,
    request: OfferingCreateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).create_offering(publisher_id, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/{publisher_id}/websites", response_model=List[PublisherWebsiteDTO])
async def publisher_websites(
    publisher_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return PublisherService(db).list_websites(publisher_id)


@router.post("/{publisher_id}/websites", response_model=RelationshipDTO, status_code=status.HTTP_201_CREATED)
async def add_publisher_website(
    publisher_id: UUID,
    request: PublisherWebsiteCreateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Staff-added links start out verified"""
    try:
        return PublisherService(db).add_website(publisher_id, request.domain, request.offering_id, verified=True)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/relationships/{relationship_id}", response_model=RelationshipDTO)
async def update_relationship(
    relationship_id: UUID,
    request: RelationshipUpdateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return PublisherService(db).update_relationship(relationship_id, **request.model_dump(exclude_unset=True))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/line-items/{line_item_id}/assign", response_model=PublisherLineItemDTO)
async def assign_domain(
    line_item_id: UUID,
    request: AssignDomainDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Assign a qualified domain to a line item and route it to the best publisher"""
    try:
        return PublisherOrderService(db).assign_domain(line_item_id, request.bulk_domain_id, staff.id.value)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Assigning domain to line item %s failed", line_item_id)
        raise internal_error()


@router.post("/line-items/{line_item_id}/complete", response_model=EarningDTO)
async def complete_line_item(
    line_item_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Mark a delivered line item complete and record the publisher's earnings"""
    try:
        return PublisherOrderService(db).create_earnings_for_completed_line_item(line_item_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
