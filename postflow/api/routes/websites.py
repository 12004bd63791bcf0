"""Website catalogue routes"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.website_dtos import (
    PricingComparisonDTO, WebsiteCreateDTO, WebsiteDTO, WebsiteListResponse, WebsiteUpdateDTO,
)
from ...application.services.derived_pricing import DerivedPricingService
from ...application.services.websites import WebsiteService
from ...db.database import get_db
from ...domain.entities.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=WebsiteListResponse)
async def list_websites(
    search: Optional[str] = None,
    niche: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    websites, total = WebsiteService(db).list(search=search, niche=niche, page=page, limit=limit)
    return WebsiteListResponse(websites=websites, total=total, page=page, limit=limit)


@router.post("/", response_model=WebsiteDTO, status_code=status.HTTP_201_CREATED)
async def create_website(
    request: WebsiteCreateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return WebsiteService(db).create(**request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Creating website %s failed", request.domain)
        raise internal_error()


@router.get("/{website_id}", response_model=WebsiteDTO)
async def get_website(
    website_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return WebsiteService(db).get(website_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/{website_id}", response_model=WebsiteDTO)
async def update_website(
    website_id: UUID,
    request: WebsiteUpdateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Update catalogue data; pricing settings trigger a derived price refresh"""
    try:
        return WebsiteService(db).update(website_id, **request.model_dump(exclude_unset=True))
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Updating website %s failed", website_id)
        raise internal_error()


@router.delete("/{website_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_website(
    website_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        WebsiteService(db).delete(website_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/{website_id}/derived-price", response_model=PricingComparisonDTO)
async def refresh_derived_price(
    website_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Recalculate one website's derived price now"""
    try:
        website = WebsiteService(db).get(website_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    pricing = DerivedPricingService(db)
    pricing.update(website)
    db.commit()
    return pricing.comparison(website)


@router.get("/{website_id}/pricing-comparison", response_model=PricingComparisonDTO)
async def pricing_comparison(
    website_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return DerivedPricingService.comparison(WebsiteService(db).get(website_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)
