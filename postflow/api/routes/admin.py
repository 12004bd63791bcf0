"""Admin routes"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_token_claims, require_admin, require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.user_dtos import (
    AccessTokenDto, ImpersonationLogDto, ImpersonationStartDto, ImpersonationTokenResponse,
)
from ...application.services.admin import AdminService
from ...application.services.csv_export import export_websites
from ...application.services.derived_pricing import DerivedPricingService
from ...application.services.impersonation import ImpersonationService
from ...db.database import get_db
from ...domain.entities.user import User
from ...tasks import refresh_derived_prices

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/dashboard")
async def get_admin_dashboard(
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """System overview counters"""
    try:
        return AdminService(db).dashboard()
    except Exception:
        logger.exception("Building admin dashboard failed")
        raise internal_error()


@router.post("/pricing/refresh", status_code=status.HTTP_202_ACCEPTED)
async def refresh_all_prices(admin: User = Depends(require_admin)):
    """Queue a derived price refresh for every website"""
    task = refresh_derived_prices.delay()
    logger.info("Admin %s queued derived pricing refresh (%s)", admin.email, task.id)
    return {"task_id": task.id, "status": "queued"}


@router.get("/pricing/stats")
async def pricing_stats(
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return DerivedPricingService(db).stats()


@router.get("/websites/export")
async def export_websites_csv(
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return Response(
        content=export_websites(db),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="websites.csv"'},
    )


# impersonation

@router.post("/impersonation/start", response_model=ImpersonationTokenResponse)
async def start_impersonation(
    request: ImpersonationStartDto,
    http_request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Act as an account or publisher user; every session is logged"""
    try:
        return ImpersonationService(db).start(
            admin.id.value,
            request.target_user_id,
            request.reason,
            ip_address=http_request.client.host if http_request.client else None,
            user_agent=http_request.headers.get("user-agent"),
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Starting impersonation failed")
        raise internal_error()


@router.post("/impersonation/end", response_model=AccessTokenDto)
async def end_impersonation(
    claims: Dict[str, Any] = Depends(get_token_claims),
    db: Session = Depends(get_db)
):
    """End the session carried by the impersonation token and hand back an admin token"""
    if not claims.get("imp") or not claims.get("imp_log"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not an impersonation session")
    try:
        return ImpersonationService(db).end(UUID(claims["imp"]), UUID(claims["imp_log"]))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/impersonation/logs", response_model=List[ImpersonationLogDto])
async def impersonation_logs(
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ImpersonationService(db).logs(limit)
