"""Order routes"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, get_unit_of_work, require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.order_dtos import (
    FulfillmentResponseDTO, OrderCreateDTO, OrderListResponse, OrderResponseDTO, OrderStatusUpdateDTO,
    ShareTokenCreateDTO, ShareTokenResponseDTO, StatusHistoryDTO,
)
from ...application.services.csv_export import export_order_line_items
from ...application.services.share_tokens import ShareTokenService
from ...application.use_cases.create_order import CreateOrderUseCase
from ...application.use_cases.get_orders import GetOrdersUseCase, load_order
from ...application.use_cases.start_fulfillment import StartFulfillmentUseCase
from ...application.use_cases.update_order_status import UpdateOrderStatusUseCase
from ...core.config import settings
from ...db.database import get_db
from ...domain.entities.user import User
from ...domain.enums import OrderStatus
from ...domain.repositories.unit_of_work import IUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=OrderResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Create a draft order"""
    try:
        return await CreateOrderUseCase(unit_of_work).execute(request, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Creating order failed")
        raise internal_error()


@router.get("/", response_model=OrderListResponse)
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    account_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Accounts see their own orders; staff see all"""
    try:
        return await GetOrdersUseCase(unit_of_work).list(
            current_user, status=status_filter, account_id=account_id, page=page, limit=limit
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/{order_id}", response_model=OrderResponseDTO)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await GetOrdersUseCase(unit_of_work).get(order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/{order_id}/history", response_model=List[StatusHistoryDTO])
async def get_order_history(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await GetOrdersUseCase(unit_of_work).history(order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/{order_id}/status", response_model=OrderResponseDTO)
async def update_order_status(
    order_id: UUID,
    request: OrderStatusUpdateDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    try:
        return await UpdateOrderStatusUseCase(unit_of_work).execute(order_id, request, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Updating status of order %s failed", order_id)
        raise internal_error()


@router.post("/{order_id}/fulfillment", response_model=FulfillmentResponseDTO)
async def start_fulfillment(
    order_id: UUID,
    current_user: User = Depends(require_internal),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work)
):
    """Create workflows for a paid order"""
    try:
        return await StartFulfillmentUseCase(unit_of_work).execute(order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Starting fulfillment of order %s failed", order_id)
        raise internal_error()


@router.get("/{order_id}/export")
async def export_line_items(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    """Line items of an order as CSV"""
    try:
        order = await load_order(unit_of_work, order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    content = export_order_line_items(db, order.id.value)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="order-{order_id}-line-items.csv"'},
    )


def _share_response(share) -> ShareTokenResponseDTO:
    return ShareTokenResponseDTO(
        id=share.id,
        token=share.token,
        share_url=f"{settings.FRONTEND_URL}/share/{share.token}",
        permissions=share.permissions,
        expires_at=share.expires_at,
    )


@router.post("/{order_id}/share", response_model=ShareTokenResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_share_link(
    order_id: UUID,
    request: ShareTokenCreateDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        order = await load_order(unit_of_work, order_id, current_user)
        share = ShareTokenService(db).generate(
            order.id.value, current_user.id.value, request.permissions, request.expires_in_days
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return _share_response(share)


@router.get("/{order_id}/share", response_model=List[ShareTokenResponseDTO])
async def list_share_links(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        order = await load_order(unit_of_work, order_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return [_share_response(share) for share in ShareTokenService(db).list_for_order(order.id.value) if share.is_active]


@router.delete("/{order_id}/share/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_share_link(
    order_id: UUID,
    share_id: UUID,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        order = await load_order(unit_of_work, order_id, current_user)
        ShareTokenService(db).invalidate(order.id.value, share_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
