"""Order line item routes"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user, get_unit_of_work
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.line_item_dtos import (
    AddLineItemsDTO, BulkUpdateLineItemsDTO, CancelLineItemDTO, LineItemBatchResponse,
    LineItemListResponse, LineItemResponseDTO,
)
from ...application.services.clients import ClientService
from ...application.use_cases.manage_line_items import ManageLineItemsUseCase
from ...db.database import get_db
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter()


def _use_case(unit_of_work: IUnitOfWork, db: Session) -> ManageLineItemsUseCase:
    return ManageLineItemsUseCase(unit_of_work, ClientService(db))


@router.get("/{order_id}/line-items", response_model=LineItemListResponse)
async def list_line_items(
    order_id: UUID,
    status_filter: Optional[str] = None,
    client_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        return await _use_case(unit_of_work, db).list(order_id, current_user, status=status_filter, client_id=client_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/{order_id}/line-items", response_model=LineItemBatchResponse, status_code=status.HTTP_201_CREATED)
async def add_line_items(
    order_id: UUID,
    request: AddLineItemsDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    """Add a batch of line items; the whole batch fails if one item is invalid"""
    try:
        return await _use_case(unit_of_work, db).add(order_id, request, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Adding line items to order %s failed", order_id)
        raise internal_error()


@router.patch("/{order_id}/line-items", response_model=LineItemBatchResponse)
async def bulk_update_line_items(
    order_id: UUID,
    request: BulkUpdateLineItemsDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    """Bulk update; a stale ``version`` aborts the batch with 409"""
    try:
        return await _use_case(unit_of_work, db).bulk_update(order_id, request, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Updating line items of order %s failed", order_id)
        raise internal_error()


@router.post("/{order_id}/line-items/{line_item_id}/cancel", response_model=LineItemResponseDTO)
async def cancel_line_item(
    order_id: UUID,
    line_item_id: UUID,
    request: CancelLineItemDTO,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        return await _use_case(unit_of_work, db).cancel(order_id, line_item_id, request, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Cancelling line item %s failed", line_item_id)
        raise internal_error()
