"""Public share-link routes (no login)"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...api.dependencies import get_unit_of_work
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.order_dtos import SharedOrderResponseDTO
from ...application.services.share_tokens import ShareTokenService
from ...application.use_cases.shared_order import SharedOrderUseCase
from ...db.database import get_db
from ...domain.repositories.unit_of_work import IUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter()


class ShareApprovalDTO(BaseModel):
    notes: Optional[str] = None


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.get("/{token}", response_model=SharedOrderResponseDTO)
async def view_shared_order(
    token: str,
    request: Request,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    try:
        return await SharedOrderUseCase(unit_of_work, ShareTokenService(db)).view(token, _client_ip(request))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/{token}/approve", response_model=SharedOrderResponseDTO)
async def approve_shared_order(
    token: str,
    body: ShareApprovalDTO,
    request: Request,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    db: Session = Depends(get_db)
):
    """Client approval through a link carrying the ``approve`` permission"""
    try:
        return await SharedOrderUseCase(unit_of_work, ShareTokenService(db)).approve(
            token, _client_ip(request), body.notes
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Approving shared order failed")
        raise internal_error()
