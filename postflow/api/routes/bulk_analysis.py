"""Bulk domain analysis routes (staff only)"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...api.dependencies import require_internal
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.bulk_analysis_dtos import (
    BulkDomainDTO, BulkDomainsCreateDTO, BulkDomainSearchResponse, ExistingDomainsDTO, QualificationUpdateDTO,
)
from ...application.services.bulk_analysis import BulkAnalysisService
from ...application.services.clients import ClientService
from ...db.database import get_db
from ...domain.entities.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/clients/{client_id}/domains", response_model=List[BulkDomainDTO], status_code=status.HTTP_201_CREATED)
async def add_domains(
    client_id: UUID,
    request: BulkDomainsCreateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Store domains for analysis; existing (client, domain) pairs are refreshed"""
    try:
        client = ClientService(db).get(client_id, staff)
        return BulkAnalysisService(db).create_or_update_domains(
            client.id, request.domains, request.target_page_ids, staff.id.value,
            manual_keywords=request.manual_keywords, project_id=request.project_id,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Storing bulk analysis domains for client %s failed", client_id)
        raise internal_error()


@router.get("/clients/{client_id}/domains", response_model=BulkDomainSearchResponse)
async def search_domains(
    client_id: UUID,
    qualification_status: Optional[str] = None,
    has_workflow: Optional[bool] = None,
    search: Optional[str] = None,
    project_id: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    domains, total = BulkAnalysisService(db).search(
        client_id, qualification_status=qualification_status, has_workflow=has_workflow,
        search=search, project_id=project_id, page=page, page_size=page_size,
    )
    return BulkDomainSearchResponse(domains=domains, total=total, page=page, page_size=page_size)


@router.get("/clients/{client_id}/qualified", response_model=List[BulkDomainDTO])
async def qualified_domains(
    client_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    return BulkAnalysisService(db).qualified_domains(client_id)


@router.post("/clients/{client_id}/existing")
async def existing_domains(
    client_id: UUID,
    request: ExistingDomainsDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    """Which of the given domains were already analysed for this client"""
    return BulkAnalysisService(db).existing_domains(client_id, request.domains)


@router.put("/domains/{domain_id}/qualification", response_model=BulkDomainDTO)
async def update_qualification(
    domain_id: UUID,
    request: QualificationUpdateDTO,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        return BulkAnalysisService(db).update_qualification_status(
            domain_id, request.status, staff.id.value, notes=request.notes,
            is_manual=request.is_manual, selected_target_page_id=request.selected_target_page_id,
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/domains/{domain_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_domain(
    domain_id: UUID,
    staff: User = Depends(require_internal),
    db: Session = Depends(get_db)
):
    try:
        BulkAnalysisService(db).delete(domain_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
