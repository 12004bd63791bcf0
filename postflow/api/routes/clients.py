"""Client and target page routes"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...api.dependencies import get_current_user
from ...api.errors import DOMAIN_ERRORS, http_error, internal_error
from ...application.dtos.client_dtos import (
    ClientCreateDTO, ClientDTO, ClientUpdateDTO, KeywordGroupsResponse,
    TargetPageCreateDTO, TargetPageDTO, TargetPageUpdateDTO,
)
from ...application.services.clients import ClientService
from ...db.database import get_db
from ...domain.entities.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[ClientDTO])
async def list_clients(
    search: Optional[str] = None,
    account_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).list(current_user, search=search, account_id=account_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/", response_model=ClientDTO, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: ClientCreateDTO,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).create(current_user, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Creating client failed")
        raise internal_error()


@router.get("/{client_id}", response_model=ClientDTO)
async def get_client(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).get(client_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/{client_id}", response_model=ClientDTO)
async def update_client(
    client_id: UUID,
    request: ClientUpdateDTO,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).update(client_id, current_user, **request.model_dump(exclude_unset=True))
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    except Exception:
        logger.exception("Updating client %s failed", client_id)
        raise internal_error()


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        ClientService(db).delete(client_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.post("/{client_id}/target-pages", response_model=TargetPageDTO, status_code=status.HTTP_201_CREATED)
async def add_target_page(
    client_id: UUID,
    request: TargetPageCreateDTO,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).add_target_page(client_id, current_user, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/{client_id}/target-pages/{page_id}", response_model=TargetPageDTO)
async def update_target_page(
    client_id: UUID,
    page_id: UUID,
    request: TargetPageUpdateDTO,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return ClientService(db).update_target_page(client_id, page_id, current_user, **request.model_dump())
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/{client_id}/target-pages/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_target_page(
    client_id: UUID,
    page_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        ClientService(db).delete_target_page(client_id, page_id, current_user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/{client_id}/keyword-groups", response_model=KeywordGroupsResponse)
async def keyword_groups(
    client_id: UUID,
    domain: Optional[str] = None,
    position_range: str = Query("1-50", pattern=r"^\d+-\d+$"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Topic groups of the client's target-page keywords, with Ahrefs links when a domain is given"""
    try:
        return ClientService(db).keyword_groups(client_id, current_user, domain=domain, position_range=position_range)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
