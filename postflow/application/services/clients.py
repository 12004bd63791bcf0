"""Clients, their target pages and keyword groups"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ...domain.entities.user import User
from ...domain.enums import UserType
from ...domain.value_objects.domain_name import normalize_domain
from ...infrastructure.orm.client_model import ClientModel, TargetPageModel
from ...infrastructure.orm.user_model import UserModel
from .keyword_grouping import generate_grouped_ahrefs_urls, group_keywords_by_topic

logger = logging.getLogger(__name__)


def _keywords_text(keywords) -> Optional[str]:
    if keywords is None:
        return None
    if isinstance(keywords, str):
        keywords = keywords.split(",")
    cleaned = list(dict.fromkeys(k.strip() for k in keywords if k and k.strip()))
    return ", ".join(cleaned)


class ClientService:
    """Client CRUD scoped to the caller: accounts own clients, staff see all."""

    def __init__(self, db: Session):
        self.db = db

    def _check_portal(self, user: User) -> None:
        if user.is_publisher:
            raise PermissionError("Publishers cannot manage clients")

    def list(self, user: User, search: Optional[str] = None, account_id: Optional[UUID] = None) -> List[ClientModel]:
        self._check_portal(user)
        query = self.db.query(ClientModel)
        if not user.is_internal:
            query = query.filter(ClientModel.account_id == user.id.value)
        elif account_id:
            query = query.filter(ClientModel.account_id == account_id)
        if search:
            query = query.filter(ClientModel.name.ilike(f"%{search}%"))
        return query.order_by(ClientModel.name).all()

    def get(self, client_id: UUID, user: User) -> ClientModel:
        self._check_portal(user)
        client = self.db.get(ClientModel, client_id)
        if not client:
            raise LookupError("Client not found")
        if not user.is_internal and client.account_id != user.id.value:
            raise PermissionError("You do not have access to this client")
        return client

    def create(self, user: User, name: str, website: Optional[str] = None, description: Optional[str] = None,
               account_id: Optional[UUID] = None) -> ClientModel:
        self._check_portal(user)
        if not name or not name.strip():
            raise ValueError("Client name is required")
        if user.is_internal:
            if account_id:
                owner = self.db.get(UserModel, account_id)
                if not owner or owner.user_type != UserType.ACCOUNT.value:
                    raise ValueError("Account not found")
        else:
            account_id = user.id.value

        client = ClientModel(
            account_id=account_id,
            name=name.strip(),
            website=normalize_domain(website) if website else None,
            description=description,
            created_by=user.id.value,
        )
        self.db.add(client)
        self.db.commit()
        logger.info("Client %s created by %s", client.id, user.email)
        return client

    def update(self, client_id: UUID, user: User, **changes) -> ClientModel:
        client = self.get(client_id, user)
        if "name" in changes and changes["name"] is not None:
            if not changes["name"].strip():
                raise ValueError("Client name is required")
            client.name = changes["name"].strip()
        if changes.get("website") is not None:
            client.website = normalize_domain(changes["website"]) or None
        if changes.get("description") is not None:
            client.description = changes["description"]
        if "account_id" in changes and changes["account_id"] is not None:
            if not user.is_internal:
                raise PermissionError("Only staff can move a client between accounts")
            client.account_id = changes["account_id"]
        self.db.commit()
        return client

    def delete(self, client_id: UUID, user: User) -> None:
        client = self.get(client_id, user)
        self.db.delete(client)
        self.db.commit()

    # target pages

    def add_target_page(self, client_id: UUID, user: User, url: str, keywords=None,
                        description: Optional[str] = None) -> TargetPageModel:
        client = self.get(client_id, user)
        if not url or not url.strip():
            raise ValueError("Target page URL is required")
        page = TargetPageModel(
            client_id=client.id,
            url=url.strip(),
            keywords=_keywords_text(keywords),
            description=description,
        )
        self.db.add(page)
        self.db.commit()
        return page

    def _target_page(self, client_id: UUID, page_id: UUID, user: User) -> TargetPageModel:
        self.get(client_id, user)
        page = self.db.get(TargetPageModel, page_id)
        if not page or page.client_id != client_id:
            raise LookupError("Target page not found")
        return page

    def update_target_page(self, client_id: UUID, page_id: UUID, user: User, url: Optional[str] = None,
                           keywords=None, description: Optional[str] = None,
                           status: Optional[str] = None) -> TargetPageModel:
        page = self._target_page(client_id, page_id, user)
        if url is not None:
            page.url = url.strip()
        if keywords is not None:
            page.keywords = _keywords_text(keywords)
        if description is not None:
            page.description = description
        if status is not None:
            page.status = status
        self.db.commit()
        return page

    def delete_target_page(self, client_id: UUID, page_id: UUID, user: User) -> None:
        page = self._target_page(client_id, page_id, user)
        self.db.delete(page)
        self.db.commit()

    def keyword_groups(self, client_id: UUID, user: User, domain: Optional[str] = None,
                       position_range: str = "1-50") -> dict:
        """Group every target-page keyword of a client by topic."""
        client = self.get(client_id, user)
        keywords = list(dict.fromkeys(
            k.lower() for page in client.target_pages for k in page.keyword_list
        ))
        groups = group_keywords_by_topic(keywords)
        result = {
            "total_keywords": len(keywords),
            "groups": [
                {"name": g.name, "keywords": g.keywords, "relevance": g.relevance, "priority": g.priority}
                for g in groups
            ],
        }
        if domain:
            result["ahrefs_urls"] = generate_grouped_ahrefs_urls(domain, groups, position_range)
        return result
