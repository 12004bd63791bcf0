"""Websites, publisher profiles, offerings and publisher-website relationships"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from ...domain.entities.user import User
from ...domain.enums import (
    OfferingType, PricingStrategy, PublisherAccountStatus, VerificationStatus,
)
from ...domain.value_objects.domain_name import DomainName
from ...infrastructure.orm.website_model import (
    PublisherModel, PublisherOfferingModel, PublisherOfferingRelationshipModel, WebsiteModel,
)
from .derived_pricing import DerivedPricingService

logger = logging.getLogger(__name__)

WEBSITE_FIELDS = (
    "domain_rating", "total_traffic", "niche", "categories", "guest_post_cost",
    "pricing_strategy", "custom_offering_id", "price_override_offering_id",
)
OFFERING_FIELDS = (
    "offering_name", "base_price", "currency", "turnaround_days", "current_availability",
    "is_active", "attributes",
)


def _validate_price(value: Optional[int]) -> None:
    if value is not None and value < 0:
        raise ValueError("Price cannot be negative")


class WebsiteService:

    def __init__(self, db: Session):
        self.db = db

    def list(self, search: Optional[str] = None, niche: Optional[str] = None, page: int = 1,
             limit: int = 50) -> Tuple[List[WebsiteModel], int]:
        query = self.db.query(WebsiteModel)
        if search:
            query = query.filter(WebsiteModel.domain.ilike(f"%{search.lower()}%"))
        if niche:
            query = query.filter(WebsiteModel.niche == niche)
        total = query.count()
        items = query.order_by(WebsiteModel.domain).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def get(self, website_id: UUID) -> WebsiteModel:
        website = self.db.get(WebsiteModel, website_id)
        if not website:
            raise LookupError("Website not found")
        return website

    def get_by_domain(self, domain: str) -> Optional[WebsiteModel]:
        return self.db.query(WebsiteModel).filter(WebsiteModel.domain == DomainName(domain).value).first()

    def create(self, domain: str, source: str = "manual", **fields) -> WebsiteModel:
        normalized = DomainName(domain).value
        if self.db.query(WebsiteModel).filter(WebsiteModel.domain == normalized).first():
            raise ValueError(f"Website {normalized} already exists")
        website = WebsiteModel(domain=normalized, source=source)
        self._apply(website, fields)
        self.db.add(website)
        self.db.commit()
        return website

    def get_or_create(self, domain: str, source: str = "manual") -> WebsiteModel:
        normalized = DomainName(domain).value
        website = self.db.query(WebsiteModel).filter(WebsiteModel.domain == normalized).first()
        if website:
            return website
        website = WebsiteModel(domain=normalized, source=source)
        self.db.add(website)
        self.db.flush()
        return website

    def update(self, website_id: UUID, **fields) -> WebsiteModel:
        website = self.get(website_id)
        self._apply(website, fields)
        if {"pricing_strategy", "custom_offering_id", "price_override_offering_id"} & fields.keys():
            DerivedPricingService(self.db).update(website)
        self.db.commit()
        return website

    def _apply(self, website: WebsiteModel, fields: dict) -> None:
        for name in WEBSITE_FIELDS:
            if name not in fields or fields[name] is None:
                continue
            value = fields[name]
            if name == "pricing_strategy":
                value = PricingStrategy(value).value
            if name == "guest_post_cost":
                _validate_price(value)
            setattr(website, name, value)

    def delete(self, website_id: UUID) -> None:
        website = self.get(website_id)
        self.db.delete(website)
        self.db.commit()


class PublisherService:
    """Publisher profiles and what they sell.

    Publisher users act on their own profile only; the API layer resolves
    ``publisher_id`` from the token for them and staff may pass any id.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_profile(self, user: User) -> PublisherModel:
        if not user.is_publisher:
            raise PermissionError("Publisher access required")
        publisher = self.db.query(PublisherModel).filter(PublisherModel.user_id == user.id.value).first()
        if publisher:
            return publisher
        publisher = PublisherModel(
            user_id=user.id.value,
            email=str(user.email),
            contact_name=user.full_name,
            company_name=user.company_name,
            account_status=PublisherAccountStatus.ACTIVE.value,
            source="signup",
        )
        self.db.add(publisher)
        self.db.commit()
        logger.info("Created publisher profile %s for user %s", publisher.id, user.id.value)
        return publisher

    def get(self, publisher_id: UUID) -> PublisherModel:
        publisher = self.db.get(PublisherModel, publisher_id)
        if not publisher:
            raise LookupError("Publisher not found")
        return publisher

    def list(self, account_status: Optional[str] = None, search: Optional[str] = None, page: int = 1,
             limit: int = 50) -> Tuple[List[PublisherModel], int]:
        query = self.db.query(PublisherModel)
        if account_status:
            query = query.filter(PublisherModel.account_status == PublisherAccountStatus(account_status).value)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                PublisherModel.email.ilike(pattern)
                | PublisherModel.company_name.ilike(pattern)
                | PublisherModel.contact_name.ilike(pattern)
            )
        total = query.count()
        items = query.order_by(PublisherModel.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return items, total

    def update_profile(self, publisher_id: UUID, **fields) -> PublisherModel:
        publisher = self.get(publisher_id)
        for name in ("contact_name", "company_name", "phone"):
            if fields.get(name) is not None:
                setattr(publisher, name, fields[name])
        if fields.get("account_status") is not None:
            publisher.account_status = PublisherAccountStatus(fields["account_status"]).value
        self.db.commit()
        return publisher

    # offerings

    def list_offerings(self, publisher_id: UUID) -> List[PublisherOfferingModel]:
        return self.db.query(PublisherOfferingModel).filter(
            PublisherOfferingModel.publisher_id == publisher_id
        ).order_by(PublisherOfferingModel.created_at).all()

    def _offering(self, publisher_id: UUID, offering_id: UUID) -> PublisherOfferingModel:
        offering = self.db.get(PublisherOfferingModel, offering_id)
        if not offering or offering.publisher_id != publisher_id:
            raise LookupError("Offering not found")
        return offering

    def create_offering(self, publisher_id: UUID, offering_type: str, base_price: Optional[int],
                        website_id: Optional[UUID] = None, **fields) -> PublisherOfferingModel:
        self.get(publisher_id)
        _validate_price(base_price)
        offering = PublisherOfferingModel(
            publisher_id=publisher_id,
            offering_type=OfferingType(offering_type).value,
            base_price=base_price,
            attributes={},
        )
        for name in OFFERING_FIELDS:
            if name != "base_price" and fields.get(name) is not None:
                setattr(offering, name, fields[name])
        self.db.add(offering)
        self.db.flush()
        if website_id:
            self._link(publisher_id, website_id, offering.id)
        self._refresh_prices(offering.id)
        self.db.commit()
        return offering

    def update_offering(self, publisher_id: UUID, offering_id: UUID, **fields) -> PublisherOfferingModel:
        offering = self._offering(publisher_id, offering_id)
        _validate_price(fields.get("base_price"))
        for name in OFFERING_FIELDS:
            if fields.get(name) is not None:
                setattr(offering, name, fields[name])
        self.db.flush()
        self._refresh_prices(offering.id)
        self.db.commit()
        return offering

    def deactivate_offering(self, publisher_id: UUID, offering_id: UUID) -> PublisherOfferingModel:
        return self.update_offering(publisher_id, offering_id, is_active=False)

    def _refresh_prices(self, offering_id: UUID) -> None:
        website_ids = [r.website_id for r in self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.offering_id == offering_id
        ).all()]
        pricing = DerivedPricingService(self.db)
        for website in self.db.query(WebsiteModel).filter(WebsiteModel.id.in_(website_ids)).all():
            pricing.update(website)

    # websites

    def list_websites(self, publisher_id: UUID) -> List[dict]:
        rows = self.db.query(PublisherOfferingRelationshipModel, WebsiteModel).join(
            WebsiteModel, WebsiteModel.id == PublisherOfferingRelationshipModel.website_id
        ).filter(
            PublisherOfferingRelationshipModel.publisher_id == publisher_id
        ).order_by(WebsiteModel.domain).all()
        return [{"relationship": relation, "website": website} for relation, website in rows]

    def add_website(self, publisher_id: UUID, domain: str, offering_id: Optional[UUID] = None,
                    verified: bool = False) -> PublisherOfferingRelationshipModel:
        self.get(publisher_id)
        if offering_id:
            self._offering(publisher_id, offering_id)
        website = WebsiteService(self.db).get_or_create(domain)
        relation = self._link(publisher_id, website.id, offering_id)
        if verified:
            relation.verification_status = VerificationStatus.VERIFIED.value
        if offering_id:
            DerivedPricingService(self.db).update(website)
        self.db.commit()
        return relation

    def _link(self, publisher_id: UUID, website_id: UUID, offering_id: Optional[UUID]) -> PublisherOfferingRelationshipModel:
        relation = self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.publisher_id == publisher_id,
            PublisherOfferingRelationshipModel.website_id == website_id,
            PublisherOfferingRelationshipModel.offering_id == offering_id
            if offering_id else PublisherOfferingRelationshipModel.offering_id.is_(None),
        ).first()
        if relation:
            relation.is_active = True
            return relation
        relation = PublisherOfferingRelationshipModel(
            publisher_id=publisher_id,
            website_id=website_id,
            offering_id=offering_id,
            verification_status=VerificationStatus.PENDING.value,
        )
        self.db.add(relation)
        self.db.flush()
        return relation

    def update_relationship(self, relationship_id: UUID, verification_status: Optional[str] = None,
                            priority_rank: Optional[int] = None, is_active: Optional[bool] = None,
                            notes: Optional[str] = None) -> PublisherOfferingRelationshipModel:
        relation = self.db.get(PublisherOfferingRelationshipModel, relationship_id)
        if not relation:
            raise LookupError("Relationship not found")
        if verification_status is not None:
            relation.verification_status = VerificationStatus(verification_status).value
        if priority_rank is not None:
            relation.priority_rank = priority_rank
        if is_active is not None:
            relation.is_active = is_active
        if notes is not None:
            relation.notes = notes
        DerivedPricingService(self.db).update(self.db.get(WebsiteModel, relation.website_id))
        self.db.commit()
        return relation

    def remove_website(self, publisher_id: UUID, relationship_id: UUID) -> None:
        relation = self.db.get(PublisherOfferingRelationshipModel, relationship_id)
        if not relation or relation.publisher_id != publisher_id:
            raise LookupError("Relationship not found")
        relation.is_active = False
        DerivedPricingService(self.db).update(self.db.get(WebsiteModel, relation.website_id))
        self.db.commit()
