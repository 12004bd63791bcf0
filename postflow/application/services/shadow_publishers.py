"""Publisher records created from parsed outreach replies"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.security import (
    create_access_token, create_refresh_token, generate_invitation_token, get_password_hash,
)
from ...domain.enums import (
    PublisherAccountStatus, ReviewQueueType, ReviewStatus, UserStatus, UserType, VerificationStatus,
)
from ...domain.value_objects.domain_name import normalize_domain
from ...infrastructure.orm.outreach_model import EmailReviewQueueModel, PublisherAutomationLogModel
from ...infrastructure.orm.user_model import UserModel
from ...infrastructure.orm.website_model import (
    PublisherModel, PublisherOfferingModel, PublisherOfferingRelationshipModel, WebsiteModel,
)

logger = logging.getLogger(__name__)

UNCLAIMED_STATUSES = (PublisherAccountStatus.SHADOW.value, PublisherAccountStatus.UNCLAIMED.value)
DEFAULT_TURNAROUND_DAYS = 7


def calculate_review_priority(confidence: Optional[float], missing: Optional[List[str]]) -> int:
    """Lower confidence and more missing fields push a review up the queue."""
    priority = 50
    confidence = confidence or 0.0
    if confidence < 0.5:
        priority += 30
    elif confidence < 0.7:
        priority += 15
    priority += 5 * len(missing or [])
    return max(1, min(100, priority))


def _price_cents(price: Optional[float]) -> int:
    return int(round((price or 0) * 100))


def _offering_attributes(offering: dict) -> dict:
    attributes: Dict[str, Any] = {}
    requirements = offering.get("requirements") or {}
    if requirements.get("prohibited_topics"):
        attributes["restrictions"] = {"niches": requirements["prohibited_topics"]}
    if requirements:
        attributes["requirements"] = requirements
    for key in ("niche_pricing", "transactional_pricing", "position", "raw_pricing_text"):
        if offering.get(key):
            attributes[key] = offering[key]
    return attributes


class ShadowPublisherService:
    """Matches a parsed reply to a publisher, or creates a shadow one."""

    def __init__(self, db: Session):
        self.db = db

    # pipeline

    def process_publisher_from_email(self, log_id: UUID, parsed: dict, campaign_type: str = "outreach") -> PublisherModel:
        publisher, is_existing = self.find_or_create_publisher(parsed, log_id)
        if is_existing:
            self._update_existing_publisher(publisher, parsed, log_id, campaign_type)
        else:
            self._populate_shadow_publisher(publisher, parsed, log_id)
        self.db.commit()
        return publisher

    def find_or_create_publisher(self, parsed: dict, log_id: UUID) -> Tuple[PublisherModel, bool]:
        existing = self.find_existing_publisher(parsed)
        if existing:
            return existing, True
        return self._create_shadow_publisher(parsed, log_id), False

    def find_existing_publisher(self, parsed: dict) -> Optional[PublisherModel]:
        sender = parsed.get("sender") or {}
        email = (sender.get("email") or "").lower()

        exact = self.db.query(PublisherModel).filter(
            PublisherModel.email == email,
            PublisherModel.account_status.notin_(UNCLAIMED_STATUSES),
        ).first()
        if exact:
            return exact

        email_domain = email.split("@", 1)[1] if "@" in email else ""
        if email_domain:
            for site in parsed.get("websites") or []:
                domain = site["domain"]
                if email_domain not in domain and domain not in email_domain:
                    continue
                website = self.db.query(WebsiteModel).filter(WebsiteModel.domain == domain).first()
                if not website:
                    continue
                relation = self.db.query(PublisherOfferingRelationshipModel).filter(
                    PublisherOfferingRelationshipModel.website_id == website.id
                ).order_by(PublisherOfferingRelationshipModel.created_at).first()
                if relation:
                    return self.db.get(PublisherModel, relation.publisher_id)

        company = sender.get("company")
        if company:
            clauses = [PublisherModel.company_name.ilike(f"%{company}%")]
            if sender.get("name"):
                clauses.append(PublisherModel.contact_name.ilike(f"%{sender['name']}%"))
            return self.db.query(PublisherModel).filter(or_(*clauses)).first()
        return None

    def _create_shadow_publisher(self, parsed: dict, log_id: UUID) -> PublisherModel:
        sender = parsed["sender"]
        publisher = PublisherModel(
            email=sender["email"].lower(),
            contact_name=sender.get("name") or "Unknown",
            company_name=sender.get("company"),
            account_status=PublisherAccountStatus.SHADOW.value,
            source="manyreach",
            confidence_score=round(parsed.get("overall_confidence") or 0.0, 2),
            invitation_token=generate_invitation_token(),
            invitation_expires_at=datetime.utcnow() + timedelta(days=settings.SHADOW_INVITATION_EXPIRE_DAYS),
        )
        self.db.add(publisher)
        self.db.flush()
        self._log(log_id, publisher.id, "created", new_data=parsed, confidence=parsed.get("overall_confidence"))
        logger.info("Created shadow publisher %s for %s", publisher.id, publisher.email)
        return publisher

    def _populate_shadow_publisher(self, publisher: PublisherModel, parsed: dict, log_id: UUID) -> None:
        for site in parsed.get("websites") or []:
            self._ensure_website(publisher.id, site["domain"], verified=False)

        primary = (parsed.get("websites") or [{}])[0].get("domain")
        for offering in parsed.get("offerings") or []:
            self._upsert_offering(publisher.id, offering, primary, for_existing=False)

        confidence = parsed.get("overall_confidence") or 0.0
        if confidence >= settings.SHADOW_AUTO_APPROVE_CONFIDENCE:
            self.activate_publisher(publisher, log_id, action="auto_approved")
        elif confidence >= settings.SHADOW_MEDIUM_REVIEW_CONFIDENCE:
            self.add_to_review_queue(log_id, parsed, ReviewQueueType.SHADOW_PUBLISHER, "medium_confidence",
                                     publisher_id=publisher.id, auto_approve=True)
        elif confidence >= settings.SHADOW_LOW_REVIEW_CONFIDENCE:
            self.add_to_review_queue(log_id, parsed, ReviewQueueType.SHADOW_PUBLISHER, "low_confidence",
                                     publisher_id=publisher.id)
        else:
            self.add_to_review_queue(log_id, parsed, ReviewQueueType.SHADOW_PUBLISHER, "very_low_confidence",
                                     publisher_id=publisher.id)

    def _update_existing_publisher(self, publisher: PublisherModel, parsed: dict, log_id: UUID,
                                   campaign_type: str) -> None:
        sender = parsed.get("sender") or {}
        previous = {"contact_name": publisher.contact_name, "company_name": publisher.company_name}
        updated = []
        if sender.get("confidence", 0) > 0.7:
            if sender.get("name"):
                publisher.contact_name = sender["name"]
                updated.append("contact_name")
            if sender.get("company"):
                publisher.company_name = sender["company"]
                updated.append("company_name")

        for site in parsed.get("websites") or []:
            self._ensure_website(publisher.id, site["domain"], verified=True)

        primary = (parsed.get("websites") or [{}])[0].get("domain")
        for offering in parsed.get("offerings") or []:
            self._upsert_offering(publisher.id, offering, primary, for_existing=True)

        self._log(
            log_id, publisher.id, "existing_publisher_updated",
            previous_data=previous,
            new_data={"parsed": parsed, "campaign_type": campaign_type, "account_status": publisher.account_status},
            fields_updated=updated,
            confidence=parsed.get("overall_confidence"),
        )

    def _ensure_website(self, publisher_id: UUID, domain: str, verified: bool) -> WebsiteModel:
        website = self.db.query(WebsiteModel).filter(WebsiteModel.domain == domain).first()
        if not website:
            website = WebsiteModel(domain=domain, source="manyreach")
            self.db.add(website)
            self.db.flush()

        relation = self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.publisher_id == publisher_id,
            PublisherOfferingRelationshipModel.website_id == website.id,
        ).first()
        if not relation:
            self.db.add(PublisherOfferingRelationshipModel(
                publisher_id=publisher_id,
                website_id=website.id,
                is_active=verified,
                verification_status=(VerificationStatus.VERIFIED if verified else VerificationStatus.PENDING).value,
            ))
            self.db.flush()
        return website

    def _upsert_offering(self, publisher_id: UUID, offering: dict, primary_domain: Optional[str],
                         for_existing: bool) -> Optional[PublisherOfferingModel]:
        domain = normalize_domain(offering.get("website_specific") or "") or primary_domain
        if not domain:
            return None
        website = self._ensure_website(publisher_id, domain, verified=for_existing)

        position = offering.get("position")
        current = next((
            o for o in self.db.query(PublisherOfferingModel).join(
                PublisherOfferingRelationshipModel,
                PublisherOfferingRelationshipModel.offering_id == PublisherOfferingModel.id,
            ).filter(
                PublisherOfferingModel.publisher_id == publisher_id,
                PublisherOfferingModel.offering_type == offering["type"],
                PublisherOfferingRelationshipModel.website_id == website.id,
            ).all()
            if (o.attributes or {}).get("position") == position
        ), None)

        confidence = offering.get("confidence", 0)
        if current:
            # Existing publishers accept reasonably confident updates, new ones only strong ones
            threshold = 0.7 if for_existing else 0.8
            if confidence > threshold:
                if offering.get("base_price"):
                    current.base_price = _price_cents(offering["base_price"])
                current.currency = offering.get("currency") or current.currency
                current.turnaround_days = offering.get("turnaround_days") or current.turnaround_days
            return current

        created = PublisherOfferingModel(
            publisher_id=publisher_id,
            offering_type=offering["type"],
            base_price=_price_cents(offering.get("base_price")),
            currency=offering.get("currency") or "USD",
            turnaround_days=offering.get("turnaround_days") or DEFAULT_TURNAROUND_DAYS,
            current_availability="available" if for_existing else "pending_verification",
            is_active=for_existing,
            attributes=_offering_attributes(offering),
        )
        self.db.add(created)
        self.db.flush()

        relation = self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.publisher_id == publisher_id,
            PublisherOfferingRelationshipModel.website_id == website.id,
            PublisherOfferingRelationshipModel.offering_id.is_(None),
        ).first()
        if relation:
            relation.offering_id = created.id
        else:
            self.db.add(PublisherOfferingRelationshipModel(
                publisher_id=publisher_id,
                website_id=website.id,
                offering_id=created.id,
                is_active=for_existing,
                verification_status=(VerificationStatus.VERIFIED if for_existing else VerificationStatus.PENDING).value,
            ))
        self.db.flush()
        return created

    # review and activation

    def add_to_review_queue(self, log_id: UUID, parsed: dict, queue_type: ReviewQueueType, reason: str,
                            publisher_id: Optional[UUID] = None, auto_approve: bool = False) -> EmailReviewQueueModel:
        missing = parsed.get("missing_fields") or []
        confidence = parsed.get("overall_confidence")
        entry = EmailReviewQueueModel(
            log_id=log_id,
            publisher_id=publisher_id,
            queue_type=queue_type.value,
            priority=calculate_review_priority(confidence, missing),
            status=ReviewStatus.PENDING.value,
            reason=reason,
            suggested_actions={"missing_fields": missing, "confidence": confidence, "extracted_data": parsed},
            missing_fields=missing,
            auto_approve_at=(
                datetime.utcnow() + timedelta(hours=settings.REVIEW_AUTO_APPROVE_HOURS) if auto_approve else None
            ),
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def activate_publisher(self, publisher: PublisherModel, log_id: Optional[UUID], action: str) -> None:
        """Make a publisher and everything extracted for it live."""
        publisher.account_status = PublisherAccountStatus.ACTIVE.value
        self.db.query(PublisherOfferingModel).filter(
            PublisherOfferingModel.publisher_id == publisher.id
        ).update({"is_active": True, "current_availability": "available"}, synchronize_session="fetch")
        self.db.query(PublisherOfferingRelationshipModel).filter(
            PublisherOfferingRelationshipModel.publisher_id == publisher.id
        ).update({"is_active": True}, synchronize_session="fetch")
        self._log(log_id, publisher.id, action, fields_updated=["account_status"])

    def _log(self, log_id: Optional[UUID], publisher_id: Optional[UUID], action: str,
             status: str = "success", previous_data: Optional[dict] = None, new_data: Optional[dict] = None,
             fields_updated: Optional[List[str]] = None, confidence: Optional[float] = None) -> None:
        self.db.add(PublisherAutomationLogModel(
            email_log_id=log_id,
            publisher_id=publisher_id,
            action=action,
            action_status=status,
            previous_data=previous_data,
            new_data=new_data,
            fields_updated=fields_updated or [],
            confidence=confidence,
        ))

    def log_error(self, log_id: UUID, error: str) -> None:
        self._log(log_id, None, "error", status="failed", new_data={"error": error})

    # claiming

    def get_by_invitation(self, token: str) -> PublisherModel:
        publisher = self.db.query(PublisherModel).filter(PublisherModel.invitation_token == token).first()
        if (
            not publisher
            or publisher.account_status not in UNCLAIMED_STATUSES
            or (publisher.invitation_expires_at and publisher.invitation_expires_at < datetime.utcnow())
        ):
            raise ValueError("Invalid or expired invitation")
        return publisher

    def claim(self, token: str, password: str, first_name: Optional[str] = None,
              last_name: Optional[str] = None) -> dict:
        """Turn a shadow publisher into a real publisher login."""
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters")
        publisher = self.get_by_invitation(token)
        if self.db.query(UserModel).filter(UserModel.email == publisher.email).first():
            raise ValueError("An account with this email already exists")

        user = UserModel(
            email=publisher.email,
            hashed_password=get_password_hash(password),
            user_type=UserType.PUBLISHER.value,
            first_name=first_name or publisher.contact_name,
            last_name=last_name,
            company_name=publisher.company_name,
            status=UserStatus.ACTIVE.value,
            email_verified=True,
        )
        self.db.add(user)
        self.db.flush()

        publisher.user_id = user.id
        publisher.claimed_at = datetime.utcnow()
        publisher.invitation_token = None
        publisher.invitation_expires_at = None
        self.activate_publisher(publisher, None, action="claimed")
        self.db.commit()
        logger.info("Publisher %s claimed by user %s", publisher.id, user.id)

        return {
            "publisher_id": publisher.id,
            "user_id": user.id,
            "access_token": create_access_token(str(user.id), user.user_type),
            "refresh_token": create_refresh_token(str(user.id), user.user_type),
            "token_type": "bearer",
        }
