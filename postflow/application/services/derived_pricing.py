"""Derive a website's guest post price from its publishers' offerings"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.enums import (
    OfferingType, PricingStrategy, PriceCalculationMethod, PricingComparisonStatus,
)
from ...infrastructure.orm.website_model import (
    WebsiteModel, PublisherOfferingModel, PublisherOfferingRelationshipModel,
)

logger = logging.getLogger(__name__)


@dataclass
class DerivedPrice:
    price: Optional[int]
    method: Optional[PriceCalculationMethod]
    offering_id: Optional[UUID] = None
    publisher_id: Optional[UUID] = None


class DerivedPricingService:

    def __init__(self, db: Session):
        self.db = db

    def calculate(self, website: WebsiteModel) -> DerivedPrice:
        """Manual override, then custom selection, then min/max over linked offerings."""
        if website.price_override_offering_id:
            offering = self._usable_offering(website.price_override_offering_id)
            if offering:
                return DerivedPrice(offering.base_price, PriceCalculationMethod.MANUAL_OVERRIDE,
                                    offering.id, offering.publisher_id)

        if website.pricing_strategy == PricingStrategy.CUSTOM.value and website.custom_offering_id:
            offering = self._usable_offering(website.custom_offering_id)
            if offering:
                return DerivedPrice(offering.base_price, PriceCalculationMethod.CUSTOM,
                                    offering.id, offering.publisher_id)

        offerings = self.db.query(PublisherOfferingModel).join(
            PublisherOfferingRelationshipModel,
            PublisherOfferingRelationshipModel.offering_id == PublisherOfferingModel.id,
        ).filter(
            PublisherOfferingRelationshipModel.website_id == website.id,
            PublisherOfferingRelationshipModel.is_active.is_(True),
            PublisherOfferingModel.offering_type == OfferingType.GUEST_POST.value,
            PublisherOfferingModel.is_active.is_(True),
            PublisherOfferingModel.current_availability == 'available',
            PublisherOfferingModel.base_price > 0,
        ).all()

        if not offerings:
            return DerivedPrice(None, None)

        if website.pricing_strategy == PricingStrategy.MAX_PRICE.value:
            chosen = max(offerings, key=lambda o: o.base_price)
            method = PriceCalculationMethod.AUTO_MAX
        else:
            chosen = min(offerings, key=lambda o: o.base_price)
            method = PriceCalculationMethod.AUTO_MIN
        return DerivedPrice(chosen.base_price, method, chosen.id, chosen.publisher_id)

    def _usable_offering(self, offering_id) -> Optional[PublisherOfferingModel]:
        offering = self.db.get(PublisherOfferingModel, offering_id)
        if (
            offering
            and offering.is_active
            and offering.offering_type == OfferingType.GUEST_POST.value
            and (offering.base_price or 0) > 0
        ):
            return offering
        return None

    def update(self, website: WebsiteModel) -> DerivedPrice:
        result = self.calculate(website)
        now = datetime.utcnow()
        website.derived_guest_post_cost = result.price
        website.price_calculation_method = result.method.value if result.method else None
        website.price_calculated_at = now
        if result.offering_id != website.selected_offering_id:
            website.selected_at = now if result.offering_id else None
        website.selected_offering_id = result.offering_id
        website.selected_publisher_id = result.publisher_id
        self.db.flush()
        return result

    def update_all(self) -> dict:
        """Reprice every website, committing each one separately."""
        updated = 0
        errors = 0
        websites = self.db.query(WebsiteModel).order_by(WebsiteModel.domain).all()
        for website in websites:
            domain = website.domain
            try:
                self.update(website)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                errors += 1
                logger.exception("Failed to derive price for website %s", domain)
                continue
            updated += 1
            if updated % 100 == 0:
                logger.info("Derived prices updated for %s websites", updated)
        logger.info("Derived pricing refresh finished: %s updated, %s errors", updated, errors)
        return {"updated": updated, "errors": errors}

    @staticmethod
    def comparison(website: WebsiteModel) -> dict:
        current = website.guest_post_cost
        derived = website.derived_guest_post_cost

        if current is None and derived is None:
            status = PricingComparisonStatus.BOTH_NULL
        elif current is None:
            status = PricingComparisonStatus.CURRENT_NULL
        elif derived is None:
            status = PricingComparisonStatus.DERIVED_NULL
        elif current == derived:
            status = PricingComparisonStatus.MATCH
        else:
            status = PricingComparisonStatus.MISMATCH

        difference = None
        percent_difference = None
        if current is not None and derived is not None:
            difference = derived - current
            if current > 0:
                percent_difference = round(difference / current * 100, 2)

        return {
            "website_id": website.id,
            "domain": website.domain,
            "current_price": current,
            "derived_price": derived,
            "status": status.value,
            "difference": difference,
            "percent_difference": percent_difference,
            "method": website.price_calculation_method,
        }

    def stats(self) -> dict:
        """Readiness of derived pricing, measured over websites that have a current price."""
        websites = self.db.query(WebsiteModel).filter(WebsiteModel.guest_post_cost.isnot(None)).all()
        comparisons = [self.comparison(w) for w in websites]
        total = len(comparisons)
        with_derived = sum(1 for c in comparisons if c["derived_price"] is not None)
        matching = sum(1 for c in comparisons if c["status"] == PricingComparisonStatus.MATCH.value)
        mismatched = sum(1 for c in comparisons if c["status"] == PricingComparisonStatus.MISMATCH.value)
        return {
            "total_websites": total,
            "with_derived_prices": with_derived,
            "matching": matching,
            "mismatched": mismatched,
            "missing_derived": total - with_derived,
            "ready_percentage": round(matching / total * 100, 1) if total else 0.0,
        }
