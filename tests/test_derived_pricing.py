import pytest

from conftest import auth_headers
from postflow.application.services.derived_pricing import DerivedPricingService
from postflow.application.services.websites import PublisherService, WebsiteService
from postflow.infrastructure.orm.website_model import PublisherModel


@pytest.fixture
def website(db):
    return WebsiteService(db).create("https://www.techblog.com/", guest_post_cost=15000)


@pytest.fixture
def publishers(db):
    first = PublisherModel(email="a@techblog.com", contact_name="A")
    second = PublisherModel(email="b@agency.com", contact_name="B")
    db.add_all([first, second])
    db.commit()
    return first, second


@pytest.fixture
def offerings(db, website, publishers):
    service = PublisherService(db)
    expensive = service.create_offering(publishers[0].id, "guest_post", 20000, website_id=website.id)
    cheap = service.create_offering(publishers[1].id, "guest_post", 15000, website_id=website.id)
    return expensive, cheap


def test_cheapest_offering_by_default(db, website, offerings):
    db.refresh(website)
    assert website.derived_guest_post_cost == 15000
    assert website.price_calculation_method == "auto_min"
    assert website.selected_offering_id == offerings[1].id
    assert website.selected_publisher_id == offerings[1].publisher_id


def test_max_price_strategy(db, website, offerings):
    WebsiteService(db).update(website.id, pricing_strategy="max_price")
    assert website.derived_guest_post_cost == 20000
    assert website.price_calculation_method == "auto_max"


def test_custom_offering(db, website, offerings):
    WebsiteService(db).update(website.id, pricing_strategy="custom", custom_offering_id=offerings[0].id)
    assert website.derived_guest_post_cost == 20000
    assert website.price_calculation_method == "custom"


def test_override_beats_strategy(db, website, offerings):
    WebsiteService(db).update(
        website.id, pricing_strategy="custom", custom_offering_id=offerings[1].id,
        price_override_offering_id=offerings[0].id,
    )
    assert website.price_calculation_method == "manual_override"
    assert website.derived_guest_post_cost == 20000


def test_inactive_and_non_guest_post_offerings_are_ignored(db, website, publishers, offerings):
    service = PublisherService(db)
    service.create_offering(publishers[0].id, "link_insertion", 5000, website_id=website.id)
    service.deactivate_offering(publishers[1].id, offerings[1].id)

    db.refresh(website)
    assert website.derived_guest_post_cost == 20000


def test_no_offerings_clears_price(db, website):
    result = DerivedPricingService(db).update(website)
    assert result.price is None
    assert website.derived_guest_post_cost is None
    assert website.selected_offering_id is None


def test_negative_price_rejected(db, publishers):
    with pytest.raises(ValueError):
        PublisherService(db).create_offering(publishers[0].id, "guest_post", -1)


def test_comparison_and_stats(db, website, offerings):
    WebsiteService(db).create("other.com", guest_post_cost=9900)
    db.refresh(website)

    comparison = DerivedPricingService.comparison(website)
    assert comparison["status"] == "match"
    assert comparison["difference"] == 0

    stats = DerivedPricingService(db).stats()
    assert stats == {
        "total_websites": 2,
        "with_derived_prices": 1,
        "matching": 1,
        "mismatched": 0,
        "missing_derived": 1,
        "ready_percentage": 50.0,
    }


def test_update_all(db, website, offerings):
    WebsiteService(db).create("empty.org")
    assert DerivedPricingService(db).update_all() == {"updated": 2, "errors": 0}


def test_update_all_isolates_failing_website(db, website, offerings, monkeypatch):
    service = WebsiteService(db)
    broken = service.create("broken.com")
    service.create("empty.org")
    website.derived_guest_post_cost = None
    db.commit()

    original = DerivedPricingService.update

    def update(self, target):
        if target.domain == "broken.com":
            target.domain = "techblog.com"
        return original(self, target)

    monkeypatch.setattr(DerivedPricingService, "update", update)

    assert DerivedPricingService(db).update_all() == {"updated": 2, "errors": 1}

    db.refresh(website)
    db.refresh(broken)
    assert website.derived_guest_post_cost == 15000
    assert broken.domain == "broken.com"
    assert broken.price_calculated_at is None


def test_duplicate_website_rejected(db, website):
    with pytest.raises(ValueError):
        WebsiteService(db).create("techblog.com")


def test_publisher_portal_flow(client, publisher_user):
    headers = auth_headers(publisher_user)
    profile = client.get("/api/v1/publishers/me", headers=headers)
    assert profile.status_code == 200
    assert profile.json()["email"] == "editor@techblog.com"

    offering = client.post(
        "/api/v1/publishers/me/offerings",
        json={"offering_type": "guest_post", "base_price": 25000},
        headers=headers,
    ).json()
    link = client.post(
        "/api/v1/publishers/me/websites",
        json={"domain": "https://www.techblog.com", "offering_id": offering["id"]},
        headers=headers,
    )
    assert link.status_code == 201

    websites = client.get("/api/v1/publishers/me/websites", headers=headers).json()
    assert len(websites) == 1


def test_publisher_routes_require_publisher(client, account):
    assert client.get("/api/v1/publishers/me", headers=auth_headers(account)).status_code == 403
