import asyncio

import pytest

from conftest import auth_headers
from postflow.application.services.publisher_orders import PublisherOrderService
from postflow.domain.enums import LineItemStatus, OrderStatus, PublisherStatus
from postflow.infrastructure.orm.bulk_analysis_model import BulkAnalysisDomainModel
from postflow.infrastructure.orm.client_model import ClientModel
from postflow.infrastructure.orm.earning_model import PublisherNotificationModel
from postflow.infrastructure.orm.line_item_model import LineItemModel
from postflow.infrastructure.orm.order_model import OrderModel
from postflow.infrastructure.orm.website_model import (
    CommissionConfigurationModel, PublisherModel, PublisherOfferingModel,
    PublisherOfferingRelationshipModel, WebsiteModel,
)


@pytest.fixture
def line_item(db, account):
    client = ClientModel(account_id=account.id, name="Acme Tools", website="acmetools.com", created_by=account.id)
    db.add(client)
    db.flush()
    order = OrderModel(account_id=account.id, created_by=account.id, status=OrderStatus.IN_PROGRESS.value)
    db.add(order)
    db.flush()
    item = LineItemModel(order_id=order.id, client_id=client.id, status=LineItemStatus.APPROVED.value,
                         estimated_price=27900, service_fee=7900)
    db.add(item)
    db.add(BulkAnalysisDomainModel(client_id=client.id, domain="techblog.com"))
    db.commit()
    return item


@pytest.fixture
def bulk_domain(db, line_item):
    return db.query(BulkAnalysisDomainModel).filter_by(domain="techblog.com").one()


@pytest.fixture
def website(db):
    website = WebsiteModel(domain="techblog.com")
    db.add(website)
    db.commit()
    return website


def _publisher(db, website, email, price, verification="verified", rank=100, user_id=None):
    publisher = PublisherModel(email=email, user_id=user_id)
    db.add(publisher)
    db.flush()
    offering = PublisherOfferingModel(publisher_id=publisher.id, offering_type="guest_post", base_price=price)
    db.add(offering)
    db.flush()
    db.add(PublisherOfferingRelationshipModel(
        publisher_id=publisher.id, website_id=website.id, offering_id=offering.id,
        verification_status=verification, priority_rank=rank,
    ))
    db.commit()
    return publisher


@pytest.fixture
def publisher(db, website):
    return _publisher(db, website, "editor@techblog.com", 20000)


def test_default_platform_fee(db, publisher):
    fee = PublisherOrderService(db).calculate_platform_fee(publisher.id, 20000)
    assert fee == {"platform_fee": 6000, "commission_percent": 30.0}


def test_publisher_commission_beats_global(db, publisher):
    db.add(CommissionConfigurationModel(scope_type="global", commission_percent=25.0))
    db.commit()
    service = PublisherOrderService(db)
    assert service.calculate_platform_fee(publisher.id, 20000)["platform_fee"] == 5000

    db.add(CommissionConfigurationModel(scope_type="publisher", scope_id=publisher.id, commission_percent=20.0))
    db.commit()
    assert service.calculate_platform_fee(publisher.id, 20000)["platform_fee"] == 4000


def test_verified_publisher_preferred(db, website):
    _publisher(db, website, "cheap@agency.com", 9000, verification="pending", rank=1)
    verified = _publisher(db, website, "owner@techblog.com", 18000, rank=50)

    match = PublisherOrderService(db).find_publisher_for_domain("techblog.com")
    assert match.publisher_id == verified.id
    assert match.publisher_price == 18000
    assert match.website_id == website.id


def test_unknown_domain_has_no_publisher(db):
    match = PublisherOrderService(db).find_publisher_for_domain("nowhere.net")
    assert match.publisher_id is None
    assert match.website_id is None


def test_assign_domain_routes_to_publisher(db, staff, line_item, bulk_domain, publisher):
    item = PublisherOrderService(db).assign_domain(line_item.id, bulk_domain.id, staff.id)

    assert item.status == LineItemStatus.ASSIGNED.value
    assert item.assigned_domain == "techblog.com"
    assert item.publisher_id == publisher.id
    assert item.publisher_price == 20000
    assert item.platform_fee == 6000
    assert item.publisher_status == PublisherStatus.PENDING.value
    assert item.version == 2

    notification = db.query(PublisherNotificationModel).one()
    assert notification.notification_type == "new_order"
    assert notification.email_to == "editor@techblog.com"


def test_assign_domain_without_publisher(db, staff, line_item, bulk_domain):
    item = PublisherOrderService(db).assign_domain(line_item.id, bulk_domain.id, staff.id)
    assert item.status == LineItemStatus.ASSIGNED.value
    assert item.publisher_id is None
    assert item.publisher_status is None
    assert db.query(PublisherNotificationModel).count() == 0


def test_assign_domain_to_cancelled_item(db, staff, line_item, bulk_domain):
    line_item.status = LineItemStatus.CANCELLED.value
    db.commit()
    with pytest.raises(ValueError):
        PublisherOrderService(db).assign_domain(line_item.id, bulk_domain.id, staff.id)


def test_deliver_notifications_marks_notified(db, staff, line_item, bulk_domain, publisher, email_service):
    service = PublisherOrderService(db)
    service.assign_domain(line_item.id, bulk_domain.id, staff.id)

    result = asyncio.run(service.deliver_pending_notifications(email_service))

    assert result == {"sent": 1, "failed": 0}
    assert email_service.sent[0]["subject"] == "New Guest Post Order Available"
    db.refresh(line_item)
    assert line_item.publisher_status == PublisherStatus.NOTIFIED.value
    assert line_item.publisher_notified_at is not None


def test_earnings_created_once(db, staff, line_item, bulk_domain, publisher):
    service = PublisherOrderService(db)
    service.assign_domain(line_item.id, bulk_domain.id, staff.id)

    earning = service.create_earnings_for_completed_line_item(line_item.id)
    again = service.create_earnings_for_completed_line_item(line_item.id)

    assert again.id == earning.id
    assert earning.gross_amount == 20000
    assert earning.platform_fee_amount == 6000
    assert earning.net_amount == 14000
    assert line_item.status == LineItemStatus.COMPLETED.value
    assert service.stats(publisher.id)["pending_earnings"] == 14000


def test_earnings_need_a_publisher(db, line_item):
    with pytest.raises(ValueError):
        PublisherOrderService(db).create_earnings_for_completed_line_item(line_item.id)


def test_respond_lifecycle(db, staff, line_item, bulk_domain, publisher):
    service = PublisherOrderService(db)
    service.assign_domain(line_item.id, bulk_domain.id, staff.id)

    service.respond(publisher.id, line_item.id, "accept")
    with pytest.raises(ValueError):
        service.respond(publisher.id, line_item.id, "decline")

    service.respond(publisher.id, line_item.id, "start")
    assert line_item.status == LineItemStatus.IN_PROGRESS.value

    with pytest.raises(ValueError):
        service.respond(publisher.id, line_item.id, "submit")
    item = service.respond(publisher.id, line_item.id, "submit", published_url="https://techblog.com/post")
    assert item.publisher_status == PublisherStatus.SUBMITTED.value
    assert item.status == LineItemStatus.DELIVERED.value


def test_respond_to_someone_elses_order(db, staff, website, line_item, bulk_domain, publisher):
    intruder = _publisher(db, website, "intruder@agency.com", 5000, verification="pending")
    service = PublisherOrderService(db)
    service.assign_domain(line_item.id, bulk_domain.id, staff.id)

    with pytest.raises(PermissionError):
        service.respond(intruder.id, line_item.id, "accept")


def test_publisher_order_routes(client, db, staff, publisher_user, website, line_item, bulk_domain):
    _publisher(db, website, "editor@techblog.com", 20000, user_id=publisher_user.id)

    assigned = client.post(
        f"/api/v1/publishers/line-items/{line_item.id}/assign",
        json={"bulk_domain_id": str(bulk_domain.id)},
        headers=auth_headers(staff),
    )
    assert assigned.status_code == 200, assigned.text

    headers = auth_headers(publisher_user)
    orders = client.get("/api/v1/publishers/me/orders", headers=headers).json()
    assert [o["id"] for o in orders] == [str(line_item.id)]

    accepted = client.post(
        f"/api/v1/publishers/me/orders/{line_item.id}/respond", json={"action": "accept"}, headers=headers
    )
    assert accepted.json()["publisher_status"] == "accepted"

    submitted = client.post(
        f"/api/v1/publishers/me/orders/{line_item.id}/respond",
        json={"action": "submit", "published_url": "https://techblog.com/guest"},
        headers=headers,
    )
    assert submitted.status_code == 200

    earning = client.post(f"/api/v1/publishers/line-items/{line_item.id}/complete", headers=auth_headers(staff))
    assert earning.json()["net_amount"] == 14000

    stats = client.get("/api/v1/publishers/me/stats", headers=headers).json()
    assert stats["completed_orders"] == 1
    assert stats["total_earnings"] == 14000


def test_assign_is_staff_only(client, account, line_item, bulk_domain):
    response = client.post(
        f"/api/v1/publishers/line-items/{line_item.id}/assign",
        json={"bulk_domain_id": str(bulk_domain.id)},
        headers=auth_headers(account),
    )
    assert response.status_code == 403
