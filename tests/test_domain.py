"""Domain entities and value objects"""

from uuid import uuid4

import pytest

from postflow.domain.entities.line_item import LineItem
from postflow.domain.entities.order import Order
from postflow.domain.enums import ClientReviewStatus, InclusionStatus, LineItemStatus, OrderStatus
from postflow.domain.events.order_events import OrderPaid, OrderStatusChanged
from postflow.domain.value_objects.domain_name import DomainName, clean_domain, normalize_domain
from postflow.domain.value_objects.entity_ids import UserId
from postflow.domain.value_objects.money import Money


class TestDomainName:

    def test_normalizes_urls(self):
        assert normalize_domain("https://www.Example.com/blog?x=1") == "example.com"
        assert normalize_domain("user@mail.example.com:8080/path") == "mail.example.com"
        assert DomainName("HTTP://WWW.TechBlog.io/").value == "techblog.io"

    def test_clean_domain_keeps_path(self):
        assert clean_domain("  https://www.example.com/ ") == "example.com"
        assert clean_domain("example.com/blog/") == "example.com/blog"

    def test_rejects_invalid(self):
        with pytest.raises(ValueError):
            DomainName("not a domain")
        with pytest.raises(ValueError):
            DomainName("localhost")


class TestMoney:

    def test_percentage_rounds_down(self):
        assert Money(999).percentage(10).cents == 99

    def test_subtraction_floors_at_zero(self):
        assert (Money(100) - Money(250)).cents == 0

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Money(-1)


def _order(**kwargs):
    return Order.create(account_id=UserId.generate(), created_by=None, **kwargs)


def _item(order, estimated=None, approved=None, wholesale=None):
    item = LineItem.create(
        order_id=order.id, client_id=uuid4(), added_by=None, display_order=1,
        service_fee=7900, estimated_price=estimated, wholesale_price=wholesale,
    )
    item.approved_price = approved
    return item


class TestOrder:

    def test_create_adds_selected_fees(self):
        order = _order(includes_client_review=True, client_review_fee=50000, rush_fee=100000)
        assert order.client_review_fee == 50000
        assert order.rush_fee == 0
        assert order.total_retail == 50000
        events = order.get_events()
        assert isinstance(events[0], OrderStatusChanged)
        assert events[0].new_status == OrderStatus.DRAFT

    def test_allowed_transition_sets_milestone(self):
        order = _order()
        for status in (OrderStatus.CONFIRMED, OrderStatus.SITES_READY, OrderStatus.CLIENT_APPROVED):
            order.change_status(status)
        assert order.approved_at is not None

    def test_invalid_transition_rejected(self):
        order = _order()
        with pytest.raises(ValueError, match="Cannot change order status"):
            order.change_status(OrderStatus.PAID)

    def test_same_status_rejected(self):
        order = _order()
        with pytest.raises(ValueError, match="already in status"):
            order.change_status(OrderStatus.DRAFT)

    def test_terminal_statuses(self):
        order = _order()
        order.change_status(OrderStatus.CANCELLED)
        assert order.cancelled_at is not None
        assert not order.can_transition_to(OrderStatus.DRAFT)

    def test_mark_as_paid_records_event(self):
        order = _order()
        for status in (OrderStatus.CONFIRMED, OrderStatus.SITES_READY, OrderStatus.CLIENT_APPROVED):
            order.change_status(status)
        order.get_events()
        order.mark_as_paid("pi_123")
        assert order.status == OrderStatus.PAID
        assert order.is_paid
        assert any(isinstance(e, OrderPaid) for e in order.get_events())

    def test_totals_use_approved_price_and_discount(self):
        order = _order(rush_delivery=True, rush_fee=100000)
        items = [
            _item(order, estimated=20000, wholesale=12100),
            _item(order, estimated=30000, approved=25000, wholesale=20000),
            _item(order, estimated=99999),
        ]
        items[2].cancel(None, "dropped")

        order.recalculate_totals(items, discount_percent=10)

        assert order.subtotal == 45000
        assert order.discount_amount == 4500
        assert order.total_retail == 45000 - 4500 + 100000
        assert order.total_wholesale == 32100
        assert order.profit == order.total_retail - 32100

    def test_credits_cannot_exceed_amount_due(self):
        order = _order(includes_client_review=True, client_review_fee=50000)
        order.apply_credits(20000)
        assert order.amount_due == 30000
        with pytest.raises(ValueError):
            order.apply_credits(40000)

    def test_account_edit_error_after_payment_starts(self):
        order = _order()
        assert order.account_edit_error() is None
        order.status = OrderStatus.PAYMENT_PENDING
        assert "Cannot add line items once payment process begins" in order.account_edit_error()


class TestLineItem:

    def test_create_defaults(self):
        order = _order()
        item = _item(order, estimated=20000)
        assert item.status == LineItemStatus.DRAFT
        assert item.version == 1
        assert item.wholesale_price == 20000 - 7900
        assert item.metadata["inclusion_status"] == InclusionStatus.INCLUDED.value

    def test_update_bumps_version_only_on_change(self):
        item = _item(_order(), estimated=20000)
        previous, new = item.apply_update({"estimated_price": 20000}, None)
        assert new == {}
        assert item.version == 1

        previous, new = item.apply_update({"anchor_text": "best crm"}, None)
        assert previous == {"anchor_text": None}
        assert new == {"anchor_text": "best crm"}
        assert item.version == 2

    def test_assigning_domain_moves_draft_to_pending_selection(self):
        item = _item(_order(), estimated=20000)
        item.apply_update({"assigned_domain_id": uuid4(), "assigned_domain": "techblog.com"}, None)
        assert item.status == LineItemStatus.PENDING_SELECTION
        assert item.assigned_domain == "techblog.com"
        assert item.assigned_at is not None

    def test_client_approval_locks_price(self):
        item = _item(_order(), estimated=20000)
        item.apply_update({"client_review_status": ClientReviewStatus.APPROVED}, None)
        assert item.approved_price == 20000
        assert item.client_reviewed_at is not None

    def test_cancel_twice_rejected(self):
        item = _item(_order(), estimated=20000)
        item.cancel(None, "no longer needed")
        assert item.is_cancelled
        with pytest.raises(ValueError):
            item.cancel(None, "again")
