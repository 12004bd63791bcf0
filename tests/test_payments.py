import pytest

from conftest import auth_headers
from postflow.domain.enums import OrderStatus
from postflow.infrastructure.orm.order_model import OrderModel


@pytest.fixture
def approved_order(db, account):
    order = OrderModel(
        account_id=account.id, created_by=account.id, status=OrderStatus.CLIENT_APPROVED.value,
        subtotal=20000, total_retail=20000,
    )
    db.add(order)
    db.commit()
    return order


def _checkout(client, user, order):
    return client.post(f"/api/v1/payments/orders/{order.id}/checkout", headers=auth_headers(user))


def _completed_event(session_id, order_id):
    return {
        "type": "checkout.session.completed",
        "data": {"object": {"id": session_id, "payment_intent": "pi_123", "metadata": {"order_id": str(order_id)}}},
    }


def test_checkout_creates_stripe_session(client, account, approved_order, payment_service, db):
    response = _checkout(client, account, approved_order)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "payment_pending"
    assert data["session_id"] == "cs_test_1"
    assert data["amount_due"] == 20000
    assert payment_service.sessions[0]["email"] == account.email

    db.refresh(approved_order)
    assert approved_order.stripe_session_id == "cs_test_1"


def test_staff_checkout_bills_the_account(client, staff, account, approved_order, payment_service):
    assert _checkout(client, staff, approved_order).status_code == 200
    assert payment_service.sessions[0]["email"] == account.email


def test_checkout_requires_approval(client, account, approved_order, db):
    approved_order.status = OrderStatus.DRAFT.value
    db.commit()
    assert _checkout(client, account, approved_order).status_code == 400


def test_credits_cover_the_whole_order(client, account, approved_order, payment_service, db):
    approved_order.credits_applied = 20000
    db.commit()

    response = _checkout(client, account, approved_order)
    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert payment_service.sessions == []

    db.refresh(approved_order)
    assert approved_order.payment_reference == "credits"
    assert approved_order.paid_at is not None


def test_free_order_is_not_attributed_to_credits(client, account, approved_order, payment_service, db):
    approved_order.subtotal = 0
    approved_order.total_retail = 0
    db.commit()

    response = _checkout(client, account, approved_order)
    assert response.json()["status"] == "paid"
    assert payment_service.sessions == []

    db.refresh(approved_order)
    assert approved_order.payment_reference == "no_charge"


def test_webhook_marks_order_paid_once(client, account, approved_order, payment_service, db):
    _checkout(client, account, approved_order)
    payment_service.event = _completed_event("cs_test_1", approved_order.id)

    first = client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "valid"})
    assert first.json()["handled"] is True

    second = client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "valid"})
    assert second.json()["handled"] is False

    db.refresh(approved_order)
    assert approved_order.status == "paid"
    assert approved_order.payment_reference == "pi_123"


def test_webhook_falls_back_to_order_metadata(client, approved_order, payment_service):
    payment_service.event = _completed_event("cs_unknown", approved_order.id)
    response = client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "valid"})
    assert response.json() == {"received": True, "handled": True, "order_id": str(approved_order.id)}


def test_webhook_ignores_other_events(client, payment_service):
    payment_service.event = {"type": "payment_intent.created", "data": {"object": {}}}
    response = client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "valid"})
    assert response.json() == {"received": True, "handled": False}


def test_webhook_rejects_bad_signature(client):
    assert client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "forged"}).status_code == 400
    assert client.post("/api/v1/payments/webhook", content=b"{}").status_code == 400
