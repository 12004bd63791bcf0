from uuid import uuid4

import pytest

from conftest import auth_headers
from postflow.infrastructure.orm.client_model import ClientModel, TargetPageModel
from postflow.infrastructure.orm.order_model import PricingRuleModel


@pytest.fixture
def brand_client(db, account):
    client = ClientModel(account_id=account.id, name="Acme Tools", website="acmetools.com", created_by=account.id)
    db.add(client)
    db.flush()
    db.add(TargetPageModel(client_id=client.id, url="https://acmetools.com/crm", keywords="crm software"))
    db.commit()
    return client


def _create_order(client, user, **fields):
    response = client.post("/api/v1/orders/", json=fields, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


def _add_items(client, user, order_id, items):
    return client.post(f"/api/v1/orders/{order_id}/line-items", json={"items": items}, headers=auth_headers(user))


def _move(client, user, order_id, *statuses):
    for status in statuses:
        response = client.put(f"/api/v1/orders/{order_id}/status", json={"status": status}, headers=auth_headers(user))
        assert response.status_code == 200, response.text
    return response.json()


def test_account_creates_draft_order(client, account):
    order = _create_order(client, account, includes_client_review=True)
    assert order["status"] == "draft"
    assert order["account_id"] == str(account.id)
    assert order["client_review_fee"] == 50000
    assert order["total_retail"] == 50000
    # staff-only figures are hidden from accounts
    assert order["profit"] is None


def test_publishers_cannot_create_orders(client, publisher_user):
    response = client.post("/api/v1/orders/", json={}, headers=auth_headers(publisher_user))
    assert response.status_code == 403


def test_orders_are_scoped_to_account(client, account, other_account, staff):
    order = _create_order(client, account)
    _create_order(client, other_account)

    mine = client.get("/api/v1/orders/", headers=auth_headers(account)).json()
    assert [o["id"] for o in mine["orders"]] == [order["id"]]
    assert client.get("/api/v1/orders/", headers=auth_headers(staff)).json()["total"] == 2
    assert client.get(f"/api/v1/orders/{order['id']}", headers=auth_headers(other_account)).status_code == 403


def test_unknown_order_is_404(client, account):
    assert client.get(f"/api/v1/orders/{uuid4()}", headers=auth_headers(account)).status_code == 404


def test_status_history_is_recorded(client, staff, account):
    order = _create_order(client, staff, account_id=str(account.id))
    _move(client, staff, order["id"], "confirmed", "sites_ready")

    history = client.get(f"/api/v1/orders/{order['id']}/history", headers=auth_headers(staff)).json()
    assert [h["new_status"] for h in history] == ["draft", "confirmed", "sites_ready"]
    assert history[1]["old_status"] == "draft"


def test_invalid_transition_is_400(client, staff):
    order = _create_order(client, staff)
    response = client.put(f"/api/v1/orders/{order['id']}/status", json={"status": "paid"}, headers=auth_headers(staff))
    assert response.status_code == 400


def test_account_status_changes_are_restricted(client, account):
    order = _create_order(client, account)
    response = client.put(
        f"/api/v1/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth_headers(account)
    )
    assert response.status_code == 403

    assert _move(client, account, order["id"], "pending_confirmation")["status"] == "pending_confirmation"


def test_add_line_items_updates_totals(client, account, brand_client):
    order = _create_order(client, account)
    response = _add_items(client, account, order["id"], [
        {"client_id": str(brand_client.id), "target_page_url": "https://acmetools.com/crm", "estimated_price": 20000},
        {"client_id": str(brand_client.id), "estimated_price": 30000},
    ])
    assert response.status_code == 201
    data = response.json()
    assert [item["display_order"] for item in data["line_items"]] == [0, 1]
    assert data["line_items"][0]["wholesale_price"] is None
    assert data["order"]["subtotal"] == 50000
    assert data["order"]["total_retail"] == 50000


def test_target_page_url_resolved_from_client(client, account, brand_client, db):
    page = db.query(TargetPageModel).filter(TargetPageModel.client_id == brand_client.id).one()
    order = _create_order(client, account)
    data = _add_items(client, account, order["id"], [
        {"client_id": str(brand_client.id), "target_page_id": str(page.id)},
    ]).json()
    assert data["line_items"][0]["target_page_url"] == "https://acmetools.com/crm"


def test_batch_fails_as_a_whole(client, account, brand_client):
    order = _create_order(client, account)
    response = _add_items(client, account, order["id"], [
        {"client_id": str(brand_client.id), "estimated_price": 20000},
        {"estimated_price": 30000},
    ])
    assert response.status_code == 400

    listing = client.get(f"/api/v1/orders/{order['id']}/line-items", headers=auth_headers(account)).json()
    assert listing["line_items"] == []


def test_cannot_add_items_for_someone_elses_client(client, other_account, brand_client):
    order = _create_order(client, other_account)
    response = _add_items(client, other_account, order["id"], [{"client_id": str(brand_client.id)}])
    assert response.status_code == 403


def test_quantity_discount(client, account, brand_client, db):
    db.add(PricingRuleModel(name="Bulk 2+", min_quantity=2, discount_percent=10))
    db.add(PricingRuleModel(name="Acme 2+", client_id=brand_client.id, min_quantity=2, discount_percent=15))
    db.commit()

    order = _create_order(client, account)
    data = _add_items(client, account, order["id"], [
        {"client_id": str(brand_client.id), "estimated_price": 10000},
        {"client_id": str(brand_client.id), "estimated_price": 10000},
    ]).json()
    assert data["order"]["discount_percent"] == 15
    assert data["order"]["discount_amount"] == 3000
    assert data["order"]["total_retail"] == 17000


def test_bulk_update_with_versions(client, staff, account, brand_client):
    order = _create_order(client, staff, account_id=str(account.id))
    item = _add_items(client, staff, order["id"], [
        {"client_id": str(brand_client.id), "estimated_price": 20000},
    ]).json()["line_items"][0]

    response = client.patch(
        f"/api/v1/orders/{order['id']}/line-items",
        json={"updates": [
            {"id": item["id"], "version": 1, "anchor_text": "best crm", "assigned_domain_id": str(uuid4()),
             "assigned_domain": "techblog.com"},
            {"id": str(uuid4()), "anchor_text": "ghost"},
        ]},
        headers=auth_headers(staff),
    )
    assert response.status_code == 200
    data = response.json()
    updated = data["line_items"][0]
    assert updated["version"] == 2
    assert updated["status"] == "pending_selection"
    assert updated["assigned_domain"] == "techblog.com"
    assert len(data["skipped"]) == 1

    stale = client.patch(
        f"/api/v1/orders/{order['id']}/line-items",
        json={"updates": [{"id": item["id"], "version": 1, "anchor_text": "crm tools"}]},
        headers=auth_headers(staff),
    )
    assert stale.status_code == 409

    listing = client.get(f"/api/v1/orders/{order['id']}/line-items", headers=auth_headers(staff)).json()
    assert listing["line_items"][0]["anchor_text"] == "best crm"
    assert listing["line_items"][0]["recent_changes"]


def test_cancel_line_item_recalculates(client, account, brand_client):
    order = _create_order(client, account)
    items = _add_items(client, account, order["id"], [
        {"client_id": str(brand_client.id), "estimated_price": 20000},
        {"client_id": str(brand_client.id), "estimated_price": 30000},
    ]).json()["line_items"]

    response = client.post(
        f"/api/v1/orders/{order['id']}/line-items/{items[1]['id']}/cancel",
        json={"reason": "over budget"},
        headers=auth_headers(account),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    refreshed = client.get(f"/api/v1/orders/{order['id']}", headers=auth_headers(account)).json()
    assert refreshed["subtotal"] == 20000
    assert refreshed["line_item_count"] == 1


def test_account_cannot_edit_after_payment_starts(client, staff, account, brand_client):
    order = _create_order(client, staff, account_id=str(account.id))
    _move(client, staff, order["id"], "confirmed", "sites_ready", "client_approved", "payment_pending")

    response = _add_items(client, account, order["id"], [{"client_id": str(brand_client.id)}])
    assert response.status_code == 403
    assert "payment process begins" in response.json()["detail"]

    # staff are not restricted
    assert _add_items(client, staff, order["id"], [{"client_id": str(brand_client.id)}]).status_code == 201


def test_share_link_view_and_approve(client, staff, account, brand_client):
    order = _create_order(client, staff, account_id=str(account.id))
    _add_items(client, staff, order["id"], [{"client_id": str(brand_client.id), "estimated_price": 20000}])
    _move(client, staff, order["id"], "confirmed", "sites_ready")

    view_only = client.post(f"/api/v1/orders/{order['id']}/share", json={}, headers=auth_headers(staff)).json()
    approver = client.post(
        f"/api/v1/orders/{order['id']}/share", json={"permissions": ["view", "approve"]}, headers=auth_headers(staff)
    ).json()

    shared = client.get(f"/api/v1/share/{view_only['token']}")
    assert shared.status_code == 200
    assert shared.json()["line_items"][0]["wholesale_price"] is None
    assert client.post(f"/api/v1/share/{view_only['token']}/approve", json={}).status_code == 403

    approved = client.post(f"/api/v1/share/{approver['token']}/approve", json={"notes": "Looks good"})
    assert approved.status_code == 200
    assert approved.json()["order"]["status"] == "client_approved"


def test_invalidated_share_link(client, account):
    order = _create_order(client, account)
    share = client.post(f"/api/v1/orders/{order['id']}/share", json={}, headers=auth_headers(account)).json()

    response = client.delete(f"/api/v1/orders/{order['id']}/share/{share['id']}", headers=auth_headers(account))
    assert response.status_code == 204
    assert client.get(f"/api/v1/share/{share['token']}").status_code == 404
    assert client.get(f"/api/v1/orders/{order['id']}/share", headers=auth_headers(account)).json() == []


def test_fulfillment_creates_workflows(client, staff, account, brand_client):
    order = _create_order(client, staff, account_id=str(account.id))
    items = _add_items(client, staff, order["id"], [
        {"client_id": str(brand_client.id), "estimated_price": 20000},
        {"client_id": str(brand_client.id), "estimated_price": 20000},
    ]).json()["line_items"]
    client.post(f"/api/v1/orders/{order['id']}/line-items/{items[0]['id']}/cancel", json={},
                headers=auth_headers(staff))

    response = client.post(f"/api/v1/orders/{order['id']}/fulfillment", headers=auth_headers(staff))
    assert response.status_code == 400

    _move(client, staff, order["id"], "confirmed", "sites_ready", "client_approved", "paid")
    response = client.post(f"/api/v1/orders/{order['id']}/fulfillment", headers=auth_headers(staff))
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"
    assert response.json()["workflows_created"] == 1


def test_fulfillment_is_staff_only(client, account):
    order = _create_order(client, account)
    assert client.post(f"/api/v1/orders/{order['id']}/fulfillment", headers=auth_headers(account)).status_code == 403


def test_export_csv(client, account, brand_client):
    order = _create_order(client, account)
    _add_items(client, account, order["id"], [{"client_id": str(brand_client.id), "estimated_price": 20000}])
    response = client.get(f"/api/v1/orders/{order['id']}/export", headers=auth_headers(account))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("id,status,client_id")
    assert str(brand_client.id) in lines[1]
