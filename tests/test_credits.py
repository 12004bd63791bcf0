from datetime import datetime, timedelta

import pytest

from conftest import auth_headers
from postflow.application.services.credits_wallet import CreditsWalletService
from postflow.domain.enums import CreditType, OrderStatus
from postflow.infrastructure.orm.credit_model import AccountCreditModel
from postflow.infrastructure.orm.order_model import OrderModel


@pytest.fixture
def wallet(db):
    return CreditsWalletService(db)


@pytest.fixture
def order(db, account):
    order = OrderModel(account_id=account.id, created_by=account.id, subtotal=50000, total_retail=50000)
    db.add(order)
    db.commit()
    return order


def test_grant_and_balance(wallet, account, admin):
    wallet.grant(account.id, 10000, CreditType.PROMOTIONAL, admin.id)
    wallet.grant(account.id, 5000, CreditType.BONUS, admin.id, expires_at=datetime.utcnow() + timedelta(days=3))

    balance = wallet.balance(account.id)
    assert balance["total_balance"] == 15000
    assert balance["expiring_balance"] == 5000
    assert len(wallet.transactions(account.id)) == 2


def test_grant_requires_account(wallet, staff, admin):
    with pytest.raises(LookupError):
        wallet.grant(staff.id, 1000, CreditType.ADJUSTMENT, admin.id)
    with pytest.raises(ValueError):
        wallet.grant(staff.id, 0, CreditType.ADJUSTMENT, admin.id)


def test_expired_credits_are_not_counted(wallet, account, admin, db):
    credit = wallet.grant(account.id, 10000, CreditType.PROMOTIONAL, admin.id)
    credit.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    assert wallet.balance(account.id)["total_balance"] == 0
    result = wallet.expire_credits()
    assert result == {"expired_credits": 1, "total_amount_expired": 10000}
    assert wallet.expire_credits()["expired_credits"] == 0


def test_apply_spends_soonest_expiring_first(wallet, account, admin, order):
    no_expiry = wallet.grant(account.id, 30000, CreditType.PROMOTIONAL, admin.id)
    soon = wallet.grant(account.id, 10000, CreditType.BONUS, admin.id, expires_at=datetime.utcnow() + timedelta(days=2))
    later = wallet.grant(account.id, 15000, CreditType.BONUS, admin.id, expires_at=datetime.utcnow() + timedelta(days=20))

    result = wallet.apply_to_order(account.id, order.id)

    assert [a["credit_id"] for a in result["applied_credits"]] == [soon.id, later.id, no_expiry.id]
    assert [a["amount_used"] for a in result["applied_credits"]] == [10000, 15000, 25000]
    assert result["credits_applied"] == 50000
    assert result["remaining_order_amount"] == 0
    assert order.credits_applied == 50000
    assert wallet.balance(account.id)["total_balance"] == 5000


def test_apply_respects_credit_limits(wallet, account, admin, order):
    wallet.grant(account.id, 20000, CreditType.PROMOTIONAL, admin.id, minimum_order_amount=100000)
    capped = wallet.grant(account.id, 20000, CreditType.PROMOTIONAL, admin.id, maximum_usage_amount=5000)

    result = wallet.apply_to_order(account.id, order.id, max_amount=30000)

    assert result["applied_credits"] == [
        {"credit_id": capped.id, "amount_used": 5000, "credit_type": "promotional"}
    ]
    assert result["remaining_order_amount"] == 45000


def test_zero_cap_applies_nothing(wallet, account, admin, order):
    wallet.grant(account.id, 20000, CreditType.PROMOTIONAL, admin.id)

    result = wallet.apply_to_order(account.id, order.id, max_amount=0)

    assert result["applied_credits"] == []
    assert result["credits_applied"] == 0
    assert order.credits_applied == 0


def test_apply_rejects_other_accounts_and_paid_orders(wallet, account, other_account, admin, order, db):
    wallet.grant(other_account.id, 10000, CreditType.PROMOTIONAL, admin.id)
    with pytest.raises(PermissionError):
        wallet.apply_to_order(other_account.id, order.id)

    order.status = OrderStatus.PAID.value
    db.commit()
    with pytest.raises(ValueError):
        wallet.apply_to_order(account.id, order.id)


def test_refund_is_idempotent(wallet, account, admin, order, db):
    credit = wallet.grant(account.id, 20000, CreditType.PROMOTIONAL, admin.id)
    wallet.apply_to_order(account.id, order.id)

    assert wallet.refund_order_credits(account.id, order.id, "order cancelled") == 20000
    assert wallet.refund_order_credits(account.id, order.id, "order cancelled") == 0

    db.refresh(credit)
    assert credit.remaining_amount == 20000
    assert not credit.is_fully_used
    assert order.credits_applied == 0


def test_credit_routes(client, account, admin, order, db):
    response = client.post(
        "/api/v1/credits/grant",
        json={"account_id": str(account.id), "amount": 12000, "credit_type": "promotional"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201

    balance = client.get("/api/v1/credits/balance", headers=auth_headers(account)).json()
    assert balance["total_balance"] == 12000

    applied = client.post(
        "/api/v1/credits/apply", json={"order_id": str(order.id)}, headers=auth_headers(account)
    ).json()
    assert applied["credits_applied"] == 12000
    assert db.query(AccountCreditModel).one().remaining_amount == 0


def test_only_admins_grant_credits(client, account, staff):
    response = client.post(
        "/api/v1/credits/grant",
        json={"account_id": str(account.id), "amount": 12000, "credit_type": "promotional"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 403
