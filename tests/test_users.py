from conftest import auth_headers


def test_profile_update(client, account):
    headers = auth_headers(account)
    response = client.put("/api/v1/users/profile", json={"first_name": "Dana"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["first_name"] == "Dana"
    assert response.json()["company_name"] == "Brand Co"


def test_admin_lists_and_searches_users(client, admin, account, other_account, publisher_user):
    headers = auth_headers(admin)
    everyone = client.get("/api/v1/users/", headers=headers).json()
    assert everyone["total"] == 4

    publishers = client.get("/api/v1/users/", params={"user_type": "publisher"}, headers=headers).json()
    assert [u["email"] for u in publishers["users"]] == ["editor@techblog.com"]

    found = client.get("/api/v1/users/", params={"search": "brand co"}, headers=headers).json()
    assert [u["email"] for u in found["users"]] == ["owner@brand.com"]


def test_user_admin_needs_admin(client, staff):
    assert client.get("/api/v1/users/", headers=auth_headers(staff)).status_code == 403


def test_suspend_and_reactivate(client, admin, account):
    headers = auth_headers(admin)
    suspended = client.post(f"/api/v1/users/{account.id}/suspend", json={"reason": "Chargeback"}, headers=headers)
    assert suspended.status_code == 200
    assert suspended.json()["status"] == "suspended"

    # suspended users are locked out of existing tokens
    assert client.get("/api/v1/auth/me", headers=auth_headers(account)).status_code == 401
    again = client.post(f"/api/v1/users/{account.id}/suspend", json={"reason": "Again"}, headers=headers)
    assert again.status_code == 400

    reactivated = client.post(f"/api/v1/users/{account.id}/reactivate", headers=headers)
    assert reactivated.json()["status"] == "active"


def test_admin_cannot_suspend_self(client, admin):
    response = client.post(f"/api/v1/users/{admin.id}/suspend", json={"reason": "Oops"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_suspension_ends_impersonation(client, admin, account):
    started = client.post(
        "/api/v1/admin/impersonation/start",
        json={"target_user_id": str(account.id), "reason": "Support ticket"},
        headers=auth_headers(admin),
    ).json()

    client.post(f"/api/v1/users/{account.id}/suspend", json={"reason": "Fraud"}, headers=auth_headers(admin))

    logs = client.get("/api/v1/admin/impersonation/logs", headers=auth_headers(admin)).json()
    assert logs[0]["id"] == started["session_id"]
    assert logs[0]["status"] == "ended"
    assert logs[0]["ended_at"] is not None
