from types import SimpleNamespace

from conftest import auth_headers
from postflow import tasks
from postflow.infrastructure.orm.website_model import WebsiteModel


def _start(client, admin, target, reason="Debugging checkout"):
    return client.post(
        "/api/v1/admin/impersonation/start",
        json={"target_user_id": str(target.id), "reason": reason},
        headers=auth_headers(admin),
    )


def test_dashboard_counts(client, staff, account, publisher_user):
    response = client.get("/api/v1/admin/dashboard", headers=auth_headers(staff))
    assert response.status_code == 200
    data = response.json()
    assert data["users"]["total"] == 3
    assert data["users"]["by_type"] == {"internal": 1, "account": 1, "publisher": 1}
    assert data["orders"]["revenue"] == 0
    assert data["review_queue_pending"] == 0


def test_dashboard_is_internal_only(client, account):
    assert client.get("/api/v1/admin/dashboard", headers=auth_headers(account)).status_code == 403


def test_pricing_refresh_is_queued(client, admin, monkeypatch):
    monkeypatch.setattr(tasks.refresh_derived_prices, "delay", lambda: SimpleNamespace(id="task-1"))
    response = client.post("/api/v1/admin/pricing/refresh", headers=auth_headers(admin))
    assert response.status_code == 202
    assert response.json() == {"task_id": "task-1", "status": "queued"}


def test_pricing_refresh_needs_admin(client, staff):
    assert client.post("/api/v1/admin/pricing/refresh", headers=auth_headers(staff)).status_code == 403


def test_websites_export(client, staff, db):
    db.add(WebsiteModel(domain="techblog.com", guest_post_cost=15000))
    db.commit()
    response = client.get("/api/v1/admin/websites/export", headers=auth_headers(staff))
    assert response.status_code == 200
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("id,domain,domain_rating")
    assert "techblog.com" in lines[1]


def test_impersonation_session(client, admin, account):
    started = _start(client, admin, account)
    assert started.status_code == 200, started.text
    session = started.json()
    assert session["target_user_type"] == "account"

    headers = {"Authorization": f"Bearer {session['access_token']}"}
    me = client.get("/api/v1/auth/me", headers=headers).json()
    assert me["user"]["email"] == "owner@brand.com"
    assert me["impersonation"]["admin_user_id"] == str(admin.id)
    assert me["impersonation"]["session_id"] == session["session_id"]

    ended = client.post("/api/v1/admin/impersonation/end", headers=headers)
    assert ended.status_code == 200

    # the impersonation token dies with its session
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401

    logs = client.get("/api/v1/admin/impersonation/logs", headers=auth_headers(admin)).json()
    assert len(logs) == 1
    assert logs[0]["status"] == "ended"
    assert logs[0]["reason"] == "Debugging checkout"


def test_one_active_session_per_admin(client, admin, account, other_account):
    assert _start(client, admin, account).status_code == 200
    assert _start(client, admin, other_account).status_code == 400


def test_cannot_impersonate_staff(client, admin, staff):
    assert _start(client, admin, staff).status_code == 400


def test_impersonation_needs_admin(client, staff, account):
    assert _start(client, staff, account).status_code == 403


def test_end_requires_impersonation_token(client, admin):
    assert client.post("/api/v1/admin/impersonation/end", headers=auth_headers(admin)).status_code == 400
