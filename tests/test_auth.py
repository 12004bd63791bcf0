from conftest import PASSWORD, auth_headers
from postflow.infrastructure.orm.user_model import UserModel


def _register(client, email="new@brand.com", **fields):
    payload = {"email": email, "password": "s3cretpass", "first_name": "Nia", **fields}
    return client.post("/api/v1/auth/register", json=payload)


def test_register_account(client, email_service, db):
    response = _register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["user_type"] == "account"
    assert data["user"]["email_verified"] is False
    assert data["tokens"]["access_token"]
    assert email_service.sent[0]["subject"] == "verify"

    stored = db.query(UserModel).filter(UserModel.email == "new@brand.com").one()
    assert stored.hashed_password != "s3cretpass"


def test_register_publisher(client):
    response = _register(client, email="editor@blog.net", user_type="publisher")
    assert response.status_code == 201
    assert response.json()["user"]["user_type"] == "publisher"


def test_internal_users_cannot_self_register(client):
    response = _register(client, user_type="internal")
    assert response.status_code == 400


def test_duplicate_email_rejected(client, account):
    response = _register(client, email=account.email)
    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_short_password_rejected(client):
    response = client.post("/api/v1/auth/register", json={"email": "a@b.com", "password": "short"})
    assert response.status_code == 422


def test_login(client, account):
    response = client.post("/api/v1/auth/login", json={"email": account.email, "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["last_login"] is not None


def test_login_wrong_password(client, account):
    response = client.post("/api/v1/auth/login", json={"email": account.email, "password": "wrong-password"})
    assert response.status_code == 401


def test_login_suspended(client, make_user):
    from postflow.domain.enums import UserStatus

    user = make_user("gone@brand.com", status=UserStatus.SUSPENDED)
    response = client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 401


def test_refresh_issues_access_token(client, account):
    tokens = client.post(
        "/api/v1/auth/login", json={"email": account.email, "password": PASSWORD}
    ).json()["tokens"]

    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

    # access tokens cannot be used to refresh
    response = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_refresh_token_is_not_an_access_token(client, account):
    tokens = client.post(
        "/api/v1/auth/login", json={"email": account.email, "password": PASSWORD}
    ).json()["tokens"]
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert response.status_code == 401


def test_me(client, account):
    response = client.get("/api/v1/auth/me", headers=auth_headers(account))
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == account.email
    assert data["impersonation"] is None


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code in (401, 403)


def test_forgot_password_does_not_reveal_accounts(client, account, email_service):
    unknown = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@brand.com"})
    known = client.post("/api/v1/auth/forgot-password", json={"email": account.email})
    assert unknown.json() == known.json()
    assert [sent["to"] for sent in email_service.sent] == [account.email]


def test_reset_password(client, account, email_service):
    client.post("/api/v1/auth/forgot-password", json={"email": account.email})
    token = email_service.sent[0]["token"]

    response = client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "brandnewpass"})
    assert response.status_code == 200
    login = client.post("/api/v1/auth/login", json={"email": account.email, "password": "brandnewpass"})
    assert login.status_code == 200

    reused = client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "anotherpass1"})
    assert reused.status_code == 400


def test_verify_email(client, email_service):
    _register(client)
    token = email_service.sent[0]["token"]
    response = client.post("/api/v1/auth/verify-email", json={"token": token})
    assert response.status_code == 200
    assert client.post("/api/v1/auth/verify-email", json={"token": "bogus"}).status_code == 400
