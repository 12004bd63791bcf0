from conftest import auth_headers


def _create_client(client, user, **fields):
    payload = {"name": "Acme Tools", "website": "https://www.acmetools.com/", **fields}
    return client.post("/api/v1/clients/", json=payload, headers=auth_headers(user))


def test_account_creates_own_client(client, account):
    response = _create_client(client, account)
    assert response.status_code == 201
    data = response.json()
    assert data["account_id"] == str(account.id)
    assert data["website"] == "acmetools.com"


def test_accounts_only_see_their_clients(client, account, other_account):
    _create_client(client, account)
    _create_client(client, other_account, name="Rival Inc")

    names = [c["name"] for c in client.get("/api/v1/clients/", headers=auth_headers(account)).json()]
    assert names == ["Acme Tools"]


def test_other_account_cannot_read_client(client, account, other_account):
    client_id = _create_client(client, account).json()["id"]
    response = client.get(f"/api/v1/clients/{client_id}", headers=auth_headers(other_account))
    assert response.status_code == 403


def test_staff_creates_client_for_account(client, staff, account):
    response = _create_client(client, staff, account_id=str(account.id))
    assert response.status_code == 201
    assert response.json()["account_id"] == str(account.id)

    everything = client.get("/api/v1/clients/", headers=auth_headers(staff)).json()
    assert len(everything) == 1


def test_staff_cannot_assign_client_to_non_account(client, staff, publisher_user):
    response = _create_client(client, staff, account_id=str(publisher_user.id))
    assert response.status_code == 400


def test_publishers_cannot_manage_clients(client, publisher_user):
    assert _create_client(client, publisher_user).status_code == 403


def test_account_cannot_move_client(client, account, other_account):
    client_id = _create_client(client, account).json()["id"]
    response = client.put(
        f"/api/v1/clients/{client_id}",
        json={"account_id": str(other_account.id)},
        headers=auth_headers(account),
    )
    assert response.status_code == 403


def test_target_pages_deduplicate_keywords(client, account):
    client_id = _create_client(client, account).json()["id"]
    response = client.post(
        f"/api/v1/clients/{client_id}/target-pages",
        json={"url": "https://acmetools.com/crm", "keywords": "crm software, best crm, crm software, "},
        headers=auth_headers(account),
    )
    assert response.status_code == 201
    assert response.json()["keywords"] == "crm software, best crm"

    detail = client.get(f"/api/v1/clients/{client_id}", headers=auth_headers(account)).json()
    assert [p["url"] for p in detail["target_pages"]] == ["https://acmetools.com/crm"]


def test_delete_target_page_of_other_client(client, account):
    first = _create_client(client, account).json()["id"]
    second = _create_client(client, account, name="Second").json()["id"]
    page = client.post(
        f"/api/v1/clients/{first}/target-pages", json={"url": "https://acmetools.com/a"},
        headers=auth_headers(account),
    ).json()

    response = client.delete(f"/api/v1/clients/{second}/target-pages/{page['id']}", headers=auth_headers(account))
    assert response.status_code == 404


def test_keyword_groups_with_ahrefs_links(client, account):
    client_id = _create_client(client, account).json()["id"]
    keywords = [f"crm tool {i}" for i in range(40)]
    client.post(
        f"/api/v1/clients/{client_id}/target-pages",
        json={"url": "https://acmetools.com/crm", "keywords": keywords},
        headers=auth_headers(account),
    )

    response = client.get(
        f"/api/v1/clients/{client_id}/keyword-groups",
        params={"domain": "techblog.com"},
        headers=auth_headers(account),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_keywords"] == 40
    assert data["groups"][0]["name"] == "Crm Keywords"
    assert data["ahrefs_urls"][0]["url"].startswith("https://app.ahrefs.com/")
