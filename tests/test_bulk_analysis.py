import pytest

from conftest import auth_headers
from postflow.application.services.bulk_analysis import BulkAnalysisService
from postflow.domain.enums import QualificationStatus
from postflow.infrastructure.orm.client_model import ClientModel, TargetPageModel


@pytest.fixture
def brand_client(db, account):
    client = ClientModel(account_id=account.id, name="Acme Tools", website="acmetools.com", created_by=account.id)
    db.add(client)
    db.commit()
    return client


@pytest.fixture
def target_page(db, brand_client):
    page = TargetPageModel(client_id=brand_client.id, url="https://acmetools.com/crm",
                           keywords="crm software, sales pipeline, crm software")
    db.add(page)
    db.commit()
    return page


def test_domains_are_cleaned_and_deduplicated(db, staff, brand_client, target_page):
    stored = BulkAnalysisService(db).create_or_update_domains(
        brand_client.id,
        ["https://www.TechBlog.com/", "techblog.com", "marketing.io"],
        [target_page.id],
        staff.id,
    )
    assert [d.domain for d in stored] == ["techblog.com", "marketing.io"]
    assert stored[0].keyword_count == 2
    assert stored[0].target_page_ids == [str(target_page.id)]


def test_manual_keywords_win(db, staff, brand_client, target_page):
    stored = BulkAnalysisService(db).create_or_update_domains(
        brand_client.id, ["techblog.com"], [target_page.id], staff.id, manual_keywords="a, b, c, a",
    )
    assert stored[0].keyword_count == 3


def test_resubmitting_updates_existing_row(db, staff, brand_client, target_page):
    service = BulkAnalysisService(db)
    first = service.create_or_update_domains(brand_client.id, ["techblog.com"], [], staff.id)
    assert first[0].keyword_count == 0

    second = service.create_or_update_domains(brand_client.id, ["techblog.com"], [target_page.id], staff.id)
    assert second[0].id == first[0].id
    assert second[0].keyword_count == 2


def test_manual_override_of_ai_verdict(db, staff, brand_client):
    service = BulkAnalysisService(db)
    domain = service.create_or_update_domains(brand_client.id, ["techblog.com"], [], staff.id)[0]
    domain.qualification_status = QualificationStatus.HIGH_QUALITY.value
    domain.ai_qualification_reasoning = "Strong topical overlap"
    db.commit()

    updated = service.update_qualification_status(
        domain.id, QualificationStatus.DISQUALIFIED, staff.id, is_manual=True,
    )
    assert updated.was_manually_qualified is True
    assert updated.was_human_verified is False
    assert updated.checked_by == staff.id


def test_manual_confirmation_of_ai_verdict(db, staff, brand_client):
    service = BulkAnalysisService(db)
    domain = service.create_or_update_domains(brand_client.id, ["techblog.com"], [], staff.id)[0]
    domain.qualification_status = QualificationStatus.GOOD_QUALITY.value
    domain.ai_qualification_reasoning = "Relevant audience"
    db.commit()

    updated = service.update_qualification_status(
        domain.id, QualificationStatus.GOOD_QUALITY, staff.id, is_manual=True,
    )
    assert updated.was_human_verified is True
    assert updated.was_manually_qualified is False


def test_search_and_qualified(db, staff, brand_client):
    service = BulkAnalysisService(db)
    domains = service.create_or_update_domains(
        brand_client.id, ["techblog.com", "marketing.io", "spam.biz"], [], staff.id,
    )
    service.update_qualification_status(domains[0].id, QualificationStatus.HIGH_QUALITY, staff.id)
    service.update_qualification_status(domains[1].id, QualificationStatus.MARGINAL_QUALITY, staff.id)
    service.update_qualification_status(domains[2].id, QualificationStatus.DISQUALIFIED, staff.id)

    assert [d.domain for d in service.qualified_domains(brand_client.id)] == ["marketing.io", "techblog.com"]

    items, total = service.search(brand_client.id, qualification_status="qualified_any")
    assert total == 2
    items, total = service.search(brand_client.id, search="SPAM")
    assert [d.domain for d in items] == ["spam.biz"]


def test_existing_domains(db, staff, brand_client):
    service = BulkAnalysisService(db)
    service.create_or_update_domains(brand_client.id, ["techblog.com"], [], staff.id)
    assert service.existing_domains(brand_client.id, ["www.techblog.com", "new.com"]) == [
        {"domain": "techblog.com", "qualification_status": "pending"}
    ]


def test_bulk_routes(client, staff, brand_client, target_page):
    headers = auth_headers(staff)
    created = client.post(
        f"/api/v1/bulk-analysis/clients/{brand_client.id}/domains",
        json={"domains": ["techblog.com", "marketing.io"], "target_page_ids": [str(target_page.id)]},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    domain_id = created.json()[0]["id"]

    qualified = client.put(
        f"/api/v1/bulk-analysis/domains/{domain_id}/qualification",
        json={"status": "high_quality", "notes": "Good fit"},
        headers=headers,
    )
    assert qualified.json()["qualification_status"] == "high_quality"

    listing = client.get(f"/api/v1/bulk-analysis/clients/{brand_client.id}/domains", headers=headers).json()
    assert listing["total"] == 2

    assert client.delete(f"/api/v1/bulk-analysis/domains/{domain_id}", headers=headers).status_code == 204
    assert client.delete(f"/api/v1/bulk-analysis/domains/{domain_id}", headers=headers).status_code == 404


def test_bulk_routes_are_staff_only(client, account, brand_client):
    response = client.get(f"/api/v1/bulk-analysis/clients/{brand_client.id}/domains", headers=auth_headers(account))
    assert response.status_code == 403
