import asyncio

import pytest

from conftest import FakeAIService
from postflow.application.services.email_parser import (
    EmailParseRequest, EmailParserService, clean_email_content, combine_results, missing_fields,
    overall_confidence,
)
from postflow.infrastructure.external_services.ai_service import AIServiceError

BASIC = {"name": "Ana Lopez", "company": "TechBlog Media", "websites": ["https://www.techblog.com/"]}
PRICING = {
    "guest_post_price": 150,
    "link_insertion_price": 90,
    "turnaround_days": 5,
    "niche_pricing": [{"niche": "casino", "price": 300}],
}
REQUIREMENTS = {"accepts_dofollow": True, "prohibited_topics": ["cbd"], "min_word_count": 1000}


def _request(sender="editor@techblog.com", original_website=None):
    return EmailParseRequest(
        sender=sender,
        subject="Re: Guest Post Opportunity",
        content="Hi, a guest post is $150 and a link insertion $90.",
        original_website=original_website,
    )


def _parse(ai, request):
    return asyncio.run(EmailParserService(ai).parse_email(request))


def test_clean_email_content():
    content = "Hi there,\nOur price is $150.\n\nOn Mon, Jan 1 wrote:\n> previous message\nBest regards,\nAna"
    assert clean_email_content(content) == "Hi there, Our price is $150."


def test_parse_email_combines_passes():
    ai = FakeAIService(basic=BASIC, pricing=PRICING, requirements=REQUIREMENTS)
    result = _parse(ai, _request(original_website="techblog.com"))

    assert ai.calls == 3
    assert result["sender"]["name"] == "Ana Lopez"
    assert result["websites"] == [{"domain": "techblog.com", "confidence": 0.8}]
    assert [o["type"] for o in result["offerings"]] == ["guest_post", "link_insertion"]

    guest_post = result["offerings"][0]
    assert guest_post["base_price"] == 150.0
    assert guest_post["turnaround_days"] == 5
    assert guest_post["requirements"]["min_word_count"] == 1000
    assert guest_post["niche_pricing"][0]["adjustment_value"] == 150.0

    assert result["overall_confidence"] == pytest.approx((0.9 + 0.8 + 0.8 + 0.8) / 4)
    assert result["missing_fields"] == []


def test_email_domain_used_when_no_website_found():
    result = _parse(FakeAIService(pricing={"guest_post_price": 100}), _request(sender="me@acmeblog.io"))
    assert result["websites"] == [{"domain": "acmeblog.io", "confidence": 0.6}]
    assert "contact_name_or_company" in result["missing_fields"]


def test_free_mail_domain_is_not_a_website():
    result = _parse(FakeAIService(), _request(sender="someone@gmail.com"))
    assert result["websites"] == []
    assert result["overall_confidence"] == 0.3
    assert result["missing_fields"] == ["contact_name_or_company", "website", "pricing", "content_requirements"]


def test_per_website_and_listicle_pricing():
    pricing = {
        "listicle_pricing": [{"position": 1, "price": 500}, {"position": 2, "price": None}],
        "per_website_pricing": [{"website": "https://sister.net", "guest_post_price": 80}],
    }
    result = combine_results(BASIC, pricing, {}, _request())
    types = [(o["type"], o.get("position"), o.get("website_specific")) for o in result["offerings"]]
    assert types == [("listicle_placement", 1, None), ("guest_post", None, "https://sister.net")]
    assert missing_fields(result) == []
    assert overall_confidence(result) == pytest.approx((0.9 + 0.8 + 0.7 + 0.9) / 4)


def test_one_failed_pass_is_tolerated():
    class PartlyFailing(FakeAIService):
        async def extract_json(self, system_prompt, user_prompt):
            if "content requirements" in user_prompt:
                raise AIServiceError("timeout")
            return await super().extract_json(system_prompt, user_prompt)

    result = _parse(PartlyFailing(basic=BASIC, pricing=PRICING), _request())
    assert result["offerings"][0]["requirements"]["accepts_dofollow"] is None


def test_all_passes_failing_gives_empty_result():
    result = _parse(FakeAIService(fail=True), _request())
    assert result["overall_confidence"] == 0.1
    assert result["missing_fields"] == ["all"]
    assert result["offerings"] == []
    assert result["sender"]["email"] == "editor@techblog.com"
