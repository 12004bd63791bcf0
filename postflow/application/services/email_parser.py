"""Structured extraction of publisher replies to outreach emails

Three LLM passes (sender/websites, pricing, requirements) run concurrently
and are merged into a JSON-serializable ``dict`` with confidence scores.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...domain.enums import OfferingType
from ...domain.value_objects.domain_name import normalize_domain
from ...infrastructure.external_services.ai_service import AIService, AIServiceError

logger = logging.getLogger(__name__)

FREE_MAIL_PROVIDERS = ("gmail.com", "yahoo.com", "outlook.com", "hotmail.com")

_SIGNATURE_PATTERNS = [
    re.compile(r"^--\s*$", re.MULTILINE),
    re.compile(r"^best regards,?$", re.MULTILINE | re.IGNORECASE),
    re.compile(r"^sincerely,?$", re.MULTILINE | re.IGNORECASE),
    re.compile(r"^regards,?$", re.MULTILINE | re.IGNORECASE),
    re.compile(r"^thanks,?$", re.MULTILINE | re.IGNORECASE),
]
_QUOTED_LINE = re.compile(r"^>.*$", re.MULTILINE)
_REPLY_HEADER = re.compile(r"^On .* wrote:$", re.MULTILINE)

SYSTEM_PROMPT = (
    "You extract structured data from publisher emails about guest posting and link building. "
    "Return ONLY valid JSON, no markdown formatting or explanations."
)

BASIC_INFO_PROMPT = """The person replying is: {sender}
Subject: {subject}

Full email thread:
{content}

Context: we reached out to {sender} asking about guest posting on THEIR website and they are
replying with pricing and terms. They may not repeat the website we mentioned.

Extract their name, their company, their website(s) and their preferred contact email.
The domain {email_domain} is likely theirs unless it is a free mail provider.
If they list several sites with different prices, those are ALL their websites.
Do not include third-party sites mentioned in passing.

Return JSON:
{{"name": "sender name or null", "company": "company name or null",
  "websites": ["domain1.com"], "email": "contact email or sender email"}}"""

PRICING_PROMPT = """Extract ALL pricing details from this publisher email.

Email content:
{content}

Rules:
- Every price mentioned: guest post, link insertion, additional links.
- Listicle positions go in listicle_pricing, niche specific prices in niche_pricing,
  transactional vs non-transactional prices in transactional_pricing,
  prices that differ per website in per_website_pricing.
- Turnaround only if explicitly mentioned, otherwise null.
- Always copy the exact pricing text into raw_pricing_text.

Return JSON:
{{"guest_post_price": null, "link_insertion_price": null, "additional_link_price": null,
  "currency": "USD", "turnaround_days": null, "max_links_included": null,
  "min_words": null, "max_words": null, "dofollow_included": null,
  "listicle_pricing": [{{"position": 1, "price": 999}}],
  "niche_pricing": [{{"niche": "saas", "price": 250, "adjustment_type": "fixed",
                      "adjustment_value": 50, "notes": ""}}],
  "transactional_pricing": {{"guest_post": {{"transactional": 250, "non_transactional": 200}}}},
  "per_website_pricing": [{{"website": "example.com", "guest_post_price": 200,
                            "link_insertion_price": null, "notes": ""}}],
  "bulk_discounts": [{{"quantity": 5, "discount": 10}}],
  "package_deals": [{{"quantity": 3, "total_price": 500, "per_unit": 167}}],
  "raw_pricing_text": "", "notes": ""}}"""

REQUIREMENTS_PROMPT = """Extract ALL content requirements and restrictions from this publisher email.

Email content:
{content}

Rules:
- do-follow / dofollow / DF means accepts_dofollow true, no-follow / NF means false.
- Prohibited topics such as CBD, casino, gambling, adult, dating, crypto, payday loans.
  Copy the exact restriction text into restricted_niches_notes.
- Word counts, author bio and image requirements, approval process.
- Negatives such as no barter, no link exchanges, no free posts.

Return JSON:
{{"accepts_dofollow": null, "max_links": null, "additional_links_allowed": null,
  "additional_link_cost": null, "prohibited_topics": [], "restricted_niches_notes": null,
  "min_word_count": null, "max_word_count": null, "requires_author_bio": null,
  "requires_images": null, "min_images": null, "no_barter": null,
  "no_link_exchanges": null, "no_free_posts": null, "content_approval_required": null,
  "guidelines": null, "raw_requirements_text": null}}"""


@dataclass
class EmailParseRequest:
    sender: str
    subject: str
    content: str
    html_content: Optional[str] = None
    campaign_type: str = "outreach"
    original_website: Optional[str] = None


def clean_email_content(content: str) -> str:
    """Drop signatures, quoted replies and collapse whitespace."""
    cleaned = content or ""
    for pattern in _SIGNATURE_PATTERNS:
        match = pattern.search(cleaned)
        # A signature marker on the very first line is kept
        if match and match.start() > 0:
            cleaned = cleaned[:match.start()]
    cleaned = _QUOTED_LINE.sub("", cleaned)
    cleaned = _REPLY_HEADER.sub("", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def empty_result(sender: str, error: str = "Failed to parse email content") -> Dict[str, Any]:
    return {
        "sender": {"email": sender, "name": None, "company": None, "confidence": 0.1},
        "websites": [],
        "offerings": [],
        "overall_confidence": 0.1,
        "missing_fields": ["all"],
        "errors": [error],
    }


def _present(value: Any) -> bool:
    return value is not None


def _first(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return values[-1] if values else None


def _niche_pricing(pricing: dict) -> List[dict]:
    base = pricing.get("guest_post_price")
    rules = []
    for rule in pricing.get("niche_pricing") or []:
        adjustment_type = rule.get("adjustment_type") or "fixed"
        adjustment_value = rule.get("adjustment_value")
        price = rule.get("price")
        if not adjustment_value and price and base:
            diff = float(price) - float(base)
            if diff != 0:
                adjustment_type = "fixed"
                adjustment_value = diff
        rules.append({
            "niche": rule.get("niche"),
            "price": price,
            "adjustment_type": adjustment_type,
            "adjustment_value": adjustment_value,
            "notes": rule.get("notes"),
        })
    return rules


def combine_results(basic: dict, pricing: dict, requirements: dict, request: EmailParseRequest) -> Dict[str, Any]:
    """Merge the three extraction passes into one parsed email."""
    name = basic.get("name") or None
    company = basic.get("company") or None
    result: Dict[str, Any] = {
        "sender": {
            "email": request.sender,
            "name": name,
            "company": company,
            "confidence": 0.9 if name or company else 0.5,
        },
        "websites": [],
        "offerings": [],
        "overall_confidence": 0.0,
        "missing_fields": [],
    }

    websites: List[dict] = []
    seen = set()
    if isinstance(basic.get("websites"), list):
        for raw in basic["websites"]:
            if not isinstance(raw, str):
                continue
            domain = normalize_domain(raw)
            if domain and domain not in seen:
                seen.add(domain)
                websites.append({"domain": domain, "confidence": 0.8})

    if request.original_website:
        domain = normalize_domain(request.original_website)
        if domain and domain not in seen:
            seen.add(domain)
            websites.append({"domain": domain, "confidence": 0.9})

    if not websites and "@" in request.sender:
        email_domain = request.sender.split("@", 1)[1].lower()
        if email_domain and not any(provider in email_domain for provider in FREE_MAIL_PROVIDERS):
            domain = normalize_domain(email_domain)
            if domain:
                logger.info("Using email domain as fallback website: %s", domain)
                websites.append({"domain": domain, "confidence": 0.6})
    result["websites"] = websites

    currency = pricing.get("currency") or "USD"
    turnaround = pricing.get("turnaround_days") or None
    max_links = _first(requirements.get("max_links"), pricing.get("max_links_included"))
    additional_link_cost = _first(requirements.get("additional_link_cost"), pricing.get("additional_link_price"))
    prohibited = requirements.get("prohibited_topics") or []

    offerings: List[dict] = []
    if _present(pricing.get("guest_post_price")):
        offerings.append({
            "type": OfferingType.GUEST_POST.value,
            "base_price": float(pricing["guest_post_price"]),
            "currency": currency,
            "turnaround_days": turnaround,
            "requirements": {
                "accepts_dofollow": requirements.get("accepts_dofollow"),
                "max_links": max_links,
                "prohibited_topics": prohibited,
                "min_word_count": _first(requirements.get("min_word_count"), pricing.get("min_words")),
                "max_word_count": _first(requirements.get("max_word_count"), pricing.get("max_words")),
                "additional_link_cost": additional_link_cost,
                "requires_author_bio": requirements.get("requires_author_bio"),
                "requires_images": requirements.get("requires_images"),
                "no_barter": requirements.get("no_barter"),
                "no_link_exchanges": requirements.get("no_link_exchanges"),
            },
            "niche_pricing": _niche_pricing(pricing),
            "raw_pricing_text": pricing.get("raw_pricing_text"),
            "raw_requirements_text": requirements.get("raw_requirements_text"),
            "confidence": 0.8,
        })

    if _present(pricing.get("link_insertion_price")):
        offerings.append({
            "type": OfferingType.LINK_INSERTION.value,
            "base_price": float(pricing["link_insertion_price"]),
            "currency": currency,
            "turnaround_days": turnaround,
            "requirements": {
                "accepts_dofollow": requirements.get("accepts_dofollow"),
                "max_links": max_links,
                "additional_link_cost": additional_link_cost,
            },
            "raw_pricing_text": pricing.get("raw_pricing_text"),
            "confidence": 0.8,
        })

    for listicle in pricing.get("listicle_pricing") or []:
        if not _present(listicle.get("price")):
            continue
        offerings.append({
            "type": OfferingType.LISTICLE_PLACEMENT.value,
            "base_price": float(listicle["price"]),
            "currency": currency,
            "turnaround_days": turnaround,
            "position": listicle.get("position"),
            "requirements": {
                "accepts_dofollow": requirements.get("accepts_dofollow"),
                "prohibited_topics": prohibited,
            },
            "confidence": 0.7,
        })

    transactional = pricing.get("transactional_pricing")
    if isinstance(transactional, dict):
        for offering in offerings:
            if transactional.get(offering["type"]):
                offering["transactional_pricing"] = transactional[offering["type"]]

    for site in pricing.get("per_website_pricing") or []:
        specific = site.get("website")
        if _present(site.get("guest_post_price")):
            offerings.append({
                "type": OfferingType.GUEST_POST.value,
                "base_price": float(site["guest_post_price"]),
                "currency": currency,
                "turnaround_days": turnaround,
                "requirements": {
                    "accepts_dofollow": requirements.get("accepts_dofollow"),
                    "max_links": requirements.get("max_links"),
                    "prohibited_topics": prohibited,
                    "min_word_count": requirements.get("min_word_count"),
                    "max_word_count": requirements.get("max_word_count"),
                },
                "confidence": 0.9,
                "website_specific": specific,
                "notes": site.get("notes"),
            })
        if _present(site.get("link_insertion_price")):
            offerings.append({
                "type": OfferingType.LINK_INSERTION.value,
                "base_price": float(site["link_insertion_price"]),
                "currency": currency,
                "turnaround_days": turnaround,
                "requirements": {
                    "accepts_dofollow": requirements.get("accepts_dofollow"),
                    "max_links": requirements.get("max_links"),
                },
                "confidence": 0.9,
                "website_specific": specific,
                "notes": site.get("notes"),
            })

    result["offerings"] = offerings
    return result


def overall_confidence(result: Dict[str, Any]) -> float:
    scores = [result["sender"]["confidence"]]
    scores.extend(w["confidence"] for w in result["websites"])
    scores.extend(o["confidence"] for o in result["offerings"])
    if len(scores) == 1:
        return 0.3
    return sum(scores) / len(scores)


def missing_fields(result: Dict[str, Any]) -> List[str]:
    missing = []
    sender = result["sender"]
    if not sender.get("name") and not sender.get("company"):
        missing.append("contact_name_or_company")
    if not result["websites"]:
        missing.append("website")
    offerings = result["offerings"]
    if not offerings:
        missing.append("pricing")
    elif not any(o["type"] == OfferingType.GUEST_POST.value for o in offerings):
        missing.append("guest_post_pricing")
    if not any(o.get("requirements") for o in offerings):
        missing.append("content_requirements")
    return missing


class EmailParserService:
    """Turns a raw publisher reply into sender, websites and offerings."""

    def __init__(self, ai_service: AIService):
        self.ai = ai_service

    async def _extract(self, label: str, prompt: str) -> dict:
        data = await self.ai.extract_json(SYSTEM_PROMPT, prompt)
        if not isinstance(data, dict):
            raise AIServiceError(f"{label} extraction did not return an object")
        return data

    async def parse_email(self, request: EmailParseRequest) -> Dict[str, Any]:
        """Parse one reply.

        Individual passes that fail contribute nothing; when every pass fails
        the reply gets the empty result and lands in low-confidence review.
        """
        content = clean_email_content(request.content)
        email_domain = request.sender.split("@", 1)[1] if "@" in request.sender else ""

        replies = await asyncio.gather(
            self._extract("Basic info", BASIC_INFO_PROMPT.format(
                sender=request.sender, subject=request.subject or "", content=content, email_domain=email_domain,
            )),
            self._extract("Pricing", PRICING_PROMPT.format(content=content)),
            self._extract("Requirements", REQUIREMENTS_PROMPT.format(content=content)),
            return_exceptions=True,
        )
        failures = [r for r in replies if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, AIServiceError):
                raise failure
            logger.warning("Email extraction pass failed for %s: %s", request.sender, failure)
        if len(failures) == len(replies):
            logger.error("All extraction passes failed for %s", request.sender)
            return empty_result(request.sender, "All extraction passes failed")

        basic, pricing, requirements = (r if isinstance(r, dict) else {} for r in replies)
        try:
            result = combine_results(basic, pricing, requirements, request)
        except (TypeError, ValueError, AttributeError):
            logger.exception("Could not combine extraction results for %s", request.sender)
            return empty_result(request.sender)

        result["overall_confidence"] = overall_confidence(result)
        result["missing_fields"] = missing_fields(result)
        return result
