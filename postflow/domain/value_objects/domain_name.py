"""Website domain value object"""

from dataclasses import dataclass
import re

_DOMAIN_PATTERN = re.compile(r"^(?=.{1,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z0-9-]{2,63}$")


def clean_domain(domain: str) -> str:
    """Lowercase, drop scheme, ``www.`` and trailing slashes.

    This is the light normalization used for bulk analysis input, where
    users paste lists of domains.
    """
    cleaned = (domain or "").strip().lower()
    cleaned = re.sub(r"^https?://", "", cleaned)
    cleaned = re.sub(r"^www\.", "", cleaned)
    cleaned = cleaned.rstrip("/")
    return cleaned.strip()


def normalize_domain(value: str) -> str:
    """Reduce a URL or host to its bare domain (no path, port or credentials)."""
    cleaned = clean_domain(value)
    cleaned = re.sub(r"^[a-z][a-z0-9+.-]*://", "", cleaned)
    cleaned = cleaned.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0]
    cleaned = cleaned.rsplit("@", 1)[-1].split(":", 1)[0]
    cleaned = re.sub(r"^www\.", "", cleaned).rstrip(".")
    return cleaned


@dataclass(frozen=True)
class DomainName:
    value: str

    def __post_init__(self):
        normalized = normalize_domain(self.value)
        if not _DOMAIN_PATTERN.match(normalized):
            raise ValueError(f"Invalid domain: {self.value}")
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
