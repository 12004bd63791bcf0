"""Group a client's keywords into Ahrefs-friendly topical buckets.

Ahrefs filter buttons become unwieldy past roughly 80 keywords and tiny
groups waste clicks, so groups are kept between 30 and 80 keywords where
the data allows it.
"""

import json
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List
from urllib.parse import quote

MAX_KEYWORDS_PER_GROUP = 80
MIN_KEYWORDS_PER_GROUP = 30
MAX_KEYWORDS_PER_URL = 50

STOP_WORDS = frozenset({
    'a', 'an', 'and', 'are', 'as', 'at', 'be', 'by', 'for',
    'from', 'has', 'he', 'in', 'is', 'it', 'its', 'of', 'on',
    'that', 'the', 'to', 'was', 'will', 'with', 'or', 'but',
})

_RELEVANCE = {1: 'core', 2: 'related'}

# Characters encodeURIComponent leaves alone
_URI_SAFE = "-_.!~*'()"


@dataclass
class KeywordGroup:
    name: str
    keywords: List[str]
    relevance: str
    priority: int


@dataclass
class _Theme:
    keywords: List[str]
    theme: str
    priority: int


@dataclass
class _Pending:
    name: str
    keywords: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)


def group_keywords_by_topic(keywords: List[str]) -> List[KeywordGroup]:
    if not keywords:
        return []

    clean = [k.strip().lower() for k in keywords]
    frequency = extract_term_frequency(clean)
    core_terms = identify_core_terms(frequency, len(clean))
    themes = _create_thematic_groups(clean, core_terms, frequency)
    return _optimize_group_sizes(themes)


def extract_term_frequency(keywords: List[str]) -> Counter:
    frequency = Counter()
    for keyword in keywords:
        for term in re.split(r"\s+", keyword):
            if len(term) > 2 and term.lower() not in STOP_WORDS:
                frequency[term] += 1
    return frequency


def identify_core_terms(frequency: Counter, total_keywords: int) -> List[str]:
    threshold = max(3, total_keywords * 0.1)
    return [term for term, count in frequency.items() if count >= threshold]


def _secondary_themes(remaining: List[str], frequency: Counter) -> List[str]:
    threshold = max(2, len(remaining) * 0.05)
    candidates = [(term, count) for term, count in frequency.items()
                  if count >= threshold and len(term) > 3]
    candidates.sort(key=lambda pair: -pair[1])
    return [term for term, _ in candidates[:10]]


def _create_thematic_groups(keywords: List[str], core_terms: List[str],
                            frequency: Counter) -> Dict[str, _Theme]:
    groups: Dict[str, _Theme] = {}
    # dict keeps insertion order, so "ungrouped" stays in keyword order
    ungrouped = dict.fromkeys(keywords)

    # Core terms match against every keyword, even ones already claimed
    for term in core_terms:
        matches = [k for k in keywords if term in k]
        if matches:
            groups[term] = _Theme(matches, _capitalize(term), 1)
            for k in matches:
                ungrouped.pop(k, None)

    for term in _secondary_themes(list(ungrouped), frequency):
        matches = [k for k in ungrouped if term in k]
        if len(matches) >= 5:
            groups[term] = _Theme(matches, _capitalize(term), 2)
            for k in matches:
                ungrouped.pop(k, None)

    if ungrouped:
        groups['other'] = _Theme(list(ungrouped), 'Other', 3)

    return groups


def _optimize_group_sizes(themes: Dict[str, _Theme]) -> List[KeywordGroup]:
    ordered = sorted(themes.values(), key=lambda g: (g.priority, -len(g.keywords)))
    final: List[KeywordGroup] = []
    pending = None

    for group in ordered:
        relevance = _RELEVANCE.get(group.priority, 'wider')
        size = len(group.keywords)

        if MIN_KEYWORDS_PER_GROUP <= size <= MAX_KEYWORDS_PER_GROUP:
            final.append(KeywordGroup(f"{group.theme} Keywords", group.keywords, relevance, group.priority))
            continue

        if size > MAX_KEYWORDS_PER_GROUP:
            chunks = math.ceil(size / MAX_KEYWORDS_PER_GROUP)
            chunk_size = math.ceil(size / chunks)
            for i in range(chunks):
                name = f"{group.theme} Keywords {i + 1}" if chunks > 1 else f"{group.theme} Keywords"
                final.append(KeywordGroup(
                    name, group.keywords[i * chunk_size:(i + 1) * chunk_size], relevance, group.priority
                ))
            continue

        if pending is None:
            pending = _Pending(group.theme, list(group.keywords), [group.theme])
            continue

        pending.keywords.extend(group.keywords)
        pending.themes.append(group.theme)
        if len(pending.keywords) >= MIN_KEYWORDS_PER_GROUP:
            if len(pending.themes) > 2:
                name = f"Mixed Keywords ({', '.join(pending.themes[:2])}, etc.)"
            else:
                name = ' & '.join(pending.themes) + ' Keywords'
            final.append(KeywordGroup(name, pending.keywords[:MAX_KEYWORDS_PER_GROUP], 'related', 2))

            if len(pending.keywords) > MAX_KEYWORDS_PER_GROUP:
                pending = _Pending('Mixed', pending.keywords[MAX_KEYWORDS_PER_GROUP:], ['Various'])
            else:
                pending = None

    if pending and pending.keywords:
        if len(pending.themes) > 1:
            name = f"Other Keywords ({', '.join(pending.themes)})"
        else:
            name = f"{pending.name} Keywords"
        final.append(KeywordGroup(name, pending.keywords, 'wider', 3))

    small = [g for g in final if len(g.keywords) < MIN_KEYWORDS_PER_GROUP]
    if len(small) > 2:
        consolidated = [k for g in small for k in g.keywords]
        final = [g for g in final if len(g.keywords) >= MIN_KEYWORDS_PER_GROUP]
        chunks = math.ceil(len(consolidated) / MAX_KEYWORDS_PER_GROUP)
        for i in range(chunks):
            name = f"Additional Keywords {i + 1}" if chunks > 1 else 'Additional Keywords'
            final.append(KeywordGroup(
                name,
                consolidated[i * MAX_KEYWORDS_PER_GROUP:(i + 1) * MAX_KEYWORDS_PER_GROUP],
                'wider',
                4,
            ))

    return sorted(final, key=lambda g: g.priority)


def generate_grouped_ahrefs_urls(domain: str, groups: List[KeywordGroup],
                                 position_range: str = '1-50') -> List[dict]:
    """One Ahrefs organic-keywords URL per 50 keywords (URL length limit)."""
    clean = re.sub(r"/$", "", re.sub(r"^https?://", "", domain))
    target = quote(f"https://{clean}/", safe=_URI_SAFE)
    positions = f"&positions={position_range}" if position_range != '1-100' else ''

    results = []
    for group in groups:
        chunks = math.ceil(len(group.keywords) / MAX_KEYWORDS_PER_URL)
        for i in range(chunks):
            chunk = group.keywords[i * MAX_KEYWORDS_PER_URL:(i + 1) * MAX_KEYWORDS_PER_URL]
            rules = json.dumps([["contains", "all"], ", ".join(chunk), "any"],
                               separators=(",", ":"), ensure_ascii=False)
            url = (
                "https://app.ahrefs.com/v2-site-explorer/organic-keywords?brandedMode=all"
                "&chartGranularity=daily&chartInterval=year5&compareDate=dontCompare&country=us"
                "&currentDate=today&dataMode=text&hiddenColumns=&intentsAttrs="
                f"&keywordRules={quote(rules, safe=_URI_SAFE)}"
                "&limit=100&localMode=all&mainOnly=0&mode=subdomains&multipleUrlsOnly=0&offset=0"
                "&performanceChartTopPosition=top11_20%7C%7Ctop21_50%7C%7Ctop3%7C%7Ctop4_10%7C%7Ctop51"
                f"&positionChanges={positions}&serpFeatures=&sort=OrganicTrafficInitial&sortDirection=desc"
                f"&target={target}"
                "&urlRules=&volume_type=average"
            )
            results.append({
                "name": f"{group.name} ({i + 1}/{chunks})" if chunks > 1 else group.name,
                "url": url,
                "relevance": group.relevance,
                "keyword_count": len(chunk),
            })
    return results


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]
