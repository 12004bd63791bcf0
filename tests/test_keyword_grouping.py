"""Keyword grouping for Ahrefs filter URLs"""

from postflow.application.services.keyword_grouping import (
    KeywordGroup,
    extract_term_frequency,
    generate_grouped_ahrefs_urls,
    group_keywords_by_topic,
    identify_core_terms,
)


def test_no_keywords_no_groups():
    assert group_keywords_by_topic([]) == []


def test_term_frequency_ignores_stop_words_and_short_terms():
    frequency = extract_term_frequency(["the best seo tool", "seo for it"])
    assert frequency["seo"] == 2
    assert frequency["best"] == 1
    assert "the" not in frequency
    assert "it" not in frequency
    assert "for" not in frequency


def test_core_terms_need_at_least_three_occurrences():
    frequency = extract_term_frequency(["seo tools", "seo audit", "link building"])
    assert identify_core_terms(frequency, 3) == []


def test_small_themes_are_merged_into_one_group():
    groups = group_keywords_by_topic(["seo tools", "seo audit", "seo agency", "link building"])

    assert len(groups) == 1
    assert groups[0].name == "Other Keywords (Seo, Other)"
    assert groups[0].relevance == "wider"
    assert sorted(groups[0].keywords) == ["link building", "seo agency", "seo audit", "seo tools"]


def test_core_themes_within_bounds_stay_whole():
    keywords = [f"best seo tool {i}" for i in range(40)]
    groups = group_keywords_by_topic(keywords)

    assert [g.name for g in groups] == ["Best Keywords", "Seo Keywords", "Tool Keywords"]
    assert all(len(g.keywords) == 40 and g.relevance == "core" for g in groups)


def test_oversized_theme_is_split():
    keywords = [f"widget {i}" for i in range(100)]
    groups = group_keywords_by_topic(keywords)

    assert [g.name for g in groups] == ["Widget Keywords 1", "Widget Keywords 2"]
    assert [len(g.keywords) for g in groups] == [50, 50]


def test_ahrefs_urls_chunk_every_fifty_keywords():
    group = KeywordGroup("Seo Keywords", [f"seo {i}" for i in range(120)], "core", 1)
    urls = generate_grouped_ahrefs_urls("https://example.com/", [group])

    assert [u["name"] for u in urls] == ["Seo Keywords (1/3)", "Seo Keywords (2/3)", "Seo Keywords (3/3)"]
    assert [u["keyword_count"] for u in urls] == [50, 50, 20]
    assert "target=https%3A%2F%2Fexample.com%2F" in urls[0]["url"]
    assert "&positions=1-50" in urls[0]["url"]


def test_full_position_range_omits_filter():
    group = KeywordGroup("Seo Keywords", ["seo audit"], "core", 1)
    url = generate_grouped_ahrefs_urls("example.com", [group], position_range="1-100")[0]["url"]
    assert "positions=" not in url
