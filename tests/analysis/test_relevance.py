from __future__ import annotations

from news_crawler.analysis.relevance import filter_irrelevant, is_article_relevant
from news_crawler.models import ResultSet

TERMS = ["economy", "election"]


def test_multi_term_articles_are_always_relevant(make_article) -> None:
    article = make_article(score=2, title="", full_text="nothing to see")

    assert is_article_relevant(article, TERMS, "EN", 5)


def test_single_term_article_needs_topical_support(make_article) -> None:
    on_topic = make_article(title="Economy", full_text="economy economy grows")
    off_topic = make_article(title="Football", full_text="football football football economy")

    assert is_article_relevant(on_topic, TERMS, "EN", 1)
    assert not is_article_relevant(off_topic, TERMS, "EN", 2)


def test_filter_drops_irrelevant_and_keeps_terms(make_article) -> None:
    results = ResultSet(TERMS)
    keep = make_article(title="Economy", full_text="economy economy grows", link="https://x.com/keep")
    drop = make_article(
        title="Football", full_text="football football football economy", link="https://x.com/drop"
    )
    results.add(keep)
    results.add(drop)

    filtered = filter_irrelevant(results, TERMS, language="EN", sensitivity=1)

    assert filtered.terms == TERMS
    assert filtered["economy"] == [keep]


def test_empty_text_without_extractor_is_dropped(make_article) -> None:
    results = ResultSet(TERMS)
    results.add(make_article(full_text=""))

    assert filter_irrelevant(results, TERMS, "EN", 1).total() == 0


def test_extractor_fills_missing_text(make_article) -> None:
    results = ResultSet(TERMS)
    results.add(make_article(title="Economy", full_text="", link="https://x.com/a"))
    fetched: list[str] = []

    def extractor(link: str) -> str:
        fetched.append(link)
        return "economy economy grows"

    filtered = filter_irrelevant(results, TERMS, "EN", 1, extractor=extractor)

    assert fetched == ["https://x.com/a"]
    assert filtered["economy"][0].full_text == "economy economy grows"


def test_failed_extraction_drops_article(make_article) -> None:
    results = ResultSet(TERMS)
    results.add(make_article(full_text=""))

    def extractor(link: str) -> str:
        raise RuntimeError("browser crashed")

    assert filter_irrelevant(results, TERMS, "EN", 1, extractor=extractor).total() == 0
