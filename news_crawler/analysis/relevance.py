"""Drop single-term articles whose text is not really about the vocabulary."""

from __future__ import annotations

from typing import Callable, Sequence

import structlog

from ..engine.scoring import is_text_relevant
from ..models import Article, ResultSet
from .topics import main_topics

FullTextExtractor = Callable[[str], str]
"""Hook returning the full article text for a link (e.g. a headless browser)."""

_logger = structlog.get_logger("news_crawler.relevance")


def is_article_relevant(
    article: Article, terms: Sequence[str], language: str, sensitivity: int
) -> bool:
    """Articles matching several terms are kept; single-term ones need topical support."""

    if article.score != 1:
        return True
    text = f"{article.title} {article.full_text}"
    vocabulary = {term.lower() for term in terms}
    topics = main_topics(text, language, sensitivity)
    on_topic = any(topic.lower() in vocabulary for topic in topics)
    return on_topic and is_text_relevant(text, terms)


def filter_irrelevant(
    results: ResultSet,
    terms: Sequence[str],
    language: str = "ES",
    sensitivity: int = 5,
    extractor: FullTextExtractor | None = None,
    logger: structlog.BoundLogger | None = None,
) -> ResultSet:
    log = logger or _logger
    filtered = ResultSet.empty(results.terms)
    for term, articles in results.items():
        for article in articles:
            if not article.full_text:
                if extractor is None:
                    log.info("article_without_text", link=article.link)
                    continue
                try:
                    article.full_text = extractor(article.link)
                except Exception as exc:  # noqa: BLE001
                    log.warning("full_text_extraction_failed", link=article.link, error=str(exc))
                    continue
            if not is_article_relevant(article, terms, language, sensitivity):
                log.info("irrelevant_article_discarded", link=article.link, term=term)
                continue
            filtered.extend(term, [article])
    return filtered


__all__ = ["FullTextExtractor", "filter_irrelevant", "is_article_relevant"]
