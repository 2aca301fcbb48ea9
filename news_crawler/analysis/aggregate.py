"""Top-article and dominant-term selection over a finished result set."""

from __future__ import annotations

import math

from ..models import Article, ResultSet


def _icbrt(value: int) -> int:
    root = round(value ** (1 / 3))
    while root**3 > value:
        root -= 1
    while (root + 1) ** 3 <= value:
        root += 1
    return root


def extract_top_articles(results: ResultSet) -> list[Article]:
    """The smaller of the top-``sqrt(n)`` set and the 80%-of-total-score set.

    Equal sizes keep the cumulative-score set.
    """

    ranked = sorted(results.articles(), key=lambda article: article.score, reverse=True)
    by_count = ranked[: math.isqrt(len(ranked))]

    threshold = math.floor(0.8 * sum(article.score for article in ranked))
    by_score: list[Article] = []
    for article in ranked:
        if threshold <= 0:
            break
        by_score.append(article)
        threshold -= article.score

    return by_count if len(by_count) < len(by_score) else by_score


def dominant_terms(results: ResultSet) -> str:
    """Label of the term(s) with the most articles, ``/``-joined when tied."""

    total = results.total()
    if total == 0:
        return ""
    if total == 1:
        return results.articles()[0].term

    counts = {term: len(articles) for term, articles in results.items() if articles}
    best = max(counts.values())
    leaders = [term for term, count in counts.items() if count == best]
    if len(leaders) == 1:
        return leaders[0]
    leaders.sort(key=lambda term: max(article.score for article in results[term]), reverse=True)
    return "/".join(leaders[: _icbrt(total)])


__all__ = ["dominant_terms", "extract_top_articles"]
