"""Near-duplicate removal within each term's article list."""

from __future__ import annotations

from typing import Callable

import structlog
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from ..models import Article, ResultSet
from .text import tokenize

SimilarityFn = Callable[[str, str], float]


def text_similarity(first: str, second: str, language: str = "ES") -> float:
    """Cosine similarity of TF-IDF vectors over cleaned, stopword-free text."""

    documents = [" ".join(tokenize(first, language)), " ".join(tokenize(second, language))]
    if not all(documents):
        return 0.0
    vectorizer = TfidfVectorizer(token_pattern=r"(?u)\b\w+\b")
    try:
        matrix = vectorizer.fit_transform(documents)
    except ValueError:
        # empty vocabulary
        return 0.0
    return float(cosine_similarity(matrix[0:1], matrix[1:2])[0][0])


class SimilarityDeduper:
    """Drop the weaker article of every pair whose texts are too similar."""

    def __init__(
        self,
        language: str = "ES",
        threshold: float = 0.85,
        similarity: SimilarityFn | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.language = language
        self.threshold = threshold
        self._similarity = similarity or (
            lambda first, second: text_similarity(first, second, self.language)
        )
        self.logger = logger or structlog.get_logger("news_crawler.similarity")

    def dedupe(self, results: ResultSet) -> ResultSet:
        deduped = ResultSet()
        for term, articles in results.items():
            kept = self.dedupe_articles(articles)
            if len(kept) != len(articles):
                self.logger.info(
                    "duplicates_removed", term=term, removed=len(articles) - len(kept)
                )
            deduped.replace_term(term, kept)
        return deduped

    def dedupe_articles(self, articles: list[Article]) -> list[Article]:
        """O(n²) scan; on a duplicate pair the lower score goes, ties drop the later one."""

        removed: set[int] = set()
        for i in range(len(articles)):
            if i in removed:
                continue
            for j in range(len(articles)):
                if j == i or j in removed:
                    continue
                similarity = self._similarity(articles[i].full_text, articles[j].full_text)
                if similarity < self.threshold:
                    continue
                loser = self._loser(articles, i, j)
                removed.add(loser)
                if loser == i:
                    break
        return [article for index, article in enumerate(articles) if index not in removed]

    @staticmethod
    def _loser(articles: list[Article], i: int, j: int) -> int:
        if articles[i].score != articles[j].score:
            return i if articles[i].score < articles[j].score else j
        return max(i, j)


__all__ = ["SimilarityDeduper", "SimilarityFn", "text_similarity"]
