"""Core data types flowing between crawl, merge, filter and aggregation stages."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator, Mapping

SUMMARY_PLACEHOLDER = "placeholder"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Article:
    """A page that matched the vocabulary, was recent and was in scope."""

    title: str
    link: str
    full_text: str
    date: str
    score: int
    term: str
    summary: str = SUMMARY_PLACEHOLDER

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "fullText": self.full_text,
            "date": self.date,
            "score": self.score,
            "term": self.term,
            "summary": self.summary,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Article":
        return cls(
            title=str(payload.get("title") or ""),
            link=str(payload.get("link") or ""),
            full_text=str(payload.get("fullText") or ""),
            date=str(payload.get("date") or ""),
            score=int(payload.get("score") or 0),
            term=str(payload.get("term") or ""),
            summary=str(payload.get("summary") or SUMMARY_PLACEHOLDER),
        )


class ResultSet:
    """Ordered mapping ``term -> [Article]`` with every configured term present."""

    __slots__ = ("_buckets",)

    def __init__(self, terms: Iterable[str] = ()) -> None:
        self._buckets: dict[str, list[Article]] = {}
        for term in terms:
            self._buckets.setdefault(term, [])

    @classmethod
    def empty(cls, terms: Iterable[str]) -> "ResultSet":
        return cls(terms)

    # ------------------------------------------------------------------
    def add(self, article: Article) -> None:
        self._buckets.setdefault(article.term, []).append(article)

    def extend(self, term: str, articles: Iterable[Article]) -> None:
        self._buckets.setdefault(term, []).extend(articles)

    def merge(self, other: "ResultSet") -> "ResultSet":
        """Union ``other`` into this set, per term; returns ``self``."""

        for term, articles in other.items():
            self.extend(term, articles)
        return self

    def copy(self) -> "ResultSet":
        clone = ResultSet()
        for term, articles in self._buckets.items():
            clone._buckets[term] = list(articles)
        return clone

    def replace_term(self, term: str, articles: Iterable[Article]) -> None:
        self._buckets[term] = list(articles)

    # ------------------------------------------------------------------
    @property
    def terms(self) -> list[str]:
        return list(self._buckets)

    def items(self) -> Iterator[tuple[str, list[Article]]]:
        return iter(self._buckets.items())

    def get(self, term: str) -> list[Article]:
        return list(self._buckets.get(term, []))

    def articles(self) -> list[Article]:
        return [article for bucket in self._buckets.values() for article in bucket]

    def links(self) -> set[str]:
        return {article.link for article in self.articles() if article.link}

    def total(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __getitem__(self, term: str) -> list[Article]:
        return self._buckets[term]

    def __contains__(self, term: object) -> bool:
        return term in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self._buckets == other._buckets

    def __repr__(self) -> str:
        counts = ", ".join(f"{term}={len(bucket)}" for term, bucket in self._buckets.items())
        return f"ResultSet({counts})"

    # ------------------------------------------------------------------
    def to_payload(self) -> dict[str, list[dict[str, Any]]]:
        return {
            term: [article.to_payload() for article in bucket]
            for term, bucket in self._buckets.items()
        }

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], terms: Iterable[str] = ()
    ) -> "ResultSet":
        """Rebuild from stored JSON; with ``terms``, buckets outside that vocabulary are dropped."""

        wanted = list(terms)
        result = cls(wanted)
        for term, bucket in payload.items():
            if not isinstance(bucket, list) or (wanted and term not in result):
                continue
            result.extend(
                term,
                (Article.from_payload(item) for item in bucket if isinstance(item, Mapping)),
            )
        return result


@dataclass(frozen=True, slots=True)
class CrawlBudget:
    """Wall-clock deadline and recursion bound for one crawl invocation."""

    deadline: datetime
    max_depth: int = 3

    def __post_init__(self) -> None:
        if self.deadline.tzinfo is None:
            object.__setattr__(self, "deadline", self.deadline.replace(tzinfo=timezone.utc))
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")

    def expired(self, now: datetime) -> bool:
        return now >= self.deadline

    def remaining(self, now: datetime) -> timedelta:
        return max(self.deadline - now, timedelta(0))

    def with_depth(self, max_depth: int) -> "CrawlBudget":
        return replace(self, max_depth=max_depth)


@dataclass(slots=True)
class CrawlReport:
    """Outcome of one cycle in the shape consumed by reporting collaborators."""

    results: ResultSet
    top_articles: list[Article] = field(default_factory=list)
    most_common_term: str = ""
    final: bool = True

    def to_payload(self) -> dict[str, Any]:
        return {
            "results": self.results.to_payload(),
            "topArticles": [article.to_payload() for article in self.top_articles],
            "mostCommonTerm": self.most_common_term,
        }

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], terms: Iterable[str] = ()
    ) -> "CrawlReport":
        raw_results = payload.get("results")
        results = ResultSet.from_payload(
            raw_results if isinstance(raw_results, Mapping) else {}, terms
        )
        top = [
            Article.from_payload(item)
            for item in payload.get("topArticles") or []
            if isinstance(item, Mapping)
        ]
        return cls(
            results=results,
            top_articles=top,
            most_common_term=str(payload.get("mostCommonTerm") or ""),
        )


__all__ = [
    "Article",
    "CrawlBudget",
    "CrawlReport",
    "ResultSet",
    "SUMMARY_PLACEHOLDER",
    "utc_now",
]
