"""Depth-first, deadline-bound crawl of a single seed site."""

from __future__ import annotations

from datetime import datetime
from threading import Event
from typing import Callable, Sequence

import structlog

from ..errors import FetchError
from ..models import Article, CrawlBudget, ResultSet, utc_now
from .dates import DateRecognizer
from .dedup import VisitedLinkSet
from .fetcher import Fetcher
from .parser import PageParser
from .scope import is_in_scope, normalize_url
from .scoring import TermScorer


class SiteCrawler:
    """Walk one site depth-first, recording recent in-scope pages that match the vocabulary.

    The traversal uses an explicit stack of ``(url, depth)`` pairs. Children
    are pushed in reverse so they pop in link-discovery order, which keeps the
    visiting order identical to a recursive walk. Every step re-checks the
    budget, the stop event and the shared visited set.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        dates: DateRecognizer | None = None,
        parser: PageParser | None = None,
        include_same_host: bool = False,
        now: Callable[[], datetime] = utc_now,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.dates = dates or DateRecognizer()
        self.parser = parser or PageParser()
        self.include_same_host = include_same_host
        self._now = now
        self.logger = logger or structlog.get_logger("news_crawler.crawler")

    def crawl(
        self,
        site: str,
        terms: Sequence[str],
        visited: VisitedLinkSet,
        budget: CrawlBudget,
        stop: Event | None = None,
    ) -> ResultSet:
        results = ResultSet.empty(terms)
        seed = normalize_url(site)
        if seed is None:
            self.logger.warning("crawl_invalid_seed", site=site)
            return results
        scorer = TermScorer(terms)
        log = self.logger.bind(site=seed)
        stack: list[tuple[str, int]] = [(seed, 0)]
        pages = 0
        while stack:
            if budget.expired(self._now()) or (stop is not None and stop.is_set()):
                log.info("crawl_interrupted", pages=pages, pending=len(stack))
                break
            url, depth = stack.pop()
            if depth > budget.max_depth:
                continue
            if not visited.add_if_absent(url):
                continue
            try:
                response = self.fetcher.fetch(url, deadline=budget.deadline)
            except FetchError as exc:
                log.warning("page_fetch_failed", url=url, error=str(exc.last_cause))
                continue
            pages += 1
            try:
                children = self._process_page(seed, url, response.text, scorer, results, log)
            except Exception as exc:  # noqa: BLE001
                log.error("page_processing_failed", url=url, error=str(exc))
                continue
            if depth >= budget.max_depth or budget.expired(self._now()):
                continue
            stack.extend((link, depth + 1) for link in reversed(children) if link not in visited)
        log.debug("crawl_finished", pages=pages, articles=results.total())
        return results

    def _process_page(
        self,
        seed: str,
        url: str,
        html: str,
        scorer: TermScorer,
        results: ResultSet,
        log: structlog.BoundLogger,
    ) -> list[str]:
        """Record ``url`` when it qualifies and return its in-scope links."""

        page = self.parser.extract(html)
        outcome = scorer.score(f"{page.title} {page.text}")
        if (
            outcome.score > 0
            and self.dates.is_recent(page.date)
            and is_in_scope(seed, url, self.include_same_host)
        ):
            results.add(
                Article(
                    title=page.title,
                    link=url,
                    full_text=page.text,
                    date=page.date,
                    score=outcome.score,
                    term=outcome.dominant_term,
                )
            )
            log.info("article_recorded", url=url, term=outcome.dominant_term, score=outcome.score)
        return [
            link
            for link in self.parser.extract_links(html, url)
            if is_in_scope(seed, link, self.include_same_host)
        ]


__all__ = ["SiteCrawler"]
