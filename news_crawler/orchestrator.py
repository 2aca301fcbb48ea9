"""Cycle orchestrator wiring together crawl, merge, filtering, ranking and persistence."""

from __future__ import annotations

import os
import random
from datetime import datetime, timedelta, tzinfo
from typing import Callable

import structlog

from .analysis import (
    FullTextExtractor,
    SimilarityDeduper,
    dominant_terms,
    extract_top_articles,
    filter_irrelevant,
)
from .config import CrawlConfig
from .engine import (
    DateRecognizer,
    Fetcher,
    RateLimiter,
    SiteCrawler,
    VisitedLinkSet,
    WorkPool,
    normalize_url,
)
from .errors import CycleAbortedError
from .infra import ResultStore
from .models import CrawlReport, ResultSet, utc_now

REPORT_LEAD = timedelta(minutes=5)
PER_TERM_SITE_BUDGET = timedelta(milliseconds=150)


class CrawlOrchestrator:
    """Central coordinator running one crawl cycle end to end."""

    def __init__(
        self,
        config: CrawlConfig,
        store: ResultStore | None = None,
        pool: WorkPool | None = None,
        fetcher: Fetcher | None = None,
        extractor: FullTextExtractor | None = None,
        now: Callable[[], datetime] = utc_now,
        tz: tzinfo | None = None,
        rng: random.Random | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.extractor = extractor
        self._now = now
        self.tz = tz
        self.logger = logger or structlog.get_logger("news_crawler.orchestrator")
        self._owns_fetcher = fetcher is None and pool is None
        if pool is None:
            fetcher = fetcher or Fetcher(
                config.fetch,
                RateLimiter(config.rate_limit.capacity, config.rate_limit.refill_per_ms),
                rng=rng,
                now=now,
            )
            crawler = SiteCrawler(
                fetcher,
                dates=DateRecognizer(now=now),
                include_same_host=config.include_same_host,
                now=now,
            )
            pool = WorkPool(
                crawler,
                lanes=config.lanes,
                max_depth=config.max_depth,
                collection_timeout=config.collection_timeout,
                rng=rng,
                now=now,
            )
        self.fetcher = fetcher
        self.pool = pool

    def close(self) -> None:
        if self._owns_fetcher and self.fetcher is not None:
            self.fetcher.close()

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------
    def next_report_time(self, now: datetime) -> datetime | None:
        """Next report moment (configured time minus the lead), strictly after ``now``."""

        clock = self.config.report_clock()
        if clock is None:
            return None
        local_now = now.astimezone(self.tz)
        candidate = datetime.combine(local_now.date(), clock, tzinfo=local_now.tzinfo) - REPORT_LEAD
        if candidate <= local_now:
            candidate += timedelta(days=1)
        return candidate

    def compute_deadline(self, now: datetime, report_at: datetime | None = None) -> datetime:
        if self.config.cycle_seconds is not None:
            deadline = now + timedelta(seconds=self.config.cycle_seconds)
        else:
            lanes = self.config.lanes or os.cpu_count() or 1
            chunked_sites = len(self.config.websites) // lanes
            deadline = now + chunked_sites * len(self.config.terms) * PER_TERM_SITE_BUDGET
        if report_at is not None and report_at < deadline:
            deadline = report_at
        return deadline

    @staticmethod
    def is_report_due(report_at: datetime | None, now: datetime) -> bool:
        if report_at is None:
            return True
        return report_at <= now < report_at + REPORT_LEAD

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------
    def run_cycle(
        self, deadline: datetime | None = None, finalize: bool | None = None
    ) -> CrawlReport:
        """Crawl until ``deadline`` and, when the report is due, filter and rank.

        Raises ``CycleAbortedError`` only when the cycle cannot run at all;
        every failure inside the crawl degrades to fewer results instead.
        """

        terms = list(self.config.terms)
        sites = list(self.config.websites)
        if not terms:
            raise CycleAbortedError("No terms configured")
        if not sites:
            raise CycleAbortedError("No websites configured")

        started = self._now()
        report_at = self.next_report_time(started)
        deadline = deadline or self.compute_deadline(started, report_at)
        log = self.logger.bind(cycle_started=started.isoformat())
        log.info("cycle_started", deadline=deadline.isoformat(), sites=len(sites), terms=len(terms))

        previous, seen_links = self._load_previous(terms)
        visited = VisitedLinkSet(
            link for link in (normalize_url(raw) for raw in seen_links) if link is not None
        )
        fresh = self.pool.run(sites, terms, deadline, visited)
        combined = previous.merge(fresh)
        log.info("cycle_crawled", new_articles=fresh.total(), total_articles=combined.total())

        final = finalize if finalize is not None else self.is_report_due(report_at, self._now())
        report = self._finalize(combined, terms) if final else CrawlReport(combined, final=False)

        if self.store is not None:
            try:
                self.store.save(report)
            except OSError as exc:
                raise CycleAbortedError(f"Could not persist results: {exc}") from exc
        log.info(
            "cycle_finished",
            final=report.final,
            articles=report.results.total(),
            top=len(report.top_articles),
            most_common_term=report.most_common_term,
        )
        return report

    def run_until_report(self, max_cycles: int | None = None) -> CrawlReport:
        """Repeat cycles, accumulating into the store, until a final report is produced."""

        cycles = 0
        while True:
            report = self.run_cycle()
            cycles += 1
            if report.final or (max_cycles is not None and cycles >= max_cycles):
                return report

    # ------------------------------------------------------------------
    def _load_previous(self, terms: list[str]) -> tuple[ResultSet, set[str]]:
        if self.store is None:
            return ResultSet.empty(terms), set()
        return self.store.load(terms)

    def _finalize(self, results: ResultSet, terms: list[str]) -> CrawlReport:
        analysis = self.config.text_analysis
        if analysis.relevance_filter:
            results = filter_irrelevant(
                results,
                terms,
                language=analysis.language,
                sensitivity=analysis.topic_sensitivity,
                extractor=self.extractor,
            )
        deduper = SimilarityDeduper(language=analysis.language, threshold=analysis.max_similarity)
        results = deduper.dedupe(results)
        return CrawlReport(
            results=results,
            top_articles=extract_top_articles(results),
            most_common_term=dominant_terms(results),
        )


__all__ = ["CrawlOrchestrator", "PER_TERM_SITE_BUDGET", "REPORT_LEAD"]
