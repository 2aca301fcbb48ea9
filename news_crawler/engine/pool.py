"""Parallel lanes crawling disjoint site chunks under one wall-clock deadline."""

from __future__ import annotations

import os
import queue
import random
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime
from threading import Event
from typing import Callable, Iterable, Literal, Sequence

import structlog

from ..errors import LaneFailure
from ..models import CrawlBudget, ResultSet, utc_now
from .crawler import SiteCrawler
from .dedup import VisitedLinkSet

LaneEventKind = Literal["progress", "result"]


@dataclass(slots=True)
class LaneEvent:
    """Snapshot message posted by a lane to the coordinator."""

    lane: int
    kind: LaneEventKind
    results: ResultSet


def partition_sites(
    sites: Iterable[str], lanes: int, rng: random.Random | None = None
) -> list[list[str]]:
    """Deduplicate, shuffle and deal sites round-robin; empty lanes are dropped."""

    if lanes < 1:
        raise ValueError("lanes must be >= 1")
    unique = list(dict.fromkeys(sites))
    (rng or random.Random()).shuffle(unique)
    chunks: list[list[str]] = [[] for _ in range(lanes)]
    for index, site in enumerate(unique):
        chunks[index % lanes].append(site)
    return [chunk for chunk in chunks if chunk]


class WorkPool:
    """Run ``SiteCrawler`` over many sites in parallel lanes and merge what they find.

    The coordinator waits for every lane or the deadline, whichever comes
    first, then grants a bounded collection pass. Afterwards it signals the
    stop event and merges the latest snapshot each lane posted, so a crashed
    or hung lane still contributes its partial results.
    """

    def __init__(
        self,
        crawler: SiteCrawler,
        lanes: int | None = None,
        max_depth: int = 3,
        collection_timeout: float = 60.0,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = utc_now,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.crawler = crawler
        self.lanes = lanes or os.cpu_count() or 1
        self.max_depth = max_depth
        self.collection_timeout = collection_timeout
        self._rng = rng or random.Random()
        self._now = now
        self.logger = logger or structlog.get_logger("news_crawler.pool")

    def run(
        self,
        sites: Sequence[str],
        terms: Sequence[str],
        deadline: datetime,
        visited: VisitedLinkSet | None = None,
    ) -> ResultSet:
        budget = CrawlBudget(deadline=deadline, max_depth=self.max_depth)
        visited = visited if visited is not None else VisitedLinkSet()
        merged = ResultSet.empty(terms)
        if budget.expired(self._now()):
            self.logger.info("pool_skipped", reason="deadline_passed")
            return merged
        chunks = partition_sites(sites, self.lanes, self._rng)
        if not chunks:
            self.logger.info("pool_skipped", reason="no_sites")
            return merged

        events: queue.Queue[LaneEvent] = queue.Queue()
        stop = Event()
        executor = ThreadPoolExecutor(max_workers=len(chunks), thread_name_prefix="lane")
        futures: dict[Future, int] = {}
        self.logger.info("pool_started", lanes=len(chunks), sites=sum(map(len, chunks)))
        try:
            for lane, chunk in enumerate(chunks):
                future = executor.submit(
                    self._run_lane, lane, chunk, terms, visited, budget, stop, events
                )
                futures[future] = lane
            remaining = budget.remaining(self._now()).total_seconds()
            _, pending = wait(futures, timeout=remaining)
            if pending:
                self.logger.info("pool_deadline_reached", pending_lanes=len(pending))
                _, pending = wait(pending, timeout=self.collection_timeout)
            for future in pending:
                self.logger.warning("lane_unfinished", lane=futures[future])
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

        for future, lane in futures.items():
            if future.done() and not future.cancelled() and future.exception() is not None:
                failure = LaneFailure(lane, future.exception())
                self.logger.error("lane_failed", lane=lane, error=str(failure))

        for lane, snapshot in sorted(self._drain(events).items()):
            merged.merge(snapshot)
        self.logger.info("pool_finished", articles=merged.total(), visited=len(visited))
        return merged

    # ------------------------------------------------------------------
    def _run_lane(
        self,
        lane: int,
        sites: Sequence[str],
        terms: Sequence[str],
        visited: VisitedLinkSet,
        budget: CrawlBudget,
        stop: Event,
        events: "queue.Queue[LaneEvent]",
    ) -> None:
        accumulated = ResultSet.empty(terms)
        for site in sites:
            if budget.expired(self._now()) or stop.is_set():
                break
            try:
                found = self.crawler.crawl(site, terms, visited, budget, stop)
            except Exception as exc:  # noqa: BLE001
                self.logger.error("site_crawl_failed", lane=lane, site=site, error=str(exc))
                continue
            accumulated.merge(found)
            events.put(LaneEvent(lane, "progress", accumulated.copy()))
        events.put(LaneEvent(lane, "result", accumulated))
        self.logger.debug("lane_finished", lane=lane, articles=accumulated.total())

    @staticmethod
    def _drain(events: "queue.Queue[LaneEvent]") -> dict[int, ResultSet]:
        latest: dict[int, ResultSet] = {}
        finished: set[int] = set()
        while True:
            try:
                event = events.get_nowait()
            except queue.Empty:
                break
            if event.lane in finished:
                continue
            latest[event.lane] = event.results
            if event.kind == "result":
                finished.add(event.lane)
        return latest


__all__ = ["LaneEvent", "WorkPool", "partition_sites"]
