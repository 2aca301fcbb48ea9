"""Exception taxonomy shared by the crawl engine and orchestration layer."""

from __future__ import annotations


class CrawlerError(Exception):
    """Base class for every error raised by news_crawler."""


class FetchError(CrawlerError):
    """A page could not be retrieved after exhausting retries."""

    def __init__(self, url: str, last_cause: BaseException | None = None) -> None:
        self.url = url
        self.last_cause = last_cause
        detail = f": {last_cause}" if last_cause is not None else ""
        super().__init__(f"Fetch failed for {url}{detail}")


class LaneFailure(CrawlerError):
    """An unhandled fault escaped one worker lane."""

    def __init__(self, lane: int, cause: BaseException) -> None:
        self.lane = lane
        self.cause = cause
        super().__init__(f"Lane {lane} crashed: {cause!r}")


class CycleAbortedError(CrawlerError):
    """The crawl cycle could not run at all (as opposed to finding nothing)."""


__all__ = ["CrawlerError", "CycleAbortedError", "FetchError", "LaneFailure"]
