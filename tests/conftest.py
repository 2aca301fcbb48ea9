"""Shared fixtures: deterministic clocks, config builders and a mocked web."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterable, Mapping

import httpx
import pytest

from news_crawler.config import ConfigLocator, ConfigRepository, CrawlConfig
from news_crawler.models import Article

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Wall clock and monotonic clock that only move when slept on."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self._start = start
        self._elapsed = 0.0
        self._lock = Lock()
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        with self._lock:
            return self._start + timedelta(seconds=self._elapsed)

    def monotonic(self) -> float:
        with self._lock:
            return self._elapsed

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self._elapsed += max(0.0, seconds)

    def advance(self, seconds: float) -> None:
        with self._lock:
            self._elapsed += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def crawl_config() -> Callable[..., CrawlConfig]:
    def _builder(**overrides: Any) -> CrawlConfig:
        base: dict[str, Any] = {
            "terms": ["economy", "election"],
            "websites": ["https://example.com"],
            "max_depth": 2,
            "lanes": 2,
            "collection_timeout": 1.0,
            "fetch": {"max_retries": 0, "initial_delay": 0.0},
            "text_analysis": {"language": "EN", "relevance_filter": False},
        }
        base.update(overrides)
        return CrawlConfig.model_validate(base)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("NEWS_CRAWLER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)


def render_page(
    title: str = "",
    body: str = "",
    date: str | None = None,
    links: Iterable[str] = (),
) -> str:
    meta = f'<meta property="article:published_time" content="{date}">' if date else ""
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    return (
        f"<html><head><title>{title}</title>{meta}</head>"
        f"<body><h1>{title}</h1><article><p>{body}</p></article>"
        f"<nav>{anchors}</nav></body></html>"
    )


@pytest.fixture
def make_page() -> Callable[..., str]:
    return render_page


class MockWeb:
    """Serve a fixed mapping ``url -> html | status`` through ``httpx.MockTransport``."""

    def __init__(self, pages: Mapping[str, str | int]) -> None:
        self.pages = dict(pages)
        self.requests: list[httpx.Request] = []
        self._lock = Lock()
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        page = self.pages.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="missing")
        if isinstance(page, int):
            return httpx.Response(page, text="error")
        return httpx.Response(200, text=page, headers={"Content-Type": "text/html"})

    @property
    def requested_urls(self) -> list[str]:
        with self._lock:
            return [str(request.url) for request in self.requests]


@pytest.fixture
def mock_web() -> Callable[[Mapping[str, str | int]], MockWeb]:
    return MockWeb


@pytest.fixture
def make_article() -> Callable[..., Article]:
    def _builder(**overrides: Any) -> Article:
        base: dict[str, Any] = {
            "title": "Markets rally",
            "link": "https://news.example.com/markets",
            "full_text": "The economy grew as markets rallied.",
            "date": "2024-03-15T10:00:00Z",
            "score": 1,
            "term": "economy",
        }
        base.update(overrides)
        return Article(**base)

    return _builder
