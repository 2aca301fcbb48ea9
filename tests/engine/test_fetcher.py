from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from news_crawler.config import FetchConfig
from news_crawler.config.models import DEFAULT_USER_AGENT
from news_crawler.engine.fetcher import Fetcher
from news_crawler.errors import FetchError


class ZeroRandom:
    def uniform(self, low: float, high: float) -> float:
        return low


def _fetcher(transport: httpx.MockTransport, clock, **config) -> Fetcher:
    return Fetcher(
        fetch_config=FetchConfig(**config),
        transport=transport,
        sleep=clock.sleep,
        rng=ZeroRandom(),
        now=clock.now,
    )


def test_fetch_sends_browser_user_agent(clock) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="<html>ok</html>")

    with _fetcher(httpx.MockTransport(handler), clock) as fetcher:
        response = fetcher.fetch("https://example.com/")

    assert response.status_code == 200
    assert response.text == "<html>ok</html>"
    assert seen[0].headers["User-Agent"] == DEFAULT_USER_AGENT
    assert clock.sleeps == []


def test_fetch_retries_with_exponential_backoff(clock) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, text="recovered")

    with _fetcher(httpx.MockTransport(handler), clock) as fetcher:
        response = fetcher.fetch("https://example.com/")

    assert response.text == "recovered"
    assert calls["count"] == 3
    # 0.5 * 5**0 * 20, then 0.5 * 5**1 * 20
    assert clock.sleeps == [pytest.approx(10.0), pytest.approx(50.0)]


def test_fetch_gives_up_after_retry_budget(clock) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("refused", request=request)

    with _fetcher(httpx.MockTransport(handler), clock) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            fetcher.fetch("https://down.example.com/")

    assert calls["count"] == 4
    assert excinfo.value.url == "https://down.example.com/"
    assert isinstance(excinfo.value.last_cause, httpx.ConnectError)
    assert clock.sleeps == [pytest.approx(10.0), pytest.approx(50.0), pytest.approx(250.0)]


def test_not_found_is_a_failure(clock) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))

    with _fetcher(transport, clock, max_retries=0) as fetcher:
        with pytest.raises(FetchError):
            fetcher.fetch("https://example.com/missing")

    assert clock.sleeps == []


def test_retry_abandoned_when_backoff_passes_deadline(clock) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(500)

    deadline = clock.now() + timedelta(seconds=5)
    with _fetcher(httpx.MockTransport(handler), clock) as fetcher:
        with pytest.raises(FetchError):
            fetcher.fetch("https://example.com/", deadline=deadline)

    assert calls["count"] == 1
    assert clock.sleeps == []


def test_jitter_delay_is_slept_before_request(clock) -> None:
    class FixedRandom:
        def uniform(self, low: float, high: float) -> float:
            return 0.25

    fetcher = Fetcher(
        fetch_config=FetchConfig(),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="ok")),
        sleep=clock.sleep,
        rng=FixedRandom(),
        now=clock.now,
    )
    try:
        fetcher.fetch("https://example.com/")
    finally:
        fetcher.close()

    assert clock.sleeps == [0.25]
