"""HTTP fetching with politeness strategy integration."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict

import httpx
import structlog

from ..config.models import FetchConfig
from ..errors import FetchError
from ..models import utc_now
from .politeness import strategies
from .politeness.chain import PolitenessChain, PolitenessContext
from .rate_limiter import RateLimiter


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """Coordinate request execution and the politeness strategy chain."""

    def __init__(
        self,
        fetch_config: FetchConfig | None = None,
        limiter: RateLimiter | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = utc_now,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetch_config = fetch_config or FetchConfig()
        self.limiter = limiter
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._now = now
        self.logger = logger or structlog.get_logger("news_crawler.fetcher")
        self._client = httpx.Client(
            follow_redirects=True,
            timeout=self.fetch_config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(self, url: str, deadline: datetime | None = None) -> FetchResponse:
        context, chain = self._build_chain(url, deadline)
        while True:
            directive = chain.prepare(context)
            if directive.delay:
                self._sleep(directive.delay)
            try:
                response = self._client.get(
                    url,
                    headers=directive.headers,
                    timeout=directive.timeout or self.fetch_config.timeout,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                self.logger.warning("fetch_error", url=url, attempt=context.attempt, error=str(exc))
                chain.notify_failure(context, None, exc)
            else:
                if response.is_success:
                    chain.notify_success(context, response)
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )
                self.logger.warning(
                    "fetch_bad_status",
                    url=url,
                    attempt=context.attempt,
                    status=response.status_code,
                )
                chain.notify_failure(context, response)

            delay = chain.next_delay(context, self._now())
            if delay is None:
                break
            if delay:
                self._sleep(delay)

        if context.gave_up == "deadline":
            self.logger.info("fetch_retry_abandoned", url=url, backoff=context.backoff)
        raise FetchError(url, context.last_error) from context.last_error

    # ------------------------------------------------------------------
    def _build_chain(
        self, url: str, deadline: datetime | None
    ) -> tuple[PolitenessContext, PolitenessChain]:
        return strategies.build_chain(
            url, self.fetch_config, self.limiter, rng=self._rng, deadline=deadline
        )


__all__ = ["Fetcher", "FetchResponse"]
