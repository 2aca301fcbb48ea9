"""Concrete politeness strategies used by the chain."""

from __future__ import annotations

import random
from datetime import datetime

import httpx

from ...config.models import FetchConfig
from ..rate_limiter import RateLimiter
from .chain import PolitenessChain, PolitenessContext, RequestDirective, Strategy


class RateLimitStrategy(Strategy):
    """Take one token from the shared bucket before every attempt."""

    def __init__(self, limiter: RateLimiter | None) -> None:
        self.limiter = limiter

    def before_request(self, context: PolitenessContext, directive: RequestDirective) -> None:
        if self.limiter is not None:
            self.limiter.acquire(1)


class JitterStrategy(Strategy):
    """Random delay in ``[0, initial_delay)`` to desynchronise lanes."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def before_request(self, context: PolitenessContext, directive: RequestDirective) -> None:
        upper = context.fetch_config.initial_delay
        if upper <= 0:
            return
        directive.delay = self.rng.uniform(0, upper)


class UserAgentStrategy(Strategy):
    """Label every request with a browser user agent and the fixed timeout."""

    def before_request(self, context: PolitenessContext, directive: RequestDirective) -> None:
        directive.headers.setdefault("User-Agent", context.fetch_config.user_agent)
        directive.timeout = context.fetch_config.timeout


class BackoffStrategy(Strategy):
    """Expose the retry ceiling and compute exponential backoff after failures."""

    def before_request(self, context: PolitenessContext, directive: RequestDirective) -> None:
        context.max_attempts = max(1, context.fetch_config.max_retries + 1)

    def after_success(self, context: PolitenessContext, response: httpx.Response) -> None:
        context.attempt = 1
        context.backoff = 0.0

    def after_failure(
        self, context: PolitenessContext, response: httpx.Response | None, error: Exception | None
    ) -> None:
        context.backoff = context.fetch_config.backoff(context.attempt - 1)
        context.attempt += 1


def build_chain(
    url: str,
    fetch_config: FetchConfig,
    limiter: RateLimiter | None,
    rng: random.Random | None = None,
    deadline: datetime | None = None,
) -> tuple[PolitenessContext, PolitenessChain]:
    """Utility to build a ready-to-use chain from config."""

    context = PolitenessContext(url=url, fetch_config=fetch_config, deadline=deadline)
    strategies: list[Strategy] = [
        BackoffStrategy(),
        RateLimitStrategy(limiter),
        JitterStrategy(rng),
        UserAgentStrategy(),
    ]
    return context, PolitenessChain(strategies)


__all__ = [
    "BackoffStrategy",
    "JitterStrategy",
    "RateLimitStrategy",
    "UserAgentStrategy",
    "build_chain",
]
