"""Ordered politeness steps plus the per-URL retry ledger they share."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Literal

import httpx

from ...config.models import FetchConfig

GiveUpReason = Literal["exhausted", "deadline"]


@dataclass
class RequestDirective:
    """Headers, timeout and pre-request pause agreed on by the steps."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    delay: float | None = None


@dataclass
class PolitenessContext:
    """Retry ledger for one URL.

    ``attempt`` is the number of the next attempt; ``backoff`` is the pause
    owed before it. ``gave_up`` is set once the chain refuses another attempt.
    """

    url: str
    fetch_config: FetchConfig
    deadline: datetime | None = None
    attempt: int = 1
    max_attempts: int = 1
    backoff: float = 0.0
    last_error: Exception | None = None
    gave_up: GiveUpReason | None = None

    def backoff_overruns(self, now: datetime) -> bool:
        if self.deadline is None:
            return False
        return now + timedelta(seconds=self.backoff) >= self.deadline


class Strategy:
    """One politeness step. Subclasses override only the hooks they use."""

    def before_request(self, context: PolitenessContext, directive: RequestDirective) -> None:
        return None

    def after_success(self, context: PolitenessContext, response: httpx.Response) -> None:
        return None

    def after_failure(
        self,
        context: PolitenessContext,
        response: httpx.Response | None,
        error: Exception | None,
    ) -> None:
        return None


class PolitenessChain:
    """Run the steps around every attempt and rule on whether another one is allowed."""

    def __init__(self, strategies: Iterable[Strategy] = ()) -> None:
        self.strategies = list(strategies)

    def prepare(self, context: PolitenessContext) -> RequestDirective:
        directive = RequestDirective()
        for strategy in self.strategies:
            strategy.before_request(context, directive)
        return directive

    def notify_success(self, context: PolitenessContext, response: httpx.Response) -> None:
        context.last_error = None
        for strategy in self.strategies:
            strategy.after_success(context, response)

    def notify_failure(
        self,
        context: PolitenessContext,
        response: httpx.Response | None,
        error: Exception | None = None,
    ) -> None:
        if error is None and response is not None:
            error = RuntimeError(f"Unexpected status {response.status_code}")
        context.last_error = error
        for strategy in self.strategies:
            strategy.after_failure(context, response, error)

    def next_delay(self, context: PolitenessContext, now: datetime) -> float | None:
        """Pause owed before the next attempt, or ``None`` when the fetch should stop.

        Stops with ``"exhausted"`` once the attempt ceiling is passed and with
        ``"deadline"`` when the pending backoff would end at or after the deadline.
        """

        if context.attempt > context.max_attempts:
            context.gave_up = "exhausted"
            return None
        if context.backoff_overruns(now):
            context.gave_up = "deadline"
            return None
        return context.backoff


__all__ = [
    "GiveUpReason",
    "PolitenessChain",
    "PolitenessContext",
    "RequestDirective",
    "Strategy",
]
