"""Pydantic models describing a crawl cycle configuration."""

from __future__ import annotations

from datetime import time
from enum import Enum
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class ScheduleType(str, Enum):
    """Scheduler modes for recurring cycles."""

    CRON = "cron"
    INTERVAL = "interval"
    ONCE = "once"


class ScheduleConfig(BaseModel):
    """When the crawl cycle should run."""

    type: ScheduleType = Field(default=ScheduleType.ONCE)
    value: Any = Field(
        default=None,
        description="Cron expression, interval seconds or ISO datetime, depending on type.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL and not isinstance(self.value, (int, float, dict)):
            raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
        if (
            self.type is ScheduleType.ONCE
            and self.value is not None
            and not isinstance(self.value, str)
        ):
            raise ValueError("Once schedule expects ISO datetime string or null")
        return self


class RateLimitConfig(BaseModel):
    """Token bucket shared by every lane of the process."""

    capacity: float = 1.0
    refill_per_ms: float = 0.001

    @model_validator(mode="after")
    def _validate_positive(self) -> "RateLimitConfig":
        if self.capacity <= 0:
            raise ValueError("capacity must be > 0")
        if self.refill_per_ms <= 0:
            raise ValueError("refill_per_ms must be > 0")
        return self


class FetchConfig(BaseModel):
    """HTTP retry, jitter and identity settings."""

    max_retries: int = 3
    initial_delay: float = Field(default=0.5, description="Seconds; upper bound of the jitter.")
    backoff_base: float = 5.0
    backoff_factor: float = 20.0
    timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT

    @model_validator(mode="after")
    def _validate_bounds(self) -> "FetchConfig":
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        return self

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before retrying after the zero-based ``attempt``."""

        return self.initial_delay * (self.backoff_base**attempt) * self.backoff_factor


class TextAnalysisConfig(BaseModel):
    """Post-crawl filtering settings."""

    language: Literal["EN", "ES"] = "ES"
    topic_sensitivity: int = 5
    max_similarity: float = 0.85
    relevance_filter: bool = True

    @field_validator("language", mode="before")
    @classmethod
    def _upper_language(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_ranges(self) -> "TextAnalysisConfig":
        if self.topic_sensitivity <= 0:
            raise ValueError("topic_sensitivity must be > 0")
        if not 0.0 < self.max_similarity <= 1.0:
            raise ValueError("max_similarity must be in (0, 1]")
        return self


class CrawlConfig(BaseModel):
    """Full definition of a crawl cycle."""

    terms: list[str] = Field(default_factory=list)
    websites: list[str] = Field(default_factory=list)
    max_depth: int = 3
    lanes: int | None = Field(default=None, description="Parallel lanes; CPU count when unset.")
    cycle_seconds: float | None = None
    collection_timeout: float = 60.0
    include_same_host: bool = False
    report_time: str | None = Field(default=None, description="Daily report time as HH:MM.")
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    text_analysis: TextAnalysisConfig = Field(default_factory=TextAnalysisConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)

    @field_validator("terms", mode="before")
    @classmethod
    def _normalise_terms(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if isinstance(value, str):
            value = [value]
        seen: list[str] = []
        for raw in value:
            term = str(raw).strip().lower()
            if term and term not in seen:
                seen.append(term)
        return seen

    @field_validator("websites", mode="before")
    @classmethod
    def _normalise_websites(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if isinstance(value, str):
            value = [value]
        seen: list[str] = []
        for raw in value:
            site = str(raw).strip()
            if not site:
                continue
            parsed = urlparse(site)
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                raise ValueError(f"Website must be an absolute http(s) URL: {site}")
            if site not in seen:
                seen.append(site)
        return seen

    @field_validator("report_time")
    @classmethod
    def _validate_report_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        try:
            hours, minutes = (int(part) for part in text.split(":"))
            time(hours, minutes)
        except ValueError as exc:
            raise ValueError("report_time must be HH:MM") from exc
        return f"{hours:02d}:{minutes:02d}"

    @model_validator(mode="after")
    def _validate_limits(self) -> "CrawlConfig":
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.lanes is not None and self.lanes < 1:
            raise ValueError("lanes must be >= 1")
        if self.cycle_seconds is not None and self.cycle_seconds <= 0:
            raise ValueError("cycle_seconds must be > 0")
        if self.collection_timeout < 0:
            raise ValueError("collection_timeout must be >= 0")
        return self

    def report_clock(self) -> time | None:
        if self.report_time is None:
            return None
        hours, minutes = (int(part) for part in self.report_time.split(":"))
        return time(hours, minutes)


__all__ = [
    "CrawlConfig",
    "DEFAULT_USER_AGENT",
    "FetchConfig",
    "RateLimitConfig",
    "ScheduleConfig",
    "ScheduleType",
    "TextAnalysisConfig",
]
