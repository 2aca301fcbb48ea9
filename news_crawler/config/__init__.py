"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    CrawlConfig,
    FetchConfig,
    RateLimitConfig,
    ScheduleConfig,
    ScheduleType,
    TextAnalysisConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "CrawlConfig",
    "FetchConfig",
    "RateLimitConfig",
    "ScheduleConfig",
    "ScheduleType",
    "TextAnalysisConfig",
]
