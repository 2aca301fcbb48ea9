"""Engine components: rate limit → fetch → parse → score → crawl → pool."""

from .crawler import SiteCrawler
from .dates import DateRecognizer, is_recent
from .dedup import VisitedLinkSet
from .fetcher import FetchResponse, Fetcher
from .parser import PageContent, PageParser
from .pool import LaneEvent, WorkPool, partition_sites
from .rate_limiter import RateLimiter
from .scope import is_in_scope, normalize_url
from .scoring import TermScore, TermScorer, is_text_relevant, score_and_dominant_term

__all__ = [
    "DateRecognizer",
    "FetchResponse",
    "Fetcher",
    "LaneEvent",
    "PageContent",
    "PageParser",
    "RateLimiter",
    "SiteCrawler",
    "TermScore",
    "TermScorer",
    "VisitedLinkSet",
    "WorkPool",
    "is_in_scope",
    "is_recent",
    "is_text_relevant",
    "normalize_url",
    "partition_sites",
    "score_and_dominant_term",
]
