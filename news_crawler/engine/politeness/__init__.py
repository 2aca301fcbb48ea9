"""Per-request politeness: rate limiting, jitter, identity and retry backoff."""

from .chain import GiveUpReason, PolitenessChain, PolitenessContext, RequestDirective, Strategy
from .strategies import (
    BackoffStrategy,
    JitterStrategy,
    RateLimitStrategy,
    UserAgentStrategy,
    build_chain,
)

__all__ = [
    "BackoffStrategy",
    "GiveUpReason",
    "JitterStrategy",
    "PolitenessChain",
    "PolitenessContext",
    "RateLimitStrategy",
    "RequestDirective",
    "Strategy",
    "UserAgentStrategy",
    "build_chain",
]
