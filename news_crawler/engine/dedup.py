"""Visited-link bookkeeping shared by every lane of one crawl."""

from __future__ import annotations

from threading import Lock
from typing import Iterable, Iterator


class VisitedLinkSet:
    """Thread-safe set of normalised URLs with atomic check-then-insert."""

    def __init__(self, links: Iterable[str] = ()) -> None:
        self._links: set[str] = set(links)
        self._lock = Lock()

    def add_if_absent(self, url: str) -> bool:
        """Insert ``url``; returns ``False`` when it was already present."""

        with self._lock:
            if url in self._links:
                return False
            self._links.add(url)
            return True

    def update(self, urls: Iterable[str]) -> None:
        with self._lock:
            self._links.update(urls)

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._links)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())


__all__ = ["VisitedLinkSet"]
