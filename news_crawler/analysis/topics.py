"""Frequency-based main-topic extraction."""

from __future__ import annotations

from collections import Counter

from .text import tokenize


def main_topics(text: str, language: str = "ES", sensitivity: int = 5) -> list[str]:
    """Most frequent non-stopword tokens covering ``1/sensitivity`` of the text.

    ``threshold`` starts at ``floor(tokens / sensitivity)``; the most frequent
    word is popped and its count subtracted until the threshold is spent.
    Equal counts keep first-appearance order. A higher sensitivity returns
    fewer topics.
    """

    if sensitivity <= 0:
        raise ValueError("sensitivity must be > 0")
    tokens = tokenize(text, language)
    threshold = len(tokens) // sensitivity
    topics: list[str] = []
    for word, count in Counter(tokens).most_common():
        if threshold <= 0:
            break
        topics.append(word)
        threshold -= count
    return topics


__all__ = ["main_topics"]
