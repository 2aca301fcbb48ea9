"""Whole-word vocabulary matching used to score pages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True, slots=True)
class TermScore:
    score: int
    dominant_term: str


NO_MATCH = TermScore(0, "")


class TermScorer:
    """Count case-insensitive whole-word occurrences of every vocabulary term."""

    def __init__(self, terms: Iterable[str]) -> None:
        self.terms: tuple[str, ...] = tuple(terms)
        self._patterns = tuple(
            re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE) for term in self.terms
        )

    def counts(self, text: str) -> dict[str, int]:
        return {
            term: len(pattern.findall(text))
            for term, pattern in zip(self.terms, self._patterns)
        }

    def score(self, text: str) -> TermScore:
        """``score`` is the number of distinct terms present; ties on count keep vocabulary order."""

        if not text:
            return NO_MATCH
        distinct = 0
        best_term = ""
        best_count = 0
        for term, count in self.counts(text).items():
            if count == 0:
                continue
            distinct += 1
            if count > best_count:
                best_term, best_count = term, count
        if distinct == 0:
            return NO_MATCH
        return TermScore(distinct, best_term)

    def total_occurrences(self, text: str) -> int:
        return sum(self.counts(text).values()) if text else 0


def score_and_dominant_term(text: str, terms: Sequence[str]) -> TermScore:
    return TermScorer(terms).score(text)


def is_text_relevant(text: str, terms: Sequence[str], minimum: int = 2) -> bool:
    """True when the vocabulary occurs at least ``minimum`` times in total."""

    return TermScorer(terms).total_occurrences(text) >= minimum


__all__ = ["NO_MATCH", "TermScore", "TermScorer", "is_text_relevant", "score_and_dominant_term"]
