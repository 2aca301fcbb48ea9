"""Text normalisation shared by topic extraction, similarity and date parsing."""

from __future__ import annotations

import re
import unicodedata
from functools import lru_cache

from selectolax.parser import HTMLParser

from .stopwords import stopwords_for

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def strip_markup(text: str) -> str:
    """Drop tags (and script/style bodies) leaving the visible text."""

    if "<" not in text:
        return text
    tree = HTMLParser(text)
    tree.strip_tags(["script", "style", "noscript"])
    root = tree.body or tree.root
    if root is None:
        return ""
    return root.text(separator=" ")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize(text: str, language: str) -> str:
    """Markup-free, lower-cased, punctuation-free text; accents dropped for ES."""

    cleaned = strip_markup(text or "").lower()
    if language.upper() == "ES":
        cleaned = strip_accents(cleaned)
    cleaned = _PUNCTUATION.sub("", cleaned)
    return collapse_whitespace(cleaned)


@lru_cache(maxsize=4)
def _normalised_stopwords(language: str) -> frozenset[str]:
    words = stopwords_for(language)
    if language == "ES":
        words = {strip_accents(word) for word in words}
    return frozenset(words)


def tokenize(text: str, language: str) -> list[str]:
    """Whitespace tokens of the normalised text, stopwords removed."""

    language = language.upper()
    stop = _normalised_stopwords(language)
    return [token for token in normalize(text, language).split() if token not in stop]


__all__ = ["collapse_whitespace", "normalize", "strip_accents", "strip_markup", "tokenize"]
