"""DOM extraction helpers for article pages."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin

from selectolax.parser import HTMLParser, Node

from ..analysis.text import collapse_whitespace
from .scope import normalize_url

CONTENT_SELECTORS = ("article", ".article-body", ".content", "main")
DATE_TEXT_SELECTORS = (".date", ".published-date")
SKIPPED_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "#")


@dataclass(slots=True)
class PageContent:
    """Structured representation of an article page."""

    title: str
    text: str
    date: str


class PageParser:
    """Pull title, body text, publication date and outgoing links from HTML."""

    def extract(self, html: str) -> PageContent:
        tree = HTMLParser(html)
        tree.strip_tags(["script", "style", "noscript"])
        return PageContent(
            title=self._title(tree),
            text=self._main_text(tree),
            date=self._date(tree),
        )

    def extract_links(self, html: str, base_url: str) -> list[str]:
        tree = HTMLParser(html)
        links: list[str] = []
        seen: set[str] = set()
        for node in tree.css("a[href]"):
            href = (node.attributes.get("href") or "").strip()
            if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
                continue
            try:
                absolute = urljoin(base_url, href)
            except ValueError:
                continue
            normalized = normalize_url(absolute)
            if normalized is None or normalized in seen:
                continue
            seen.add(normalized)
            links.append(normalized)
        return links

    # ------------------------------------------------------------------
    @staticmethod
    def _text(node: Node | None) -> str:
        if node is None:
            return ""
        return collapse_whitespace(node.text(separator=" "))

    def _title(self, tree: HTMLParser) -> str:
        heading = self._text(tree.css_first("h1"))
        if heading:
            return heading
        return self._text(tree.css_first("title"))

    def _main_text(self, tree: HTMLParser) -> str:
        for selector in CONTENT_SELECTORS:
            parts = [self._text(node) for node in tree.css(selector)]
            text = " ".join(part for part in parts if part)
            if text:
                return text
        return self._text(tree.body)

    def _date(self, tree: HTMLParser) -> str:
        meta = tree.css_first('meta[property="article:published_time"]')
        if meta is not None and meta.attributes.get("content"):
            return collapse_whitespace(meta.attributes["content"])
        stamp = tree.css_first("time[datetime]")
        if stamp is not None and stamp.attributes.get("datetime"):
            return collapse_whitespace(stamp.attributes["datetime"])
        for selector in DATE_TEXT_SELECTORS:
            text = self._text(tree.css_first(selector))
            if text:
                return text
        return ""


__all__ = ["CONTENT_SELECTORS", "PageContent", "PageParser"]
