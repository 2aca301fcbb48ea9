"""JSON persistence of the latest crawl report between cycles."""

from __future__ import annotations

import json
import os
from pathlib import Path
from threading import Lock
from typing import Sequence

import structlog

from ..models import CrawlReport, ResultSet


class ResultStore:
    """Read and write ``crawled_results.json`` atomically."""

    def __init__(self, path: Path, logger: structlog.BoundLogger | None = None) -> None:
        self.path = path
        self._lock = Lock()
        self.logger = logger or structlog.get_logger("news_crawler.storage")

    def save(self, report: CrawlReport) -> Path:
        payload = json.dumps(report.to_payload(), indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with self._lock:
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        self.logger.info("results_saved", path=str(self.path), articles=report.results.total())
        return self.path

    def load_report(self, terms: Sequence[str] = ()) -> CrawlReport | None:
        if not self.path.exists():
            return None
        try:
            with self._lock:
                payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.warning("results_unreadable", path=str(self.path), error=str(exc))
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("results"), dict):
            self.logger.warning("results_invalid_structure", path=str(self.path))
            return None
        return CrawlReport.from_payload(payload, terms)

    def load(self, terms: Sequence[str]) -> tuple[ResultSet, set[str]]:
        """Previous results with every term present, plus the links they cover."""

        report = self.load_report(terms)
        if report is None:
            return ResultSet.empty(terms), set()
        return report.results, report.results.links()

    def clear(self) -> bool:
        with self._lock:
            if self.path.exists():
                self.path.unlink()
                return True
        return False


__all__ = ["ResultStore"]
