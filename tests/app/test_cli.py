from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from news_crawler.app import AppState, app
from news_crawler.config import ConfigLocator, ConfigRepository, CrawlConfig
from news_crawler.errors import CycleAbortedError
from news_crawler.infra import ResultStore
from news_crawler.models import CrawlReport, ResultSet


class StubOrchestrator:
    def __init__(self, report: CrawlReport | None = None, error: Exception | None = None) -> None:
        self.report = report
        self.error = error
        self.calls: list[str] = []

    def run_cycle(self) -> CrawlReport:
        self.calls.append("run_cycle")
        if self.error is not None:
            raise self.error
        return self.report

    def run_until_report(self) -> CrawlReport:
        self.calls.append("run_until_report")
        return self.report

    def close(self) -> None:
        self.calls.append("close")


class StubScheduler:
    def __init__(self) -> None:
        self.events: list[str] = []
        self.schedule = None

    def schedule_cycle(self, schedule, callback) -> None:
        self.schedule = schedule
        self.events.append("scheduled")

    def start(self) -> None:
        self.events.append("started")

    def shutdown(self) -> None:
        self.events.append("shutdown")

    def list_jobs(self) -> list[dict]:
        return [{"id": "crawl::cycle", "next_run_time": "soon", "trigger": "interval[0:01:00]"}]


def _flat(text: str) -> str:
    return " ".join(text.split())


@pytest.fixture
def state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppState:
    repository = ConfigRepository(ConfigLocator(project_root=tmp_path))
    app_state = AppState(
        repository=repository,
        store=ResultStore(repository.locator.results_path()),
        scheduler=StubScheduler(),
        log_dir=repository.locator.logs_dir,
    )
    monkeypatch.setattr("news_crawler.app.build_state", lambda verbose: app_state)
    return app_state


@pytest.fixture
def use_orchestrator(monkeypatch: pytest.MonkeyPatch):
    configs: list[CrawlConfig] = []

    def _install(orchestrator: StubOrchestrator) -> list[CrawlConfig]:
        def _build(state, config):
            configs.append(config)
            return orchestrator

        monkeypatch.setattr("news_crawler.app.build_orchestrator", _build)
        return configs

    return _install


@pytest.fixture
def sample_report(make_article) -> CrawlReport:
    results = ResultSet(["economy", "election"])
    top = make_article(score=2)
    results.add(top)
    results.add(make_article(link="https://news.example.com/other", title="Rates hold"))
    return CrawlReport(results, top_articles=[top], most_common_term="economy")


def _configure(state: AppState, **overrides) -> None:
    payload = {"terms": ["economy", "election"], "websites": ["https://example.com"]}
    payload.update(overrides)
    state.repository.save(CrawlConfig.model_validate(payload))


def test_cli_run_prints_report(state, use_orchestrator, sample_report) -> None:
    _configure(state)
    orchestrator = StubOrchestrator(sample_report)
    use_orchestrator(orchestrator)

    result = CliRunner().invoke(app, ["run"])

    assert result.exit_code == 0, result.stdout
    output = _flat(result.stdout)
    assert "Articles by term" in output
    assert "Top articles" in output
    assert "Most common term: economy" in output
    assert orchestrator.calls == ["run_cycle", "close"]


def test_cli_run_json(state, use_orchestrator, sample_report) -> None:
    _configure(state)
    use_orchestrator(StubOrchestrator(sample_report))

    result = CliRunner().invoke(app, ["run", "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["mostCommonTerm"] == "economy"
    assert len(payload["results"]["economy"]) == 2
    assert payload["results"]["election"] == []


def test_cli_run_overrides(state, use_orchestrator, sample_report) -> None:
    _configure(state)
    configs = use_orchestrator(StubOrchestrator(sample_report))

    result = CliRunner().invoke(app, ["run", "--seconds", "5", "--max-depth", "1", "--quiet"])

    assert result.exit_code == 0, result.stdout
    assert configs[0].cycle_seconds == 5
    assert configs[0].max_depth == 1
    assert "2 article(s), most common term: economy" in _flat(result.stdout)


def test_cli_run_rejects_non_positive_seconds(state, use_orchestrator, sample_report) -> None:
    use_orchestrator(StubOrchestrator(sample_report))

    result = CliRunner().invoke(app, ["run", "--seconds", "0"])

    assert result.exit_code != 0


def test_cli_run_until_report(state, use_orchestrator, sample_report) -> None:
    _configure(state)
    orchestrator = StubOrchestrator(sample_report)
    use_orchestrator(orchestrator)

    result = CliRunner().invoke(app, ["run", "--until-report"])

    assert result.exit_code == 0, result.stdout
    assert orchestrator.calls == ["run_until_report", "close"]


def test_cli_run_without_matches(state, use_orchestrator) -> None:
    _configure(state)
    use_orchestrator(StubOrchestrator(CrawlReport(ResultSet(["economy"]))))

    result = CliRunner().invoke(app, ["run"])

    assert result.exit_code == 0, result.stdout
    assert "no matching articles found" in _flat(result.stdout)


def test_cli_run_aborted_cycle(state, use_orchestrator) -> None:
    orchestrator = StubOrchestrator(error=CycleAbortedError("No terms configured"))
    use_orchestrator(orchestrator)

    result = CliRunner().invoke(app, ["run"])

    assert result.exit_code == 1
    assert "Crawl could not run: No terms configured" in _flat(result.stdout)
    assert orchestrator.calls[-1] == "close"


def test_cli_config_init_and_show(state) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "config", "init",
            "--term", "Economy",
            "--site", "https://example.com",
            "--language", "en",
            "--report-time", "7:30",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Configuration written to" in _flat(result.stdout)
    saved = yaml.safe_load(state.repository.locator.config_path().read_text(encoding="utf-8"))
    assert saved["terms"] == ["economy"]
    assert saved["report_time"] == "07:30"
    assert saved["text_analysis"]["language"] == "EN"

    shown = runner.invoke(app, ["config", "show"])
    assert shown.exit_code == 0, shown.stdout
    assert "- economy" in shown.stdout


def test_cli_config_init_keeps_existing_file(state) -> None:
    _configure(state, terms=["war"])

    result = CliRunner().invoke(app, ["config", "init", "--term", "peace"])

    assert result.exit_code == 0, result.stdout
    assert "already exists" in _flat(result.stdout)
    assert state.repository.reload().terms == ["war"]


def test_cli_config_init_rejects_bad_site(state) -> None:
    result = CliRunner().invoke(app, ["config", "init", "--site", "example.com"])

    assert result.exit_code == 1
    assert "Invalid configuration" in _flat(result.stdout)


def test_cli_results_show_and_clear(state, sample_report) -> None:
    runner = CliRunner()

    empty = runner.invoke(app, ["results", "show"])
    assert "No stored results yet" in _flat(empty.stdout)

    state.store.save(sample_report)
    shown = runner.invoke(app, ["results", "show", "--limit", "1"])
    assert shown.exit_code == 0, shown.stdout
    assert "Most common term: economy" in _flat(shown.stdout)

    cleared = runner.invoke(app, ["results", "clear", "--yes"])
    assert "Stored results deleted." in _flat(cleared.stdout)
    again = runner.invoke(app, ["results", "clear", "--yes"])
    assert "Nothing to delete." in _flat(again.stdout)


def test_cli_log_show(state) -> None:
    log_file = state.log_dir / "crawler.log"
    log_file.write_text("".join(f'{{"event": "line-{i}"}}\n' for i in range(5)), encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["log", "show", "--tail", "2"])

    assert result.exit_code == 0, result.stdout
    assert "line-4" in result.stdout
    assert "line-3" in result.stdout
    assert "line-2" not in result.stdout

    errors = runner.invoke(app, ["log", "show", "--errors"])
    assert "No log entries yet." in _flat(errors.stdout)


def test_cli_schedule_runs_for_duration(state, use_orchestrator, sample_report) -> None:
    _configure(state, schedule={"type": "interval", "value": 60})
    orchestrator = StubOrchestrator(sample_report)
    use_orchestrator(orchestrator)

    result = CliRunner().invoke(app, ["schedule", "--duration", "0"])

    assert result.exit_code == 0, result.stdout
    assert "Schedule: interval (60)" in _flat(result.stdout)
    assert "crawl::cycle" in result.stdout
    assert state.scheduler.events == ["scheduled", "started", "shutdown"]
    assert orchestrator.calls == ["close"]
