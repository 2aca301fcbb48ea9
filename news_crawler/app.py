"""Typer CLI entrypoint for news_crawler."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Iterable, List, Optional, Sequence

import structlog
import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, CrawlConfig, ScheduleConfig, ScheduleType
from .errors import CycleAbortedError
from .infra import ResultStore
from .logging_conf import CRAWLER_LOG, ERROR_LOG, configure_logging, tail_log
from .models import Article, CrawlReport
from .orchestrator import CrawlOrchestrator
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="news-crawler command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Configuration commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
results_app = typer.Typer(
    name="results",
    help="Stored results commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    store: ResultStore
    scheduler: APSchedulerAdapter
    log_dir: Path


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    return AppState(
        repository=repository,
        store=ResultStore(repository.locator.results_path()),
        scheduler=APSchedulerAdapter(),
        log_dir=repository.locator.logs_dir,
    )


def build_orchestrator(state: AppState, config: CrawlConfig) -> CrawlOrchestrator:
    return CrawlOrchestrator(config, store=state.store)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _format_schedule(schedule: ScheduleConfig) -> str:
    data = schedule.value
    label = schedule.type.value
    if data in (None, "", [], {}):
        return label
    if schedule.type is ScheduleType.CRON:
        return f"cron ({data})"
    if schedule.type is ScheduleType.INTERVAL:
        return f"interval ({data})"
    return f"{label} ({data})"


def _shorten(text: str, limit: int = 80) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def _render_terms_table(report: CrawlReport) -> Table:
    table = Table(
        title=f"Articles by term · {report.results.total()} total",
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Term", style="cyan", no_wrap=True)
    table.add_column("Articles", style="green", justify="right")
    table.add_column("Best score", style="magenta", justify="right")
    for term, articles in report.results.items():
        best = max((article.score for article in articles), default=0)
        table.add_row(term, str(len(articles)), str(best) if articles else "-")
    return table


def _render_articles_table(articles: Sequence[Article], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Score", style="magenta", justify="right")
    table.add_column("Term", style="cyan", no_wrap=True)
    table.add_column("Title", style="green", overflow="fold")
    table.add_column("Link", style="dim", overflow="fold")
    for article in articles:
        table.add_row(str(article.score), article.term, _shorten(article.title), article.link)
    return table


def _render_jobs_table(jobs: Iterable[dict]) -> Table:
    table = Table(title="Scheduled jobs", box=box.SIMPLE_HEAD)
    table.add_column("Job ID", style="cyan", no_wrap=True)
    table.add_column("Next run", style="green")
    table.add_column("Trigger", style="magenta", overflow="fold")
    for job in jobs:
        table.add_row(
            str(job.get("id", "-")),
            str(job.get("next_run_time", "-")),
            str(job.get("trigger", "-")),
        )
    return table


def _print_report(report: CrawlReport, quiet: bool) -> None:
    total = report.results.total()
    if total == 0:
        console.print("Crawl finished: no matching articles found.", style="yellow")
        return
    if not report.final:
        console.print(
            f"Cycle stored {total} article(s); the report is not due yet.", style="dim"
        )
    if quiet:
        console.print(f"{total} article(s), most common term: {report.most_common_term or '-'}")
        return
    console.print(_render_terms_table(report))
    if report.top_articles:
        console.print(_render_articles_table(report.top_articles, "Top articles"))
    if report.most_common_term:
        console.print(f"Most common term: {report.most_common_term}", style="bold cyan")


app.add_typer(config_app, name="config", help="Create or inspect crawler.yaml")
app.add_typer(results_app, name="results", help="Inspect or clear stored results")
app.add_typer(log_app, name="log", help="View log files")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True)
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Run one crawl cycle now.")
def run(
    ctx: typer.Context,
    seconds: Optional[float] = typer.Option(None, "--seconds", help="Crawl budget in seconds."),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Maximum link depth."),
    as_json: bool = typer.Option(False, "--json", help="Print the report payload as JSON.", is_flag=True),
    quiet: bool = typer.Option(False, "--quiet", help="Only print a one-line summary.", is_flag=True),
    until_report: bool = typer.Option(
        False, "--until-report", help="Repeat cycles until the daily report is produced.", is_flag=True
    ),
) -> None:
    state = _get_state(ctx)
    config = state.repository.load()
    overrides: dict = {}
    if seconds is not None:
        if seconds <= 0:
            raise typer.BadParameter("--seconds must be > 0")
        overrides["cycle_seconds"] = seconds
    if max_depth is not None:
        if max_depth < 0:
            raise typer.BadParameter("--max-depth must be >= 0")
        overrides["max_depth"] = max_depth
    if overrides:
        config = config.model_copy(update=overrides)

    orchestrator = build_orchestrator(state, config)
    try:
        report = orchestrator.run_until_report() if until_report else orchestrator.run_cycle()
    except CycleAbortedError as exc:
        console.print(f"Crawl could not run: {exc}", style="red")
        raise typer.Exit(code=1)
    finally:
        orchestrator.close()

    if as_json:
        typer.echo(json.dumps(report.to_payload(), ensure_ascii=False, indent=2))
        return
    _print_report(report, quiet)


@app.command("schedule", help="Run crawl cycles on the configured schedule.")
def schedule(
    ctx: typer.Context,
    duration: Optional[float] = typer.Option(
        None, "--duration", help="Stop after N seconds (default: run until interrupted)."
    ),
) -> None:
    state = _get_state(ctx)
    config = state.repository.load()
    orchestrator = build_orchestrator(state, config)
    logger = structlog.get_logger("news_crawler.app")

    def _scheduled_cycle() -> None:
        try:
            orchestrator.run_cycle()
        except CycleAbortedError as exc:
            logger.error("scheduled_cycle_aborted", error=str(exc))

    state.scheduler.schedule_cycle(config.schedule, _scheduled_cycle)
    state.scheduler.start()
    console.print(f"Schedule: {_format_schedule(config.schedule)}", style="cyan")
    console.print(_render_jobs_table(state.scheduler.list_jobs()))
    try:
        Event().wait(duration)
    except KeyboardInterrupt:
        console.print("Interrupted, stopping scheduler.", style="yellow")
    finally:
        state.scheduler.shutdown()
        orchestrator.close()


@config_app.command("init", help="Write crawler.yaml with the given terms and sites.")
def config_init(
    ctx: typer.Context,
    terms: Optional[List[str]] = typer.Option(None, "--term", help="Vocabulary term (repeatable)."),
    sites: Optional[List[str]] = typer.Option(None, "--site", help="Seed website URL (repeatable)."),
    language: str = typer.Option("ES", "--language", help="Text analysis language (ES or EN)."),
    report_time: Optional[str] = typer.Option(None, "--report-time", help="Daily report time HH:MM."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.config_path()
    if path.exists() and not force:
        console.print(f"{path} already exists; use --force to overwrite.", style="yellow")
        raise typer.Exit(code=0)
    try:
        config = CrawlConfig.model_validate(
            {
                "terms": terms or [],
                "websites": sites or [],
                "report_time": report_time,
                "text_analysis": {"language": language},
            }
        )
    except ValueError as exc:
        console.print(f"Invalid configuration: {exc}", style="red")
        raise typer.Exit(code=1)
    saved = state.repository.save(config)
    console.print(f"Configuration written to {saved}", style="green")


@config_app.command("show", help="Print the effective configuration.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load()
    console.print(f"# {state.repository.locator.config_path()}", style="dim")
    typer.echo(yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False))


@results_app.command("show", help="Show the last stored report.")
def results_show(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", help="Maximum articles listed per term."),
) -> None:
    state = _get_state(ctx)
    report = state.store.load_report()
    if report is None:
        console.print("No stored results yet; run `news-crawler run` first.", style="dim")
        return
    console.print(_render_terms_table(report))
    if report.top_articles:
        console.print(_render_articles_table(report.top_articles, "Top articles"))
    for term, articles in report.results.items():
        if articles:
            console.print(_render_articles_table(articles[:limit], f"{term}"))
    if report.most_common_term:
        console.print(f"Most common term: {report.most_common_term}", style="bold cyan")


@results_app.command("clear", help="Delete stored results (and the links they seed).")
def results_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    if not yes and not typer.confirm("Delete stored results?"):
        raise typer.Exit(code=0)
    if state.store.clear():
        console.print("Stored results deleted.", style="green")
    else:
        console.print("Nothing to delete.", style="dim")


@log_app.command("show", help="Show the most recent log lines.")
def log_show(
    ctx: typer.Context,
    tail: int = typer.Option(100, "--tail", help="Show the last N lines."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.log_dir / (ERROR_LOG if errors else CRAWLER_LOG)
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} line(s)", style="cyan")
    console.print("".join(lines), markup=False, highlight=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
