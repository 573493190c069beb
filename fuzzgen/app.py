"""Typer CLI entrypoint for fuzzgen."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import Category, ConfigRepository, GlobalConfig, SourceRegistry, resolve_category
from .engine import ThreadPoolManager, ValidationReport
from .engine.exporter import EXPORT_FORMATS, WordlistExporter
from .errors import ConfigurationError, ExportError, StoreError
from .infra import SQLiteManager
from .logging_conf import available_logs, configure_logging, tail_log
from .orchestrator import Orchestrator, RunSummary
from .ui import ProgressReporter

EXIT_FAILURE = 1
EXIT_NO_SOURCES = 2

app = typer.Typer(
    help="Generate deduplicated wordlists for web fuzzing from remote source lists.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect log files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()
err_console = Console(stderr=True)


@dataclass
class AppState:
    repository: ConfigRepository
    global_config: GlobalConfig
    thread_pool: ThreadPoolManager
    storage: SQLiteManager
    client: Optional[httpx.Client] = None


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose=verbose)
    repository = ConfigRepository()
    try:
        global_config = repository.load_global_config()
    except ConfigurationError as exc:
        err_console.print(exc.message, style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc
    return AppState(
        repository=repository,
        global_config=global_config,
        thread_pool=ThreadPoolManager(global_config.max_workers),
        storage=SQLiteManager(),
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _load_registry(state: AppState, sources: Optional[Path]) -> SourceRegistry:
    try:
        return state.repository.load_registry(sources)
    except ConfigurationError as exc:
        err_console.print(exc.message, style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc


def _resolve_mode(mode: str) -> Category:
    try:
        return resolve_category(mode)
    except ConfigurationError as exc:
        err_console.print(exc.message, style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc


def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stderr, "isatty", lambda: False)())


def _render_summary(summary: RunSummary) -> Table:
    table = Table(
        title=f"{summary.category.value} · {summary.entries} unique entries",
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Source", style="cyan", overflow="fold")
    table.add_column("Status")
    table.add_column("Tokens", justify="right")
    table.add_column("New", justify="right", style="green")
    table.add_column("Reason", style="dim", overflow="fold")
    styles = {"success": "green", "truncated": "yellow", "failed": "red"}
    for url, reason in summary.rejected.items():
        table.add_row(url, "[red]rejected[/red]", "-", "-", reason)
    for result in sorted(summary.results, key=lambda item: item.url):
        style = styles.get(result.status, "red")
        table.add_row(
            result.url,
            f"[{style}]{result.status}[/{style}]",
            str(result.tokens),
            str(result.added),
            result.reason or "",
        )
    return table


def _render_validation(report: ValidationReport) -> Table:
    table = Table(title="Source reachability", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan", overflow="fold")
    table.add_column("Status")
    table.add_column("Reason", style="dim", overflow="fold")
    for url in report.valid:
        table.add_row(url, "[green]ok[/green]", "")
    for url, reason in report.rejected.items():
        table.add_row(url, "[red]rejected[/red]", reason)
    return table


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, (StoreError, ExportError)) and exc.__cause__ is not None:
        return f"{exc.message}: {exc.__cause__}"
    return str(exc)


def _open_sink(output: Optional[Path]):
    if output is None:
        return sys.stdout
    output.parent.mkdir(parents=True, exist_ok=True)
    return output.open("w", encoding="utf-8", newline="")


app.add_typer(log_app, name="log", help="List or show log files.")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("generate", help="Fetch, normalise and deduplicate every source of a mode.")
def generate(
    ctx: typer.Context,
    mode: str = typer.Option(
        Category.GENERIC.value,
        "--mode",
        "-m",
        help=f"Wordlist mode: {', '.join(Category.names())}.",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the wordlist to this file instead of stdout."
    ),
    sources: Optional[Path] = typer.Option(
        None, "--sources", "-s", help="Source list file (defaults to data/sources.yaml)."
    ),
    store: Optional[Path] = typer.Option(
        None, "--store", help="Keep the token index in this SQLite file instead of memory."
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help=f"Output format: {', '.join(EXPORT_FORMATS)}."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Maximum concurrent source downloads."
    ),
    no_validate: bool = typer.Option(
        False, "--no-validate", help="Skip the HEAD reachability probe.", is_flag=True
    ),
    no_progress: bool = typer.Option(
        False, "--no-progress", help="Hide the progress bar.", is_flag=True
    ),
) -> None:
    state = _get_state(ctx)
    category = _resolve_mode(mode)
    registry = _load_registry(state, sources)
    updates: dict[str, object] = {}
    if workers:
        updates["max_workers"] = workers
    if no_validate:
        updates["validate_sources"] = False
    settings = state.global_config.model_copy(update=updates)
    export_format = fmt or settings.output_format
    if export_format not in EXPORT_FORMATS:
        err_console.print(f"Unsupported format: {export_format}", style="red")
        raise typer.Exit(code=EXIT_FAILURE)
    try:
        registry.urls_for(category)
    except ConfigurationError as exc:
        err_console.print(exc.message, style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc

    orchestrator = Orchestrator(
        settings, registry, state.thread_pool, state.storage, client=state.client
    )
    progress = ProgressReporter(enabled=not no_progress and _progress_default_enabled())
    dedup_store = orchestrator.open_store(store)
    failed = False
    try:
        summary = orchestrator.run(category, dedup_store, progress=progress)
        exporter = WordlistExporter(_open_sink(output), export_format)
        written = orchestrator.export(dedup_store, exporter)
    except (StoreError, ExportError, OSError) as exc:
        failed = True
        err_console.print(_describe_failure(exc), style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc
    finally:
        dedup_store.close(commit=not failed)
        state.thread_pool.shutdown()

    err_console.print(_render_summary(summary))
    if not summary.reachable:
        err_console.print(f"No reachable sources for mode `{category.value}`.", style="yellow")
        raise typer.Exit(code=EXIT_NO_SOURCES)
    destination = str(output) if output else "stdout"
    err_console.print(f"Wrote {written} entries to {destination}", style="green")


@app.command("validate", help="Probe the sources of a mode without downloading them.")
def validate(
    ctx: typer.Context,
    mode: str = typer.Option(Category.GENERIC.value, "--mode", "-m", help="Wordlist mode."),
    sources: Optional[Path] = typer.Option(None, "--sources", "-s", help="Source list file."),
) -> None:
    state = _get_state(ctx)
    category = _resolve_mode(mode)
    registry = _load_registry(state, sources)
    orchestrator = Orchestrator(
        state.global_config, registry, state.thread_pool, state.storage, client=state.client
    )
    try:
        report = orchestrator.validate(category)
    except ConfigurationError as exc:
        err_console.print(exc.message, style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc
    finally:
        state.thread_pool.shutdown()
    console.print(_render_validation(report))
    if not report.valid:
        raise typer.Exit(code=EXIT_NO_SOURCES)


@app.command("modes", help="List wordlist modes and how many sources each has.")
def modes(
    ctx: typer.Context,
    sources: Optional[Path] = typer.Option(None, "--sources", "-s", help="Source list file."),
) -> None:
    state = _get_state(ctx)
    registry = _load_registry(state, sources)
    table = Table(title="Wordlist modes", box=box.SIMPLE_HEAD)
    table.add_column("Mode", style="cyan", no_wrap=True)
    table.add_column("Sources", justify="right")
    for category, count in registry.counts().items():
        table.add_row(category.value, str(count) if count else "[dim]-[/dim]")
    console.print(table)


@app.command("export", help="Re-export a token index kept with --store.")
def export(
    ctx: typer.Context,
    store: Path = typer.Option(..., "--store", help="SQLite file written by `generate --store`."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination file."),
    fmt: str = typer.Option("txt", "--format", "-f", help=f"Output format: {', '.join(EXPORT_FORMATS)}."),
) -> None:
    state = _get_state(ctx)
    if not store.exists():
        err_console.print(f"Store not found: {store}", style="red")
        raise typer.Exit(code=EXIT_FAILURE)
    if fmt not in EXPORT_FORMATS:
        err_console.print(f"Unsupported format: {fmt}", style="red")
        raise typer.Exit(code=EXIT_FAILURE)
    orchestrator = Orchestrator(
        state.global_config, SourceRegistry.from_mapping({}), state.thread_pool, state.storage
    )
    dedup_store = orchestrator.open_store(store, fresh=False)
    failed = False
    try:
        written = orchestrator.export(dedup_store, WordlistExporter(_open_sink(output), fmt))
    except (StoreError, ExportError, OSError) as exc:
        failed = True
        err_console.print(_describe_failure(exc), style="red")
        raise typer.Exit(code=EXIT_FAILURE) from exc
    finally:
        dedup_store.close(commit=not failed)
    err_console.print(f"Wrote {written} entries", style="green")


@app.command("init", help="Install the bundled source list into the data directory.")
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing source list.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    try:
        path = state.repository.install_sources_template(force=force)
    except FileExistsError as exc:
        err_console.print(f"{exc} (use --force to overwrite)", style="yellow")
        raise typer.Exit(code=EXIT_FAILURE) from exc
    console.print(f"Source list written to {path}", style="green")


@log_app.command("list", help="List available log files.")
def log_list() -> None:
    paths = list(available_logs())
    if not paths:
        console.print("No log files yet.", style="yellow")
        return
    for path in paths:
        console.print(f"{path.stem}\t{path}")


@log_app.command("show", help="Show the last lines of a log file.")
def log_show(
    name: str = typer.Argument("fuzzgen", help="Log name, e.g. fuzzgen, error or a mode."),
    lines: int = typer.Option(50, "--lines", "-n", min=1, help="Number of lines to show."),
) -> None:
    match = next((path for path in available_logs() if path.stem == name), None)
    if match is None:
        err_console.print(f"Log not found: {name}", style="red")
        raise typer.Exit(code=EXIT_FAILURE)
    for line in tail_log(match, lines):
        console.print(line.rstrip("\n"), markup=False, highlight=False, soft_wrap=True)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
