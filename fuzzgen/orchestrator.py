"""Pipeline wiring together validation, fetching, normalisation, dedup and export."""

from __future__ import annotations

from concurrent.futures import Future, as_completed
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import structlog

from .config import Category, GlobalConfig, SourceRegistry, resolve_category
from .engine import (
    DeduplicationStore,
    Fetcher,
    SourceValidator,
    StoreWriter,
    ThreadPoolManager,
    ValidationReport,
    iter_tokens,
)
from .engine.exporter import BaseExporter
from .errors import FetchError, StoreError
from .infra import SQLiteManager
from .logging_conf import category_logger, configure_logging
from .ui import ProgressReporter


@dataclass(slots=True)
class SourceResult:
    url: str
    status: str
    tokens: int = 0
    added: int = 0
    reason: str | None = None


@dataclass(slots=True)
class RunSummary:
    """Outcome of one category run."""

    category: Category
    configured: int
    valid: list[str] = field(default_factory=list)
    rejected: dict[str, str] = field(default_factory=dict)
    results: list[SourceResult] = field(default_factory=list)
    entries: int = 0

    @property
    def succeeded(self) -> list[SourceResult]:
        return [result for result in self.results if result.status == "success"]

    @property
    def failed(self) -> list[SourceResult]:
        return [result for result in self.results if result.status != "success"]

    @property
    def reachable(self) -> bool:
        return bool(self.valid)


class Orchestrator:
    """Central coordinator for a wordlist generation run."""

    def __init__(
        self,
        global_config: GlobalConfig,
        registry: SourceRegistry,
        thread_pool: ThreadPoolManager,
        storage: SQLiteManager,
        client: httpx.Client | None = None,
    ) -> None:
        self.global_config = global_config
        self.registry = registry
        self.thread_pool = thread_pool
        self.storage = storage
        self.client = client
        self.logger = configure_logging().bind(component="orchestrator")

    # ------------------------------------------------------------------
    def open_store(self, path: Path | None = None, fresh: bool = True) -> DeduplicationStore:
        return DeduplicationStore(
            self.storage,
            path,
            batch_size=self.global_config.batch_size,
            fresh=fresh,
        )

    def validate(self, category: str | Category) -> ValidationReport:
        resolved = resolve_category(category)
        log = category_logger(resolved.value)
        urls = self.registry.urls_for(resolved)
        fetcher = Fetcher(self.global_config, logger=log, client=self.client)
        try:
            return self._validator(fetcher, log).validate(urls)
        finally:
            fetcher.close()

    def run(
        self,
        category: str | Category,
        store: DeduplicationStore,
        progress: ProgressReporter | None = None,
        validate: bool | None = None,
    ) -> RunSummary:
        """Fetch every reachable source of ``category`` into ``store``.

        Individual source failures are recorded on the summary. Only store
        failures propagate, as :class:`StoreError`.
        """

        resolved = resolve_category(category)
        log = category_logger(resolved.value)
        urls = self.registry.urls_for(resolved)
        should_validate = self.global_config.validate_sources if validate is None else validate
        fetcher = Fetcher(self.global_config, logger=log, client=self.client)
        progress = progress or ProgressReporter(enabled=False)
        progress.set_label(resolved.value)
        summary = RunSummary(category=resolved, configured=len(urls))
        log.info("run_started", sources=len(urls), validate=should_validate)
        try:
            if should_validate:
                report = self._validator(fetcher, log).validate(urls)
            else:
                report = ValidationReport(valid=list(urls))
            summary.valid = report.valid
            summary.rejected = report.rejected
            if not report.valid:
                log.warning("no_reachable_sources", configured=len(urls))
                summary.entries = store.count()
                return summary

            progress.start(len(report.valid))
            executor = self.thread_pool.get("fetch", max_workers=self.global_config.max_workers)
            with StoreWriter(store, queue_size=self.global_config.queue_size, logger=log) as writer:
                futures: list[Future[SourceResult]] = [
                    executor.submit(self._process_source, fetcher, writer, url, log)
                    for url in report.valid
                ]
                for future in as_completed(futures):
                    result = future.result()
                    summary.results.append(result)
                    progress.advance(
                        success=result.status == "success",
                        failed=result.status != "success",
                        tokens=result.tokens,
                        current_url=result.url,
                    )
            for result in summary.results:
                result.added = writer.added[result.url]
            summary.entries = store.count()
        finally:
            progress.close()
            fetcher.close()
        log.info(
            "run_finished",
            succeeded=len(summary.succeeded),
            failed=len(summary.failed),
            rejected=len(summary.rejected),
            entries=summary.entries,
        )
        return summary

    def export(self, store: DeduplicationStore, exporter: BaseExporter) -> int:
        """Write every stored entry in token order; the exporter is closed afterwards."""

        try:
            written = exporter.export_many(store.iterate())
            exporter.flush()
        finally:
            exporter.close()
        self.logger.info("wordlist_exported", entries=written)
        return written

    # ------------------------------------------------------------------
    def _validator(self, fetcher: Fetcher, log: structlog.BoundLogger) -> SourceValidator:
        executor = self.thread_pool.get("validate", max_workers=self.global_config.max_workers)
        return SourceValidator(fetcher, executor, logger=log)

    def _process_source(
        self,
        fetcher: Fetcher,
        writer: StoreWriter,
        url: str,
        log: structlog.BoundLogger,
    ) -> SourceResult:
        tokens = 0
        try:
            with fetcher.open_lines(url) as lines:
                for token in iter_tokens(lines):
                    writer.submit(token, url)
                    tokens += 1
        except FetchError as exc:
            log.warning("source_fetch_failed", url=url, reason=exc.reason, status=exc.status_code)
            return SourceResult(url=url, status="failed", reason=exc.reason)
        except httpx.HTTPError as exc:
            log.warning("source_stream_truncated", url=url, tokens=tokens, error=str(exc))
            return SourceResult(
                url=url, status="truncated", tokens=tokens, reason=type(exc).__name__
            )
        except StoreError as exc:
            log.error("source_store_failed", url=url, tokens=tokens, error=str(exc))
            return SourceResult(url=url, status="failed", tokens=tokens, reason="store failure")
        except Exception as exc:  # noqa: BLE001
            log.error("source_error", url=url, tokens=tokens, error=str(exc))
            return SourceResult(url=url, status="failed", tokens=tokens, reason=str(exc))
        log.info("source_fetched", url=url, tokens=tokens)
        return SourceResult(url=url, status="success", tokens=tokens)


__all__ = ["Orchestrator", "RunSummary", "SourceResult"]
