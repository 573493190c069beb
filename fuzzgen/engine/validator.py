"""Reachability checks run before any source body is downloaded."""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from .fetcher import Fetcher, ProbeResult


@dataclass(slots=True)
class ValidationReport:
    valid: list[str] = field(default_factory=list)
    rejected: dict[str, str] = field(default_factory=dict)


class SourceValidator:
    """Keep the sources that answer a HEAD probe with a 2xx status."""

    def __init__(
        self,
        fetcher: Fetcher,
        executor: Executor,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.executor = executor
        self.logger = logger or structlog.get_logger("fuzzgen.validator")

    def validate(self, urls: Iterable[str]) -> ValidationReport:
        candidates = list(dict.fromkeys(urls))
        results: list[ProbeResult] = list(self.executor.map(self.fetcher.probe, candidates))
        report = ValidationReport()
        for result in results:
            if result.ok:
                report.valid.append(result.url)
                continue
            reason = result.reason or "unreachable"
            report.rejected[result.url] = reason
            self.logger.warning(
                "source_rejected",
                url=result.url,
                status=result.status_code,
                reason=reason,
            )
        self.logger.info(
            "sources_validated",
            checked=len(candidates),
            valid=len(report.valid),
            rejected=len(report.rejected),
        )
        return report


__all__ = ["SourceValidator", "ValidationReport"]
