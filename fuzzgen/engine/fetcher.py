"""HTTP probing and streaming retrieval of wordlist sources."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from time import monotonic
from typing import Iterator

import httpx
import structlog

from ..config import GlobalConfig
from ..errors import FetchError


@dataclass(slots=True)
class ProbeResult:
    """Outcome of a lightweight existence check."""

    url: str
    ok: bool
    status_code: int | None = None
    reason: str | None = None


class Fetcher:
    """Issue HEAD probes and streaming GETs with a fixed identity and timeout."""

    def __init__(
        self,
        global_config: GlobalConfig,
        logger: structlog.BoundLogger | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.global_config = global_config
        self.logger = logger or structlog.get_logger("fuzzgen.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self._headers = {"User-Agent": global_config.user_agent}

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def probe(self, url: str) -> ProbeResult:
        try:
            response = self._client.request(
                "HEAD",
                url,
                headers=self._headers,
                timeout=self.global_config.timeout,
                follow_redirects=True,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return ProbeResult(url=url, ok=False, reason=_describe(exc))
        response.close()
        if not response.is_success:
            return ProbeResult(
                url=url,
                ok=False,
                status_code=response.status_code,
                reason=f"status {response.status_code}",
            )
        return ProbeResult(url=url, ok=True, status_code=response.status_code)

    @contextmanager
    def open_lines(self, url: str) -> Iterator[Iterator[str]]:
        """Stream the body of ``url`` line by line.

        The whole request, body included, must finish within
        ``global_config.timeout`` seconds. Running out of time before the body
        is handed out raises :class:`FetchError`; running out while reading
        raises :class:`httpx.ReadTimeout` like any other truncated stream.

        The response is released when the ``with`` block exits, whether the
        caller consumed every line, stopped early or raised. Transport errors
        raised while reading the body propagate unchanged so callers can tell
        a truncated stream from a failed request.
        """

        deadline = monotonic() + self.global_config.timeout
        opened = False
        try:
            with self._client.stream(
                "GET",
                url,
                headers=self._headers,
                timeout=self.global_config.timeout,
                follow_redirects=True,
            ) as response:
                if not response.is_success:
                    raise FetchError(
                        url, f"status {response.status_code}", status_code=response.status_code
                    )
                if monotonic() >= deadline:
                    raise FetchError(url, f"no response body within {self.global_config.timeout}s")
                self.logger.debug("source_stream_opened", url=url, status=response.status_code)
                opened = True
                yield _iter_lines(response, deadline, self.global_config.timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if opened:
                raise
            raise FetchError(url, _describe(exc)) from exc


def _iter_lines(response: httpx.Response, deadline: float, timeout: float) -> Iterator[str]:
    """Split the decoded body into lines, giving up once ``deadline`` passes."""

    pending = ""
    for chunk in response.iter_text():
        if monotonic() >= deadline:
            raise httpx.ReadTimeout(
                f"body not received within {timeout}s", request=response.request
            )
        pending += chunk
        lines = pending.splitlines(keepends=True)
        pending = lines.pop() if lines and not lines[-1].endswith(("\n", "\r")) else ""
        for line in lines:
            yield line.rstrip("\r\n")
    if pending:
        yield pending


def _describe(exc: Exception) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


__all__ = ["Fetcher", "ProbeResult"]
