"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
import re
from pathlib import Path
from typing import Any, Iterable

import structlog

MAIN_LOG = "fuzzgen.log"
ERROR_LOG = "error.log"
CATEGORY_DIR = "categories"

# (log directory, level) of the active dictConfig
_ACTIVE: tuple[Path, str] | None = None


def _default_log_dir() -> Path:
    home = os.environ.get("FUZZGEN_HOME")
    root = Path(home).expanduser() if home else Path.cwd()
    return root.resolve() / "logs"


def _dict_config(log_dir: Path, level: str) -> dict[str, Any]:
    handlers: dict[str, dict[str, Any]] = {
        # stdout may carry the wordlist itself
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": level,
            "formatter": "json",
        },
        "main_file": {
            "class": "logging.FileHandler",
            "level": "INFO",
            "filename": str(log_dir / MAIN_LOG),
            "encoding": "utf-8",
            "formatter": "json",
        },
        "error_file": {
            "class": "logging.FileHandler",
            "level": "ERROR",
            "filename": str(log_dir / ERROR_LOG),
            "encoding": "utf-8",
            "formatter": "json",
        },
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": handlers,
        "loggers": {
            "fuzzgen": {
                "handlers": list(handlers),
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger.

    Safe to call repeatedly. Handlers are rebuilt only when the log directory
    (``$FUZZGEN_HOME/logs``) or the requested level changes.
    """

    global _ACTIVE
    log_dir = _default_log_dir()
    (log_dir / CATEGORY_DIR).mkdir(parents=True, exist_ok=True)
    for name in (MAIN_LOG, ERROR_LOG):
        (log_dir / name).touch(exist_ok=True)

    level = "DEBUG" if verbose else "INFO"
    if _ACTIVE is None or _ACTIVE[0] != log_dir or (verbose and _ACTIVE[1] != level):
        logging.config.dictConfig(_dict_config(log_dir, level))
        if _ACTIVE is None:
            structlog.configure(
                processors=[
                    structlog.contextvars.merge_contextvars,
                    structlog.processors.TimeStamper(fmt="iso"),
                    structlog.stdlib.add_log_level,
                    structlog.processors.StackInfoRenderer(),
                    structlog.processors.format_exc_info,
                    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
                ],
                logger_factory=structlog.stdlib.LoggerFactory(),
                cache_logger_on_first_use=True,
            )
        _ACTIVE = (log_dir, level)
    return structlog.get_logger("fuzzgen")


def _category_slug(category: str) -> str:
    return re.sub(r"[^0-9A-Za-z_-]+", "_", category.strip()) or "category"


def category_logger(category: str, verbose: bool = False) -> structlog.BoundLogger:
    """Return a logger bound to a wordlist category, mirrored to ``logs/categories/<slug>.log``."""

    configure_logging(verbose)
    slug = _category_slug(category)
    log_path = _default_log_dir() / CATEGORY_DIR / f"{slug}.log"

    py_logger = logging.getLogger(f"fuzzgen.category.{slug}")
    stale = [
        handler
        for handler in py_logger.handlers
        if isinstance(handler, logging.FileHandler) and handler.baseFilename != str(log_path)
    ]
    for handler in stale:
        py_logger.removeHandler(handler)
        handler.close()
    if not py_logger.handlers:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        main_handlers = logging.getLogger("fuzzgen").handlers
        if main_handlers:
            file_handler.setFormatter(main_handlers[0].formatter)
        file_handler.setLevel(logging.INFO)
        py_logger.addHandler(file_handler)

    return structlog.get_logger(py_logger.name).bind(category=category)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


def available_logs() -> list[Path]:
    """Main logs first, then one file per category that has run."""

    log_dir = _default_log_dir()
    if not log_dir.exists():
        return []
    return sorted(log_dir.glob("*.log")) + sorted((log_dir / CATEGORY_DIR).glob("*.log"))


__all__ = ["available_logs", "category_logger", "configure_logging", "tail_log"]
