"""Logging configuration using structlog for structured JSON logging."""

import logging
import sys
from collections.abc import MutableMapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer
from structlog.stdlib import LoggerFactory, add_log_level, add_logger_name

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Events shown on the terminal without --verbose (plus all ERROR/CRITICAL)
USER_FACING_EVENTS: set[str] = {
    "sync_started",
}

# Outcomes the CLI prints itself; kept off the terminal unless verbose
CLI_REPORTED_EVENTS: set[str] = {
    "sync_summary",
    "sync_aborted",
    "sync_skipped",
    "anki_connection_warning",
}

LOG_FILE_NAME = "obsidian-flashcard-sync.log"

_handlers: list[logging.Handler] = []


def _get_level_no(level_name: str) -> int:
    """Get numeric log level from name."""
    return _LOG_LEVELS.get(level_name.upper(), logging.INFO)


class UserFacingConsoleFilter(logging.Filter):
    """Logging filter that only passes user-facing events to console.

    The command prints the outcome of a sync itself; per-card details
    (including per-card failures) only go to the log file unless verbose is
    enabled.
    """

    def __init__(self, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if self.verbose:
            return True

        event = record.msg.get("event") if isinstance(record.msg, dict) else None
        if event is None:
            event = record.getMessage()
        if event in CLI_REPORTED_EVENTS:
            return False

        if record.levelno >= logging.ERROR:
            return True
        return isinstance(event, str) and event in USER_FACING_EVENTS


class UserFriendlyConsoleRenderer:
    """Renders user-facing events as short sentences for the terminal."""

    def __init__(self) -> None:
        self._fallback = ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    def __call__(
        self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = event_dict.get("event", "")
        level = str(event_dict.get("level", "info")).upper()

        if event == "sync_started":
            return f"Syncing {event_dict.get('file', '')}"

        if level in ("ERROR", "CRITICAL"):
            return f"ERROR: {event_dict.get('error', event)}"

        return str(self._fallback(logger, method_name, event_dict))


def _base_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    log_level: str = "INFO",
    log_dir: Path | None = None,
    log_file: Path | None = None,
    verbose: bool = False,
) -> None:
    """Configure structlog logging with dual output.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (default: ./logs)
        log_file: Specific log file path (overrides log_dir)
        verbose: If True, show all log messages on terminal
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    structlog.configure(
        processors=[
            *_base_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        # Module-level loggers may be used before configuration
        cache_logger_on_first_use=False,
    )

    if log_file:
        log_path = log_file
    else:
        log_path = (log_dir or Path("./logs")) / LOG_FILE_NAME
    log_path.parent.mkdir(exist_ok=True, parents=True)

    # Console handler - human-readable
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_get_level_no(log_level))
    console_handler.addFilter(UserFacingConsoleFilter(verbose=verbose))
    renderer: Any = (
        ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        if verbose
        else UserFriendlyConsoleRenderer()
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_base_processors(),
        )
    )
    root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    # File handler - JSON lines, size-based rotation
    file_handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=JSONRenderer(),
            foreign_pre_chain=_base_processors(),
        )
    )
    root_logger.addHandler(file_handler)
    _handlers.append(file_handler)

    get_logger(__name__).debug(
        "logging_configured",
        console_level=log_level,
        log_file=str(log_path),
        verbose=verbose,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to the given name.

    Logging is not auto-configured: until configure_logging() runs, events go
    through structlog's defaults, which keeps library use and tests free of
    file handlers.
    """
    return structlog.get_logger(name)
