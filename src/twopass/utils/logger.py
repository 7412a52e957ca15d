"""Structured logging configuration for twopass."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from twopass.config import LoggingConfig


def _renderer(config: LoggingConfig):
    if config.format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _file_handler(output: str) -> Optional[logging.Handler]:
    """Open the log file for appending, or warn and return None."""
    path = Path(output)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        click.echo(f"Warning: cannot write log file {output}: {e}", err=True)
        return None


def setup_logging(config: LoggingConfig) -> None:
    """Configure structured logging.

    Records go to stderr and, when ``output`` is set, to a log file. stdout
    carries nothing but dry-run command lines.

    Args:
        config: Logging configuration
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(config),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, config.level.upper())
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.output:
        file_handler = _file_handler(config.output)
        if file_handler is not None:
            handlers.append(file_handler)

    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, usually named after the calling module."""
    return structlog.get_logger(name)
