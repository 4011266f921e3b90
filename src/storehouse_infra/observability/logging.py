"""Structured logging setup for the connector and the CLI.

structlog events and stdlib records (redis-py included) share one
``ProcessorFormatter`` on a single stderr handler. stdout is left to
command output, so ``storehouse read KEY | jq`` keeps working with debug
logging turned on.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog
from structlog.contextvars import merge_contextvars

if TYPE_CHECKING:
    from storehouse_core.config.settings import Settings

# Third-party loggers held at WARNING whatever the configured level
NOISY_LOGGERS: tuple[str, ...] = ("redis",)


def configure_logging(settings: Settings, stream: TextIO | None = None) -> None:
    """Send structlog and stdlib logging to ``stream``, stderr by default.

    ``settings.log_format`` picks JSON lines or the colored console
    renderer; ``settings.log_level`` applies to the root logger and gates
    structlog events before they are rendered.
    """
    target = stream if stream is not None else sys.stderr
    level = _resolve_level(settings.log_level)
    pre_chain = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_render_chain(settings.log_format, target),
        ],
        foreign_pre_chain=pre_chain,
    )
    _install_handler(formatter, target, level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_chain(log_format: str, stream: TextIO) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def _install_handler(formatter: logging.Formatter, stream: TextIO, level: int) -> None:
    """Replace whatever the root logger had with one handler on ``stream``."""
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)


def _resolve_level(level_name: str) -> int:
    """Map a level name (any case) to its number, INFO when unknown."""
    return logging.getLevelNamesMapping().get(level_name.strip().upper(), logging.INFO)
