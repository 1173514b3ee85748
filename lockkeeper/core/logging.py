"""Structured logging for the CLI and for library callers that want it.

Events go through structlog; third-party stdlib loggers are routed through
the same renderer so a run produces one consistent stream on stderr, which
keeps stdout free for ``--json`` results.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

FORMATS = ("console", "json")

# Loggers that are noisy at DEBUG and never carry lock file events.
_QUIET_LOGGERS = ("asyncio",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Arguments win over the environment:
        LOCKKEEPER_LOG_LEVEL  — level for ``lockkeeper.*`` (default: INFO)
        LOCKKEEPER_LOG_FORMAT — console | json (default: console)
    """
    level = (level or os.environ.get("LOCKKEEPER_LOG_LEVEL") or "INFO").upper()
    fmt = (fmt or os.environ.get("LOCKKEEPER_LOG_FORMAT") or "console").lower()
    if fmt not in FORMATS:
        raise ValueError(f"unknown log format {fmt!r}, expected one of {', '.join(FORMATS)}")

    processors = _shared_processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers: dict[str, dict[str, str]] = {"lockkeeper": {"level": level}}
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(fmt),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            # Root stays at WARNING so library chatter needs an explicit opt-in.
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": loggers,
        }
    )
