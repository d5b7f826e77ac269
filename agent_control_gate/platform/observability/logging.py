"""Structured logging for the gate.

Log records from the gate and from the libraries it uses (httpx, tenacity)
are rendered by one structlog formatter on stderr, so a host that captures
the plugin's stdout never sees them. Every entry emitted while a tool call
is being gated carries the host session key.
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Host session key of the tool call being gated; set per before_tool_call handler
session_key_ctx: ContextVar[str | None] = ContextVar("session_key", default=None)

QUIET_LOGGERS = ("httpx", "httpcore")


def add_session_key(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Processor that stamps the current session key onto an entry.

    An explicit ``session_key`` passed by the caller takes precedence.
    """
    session_key = session_key_ctx.get()
    if session_key:
        event_dict.setdefault("session_key", session_key)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_session_key,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_output: bool | None) -> structlog.types.Processor:
    if json_output is None:
        # Auto: console for an interactive terminal, JSON when collected
        json_output = not sys.stderr.isatty()
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(log_level: str, json_output: bool | None = None) -> None:
    """Route structlog and stdlib logging through a single stderr handler.

    Args:
        log_level: Logging level name (INFO, DEBUG, etc.)
        json_output: True for JSON lines, False for colored console output,
            None to pick based on whether stderr is a terminal
    """
    shared_processors = _shared_processors()
    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to ``name`` (usually the module's __name__)."""
    return structlog.get_logger(name)
