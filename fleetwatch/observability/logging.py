"""Logging setup for the API server and CLI.

structlog renders every record, including those from the stdlib
``logging.getLogger`` calls in the analysis and store modules, so one
format covers the whole process. ``LOG_FORMAT`` picks JSON or console
output; the default follows ``ENVIRONMENT``.

Request handlers wrap their work in ``log_context`` so the request id
(or any other field) appears on every line logged underneath, whichever
module emits it.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import Processor

from fleetwatch.config.settings import get_settings

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "asyncio", "multipart")


def _renderer(json_logs: bool) -> list[Processor]:
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def setup_logging(json_logs: bool | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        json_logs: Force JSON (True) or console (False) rendering.
            Defaults to the configured ``LOG_FORMAT``.
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.json_logs

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta]
            + _renderer(json_logs),
        )
    )

    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(handler)
    root.setLevel(settings.log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def log_context(**fields) -> Iterator[None]:
    """Attach ``fields`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
