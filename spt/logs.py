"""
spt logging: structlog wired to stdlib logging on stderr.

Output modes
- console (default): structlog's console renderer, colored on a tty.
- json: one JSON object per line.

Library modules call get_logger(__name__), which always wraps a stdlib logger:
until the entry point calls configure_logging(), events are filtered by the
stdlib levels and dropped by the package NullHandler instead of being printed.
"""
import logging
import sys

import structlog


def get_logger(name, /):
    """
    structlog BoundLogger over logging.getLogger(name).
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def configure_logging(*, verbose=False, log_json=False):
    """
    configure structlog processors and route them through a stderr handler.

    - verbose: DEBUG for the 'spt' loggers (the pipeline events), WARNING otherwise.
    - log_json: JSON renderer instead of the console renderer.
    """
    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("spt").setLevel(logging.DEBUG if verbose else logging.WARNING)


__all__ = (
    "configure_logging",
    "get_logger",
)
