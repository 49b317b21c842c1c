"""structlog configuration for catgen.

Every record, whether from ``structlog.get_logger`` or a stdlib
``logging.getLogger``, goes through one ProcessorFormatter on stderr:
a console renderer by default, JSON lines with ``--log-json``.

Reconciliation progress (phases, per-resource writes) logs at INFO, so a
plain run shows it and ``--quiet`` hides it.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers held at WARNING even under --verbose.
QUIET_LIBRARIES: tuple[str, ...] = ("pluggy", "markdown_it")


def _catgen_level(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    return logging.WARNING if quiet else logging.INFO


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(*, log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Route catgen logging to stderr.

    Safe to call repeatedly: the root logger keeps exactly one handler.

    Args:
        verbose: DEBUG for ``catgen.*`` loggers (wins over *quiet*).
        quiet: WARNING and above only.
        log_json: JSON lines instead of the console renderer.
    """
    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(log_json=log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("catgen").setLevel(_catgen_level(verbose=verbose, quiet=quiet))
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
