"""
Package-level logging configuration.

* Rich console output on **stderr**, so container output routed to stdout is
  never mixed with log records.
* Rotating **JSON** log file inside ``$MULTITEST_LOG_DIR`` when set.
* Optional plain-text mirror controlled via ``--save-logfile`` on the CLI.

:func:`setup_logging` wires everything and is called once by the CLI.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging"]

LOG_DIR_ENV = "MULTITEST_LOG_DIR"


# --------------------------------------------------------------------------- #
# Internal helpers – file-based handlers                                      #
# --------------------------------------------------------------------------- #
def _json_file_handler(log_dir: Path | None, level: int) -> logging.Handler | None:
    """Return a rotating JSON file handler, or *None* without a log directory.

    Args:
        log_dir: Explicit directory; ``$MULTITEST_LOG_DIR`` is used when
            *None*.
        level: Log-level for the handler.
    """
    env_dir = os.environ.get(LOG_DIR_ENV)
    if log_dir is None and env_dir:
        log_dir = Path(env_dir).expanduser()
    if log_dir is None:
        return None
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / "multitest.log",
        maxBytes=5_000_000,  # ~5 MB before rollover
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _plain_text_file_handler(path: Optional[Path], level: int) -> logging.Handler | None:
    """Return a plain-text file handler or *None* when *path* is *None*."""
    if path is None:
        return None

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    atexit.register(handler.close)
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    log_dir: Path | None = None,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure rich console logging and optional file mirrors.

    Args:
        verbose: Emit INFO-level messages to the console.
        debug: Emit DEBUG-level messages, including every spawned command.
        log_dir: Directory for the rotating JSON log (falls back to
            ``$MULTITEST_LOG_DIR``; no JSON log when neither is set).
        extra_text_log: Optional path for a plain-text mirror of console output.
    """
    console_lvl = (
        logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    )
    file_lvl = logging.DEBUG if debug else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            level=console_lvl,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
        )
    ]

    json_handler = _json_file_handler(log_dir, file_lvl)
    if json_handler:
        handlers.append(json_handler)

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    logging.basicConfig(
        level=logging.DEBUG,  # root logger stays at DEBUG; handlers filter
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    min_lvl = min(h.level for h in handlers)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            (
                StructlogConsoleRenderer(colors=False)
                if verbose or debug
                else structlog.processors.JSONRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_lvl),
        logger_factory=LoggerFactory(),
    )
