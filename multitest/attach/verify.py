"""Bind a source tree into the work area and wait until it is visible.

The bind command returning success does not mean the destination is
populated: ``bindfs`` on macOS mounts asynchronously.  :func:`attach`
therefore polls the destination by listing a single entry, backing off
exponentially between attempts.

Backoff policy
--------------
The wait starts at :data:`BACKOFF_START` and doubles after every empty
listing.  Polling continues only while the *next* wait is below
:data:`BACKOFF_MAX`; the cap bounds the step size, not elapsed wall-clock
time.  With the defaults that is five listings separated by waits of
0.5, 1, 2, 4 and 8 seconds before :class:`AttachTimeoutError` is raised.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Callable

import structlog

from multitest.engines import CommandRunner
from multitest.utils.errors import AttachTimeoutError, CommandError, ConfigError

from .strategies import BindStrategy, strategy_for

log = structlog.get_logger()

BACKOFF_START = 0.5
BACKOFF_MAX = 10.0


def check_mount(dst: Path) -> bool:
    """Return ``True`` when *dst* lists at least one entry.

    An empty directory means the bind has not taken effect yet.

    Raises:
        OSError: Any failure to open or read *dst*; the caller treats it as
            fatal.
    """
    with os.scandir(dst) as it:
        return next(it, None) is not None


class AttachHandle:
    """An active bind that must be released exactly once."""

    def __init__(
        self,
        strategy: BindStrategy,
        runner: CommandRunner,
        source: Path,
        dest: Path,
    ) -> None:
        self.strategy = strategy
        self.runner = runner
        self.source = source
        self.dest = dest
        self.released = False
        self.error: Exception | None = None

    def release(self) -> bool:
        """Undo the bind.

        Safe to call after the destination has been torn down: failures are
        logged and kept in :attr:`error` instead of being raised.  Repeated
        calls do nothing and return the first outcome.

        Returns:
            ``True`` when the unbind command succeeded.
        """
        if self.released:
            return self.error is None
        self.released = True
        try:
            self.strategy.release(self.runner, str(self.dest))
        except CommandError as exc:
            self.error = exc
            log.warning("attach.release_failed", dest=str(self.dest), error=str(exc))
            return False
        log.info("attach.released", dest=str(self.dest))
        return True


def attach(
    source: Path,
    dest: Path,
    *,
    runner: CommandRunner,
    strategy: BindStrategy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    check: Callable[[Path], bool] = check_mount,
) -> AttachHandle:
    """Bind *source* read-only onto *dest* and wait until it is populated.

    Args:
        source: Existing directory to expose.
        dest: Existing, empty directory inside the work area.
        runner: Runner used to spawn the bind command.
        strategy: Bind mechanism; looked up for the host platform when
            ``None``.
        sleep: Blocking wait between readiness checks.
        check: Readiness probe; returns ``False`` while *dest* is empty.

    Returns:
        Handle whose :meth:`AttachHandle.release` undoes the bind.

    Raises:
        ConfigError: If *source* or *dest* do not exist.
        UnsupportedPlatformError: If no bind mechanism fits the host.
        CommandError: If the bind command fails.
        AttachTimeoutError: If *dest* stays empty for the whole backoff budget.
        OSError: If listing *dest* fails for any reason other than emptiness.
    """
    if not source.is_dir():
        raise ConfigError(f"could not find pkg: {str(source)!r}")
    if not dest.is_dir():
        raise ConfigError(f"attach destination does not exist: {str(dest)!r}")

    strategy = strategy or strategy_for()
    log.info("attach.bind", strategy=strategy.name, source=str(source), dest=str(dest))
    strategy.attach(runner, str(source), str(dest))
    handle = AttachHandle(strategy, runner, source, dest)

    attempts = 0
    backoff = BACKOFF_START
    try:
        while backoff < BACKOFF_MAX:
            attempts += 1
            if check(dest):
                log.info("attach.ready", dest=str(dest), attempts=attempts)
                return handle
            log.debug("attach.waiting", dest=str(dest), backoff=backoff)
            sleep(backoff)
            backoff *= 2
        raise AttachTimeoutError(str(dest), attempts)
    except BaseException:
        # The caller never receives the handle, so undo the bind here.
        handle.release()
        raise
