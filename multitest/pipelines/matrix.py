"""Top-level run: work area → attach → descriptor → version loop → teardown.

Resources are acquired in this order and released in reverse on every exit
path through a :class:`contextlib.ExitStack`:

1. the work area (removed recursively),
2. the attach handle (unbound),
3. the descriptor file handle (closed).

Teardown helpers log their own failures so they never replace the error
that ended the run.
"""

from __future__ import annotations

import time
from contextlib import ExitStack
from pathlib import Path
from typing import Callable

import structlog

from multitest.attach import BindStrategy, attach, strategy_for
from multitest.config import RunConfig
from multitest.engines import CommandRunner
from multitest.utils.cleanup import make_work_area, remove_work_area
from multitest.utils.errors import ConfigError

from .versions import DescriptorFile, run_all

log = structlog.get_logger()


def check_source(cfg: RunConfig) -> Path:
    """Return the package source directory or raise when it is unusable.

    Raises:
        ConfigError: If the directory is missing or not a directory.
    """
    source = cfg.source_path
    try:
        source.stat()
    except FileNotFoundError:
        raise ConfigError(f"could not find pkg: {str(source)!r}") from None
    except OSError as exc:
        raise ConfigError(f"error calling stat: {exc}") from exc
    if not source.is_dir():
        raise ConfigError(f"pkg is not a directory: {str(source)!r}")
    return source


def run_matrix(
    cfg: RunConfig,
    *,
    runner: CommandRunner,
    strategy: BindStrategy | None = None,
    sleep: Callable[[float], None] = time.sleep,
    work_base: Path | None = None,
) -> None:
    """Test ``cfg.package`` against every version in ``cfg.tags``.

    Args:
        cfg: Validated run configuration.
        runner: Runner shared by the bind helpers and the container engine.
        strategy: Bind mechanism; detected from the host platform when
            ``None``.
        sleep: Wait used by the attach readiness poll.
        work_base: Parent directory of the work area (system temp dir when
            ``None``).

    Raises:
        ConfigError: Before any side effect, when the package is missing.
        UnsupportedPlatformError: Before any side effect, on unknown hosts.
        AttachTimeoutError, CommandError: When attaching fails.
        VersionRunError: On the first failing version tag.
    """
    source = check_source(cfg)
    strategy = strategy or strategy_for()

    log.info(
        "matrix.start",
        package=cfg.package,
        tags=list(cfg.tags),
        image=cfg.image,
        engine=cfg.engine,
    )
    with ExitStack() as stack:
        root, dest = make_work_area(cfg.package_path, base=work_base)
        stack.callback(remove_work_area, root)

        handle = attach(source, dest, runner=runner, strategy=strategy, sleep=sleep)
        stack.callback(handle.release)

        descriptor = DescriptorFile(root)
        stack.callback(descriptor.close)

        run_all(
            cfg.tags,
            cfg.package_path,
            cfg.command,
            cfg.image,
            runner=runner,
            descriptor=descriptor,
            context=root,
            engine=cfg.engine,
            label=cfg.label,
        )
    log.info("matrix.done", package=cfg.package, tags=len(cfg.tags))
