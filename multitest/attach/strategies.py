"""Platform-specific ways of binding a source directory read-only.

Each strategy knows the single command that attaches a directory and the
command that detaches it again.  :func:`strategy_for` looks a strategy up by
platform identifier; the registry is deliberately tiny so a new platform is
one class plus one dictionary entry.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, Optional

from multitest.engines import CommandRunner
from multitest.utils.errors import UnsupportedPlatformError


@dataclass(frozen=True)
class BindStrategy:
    """Attach/release commands for one platform."""

    name: str

    def attach(self, runner: CommandRunner, src: str, dst: str) -> None:
        """Bind *src* read-only onto *dst*."""
        raise NotImplementedError

    def release(self, runner: CommandRunner, dst: str) -> None:
        """Undo the bind at *dst*."""
        runner.run("umount", dst)


class MountBind(BindStrategy):
    """Linux kernel read-only bind mount."""

    def attach(self, runner: CommandRunner, src: str, dst: str) -> None:
        runner.run("mount", "--bind", "-r", src, dst)


class Bindfs(BindStrategy):
    """User-space FUSE bind (macOS); the mount appears asynchronously."""

    def attach(self, runner: CommandRunner, src: str, dst: str) -> None:
        runner.run("bindfs", "--perms=a-w", src, dst)


# TODO: nullfs read-only mounts for FreeBSD.
_STRATEGIES: Dict[str, BindStrategy] = {
    "linux": MountBind("linux"),
    "darwin": Bindfs("darwin"),
}


def detect_platform() -> str:
    """Return the normalised platform identifier of the running interpreter."""
    plat = sys.platform
    for key in _STRATEGIES:
        if plat.startswith(key):
            return key
    return plat


def strategy_for(platform_id: Optional[str] = None) -> BindStrategy:
    """Return the bind strategy for *platform_id* (detected when ``None``).

    Raises:
        UnsupportedPlatformError: If no strategy is registered for the platform.
    """
    plat = platform_id or detect_platform()
    try:
        return _STRATEGIES[plat]
    except KeyError:
        raise UnsupportedPlatformError(plat) from None
