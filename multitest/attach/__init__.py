"""Read-only attach of the package source into the work area."""

from .strategies import BindStrategy, Bindfs, MountBind, detect_platform, strategy_for
from .verify import BACKOFF_MAX, BACKOFF_START, AttachHandle, attach, check_mount

__all__ = [
    "BindStrategy",
    "Bindfs",
    "MountBind",
    "detect_platform",
    "strategy_for",
    "AttachHandle",
    "attach",
    "check_mount",
    "BACKOFF_START",
    "BACKOFF_MAX",
]
