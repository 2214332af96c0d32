"""Command runners."""

from .base import CommandRunner
from .local import SubprocessRunner

__all__ = ["CommandRunner", "SubprocessRunner"]
