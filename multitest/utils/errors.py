"""Exceptions raised across the multitest run pipeline.

Every error derives from :class:`MultitestError` so the CLI layer can turn
any of them into a single-line :class:`click.ClickException`.
"""

from __future__ import annotations

from typing import Sequence


class MultitestError(RuntimeError):
    """Base class for unrecoverable run failures."""


class ConfigError(MultitestError):
    """Raised when the run configuration is incomplete or inconsistent.

    Always raised before any external process is spawned or any temporary
    resource is created.
    """


class UnsupportedPlatformError(MultitestError):
    """Raised when no bind mechanism is known for the host platform."""

    def __init__(self, platform_id: str) -> None:
        self.platform_id = platform_id
        super().__init__(f"{platform_id} not supported yet")


class AttachTimeoutError(MultitestError):
    """Raised when a bind succeeded but the destination never became populated."""

    def __init__(self, dest: str, attempts: int) -> None:
        self.dest = dest
        self.attempts = attempts
        super().__init__(f"mount took too long: {dest} still empty after {attempts} checks")


class CommandError(MultitestError):
    """Raised when an external command cannot be spawned or exits non-zero.

    Attributes:
        argv: Full command vector that was executed.
        returncode: Exit status, or ``None`` when the process never started.
    """

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.reason = reason
        cmdline = " ".join(self.argv)
        if returncode is not None:
            detail = f"exit status {returncode}"
        else:
            detail = reason or "could not be started"
        super().__init__(f"command {cmdline!r} failed: {detail}")


class VersionRunError(MultitestError):
    """Raised when the build, run or remove step fails for one version tag."""

    def __init__(self, tag: str, step: str, cause: Exception) -> None:
        self.tag = tag
        self.step = step
        self.cause = cause
        super().__init__(f"version {tag!r}: {step} failed: {cause}")
