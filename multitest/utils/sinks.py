"""Destinations for the combined output of spawned container commands.

The command runner never decides where process output goes; it receives an
:class:`OutputSink` and asks it for a ``subprocess`` target.  Choosing the
concrete sink from the user's ``--file`` value happens in :func:`open_sink`.

Supported choices
-----------------
* ``None`` / ``""`` – discard everything (``subprocess.DEVNULL``).
* ``"stdout"`` / ``"stderr"`` – the interpreter's standard streams.
* any other string – a file path, truncated and opened once per run.
"""

from __future__ import annotations

import io
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any

from .errors import ConfigError


class OutputSink(ABC):
    """Abstract destination for process output."""

    @abstractmethod
    def target(self) -> Any:
        """Return a value accepted by ``subprocess.Popen(stdout=...)``.

        ``None`` means the sink has no file descriptor and the caller must
        pump the output through :meth:`write` instead.
        """

    def write(self, text: str) -> None:
        """Forward *text* when the sink cannot be handed to the child directly."""

    def flush(self) -> None:
        """Flush pending writes so child output lands after them."""

    def close(self) -> None:
        """Release the underlying resource, if the sink owns one."""


class NullSink(OutputSink):
    """Discard all output."""

    def target(self) -> Any:
        return subprocess.DEVNULL


class StreamSink(OutputSink):
    """Write to an already-open text stream such as :data:`sys.stdout`."""

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream

    def target(self) -> Any:
        try:
            self.stream.fileno()
        except (AttributeError, OSError, io.UnsupportedOperation):
            # e.g. click.testing.CliRunner swaps stdout for an in-memory buffer
            return None
        return self.stream

    def write(self, text: str) -> None:
        self.stream.write(text)

    def flush(self) -> None:
        self.stream.flush()


class FileSink(StreamSink):
    """Own a file opened once for the whole run."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(path.open("w", encoding="utf-8"))

    def close(self) -> None:
        self.stream.close()


def open_sink(choice: str | None) -> OutputSink:
    """Return the sink selected by *choice*.

    Args:
        choice: ``None``/empty for discard, ``"stdout"``, ``"stderr"`` or a
            file path.

    Returns:
        A ready-to-use :class:`OutputSink`.  Callers own it and must call
        :meth:`OutputSink.close` when the run is over.

    Raises:
        ConfigError: If the output file cannot be created.
    """
    if not choice:
        return NullSink()
    if choice == "stdout":
        return StreamSink(sys.stdout)
    if choice == "stderr":
        return StreamSink(sys.stderr)
    path = Path(choice).expanduser()
    try:
        return FileSink(path)
    except OSError as exc:
        raise ConfigError(f"error opening output file {path}: {exc}") from exc
