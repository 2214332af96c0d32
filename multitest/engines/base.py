"""Command runners used to invoke mount helpers and the container engine."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CommandRunner(ABC):
    """Abstract runner for external programs.

    Concrete implementations spawn a process, route its combined output to a
    sink and raise :class:`multitest.utils.errors.CommandError` on failure.
    The interface is a single method so tests can substitute a recorder.
    """

    @abstractmethod
    def run(self, name: str, *args: str) -> None:
        """Run program *name* with *args* and wait for it to finish.

        Args:
            name: Executable looked up on ``$PATH``.
            *args: Arguments passed verbatim, without a shell.

        Raises:
            CommandError: If the program cannot be started or exits non-zero.
        """
        raise NotImplementedError
