"""Local subprocess runner."""

from __future__ import annotations

import subprocess

import structlog

from multitest.utils.errors import CommandError
from multitest.utils.sinks import NullSink, OutputSink

from .base import CommandRunner

log = structlog.get_logger()


class SubprocessRunner(CommandRunner):
    """Run programs on the host with both output streams sent to one sink."""

    def __init__(self, sink: OutputSink | None = None) -> None:
        """Configure the runner.

        Args:
            sink: Destination for stdout *and* stderr of every spawned
                program.  Defaults to discarding output.
        """
        self.sink = sink or NullSink()

    def run(self, name: str, *args: str) -> None:
        """Execute *name* with *args* and wait for completion.

        Output is written straight to the sink's file descriptor when it has
        one; otherwise lines are forwarded as they arrive.

        Raises:
            CommandError: If the program is missing or exits non-zero.
        """
        cmd = [name, *args]
        log.debug("run.cmd", cmd=" ".join(cmd))
        self.sink.flush()
        target = self.sink.target()
        try:
            with subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE if target is None else target,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            ) as proc:
                if target is None and proc.stdout is not None:
                    for line in proc.stdout:
                        self.sink.write(line)
                returncode = proc.wait()
        except OSError as exc:
            log.error("run.spawn_failed", cmd=cmd, error=str(exc))
            raise CommandError(cmd, reason=str(exc)) from exc
        finally:
            self.sink.flush()

        if returncode != 0:
            log.debug("run.failed", cmd=cmd, returncode=returncode)
            raise CommandError(cmd, returncode)
