"""Build, run and remove one test image per toolchain version.

For every version tag the same scratch Dockerfile is rewritten in place and
three container-engine commands are issued in order:

1. ``<engine> build -f <descriptor> -t <label>:<image>-<tag> <context>``
2. ``<engine> run --rm <label>:<image>-<tag>``
3. ``<engine> rmi -f <label>:<image>-<tag>``

The first failure stops the whole loop.  A failed build or run skips the
``rmi`` step for that tag, so its image may remain on the host.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Sequence

import structlog

from multitest.engines import CommandRunner
from multitest.utils.errors import CommandError, ConfigError, VersionRunError

log = structlog.get_logger()

DEFAULT_LABEL = "multi-test"

# RUN assumes the base image's working directory is the package root prefix
# (``/go`` for the official golang images).
_TEMPLATE = """FROM {image}:{tag}
COPY {path} {path}
RUN cd {path} && {cmd}"""


def render_descriptor(image: str, tag: str, path: str, cmd: str) -> str:
    """Return the Dockerfile text for one version tag.

    Values are interpolated verbatim; *cmd* is not escaped.
    """
    return _TEMPLATE.format(image=image, tag=tag, path=path, cmd=cmd)


def image_name(image: str, tag: str, label: str = DEFAULT_LABEL) -> str:
    """Return the per-tag artifact name ``<label>:<image>-<tag>``."""
    return f"{label}:{image}-{tag}"


class DescriptorFile:
    """Scratch Dockerfile reused for every version tag of one run.

    Not safe for concurrent use: every :meth:`render` replaces the previous
    content of the same file.
    """

    def __init__(self, directory: Path) -> None:
        self._fh = tempfile.NamedTemporaryFile(
            mode="w+",
            encoding="utf-8",
            prefix="Dockerfile",
            dir=directory,
            delete=False,
        )
        self.path = Path(self._fh.name)

    def render(self, image: str, tag: str, path: str, cmd: str) -> None:
        """Truncate the file and write the descriptor for *tag*."""
        self._fh.seek(0)
        self._fh.truncate(0)
        self._fh.write(render_descriptor(image, tag, path, cmd))
        self._fh.flush()

    def read(self) -> str:
        """Return the current on-disk content."""
        return self.path.read_text(encoding="utf-8")

    def close(self) -> None:
        """Close the handle; the file itself goes away with the work area."""
        if not self._fh.closed:
            self._fh.close()


def run_version(
    tag: str,
    pkg_path: str,
    cmd: str,
    image: str,
    *,
    runner: CommandRunner,
    descriptor: DescriptorFile,
    context: Path,
    engine: str = "docker",
    label: str = DEFAULT_LABEL,
) -> None:
    """Run the build/run/remove cycle for a single *tag*.

    Raises:
        VersionRunError: If any of the three commands fails.
    """
    descriptor.render(image, tag, pkg_path, cmd)
    name = image_name(image, tag, label)
    steps = (
        ("build", ("build", "-f", str(descriptor.path), "-t", name, str(context))),
        ("run", ("run", "--rm", name)),
        ("remove", ("rmi", "-f", name)),
    )
    for step, args in steps:
        log.info("versions.step", tag=tag, step=step, image=name)
        try:
            runner.run(engine, *args)
        except CommandError as exc:
            log.error("versions.failed", tag=tag, step=step, image=name)
            raise VersionRunError(tag, step, exc) from exc
    log.info("versions.passed", tag=tag, image=name)


def run_all(
    versions: Sequence[str],
    pkg_path: str,
    cmd: str,
    image: str,
    *,
    runner: CommandRunner,
    descriptor: DescriptorFile,
    context: Path,
    engine: str = "docker",
    label: str = DEFAULT_LABEL,
) -> None:
    """Test *pkg_path* against every tag in *versions*, in order.

    Args:
        versions: Version tags; order and duplicates are preserved.
        pkg_path: Package path relative to *context*, used in the descriptor.
        cmd: Test command appended to the descriptor's ``RUN`` line.
        image: Base image name (e.g. ``golang``).
        runner: Runner for the container engine commands.
        descriptor: Scratch Dockerfile rewritten for every tag.
        context: Build context directory (the work area).
        engine: Container engine executable.
        label: Repository part of the per-tag artifact name.

    Raises:
        ConfigError: If *versions* is empty; nothing is executed.
        VersionRunError: On the first failing tag.
    """
    if not versions:
        raise ConfigError("must provide at least 1 version to test")

    for tag in versions:
        run_version(
            tag,
            pkg_path,
            cmd,
            image,
            runner=runner,
            descriptor=descriptor,
            context=context,
            engine=engine,
            label=label,
        )
