"""Expose the Click command behind the ``multitest-cli`` script.

The command:

* sets up logging via :pyfunc:`multitest.utils.logging.setup_logging`;
* merges CLI options over the YAML defaults into one immutable
  :class:`~multitest.config.RunConfig`;
* opens the output sink once, runs the version matrix and closes the sink;
* turns every :class:`~multitest.utils.errors.MultitestError` into a
  :class:`click.ClickException` so failures exit with status 1.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Tuple

import click
import structlog

from multitest import __version__
from multitest.config import load_config
from multitest.engines import SubprocessRunner
from multitest.pipelines import run_matrix
from multitest.utils.errors import MultitestError
from multitest.utils.filters import split_commas
from multitest.utils.logging import setup_logging
from multitest.utils.sinks import open_sink

log = structlog.get_logger()

_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)


@click.command(
    context_settings=_CTX,
    help="""\b
multitest-cli – test one package against multiple toolchain versions.

Each version tag gets its own throw-away container image built from a
read-only bind of the package sources.
""",
)
@click.version_option(__version__)
@click.option("-p", "--pkg", "package", metavar="<pkg>", help="Package to test, relative to <root>/<prefix>.")
@click.option("-c", "--cmd", "command", metavar="<cmd>", help="Command to run inside each container [default: go test -v].")
@click.option(
    "-t",
    "--tags",
    multiple=True,
    callback=split_commas,
    metavar="<tags>",
    help="Comma-delimited versions to test (repeatable) [default: 1.7,1.8,1.9,latest].",
)
@click.option("-n", "--name", "image", metavar="<image>", help="Docker image name to use [default: golang].")
@click.option(
    "-o",
    "--file",
    "output",
    metavar="<file>",
    help="File to write container output to (stdout, stderr accepted). Discarded when omitted.",
)
@click.option("--root", type=click.Path(file_okay=False, path_type=Path), help="Package root [default: $GOPATH].")
@click.option("--engine", metavar="<exe>", help="Container engine executable [default: docker].")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML file with defaults (else ./multitest.yaml, else packaged defaults).",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug", is_flag=True, help="DEBUG console output, including every command.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console log output into this plain-text file.",
)
def main(  # noqa: D401 – Click callback
    package: str | None,
    command: str | None,
    tags: Tuple[str, ...] | None,
    image: str | None,
    output: str | None,
    root: Path | None,
    engine: str | None,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *multitest-cli*.

    Raises:
        click.ClickException: On any configuration, attach or container
            failure.
    """
    setup_logging(verbose=verbose, debug=debug, extra_text_log=save_logfile)

    try:
        cfg = load_config(
            config_path=config_path,
            overrides={
                "package": package,
                "command": command,
                "tags": tags,
                "image": image,
                "output": output,
                "root": root,
                "engine": engine,
            },
        )
        sink = open_sink(cfg.output)
        try:
            run_matrix(cfg, runner=SubprocessRunner(sink))
        finally:
            sink.close()
    except (MultitestError, OSError) as exc:
        log.error("multitest.failed", error=str(exc))
        raise click.ClickException(str(exc)) from exc

    click.echo(f"All {len(cfg.tags)} version(s) passed for {cfg.package}.")


cli = main
__all__: list[str] = ["main"]
