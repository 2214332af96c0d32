"""Pytest configuration for multitest tests.

Provides a recording command runner so no test ever spawns ``mount`` or
``docker``.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from multitest.engines import CommandRunner
from multitest.utils.errors import CommandError


class RecordingRunner(CommandRunner):
    """Record every argv; optionally fail or act on selected commands."""

    def __init__(self, fail_on=None, on_call=None):
        self.calls: list[list[str]] = []
        self.fail_on = fail_on
        self.on_call = on_call

    def run(self, name, *args):
        argv = [name, *args]
        self.calls.append(argv)
        if self.on_call is not None:
            self.on_call(argv)
        if self.fail_on is not None and self.fail_on(argv):
            raise CommandError(argv, 1)


def _copy_on_mount(argv):
    """Emulate ``mount --bind`` / ``bindfs`` by copying the source tree."""
    if argv[0] in {"mount", "bindfs"}:
        shutil.copytree(argv[-2], argv[-1], dirs_exist_ok=True)


@pytest.fixture
def recorder():
    """Factory for :class:`RecordingRunner` instances."""
    return RecordingRunner


@pytest.fixture
def gopath(tmp_path) -> Path:
    """A GOPATH-style root holding ``src/github.com/acme/widget``."""
    root = tmp_path / "gopath"
    pkg = root / "src" / "github.com" / "acme" / "widget"
    pkg.mkdir(parents=True)
    (pkg / "widget.go").write_text("package widget\n")
    (pkg / "widget_test.go").write_text("package widget\n")
    return root


@pytest.fixture
def copy_on_mount():
    """Runner hook that makes a fake bind populate its destination."""
    return _copy_on_mount
