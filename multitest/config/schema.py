"""
Pydantic model describing one multitest run.

A :class:`RunConfig` is built once (from YAML defaults plus CLI overrides)
and handed to every component; nothing reads process-wide settings after
that point.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator


def _default_root() -> Path:
    """Return ``$GOPATH`` or Go's default ``~/go`` when it is unset."""
    gopath = os.environ.get("GOPATH")
    if gopath:
        # GOPATH may list several entries; packages resolve against the first.
        return Path(gopath.split(os.pathsep)[0]).expanduser()
    return Path.home() / "go"


class RunConfig(BaseModel, frozen=True):
    """Validated, immutable run settings.

    Attributes:
        package: Logical package path, e.g. ``github.com/acme/widget``.
        command: Test command executed inside each container.
        tags: Version tags in execution order; duplicates are kept.
        image: Base image name combined with each tag.
        output: Sink selector (``None`` discards, ``stdout``, ``stderr`` or a
            file path).
        root: Host directory the package path is resolved against.
        prefix: Sub-directory of *root* holding packages (``src`` for GOPATH).
        engine: Container engine executable.
        label: Repository label used for per-tag artifact names.
    """

    package: str
    command: str = "go test -v"
    tags: Tuple[str, ...] = ("1.7", "1.8", "1.9", "latest")
    image: str = "golang"
    output: Optional[str] = None
    root: Path = Field(default_factory=_default_root)
    prefix: str = "src"
    engine: str = "docker"
    label: str = "multi-test"

    # --------------------------- validators ------------------------------ #
    @field_validator("package")
    @classmethod
    def _package_not_blank(cls, v: str) -> str:
        """Reject an empty package (the ``pkg`` option must be set)."""
        v = v.strip().strip("/")
        if not v:
            raise ValueError("pkg must be set")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        """Accept ``"1.7,1.8"`` as well as a list; reject blank entries."""
        if isinstance(v, str):
            v = v.split(",")
        tags = tuple(str(t).strip() for t in v)
        if not tags:
            raise ValueError("must provide at least 1 version to test")
        if any(not t for t in tags):
            raise ValueError(f"blank version tag in {list(tags)!r}")
        return tags

    @field_validator("command", "image", "engine", "label")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    # --------------------------- convenience ----------------------------- #
    @property
    def package_path(self) -> str:
        """Package path relative to *root*, e.g. ``src/github.com/acme/widget``."""
        return f"{self.prefix}/{self.package}" if self.prefix else self.package

    @property
    def source_path(self) -> Path:
        """Absolute host directory holding the package sources."""
        return (self.root / self.package_path).expanduser().resolve()
