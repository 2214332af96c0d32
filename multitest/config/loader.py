"""
YAML configuration loader.

Search precedence for the defaults file (first match wins)
1. An explicit path argument (``--config`` on the CLI).
2. ``<cwd>/multitest.yaml`` – project-local override.
3. The packaged ``defaults.yaml`` shipped inside the wheel.

Values passed as *overrides* (typically CLI options) replace whatever the
YAML provides, except where the override is ``None``.
"""

from __future__ import annotations

from importlib.resources import files
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from multitest.utils.errors import ConfigError

from .schema import RunConfig

_DEFAULTS = files("multitest.config") / "defaults.yaml"
LOCAL_NAME = "multitest.yaml"


def _first_existing(*candidates: Optional[Path]) -> Optional[Path]:
    """Return the first path in *candidates* that exists on disk."""
    for p in candidates:
        if p is not None and p.exists():
            return p
    return None


def _load_yaml(path) -> dict:
    """Read a YAML mapping; an empty file yields an empty dict.

    *path* is a filesystem path or the packaged resource; both are read
    through ``read_text`` so zipped installs need no temporary copy.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"could not read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def resolve_config_path(explicit: Optional[Path], cwd: Optional[Path] = None):
    """Return the YAML source to load according to the documented precedence.

    The packaged default is returned as an :mod:`importlib.resources`
    traversable rather than a filesystem path.

    Raises:
        ConfigError: If *explicit* is given but does not exist.
    """
    if explicit is not None:
        explicit = Path(explicit).expanduser()
        if not explicit.exists():
            raise ConfigError(f"config file not found: {explicit}")
        return explicit
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    local = _first_existing(cwd / LOCAL_NAME)
    if local is not None:
        return local
    return _DEFAULTS


def load_config(
    *,
    config_path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    cwd: Optional[str | Path] = None,
) -> RunConfig:
    """Return a fully validated :class:`RunConfig`.

    Args:
        config_path: Explicit YAML file. ``None`` triggers the search
            sequence described in the module doc-string.
        overrides: Values that take precedence over the YAML; ``None``
            values are skipped.
        cwd: Directory searched for ``multitest.yaml`` (defaults to the
            current working directory).

    Raises:
        ConfigError: When the package is missing or validation fails.
    """
    path = resolve_config_path(
        Path(config_path) if config_path else None,
        Path(cwd) if cwd else None,
    )
    merged: dict = _load_yaml(path)
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    if not merged.get("package"):
        raise ConfigError("pkg flag must be set")

    try:
        return RunConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration – {exc}") from exc
