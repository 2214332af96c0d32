"""
multitest package initialisation.

Exposes the version string resolved from the installed distribution
metadata and re-exports :func:`multitest.config.load_config` so call-sites
can simply do::

    from multitest import load_config
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("multitest")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

from .config import load_config  # noqa: E402

__all__: list[str] = ["load_config", "__version__"]
