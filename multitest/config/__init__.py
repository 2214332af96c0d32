"""
Configuration package façade.

* :func:`load_config` – read the YAML defaults, apply overrides and validate.
* :class:`RunConfig` – immutable model handed to every component.
"""

from .loader import load_config  # noqa: F401
from .schema import RunConfig  # noqa: F401

__all__: list[str] = ["load_config", "RunConfig"]
