"""Run pipelines: the per-version loop and the top-level orchestrator."""

from .matrix import check_source, run_matrix
from .versions import DescriptorFile, image_name, render_descriptor, run_all, run_version

__all__ = [
    "check_source",
    "run_matrix",
    "DescriptorFile",
    "image_name",
    "render_descriptor",
    "run_all",
    "run_version",
]
