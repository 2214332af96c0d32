"""Creation and removal of the per-run work area.

Removal happens while an outcome has already been decided, so every helper
here logs failures instead of raising them.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

WORK_PREFIX = "_testdir"


def make_work_area(package_path: str, *, base: Path | None = None) -> tuple[Path, Path]:
    """Create the ephemeral work area and its package-shaped subtree.

    Args:
        package_path: Relative path mirrored inside the work area
            (e.g. ``src/github.com/acme/widget``).
        base: Parent directory; the system temp dir when ``None``.

    Returns:
        ``(root, dest)`` – the work-area root and the empty destination
        directory for the attach.
    """
    root = Path(tempfile.mkdtemp(prefix=WORK_PREFIX, dir=base))
    dest = root / package_path
    try:
        dest.mkdir(parents=True)
    except OSError:
        remove_work_area(root)
        raise
    log.info("Created work area %s", root)
    return root, dest


def remove_work_area(path: Path) -> bool:
    """Recursively remove *path* via :func:`shutil.rmtree`.

    Returns:
        ``True`` when the tree vanished, ``False`` otherwise (including when
        it was already gone).
    """
    if not path.exists():
        log.info("Work area %s already removed", path)
        return False
    try:
        shutil.rmtree(path)
        log.info("Deleted directory %s", path)
        return True
    except OSError as exc:
        log.error("Could not delete %s: %s", path, exc)
        return False
