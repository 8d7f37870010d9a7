"""
Project root discovery.

The project root is the nearest directory, starting from the working
directory and walking up to the filesystem root, that holds one of the
configured marker files (``package.json``, ``Cargo.toml``, ...).
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence

from filewatcher.errors import RootNotFound

log = logging.getLogger(__name__)


def iter_ancestors(start_dir) -> Iterable[Path]:
    """Yield ``start_dir`` and each of its parents, nearest first."""
    current = Path(os.path.abspath(start_dir))
    yield current
    yield from current.parents


def find_project_root(start_dir, marker_names: Sequence[str]) -> Optional[Path]:
    """
    Find the nearest ancestor of ``start_dir`` containing any marker file.

    Directories are checked from ``start_dir`` upward; within a directory
    the markers are checked in the given order. Symlinked parents are not
    resolved, the path is only made absolute.

    Args:
        start_dir: Directory to start searching from.
        marker_names: File names identifying a project root.

    Returns:
        The matching directory, or None if no ancestor (including the
        filesystem root) contains a marker.
    """
    for directory in iter_ancestors(start_dir):
        for name in marker_names:
            if os.path.exists(os.path.join(directory, name)):
                log.debug(f"Found marker {name} in {directory}")
                return directory
    return None


def resolve_project_root(start_dir, marker_names: Sequence[str]) -> Path:
    """Like find_project_root, but raise RootNotFound when nothing matches."""
    root = find_project_root(start_dir, marker_names)
    if root is None:
        raise RootNotFound(start_dir, marker_names)
    return root
