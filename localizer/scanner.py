"""Project scanner — finds translatable source files under a project root."""

import logging
import os
from typing import Iterable, Optional

from .file_manager import EXCLUDE_DIRS, detect_file_type, should_exclude_file

log = logging.getLogger(__name__)


def scan_files(project_root: str, tool_root: Optional[str] = None,
               exclude_dirs: Iterable[str] = EXCLUDE_DIRS) -> list:
    """Return sorted absolute paths of supported, non-excluded files."""
    root = os.path.abspath(project_root)
    if not os.path.isdir(root):
        raise ValueError(f"Project root is not a directory: {root}")
    exclude_dirs = tuple(exclude_dirs)
    tool = os.path.realpath(tool_root) if tool_root else None

    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never descends into excluded trees
        dirnames[:] = [
            d for d in dirnames
            if d not in exclude_dirs
            and os.path.realpath(os.path.join(dirpath, d)) != tool
        ]
        for name in filenames:
            path = os.path.join(dirpath, name)
            if detect_file_type(path) == "unknown":
                continue
            if should_exclude_file(path, root, tool_root, exclude_dirs):
                continue
            found.append(path)

    found.sort()
    log.info("Found %d translatable files under %s", len(found), root)
    return found


def count_by_type(paths: Iterable[str]) -> dict:
    """{"json": 3, "html": 1, ...} for the scan summary."""
    counts = {}
    for path in paths:
        file_type = detect_file_type(path)
        counts[file_type] = counts.get(file_type, 0) + 1
    return counts
