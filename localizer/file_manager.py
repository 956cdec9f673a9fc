"""File type detection, output naming and path-checked I/O."""

import fnmatch
import os
from typing import Iterable, Optional

from . import OUTPUT_SUFFIX

SUPPORTED_EXTENSIONS = {
    ".json": "json",
    ".js": "js", ".jsx": "js", ".mjs": "js", ".cjs": "js",
    ".ts": "ts",
    ".tsx": "tsx",
    ".html": "html", ".htm": "html",
    ".css": "css", ".scss": "css", ".less": "css",
}

EXCLUDE_DIRS = ("node_modules", ".git", "dist", "build", ".next", "out")

_TRANSLATED_PATTERN = f"*{OUTPUT_SUFFIX}.*"   # home-ar.json


def detect_file_type(path: str) -> str:
    """json | html | js | ts | tsx | css | unknown"""
    ext = os.path.splitext(path)[1].lower()
    return SUPPORTED_EXTENSIONS.get(ext, "unknown")


def get_output_path(path: str) -> str:
    """src/home.json -> src/home-ar.json"""
    base, ext = os.path.splitext(path)
    return f"{base}{OUTPUT_SUFFIX}{ext}"


def is_within_project_root(path: str, project_root: str) -> bool:
    resolved = os.path.realpath(path)
    root = os.path.realpath(project_root)
    return resolved == root or resolved.startswith(root + os.sep)


def is_translated_output(path: str) -> bool:
    return fnmatch.fnmatch(os.path.basename(path), _TRANSLATED_PATTERN)


def should_exclude_file(path: str, project_root: str,
                        tool_root: Optional[str] = None,
                        exclude_dirs: Iterable[str] = EXCLUDE_DIRS) -> bool:
    """True for files the localizer must never read or overwrite."""
    if not is_within_project_root(path, project_root):
        return True
    if tool_root and is_within_project_root(path, tool_root):
        return True

    rel = os.path.relpath(os.path.realpath(path), os.path.realpath(project_root))
    parts = rel.split(os.sep)
    if any(part in exclude_dirs for part in parts[:-1]):
        return True
    return is_translated_output(path)


def read_file_safe(path: str, project_root: str,
                   tool_root: Optional[str] = None) -> str:
    """Read a supported project file.  Raises ValueError for rejected paths."""
    if detect_file_type(path) == "unknown":
        raise ValueError(f"Unsupported file type: {path}")
    if should_exclude_file(path, project_root, tool_root):
        raise ValueError(f"File is outside the project or excluded: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def write_file_safe(path: str, content: str, project_root: Optional[str] = None):
    """Write ``content``, creating parent directories.

    With ``project_root`` given, paths outside it are rejected with ValueError.
    """
    if project_root and not is_within_project_root(path, project_root):
        raise ValueError(f"Refusing to write outside the project: {path}")
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
