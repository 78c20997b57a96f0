"""File-list entries and whole-file I/O for the left pane and editor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LEFT_WIDTH = 30


@dataclass(frozen=True)
class FileItem:
    name: str
    path: Path
    is_dir: bool

    @property
    def label(self) -> str:
        return f"{self.name}/" if self.is_dir else self.name


def list_directory(directory: Path, show_hidden: bool) -> list[FileItem]:
    """List ``directory`` sorted by name; unreadable directories list as empty."""
    try:
        children = list(directory.iterdir())
    except OSError as exc:
        logger.warning("cannot list %s: %s", directory, exc)
        return []
    items: list[FileItem] = []
    for child in sorted(children, key=lambda p: p.name):
        if not show_hidden and child.name.startswith("."):
            continue
        try:
            is_dir = child.is_dir()
        except OSError:
            is_dir = False
        items.append(FileItem(child.name, child, is_dir))
    return items


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def delete_file(path: Path) -> str | None:
    """Remove a regular file; returns an error message instead of raising.

    Directories are refused.
    """
    if path.is_dir():
        return f"Refusing to delete directory: {path.name}"
    try:
        path.unlink()
    except OSError as exc:
        logger.warning("cannot delete %s: %s", path, exc)
        return f"Delete failed: {exc}"
    return None


def clamp_left_width(total_width: int, desired_left: int) -> int:
    """Keep the file list at least 12 (usually 20) columns wide, leaving 12 for the editor."""
    max_possible = max(1, total_width - 2)
    min_left = max(12, min(20, total_width - 12))
    max_left = max(min_left, total_width - 12)
    max_left = min(max_left, max_possible)
    min_left = min(min_left, max_left)
    return max(min_left, min(desired_left, max_left))
