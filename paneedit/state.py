"""Explicit application context threaded through the main loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .buffer import Position, TextBuffer
from .files import DEFAULT_LEFT_WIDTH, FileItem
from .viewport import Viewport

TEXT_EDITOR_PADDING = 2
CONTENT_TOP = 2


class Pane(Enum):
    FILES = "files"
    EDITOR = "editor"


class EditorMode(Enum):
    EDIT = "edit"
    PREVIEW = "preview"


@dataclass
class AppState:
    current_dir: Path
    files: list[FileItem] = field(default_factory=list)
    selected: int = 0
    show_hidden: bool = False
    current_file: Path | None = None
    buffer: TextBuffer = field(default_factory=TextBuffer)
    cursor: Position = Position()
    viewport: Viewport = Viewport()
    preview: Viewport = Viewport()
    mode: EditorMode = EditorMode.EDIT
    focus: Pane = Pane.FILES
    columns: int = 80
    rows: int = 24
    left_width: int = DEFAULT_LEFT_WIDTH
    show_help: bool = False
    status_message: str = ""
    dirty: bool = True

    @property
    def editor_left(self) -> int:
        return self.left_width + 1 + TEXT_EDITOR_PADDING

    @property
    def editor_width(self) -> int:
        return max(1, self.columns - self.left_width - 2 - TEXT_EDITOR_PADDING)

    @property
    def editor_height(self) -> int:
        return max(1, self.rows - 5)

    @property
    def file_rows(self) -> int:
        return max(0, self.rows - 5)
