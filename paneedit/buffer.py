"""Line-oriented text buffer and cursor positions.

The buffer always holds at least one line. Every mutating operation returns
the cursor position it leaves behind and marks the buffer as modified.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Cursor location as ``(line index, rune offset within the line)``."""

    line: int = 0
    rune: int = 0


def load(content: str) -> list[str]:
    """Split whole-file content into lines; empty content yields ``[""]``."""
    if not content:
        return [""]
    return content.split("\n")


def serialize(lines: list[str]) -> str:
    """Join lines back into whole-file content."""
    return "\n".join(lines)


class TextBuffer:
    """Mutable list of lines plus a modified flag."""

    def __init__(self, content: str = "") -> None:
        self.lines: list[str] = load(content)
        self.modified = False

    @property
    def content(self) -> str:
        return serialize(self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def line(self, index: int) -> str:
        return self.lines[max(0, min(index, len(self.lines) - 1))]

    def replace_content(self, content: str) -> None:
        """Replace every line, e.g. with formatter output."""
        self.lines = load(content)
        self.modified = True

    def mark_saved(self) -> None:
        self.modified = False

    def _touch(self) -> None:
        if not self.lines:
            self.lines = [""]
        self.modified = True

    def clamp(self, pos: Position) -> Position:
        """Return ``pos`` forced inside the buffer bounds."""
        line = max(0, min(pos.line, len(self.lines) - 1))
        rune = max(0, min(pos.rune, len(self.lines[line])))
        return Position(line, rune)

    def insert(self, pos: Position, rune: str) -> Position:
        pos = self.clamp(pos)
        text = self.lines[pos.line]
        self.lines[pos.line] = text[: pos.rune] + rune + text[pos.rune :]
        self._touch()
        return Position(pos.line, pos.rune + len(rune))

    def delete_before(self, pos: Position) -> Position:
        """Backspace: remove the rune left of ``pos`` or merge into the previous line."""
        pos = self.clamp(pos)
        if pos.rune > 0:
            text = self.lines[pos.line]
            self.lines[pos.line] = text[: pos.rune - 1] + text[pos.rune :]
            self._touch()
            return Position(pos.line, pos.rune - 1)
        if pos.line == 0:
            return pos
        prev_len = len(self.lines[pos.line - 1])
        self.join_with_next(pos.line - 1)
        return Position(pos.line - 1, prev_len)

    def delete_at(self, pos: Position) -> Position:
        """Forward delete: remove the rune at ``pos`` or pull the next line up."""
        pos = self.clamp(pos)
        text = self.lines[pos.line]
        if pos.rune < len(text):
            self.lines[pos.line] = text[: pos.rune] + text[pos.rune + 1 :]
            self._touch()
        elif pos.line < len(self.lines) - 1:
            self.join_with_next(pos.line)
        return pos

    def split_line(self, pos: Position) -> Position:
        pos = self.clamp(pos)
        text = self.lines[pos.line]
        self.lines[pos.line : pos.line + 1] = [text[: pos.rune], text[pos.rune :]]
        self._touch()
        return Position(pos.line + 1, 0)

    def join_with_next(self, line_index: int) -> None:
        if line_index < 0 or line_index >= len(self.lines) - 1:
            return
        self.lines[line_index] += self.lines[line_index + 1]
        del self.lines[line_index + 1]
        self._touch()
