"""Cell-addressable screen surface and terminal mode control.

``CellScreen`` keeps a grid of ``(char, style)`` cells and flushes the whole
grid as one ANSI frame on ``show``. ``TerminalController`` owns raw mode and
the alternate screen.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty
from collections.abc import Callable
from dataclasses import dataclass

from .style import PLAIN_STYLE, Style
from .viewport import rune_width

CONTINUATION = ""


@dataclass
class Cell:
    char: str = " "
    style: Style = PLAIN_STYLE


class CellScreen:
    """In-memory cell grid that renders complete frames to a writer."""

    def __init__(self, columns: int, rows: int, write: Callable[[str], None]) -> None:
        self._write = write
        self.columns = max(1, columns)
        self.rows = max(1, rows)
        self._cells = self._blank_grid()
        self._cursor: tuple[int, int] | None = None

    def _blank_grid(self) -> list[list[Cell]]:
        return [[Cell() for _ in range(self.columns)] for _ in range(self.rows)]

    def size(self) -> tuple[int, int]:
        return self.columns, self.rows

    def resize(self, columns: int, rows: int) -> None:
        self.columns = max(1, columns)
        self.rows = max(1, rows)
        self._cells = self._blank_grid()

    def clear(self) -> None:
        self._cells = self._blank_grid()
        self._cursor = None

    def set_cell(self, col: int, row: int, ch: str, style: Style = PLAIN_STYLE) -> int:
        """Write one rune; returns the number of columns it covers (0 if clipped)."""
        if not (0 <= row < self.rows and 0 <= col < self.columns):
            return 0
        width = rune_width(ch)
        if width == 0:
            return 0
        if width == 2 and col + 1 >= self.columns:
            self._cells[row][col] = Cell(" ", style)
            return 1
        self._cells[row][col] = Cell(ch, style)
        if width == 2:
            self._cells[row][col + 1] = Cell(CONTINUATION, style)
        return width

    def put_text(self, col: int, row: int, text: str, style: Style = PLAIN_STYLE, max_col: int | None = None) -> int:
        """Write ``text`` left to right, stopping before ``max_col``; returns the end column."""
        limit = self.columns if max_col is None else min(max_col, self.columns)
        for ch in text:
            if col >= limit:
                break
            if col + rune_width(ch) > limit:
                break
            col += self.set_cell(col, row, ch, style)
        return col

    def cell(self, col: int, row: int) -> Cell:
        return self._cells[row][col]

    def row_text(self, row: int) -> str:
        return "".join(cell.char for cell in self._cells[row])

    def show_cursor(self, col: int, row: int) -> None:
        self._cursor = (col, row)

    def compose(self) -> str:
        """Build the ANSI frame for the current grid."""
        out: list[str] = ["\033[?25l\033[H"]
        for row_idx, row in enumerate(self._cells):
            out.append(f"\033[{row_idx + 1};1H")
            current: Style | None = None
            for cell in row:
                if cell.char == CONTINUATION:
                    continue
                if cell.style != current:
                    out.append(cell.style.sgr())
                    current = cell.style
                out.append(cell.char)
            out.append("\033[0m")
        if self._cursor is not None:
            col, row = self._cursor
            out.append(f"\033[{row + 1};{col + 1}H\033[?25h")
        return "".join(out)

    def show(self) -> None:
        self._write(self.compose())


class TerminalController:
    """Manage terminal mode transitions for the editor session."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Enter alternate screen and hide cursor.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        # Reset attributes, show cursor, and restore the main screen buffer.
        os.write(self.stdout_fd, b"\x1b[0m\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def write(self, frame: str) -> None:
        data = frame.encode("utf-8", errors="replace")
        while data:
            written = os.write(self.stdout_fd, data)
            data = data[written:]

    @contextlib.contextmanager
    def raw_mode(self):
        """Bracket code with TUI enter/exit calls; always restores the terminal."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
