"""Display-width-aware cursor and scroll model.

Maps rune offsets to terminal cells and decides how far the editor window
scrolls so the cursor cell stays on screen, including when a wide glyph
straddles the right edge.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass

from .buffer import Position

_ZERO_WIDTH_CATEGORIES = {"Mn", "Me", "Cf", "Cc"}


def rune_width(ch: str) -> int:
    """Return how many terminal cells ``ch`` occupies (0, 1 or 2).

    Tabs count as one cell and are drawn as a space.
    """
    if ch == "\t":
        return 1
    if unicodedata.category(ch) in _ZERO_WIDTH_CATEGORIES:
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(runes: str, upto: int | None = None) -> int:
    """Sum cell widths of ``runes[:upto]`` (the whole string when ``upto`` is None)."""
    if upto is None:
        upto = len(runes)
    if upto <= 0:
        return 0
    return sum(rune_width(ch) for ch in runes[:upto])


@dataclass(frozen=True)
class Viewport:
    """Visible window into a document, measured in lines and rune offsets."""

    scroll_line: int = 0
    scroll_rune: int = 0
    width: int = 1
    height: int = 1

    @classmethod
    def sized(cls, width: int, height: int, scroll_line: int = 0, scroll_rune: int = 0) -> Viewport:
        return cls(max(0, scroll_line), max(0, scroll_rune), max(1, width), max(1, height))

    def resized(self, width: int, height: int) -> Viewport:
        return Viewport.sized(width, height, self.scroll_line, self.scroll_rune)

    def scrolled(self, scroll_line: int, scroll_rune: int) -> Viewport:
        return Viewport.sized(self.width, self.height, scroll_line, scroll_rune)


def ensure_visible(viewport: Viewport, lines: list[str], cursor: Position) -> Viewport:
    """Return ``viewport`` scrolled so that ``cursor`` lies inside it.

    Vertical scrolling moves the minimum number of lines. Horizontal scrolling
    is computed on the cursor line's display widths: snapping left to the
    cursor rune, or, past the right edge, choosing the smallest rune offset
    whose remaining width up to the cursor fits in ``width - 1`` cells.
    """
    scroll_line = viewport.scroll_line
    scroll_rune = viewport.scroll_rune
    height = max(1, viewport.height)
    width = max(1, viewport.width)

    if cursor.line < scroll_line:
        scroll_line = cursor.line
    elif cursor.line >= scroll_line + height:
        scroll_line = cursor.line - height + 1

    if 0 <= cursor.line < len(lines):
        runes = lines[cursor.line]
        cursor_disp = display_width(runes, cursor.rune)
        scroll_disp = display_width(runes, scroll_rune)
        if cursor_disp < scroll_disp:
            scroll_rune = cursor.rune
        elif cursor_disp >= scroll_disp + width:
            candidate = cursor.rune
            while candidate > 0 and cursor_disp - display_width(runes, candidate - 1) <= width - 1:
                candidate -= 1
            scroll_rune = candidate

    return Viewport.sized(width, height, scroll_line, scroll_rune)


def cursor_screen_column(viewport: Viewport, lines: list[str], cursor: Position) -> int:
    """Cell offset of the cursor relative to the left edge of the window."""
    if not 0 <= cursor.line < len(lines):
        return 0
    runes = lines[cursor.line]
    return display_width(runes, cursor.rune) - display_width(runes, viewport.scroll_rune)
