"""Line-oriented Markdown preview renderer.

Block structure is decided one line at a time with a small state value
carried between lines (inside a fenced code block, inside a table). Inline
markup is a left-to-right toggle scan over the line after its block prefix
has been stripped. Output is a list of styled cells per line, already
clipped to the preview window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .style import Style, StyleSpec, resolve_style
from .theme import Theme
from .viewport import Viewport, rune_width

FENCE_MARKER = "```"
RULE_CHAR = "─"

_BLOCKQUOTE_RE = re.compile(r"^ *> (.*)$")
_LIST_RE = re.compile(r"^\s*([-+*]|\d+\.)\s+")
_RULE_RE = re.compile(r"^ {0,3}([-_])(?:\s*\1){2,}\s*$")
_TABLE_SEPARATOR_RE = re.compile(r"^\s*\|[\s:|-]*-[\s:|-]*$")


class MarkdownBlockState(Enum):
    NORMAL = "normal"
    IN_FENCED_CODE = "in_fenced_code"
    IN_TABLE = "in_table"


class LineKind(Enum):
    PLAIN = "plain"
    FENCE = "fence"
    CODE = "code"
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    BLOCKQUOTE = "blockquote"
    LIST_ITEM = "list_item"
    RULE = "rule"
    TABLE_HEADER = "table_header"
    TABLE_SEPARATOR = "table_separator"
    TABLE_ROW = "table_row"


@dataclass(frozen=True)
class BlockLine:
    """One classified source line: its kind and the text left to render."""

    kind: LineKind
    text: str
    marker_end: int = 0


@dataclass(frozen=True)
class StyledCell:
    char: str
    style: Style
    width: int = 1


_HEADINGS = (
    ("### ", LineKind.HEADING3),
    ("## ", LineKind.HEADING2),
    ("# ", LineKind.HEADING1),
)


def classify_line(line: str, state: MarkdownBlockState) -> tuple[BlockLine, MarkdownBlockState]:
    """Classify ``line`` given the block state left by the previous line."""
    text = line.rstrip("\r\n")
    if text.strip().startswith(FENCE_MARKER):
        if state is MarkdownBlockState.IN_FENCED_CODE:
            return BlockLine(LineKind.FENCE, ""), MarkdownBlockState.NORMAL
        return BlockLine(LineKind.FENCE, ""), MarkdownBlockState.IN_FENCED_CODE
    if state is MarkdownBlockState.IN_FENCED_CODE:
        return BlockLine(LineKind.CODE, text), state

    for prefix, kind in _HEADINGS:
        if text.startswith(prefix):
            return BlockLine(kind, text[len(prefix) :]), MarkdownBlockState.NORMAL

    quote = _BLOCKQUOTE_RE.match(text)
    if quote is not None:
        return BlockLine(LineKind.BLOCKQUOTE, quote.group(1).strip()), MarkdownBlockState.NORMAL

    item = _LIST_RE.match(text)
    if item is not None:
        return BlockLine(LineKind.LIST_ITEM, text, marker_end=item.end(1)), MarkdownBlockState.NORMAL

    if _RULE_RE.match(text):
        return BlockLine(LineKind.RULE, text), MarkdownBlockState.NORMAL

    if text.lstrip().startswith("|"):
        if _TABLE_SEPARATOR_RE.match(text):
            kind = LineKind.TABLE_SEPARATOR
        elif state is MarkdownBlockState.IN_TABLE:
            kind = LineKind.TABLE_ROW
        else:
            kind = LineKind.TABLE_HEADER
        return BlockLine(kind, text), MarkdownBlockState.IN_TABLE

    return BlockLine(LineKind.PLAIN, text), MarkdownBlockState.NORMAL


def _find_link(runes: str, open_idx: int) -> tuple[int, int] | None:
    """Locate ``[text](url)`` starting at ``open_idx``.

    Returns ``(close_bracket, close_paren)`` indices, or ``None`` when the
    bracket is not followed by a complete parenthesized target.
    """
    close_bracket = runes.find("]", open_idx + 1)
    if close_bracket < 0 or close_bracket + 1 >= len(runes) or runes[close_bracket + 1] != "(":
        return None
    close_paren = runes.find(")", close_bracket + 2)
    if close_paren < 0:
        return None
    return close_bracket, close_paren


class _CellSink:
    """Collects cells until the window width is used up."""

    def __init__(self, width: int | None) -> None:
        self.width = width
        self.cells: list[StyledCell] = []
        self.col = 0

    @property
    def full(self) -> bool:
        return self.width is not None and self.col >= self.width

    def emit(self, ch: str, style: Style) -> bool:
        if ch == "\t":
            ch = " "
        w = rune_width(ch)
        if w == 0:
            return True
        if self.width is not None and self.col + w > self.width:
            self.col = self.width
            return False
        self.cells.append(StyledCell(ch, style, w))
        self.col += w
        return True


class MarkdownRenderer:
    """Render Markdown lines into styled cells using one theme snapshot."""

    def __init__(self, theme: Theme) -> None:
        md = theme.markdown
        self.base = resolve_style(StyleSpec(), theme)
        self.styles: dict[LineKind, Style] = {
            LineKind.PLAIN: self.base,
            LineKind.LIST_ITEM: self.base,
            LineKind.CODE: resolve_style(md.code_block, theme),
            LineKind.HEADING1: resolve_style(md.heading1, theme),
            LineKind.HEADING2: resolve_style(md.heading2, theme),
            LineKind.HEADING3: resolve_style(md.heading3, theme),
            LineKind.BLOCKQUOTE: resolve_style(md.blockquote, theme),
            LineKind.RULE: resolve_style(md.horizontal_rule, theme),
            LineKind.TABLE_HEADER: resolve_style(md.table_header, theme),
            LineKind.TABLE_SEPARATOR: resolve_style(md.table_border, theme),
            LineKind.TABLE_ROW: self.base,
        }
        self.inline_code = resolve_style(md.inline_code, theme)
        self.link = resolve_style(md.link, theme)
        self.list_marker = resolve_style(md.list_marker, theme)
        self.table_border = resolve_style(md.table_border, theme)

    def render_line(
        self,
        line: str,
        state: MarkdownBlockState = MarkdownBlockState.NORMAL,
        scroll_rune: int = 0,
        width: int | None = None,
    ) -> tuple[list[StyledCell], MarkdownBlockState]:
        """Render one line and return its cells plus the state for the next line."""
        block, next_state = classify_line(line, state)
        return self.render_block(block, scroll_rune, width), next_state

    def render_block(self, block: BlockLine, scroll_rune: int = 0, width: int | None = None) -> list[StyledCell]:
        sink = _CellSink(width)
        if block.kind is LineKind.FENCE:
            return sink.cells
        base = self.styles[block.kind]
        if block.kind is LineKind.RULE:
            count = width if width is not None else max(3, len(block.text.strip()))
            for _ in range(count):
                sink.emit(RULE_CHAR, base)
            return sink.cells
        if block.kind in {LineKind.CODE, LineKind.TABLE_SEPARATOR}:
            for ch in block.text[max(0, scroll_rune) :]:
                if not sink.emit(ch, base):
                    break
            return sink.cells
        self._render_inline(block, base, max(0, scroll_rune), sink)
        return sink.cells

    def _render_inline(self, block: BlockLine, base: Style, start: int, sink: _CellSink) -> None:
        # Toggle state starts fresh at the scroll offset; markers left of the
        # window are not replayed.
        runes = block.text
        n = len(runes)
        in_code = False
        in_emphasis = False
        in_table = block.kind in {LineKind.TABLE_HEADER, LineKind.TABLE_ROW}
        idx = start
        while idx < n and not sink.full:
            ch = runes[idx]

            if ch == "`":
                in_code = not in_code
                idx += 1
                continue

            if ch in "*_" and not in_code:
                prev_space = idx == 0 or runes[idx - 1].isspace()
                next_space = idx + 1 >= n or runes[idx + 1].isspace()
                if not prev_space and not next_space:
                    in_emphasis = not in_emphasis
                    idx += 1
                    continue

            if ch == "[" and not in_code:
                link = _find_link(runes, idx)
                if link is not None:
                    close_bracket, close_paren = link
                    for link_ch in runes[idx + 1 : close_bracket]:
                        if not sink.emit(link_ch, self.link):
                            break
                    idx = close_paren + 1
                    continue

            if in_code:
                style = self.inline_code
            elif in_emphasis:
                style = base.with_bold()
            else:
                style = base
            if idx < block.marker_end and not ch.isspace():
                style = self.list_marker
            elif in_table and ch == "|" and not in_code:
                style = self.table_border

            if not sink.emit(ch, style):
                break
            idx += 1

    def render(self, lines: list[str], viewport: Viewport) -> list[list[StyledCell]]:
        """Render the rows visible in ``viewport``.

        Block state is threaded from the first line of the document so fences
        above the window still apply. Row ``i`` of the result is line
        ``viewport.scroll_line + i``.
        """
        state = MarkdownBlockState.NORMAL
        end = min(len(lines), viewport.scroll_line + viewport.height)
        rows: list[list[StyledCell]] = []
        for index in range(end):
            block, state = classify_line(lines[index], state)
            if index < viewport.scroll_line:
                continue
            rows.append(self.render_block(block, viewport.scroll_rune, viewport.width))
        return rows


def visible_text(cells: list[StyledCell]) -> str:
    return "".join(cell.char for cell in cells)
