"""Frame composition: paints the whole UI onto a ``CellScreen``.

Rendering is presentation-only. It reads ``AppState`` and one theme snapshot
and never mutates either.
"""

from __future__ import annotations

from .highlight import CodeHighlighter, profile_for_path
from .markdown import MarkdownRenderer
from .screen import CellScreen
from .state import CONTENT_TOP, AppState, EditorMode, Pane
from .style import Style, StyleSpec, resolve_style
from .theme import Theme
from .viewport import cursor_screen_column, rune_width

FILES_TITLE = "Files"
EDITOR_TITLE = "  Editor"
MODIFIED_MARK = " *"
BORDER_CHAR = "│"
ELLIPSIS = "..."

HELP_LINES: tuple[str, ...] = (
    "Keyboard shortcuts",
    "",
    "NAVIGATION",
    "Up/Down      move in the file list",
    "Right/Enter  open file or directory",
    "Left         go to the parent directory",
    "",
    "PANELS",
    "Ctrl+Left    focus the file list",
    "Ctrl+Right   focus the editor",
    "Esc          back to the file list",
    "",
    "EDITING",
    "Tab          toggle edit / preview",
    "Ctrl+S       save file",
    "Ctrl+F       format (gofmt)",
    "Ctrl+G       format (goimports)",
    "Delete       delete file (file list)",
    "",
    "OTHER",
    ".            show/hide hidden files",
    "?            show this help",
    "Ctrl+Q       quit",
    "",
    "A * after the editor title marks unsaved changes.",
    "",
    "Press any key to close this help...",
)


def _truncate(text: str, max_cols: int) -> str:
    """Clip ``text`` to ``max_cols`` display cells, ending in an ellipsis when cut."""
    total = sum(rune_width(ch) for ch in text)
    if total <= max_cols:
        return text
    if max_cols <= len(ELLIPSIS):
        return ELLIPSIS[:max_cols]
    budget = max_cols - len(ELLIPSIS)
    out: list[str] = []
    used = 0
    for ch in text:
        width = rune_width(ch)
        if used + width > budget:
            break
        out.append(ch)
        used += width
    return "".join(out) + ELLIPSIS


def _list_offset(state: AppState) -> int:
    visible = state.file_rows
    if visible <= 0 or state.selected < visible:
        return 0
    return state.selected - visible + 1


def render_file_list(screen: CellScreen, state: AppState, theme: Theme) -> None:
    panel = theme.file_panel
    border = Style(fg=theme.border, bg=theme.background)
    for row in range(max(0, state.rows - 3)):
        screen.set_cell(state.left_width, row, BORDER_CHAR, border)

    max_cols = max(0, state.left_width - 2)
    screen.put_text(1, 0, FILES_TITLE, resolve_style(panel.title, theme), max_col=1 + max_cols)

    item_style = resolve_style(panel.item, theme)
    dir_style = resolve_style(panel.directory, theme)
    selected_style = resolve_style(panel.selected, theme)
    offset = _list_offset(state)
    for i in range(state.file_rows):
        index = offset + i
        if index >= len(state.files):
            break
        item = state.files[index]
        if index == state.selected and state.focus is Pane.FILES:
            style = selected_style
        elif item.is_dir:
            style = dir_style
        else:
            style = item_style
        screen.put_text(1, CONTENT_TOP + i, _truncate(item.label, max_cols), style, max_col=1 + max_cols)


def _draw_runes(screen: CellScreen, col: int, row: int, text: str, style: Style, limit: int) -> int:
    for ch in text:
        if ch == "\t":
            ch = " "
        width = rune_width(ch)
        if width == 0:
            continue
        if col + width > limit:
            return limit
        col += screen.set_cell(col, row, ch, style)
    return col


def render_editor_text(screen: CellScreen, state: AppState, theme: Theme) -> None:
    lines = state.buffer.lines
    viewport = state.viewport
    left = state.editor_left
    limit = left + viewport.width
    text_style = resolve_style(theme.editor_panel.text, theme)
    end = min(len(lines), viewport.scroll_line + viewport.height)

    profile = profile_for_path(state.current_file)
    highlighted = None
    if profile is not None:
        highlighted = CodeHighlighter(profile, theme).highlight_lines(lines[:end])

    for i in range(viewport.scroll_line, end):
        row = CONTENT_TOP + i - viewport.scroll_line
        if highlighted is None:
            pieces = [(lines[i], text_style)]
        else:
            pieces = [(token.text, token.style) for token in highlighted[i]]
        skip = viewport.scroll_rune
        col = left
        for text, style in pieces:
            if skip >= len(text):
                skip -= len(text)
                continue
            col = _draw_runes(screen, col, row, text[skip:], style, limit)
            skip = 0
            if col >= limit:
                break

    if state.focus is Pane.EDITOR:
        col = left + cursor_screen_column(viewport, lines, state.cursor)
        row = CONTENT_TOP + state.cursor.line - viewport.scroll_line
        if left <= col < limit and CONTENT_TOP <= row < CONTENT_TOP + viewport.height:
            cursor_style = resolve_style(theme.editor_panel.cursor, theme)
            line = lines[state.cursor.line]
            ch = line[state.cursor.rune] if state.cursor.rune < len(line) else " "
            if ch == "\t" or rune_width(ch) == 0:
                ch = " "
            screen.set_cell(col, row, ch, cursor_style)
            screen.show_cursor(col, row)


def render_preview(screen: CellScreen, state: AppState, theme: Theme) -> None:
    left = state.editor_left
    limit = left + state.preview.width
    rows = MarkdownRenderer(theme).render(state.buffer.lines, state.preview)
    for i, cells in enumerate(rows):
        col = left
        for cell in cells:
            if col + cell.width > limit:
                break
            col += screen.set_cell(col, CONTENT_TOP + i, cell.char, cell.style)


def render_help(screen: CellScreen, state: AppState, theme: Theme) -> None:
    style = resolve_style(theme.editor_panel.text, theme)
    title_style = resolve_style(theme.editor_panel.title, theme)
    limit = state.editor_left + state.editor_width
    for i, text in enumerate(HELP_LINES[: state.editor_height]):
        screen.put_text(state.editor_left, CONTENT_TOP + i, text, title_style if i == 0 else style, max_col=limit)


def render_editor(screen: CellScreen, state: AppState, theme: Theme) -> None:
    title = EDITOR_TITLE + (MODIFIED_MARK if state.buffer.modified else "")
    screen.put_text(
        state.left_width + 1,
        0,
        title,
        resolve_style(theme.editor_panel.title, theme),
        max_col=max(0, state.columns - 1),
    )
    if state.show_help:
        render_help(screen, state, theme)
    elif state.mode is EditorMode.PREVIEW:
        render_preview(screen, state, theme)
    else:
        render_editor_text(screen, state, theme)


def status_segments(state: AppState) -> list[tuple[str, str]]:
    """Status line split into ``(text, role)`` runs; roles name status-bar styles."""
    segments = [
        ("Panel: ", "text"),
        (f"{state.focus.value:<6}", "accent" if state.focus is Pane.FILES else "accent_alt"),
        (" | Mode: ", "text"),
        (f"{state.mode.value:<7}", "accent" if state.mode is EditorMode.EDIT else "accent_alt"),
        (" | File: ", "text"),
        (state.current_file.name if state.current_file is not None else "", "text"),
    ]
    if state.status_message:
        segments.append((f"  {state.status_message}", "text"))
    return segments


def render_status(screen: CellScreen, state: AppState, theme: Theme) -> None:
    bar = theme.status_bar
    styles: dict[str, StyleSpec] = {"text": bar.text, "accent": bar.accent, "accent_alt": bar.accent_alt}
    col = 0
    row = state.rows - 1
    for text, role in status_segments(state):
        col = screen.put_text(col, row, text, resolve_style(styles[role], theme))


def render_frame(screen: CellScreen, state: AppState, theme: Theme) -> None:
    """Paint one complete frame and flush it."""
    if screen.size() != (state.columns, state.rows):
        screen.resize(state.columns, state.rows)
    screen.clear()
    base = resolve_style(StyleSpec(), theme)
    if base != Style():
        for row in range(state.rows):
            for col in range(state.columns):
                screen.set_cell(col, row, " ", base)
    render_file_list(screen, state, theme)
    render_editor(screen, state, theme)
    render_status(screen, state, theme)
    screen.show()
