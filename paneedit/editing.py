"""State transitions for file navigation, cursor movement, and edits.

Every function takes the single ``AppState`` and mutates it in place. Edit and
movement commands re-run ``ensure_visible`` so the viewport always contains the
cursor afterwards, and mark the state dirty for the next redraw.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .buffer import Position, TextBuffer
from .files import delete_file, list_directory, read_text, write_text
from .formatter import formatter_command, run_formatter
from .highlight import profile_for_path
from .state import AppState, EditorMode, Pane
from .viewport import ensure_visible

logger = logging.getLogger(__name__)


def sync_viewports(state: AppState) -> None:
    """Resize both viewports to the current editor geometry."""
    state.viewport = ensure_visible(
        state.viewport.resized(state.editor_width, state.editor_height),
        state.buffer.lines,
        state.cursor,
    )
    state.preview = state.preview.resized(state.editor_width, state.editor_height)
    state.dirty = True


def _follow_cursor(state: AppState, cursor: Position) -> None:
    state.cursor = state.buffer.clamp(cursor)
    state.viewport = ensure_visible(state.viewport, state.buffer.lines, state.cursor)
    state.dirty = True


# File list.


def reload_files(state: AppState) -> None:
    state.files = list_directory(state.current_dir, state.show_hidden)
    if state.selected >= len(state.files):
        state.selected = max(0, len(state.files) - 1)
    state.dirty = True


def move_selection(state: AppState, delta: int) -> None:
    if not state.files:
        state.selected = 0
        return
    state.selected = max(0, min(len(state.files) - 1, state.selected + delta))
    state.dirty = True


def enter_directory(state: AppState, directory: Path) -> None:
    state.current_dir = directory
    state.selected = 0
    reload_files(state)
    state.focus = Pane.FILES


def go_back(state: AppState) -> None:
    parent = state.current_dir.parent
    if parent != state.current_dir:
        enter_directory(state, parent)


def toggle_hidden(state: AppState) -> None:
    state.show_hidden = not state.show_hidden
    reload_files(state)


def open_file(state: AppState, path: Path) -> bool:
    """Load ``path`` into the editor; returns ``False`` on a read failure.

    On failure the error text replaces the editor content and the buffer is
    detached from any path so a later save cannot write it anywhere.
    """
    try:
        content = read_text(path)
    except OSError as exc:
        logger.warning("cannot open %s: %s", path, exc)
        state.buffer = TextBuffer(f"Error reading file: {exc}")
        state.current_file = None
        ok = False
    else:
        state.buffer = TextBuffer(content)
        state.current_file = path
        ok = True
    state.cursor = Position()
    state.viewport = state.viewport.scrolled(0, 0)
    state.preview = state.preview.scrolled(0, 0)
    state.dirty = True
    return ok


def open_selected(state: AppState) -> None:
    if not 0 <= state.selected < len(state.files):
        return
    item = state.files[state.selected]
    if item.is_dir:
        enter_directory(state, item.path)
        return
    open_file(state, item.path)
    state.focus = Pane.EDITOR


def delete_selected_file(state: AppState) -> None:
    if not 0 <= state.selected < len(state.files):
        return
    item = state.files[state.selected]
    error = delete_file(item.path)
    if error is not None:
        state.status_message = error
        state.dirty = True
        return
    if state.current_file is not None and state.current_file == item.path:
        state.current_file = None
    state.status_message = f"Deleted {item.name}"
    reload_files(state)


# Editor commands.


def save_file(state: AppState) -> None:
    if state.current_file is None:
        state.status_message = "No file to save."
        state.dirty = True
        return
    try:
        write_text(state.current_file, state.buffer.content)
    except OSError as exc:
        logger.warning("cannot save %s: %s", state.current_file, exc)
        state.status_message = f"Save failed: {exc}"
    else:
        state.buffer.mark_saved()
        state.status_message = f"Saved {state.current_file.name}"
    state.dirty = True


def format_buffer(state: AppState, secondary: bool = False) -> None:
    """Pipe the buffer through the file's formatter; replaces it only on success."""
    if state.current_file is None:
        return
    command = formatter_command(profile_for_path(state.current_file), secondary=secondary)
    if command is None:
        state.status_message = "No formatter for this file type."
        state.dirty = True
        return
    result = run_formatter(command, state.buffer.content)
    if not result.ok:
        state.status_message = result.error or f"{command} failed"
        state.dirty = True
        return
    state.buffer.replace_content(result.output)
    state.status_message = f"Formatted with {command}"
    _follow_cursor(state, state.cursor)
    scroll_preview(state)


def toggle_mode(state: AppState) -> None:
    state.mode = EditorMode.PREVIEW if state.mode is EditorMode.EDIT else EditorMode.EDIT
    if state.mode is EditorMode.PREVIEW:
        # the document may have shrunk since the preview was last scrolled
        scroll_preview(state)
    state.dirty = True


def insert_rune(state: AppState, rune: str) -> None:
    _follow_cursor(state, state.buffer.insert(state.cursor, rune))


def backspace(state: AppState) -> None:
    _follow_cursor(state, state.buffer.delete_before(state.cursor))


def delete_forward(state: AppState) -> None:
    _follow_cursor(state, state.buffer.delete_at(state.cursor))


def newline(state: AppState) -> None:
    _follow_cursor(state, state.buffer.split_line(state.cursor))


def move_up(state: AppState) -> None:
    line = state.cursor.line
    if line > 0:
        _follow_cursor(state, Position(line - 1, state.cursor.rune))


def move_down(state: AppState) -> None:
    line = state.cursor.line
    if line < state.buffer.line_count - 1:
        _follow_cursor(state, Position(line + 1, state.cursor.rune))


def move_left(state: AppState) -> None:
    line, rune = state.cursor.line, state.cursor.rune
    if rune > 0:
        _follow_cursor(state, Position(line, rune - 1))
    elif line > 0:
        _follow_cursor(state, Position(line - 1, len(state.buffer.line(line - 1))))


def move_right(state: AppState) -> None:
    line, rune = state.cursor.line, state.cursor.rune
    if rune < len(state.buffer.line(line)):
        _follow_cursor(state, Position(line, rune + 1))
    elif line < state.buffer.line_count - 1:
        _follow_cursor(state, Position(line + 1, 0))


def move_home(state: AppState) -> None:
    _follow_cursor(state, Position(state.cursor.line, 0))


def move_end(state: AppState) -> None:
    line = state.cursor.line
    _follow_cursor(state, Position(line, len(state.buffer.line(line))))


def move_page(state: AppState, direction: int) -> None:
    step = max(1, state.viewport.height - 1) * direction
    _follow_cursor(state, Position(state.cursor.line + step, state.cursor.rune))


# Preview.


def scroll_preview(state: AppState, lines: int = 0, runes: int = 0) -> None:
    """Scroll the preview window, keeping at least one document line in view."""
    buffer_lines = state.buffer.lines
    max_line = max(0, len(buffer_lines) - 1)
    max_rune = max((len(line) for line in buffer_lines), default=0)
    scroll_line = max(0, min(max_line, state.preview.scroll_line + lines))
    scroll_rune = max(0, min(max_rune, state.preview.scroll_rune + runes))
    state.preview = state.preview.scrolled(scroll_line, scroll_rune)
    state.dirty = True
