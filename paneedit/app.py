"""Interactive runtime: state bootstrap and the main event loop.

The loop is single-threaded. It redraws when the state is dirty or when the
theme watcher has swapped in a new theme, then waits a short while for input.
"""

from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Callable
from pathlib import Path

from .config import load_left_width, load_show_hidden, save_show_hidden
from .editing import open_file, reload_files, sync_viewports
from .files import clamp_left_width
from .input import ResizeEvent, read_event
from .keys import KeyContext, handle_key
from .render import render_frame
from .screen import CellScreen, TerminalController
from .state import AppState, Pane
from .theme import ThemeStore, ThemeWatcher, load_theme

logger = logging.getLogger(__name__)

INPUT_POLL_MS = 250


def build_state(path: Path, show_hidden: bool = False, left_width: int | None = None) -> AppState:
    """Initial state for ``path``: a directory to browse or a file to edit."""
    path = path.resolve()
    directory = path if path.is_dir() else path.parent
    state = AppState(current_dir=directory, show_hidden=show_hidden)
    if left_width is not None:
        state.left_width = left_width
    reload_files(state)
    if not path.is_dir():
        open_file(state, path)
        state.focus = Pane.EDITOR
        for index, item in enumerate(state.files):
            if item.path == path:
                state.selected = index
                break
    return state


def apply_resize(state: AppState, event: ResizeEvent, desired_left: int) -> None:
    state.columns = max(1, event.columns)
    state.rows = max(1, event.rows)
    state.left_width = clamp_left_width(state.columns, desired_left)
    sync_viewports(state)


def run_main_loop(
    state: AppState,
    screen: CellScreen,
    store: ThemeStore,
    stdin_fd: int,
    desired_left: int,
    terminal_size: Callable[[], tuple[int, int]],
    save_hidden: Callable[[bool], None] | None = None,
) -> None:
    context = KeyContext(state, save_show_hidden=save_hidden)
    last_generation = -1
    while True:
        columns, rows = terminal_size()
        if (columns, rows) != (state.columns, state.rows):
            apply_resize(state, ResizeEvent(columns, rows), desired_left)

        generation = store.generation
        if state.dirty or generation != last_generation:
            render_frame(screen, state, store.current())
            state.dirty = False
            last_generation = generation

        event = read_event(stdin_fd, INPUT_POLL_MS)
        if event is None:
            continue
        if handle_key(event, context):
            return


def _terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size((80, 24))
    return size.columns, size.lines


def run_editor(path: Path, theme_path: Path, watch: bool = True) -> None:
    """Launch the full-screen editor on ``path`` and block until the user quits."""
    store = ThemeStore(load_theme(theme_path))
    watcher: ThemeWatcher | None = None
    if watch:
        watcher = ThemeWatcher(theme_path, store)
        watcher.start()

    desired_left = load_left_width()
    state = build_state(path, show_hidden=load_show_hidden(), left_width=desired_left)
    apply_resize(state, ResizeEvent(*_terminal_size()), desired_left)

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    screen = CellScreen(state.columns, state.rows, terminal.write)
    logger.info("starting in %s", state.current_dir)
    try:
        with terminal.raw_mode():
            run_main_loop(
                state,
                screen,
                store,
                stdin_fd,
                desired_left,
                _terminal_size,
                save_hidden=save_show_hidden,
            )
    finally:
        if watcher is not None:
            watcher.stop()
