"""Keyboard dispatch for the file list, the editor, and the preview."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from . import editing
from .input import Key, KeyEvent, Modifier
from .state import AppState, EditorMode, Pane


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Small key-dispatch table keyed by token strings."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            for combo in binding.combos:
                self._handlers[combo] = binding.handler
        return self

    def dispatch(self, key: str) -> bool | None:
        """Invoke the handler bound to ``key``; ``None`` means unbound."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()


def key_token(event: KeyEvent) -> str:
    """Token for ``event``: the rune itself, or ``NAME``/``CTRL_NAME``."""
    if event.key is Key.RUNE:
        return event.rune
    name = event.key.name
    if Modifier.CTRL in event.mods and not name.startswith("CTRL_"):
        return f"CTRL_{name}"
    return name


@dataclass(frozen=True)
class KeyContext:
    state: AppState
    save_show_hidden: Callable[[bool], None] | None = None


def _action(func: Callable[..., None], *args) -> Callable[[], bool]:
    def run() -> bool:
        func(*args)
        return False

    return run


def handle_key(event: KeyEvent, context: KeyContext) -> bool:
    """Handle one key event and return ``True`` when the app should quit."""
    state = context.state

    if state.show_help:
        state.show_help = False
        state.dirty = True
        return False

    state.status_message = ""
    token = key_token(event)

    def quit_action() -> bool:
        return True

    def focus(pane: Pane) -> Callable[[], bool]:
        def run() -> bool:
            state.focus = pane
            state.dirty = True
            return False

        return run

    def redraw_action() -> bool:
        state.dirty = True
        return False

    global_bindings = KeyComboRegistry().register_bindings(
        KeyComboBinding(("CTRL_Q",), quit_action),
        KeyComboBinding(("CTRL_S",), _action(editing.save_file, state)),
        KeyComboBinding(("CTRL_F",), _action(editing.format_buffer, state)),
        KeyComboBinding(("CTRL_G",), _action(editing.format_buffer, state, True)),
        KeyComboBinding(("CTRL_L",), redraw_action),
        KeyComboBinding(("TAB",), _action(editing.toggle_mode, state)),
        KeyComboBinding(("CTRL_LEFT", "ESC"), focus(Pane.FILES)),
        KeyComboBinding(("CTRL_RIGHT",), focus(Pane.EDITOR)),
    )
    handled = global_bindings.dispatch(token)
    if handled is not None:
        return handled

    if state.focus is Pane.FILES:
        return _handle_file_list_key(token, context)
    if state.mode is EditorMode.PREVIEW:
        return _handle_preview_key(token, state)
    return _handle_edit_key(event, token, state)


def _handle_file_list_key(token: str, context: KeyContext) -> bool:
    state = context.state

    def toggle_hidden_action() -> bool:
        editing.toggle_hidden(state)
        if context.save_show_hidden is not None:
            context.save_show_hidden(state.show_hidden)
        return False

    def show_help_action() -> bool:
        state.show_help = True
        state.dirty = True
        return False

    bindings = KeyComboRegistry().register_bindings(
        KeyComboBinding(("UP",), _action(editing.move_selection, state, -1)),
        KeyComboBinding(("DOWN",), _action(editing.move_selection, state, 1)),
        KeyComboBinding(("PAGE_UP",), _action(editing.move_selection, state, -max(1, state.file_rows))),
        KeyComboBinding(("PAGE_DOWN",), _action(editing.move_selection, state, max(1, state.file_rows))),
        KeyComboBinding(("LEFT",), _action(editing.go_back, state)),
        KeyComboBinding(("RIGHT", "ENTER"), _action(editing.open_selected, state)),
        KeyComboBinding(("DELETE",), _action(editing.delete_selected_file, state)),
        KeyComboBinding((".",), toggle_hidden_action),
        KeyComboBinding(("?",), show_help_action),
    )
    handled = bindings.dispatch(token)
    return bool(handled)


def _handle_preview_key(token: str, state: AppState) -> bool:
    page = max(1, state.preview.height - 1)
    bindings = KeyComboRegistry().register_bindings(
        KeyComboBinding(("UP",), _action(editing.scroll_preview, state, -1, 0)),
        KeyComboBinding(("DOWN",), _action(editing.scroll_preview, state, 1, 0)),
        KeyComboBinding(("LEFT",), _action(editing.scroll_preview, state, 0, -1)),
        KeyComboBinding(("RIGHT",), _action(editing.scroll_preview, state, 0, 1)),
        KeyComboBinding(("PAGE_UP",), _action(editing.scroll_preview, state, -page, 0)),
        KeyComboBinding(("PAGE_DOWN",), _action(editing.scroll_preview, state, page, 0)),
        KeyComboBinding(("HOME",), _action(editing.scroll_preview, state, 0, -state.preview.scroll_rune)),
    )
    handled = bindings.dispatch(token)
    return bool(handled)


def _handle_edit_key(event: KeyEvent, token: str, state: AppState) -> bool:
    bindings = KeyComboRegistry().register_bindings(
        KeyComboBinding(("UP",), _action(editing.move_up, state)),
        KeyComboBinding(("DOWN",), _action(editing.move_down, state)),
        KeyComboBinding(("LEFT",), _action(editing.move_left, state)),
        KeyComboBinding(("RIGHT",), _action(editing.move_right, state)),
        KeyComboBinding(("HOME",), _action(editing.move_home, state)),
        KeyComboBinding(("END",), _action(editing.move_end, state)),
        KeyComboBinding(("PAGE_UP",), _action(editing.move_page, state, -1)),
        KeyComboBinding(("PAGE_DOWN",), _action(editing.move_page, state, 1)),
        KeyComboBinding(("ENTER",), _action(editing.newline, state)),
        KeyComboBinding(("BACKSPACE",), _action(editing.backspace, state)),
        KeyComboBinding(("DELETE",), _action(editing.delete_forward, state)),
    )
    handled = bindings.dispatch(token)
    if handled is not None:
        return handled
    if event.key is Key.RUNE:
        editing.insert_rune(state, event.rune)
    return False
