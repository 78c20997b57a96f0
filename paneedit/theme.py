"""Theme values, theme-document parsing, and live reload.

A ``Theme`` is an immutable tree of style specs. Reloading never edits the
current theme: the watcher thread builds a new value and swaps the store's
reference under the write side of a reader-writer lock, so renderers never
see a half-updated theme.
"""

from __future__ import annotations

import contextlib
import dataclasses
import json
import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .style import (
    DEFAULT_COLOR,
    Color,
    StyleSpec,
    color_to_document,
    parse_color,
    style_spec_from_document,
    style_spec_to_document,
)

logger = logging.getLogger(__name__)

APP_NAME = "paneedit"
THEME_FILENAME = "theme.json"
DEFAULT_THEME_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / THEME_FILENAME
THEME_WATCH_POLL_SECONDS = 0.5


@dataclass(frozen=True)
class FilePanelTheme:
    title: StyleSpec = StyleSpec(fg=Color.palette(1), bold=True)
    item: StyleSpec = StyleSpec()
    selected: StyleSpec = StyleSpec(fg=Color.palette(0), bg=Color.palette(1))
    directory: StyleSpec = StyleSpec(fg=Color.palette(4))


@dataclass(frozen=True)
class EditorPanelTheme:
    title: StyleSpec = StyleSpec(fg=Color.palette(2), bold=True)
    text: StyleSpec = StyleSpec()
    cursor: StyleSpec = StyleSpec(fg=Color.palette(0), bg=Color.palette(15))


@dataclass(frozen=True)
class StatusBarTheme:
    text: StyleSpec = StyleSpec(fg=Color.palette(8))
    accent: StyleSpec = StyleSpec(fg=Color.palette(4), bold=True)
    accent_alt: StyleSpec = StyleSpec(fg=Color.palette(2), bold=True)


@dataclass(frozen=True)
class MarkdownTheme:
    heading1: StyleSpec = StyleSpec(fg=Color.palette(2), bold=True)
    heading2: StyleSpec = StyleSpec(fg=Color.palette(2), bold=True)
    heading3: StyleSpec = StyleSpec(fg=Color.palette(3), bold=True)
    inline_code: StyleSpec = StyleSpec(fg=Color.palette(0), bg=Color.palette(15))
    code_block: StyleSpec = StyleSpec(fg=Color.palette(11), bg=Color.palette(0))
    link: StyleSpec = StyleSpec(fg=Color.palette(12), underline=True)
    list_marker: StyleSpec = StyleSpec(fg=Color.palette(7), bold=True)
    blockquote: StyleSpec = StyleSpec(fg=Color.palette(4), italic=True)
    table_header: StyleSpec = StyleSpec(fg=Color.palette(6), bold=True)
    table_border: StyleSpec = StyleSpec(fg=Color.palette(8))
    horizontal_rule: StyleSpec = StyleSpec(fg=Color.palette(8))


@dataclass(frozen=True)
class SyntaxTheme:
    keyword: StyleSpec = StyleSpec(fg=Color.palette(12), bold=True)
    type: StyleSpec = StyleSpec(fg=Color.palette(14))
    string: StyleSpec = StyleSpec(fg=Color.palette(11))
    comment: StyleSpec = StyleSpec(fg=Color.palette(2))
    number: StyleSpec = StyleSpec(fg=Color.palette(13))
    identifier: StyleSpec = StyleSpec(fg=Color.palette(15))
    punctuation: StyleSpec = StyleSpec(fg=Color.palette(15))


@dataclass(frozen=True)
class Theme:
    """Complete set of colors and element styles used by every renderer."""

    foreground: Color = DEFAULT_COLOR
    background: Color = DEFAULT_COLOR
    border: Color = Color.palette(8)
    file_panel: FilePanelTheme = FilePanelTheme()
    editor_panel: EditorPanelTheme = EditorPanelTheme()
    status_bar: StatusBarTheme = StatusBarTheme()
    markdown: MarkdownTheme = MarkdownTheme()
    syntax: SyntaxTheme = SyntaxTheme()


DEFAULT_THEME = Theme()

_SECTIONS = ("file_panel", "editor_panel", "status_bar", "markdown", "syntax")
_GENERAL_COLORS = ("foreground", "background", "border")


def _section_from_document(default_section, raw: object):
    """Overlay present elements of ``raw`` onto ``default_section``."""
    if not isinstance(raw, dict):
        return default_section
    overrides: dict[str, StyleSpec] = {}
    for field in dataclasses.fields(default_section):
        spec = style_spec_from_document(raw.get(field.name))
        if spec is not None:
            overrides[field.name] = spec
    if not overrides:
        return default_section
    return dataclasses.replace(default_section, **overrides)


def theme_from_document(data: object) -> Theme:
    """Build a theme from a decoded theme document.

    Each present element replaces the default element wholesale; missing or
    malformed sections and elements keep their defaults.
    """
    if not isinstance(data, dict):
        return DEFAULT_THEME

    overrides: dict[str, object] = {}
    general = data.get("general")
    if isinstance(general, dict):
        for name in _GENERAL_COLORS:
            if name in general:
                overrides[name] = parse_color(general.get(name))
    for name in _SECTIONS:
        overrides[name] = _section_from_document(getattr(DEFAULT_THEME, name), data.get(name))
    return dataclasses.replace(DEFAULT_THEME, **overrides)


def theme_to_document(theme: Theme) -> dict[str, object]:
    """Serialize ``theme`` into the JSON document shape it was parsed from."""
    document: dict[str, object] = {
        "general": {name: color_to_document(getattr(theme, name)) for name in _GENERAL_COLORS},
    }
    for name in _SECTIONS:
        section = getattr(theme, name)
        document[name] = {
            field.name: style_spec_to_document(getattr(section, field.name))
            for field in dataclasses.fields(section)
        }
    return document


def load_theme(path: Path | None) -> Theme:
    """Load a theme file, falling back to ``DEFAULT_THEME`` on any failure."""
    if path is None:
        return DEFAULT_THEME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return DEFAULT_THEME
    except (OSError, ValueError) as exc:
        logger.warning("theme %s unreadable, using default theme: %s", path, exc)
        return DEFAULT_THEME
    if not isinstance(data, dict):
        logger.warning("theme %s is not a JSON object, using default theme", path)
        return DEFAULT_THEME
    return theme_from_document(data)


class ReadWriteLock:
    """Many concurrent readers or one writer, built on ``threading.Condition``."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class ThemeStore:
    """Holds the active theme reference; swapped wholesale on reload."""

    def __init__(self, theme: Theme = DEFAULT_THEME) -> None:
        self._lock = ReadWriteLock()
        self._theme = theme
        self._generation = 0

    def current(self) -> Theme:
        with self._lock.read():
            return self._theme

    @property
    def generation(self) -> int:
        with self._lock.read():
            return self._generation

    def replace(self, theme: Theme) -> None:
        with self._lock.write():
            self._theme = theme
            self._generation += 1


def _path_stat_signature(path: Path) -> tuple[str, int, int, int]:
    """Return a stat tuple describing ``path`` existence and metadata."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return ("missing", 0, 0, 0)
    except OSError:
        return ("error", 0, 0, 0)
    return ("ok", st.st_mtime_ns, st.st_size, st.st_mode)


class ThemeWatcher:
    """Poll a theme file and push freshly loaded themes into a store.

    Runs on a daemon thread for the life of the process; it is never joined.
    """

    def __init__(
        self,
        path: Path,
        store: ThemeStore,
        poll_seconds: float = THEME_WATCH_POLL_SECONDS,
        loader: Callable[[Path], Theme] = load_theme,
    ) -> None:
        self.path = path
        self.store = store
        self.poll_seconds = poll_seconds
        self._loader = loader
        self._signature = _path_stat_signature(path)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def check_once(self) -> bool:
        """Reload if the file's stat signature changed; return whether it did."""
        signature = _path_stat_signature(self.path)
        if signature == self._signature:
            return False
        self._signature = signature
        self.store.replace(self._loader(self.path))
        logger.info("theme reloaded from %s", self.path)
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.poll_seconds):
            self.check_once()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="paneedit-theme-watch", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
