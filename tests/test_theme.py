"""Theme document parsing, the locked store and the file watcher."""

from __future__ import annotations

import json
import os
import tempfile
import threading
import unittest
from pathlib import Path

from paneedit.style import Color, StyleSpec
from paneedit.theme import (
    DEFAULT_THEME,
    Theme,
    ThemeStore,
    ThemeWatcher,
    load_theme,
    theme_from_document,
    theme_to_document,
)


class ThemeDocumentTests(unittest.TestCase):
    def test_present_element_replaces_default_wholesale(self) -> None:
        theme = theme_from_document({"markdown": {"heading1": {"fg": "red"}}})
        # bold from the default heading style is not inherited
        self.assertEqual(theme.markdown.heading1, StyleSpec(fg=Color.palette(1)))
        self.assertEqual(theme.markdown.heading2, DEFAULT_THEME.markdown.heading2)
        self.assertEqual(theme.syntax, DEFAULT_THEME.syntax)

    def test_general_colors(self) -> None:
        theme = theme_from_document({"general": {"foreground": "#010203", "border": "blue"}})
        self.assertEqual(theme.foreground, Color.rgb(1, 2, 3))
        self.assertEqual(theme.border, Color.palette(4))
        self.assertEqual(theme.background, DEFAULT_THEME.background)

    def test_malformed_sections_keep_defaults(self) -> None:
        theme = theme_from_document({"syntax": ["nope"], "file_panel": {"title": "red"}})
        self.assertEqual(theme, DEFAULT_THEME)

    def test_non_object_document_is_default(self) -> None:
        self.assertIs(theme_from_document([1, 2]), DEFAULT_THEME)

    def test_dump_and_parse_round_trip(self) -> None:
        theme = theme_from_document(
            {
                "general": {"background": "#102030"},
                "syntax": {"keyword": {"fg": "9", "bold": True, "underline": True}},
            }
        )
        self.assertEqual(theme_from_document(theme_to_document(theme)), theme)


class LoadThemeTests(unittest.TestCase):
    def test_missing_file_yields_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIs(load_theme(Path(tmp) / "absent.json"), DEFAULT_THEME)

    def test_malformed_json_yields_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "theme.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertLogs("paneedit.theme", level="WARNING"):
                self.assertIs(load_theme(path), DEFAULT_THEME)

    def test_valid_file_is_applied(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "theme.json"
            path.write_text(json.dumps({"editor_panel": {"text": {"fg": "green"}}}), encoding="utf-8")
            theme = load_theme(path)
            self.assertEqual(theme.editor_panel.text, StyleSpec(fg=Color.palette(2)))


class ThemeStoreTests(unittest.TestCase):
    def test_replace_swaps_reference_and_bumps_generation(self) -> None:
        store = ThemeStore()
        self.assertIs(store.current(), DEFAULT_THEME)
        self.assertEqual(store.generation, 0)
        new_theme = Theme(foreground=Color.palette(3))
        store.replace(new_theme)
        self.assertIs(store.current(), new_theme)
        self.assertEqual(store.generation, 1)

    def test_readers_only_see_complete_themes(self) -> None:
        first = Theme(foreground=Color.palette(1), background=Color.palette(1))
        second = Theme(foreground=Color.palette(2), background=Color.palette(2))
        store = ThemeStore(first)
        seen: list[Theme] = []
        stop = threading.Event()

        def reader() -> None:
            while not stop.is_set():
                seen.append(store.current())

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for i in range(200):
                store.replace(second if i % 2 == 0 else first)
        finally:
            stop.set()
            thread.join()

        self.assertTrue(seen)
        for theme in seen:
            self.assertIn(theme, (first, second))
            self.assertEqual(theme.foreground, theme.background)


class ThemeWatcherTests(unittest.TestCase):
    def test_check_once_reloads_on_signature_change(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "theme.json"
            path.write_text("{}", encoding="utf-8")
            store = ThemeStore(load_theme(path))
            watcher = ThemeWatcher(path, store, poll_seconds=60)

            self.assertFalse(watcher.check_once())
            self.assertEqual(store.generation, 0)

            path.write_text(json.dumps({"general": {"foreground": "white"}}), encoding="utf-8")
            stat = path.stat()
            os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

            self.assertTrue(watcher.check_once())
            self.assertEqual(store.generation, 1)
            self.assertEqual(store.current().foreground, Color.palette(7))

    def test_deleted_file_falls_back_to_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "theme.json"
            path.write_text(json.dumps({"general": {"foreground": "red"}}), encoding="utf-8")
            store = ThemeStore(load_theme(path))
            watcher = ThemeWatcher(path, store, poll_seconds=60)
            path.unlink()
            self.assertTrue(watcher.check_once())
            self.assertIs(store.current(), DEFAULT_THEME)

    def test_start_runs_daemon_thread(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            watcher = ThemeWatcher(Path(tmp) / "theme.json", ThemeStore(), poll_seconds=60)
            watcher.start()
            try:
                self.assertIsNotNone(watcher._thread)
                self.assertTrue(watcher._thread.daemon)
            finally:
                watcher.stop()


if __name__ == "__main__":
    unittest.main()
