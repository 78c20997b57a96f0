"""Whole-frame rendering onto an in-memory cell grid."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from paneedit.app import apply_resize, build_state
from paneedit.input import ResizeEvent
from paneedit.render import HELP_LINES, render_frame, status_segments
from paneedit.screen import CellScreen
from paneedit.state import AppState, EditorMode, Pane
from paneedit.style import resolve_style
from paneedit.theme import DEFAULT_THEME


class RenderFrameTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "main.go").write_text('package main\n\nvar s = "日本"\n', encoding="utf-8")
        (self.root / "doc.md").write_text("# Title\n\nUse `x` [site](http://x)\n", encoding="utf-8")
        (self.root / "a-very-long-file-name-that-does-not-fit.txt").write_text("", encoding="utf-8")
        self.frames: list[str] = []

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def draw(self, path: Path, columns: int = 80, rows: int = 12) -> tuple[AppState, CellScreen]:
        state = build_state(path)
        apply_resize(state, ResizeEvent(columns, rows), 30)
        screen = CellScreen(columns, rows, self.frames.append)
        render_frame(screen, state, DEFAULT_THEME)
        return state, screen

    def test_layout_titles_and_file_list(self) -> None:
        _, screen = self.draw(self.root)
        self.assertEqual(screen.row_text(0)[1:6], "Files")
        self.assertEqual(screen.row_text(0)[31:39], "  Editor")
        self.assertEqual(screen.cell(30, 0).char, "│")
        # long names are cut with an ellipsis inside the panel
        self.assertEqual(screen.row_text(2)[1:29], "a-very-long-file-name-tha...")
        self.assertEqual(screen.row_text(3)[1:8], "doc.md ")
        self.assertEqual(len(self.frames), 1)

    def test_selected_entry_uses_selected_style(self) -> None:
        _, screen = self.draw(self.root)
        selected = resolve_style(DEFAULT_THEME.file_panel.selected, DEFAULT_THEME)
        self.assertEqual(screen.cell(1, 2).style, selected)
        self.assertNotEqual(screen.cell(1, 3).style, selected)

    def test_editor_text_is_highlighted_with_wide_glyphs(self) -> None:
        state, screen = self.draw(self.root / "main.go")
        left = state.editor_left
        keyword = resolve_style(DEFAULT_THEME.syntax.keyword, DEFAULT_THEME)
        string = resolve_style(DEFAULT_THEME.syntax.string, DEFAULT_THEME)
        self.assertEqual(screen.row_text(2)[left : left + 12], "package main")
        self.assertEqual(screen.cell(left + 1, 2).style, keyword)
        row = 4
        # '"' sits at rune 8, then two double-width glyphs
        self.assertEqual(screen.cell(left + 9, row).char, "日")
        self.assertEqual(screen.cell(left + 9, row).style, string)
        self.assertEqual(screen.cell(left + 11, row).char, "本")

    def test_cursor_cell_uses_cursor_style_when_editor_focused(self) -> None:
        state, screen = self.draw(self.root / "main.go")
        self.assertEqual(state.focus, Pane.EDITOR)
        cursor_style = resolve_style(DEFAULT_THEME.editor_panel.cursor, DEFAULT_THEME)
        self.assertEqual(screen.cell(state.editor_left, 2).style, cursor_style)
        self.assertEqual(screen.cell(state.editor_left, 2).char, "p")

    def test_terminal_cursor_follows_editor_focus(self) -> None:
        state, screen = self.draw(self.root / "main.go")
        self.assertTrue(self.frames[-1].endswith(f"\033[3;{state.editor_left + 1}H\033[?25h"))
        state.focus = Pane.FILES
        render_frame(screen, state, DEFAULT_THEME)
        self.assertNotIn("\033[?25h", self.frames[-1])

    def test_modified_marker_in_title(self) -> None:
        state, screen = self.draw(self.root / "main.go")
        state.buffer.insert(state.cursor, "x")
        render_frame(screen, state, DEFAULT_THEME)
        self.assertEqual(screen.row_text(0)[31:41], "  Editor *")

    def test_preview_renders_markdown(self) -> None:
        state, screen = self.draw(self.root / "doc.md")
        state.mode = EditorMode.PREVIEW
        render_frame(screen, state, DEFAULT_THEME)
        left = state.editor_left
        self.assertEqual(screen.row_text(2)[left : left + 7], "Title  ")
        self.assertEqual(screen.row_text(4)[left : left + 10], "Use x site")
        link = resolve_style(DEFAULT_THEME.markdown.link, DEFAULT_THEME)
        self.assertEqual(screen.cell(left + 6, 4).style, link)

    def test_help_overlay(self) -> None:
        state, screen = self.draw(self.root)
        state.show_help = True
        render_frame(screen, state, DEFAULT_THEME)
        left = state.editor_left
        self.assertEqual(screen.row_text(2)[left : left + len(HELP_LINES[0])], HELP_LINES[0])

    def test_status_bar(self) -> None:
        state, screen = self.draw(self.root / "main.go")
        self.assertTrue(screen.row_text(11).startswith("Panel: editor | Mode: edit    | File: main.go"))
        accent_alt = resolve_style(DEFAULT_THEME.status_bar.accent_alt, DEFAULT_THEME)
        self.assertEqual(screen.cell(7, 11).style, accent_alt)

    def test_status_segments_include_message(self) -> None:
        state = build_state(self.root)
        state.status_message = "Saved x"
        texts = [text for text, _ in status_segments(state)]
        self.assertEqual(texts[1], "files ")
        self.assertEqual(texts[-1], "  Saved x")


class CellScreenTests(unittest.TestCase):
    def test_wide_glyph_occupies_two_cells(self) -> None:
        screen = CellScreen(4, 1, lambda _frame: None)
        self.assertEqual(screen.set_cell(0, 0, "日"), 2)
        self.assertEqual(screen.set_cell(3, 0, "本"), 1)
        self.assertEqual(screen.cell(3, 0).char, " ")
        frame = screen.compose()
        self.assertIn("日", frame)
        self.assertNotIn("本", frame)

    def test_out_of_bounds_writes_are_clipped(self) -> None:
        screen = CellScreen(2, 2, lambda _frame: None)
        self.assertEqual(screen.set_cell(5, 0, "x"), 0)
        self.assertEqual(screen.put_text(0, 1, "abc"), 2)
        self.assertEqual(screen.row_text(1), "ab")

    def test_show_writes_one_frame_with_cursor(self) -> None:
        frames: list[str] = []
        screen = CellScreen(3, 1, frames.append)
        screen.show_cursor(1, 0)
        screen.show()
        self.assertEqual(len(frames), 1)
        self.assertTrue(frames[0].endswith("\033[1;2H\033[?25h"))


if __name__ == "__main__":
    unittest.main()
