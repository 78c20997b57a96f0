"""Markdown preview rendering: block classification and inline styling."""

from __future__ import annotations

import unittest

from paneedit.markdown import (
    RULE_CHAR,
    LineKind,
    MarkdownBlockState,
    MarkdownRenderer,
    classify_line,
    visible_text,
)
from paneedit.style import StyleSpec, resolve_style
from paneedit.theme import DEFAULT_THEME
from paneedit.viewport import Viewport


def style_of(spec: StyleSpec):
    return resolve_style(spec, DEFAULT_THEME)


class MarkdownRenderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = MarkdownRenderer(DEFAULT_THEME)
        self.md = DEFAULT_THEME.markdown

    def render(self, line: str, state: MarkdownBlockState = MarkdownBlockState.NORMAL):
        return self.renderer.render_line(line, state)

    def test_fence_lines_render_nothing_and_body_is_code(self) -> None:
        rows = self.renderer.render(["```", "code", "```"], Viewport.sized(40, 10))
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0], [])
        self.assertEqual(rows[2], [])
        self.assertEqual(visible_text(rows[1]), "code")
        for cell in rows[1]:
            self.assertEqual(cell.style, style_of(self.md.code_block))

    def test_inline_code_hides_backticks(self) -> None:
        cells, _ = self.render("Use `x=1` here")
        self.assertEqual(visible_text(cells), "Use x=1 here")
        code = [cell for cell in cells if cell.style == style_of(self.md.inline_code)]
        self.assertEqual("".join(cell.char for cell in code), "x=1")

    def test_link_shows_only_text(self) -> None:
        cells, _ = self.render("[site](http://x)")
        self.assertEqual(visible_text(cells), "site")
        for cell in cells:
            self.assertEqual(cell.style, style_of(self.md.link))

    def test_incomplete_link_is_literal(self) -> None:
        cells, _ = self.render("[site] and [x](y")
        self.assertEqual(visible_text(cells), "[site] and [x](y")

    def test_heading_prefix_is_stripped(self) -> None:
        cells, _ = self.render("# Title")
        self.assertEqual(visible_text(cells), "Title")
        for cell in cells:
            self.assertEqual(cell.style, style_of(self.md.heading1))

    def test_heading_levels_checked_longest_first(self) -> None:
        cells, _ = self.render("### Small")
        self.assertEqual(visible_text(cells), "Small")
        self.assertEqual(cells[0].style, style_of(self.md.heading3))

    def test_emphasis_needs_non_space_neighbors(self) -> None:
        cells, _ = self.render("a*b*c 2 * 3")
        self.assertEqual(visible_text(cells), "abc 2 * 3")
        base = style_of(StyleSpec())
        self.assertEqual(cells[1].char, "b")
        self.assertEqual(cells[1].style, base.with_bold())
        self.assertEqual(cells[0].style, base)

    def test_emphasis_at_line_start_is_literal(self) -> None:
        cells, _ = self.render("_start")
        self.assertEqual(visible_text(cells), "_start")

    def test_blockquote_strips_marker(self) -> None:
        cells, _ = self.render("  > quoted")
        self.assertEqual(visible_text(cells), "quoted")
        self.assertEqual(cells[0].style, style_of(self.md.blockquote))

    def test_list_marker_kept_and_styled(self) -> None:
        cells, _ = self.render("  12. item")
        self.assertEqual(visible_text(cells), "  12. item")
        marker = style_of(self.md.list_marker)
        self.assertEqual([cell.style == marker for cell in cells[:5]], [False, False, True, True, True])
        self.assertNotEqual(cells[-1].style, marker)

    def test_horizontal_rule_fills_width(self) -> None:
        cells, _ = self.renderer.render_line("---", width=6)
        self.assertEqual(visible_text(cells), RULE_CHAR * 6)

    def test_table_header_row_and_separator(self) -> None:
        rows = self.renderer.render(["| a | b |", "|---|---|", "| 1 | 2 |", "after"], Viewport.sized(40, 10))
        border = style_of(self.md.table_border)
        header = style_of(self.md.table_header)
        self.assertEqual(rows[0][0].style, border)
        self.assertEqual(rows[0][2].style, header)
        self.assertTrue(all(cell.style == border for cell in rows[1]))
        self.assertEqual(rows[2][2].style, style_of(StyleSpec()))
        self.assertEqual(visible_text(rows[3]), "after")

    def test_fence_state_threads_from_top_of_document(self) -> None:
        lines = ["```", "# not a heading", "```", "# heading"]
        rows = self.renderer.render(lines, Viewport.sized(40, 2, scroll_line=1))
        self.assertEqual(len(rows), 2)
        self.assertEqual(visible_text(rows[0]), "# not a heading")
        self.assertEqual(rows[1], [])

    def test_horizontal_scroll_restarts_inline_state(self) -> None:
        cells, _ = self.renderer.render_line("ab `code` z", scroll_rune=4, width=20)
        # the opening backtick is left of the window, so the closing one opens code
        self.assertEqual(visible_text(cells), "code z")
        self.assertEqual(cells[-1].style, style_of(self.md.inline_code))

    def test_width_limits_cells_including_wide_glyphs(self) -> None:
        cells, _ = self.renderer.render_line("日本語", width=5)
        self.assertEqual(visible_text(cells), "日本")


class ClassifyLineTests(unittest.TestCase):
    def test_priority_and_state(self) -> None:
        self.assertEqual(classify_line("> q", MarkdownBlockState.NORMAL)[0].kind, LineKind.BLOCKQUOTE)
        self.assertEqual(classify_line("- item", MarkdownBlockState.NORMAL)[0].kind, LineKind.LIST_ITEM)
        self.assertEqual(classify_line("___", MarkdownBlockState.NORMAL)[0].kind, LineKind.RULE)
        block, state = classify_line("  ```python", MarkdownBlockState.NORMAL)
        self.assertEqual(block.kind, LineKind.FENCE)
        self.assertEqual(state, MarkdownBlockState.IN_FENCED_CODE)
        block, state = classify_line("- not a list", state)
        self.assertEqual(block.kind, LineKind.CODE)
        self.assertEqual(state, MarkdownBlockState.IN_FENCED_CODE)


if __name__ == "__main__":
    unittest.main()
