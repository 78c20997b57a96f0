"""Directory listing, encoding fallback, deletion and pane-width clamping."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from paneedit.files import clamp_left_width, delete_file, list_directory, read_text


class ListDirectoryTests(unittest.TestCase):
    def test_sorted_with_hidden_filter(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "b.txt").write_text("b", encoding="utf-8")
            (root / "a").mkdir()
            (root / ".hidden").write_text("h", encoding="utf-8")

            visible = list_directory(root, show_hidden=False)
            self.assertEqual([item.label for item in visible], ["a/", "b.txt"])
            self.assertTrue(visible[0].is_dir)

            everything = list_directory(root, show_hidden=True)
            self.assertEqual([item.name for item in everything], [".hidden", "a", "b.txt"])

    def test_missing_directory_lists_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(list_directory(Path(tmp) / "nope", show_hidden=False), [])


class ReadTextTests(unittest.TestCase):
    def test_falls_back_to_latin1(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "latin.txt"
            path.write_bytes(b"caf\xe9")
            self.assertEqual(read_text(path), "café")


class DeleteFileTests(unittest.TestCase):
    def test_deletes_regular_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "gone.txt"
            path.write_text("x", encoding="utf-8")
            self.assertIsNone(delete_file(path))
            self.assertFalse(path.exists())

    def test_refuses_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            error = delete_file(Path(tmp))
            self.assertIsNotNone(error)
            self.assertTrue(Path(tmp).exists())

    def test_missing_file_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            error = delete_file(Path(tmp) / "absent")
            self.assertTrue(error.startswith("Delete failed"))


class ClampLeftWidthTests(unittest.TestCase):
    def test_default_width_fits_normal_terminal(self) -> None:
        self.assertEqual(clamp_left_width(80, 30), 30)

    def test_narrow_terminal_leaves_room_for_editor(self) -> None:
        self.assertEqual(clamp_left_width(40, 30), 28)
        self.assertEqual(clamp_left_width(100, 5), 20)


if __name__ == "__main__":
    unittest.main()
