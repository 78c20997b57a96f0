"""Command-line front door for paneedit.

Parses CLI options, wires up logging, resolves the theme file, and then
dispatches into the interactive editor runtime.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_theme_path
from .theme import load_theme, theme_to_document

PACKAGE_LOGGER = "paneedit"


def configure_logging(log_file: str | None) -> None:
    """Attach a DEBUG file handler when ``log_file`` is given.

    Without it the package logger keeps only its ``NullHandler`` so nothing is
    written to the terminal while it is in raw mode.
    """
    if not log_file:
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paneedit",
        description="Split-pane terminal editor with a file list, syntax highlighting and Markdown preview.",
    )
    parser.add_argument("path", nargs="?", default=None, help="File or directory to open. Defaults to current directory.")
    parser.add_argument("--theme", metavar="FILE", default=None, help="JSON theme file (watched for changes).")
    parser.add_argument("--no-watch", action="store_true", help="Do not reload the theme file when it changes.")
    parser.add_argument("--log-file", metavar="FILE", default=None, help="Write debug logs to FILE.")
    parser.add_argument("--dump-theme", action="store_true", help="Print the effective theme as JSON and exit.")
    return parser


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch paneedit on a file or directory.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    theme_path = Path(args.theme).expanduser() if args.theme else load_theme_path()
    if args.dump_theme:
        sys.stdout.write(json.dumps(theme_to_document(load_theme(theme_path)), indent=2) + "\n")
        return

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    from .app import run_editor

    run_editor(path, theme_path, watch=not args.no_watch)


if __name__ == "__main__":
    main()
