"""External formatter invocation.

A formatter is an opaque pipe: the buffer content goes in on stdin and, only
when the command exits successfully, its stdout replaces the buffer.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass

from .highlight import GO, LanguageProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatResult:
    output: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.output is not None


# Primary (Ctrl+F) and secondary (Ctrl+G) formatter per language.
FORMATTERS: dict[str, tuple[str, str]] = {
    GO.name: ("gofmt", "goimports"),
}


def formatter_command(profile: LanguageProfile | None, secondary: bool = False) -> str | None:
    if profile is None:
        return None
    commands = FORMATTERS.get(profile.name)
    if commands is None:
        return None
    return commands[1] if secondary else commands[0]


def run_formatter(command: str, content: str) -> FormatResult:
    """Pipe ``content`` through ``command``; never raises."""
    argv = shlex.split(command)
    if not argv:
        return FormatResult(None, "Formatter command is empty.")
    try:
        proc = subprocess.run(
            argv,
            input=content,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("formatter %s failed to run: %s", argv[0], exc)
        return FormatResult(None, f"{argv[0]} failed: {exc}")

    if proc.returncode != 0:
        detail = proc.stderr.strip().splitlines()[0] if proc.stderr.strip() else f"exit {proc.returncode}"
        logger.info("formatter %s exited with %d", argv[0], proc.returncode)
        return FormatResult(None, f"{argv[0]}: {detail}")
    return FormatResult(proc.stdout)
