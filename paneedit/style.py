"""Color parsing and style resolution.

Theme colors arrive as free-form strings. Parsing never raises: anything
unrecognized becomes the terminal default color so a malformed theme only
degrades rendering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .theme import Theme


class ColorKind(Enum):
    DEFAULT = "default"
    PALETTE = "palette"
    RGB = "rgb"


@dataclass(frozen=True)
class Color:
    """Terminal color: the default color, a palette index, or 24-bit RGB."""

    kind: ColorKind = ColorKind.DEFAULT
    value: int = 0

    @classmethod
    def palette(cls, index: int) -> Color:
        return cls(ColorKind.PALETTE, index)

    @classmethod
    def rgb(cls, red: int, green: int, blue: int) -> Color:
        return cls(ColorKind.RGB, (red << 16) | (green << 8) | blue)

    @property
    def is_default(self) -> bool:
        return self.kind is ColorKind.DEFAULT

    def sgr_params(self, background: bool = False) -> str:
        """SGR parameter fragment selecting this color as fg or bg."""
        if self.kind is ColorKind.RGB:
            red = (self.value >> 16) & 0xFF
            green = (self.value >> 8) & 0xFF
            blue = self.value & 0xFF
            return f"{48 if background else 38};2;{red};{green};{blue}"
        if self.kind is ColorKind.PALETTE and self.value < 256:
            return f"{48 if background else 38};5;{self.value}"
        return "49" if background else "39"


DEFAULT_COLOR = Color()

_DEFAULT_SENTINELS = {"", "default", "terminal", "none", "transparent"}
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_NAMED_COLORS: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "purple": 5,
    "cyan": 6,
    "teal": 6,
    "white": 7,
    "gray": 8,
    "grey": 8,
}


def parse_color(text: object) -> Color:
    """Parse a theme color string.

    Accepts ``#rgb``, ``#rrggbb``, a bare palette index, or a name from a
    small fixed table. Empty strings, the default sentinels, non-strings and
    anything unrecognized all resolve to the terminal default.
    """
    if not isinstance(text, str):
        return DEFAULT_COLOR
    value = text.strip()
    lowered = value.lower()
    if lowered in _DEFAULT_SENTINELS:
        return DEFAULT_COLOR
    if value.startswith("#"):
        digits = value[1:]
        if not _HEX_RE.fullmatch(digits):
            return DEFAULT_COLOR
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            return DEFAULT_COLOR
        return Color(ColorKind.RGB, int(digits, 16))
    if value.isascii() and value.isdigit():
        return Color.palette(int(value))
    index = _NAMED_COLORS.get(lowered)
    if index is None:
        return DEFAULT_COLOR
    return Color.palette(index)


@dataclass(frozen=True)
class StyleSpec:
    """Theme element: optional colors plus independent attribute flags."""

    fg: Color | None = None
    bg: Color | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    reverse: bool = False


@dataclass(frozen=True)
class Style:
    """Fully resolved cell style."""

    fg: Color = DEFAULT_COLOR
    bg: Color = DEFAULT_COLOR
    bold: bool = False
    italic: bool = False
    underline: bool = False
    reverse: bool = False

    def with_bold(self) -> Style:
        return Style(self.fg, self.bg, True, self.italic, self.underline, self.reverse)

    def sgr(self) -> str:
        """Encode as a single ANSI SGR escape sequence starting from a reset."""
        params = ["0"]
        if self.bold:
            params.append("1")
        if self.italic:
            params.append("3")
        if self.underline:
            params.append("4")
        if self.reverse:
            params.append("7")
        if not self.fg.is_default:
            params.append(self.fg.sgr_params())
        if not self.bg.is_default:
            params.append(self.bg.sgr_params(background=True))
        return f"\033[{';'.join(params)}m"


PLAIN_STYLE = Style()


def resolve_style(spec: StyleSpec, theme: Theme) -> Style:
    """Fill absent colors from the theme's base colors; flags never fall back."""
    return Style(
        fg=spec.fg if spec.fg is not None else theme.foreground,
        bg=spec.bg if spec.bg is not None else theme.background,
        bold=spec.bold,
        italic=spec.italic,
        underline=spec.underline,
        reverse=spec.reverse,
    )


def style_spec_from_document(raw: object) -> StyleSpec | None:
    """Build a ``StyleSpec`` from one theme-document element.

    Returns ``None`` when ``raw`` is not a mapping. Colors go through
    :func:`parse_color`; flags count only when they are real booleans.
    """
    if not isinstance(raw, dict):
        return None

    def color(key: str) -> Color | None:
        if key not in raw:
            return None
        return parse_color(raw.get(key))

    def flag(key: str) -> bool:
        value = raw.get(key)
        return value if isinstance(value, bool) else False

    return StyleSpec(
        fg=color("fg"),
        bg=color("bg"),
        bold=flag("bold"),
        italic=flag("italic"),
        underline=flag("underline"),
        reverse=flag("reverse"),
    )


def color_to_document(color: Color | None) -> str | None:
    if color is None:
        return None
    if color.kind is ColorKind.RGB:
        return f"#{color.value:06x}"
    if color.kind is ColorKind.PALETTE:
        return str(color.value)
    return "default"


def style_spec_to_document(spec: StyleSpec) -> dict[str, object]:
    """Inverse of :func:`style_spec_from_document` for ``--dump-theme``."""
    out: dict[str, object] = {}
    fg = color_to_document(spec.fg)
    bg = color_to_document(spec.bg)
    if fg is not None:
        out["fg"] = fg
    if bg is not None:
        out["bg"] = bg
    for name in ("bold", "italic", "underline", "reverse"):
        if getattr(spec, name):
            out[name] = True
    return out
