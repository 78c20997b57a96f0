"""Approximate lexical highlighting for C-family source files.

The lexer is a small state machine whose state survives line breaks, so a
block comment or an unterminated string keeps its color on the following
lines. Tokenization is lossless: joining a line's token texts gives the
line back exactly.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

from .style import Style, resolve_style
from .theme import Theme

_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = frozenset(string.ascii_letters + string.digits + "_")
_DIGITS = frozenset(string.digits)
# Over-greedy on purpose: "1-2" scans as one number token.
_NUMBER_CHARS = frozenset(string.digits + ".eE+-")


class LexMode(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    IN_RAW_STRING = "in_raw_string"
    IN_BLOCK_COMMENT = "in_block_comment"


@dataclass(frozen=True)
class HighlighterState:
    mode: LexMode = LexMode.NORMAL
    escaped: bool = False


NORMAL = HighlighterState()


class TokenKind(Enum):
    KEYWORD = "keyword"
    TYPE = "type"
    IDENTIFIER = "identifier"
    STRING = "string"
    COMMENT = "comment"
    NUMBER = "number"
    PUNCTUATION = "punctuation"


@dataclass(frozen=True)
class Token:
    text: str
    kind: TokenKind
    style: Style = Style()


@dataclass(frozen=True)
class LanguageProfile:
    """Keyword tables and delimiters for one language family."""

    name: str
    aliases: frozenset[str]
    keywords: frozenset[str]
    types: frozenset[str] = frozenset()
    raw_string: str | None = None
    line_comment: str = "//"
    block_open: str = "/*"
    block_close: str = "*/"


GO = LanguageProfile(
    name="go",
    aliases=frozenset({"go", "golang"}),
    keywords=frozenset(
        {
            "break", "case", "chan", "const", "continue", "default", "defer", "else",
            "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
            "map", "package", "range", "return", "select", "struct", "switch", "type",
            "var",
        }
    ),
    types=frozenset(
        {
            "bool", "byte", "complex64", "complex128", "error", "float32", "float64",
            "int", "int8", "int16", "int32", "int64", "rune", "string", "uint",
            "uint8", "uint16", "uint32", "uint64", "uintptr",
        }
    ),
    raw_string="`",
)

C = LanguageProfile(
    name="c",
    aliases=frozenset({"c", "cpp", "c++", "objective-c", "objc"}),
    keywords=frozenset(
        {
            "auto", "break", "case", "class", "const", "continue", "default", "delete",
            "do", "else", "enum", "extern", "for", "goto", "if", "inline", "namespace",
            "new", "private", "protected", "public", "register", "return", "sizeof",
            "static", "struct", "switch", "template", "this", "typedef", "union",
            "using", "virtual", "volatile", "while",
        }
    ),
    types=frozenset(
        {
            "bool", "char", "double", "float", "int", "long", "short", "signed",
            "size_t", "unsigned", "void", "int8_t", "int16_t", "int32_t", "int64_t",
            "uint8_t", "uint16_t", "uint32_t", "uint64_t",
        }
    ),
)

JAVA = LanguageProfile(
    name="java",
    aliases=frozenset({"java", "kotlin", "scala"}),
    keywords=frozenset(
        {
            "abstract", "break", "case", "catch", "class", "continue", "default", "do",
            "else", "enum", "extends", "final", "finally", "for", "if", "implements",
            "import", "instanceof", "interface", "new", "package", "private",
            "protected", "public", "return", "static", "super", "switch", "this",
            "throw", "throws", "try", "while",
        }
    ),
    types=frozenset({"boolean", "byte", "char", "double", "float", "int", "long", "short", "void", "String"}),
)

JAVASCRIPT = LanguageProfile(
    name="javascript",
    aliases=frozenset({"javascript", "js", "typescript", "ts", "jsx", "tsx"}),
    keywords=frozenset(
        {
            "async", "await", "break", "case", "catch", "class", "const", "continue",
            "default", "delete", "do", "else", "export", "extends", "finally", "for",
            "from", "function", "if", "import", "in", "instanceof", "let", "new",
            "of", "return", "switch", "this", "throw", "try", "typeof", "var", "while",
            "yield",
        }
    ),
    types=frozenset({"any", "boolean", "never", "number", "object", "string", "symbol", "unknown", "void"}),
    raw_string="`",
)

RUST = LanguageProfile(
    name="rust",
    aliases=frozenset({"rust", "rs"}),
    keywords=frozenset(
        {
            "as", "break", "const", "continue", "crate", "else", "enum", "extern", "fn",
            "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut",
            "pub", "ref", "return", "self", "static", "struct", "trait", "type",
            "unsafe", "use", "where", "while",
        }
    ),
    types=frozenset(
        {
            "bool", "char", "f32", "f64", "i8", "i16", "i32", "i64", "i128", "isize",
            "str", "u8", "u16", "u32", "u64", "u128", "usize", "String", "Vec",
        }
    ),
)

PROFILES: tuple[LanguageProfile, ...] = (GO, C, JAVA, JAVASCRIPT, RUST)


def profile_for_path(path: Path | None) -> LanguageProfile | None:
    """Pick a language profile from the Pygments lexer registered for ``path``."""
    if path is None:
        return None
    try:
        lexer = get_lexer_for_filename(path.name)
    except ClassNotFound:
        return None
    aliases = {alias.lower() for alias in getattr(lexer, "aliases", ())}
    for profile in PROFILES:
        if aliases & profile.aliases:
            return profile
    return None


def _scan_delimited(line: str, i: int, closer: str) -> tuple[int, bool]:
    """Advance to just past ``closer``; return ``(end, closed)``."""
    end = line.find(closer, i)
    if end < 0:
        return len(line), False
    return end + len(closer), True


def _scan_string(line: str, i: int, escaped: bool) -> tuple[int, bool, bool]:
    """Advance through a double-quoted string body.

    Returns ``(end, closed, escaped)``. A backslash arms the escape flag for
    exactly the next rune, which then cannot terminate the string.
    """
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"' and not escaped:
            return i + 1, True, False
        escaped = ch == "\\" and not escaped
        i += 1
    return n, False, escaped


def tokenize_line(
    line: str,
    state: HighlighterState,
    profile: LanguageProfile,
) -> tuple[list[tuple[str, TokenKind]], HighlighterState]:
    """Split one line into ``(text, kind)`` pairs and return the carried state."""
    out: list[tuple[str, TokenKind]] = []
    n = len(line)
    i = 0
    mode = state.mode
    escaped = state.escaped if mode is LexMode.IN_STRING else False

    while i < n:
        start = i

        if mode is LexMode.IN_BLOCK_COMMENT:
            i, closed = _scan_delimited(line, i, profile.block_close)
            if closed:
                mode = LexMode.NORMAL
            out.append((line[start:i], TokenKind.COMMENT))
            continue

        if mode is LexMode.IN_RAW_STRING and profile.raw_string is not None:
            i, closed = _scan_delimited(line, i, profile.raw_string)
            if closed:
                mode = LexMode.NORMAL
            out.append((line[start:i], TokenKind.STRING))
            continue

        if mode is LexMode.IN_STRING:
            i, closed, escaped = _scan_string(line, i, escaped)
            if closed:
                mode = LexMode.NORMAL
            out.append((line[start:i], TokenKind.STRING))
            continue

        mode = LexMode.NORMAL
        ch = line[i]

        if line.startswith(profile.block_open, i):
            i, closed = _scan_delimited(line, i + len(profile.block_open), profile.block_close)
            if not closed:
                mode = LexMode.IN_BLOCK_COMMENT
            out.append((line[start:i], TokenKind.COMMENT))
            continue

        if line.startswith(profile.line_comment, i):
            out.append((line[i:], TokenKind.COMMENT))
            break

        if profile.raw_string is not None and line.startswith(profile.raw_string, i):
            i, closed = _scan_delimited(line, i + len(profile.raw_string), profile.raw_string)
            if not closed:
                mode = LexMode.IN_RAW_STRING
            out.append((line[start:i], TokenKind.STRING))
            continue

        if ch == '"':
            i, closed, escaped = _scan_string(line, i + 1, False)
            if not closed:
                mode = LexMode.IN_STRING
            out.append((line[start:i], TokenKind.STRING))
            continue

        if ch in _IDENT_START:
            while i < n and line[i] in _IDENT_CHARS:
                i += 1
            word = line[start:i]
            if word in profile.keywords:
                kind = TokenKind.KEYWORD
            elif word in profile.types:
                kind = TokenKind.TYPE
            else:
                kind = TokenKind.IDENTIFIER
            out.append((word, kind))
            continue

        if ch in _DIGITS:
            while i < n and line[i] in _NUMBER_CHARS:
                i += 1
            out.append((line[start:i], TokenKind.NUMBER))
            continue

        out.append((ch, TokenKind.PUNCTUATION))
        i += 1

    if mode is not LexMode.IN_STRING:
        escaped = False
    return out, HighlighterState(mode, escaped)


class CodeHighlighter:
    """Turn source lines into styled tokens using a theme's syntax section."""

    def __init__(self, profile: LanguageProfile, theme: Theme) -> None:
        self.profile = profile
        syntax = theme.syntax
        self._styles: dict[TokenKind, Style] = {
            kind: resolve_style(getattr(syntax, kind.value), theme) for kind in TokenKind
        }

    def highlight_line(self, line: str, state: HighlighterState = NORMAL) -> tuple[list[Token], HighlighterState]:
        pairs, state = tokenize_line(line, state, self.profile)
        return [Token(text, kind, self._styles[kind]) for text, kind in pairs], state

    def highlight_lines(self, lines: list[str], state: HighlighterState = NORMAL) -> list[list[Token]]:
        """Highlight consecutive lines, threading lexer state from ``state``."""
        rows: list[list[Token]] = []
        for line in lines:
            tokens, state = self.highlight_line(line, state)
            rows.append(tokens)
        return rows
