"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into ``KeyEvent`` values.
Handles ESC-sequence timing, Ctrl-modified arrows, and multi-byte UTF-8.
"""

from __future__ import annotations

import os
import select
from dataclasses import dataclass
from enum import Enum, Flag

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []


class Key(Enum):
    RUNE = "rune"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    ENTER = "enter"
    TAB = "tab"
    BACKSPACE = "backspace"
    DELETE = "delete"
    ESC = "esc"
    CTRL_F = "ctrl_f"
    CTRL_G = "ctrl_g"
    CTRL_L = "ctrl_l"
    CTRL_Q = "ctrl_q"
    CTRL_S = "ctrl_s"


class Modifier(Flag):
    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    rune: str = ""
    mods: Modifier = Modifier.NONE


@dataclass(frozen=True)
class ResizeEvent:
    columns: int
    rows: int


_CONTROL_KEYS: dict[bytes, Key] = {
    b"\x06": Key.CTRL_F,
    b"\x07": Key.CTRL_G,
    b"\x0c": Key.CTRL_L,
    b"\x11": Key.CTRL_Q,
    b"\x13": Key.CTRL_S,
    b"\t": Key.TAB,
    b"\r": Key.ENTER,
    b"\n": Key.ENTER,
    b"\x08": Key.BACKSPACE,
    b"\x7f": Key.BACKSPACE,
}

_CSI_FINAL_KEYS: dict[bytes, Key] = {
    b"A": Key.UP,
    b"B": Key.DOWN,
    b"C": Key.RIGHT,
    b"D": Key.LEFT,
    b"H": Key.HOME,
    b"F": Key.END,
}

_CSI_TILDE_KEYS: dict[str, Key] = {
    "1": Key.HOME,
    "3": Key.DELETE,
    "4": Key.END,
    "5": Key.PAGE_UP,
    "6": Key.PAGE_DOWN,
    "7": Key.HOME,
    "8": Key.END,
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _modifier_from_param(param: str) -> Modifier:
    """Decode the xterm ``1;N`` modifier parameter (N = 1 + bitmask)."""
    try:
        mask = int(param) - 1
    except ValueError:
        return Modifier.NONE
    mods = Modifier.NONE
    if mask & 1:
        mods |= Modifier.SHIFT
    if mask & 2:
        mods |= Modifier.ALT
    if mask & 4:
        mods |= Modifier.CTRL
    return mods


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_csi(fd: int) -> KeyEvent | None:
    params: list[bytes] = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return None
        if b"@" <= part <= b"~":
            final = part
            break
        params.append(part)
        if len(params) > 16:
            return None

    fields = b"".join(params).decode("ascii", errors="replace").split(";")
    mods = _modifier_from_param(fields[1]) if len(fields) > 1 else Modifier.NONE
    if final == b"~":
        key = _CSI_TILDE_KEYS.get(fields[0])
        return KeyEvent(key, mods=mods) if key is not None else None
    key = _CSI_FINAL_KEYS.get(final)
    if key is None:
        return None
    return KeyEvent(key, mods=mods)


def read_event(fd: int, timeout_ms: int | None = None) -> KeyEvent | None:
    """Read one key event.

    Returns ``None`` when ``timeout_ms`` elapses first or the bytes form an
    escape sequence with no key mapping. ``Key.ESC`` comes only from an ESC
    that does not start a CSI or SS3 sequence.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(fd, 1)
        if not ch:
            return None

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return KeyEvent(control)

    if ch == b"\x1b":
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return KeyEvent(Key.ESC)
        if seq == b"[":
            return _read_csi(fd)
        if seq == b"O":
            final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            key = _CSI_FINAL_KEYS.get(final or b"")
            return KeyEvent(key) if key is not None else None
        _PENDING_BYTES.append(seq)
        return KeyEvent(Key.ESC)

    data = ch
    for _ in range(_utf8_length(ch[0]) - 1):
        more = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if more is None:
            break
        data += more
    text = data.decode("utf-8", errors="replace")
    if len(text) != 1 or ord(text) < 32:
        return None
    return KeyEvent(Key.RUNE, rune=text)
