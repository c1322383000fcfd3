"""PC keyboard scan-code decoding (scan code set 1) into character codes."""

from __future__ import annotations

from enum import IntFlag
from typing import Iterable, List


class Modifier(IntFlag):
    """Modifier and lock state kept between scan codes."""

    NONE = 0
    SHIFT = 1 << 0
    CTL = 1 << 1
    ALT = 1 << 2
    CAPSLOCK = 1 << 3
    NUMLOCK = 1 << 4
    SCROLLLOCK = 1 << 5
    E0ESC = 1 << 6


NO = 0

# Special key codes.
KEY_HOME = 0xE0
KEY_END = 0xE1
KEY_UP = 0xE2
KEY_DN = 0xE3
KEY_LF = 0xE4
KEY_RT = 0xE5
KEY_PGUP = 0xE6
KEY_PGDN = 0xE7
KEY_INS = 0xE8
KEY_DEL = 0xE9

E0_PREFIX = 0xE0
RELEASE_BIT = 0x80


def ctrl(ch: str) -> int:
    """Code produced by Control held with ``ch``."""
    return (ord(ch) - ord("@")) & 0xFF


def _table(prefix: List[int], extra: dict) -> List[int]:
    table = list(prefix) + [NO] * (256 - len(prefix))
    for index, code in extra.items():
        table[index] = code
    return table


_SPECIALS = {
    0xC8: KEY_UP,
    0xD0: KEY_DN,
    0xC9: KEY_PGUP,
    0xD1: KEY_PGDN,
    0xCB: KEY_LF,
    0xCD: KEY_RT,
    0x97: KEY_HOME,
    0xCF: KEY_END,
    0xD2: KEY_INS,
    0xD3: KEY_DEL,
}

_NORMAL_KEYS = (
    "\0\x1b1234567890-=\b\t"
    "qwertyuiop[]\n\0as"
    "dfghjkl;'`\0\\zxcv"
    "bnm,./\0*\0 \0\0\0\0\0\0"
    "\0\0\0\0\0\0\0789-456+1"
    "230.\0\0\0\0"
)

_SHIFT_KEYS = (
    "\0\x1b!@#$%^&*()_+\b\t"
    "QWERTYUIOP{}\n\0AS"
    'DFGHJKL:"~\0|ZXCV'
    "BNM<>?\0*\0 \0\0\0\0\0\0"
    "\0\0\0\0\0\0\0789-456+1"
    "230.\0\0\0\0"
)

# '.' marks no key, '\r' stands for itself, anything else is Control-<char>.
_CTL_KEYS = (
    "." * 16
    + "QWERTYUI"
    + "OP..\r.AS"
    + "DFGHJKL."
    + "...\\ZXCV"
    + "BNM../.."
)


def _ctl_code(ch: str) -> int:
    if ch == ".":
        return NO
    if ch == "\r":
        return ord("\r")
    return ctrl(ch)


NORMALMAP = _table([ord(c) for c in _NORMAL_KEYS], {0x9C: ord("\n"), 0xB5: ord("/"), **_SPECIALS})
SHIFTMAP = _table([ord(c) for c in _SHIFT_KEYS], {0x9C: ord("\n"), 0xB5: ord("/"), **_SPECIALS})
CTLMAP = _table([_ctl_code(c) for c in _CTL_KEYS], {0x9C: ord("\r"), 0xB5: ctrl("/"), **_SPECIALS})

SHIFTCODE = _table(
    [],
    {
        0x1D: Modifier.CTL,
        0x2A: Modifier.SHIFT,
        0x36: Modifier.SHIFT,
        0x38: Modifier.ALT,
        0x9D: Modifier.CTL,
        0xB8: Modifier.ALT,
    },
)

TOGGLECODE = _table(
    [],
    {
        0x3A: Modifier.CAPSLOCK,
        0x45: Modifier.NUMLOCK,
        0x46: Modifier.SCROLLLOCK,
    },
)

_CHARCODE = (NORMALMAP, SHIFTMAP, CTLMAP, CTLMAP)


class KeyboardDecoder:
    """Turns a stream of scan codes into character codes, tracking modifiers."""

    def __init__(self) -> None:
        self.shift = Modifier.NONE

    def feed(self, scancode: int) -> int:
        """Consume one scan code; return the character code, or 0 when none results."""
        if not 0 <= scancode <= 0xFF:
            raise ValueError(f"scan code {scancode} out of range 0..255")
        data = scancode

        if data == E0_PREFIX:
            self.shift |= Modifier.E0ESC
            return 0
        if data & RELEASE_BIT:
            if not self.shift & Modifier.E0ESC:
                data &= 0x7F
            self.shift &= ~(Modifier(SHIFTCODE[data]) | Modifier.E0ESC)
            return 0
        if self.shift & Modifier.E0ESC:
            data |= RELEASE_BIT
            self.shift &= ~Modifier.E0ESC

        self.shift |= Modifier(SHIFTCODE[data])
        self.shift ^= Modifier(TOGGLECODE[data])
        c = _CHARCODE[int(self.shift & (Modifier.CTL | Modifier.SHIFT))][data]
        if self.shift & Modifier.CAPSLOCK:
            if ord("a") <= c <= ord("z"):
                c += ord("A") - ord("a")
            elif ord("A") <= c <= ord("Z"):
                c += ord("a") - ord("A")
        return c


def decode(scancodes: Iterable[int]) -> str:
    """Decode a sequence of scan codes into the text they type.

    Each character code becomes one character (special keys map to code
    points 0xE0..0xE9); scan codes that produce nothing are skipped.
    """
    decoder = KeyboardDecoder()
    return "".join(chr(c) for c in map(decoder.feed, scancodes) if c)