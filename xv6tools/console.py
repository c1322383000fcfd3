"""Line-edited console input buffer."""

from __future__ import annotations

from typing import Union

from xv6tools.kbd import ctrl

INPUT_BUF = 128
BACKSPACE_ECHO = "\b \b"

_CTRL_P = ctrl("P")
_CTRL_U = ctrl("U")
_CTRL_H = ctrl("H")
_CTRL_D = ctrl("D")
_DEL = 0x7F


class InputBuffer:
    """Circular console input buffer with line editing.

    Characters become readable once a newline or Control-D is typed, or
    when the buffer fills up.
    """

    def __init__(self) -> None:
        self._buf = [0] * INPUT_BUF
        self.r = 0  # read index
        self.w = 0  # write index
        self.e = 0  # edit index
        self.procdump_requested = False

    def feed(self, c: Union[int, str]) -> str:
        """Handle one typed character and return the text echoed for it."""
        if isinstance(c, str):
            if len(c) != 1:
                raise ValueError("feed takes a single character")
            c = ord(c)
        if c < 0:
            raise ValueError(f"character code {c} is negative")

        if c == _CTRL_P:
            self.procdump_requested = True
            return ""
        if c == _CTRL_U:
            echo = []
            while self.e != self.w and self._buf[(self.e - 1) % INPUT_BUF] != ord("\n"):
                self.e -= 1
                echo.append(BACKSPACE_ECHO)
            return "".join(echo)
        if c in (_CTRL_H, _DEL):
            if self.e != self.w:
                self.e -= 1
                return BACKSPACE_ECHO
            return ""
        if c != 0 and self.e - self.r < INPUT_BUF:
            if c == ord("\r"):
                c = ord("\n")
            self._buf[self.e % INPUT_BUF] = c
            self.e += 1
            if c in (ord("\n"), _CTRL_D) or self.e == self.r + INPUT_BUF:
                self.w = self.e
            return chr(c)
        return ""

    def read(self, n: int) -> str:
        """Read up to ``n`` committed characters, stopping after a newline.

        Control-D ends the read; when it comes after some characters it is
        kept so that the next read returns "" (end of file). Raises
        BlockingIOError when no committed input is waiting.
        """
        target = n
        out = []
        while n > 0:
            if self.r == self.w:
                if not out:
                    raise BlockingIOError("no console input available")
                break
            c = self._buf[self.r % INPUT_BUF]
            self.r += 1
            if c == _CTRL_D:
                if n < target:
                    self.r -= 1
                break
            out.append(chr(c))
            n -= 1
            if c == ord("\n"):
                break
        return "".join(out)