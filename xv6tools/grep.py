"""Simple grep supporting only the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import BinaryIO, List, Optional

_BUFSIZE = 1024


def match(pattern: str, text: str) -> bool:
    """Search for ``pattern`` anywhere in ``text``."""
    if pattern.startswith("^"):
        return match_here(pattern[1:], text)
    return any(match_here(pattern, text[i:]) for i in range(len(text) + 1))


def match_here(pattern: str, text: str) -> bool:
    """Search for ``pattern`` at the beginning of ``text``."""
    while True:
        if not pattern:
            return True
        if pattern[1:2] == "*":
            return match_star(pattern[0], pattern[2:], text)
        if pattern == "$":
            return not text
        if text and pattern[0] in (".", text[0]):
            pattern, text = pattern[1:], text[1:]
            continue
        return False


def match_star(c: str, pattern: str, text: str) -> bool:
    """Search for ``c*pattern`` at the beginning of ``text``."""
    i = 0
    while True:
        if match_here(pattern, text[i:]):
            return True
        if i < len(text) and (text[i] == c or c == "."):
            i += 1
        else:
            return False


def _to_text(data: bytes) -> str:
    return data.decode("latin-1")


def grep(pattern: str, stream: BinaryIO, out: BinaryIO) -> None:
    """Write to ``out`` each newline-terminated line of ``stream`` that matches.

    Input is read through a fixed buffer: text after the last newline is
    never matched, and a buffer holding no newline at all is discarded.
    """
    pat = _to_text(pattern.encode("utf-8", "surrogateescape"))
    buf = b""
    while True:
        chunk = stream.read(_BUFSIZE - 1 - len(buf))
        if not chunk:
            break
        buf += chunk
        p = 0
        while (q := buf.find(b"\n", p)) != -1:
            if match(pat, _to_text(buf[p:q])):
                out.write(buf[p:q + 1])
            p = q + 1
        buf = b"" if p == 0 else buf[p:]


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("usage: grep pattern [file ...]", file=sys.stderr)
        return 1
    pattern, files = args[0], args[1:]
    sys.stdout.flush()
    out = sys.stdout.buffer
    if not files:
        grep(pattern, sys.stdin.buffer, out)
        out.flush()
        return 0
    for name in files:
        try:
            fd = open(name, "rb")
        except OSError:
            out.flush()
            print(f"grep: cannot open {name}")
            return 1
        with fd:
            grep(pattern, fd, out)
        out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())