"""Small formatted printing supporting %d, %x, %p, %s (and %c in user space)."""

from __future__ import annotations

from typing import Any, Iterator, List

_MASK = 0xFFFFFFFF
_UPPER = "0123456789ABCDEF"
_LOWER = "0123456789abcdef"


def _to_int32(value: int) -> int:
    value &= _MASK
    return value - (1 << 32) if value & 0x80000000 else value


def format_int(value: int, base: int, signed: bool = False, uppercase: bool = True) -> str:
    """Render ``value`` as a 32-bit integer in ``base``.

    With ``signed`` a negative value gets a leading '-'; otherwise the value
    is shown as unsigned.
    """
    if not 2 <= base <= 16:
        raise ValueError(f"base {base} out of range 2..16")
    xx = _to_int32(value)
    neg = signed and xx < 0
    x = (-xx if neg else xx) & _MASK
    digits = _UPPER if uppercase else _LOWER
    out: List[str] = []
    while True:
        out.append(digits[x % base])
        x //= base
        if x == 0:
            break
    if neg:
        out.append("-")
    return "".join(reversed(out))


def _render(fmt: str, args: tuple, uppercase: bool, with_char: bool) -> str:
    values: Iterator[Any] = iter(args)

    def next_arg() -> Any:
        try:
            return next(values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    out: List[str] = []
    chars = iter(fmt)
    for c in chars:
        if c != "%":
            out.append(c)
            continue
        c = next(chars, None)
        if c is None:
            break
        if c == "d":
            out.append(format_int(next_arg(), 10, True, uppercase))
        elif c in ("x", "p"):
            out.append(format_int(next_arg(), 16, False, uppercase))
        elif c == "s":
            s = next_arg()
            if s is None:
                out.append("(null)")
            elif isinstance(s, (bytes, bytearray)):
                out.append(bytes(s).decode("latin-1"))
            else:
                out.append(str(s))
        elif c == "c" and with_char:
            v = next_arg()
            out.append(chr(v & 0xFF) if isinstance(v, int) else str(v)[:1])
        elif c == "%":
            out.append("%")
        else:
            # Unknown % sequence: print it to draw attention.
            out.append("%" + c)
    return "".join(out)


def format(fmt: str, *args: Any) -> str:
    """Format as the user-space printf does: %d %x %p %s %c %%, upper-case hex."""
    return _render(fmt, args, uppercase=True, with_char=True)


def cformat(fmt: str, *args: Any) -> str:
    """Format as the kernel console printf does: %d %x %p %s %%, lower-case hex."""
    return _render(fmt, args, uppercase=False, with_char=False)