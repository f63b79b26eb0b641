"""Minimal printf-style formatting: %d %l %x %p %s %c and %%."""

from __future__ import annotations

import sys
from typing import Any, Iterator, TextIO

_DIGITS = "0123456789ABCDEF"


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _printint(value: int, base: int, signed: bool) -> str:
    xx = _int32(value)
    if signed and xx < 0:
        negative, x = True, -xx
    else:
        negative, x = False, xx & 0xFFFFFFFF
    out = []
    while True:
        out.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        out.append("-")
    return "".join(reversed(out))


def _printptr(value: int) -> str:
    value &= 0xFFFFFFFFFFFFFFFF
    return "0x" + "".join(_DIGITS[(value >> shift) & 0xF] for shift in range(60, -4, -4))


def _string(value: Any) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("latin-1")
    return str(value).split("\0", 1)[0]


def _char(value: Any) -> str:
    if isinstance(value, str):
        return value[:1]
    return chr(int(value) & 0xFF)


def _next(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def format(fmt: str, *args: Any) -> str:
    """Render ``fmt`` with ``args``.

    %d is a signed 32-bit integer, %l and %x unsigned 32-bit (decimal and
    upper-case hex), %p a 64-bit value as 16 hex digits, %s a string
    (None prints "(null)"), %c one character. Unknown conversions are
    echoed with their percent sign.
    """
    values = iter(args)
    out = []
    pending = False
    for ch in fmt.split("\0", 1)[0]:
        if not pending:
            if ch == "%":
                pending = True
            else:
                out.append(ch)
            continue
        pending = False
        if ch == "d":
            out.append(_printint(_next(values), 10, True))
        elif ch == "l":
            out.append(_printint(_next(values), 10, False))
        elif ch == "x":
            out.append(_printint(_next(values), 16, False))
        elif ch == "p":
            out.append(_printptr(_next(values)))
        elif ch == "s":
            out.append(_string(_next(values)))
        elif ch == "c":
            out.append(_char(_next(values)))
        elif ch == "%":
            out.append("%")
        else:
            out.append("%" + ch)
    return "".join(out)


def fprintf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Write the formatted text to ``stream``."""
    stream.write(format(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write the formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)