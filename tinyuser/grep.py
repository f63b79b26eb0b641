"""Search lines for a pattern supporting only the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import IO, AnyStr, Iterator, Optional, Sequence, Union

# Input is handled in a buffer of this many bytes, one kept for the terminator.
BUF_SIZE = 1024


def _as_text(value: Union[str, bytes, bytearray]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return value


def _matchhere(re: str, i: int, text: str, j: int) -> bool:
    """Search for ``re[i:]`` at the beginning of ``text[j:]``."""
    while True:
        if i == len(re):
            return True
        if i + 1 < len(re) and re[i + 1] == "*":
            return _matchstar(re[i], re, i + 2, text, j)
        if re[i] == "$" and i + 1 == len(re):
            return j == len(text)
        if j < len(text) and (re[i] == "." or re[i] == text[j]):
            i += 1
            j += 1
            continue
        return False


def _matchstar(c: str, re: str, i: int, text: str, j: int) -> bool:
    """Search for ``c*`` followed by ``re[i:]`` at the beginning of ``text[j:]``."""
    while True:
        if _matchhere(re, i, text, j):
            return True
        if j < len(text) and (text[j] == c or c == "."):
            j += 1
            continue
        return False


def match(pattern: Union[str, bytes], text: Union[str, bytes]) -> bool:
    """True if ``pattern`` matches anywhere in ``text``."""
    re = _as_text(pattern)
    line = _as_text(text)
    if re.startswith("^"):
        return _matchhere(re, 1, line, 0)
    return any(_matchhere(re, 0, line, j) for j in range(len(line) + 1))


def grep(pattern: Union[str, bytes], stream: IO[AnyStr]) -> Iterator[AnyStr]:
    """Yield each newline-terminated line of ``stream`` that matches ``pattern``.

    A final line without a newline is never reported, and reading stops once
    an unterminated line fills the whole buffer.
    """
    pending = stream.read(0)
    newline = "\n" if isinstance(pending, str) else b"\n"
    while True:
        want = BUF_SIZE - 1 - len(pending)
        chunk = stream.read(want) if want > 0 else pending[:0]
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split(newline)
        for line in lines:
            if match(pattern, line):
                yield line + newline


def _stdout_bytes() -> IO[bytes]:
    sys.stdout.flush()
    return getattr(sys.stdout, "buffer", sys.stdout)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: grep pattern [file ...]"""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: grep pattern [file ...]", file=sys.stderr)
        return 1
    pattern, files = args[0], args[1:]
    out = _stdout_bytes()
    try:
        if not files:
            for line in grep(pattern, getattr(sys.stdin, "buffer", sys.stdin)):
                out.write(line)
            return 0
        for name in files:
            try:
                source = open(name, "rb")
            except OSError:
                out.write(f"grep: cannot open {name}\n".encode())
                return 1
            with source:
                for line in grep(pattern, source):
                    out.write(line)
        return 0
    finally:
        out.flush()