"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import IO, Optional, Sequence

from tinyuser.fmt import printf

CHUNK_SIZE = 512
# A NUL byte also ends a word.
_WHITESPACE = frozenset(b" \r\t\n\v\0")


@dataclass(frozen=True)
class Counts:
    lines: int
    words: int
    chars: int


def count(stream: IO) -> Counts:
    """Count newlines, words and bytes of everything read from ``stream``."""
    lines = words = chars = 0
    inword = False
    while True:
        try:
            chunk = stream.read(CHUNK_SIZE)
        except OSError as exc:
            raise OSError("read error") from exc
        if not chunk:
            break
        if isinstance(chunk, str):
            chunk = chunk.encode()
        for byte in chunk:
            chars += 1
            if byte == 0x0A:
                lines += 1
            if byte in _WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines=lines, words=words, chars=chars)


def _report(stream: IO, name: str) -> bool:
    try:
        counts = count(stream)
    except OSError:
        printf("wc: read error\n")
        return False
    printf("%d %d %d %s\n", counts.lines, counts.words, counts.chars, name)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: wc [file ...]"""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return 0 if _report(getattr(sys.stdin, "buffer", sys.stdin), "") else 1
    for name in args:
        try:
            source = open(name, "rb")
        except OSError:
            printf("wc: cannot open %s\n", name)
            return 1
        with source:
            if not _report(source, name):
                return 1
    return 0