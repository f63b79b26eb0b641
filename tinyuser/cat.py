"""Concatenate files to standard output."""

from __future__ import annotations

import sys
from typing import IO, Optional, Sequence

CHUNK_SIZE = 512


def cat(src: IO[bytes], dst: IO[bytes]) -> int:
    """Copy everything from ``src`` to ``dst``; return the number of bytes copied."""
    total = 0
    while True:
        try:
            chunk = src.read(CHUNK_SIZE)
        except OSError as exc:
            raise OSError("read error") from exc
        if not chunk:
            return total
        try:
            written = dst.write(chunk)
        except OSError as exc:
            raise OSError("write error") from exc
        if written is not None and written != len(chunk):
            raise OSError("write error")
        total += len(chunk)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: cat [file ...]"""
    args = list(sys.argv[1:] if argv is None else argv)
    sys.stdout.flush()
    out = getattr(sys.stdout, "buffer", sys.stdout)
    try:
        if not args:
            cat(getattr(sys.stdin, "buffer", sys.stdin), out)
            return 0
        for name in args:
            try:
                source = open(name, "rb")
            except OSError:
                print(f"cat: cannot open {name}", file=sys.stderr)
                return 1
            with source:
                cat(source, out)
        return 0
    except OSError as exc:
        print(f"cat: {exc}", file=sys.stderr)
        return 1
    finally:
        out.flush()