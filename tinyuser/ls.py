"""List files and directories."""

from __future__ import annotations

import os
import sys
from typing import Iterator, Optional, Sequence

from tinyuser.filestat import FileType, Stat
from tinyuser.fmt import format as cformat
from tinyuser.fmt import fprintf

DIRSIZ = 14
_PATH_BUF = 512


def fmtname(path: str) -> str:
    """The last path component, padded with blanks to ``DIRSIZ`` if shorter."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def ls(path: str) -> Iterator[str]:
    """Yield the output lines for ``path``: one line for a file, one per entry for a directory.

    Raises OSError if ``path`` cannot be examined.
    """
    st = Stat.from_os(os.stat(path))
    if st.type == FileType.FILE:
        yield cformat("%s %d %d %l", fmtname(path), st.type, st.ino, st.size)
    elif st.type == FileType.DIR:
        if len(path) + 1 + DIRSIZ + 1 > _PATH_BUF:
            yield "ls: path too long"
            return
        for name in [".", ".."] + sorted(os.listdir(path)):
            entry = path + "/" + name[:DIRSIZ]
            try:
                est = Stat.from_os(os.stat(entry))
            except OSError:
                yield f"ls: cannot stat {entry}"
                continue
            yield cformat("%s %d %d %d", fmtname(entry), est.type, est.ino, est.size)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: ls [path ...]"""
    args = list(sys.argv[1:] if argv is None else argv) or ["."]
    for path in args:
        try:
            for line in ls(path):
                print(line)
        except OSError:
            fprintf(sys.stderr, "ls: cannot open %s\n", path)
    return 0