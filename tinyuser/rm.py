"""Remove files and empty directories."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence


def _unlink(name: str) -> None:
    if os.path.isdir(name) and not os.path.islink(name):
        os.rmdir(name)
    else:
        os.unlink(name)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: rm files...

    Empty directories are removed too. Stops at the first failure.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: rm files...", file=sys.stderr)
        return 1
    for name in args:
        try:
            _unlink(name)
        except OSError:
            print(f"rm: {name} failed to delete", file=sys.stderr)
            break
    return 0