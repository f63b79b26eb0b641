"""Create directories."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: mkdir files...

    Stops at the first directory that cannot be created.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: mkdir files...", file=sys.stderr)
        return 1
    for name in args:
        try:
            os.mkdir(name)
        except OSError:
            print(f"mkdir: {name} failed to create", file=sys.stderr)
            break
    return 0