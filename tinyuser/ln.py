"""Create a hard link."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: ln old new"""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: ln old new", file=sys.stderr)
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        print(f"link {old} {new}: failed", file=sys.stderr)
    return 0