"""Terminate processes by process id."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from typing import Optional, Sequence

from tinyuser.ulib import atoi

_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: kill pid...

    Arguments are parsed as leading decimal digits; ids that name no
    process, including 0, are ignored.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: kill pid...", file=sys.stderr)
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue
        with contextlib.suppress(OSError, OverflowError):
            os.kill(pid, _SIGNAL)
    return 0