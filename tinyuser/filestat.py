"""File status and calendar-date records."""

from __future__ import annotations

import enum
import os
import stat as _stat
from dataclasses import dataclass


class FileType(enum.IntEnum):
    DIR = 1
    FILE = 2
    DEVICE = 3


@dataclass(frozen=True)
class Stat:
    """Status of a file: device, inode number, type, link count and size in bytes."""

    dev: int
    ino: int
    type: FileType
    nlink: int
    size: int

    def __post_init__(self) -> None:
        if self.ino < 0:
            raise ValueError("inode number must not be negative")
        if self.size < 0:
            raise ValueError("size must not be negative")
        object.__setattr__(self, "type", FileType(self.type))

    @classmethod
    def from_os(cls, result: os.stat_result) -> "Stat":
        """Build from a host ``os.stat_result``."""
        mode = result.st_mode
        if _stat.S_ISDIR(mode):
            kind = FileType.DIR
        elif _stat.S_ISREG(mode):
            kind = FileType.FILE
        else:
            kind = FileType.DEVICE
        return cls(
            dev=result.st_dev,
            ino=result.st_ino,
            type=kind,
            nlink=result.st_nlink,
            size=result.st_size,
        )


@dataclass(frozen=True)
class RtcDate:
    """A wall-clock date and time as read from a real-time clock."""

    second: int
    minute: int
    hour: int
    day: int
    month: int
    year: int

    def __post_init__(self) -> None:
        for name in ("second", "minute", "hour", "day", "month", "year"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")