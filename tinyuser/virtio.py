"""Virtio MMIO register layout and virtqueue / block-request records."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar, Tuple

MMIO_BASE = 0x10001000
MAGIC_VALUE = 0x74726976
VENDOR_ID = 0x554D4551
LEGACY_VERSION = 1
NET_DEVICE_ID = 1
DISK_DEVICE_ID = 2

# Number of descriptors; must be a power of two.
NUM = 8


class MmioRegister(enum.IntEnum):
    MAGIC_VALUE = 0x000
    VERSION = 0x004
    DEVICE_ID = 0x008
    VENDOR_ID = 0x00C
    DEVICE_FEATURES = 0x010
    DRIVER_FEATURES = 0x020
    GUEST_PAGE_SIZE = 0x028
    QUEUE_SEL = 0x030
    QUEUE_NUM_MAX = 0x034
    QUEUE_NUM = 0x038
    QUEUE_ALIGN = 0x03C
    QUEUE_PFN = 0x040
    QUEUE_READY = 0x044
    QUEUE_NOTIFY = 0x050
    INTERRUPT_STATUS = 0x060
    INTERRUPT_ACK = 0x064
    STATUS = 0x070


class ConfigStatus(enum.IntFlag):
    ACKNOWLEDGE = 1
    DRIVER = 2
    DRIVER_OK = 4
    FEATURES_OK = 8


class BlkFeature(enum.IntEnum):
    """Bit numbers of device feature flags."""

    RO = 5
    SCSI = 7
    CONFIG_WCE = 11
    MQ = 12
    ANY_LAYOUT = 27
    RING_INDIRECT_DESC = 28
    RING_EVENT_IDX = 29

    @property
    def mask(self) -> int:
        return 1 << self.value


class DescFlag(enum.IntFlag):
    NEXT = 1
    WRITE = 2


class BlkRequestType(enum.IntEnum):
    IN = 0
    OUT = 1


def _pack(fmt: struct.Struct, *values: int) -> bytes:
    try:
        return fmt.pack(*values)
    except struct.error as exc:
        raise ValueError(str(exc)) from None


def _unpack(fmt: struct.Struct, data: bytes) -> tuple:
    data = bytes(data)
    if len(data) != fmt.size:
        raise ValueError(f"expected {fmt.size} bytes, got {len(data)}")
    return fmt.unpack(data)


def _ring(values, name: str) -> tuple:
    values = tuple(values)
    if len(values) != NUM:
        raise ValueError(f"{name} must have {NUM} entries")
    return values


@dataclass
class VirtqDesc:
    """One descriptor: buffer address, length, flags and next index."""

    addr: int = 0
    len: int = 0
    flags: DescFlag = DescFlag(0)
    next: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<QIHH")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, self.addr, self.len, int(self.flags), self.next)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqDesc":
        addr, length, flags, nxt = _unpack(cls._FORMAT, data)
        return cls(addr=addr, len=length, flags=DescFlag(flags), next=nxt)


@dataclass
class VirtqAvail:
    """The available ring: descriptor numbers of chain heads."""

    flags: int = 0
    idx: int = 0
    ring: Tuple[int, ...] = field(default_factory=lambda: (0,) * NUM)
    unused: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct(f"<HH{NUM}HH")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        ring = _ring(self.ring, "ring")
        return _pack(self._FORMAT, self.flags, self.idx, *ring, self.unused)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqAvail":
        values = _unpack(cls._FORMAT, data)
        return cls(flags=values[0], idx=values[1], ring=tuple(values[2:2 + NUM]), unused=values[-1])


@dataclass
class VirtqUsedElem:
    """A completed request: start of its descriptor chain and length written."""

    id: int = 0
    len: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<II")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, self.id, self.len)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsedElem":
        ident, length = _unpack(cls._FORMAT, data)
        return cls(id=ident, len=length)


@dataclass
class VirtqUsed:
    """The used ring, filled in by the device."""

    flags: int = 0
    idx: int = 0
    ring: Tuple[VirtqUsedElem, ...] = field(
        default_factory=lambda: tuple(VirtqUsedElem() for _ in range(NUM))
    )

    _HEAD: ClassVar[struct.Struct] = struct.Struct("<HH")
    SIZE: ClassVar[int] = _HEAD.size + NUM * VirtqUsedElem.SIZE

    def pack(self) -> bytes:
        ring = _ring(self.ring, "ring")
        return _pack(self._HEAD, self.flags, self.idx) + b"".join(e.pack() for e in ring)

    @classmethod
    def unpack(cls, data: bytes) -> "VirtqUsed":
        data = bytes(data)
        if len(data) != cls.SIZE:
            raise ValueError(f"expected {cls.SIZE} bytes, got {len(data)}")
        flags, idx = cls._HEAD.unpack_from(data)
        body = data[cls._HEAD.size:]
        step = VirtqUsedElem.SIZE
        ring = tuple(
            VirtqUsedElem.unpack(body[start:start + step]) for start in range(0, len(body), step)
        )
        return cls(flags=flags, idx=idx, ring=ring)


@dataclass
class BlkRequest:
    """Header of a block-device request: direction and starting sector."""

    type: BlkRequestType = BlkRequestType.IN
    reserved: int = 0
    sector: int = 0

    _FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQ")
    SIZE: ClassVar[int] = _FORMAT.size

    def pack(self) -> bytes:
        return _pack(self._FORMAT, int(self.type), self.reserved, self.sector)

    @classmethod
    def unpack(cls, data: bytes) -> "BlkRequest":
        kind, reserved, sector = _unpack(cls._FORMAT, data)
        try:
            kind = BlkRequestType(kind)
        except ValueError:
            pass
        return cls(type=kind, reserved=reserved, sector=sector)