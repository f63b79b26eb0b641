"""A simulated first-fit free-list allocator over a growable heap."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Set

HEADER_SIZE = 16
MIN_CORE_UNITS = 4096
_BASE = 0
_HEAP_START = 0x1000


@dataclass
class _Header:
    ptr: int
    size: int


class Heap:
    """Circular free list of blocks, kept in address order and coalesced on free.

    Addresses are byte offsets in a simulated address space. The heap grows
    in chunks of at least ``MIN_CORE_UNITS`` headers, up to ``limit`` bytes.
    """

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.limit = limit
        self._brk = _HEAP_START // HEADER_SIZE
        self._end = (_HEAP_START + limit) // HEADER_SIZE
        self._headers: Dict[int, _Header] = {}
        self._allocated: Set[int] = set()
        self._freep: Optional[int] = None

    def _sbrk(self, units: int) -> Optional[int]:
        if self._brk + units > self._end:
            return None
        start = self._brk
        self._brk += units
        return start

    def _morecore(self, nunits: int) -> Optional[int]:
        nunits = max(nunits, MIN_CORE_UNITS)
        hp = self._sbrk(nunits)
        if hp is None:
            return None
        self._headers[hp] = _Header(ptr=0, size=nunits)
        self._release(hp)
        return self._freep

    def malloc(self, nbytes: int) -> Optional[int]:
        """Return the address of a block of at least ``nbytes``, or None if out of memory."""
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._headers[_BASE] = _Header(ptr=_BASE, size=0)
            self._freep = _BASE
        prevp = self._freep
        p = self._headers[prevp].ptr
        while True:
            block = self._headers[p]
            if block.size >= nunits:
                if block.size == nunits:
                    self._headers[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size
                    self._headers[p] = _Header(ptr=0, size=nunits)
                self._freep = prevp
                self._allocated.add(p)
                return (p + 1) * HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
                if p is None:
                    return None
            prevp, p = p, self._headers[p].ptr

    def free(self, address: int) -> None:
        """Return a block obtained from :meth:`malloc` to the free list."""
        if address is None or address % HEADER_SIZE:
            raise ValueError(f"not a heap block: {address!r}")
        unit = address // HEADER_SIZE - 1
        if unit not in self._allocated:
            raise ValueError(f"not an allocated block: {address:#x}")
        self._allocated.remove(unit)
        self._release(unit)

    def _release(self, bp: int) -> None:
        headers = self._headers
        p = self._freep
        while not (p < bp < headers[p].ptr):
            nxt = headers[p].ptr
            if p >= nxt and (bp > p or bp < nxt):
                break
            p = nxt
        block, prev = headers[bp], headers[p]
        upper = prev.ptr
        if bp + block.size == upper:
            block.size += headers[upper].size
            block.ptr = headers[upper].ptr
            del headers[upper]
        else:
            block.ptr = upper
        if p + prev.size == bp:
            prev.size += block.size
            prev.ptr = block.ptr
            del headers[bp]
        else:
            prev.ptr = bp
        self._freep = p

    def free_units(self) -> int:
        """Total size, in header units, of all blocks on the free list."""
        if self._freep is None:
            return 0
        total = 0
        p = self._headers[_BASE].ptr
        while p != _BASE:
            total += self._headers[p].size
            p = self._headers[p].ptr
        return total