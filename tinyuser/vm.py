"""Simulated Sv39 three-level page tables over a pool of physical pages."""

from __future__ import annotations

import enum
import struct
from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

PGSIZE = 4096
PGSHIFT = 12
PTES_PER_PAGE = 512
# One bit less than Sv39 allows, so addresses never need sign extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)
KERNBASE = 0x80000000

_MASK64 = 0xFFFFFFFFFFFFFFFF
_PTE_SIZE = 8


class VmPanic(RuntimeError):
    """An invariant of the page-table code was violated."""


class OutOfMemory(MemoryError):
    """No free physical page was available."""


class BadAddress(ValueError):
    """A user virtual address was not mapped or not accessible."""


class PteFlag(enum.IntFlag):
    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4


def pg_round_up(a: int) -> int:
    """Round ``a`` up to a page boundary."""
    return (a + PGSIZE - 1) & ~(PGSIZE - 1) & _MASK64


def pg_round_down(a: int) -> int:
    """Round ``a`` down to a page boundary."""
    return a & ~(PGSIZE - 1) & _MASK64


def px(level: int, va: int) -> int:
    """The 9-bit page-table index of ``va`` at ``level`` (2, 1 or 0)."""
    return (va >> (PGSHIFT + 9 * level)) & 0x1FF


def pte_to_pa(pte: int) -> int:
    return (pte >> 10) << 12


def pa_to_pte(pa: int) -> int:
    return (pa >> 12) << 10


def pte_flags(pte: int) -> int:
    return pte & 0x3FF


class PhysicalMemory:
    """A contiguous range of physical pages with a page allocator."""

    def __init__(self, npages: int, base: int = KERNBASE) -> None:
        if npages < 0:
            raise ValueError("npages must not be negative")
        if base % PGSIZE:
            raise ValueError("base must be page aligned")
        self.base = base
        self.npages = npages
        self._data = bytearray(npages * PGSIZE)
        self._free = [base + i * PGSIZE for i in range(npages)]
        self._free_set = set(self._free)

    def _offset(self, pa: int, n: int) -> int:
        off = pa - self.base
        if off < 0 or n < 0 or off + n > len(self._data):
            raise VmPanic(f"physical address out of range: {pa:#x}")
        return off

    def alloc(self) -> int:
        """Take one zeroed page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        off = self._offset(pa, PGSIZE)
        self._data[off:off + PGSIZE] = bytes(PGSIZE)
        return pa

    def free(self, pa: int) -> None:
        """Return a page obtained from :meth:`alloc`."""
        if pa % PGSIZE or not self.base <= pa < self.base + len(self._data):
            raise VmPanic("kfree")
        if pa in self._free_set:
            raise VmPanic("kfree: double free")
        self._free.append(pa)
        self._free_set.add(pa)

    def read(self, pa: int, n: int) -> bytes:
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa: int, data: BytesLike) -> None:
        data = bytes(data)
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data

    def read_pte(self, pa: int, index: int) -> int:
        """Read the 64-bit entry ``index`` of the table at ``pa``."""
        if not 0 <= index < PTES_PER_PAGE:
            raise IndexError("page-table index out of range")
        return int.from_bytes(self.read(pa + _PTE_SIZE * index, _PTE_SIZE), "little")

    def write_pte(self, pa: int, index: int, value: int) -> None:
        """Write the 64-bit entry ``index`` of the table at ``pa``."""
        if not 0 <= index < PTES_PER_PAGE:
            raise IndexError("page-table index out of range")
        self.write(pa + _PTE_SIZE * index, (value & _MASK64).to_bytes(_PTE_SIZE, "little"))

    def free_pages(self) -> int:
        """Number of pages available for allocation."""
        return len(self._free)


_USER_RWX = PteFlag.W | PteFlag.R | PteFlag.X | PteFlag.U


class PageTable:
    """A three-level page table whose root page lives in ``memory``."""

    def __init__(self, memory: PhysicalMemory, root: int) -> None:
        self.memory = memory
        self.root = root

    @classmethod
    def create(cls, memory: PhysicalMemory) -> "PageTable":
        """Allocate an empty page table."""
        return cls(memory, memory.alloc())

    def _get(self, pte_addr: int) -> int:
        return self.memory.read_pte(pte_addr, 0)

    def _set(self, pte_addr: int, value: int) -> None:
        self.memory.write_pte(pte_addr, 0, value)

    def walk(self, va: int, alloc: bool = False) -> Optional[int]:
        """Return the physical address of the leaf PTE for ``va``.

        Missing intermediate tables are created when ``alloc`` is true;
        otherwise None is returned for them.
        """
        if va >= MAXVA:
            raise VmPanic("walk")
        table = self.root
        for level in (2, 1):
            pte_addr = table + _PTE_SIZE * px(level, va)
            pte = self._get(pte_addr)
            if pte & PteFlag.V:
                table = pte_to_pa(pte)
            else:
                if not alloc:
                    return None
                table = self.memory.alloc()
                self._set(pte_addr, pa_to_pte(table) | PteFlag.V)
        return table + _PTE_SIZE * px(0, va)

    def walkaddr(self, va: int) -> Optional[int]:
        """Physical page address of the user page holding ``va``, or None."""
        if va >= MAXVA:
            return None
        pte_addr = self.walk(va)
        if pte_addr is None:
            return None
        pte = self._get(pte_addr)
        if not pte & PteFlag.V or not pte & PteFlag.U:
            return None
        return pte_to_pa(pte)

    def map_pages(self, va: int, size: int, pa: int, perm: int) -> None:
        """Map the pages covering ``[va, va+size)`` to physical pages from ``pa``."""
        if size == 0:
            raise VmPanic("mappages: size")
        a = pg_round_down(va)
        last = pg_round_down(va + size - 1)
        while True:
            pte_addr = self.walk(a, alloc=True)
            if self._get(pte_addr) & PteFlag.V:
                raise VmPanic("mappages: remap")
            self._set(pte_addr, pa_to_pte(pa) | perm | PteFlag.V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va: int, npages: int, do_free: bool = False) -> None:
        """Remove ``npages`` existing mappings from the aligned ``va``."""
        if va % PGSIZE:
            raise VmPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            pte_addr = self.walk(a)
            if pte_addr is None:
                raise VmPanic("uvmunmap: walk")
            pte = self._get(pte_addr)
            if not pte & PteFlag.V:
                raise VmPanic("uvmunmap: not mapped")
            if pte_flags(pte) == PteFlag.V:
                raise VmPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.free(pte_to_pa(pte))
            self._set(pte_addr, 0)

    def init_code(self, src: BytesLike) -> None:
        """Load ``src`` (less than a page) at virtual address 0."""
        src = bytes(src)
        if len(src) >= PGSIZE:
            raise VmPanic("inituvm: more than a page")
        mem = self.memory.alloc()
        self.map_pages(0, PGSIZE, mem, _USER_RWX)
        self.memory.write(mem, src)

    def grow(self, oldsz: int, newsz: int) -> int:
        """Allocate zeroed user pages from ``oldsz`` up to ``newsz``.

        On exhaustion the pages added so far are released and
        :class:`OutOfMemory` is raised.
        """
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.alloc()
            except OutOfMemory:
                self.shrink(a, oldsz)
                raise
            try:
                self.map_pages(a, PGSIZE, mem, _USER_RWX)
            except OutOfMemory:
                self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz: int, newsz: int) -> int:
        """Release user pages to bring the size from ``oldsz`` to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _free_table(self, table: int) -> None:
        page = self.memory.read(table, PGSIZE)
        for index, (pte,) in enumerate(struct.iter_unpack("<Q", page)):
            if pte & PteFlag.V and not pte & (PteFlag.R | PteFlag.W | PteFlag.X):
                self._free_table(pte_to_pa(pte))
                self.memory.write_pte(table, index, 0)
            elif pte & PteFlag.V:
                raise VmPanic("freewalk: leaf")
        self.memory.free(table)

    def free_walk(self) -> None:
        """Free every page-table page; leaf mappings must already be gone."""
        self._free_table(self.root)

    def free(self, sz: int) -> None:
        """Free ``sz`` bytes of user memory, then the page-table pages."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self.free_walk()

    def copy_to(self, new: "PageTable", sz: int) -> None:
        """Copy the first ``sz`` bytes of mappings and memory into ``new``."""
        for i in range(0, sz, PGSIZE):
            pte_addr = self.walk(i)
            if pte_addr is None:
                raise VmPanic("uvmcopy: pte should exist")
            pte = self._get(pte_addr)
            if not pte & PteFlag.V:
                raise VmPanic("uvmcopy: page not present")
            pa = pte_to_pa(pte)
            flags = pte_flags(pte)
            try:
                mem = self.memory.alloc()
                self.memory.write(mem, self.memory.read(pa, PGSIZE))
                try:
                    new.map_pages(i, PGSIZE, mem, flags)
                except OutOfMemory:
                    self.memory.free(mem)
                    raise
            except OutOfMemory:
                new.unmap(0, i // PGSIZE, True)
                raise

    def clear_user(self, va: int) -> None:
        """Make the page at ``va`` inaccessible to user mode."""
        pte_addr = self.walk(va)
        if pte_addr is None:
            raise VmPanic("uvmclear")
        self._set(pte_addr, self._get(pte_addr) & ~PteFlag.U)

    def _user_page(self, va: int) -> tuple:
        va0 = pg_round_down(va)
        pa0 = self.walkaddr(va0)
        if pa0 is None:
            raise BadAddress(f"user address not mapped: {va:#x}")
        return va0, pa0

    def copy_out(self, dstva: int, data: BytesLike) -> None:
        """Copy ``data`` to user virtual address ``dstva``."""
        view = memoryview(bytes(data))
        while view:
            va0, pa0 = self._user_page(dstva)
            n = min(PGSIZE - (dstva - va0), len(view))
            self.memory.write(pa0 + (dstva - va0), view[:n])
            view = view[n:]
            dstva = va0 + PGSIZE

    def copy_in(self, srcva: int, n: int) -> bytes:
        """Copy ``n`` bytes from user virtual address ``srcva``."""
        out = bytearray()
        while n > 0:
            va0, pa0 = self._user_page(srcva)
            chunk = min(PGSIZE - (srcva - va0), n)
            out += self.memory.read(pa0 + (srcva - va0), chunk)
            n -= chunk
            srcva = va0 + PGSIZE
        return bytes(out)

    def copy_in_str(self, srcva: int, max_len: int) -> bytes:
        """Copy a NUL-terminated string of at most ``max_len`` bytes, NUL included.

        The returned bytes do not contain the terminator.
        """
        out = bytearray()
        while max_len > 0:
            va0, pa0 = self._user_page(srcva)
            n = min(PGSIZE - (srcva - va0), max_len)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            nul = chunk.find(0)
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            max_len -= n
            srcva = va0 + PGSIZE
        raise BadAddress("string not terminated within the limit")