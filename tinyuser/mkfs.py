"""Build a file-system image holding a root directory and a set of files."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, List, Optional, Sequence, Union

from tinyuser.filestat import FileType

BytesLike = Union[bytes, bytearray, memoryview]

ROOTINO = 1
_DEFAULT_NDIRECT = 12
_DEFAULT_DIRSIZ = 14
_INODE_HEAD = struct.Struct("<hhhhI")
_SUPERBLOCK = struct.Struct("<8I")


class MkfsError(Exception):
    """The image could not be built as requested."""


@dataclass(frozen=True)
class Geometry:
    """Sizes that fix the on-disk layout.

    Disk layout: boot block, superblock, log, inode blocks, free bitmap,
    data blocks. One file-system block is one disk sector.
    """

    block_size: int = 1024
    size: int = 2000
    ninodes: int = 200
    nlog: int = 30
    ndirect: int = _DEFAULT_NDIRECT
    dirsiz: int = _DEFAULT_DIRSIZ
    magic: int = 0x10203040

    def __post_init__(self) -> None:
        for name in ("block_size", "size", "ninodes", "ndirect", "dirsiz"):
            if getattr(self, name) <= 0:
                raise MkfsError(f"{name} must be positive")
        if self.nlog < 0:
            raise MkfsError("nlog must not be negative")
        if self.block_size % 4:
            raise MkfsError("block size must be a multiple of 4")
        if self.block_size % self.inode_size:
            raise MkfsError("block size must be a multiple of the inode size")
        if self.block_size % self.dirent_size:
            raise MkfsError("block size must be a multiple of the directory entry size")

    @property
    def inode_size(self) -> int:
        return _INODE_HEAD.size + 4 * (self.ndirect + 1)

    @property
    def dirent_size(self) -> int:
        return 2 + self.dirsiz

    @property
    def inodes_per_block(self) -> int:
        return self.block_size // self.inode_size

    @property
    def nindirect(self) -> int:
        return self.block_size // 4

    @property
    def maxfile(self) -> int:
        return self.ndirect + self.nindirect

    @property
    def nbitmap(self) -> int:
        return self.size // (self.block_size * 8) + 1

    @property
    def ninodeblocks(self) -> int:
        return self.ninodes // self.inodes_per_block + 1

    @property
    def nmeta(self) -> int:
        return 2 + self.nlog + self.ninodeblocks + self.nbitmap

    @property
    def nblocks(self) -> int:
        return self.size - self.nmeta

    @property
    def logstart(self) -> int:
        return 2

    @property
    def inodestart(self) -> int:
        return 2 + self.nlog

    @property
    def bmapstart(self) -> int:
        return 2 + self.nlog + self.ninodeblocks

    def inode_block(self, inum: int) -> int:
        """Block holding inode ``inum``."""
        return inum // self.inodes_per_block + self.inodestart

    def superblock(self) -> "Superblock":
        return Superblock(
            magic=self.magic,
            size=self.size,
            nblocks=self.nblocks,
            ninodes=self.ninodes,
            nlog=self.nlog,
            logstart=self.logstart,
            inodestart=self.inodestart,
            bmapstart=self.bmapstart,
        )


@dataclass
class Superblock:
    """The superblock: layout of the file system, all little-endian 32-bit."""

    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    SIZE = _SUPERBLOCK.size

    def pack(self) -> bytes:
        try:
            return _SUPERBLOCK.pack(
                self.magic, self.size, self.nblocks, self.ninodes,
                self.nlog, self.logstart, self.inodestart, self.bmapstart,
            )
        except struct.error as exc:
            raise MkfsError(str(exc)) from None

    @classmethod
    def unpack(cls, data: BytesLike) -> "Superblock":
        data = bytes(data)
        if len(data) < _SUPERBLOCK.size:
            raise MkfsError("superblock data too short")
        return cls(*_SUPERBLOCK.unpack_from(data))


@dataclass
class DiskInode:
    """An on-disk inode: type, device numbers, links, size and block addresses.

    ``addrs`` holds the direct block numbers followed by the indirect one.
    """

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: List[int] = field(default_factory=lambda: [0] * (_DEFAULT_NDIRECT + 1))

    def pack(self) -> bytes:
        try:
            head = _INODE_HEAD.pack(self.type, self.major, self.minor, self.nlink, self.size)
            return head + struct.pack(f"<{len(self.addrs)}I", *self.addrs)
        except struct.error as exc:
            raise MkfsError(str(exc)) from None

    @classmethod
    def unpack(cls, data: BytesLike) -> "DiskInode":
        data = bytes(data)
        body = len(data) - _INODE_HEAD.size
        if body < 4 or body % 4:
            raise MkfsError(f"bad inode record length {len(data)}")
        itype, major, minor, nlink, size = _INODE_HEAD.unpack_from(data)
        addrs = list(struct.unpack_from(f"<{body // 4}I", data, _INODE_HEAD.size))
        return cls(type=itype, major=major, minor=minor, nlink=nlink, size=size, addrs=addrs)


@dataclass
class Dirent:
    """A directory entry: inode number and a NUL-padded name of ``dirsiz`` bytes."""

    inum: int = 0
    name: bytes = b""
    dirsiz: int = _DEFAULT_DIRSIZ

    def pack(self) -> bytes:
        name = self.name.encode() if isinstance(self.name, str) else bytes(self.name)
        name = name.split(b"\0", 1)[0][: self.dirsiz]
        try:
            return struct.pack("<H", self.inum) + name.ljust(self.dirsiz, b"\0")
        except struct.error as exc:
            raise MkfsError(str(exc)) from None

    @classmethod
    def unpack(cls, data: BytesLike) -> "Dirent":
        data = bytes(data)
        if len(data) < 3:
            raise MkfsError("directory entry too short")
        (inum,) = struct.unpack_from("<H", data)
        raw = data[2:]
        return cls(inum=inum, name=raw.split(b"\0", 1)[0], dirsiz=len(raw))


class ImageBuilder:
    """Writes a fresh file system into ``image``: a seekable binary file.

    On construction every block is zeroed, the superblock is written and the
    root directory is created with its "." and ".." entries.
    """

    def __init__(self, image: BinaryIO, geometry: Optional[Geometry] = None) -> None:
        self.image = image
        self.geometry = geometry if geometry is not None else Geometry()
        self.superblock = self.geometry.superblock()
        self.freeinode = 1
        self.freeblock = self.geometry.nmeta
        bsize = self.geometry.block_size

        zeroes = bytes(bsize)
        for blockno in range(self.geometry.size):
            self.write_block(blockno, zeroes)
        self.write_block(1, self.superblock.pack().ljust(bsize, b"\0"))

        self.root_inode = self.ialloc(FileType.DIR)
        if self.root_inode != ROOTINO:
            raise MkfsError("root inode was not the first inode")
        for name in (b".", b".."):
            self.iappend(self.root_inode, self._dirent(self.root_inode, name))

    def _dirent(self, inum: int, name: bytes) -> bytes:
        return Dirent(inum=inum, name=name, dirsiz=self.geometry.dirsiz).pack()

    def read_block(self, blockno: int) -> bytes:
        bsize = self.geometry.block_size
        self.image.seek(blockno * bsize)
        data = self.image.read(bsize)
        if data is None or len(data) != bsize:
            raise MkfsError(f"short read of block {blockno}")
        return bytes(data)

    def write_block(self, blockno: int, data: BytesLike) -> None:
        bsize = self.geometry.block_size
        data = bytes(data)
        if len(data) != bsize:
            raise MkfsError(f"block data must be {bsize} bytes, got {len(data)}")
        self.image.seek(blockno * bsize)
        written = self.image.write(data)
        if written is not None and written != bsize:
            raise MkfsError(f"short write of block {blockno}")

    def _inode_slot(self, inum: int) -> tuple:
        geometry = self.geometry
        blockno = geometry.inode_block(inum)
        start = (inum % geometry.inodes_per_block) * geometry.inode_size
        return blockno, start, start + geometry.inode_size

    def read_inode(self, inum: int) -> DiskInode:
        blockno, start, end = self._inode_slot(inum)
        return DiskInode.unpack(self.read_block(blockno)[start:end])

    def write_inode(self, inum: int, inode: DiskInode) -> None:
        blockno, start, end = self._inode_slot(inum)
        record = inode.pack()
        if len(record) != end - start:
            raise MkfsError("inode record does not match the geometry")
        block = bytearray(self.read_block(blockno))
        block[start:end] = record
        self.write_block(blockno, block)

    def ialloc(self, itype: int) -> int:
        """Allocate the next inode number with one link and size zero."""
        inum = self.freeinode
        self.freeinode += 1
        inode = DiskInode(
            type=int(itype), nlink=1, size=0, addrs=[0] * (self.geometry.ndirect + 1)
        )
        self.write_inode(inum, inode)
        return inum

    def _take_block(self) -> int:
        blockno = self.freeblock
        self.freeblock += 1
        return blockno

    def iappend(self, inum: int, data: BytesLike) -> None:
        """Append ``data`` to the contents of inode ``inum``."""
        geometry = self.geometry
        bsize, ndirect = geometry.block_size, geometry.ndirect
        indirect_format = struct.Struct(f"<{geometry.nindirect}I")
        view = memoryview(bytes(data))
        inode = self.read_inode(inum)
        off = inode.size
        while view:
            fbn = off // bsize
            if fbn >= geometry.maxfile:
                raise MkfsError(f"inode {inum} exceeds the maximum file size")
            if fbn < ndirect:
                if inode.addrs[fbn] == 0:
                    inode.addrs[fbn] = self._take_block()
                x = inode.addrs[fbn]
            else:
                if inode.addrs[ndirect] == 0:
                    inode.addrs[ndirect] = self._take_block()
                indirect = list(indirect_format.unpack(self.read_block(inode.addrs[ndirect])))
                if indirect[fbn - ndirect] == 0:
                    indirect[fbn - ndirect] = self._take_block()
                    self.write_block(inode.addrs[ndirect], indirect_format.pack(*indirect))
                x = indirect[fbn - ndirect]
            n1 = min(len(view), (fbn + 1) * bsize - off)
            block = bytearray(self.read_block(x))
            start = off - fbn * bsize
            block[start:start + n1] = view[:n1]
            self.write_block(x, block)
            view = view[n1:]
            off += n1
        inode.size = off
        self.write_inode(inum, inode)

    def add_file(self, path: str) -> int:
        """Copy the host file ``path`` into the root directory; return its inode.

        A leading "user/" is dropped from the name, as is a leading "_".
        """
        shortname = path[len("user/"):] if path.startswith("user/") else path
        if "/" in shortname:
            raise MkfsError(f"file name must not contain a directory: {path}")
        with open(path, "rb") as source:
            if shortname.startswith("_"):
                shortname = shortname[1:]
            inum = self.ialloc(FileType.FILE)
            self.iappend(self.root_inode, self._dirent(inum, shortname.encode()))
            for chunk in iter(lambda: source.read(self.geometry.block_size), b""):
                self.iappend(inum, chunk)
        return inum

    def balloc(self, used: int) -> None:
        """Mark the first ``used`` blocks as in use in the free bitmap."""
        bsize = self.geometry.block_size
        print(f"balloc: first {used} blocks have been allocated")
        if not 0 <= used < bsize * 8:
            raise MkfsError(f"too many blocks in use for one bitmap block: {used}")
        bitmap = bytearray(bsize)
        full, rest = divmod(used, 8)
        bitmap[:full] = b"\xff" * full
        if rest:
            bitmap[full] = (1 << rest) - 1
        print(f"balloc: write bitmap block at sector {self.superblock.bmapstart}")
        self.write_block(self.superblock.bmapstart, bitmap)

    def finish(self) -> None:
        """Round the root directory size up past its last block and write the bitmap."""
        bsize = self.geometry.block_size
        root = self.read_inode(self.root_inode)
        root.size = (root.size // bsize + 1) * bsize
        self.write_inode(self.root_inode, root)
        self.balloc(self.freeblock)


def build_image(
    image_path: str, files: Iterable[str], geometry: Optional[Geometry] = None
) -> int:
    """Create ``image_path`` holding ``files``; return the number of blocks in use."""
    geometry = geometry if geometry is not None else Geometry()
    with open(image_path, "w+b") as image:
        print(
            f"nmeta {geometry.nmeta} (boot, super, log blocks {geometry.nlog} "
            f"inode blocks {geometry.ninodeblocks}, bitmap blocks {geometry.nbitmap}) "
            f"blocks {geometry.nblocks} total {geometry.size}"
        )
        builder = ImageBuilder(image, geometry)
        for path in files:
            builder.add_file(path)
        builder.finish()
        return builder.freeblock


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry: mkfs fs.img files..."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: mkfs fs.img files...", file=sys.stderr)
        return 1
    try:
        build_image(args[0], args[1:])
    except OSError as exc:
        print(f"{exc.filename or args[0]}: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except MkfsError as exc:
        print(f"mkfs: {exc}", file=sys.stderr)
        return 1
    return 0