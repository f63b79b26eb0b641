# tinyuser

A set of small, dependency-free tools and libraries for working with a
minimal teaching operating system:

- command-line utilities in the classic Unix style (`cat`, `echo`, `grep`,
  `wc`, `ls`, `ln`, `mkdir`, `rm`, `kill`);
- a builder for the system's on-disk file-system image (`tinyuser.mkfs`);
- a model of the Sv39 three-level page table and the user-memory copy
  routines (`tinyuser.vm`);
- the legacy virtio block-device records and register numbers, packed and
  unpacked as bytes (`tinyuser.virtio`);
- a parser for the system's tiny shell language (`tinyuser.sh`);
- a first-fit heap allocator (`tinyuser.umalloc`), a minimal `printf`
  (`tinyuser.fmt`), string helpers (`tinyuser.ulib`), file-status records
  (`tinyuser.filestat`), and two small deterministic generators,
  `ParkMiller` and `DigitRandom`, with a `do_work` busy loop
  (`tinyuser.rand`).

Python 3.10 or later is required. There are no runtime dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Commands

| Command           | What it does                                                              |
|-------------------|---------------------------------------------------------------------------|
| `tinyuser-cat`    | Copy files (or standard input) to standard output                         |
| `tinyuser-echo`   | Print its arguments separated by spaces                                   |
| `tinyuser-grep`   | Print lines matching a pattern that knows only `^ . * $`                  |
| `tinyuser-wc`     | Print line, word and byte counts followed by the file name               |
| `tinyuser-ls`     | List a file, or `.`, `..` and the sorted entries of a directory, with type, inode and size |
| `tinyuser-ln`     | Make a hard link: `tinyuser-ln old new`                                   |
| `tinyuser-mkdir`  | Create directories, stopping at the first failure                         |
| `tinyuser-rm`     | Remove files and empty directories, stopping at the first failure         |
| `tinyuser-kill`   | Send a kill signal to the given process ids                               |
| `tinyuser-mkfs`   | Build a file-system image: `tinyuser-mkfs fs.img file...`                 |

Examples:

```
tinyuser-echo hello world
tinyuser-grep '^ab*c$' notes.txt
tinyuser-wc notes.txt
tinyuser-mkfs fs.img README user/_cat user/_echo
```

`tinyuser-mkfs` writes a boot block, a superblock, the log, the inode
blocks, the free-block bitmap and the data blocks. Each file named on the
command line is copied into the root directory; a leading `user/` and a
leading `_` are dropped from the name. The layout can be changed from
Python through `Geometry` and `build_image`.

## Library use

```python
import io

from tinyuser.grep import match
from tinyuser.fmt import format
from tinyuser.sh import parse
from tinyuser.umalloc import Heap
from tinyuser.wc import count

match("^a.c$", "abc")                 # True
format("%d items at %p", 3, 0x1000)   # "3 items at 0x0000000000001000"

cmd = parse("cat < in | grep x > out ; echo done &")

heap = Heap(limit=1 << 20)
addr = heap.malloc(100)
heap.free(addr)

count(io.BytesIO(b"one two\nthree\n"))   # Counts(lines=2, words=3, chars=14)
```

The page-table model works on a simulated physical memory:

```python
from tinyuser.vm import PageTable, PhysicalMemory

memory = PhysicalMemory(npages=64, base=0x80000000)
table = PageTable.create(memory)
size = table.grow(0, 8192)
table.copy_out(100, b"hello\0")
table.copy_in_str(100, 64)            # b"hello"
table.free(size)
```

Failures are reported as exceptions: `VmPanic`, `OutOfMemory` and
`BadAddress` from `tinyuser.vm`, `MkfsError` from `tinyuser.mkfs` and
`ShellSyntaxError` from `tinyuser.sh`.

## What the package does not do

- `tinyuser.sh` only tokenizes and parses command lines into a tree of
  `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`; it does not run
  them, and there is no interactive shell command.
- There is no kernel, process scheduler, disk driver or emulator: the page
  tables, physical memory and virtio records are data models only, and the
  image built by `tinyuser-mkfs` cannot be mounted or read back by this
  package beyond its `read_block` and `read_inode` helpers.