"""String and line-input helpers used by the user programs."""

from __future__ import annotations

from itertools import zip_longest
from typing import IO, AnyStr, Union

BytesLike = Union[str, bytes, bytearray, memoryview]

_NEWLINES = ("\n", "\r", b"\n", b"\r")


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


def _c_string(value: BytesLike) -> bytes:
    """Return the bytes of ``value`` up to, not including, the first NUL."""
    return _to_bytes(value).split(b"\0", 1)[0]


def atoi(s: Union[str, bytes]) -> int:
    """Parse the leading run of decimal digits of ``s``.

    There is no sign and no whitespace skipping: parsing stops at the first
    character that is not ``0``-``9``, and an empty run gives 0.
    """
    if not isinstance(s, str):
        s = bytes(s).decode("latin-1")
    digits = []
    for ch in s:
        if not "0" <= ch <= "9":
            break
        digits.append(ch)
    return int("".join(digits)) if digits else 0


def strcmp(p: BytesLike, q: BytesLike) -> int:
    """Compare two NUL-terminated strings as unsigned bytes.

    Returns the difference of the first differing bytes, or 0 if equal.
    """
    for x, y in zip_longest(_c_string(p), _c_string(q), fillvalue=0):
        if x == 0 or x != y:
            return x - y
    return 0


def memcmp(a: BytesLike, b: BytesLike, n: int) -> int:
    """Compare the first ``n`` bytes of ``a`` and ``b`` as unsigned bytes."""
    left, right = _to_bytes(a), _to_bytes(b)
    if n < 0:
        raise ValueError("n must not be negative")
    if n > len(left) or n > len(right):
        raise ValueError("n exceeds the length of an operand")
    for x, y in zip(left[:n], right[:n]):
        if x != y:
            return x - y
    return 0


def read_line(stream: IO[AnyStr], max_len: int) -> AnyStr:
    """Read at most ``max_len - 1`` characters from ``stream``, one at a time.

    Reading stops after a newline or carriage return (which is kept) or at
    end of input. The result has the type the stream yields.
    """
    line = stream.read(0)
    count = 0
    while count + 1 < max_len:
        ch = stream.read(1)
        if not ch:
            break
        line += ch
        count += 1
        if ch in _NEWLINES:
            break
    return line