"""Comparison and length routines with NUL-terminated string semantics."""

from typing import List, Union

StrLike = Union[str, bytes, bytearray]


def _raw(s: StrLike) -> bytes:
    if isinstance(s, str):
        return s.encode("utf-8")
    return bytes(s)


def _terminated(s: StrLike) -> bytes:
    return _raw(s).split(b"\0", 1)[0]


def _signed(data: bytes) -> List[int]:
    return [b - 256 if b >= 128 else b for b in data]


def strlen(s: StrLike) -> int:
    """Number of bytes before the first NUL."""
    return len(_terminated(s))


def strcmp(s1: StrLike, s2: StrLike) -> int:
    """Compare two NUL-terminated strings as signed chars.

    Stops as soon as ``s2`` runs out, returning the next char of ``s1``
    (zero when both end together). An empty ``s1`` compares equal to anything.
    """
    a = _signed(_terminated(s1))
    b = _signed(_terminated(s2))
    for i, c in enumerate(a):
        other = b[i] if i < len(b) else 0
        if c != other:
            return c - other
        if i + 1 >= len(b):
            return a[i + 1] if i + 1 < len(a) else 0
    return 0


def strncmp(s1: StrLike, s2: StrLike, n: int) -> int:
    """Compare the first ``n`` signed chars, reading bytes past the end as NUL."""
    a = _signed(_raw(s1))
    b = _signed(_raw(s2))
    for i in range(n):
        x = a[i] if i < len(a) else 0
        y = b[i] if i < len(b) else 0
        if x != y:
            return x - y
    return 0


def memcmp(s1: StrLike, s2: StrLike, n: int) -> int:
    """Compare the first ``n`` bytes as signed chars.

    Raises ValueError if either buffer is shorter than ``n``.
    """
    a = _raw(s1)
    b = _raw(s2)
    if len(a) < n or len(b) < n:
        raise ValueError(f"buffers shorter than {n} bytes")
    for x, y in zip(_signed(a[:n]), _signed(b[:n])):
        if x != y:
            return x - y
    return 0