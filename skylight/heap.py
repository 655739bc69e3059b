"""A first-fit segment heap over a simulated, page-mapped address range."""

from dataclasses import dataclass
from typing import Iterator, List, Optional

PAGE_SIZE = 0x1000
HEADER_SIZE = 32
ALIGNMENT = 0x10
MIN_SPLIT = 0x10
MIN_REMAINDER = 0x20
DEFAULT_ADDRESS = 0x7F0000000000
DEFAULT_PAGES = 256


class HeapError(Exception):
    """Raised for invalid pointers and out-of-heap memory access."""


@dataclass(frozen=True)
class Segment:
    """A snapshot of one heap segment: header address, payload length, state."""

    address: int
    length: int
    free: bool


@dataclass
class _Seg:
    address: int
    length: int
    free: bool


class Heap:
    """Allocates from a list of segments, each preceded by a header."""

    def __init__(self, address: int = DEFAULT_ADDRESS, pages: int = DEFAULT_PAGES) -> None:
        if pages <= 0:
            raise ValueError("a heap needs at least one page")
        length = pages * PAGE_SIZE
        self.start = address
        self.end = address + length
        self._memory = bytearray(length)
        self._segs: List[_Seg] = [_Seg(address, length - HEADER_SIZE, True)]

    def segments(self) -> Iterator[Segment]:
        """Yield the segments in address order."""
        for seg in self._segs:
            yield Segment(seg.address, seg.length, seg.free)

    def _split(self, index: int, split_length: int) -> bool:
        seg = self._segs[index]
        if split_length < MIN_SPLIT:
            return False
        remainder = seg.length - split_length - HEADER_SIZE
        if remainder < MIN_REMAINDER:
            return False
        new = _Seg(seg.address + split_length + HEADER_SIZE, remainder - HEADER_SIZE, True)
        self._segs.insert(index + 1, new)
        seg.length = split_length
        return True

    def _combine_forward(self, index: int) -> None:
        if index + 1 >= len(self._segs):
            return
        nxt = self._segs[index + 1]
        if not nxt.free:
            return
        self._segs[index].length += nxt.length + HEADER_SIZE
        del self._segs[index + 1]

    def _combine_backward(self, index: int) -> None:
        if index > 0 and self._segs[index - 1].free:
            self._combine_forward(index - 1)

    def _expand(self, length: int) -> None:
        if length % PAGE_SIZE:
            length += PAGE_SIZE - length % PAGE_SIZE
        self._segs.append(_Seg(self.end, length - HEADER_SIZE, True))
        self.end += length
        self._memory.extend(bytes(length))
        self._combine_backward(len(self._segs) - 1)

    def malloc(self, size: int) -> Optional[int]:
        """Allocate ``size`` bytes rounded up to 16; return the payload address.

        A zero size yields None; the heap grows by whole pages when needed.
        """
        if size < 0:
            raise ValueError("size must not be negative")
        if size % ALIGNMENT:
            size += ALIGNMENT - size % ALIGNMENT
        if size == 0:
            return None
        while True:
            for index, seg in enumerate(self._segs):
                if seg.free and seg.length >= size:
                    if seg.length > size:
                        self._split(index, size)
                    seg.free = False
                    return seg.address + HEADER_SIZE
            self._expand(size)

    def _index_of(self, address: int) -> int:
        header = address - HEADER_SIZE
        for index, seg in enumerate(self._segs):
            if seg.address == header and not seg.free:
                return index
        raise HeapError(f"not an allocated block: {address:#x}")

    def free(self, address: int) -> None:
        """Release a block and merge it with free neighbours."""
        index = self._index_of(address)
        self._segs[index].free = True
        self._combine_forward(index)
        self._combine_backward(index)

    def realloc(self, address: Optional[int], size: int) -> Optional[int]:
        """Move a block to a new allocation of ``size`` bytes, keeping its contents."""
        if address is None:
            return self.malloc(size)
        old_length = self._segs[self._index_of(address)].length
        new = self.malloc(size)
        if new is not None:
            self.write(new, self.read(address, min(old_length, size)))
        self.free(address)
        return new

    def calloc(self, elements: int, size: int) -> Optional[int]:
        """Allocate ``elements * size`` zeroed bytes."""
        total = elements * size
        address = self.malloc(total)
        if address is not None:
            self.write(address, bytes(total))
        return address

    def _offset(self, address: int, length: int) -> int:
        if address < self.start or address + length > self.end:
            raise HeapError(f"access outside the heap at {address:#x}")
        return address - self.start

    def read(self, address: int, length: int) -> bytes:
        offset = self._offset(address, length)
        return bytes(self._memory[offset:offset + length])

    def write(self, address: int, data: bytes) -> None:
        offset = self._offset(address, len(data))
        self._memory[offset:offset + len(data)] = data