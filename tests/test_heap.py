import pytest

from skylight.heap import HEADER_SIZE, PAGE_SIZE, Heap, HeapError

BASE = 0x10000000


@pytest.fixture
def heap():
    return Heap(BASE, 4)


def test_first_allocation_follows_header(heap):
    assert heap.malloc(1) == BASE + HEADER_SIZE


def test_sizes_round_to_sixteen(heap):
    heap.malloc(1)
    first = next(heap.segments())
    assert first.length == 0x10
    assert first.free is False


def test_split_places_next_segment_after_block(heap):
    heap.malloc(100)
    segs = list(heap.segments())
    assert segs[1].address == segs[0].address + segs[0].length + HEADER_SIZE
    assert segs[1].free is True


def test_zero_size_returns_none(heap):
    assert heap.malloc(0) is None


def test_negative_size_raises(heap):
    with pytest.raises(ValueError):
        heap.malloc(-1)


def test_freed_block_is_reused(heap):
    a = heap.malloc(32)
    heap.malloc(32)
    heap.free(a)
    assert heap.malloc(32) == a


def test_free_merges_neighbours(heap):
    a = heap.malloc(32)
    b = heap.malloc(32)
    heap.free(b)
    heap.free(a)
    segs = list(heap.segments())
    assert len(segs) == 1
    assert segs[0].free is True


def test_free_invalid_pointer(heap):
    with pytest.raises(HeapError):
        heap.free(BASE + 12345)


def test_double_free(heap):
    a = heap.malloc(16)
    heap.free(a)
    with pytest.raises(HeapError):
        heap.free(a)


def test_heap_grows_when_full():
    heap = Heap(BASE, 1)
    addr = heap.malloc(2 * PAGE_SIZE)
    assert heap.end > BASE + PAGE_SIZE
    seg = next(s for s in heap.segments() if s.address == addr - HEADER_SIZE)
    assert seg.length >= 2 * PAGE_SIZE
    assert seg.free is False


def test_calloc_zeroes_memory(heap):
    a = heap.malloc(64)
    heap.write(a, b"\xff" * 64)
    heap.free(a)
    c = heap.calloc(4, 16)
    assert c == a
    assert heap.read(c, 64) == bytes(64)


def test_realloc_keeps_contents(heap):
    a = heap.malloc(16)
    heap.write(a, b"hello")
    b = heap.realloc(a, 64)
    assert heap.read(b, 5) == b"hello"
    with pytest.raises(HeapError):
        heap.free(a)


def test_realloc_none_allocates(heap):
    assert heap.realloc(None, 16) == BASE + HEADER_SIZE


def test_access_outside_heap(heap):
    with pytest.raises(HeapError):
        heap.read(BASE - 1, 4)
    with pytest.raises(HeapError):
        heap.write(heap.end - 2, b"abcd")


def test_invalid_page_count():
    with pytest.raises(ValueError):
        Heap(BASE, 0)