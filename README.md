# skylight

skylight models the parts of a small x86-64 hobby operating system that make
sense outside the machine. It needs only the standard library.

## Modules

- **`skylight.conv`**: `itoa` and `utoa` convert integers to text in bases 2 to 16.
  They use lowercase digits and add no prefix. Values wrap to 64 bits: `itoa` reads
  them as signed and `utoa` as unsigned. A base outside 2..16 raises `ValueError`.
- **`skylight.cstring`**: `strcmp`, `strncmp`, `memcmp` and `strlen` work on `str`,
  `bytes` or `bytearray` with NUL-terminated semantics. They compare signed chars.
  `strcmp` keeps the kernel's quirks: it stops as soon as the second string ends, and
  an empty first string compares equal to anything. `memcmp` raises `ValueError` when
  a buffer is shorter than `n`.
- **`skylight.fmt`**: `sprintf` returns formatted text. `printf` writes it to standard
  output and returns the character count. Both follow the kernel's printf dialect:
  - the flags `- + # 0` and space;
  - width and precision, either as digits or `*`;
  - the length modifiers `hh h l ll j z t L`;
  - the conversions `d i u o x X p c s n e E f F g G`.

  `%n` takes a callable that receives the count. `int_str` is the integer formatter
  underneath. In it, base 16 gives uppercase digits and base 17 gives lowercase hex.
- **`skylight.text`**: `TextRenderer` draws 8×8 glyphs from the built-in font into an
  in-memory framebuffer of `0xRRGGBB` pixels. It provides:
  - `place_at`, `clean_at`, `clear` and `stop` for drawing;
  - `pixel` and `framebuffer` for reading pixels back;
  - `pos_convert` for cell positions;
  - `cols` and `rows` for the screen size in cells.

  `Color` lists the 16 colour codes. `color_combo`, `color_fg` and `color_bg` pack and
  unpack a cell colour. `translate_color` maps a code to its RGB value.
- **`skylight.heap`**: `Heap` is a first-fit allocator over a simulated address range.
  It splits and coalesces segments, and grows by whole pages when it runs out of room.
  It provides `malloc`, `free`, `realloc` and `calloc`, plus `read` and `write` for the
  memory itself. `segments()` yields `Segment` snapshots for inspection. A bad pointer
  or an access outside the heap raises `HeapError`.
- **`skylight.descriptors`**: `Gdt`, `Idt` and `TssTable` build the descriptor tables.
  `GdtDescriptor`, `IdtDescriptor` and `Tss` each `pack()` to their binary layout. Each
  table's `dump()` gives the listing the kernel prints on its serial console.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from skylight.conv import itoa, utoa
from skylight.fmt import sprintf

itoa(-255, 16)                   # '-ff'
utoa(5, 2)                       # '101'
sprintf("%5d|%-4x|", 42, 255)    # '   42|ff  |'
```

```python
from skylight.text import TextRenderer, Color, color_combo

renderer = TextRenderer(640, 480)
renderer.place_at(2, 1, "A", color_combo(Color.WHITE, Color.BLUE))
renderer.pixel(16, 8)            # 32-bit RGB value at that pixel
```

```python
from skylight.heap import Heap

heap = Heap()
block = heap.malloc(40)          # rounded up to 48 bytes
heap.write(block, b"hello")
block = heap.realloc(block, 100)
heap.read(block, 5)              # b'hello'
heap.free(block)
```

```python
from skylight.descriptors import Gdt, Idt, TssTable

gdt = Gdt()
gdt.assemble()

idt = Idt([0x1000 + 16 * v for v in range(256)])
idt.assemble()
vector = idt.allocate_vector()   # 32, the first vector after the CPU exceptions

tss = TssTable(gdt, lambda pages: 0x200000)
tss.install(0)
print(gdt.dump())
```

## What it does not do

skylight is a library with no command of its own. It does not include:

- keyboard decoding;
- a menu or interactive front end;
- a boot memory map;
- exception reports.

The text renderer draws only into memory and never onto a real display. The
descriptor tables are plain data and are never loaded into a processor.