"""Segment, interrupt and task-state descriptor tables for x86-64."""

import struct
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from skylight.fmt import sprintf

PAGE_SIZE = 0x1000

GDT_MAX_DESCRIPTORS = 0x2000
GDT_DESCRIPTOR_SIZE = 0x08

GDT_DESCRIPTOR_ACCESS = 0x01
GDT_DESCRIPTOR_READWRITE = 0x02
GDT_DESCRIPTOR_DC = 0x04
GDT_DESCRIPTOR_EXECUTABLE = 0x08
GDT_DESCRIPTOR_CODE_DATA = 0x10
GDT_DESCRIPTOR_DPL = 0x60
GDT_DESCRIPTOR_PRESENT = 0x80

GDT_GRANULARITY_OS = 0x10
GDT_GRANULARITY_X64 = 0x20
GDT_GRANULARITY_X32 = 0x40
GDT_GRANULARITY_4K = 0x80

GDT_BASIC_DESCRIPTOR = GDT_DESCRIPTOR_PRESENT | GDT_DESCRIPTOR_READWRITE | GDT_DESCRIPTOR_CODE_DATA
GDT_BASIC_GRANULARITY = GDT_GRANULARITY_X64 | GDT_GRANULARITY_4K

GDT_OFFSET_KERNEL_CODE = 0x01 * 0x08
GDT_OFFSET_KERNEL_DATA = 0x02 * 0x08
GDT_OFFSET_USER_DATA = 0x03 * 0x08
GDT_OFFSET_USER_CODE = 0x04 * 0x08

TSS_DESCRIPTOR_LIMIT = 0x70

IDT_MAX_DESCRIPTORS = 256
IDT_CPU_EXCEPTION_COUNT = 32
IDT_DESCRIPTOR_SIZE = 16

IDT_DESCRIPTOR_X16_INTERRUPT = 0x06
IDT_DESCRIPTOR_X16_TRAP = 0x07
IDT_DESCRIPTOR_X32_TASK = 0x05
IDT_DESCRIPTOR_X32_INTERRUPT = 0x0E
IDT_DESCRIPTOR_X32_TRAP = 0x0F
IDT_DESCRIPTOR_RING1 = 0x40
IDT_DESCRIPTOR_RING2 = 0x20
IDT_DESCRIPTOR_RING3 = 0x60
IDT_DESCRIPTOR_PRESENT = 0x80

IDT_DESCRIPTOR_EXCEPTION = IDT_DESCRIPTOR_X32_INTERRUPT | IDT_DESCRIPTOR_PRESENT
IDT_DESCRIPTOR_EXTERNAL = IDT_DESCRIPTOR_X32_INTERRUPT | IDT_DESCRIPTOR_PRESENT
IDT_DESCRIPTOR_CALL = IDT_DESCRIPTOR_X32_INTERRUPT | IDT_DESCRIPTOR_PRESENT | IDT_DESCRIPTOR_RING3

TSS_MAX_CPUS = 1
TSS_IST_EXCEPTION = 1
TSS_IST_ROUTINE = 2
TSS_IST_SLOTS = 7
IST_STACK_PAGES = 32

_GDT_LAYOUT = struct.Struct("<HHBBBB")
_GDT_TSS_LAYOUT = struct.Struct("<HHBBBBII")
_IDT_LAYOUT = struct.Struct("<HHBBHII")
_TSS_LAYOUT = struct.Struct("<I3QQ7QQHH")


@dataclass
class GdtDescriptor:
    """One 8-byte segment descriptor."""

    limit: int = 0
    base_low: int = 0
    base_mid: int = 0
    flags: int = 0
    granularity: int = 0
    base_high: int = 0

    def pack(self) -> bytes:
        return _GDT_LAYOUT.pack(
            self.limit, self.base_low, self.base_mid, self.flags, self.granularity, self.base_high
        )


class Gdt:
    """The global descriptor table, filled in order from slot zero."""

    def __init__(self) -> None:
        self.descriptors: List[GdtDescriptor] = []
        self.base_address = 0
        self.limit = 0
        self.base = 0
        self.code_selector: Optional[int] = None
        self.data_selector: Optional[int] = None

    def add_descriptor(self, base: int, limit: int, access: int, granularity: int) -> None:
        """Append a segment descriptor; raises OverflowError when the table is full."""
        if len(self.descriptors) >= GDT_MAX_DESCRIPTORS:
            raise OverflowError("the GDT is full")
        self.descriptors.append(
            GdtDescriptor(
                limit=limit & 0xFFFF,
                base_low=base & 0xFFFF,
                base_mid=(base >> 16) & 0xFF,
                flags=access & 0xFF,
                granularity=granularity & 0xFF,
                base_high=(base >> 24) & 0xFF,
            )
        )

    def install_tss(self, tss: int) -> int:
        """Add a 16-byte TSS descriptor over two slots and return its selector."""
        if len(self.descriptors) + 2 > GDT_MAX_DESCRIPTORS:
            raise OverflowError("the GDT has no room for a TSS descriptor")
        tss_type = GDT_DESCRIPTOR_ACCESS | GDT_DESCRIPTOR_EXECUTABLE | GDT_DESCRIPTOR_PRESENT
        raw = _GDT_TSS_LAYOUT.pack(
            TSS_DESCRIPTOR_LIMIT & 0xFFFF,
            tss & 0xFFFF,
            (tss >> 16) & 0xFF,
            tss_type,
            (TSS_DESCRIPTOR_LIMIT & 0xF0000) >> 16,
            (tss >> 24) & 0xFF,
            (tss >> 32) & 0xFFFFFFFF,
            0,
        )
        index = len(self.descriptors)
        for half in (raw[:8], raw[8:]):
            self.descriptors.append(GdtDescriptor(*_GDT_LAYOUT.unpack(half)))
        return index * GDT_DESCRIPTOR_SIZE

    def assemble(self) -> None:
        """Lay out the null, kernel and user segments and load them."""
        self.limit = GDT_DESCRIPTOR_SIZE * GDT_MAX_DESCRIPTORS - 1
        self.base = self.base_address

        self.add_descriptor(0, 0, 0, 0)
        self.add_descriptor(0, 0xFFFF, GDT_BASIC_DESCRIPTOR | GDT_DESCRIPTOR_EXECUTABLE, GDT_BASIC_GRANULARITY)
        self.add_descriptor(0, 0xFFFF, GDT_BASIC_DESCRIPTOR, GDT_BASIC_GRANULARITY)
        self.add_descriptor(0, 0xFFFF, GDT_BASIC_DESCRIPTOR | GDT_DESCRIPTOR_DPL, GDT_BASIC_GRANULARITY)
        self.add_descriptor(
            0,
            0xFFFF,
            GDT_BASIC_DESCRIPTOR | GDT_DESCRIPTOR_DPL | GDT_DESCRIPTOR_EXECUTABLE,
            GDT_BASIC_GRANULARITY,
        )
        self.add_descriptor(0, 0, 0, 0)

        self.code_selector = GDT_OFFSET_KERNEL_CODE
        self.data_selector = GDT_OFFSET_KERNEL_DATA

    def to_bytes(self) -> bytes:
        """The filled part of the table as it sits in memory."""
        return b"".join(d.pack() for d in self.descriptors)

    def dump(self) -> str:
        """Listing of the installed descriptors as printed on the serial console."""
        parts = ["\r\nGDT dump:\r\n"]
        for i, d in enumerate(self.descriptors):
            base = d.base_low | (d.base_mid << 16) | (d.base_high << 32)
            parts.append(
                sprintf(
                    "\t%s => lo: %x, hi: %x, access: %x, gran: %x\r\n",
                    "0" if i < 2 else "",
                    i * GDT_DESCRIPTOR_SIZE,
                    base,
                    d.limit,
                    d.flags,
                    d.granularity,
                )
            )
        return "".join(parts)


@dataclass
class IdtDescriptor:
    """One 16-byte interrupt gate."""

    base_low: int = 0
    cs: int = 0
    ist: int = 0
    attributes: int = 0
    base_mid: int = 0
    base_high: int = 0
    rsv0: int = 0

    @property
    def isr(self) -> int:
        return self.base_low | (self.base_mid << 16) | (self.base_high << 32)

    def pack(self) -> bytes:
        return _IDT_LAYOUT.pack(
            self.base_low, self.cs, self.ist, self.attributes, self.base_mid, self.base_high, self.rsv0
        )


def _check_vector(vector: int) -> None:
    if not 0 <= vector < IDT_MAX_DESCRIPTORS:
        raise ValueError(f"not an interrupt vector: {vector}")


class Idt:
    """The interrupt descriptor table with vector allocation."""

    def __init__(self, stubs: Sequence[int]) -> None:
        self.stubs = tuple(stubs)
        self.descriptors = [IdtDescriptor() for _ in range(IDT_MAX_DESCRIPTORS)]
        self.vectors = [False] * IDT_MAX_DESCRIPTORS
        self.handlers = [0] * IDT_MAX_DESCRIPTORS
        self.base_address = 0
        self.limit = 0
        self.base = 0

    def set_descriptor(self, vector: int, isr: int, flags: int, ist: int) -> None:
        _check_vector(vector)
        self.descriptors[vector] = IdtDescriptor(
            base_low=isr & 0xFFFF,
            cs=GDT_OFFSET_KERNEL_CODE,
            ist=ist & 0xFF,
            attributes=flags & 0xFF,
            base_mid=(isr >> 16) & 0xFFFF,
            base_high=(isr >> 32) & 0xFFFFFFFF,
            rsv0=0,
        )

    def assemble(self) -> None:
        """Install the CPU exception gates and load the table."""
        self.base = self.base_address
        self.limit = (IDT_DESCRIPTOR_SIZE * IDT_MAX_DESCRIPTORS - 1) & 0xFFFF
        for vector in range(IDT_CPU_EXCEPTION_COUNT):
            self.set_descriptor(vector, self.stubs[vector], IDT_DESCRIPTOR_EXCEPTION, TSS_IST_EXCEPTION)
            self.vectors[vector] = True

    def allocate_vector(self) -> int:
        """Reserve the lowest free vector; raises OverflowError if none is left."""
        for vector, used in enumerate(self.vectors):
            if not used:
                self.vectors[vector] = True
                return vector
        raise OverflowError("no free interrupt vectors")

    def free_vector(self, vector: int) -> None:
        self.set_descriptor(vector, 0, 0, 0)
        self.handlers[vector] = 0
        self.vectors[vector] = False

    def install_irq_handler(self, vector: int, handler: int) -> None:
        """Route ``vector`` through its stub to the routine at address ``handler``."""
        _check_vector(vector)
        self.handlers[vector] = handler
        self.set_descriptor(vector, self.stubs[vector], IDT_DESCRIPTOR_EXTERNAL, TSS_IST_ROUTINE)

    def dump(self) -> str:
        """Listing of the reserved vectors as printed on the serial console."""
        parts = ["\r\nIDT dump:\r\n"]
        for vector, used in enumerate(self.vectors):
            if not used:
                continue
            d = self.descriptors[vector]
            target = d.isr if vector < IDT_CPU_EXCEPTION_COUNT else self.handlers[vector]
            parts.append(
                sprintf(
                    "\t (%d) isr: %x, flags: %x, ist: %d, cs: %x\r\n",
                    vector,
                    target,
                    d.attributes,
                    d.ist,
                    d.cs,
                )
            )
        return "".join(parts)


@dataclass
class Tss:
    """A 64-bit task state segment."""

    rsv0: int = 0
    rsp: List[int] = field(default_factory=lambda: [0] * 3)
    rsv1: int = 0
    ist: List[int] = field(default_factory=lambda: [0] * TSS_IST_SLOTS)
    rsv2: int = 0
    rsv3: int = 0
    io_map: int = 0

    def pack(self) -> bytes:
        return _TSS_LAYOUT.pack(
            self.rsv0, *self.rsp, self.rsv1, *self.ist, self.rsv2, self.rsv3, self.io_map
        )


TSS_STRUCT_SIZE = _TSS_LAYOUT.size


class TssTable:
    """Per-CPU task state segments with their interrupt stacks."""

    def __init__(self, gdt: Gdt, allocate_pages: Callable[[int], int]) -> None:
        self.gdt = gdt
        self.allocate_pages = allocate_pages
        self.base_address = 0
        self.descriptors = [Tss() for _ in range(TSS_MAX_CPUS)]
        self.selectors: List[Optional[int]] = [None] * TSS_MAX_CPUS
        self._ist_index = 0

    def _check_cpu(self, cpu: int) -> None:
        if not 0 <= cpu < TSS_MAX_CPUS:
            raise IndexError(f"no TSS for CPU {cpu}")

    def add_stack(self, cpu: int) -> int:
        """Allocate an interrupt stack into the next IST slot; return the slot count."""
        self._check_cpu(cpu)
        if self._ist_index >= TSS_IST_SLOTS:
            raise OverflowError("all interrupt stack slots are in use")
        stack = self.allocate_pages(IST_STACK_PAGES)
        self.descriptors[cpu].ist[self._ist_index] = stack + PAGE_SIZE * IST_STACK_PAGES
        self._ist_index += 1
        return self._ist_index

    def get_num_stacks(self, cpu: int) -> int:
        """Index of the most recently added interrupt stack."""
        self._check_cpu(cpu)
        return self._ist_index - 1

    def install(self, cpu: int) -> None:
        """Reset the CPU's TSS, give it three stacks and register it in the GDT."""
        self._check_cpu(cpu)
        tss_base = self.base_address + cpu * TSS_STRUCT_SIZE
        tss = Tss()
        self.descriptors[cpu] = tss
        for _ in range(3):
            self.add_stack(cpu)
        tss.rsp[0] = tss.ist[0]
        tss.io_map = TSS_STRUCT_SIZE
        self.selectors[cpu] = self.gdt.install_tss(tss_base)

    def get(self, cpu: int) -> Tss:
        self._check_cpu(cpu)
        return self.descriptors[cpu]

    def get_stack(self, cpu: int, ist: int) -> int:
        self._check_cpu(cpu)
        if not 0 <= ist < TSS_IST_SLOTS:
            raise IndexError(f"no interrupt stack slot {ist}")
        return self.descriptors[cpu].ist[ist]

    def dump(self) -> str:
        """Listing of every CPU's TSS as printed on the serial console."""
        parts = ["\r\nTSS dump:\r\n"]
        for cpu, tss in enumerate(self.descriptors):
            parts.append(sprintf("\tTSS for CPU %d\r\n", cpu))
            for i, value in enumerate(tss.rsp):
                parts.append(sprintf("\t\tRSP%d: %x\r\n", i, value))
            for i, value in enumerate(tss.ist):
                parts.append(sprintf("\t\tIST%d: %x\r\n", i + 1, value))
            parts.append(sprintf("\t\tIO Map: %x\r\n", tss.io_map))
            parts.append("\r\n")
        return "".join(parts)