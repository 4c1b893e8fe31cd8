"""
C64 memory store — contract plus a 64K reference implementation.

The codec never owns memory. It talks to whatever emulator hosts it
through the small BasicStore contract below: byte read/write plus the
6510 processor port, which the encoder flips to all-RAM for the duration
of a commit.

C64Memory is a minimal implementation of that contract for hosts
without an emulator and for the test suite. It models only what decides
whether a CPU read sees program RAM:

  $0000/$0001  processor port (DDR / data) — LORAM, HIRAM
  $A000–$BFFF  BASIC ROM     visible when LORAM and HIRAM
  $E000–$FFFF  KERNAL ROM    visible when HIRAM

ROM contents are not modelled; a visible ROM byte reads as $FF.
Writes always land in RAM, as they do on the real machine.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Protocol, Tuple

__all__ = ['BasicStore', 'C64Memory', 'MemoryRegion']


class BasicStore(Protocol):
    """What the encoder, decoder and exporters need from a host memory."""

    def read(self, address: int) -> int: ...

    def write(self, address: int, value: int) -> None: ...

    def get_bank_mode(self) -> Tuple[int, int]: ...

    def set_bank_mode(self, ddr: int, port: int) -> None: ...


class MemoryRegion:
    """A named ROM area in the 64K address space."""
    def __init__(self, name: str, start: int, end: int):
        self.name = name
        self.start = start
        self.end = end  # inclusive

    def contains(self, addr: int) -> bool:
        return self.start <= addr <= self.end


# Processor port bits
LORAM = 0x01
HIRAM = 0x02

POWER_ON_DDR = 0x2F
POWER_ON_PORT = 0x37

ROM_FILL = 0xFF


class C64Memory:
    """64K byte-addressable C64 memory with processor-port banking.

    Usage:
        mem = C64Memory()
        mem.write(0x0801, 0x0B)
        ddr, port = mem.get_bank_mode()
        mem.set_bank_mode(0b111, 0)      # everything reads as RAM
    """

    BASIC_ROM = MemoryRegion('BASIC', 0xA000, 0xBFFF)
    KERNAL_ROM = MemoryRegion('KERNAL', 0xE000, 0xFFFF)

    def __init__(self):
        self._ram = bytearray(0x10000)
        self._ddr = POWER_ON_DDR
        self._port = POWER_ON_PORT

        # Watchpoints: addr → callback(addr, old_val, new_val)
        self._watchpoints: Dict[int, List[Callable]] = {}

    # --- Processor port ---

    def get_bank_mode(self) -> Tuple[int, int]:
        return (self._ddr, self._port)

    def set_bank_mode(self, ddr: int, port: int) -> None:
        self._ddr = ddr & 0xFF
        self._port = port & 0xFF

    @property
    def _lines(self) -> int:
        """Effective LORAM/HIRAM: inputs float high."""
        return (self._port | (~self._ddr & 0xFF)) & (LORAM | HIRAM)

    def visible(self, addr: int) -> str:
        """Name what a CPU read at `addr` reaches: RAM, BASIC or KERNAL."""
        addr &= 0xFFFF
        lines = self._lines
        if self.BASIC_ROM.contains(addr) and lines == LORAM | HIRAM:
            return self.BASIC_ROM.name
        if self.KERNAL_ROM.contains(addr) and lines & HIRAM:
            return self.KERNAL_ROM.name
        return 'RAM'

    # --- Core read/write ---

    def read(self, address: int) -> int:
        """Read one byte as the CPU sees it."""
        addr = address & 0xFFFF
        if addr == 0x0000:
            return self._ddr
        if addr == 0x0001:
            return self._port
        if self.visible(addr) != 'RAM':
            return ROM_FILL
        return self._ram[addr]

    def write(self, address: int, value: int) -> None:
        """Write one byte; anything but the port lands in RAM."""
        addr = address & 0xFFFF
        value &= 0xFF

        if addr == 0x0000:
            self._ddr = value
            return
        if addr == 0x0001:
            self._port = value
            return

        old = self._ram[addr]
        self._ram[addr] = value
        for cb in self._watchpoints.get(addr, ()):
            cb(addr, old, value)

    def read_ram(self, address: int) -> int:
        """Read the RAM byte at `address`, ignoring banking."""
        return self._ram[address & 0xFFFF]

    def load_binary(self, data: bytes, base_addr: int):
        """Copy raw bytes into RAM at base_addr (no banking, no watchpoints)."""
        for i, byte in enumerate(data):
            self._ram[(base_addr + i) & 0xFFFF] = byte

    def add_watchpoint(self, addr: int, callback: Callable):
        """Call callback(addr, old_val, new_val) on every RAM write to addr."""
        self._watchpoints.setdefault(addr, []).append(callback)
