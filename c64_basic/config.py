"""
Memory-map constants for the C64 BASIC codec.

Single place for every fixed address the codec touches. The defaults describe
a stock Commodore 64 with BASIC V2; tests and hosts override individual fields
with ``dataclasses.replace(DEFAULT_CONFIG, ...)``.

    $0000/$0001  6510 processor port (data direction / data)
    $002D-$0032  VARTAB / ARYTAB / STREND pointer pairs (lo, hi)
    $00C6        keyboard buffer count
    $0277-$0280  keyboard buffer (10 bytes)
    $0801        start of BASIC program text
    $A000        BASIC ROM; program text must end below it
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CodecConfig:
    """Addresses and limits used by the encoder, decoder and exporters."""

    # Program text
    base_address: int = 0x0801
    basic_top: int = 0xA000        # first byte past BASIC RAM
    clear_window: int = 10000      # bytes zeroed before a commit

    # Pointer variables (low byte address; high byte follows)
    vartab: int = 0x2D             # start of variables
    arytab: int = 0x2F             # start of arrays
    strend: int = 0x31             # end of arrays

    # 6510 processor port (ddr, port) during a commit
    ram_mode: Tuple[int, int] = (0b111, 0x00)   # all RAM

    # Keyboard buffer (used to queue RUN)
    keyboard_buffer: int = 0x0277
    keyboard_count: int = 0xC6

    # Listing
    ready_text: str = "READY."

    @property
    def pointer_addresses(self) -> Tuple[int, int, int]:
        return (self.vartab, self.arytab, self.strend)


DEFAULT_CONFIG = CodecConfig()
