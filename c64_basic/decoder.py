"""
Program decoder — walks the linked line chain in memory and lists it.

Traversal starts at the base address:

    addr → next_ptr (LE16)      0 ends the program
           line number (LE16)   at addr+2
           body bytes           from addr+4 up to a $00 terminator
    addr = next_ptr

Memory handed to the decoder may hold anything: a half-written program,
a POKEd link, random bytes after a crash. The walk therefore insists that
every next_ptr moves strictly forward, past at least a minimal record,
and that every body ends before $FFFF. Either violation raises
CorruptProgramError instead of looping or reading off the end.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from .config import CodecConfig, DEFAULT_CONFIG
from .errors import CorruptProgramError
from .memory import BasicStore
from .program import Line

__all__ = ['ProgramDecoder', 'render_listing', 'read_program', 'list_program']

log = logging.getLogger(__name__)

# next_ptr(2) + line number(2) + terminator(1)
_MIN_RECORD = 5


class ProgramDecoder:
    """Reads the resident BASIC program back out of a store."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def _read16(self, store: BasicStore, addr: int) -> int:
        return store.read(addr) | (store.read(addr + 1) << 8)

    def _read_body(self, store: BasicStore, addr: int) -> bytes:
        body = bytearray()
        while addr <= 0xFFFF:
            byte = store.read(addr)
            if byte == 0:
                return bytes(body)
            body.append(byte)
            addr += 1
        raise CorruptProgramError("line body has no terminator before $FFFF", addr - 1)

    def extract(self, store: BasicStore) -> List[Line]:
        """Walk the chain and return its lines in memory order."""
        lines: List[Line] = []
        addr = self.config.base_address

        while True:
            if addr + 1 > 0xFFFF:
                raise CorruptProgramError("link runs past $FFFF", addr)
            next_ptr = self._read16(store, addr)
            if next_ptr == 0:
                break
            if next_ptr < addr + _MIN_RECORD:
                raise CorruptProgramError(
                    f"link ${next_ptr:04X} does not move forward", addr)

            number = self._read16(store, addr + 2)
            body = self._read_body(store, addr + 4)
            lines.append(Line(number, body))
            addr = next_ptr

        log.debug("Extracted %d lines ending at $%04X", len(lines), addr)
        return lines


def render_listing(lines: Sequence[Line],
                   config: Optional[CodecConfig] = None) -> str:
    """Format lines like LIST, followed by the READY. prompt."""
    ready = (config or DEFAULT_CONFIG).ready_text
    if not lines:
        return f"{ready}\n"
    listing = '\n'.join(f"{line.number} {line.text}" for line in lines)
    return f"{listing}\n\n{ready}\n"


def read_program(store: BasicStore,
                 config: Optional[CodecConfig] = None) -> List[Line]:
    """Lines of the program resident in store."""
    return ProgramDecoder(config).extract(store)


def list_program(store: BasicStore,
                 config: Optional[CodecConfig] = None) -> str:
    """The resident program as listing text."""
    return render_listing(read_program(store, config), config)
