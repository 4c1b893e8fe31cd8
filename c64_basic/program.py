"""
Program model for the C64 BASIC codec.

A Program is just a list of Line objects in the order the caller gave
them. Line numbers are never used to reorder anything.

MemoryImage is the laid-out form: one Record per line, each knowing its
own address and the address of the record after it, followed by the
two-byte $0000 end marker.

    record := next_ptr (u16 LE) | line number (u16 LE) | body | $00
"""

from __future__ import annotations
import struct
from dataclasses import dataclass, field
from typing import List

from .tokens import detokenize


@dataclass(frozen=True)
class Line:
    """One tokenized program line."""
    number: int                 # 0-65535
    body: bytes                 # tokens + literal bytes, no terminator

    @property
    def text(self) -> str:
        """Body rendered back to listing text."""
        return detokenize(self.body)

    def __str__(self):
        return f"{self.number} {self.text}"


@dataclass(frozen=True)
class Record:
    """A Line placed at a fixed address."""
    address: int
    next_ptr: int
    line: Line

    @property
    def length(self) -> int:
        return 2 + 2 + len(self.line.body) + 1

    def to_bytes(self) -> bytes:
        return (struct.pack('<HH', self.next_ptr, self.line.number)
                + self.line.body + b'\x00')


@dataclass
class MemoryImage:
    """Address-linked program text starting at base_address."""
    base_address: int
    records: List[Record] = field(default_factory=list)

    @property
    def lines(self) -> List[Line]:
        return [rec.line for rec in self.records]

    @property
    def end_address(self) -> int:
        """First address after the $0000 end marker."""
        if self.records:
            return self.records[-1].next_ptr + 2
        return self.base_address + 2

    def to_bytes(self) -> bytes:
        out = bytearray()
        for rec in self.records:
            out += rec.to_bytes()
        out += b'\x00\x00'
        return bytes(out)

    def __len__(self):
        return self.end_address - self.base_address
