"""
File exporters for the resident BASIC program.

.prg — the format LOAD"NAME",8 reads:
    load address (LE16) | program bytes

.t64 — tape image wrapping a single .prg:
    $00  64-byte header   signature 'C64-TAPE-RAW', version at $10,
                          entry count at $1E
    $40  32-byte entry    file name, zero padded
    $60  .prg payload

The .t64 writer fills in only the signature, version and entry count.
It leaves the directory fields (file type, start/end address, data
offset) empty. Loaders that read them refuse the image, but the .prg
inside can be extracted by offset.
"""

from __future__ import annotations
import logging
import struct
from pathlib import Path
from typing import Optional, Union

from .config import CodecConfig, DEFAULT_CONFIG
from .errors import NoProgramError, ValidationError
from .memory import BasicStore

__all__ = ['build_prg', 'build_t64', 'save_binary',
           'T64_HEADER_SIZE', 'T64_ENTRY_SIZE', 'T64_SIGNATURE']

log = logging.getLogger(__name__)

T64_HEADER_SIZE = 64
T64_ENTRY_SIZE = 32
T64_SIGNATURE = b'C64-TAPE-RAW'
T64_VERSION_OFFSET = 0x10
T64_VERSION = 0x01
T64_ENTRIES_OFFSET = 0x1E


def build_prg(store: BasicStore, config: Optional[CodecConfig] = None) -> bytes:
    """Build a .prg from the program currently in store.

    The program length comes from VARTAB, which the BASIC editor (and
    ProgramEncoder.commit) leave pointing just past the program.
    """
    cfg = config or DEFAULT_CONFIG
    base = cfg.base_address
    var_ptr = store.read(cfg.vartab) | (store.read(cfg.vartab + 1) << 8)

    length = var_ptr - base
    if length == 0:
        raise NoProgramError("No BASIC program present")
    if length < 0:
        raise ValidationError(f"Invalid BASIC length: VARTAB ${var_ptr:04X} is below ${base:04X}")

    prg = bytearray(struct.pack('<H', base))
    for i in range(length):
        prg.append(store.read(base + i))

    log.info("Built PRG: %d bytes ($%04X-$%04X)", len(prg), base, var_ptr - 1)
    return bytes(prg)


def build_t64(prg: bytes, filename: str = "PROGRAM") -> bytes:
    """Wrap a .prg in a single-entry .t64 tape image."""
    if len(prg) < 2:
        raise ValidationError("PRG payload is empty")

    header = bytearray(T64_HEADER_SIZE)
    header[0:len(T64_SIGNATURE)] = T64_SIGNATURE
    header[T64_VERSION_OFFSET] = T64_VERSION
    header[T64_ENTRIES_OFFSET] = 1

    entry = bytearray(T64_ENTRY_SIZE)
    name = filename.encode('latin-1', errors='replace')[:T64_ENTRY_SIZE]
    entry[0:len(name)] = name

    log.info("Built T64: %r, %d byte payload", filename, len(prg))
    return bytes(header + entry + prg)


def save_binary(path: Union[str, Path], data: bytes) -> Path:
    """Write an exported image to disk."""
    p = Path(path)
    p.write_bytes(data)
    log.info("Saved %d bytes to %s", len(data), p)
    return p
