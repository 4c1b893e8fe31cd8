"""
Program encoder — BASIC source text to the linked in-memory image.

Input:  Program text, one numbered statement line per physical line
Output: MemoryImage, optionally committed to a BasicStore

How encoding works:
  1. Parse: every non-blank line must be "<digits><whitespace><body>".
     Lines that are not are skipped with a warning; the rest still encode.
  2. Tokenize each body with the lexer.
  3. Layout: records are placed back to back from the base address in
     the order given. Each record's next_ptr is its own address plus
     4 + len(body) + 1. A $0000 word closes the program, and the whole
     image must end below the top of BASIC RAM ($A000).
  4. Commit: with the processor port switched to all-RAM, clear the
     program window, write the image and point VARTAB, ARYTAB and
     STREND just past it. The port is restored on every exit path.

Worked example, base $0801:
    10 PRINT "HELLO"    body = 99 20 22 48 45 4C 4C 4F 22 (9 bytes)
                        record = 14 bytes -> next_ptr = $080F
    20 GOTO 10          body = 89 20 31 30 (4 bytes)
                        record = 9 bytes  -> next_ptr = $0818
    $0818: 00 00        end of program; VARTAB = $081A
"""

from __future__ import annotations
import logging
import re
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from .config import CodecConfig, DEFAULT_CONFIG
from .errors import ProgramTooLargeError, StructuralParseError
from .lexer import tokenize_line
from .memory import BasicStore
from .program import Line, MemoryImage, Record
from .tokens import LINE_BLANKS

__all__ = ['ProgramEncoder', 'ram_only', 'queue_run_command', 'write_program']

log = logging.getLogger(__name__)

_LINE_RE = re.compile(r'^([0-9]+)[ \t]+(.*)$')

_RUN_KEYS = bytes([82, 85, 78, 13])   # R U N <RETURN>


@contextmanager
def ram_only(store: BasicStore, config: CodecConfig = DEFAULT_CONFIG) -> Iterator[BasicStore]:
    """Hold the store in all-RAM mode, restoring the previous mode on exit."""
    saved = store.get_bank_mode()
    try:
        store.set_bank_mode(*config.ram_mode)
        yield store
    finally:
        store.set_bank_mode(*saved)


class ProgramEncoder:
    """Turns BASIC text into a MemoryImage and writes it to a store."""

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.skipped: List[StructuralParseError] = []

    # ── Parsing ──────────────────────────────

    def parse_line(self, raw: str) -> Optional[Line]:
        """Parse and tokenize one physical line.

        Returns None when the line has nothing left to store (a bare '::').
        Raises StructuralParseError when the line has no usable line number.
        """
        m = _LINE_RE.match(raw)
        if not m:
            raise StructuralParseError("Invalid BASIC line (no line number)", raw)

        number = int(m.group(1))
        if number > 0xFFFF:
            raise StructuralParseError(f"Line number {number} out of range", raw)

        text = m.group(2)

        # '::' prefix: keep a single separator unless what follows is a comment
        if text.startswith('::'):
            text = text[2:].strip(LINE_BLANKS)
            if text and not text.upper().startswith('REM'):
                text = ': ' + text

        if not text:
            log.info("Skipping empty line %d", number)
            return None

        body = tokenize_line(text)
        log.debug("Parsed line %d: %r -> %s", number, text, body.hex(' '))
        return Line(number, body)

    def parse(self, program_text: str) -> List[Line]:
        """Parse a whole program, keeping caller order."""
        self.skipped = []
        lines: List[Line] = []
        # Only \n ends a line; PETSCII control codes may sit inside strings
        for raw in program_text.split('\n'):
            raw = raw.rstrip('\r').strip(LINE_BLANKS)
            if not raw:
                continue
            try:
                line = self.parse_line(raw)
            except StructuralParseError as e:
                log.warning("%s", e)
                self.skipped.append(e)
                continue
            if line is not None:
                lines.append(line)
        return lines

    # ── Layout ───────────────────────────────

    def layout(self, lines: Sequence[Line]) -> MemoryImage:
        """Place lines back to back from the base address."""
        image = MemoryImage(self.config.base_address)
        addr = self.config.base_address

        for line in lines:
            length = 2 + 2 + len(line.body) + 1
            next_ptr = addr + length
            if next_ptr + 2 > self.config.basic_top:
                raise ProgramTooLargeError(
                    f"Line {line.number} at ${addr:04X} runs past "
                    f"${self.config.basic_top - 1:04X} ({length} bytes)"
                )
            log.debug("Line %d: addr=$%04X, length=%d, next=$%04X",
                      line.number, addr, length, next_ptr)
            image.records.append(Record(addr, next_ptr, line))
            addr = next_ptr

        return image

    def build(self, program_text: str) -> MemoryImage:
        """Parse and lay out program text."""
        return self.layout(self.parse(program_text))

    # ── Commit ───────────────────────────────

    def commit(self, image: MemoryImage, store: BasicStore) -> int:
        """Write image to store and update the pointer variables.

        Returns the new VARTAB value (first byte after the program).
        """
        cfg = self.config
        data = image.to_bytes()
        end = image.base_address + len(data)

        with ram_only(store, cfg):
            # Wipe any longer program left behind
            limit = min(image.base_address + cfg.clear_window, 0x10000)
            for addr in range(image.base_address, limit):
                store.write(addr, 0)

            for i, byte in enumerate(data):
                store.write(image.base_address + i, byte)

            lo, hi = end & 0xFF, (end >> 8) & 0xFF
            for ptr in cfg.pointer_addresses:
                store.write(ptr, lo)
                store.write(ptr + 1, hi)

        log.info("BASIC program written: %d lines, %d bytes, ending at $%04X",
                 len(image.records), len(data), end)
        return end


def queue_run_command(store: BasicStore, config: Optional[CodecConfig] = None):
    """Type RUN<RETURN> into the keyboard buffer so BASIC starts the program."""
    cfg = config or DEFAULT_CONFIG
    for i, key in enumerate(_RUN_KEYS):
        store.write(cfg.keyboard_buffer + i, key)
    store.write(cfg.keyboard_count, len(_RUN_KEYS))
    log.info("Queued RUN in keyboard buffer")


def write_program(store: BasicStore, program_text: str,
                  config: Optional[CodecConfig] = None,
                  autorun: bool = False) -> MemoryImage:
    """Encode program_text, commit it to store and optionally queue RUN."""
    encoder = ProgramEncoder(config)
    image = encoder.build(program_text)
    encoder.commit(image, store)
    if autorun:
        queue_run_command(store, config)
    return image
