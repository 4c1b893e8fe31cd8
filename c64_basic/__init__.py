"""
c64_basic — Commodore 64 BASIC V2 program codec
===============================================
Converts BASIC source text to the tokenized, link-addressed program text
the C64 keeps at $0801, reads it back out of memory, and exports it as
.prg / .t64 files.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌──────────────┐
    │ BASIC    │───>│  Lexer   │───>│  Encoder  │───>│ Store ($0801)│
    │ text     │    │ (tokens) │    │ (layout)  │    │ + VARTAB etc │
    └──────────┘    └──────────┘    └───────────┘    └──────┬───────┘
          ^                                                 │
          │         ┌──────────┐                            │
          └─────────│ Decoder  │<───────────────────────────┤
                    └──────────┘                            │
                    ┌───────────┐                           │
                    │ Exporters │<──────────────────────────┘
                    │ .prg/.t64 │
                    └───────────┘

    - tokens.py:    keyword <-> token byte table, character folding, detokenize
    - lexer.py:     one line of text -> body bytes
    - program.py:   Line / Record / MemoryImage
    - encoder.py:   parse, lay out and commit a program
    - decoder.py:   walk memory, list
    - exporters.py: .prg and .t64 builders
    - memory.py:    store contract + C64Memory reference store
"""

import logging
import struct

__version__ = "0.1.0"

from .config import CodecConfig, DEFAULT_CONFIG
from .errors import (
    BasicCodecError, StructuralParseError, ValidationError, NoProgramError,
    ProgramTooLargeError, CorruptProgramError,
)
from .tokens import KEYWORDS, TOKENS, char_to_byte, detokenize
from .lexer import Lexer, tokenize_line
from .program import Line, Record, MemoryImage
from .memory import BasicStore, C64Memory
from .encoder import ProgramEncoder, ram_only, queue_run_command, write_program
from .decoder import ProgramDecoder, render_listing, read_program, list_program
from .exporters import build_prg, build_t64, save_binary
from .log import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())


def encode_program(program_text: str, config: CodecConfig = DEFAULT_CONFIG) -> bytes:
    """Encode BASIC text to the raw bytes that would sit at the base address."""
    return ProgramEncoder(config).build(program_text).to_bytes()


def text_to_prg(program_text: str, config: CodecConfig = DEFAULT_CONFIG) -> bytes:
    """Encode BASIC text straight to .prg bytes, without a store."""
    image = ProgramEncoder(config).build(program_text)
    return struct.pack('<H', image.base_address) + image.to_bytes()
