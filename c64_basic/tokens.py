"""
Commodore 64 BASIC V2 token table.

Every BASIC keyword is stored in memory as a single byte in the range
$80-$CB. This module holds the one-and-only mapping between keyword text
and those bytes, plus the character normalization used for everything
that is not a keyword, and the reverse rendering of a tokenized body
back to listing text.

Reference: Commodore 64 Programmer's Reference Guide, Appendix K (BASIC
token values); C64 ROM disassembly, keyword table at $A09E.

The tables are built once at import time and exposed read-only.
"""

from __future__ import annotations
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

__all__ = [
    'KEYWORDS', 'TOKENS', 'KEYWORDS_BY_LENGTH', 'OPERATORS', 'NO_SEPARATOR',
    'BOUNDARY_CHARS', 'TOKEN_FIRST', 'TOKEN_LAST', 'PI_CODE', 'PI_CHAR',
    'REM_CODE', 'LINE_BLANKS', 'char_to_byte', 'is_token', 'keyword_for',
    'code_for', 'detokenize',
]


# ──────────────────────────────────────────────
# Keyword table
# ──────────────────────────────────────────────
# Format: { 'KEYWORD': code }
#
# Order of registration mirrors the ROM keyword list, so codes are
# assigned in strictly ascending order.

_KEYWORDS: Dict[str, int] = {}
_TOKENS: Dict[int, str] = {}

def _tok(keyword: str, code: int):
    """Register a keyword/token pair."""
    if keyword in _KEYWORDS or code in _TOKENS:
        raise ValueError(f"duplicate token entry: {keyword!r} / ${code:02X}")
    _KEYWORDS[keyword] = code
    _TOKENS[code] = keyword

# ── Statements ──
_tok('END',     0x80)
_tok('FOR',     0x81)
_tok('NEXT',    0x82)
_tok('DATA',    0x83)
_tok('INPUT#',  0x84)
_tok('INPUT',   0x85)
_tok('DIM',     0x86)
_tok('READ',    0x87)
_tok('LET',     0x88)
_tok('GOTO',    0x89)
_tok('RUN',     0x8A)
_tok('IF',      0x8B)
_tok('RESTORE', 0x8C)
_tok('GOSUB',   0x8D)
_tok('RETURN',  0x8E)
_tok('REM',     0x8F)
_tok('STOP',    0x90)
_tok('ON',      0x91)
_tok('WAIT',    0x92)
_tok('LOAD',    0x93)
_tok('SAVE',    0x94)
_tok('VERIFY',  0x95)
_tok('DEF',     0x96)
_tok('POKE',    0x97)
_tok('PRINT#',  0x98)
_tok('PRINT',   0x99)
_tok('CONT',    0x9A)
_tok('LIST',    0x9B)
_tok('CLR',     0x9C)
_tok('CMD',     0x9D)
_tok('SYS',     0x9E)
_tok('OPEN',    0x9F)
_tok('CLOSE',   0xA0)
_tok('GET',     0xA1)
_tok('NEW',     0xA2)

# ── Secondary keywords ──
_tok('TAB(',    0xA3)
_tok('TO',      0xA4)
_tok('FN',      0xA5)
_tok('SPC(',    0xA6)
_tok('THEN',    0xA7)
_tok('NOT',     0xA8)
_tok('STEP',    0xA9)

# ── Operators ──
_tok('+',       0xAA)
_tok('-',       0xAB)
_tok('*',       0xAC)
_tok('/',       0xAD)
_tok('^',       0xAE)
_tok('AND',     0xAF)
_tok('OR',      0xB0)
_tok('>',       0xB1)
_tok('=',       0xB2)
_tok('<',       0xB3)

# ── Functions ──
_tok('SGN',     0xB4)
_tok('INT',     0xB5)
_tok('ABS',     0xB6)
_tok('USR',     0xB7)
_tok('FRE',     0xB8)
_tok('POS',     0xB9)
_tok('SQR',     0xBA)
_tok('RND',     0xBB)
_tok('LOG',     0xBC)
_tok('EXP',     0xBD)
_tok('COS',     0xBE)
_tok('SIN',     0xBF)
_tok('TAN',     0xC0)
_tok('ATN',     0xC1)
_tok('PEEK',    0xC2)
_tok('LEN',     0xC3)
_tok('STR$',    0xC4)
_tok('VAL',     0xC5)
_tok('ASC',     0xC6)
_tok('CHR$',    0xC7)
_tok('LEFT$',   0xC8)
_tok('RIGHT$',  0xC9)
_tok('MID$',    0xCA)
_tok('GO',      0xCB)

KEYWORDS: Mapping[str, int] = MappingProxyType(_KEYWORDS)
TOKENS: Mapping[int, str] = MappingProxyType(_TOKENS)

TOKEN_FIRST = 0x80
TOKEN_LAST = 0xCB

REM_CODE = KEYWORDS['REM']

# $FF is not a keyword; LIST prints it as the pi glyph.
PI_CODE = 0xFF
PI_CHAR = "π"

# Longest first so PRINT# wins over PRINT and GOSUB over GO.
# Equal lengths fall back to alphabetical order.
KEYWORDS_BY_LENGTH: Tuple[str, ...] = tuple(
    sorted(_KEYWORDS, key=lambda kw: (-len(kw), kw))
)

# Single-symbol operators match anywhere, without a boundary check.
OPERATORS: FrozenSet[str] = frozenset({'+', '-', '*', '/', '^', '>', '=', '<'})

# Characters that may follow a keyword for it to count as one.
BOUNDARY_CHARS: FrozenSet[str] = frozenset({' ', '(', ')', ',', ';', ':', '"'})

# Tokens listed without a trailing space.
NO_SEPARATOR: FrozenSet[int] = frozenset(
    {KEYWORDS['TAB('], KEYWORDS['SPC('], KEYWORDS['AND'], KEYWORDS['OR']}
    | {KEYWORDS[op] for op in OPERATORS}
)


# ──────────────────────────────────────────────
# Character normalization
# ──────────────────────────────────────────────

def char_to_byte(ch: str) -> int:
    """Map one source character to the byte stored in program text.

    Lowercase a-z folds to the uppercase (unshifted PETSCII) codes. Any
    other character up to $FF is stored unchanged. The pi glyph maps back
    to $FF; anything wider becomes '?'.
    """
    code = ord(ch)
    if 0x61 <= code <= 0x7A:
        return code - 0x20
    if code <= 0xFF:
        return code
    if ch == PI_CHAR:
        return PI_CODE
    return 0x3F


def is_token(byte: int) -> bool:
    return TOKEN_FIRST <= byte <= TOKEN_LAST


def keyword_for(code: int) -> Optional[str]:
    """Return the keyword for a token byte, or None."""
    return TOKENS.get(code)


def code_for(keyword: str) -> Optional[int]:
    """Return the token byte for a keyword (any case), or None."""
    return KEYWORDS.get(keyword.upper())


# ──────────────────────────────────────────────
# Listing
# ──────────────────────────────────────────────

# Only space and tab are trimmed; $1C-$1F are PETSCII cursor/colour codes.
LINE_BLANKS = ' \t'

_BOUNDARY_BYTES = frozenset(ord(ch) for ch in BOUNDARY_CHARS)


def detokenize(body: bytes) -> str:
    """Render a line body as listing text.

    Keywords get one trailing space, except for operators, AND/OR, TAB(
    and SPC(, and except where the next byte already separates them (end
    of line, space, punctuation, quote). Trailing blanks are trimmed.
    """
    parts: List[str] = []
    for i, byte in enumerate(body):
        if is_token(byte):
            parts.append(TOKENS[byte])
            if byte in NO_SEPARATOR:
                continue
            nxt = body[i + 1] if i + 1 < len(body) else None
            if nxt is not None and nxt not in _BOUNDARY_BYTES:
                parts.append(' ')
        elif byte == PI_CODE:
            parts.append(PI_CHAR)
        else:
            parts.append(chr(byte))
    return ''.join(parts).rstrip(LINE_BLANKS)
