"""
Line tokenizer ("cruncher") for C64 BASIC V2.

Converts the body of one program line (everything after the line number)
into the byte sequence BASIC stores in memory: keyword tokens from
tokens.py mixed with literal character bytes.

Two modes:
  - Comment mode: a REM keyword standing on its own (start of line, or
    after a space or ':', and followed by a space, ':' or end of line)
    ends tokenization. Text after it is copied verbatim, colons included.
  - General scan: left to right, longest keyword first. Keywords need a
    boundary after them (space ( ) , ; : " or end of line); the
    single-symbol operators do not. Anything unmatched becomes a literal
    byte.

The lexer never fails. Text that looks almost like a keyword simply
stays literal.
"""

from __future__ import annotations
from typing import Optional

from .tokens import (
    BOUNDARY_CHARS, KEYWORDS, KEYWORDS_BY_LENGTH, LINE_BLANKS, OPERATORS,
    REM_CODE, char_to_byte,
)

__all__ = ['Lexer', 'tokenize_line']

_COMMENT_KEYWORD = 'REM'


class Lexer:
    """Tokenizes the text of a single BASIC line."""

    def __init__(self, text: str):
        self.source = text.strip(LINE_BLANKS)
        self.pos = 0

    def _find_comment(self) -> int:
        """Return the index of the first free-standing REM, or -1."""
        start = 0
        while True:
            idx = _find_ci(self.source, _COMMENT_KEYWORD, start)
            if idx == -1:
                return -1
            before = self.source[idx - 1] if idx > 0 else None
            end = idx + len(_COMMENT_KEYWORD)
            after = self.source[end] if end < len(self.source) else None
            if before in (None, ' ', ':') and after in (None, ' ', ':'):
                return idx
            start = idx + 1

    def _match_keyword(self, segment: str) -> Optional[str]:
        for keyword in KEYWORDS_BY_LENGTH:
            end = self.pos + len(keyword)
            if segment[self.pos:end].upper() != keyword:
                continue
            if keyword in OPERATORS:
                return keyword
            nxt = segment[end] if end < len(segment) else None
            if nxt is None or nxt in BOUNDARY_CHARS:
                return keyword
        return None

    def _scan(self, segment: str, out: bytearray):
        """General scan over `segment`, appending to `out`."""
        self.pos = 0
        while self.pos < len(segment):
            keyword = self._match_keyword(segment)
            if keyword is not None:
                out.append(KEYWORDS[keyword])
                self.pos += len(keyword)
            else:
                out.append(char_to_byte(segment[self.pos]))
                self.pos += 1

    def tokenize(self) -> bytes:
        """Tokenize the whole line and return the body bytes."""
        out = bytearray()
        rem = self._find_comment()
        if rem == -1:
            self._scan(self.source, out)
            return bytes(out)

        self._scan(self.source[:rem], out)
        out.append(REM_CODE)
        out.extend(char_to_byte(ch) for ch in self.source[rem + len(_COMMENT_KEYWORD):])
        return bytes(out)


def _find_ci(text: str, needle: str, start: int) -> int:
    """Case-insensitive str.find() that keeps indexes aligned with `text`."""
    n = len(needle)
    for i in range(start, len(text) - n + 1):
        if text[i:i + n].upper() == needle:
            return i
    return -1


def tokenize_line(text: str) -> bytes:
    """Tokenize one line body, e.g. 'PRINT "HELLO"' -> b'\\x99 "HELLO"'."""
    return Lexer(text).tokenize()
