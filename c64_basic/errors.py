"""
Exceptions raised by the C64 BASIC codec.

StructuralParseError is recoverable: ProgramEncoder.parse() catches it, logs
it and keeps going. Everything else propagates to the caller.
"""

from __future__ import annotations


class BasicCodecError(Exception):
    """Base class for all codec errors."""


class StructuralParseError(BasicCodecError):
    """A physical source line does not match ``<number> <body>``."""
    def __init__(self, message: str, line_text: str = ""):
        self.line_text = line_text
        self.reason = message
        super().__init__(f"{message}: {line_text!r}" if line_text else message)


class ValidationError(BasicCodecError):
    """The operation cannot produce a valid result (no program, bad length)."""


class NoProgramError(ValidationError):
    """The pointer variables say no BASIC program is resident."""


class ProgramTooLargeError(ValidationError):
    """The laid-out program would run past the 16-bit address space."""


class CorruptProgramError(BasicCodecError):
    """The linked line chain in memory is broken or cyclic."""
    def __init__(self, message: str, address: int):
        self.address = address
        self.reason = message
        super().__init__(f"Corrupt program at ${address:04X}: {message}")
