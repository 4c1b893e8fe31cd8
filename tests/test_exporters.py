"""
Exporter tests for the C64 BASIC codec (.prg and .t64).
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from c64_basic import encode_program, text_to_prg
from c64_basic.encoder import write_program
from c64_basic.errors import NoProgramError, ValidationError
from c64_basic.exporters import (
    T64_ENTRY_SIZE, T64_HEADER_SIZE, T64_SIGNATURE, build_prg, build_t64, save_binary,
)
from c64_basic.memory import C64Memory


HELLO = '10 PRINT "HELLO"\n20 GOTO 10'


def _resident(text: str = HELLO) -> C64Memory:
    mem = C64Memory()
    write_program(mem, text)
    return mem


class TestPrg:

    def test_header_and_body(self):
        mem = _resident()
        prg = build_prg(mem)
        assert prg[:2] == b'\x01\x08'
        assert len(prg) == 2 + (0x081A - 0x0801)
        assert prg[2:] == encode_program(HELLO)

    def test_matches_text_to_prg(self):
        assert build_prg(_resident()) == text_to_prg(HELLO)

    def test_largest_program_exports_intact(self):
        text = '\n'.join(f'{n} REM {"X" * 240}' for n in range(1, 158))
        prg = build_prg(_resident(text))
        assert len(prg) == 2 + 157 * 247 + 2
        assert prg == text_to_prg(text)

    def test_no_program(self):
        mem = C64Memory()
        mem.write(0x2D, 0x01)
        mem.write(0x2E, 0x08)
        with pytest.raises(NoProgramError, match="No BASIC program"):
            build_prg(mem)

    def test_vartab_below_base(self):
        mem = C64Memory()       # VARTAB = $0000
        with pytest.raises(ValidationError, match="Invalid BASIC length") as exc:
            build_prg(mem)
        assert not isinstance(exc.value, NoProgramError)

    def test_empty_program_still_exports_sentinel(self):
        prg = build_prg(_resident(''))
        assert prg == b'\x01\x08\x00\x00'


class TestT64:

    def test_layout(self):
        prg = text_to_prg(HELLO)
        t64 = build_t64(prg, "HELLO")
        assert len(t64) == T64_HEADER_SIZE + T64_ENTRY_SIZE + len(prg)
        assert t64[:12] == T64_SIGNATURE
        assert t64[0x10] == 1
        assert t64[0x1E] == 1
        entry = t64[T64_HEADER_SIZE:T64_HEADER_SIZE + T64_ENTRY_SIZE]
        assert entry == b'HELLO' + b'\x00' * 27
        assert t64[T64_HEADER_SIZE + T64_ENTRY_SIZE:] == prg

    def test_long_name_truncated(self):
        t64 = build_t64(b'\x01\x08\x00\x00', 'X' * 40)
        assert t64[T64_HEADER_SIZE:T64_HEADER_SIZE + T64_ENTRY_SIZE] == b'X' * 32
        assert t64[T64_HEADER_SIZE + T64_ENTRY_SIZE:] == b'\x01\x08\x00\x00'

    def test_default_name(self):
        t64 = build_t64(b'\x01\x08\x00\x00')
        assert t64[T64_HEADER_SIZE:T64_HEADER_SIZE + 7] == b'PROGRAM'

    def test_empty_payload(self):
        with pytest.raises(ValidationError):
            build_t64(b'')


class TestSave:

    def test_save_binary(self, tmp_path):
        prg = build_prg(_resident())
        path = save_binary(tmp_path / "hello.prg", prg)
        assert path.read_bytes() == prg

    def test_save_accepts_str(self, tmp_path):
        path = save_binary(str(tmp_path / "hello.t64"), b'abc')
        assert path.name == "hello.t64"
        assert path.read_bytes() == b'abc'
