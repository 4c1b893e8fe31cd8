"""
Decoder tests for the C64 BASIC codec.

Covers detokenizing, the linked-chain walk (including corrupt chains),
listing output and the encode/decode round trip.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import dataclasses

import pytest
from c64_basic.config import DEFAULT_CONFIG
from c64_basic.decoder import ProgramDecoder, list_program, read_program, render_listing
from c64_basic.encoder import ProgramEncoder, write_program
from c64_basic.errors import CorruptProgramError
from c64_basic.memory import C64Memory
from c64_basic.program import Line
from c64_basic.tokens import detokenize


DEMO = """\
10 REM DEMO: COLONS STAY
20 FOR I=1 TO 10: PRINT I;: NEXT I
30 IF A<>B THEN GOSUB 100
40 X=RND(1)*6: Y=INT(X)+1
50 PRINT CHR$(147);"DONE"
60 PRINT TAB( 3);π
70 GOTO 20
100 RETURN
"""


class TestDetokenize:

    def test_keyword_spacing(self):
        cases = [
            (b'\x99 "HELLO"',              'PRINT "HELLO"'),
            (b'\x89 10',                   'GOTO 10'),
            (b'\x99A',                     'PRINT A'),
            (b'\x81 I\xb21 \xa4 10',       'FOR I=1 TO 10'),
            (b'A \xaf B',                  'A AND B'),
            (b'X\xb2\xbb(1)',              'X=RND(1)'),
            (b'\x99:\x80',                 'PRINT:END'),
            (b'\xa33',                     'TAB(3'),
        ]
        for body, text in cases:
            assert detokenize(body) == text, body.hex(' ')

    def test_trailing_space_trimmed(self):
        assert detokenize(b'\x80') == 'END'
        assert detokenize(b'\x8e  ') == 'RETURN'

    def test_pi(self):
        assert detokenize(b'\x99\xff') == 'PRINT π'

    def test_rem_text(self):
        assert detokenize(b'\x8f HAS: A COLON') == 'REM HAS: A COLON'

    def test_control_codes_not_trimmed(self):
        assert detokenize(b'\x99 "A\x1d') == 'PRINT "A\x1d'
        assert detokenize(b'\x8f X\x0b\x1c\x1f') == 'REM X\x0b\x1c\x1f'
        assert detokenize(b'\x80 \t') == 'END'


class TestExtract:

    def test_hello(self):
        mem = C64Memory()
        write_program(mem, '10 PRINT "HELLO"\n20 GOTO 10')
        lines = read_program(mem)
        assert [(l.number, l.text) for l in lines] == [(10, 'PRINT "HELLO"'), (20, 'GOTO 10')]

    def test_memory_order_not_sorted(self):
        mem = C64Memory()
        write_program(mem, '30 END\n10 STOP')
        assert [l.number for l in read_program(mem)] == [30, 10]

    def test_empty_memory(self):
        assert read_program(C64Memory()) == []

    def test_custom_base(self):
        cfg = dataclasses.replace(DEFAULT_CONFIG, base_address=0x1001)
        mem = C64Memory()
        write_program(mem, '10 END', cfg)
        assert ProgramDecoder(cfg).extract(mem) == [Line(10, b'\x80')]

    def test_self_link(self):
        mem = C64Memory()
        mem.load_binary(b'\x01\x08\x0a\x00\x80\x00', 0x0801)
        with pytest.raises(CorruptProgramError) as exc:
            read_program(mem)
        assert exc.value.address == 0x0801

    def test_backward_link(self):
        mem = C64Memory()
        # first record fine, second points back to the first
        mem.load_binary(b'\x07\x08\x0a\x00\x80\x00'
                        b'\x01\x08\x14\x00\x80\x00', 0x0801)
        with pytest.raises(CorruptProgramError) as exc:
            read_program(mem)
        assert exc.value.address == 0x0807
        assert '$0801' in str(exc.value)

    def test_link_too_short(self):
        mem = C64Memory()
        mem.load_binary(b'\x04\x08', 0x0801)
        with pytest.raises(CorruptProgramError):
            read_program(mem)

    def test_unterminated_body(self):
        cfg = dataclasses.replace(DEFAULT_CONFIG, base_address=0xFFF0)
        mem = C64Memory()
        mem.set_bank_mode(0b111, 0)
        mem.load_binary(b'\xf5\xff\x0a\x00' + b'A' * 12, 0xFFF0)
        with pytest.raises(CorruptProgramError) as exc:
            ProgramDecoder(cfg).extract(mem)
        assert 'terminator' in exc.value.reason


class TestListing:

    def test_render(self):
        lines = [Line(10, b'\x99 "HELLO"'), Line(20, b'\x89 10')]
        assert render_listing(lines) == '10 PRINT "HELLO"\n20 GOTO 10\n\nREADY.\n'

    def test_empty(self):
        assert render_listing([]) == 'READY.\n'
        assert list_program(C64Memory()) == 'READY.\n'

    def test_list_program(self):
        mem = C64Memory()
        write_program(mem, '10 print "hi"')
        assert list_program(mem) == '10 PRINT "HI"\n\nREADY.\n'

    def test_line_str(self):
        assert str(Line(5, b'\x80')) == '5 END'


class TestRoundTrip:

    def test_text_round_trip(self):
        mem = C64Memory()
        write_program(mem, DEMO)
        listing = '\n'.join(str(line) for line in read_program(mem))
        assert listing == DEMO.strip()

    def test_image_round_trip(self):
        mem = C64Memory()
        image = write_program(mem, DEMO)
        text = '\n'.join(str(line) for line in read_program(mem))
        assert ProgramEncoder().build(text).to_bytes() == image.to_bytes()

    def test_petscii_bodies_round_trip(self):
        """Images holding control and graphics bytes survive list/re-enter."""
        bodies = [
            b'\x99 "A\x1dB"',                   # cursor right inside a string
            b'\x99 "A\x1d',                     # unclosed string ending in a control code
            b'\x99 "\x11\x11\x1d\x1dHI"',       # cursor down/right
            b'\x99 "\x05\x1c\x1e\x1fHUE"',      # colour codes
            b'\x99 "\xcc\xdd\xee\xfe"',         # graphics characters
            b'\x99 \xff\xb2\xcc',               # pi and a graphics byte
            b'\x8f \x12\x0e\x0b',               # REM text ending in $0B
            b'\x1d\x99 "X"',                    # control code before a keyword
            b'A\xb2\x1c',                       # trailing colour code
            b'\x0c\x1c',                        # form feed / file separator codes
        ]
        lines = [Line(10 * (i + 1), body) for i, body in enumerate(bodies)]
        mem = C64Memory()
        encoder = ProgramEncoder()
        image = encoder.layout(lines)
        encoder.commit(image, mem)

        text = '\n'.join(str(line) for line in read_program(mem))
        again = ProgramEncoder()
        rebuilt = again.build(text)
        assert again.skipped == []
        for before, after in zip(image.lines, rebuilt.lines):
            assert after == before, before.body.hex(' ')
        assert rebuilt.to_bytes() == image.to_bytes()
