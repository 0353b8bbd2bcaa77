"""
Tests for the Converter: single units, text streams and raw word streams.
"""

import io
import pytest
import sys
import os

# Add repository root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from mipsu.assembler import Converter, StreamResult
from mipsu.config import Options
from mipsu.errors import ErrorReason, ParseError, SemanticError, UsageError


ASM_SOURCE = """\
add $v0, $a1, $t8
lw $t0, 0x0004($sp)
bogus $t0, $t1
jr $ra
"""


def make_converter(binary_out=False, **options):
    out = io.BytesIO() if binary_out else io.StringIO()
    err = io.StringIO()
    return Converter(Options(**options), out=out, err=err), out, err


class TestStreams:
    """Tests for stream conversion and failure handling."""

    def test_non_strict_skips_bad_line(self):
        """Test that a bad line is reported and skipped."""
        conv, out, err = make_converter(quiet=True)
        result = conv.run_stream("asm", io.StringIO(ASM_SOURCE))

        assert out.getvalue() == "0x00B81020\n0x8FA80004\n0x03E00008\n"
        assert result == StreamResult(converted=3, skipped=1)
        assert not result.ok
        assert "line 3: unknown instruction: bogus" in err.getvalue()

    def test_strict_aborts_on_bad_line(self):
        """Test that strict mode stops at the first failing line."""
        conv, out, err = make_converter(quiet=True, strict=True)
        with pytest.raises(SemanticError, match="line 3") as exc:
            conv.run_stream("asm", io.StringIO(ASM_SOURCE))

        assert exc.value.reason is ErrorReason.BAD_OP
        assert out.getvalue() == "0x00B81020\n0x8FA80004\n"

    def test_all_converted(self):
        """Test the aggregate result of a clean stream."""
        conv, out, _ = make_converter(quiet=True)
        result = conv.run_stream("disasm", io.StringIO("0x00B81020\n0x03E00008\n"))
        assert result.ok
        assert result.converted == 2
        assert out.getvalue() == "add $v0, $a1, $t8\njr $ra\n"

    def test_blank_and_comment_lines_ignored(self):
        """Test that lines without tokens are not units."""
        conv, out, _ = make_converter(quiet=True)
        source = "\n# header\n  \njr $ra  # return\n"
        result = conv.run_stream("asm", io.StringIO(source))
        assert result == StreamResult(converted=1, skipped=0)
        assert out.getvalue() == "0x03E00008\n"

    def test_word_lines_with_comments(self):
        """Test that trailing comments after word literals are dropped."""
        conv, out, _ = make_converter(quiet=True)
        result = conv.run_stream("disasm", io.StringIO("0x03E00008  # return\n"))
        assert result.ok
        assert out.getvalue() == "jr $ra\n"

    def test_binary_source_lines(self):
        """Test that byte lines are decoded and converted like text lines."""
        conv, out, _ = make_converter(quiet=True)
        result = conv.run_stream("asm", io.BytesIO(b"add $v0, $a1, $t8\r\n\njr $ra\n"))
        assert result == StreamResult(converted=2, skipped=0)
        assert out.getvalue() == "0x00B81020\n0x03E00008\n"

    def test_undecodable_line_skipped(self):
        """Test that a line with invalid UTF-8 is skipped and its neighbours convert."""
        conv, out, err = make_converter(quiet=True)
        source = io.BytesIO(b"0x00B81020\n0x\xff\xfe\n0x03E00008\n")
        result = conv.run_stream("disasm", source)

        assert out.getvalue() == "add $v0, $a1, $t8\njr $ra\n"
        assert result == StreamResult(converted=2, skipped=1)
        assert "line 2: line is not valid UTF-8 (byte 0xFF at offset 2)" in err.getvalue()

    def test_undecodable_line_strict(self):
        """Test that strict mode raises on a line with invalid UTF-8."""
        conv, out, _ = make_converter(quiet=True, strict=True)
        with pytest.raises(ParseError, match="line 2") as exc:
            conv.run_stream("asm", io.BytesIO(b"jr $ra\n\xc3(\njr $ra\n"))

        assert exc.value.reason is ErrorReason.BAD_ENCODING
        assert out.getvalue() == "0x03E00008\n"

    def test_decode_stream_verbose_view(self):
        """Test that decode writes the bitfield view per word."""
        conv, out, _ = make_converter()
        conv.run_stream("decode", io.StringIO("0x00B81020\n"))
        assert out.getvalue().startswith("hex:   0x00B81020\ntype:  R\n")

    def test_decode_then_encode(self):
        """Test that quiet decode output feeds encode."""
        conv, out, _ = make_converter(quiet=True)
        conv.run_stream("decode", io.StringIO("0x00B81020\n0x8FA80004\n0x0C000010\n"))
        compact = out.getvalue()

        conv2, out2, _ = make_converter(quiet=True)
        result = conv2.run_stream("encode", io.StringIO(compact))
        assert result.ok
        assert out2.getvalue() == "0x00B81020\n0x8FA80004\n0x0C000010\n"

    def test_bad_word_skipped(self):
        """Test that malformed word literals are skipped in decode."""
        conv, out, err = make_converter(quiet=True)
        result = conv.run_stream("decode", io.StringIO("0x00B8102\n0x00B81020\n"))
        assert result == StreamResult(converted=1, skipped=1)
        assert out.getvalue() == "R 0x05 0x18 0x02 0x00 0x20\n"
        assert "line 1" in err.getvalue()

    def test_strict_word_prefix(self):
        """Test that strict disasm rejects unprefixed words."""
        conv, _, _ = make_converter(strict=True)
        with pytest.raises(ParseError) as exc:
            conv.run_stream("disasm", io.StringIO("12058656\n"))
        assert exc.value.reason is ErrorReason.MISSING_PREFIX

    def test_unknown_instruction_warns(self):
        """Test that unknown words convert with a warning."""
        conv, out, err = make_converter()
        result = conv.run_stream("disasm", io.StringIO("0x04000000\n"))
        assert result.ok
        assert out.getvalue() == "0x04000000  .word  0x04000000\n"
        assert "mipsu: line 1: unknown instruction 0x04000000" in err.getvalue()

    def test_listing_and_presentation(self):
        """Test listing output with numeral registers and decimal immediates."""
        conv, out, _ = make_converter(nreg=True, dimm=True)
        conv.run_stream("asm", io.StringIO("addi $t0, $t0, -4\n"))
        assert out.getvalue() == "0x2108FFFC  addi   $8, $8, -4\n"

    def test_verbose_log(self):
        """Test that verbose progress goes to the error stream."""
        conv, _, err = make_converter(quiet=True, verbose=True)
        conv.run_stream("asm", io.StringIO("jr $ra\n"))
        assert "asm: 1 converted, 0 skipped" in err.getvalue()

    def test_unknown_command(self):
        """Test that unknown commands are usage errors."""
        conv, _, _ = make_converter()
        with pytest.raises(UsageError) as exc:
            conv.run_stream("frobnicate", io.StringIO(""))
        assert exc.value.reason is ErrorReason.UNKNOWN_CMD


class TestRawStreams:
    """Tests for binary word input and output."""

    def test_raw_asm_output(self):
        """Test that asm writes big-endian words."""
        conv, out, _ = make_converter(binary_out=True, raw=True)
        conv.run_stream("asm", io.StringIO("add $v0, $a1, $t8\njr $ra\n"))
        assert out.getvalue() == b"\x00\xb8\x10\x20\x03\xe0\x00\x08"

    def test_raw_little_endian(self):
        """Test the little-endian byte order."""
        conv, out, _ = make_converter(binary_out=True, raw=True, byteorder="little")
        conv.run_stream("encode", io.StringIO("J 0x02 0x0000010\n"))
        assert out.getvalue() == b"\x10\x00\x00\x08"

    def test_raw_disasm_input(self):
        """Test reading words and skipping a trailing partial word."""
        conv, out, err = make_converter(raw=True, quiet=True)
        data = b"\x00\xb8\x10\x20\x03\xe0\x00\x08\x00\x00"
        result = conv.run_stream("disasm", io.BytesIO(data))

        assert out.getvalue() == "add $v0, $a1, $t8\njr $ra\n"
        assert result == StreamResult(converted=2, skipped=1)
        assert "word 3: truncated word" in err.getvalue()

    def test_raw_strict_truncated(self):
        """Test that strict mode raises on a partial word."""
        conv, _, _ = make_converter(raw=True, strict=True)
        with pytest.raises(ParseError) as exc:
            conv.run_stream("decode", io.BytesIO(b"\x00\x00"))
        assert exc.value.reason is ErrorReason.TRUNCATED_WORD


class TestSingle:
    """Tests for single-unit conversion."""

    def test_asm_separate_tokens(self):
        """Test assembling from separate argument tokens."""
        conv, out, _ = make_converter(quiet=True)
        conv.run_single("asm", ["lw", "$t0,", "4($sp)"])
        assert out.getvalue() == "0x8FA80004\n"

    def test_asm_quoted_statement(self):
        """Test assembling from one quoted argument."""
        conv, out, _ = make_converter(quiet=True)
        conv.run_single("asm", ["lw $t0, 4($sp)"])
        assert out.getvalue() == "0x8FA80004\n"

    def test_encode_view(self):
        """Test that encode shows the bitfield view unless quiet."""
        conv, out, _ = make_converter()
        conv.run_single("encode", ["J", "0x02", "0x0000010"])
        assert "type:  J" in out.getvalue()
        assert "(j)" in out.getvalue()

    def test_disasm_too_many_args(self):
        """Test that disasm takes one word."""
        conv, _, _ = make_converter()
        with pytest.raises(UsageError) as exc:
            conv.run_single("disasm", ["0x00B81020", "0x00B81020"])
        assert exc.value.reason is ErrorReason.TOO_MANY_ARGS

    def test_error_propagates(self):
        """Test that single-unit failures raise without output."""
        conv, out, _ = make_converter()
        with pytest.raises(SemanticError):
            conv.run_single("asm", ["add", "$v0"])
        assert out.getvalue() == ""
