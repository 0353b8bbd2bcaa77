"""
Tests for single-instruction assembly, disassembly and text views.
"""

import pytest
import sys
import os

# Add repository root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from mipsu.assembler import assemble_line, disassemble_word
from mipsu.codec import RField, decode, encode, parse_fields
from mipsu.errors import ErrorReason, SemanticError
from mipsu.instructions import get_all_mnemonics, get_instruction
from mipsu.operands import OPERAND_LAYOUTS
from mipsu.parser import tokenize_line
from mipsu.views import format_bitfields, format_compact, format_listing


# One sample operand token per kind, chosen to exercise every field
SAMPLE_OPERANDS = {
    "reg": ["$a1", "$t8", "$v0"],
    "imm": ["-4"],
    "sh": ["0x1F"],
    "addr": ["0x3FFFFFF"],
}


def _sample_tokens(mnemonic):
    entry = get_instruction(mnemonic)
    regs = iter(SAMPLE_OPERANDS["reg"])
    tokens = [mnemonic]
    for kind, _ in OPERAND_LAYOUTS[entry.format]:
        if kind == "reg":
            tokens.append(next(regs))
        elif kind == "imm" and not entry.signed_imm:
            tokens.append("0xFFFC")
        else:
            tokens.append(SAMPLE_OPERANDS[kind][0])
    return tokens


class TestScenarios:
    """End-to-end checks on add $v0, $a1, $t8."""

    def test_decode(self):
        """Test decoding the word."""
        assert decode(0x00B81020) == RField(rs=5, rt=24, rd=2, sh=0, fn=0x20)

    def test_encode(self):
        """Test encoding the field."""
        assert encode(RField(rs=5, rt=24, rd=2, sh=0, fn=0x20)) == 0x00B81020

    def test_disassemble(self):
        """Test disassembling with names and numerals."""
        assert disassemble_word(0x00B81020) == "add $v0, $a1, $t8"
        assert disassemble_word(0x00B81020, numeric_regs=True) == "add $2, $5, $24"

    def test_assemble(self):
        """Test assembling the tokens."""
        assert assemble_line(["add", "$v0", "$a1", "$t8"]) == decode(0x00B81020)


class TestAssembleLine:
    """Tests for assemble_line function."""

    @pytest.mark.parametrize("line,word", [
        ("lw $t0, 4($sp)", 0x8FA80004),
        ("addi $t0, $t0, -4", 0x2108FFFC),
        ("sll $t0, $t1, 4", 0x00094100),
        ("ori $t0, $zero, 0xFFFF", 0x3408FFFF),
        ("lui $at, 0x1001", 0x3C011001),
        ("beq $t0, $t1, -1", 0x1109FFFF),
        ("jr $ra", 0x03E00008),
        ("j 16", 0x08000010),
        ("syscall", 0x0000000C),
        ("ADD $V0, $A1, $T8", 0x00B81020),
    ])
    def test_known_encodings(self, line, word):
        """Test instructions against hand-assembled words."""
        assert encode(assemble_line(tokenize_line(line))) == word

    def test_unknown_mnemonic(self):
        """Test that untabulated mnemonics fail."""
        with pytest.raises(SemanticError, match="unknown instruction: nop") as exc:
            assemble_line(["nop"])
        assert exc.value.reason is ErrorReason.BAD_OP

    def test_empty(self):
        """Test that an empty statement fails."""
        with pytest.raises(SemanticError):
            assemble_line([])


class TestRoundTrip:
    """Tests for assemble/disassemble symmetry over the whole table."""

    @pytest.mark.parametrize("mnemonic", sorted(get_all_mnemonics()))
    @pytest.mark.parametrize("numeric_regs", [False, True])
    @pytest.mark.parametrize("decimal_imm", [False, True])
    def test_every_mnemonic(self, mnemonic, numeric_regs, decimal_imm):
        """Test that disassembly re-assembles to the same field."""
        field = assemble_line(_sample_tokens(mnemonic))
        text = disassemble_word(encode(field), numeric_regs, decimal_imm)
        assert text.split()[0] == mnemonic
        assert assemble_line(tokenize_line(text)) == field

    def test_unknown_words(self):
        """Test the .word fallback for unassigned codes."""
        assert disassemble_word(0x04000000) == ".word 0x04000000"
        assert disassemble_word(0x00000001) == ".word 0x00000001"


class TestViews:
    """Tests for bitfield, compact and listing views."""

    def test_bitfields_r(self):
        """Test the R-type bitfield view."""
        expected = "\n".join([
            "hex:   0x00B81020",
            "type:  R",
            "--------",
            "rs:  0x05  ($a1)",
            "rt:  0x18  ($t8)",
            "rd:  0x02  ($v0)",
            "sh:  0x00  (0)",
            "fn:  0x20  (add)",
        ])
        assert format_bitfields(0x00B81020, decode(0x00B81020)) == expected

    def test_bitfields_i(self):
        """Test the I-type bitfield view with a negative immediate."""
        view = format_bitfields(0x2108FFFC, decode(0x2108FFFC), numeric_regs=True)
        assert "type:  I" in view
        assert "op:   0x08    (addi)" in view
        assert "rs:   0x08    ($8)" in view
        assert "imm:  0xFFFC  (-4)" in view

    def test_bitfields_j(self):
        """Test the J-type bitfield view."""
        view = format_bitfields(0x0C000010, decode(0x0C000010))
        assert "op:    0x03      (jal)" in view
        assert "addr:  0x00000010  (16)" in view

    def test_bitfields_unknown(self):
        """Test that unknown codes show a question mark."""
        assert "fn:  0x01  (?)" in format_bitfields(1, decode(1))

    @pytest.mark.parametrize("word", [0x00B81020, 0x2108FFFC, 0x0C000010, 0xFFFFFFFF])
    def test_compact_feeds_encode(self, word):
        """Test that the compact view parses back through parse_fields."""
        text = format_compact(decode(word))
        assert encode(parse_fields(text.split(), strict=True)) == word

    def test_compact_r(self):
        """Test the compact R-type text."""
        assert format_compact(decode(0x00B81020)) == "R 0x05 0x18 0x02 0x00 0x20"

    def test_listing(self):
        """Test listing column alignment."""
        assert format_listing(0x00B81020, "add $v0, $a1, $t8") == "0x00B81020  add    $v0, $a1, $t8"
        assert format_listing(0x0000000C, "syscall") == "0x0000000C  syscall"
