"""
Operand parsing and rendering, driven by operand format.

Each format lists its operands in textual order as (kind, field) pairs. The same
layout drives both directions, so every format that parses also renders back
to text that parses to the same field.
"""

from typing import Dict, List, Tuple

from .codec import ADDR_BITS, IMM_BITS, SH_BITS, Field, IField, JField, RField
from .errors import ErrorReason, SemanticError
from .instructions import InstructionType, OpEntry, OperandFormat
from .parser import parse_value
from .registers import parse_register, register_name

# Operand kinds
REG = "reg"
IMM = "imm"
SHAMT = "sh"
ADDR = "addr"

Layout = Tuple[Tuple[str, str], ...]

OPERAND_LAYOUTS: Dict[OperandFormat, Layout] = {
    OperandFormat.NONE: (),
    OperandFormat.RD_RS_RT: ((REG, "rd"), (REG, "rs"), (REG, "rt")),
    OperandFormat.RD_RT_SH: ((REG, "rd"), (REG, "rt"), (SHAMT, "sh")),
    OperandFormat.RD_RT_RS: ((REG, "rd"), (REG, "rt"), (REG, "rs")),
    OperandFormat.RS: ((REG, "rs"),),
    OperandFormat.RD: ((REG, "rd"),),
    OperandFormat.RS_RT: ((REG, "rs"), (REG, "rt")),
    OperandFormat.RD_RS: ((REG, "rd"), (REG, "rs")),
    OperandFormat.RT_RS_IMM: ((REG, "rt"), (REG, "rs"), (IMM, "imm")),
    OperandFormat.RT_IMM: ((REG, "rt"), (IMM, "imm")),
    OperandFormat.RT_IMM_RS: ((REG, "rt"), (IMM, "imm"), (REG, "rs")),
    OperandFormat.RS_RT_IMM: ((REG, "rs"), (REG, "rt"), (IMM, "imm")),
    OperandFormat.ADDR: ((ADDR, "addr"),),
}

_OPERAND_NAMES = {REG: "${}", IMM: "imm", SHAMT: "sh", ADDR: "addr"}


def _describe(layout: Layout) -> str:
    return ", ".join(_OPERAND_NAMES[kind].format(name) for kind, name in layout)


def _parse_operand(entry: OpEntry, kind: str, token: str, strict: bool) -> int:
    if kind == REG:
        return parse_register(token, strict)
    if kind == SHAMT:
        return parse_value(token, signed=False, bits=SH_BITS, strict=strict)
    if kind == ADDR:
        return parse_value(token, signed=False, bits=ADDR_BITS, strict=strict)
    value = parse_value(token, signed=entry.signed_imm, bits=IMM_BITS, strict=strict)
    # Unsigned immediates share the signed 16-bit storage of IField.imm
    if not entry.signed_imm and value & 0x8000:
        value -= 1 << IMM_BITS
    return value


def parse_operands(entry: OpEntry, tokens: List[str], strict: bool = False) -> Field:
    """
    Parse operand tokens for an instruction.

    Args:
        entry: Table entry of the instruction
        tokens: Operand tokens in textual order (mnemonic excluded)
        strict: Require "$" on registers and 0x/0b prefixes on literals

    Returns:
        The instruction's field

    Raises:
        SemanticError: Wrong operand count or bad register
        ParseError, RangeError: Malformed or out-of-range literal
    """
    layout = OPERAND_LAYOUTS[entry.format]
    if len(tokens) != len(layout):
        expected = _describe(layout) or "no operands"
        raise SemanticError(
            f"{entry.mnemonic} requires {len(layout)} operands ({expected}), got {len(tokens)}",
            ErrorReason.BAD_OPERAND_FORMAT,
        )

    parts = {
        name: _parse_operand(entry, kind, token, strict)
        for (kind, name), token in zip(layout, tokens)
    }

    if entry.type is InstructionType.R:
        return RField(fn=entry.code, **parts)
    if entry.type is InstructionType.J:
        return JField(op=entry.code, **parts)
    return IField(op=entry.code, **parts)


def _render_operand(entry: OpEntry, kind: str, value: int,
                    numeric_regs: bool, decimal_imm: bool) -> str:
    if kind == REG:
        return register_name(value, numeric_regs)
    if kind == SHAMT:
        return str(value) if decimal_imm else f"0x{value:02X}"
    if kind == ADDR:
        return str(value) if decimal_imm else f"0x{value:07X}"
    if not decimal_imm:
        return f"0x{value & 0xFFFF:04X}"
    return str(value if entry.signed_imm else value & 0xFFFF)


def render_operands(entry: OpEntry, field: Field,
                    numeric_regs: bool = False, decimal_imm: bool = False) -> str:
    """
    Render the operand text of a decoded instruction.

    Args:
        entry: Table entry of the instruction
        field: Decoded field
        numeric_regs: Write registers as $<n> instead of ABI names
        decimal_imm: Write immediates in decimal instead of exact-width hex

    Returns:
        Operand text, e.g. "$v0, $a1, $t8" or "$t0, 0x0004($sp)"
    """
    texts = [
        _render_operand(entry, kind, getattr(field, name), numeric_regs, decimal_imm)
        for kind, name in OPERAND_LAYOUTS[entry.format]
    ]
    if entry.format is OperandFormat.RT_IMM_RS:
        rt, imm, rs = texts
        return f"{rt}, {imm}({rs})"
    return ", ".join(texts)


def render_unknown(word: int) -> str:
    """Render a word with no known instruction as a data directive."""
    return f".word 0x{word:08X}"
