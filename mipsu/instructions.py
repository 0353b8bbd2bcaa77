"""
MIPS32 instruction definitions.

Two 64-slot tables map raw codes to instruction entries: OPCODE_TABLE is indexed
by the 6-bit primary opcode (I and J types) and FUNCTION_TABLE by the 6-bit
function code (R type, only meaningful under opcode 0). Unassigned slots hold
None so that decoding an arbitrary word never fails.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from enum import Enum, auto


class InstructionType(Enum):
    """MIPS32 instruction encoding layouts."""

    R = auto()  # Register operations, opcode 0
    I = auto()  # Immediate operations
    J = auto()  # Jumps, opcodes 2 and 3


class OperandFormat(Enum):
    """Operand count, kind and textual order of an operation."""

    NONE = auto()  # syscall
    RD_RS_RT = auto()  # add $rd, $rs, $rt
    RD_RT_SH = auto()  # sll $rd, $rt, sh
    RD_RT_RS = auto()  # sllv $rd, $rt, $rs
    RS = auto()  # jr $rs
    RD = auto()  # mfhi $rd
    RS_RT = auto()  # mult $rs, $rt
    RD_RS = auto()  # jalr $rd, $rs
    RT_RS_IMM = auto()  # addi $rt, $rs, imm
    RT_IMM = auto()  # lui $rt, imm
    RT_IMM_RS = auto()  # lw $rt, imm($rs)
    RS_RT_IMM = auto()  # beq $rs, $rt, imm
    ADDR = auto()  # j addr
    UNKNOWN = auto()  # lookup failed; never stored in a table


@dataclass(frozen=True)
class OpEntry:
    """
    Definition of a MIPS32 operation.

    Attributes:
        mnemonic: Assembly mnemonic
        format: Operand format
        type: Encoding layout
        code: Primary opcode (I/J) or function code (R)
        signed_imm: Whether the 16-bit immediate is two's complement
    """

    mnemonic: str
    format: OperandFormat
    type: InstructionType
    code: int
    signed_imm: bool = True


TABLE_SIZE = 64

# Primary opcode 0 defers to FUNCTION_TABLE
OPCODE_SPECIAL = 0
JUMP_OPCODES = (0x02, 0x03)


def _r(mnemonic: str, fmt: OperandFormat, code: int) -> OpEntry:
    return OpEntry(mnemonic, fmt, InstructionType.R, code)


def _i(mnemonic: str, fmt: OperandFormat, code: int, signed_imm: bool = True) -> OpEntry:
    return OpEntry(mnemonic, fmt, InstructionType.I, code, signed_imm)


def _j(mnemonic: str, code: int) -> OpEntry:
    return OpEntry(mnemonic, OperandFormat.ADDR, InstructionType.J, code)


F = OperandFormat

# =============================================================================
# R-Type Instructions (opcode 0), keyed by function code
# =============================================================================

_FUNCTIONS = [
    # Shifts
    _r("sll", F.RD_RT_SH, 0x00),
    _r("srl", F.RD_RT_SH, 0x02),
    _r("sra", F.RD_RT_SH, 0x03),
    _r("sllv", F.RD_RT_RS, 0x04),
    _r("srlv", F.RD_RT_RS, 0x06),
    _r("srav", F.RD_RT_RS, 0x07),
    # Register jumps
    _r("jr", F.RS, 0x08),
    _r("jalr", F.RD_RS, 0x09),
    # Traps
    _r("syscall", F.NONE, 0x0C),
    _r("break", F.NONE, 0x0D),
    # HI/LO moves
    _r("mfhi", F.RD, 0x10),
    _r("mthi", F.RS, 0x11),
    _r("mflo", F.RD, 0x12),
    _r("mtlo", F.RS, 0x13),
    # Multiply / divide
    _r("mult", F.RS_RT, 0x18),
    _r("multu", F.RS_RT, 0x19),
    _r("div", F.RS_RT, 0x1A),
    _r("divu", F.RS_RT, 0x1B),
    # Arithmetic / logic
    _r("add", F.RD_RS_RT, 0x20),
    _r("addu", F.RD_RS_RT, 0x21),
    _r("sub", F.RD_RS_RT, 0x22),
    _r("subu", F.RD_RS_RT, 0x23),
    _r("and", F.RD_RS_RT, 0x24),
    _r("or", F.RD_RS_RT, 0x25),
    _r("xor", F.RD_RS_RT, 0x26),
    _r("nor", F.RD_RS_RT, 0x27),
    _r("slt", F.RD_RS_RT, 0x2A),
    _r("sltu", F.RD_RS_RT, 0x2B),
]

# =============================================================================
# I-Type and J-Type Instructions, keyed by primary opcode
# =============================================================================

_OPCODES = [
    # Jumps
    _j("j", 0x02),
    _j("jal", 0x03),
    # Branches
    _i("beq", F.RS_RT_IMM, 0x04),
    _i("bne", F.RS_RT_IMM, 0x05),
    # Immediate arithmetic / logic (logical immediates are zero-extended)
    _i("addi", F.RT_RS_IMM, 0x08),
    _i("addiu", F.RT_RS_IMM, 0x09),
    _i("slti", F.RT_RS_IMM, 0x0A),
    _i("sltiu", F.RT_RS_IMM, 0x0B),
    _i("andi", F.RT_RS_IMM, 0x0C, signed_imm=False),
    _i("ori", F.RT_RS_IMM, 0x0D, signed_imm=False),
    _i("xori", F.RT_RS_IMM, 0x0E, signed_imm=False),
    _i("lui", F.RT_IMM, 0x0F, signed_imm=False),
    # Loads
    _i("lb", F.RT_IMM_RS, 0x20),
    _i("lh", F.RT_IMM_RS, 0x21),
    _i("lw", F.RT_IMM_RS, 0x23),
    _i("lbu", F.RT_IMM_RS, 0x24),
    _i("lhu", F.RT_IMM_RS, 0x25),
    # Stores
    _i("sb", F.RT_IMM_RS, 0x28),
    _i("sh", F.RT_IMM_RS, 0x29),
    _i("sw", F.RT_IMM_RS, 0x2B),
]

del F


def _build_table(entries) -> Tuple[Optional[OpEntry], ...]:
    table = [None] * TABLE_SIZE
    for entry in entries:
        table[entry.code] = entry
    return tuple(table)


OPCODE_TABLE = _build_table(_OPCODES)
FUNCTION_TABLE = _build_table(_FUNCTIONS)

# Compact lists of assigned codes; empty slots never take part in mnemonic lookup
ASSIGNED_OPCODES = tuple(entry.code for entry in _OPCODES)
ASSIGNED_FUNCTIONS = tuple(entry.code for entry in _FUNCTIONS)

_BY_MNEMONIC: Dict[str, OpEntry] = {}
for _code in ASSIGNED_OPCODES:
    _BY_MNEMONIC[OPCODE_TABLE[_code].mnemonic] = OPCODE_TABLE[_code]
for _code in ASSIGNED_FUNCTIONS:
    _BY_MNEMONIC[FUNCTION_TABLE[_code].mnemonic] = FUNCTION_TABLE[_code]
del _code


def get_instruction(mnemonic: str) -> Optional[OpEntry]:
    """
    Look up an instruction by mnemonic.

    Args:
        mnemonic: Instruction mnemonic (case-insensitive)

    Returns:
        OpEntry if found, None otherwise
    """
    return _BY_MNEMONIC.get(mnemonic.lower())


def lookup_field(field) -> Optional[OpEntry]:
    """Resolve a decoded field to its table entry, or None if unassigned."""
    if field.type is InstructionType.R:
        return FUNCTION_TABLE[field.fn]
    return OPCODE_TABLE[field.op]


def format_of(field) -> OperandFormat:
    """Get the operand format of a decoded field."""
    entry = lookup_field(field)
    return entry.format if entry is not None else OperandFormat.UNKNOWN


def type_of_opcode(op: int) -> InstructionType:
    """Get the encoding layout selected by a primary opcode."""
    if op == OPCODE_SPECIAL:
        return InstructionType.R
    if op in JUMP_OPCODES:
        return InstructionType.J
    return InstructionType.I


def get_all_mnemonics() -> list:
    """Get a list of all supported instruction mnemonics."""
    return list(_BY_MNEMONIC.keys())
