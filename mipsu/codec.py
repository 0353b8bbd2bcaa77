"""
MIPS32 field model and word codec.

A Field is the decoded form of a word, one dataclass per encoding layout:

    R: [op(6)=0 | rs(5) | rt(5) | rd(5) | sh(5) | fn(6)]
    I: [op(6)   | rs(5) | rt(5) | imm(16)             ]
    J: [op(6)   | addr(26)                            ]

The layout is fully determined by op (0 -> R, 2/3 -> J, anything else -> I).
"""

from dataclasses import dataclass
from typing import List, Union

from .errors import ErrorReason, SemanticError
from .instructions import InstructionType, type_of_opcode
from .parser import parse_value, sign_extend

WORD_MASK = 0xFFFFFFFF

OP_BITS = 6
REG_BITS = 5
SH_BITS = 5
FN_BITS = 6
IMM_BITS = 16
ADDR_BITS = 26


@dataclass(frozen=True)
class RField:
    """Register-type field; the opcode is always 0."""

    rs: int = 0
    rt: int = 0
    rd: int = 0
    sh: int = 0
    fn: int = 0

    @property
    def op(self) -> int:
        return 0

    @property
    def type(self) -> InstructionType:
        return InstructionType.R


@dataclass(frozen=True)
class IField:
    """Immediate-type field; imm is a signed 16-bit value."""

    op: int
    rs: int = 0
    rt: int = 0
    imm: int = 0

    @property
    def type(self) -> InstructionType:
        return InstructionType.I


@dataclass(frozen=True)
class JField:
    """Jump-type field; addr is the unsigned 26-bit target."""

    op: int
    addr: int = 0

    @property
    def type(self) -> InstructionType:
        return InstructionType.J


Field = Union[RField, IField, JField]


def decode(word: int) -> Field:
    """
    Decode a 32-bit word into its field representation.

    Never fails: every 32-bit pattern has a layout, even if its opcode or
    function code is not a known instruction.
    """
    word &= WORD_MASK
    op = (word >> 26) & 0x3F
    kind = type_of_opcode(op)

    if kind is InstructionType.R:
        return RField(
            rs=(word >> 21) & 0x1F,
            rt=(word >> 16) & 0x1F,
            rd=(word >> 11) & 0x1F,
            sh=(word >> 6) & 0x1F,
            fn=word & 0x3F,
        )
    if kind is InstructionType.J:
        return JField(op=op, addr=word & 0x03FFFFFF)
    return IField(
        op=op,
        rs=(word >> 21) & 0x1F,
        rt=(word >> 16) & 0x1F,
        imm=sign_extend(word & 0xFFFF, IMM_BITS),
    )


def encode_r_type(field: RField) -> int:
    """
    Encode an R-type field.

    Format: [op(6)=0 | rs(5) | rt(5) | rd(5) | sh(5) | fn(6)]
    """
    encoding = field.fn & 0x3F
    encoding |= (field.sh & 0x1F) << 6
    encoding |= (field.rd & 0x1F) << 11
    encoding |= (field.rt & 0x1F) << 16
    encoding |= (field.rs & 0x1F) << 21
    return encoding


def encode_i_type(field: IField) -> int:
    """
    Encode an I-type field.

    Format: [op(6) | rs(5) | rt(5) | imm(16)]
    """
    encoding = field.imm & 0xFFFF
    encoding |= (field.rt & 0x1F) << 16
    encoding |= (field.rs & 0x1F) << 21
    encoding |= (field.op & 0x3F) << 26
    return encoding


def encode_j_type(field: JField) -> int:
    """
    Encode a J-type field.

    Format: [op(6) | addr(26)]
    """
    encoding = field.addr & 0x03FFFFFF
    encoding |= (field.op & 0x3F) << 26
    return encoding


def encode(field: Field) -> int:
    """
    Encode a field into a 32-bit word.

    Each component is masked to its declared width; ranges are not checked
    here, so decode(encode(f)) == f only for fields built from validated
    components.
    """
    if isinstance(field, RField):
        return encode_r_type(field)
    elif isinstance(field, IField):
        return encode_i_type(field)
    elif isinstance(field, JField):
        return encode_j_type(field)
    raise TypeError(f"not an instruction field: {field!r}")


# Literal layout of each type for the encode command: (name, bits, signed)
FIELD_LAYOUTS = {
    InstructionType.R: (
        ("rs", REG_BITS, False),
        ("rt", REG_BITS, False),
        ("rd", REG_BITS, False),
        ("sh", SH_BITS, False),
        ("fn", FN_BITS, False),
    ),
    InstructionType.I: (
        ("op", OP_BITS, False),
        ("rs", REG_BITS, False),
        ("rt", REG_BITS, False),
        ("imm", IMM_BITS, True),
    ),
    InstructionType.J: (
        ("op", OP_BITS, False),
        ("addr", ADDR_BITS, False),
    ),
}

_FIELD_CLASSES = {
    InstructionType.R: RField,
    InstructionType.I: IField,
    InstructionType.J: JField,
}


def parse_fields(tokens: List[str], strict: bool = False) -> Field:
    """
    Build a field from a type letter and its component literals.

    Examples:
    - ["R", "0x05", "0x18", "0x02", "0x00", "0x20"] -> RField(5, 24, 2, 0, 32)
    - ["i", "0x08", "0x05", "0x02", "-4"] -> IField(8, 5, 2, -4)
    - ["j", "0x02", "0x0000010"] -> JField(2, 16)

    Raises:
        SemanticError: Unknown type, wrong literal count, or an opcode that
            belongs to a different layout
        ParseError, RangeError: From the literal parser
    """
    if not tokens:
        raise SemanticError("missing instruction type", ErrorReason.BAD_TYPE)

    try:
        kind = InstructionType[tokens[0].upper()]
    except KeyError:
        raise SemanticError(
            f"unknown instruction type: {tokens[0]} (expected R, I or J)",
            ErrorReason.BAD_TYPE,
        )

    layout = FIELD_LAYOUTS[kind]
    values = tokens[1:]
    if len(values) != len(layout):
        names = " ".join(name for name, _, _ in layout)
        raise SemanticError(
            f"{kind.name}-type requires {len(layout)} fields ({names}), got {len(values)}",
            ErrorReason.BAD_FIELD_COUNT,
        )

    parts = {
        name: parse_value(value, signed, bits, strict)
        for (name, bits, signed), value in zip(layout, values)
    }

    if "op" in parts and type_of_opcode(parts["op"]) is not kind:
        raise SemanticError(
            f"opcode 0x{parts['op']:02X} is not a {kind.name}-type opcode",
            ErrorReason.BAD_OP,
        )

    return _FIELD_CLASSES[kind](**parts)
