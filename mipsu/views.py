"""
Text views of decoded instructions.

- Bitfield view: one labelled line per field, as printed by ``decode``
- Compact field list: the single-line form ``encode`` reads back
- Listing line: word and instruction text side by side
"""

from .codec import Field, IField, JField, RField
from .instructions import FUNCTION_TABLE, OPCODE_TABLE
from .registers import register_name

MNEMONIC_WIDTH = 6


def _mnemonic(entry) -> str:
    return entry.mnemonic if entry is not None else "?"


def format_bitfields(word: int, field: Field, numeric_regs: bool = False) -> str:
    """
    Format the bitfield view of a word.

    Example:
        hex:   0x00B81020
        type:  R
        --------
        rs:  0x05  ($a1)
        rt:  0x18  ($t8)
        rd:  0x02  ($v0)
        sh:  0x00  (0)
        fn:  0x20  (add)
    """
    lines = [f"hex:   0x{word:08X}", f"type:  {field.type.name}", "--------"]

    def reg(num: int) -> str:
        return register_name(num, numeric_regs)

    if isinstance(field, RField):
        lines.append(f"rs:  0x{field.rs:02X}  ({reg(field.rs)})")
        lines.append(f"rt:  0x{field.rt:02X}  ({reg(field.rt)})")
        lines.append(f"rd:  0x{field.rd:02X}  ({reg(field.rd)})")
        lines.append(f"sh:  0x{field.sh:02X}  ({field.sh})")
        lines.append(f"fn:  0x{field.fn:02X}  ({_mnemonic(FUNCTION_TABLE[field.fn])})")
    elif isinstance(field, IField):
        lines.append(f"op:   0x{field.op:02X}    ({_mnemonic(OPCODE_TABLE[field.op])})")
        lines.append(f"rs:   0x{field.rs:02X}    ({reg(field.rs)})")
        lines.append(f"rt:   0x{field.rt:02X}    ({reg(field.rt)})")
        lines.append(f"imm:  0x{field.imm & 0xFFFF:04X}  ({field.imm})")
    else:
        lines.append(f"op:    0x{field.op:02X}      ({_mnemonic(OPCODE_TABLE[field.op])})")
        lines.append(f"addr:  0x{field.addr:08X}  ({field.addr})")

    return "\n".join(lines)


def format_compact(field: Field) -> str:
    """
    Format a field as a type letter plus exact-width hex literals.

    The output is accepted unchanged by codec.parse_fields.
    """
    if isinstance(field, RField):
        parts = [f"0x{field.rs:02X}", f"0x{field.rt:02X}", f"0x{field.rd:02X}",
                 f"0x{field.sh:02X}", f"0x{field.fn:02X}"]
    elif isinstance(field, IField):
        parts = [f"0x{field.op:02X}", f"0x{field.rs:02X}", f"0x{field.rt:02X}",
                 f"0x{field.imm & 0xFFFF:04X}"]
    elif isinstance(field, JField):
        parts = [f"0x{field.op:02X}", f"0x{field.addr:07X}"]
    else:
        raise TypeError(f"not an instruction field: {field!r}")
    return " ".join([field.type.name] + parts)


def format_listing(word: int, text: str) -> str:
    """
    Format a listing line: the word followed by the column-aligned instruction.

    Example: "0x00B81020  add    $v0, $a1, $t8"
    """
    mnemonic, _, operands = text.partition(" ")
    if not operands:
        return f"0x{word:08X}  {mnemonic}"
    return f"0x{word:08X}  {mnemonic:<{MNEMONIC_WIDTH}} {operands}"
