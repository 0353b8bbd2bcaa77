"""
MIPS32 general purpose register definitions.

Registers can be written by ABI name ($zero, $a1, $ra) or by numeral ($0, $5, $31).
"""

from collections import namedtuple

from .errors import ErrorReason, SemanticError

RegisterEntry = namedtuple("RegisterEntry", ["name", "num"])

# Register number to (ABI name, numeral)
REGISTERS = tuple(
    RegisterEntry(name, str(num))
    for num, name in enumerate(
        [
            "zero", "at", "v0", "v1", "a0", "a1", "a2", "a3",
            "t0", "t1", "t2", "t3", "t4", "t5", "t6", "t7",
            "s0", "s1", "s2", "s3", "s4", "s5", "s6", "s7",
            "t8", "t9", "k0", "k1", "gp", "sp", "fp", "ra",
        ]
    )
)

# Reverse mappings; names and numerals never collide
_BY_NAME = {entry.name: num for num, entry in enumerate(REGISTERS)}
_BY_NUM = {entry.num: num for num, entry in enumerate(REGISTERS)}


def parse_register(token: str, strict: bool = False) -> int:
    """
    Parse a register token and return its number.

    Args:
        token: Register text (e.g. "$t0", "t0", "$8")
        strict: Require the leading "$"

    Returns:
        Register number (0-31)

    Raises:
        SemanticError: If the register is invalid
    """
    text = token.strip()
    if text.startswith("$"):
        text = text[1:]
    elif strict:
        raise SemanticError(
            f"register {token!r} must start with '$'", ErrorReason.BAD_REGISTER
        )

    text = text.lower()
    if text in _BY_NAME:
        return _BY_NAME[text]
    if text in _BY_NUM:
        return _BY_NUM[text]
    raise SemanticError(f"invalid register: {token}", ErrorReason.BAD_REGISTER)


def register_name(num: int, numeric: bool = False) -> str:
    """
    Get the assembly text for a register number.

    Args:
        num: Register number (0-31)
        numeric: If True, return "$<n>"; otherwise the ABI name

    Returns:
        Register text including the "$" sigil
    """
    entry = REGISTERS[num]
    return "$" + (entry.num if numeric else entry.name)
