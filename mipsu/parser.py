"""
Numeric literal and source line parsing.

Literals come in three radices:

- Decimal: 123, -45 (no prefix; a lone 0 is decimal zero)
- Hexadecimal: 0x1A2B, 0X1a2b (exactly ceil(bits / 4) hexits)
- Binary: 0b0101, 0B0101 (exactly ``bits`` digits)

Hex and binary literals must fill their field exactly so that a value can never
be silently truncated. They denote a bit pattern, read as two's complement when
the field is signed.
"""

import re
from typing import List

from .errors import ErrorReason, ParseError, RangeError

WORD_BITS = 32

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
BIN_DIGITS = frozenset("01")


def sign_extend(value: int, bits: int) -> int:
    """Read the low ``bits`` bits of value as a two's complement number."""
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        return value - (1 << bits)
    return value


def value_bounds(signed: bool, bits: int) -> tuple:
    """Return the inclusive (min, max) a field of ``bits`` bits can hold."""
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def check_range(value: int, signed: bool, bits: int, token: str = None) -> int:
    """
    Check that a value fits a signed or unsigned field.

    Raises:
        RangeError: NEGATIVE for a negative value in an unsigned field,
            OVERFLOW / UNDERFLOW when the magnitude exceeds the field.
    """
    shown = token if token is not None else str(value)
    min_val, max_val = value_bounds(signed, bits)
    if value < 0 and not signed:
        raise RangeError(
            f"negative value {shown} for unsigned {bits}-bit field",
            ErrorReason.NEGATIVE,
        )
    if value > max_val:
        raise RangeError(
            f"value {shown} out of range [{min_val}, {max_val}] for {bits}-bit field",
            ErrorReason.OVERFLOW,
        )
    if value < min_val:
        raise RangeError(
            f"value {shown} out of range [{min_val}, {max_val}] for {bits}-bit field",
            ErrorReason.UNDERFLOW,
        )
    return value


def _parse_pattern(
    token: str,
    digits: str,
    alphabet: frozenset,
    base: int,
    expected: int,
    bits: int,
    reasons: tuple,
) -> int:
    """Parse the digits of an exact-width hex or binary literal."""
    bad, too_short, too_long = reasons
    name = "hex" if base == 16 else "binary"

    if any(c not in alphabet for c in digits):
        raise ParseError(f"invalid {name} literal: {token}", bad)
    if len(digits) < expected:
        raise ParseError(
            f"{name} literal {token} has {len(digits)} digits, expected {expected}",
            too_short,
        )
    if len(digits) > expected:
        raise ParseError(
            f"{name} literal {token} has {len(digits)} digits, expected {expected}",
            too_long,
        )

    value = int(digits, base)
    # A hexit count rounded up can still carry bits above the field
    if value >> bits:
        raise RangeError(
            f"{name} literal {token} does not fit a {bits}-bit field",
            ErrorReason.OVERFLOW,
        )
    return value


def parse_value(token: str, signed: bool, bits: int, strict: bool = False) -> int:
    """
    Parse a numeric literal for a field of ``bits`` bits.

    Args:
        token: Literal text (surrounding whitespace is ignored)
        signed: Whether the field holds a two's complement value
        bits: Field width
        strict: Require an explicit 0x / 0b prefix

    Returns:
        Integer value, negative only for signed fields

    Raises:
        ParseError: Malformed literal
        RangeError: Well-formed literal outside the field's bound
    """
    token = token.strip()

    if token[:1] == "0" and len(token) > 1:
        marker = token[1]
        if marker in "xX":
            value = _parse_pattern(
                token, token[2:], HEX_DIGITS, 16, -(-bits // 4), bits,
                (ErrorReason.BAD_HEX, ErrorReason.HEX_TOO_SHORT, ErrorReason.HEX_TOO_LONG),
            )
        elif marker in "bB":
            value = _parse_pattern(
                token, token[2:], BIN_DIGITS, 2, bits, bits,
                (ErrorReason.BAD_BIN, ErrorReason.BIN_TOO_SHORT, ErrorReason.BIN_TOO_LONG),
            )
        else:
            raise ParseError(f"unsupported radix in literal: {token}", ErrorReason.BAD_RADIX)
        return sign_extend(value, bits) if signed else value

    if strict:
        raise ParseError(
            f"literal {token!r} needs an explicit 0x or 0b prefix",
            ErrorReason.MISSING_PREFIX,
        )

    digits = token[1:] if token.startswith("-") else token
    if not digits or not digits.isascii() or not digits.isdigit():
        raise ParseError(f"invalid decimal literal: {token!r}", ErrorReason.BAD_DECIMAL)
    if len(digits) > 1 and digits[0] == "0":
        raise ParseError(f"unsupported radix in literal: {token}", ErrorReason.BAD_RADIX)

    return check_range(int(token, 10), signed, bits, token)


def parse_word(token: str, strict: bool = False) -> int:
    """Parse a 32-bit unsigned instruction word literal."""
    return parse_value(token, signed=False, bits=WORD_BITS, strict=strict)


_COMMENT = re.compile(r"#|//")


def strip_comments(line: str) -> str:
    """Cut a line at its first "#" or "//" comment marker."""
    match = _COMMENT.search(line)
    return line[:match.start()] if match else line


_SEPARATORS = re.compile(r"[\s,()]+")


def tokenize_line(line: str) -> List[str]:
    """
    Split a source line into tokens.

    Commas and parentheses separate tokens just like whitespace, so
    "lw $t0, 4($sp)" yields ["lw", "$t0", "4", "$sp"].
    """
    return [tok for tok in _SEPARATORS.split(strip_comments(line)) if tok]
