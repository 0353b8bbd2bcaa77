"""
mipsu - MIPS32 utilities.

Decodes, encodes, disassembles and assembles single MIPS32 instruction words.
"""

__version__ = "1.0.0"

from .assembler import Converter, StreamResult, assemble_line, disassemble_word
from .codec import IField, JField, RField, decode, encode
from .config import Options
from .errors import (
    ConfigError,
    ErrorReason,
    MipsuError,
    ParseError,
    RangeError,
    SemanticError,
    UsageError,
)
from .parser import parse_value, parse_word
from .registers import parse_register

__all__ = [
    "Converter",
    "StreamResult",
    "assemble_line",
    "disassemble_word",
    "RField",
    "IField",
    "JField",
    "decode",
    "encode",
    "Options",
    "MipsuError",
    "UsageError",
    "ConfigError",
    "ParseError",
    "SemanticError",
    "RangeError",
    "ErrorReason",
    "parse_value",
    "parse_word",
    "parse_register",
]
