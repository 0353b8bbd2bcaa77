"""
Assembler / disassembler front end.

Single instructions go through assemble_line and disassemble_word. The
Converter runs the four commands (decode, encode, disasm, asm) over one unit
or a whole stream of units, one text line or one raw 4-byte word at a time.
"""

import struct
import sys
from dataclasses import dataclass
from typing import IO, Iterator, List, Tuple, Union

from .codec import Field, decode, encode, parse_fields
from .config import Options
from .errors import ErrorReason, MipsuError, ParseError, SemanticError, UsageError
from .instructions import get_instruction, lookup_field
from .operands import parse_operands, render_operands, render_unknown
from .parser import parse_word, strip_comments, tokenize_line
from .views import format_bitfields, format_compact, format_listing

COMMANDS = ("decode", "encode", "disasm", "asm")

# Commands reading words and commands producing words
WORD_INPUT = ("decode", "disasm")
WORD_OUTPUT = ("encode", "asm")

WORD_SIZE = 4


def assemble_line(tokens: List[str], strict: bool = False) -> Field:
    """
    Assemble one tokenized instruction.

    Args:
        tokens: Mnemonic followed by its operand tokens
        strict: Require "$" on registers and 0x/0b prefixes on literals

    Returns:
        The instruction's field

    Raises:
        SemanticError: Unknown mnemonic or operand mismatch
        ParseError, RangeError: Malformed or out-of-range literal
    """
    if not tokens:
        raise SemanticError("missing instruction", ErrorReason.BAD_OP)

    entry = get_instruction(tokens[0])
    if entry is None:
        raise SemanticError(f"unknown instruction: {tokens[0]}", ErrorReason.BAD_OP)

    return parse_operands(entry, tokens[1:], strict)


def disassemble_word(word: int, numeric_regs: bool = False, decimal_imm: bool = False) -> str:
    """
    Disassemble one word into instruction text.

    Words without a known instruction come back as a ".word" directive.

    Examples:
    - 0x00B81020 -> "add $v0, $a1, $t8"
    - 0x8FA80004 -> "lw $t0, 0x0004($sp)"
    - 0x0000000C -> "syscall"
    """
    field = decode(word)
    entry = lookup_field(field)
    if entry is None:
        return render_unknown(word)

    operands = render_operands(entry, field, numeric_regs, decimal_imm)
    if not operands:
        return entry.mnemonic
    return f"{entry.mnemonic} {operands}"


@dataclass
class StreamResult:
    """
    Aggregate outcome of a stream conversion.

    Attributes:
        converted: Units converted and written
        skipped: Units that failed and were skipped
    """

    converted: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.skipped == 0


Output = Union[str, bytes]


class Converter:
    """
    Runs conversion commands over single units or streams.

    Every unit is converted completely before anything is written, so a
    failing unit never leaves partial output behind.
    """

    def __init__(self, options: Options = None, out: IO = None, err: IO = None):
        """
        Initialize the converter.

        Args:
            options: Presentation and behavior toggles
            out: Output sink; text, or binary when raw words are written
            err: Sink for warnings and verbose progress (defaults to stderr)
        """
        self.options = options or Options()
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self._word_format = ">I" if self.options.byteorder == "big" else "<I"

    def log(self, message: str) -> None:
        """Print message if verbose mode is enabled."""
        if self.options.verbose:
            print(message, file=self.err)

    def warn(self, message: str) -> None:
        """Report a non-fatal problem."""
        print(f"mipsu: {message}", file=self.err)

    # -------------------------------------------------------------------------
    # Unit conversions
    # -------------------------------------------------------------------------

    def decode(self, word: int) -> str:
        """Render the bitfield view (or compact field list) of a word."""
        field = decode(word)
        if self.options.quiet:
            return format_compact(field)
        return format_bitfields(word, field, self.options.nreg)

    def disasm(self, word: int, location: str = None) -> str:
        """Render the instruction text (or listing line) of a word."""
        text = disassemble_word(word, self.options.nreg, self.options.dimm)
        if lookup_field(decode(word)) is None:
            where = f"{location}: " if location else ""
            self.warn(f"{where}unknown instruction 0x{word:08X}")
        if self.options.quiet:
            return text
        return format_listing(word, text)

    def encode(self, tokens: List[str]) -> int:
        """Encode a type letter and field literals into a word."""
        return encode(parse_fields(tokens, self.options.strict))

    def asm(self, tokens: List[str]) -> int:
        """Assemble an instruction into a word."""
        return encode(assemble_line(tokens, self.options.strict))

    def _present_word(self, command: str, word: int) -> Output:
        if self.options.raw:
            return struct.pack(self._word_format, word)
        if self.options.quiet:
            return f"0x{word:08X}"
        if command == "encode":
            return format_bitfields(word, decode(word), self.options.nreg)
        text = disassemble_word(word, self.options.nreg, self.options.dimm)
        return format_listing(word, text)

    def convert_text(self, command: str, text: str, location: str = None) -> Output:
        """
        Convert one textual unit.

        Args:
            command: One of COMMANDS
            text: A word literal (decode, disasm), field list (encode) or
                assembly statement (asm)
            location: Unit position used in warnings

        Returns:
            Text to write, or packed bytes for raw word output
        """
        if command in WORD_INPUT:
            word = parse_word(strip_comments(text).strip(), self.options.strict)
            return self.convert_word(command, word, location)

        tokens = tokenize_line(text)
        if command == "encode":
            word = self.encode(tokens)
        else:
            word = self.asm(tokens)
        return self._present_word(command, word)

    def convert_word(self, command: str, word: int, location: str = None) -> str:
        """Convert one already-parsed word for decode or disasm."""
        if command == "decode":
            return self.decode(word)
        return self.disasm(word, location)

    def _write(self, output: Output) -> None:
        if isinstance(output, bytes):
            self.out.write(output)
        else:
            self.out.write(output + "\n")

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def run_single(self, command: str, args: List[str]) -> None:
        """
        Convert the unit given on the command line.

        decode and disasm take exactly one word literal; encode and asm take
        their tokens either separately or as one quoted string.

        Raises:
            UsageError: Unknown command or too many arguments
            MipsuError: Conversion failure
        """
        _check_command(command)
        if command in WORD_INPUT and len(args) > 1:
            raise UsageError(
                f"{command} takes one word, got {len(args)} arguments",
                ErrorReason.TOO_MANY_ARGS,
            )
        self._write(self.convert_text(command, " ".join(args)))

    def run_stream(self, command: str, source: IO) -> StreamResult:
        """
        Convert every unit of a stream.

        In strict mode the first failing unit raises and nothing further is
        written; otherwise failing units are reported and skipped.

        Args:
            command: One of COMMANDS
            source: Stream of lines (text, or bytes decoded per line), or binary
                words in raw mode for decode/disasm

        Returns:
            StreamResult with converted and skipped counts
        """
        _check_command(command)
        result = StreamResult()
        raw = self._reads_raw(command)
        self.log(f"{command}: reading {'raw words' if raw else 'lines'}")

        for location, unit in self._read_units(raw, source):
            try:
                if raw:
                    output = self.convert_word(command, self._unpack(unit), location)
                else:
                    text = _decode_line(unit)
                    if not tokenize_line(text):
                        continue
                    output = self.convert_text(command, text, location)
            except MipsuError as e:
                error = e.at(location, None if raw else _show_line(unit))
                if self.options.strict:
                    raise error
                self.warn(str(error))
                result.skipped += 1
                continue

            self._write(output)
            result.converted += 1

        self.log(f"{command}: {result.converted} converted, {result.skipped} skipped")
        return result

    def _reads_raw(self, command: str) -> bool:
        return self.options.raw and command in WORD_INPUT

    def _read_units(self, raw: bool, source: IO) -> Iterator[Tuple[str, Union[str, bytes]]]:
        if raw:
            data = source.read()
            for offset in range(0, len(data), WORD_SIZE):
                yield f"word {offset // WORD_SIZE + 1}", data[offset:offset + WORD_SIZE]
            return

        # Binary sources yield undecoded lines so a bad byte only fails its own line
        for line_num, line in enumerate(source, start=1):
            yield f"line {line_num}", line

    def _unpack(self, chunk: bytes) -> int:
        if len(chunk) != WORD_SIZE:
            raise ParseError(
                f"truncated word: {len(chunk)} of {WORD_SIZE} bytes",
                ErrorReason.TRUNCATED_WORD,
            )
        return struct.unpack(self._word_format, chunk)[0]


def _decode_line(line: Union[str, bytes]) -> str:
    """Return a stream line as text without its line ending."""
    if isinstance(line, bytes):
        try:
            line = line.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(
                f"line is not valid UTF-8 (byte 0x{line[e.start]:02X} at offset {e.start})",
                ErrorReason.BAD_ENCODING,
            )
    return line.rstrip("\r\n")


def _show_line(line: Union[str, bytes]) -> str:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    return line.strip()


def _check_command(command: str) -> None:
    if command not in COMMANDS:
        raise UsageError(f"unknown command: {command}", ErrorReason.UNKNOWN_CMD)
