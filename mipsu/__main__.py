#!/usr/bin/env python3
"""
mipsu - MIPS32 utilities, command line interface

Usage:
    python3 -m mipsu decode 0x00B81020
    python3 -m mipsu disasm -i program.hex
    python3 -m mipsu asm 'lw $t0, 4($sp)' -q
    python3 -m mipsu encode R 0x05 0x18 0x02 0x00 0x20
"""

import argparse
import sys

from . import __version__
from .assembler import COMMANDS, WORD_OUTPUT, Converter
from .config import VALID_BYTEORDERS, load_config
from .errors import ConfigError, ErrorReason, MipsuError, UsageError

# Exit codes
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_PARSE = 2
EXIT_INTERNAL = 3


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser reporting bad usage with the usage exit code."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"mipsu: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="mipsu",
        description="MIPS32 instruction decoder, encoder, disassembler and assembler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
commands:
  decode  Show the bitfields of instruction words
  encode  Build instruction words from bitfields
  disasm  Disassemble instruction words
  asm     Assemble instructions

Without arguments a command converts every line of --input (or stdin).

Examples:
  %(prog)s decode 0x00B81020
  %(prog)s encode I 0x23 0x1D 0x08 0x0004
  %(prog)s disasm -q < program.hex
  %(prog)s asm 'addi $t0, $t0, -4'
        """,
    )

    parser.add_argument("command", type=str, help="One of: " + ", ".join(COMMANDS))
    parser.add_argument("args", nargs="*", help="Single unit to convert")

    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Print only the converted value")
    parser.add_argument("-n", "--nreg", action="store_true",
                        help="Print registers as numerals ($5) instead of names ($a1)")
    parser.add_argument("-d", "--dimm", action="store_true",
                        help="Print immediates in decimal")
    parser.add_argument("-s", "--strict", action="store_true",
                        help="Require explicit prefixes and stop at the first error")
    parser.add_argument("-r", "--raw", action="store_true",
                        help="Read or write binary 4-byte words")
    parser.add_argument("--byteorder", choices=VALID_BYTEORDERS,
                        help="Byte order of raw words (default: big)")
    parser.add_argument("-i", "--input", type=str,
                        help="Input file. If not specified, reads stdin.")
    parser.add_argument("-o", "--output", type=str,
                        help="Output file. If not specified, prints to stdout.")
    parser.add_argument("-c", "--config", type=str,
                        help="YAML configuration file (default: $MIPSU_CONFIG)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def _open(path, mode, default):
    """Open a file, or fall back to a standard stream when no path is given."""
    if path is None:
        return default, False
    try:
        return open(path, mode), True
    except OSError as e:
        raise UsageError(f"cannot open {path}: {e.strerror}")


def run(args, options) -> int:
    """Run one command with resolved options and return the exit code."""
    if args.command not in COMMANDS:
        raise UsageError(f"unknown command: {args.command}", ErrorReason.UNKNOWN_CMD)
    if args.args and args.input:
        raise UsageError("give either arguments or --input, not both", ErrorReason.TOO_MANY_ARGS)

    raw_out = options.raw and args.command in WORD_OUTPUT

    out, close_out = _open(
        args.output, "wb" if raw_out else "w", sys.stdout.buffer if raw_out else sys.stdout
    )
    try:
        converter = Converter(options, out=out)

        if args.args:
            converter.run_single(args.command, args.args)
            return EXIT_OK

        # Lines are decoded one at a time by the converter
        source, close_in = _open(args.input, "rb", sys.stdin.buffer)
        try:
            result = converter.run_stream(args.command, source)
        finally:
            if close_in:
                source.close()
    finally:
        if close_out:
            out.close()
        else:
            out.flush()

    if not result.ok:
        total = result.converted + result.skipped
        print(f"mipsu: {result.skipped} of {total} units skipped", file=sys.stderr)
        return EXIT_PARSE
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    try:
        options = load_config(args.config).merged(
            quiet=args.quiet,
            nreg=args.nreg,
            dimm=args.dimm,
            strict=args.strict,
            raw=args.raw,
            byteorder=args.byteorder,
            verbose=args.verbose,
        )
        return run(args, options)

    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"mipsu: {e}", file=sys.stderr)
        return EXIT_USAGE
    except ConfigError as e:
        print(f"mipsu: {e}", file=sys.stderr)
        return EXIT_USAGE
    except MipsuError as e:
        print(f"mipsu: {e}", file=sys.stderr)
        return EXIT_PARSE
    except Exception as e:
        print(f"mipsu: internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return EXIT_INTERNAL


if __name__ == "__main__":
    sys.exit(main())
