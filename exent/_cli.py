"""EXENT command-line interface.

Usage:
    python3 -m exent format [--indent N] < doc.exent
    python3 -m exent pack [--base64] < doc.exent > doc.bexent
    python3 -m exent unpack [--base64] < doc.bexent
    python3 -m exent from-json [--binary] --input doc.json
    python3 -m exent version
"""

from __future__ import annotations

import argparse
import base64
import binascii
import logging
import sys
from typing import List, Optional

from . import (
    DEFAULT_INDENT,
    DEFAULT_MAX_DEPTH,
    ExentError,
    __version__,
    from_json,
    pack,
    parse,
    stringify,
    unpack,
)

logger = logging.getLogger("exent")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exent",
        description="EXENT / B-EXENT structured data converter",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command")

    def common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--input", "-i", metavar="FILE",
                       help="Read from FILE instead of stdin")
        p.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, metavar="N",
                       help="Maximum container nesting (default %(default)s)")

    # ── format ──
    fmt_p = sub.add_parser("format", help="Re-emit EXENT text canonically")
    common(fmt_p)
    fmt_p.add_argument("--indent", type=int, default=DEFAULT_INDENT, metavar="N",
                       help="Spaces per level, 0 for one line (default %(default)s)")

    # ── pack ──
    pack_p = sub.add_parser("pack", help="Convert EXENT text to B-EXENT")
    common(pack_p)
    pack_p.add_argument("--base64", action="store_true",
                        help="Write base64 instead of raw bytes")

    # ── unpack ──
    unpack_p = sub.add_parser("unpack", help="Convert B-EXENT to EXENT text")
    common(unpack_p)
    unpack_p.add_argument("--base64", action="store_true",
                          help="Input is base64 rather than raw bytes")
    unpack_p.add_argument("--indent", type=int, default=DEFAULT_INDENT, metavar="N",
                          help="Spaces per level, 0 for one line (default %(default)s)")

    # ── from-json ──
    json_p = sub.add_parser("from-json", help="Convert JSON to EXENT or B-EXENT")
    common(json_p)
    json_p.add_argument("--binary", action="store_true",
                        help="Emit B-EXENT instead of EXENT text")
    json_p.add_argument("--base64", action="store_true",
                        help="With --binary, write base64 instead of raw bytes")
    json_p.add_argument("--indent", type=int, default=DEFAULT_INDENT, metavar="N",
                        help="Spaces per level, 0 for one line (default %(default)s)")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read raw bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("exent: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _write_binary(data: bytes, as_base64: bool) -> None:
    if as_base64:
        print(base64.b64encode(data).decode("ascii"))
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()


def _cmd_format(args: argparse.Namespace) -> None:
    value = parse(_read_input(args.input).decode("utf-8"), max_depth=args.max_depth)
    print(stringify(value, indent=args.indent))


def _cmd_pack(args: argparse.Namespace) -> None:
    value = parse(_read_input(args.input).decode("utf-8"), max_depth=args.max_depth)
    _write_binary(pack(value), args.base64)


def _cmd_unpack(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    if args.base64:
        raw = base64.b64decode(raw, validate=False)
    logger.debug("unpacking %d input byte(s)", len(raw))
    print(stringify(unpack(raw, max_depth=args.max_depth), indent=args.indent))


def _cmd_from_json(args: argparse.Namespace) -> None:
    value = from_json(_read_input(args.input), max_depth=args.max_depth)
    if args.binary:
        _write_binary(pack(value), args.base64)
    else:
        print(stringify(value, indent=args.indent))


_COMMANDS = {
    "format": _cmd_format,
    "pack": _cmd_pack,
    "unpack": _cmd_unpack,
    "from-json": _cmd_from_json,
}


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"exent {__version__}")
        return

    try:
        _COMMANDS[args.command](args)
    except ExentError as e:
        print(f"exent: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except UnicodeDecodeError as e:
        print(f"exent: input is not UTF-8: {e}", file=sys.stderr)
        sys.exit(2)
    except binascii.Error as e:
        print(f"exent: bad base64 input: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
