"""Command-line entry point: epochs, object parsing and sat range listing."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Iterable, Sequence

from ordkit.object import parse_object
from ordkit.outpoint import OutPoint
from ordkit.sat import Rarity, Sat, epoch_starting_sats


def _print_json(output: object) -> None:
    sys.stdout.write(json.dumps(output, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")


def list_ranges(
    outpoint: OutPoint, ranges: Iterable[tuple[int, int]]
) -> list[tuple[OutPoint, int, int, Rarity, str]]:
    """Describe each ``(start, end)`` sat range of an output.

    Each entry is ``(outpoint, start, size, rarity, name)`` where rarity and
    name belong to the first sat of the range.
    """
    result = []
    for start, end in ranges:
        sat = Sat(start)
        result.append((outpoint, start, end - start, sat.rarity(), sat.name()))
    return result


def epochs_output() -> dict[str, list[int]]:
    """The first sat of each reward epoch, as printed by ``epochs``."""
    return {"starting_sats": [sat.n for sat in epoch_starting_sats()]}


def parse_output(text: str) -> dict[str, str]:
    """Parse an object from ordinal notation into its printable form."""
    return {"object": str(parse_object(text))}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ordkit", description="Satoshi ordinal tools")
    subcommands = parser.add_subparsers(dest="command", metavar="COMMAND")
    subcommands.required = True
    subcommands.add_parser("epochs", help="List the first satoshis of each reward epoch")
    parse = subcommands.add_parser("parse", help="Parse a satoshi from ordinal notation")
    parse.add_argument("object", help="Parse <OBJECT>.")
    return parser


def _run(args: argparse.Namespace) -> None:
    if args.command == "epochs":
        _print_json(epochs_output())
    elif args.command == "parse":
        _print_json(parse_output(args.object))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit code."""
    args = _build_parser().parse_args(argv)
    try:
        _run(args)
    except (ValueError, OSError) as err:
        print(f"error: {err}", file=sys.stderr)
        cause = err.__cause__
        while cause is not None:
            print(f"because: {cause}", file=sys.stderr)
            cause = cause.__cause__
        return 1
    return 0