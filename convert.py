#!/usr/bin/env python3
"""
Resolve a Scratch .sb3 project into its AST and print it.

Usage:
    python convert.py project.sb3 [--workers N] [--quiet] [--no-diagnostics]
"""

import argparse
import sys
from typing import List, Optional

from scratchast.assembler import parse_sb3
from scratchast.blocks_to_text import generate_project_text
from scratchast.constants import DEFAULT_WORKERS
from scratchast.diagnostics import DiagnosticCollector
from scratchast.errors import Sb3Error


def error(msg: str) -> None:
    """Print an error message and exit."""
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(1)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve a Scratch .sb3 project into an AST and print it.")
    parser.add_argument("input", help="Path to the .sb3 project file")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Threads used to resolve sprites")
    parser.add_argument("--quiet", action="store_true", help="Do not print the resolved AST")
    parser.add_argument("--no-diagnostics", action="store_true", help="Do not print warnings and notes")
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    diag_collector = DiagnosticCollector()

    try:
        project = parse_sb3(args.input, workers=args.workers, diagnostics=diag_collector)
    except Sb3Error as exc:
        error(str(exc))

    if not args.quiet:
        print(generate_project_text(project), end="")

    if diag_collector.all_diagnostics and not args.no_diagnostics:
        print()  # Blank line before diagnostics
        diag_collector.print_all()
        print()
        print(f"Parsed {args.input} with {diag_collector.summary()}")
    else:
        print(f"Successfully parsed {args.input}: {len(project.sprites)} sprite(s)")


if __name__ == "__main__":
    main()
