"""
weighbox CLI - search for and check weighing strategies.

Commands:
    weighbox solve N K              - Search, verify and save the first tree
    weighbox verify PATH N          - Replay every case against a saved tree

Directions default to both LIGHTER and HEAVIER; pass `--direction` once
or twice to restrict them.

Exit codes:
    0  success
    1  no tree exists / verification failed
    2  invalid input
    3  search budget exceeded
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ..cases import UNKNOWN_DIRECTIONS
from ..domain import (
    Difference,
    InvalidInputError,
    SearchBudgetExceeded,
    TreeFormatError,
)
from ..export import output_filename, read_tree, write_tree
from .pipeline import SolveResult, run_solve, run_verify


EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2
EXIT_BUDGET = 3


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_directions(directions) -> str:
    return ", ".join(d.name.lower() for d in directions)


def format_summary(result: SolveResult) -> str:
    """Format search statistics for a finished solve."""
    lines = [
        f"Products:            {result.n}",
        f"Directions:          {format_directions(result.directions)}",
        f"Cases:               {result.case_count}",
        f"Weighings allowed:   {result.k} (information bound: {result.least_k})",
        f"Strategies examined: {result.strategies_examined}",
        f"Search time:         {result.elapsed:.2f}s",
    ]
    if result.found:
        lines.append(f"Tree depth:          {result.depth}")
        lines.append(f"Weighing nodes:      {result.weighings}")
        lines.append(f"Conclusions:         {result.conclusions}")
        lines.append(f"First weighing:      {result.tree.strategy.describe()}")
    return "\n".join(lines)


def parse_directions(values: Optional[list[str]]) -> tuple[Difference, ...]:
    if not values:
        return UNKNOWN_DIRECTIONS
    return tuple(Difference[value.upper()] for value in values)


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_solve(args: argparse.Namespace) -> int:
    """Search for a tree, check it, and write it to disk."""
    directions = parse_directions(args.direction)

    try:
        result = run_solve(
            args.n,
            args.k,
            directions,
            max_strategies=args.max_strategies,
            timeout=args.timeout,
        )
    except InvalidInputError as e:
        print(f"ERROR: Invalid input")
        print(f"Reason: {e}")
        return EXIT_INVALID
    except SearchBudgetExceeded as e:
        print(f"ERROR: Search budget exceeded")
        print(f"Reason: {e}")
        return EXIT_BUDGET

    print("weighbox - Weighing Strategy Search")
    print("=" * 50)
    print(format_summary(result))
    print()

    if not result.found:
        print(f"No strategy resolves {result.case_count} cases in {result.k} weighings.")
        return EXIT_NOT_FOUND

    if result.failures:
        print(f"ERROR: Tree failed to identify {len(result.failures)} cases")
        return EXIT_NOT_FOUND

    path = Path(args.output) if args.output else Path(output_filename(args.n, args.k, result.directions))
    write_tree(result.tree, path)
    print(f"Verified against all {result.case_count} cases.")
    print(f"Tree written to: {path}")
    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    """Replay every case against a saved tree."""
    directions = parse_directions(args.direction)

    try:
        tree = read_tree(Path(args.path))
        checked, failures = run_verify(tree, args.n, directions)
    except (OSError, TreeFormatError) as e:
        print(f"ERROR: Could not load tree")
        print(f"Reason: {e}")
        return EXIT_INVALID
    except InvalidInputError as e:
        print(f"ERROR: Invalid input")
        print(f"Reason: {e}")
        return EXIT_INVALID

    if failures:
        print(f"FAILED: {len(failures)} of {checked} cases not identified")
        for case in failures[:5]:
            print(f"  • {case}")
        if len(failures) > 5:
            print(f"  ... and {len(failures) - 5} more")
        return EXIT_NOT_FOUND

    print(f"OK: all {checked} cases identified")
    return EXIT_OK


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def _add_direction_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--direction",
        action="append",
        choices=["lighter", "heavier"],
        help="Allowed defect direction (repeatable; default: both)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="weighbox",
        description="weighbox - Weighing Strategy Search for the defective-item puzzle",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Solve command
    solve_parser = subparsers.add_parser(
        "solve",
        help="Search for a decision tree",
    )
    solve_parser.add_argument("n", type=int, help="Number of products")
    solve_parser.add_argument("k", type=int, help="Maximum number of weighings")
    _add_direction_option(solve_parser)
    solve_parser.add_argument(
        "-o", "--output",
        help="Where to write the tree (default: N-K-DIRECTIONS.output.json)",
    )
    solve_parser.add_argument(
        "--max-strategies",
        type=int,
        help="Give up after examining this many candidate weighings (at least 1)",
    )
    solve_parser.add_argument(
        "--timeout",
        type=float,
        help="Give up after this many seconds (positive)",
    )
    solve_parser.set_defaults(func=cmd_solve)

    # Verify command
    verify_parser = subparsers.add_parser(
        "verify",
        help="Check a saved tree against every case",
    )
    verify_parser.add_argument("path", help="Tree JSON file written by 'solve'")
    verify_parser.add_argument("n", type=int, help="Number of products")
    _add_direction_option(verify_parser)
    verify_parser.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
