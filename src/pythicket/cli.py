#!/usr/bin/env python3
"""
Thicket CLI

Runs a program given as JSON module documents (the parser's AST output).

Usage:
    python -m pythicket.cli <file> [<file> ...] [options]
    thicket <file> [<file> ...] [options]

Examples:
    thicket program.json
    thicket main.json lib.json --inputs "3,4"
    thicket main.json lib.json --check-only
    thicket program.json --trace
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from pythicket.types import Module, Value, is_callable, is_number, is_string
from pythicket.errors import ModuleFormatError, RuntimeFailure
from pythicket.cycles import find_cycle, find_missing_imports
from pythicket.evaluator import evaluate_program
from pythicket.loader import load_module_file
from pythicket.natives import (
    create_default_natives,
    create_queued_natives,
    display_value,
)


#==============================================================================
# CLI Output Formatting
#==============================================================================

class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\x1b[0m"
    BOLD = "\x1b[1m"
    DIM = "\x1b[2m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    CYAN = "\x1b[36m"


def print_msg(msg: str, color: str = Colors.RESET) -> None:
    """Print a message with optional color"""
    print(f"{color}{msg}{Colors.RESET}")


def format_value(value: Value) -> str:
    """Format a result value for display"""
    if is_number(value):
        return f"{Colors.CYAN}{display_value(value)}{Colors.RESET}"
    if is_string(value):
        return f"{Colors.GREEN}{display_value(value)}{Colors.RESET}"
    if is_callable(value):
        return f"{Colors.YELLOW}{display_value(value)}{Colors.RESET}"
    return display_value(value)


#==============================================================================
# Input Parsing
#==============================================================================

def parse_input_string(input_str: str) -> List[str]:
    """
    Parse input lines from a comma-separated or JSON array string.

    Examples:
        "1,2,3" -> ["1", "2", "3"]
        '["hello", "world"]' -> ["hello", "world"]
    """
    try:
        parsed = json.loads(input_str)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return [str(v) for v in parsed]
    return [s.strip() for s in input_str.split(",")]


def configure_logging(trace: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if trace else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


#==============================================================================
# Main CLI
#==============================================================================

def load_program(paths: List[str]) -> Optional[List[Module]]:
    """Load every module file, reporting the first failure"""
    modules: List[Module] = []
    for path in paths:
        try:
            modules.extend(load_module_file(path))
        except OSError as e:
            print_msg(f"Error: Could not read {path}: {e.strerror or e}", Colors.RED)
            return None
        except ModuleFormatError as e:
            print_msg(f"Error: {path}: {e}", Colors.RED)
            return None
    return modules


def check_program(modules: List[Module]) -> int:
    """Run the static module checks only"""
    missing = find_missing_imports(modules)
    if missing:
        for importer, missing_module in missing:
            print_msg(f"No such module: {missing_module} (imported by {importer})", Colors.RED)
        return 1
    cycle = find_cycle(modules)
    if cycle is not None:
        print_msg("Circular dependency", Colors.RED)
        print_msg(f"  {' -> '.join(cycle + cycle[:1])}", Colors.RED)
        return 1
    print_msg("✓ Module checks passed", Colors.GREEN)
    return 0


def run_program(
    paths: List[str],
    inputs: Optional[str] = None,
    check_only: bool = False,
    verbose: bool = False,
) -> int:
    """
    Load and run a program.

    Args:
        paths: Module document files
        inputs: Lines for readString (comma-separated or JSON array)
        check_only: Only run the module checks, don't evaluate
        verbose: Show detailed output

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    modules = load_program(paths)
    if modules is None:
        return 1

    if verbose:
        names = ", ".join(m.name for m in modules)
        print_msg(f"Loaded {len(modules)} modules: {names}", Colors.DIM)

    if check_only:
        return check_program(modules)

    natives = (
        create_queued_natives(parse_input_string(inputs))
        if inputs is not None
        else create_default_natives()
    )

    result = evaluate_program(modules, natives)

    if isinstance(result, RuntimeFailure):
        print_msg(f"Evaluation error: {result.code.value}", Colors.RED)
        print_msg(f"  {result.message}", Colors.RED)
        return 1

    print(f"{Colors.GREEN}Result:{Colors.RESET} {format_value(result)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        prog="thicket",
        description="Thicket - run programs given as JSON module documents",
    )

    parser.add_argument(
        "paths",
        nargs="+",
        metavar="FILE",
        help="JSON module document (one module or a list of modules)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed output",
    )

    parser.add_argument(
        "--check-only",
        action="store_true",
        dest="check_only",
        help="Only check imports and import cycles, don't evaluate",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log evaluation steps to stderr",
    )

    parser.add_argument(
        "--inputs",
        type=str,
        help="Input lines for readString (comma-separated or JSON array)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.trace)

    return run_program(
        args.paths,
        inputs=args.inputs,
        check_only=args.check_only,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    sys.exit(main())
