#!/usr/bin/env python3
"""
Command-line host for the bytevm interpreter.

Runs the bundled sample programs, prints their results, and shows listings
with the static stack analysis.
"""

import argparse
import logging
import sys
from typing import List, Optional

import structlog

from bytevm.analysis.stack_analyzer import analyze_program
from bytevm.config import LOG_LEVELS, configure_logging, env_log_level, env_overflow
from bytevm.core.errors import ExecutionError
from bytevm.core.interpreter import Interpreter
from bytevm.disassembler import format_program
from bytevm.programs import PROGRAMS, UnknownProgram, get_program
from bytevm.utils.arith import OverflowPolicy

logger = structlog.get_logger(__name__)


def overflow_policy(value: str) -> OverflowPolicy:
    """argparse type for --overflow; also applied to the environment default."""
    try:
        return OverflowPolicy(value.lower())
    except ValueError:
        choices = ", ".join(policy.value for policy in OverflowPolicy)
        raise argparse.ArgumentTypeError(f"invalid overflow policy {value!r} (choose from {choices})") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bytevm", description="Run programs on the bytevm stack interpreter")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=env_log_level(),
        choices=LOG_LEVELS,
        help="Logging level (default: $BYTEVM_LOG_LEVEL or WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List the sample programs")

    run_parser = subparsers.add_parser("run", help="Execute a sample program")
    run_parser.add_argument("program", help="Name of the sample program")
    run_parser.add_argument(
        "--overflow",
        type=overflow_policy,
        default=env_overflow(),
        metavar="{" + ",".join(policy.value for policy in OverflowPolicy) + "}",
        help="Overflow policy for Add/Multiply (default: $BYTEVM_OVERFLOW or wrap)",
    )
    run_parser.add_argument("--trace", action="store_true", help="Log every executed instruction (implies DEBUG)")

    show_parser = subparsers.add_parser("show", help="Print a program listing and its stack analysis")
    show_parser.add_argument("program", help="Name of the sample program")

    return parser


def cmd_list(args: argparse.Namespace) -> int:
    for name in sorted(PROGRAMS):
        doc = (PROGRAMS[name].__doc__ or "").strip().splitlines()
        print(f"{name}: {doc[0]}" if doc else name)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    program = get_program(args.program)
    interpreter = Interpreter(overflow=args.overflow, trace=args.trace)
    logger.info("Running program", program=args.program, overflow=args.overflow.value)
    try:
        result = interpreter.execute(program)
    except ExecutionError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"result: {'none' if result is None else result}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    program = get_program(args.program)
    report = analyze_program(program)
    print(format_program(program, report.blocks))
    print()
    print(report.summary())
    return 0


COMMANDS = {
    "list": cmd_list,
    "run": cmd_run,
    "show": cmd_show,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if getattr(args, "trace", False) else args.log_level
    configure_logging(log_level, json_logs=args.json_logs)
    # Logging may already be configured by an earlier call
    logging.getLogger().setLevel(getattr(logging, log_level))

    try:
        return COMMANDS[args.command](args)
    except UnknownProgram as e:
        print(f"error: {e.args[0]}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
