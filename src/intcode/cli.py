"""Command line runner: load a program file and execute it."""

import argparse
import logging
import sys
from typing import List, Optional

from .errors import IntcodeError, ProgramFormatError
from .io import DecimalOutput, LineInput, QueueInput
from .loader import format_program, load_program
from .program import Program

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VM_ERROR = 1
EXIT_LOAD_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="intcode", description="Run an intcode program")
    parser.add_argument(
        "program",
        help="Path to a file of comma-separated integers"
    )
    parser.add_argument(
        "-i", "--input",
        type=int,
        action="append",
        default=None,
        metavar="VALUE",
        help="Value to feed to a Store instruction; repeat for several (default: read stdin lines)"
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the final memory after the program halts"
    )
    parser.add_argument(
        "--require-halt",
        action="store_true",
        help="Fail if the program runs off the end of memory without a Halt"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        memory = load_program(args.program)
    except (OSError, ProgramFormatError) as e:
        logger.error(f"Cannot load {args.program}: {e}")
        return EXIT_LOAD_ERROR

    logger.info(f"Loaded {len(memory)} cells from {args.program}")
    program = Program(memory, require_halt=args.require_halt)
    input_func = QueueInput(args.input) if args.input is not None else LineInput(sys.stdin)

    try:
        program.run_with_io(input_func, DecimalOutput(sys.stdout, separator="\n"))
    except IntcodeError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_VM_ERROR
    finally:
        if args.dump:
            print(format_program(program.memory))

    return EXIT_OK
