"""
Enumeration-based test generation for the intcode VM.

This module provides exhaustive test generation by systematically enumerating
opcode cells and single-instruction programs within bounded spaces. Unlike
random fuzzing, enumeration guarantees coverage of every mode digit and
operand combination in the bounded model.
"""

import itertools
from typing import Iterator, List

from intcode.opcode import (
    OP_ADD, OP_MUL, OP_STORE, OP_PRINT,
    OP_JUMP_IF_TRUE, OP_JUMP_IF_FALSE, OP_LESS_THAN, OP_HALT,
    INT64_MIN, INT64_MAX, FIRST_MODE_PLACE,
    Opcode, ParameterMode,
    Addition, Multiplication, Store, Print,
    JumpIfTrue, JumpIfFalse, LessThan, Halt,
    encode, instruction_size,
)


# ============================================================
# Configuration
# ============================================================

# Interesting cell values for decoder boundary analysis
BOUNDARY_CELLS = [
    0,             # No family 0
    1,             # Addition, all position
    8,             # Equals does not exist
    98,            # Just below Halt
    99,            # Halt
    100,           # Family 0 with a mode digit
    101,           # Addition, immediate first
    199,           # Halt with a stray mode digit
    201,           # Mode digit 2 on the first parameter
    1001,          # Addition, immediate second
    1101,          # Addition, both immediate
    2001,          # Mode digit 2 on the second parameter
    9999,          # Halt with stray mode digits
    11104,         # Print with digits beyond its parameter
    -1,            # Negative values never decode
    -99,
    -101,
    INT64_MAX,
    INT64_MIN,
]

# Operand values for instruction enumeration
MINIMAL_OPERANDS = [0, 1, 4, -1]

# Opcode families and their number of read parameters
FAMILY_READ_COUNTS = {
    OP_ADD: 2,
    OP_MUL: 2,
    OP_STORE: 0,
    OP_PRINT: 1,
    OP_JUMP_IF_TRUE: 2,
    OP_JUMP_IF_FALSE: 2,
    OP_LESS_THAN: 2,
    OP_HALT: 0,
}

MODES = list(ParameterMode)


# ============================================================
# Opcode Enumeration
# ============================================================

def enumerate_opcode_cells() -> Iterator[int]:
    """
    Enumerate every family with every digit 0-9 in each read-mode place.

    Yields:
        Raw cell values, both decodable and invalid
    """
    for family, read_count in FAMILY_READ_COUNTS.items():
        for digits in itertools.product(range(10), repeat=read_count):
            cell = family
            for offset, digit in enumerate(digits):
                cell += digit * FIRST_MODE_PLACE * 10 ** offset
            yield cell


def enumerate_opcodes() -> Iterator[Opcode]:
    """Enumerate every valid opcode: each variant with each mode combination."""
    for p1, p2 in itertools.product(MODES, repeat=2):
        yield Addition(p1, p2)
        yield Multiplication(p1, p2)
        yield JumpIfTrue(p1, p2)
        yield JumpIfFalse(p1, p2)
        yield LessThan(p1, p2)
    for p in MODES:
        yield Print(p)
    yield Store()
    yield Halt()


# ============================================================
# Program Enumeration
# ============================================================

def enumerate_instruction_programs(operands: List[int] = MINIMAL_OPERANDS) -> Iterator[List[int]]:
    """
    Enumerate single-instruction programs followed by a Halt cell.

    Every valid opcode is combined with every assignment of operands to its
    parameter cells, exercising in-range, out-of-range and negative addresses.

    Args:
        operands: Values to place in parameter cells

    Yields:
        Program memory lists
    """
    for opcode in enumerate_opcodes():
        param_count = instruction_size(opcode) - 1
        for params in itertools.product(operands, repeat=param_count):
            yield [encode(opcode), *params, OP_HALT]


def enumerate_truncated_programs() -> Iterator[List[int]]:
    """
    Enumerate instructions cut short by the end of memory.

    Yields:
        Programs that should fail with NotEnoughParameters
    """
    for opcode in enumerate_opcodes():
        size = instruction_size(opcode)
        for length in range(1, size):
            yield [encode(opcode)] + [0] * (length - 1)


# ============================================================
# Comprehensive Test Suites
# ============================================================

def generate_comprehensive_suite(operands: List[int] = MINIMAL_OPERANDS) -> Iterator[List[int]]:
    """
    Generate the exhaustive test suite with deduplication.

    Combines boundary cells as one-cell programs, enumerated instruction
    programs and truncated programs, yielding each program once.

    Yields:
        Program memory lists (deduplicated)
    """
    seen = set()

    candidates = itertools.chain(
        ([cell] for cell in BOUNDARY_CELLS),
        ([cell] for cell in enumerate_opcode_cells()),
        enumerate_instruction_programs(operands),
        enumerate_truncated_programs(),
    )
    for memory in candidates:
        key = tuple(memory)
        if key not in seen:
            seen.add(key)
            yield memory
