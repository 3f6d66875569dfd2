"""
Instruction executors.

Each executor resolves its operands, applies its effect through the System
interface and returns the next instruction pointer. Operands are resolved
before any input is consumed or output emitted.
"""

from typing import Sequence

from .opcode import (
    Opcode, ParameterMode,
    Addition, Multiplication, Store, Print,
    JumpIfTrue, JumpIfFalse, LessThan, Halt,
    INT64_MAX,
)
from .parameters import ParameterType, resolve
from .system import System

READ = ParameterType.READ
WRITE = ParameterType.WRITE

UINT64_MASK = (1 << 64) - 1


def wrap_int64(value: int) -> int:
    """Wrap an integer to two's-complement signed 64-bit."""
    value &= UINT64_MASK
    return value - (1 << 64) if value > INT64_MAX else value


def add(system: System, read_modes: Sequence[ParameterMode]) -> int:
    (a, b), (out,) = resolve(system, (READ, READ, WRITE), read_modes)
    system.write_memory(out, wrap_int64(a + b))
    return system.read_instruction_pointer() + 4


def multiply(system: System, read_modes: Sequence[ParameterMode]) -> int:
    (a, b), (out,) = resolve(system, (READ, READ, WRITE), read_modes)
    system.write_memory(out, wrap_int64(a * b))
    return system.read_instruction_pointer() + 4


def store(system: System) -> int:
    _, (out,) = resolve(system, (WRITE,), ())
    system.write_memory(out, system.read_input())
    return system.read_instruction_pointer() + 2


def print_value(system: System, read_mode: ParameterMode) -> int:
    (value,), _ = resolve(system, (READ,), (read_mode,))
    system.write_output(value)
    return system.read_instruction_pointer() + 2


def jump_if(cmp: bool, system: System, read_modes: Sequence[ParameterMode]) -> int:
    """Jump to read1 when (read0 != 0) == cmp; the target is not validated here."""
    (condition, target), _ = resolve(system, (READ, READ), read_modes)
    if (condition != 0) == cmp:
        return target
    return system.read_instruction_pointer() + 3


def less_than(system: System, read_modes: Sequence[ParameterMode]) -> int:
    (a, b), (out,) = resolve(system, (READ, READ, WRITE), read_modes)
    system.write_memory(out, 1 if a < b else 0)
    return system.read_instruction_pointer() + 4


def execute(system: System, opcode: Opcode) -> int:
    """
    Execute a decoded opcode against the system.

    Returns:
        The next instruction pointer (unchecked for jumps)

    Raises:
        IntcodeError: Any resolver or I/O failure, without an address
        ValueError: For Halt, which the run loop handles itself
    """
    match opcode:
        case Addition():
            return add(system, opcode.read_modes)
        case Multiplication():
            return multiply(system, opcode.read_modes)
        case Store():
            return store(system)
        case Print(param=mode):
            return print_value(system, mode)
        case JumpIfTrue():
            return jump_if(True, system, opcode.read_modes)
        case JumpIfFalse():
            return jump_if(False, system, opcode.read_modes)
        case LessThan():
            return less_than(system, opcode.read_modes)
        case Halt():
            raise ValueError("Halt has no executor")
        case _:
            raise ValueError(f"Unknown opcode: {opcode}")

