"""Intcode: a small virtual machine for integer-tape programs."""

from .opcode import (
    # Constants
    INT64_MIN, INT64_MAX,
    OP_ADD, OP_MUL, OP_STORE, OP_PRINT,
    OP_JUMP_IF_TRUE, OP_JUMP_IF_FALSE, OP_LESS_THAN, OP_HALT,
    # Opcodes
    ParameterMode, Opcode,
    Addition, Multiplication, Store, Print,
    JumpIfTrue, JumpIfFalse, LessThan, Halt,
    # Decoding
    parse, encode, instruction_size,
)

from .errors import (
    IntcodeError,
    InvalidOpcode, InvalidParameterMode, NotEnoughParameters,
    AddressOutOfRange, ReadModeMismatch,
    InputError, OutputError, MissingHalt,
    ProgramFormatError,
)

from .system import System
from .parameters import ParameterType, resolve
from .program import Program, RunState, run_program
from .io import LineInput, DecimalOutput, QueueInput, CollectOutput
from .loader import parse_program, load_program, format_program

__version__ = "0.1.0"
