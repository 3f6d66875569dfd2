from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from .errors import InvalidOpcode, InvalidParameterMode

# =============================================================================
# Constants
# =============================================================================

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Opcode families (low two decimal digits of an instruction cell)
OP_ADD           = 1
OP_MUL           = 2
OP_STORE         = 3
OP_PRINT         = 4
OP_JUMP_IF_TRUE  = 5
OP_JUMP_IF_FALSE = 6
OP_LESS_THAN     = 7
OP_HALT          = 99

# Decimal place of the first parameter mode digit
FIRST_MODE_PLACE = 100


class ParameterMode(Enum):
    POSITION = 0
    IMMEDIATE = 1


# =============================================================================
# Opcode ADT
# =============================================================================

@dataclass(frozen=True)
class Addition:
    """Write read0 + read1 to the third parameter."""
    param1: ParameterMode = ParameterMode.POSITION
    param2: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param1, self.param2)


@dataclass(frozen=True)
class Multiplication:
    """Write read0 * read1 to the third parameter."""
    param1: ParameterMode = ParameterMode.POSITION
    param2: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param1, self.param2)


@dataclass(frozen=True)
class Store:
    """Write one value from the input source to the parameter."""

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return ()


@dataclass(frozen=True)
class Print:
    """Send read0 to the output sink."""
    param: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param,)


@dataclass(frozen=True)
class JumpIfTrue:
    """Jump to read1 when read0 is non-zero."""
    param1: ParameterMode = ParameterMode.POSITION
    param2: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param1, self.param2)


@dataclass(frozen=True)
class JumpIfFalse:
    """Jump to read1 when read0 is zero."""
    param1: ParameterMode = ParameterMode.POSITION
    param2: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param1, self.param2)


@dataclass(frozen=True)
class LessThan:
    """Write 1 to the third parameter if read0 < read1, else 0."""
    param1: ParameterMode = ParameterMode.POSITION
    param2: ParameterMode = ParameterMode.POSITION

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return (self.param1, self.param2)


@dataclass(frozen=True)
class Halt:
    """Stop the program."""

    @property
    def read_modes(self) -> Tuple[ParameterMode, ...]:
        return ()


Opcode = Union[Addition, Multiplication, Store, Print,
               JumpIfTrue, JumpIfFalse, LessThan, Halt]


# =============================================================================
# Decoding (cell -> Opcode)
# =============================================================================

def parse_parameter_mode(value: int, offset: int) -> ParameterMode:
    """
    Decode the mode of the read parameter at the given 0-based offset.

    The mode is the decimal digit at place 10^(offset + 2) of the cell.

    Raises:
        InvalidParameterMode: If the digit is neither 0 nor 1
    """
    digit = (value // (FIRST_MODE_PLACE * 10 ** offset)) % 10
    match digit:
        case 0:
            return ParameterMode.POSITION
        case 1:
            return ParameterMode.IMMEDIATE
        case _:
            raise InvalidParameterMode(offset, digit)


def parse(value: int) -> Opcode:
    """
    Decode a raw memory cell into an opcode.

    Args:
        value: The cell at the instruction pointer

    Returns:
        The decoded opcode, carrying one mode per read parameter

    Raises:
        InvalidOpcode: If the low two digits name no opcode, or value is negative
        InvalidParameterMode: If a read parameter's mode digit is not 0 or 1
    """
    if value < 0:
        raise InvalidOpcode(value)

    family = value % 100
    match family:
        case _ if family == OP_ADD:
            return Addition(parse_parameter_mode(value, 0),
                            parse_parameter_mode(value, 1))

        case _ if family == OP_MUL:
            return Multiplication(parse_parameter_mode(value, 0),
                                  parse_parameter_mode(value, 1))

        case _ if family == OP_STORE:
            return Store()

        case _ if family == OP_PRINT:
            return Print(parse_parameter_mode(value, 0))

        case _ if family == OP_JUMP_IF_TRUE:
            return JumpIfTrue(parse_parameter_mode(value, 0),
                              parse_parameter_mode(value, 1))

        case _ if family == OP_JUMP_IF_FALSE:
            return JumpIfFalse(parse_parameter_mode(value, 0),
                               parse_parameter_mode(value, 1))

        case _ if family == OP_LESS_THAN:
            return LessThan(parse_parameter_mode(value, 0),
                            parse_parameter_mode(value, 1))

        case _ if family == OP_HALT:
            return Halt()

        case _:
            raise InvalidOpcode(value)


# =============================================================================
# Encoding (Opcode -> cell)
# =============================================================================

def opcode_family(opcode: Opcode) -> int:
    match opcode:
        case Addition():
            return OP_ADD
        case Multiplication():
            return OP_MUL
        case Store():
            return OP_STORE
        case Print():
            return OP_PRINT
        case JumpIfTrue():
            return OP_JUMP_IF_TRUE
        case JumpIfFalse():
            return OP_JUMP_IF_FALSE
        case LessThan():
            return OP_LESS_THAN
        case Halt():
            return OP_HALT
        case _:
            raise ValueError(f"Unknown opcode: {opcode}")


def encode(opcode: Opcode) -> int:
    """Encode an opcode as the canonical cell value, so parse(encode(op)) == op."""
    value = opcode_family(opcode)
    for offset, mode in enumerate(opcode.read_modes):
        value += mode.value * FIRST_MODE_PLACE * 10 ** offset
    return value


def instruction_size(opcode: Opcode) -> int:
    """Number of cells (opcode plus parameters) the instruction occupies."""
    match opcode:
        case Addition() | Multiplication() | LessThan():
            return 4
        case JumpIfTrue() | JumpIfFalse():
            return 3
        case Store() | Print():
            return 2
        case Halt():
            return 1
        case _:
            raise ValueError(f"Unknown opcode: {opcode}")
