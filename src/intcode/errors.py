"""Exception taxonomy for the intcode VM.

Low-level code (decoder, resolver, executors) raises these without an
address; the run loop attaches the address of the executing instruction
before re-raising.
"""

from typing import Optional


class IntcodeError(Exception):
    """Base exception for all intcode VM errors."""

    def __init__(self, message: str, address: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.address = address

    def at(self, address: int) -> "IntcodeError":
        """Attach the address of the instruction that was executing."""
        self.address = address
        return self

    def __str__(self) -> str:
        if self.address is None:
            return self.message
        return f"{self.message} (at address {self.address})"


class InvalidOpcode(IntcodeError):
    """Raised when the low two digits of a cell name no known opcode."""

    def __init__(self, value: int):
        super().__init__(f"Encountered invalid opcode {value}")
        self.value = value


class InvalidParameterMode(IntcodeError):
    """Raised when a parameter mode digit is neither 0 nor 1."""

    def __init__(self, offset: int, digit: int):
        super().__init__(
            f"Encountered invalid mode {digit} for parameter at offset {offset}"
        )
        self.offset = offset
        self.digit = digit


class NotEnoughParameters(IntcodeError):
    """Raised when an instruction would read past the end of memory."""

    def __init__(self, last_address: int):
        super().__init__(
            "Not enough parameters in memory to interpret instruction "
            f"(last valid address {last_address})"
        )
        self.last_address = last_address


class AddressOutOfRange(IntcodeError):
    """Raised when a read, write or jump target lies outside memory."""

    def __init__(self, target: int):
        super().__init__(f"Address {target} is out of range")
        self.target = target


class ReadModeMismatch(IntcodeError):
    """Raised when an executor hands the resolver the wrong number of modes."""

    def __init__(self, expected: int, got: int):
        super().__init__(
            f"Instruction has {expected} read parameters, "
            f"but {got} parameter modes were given"
        )
        self.expected = expected
        self.got = got


class InputError(IntcodeError):
    """Raised when the input source cannot supply a value."""

    def __init__(self, message: str = "Failed to read input"):
        super().__init__(message)


class OutputError(IntcodeError):
    """Raised when the output sink cannot accept a value."""

    def __init__(self, message: str = "Failed to write output"):
        super().__init__(message)


class MissingHalt(IntcodeError):
    """Raised when a program runs off the end of memory and an explicit halt is required."""

    def __init__(self):
        super().__init__("Program ran off the end of memory without halting")


class ProgramFormatError(ValueError):
    """Raised when program text is not a comma-separated list of integers."""

    def __init__(self, index: int, cell: str):
        super().__init__(f"Invalid cell {cell!r} at index {index}")
        self.index = index
        self.cell = cell
