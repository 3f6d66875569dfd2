"""
The intcode VM: a memory tape, an instruction pointer and the run loop.

A Program is built once from a snapshot of memory, run to completion and
discarded. Errors raised while executing an instruction are tagged with the
address of that instruction before they reach the caller.
"""

import logging
import sys
from enum import Enum
from typing import Callable, Iterable, List, Optional, TextIO

from .errors import AddressOutOfRange, InputError, IntcodeError, MissingHalt, OutputError
from .instructions import execute
from .io import DecimalOutput, LineInput
from .opcode import Halt, INT64_MAX, INT64_MIN, parse
from .system import System

logger = logging.getLogger(__name__)

InputFunc = Callable[[], int]
OutputFunc = Callable[[int], None]


class RunState(Enum):
    RUNNING = "running"
    HALTED = "halted"
    FAILED = "failed"


class Program(System):
    """
    A single intcode run.

    Args:
        memory: Initial memory; copied, never aliased
        input_func: Called once per Store instruction, returns the value to store
        output_func: Called once per Print instruction with the value to emit
        require_halt: Treat running off the end of memory as MissingHalt
            instead of a successful halt

    Raises:
        ValueError: If a memory cell is not a signed 64-bit integer
    """

    def __init__(
        self,
        memory: Iterable[int],
        input_func: Optional[InputFunc] = None,
        output_func: Optional[OutputFunc] = None,
        require_halt: bool = False,
    ):
        self.memory: List[int] = list(memory)
        for i, val in enumerate(self.memory):
            if isinstance(val, bool) or not isinstance(val, int):
                raise ValueError(f"Memory cell at {i} is not an integer: {val!r}")
            if not (INT64_MIN <= val <= INT64_MAX):
                raise ValueError(f"Memory cell at {i} out of int64 range: {val}")

        self.instruction_pointer = 0
        self.input_func = input_func
        self.output_func = output_func
        self.require_halt = require_halt
        self.error: Optional[IntcodeError] = None
        self.state = RunState.HALTED if not self.memory else RunState.RUNNING

    # -------------------------------------------------------------------------
    # System interface
    # -------------------------------------------------------------------------

    def memory_len(self) -> int:
        return len(self.memory)

    def read_memory(self, address: int) -> int:
        return self.memory[address]

    def write_memory(self, address: int, value: int) -> None:
        self.memory[address] = value

    def read_instruction_pointer(self) -> int:
        return self.instruction_pointer

    def write_instruction_pointer(self, value: int) -> None:
        self.instruction_pointer = value

    def read_input(self) -> int:
        if self.input_func is None:
            raise InputError("No input source bound")
        try:
            value = self.input_func()
        except IntcodeError:
            raise
        except Exception as e:
            raise InputError(f"Input source failed: {e!r}") from e
        if isinstance(value, bool) or not isinstance(value, int):
            raise InputError(f"Input source returned a non-integer: {value!r}")
        if not (INT64_MIN <= value <= INT64_MAX):
            raise InputError(f"Input value out of int64 range: {value}")
        return value

    def write_output(self, value: int) -> None:
        if self.output_func is None:
            raise OutputError("No output sink bound")
        try:
            self.output_func(value)
        except IntcodeError:
            raise
        except Exception as e:
            raise OutputError(f"Output sink failed: {e!r}") from e

    # -------------------------------------------------------------------------
    # Run loop
    # -------------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        return self.state is not RunState.RUNNING

    def step(self) -> RunState:
        """
        Execute the instruction at the instruction pointer.

        Returns:
            The state after the instruction

        Raises:
            IntcodeError: The instruction failed; the program is now FAILED
            RuntimeError: The program had already halted or failed
        """
        if self.finished:
            raise RuntimeError(f"Program is {self.state.value} and cannot be resumed")

        address = self.instruction_pointer
        try:
            opcode = parse(self.memory[address])
            if isinstance(opcode, Halt):
                logger.debug("%d: %s", address, opcode)
                self.state = RunState.HALTED
                return self.state

            next_address = execute(self, opcode)
            if not 0 <= next_address <= len(self.memory):
                raise AddressOutOfRange(next_address)
            logger.debug("%d: %s -> %d", address, opcode, next_address)

            if next_address == len(self.memory) and self.require_halt:
                raise MissingHalt()
        except IntcodeError as err:
            self.error = err.at(address)
            self.state = RunState.FAILED
            logger.info("Program failed: %s", err)
            raise

        self.write_instruction_pointer(next_address)
        if next_address == len(self.memory):
            self.state = RunState.HALTED
        return self.state

    def run_with_io(self, input_func: Optional[InputFunc], output_func: Optional[OutputFunc]) -> None:
        """
        Run to completion with the given input and output callables.

        An input callable returns an int or raises InputError; an output
        callable accepts an int or raises OutputError.

        Raises:
            IntcodeError: With .address set to the failing instruction
        """
        self.input_func = input_func
        self.output_func = output_func
        while not self.finished:
            self.step()

    def run(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None) -> None:
        """
        Run to completion reading one decimal integer per line from
        input_stream and writing each printed value to output_stream.

        Defaults to sys.stdin and sys.stdout.
        """
        self.run_with_io(
            LineInput(input_stream if input_stream is not None else sys.stdin),
            DecimalOutput(output_stream if output_stream is not None else sys.stdout),
        )


def run_program(memory: Iterable[int],
                input_func: Optional[InputFunc] = None,
                output_func: Optional[OutputFunc] = None,
                require_halt: bool = False) -> Program:
    """Convenience function: build a Program, run it and return it."""
    program = Program(memory, require_halt=require_halt)
    program.run_with_io(input_func, output_func)
    return program
